import asyncio
from contextlib import contextmanager
from typing import Callable, Generator, TypeVar

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from .schema import Base

T = TypeVar("T")


def get_engine(sqlite_path: str):
    engine = create_engine(f"sqlite:///{sqlite_path}", future=True)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(sqlite_path: str) -> sessionmaker:
    """Session factory bound to a SQLite file (tables created on first use)."""
    return sessionmaker(bind=get_engine(sqlite_path), autoflush=False, autocommit=False)


@contextmanager
def session_context(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for SQLAlchemy sessions.

    Commits on success, rolls back on error, always closes.

    Usage:
        with session_context(factory) as session:
            session.add(row)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


async def run_in_session(session_factory: sessionmaker, work: Callable[[Session], T]) -> T:
    """
    Run ``work(session)`` inside ``session_context`` on a worker thread.

    The event loop keeps serving other coroutines while the query runs.
    Exceptions raised by ``work`` propagate to the awaiting caller.
    """
    def _run() -> T:
        with session_context(session_factory) as session:
            return work(session)

    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _run)
