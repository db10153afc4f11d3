"""SQL store reader and writer for weekly business entries."""

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from ..collaborators import NewStoreReader, NewStoreWriter
from ..errors import NotFoundError
from ..utils.id_generator import new_entry_id
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from ..utils.weeks import week_id_for
from .schema import WeeklyBusinessEntry
from .sqlite_client import run_in_session

logger = get_logger(__name__)


def entry_row_to_dto(row: WeeklyBusinessEntry) -> Dict[str, Any]:
    """ORM row -> camelCase DTO. DTOs never carry rowIndex."""
    return {
        "recordId": row.record_id,
        "weekId": row.week_id,
        "entryDate": row.entry_date,
        "category": row.category,
        "topic": row.topic,
        "participants": row.participants,
        "summaryContent": row.summary_content,
        "todoItems": row.todo_items,
        "createdTime": row.created_time,
        "updatedTime": row.updated_time,
        "createdBy": row.created_by,
    }


def query_entries(session: Session) -> List[WeeklyBusinessEntry]:
    return (
        session.query(WeeklyBusinessEntry)
        .order_by(WeeklyBusinessEntry.entry_date.desc(), WeeklyBusinessEntry.record_id)
        .all()
    )


def find_entry_by_id(session: Session, record_id: str) -> Optional[WeeklyBusinessEntry]:
    return session.query(WeeklyBusinessEntry).filter(WeeklyBusinessEntry.record_id == record_id).first()


class SqlEntryReader(NewStoreReader):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def get_all(self) -> List[Dict[str, Any]]:
        def _query(session: Session) -> List[Dict[str, Any]]:
            return [entry_row_to_dto(row) for row in query_entries(session)]

        return await run_in_session(self.session_factory, _query)

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        def _query(session: Session) -> Optional[Dict[str, Any]]:
            row = find_entry_by_id(session, record_id)
            return entry_row_to_dto(row) if row else None

        return await run_in_session(self.session_factory, _query)


# DTO key -> ORM attribute, for fields callers may write
ENTRY_WRITABLE_FIELDS = {
    "entryDate": "entry_date",
    "date": "entry_date",
    "category": "category",
    "topic": "topic",
    "participants": "participants",
    "summaryContent": "summary_content",
    "todoItems": "todo_items",
}


def _apply_fields(row: WeeklyBusinessEntry, data: Dict[str, Any]) -> None:
    for key, attr in ENTRY_WRITABLE_FIELDS.items():
        if key in data:
            setattr(row, attr, data[key])
    if row.entry_date:
        row.week_id = week_id_for(row.entry_date)


class SqlEntryWriter(NewStoreWriter):
    """
    Writes weekly entries by ``recordId``. ``weekId`` always follows the entry date.

    Weekly entries are still written through the sheet writer; this adapter is
    what ``WeeklyBusinessService`` switches to once the family moves to the SQL
    store, the way contacts already have.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def create(self, data: Dict[str, Any], actor: str) -> Dict[str, Any]:
        if not (data.get("entryDate") or data.get("date")):
            raise ValueError("Entry must have a date")
        now = utc_now_z()
        record_id = data.get("recordId") or new_entry_id()

        def _insert(session: Session) -> None:
            if find_entry_by_id(session, record_id):
                raise ValueError(f"Entry already exists: {record_id}")
            row = WeeklyBusinessEntry(
                record_id=record_id,
                created_time=now,
                updated_time=now,
                created_by=actor,
                updated_by=actor,
            )
            _apply_fields(row, data)
            session.add(row)

        await run_in_session(self.session_factory, _insert)
        logger.debug(f"Created entry: {record_id}")
        return {"success": True, "id": record_id}

    async def update_by_id(self, record_id: str, data: Dict[str, Any], actor: str) -> Dict[str, Any]:
        def _update(session: Session) -> None:
            row = find_entry_by_id(session, record_id)
            if row is None:
                raise NotFoundError("Weekly business entry", record_id)
            _apply_fields(row, data)
            row.updated_time = utc_now_z()
            row.updated_by = actor

        await run_in_session(self.session_factory, _update)
        logger.debug(f"Updated entry: {record_id}")
        return {"success": True, "id": record_id}

    async def delete_by_id(self, record_id: str) -> Dict[str, Any]:
        def _delete(session: Session) -> None:
            row = find_entry_by_id(session, record_id)
            if row is None:
                raise NotFoundError("Weekly business entry", record_id)
            session.delete(row)

        await run_in_session(self.session_factory, _delete)
        logger.debug(f"Deleted entry: {record_id}")
        return {"success": True, "id": record_id}
