"""Pytest configuration and fixtures."""

from datetime import datetime
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bizbridge.collaborators import (
    CalendarCollaborator,
    CompanyReader,
    ConfigCollaborator,
    LegacyReader,
    LegacyWriter,
    NewStoreReader,
    NewStoreWriter,
    PotentialContactReader,
    PotentialContactWriter,
)
from bizbridge.database.schema import Base
from bizbridge.utils.weeks import IsoWeekCalendar

TAIPEI = ZoneInfo("Asia/Taipei")


class FakeLegacyReader(LegacyReader):
    def __init__(self, rows=None, summary=None, error: Optional[Exception] = None):
        self.rows = rows or []
        self.summary = summary
        self.error = error
        self.calls = 0
        self.invalidated: List[Optional[str]] = []

    async def get_all(self):
        self.calls += 1
        if self.error:
            raise self.error
        return [dict(r) for r in self.rows]

    async def get_summary(self):
        if self.error:
            raise self.error
        if self.summary is not None:
            return [dict(r) for r in self.summary]
        return await self.get_all()

    def invalidate_cache(self, key=None):
        self.invalidated.append(key)


class FakeNewStoreReader(NewStoreReader):
    def __init__(self, rows=None, error: Optional[Exception] = None, lookup_error: Optional[Exception] = None):
        self.rows = rows or []
        self.error = error
        self.lookup_error = lookup_error
        self.calls = 0
        self.lookups: List[str] = []

    async def get_all(self):
        self.calls += 1
        if self.error:
            raise self.error
        return [dict(r) for r in self.rows]

    async def get_by_id(self, record_id):
        self.lookups.append(record_id)
        if self.lookup_error:
            raise self.lookup_error
        for row in self.rows:
            if record_id in (row.get("recordId"), row.get("contactId")):
                return dict(row)
        return None


class RecordingLegacyWriter(LegacyWriter):
    def __init__(self):
        self.calls: List[tuple] = []

    async def create(self, data, actor):
        self.calls.append(("create", data, actor))
        return {"success": True}

    async def update_by_row(self, row_index, data, actor):
        self.calls.append(("update", row_index, data, actor))
        return {"success": True}

    async def delete_by_row(self, row_index):
        self.calls.append(("delete", row_index))
        return {"success": True}


class RecordingNewStoreWriter(NewStoreWriter):
    def __init__(self):
        self.calls: List[tuple] = []

    async def create(self, data, actor):
        self.calls.append(("create", data, actor))
        return {"success": True, "id": "C-NEW"}

    async def update_by_id(self, record_id, data, actor):
        self.calls.append(("update", record_id, data, actor))
        return {"success": True}

    async def delete_by_id(self, record_id):
        self.calls.append(("delete", record_id))
        return {"success": True}


class FakeCalendar(CalendarCollaborator):
    def __init__(self, holidays=None, events: Optional[Dict[str, list]] = None, error: Optional[Exception] = None):
        self.holidays = holidays or {}
        self.events = events or {}
        self.error = error
        self.event_calls: List[tuple] = []

    async def get_holidays(self, start, end):
        return dict(self.holidays)

    async def get_events(self, start, end, calendar_id):
        self.event_calls.append((start, end, calendar_id))
        if self.error:
            raise self.error
        return list(self.events.get(calendar_id, []))


class FakeSystemConfig(ConfigCollaborator):
    def __init__(self, config: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.config = config if config is not None else {}
        self.error = error

    async def get_system_config(self):
        if self.error:
            raise self.error
        return self.config


class FakeCompanyReader(CompanyReader):
    def __init__(self, companies=None):
        self.companies = companies or []

    async def get_company_list(self):
        return [dict(c) for c in self.companies]


class FakePotentialReader(PotentialContactReader):
    def __init__(self, contacts=None, links=None, error: Optional[Exception] = None):
        self.contacts = contacts or []
        self.links = links or []
        self.error = error
        self.invalidated: List[Optional[str]] = []

    async def get_contacts(self):
        if self.error:
            raise self.error
        return [dict(c) for c in self.contacts]

    async def get_all_opp_contact_links(self):
        return [dict(link) for link in self.links]

    def invalidate_cache(self, key=None):
        self.invalidated.append(key)


class RecordingPotentialWriter(PotentialContactWriter):
    def __init__(self):
        self.calls: List[tuple] = []

    async def write_potential_contact_row(self, row_index, data):
        self.calls.append((row_index, data))
        return {"success": True}


def fixed_clock(year=2026, month=1, day=28, hour=9):
    moment = datetime(year, month, day, hour, 0, tzinfo=TAIPEI)
    return lambda: moment


def sheet_entry(row_index, record_id, date, week_id, summary="", topic="", **extra):
    row = {
        "rowIndex": row_index,
        "recordId": record_id,
        "weekId": week_id,
        "日期": date,
        "category": "拜訪",
        "主題": topic,
        "參與人員": "Amy",
        "重點摘要": summary,
        "待辦事項": "",
        "createdTime": "2026-01-01T00:00:00Z",
        "lastUpdateTime": "2026-01-02T00:00:00Z",
        "建立者": "Amy",
    }
    row.update(extra)
    return row


def sql_entry(record_id, date, week_id, summary="", topic=""):
    return {
        "recordId": record_id,
        "weekId": week_id,
        "entryDate": date,
        "category": "會議",
        "topic": topic,
        "participants": "Ben",
        "summaryContent": summary,
        "todoItems": None,
        "createdTime": "2026-01-01T00:00:00Z",
        "updatedTime": "2026-01-03T00:00:00Z",
        "createdBy": "Ben",
    }


@pytest.fixture
def week_info():
    return IsoWeekCalendar()


@pytest.fixture
def session_factory():
    """In-memory SQLite shared across sessions for the SQL store adapters."""
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    try:
        yield factory
    finally:
        engine.dispose()


@pytest.fixture
def session(session_factory):
    """Create a temporary in-memory database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
