"""Collaborator interfaces consumed by the services.

Concrete readers and writers live outside the core (see ``bizbridge.database``
and ``bizbridge.sheets`` for reference implementations). Services only rely on
the methods declared here.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

Record = Dict[str, Any]


class LegacyReader(ABC):
    """Sheet-backed reader. Every record carries ``rowIndex``."""

    @abstractmethod
    async def get_all(self) -> List[Record]:
        pass

    async def get_summary(self) -> List[Record]:
        """Rows with at least ``weekId`` and the summary content column."""
        return await self.get_all()

    def invalidate_cache(self, key: Optional[str] = None) -> None:
        """Drop cached rows. Readers without a cache ignore this."""
        return None


class NewStoreReader(ABC):
    """SQL-backed reader. DTOs use canonical camelCase names and never carry ``rowIndex``."""

    @abstractmethod
    async def get_all(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_by_id(self, record_id: str) -> Optional[Record]:
        pass


class LegacyWriter(ABC):
    @abstractmethod
    async def create(self, data: Record, actor: str) -> Record:
        pass

    @abstractmethod
    async def update_by_row(self, row_index: int, data: Record, actor: str) -> Record:
        pass

    @abstractmethod
    async def delete_by_row(self, row_index: int) -> Record:
        pass


class NewStoreWriter(ABC):
    @abstractmethod
    async def create(self, data: Record, actor: str) -> Record:
        pass

    @abstractmethod
    async def update_by_id(self, record_id: str, data: Record, actor: str) -> Record:
        pass

    @abstractmethod
    async def delete_by_id(self, record_id: str) -> Record:
        pass


class CalendarCollaborator(ABC):
    @abstractmethod
    async def get_holidays(self, start: datetime, end: datetime) -> Dict[str, str]:
        """Map of 'YYYY-MM-DD' -> holiday name for [start, end)."""
        pass

    @abstractmethod
    async def get_events(self, start: datetime, end: datetime, calendar_id: str) -> List[Record]:
        """Raw calendar events with ``summary``, ``start``, ``htmlLink``, ``location``, ``description``."""
        pass


class ConfigCollaborator(ABC):
    @abstractmethod
    async def get_system_config(self) -> Dict[str, Any]:
        pass


class WeekInfoCollaborator(ABC):
    @abstractmethod
    def get_week_id(self, value: Union[date, datetime, str]) -> str:
        pass

    @abstractmethod
    def get_week_info(self, week_id: str) -> Dict[str, Any]:
        """Dict with ``title``, ``dateRange`` and ``days`` (each day has ``date``)."""
        pass


class CompanyReader(ABC):
    @abstractmethod
    async def get_company_list(self) -> List[Record]:
        pass


class PotentialContactReader(ABC):
    """Business-card intake rows and opportunity links, always sheet-addressed."""

    @abstractmethod
    async def get_contacts(self) -> List[Record]:
        pass

    @abstractmethod
    async def get_all_opp_contact_links(self) -> List[Record]:
        pass

    def invalidate_cache(self, key: Optional[str] = None) -> None:
        return None


class PotentialContactWriter(ABC):
    @abstractmethod
    async def write_potential_contact_row(self, row_index: int, data: Record) -> Record:
        pass


class AnnouncementReader(ABC):
    @abstractmethod
    async def get_announcements(self) -> List[Record]:
        pass


class AnnouncementWriter(ABC):
    @abstractmethod
    async def create_announcement(self, data: Record, creator: str) -> Record:
        pass

    @abstractmethod
    async def update_announcement(self, row_index: int, data: Record, modifier: str) -> Record:
        pass

    @abstractmethod
    async def delete_announcement(self, row_index: int) -> Record:
        pass
