"""Bulletin-board announcements. Sheet-only family, written by row position."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..errors import NotFoundError
from ..guard.write_guard import assert_writable
from ..utils.logging import get_logger
from .dependencies import AnnouncementDependencies, resolve_actor_name

logger = get_logger(__name__)

Record = Dict[str, Any]

PUBLISHED_STATUS = "已發布"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _updated_at(item: Record) -> datetime:
    raw = item.get("lastUpdateTime")
    if not raw:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AnnouncementService:
    def __init__(self, deps: AnnouncementDependencies):
        self.reader = deps.reader
        self.writer = deps.writer

    async def get_announcements(self) -> List[Record]:
        """Published announcements: pinned first, then most recently updated."""
        try:
            data = await self.reader.get_announcements()
        except Exception:
            logger.error("get_announcements failed", exc_info=True)
            raise
        published = [item for item in data if item.get("status") == PUBLISHED_STATUS]
        published.sort(key=_updated_at, reverse=True)
        published.sort(key=lambda item: not item.get("isPinned"))
        return published

    async def _locate(self, announcement_id: str) -> Record:
        for item in await self.reader.get_announcements():
            if item.get("id") == announcement_id:
                return item
        raise NotFoundError("Announcement", announcement_id)

    async def create_announcement(self, data: Record, user: Any = None) -> Record:
        if not data.get("title"):
            raise ValueError("Announcement title is required")
        creator = resolve_actor_name(user)
        try:
            return await self.writer.create_announcement(data, creator)
        except Exception:
            logger.error("create_announcement failed", exc_info=True)
            raise

    async def update_announcement(self, announcement_id: str, data: Record, user: Any = None) -> Record:
        try:
            target = await self._locate(announcement_id)
            row_index = assert_writable(target, action="update", id_field="id")
            return await self.writer.update_announcement(row_index, data, resolve_actor_name(user))
        except Exception:
            logger.error(f"update_announcement failed ({announcement_id})", exc_info=True)
            raise

    async def delete_announcement(self, announcement_id: str, user: Optional[Any] = None) -> Record:
        try:
            target = await self._locate(announcement_id)
            row_index = assert_writable(target, action="delete", id_field="id")
            result = await self.writer.delete_announcement(row_index)
        except Exception:
            logger.error(f"delete_announcement failed ({announcement_id})", exc_info=True)
            raise
        logger.info(f"Deleted announcement {announcement_id} by {resolve_actor_name(user)}")
        return result
