"""Weekly business entries stored in a sheet with localized column names."""

from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..collaborators import LegacyReader, LegacyWriter
from ..normalization.normalizer import ENTRY_LEGACY_ALIASES
from ..utils.id_generator import new_entry_id
from ..utils.logging import get_logger
from ..utils.time import utc_now_z
from ..utils.weeks import week_id_for
from .csv_sheet import CsvSheet

logger = get_logger(__name__)

ENTRY_HEADERS = [
    "recordId",
    "weekId",
    "日期",
    "category",
    "主題",
    "參與人員",
    "重點摘要",
    "待辦事項",
    "createdTime",
    "lastUpdateTime",
    "建立者",
]

# Caller-writable canonical fields (system columns are managed here).
WRITABLE_FIELDS = ("date", "category", "topic", "participants", "summaryContent", "todoItems")


def _to_sheet_values(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonical or localized keys -> sheet columns. Localized keys win."""
    values: Dict[str, Any] = {}
    for field in WRITABLE_FIELDS:
        column = ENTRY_LEGACY_ALIASES[field]
        if column in data:
            values[column] = data[column]
        elif field in data:
            values[column] = data[field]
    return values


class SheetEntryStore(LegacyReader, LegacyWriter):
    """Legacy reader and writer over one CSV sheet, with a read cache."""

    def __init__(self, path: Path):
        self.sheet = CsvSheet(path, ENTRY_HEADERS)
        self._cache: Optional[List[Dict[str, Any]]] = None

    def invalidate_cache(self, key: Optional[str] = None) -> None:
        self._cache = None

    async def get_all(self) -> List[Dict[str, Any]]:
        if self._cache is None:
            self._cache = self.sheet.read_rows()
        return [dict(row) for row in self._cache]

    async def get_summary(self) -> List[Dict[str, Any]]:
        return [
            {"weekId": row["weekId"], "summaryContent": row["重點摘要"], "rowIndex": row["rowIndex"]}
            for row in await self.get_all()
        ]

    async def create(self, data: Mapping[str, Any], actor: str) -> Dict[str, Any]:
        values = _to_sheet_values(data)
        if not values.get("日期"):
            raise ValueError("Entry must have a date")
        now = utc_now_z()
        record_id = data.get("recordId") or new_entry_id()
        values.update(
            {
                "recordId": record_id,
                "weekId": data.get("weekId") or week_id_for(values["日期"]),
                "createdTime": now,
                "lastUpdateTime": now,
                "建立者": actor,
            }
        )
        row_index = self.sheet.append_row(values)
        self.invalidate_cache()
        logger.debug(f"Appended entry {record_id} at row {row_index}")
        return {"success": True, "id": record_id, "rowIndex": row_index}

    async def update_by_row(self, row_index: int, data: Mapping[str, Any], actor: str) -> Dict[str, Any]:
        values = _to_sheet_values(data)
        if values.get("日期"):
            values["weekId"] = week_id_for(values["日期"])
        values["lastUpdateTime"] = utc_now_z()
        updated = self.sheet.update_row(row_index, values)
        self.invalidate_cache()
        logger.debug(f"Updated entry row {row_index} by {actor}")
        return {"success": True, "id": updated["recordId"], "rowIndex": row_index}

    async def delete_by_row(self, row_index: int) -> Dict[str, Any]:
        self.sheet.delete_row(row_index)
        self.invalidate_cache()
        logger.debug(f"Deleted entry row {row_index}")
        return {"success": True, "rowIndex": row_index}
