"""Write eligibility for families still written through the sheet.

A record read from the SQL store has no row position, so the sheet writer
cannot address it and such writes are refused. Families that have moved
to the SQL writer (contacts) address records by id and never pass through here.
"""

from typing import Any, Mapping

from ..errors import WriteProtectionError
from ..normalization.normalizer import ROW_INDEX_KEY


def is_writable(record: Mapping[str, Any]) -> bool:
    return bool(record.get(ROW_INDEX_KEY))


def assert_writable(record: Mapping[str, Any], action: str = "update", id_field: str = "recordId") -> int:
    """
    Ensure ``record`` can be written through the sheet writer.

    Returns:
        The record's row index

    Raises:
        WriteProtectionError: If ``rowIndex`` is missing or falsy
    """
    if not is_writable(record):
        raise WriteProtectionError(record.get(id_field), action=action)
    return record[ROW_INDEX_KEY]
