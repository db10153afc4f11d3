"""Read convergence: SQL store first, sheet store as fallback.

During the migration the SQL replica may lag behind the sheet, so an empty SQL
result is not trusted as the final answer. It gets the same fallback as a
failure. Callers never see which store answered except through the
``rowIndex`` provenance marker on each record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ..errors import SourceUnavailableError
from ..utils.logging import get_logger

logger = get_logger(__name__)

Record = Dict[str, Any]
Fetcher = Callable[[], Awaitable[Optional[List[Record]]]]
Lookup = Callable[[str], Awaitable[Optional[Record]]]
Normalizer = Callable[[Mapping[str, Any]], Record]


class ReadMode(str, Enum):
    ENTRIES = "ENTRIES"
    SUMMARY = "SUMMARY"


class ReadSource(str, Enum):
    PRIMARY = "PRIMARY"
    FALLBACK = "FALLBACK"
    FAILED = "FAILED"


@dataclass
class ReadOutcome:
    """Which store served a read, the records, and any error met on the way."""

    source: ReadSource
    records: List[Record] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.source is not ReadSource.FAILED


def should_fall_back(records: Optional[List[Record]], error: Optional[BaseException]) -> bool:
    """True iff the primary raised, or answered with nothing (sync lag)."""
    return error is not None or not records


class SourceConvergenceResolver:
    """
    Serve one logical read from the primary store, falling back to the legacy store.

    Args:
        name: Label used in log lines (e.g. "weekly", "contacts")
        legacy_readers: Legacy fetcher per read mode. Mandatory for every mode served.
        primary_readers: Optional primary fetcher per read mode
        primary_lookup: Optional single-record primary lookup for ``fetch_one``
        normalizers: Optional per-mode shape conversion applied to both sources
        id_field: Stable cross-source identifier used by ``fetch_one``
    """

    def __init__(
        self,
        name: str,
        legacy_readers: Mapping[ReadMode, Fetcher],
        primary_readers: Optional[Mapping[ReadMode, Fetcher]] = None,
        primary_lookup: Optional[Lookup] = None,
        normalizers: Optional[Mapping[ReadMode, Normalizer]] = None,
        id_field: str = "recordId",
    ):
        if not legacy_readers:
            raise ValueError("At least one legacy reader is required")
        self.name = name
        self.legacy_readers = dict(legacy_readers)
        self.primary_readers = dict(primary_readers or {})
        self.primary_lookup = primary_lookup
        self.normalizers = dict(normalizers or {})
        self.id_field = id_field

    @property
    def has_primary(self) -> bool:
        return bool(self.primary_readers)

    def _normalize(self, mode: ReadMode, records: List[Record]) -> List[Record]:
        normalizer = self.normalizers.get(mode)
        if normalizer is None:
            return list(records)
        return [normalizer(record) for record in records]

    async def _read_primary(self, mode: ReadMode) -> ReadOutcome:
        fetcher = self.primary_readers.get(mode)
        if fetcher is None:
            return ReadOutcome(ReadSource.FAILED)

        records: Optional[List[Record]] = None
        error: Optional[BaseException] = None
        try:
            records = await fetcher()
        except Exception as exc:
            error = SourceUnavailableError(self.name, exc)

        if should_fall_back(records, error):
            if error is not None:
                logger.warning(f"[{self.name}] SQL read failed, falling back to sheet: {error}")
            else:
                logger.warning(f"[{self.name}] SQL returned no {mode.value} rows, treating as sync lag")
            return ReadOutcome(ReadSource.FAILED, error=error)

        return ReadOutcome(ReadSource.PRIMARY, self._normalize(mode, records))

    async def _read_legacy(self, mode: ReadMode, primary_error: Optional[BaseException]) -> ReadOutcome:
        fetcher = self.legacy_readers.get(mode)
        if fetcher is None:
            error = ValueError(f"No legacy reader configured for mode {mode.value}")
            return ReadOutcome(ReadSource.FAILED, error=error)
        try:
            records = await fetcher()
        except Exception as exc:
            logger.error(f"[{self.name}] sheet read failed for {mode.value}: {exc}")
            return ReadOutcome(ReadSource.FAILED, error=exc)
        return ReadOutcome(ReadSource.FALLBACK, self._normalize(mode, records or []), error=primary_error)

    async def read(self, mode: ReadMode, force_legacy: bool = False) -> ReadOutcome:
        """
        Resolve ``mode`` into a tagged outcome.

        PRIMARY: the SQL store answered with data (used verbatim).
        FALLBACK: the sheet answered; ``error`` holds the SQL failure, if any.
        FAILED: the sheet itself failed; ``error`` holds that failure.
        """
        primary_error: Optional[BaseException] = None
        if not force_legacy and self.has_primary:
            outcome = await self._read_primary(mode)
            if outcome.source is ReadSource.PRIMARY:
                return outcome
            primary_error = outcome.error
        elif not force_legacy:
            logger.debug(f"[{self.name}] SQL reader not configured, reading sheet")
        return await self._read_legacy(mode, primary_error)

    async def fetch(self, mode: ReadMode, force_legacy: bool = False) -> List[Record]:
        """Records for ``mode``. A failing sheet read is re-raised, never swallowed."""
        outcome = await self.read(mode, force_legacy=force_legacy)
        if not outcome.ok:
            raise outcome.error
        return outcome.records

    async def fetch_one(self, record_id: str, mode: ReadMode = ReadMode.ENTRIES) -> Optional[Record]:
        """
        Look up one record by its stable id.

        A primary hit returns at once. A primary miss (None) and a primary error
        both continue to the sheet; only the error is reported as a failure.
        Returns None when the sheet has no such record either.
        """
        if self.primary_lookup is not None:
            try:
                hit = await self.primary_lookup(record_id)
            except Exception as exc:
                logger.warning(f"[{self.name}] SQL single read failed for {record_id}, falling back: {exc}")
            else:
                if hit:
                    normalizer = self.normalizers.get(mode)
                    return normalizer(hit) if normalizer else dict(hit)
                logger.warning(f"[{self.name}] {record_id} not found in SQL, trying sheet")

        records = await self.fetch(mode, force_legacy=True)
        for record in records:
            if record.get(self.id_field) == record_id:
                return record
        return None
