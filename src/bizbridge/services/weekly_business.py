"""Weekly business entries: converged reads, week views and sheet-routed writes."""

import asyncio
from copy import deepcopy
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from ..calendar.classifier import classify, parse_keyword_rules
from ..config.loader import ServiceSettings
from ..convergence.resolver import ReadMode, SourceConvergenceResolver
from ..errors import NotFoundError
from ..guard.write_guard import assert_writable
from ..normalization.normalizer import normalize_entry
from ..summary.aggregator import aggregate
from ..utils.logging import get_logger
from ..utils.time import get_zone, now_in_zone
from ..utils.weeks import parse_iso_date, utc_weekday
from .dependencies import WeeklyBusinessDependencies, resolve_actor_name

logger = get_logger(__name__)

Record = Dict[str, Any]

ENTRY_CACHE_KEY = "weeklyBusiness"


async def _no_events() -> List[Record]:
    return []


class WeeklyBusinessService:
    """
    Façade for weekly business entries.

    Reads prefer the SQL store and fall back to the sheet. Writes still go to
    the sheet writer and therefore require a row position on the target.
    """

    def __init__(self, deps: WeeklyBusinessDependencies, settings: Optional[ServiceSettings] = None):
        self.deps = deps
        self.settings = settings or ServiceSettings()
        self.legacy_reader = deps.legacy_reader
        self.legacy_writer = deps.legacy_writer
        self.week_info = deps.week_info
        self.calendar = deps.calendar
        self.system_config = deps.system_config

        primary = None
        lookup = None
        if deps.new_store_reader is not None:
            # SQL DTOs carry weekId and summaryContent, so one query serves both modes.
            primary = {
                ReadMode.ENTRIES: deps.new_store_reader.get_all,
                ReadMode.SUMMARY: deps.new_store_reader.get_all,
            }
            lookup = deps.new_store_reader.get_by_id

        self.resolver = SourceConvergenceResolver(
            name="weekly",
            legacy_readers={
                ReadMode.ENTRIES: self.legacy_reader.get_all,
                ReadMode.SUMMARY: self.legacy_reader.get_summary,
            },
            primary_readers=primary,
            primary_lookup=lookup,
            normalizers={ReadMode.ENTRIES: normalize_entry},
            id_field="recordId",
        )

    def _now(self) -> datetime:
        if self.deps.clock is not None:
            return self.deps.clock()
        return now_in_zone(self.settings.timezone)

    def _signal_invalidate(self) -> None:
        try:
            self.legacy_reader.invalidate_cache(ENTRY_CACHE_KEY)
        except Exception as exc:
            logger.warning(f"Cache invalidation for {ENTRY_CACHE_KEY} failed: {exc}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_entries_for_week(self, week_id: str) -> List[Record]:
        """
        Entries of one week, newest date first, each with a view-only ``day``.

        Display path: any failure is logged and yields [].
        """
        try:
            all_entries = await self.resolver.fetch(ReadMode.ENTRIES)
            entries = [e for e in all_entries if e.get("weekId") == week_id]
            entries.sort(key=lambda e: str(e.get("date") or ""), reverse=True)

            result = []
            for entry in entries:
                day = utc_weekday(entry.get("date"))
                view = dict(entry)
                view["day"] = day
                view["_view"] = {"day": day}
                result.append(view)
            return result
        except Exception:
            logger.error(f"get_entries_for_week failed ({week_id})", exc_info=True)
            return []

    async def get_entry(self, record_id: str) -> Optional[Record]:
        """Single entry by ``recordId``; None when neither store has it."""
        return await self.resolver.fetch_one(record_id)

    async def get_weekly_business_summary_list(self) -> List[Record]:
        """Week list with summary counts; the current week is always included."""
        try:
            rows = await self.resolver.fetch(ReadMode.SUMMARY)
            weeks = aggregate(rows, self.week_info, self._now())
            return [week.to_view() for week in weeks]
        except Exception:
            logger.error("get_weekly_business_summary_list failed", exc_info=True)
            raise

    async def get_weekly_details(self, week_id: str) -> Record:
        """
        One week: its info, entries, holidays and classified calendar events.

        Holidays, system config and both calendars are fetched together; if
        any of them fails the whole call fails.
        """
        week_info = deepcopy(self.week_info.get_week_info(week_id))
        entries = await self.get_entries_for_week(week_id)

        days = week_info.get("days") or []
        zone = get_zone(self.settings.timezone)
        if days:
            first_day = datetime.combine(parse_iso_date(days[0]["date"]), datetime.min.time(), zone)
            last_day = datetime.combine(parse_iso_date(days[-1]["date"]), datetime.min.time(), zone)
        else:
            first_day = last_day = datetime.combine(self._now().date(), datetime.min.time(), zone)
        end_query = last_day + timedelta(days=1)

        personal_id = self.settings.personal_calendar_id
        team_id = self.settings.calendar_id
        holidays, system_config, raw_a, raw_b = await asyncio.gather(
            self.calendar.get_holidays(first_day, end_query),
            self.system_config.get_system_config(),
            self.calendar.get_events(first_day, end_query, personal_id) if personal_id else _no_events(),
            self.calendar.get_events(first_day, end_query, team_id) if team_id else _no_events(),
        )

        rules = parse_keyword_rules((system_config or {}).get(self.settings.filter_rules_key))
        classified = classify(
            raw_a or [],
            raw_b or [],
            rules,
            timezone=self.settings.timezone,
            block_rule_key=self.settings.block_rule_key,
            transfer_rule_key=self.settings.transfer_rule_key,
        )

        holidays = holidays or {}
        for day in days:
            date_key = day["date"]
            if date_key in holidays:
                day["holidayName"] = holidays[date_key]
            view = classified.day_view(date_key)
            day["dxCalendarEvents"] = view["a"]
            day["atCalendarEvents"] = view["b"]

        details: Record = {"id": week_id}
        details.update(week_info)
        details["entries"] = entries
        return details

    async def get_week_options(self) -> List[Record]:
        """Previous, current and next week; weeks that already have data are disabled."""
        today = self._now()
        rows = await self.resolver.fetch(ReadMode.SUMMARY)
        existing = {row.get("weekId") for row in rows}

        options = [
            {"id": self.week_info.get_week_id(today - timedelta(days=7)), "label": "上一週"},
            {"id": self.week_info.get_week_id(today), "label": "本週"},
            {"id": self.week_info.get_week_id(today + timedelta(days=7)), "label": "下一週"},
        ]
        for option in options:
            option["disabled"] = option["id"] in existing
        return options

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_entry(self, data: Record, actor: Any = None) -> Record:
        """Create an entry; ``weekId`` is derived from ``date`` (today if absent)."""
        entry_date = parse_iso_date(data.get("date") or self._now())
        full_data = dict(data)
        full_data["date"] = entry_date.isoformat()
        full_data["weekId"] = self.week_info.get_week_id(entry_date)

        creator = resolve_actor_name(actor or data.get("creator"))
        try:
            result = await self.legacy_writer.create(full_data, creator)
        except Exception:
            logger.error("create_entry failed", exc_info=True)
            raise
        self._signal_invalidate()
        logger.info(f"Created weekly entry for {full_data['weekId']} by {creator}")
        return result

    async def _locate(self, record_id: str) -> Record:
        entries = await self.resolver.fetch(ReadMode.ENTRIES)
        for entry in entries:
            if entry.get("recordId") == record_id:
                return entry
        raise NotFoundError("Weekly business entry", record_id)

    async def update_entry(self, record_id: str, data: Record, actor: Any = None) -> Record:
        try:
            target = await self._locate(record_id)
            row_index = assert_writable(target, action="update")
            modifier = resolve_actor_name(actor or data.get("creator"))
            result = await self.legacy_writer.update_by_row(row_index, data, modifier)
        except Exception:
            logger.error(f"update_entry failed ({record_id})", exc_info=True)
            raise
        self._signal_invalidate()
        logger.info(f"Updated weekly entry {record_id} (row {row_index})")
        return result

    async def delete_entry(self, record_id: str) -> Record:
        try:
            target = await self._locate(record_id)
            row_index = assert_writable(target, action="delete")
            result = await self.legacy_writer.delete_by_row(row_index)
        except Exception:
            logger.error(f"delete_entry failed ({record_id})", exc_info=True)
            raise
        self._signal_invalidate()
        logger.info(f"Deleted weekly entry {record_id} (row {row_index})")
        return result
