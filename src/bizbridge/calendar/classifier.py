"""Keyword-driven classification of two calendar streams into per-day buckets.

Stream A (personal calendar) loses events matching the block list. Stream B
(team calendar) keeps its events except those matching the transfer list,
which move to bucket A. Each rule applies to its own stream only.
"""

from datetime import tzinfo
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from ..errors import SystemConfigError
from ..utils.logging import get_logger
from ..utils.time import get_zone, parse_event_datetime
from .models import CalendarEventItem, ClassifiedEvents, KeywordRule

logger = get_logger(__name__)

ALL_DAY_LABEL = "全天"


def parse_keyword_rules(raw_rules: Any) -> List[KeywordRule]:
    """
    Turn config pairs ``{value, note}`` into keyword rules.

    ``note`` is a comma-separated keyword list; blanks are dropped.

    Raises:
        SystemConfigError: If the list or any entry is malformed
    """
    if raw_rules is None:
        raise SystemConfigError("Calendar filter rules are missing from system config")
    if not isinstance(raw_rules, list):
        raise SystemConfigError("Calendar filter rules must be a list")

    rules: List[KeywordRule] = []
    for entry in raw_rules:
        if not isinstance(entry, Mapping):
            raise SystemConfigError(f"Calendar filter rule must be a mapping, got {type(entry).__name__}")
        rule_key = entry.get("value")
        if not rule_key or not isinstance(rule_key, str):
            raise SystemConfigError("Calendar filter rule missing 'value'")
        note = entry.get("note")
        if note is None:
            note = ""
        if not isinstance(note, str):
            raise SystemConfigError(f"Calendar filter rule '{rule_key}' has a non-text 'note'")
        keywords = [part.strip() for part in note.split(",") if part.strip()]
        rules.append(KeywordRule(rule_key=rule_key, keywords=keywords))
    return rules


def resolve_keywords(rules: Iterable[KeywordRule], rule_key: str) -> List[str]:
    """Keywords of the first rule named ``rule_key``, or [] if there is none."""
    for rule in rules:
        if rule.rule_key == rule_key:
            return list(rule.keywords)
    return []


def _matches_any(summary: Optional[str], keywords: List[str]) -> bool:
    """Case-sensitive substring match."""
    if not summary:
        return False
    return any(kw in summary for kw in keywords)


def _event_day_and_time(event: Mapping[str, Any], zone: tzinfo) -> Optional[Tuple[str, bool, str]]:
    """(day key, is all-day, time label), or None when the event has no usable start."""
    start = event.get("start") or {}
    if not isinstance(start, Mapping):
        return None

    all_day = start.get("date")
    if all_day:
        return str(all_day)[:10], True, ALL_DAY_LABEL

    date_time = start.get("dateTime")
    if not date_time:
        return None
    try:
        local = parse_event_datetime(str(date_time), zone)
    except ValueError:
        logger.debug(f"Dropping event with unparseable start: {date_time!r}")
        return None
    return local.date().isoformat(), False, f"{local:%H:%M}"


def organize_events_by_day(events: Iterable[Mapping[str, Any]], zone: tzinfo) -> Dict[str, List[CalendarEventItem]]:
    """Group events under their day key, keeping input order within a day."""
    by_day: Dict[str, List[CalendarEventItem]] = {}
    for event in events:
        resolved = _event_day_and_time(event, zone)
        if resolved is None:
            continue
        day_key, is_all_day, time_label = resolved
        by_day.setdefault(day_key, []).append(
            CalendarEventItem(
                summary=event.get("summary"),
                isAllDay=is_all_day,
                time=time_label,
                htmlLink=event.get("htmlLink"),
                location=event.get("location"),
                description=event.get("description"),
            )
        )
    return by_day


def classify(
    stream_a: Iterable[Mapping[str, Any]],
    stream_b: Iterable[Mapping[str, Any]],
    rules: Iterable[KeywordRule],
    *,
    timezone: str,
    block_rule_key: str,
    transfer_rule_key: str,
) -> ClassifiedEvents:
    """
    Partition two event streams into per-day buckets.

    Args:
        stream_a: Events whose home is bucket A (block list applies)
        stream_b: Events whose home is bucket B (transfer list applies)
        rules: Parsed keyword rules
        timezone: IANA zone used for day keys and times
        block_rule_key: Rule naming the block list for stream A
        transfer_rule_key: Rule naming the transfer list for stream B

    Returns:
        ClassifiedEvents with bucket_a and bucket_b keyed by 'YYYY-MM-DD'
    """
    rules = list(rules)
    block_keywords = resolve_keywords(rules, block_rule_key)
    transfer_keywords = resolve_keywords(rules, transfer_rule_key)

    final_a: List[Mapping[str, Any]] = []
    final_b: List[Mapping[str, Any]] = []
    blocked = 0

    for event in stream_a:
        if _matches_any(event.get("summary"), block_keywords):
            blocked += 1
            continue
        final_a.append(event)

    for event in stream_b:
        if _matches_any(event.get("summary"), transfer_keywords):
            final_a.append(event)
        else:
            final_b.append(event)

    if blocked:
        logger.debug(f"Blocked {blocked} personal calendar events")

    zone = get_zone(timezone)
    return ClassifiedEvents(
        bucket_a=organize_events_by_day(final_a, zone),
        bucket_b=organize_events_by_day(final_b, zone),
    )
