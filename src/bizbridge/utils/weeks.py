"""ISO week helpers and the default week-info collaborator."""

import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional, Union

from ..collaborators import WeekInfoCollaborator

WEEK_ID_PATTERN = re.compile(r"^\d{4}-W\d{2}$")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DAY_NAMES = ("週一", "週二", "週三", "週四", "週五", "週六", "週日")

DateLike = Union[date, datetime, str]


def is_week_id(value: Any) -> bool:
    return isinstance(value, str) and bool(WEEK_ID_PATTERN.match(value))


def parse_iso_date(value: DateLike) -> date:
    """
    Coerce a date, datetime, or 'YYYY-MM-DD...' string into a date.

    Raises:
        ValueError: If the value is not a usable date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10 and ISO_DATE_PATTERN.match(value[:10]):
        return date.fromisoformat(value[:10])
    raise ValueError(f"Not an ISO date: {value!r}")


def utc_weekday(date_string: Optional[str]) -> int:
    """
    ISO weekday (Monday=1 .. Sunday=7) of a 'YYYY-MM-DD' string.

    The date is built from its components alone so no local time zone can
    shift it. Malformed input yields -1.
    """
    if not date_string or not isinstance(date_string, str) or not ISO_DATE_PATTERN.match(date_string):
        return -1
    year, month, day = (int(part) for part in date_string.split("-"))
    try:
        return date(year, month, day).isoweekday()
    except ValueError:
        return -1


def week_id_for(value: DateLike) -> str:
    iso_year, iso_week, _ = parse_iso_date(value).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def week_monday(week_id: str) -> date:
    """Monday of an ISO week id ('2026-W03' -> 2026-01-12)."""
    if not is_week_id(week_id):
        raise ValueError(f"Invalid week id: {week_id!r}")
    year, week = int(week_id[:4]), int(week_id[6:])
    try:
        return date.fromisocalendar(year, week, 1)
    except ValueError as exc:
        raise ValueError(f"Invalid week id: {week_id!r}") from exc


class IsoWeekCalendar(WeekInfoCollaborator):
    """Week ids and display info based on ISO 8601 weeks (Monday start)."""

    def __init__(self, business_days: int = 5):
        if not 1 <= business_days <= 7:
            raise ValueError("business_days must be between 1 and 7")
        self.business_days = business_days

    def get_week_id(self, value: DateLike) -> str:
        return week_id_for(value)

    def get_week_info(self, week_id: str) -> Dict[str, Any]:
        monday = week_monday(week_id)
        last = monday + timedelta(days=self.business_days - 1)
        days = []
        for offset in range(self.business_days):
            current = monday + timedelta(days=offset)
            days.append(
                {
                    "date": current.isoformat(),
                    "dayIndex": current.isoweekday(),
                    "dayName": DAY_NAMES[offset],
                }
            )
        return {
            "title": f"{monday.isocalendar()[0]}年 第{int(week_id[6:])}週",
            "dateRange": f"{monday:%m/%d} - {last:%m/%d}",
            "month": monday.month,
            "weekOfMonth": (monday.day - 1) // 7 + 1,
            "days": days,
        }
