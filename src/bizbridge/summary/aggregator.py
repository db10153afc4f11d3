"""Count weekly summaries per ISO week for the week list."""

from collections import OrderedDict
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Union

from pydantic import BaseModel

from ..collaborators import WeekInfoCollaborator
from ..utils.weeks import is_week_id

SUMMARY_FIELDS = ("summaryContent", "重點摘要")


class WeekSummary(BaseModel):
    week_id: str
    title: str = ""
    date_range: str = ""
    summary_count: int = 0

    def to_view(self) -> Dict[str, Any]:
        return {
            "id": self.week_id,
            "title": self.title,
            "dateRange": self.date_range,
            "summaryCount": self.summary_count,
        }


def _summary_text(record: Mapping[str, Any]) -> str:
    for field in SUMMARY_FIELDS:
        value = record.get(field)
        if value:
            return str(value)
    return ""


def count_summaries(records: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Summary counts per week id, in first-seen order.

    Records without a 'YYYY-Www' week id are skipped. A record counts only
    when its summary text is non-empty after trimming.
    """
    counts: Dict[str, int] = OrderedDict()
    for record in records:
        week_id = record.get("weekId")
        if not is_week_id(week_id):
            continue
        counts.setdefault(week_id, 0)
        if _summary_text(record).strip():
            counts[week_id] += 1
    return counts


def aggregate(
    records: Iterable[Mapping[str, Any]],
    week_info: WeekInfoCollaborator,
    today: Union[date, datetime],
) -> List[WeekSummary]:
    """
    Build the week list: one entry per week with a summary count.

    The week containing ``today`` is always present (zero count if it has no
    records). Result is sorted by week id, newest first.
    """
    summaries: List[WeekSummary] = []
    for week_id, count in count_summaries(records).items():
        info = week_info.get_week_info(week_id)
        summaries.append(
            WeekSummary(
                week_id=week_id,
                title=info.get("title", ""),
                date_range=info.get("dateRange", ""),
                summary_count=count,
            )
        )

    current_week_id = week_info.get_week_id(today)
    if not any(s.week_id == current_week_id for s in summaries):
        info = week_info.get_week_info(current_week_id)
        summaries.insert(
            0,
            WeekSummary(
                week_id=current_week_id,
                title=info.get("title", ""),
                date_range=info.get("dateRange", ""),
                summary_count=0,
            ),
        )

    return sorted(summaries, key=lambda s: s.week_id, reverse=True)
