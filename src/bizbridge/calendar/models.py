"""Pydantic models for calendar keyword rules and classified events."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class KeywordRule(BaseModel):
    """Keywords configured under one rule key (e.g. DX_屏蔽關鍵字)."""

    rule_key: str = Field(..., description="Rule identifier, the 'value' of the config pair")
    keywords: List[str] = Field(default_factory=list, description="Substrings matched against event summaries")


class CalendarEventItem(BaseModel):
    """One event as shown on a day of the weekly view."""

    summary: Optional[str] = None
    isAllDay: bool = False
    time: str = ""
    htmlLink: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None


class ClassifiedEvents(BaseModel):
    """Per-day event buckets. Keys are 'YYYY-MM-DD' in the configured zone."""

    bucket_a: Dict[str, List[CalendarEventItem]] = Field(default_factory=dict)
    bucket_b: Dict[str, List[CalendarEventItem]] = Field(default_factory=dict)

    def day_view(self, day: str) -> Dict[str, List[dict]]:
        return {
            "a": [item.model_dump() for item in self.bucket_a.get(day, [])],
            "b": [item.model_dump() for item in self.bucket_b.get(day, [])],
        }
