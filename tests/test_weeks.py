"""Tests for ISO week helpers."""

from datetime import date, datetime

import pytest

from bizbridge.utils.weeks import IsoWeekCalendar, is_week_id, parse_iso_date, utc_weekday, week_id_for, week_monday


def test_utc_weekday_is_timezone_independent():
    assert utc_weekday("2026-01-19") == 1
    assert utc_weekday("2026-01-25") == 7


@pytest.mark.parametrize("value", [None, "", "2026/01/19", "2026-13-01", "2026-02-30", "soon"])
def test_utc_weekday_malformed_is_minus_one(value):
    assert utc_weekday(value) == -1


def test_is_week_id():
    assert is_week_id("2026-W03")
    assert not is_week_id("2026-W3")
    assert not is_week_id("W03-2026")
    assert not is_week_id(None)


def test_week_id_for_uses_iso_year():
    assert week_id_for("2026-01-19") == "2026-W04"
    assert week_id_for(date(2025, 12, 29)) == "2026-W01"
    assert week_id_for(datetime(2026, 1, 28, 9, 0)) == "2026-W05"


def test_week_monday_and_invalid_ids():
    assert week_monday("2026-W03") == date(2026, 1, 12)
    with pytest.raises(ValueError):
        week_monday("2026-W60")
    with pytest.raises(ValueError):
        week_monday("bad")


def test_parse_iso_date_rejects_garbage():
    assert parse_iso_date("2026-01-19T08:00:00Z") == date(2026, 1, 19)
    with pytest.raises(ValueError):
        parse_iso_date("19/01/2026")


def test_week_info_covers_business_days():
    info = IsoWeekCalendar().get_week_info("2026-W04")

    assert info["title"] == "2026年 第4週"
    assert info["dateRange"] == "01/19 - 01/23"
    assert info["month"] == 1
    assert [d["date"] for d in info["days"]] == [
        "2026-01-19",
        "2026-01-20",
        "2026-01-21",
        "2026-01-22",
        "2026-01-23",
    ]
    assert info["days"][0]["dayIndex"] == 1
    assert info["days"][0]["dayName"] == "週一"


def test_business_days_is_bounded():
    with pytest.raises(ValueError):
        IsoWeekCalendar(business_days=0)
