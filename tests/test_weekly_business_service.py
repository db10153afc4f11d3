"""Tests for WeeklyBusinessService reads, week views and guarded writes."""

import pytest
from conftest import (
    FakeCalendar,
    FakeLegacyReader,
    FakeNewStoreReader,
    FakeSystemConfig,
    RecordingLegacyWriter,
    fixed_clock,
    sheet_entry,
    sql_entry,
)

from bizbridge.config.loader import ServiceSettings
from bizbridge.errors import MissingDependencyError, NotFoundError, SystemConfigError, WriteProtectionError
from bizbridge.services import WeeklyBusinessDependencies, WeeklyBusinessService
from bizbridge.utils.weeks import IsoWeekCalendar

RULES = {
    "日曆篩選規則": [
        {"value": "DX_屏蔽關鍵字", "note": "午餐"},
        {"value": "AT_轉移關鍵字", "note": "DX"},
    ]
}

SHEET_ROWS = [
    sheet_entry(2, "WB-1", "2026-01-19", "2026-W04", summary="拜訪A"),
    sheet_entry(3, "WB-2", "2026-01-21", "2026-W04", summary="拜訪B"),
    sheet_entry(4, "WB-3", "2026-01-13", "2026-W03", summary=""),
]


def _service(
    legacy=None,
    primary=None,
    calendar=None,
    system_config=None,
    writer=None,
    settings=None,
):
    deps = WeeklyBusinessDependencies(
        legacy_reader=legacy or FakeLegacyReader(SHEET_ROWS),
        legacy_writer=writer or RecordingLegacyWriter(),
        week_info=IsoWeekCalendar(),
        calendar=calendar or FakeCalendar(),
        system_config=system_config or FakeSystemConfig(RULES),
        new_store_reader=primary,
        clock=fixed_clock(),
    )
    settings = settings or ServiceSettings(personal_calendar_id="dx@cal", calendar_id="at@cal")
    return WeeklyBusinessService(deps, settings)


def test_missing_collaborator_fails_fast():
    with pytest.raises(MissingDependencyError, match="calendar"):
        WeeklyBusinessDependencies(
            legacy_reader=FakeLegacyReader(),
            legacy_writer=RecordingLegacyWriter(),
            week_info=IsoWeekCalendar(),
            system_config=FakeSystemConfig(),
        )


@pytest.mark.asyncio
async def test_entries_for_week_sorted_with_day():
    entries = await _service().get_entries_for_week("2026-W04")

    assert [e["recordId"] for e in entries] == ["WB-2", "WB-1"]
    assert entries[0]["day"] == 3
    assert entries[0]["_view"] == {"day": 3}
    assert entries[1]["day"] == 1
    assert entries[0]["rowIndex"] == 3


@pytest.mark.asyncio
async def test_entries_for_week_prefers_sql_store():
    primary = FakeNewStoreReader([sql_entry("WB-9", "2026-01-22", "2026-W04", summary="新")])

    entries = await _service(primary=primary).get_entries_for_week("2026-W04")

    assert [e["recordId"] for e in entries] == ["WB-9"]
    assert "rowIndex" not in entries[0]
    assert entries[0]["日期"] == "2026-01-22"


@pytest.mark.asyncio
async def test_entries_for_week_display_path_swallows_errors():
    service = _service(legacy=FakeLegacyReader(error=OSError("quota")))

    assert await service.get_entries_for_week("2026-W04") == []


@pytest.mark.asyncio
async def test_summary_list_includes_current_week():
    weeks = await _service().get_weekly_business_summary_list()

    assert [w["id"] for w in weeks] == ["2026-W05", "2026-W04", "2026-W03"]
    assert [w["summaryCount"] for w in weeks] == [0, 2, 0]


@pytest.mark.asyncio
async def test_summary_list_propagates_sheet_failure():
    service = _service(legacy=FakeLegacyReader(error=OSError("quota")))

    with pytest.raises(OSError):
        await service.get_weekly_business_summary_list()


@pytest.mark.asyncio
async def test_weekly_details_assembles_days():
    calendar = FakeCalendar(
        holidays={"2026-01-20": "補班日"},
        events={
            "dx@cal": [
                {"summary": "客戶午餐", "start": {"dateTime": "2026-01-19T04:00:00Z"}},
                {"summary": "DX 內部", "start": {"dateTime": "2026-01-19T01:00:00Z"}},
            ],
            "at@cal": [
                {"summary": "DX 支援", "start": {"date": "2026-01-21"}},
                {"summary": "AT 週會", "start": {"dateTime": "2026-01-21T02:00:00+08:00"}},
            ],
        },
    )

    details = await _service(calendar=calendar).get_weekly_details("2026-W04")

    assert details["id"] == "2026-W04"
    assert details["title"] == "2026年 第4週"
    assert [e["recordId"] for e in details["entries"]] == ["WB-2", "WB-1"]

    monday, tuesday, wednesday = details["days"][:3]
    assert [e["summary"] for e in monday["dxCalendarEvents"]] == ["DX 內部"]
    assert monday["dxCalendarEvents"][0]["time"] == "09:00"
    assert tuesday["holidayName"] == "補班日"
    assert "holidayName" not in monday
    assert [e["summary"] for e in wednesday["dxCalendarEvents"]] == ["DX 支援"]
    assert wednesday["dxCalendarEvents"][0]["time"] == "全天"
    assert [e["summary"] for e in wednesday["atCalendarEvents"]] == ["AT 週會"]

    queried = {call[2] for call in calendar.event_calls}
    assert queried == {"dx@cal", "at@cal"}


@pytest.mark.asyncio
async def test_weekly_details_does_not_mutate_shared_week_info():
    class SharedWeekInfo(IsoWeekCalendar):
        def __init__(self):
            super().__init__()
            self.cached = super().get_week_info("2026-W04")

        def get_week_info(self, week_id):
            return self.cached

    shared = SharedWeekInfo()
    service = _service()
    service.week_info = shared

    await service.get_weekly_details("2026-W04")

    assert "dxCalendarEvents" not in shared.cached["days"][0]


@pytest.mark.asyncio
async def test_weekly_details_fails_when_any_fetch_fails():
    service = _service(calendar=FakeCalendar(error=ConnectionError("calendar down")))

    with pytest.raises(ConnectionError):
        await service.get_weekly_details("2026-W04")


@pytest.mark.asyncio
async def test_weekly_details_requires_filter_rules():
    service = _service(system_config=FakeSystemConfig({"其他": []}))

    with pytest.raises(SystemConfigError):
        await service.get_weekly_details("2026-W04")


@pytest.mark.asyncio
async def test_weekly_details_skips_unconfigured_calendars():
    calendar = FakeCalendar()
    service = _service(calendar=calendar, settings=ServiceSettings())

    details = await service.get_weekly_details("2026-W04")

    assert calendar.event_calls == []
    assert details["days"][0]["dxCalendarEvents"] == []
    assert details["days"][0]["atCalendarEvents"] == []


@pytest.mark.asyncio
async def test_week_options_disable_weeks_with_data():
    legacy = FakeLegacyReader(summary=[{"weekId": "2026-W05", "summaryContent": "x", "rowIndex": 2}])

    options = await _service(legacy=legacy).get_week_options()

    assert options == [
        {"id": "2026-W04", "label": "上一週", "disabled": False},
        {"id": "2026-W05", "label": "本週", "disabled": True},
        {"id": "2026-W06", "label": "下一週", "disabled": False},
    ]


@pytest.mark.asyncio
async def test_get_entry_uses_sql_lookup_first():
    primary = FakeNewStoreReader([sql_entry("WB-9", "2026-01-22", "2026-W04")])
    legacy = FakeLegacyReader(SHEET_ROWS)

    entry = await _service(legacy=legacy, primary=primary).get_entry("WB-9")

    assert entry["recordId"] == "WB-9"
    assert legacy.calls == 0


@pytest.mark.asyncio
async def test_create_entry_derives_week_and_invalidates():
    legacy = FakeLegacyReader(SHEET_ROWS)
    writer = RecordingLegacyWriter()

    await _service(legacy=legacy, writer=writer).create_entry(
        {"date": "2026-01-20", "topic": "報價"}, {"displayName": "Amy"}
    )

    action, data, actor = writer.calls[0]
    assert action == "create"
    assert data["weekId"] == "2026-W04"
    assert data["date"] == "2026-01-20"
    assert actor == "Amy"
    assert legacy.invalidated == ["weeklyBusiness"]


@pytest.mark.asyncio
async def test_create_entry_without_date_uses_today():
    writer = RecordingLegacyWriter()

    await _service(writer=writer).create_entry({"topic": "x"})

    _, data, actor = writer.calls[0]
    assert data["date"] == "2026-01-28"
    assert data["weekId"] == "2026-W05"
    assert actor == "System"


@pytest.mark.asyncio
async def test_update_sheet_sourced_entry_routes_by_row():
    writer = RecordingLegacyWriter()
    service = _service(primary=FakeNewStoreReader([]), writer=writer)

    await service.update_entry("WB-1", {"topic": "改"}, "Ben")

    assert writer.calls == [("update", 2, {"topic": "改"}, "Ben")]


@pytest.mark.asyncio
async def test_update_sql_sourced_entry_is_refused():
    writer = RecordingLegacyWriter()
    legacy = FakeLegacyReader(SHEET_ROWS)
    primary = FakeNewStoreReader([sql_entry("WB-1", "2026-01-19", "2026-W04")])
    service = _service(legacy=legacy, primary=primary, writer=writer)

    with pytest.raises(WriteProtectionError):
        await service.update_entry("WB-1", {"topic": "改"}, "Ben")

    assert writer.calls == []
    assert legacy.invalidated == []


@pytest.mark.asyncio
async def test_delete_entry_routes_by_row():
    writer = RecordingLegacyWriter()

    await _service(writer=writer).delete_entry("WB-3")

    assert writer.calls == [("delete", 4)]


@pytest.mark.asyncio
async def test_delete_missing_entry_raises_not_found():
    writer = RecordingLegacyWriter()

    with pytest.raises(NotFoundError):
        await _service(writer=writer).delete_entry("WB-404")

    assert writer.calls == []
