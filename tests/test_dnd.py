"""免打扰时段测试。"""
from datetime import datetime, timedelta, timezone

import pytest

from sipsweet.reminders.dnd import (
    dnd_end_instant,
    dnd_status_message,
    format_time_12h,
    is_in_dnd_window,
    should_send_notification,
)
from sipsweet.reminders.models import ReminderSettings
from sipsweet.time_utils import parse_time_of_day

TZ = timezone(timedelta(hours=8))


def at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=TZ)


def dnd(start, end, enabled=True, interval=120) -> ReminderSettings:
    return ReminderSettings(interval_minutes=interval, dnd_enabled=enabled, dnd_start=start, dnd_end=end)


def test_parse_time_of_day() -> None:
    assert parse_time_of_day("00:00") == 0
    assert parse_time_of_day("02:00") == 120
    assert parse_time_of_day("9:05") == 545
    assert parse_time_of_day("23:59") == 1439


@pytest.mark.parametrize("bad", ["24:00", "12:60", "1200", "ab:cd", "", "12:5"])
def test_parse_time_of_day_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_time_of_day(bad)


def test_same_day_window_is_inclusive_range() -> None:
    for start, end in ((120, 660), (0, 1439), (600, 601)):
        for now in range(0, 1440, 7):
            assert is_in_dnd_window(now, start, end) == (start <= now <= end)
        assert is_in_dnd_window(start, start, end)
        assert is_in_dnd_window(end, start, end)


def test_overnight_window_wraps_midnight() -> None:
    start, end = 22 * 60, 6 * 60
    for now in range(0, 1440, 5):
        assert is_in_dnd_window(now, start, end) == (now >= start or now <= end)
    assert is_in_dnd_window(23 * 60 + 30, start, end)
    assert is_in_dnd_window(0, start, end)
    assert is_in_dnd_window(6 * 60, start, end)
    assert not is_in_dnd_window(6 * 60 + 1, start, end)
    assert not is_in_dnd_window(12 * 60, start, end)


def test_degenerate_window_is_single_minute() -> None:
    assert is_in_dnd_window(120, 120, 120) is True
    assert is_in_dnd_window(121, 120, 120) is False
    assert is_in_dnd_window(119, 120, 120) is False


def test_should_send_when_dnd_disabled() -> None:
    settings = dnd("22:00", "06:00", enabled=False)
    for hour in range(24):
        assert should_send_notification(settings, at(hour, 30)) is True


def test_should_send_fails_open_on_missing_bounds() -> None:
    assert should_send_notification(dnd(None, "06:00"), at(3)) is True
    assert should_send_notification(dnd("22:00", None), at(23)) is True
    assert should_send_notification(dnd(None, None), at(23)) is True


def test_overnight_window_blocks_late_evening() -> None:
    settings = dnd("22:00", "06:00")
    assert should_send_notification(settings, at(23, 30)) is False
    assert should_send_notification(settings, at(5, 59)) is False
    assert should_send_notification(settings, at(12)) is True


def test_degenerate_window_blocks_only_that_minute() -> None:
    settings = dnd("02:00", "02:00")
    assert should_send_notification(settings, at(2, 0)) is False
    assert should_send_notification(settings, at(2, 1)) is True


def test_dnd_end_instant_today_or_tomorrow() -> None:
    settings = dnd("02:00", "11:00")
    assert dnd_end_instant(settings, at(10, 30)) == at(11)
    # 结束时间已过（或恰好等于 now）则顺延一天
    assert dnd_end_instant(settings, at(11)) == at(11, day=20)
    assert dnd_end_instant(settings, at(15)) == at(11, day=20)
    assert dnd_end_instant(dnd("02:00", "11:00", enabled=False), at(3)) is None


def test_dnd_end_instant_drops_seconds() -> None:
    settings = dnd("22:00", "06:00")
    now = at(23).replace(second=42, microsecond=17)
    assert dnd_end_instant(settings, now) == at(6, day=20)


def test_status_message() -> None:
    settings = dnd("02:00", "11:00")
    assert dnd_status_message(settings, at(3)) == "Do not disturb until 11:00 AM"
    assert dnd_status_message(settings, at(12)) is None
    assert dnd_status_message(dnd("02:00", "11:00", enabled=False), at(3)) is None
    assert format_time_12h("00:05") == "12:05 AM"
    assert format_time_12h("13:30") == "1:30 PM"


def test_settings_snapshot_validation() -> None:
    assert dnd("2:00", "11:00").dnd_start == "02:00"
    with pytest.raises(ValueError):
        dnd("25:00", "11:00")
    with pytest.raises(ValueError):
        ReminderSettings(interval_minutes=10)
    with pytest.raises(ValueError):
        ReminderSettings(interval_minutes=481)
    settings = ReminderSettings(interval_minutes=15)
    with pytest.raises(ValueError):
        settings.interval_minutes = 30
