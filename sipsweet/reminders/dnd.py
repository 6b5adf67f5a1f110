"""免打扰（DND）时段判断。

时间一律换算为「午夜起的分钟数」，取值 [0, 1440)。
start <= end 为同日时段（含两端）；start > end 为跨午夜时段。
start == end 视为只包含这一分钟的时段。
"""
from datetime import datetime, timedelta
from typing import Optional

from sipsweet.reminders.models import ReminderSettings
from sipsweet.time_utils import local_now, minutes_of, parse_time_of_day


def is_in_dnd_window(now: int, start: int, end: int) -> bool:
    """now 是否落在 [start, end] 免打扰时段内（分钟数）。"""
    if start > end:
        # 跨午夜，如 22:00 ~ 06:00
        return now >= start or now <= end
    return start <= now <= end


def dnd_bounds(settings: ReminderSettings) -> Optional[tuple[int, int]]:
    """免打扰生效时返回 (start, end) 分钟数；未开启或缺少任一端返回 None。"""
    if not settings.dnd_enabled:
        return None
    if not settings.dnd_start or not settings.dnd_end:
        return None
    return parse_time_of_day(settings.dnd_start), parse_time_of_day(settings.dnd_end)


def should_send_notification(settings: ReminderSettings, now: Optional[datetime] = None) -> bool:
    """当前时刻是否允许推送。配置不完整时放行（fail-open）。"""
    bounds = dnd_bounds(settings)
    if bounds is None:
        return True
    now = now or local_now()
    return not is_in_dnd_window(minutes_of(now), *bounds)


def dnd_end_instant(settings: ReminderSettings, now: datetime) -> Optional[datetime]:
    """免打扰结束的下一个时刻：今天的结束时间，若不晚于 now 则顺延一天。"""
    bounds = dnd_bounds(settings)
    if bounds is None:
        return None
    end = bounds[1]
    candidate = now.replace(hour=end // 60, minute=end % 60, second=0, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def format_time_12h(value: str) -> str:
    """HH:MM 转 12 小时制展示，如 "11:00 AM"、"2:05 PM"。"""
    minutes = parse_time_of_day(value)
    hour, minute = divmod(minutes, 60)
    suffix = "AM" if hour < 12 else "PM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def dnd_status_message(settings: ReminderSettings, now: Optional[datetime] = None) -> Optional[str]:
    """处于免打扰时段时给出提示文案，否则 None。"""
    if dnd_bounds(settings) is None:
        return None
    if should_send_notification(settings, now):
        return None
    return f"Do not disturb until {format_time_12h(settings.dnd_end)}"
