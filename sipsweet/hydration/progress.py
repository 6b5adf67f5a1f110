"""饮水进度统计与展示格式。"""
import math
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

from sipsweet.config import SIP_AMOUNTS
from sipsweet.hydration.models import DailyProgress, IntakeEvent
from sipsweet.time_utils import align, local_now


def _events_on(events: Iterable[IntakeEvent], day: date, reference: Optional[datetime]) -> List[IntakeEvent]:
    picked = [e for e in events if align(e.timestamp, reference).date() == day]
    return sorted(picked, key=lambda e: e.timestamp)


def calculate_daily_progress(
    events: Iterable[IntakeEvent],
    goal_ml: int,
    day: Optional[date] = None,
    reference: Optional[datetime] = None,
) -> DailyProgress:
    """统计某日（默认今天）的总量与完成度，百分比封顶 100。"""
    reference = reference or local_now()
    day = day or reference.date()
    logs = _events_on(events, day, reference)
    total = sum(e.amount_ml for e in logs)
    percentage = min(total / goal_ml * 100, 100)
    return DailyProgress(day=day, total_ml=total, goal_ml=goal_ml, percentage=percentage, logs=logs)


def week_start(day: date) -> date:
    """所在周的周日。"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def calculate_weekly_progress(
    events: Iterable[IntakeEvent],
    goal_ml: int,
    day: Optional[date] = None,
    reference: Optional[datetime] = None,
) -> List[DailyProgress]:
    """从周日开始的 7 天进度。"""
    reference = reference or local_now()
    events = list(events)
    start = week_start(day or reference.date())
    return [
        calculate_daily_progress(events, goal_ml, start + timedelta(days=i), reference)
        for i in range(7)
    ]


def petals_completed(percentage: float, total_petals: int) -> int:
    return math.floor(percentage / 100 * total_petals)


def parse_sip_amount(value: str) -> float:
    """快捷量名（"small" / "Regular Sip" / "big" 等，不分大小写）或毫升数。"""
    key = value.strip().lower()
    for label, amount, _emoji in SIP_AMOUNTS:
        if key in (label.lower(), label.split()[0].lower()):
            return amount
    try:
        return float(key)
    except ValueError:
        names = ", ".join(label.split()[0].lower() for label, _, _ in SIP_AMOUNTS)
        raise ValueError(f"未知饮水量 {value!r}，可用 {names} 或毫升数") from None


def format_volume(ml: float) -> str:
    if ml >= 1000:
        return f"{ml / 1000:.1f}L"
    return f"{ml:g}ml"


def format_percentage(percentage: float) -> str:
    return f"{round(percentage)}%"


def format_interval(minutes: int) -> str:
    """120 -> "2h"，90 -> "1h 30m"，45 -> "45m"。"""
    if minutes >= 60:
        hours, rest = divmod(minutes, 60)
        return f"{hours}h" if rest == 0 else f"{hours}h {rest}m"
    return f"{minutes}m"


def format_since(last_sip: datetime, now: Optional[datetime] = None) -> str:
    """距上次喝水的时长，如 "45m ago"、"2h 5m ago"。"""
    now = now or local_now()
    minutes = int((now - align(last_sip, now)).total_seconds() // 60)
    if minutes < 60:
        return f"{minutes}m ago"
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m ago" if rest else f"{hours}h ago"


def greeting(nickname: str, now: Optional[datetime] = None) -> str:
    hour = (now or local_now()).hour
    if hour < 12:
        part = "Good morning"
    elif hour < 17:
        part = "Good afternoon"
    else:
        part = "Good evening"
    return f"{part}, {nickname}"
