"""提醒计算：是否该推送、下次可提醒时刻。

纯函数，不读写任何存储；调用方注入 now 以便复现同一结论。
"""
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sipsweet.hydration.models import IntakeEvent
from sipsweet.reminders.dnd import dnd_bounds, dnd_end_instant, is_in_dnd_window, should_send_notification
from sipsweet.reminders.models import ReminderDecision, ReminderSettings
from sipsweet.time_utils import align, local_now, minutes_of


def last_sip(events: Iterable[IntakeEvent], now: datetime) -> Optional[IntakeEvent]:
    """now 所在本地日期内时刻最晚的一条记录。"""
    today = now.date()
    latest: Optional[IntakeEvent] = None
    latest_at: Optional[datetime] = None
    for event in events:
        at = align(event.timestamp, now)
        if at.date() != today:
            continue
        if latest_at is None or at > latest_at:
            latest, latest_at = event, at
    return latest


def next_eligible_instant(
    settings: ReminderSettings,
    last_sip_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """下次可提醒时刻。

    先按 (上次喝水 或 now) + 间隔 得到原始时刻；若该时刻落在免打扰时段内，
    顺延到免打扰结束（仅当结束时刻晚于原始时刻）。只顺延一次。
    """
    now = now or local_now()
    base = align(last_sip_at, now) if last_sip_at is not None else now
    naive = base + timedelta(minutes=settings.interval_minutes)

    bounds = dnd_bounds(settings)
    if bounds is None:
        return naive
    if not is_in_dnd_window(minutes_of(naive), *bounds):
        return naive
    end_at = dnd_end_instant(settings, now)
    if end_at is not None and end_at > naive:
        return end_at
    return naive


def evaluate(
    settings: ReminderSettings,
    today_events: Iterable[IntakeEvent],
    now: Optional[datetime] = None,
) -> ReminderDecision:
    """综合间隔与免打扰，得出此刻的提醒结论。"""
    now = now or local_now()
    sip = last_sip(today_events, now)
    sip_at = align(sip.timestamp, now) if sip else None

    elapsed_ok = sip_at is None or now - sip_at >= timedelta(minutes=settings.interval_minutes)
    dnd_ok = should_send_notification(settings, now)

    return ReminderDecision(
        should_send=elapsed_ok and dnd_ok,
        next_eligible_instant=next_eligible_instant(settings, sip_at, now),
        blocked_by_dnd=elapsed_ok and not dnd_ok,
    )
