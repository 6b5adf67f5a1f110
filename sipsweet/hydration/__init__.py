"""饮水记录与每日进度。两级记录存储见 sipsweet.hydration.tiered。"""
from sipsweet.hydration.models import DailyProgress, IntakeEvent
from sipsweet.hydration.progress import calculate_daily_progress, calculate_weekly_progress
from sipsweet.hydration.store import IntakeLogStore

__all__ = [
    "DailyProgress",
    "IntakeEvent",
    "IntakeLogStore",
    "calculate_daily_progress",
    "calculate_weekly_progress",
]
