"""提醒计算：免打扰时段、推送判断、下次提醒时刻。"""
from sipsweet.reminders.dnd import is_in_dnd_window, should_send_notification
from sipsweet.reminders.evaluator import evaluate, next_eligible_instant
from sipsweet.reminders.models import ReminderDecision, ReminderSettings

__all__ = [
    "ReminderDecision",
    "ReminderSettings",
    "evaluate",
    "is_in_dnd_window",
    "next_eligible_instant",
    "should_send_notification",
]
