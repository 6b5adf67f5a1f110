"""推送订阅、提醒文案与推送发送。"""
from sipsweet.notify.messages import build_payload, flower_emoji, generate_message
from sipsweet.notify.models import DispatchResult, NotificationPayload, PushSubscription, SubscriptionKeys
from sipsweet.notify.push import PushSender
from sipsweet.notify.subscriptions import SubscriptionStore

__all__ = [
    "DispatchResult",
    "NotificationPayload",
    "PushSender",
    "PushSubscription",
    "SubscriptionKeys",
    "SubscriptionStore",
    "build_payload",
    "flower_emoji",
    "generate_message",
]
