"""提醒文案与推送内容。"""
import random
from datetime import datetime
from typing import Optional

from sipsweet.notify.models import NotificationPayload
from sipsweet.settings.models import UserSettings
from sipsweet.time_utils import local_now

# 花朵主题：emoji、主色、花瓣数（进度环使用）
FLOWER_THEMES = {
    "rose": {"emoji": "🌹", "color": "#F8D7DA", "petals": 8},
    "tulip": {"emoji": "🌷", "color": "#E6D0EC", "petals": 6},
    "daisy": {"emoji": "🌼", "color": "#DFF4E3", "petals": 12},
}
DEFAULT_FLOWER_EMOJI = "🌸"

_MESSAGES = (
    ("Time to hydrate, {nickname}! {emoji}", "Your beautiful petals need water to bloom. Take a sip! 💧"),
    ("Gentle reminder, {nickname} {emoji}", "Like flowers need water, you need hydration. Sip something lovely! ✨"),
    ("{nickname}, your garden awaits! {emoji}", "Time to water your inner garden. A small sip makes a big difference! 🌸"),
    ("Sweet {nickname} {emoji}", "Your body is like a delicate flower - it needs water to stay beautiful! 💕"),
)


def flower_emoji(flower_type: str) -> str:
    theme = FLOWER_THEMES.get(flower_type)
    return theme["emoji"] if theme else DEFAULT_FLOWER_EMOJI


def flower_petals(flower_type: str) -> int:
    return FLOWER_THEMES.get(flower_type, FLOWER_THEMES["rose"])["petals"]


def generate_message(nickname: str, flower_type: str, rng: Optional[random.Random] = None) -> tuple[str, str]:
    """随机挑一条提醒文案，返回 (标题, 正文)。"""
    title, body = (rng or random).choice(_MESSAGES)
    return title.format(nickname=nickname, emoji=flower_emoji(flower_type)), body


def build_payload(
    settings: UserSettings,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> NotificationPayload:
    """按用户称呼与花朵主题生成推送内容。"""
    now = now or local_now()
    title, body = generate_message(settings.nickname, settings.flower_type, rng)
    emoji = flower_emoji(settings.flower_type)
    return NotificationPayload(
        title=title,
        body=body,
        data={
            "nickname": settings.nickname,
            "flower_emoji": emoji,
            "timestamp": now.isoformat(),
            "url": "/",
        },
    )
