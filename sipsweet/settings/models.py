"""用户设置数据模型。"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sipsweet import config
from sipsweet.reminders.models import ReminderSettings
from sipsweet.time_utils import format_time_of_day, parse_time_of_day


class Nickname(str, Enum):
    """称呼。"""
    PRINCESS = "Princess"
    BABE = "Babe"
    SWEETIE = "Sweetie"


class FlowerType(str, Enum):
    """进度花朵主题。"""
    ROSE = "rose"
    TULIP = "tulip"
    DAISY = "daisy"


class UserSettings(BaseModel):
    """完整用户设置；提醒计算只取其中的 ReminderSettings 快照。"""
    id: Optional[str] = Field(None, description="远端记录 ID")
    nickname: Nickname = Field(config.DEFAULT_NICKNAME, description="称呼")
    daily_goal_ml: int = Field(
        config.DEFAULT_DAILY_GOAL_ML,
        ge=config.MIN_DAILY_GOAL_ML,
        le=config.MAX_DAILY_GOAL_ML,
        description="每日目标 ml",
    )
    interval_min: int = Field(
        config.DEFAULT_INTERVAL_MIN,
        ge=config.MIN_INTERVAL_MIN,
        le=config.MAX_INTERVAL_MIN,
        description="提醒间隔分钟",
    )
    flower_type: FlowerType = Field(config.DEFAULT_FLOWER_TYPE, description="花朵主题")
    dnd_enabled: bool = Field(config.DEFAULT_DND_ENABLED, description="是否开启免打扰")
    dnd_start_time: Optional[str] = Field(config.DEFAULT_DND_START, description="免打扰开始 HH:MM")
    dnd_end_time: Optional[str] = Field(config.DEFAULT_DND_END, description="免打扰结束 HH:MM")
    created_at: Optional[datetime] = Field(None, description="创建时间")
    updated_at: Optional[datetime] = Field(None, description="更新时间")

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)

    @field_validator("dnd_start_time", "dnd_end_time")
    @classmethod
    def _check_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return format_time_of_day(parse_time_of_day(v))

    def to_reminder_settings(self) -> ReminderSettings:
        """提醒计算用的不可变快照。"""
        return ReminderSettings(
            interval_minutes=self.interval_min,
            dnd_enabled=self.dnd_enabled,
            dnd_start=self.dnd_start_time,
            dnd_end=self.dnd_end_time,
        )


def default_settings() -> UserSettings:
    return UserSettings()


def migrate_legacy(data: dict) -> dict:
    """旧版本地数据：缺少免打扰字段时补默认值；旧默认间隔 60 升级为 120。"""
    data = dict(data)
    if data.get("dnd_enabled") is None:
        data["dnd_enabled"] = config.DEFAULT_DND_ENABLED
    if "dnd_start_time" not in data:
        data["dnd_start_time"] = config.DEFAULT_DND_START
    if "dnd_end_time" not in data:
        data["dnd_end_time"] = config.DEFAULT_DND_END
    if data.get("interval_min") == config.LEGACY_INTERVAL_MIN:
        data["interval_min"] = config.DEFAULT_INTERVAL_MIN
    return data
