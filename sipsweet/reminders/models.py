"""提醒计算的输入快照与输出结果。"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sipsweet.config import MAX_INTERVAL_MIN, MIN_INTERVAL_MIN
from sipsweet.time_utils import format_time_of_day, parse_time_of_day


class ReminderSettings(BaseModel):
    """单次计算使用的提醒设置快照（不可变）。

    开启免打扰但缺少起止时间是允许的：计算时按未开启处理，不会吞掉提醒。
    """
    interval_minutes: int = Field(..., ge=MIN_INTERVAL_MIN, le=MAX_INTERVAL_MIN, description="提醒间隔分钟")
    dnd_enabled: bool = Field(False, description="是否开启免打扰")
    dnd_start: Optional[str] = Field(None, description="免打扰开始 HH:MM")
    dnd_end: Optional[str] = Field(None, description="免打扰结束 HH:MM")

    model_config = ConfigDict(frozen=True)

    @field_validator("dnd_start", "dnd_end")
    @classmethod
    def _check_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        return format_time_of_day(parse_time_of_day(v))


class ReminderDecision(BaseModel):
    """一次计算的结论，不做持久化。"""
    should_send: bool = Field(..., description="此刻是否应推送")
    next_eligible_instant: datetime = Field(..., description="下次可提醒时刻")
    blocked_by_dnd: bool = Field(..., description="间隔已到但被免打扰拦截")

    model_config = ConfigDict(frozen=True)

    def to_wire(self) -> dict:
        """对外输出：时刻为 ISO-8601 字符串。"""
        return {
            "should_send": self.should_send,
            "next_eligible_instant": self.next_eligible_instant.isoformat(),
            "blocked_by_dnd": self.blocked_by_dnd,
        }
