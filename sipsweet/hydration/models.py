"""饮水记录与每日进度数据模型。"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from sipsweet.config import MAX_SIP_ML


class IntakeEvent(BaseModel):
    """一次饮水记录。"""
    amount_ml: float = Field(..., gt=0, le=MAX_SIP_ML, description="饮水量 ml")
    timestamp: datetime = Field(..., description="记录时刻 ISO-8601")
    id: Optional[str] = Field(None, description="记录 ID")
    synced: bool = Field(False, description="是否已写入远端")

    model_config = ConfigDict(frozen=True)


class DailyProgress(BaseModel):
    """某一天的饮水进度。"""
    day: date = Field(..., description="日期")
    total_ml: float = Field(0, ge=0, description="当日总量")
    goal_ml: int = Field(..., gt=0, description="每日目标")
    percentage: float = Field(0, ge=0, le=100, description="完成百分比，封顶 100")
    logs: List[IntakeEvent] = Field(default_factory=list, description="当日记录")

    @property
    def goal_reached(self) -> bool:
        return self.percentage >= 100

    @property
    def remaining_ml(self) -> float:
        return max(0, self.goal_ml - self.total_ml)

    @property
    def average_sip_ml(self) -> Optional[float]:
        if not self.logs:
            return None
        return round(self.total_ml / len(self.logs))
