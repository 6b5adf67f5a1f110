"""设置更新流程：加载 → 修改 → 保存 → 确认。

设置是显式传递的值，不存在进程级的「当前设置」。
"""
from datetime import datetime
from typing import Optional

from pydantic import ValidationError

from sipsweet.settings.models import UserSettings, default_settings
from sipsweet.settings.tiered import TieredSettingsStore


class SettingsService:
    """对 TieredSettingsStore 的薄封装，提供按字段更新。"""

    def __init__(self, store: TieredSettingsStore):
        self.store = store

    def load(self, now: Optional[datetime] = None) -> UserSettings:
        return self.store.get(now)

    def update(self, now: Optional[datetime] = None, **changes) -> tuple[Optional[UserSettings], Optional[str]]:
        """更新部分字段。校验失败返回 (None, 错误信息)，不写入任何存储。"""
        current = self.store.get(now)
        data = current.model_dump()
        data.update(changes)
        try:
            updated = UserSettings.model_validate(data)
        except ValidationError as e:
            return None, f"设置无效: {e.errors()[0].get('msg', e)}"
        return self.store.put(updated, now), None

    def update_dnd(
        self,
        enabled: Optional[bool] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[Optional[UserSettings], Optional[str]]:
        changes = {}
        if enabled is not None:
            changes["dnd_enabled"] = enabled
        if start is not None:
            changes["dnd_start_time"] = start
        if end is not None:
            changes["dnd_end_time"] = end
        return self.update(now, **changes)

    def update_interval(self, minutes: int, now: Optional[datetime] = None) -> tuple[Optional[UserSettings], Optional[str]]:
        return self.update(now, interval_min=minutes)

    def update_daily_goal(self, goal_ml: int, now: Optional[datetime] = None) -> tuple[Optional[UserSettings], Optional[str]]:
        return self.update(now, daily_goal_ml=goal_ml)

    def reset_to_defaults(self, now: Optional[datetime] = None) -> UserSettings:
        current = self.store.get(now)
        fresh = default_settings().model_copy(update={"id": current.id, "created_at": current.created_at})
        return self.store.put(fresh, now)
