"""推送订阅本地存储。"""
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from sipsweet.config import PUSH_DIR, ensure_dirs
from sipsweet.notify.models import PushSubscription
from sipsweet.time_utils import utc_iso


class SubscriptionStore:
    """按 endpoint 去重保存订阅；失效订阅保留但标记 is_active=False。"""
    _filename = "subscriptions.json"

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or PUSH_DIR
        if base_dir is None:
            ensure_dirs()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self) -> Path:
        return self.base_dir / self._filename

    def _load(self) -> List[PushSubscription]:
        if not self._path().exists():
            return []
        with open(self._path(), "r", encoding="utf-8") as f:
            data = json.load(f)
        return [PushSubscription.model_validate(s) for s in data.get("subscriptions", [])]

    def _save(self, subscriptions: List[PushSubscription]) -> None:
        data = {"subscriptions": [s.model_dump(mode="json") for s in subscriptions]}
        with open(self._path(), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def save(self, subscription: PushSubscription) -> PushSubscription:
        """保存（或重新激活）订阅。"""
        subs = self._load()
        existing = next((s for s in subs if s.endpoint == subscription.endpoint), None)
        created_at = (existing.created_at if existing else None) or subscription.created_at
        subscription = subscription.model_copy(
            update={
                "is_active": True,
                "created_at": created_at or utc_iso(datetime.now(timezone.utc)),
            }
        )
        # 去重：同 endpoint 只保留一条
        subs = [s for s in subs if s.endpoint != subscription.endpoint]
        subs.append(subscription)
        self._save(subs)
        return subscription

    def deactivate(self, endpoint: str) -> bool:
        """标记订阅失效；不存在返回 False。"""
        subs = self._load()
        found = False
        for i, s in enumerate(subs):
            if s.endpoint == endpoint:
                subs[i] = s.model_copy(update={"is_active": False})
                found = True
        if found:
            self._save(subs)
        return found

    def list_active(self) -> List[PushSubscription]:
        return [s for s in self._load() if s.is_active]
