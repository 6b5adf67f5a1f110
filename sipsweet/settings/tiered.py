"""两级设置存储：本地 JSON + 远端。

- get：远端优先（成功后写回本地），远端不可用时读本地，本地也没有则写入默认设置。
- put：先写本地并打上 updated_at，再尝试写远端；远端失败记为「未同步」。
- try_sync：有未同步修改时推送本地；冲突按 updated_at 后写者胜。
"""
import sys
from datetime import datetime
from typing import Optional

from sipsweet.remote import NOT_CONFIGURED, RemoteStore
from sipsweet.settings.models import UserSettings, default_settings
from sipsweet.settings.store import LocalSettingsStore
from sipsweet.time_utils import local_now


def _log(msg: str) -> None:
    print(f"[SipSweet-设置] {msg}", file=sys.stderr, flush=True)


def _newer(a: UserSettings, b: UserSettings) -> bool:
    """a 是否比 b 新；没有 updated_at 的一方视为最旧。"""
    if a.updated_at is None:
        return False
    if b.updated_at is None:
        return True
    return a.updated_at > b.updated_at


class TieredSettingsStore:
    """本地 + 远端设置存储，对外只暴露 get / put / try_sync。"""

    def __init__(self, local: LocalSettingsStore, remote: Optional[RemoteStore] = None):
        self.local = local
        self.remote = remote or RemoteStore()

    @property
    def has_unsaved_changes(self) -> bool:
        return self.local.is_dirty()

    def get(self, now: Optional[datetime] = None) -> UserSettings:
        local = self.local.load()
        remote, err = self.remote.get_settings()
        if remote is not None:
            # 本地有未同步且更新的修改时保留本地
            if local is not None and self.local.is_dirty() and _newer(local, remote):
                return local
            self.local.save(remote)
            self.local.set_last_sync(now or local_now())
            return remote
        if err and err != NOT_CONFIGURED:
            _log(f"读取远端失败，使用本地设置: {err}")
        if local is not None:
            return local
        settings = default_settings()
        self.local.save(settings)
        return settings

    def put(self, settings: UserSettings, now: Optional[datetime] = None) -> UserSettings:
        """保存设置，返回最终生效的设置（远端成功时以远端返回为准）。"""
        now = now or local_now()
        settings = settings.model_copy(update={"updated_at": now, "created_at": settings.created_at or now})
        self.local.save(settings)
        saved, err = self.remote.put_settings(settings)
        if saved is None:
            self.local.set_dirty(True)
            if err and err != NOT_CONFIGURED:
                _log(f"写入远端失败，稍后同步: {err}")
            return settings
        self.local.save(saved)
        self.local.set_dirty(False)
        self.local.set_last_sync(now)
        return saved

    def try_sync(self, now: Optional[datetime] = None) -> bool:
        """推送未同步的本地修改。成功（或无需同步）返回 True。"""
        if not self.local.is_dirty():
            return True
        local = self.local.load()
        if local is None:
            self.local.set_dirty(False)
            return True
        now = now or local_now()
        remote, err = self.remote.get_settings()
        if err:
            return False
        if remote is not None and _newer(remote, local):
            _log("远端设置较新，覆盖本地")
            self.local.save(remote)
            self.local.set_dirty(False)
            self.local.set_last_sync(now)
            return True
        saved, err = self.remote.put_settings(local)
        if saved is None:
            return False
        self.local.save(saved)
        self.local.set_dirty(False)
        self.local.set_last_sync(now)
        return True
