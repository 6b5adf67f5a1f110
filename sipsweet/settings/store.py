"""用户设置本地存储。"""
import json
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from sipsweet.config import SETTINGS_DIR, SETTINGS_SCHEMA_VERSION, SYNC_MAX_AGE_MINUTES, ensure_dirs
from sipsweet.settings.models import UserSettings, migrate_legacy
from sipsweet.time_utils import local_now


class LocalSettingsStore:
    """设置存储（JSON 文件），另记录上次同步时间与是否有未同步修改。"""
    _settings_file = "settings.json"
    _sync_file = "sync.json"

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or SETTINGS_DIR
        if base_dir is None:
            ensure_dirs()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _settings_path(self) -> Path:
        return self.base_dir / self._settings_file

    def _sync_path(self) -> Path:
        return self.base_dir / self._sync_file

    def load(self) -> Optional[UserSettings]:
        """加载本地设置；未带 schema_version 的旧版数据在此迁移。"""
        path = self._settings_path()
        if not path.exists():
            return None
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if data.get("schema_version") is None:
            data = migrate_legacy(data)
        return UserSettings.model_validate(data)

    def save(self, settings: UserSettings) -> None:
        """写入本地设置并标记 schema_version，之后加载不再迁移。"""
        data = settings.model_dump(mode="json")
        data["schema_version"] = SETTINGS_SCHEMA_VERSION
        with open(self._settings_path(), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _load_sync(self) -> dict:
        if not self._sync_path().exists():
            return {}
        with open(self._sync_path(), "r", encoding="utf-8") as f:
            return json.load(f)

    def _save_sync(self, data: dict) -> None:
        with open(self._sync_path(), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def last_sync(self) -> Optional[datetime]:
        raw = self._load_sync().get("last_sync")
        return datetime.fromisoformat(raw) if raw else None

    def set_last_sync(self, moment: datetime) -> None:
        data = self._load_sync()
        data["last_sync"] = moment.isoformat()
        self._save_sync(data)

    def is_dirty(self) -> bool:
        """本地是否有尚未推到远端的修改。"""
        return bool(self._load_sync().get("dirty"))

    def set_dirty(self, dirty: bool) -> None:
        data = self._load_sync()
        data["dirty"] = dirty
        self._save_sync(data)

    def needs_sync(self, now: Optional[datetime] = None) -> bool:
        """从未同步，或上次同步已超过 SYNC_MAX_AGE_MINUTES。"""
        last = self.last_sync()
        if last is None:
            return True
        now = now or local_now()
        return last < now - timedelta(minutes=SYNC_MAX_AGE_MINUTES)

    def clear(self) -> None:
        """清除本地设置与同步记录。"""
        for path in (self._settings_path(), self._sync_path()):
            if path.exists():
                path.unlink()
