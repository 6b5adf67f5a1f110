"""用户设置、本地/远端两级存储测试。"""
import json
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import pytest

from sipsweet.remote import NOT_CONFIGURED, RemoteStore
from sipsweet.settings.models import UserSettings, default_settings, migrate_legacy
from sipsweet.settings.service import SettingsService
from sipsweet.settings.store import LocalSettingsStore
from sipsweet.settings.tiered import TieredSettingsStore

TZ = timezone(timedelta(hours=8))


def at(hour: int, minute: int = 0, day: int = 19) -> datetime:
    return datetime(2026, 10, day, hour, minute, tzinfo=TZ)


class FakeRemote:
    """内存版远端；online=False 时模拟网络故障。"""

    def __init__(self, settings: Optional[UserSettings] = None, online: bool = True):
        self.settings = settings
        self.online = online
        self.puts = 0

    def get_settings(self):
        if not self.online:
            return None, "请求失败: offline"
        return self.settings, None

    def put_settings(self, settings: UserSettings):
        if not self.online:
            return None, "请求失败: offline"
        self.puts += 1
        self.settings = settings
        return settings, None


def test_defaults() -> None:
    s = default_settings()
    assert s.nickname == "Princess"
    assert s.flower_type == "rose"
    assert s.daily_goal_ml == 2000
    assert s.interval_min == 120
    assert s.dnd_enabled is True
    assert (s.dnd_start_time, s.dnd_end_time) == ("02:00", "11:00")


def test_validation_ranges() -> None:
    with pytest.raises(ValueError):
        UserSettings(interval_min=14)
    with pytest.raises(ValueError):
        UserSettings(daily_goal_ml=6000)
    with pytest.raises(ValueError):
        UserSettings(nickname="Boss")
    with pytest.raises(ValueError):
        UserSettings(dnd_start_time="7pm")
    assert UserSettings(interval_min=60).interval_min == 60


def test_to_reminder_settings() -> None:
    s = UserSettings(interval_min=90, dnd_enabled=True, dnd_start_time="22:00", dnd_end_time="6:30")
    snap = s.to_reminder_settings()
    assert snap.interval_minutes == 90
    assert snap.dnd_enabled is True
    assert (snap.dnd_start, snap.dnd_end) == ("22:00", "06:30")


def test_migrate_legacy() -> None:
    data = migrate_legacy({"nickname": "Babe", "interval_min": 60, "daily_goal_ml": 1800, "flower_type": "tulip"})
    assert data["interval_min"] == 120
    assert data["dnd_enabled"] is True
    assert data["dnd_start_time"] == "02:00"
    kept = migrate_legacy({"interval_min": 90, "dnd_enabled": False, "dnd_start_time": None, "dnd_end_time": None})
    assert kept["interval_min"] == 90
    assert kept["dnd_enabled"] is False
    assert kept["dnd_start_time"] is None


def test_local_store_save_load_and_legacy_file() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = LocalSettingsStore(base_dir=Path(tmp))
        assert store.load() is None
        store.save(UserSettings(nickname="Sweetie", interval_min=45))
        loaded = store.load()
        assert loaded is not None
        assert loaded.nickname == "Sweetie"
        assert loaded.interval_min == 45

        with open(Path(tmp) / "settings.json", "w", encoding="utf-8") as f:
            json.dump({"nickname": "Babe", "daily_goal_ml": 2000, "interval_min": 60, "flower_type": "daisy"}, f)
        legacy = store.load()
        assert legacy.interval_min == 120
        assert legacy.dnd_enabled is True

        store.clear()
        assert store.load() is None


def test_local_only_interval_of_sixty_survives_reload() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        store = TieredSettingsStore(local, RemoteStore(base_url=""))
        service = SettingsService(store)
        updated, err = service.update(at(9), interval_min=60)
        assert err is None
        assert updated.interval_min == 60
        assert store.get(at(9, 1)).interval_min == 60
        assert store.get(at(9, 2)).to_reminder_settings().interval_minutes == 60
        with open(Path(tmp) / "settings.json", "r", encoding="utf-8") as f:
            assert json.load(f)["schema_version"] == 2


def test_legacy_file_is_upgraded_once() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        with open(Path(tmp) / "settings.json", "w", encoding="utf-8") as f:
            json.dump({"nickname": "Babe", "interval_min": 60}, f)
        upgraded = local.load()
        assert upgraded.interval_min == 120
        local.save(upgraded.model_copy(update={"interval_min": 60}))
        assert local.load().interval_min == 60


def test_local_store_needs_sync() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        store = LocalSettingsStore(base_dir=Path(tmp))
        assert store.needs_sync(at(12)) is True
        store.set_last_sync(at(11, 30))
        assert store.needs_sync(at(12)) is False
        assert store.needs_sync(at(12, 31)) is True


def test_tiered_get_defaults_when_nothing_stored() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        store = TieredSettingsStore(local, RemoteStore(base_url=""))
        s = store.get(at(9))
        assert s == default_settings()
        assert local.load() is not None


def test_tiered_get_prefers_remote_and_writes_through() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        local.save(UserSettings(nickname="Babe"))
        store = TieredSettingsStore(local, FakeRemote(UserSettings(nickname="Sweetie")))
        assert store.get(at(9)).nickname == "Sweetie"
        assert local.load().nickname == "Sweetie"
        assert local.last_sync() == at(9)


def test_tiered_get_falls_back_to_local_when_offline() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        local.save(UserSettings(nickname="Babe"))
        store = TieredSettingsStore(local, FakeRemote(UserSettings(nickname="Sweetie"), online=False))
        assert store.get(at(9)).nickname == "Babe"


def test_tiered_put_offline_marks_dirty_then_syncs() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        remote = FakeRemote(online=False)
        store = TieredSettingsStore(local, remote)
        saved = store.put(UserSettings(interval_min=45), at(9))
        assert saved.updated_at == at(9)
        assert local.load().interval_min == 45
        assert store.has_unsaved_changes is True
        assert store.try_sync(at(9, 5)) is False

        remote.online = True
        assert store.try_sync(at(9, 10)) is True
        assert store.has_unsaved_changes is False
        assert remote.settings.interval_min == 45
        assert store.try_sync(at(9, 15)) is True
        assert remote.puts == 1


def test_tiered_try_sync_remote_newer_wins() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        remote = FakeRemote(online=False)
        store = TieredSettingsStore(local, remote)
        store.put(UserSettings(interval_min=45), at(9))
        remote.settings = UserSettings(interval_min=200, updated_at=at(10))
        remote.online = True
        assert store.try_sync(at(11)) is True
        assert local.load().interval_min == 200
        assert remote.puts == 0


def test_tiered_get_keeps_newer_dirty_local() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        remote = FakeRemote(UserSettings(interval_min=200, updated_at=at(8)), online=False)
        store = TieredSettingsStore(local, remote)
        store.put(UserSettings(interval_min=45), at(9))
        remote.online = True
        assert store.get(at(9, 30)).interval_min == 45


def test_service_update_flow() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        local = LocalSettingsStore(base_dir=Path(tmp))
        remote = FakeRemote()
        service = SettingsService(TieredSettingsStore(local, remote))
        updated, err = service.update_dnd(enabled=True, start="22:00", end="06:00", now=at(9))
        assert err is None
        assert (updated.dnd_start_time, updated.dnd_end_time) == ("22:00", "06:00")
        assert remote.settings.dnd_start_time == "22:00"

        updated, err = service.update_interval(60, now=at(9, 5))
        assert err is None
        assert updated.interval_min == 60
        assert service.load(at(9, 6)).interval_min == 60

        bad, err = service.update_interval(5, now=at(9, 10))
        assert bad is None
        assert err
        assert local.load().interval_min == 60

        reset = service.reset_to_defaults(at(9, 20))
        assert reset.interval_min == 120
        assert reset.dnd_start_time == "02:00"


def test_unconfigured_remote_returns_error() -> None:
    remote = RemoteStore(base_url="")
    assert remote.configured is False
    assert remote.get_settings() == (None, NOT_CONFIGURED)
    assert remote.put_settings(default_settings()) == (None, NOT_CONFIGURED)
