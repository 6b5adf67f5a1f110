"""用户设置：模型与本地存储。两级存储见 sipsweet.settings.tiered，更新流程见 sipsweet.settings.service。"""
from sipsweet.settings.models import FlowerType, Nickname, UserSettings, default_settings
from sipsweet.settings.store import LocalSettingsStore

__all__ = [
    "FlowerType",
    "LocalSettingsStore",
    "Nickname",
    "UserSettings",
    "default_settings",
]
