"""喝水提醒全局配置与路径。"""
import os
from pathlib import Path

# 项目根目录（sipsweet 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
# 数据目录：设置、饮水记录、推送订阅、触发状态
DATA_DIR = Path(os.environ.get("SIPSWEET_DATA_DIR", "").strip() or ROOT_DIR / "data")
SETTINGS_DIR = DATA_DIR / "settings"
INTAKE_DIR = DATA_DIR / "intake"
PUSH_DIR = DATA_DIR / "push"  # 推送订阅
STATE_DIR = DATA_DIR / "state"  # 上次推送时间等

# 默认设置
DEFAULT_NICKNAME = "Princess"
DEFAULT_FLOWER_TYPE = "rose"
DEFAULT_DAILY_GOAL_ML = 2000
DEFAULT_INTERVAL_MIN = 120  # 2 小时
LEGACY_INTERVAL_MIN = 60  # 旧版默认值，仅对未标记 schema_version 的本地数据升级为 DEFAULT_INTERVAL_MIN
SETTINGS_SCHEMA_VERSION = 2
DEFAULT_DND_ENABLED = True
DEFAULT_DND_START = "02:00"
DEFAULT_DND_END = "11:00"

# 校验范围
MIN_INTERVAL_MIN = 15
MAX_INTERVAL_MIN = 480  # 8 小时
MIN_DAILY_GOAL_ML = 500
MAX_DAILY_GOAL_ML = 5000
MAX_SIP_ML = 2000

# 快捷记录
SIP_AMOUNTS = (
    ("Small Sip", 150, "💧"),
    ("Regular Sip", 250, "🥤"),
    ("Big Gulp", 400, "🚰"),
)

# 同步：超过该分钟数未同步视为需要同步
SYNC_MAX_AGE_MINUTES = 60

# 远端存储与推送网关（可选，未配置时仅使用本地）
REMOTE_URL = os.environ.get("SIPSWEET_REMOTE_URL", "").strip()
REMOTE_KEY = os.environ.get("SIPSWEET_REMOTE_KEY", "").strip()
PUSH_GATEWAY_URL = os.environ.get("SIPSWEET_PUSH_GATEWAY", "").strip()
CRON_SECRET = os.environ.get("SIPSWEET_CRON_SECRET", "").strip()
HTTP_TIMEOUT = 15


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, SETTINGS_DIR, INTAKE_DIR, PUSH_DIR, STATE_DIR):
        d.mkdir(parents=True, exist_ok=True)
