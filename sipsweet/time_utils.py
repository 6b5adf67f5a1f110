"""时间工具：HH:MM 解析、本地时区对齐。"""
import re
from datetime import datetime
from typing import Optional

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: str) -> int:
    """解析 24 小时制 HH:MM，返回午夜起的分钟数 [0, 1440)；格式错误抛 ValueError。"""
    m = _HHMM.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValueError(f"时间格式应为 HH:MM: {value!r}")
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"时间超出范围: {value!r}")
    return hour * 60 + minute


def format_time_of_day(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def minutes_of(moment: datetime) -> int:
    """时刻的「午夜起分钟数」。"""
    return moment.hour * 60 + moment.minute


def local_now() -> datetime:
    return datetime.now().astimezone()


def align(moment: datetime, reference: Optional[datetime]) -> datetime:
    """把 moment 换算到 reference 所在时区，便于按同一本地日历比较。

    无时区的时刻视为与 reference 同一时区。
    """
    if reference is None:
        return moment
    ref_tz = reference.tzinfo
    if ref_tz is None:
        if moment.tzinfo is None:
            return moment
        return moment.astimezone().replace(tzinfo=None)
    if moment.tzinfo is None:
        return moment.replace(tzinfo=ref_tz)
    return moment.astimezone(ref_tz)


def utc_iso(moment: datetime) -> str:
    """ISO 字符串，UTC 以 Z 结尾（与档案时间戳写法一致）。"""
    return moment.isoformat().replace("+00:00", "Z")
