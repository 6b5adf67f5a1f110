"""饮水记录本地存储（JSON 文件，按日期分文件）。"""
import json
import uuid
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from sipsweet.config import INTAKE_DIR, ensure_dirs
from sipsweet.hydration.models import IntakeEvent
from sipsweet.time_utils import align, local_now


class IntakeLogStore:
    """饮水记录：追加、按日查询。日期以记录时刻的本地日历为准。"""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or INTAKE_DIR
        if base_dir is None:
            ensure_dirs()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _day_path(self, day: date) -> Path:
        return self.base_dir / f"{day.isoformat()}.json"

    def _load_day(self, day: date) -> List[IntakeEvent]:
        path = self._day_path(day)
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return [IntakeEvent.model_validate(item) for item in data.get("logs", [])]

    def _save_day(self, day: date, events: List[IntakeEvent]) -> None:
        data = {"logs": [e.model_dump(mode="json") for e in events]}
        with open(self._day_path(day), "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def add(self, event: IntakeEvent, reference: Optional[datetime] = None) -> IntakeEvent:
        """追加一条记录，按时间排序写回当日文件；无 ID 时自动生成。"""
        if not event.id:
            event = event.model_copy(update={"id": uuid.uuid4().hex[:12]})
        day = align(event.timestamp, reference or local_now()).date()
        events = self._load_day(day)
        events = [e for e in events if e.id != event.id]
        events.append(event)
        events.sort(key=lambda e: e.timestamp)
        self._save_day(day, events)
        return event

    def log_sip(self, amount_ml: float, now: Optional[datetime] = None) -> IntakeEvent:
        """以当前时刻记录一口水。"""
        now = now or local_now()
        return self.add(IntakeEvent(amount_ml=amount_ml, timestamp=now), reference=now)

    def list_for_date(self, day: date) -> List[IntakeEvent]:
        """某日全部记录（按时间顺序）。"""
        return self._load_day(day)

    def today(self, now: Optional[datetime] = None) -> List[IntakeEvent]:
        now = now or local_now()
        return self.list_for_date(now.date())

    def list_all(self) -> List[IntakeEvent]:
        out: List[IntakeEvent] = []
        for path in sorted(self.base_dir.glob("*.json")):
            try:
                day = date.fromisoformat(path.stem)
            except ValueError:
                continue
            out.extend(self._load_day(day))
        return out

    def replace_day(self, day: date, events: List[IntakeEvent]) -> None:
        """整日覆盖（远端同步拉取时使用）。"""
        self._save_day(day, sorted(events, key=lambda e: e.timestamp))

    def pending(self) -> List[tuple[date, IntakeEvent]]:
        """尚未写入远端的记录及其所在日期。"""
        out = []
        for path in sorted(self.base_dir.glob("*.json")):
            try:
                day = date.fromisoformat(path.stem)
            except ValueError:
                continue
            out.extend((day, e) for e in self._load_day(day) if not e.synced)
        return out

    def mark_synced(self, day: date, local_id: str, remote: IntakeEvent) -> IntakeEvent:
        """以远端返回的记录（远端 ID）替换本地同一条记录。"""
        synced = remote.model_copy(update={"synced": True})
        events = [e for e in self._load_day(day) if e.id != local_id and e.id != synced.id]
        events.append(synced)
        events.sort(key=lambda e: e.timestamp)
        self._save_day(day, events)
        return synced
