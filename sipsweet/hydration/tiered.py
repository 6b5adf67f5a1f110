"""两级饮水记录：本地 JSON + 远端。

- today：远端优先，拉取结果连同本地未同步的记录写回当日文件；远端不可用时读本地。
- add：先写本地，再写远端；远端成功后以远端 ID 替换本地记录，失败则留待 try_sync。
- try_sync：把本地未同步的记录逐条推到远端。
"""
import sys
from datetime import datetime
from typing import List, Optional

from sipsweet.hydration.models import IntakeEvent
from sipsweet.hydration.store import IntakeLogStore
from sipsweet.remote import NOT_CONFIGURED, RemoteStore
from sipsweet.time_utils import align, local_now


def _log(msg: str) -> None:
    print(f"[SipSweet-记录] {msg}", file=sys.stderr, flush=True)


class TieredIntakeStore:
    """本地 + 远端饮水记录，对外暴露 today / add / log_sip / try_sync。"""

    def __init__(self, local: IntakeLogStore, remote: Optional[RemoteStore] = None):
        self.local = local
        self.remote = remote or RemoteStore()

    def today(self, now: Optional[datetime] = None) -> List[IntakeEvent]:
        now = now or local_now()
        day = now.date()
        remote, err = self.remote.list_intake(day)
        if remote is None:
            if err and err != NOT_CONFIGURED:
                _log(f"读取远端失败，使用本地记录: {err}")
            return self.local.today(now)
        # 离线时记下、尚未推上去的记录不能被远端结果覆盖掉
        unsynced = [e for e in self.local.list_for_date(day) if not e.synced]
        events = sorted(remote + unsynced, key=lambda e: e.timestamp)
        self.local.replace_day(day, events)
        return events

    def add(self, event: IntakeEvent, now: Optional[datetime] = None) -> IntakeEvent:
        """记录一口水，返回最终保存的记录（远端成功时带远端 ID）。"""
        now = now or local_now()
        saved = self.local.add(event, reference=now)
        day = align(saved.timestamp, now).date()
        remote, err = self.remote.add_intake(saved, day)
        if remote is None:
            if err and err != NOT_CONFIGURED:
                _log(f"写入远端失败，稍后同步: {err}")
            return saved
        return self.local.mark_synced(day, saved.id, remote)

    def log_sip(self, amount_ml: float, now: Optional[datetime] = None) -> IntakeEvent:
        now = now or local_now()
        return self.add(IntakeEvent(amount_ml=amount_ml, timestamp=now), now)

    def try_sync(self) -> bool:
        """推送本地未同步的记录。全部成功（或无需同步）返回 True。"""
        pending = self.local.pending()
        for day, event in pending:
            remote, err = self.remote.add_intake(event, day)
            if remote is None:
                if err != NOT_CONFIGURED:
                    _log(f"同步记录失败: {err}")
                return False
            self.local.mark_synced(day, event.id, remote)
        if pending:
            _log(f"已同步 {len(pending)} 条记录")
        return True
