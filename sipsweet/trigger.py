"""定时触发：外部定时任务周期调用，按计算结论决定是否推送。

同一时段重复调用不会重复推送：成功推送后记录 last_sent_at，
下次调用时距上次推送不足一个间隔则不再推送。
"""
import hmac
import json
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from sipsweet.config import CRON_SECRET, STATE_DIR, ensure_dirs
from sipsweet.hydration.tiered import TieredIntakeStore
from sipsweet.notify.messages import build_payload
from sipsweet.notify.models import DispatchResult
from sipsweet.notify.push import PushSender
from sipsweet.notify.subscriptions import SubscriptionStore
from sipsweet.reminders.dnd import dnd_status_message
from sipsweet.reminders.evaluator import evaluate, last_sip, next_eligible_instant
from sipsweet.reminders.models import ReminderDecision
from sipsweet.settings.models import UserSettings
from sipsweet.settings.tiered import TieredSettingsStore
from sipsweet.time_utils import align, local_now


def _log(msg: str) -> None:
    print(f"[SipSweet-触发] {msg}", file=sys.stderr, flush=True)


class TriggerStateStore:
    """记录上次成功推送的时刻。"""
    _filename = "trigger.json"

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or STATE_DIR
        if base_dir is None:
            ensure_dirs()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self) -> Path:
        return self.base_dir / self._filename

    def last_sent_at(self) -> Optional[datetime]:
        if not self._path().exists():
            return None
        with open(self._path(), "r", encoding="utf-8") as f:
            raw = json.load(f).get("last_sent_at")
        return datetime.fromisoformat(raw) if raw else None

    def set_last_sent_at(self, moment: datetime) -> None:
        with open(self._path(), "w", encoding="utf-8") as f:
            json.dump({"last_sent_at": moment.isoformat()}, f, indent=2)


class TriggerResult(BaseModel):
    """一次触发的结果。"""
    decision: ReminderDecision
    sent: bool = False
    message: str = ""
    last_sip_at: Optional[datetime] = None
    last_sent_at: Optional[datetime] = None
    dispatch: Optional[DispatchResult] = Field(None, description="实际推送时的汇总")

    def to_wire(self) -> dict:
        out = {
            "sent": self.sent,
            "message": self.message,
            "decision": self.decision.to_wire(),
            "last_sip_at": self.last_sip_at.isoformat() if self.last_sip_at else None,
            "last_sent_at": self.last_sent_at.isoformat() if self.last_sent_at else None,
        }
        if self.dispatch is not None:
            out["dispatch"] = self.dispatch.model_dump(mode="json")
        return out


def authorize(header: Optional[str], secret: Optional[str] = None) -> bool:
    """校验定时任务的 Authorization: Bearer <secret>；未配置密钥时一律拒绝。"""
    secret = secret if secret is not None else CRON_SECRET
    if not secret or not header:
        return False
    return hmac.compare_digest(header.encode("utf-8"), f"Bearer {secret}".encode("utf-8"))


class ReminderTrigger:
    """把各存储与推送组装起来，供定时任务调用。"""

    def __init__(
        self,
        settings_store: TieredSettingsStore,
        intake_store: TieredIntakeStore,
        subscriptions: SubscriptionStore,
        sender: PushSender,
        state: TriggerStateStore,
    ):
        self.settings_store = settings_store
        self.intake_store = intake_store
        self.subscriptions = subscriptions
        self.sender = sender
        self.state = state

    def _decide(
        self, user: UserSettings, now: datetime
    ) -> tuple[ReminderDecision, Optional[datetime], Optional[datetime]]:
        settings = user.to_reminder_settings()
        events = self.intake_store.today(now)
        decision = evaluate(settings, events, now)
        sip = last_sip(events, now)
        sip_at = align(sip.timestamp, now) if sip else None

        last_sent = self.state.last_sent_at()
        if last_sent is not None:
            last_sent = align(last_sent, now)
            interval = timedelta(minutes=settings.interval_minutes)
            # 上次推送晚于上次喝水且不足一个间隔：本次不再推送
            if (sip_at is None or last_sent > sip_at) and now - last_sent < interval:
                decision = ReminderDecision(
                    should_send=False,
                    next_eligible_instant=next_eligible_instant(settings, last_sent, now),
                    blocked_by_dnd=False,
                )
        return decision, sip_at, last_sent

    def status(self, now: Optional[datetime] = None) -> dict:
        """只读查看当前提醒状态，不推送。"""
        now = now or local_now()
        user = self.settings_store.get(now)
        decision, sip_at, last_sent = self._decide(user, now)
        return {
            "should_send": decision.should_send,
            "blocked_by_dnd": decision.blocked_by_dnd,
            "next_eligible_instant": decision.next_eligible_instant.isoformat(),
            "dnd_status": dnd_status_message(user.to_reminder_settings(), now),
            "last_sip_at": sip_at.isoformat() if sip_at else None,
            "last_sent_at": last_sent.isoformat() if last_sent else None,
            "interval_minutes": user.interval_min,
            "dnd": {
                "enabled": user.dnd_enabled,
                "start": user.dnd_start_time,
                "end": user.dnd_end_time,
            },
        }

    def run(self, now: Optional[datetime] = None) -> TriggerResult:
        """计算并在需要时推送；至少一个订阅投递成功才记录 last_sent_at。"""
        now = now or local_now()
        user = self.settings_store.get(now)
        decision, sip_at, last_sent = self._decide(user, now)
        result = TriggerResult(decision=decision, last_sip_at=sip_at, last_sent_at=last_sent)

        if not decision.should_send:
            result.message = "免打扰中，暂不提醒" if decision.blocked_by_dnd else "未到提醒时间"
            _log(f"{result.message}，下次 {decision.next_eligible_instant.isoformat()}")
            return result

        subs = self.subscriptions.list_active()
        if not subs:
            result.message = "没有有效的推送订阅"
            _log(result.message)
            return result

        payload = build_payload(user, now)
        dispatch = self.sender.dispatch(subs, payload)
        result.dispatch = dispatch
        if dispatch.successful > 0:
            self.state.set_last_sent_at(now)
            result.sent = True
            result.last_sent_at = now
            result.message = f"已推送: 成功 {dispatch.successful}，失败 {dispatch.failed}"
        else:
            result.message = "推送全部失败"
        _log(result.message)
        return result
