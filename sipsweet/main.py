"""命令行入口：供外部定时任务调用（run），也可查看状态、记录饮水、修改设置。"""
import argparse
import json
import sys
from datetime import datetime
from typing import List, Optional

from sipsweet import __version__
from sipsweet.config import ensure_dirs
from sipsweet.hydration.models import IntakeEvent
from sipsweet.hydration.progress import (
    calculate_daily_progress,
    format_percentage,
    format_volume,
    greeting,
    parse_sip_amount,
    petals_completed,
)
from sipsweet.hydration.store import IntakeLogStore
from sipsweet.hydration.tiered import TieredIntakeStore
from sipsweet.notify.models import PushSubscription, SubscriptionKeys
from sipsweet.notify.push import PushSender
from sipsweet.notify.subscriptions import SubscriptionStore
from sipsweet.notify.messages import flower_emoji, flower_petals
from sipsweet.remote import RemoteStore
from sipsweet.settings.models import UserSettings
from sipsweet.settings.service import SettingsService
from sipsweet.settings.store import LocalSettingsStore
from sipsweet.settings.tiered import TieredSettingsStore
from sipsweet.time_utils import local_now
from sipsweet.trigger import ReminderTrigger, TriggerStateStore, authorize


def _print(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _on_off(value: str) -> bool:
    if value.lower() in ("on", "true", "1", "yes"):
        return True
    if value.lower() in ("off", "false", "0", "no"):
        return False
    raise argparse.ArgumentTypeError(f"应为 on/off: {value}")


def _sip_amount(value: str) -> float:
    try:
        return parse_sip_amount(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def progress_summary(user: UserSettings, events: List[IntakeEvent], now: Optional[datetime] = None) -> dict:
    """今日进度的展示数据；花瓣数随所选花型而定。"""
    now = now or local_now()
    progress = calculate_daily_progress(events, user.daily_goal_ml, reference=now)
    petals = flower_petals(user.flower_type)
    return {
        "greeting": f"{greeting(user.nickname, now)}! {flower_emoji(user.flower_type)}",
        "total": format_volume(progress.total_ml),
        "goal": format_volume(progress.goal_ml),
        "percentage": format_percentage(progress.percentage),
        "remaining": format_volume(progress.remaining_ml),
        "sips": len(progress.logs),
        "petals": f"{petals_completed(progress.percentage, petals)}/{petals}",
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sipsweet", description="喝水记录与定时提醒")
    parser.add_argument("--version", action="version", version=__version__)
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="定时任务调用：计算并在需要时推送")
    run.add_argument("--auth", default=None, help="Authorization 头，如 'Bearer <secret>'")
    sub.add_parser("status", help="查看提醒状态，不推送")
    sub.add_parser("progress", help="今日饮水进度")

    log = sub.add_parser("log", help="记录一次饮水")
    log.add_argument("amount_ml", type=_sip_amount, help="毫升数，或 small / regular / big")

    st = sub.add_parser("settings", help="查看或修改设置")
    st.add_argument("--interval", type=int, help="提醒间隔分钟 (15-480)")
    st.add_argument("--goal", type=int, help="每日目标 ml (500-5000)")
    st.add_argument("--nickname", choices=["Princess", "Babe", "Sweetie"])
    st.add_argument("--flower", choices=["rose", "tulip", "daisy"])
    st.add_argument("--dnd", type=_on_off, help="免打扰 on/off")
    st.add_argument("--dnd-start", help="免打扰开始 HH:MM")
    st.add_argument("--dnd-end", help="免打扰结束 HH:MM")
    st.add_argument("--reset", action="store_true", help="恢复默认设置")

    subscribe = sub.add_parser("subscribe", help="登记推送订阅")
    subscribe.add_argument("endpoint")
    subscribe.add_argument("p256dh")
    subscribe.add_argument("auth")
    subscribe.add_argument("--user-agent", default=None)

    unsubscribe = sub.add_parser("unsubscribe", help="停用推送订阅")
    unsubscribe.add_argument("endpoint")

    sub.add_parser("sync", help="把未同步的设置与饮水记录推到远端")
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    ensure_dirs()

    remote = RemoteStore()
    settings_store = TieredSettingsStore(LocalSettingsStore(), remote)
    service = SettingsService(settings_store)
    intake = TieredIntakeStore(IntakeLogStore(), remote)
    subscriptions = SubscriptionStore()

    if args.command == "run":
        if not authorize(args.auth):
            print("[SipSweet-触发] 未授权", file=sys.stderr, flush=True)
            return 2
        trigger = ReminderTrigger(
            settings_store, intake, subscriptions, PushSender(subscriptions=subscriptions), TriggerStateStore()
        )
        _print(trigger.run().to_wire())
        return 0

    if args.command == "status":
        trigger = ReminderTrigger(
            settings_store, intake, subscriptions, PushSender(subscriptions=subscriptions), TriggerStateStore()
        )
        _print(trigger.status())
        return 0

    if args.command == "progress":
        _print(progress_summary(service.load(), intake.today()))
        return 0

    if args.command == "log":
        try:
            event = intake.log_sip(args.amount_ml)
        except ValueError as e:
            print(f"[SipSweet-记录] 饮水量无效: {e}", file=sys.stderr, flush=True)
            return 1
        _print(event.model_dump(mode="json"))
        return 0

    if args.command == "settings":
        if args.reset:
            _print(service.reset_to_defaults().model_dump(mode="json"))
            return 0
        changes = {
            "interval_min": args.interval,
            "daily_goal_ml": args.goal,
            "nickname": args.nickname,
            "flower_type": args.flower,
            "dnd_enabled": args.dnd,
            "dnd_start_time": args.dnd_start,
            "dnd_end_time": args.dnd_end,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            _print(service.load().model_dump(mode="json"))
            return 0
        updated, err = service.update(**changes)
        if err:
            print(f"[SipSweet-设置] {err}", file=sys.stderr, flush=True)
            return 1
        _print(updated.model_dump(mode="json"))
        return 0

    if args.command == "subscribe":
        saved = subscriptions.save(
            PushSubscription(
                endpoint=args.endpoint,
                keys=SubscriptionKeys(p256dh=args.p256dh, auth=args.auth),
                user_agent=args.user_agent,
            )
        )
        _print(saved.model_dump(mode="json"))
        return 0

    if args.command == "unsubscribe":
        if not subscriptions.deactivate(args.endpoint):
            print("[SipSweet-推送] 订阅不存在", file=sys.stderr, flush=True)
            return 1
        return 0

    if args.command == "sync":
        settings_ok = settings_store.try_sync()
        intake_ok = intake.try_sync()
        _print({"settings": settings_ok, "intake": intake_ok})
        return 0 if settings_ok and intake_ok else 1

    return 1


if __name__ == "__main__":
    sys.exit(main())
