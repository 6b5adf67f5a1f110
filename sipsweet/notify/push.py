"""推送发送：把推送内容交给推送网关，逐个订阅投递。

网关接口：POST {gateway}，JSON {"subscription": {...}, "payload": {...}}。
网关转发推送服务的状态码；404/410 表示订阅已失效，随即停用该订阅。
"""
import sys
from typing import Iterable, Optional

import requests

from sipsweet.config import HTTP_TIMEOUT, PUSH_GATEWAY_URL
from sipsweet.notify.models import DeliveryResult, DispatchResult, NotificationPayload, PushSubscription
from sipsweet.notify.subscriptions import SubscriptionStore

GONE_STATUSES = (404, 410)


def _log(msg: str) -> None:
    print(f"[SipSweet-推送] {msg}", file=sys.stderr, flush=True)


class PushSender:
    """通过推送网关发送提醒。"""

    def __init__(
        self,
        gateway_url: Optional[str] = None,
        subscriptions: Optional[SubscriptionStore] = None,
        session: Optional[requests.Session] = None,
    ):
        self.gateway_url = gateway_url if gateway_url is not None else PUSH_GATEWAY_URL
        self.subscriptions = subscriptions
        self.session = session or requests.Session()

    def send_one(self, subscription: PushSubscription, payload: NotificationPayload) -> tuple[bool, Optional[str]]:
        """投递到单个订阅，返回 (是否成功, 错误信息)。"""
        if not self.gateway_url:
            return False, "未配置推送网关"
        body = {
            "subscription": subscription.model_dump(mode="json", include={"endpoint", "keys"}),
            "payload": payload.model_dump(mode="json", exclude_none=True),
        }
        try:
            r = self.session.post(self.gateway_url, json=body, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            return False, f"请求失败: {e}"
        if r.status_code in GONE_STATUSES:
            if self.subscriptions is not None:
                self.subscriptions.deactivate(subscription.endpoint)
            _log(f"订阅已失效，停用: {subscription.endpoint}")
            return False, f"HTTP {r.status_code}: 订阅已失效"
        if r.status_code >= 400:
            return False, f"HTTP {r.status_code}: {r.text[:200]}"
        return True, None

    def dispatch(self, subscriptions: Iterable[PushSubscription], payload: NotificationPayload) -> DispatchResult:
        """群发给所有订阅并汇总结果。"""
        result = DispatchResult()
        for sub in subscriptions:
            ok, err = self.send_one(sub, payload)
            result.details.append(DeliveryResult(endpoint=sub.endpoint, success=ok, error=err))
            result.total += 1
            if ok:
                result.successful += 1
            else:
                result.failed += 1
        _log(f"推送完成: 成功 {result.successful}，失败 {result.failed}")
        return result
