"""远端存储客户端（PostgREST 风格 REST 接口）：设置与饮水记录。

表：
- user_settings：单行用户设置
- intake_logs：amount_ml / logged_at / date

每个方法返回 (结果, None) 成功，或 (None, 错误信息) 失败，不抛异常。
"""
import sys
from datetime import date
from typing import Any, List, Optional

import requests

from sipsweet.config import HTTP_TIMEOUT, REMOTE_KEY, REMOTE_URL
from sipsweet.hydration.models import IntakeEvent
from sipsweet.settings.models import UserSettings
from sipsweet.time_utils import utc_iso

NOT_CONFIGURED = "未配置远端"


def _log(msg: str) -> None:
    print(f"[SipSweet-远端] {msg}", file=sys.stderr, flush=True)


class RemoteStore:
    """远端存储：未配置地址时所有调用直接返回 NOT_CONFIGURED。"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url if base_url is not None else REMOTE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else REMOTE_KEY
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json", "Prefer": "return=representation"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _request(
        self,
        method: str,
        table: str,
        params: Optional[dict] = None,
        body: Any = None,
        extra_headers: Optional[dict] = None,
    ) -> tuple[Optional[Any], Optional[str]]:
        if not self.configured:
            return None, NOT_CONFIGURED
        url = f"{self.base_url}/{table}"
        headers = self._headers()
        if extra_headers:
            headers.update(extra_headers)
        try:
            r = self.session.request(
                method, url, params=params, json=body, headers=headers, timeout=HTTP_TIMEOUT
            )
        except requests.RequestException as e:
            err = f"请求失败: {e}"
            _log(err)
            return None, err
        if r.status_code >= 400:
            err = f"HTTP {r.status_code}: {r.text[:200]}"
            _log(f"{method} {table} {err}")
            return None, err
        if not r.content:
            return [], None
        try:
            return r.json(), None
        except ValueError:
            err = f"响应非 JSON: {r.text[:200]}"
            _log(err)
            return None, err

    def get_settings(self) -> tuple[Optional[UserSettings], Optional[str]]:
        """读取远端设置；远端无记录时返回 (None, None)。"""
        rows, err = self._request("GET", "user_settings", params={"select": "*", "limit": "1"})
        if err:
            return None, err
        if not rows:
            return None, None
        try:
            return UserSettings.model_validate(rows[0]), None
        except ValueError as e:
            err = f"远端设置无效: {e}"
            _log(err)
            return None, err

    def put_settings(self, settings: UserSettings) -> tuple[Optional[UserSettings], Optional[str]]:
        """写入（upsert）设置，返回远端保存后的结果。"""
        body = settings.model_dump(mode="json", exclude_none=True)
        rows, err = self._request(
            "POST",
            "user_settings",
            body=body,
            extra_headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )
        if err:
            return None, err
        if not rows:
            return settings, None
        try:
            return UserSettings.model_validate(rows[0]), None
        except ValueError as e:
            err = f"远端设置无效: {e}"
            _log(err)
            return None, err

    def list_intake(self, day: date) -> tuple[Optional[List[IntakeEvent]], Optional[str]]:
        """某日的饮水记录（按时间升序）。"""
        rows, err = self._request(
            "GET",
            "intake_logs",
            params={"select": "*", "date": f"eq.{day.isoformat()}", "order": "logged_at.asc"},
        )
        if err:
            return None, err
        out = []
        for row in rows or []:
            try:
                out.append(
                    IntakeEvent(
                        id=str(row["id"]) if row.get("id") is not None else None,
                        amount_ml=row.get("amount_ml"),
                        timestamp=row.get("logged_at"),
                        synced=True,
                    )
                )
            except ValueError as e:
                _log(f"跳过无效记录 {row.get('id')}: {e}")
        return out, None

    def add_intake(self, event: IntakeEvent, day: date) -> tuple[Optional[IntakeEvent], Optional[str]]:
        body = {
            "amount_ml": event.amount_ml,
            "logged_at": utc_iso(event.timestamp),
            "date": day.isoformat(),
        }
        rows, err = self._request("POST", "intake_logs", body=body)
        if err:
            return None, err
        if rows and rows[0].get("id") is not None:
            return event.model_copy(update={"id": str(rows[0]["id"]), "synced": True}), None
        return event.model_copy(update={"synced": True}), None
