"""推送订阅与推送内容数据模型。"""
from typing import List, Optional

from pydantic import BaseModel, Field


class SubscriptionKeys(BaseModel):
    p256dh: str = Field(..., description="客户端公钥")
    auth: str = Field(..., description="认证密钥")


class PushSubscription(BaseModel):
    """浏览器推送订阅，以 endpoint 唯一标识。"""
    endpoint: str = Field(..., min_length=1, description="推送地址")
    keys: SubscriptionKeys = Field(..., description="加密密钥")
    user_agent: Optional[str] = Field(None, description="订阅设备 UA")
    is_active: bool = Field(True, description="是否有效")
    created_at: Optional[str] = Field(None, description="创建时间 ISO")


class NotificationPayload(BaseModel):
    """推送给客户端的内容。"""
    title: str
    body: str
    icon: Optional[str] = None
    badge: Optional[str] = None
    data: dict = Field(default_factory=dict)


class DeliveryResult(BaseModel):
    endpoint: str
    success: bool
    error: Optional[str] = None


class DispatchResult(BaseModel):
    """一次群发的汇总。"""
    total: int = 0
    successful: int = 0
    failed: int = 0
    details: List[DeliveryResult] = Field(default_factory=list)

