"""
订单领域事件 - 提交成功后交给通知旁路处理
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class OrderPlaced:
    """订单创建事件"""
    order_id: int
    order_number: str
    user_id: str
    total_amount: str
    item_count: int
    email: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
