"""
订单领域实体 - 结算账本
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from domain.common.exceptions import DomainValidationException
from .commission import Number, compute_commission, to_money


class PaymentStatus(str, Enum):
    """订单支付状态"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class OrderStatus(str, Enum):
    """订单履约状态"""
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def _ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """确保时间为 UTC 时区"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class ShippingAddress:
    name: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

    def lines(self) -> List[str]:
        """用于发票/邮件展示的地址行"""
        locality = ", ".join(p for p in (self.city, self.state, self.zip) if p)
        return [line for line in (self.name, self.street, locality, self.country) if line]


@dataclass(frozen=True)
class OrderItem:
    """订单行：下单时的作品快照"""
    artwork_id: int
    title: str
    price: Decimal
    artist_id: Optional[int] = None


@dataclass
class Order:
    """
    订单聚合根

    业务规则：
    1. 总额 = 所有行价格之和（与支付方实收金额的差额作为异常审计）
    2. 佣金 + 艺术家结算额 = 总额
    3. 支付交易号全局唯一（幂等键）
    4. 结算流程创建后不再修改
    """

    id: Optional[int]
    buyer_id: Optional[int]
    items: List[OrderItem]
    total_amount: Decimal
    commission_amount: Decimal
    commission_rate: Decimal
    artist_payout: Decimal
    payment_id: str
    currency: str = "USD"
    checkout_session_id: Optional[str] = None
    shipping: ShippingAddress = field(default_factory=ShippingAddress)
    payment_status: PaymentStatus = PaymentStatus.COMPLETED
    status: OrderStatus = OrderStatus.PAID
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.payment_id:
            raise DomainValidationException("支付交易号不能为空", field="payment_id")
        if isinstance(self.payment_status, str):
            self.payment_status = PaymentStatus(self.payment_status)
        if isinstance(self.status, str):
            self.status = OrderStatus(self.status)
        self.created_at = _ensure_utc(self.created_at)
        self._validate_amounts()

    def _validate_amounts(self) -> None:
        """业务规则：金额守恒"""
        if self.commission_amount + self.artist_payout != self.total_amount:
            raise DomainValidationException(
                f"佣金 {self.commission_amount} + 结算额 {self.artist_payout} 不等于总额 {self.total_amount}",
                field="artist_payout",
            )
        if self.total_amount < 0:
            raise DomainValidationException(f"订单总额不能为负数: {self.total_amount}", field="total_amount")
        if self.total_amount != self.items_total:
            raise DomainValidationException(
                f"订单总额 {self.total_amount} 不等于各行价格之和 {self.items_total}",
                field="total_amount",
            )

    @property
    def items_total(self) -> Decimal:
        return to_money(sum((item.price for item in self.items), Decimal("0")))

    @classmethod
    def place(
        cls,
        *,
        buyer_id: Optional[int],
        items: List[OrderItem],
        rate: Number,
        payment_id: str,
        currency: str,
        checkout_session_id: Optional[str] = None,
        shipping: Optional[ShippingAddress] = None,
    ) -> "Order":
        """按佣金快照创建已支付订单，总额取各行价格之和"""
        items = list(items)
        breakdown = compute_commission(sum((item.price for item in items), Decimal("0")), rate)
        return cls(
            id=None,
            buyer_id=buyer_id,
            items=items,
            total_amount=breakdown.gross,
            commission_amount=breakdown.commission,
            commission_rate=breakdown.rate,
            artist_payout=breakdown.payout,
            payment_id=payment_id,
            currency=currency.upper(),
            checkout_session_id=checkout_session_id,
            shipping=shipping or ShippingAddress(),
            payment_status=PaymentStatus.COMPLETED,
            status=OrderStatus.PAID,
            created_at=datetime.now(timezone.utc),
        )

    @property
    def artwork_ids(self) -> List[int]:
        return [item.artwork_id for item in self.items]
