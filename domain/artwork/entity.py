"""
作品领域实体 - 库存状态机
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException, ArtworkNotSellableException


class ArtworkStatus(str, Enum):
    """作品状态枚举"""
    PENDING = "pending"      # 待审核
    APPROVED = "approved"    # 已上架，可售
    REJECTED = "rejected"    # 审核拒绝
    SOLD = "sold"            # 已售出（终态）


@dataclass
class Artwork:
    """
    作品实体

    业务规则：
    1. 价格必须大于等于0
    2. 只有 approved 状态可以售出
    3. sold 为终态，售出后价格与状态不可再修改
    """

    id: Optional[int]
    title: str
    price: Decimal
    artist_id: int
    status: ArtworkStatus = ArtworkStatus.PENDING
    description: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise DomainValidationException("作品标题不能为空", field="title")
        if self.price < 0:
            raise DomainValidationException(f"作品价格不能为负数: {self.price}", field="price")
        if isinstance(self.status, str):
            self.status = ArtworkStatus(self.status)
        if self.uploaded_at is not None and self.uploaded_at.tzinfo is None:
            self.uploaded_at = self.uploaded_at.replace(tzinfo=timezone.utc)

    @property
    def is_sellable(self) -> bool:
        return self.status == ArtworkStatus.APPROVED

    @property
    def is_sold(self) -> bool:
        return self.status == ArtworkStatus.SOLD

    def approve(self) -> None:
        """审核通过"""
        if self.status not in (ArtworkStatus.PENDING, ArtworkStatus.REJECTED):
            raise DomainValidationException(
                f"无法从状态 {self.status.value} 转换为 approved", field="status"
            )
        self.status = ArtworkStatus.APPROVED

    def reject(self) -> None:
        """审核拒绝"""
        if self.status != ArtworkStatus.PENDING:
            raise DomainValidationException(
                f"无法从状态 {self.status.value} 转换为 rejected", field="status"
            )
        self.status = ArtworkStatus.REJECTED

    def mark_sold(self) -> None:
        """标记售出（仅 approved 可售出）"""
        if not self.is_sellable:
            raise ArtworkNotSellableException(self.id, self.status.value)
        self.status = ArtworkStatus.SOLD

    def change_price(self, new_price: Decimal) -> None:
        """调整价格（售出后冻结）"""
        if self.is_sold:
            raise DomainValidationException("已售出作品不能修改价格", field="price")
        if new_price < 0:
            raise DomainValidationException(f"作品价格不能为负数: {new_price}", field="price")
        self.price = new_price
