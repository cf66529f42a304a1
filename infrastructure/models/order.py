"""
订单数据库模型 - SQLAlchemy ORM模型
注意：这是基础设施层的实现细节，不是领域模型
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .base import Base


class OrderModel(Base):
    """
    订单数据库模型

    所有业务规则都在 domain.order.entity.Order 中
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    buyer_id = Column(Integer, nullable=True, index=True, comment="买家ID，游客下单为空")

    # 金额信息（Numeric 存储精确金额）
    total_amount = Column(Numeric(precision=12, scale=2), nullable=False, comment="订单总额")
    commission_amount = Column(Numeric(precision=12, scale=2), nullable=False, comment="平台佣金")
    commission_rate = Column(Numeric(precision=5, scale=4), nullable=False, comment="下单时的佣金比例快照")
    artist_payout = Column(Numeric(precision=12, scale=2), nullable=False, comment="艺术家结算额")
    currency = Column(String(3), nullable=False, default="USD", comment="货币代码 ISO-4217")

    # 收货地址
    shipping_name = Column(String(200), nullable=True, comment="收件人")
    shipping_street = Column(String(255), nullable=True, comment="街道")
    shipping_city = Column(String(100), nullable=True, comment="城市")
    shipping_state = Column(String(100), nullable=True, comment="州/省")
    shipping_zip = Column(String(20), nullable=True, comment="邮编")
    shipping_country = Column(String(2), nullable=True, comment="国家代码")

    # 支付信息：payment_id 为幂等键
    payment_id = Column(String(200), unique=True, index=True, nullable=False, comment="支付交易号")
    checkout_session_id = Column(String(200), nullable=True, index=True, comment="结账会话ID")
    payment_status = Column(String(20), nullable=False, default="pending", comment="支付状态: pending/completed/failed")
    status = Column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="订单状态: pending/paid/shipped/delivered/cancelled"
    )

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="创建时间"
    )

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        order_by="OrderItemModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, payment_id='{self.payment_id}', total={self.total_amount})>"


class OrderItemModel(Base):
    """订单行：下单时的作品快照，不与作品表实时关联"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0, comment="行序号")
    artwork_id = Column(Integer, nullable=False, index=True, comment="作品ID")
    artist_id = Column(Integer, nullable=True, comment="艺术家ID")
    title = Column(String(200), nullable=False, comment="下单时标题")
    price = Column(Numeric(precision=12, scale=2), nullable=False, comment="下单时价格")

    order = relationship("OrderModel", back_populates="items")
