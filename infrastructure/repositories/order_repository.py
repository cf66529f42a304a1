"""
订单仓储实现 - 使用SQLAlchemy实现数据访问
"""
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from domain.order.entity import Order, OrderItem, ShippingAddress, PaymentStatus, OrderStatus
from domain.order.repository import OrderRepository
from domain.common.exceptions import OrderAlreadyExistsException
from infrastructure.models.order import OrderModel, OrderItemModel
from infrastructure.repositories.base import translate_db_errors
from core.logging_config import get_logger


logger = get_logger(__name__)


def _is_payment_id_conflict(exc: IntegrityError) -> bool:
    msg = str(exc).lower()
    return "payment_id" in msg or "unique" in msg or "duplicate" in msg


class SQLAlchemyOrderRepository(OrderRepository):
    """订单仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: OrderModel) -> Order:
        """将数据库模型转换为领域实体"""
        return Order(
            id=model.id,
            buyer_id=model.buyer_id,
            items=[
                OrderItem(
                    artwork_id=item.artwork_id,
                    title=item.title,
                    price=Decimal(str(item.price)),
                    artist_id=item.artist_id,
                )
                for item in model.items
            ],
            total_amount=Decimal(str(model.total_amount)),
            commission_amount=Decimal(str(model.commission_amount)),
            commission_rate=Decimal(str(model.commission_rate)),
            artist_payout=Decimal(str(model.artist_payout)),
            payment_id=model.payment_id,
            currency=model.currency,
            checkout_session_id=model.checkout_session_id,
            shipping=ShippingAddress(
                name=model.shipping_name,
                street=model.shipping_street,
                city=model.shipping_city,
                state=model.shipping_state,
                zip=model.shipping_zip,
                country=model.shipping_country,
            ),
            payment_status=PaymentStatus(model.payment_status),
            status=OrderStatus(model.status),
            created_at=model.created_at,
        )

    def _to_model(self, entity: Order) -> OrderModel:
        """将领域实体转换为数据库模型"""
        return OrderModel(
            id=entity.id,
            buyer_id=entity.buyer_id,
            total_amount=entity.total_amount,
            commission_amount=entity.commission_amount,
            commission_rate=entity.commission_rate,
            artist_payout=entity.artist_payout,
            currency=entity.currency,
            shipping_name=entity.shipping.name,
            shipping_street=entity.shipping.street,
            shipping_city=entity.shipping.city,
            shipping_state=entity.shipping.state,
            shipping_zip=entity.shipping.zip,
            shipping_country=entity.shipping.country,
            payment_id=entity.payment_id,
            checkout_session_id=entity.checkout_session_id,
            payment_status=entity.payment_status.value,
            status=entity.status.value,
            created_at=entity.created_at or datetime.now(timezone.utc),
            items=[
                OrderItemModel(
                    position=index,
                    artwork_id=item.artwork_id,
                    artist_id=item.artist_id,
                    title=item.title,
                    price=item.price,
                )
                for index, item in enumerate(entity.items)
            ],
        )

    @translate_db_errors("order.create")
    async def create(self, order: Order) -> Order:
        """在 SAVEPOINT 中插入，唯一约束冲突只回滚本次插入，不影响外层事务"""
        db_order = self._to_model(order)
        try:
            async with self.session.begin_nested():
                self.session.add(db_order)
                await self.session.flush()
        except IntegrityError as e:
            if _is_payment_id_conflict(e):
                logger.warning("order_create_conflict", payment_id=order.payment_id)
                raise OrderAlreadyExistsException(order.payment_id)
            raise
        logger.info(
            "order_created",
            order_id=db_order.id,
            payment_id=db_order.payment_id,
            total_amount=str(order.total_amount),
        )
        return replace(order, id=db_order.id, created_at=order.created_at or db_order.created_at)

    @translate_db_errors("order.get_by_id")
    async def get_by_id(self, order_id: int) -> Optional[Order]:
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.id == order_id)
        )
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None

    @translate_db_errors("order.get_by_payment_id")
    async def get_by_payment_id(self, payment_id: str) -> Optional[Order]:
        result = await self.session.execute(
            select(OrderModel).where(OrderModel.payment_id == payment_id)
        )
        db_order = result.scalar_one_or_none()
        return self._to_entity(db_order) if db_order else None
