"""
订单账本领域服务 - 幂等落单
"""
from typing import Tuple

from .entity import Order
from .repository import OrderRepository
from domain.common.exceptions import OrderAlreadyExistsException, PersistenceError


class OrderLedgerService:
    """
    订单账本

    职责：
    1. 以支付交易号为幂等键，保证同一笔支付只生成一个订单
    2. 并发插入冲突时读取胜出方的订单，视为重放
    """

    def __init__(self, order_repository: OrderRepository):
        self.order_repository = order_repository

    async def find_or_create(self, draft: Order) -> Tuple[Order, bool]:
        """
        查找或创建订单

        Returns:
            (订单, 是否本次新建)
        """
        existing = await self.order_repository.get_by_payment_id(draft.payment_id)
        if existing is not None:
            return existing, False

        try:
            created = await self.order_repository.create(draft)
        except OrderAlreadyExistsException:
            # 并发插入：唯一约束兜底，读取胜出方
            winner = await self.order_repository.get_by_payment_id(draft.payment_id)
            if winner is None:
                raise PersistenceError(
                    f"Order for payment {draft.payment_id} conflicted but could not be read back",
                    operation="order.find_or_create",
                    details={"payment_id": draft.payment_id},
                )
            return winner, False
        return created, True
