"""
佣金比例配置应用服务 - 读取快照与管理员调整
"""
from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

from core.logging_config import get_logger
from domain.audit.entity import AuditAction, AuditLogEntry
from domain.common.exceptions import InvalidRateError
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.config.entity import COMMISSION_RATE_KEY, ConfigEntry
from domain.config.repository import ConfigRepository
from domain.order.commission import validate_rate


logger = get_logger(__name__)


async def read_commission_rate(config_repository: ConfigRepository, default: Decimal) -> Decimal:
    """读取当前佣金比例；未配置时使用默认值。存储值越界时抛出 InvalidRateError。"""
    entry = await config_repository.get(COMMISSION_RATE_KEY)
    if entry is None:
        return validate_rate(default)
    return validate_rate(entry.value)


class CommissionConfigService:
    """佣金比例配置服务"""

    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        *,
        default_rate: Decimal,
        origin: str = "admin",
    ) -> None:
        self._uow_factory = uow_factory
        self._default_rate = default_rate
        self._origin = origin

    async def get_rate(self) -> Decimal:
        async with self._uow_factory(readonly=True) as uow:
            return await read_commission_rate(uow.config_repository, self._default_rate)

    async def update_rate(
        self,
        rate: Union[Decimal, str, float, int],
        actor_id: Optional[int] = None,
    ) -> ConfigEntry:
        """
        更新佣金比例（0~1），同一事务内追加审计记录

        Raises:
            InvalidRateError: 比例越界或无法解析
        """
        value = validate_rate(rate)
        async with self._uow_factory() as uow:
            entry = await uow.config_repository.set(COMMISSION_RATE_KEY, str(value))
            await uow.audit_repository.append(
                AuditLogEntry.new(
                    AuditAction.COMMISSION_RATE_UPDATED,
                    f"Commission rate set to {value}",
                    origin=self._origin,
                    user_id=actor_id,
                )
            )
        logger.info("commission_rate_updated", rate=str(value), actor_id=actor_id)
        return entry

    async def update_rate_percent(
        self,
        percent: Union[Decimal, str, float, int],
        actor_id: Optional[int] = None,
    ) -> ConfigEntry:
        """按百分比更新（例如 20 表示 0.20）"""
        try:
            rate = Decimal(str(percent)) / Decimal(100)
        except (InvalidOperation, ValueError):
            raise InvalidRateError(percent)
        return await self.update_rate(rate, actor_id=actor_id)
