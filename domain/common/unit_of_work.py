"""Unit of Work 抽象定义"""
from __future__ import annotations

from abc import ABC, abstractmethod

from domain.artwork.repository import ArtworkRepository
from domain.audit.repository import AuditLogRepository
from domain.config.repository import ConfigRepository
from domain.order.repository import OrderRepository
from domain.user.repository import UserRepository


class AbstractUnitOfWork(ABC):
    """应用层事务边界控制抽象"""

    artwork_repository: ArtworkRepository
    order_repository: OrderRepository
    audit_repository: AuditLogRepository
    config_repository: ConfigRepository
    user_repository: UserRepository

    def __init__(self, *, readonly: bool = False) -> None:
        self._committed = False
        self._readonly = readonly
        self.artwork_repository = None  # type: ignore[assignment]
        self.order_repository = None  # type: ignore[assignment]
        self.audit_repository = None  # type: ignore[assignment]
        self.config_repository = None  # type: ignore[assignment]
        self.user_repository = None  # type: ignore[assignment]

    async def __aenter__(self) -> "AbstractUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if exc:
            await self.rollback()
        else:
            # 只在非只读且未显式提交时自动提交
            if not self._readonly and not self._committed:
                await self.commit()

    @abstractmethod
    async def commit(self) -> None:
        """提交事务"""
        ...

    @abstractmethod
    async def rollback(self) -> None:
        """回滚事务"""
