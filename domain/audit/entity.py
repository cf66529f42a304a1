"""
审计日志领域实体（只追加）
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from domain.common.exceptions import DomainValidationException


class AuditAction(str, Enum):
    PAYMENT_SUCCESS = "PAYMENT_SUCCESS"
    PAYMENT_PROCESSING_ERROR = "PAYMENT_PROCESSING_ERROR"
    COMMISSION_RATE_UPDATED = "COMMISSION_RATE_UPDATED"


@dataclass(frozen=True)
class AuditLogEntry:
    """审计条目，写入后不可修改"""

    id: Optional[int]
    action: AuditAction
    details: str
    origin: str
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if isinstance(self.action, str) and not isinstance(self.action, AuditAction):
            object.__setattr__(self, "action", AuditAction(self.action))
        if not self.origin:
            raise DomainValidationException("审计来源不能为空", field="origin")
        if self.created_at is not None and self.created_at.tzinfo is None:
            object.__setattr__(self, "created_at", self.created_at.replace(tzinfo=timezone.utc))

    @classmethod
    def new(
        cls,
        action: AuditAction,
        details: str,
        *,
        origin: str,
        user_id: Optional[int] = None,
    ) -> "AuditLogEntry":
        return cls(
            id=None,
            action=action,
            details=details,
            origin=origin,
            user_id=user_id,
            created_at=datetime.now(timezone.utc),
        )
