"""
Audit recorder: append-only trail of settlement outcomes.

Every entry is written in its own unit of work, so a failure entry
survives the rollback of the settlement transaction that produced it.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

from core.logging_config import get_logger
from domain.audit.entity import AuditAction, AuditLogEntry
from domain.common.exceptions import BusinessException
from domain.common.unit_of_work import AbstractUnitOfWork


logger = get_logger(__name__)


def describe_error(error: BaseException) -> str:
    if isinstance(error, BusinessException):
        return f"{error.error_type}: {error.message}"
    return f"{error.__class__.__name__}: {error}"


class AuditRecorder:
    def __init__(self, uow_factory: Callable[..., AbstractUnitOfWork], *, origin: str) -> None:
        self._uow_factory = uow_factory
        self.origin = origin

    async def record(
        self,
        action: AuditAction,
        details: str,
        *,
        user_id: Optional[int] = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry.new(action, details, origin=self.origin, user_id=user_id)
        try:
            async with self._uow_factory() as uow:
                saved = await uow.audit_repository.append(entry)
        except Exception as exc:
            # The trail is the only record of this outcome; keep the details in the log
            logger.critical(
                "audit_write_failed",
                action=action.value,
                user_id=user_id,
                details=details,
                error=str(exc),
            )
            raise
        logger.info("audit_recorded", audit_id=saved.id, action=action.value, user_id=user_id)
        return saved

    async def record_success(
        self,
        order_id: int,
        buyer_id: Optional[int],
        notes: Sequence[str] = (),
    ) -> AuditLogEntry:
        details = f"Order {order_id} created via Stripe Webhook"
        if notes:
            details = f"{details}; " + "; ".join(notes)
        return await self.record(AuditAction.PAYMENT_SUCCESS, details, user_id=buyer_id)

    async def record_failure(
        self,
        error: BaseException,
        *,
        buyer_id: Optional[int] = None,
        payment_id: Optional[str] = None,
    ) -> AuditLogEntry:
        details = describe_error(error)
        if payment_id:
            details = f"Payment {payment_id}: {details}"
        return await self.record(AuditAction.PAYMENT_PROCESSING_ERROR, details, user_id=buyer_id)
