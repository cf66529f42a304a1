"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode
from shared.codes.settlement_codes import SettlementCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
        message_key: Optional[str] = None,
        format_params: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        self.message_key = message_key
        self.format_params = format_params
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        message_key: str | None = None,
        format_params: dict | None = None,
    ):
        super().__init__(
            code=BusinessCode.PARAM_VALIDATION_ERROR,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
            message_key=message_key or "validation.domain",
            format_params=format_params,
        )


class InvalidRateError(BusinessException):
    """佣金比例不在 [0, 1] 区间"""

    def __init__(self, rate: object):
        super().__init__(
            code=BusinessCode.INVALID_RATE,
            message=f"Commission rate must be between 0 and 1, got {rate}",
            error_type="InvalidRate",
            details={"rate": str(rate)},
            field="commission_rate",
            message_key="commission.rate.invalid",
        )


class InvalidSignatureError(BusinessException):
    """支付回调签名校验失败（防伪边界）"""

    def __init__(self, message: str, *, provider: str, details: Optional[dict] = None):
        full_details = {"provider": provider}
        if details:
            full_details.update(details)
        super().__init__(
            code=SettlementCode.SIGNATURE_ERROR,
            message=message,
            error_type="InvalidSignature",
            details=full_details,
        )


class MalformedEventError(BusinessException):
    """签名合法但事件内容无法解析（重投也无法修复）"""

    def __init__(self, message: str, *, event_id: Optional[str] = None, field: Optional[str] = None):
        super().__init__(
            code=SettlementCode.MALFORMED_EVENT,
            message=message,
            error_type="MalformedEvent",
            details={"event_id": event_id} if event_id else None,
            field=field,
        )


class PersistenceError(BusinessException):
    """持久化失败：对本次结算是致命的，需审计，可由支付方重投重试"""

    def __init__(self, message: str, *, operation: str, details: Optional[dict] = None):
        full_details = {"operation": operation}
        if details:
            full_details.update(details)
        super().__init__(
            code=BusinessCode.DATABASE_ERROR,
            message=message,
            error_type="PersistenceError",
            details=full_details,
        )


class NotificationError(BusinessException):
    """单个收件人的通知发送失败（非致命）"""

    def __init__(self, message: str, *, recipient: Optional[str], template: str):
        super().__init__(
            code=SettlementCode.NOTIFICATION_ERROR,
            message=message,
            error_type="NotificationError",
            details={"recipient": recipient, "template": template},
        )


class RenderError(BusinessException):
    """发票生成或写入失败（非致命）"""

    def __init__(self, message: str, *, order_id: Optional[int] = None):
        super().__init__(
            code=SettlementCode.RENDER_ERROR,
            message=message,
            error_type="RenderError",
            details={"order_id": order_id} if order_id is not None else None,
        )


class ArtworkNotSellableException(BusinessException):
    def __init__(self, artwork_id: Optional[int], status: str):
        super().__init__(
            code=BusinessCode.ARTWORK_NOT_SELLABLE,
            message=f"Artwork {artwork_id} is not sellable (status={status})",
            error_type="ArtworkNotSellable",
            details={"artwork_id": artwork_id, "status": status},
            message_key="artwork.not_sellable",
        )


class OrderAlreadyExistsException(BusinessException):
    """同一支付交易号已生成订单（幂等键冲突）"""

    def __init__(self, payment_id: str):
        super().__init__(
            code=BusinessCode.ORDER_ALREADY_EXISTS,
            message=f"Order for payment {payment_id} already exists",
            error_type="OrderAlreadyExists",
            details={"payment_id": payment_id},
            message_key="order.already_exists",
        )
