"""
佣金计算 - 纯函数

金额统一使用 Decimal，量化到分（0.01），ROUND_HALF_UP。
艺术家结算额 = 总额 - 佣金，不单独取整，保证两者之和恒等于总额。
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Union

from domain.common.exceptions import DomainValidationException, InvalidRateError


CENT = Decimal("0.01")
MIN_RATE = Decimal("0")
MAX_RATE = Decimal("1")
# 与 orders.commission_rate 列 NUMERIC(5,4) 一致
RATE_STEP = Decimal("0.0001")

Number = Union[Decimal, int, str]


def to_money(value: Number) -> Decimal:
    """转换为两位小数的金额"""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_rate(rate: Number) -> Decimal:
    """校验佣金比例在 [0, 1] 区间内且至多四位小数，返回 Decimal"""
    try:
        value = rate if isinstance(rate, Decimal) else Decimal(str(rate))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidRateError(rate)
    if not value.is_finite() or value < MIN_RATE or value > MAX_RATE:
        raise InvalidRateError(rate)
    if value != value.quantize(RATE_STEP):
        raise InvalidRateError(rate)
    return value


@dataclass(frozen=True)
class CommissionBreakdown:
    gross: Decimal
    rate: Decimal
    commission: Decimal
    payout: Decimal


def compute_commission(gross: Number, rate: Number) -> CommissionBreakdown:
    """
    计算平台佣金与艺术家结算额

    Args:
        gross: 订单总额（非负）
        rate: 佣金比例，[0, 1]

    Raises:
        InvalidRateError: 比例越界
        DomainValidationException: 总额为负
    """
    rate_value = validate_rate(rate)
    gross_value = to_money(gross)
    if gross_value < 0:
        raise DomainValidationException(f"订单总额不能为负数: {gross_value}", field="gross")

    commission = (gross_value * rate_value).quantize(CENT, rounding=ROUND_HALF_UP)
    return CommissionBreakdown(
        gross=gross_value,
        rate=rate_value,
        commission=commission,
        payout=gross_value - commission,
    )
