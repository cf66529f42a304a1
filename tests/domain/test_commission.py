from decimal import Decimal

import pytest

from domain.common.exceptions import DomainValidationException, InvalidRateError
from domain.order.commission import compute_commission, validate_rate


def test_commission_and_payout_sum_to_gross():
    b = compute_commission(Decimal("100.00"), Decimal("0.20"))
    assert b.commission == Decimal("20.00")
    assert b.payout == Decimal("80.00")
    assert b.commission + b.payout == b.gross


@pytest.mark.parametrize(
    "gross, rate, commission",
    [
        ("0.05", "0.5", "0.03"),  # 0.025 rounds half up
        ("19.99", "0.15", "3.00"),  # 2.9985
        ("33.33", "0.333", "11.10"),  # 11.09889
        ("0.00", "0.20", "0.00"),
        ("250.00", "1", "250.00"),
        ("250.00", "0", "0.00"),
    ],
)
def test_commission_rounds_to_cents_half_up(gross, rate, commission):
    b = compute_commission(gross, rate)
    assert b.commission == Decimal(commission)
    assert b.payout == Decimal(gross) - Decimal(commission)
    assert b.commission + b.payout == b.gross


@pytest.mark.parametrize("rate", ["-0.01", "1.01", "NaN", "Infinity", "abc"])
def test_invalid_rate_rejected(rate):
    with pytest.raises(InvalidRateError):
        compute_commission("10.00", rate)


def test_validate_rate_accepts_float_and_string():
    assert validate_rate(0.2) == Decimal("0.2")
    assert validate_rate("0.35") == Decimal("0.35")


def test_negative_gross_rejected():
    with pytest.raises(DomainValidationException):
        compute_commission("-1.00", "0.20")


def test_rate_limited_to_four_decimal_places():
    assert validate_rate("0.1234") == Decimal("0.1234")
    assert validate_rate("0.20000") == Decimal("0.2")
    with pytest.raises(InvalidRateError):
        validate_rate("0.12345")
