from decimal import Decimal

import pytest

from application.services.commission_config_service import CommissionConfigService
from domain.audit.entity import AuditAction
from domain.common.exceptions import InvalidRateError


@pytest.mark.asyncio
async def test_default_rate_until_configured(uow_factory):
    service = CommissionConfigService(uow_factory, default_rate=Decimal("0.20"))
    assert await service.get_rate() == Decimal("0.20")


@pytest.mark.asyncio
async def test_update_rate_is_audited(uow_factory):
    service = CommissionConfigService(uow_factory, default_rate=Decimal("0.20"))

    entry = await service.update_rate("0.15", actor_id=99)

    assert entry.value == "0.15"
    assert entry.updated_at is not None
    assert await service.get_rate() == Decimal("0.15")
    async with uow_factory(readonly=True) as uow:
        audits = await uow.audit_repository.list_recent(action=AuditAction.COMMISSION_RATE_UPDATED)
    assert len(audits) == 1
    assert audits[0].user_id == 99
    assert audits[0].origin == "admin"


@pytest.mark.asyncio
async def test_update_rate_percent(uow_factory):
    service = CommissionConfigService(uow_factory, default_rate=Decimal("0.20"))
    await service.update_rate_percent(25)
    assert await service.get_rate() == Decimal("0.25")


@pytest.mark.asyncio
@pytest.mark.parametrize("rate", ["1.2", "-0.1", "abc"])
async def test_invalid_rate_leaves_config_unchanged(uow_factory, rate):
    service = CommissionConfigService(uow_factory, default_rate=Decimal("0.20"))
    with pytest.raises(InvalidRateError):
        await service.update_rate(rate)
    with pytest.raises(InvalidRateError):
        await service.update_rate_percent("150")
    assert await service.get_rate() == Decimal("0.20")


@pytest.mark.asyncio
async def test_rate_finer_than_stored_precision_is_rejected(uow_factory):
    service = CommissionConfigService(uow_factory, default_rate=Decimal("0.20"))
    with pytest.raises(InvalidRateError):
        await service.update_rate("0.12345")
    with pytest.raises(InvalidRateError):
        await service.update_rate_percent("12.345")
    await service.update_rate_percent("12.34")
    assert await service.get_rate() == Decimal("0.1234")
