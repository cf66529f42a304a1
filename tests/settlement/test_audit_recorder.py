import pytest

from application.services.audit_service import AuditRecorder, describe_error
from domain.audit.entity import AuditAction
from domain.common.exceptions import PersistenceError


@pytest.mark.asyncio
async def test_success_and_failure_entries(uow_factory):
    recorder = AuditRecorder(uow_factory, origin="stripe-webhook")

    await recorder.record_success(12, 4, ["unavailable artworks: 3(sold)"])
    await recorder.record_failure(RuntimeError("boom"), buyer_id=4, payment_id="pi_9")

    async with uow_factory(readonly=True) as uow:
        failure, success = await uow.audit_repository.list_recent()
    assert success.action == AuditAction.PAYMENT_SUCCESS
    assert success.details == "Order 12 created via Stripe Webhook; unavailable artworks: 3(sold)"
    assert success.origin == "stripe-webhook"
    assert failure.action == AuditAction.PAYMENT_PROCESSING_ERROR
    assert failure.details == "Payment pi_9: RuntimeError: boom"
    assert failure.user_id == 4


@pytest.mark.asyncio
async def test_audit_write_failure_is_reraised():
    class _BrokenUoW:
        def __init__(self, *args, **kwargs):
            pass

        async def __aenter__(self):
            raise PersistenceError("Failed to open transaction", operation="uow.begin")

        async def __aexit__(self, *exc):
            return None

    recorder = AuditRecorder(_BrokenUoW, origin="stripe-webhook")
    with pytest.raises(PersistenceError):
        await recorder.record_success(1, None)


def test_describe_error_uses_business_type():
    error = PersistenceError("disk I/O error", operation="order.create")
    assert describe_error(error) == "PersistenceError: disk I/O error"
