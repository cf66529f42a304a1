from datetime import datetime, timezone
from decimal import Decimal

import pytest

from application.dtos.settlement import InvoiceLine
from application.services.invoice_service import InvoiceService, lines_from_order
from domain.order.entity import Order, OrderItem, ShippingAddress

from conftest import MemoryStorage


def _order(items=None):
    items = items or [
        OrderItem(artwork_id=1, title="Sunrise", price=Decimal("60.00"), artist_id=7),
        OrderItem(artwork_id=2, title="Harbor", price=Decimal("40.00"), artist_id=8),
    ]
    order = Order.place(
        buyer_id=3,
        items=items,
        rate="0.20",
        payment_id="pi_invoice",
        currency="USD",
        shipping=ShippingAddress(name="Ada Buyer", street="1 Main St", city="Springfield", country="US"),
    )
    order.id = 42
    order.created_at = datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)
    return order


@pytest.mark.asyncio
async def test_invoice_is_stored_under_deterministic_key(renderer):
    storage = MemoryStorage()
    artifact = await InvoiceService(renderer, storage).generate(_order())

    assert artifact.key == "invoices/invoice-42.pdf"
    assert artifact.filename == "invoice-42.pdf"
    assert storage.objects["invoices/invoice-42.pdf"] == artifact.content
    assert artifact.content.startswith(b"%PDF")


@pytest.mark.asyncio
async def test_rerendering_same_order_is_byte_identical(renderer):
    storage = MemoryStorage()
    service = InvoiceService(renderer, storage)

    first = await service.generate(_order())
    second = await service.generate(_order())

    assert first.content == second.content
    assert len(storage.objects) == 1


@pytest.mark.asyncio
async def test_invoice_prints_invoice_fields(renderer):
    artifact = await InvoiceService(renderer, MemoryStorage()).generate(_order())
    # Page streams are uncompressed, so drawn text is visible in the bytes
    assert b"Invoice Number:" in artifact.content
    assert b"2024-05-17" in artifact.content
    assert b"$100.00" in artifact.content
    assert b"Payment is due upon receipt. Thank you for your business." in artifact.content
    assert b"Ada Buyer" in artifact.content


@pytest.mark.asyncio
async def test_long_orders_continue_on_new_pages(renderer):
    items = [
        OrderItem(artwork_id=i, title=f"Study No. {i}", price=Decimal("10.00"), artist_id=1)
        for i in range(1, 40)
    ]
    artifact = await InvoiceService(renderer, MemoryStorage()).generate(_order(items))
    assert b"Page 2" in artifact.content
    assert b"continued" in artifact.content


@pytest.mark.asyncio
async def test_provider_lines_take_precedence(renderer):
    lines = [
        InvoiceLine(
            description="Sunrise (oil on canvas)",
            unit_amount=Decimal("60.00"),
            quantity=1,
            line_total=Decimal("60.00"),
        )
    ]
    service = InvoiceService(renderer, MemoryStorage())
    document = service.build_document(_order(), lines)
    assert [line.description for line in document.lines] == ["Sunrise (oil on canvas)"]

    fallback = service.build_document(_order(), [])
    assert [line.description for line in fallback.lines] == ["Sunrise", "Harbor"]


def test_lines_from_order_use_snapshot_prices():
    lines = lines_from_order(_order())
    assert [(line.unit_amount, line.quantity, line.line_total) for line in lines] == [
        (Decimal("60.00"), 1, Decimal("60.00")),
        (Decimal("40.00"), 1, Decimal("40.00")),
    ]


@pytest.mark.asyncio
async def test_storage_failure_returns_none(renderer):
    assert await InvoiceService(renderer, MemoryStorage(fail=True)).generate(_order()) is None


@pytest.mark.asyncio
async def test_unpersisted_order_is_not_invoiced(renderer):
    order = _order()
    order.id = None
    assert await InvoiceService(renderer, MemoryStorage()).generate(order) is None
