import asyncio
from decimal import Decimal

import pytest

from domain.common.exceptions import OrderAlreadyExistsException
from domain.order.entity import Order, OrderItem, ShippingAddress
from domain.order.service import OrderLedgerService


def _draft(payment_id="pi_ledger_1"):
    return Order.place(
        buyer_id=None,
        items=[OrderItem(artwork_id=1, title="Sunrise", price=Decimal("60.00"), artist_id=2)],
        rate="0.25",
        payment_id=payment_id,
        currency="USD",
        checkout_session_id="cs_1",
        shipping=ShippingAddress(name="Ada", city="Springfield"),
    )


@pytest.mark.asyncio
async def test_create_round_trips_order(uow_factory):
    async with uow_factory() as uow:
        order, created = await OrderLedgerService(uow.order_repository).find_or_create(_draft())
    assert created and order.id is not None

    async with uow_factory(readonly=True) as uow:
        loaded = await uow.order_repository.get_by_payment_id("pi_ledger_1")
    assert loaded.id == order.id
    assert loaded.commission_amount == Decimal("15.00")
    assert loaded.artist_payout == Decimal("45.00")
    assert loaded.commission_rate == Decimal("0.25")
    assert loaded.items[0].title == "Sunrise"
    assert loaded.shipping.name == "Ada"


@pytest.mark.asyncio
async def test_find_or_create_is_idempotent(uow_factory):
    async with uow_factory() as uow:
        first, created_first = await OrderLedgerService(uow.order_repository).find_or_create(_draft())
    async with uow_factory() as uow:
        second, created_second = await OrderLedgerService(uow.order_repository).find_or_create(_draft())
    assert created_first is True
    assert created_second is False
    assert second.id == first.id


@pytest.mark.asyncio
async def test_duplicate_insert_raises_already_exists(uow_factory):
    async with uow_factory() as uow:
        await uow.order_repository.create(_draft("pi_dup"))
    with pytest.raises(OrderAlreadyExistsException):
        async with uow_factory() as uow:
            await uow.order_repository.create(_draft("pi_dup"))


@pytest.mark.asyncio
async def test_insert_race_returns_winner(uow_factory):
    async with uow_factory() as uow:
        winner = await uow.order_repository.create(_draft("pi_race"))

    class _StaleLookup:
        """First lookup misses, as if the competing insert had not committed yet."""

        def __init__(self, inner):
            self.inner = inner
            self.calls = 0

        async def get_by_payment_id(self, payment_id):
            self.calls += 1
            if self.calls == 1:
                return None
            return await self.inner.get_by_payment_id(payment_id)

        async def create(self, order):
            return await self.inner.create(order)

    async with uow_factory() as uow:
        order, created = await OrderLedgerService(_StaleLookup(uow.order_repository)).find_or_create(
            _draft("pi_race")
        )
    assert created is False
    assert order.id == winner.id


@pytest.mark.asyncio
async def test_concurrent_find_or_create_creates_one_order(uow_factory):
    async def attempt():
        async with uow_factory() as uow:
            return await OrderLedgerService(uow.order_repository).find_or_create(_draft("pi_concurrent"))

    results = await asyncio.gather(*(attempt() for _ in range(4)))
    assert sum(1 for _, created in results if created) == 1
    assert len({order.id for order, _ in results}) == 1
