from decimal import Decimal

import pytest

from domain.artwork.entity import Artwork, ArtworkStatus
from domain.common.exceptions import ArtworkNotSellableException, DomainValidationException
from domain.order.entity import Order, OrderItem, OrderStatus, PaymentStatus, ShippingAddress


def _items():
    return [
        OrderItem(artwork_id=1, title="Sunrise", price=Decimal("60.00"), artist_id=10),
        OrderItem(artwork_id=2, title="Harbor", price=Decimal("40.00"), artist_id=11),
    ]


def test_place_freezes_commission_snapshot():
    order = Order.place(
        buyer_id=5,
        items=_items(),
        rate="0.20",
        payment_id="pi_1",
        currency="usd",
    )
    assert order.id is None
    assert order.commission_rate == Decimal("0.20")
    assert order.total_amount == Decimal("100.00")
    assert order.currency == "USD"
    assert order.payment_status == PaymentStatus.COMPLETED
    assert order.status == OrderStatus.PAID
    assert order.created_at is not None and order.created_at.tzinfo is not None
    assert order.artwork_ids == [1, 2]


def test_total_is_sum_of_item_prices():
    items = _items() + [OrderItem(artwork_id=3, title="Dusk", price=Decimal("33.33"), artist_id=10)]
    order = Order.place(buyer_id=None, items=items, rate="0.15", payment_id="pi_2", currency="USD")

    assert order.total_amount == Decimal("133.33")
    assert order.commission_amount == Decimal("20.00")
    assert order.commission_amount + order.artist_payout == order.total_amount


def test_total_must_match_items():
    with pytest.raises(DomainValidationException):
        Order(
            id=None,
            buyer_id=None,
            items=_items(),
            total_amount=Decimal("95.00"),
            commission_amount=Decimal("19.00"),
            commission_rate=Decimal("0.20"),
            artist_payout=Decimal("76.00"),
            payment_id="pi_4",
        )


def test_payout_must_balance():
    with pytest.raises(DomainValidationException):
        Order(
            id=None,
            buyer_id=None,
            items=_items(),
            total_amount=Decimal("100.00"),
            commission_amount=Decimal("20.00"),
            commission_rate=Decimal("0.20"),
            artist_payout=Decimal("79.99"),
            payment_id="pi_3",
        )


def test_payment_id_required():
    with pytest.raises(DomainValidationException):
        Order.place(
            buyer_id=None,
            items=[],
            rate="0.2",
            payment_id="",
            currency="USD",
        )


def test_shipping_lines_skip_blank_parts():
    address = ShippingAddress(name="Ada", street=None, city="Springfield", state="IL", zip=None, country="US")
    assert address.lines() == ["Ada", "Springfield, IL", "US"]


def test_artwork_state_machine():
    art = Artwork(id=1, title="Sunrise", price=Decimal("60.00"), artist_id=10)
    with pytest.raises(ArtworkNotSellableException):
        art.mark_sold()
    art.approve()
    art.mark_sold()
    assert art.status == ArtworkStatus.SOLD
    with pytest.raises(ArtworkNotSellableException):
        art.mark_sold()
