import hashlib
import hmac
import json
import time
from decimal import Decimal

import pytest


stripe = pytest.importorskip("stripe")

SECRET = "whsec_test_secret"


def _sign(payload: bytes, secret: str = SECRET, timestamp: int | None = None) -> str:
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode() + payload
    digest = hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def _event_body() -> bytes:
    return json.dumps(
        {
            "id": "evt_1",
            "type": "checkout.session.completed",
            "data": {
                "object": {
                    "id": "cs_1",
                    "payment_intent": "pi_1",
                    "amount_total": 10000,
                    "currency": "usd",
                    "metadata": {"userId": "3", "artworkIds": "[1, 2]"},
                    "customer_details": {"email": "buyer@example.com"},
                }
            },
        }
    ).encode()


def _client(**kwargs):
    from infrastructure.external.payments.stripe_client import StripeClient

    kwargs.setdefault("secret_key", "sk_test_123")
    kwargs.setdefault("webhook_secret", SECRET)
    kwargs.setdefault("tolerance", 300)
    return StripeClient(**kwargs)


def test_valid_signature_yields_checkout_event():
    body = _event_body()
    evt = _client().parse_webhook({"stripe-signature": _sign(body)}, body)

    assert evt.provider == "stripe"
    assert evt.kind == "checkout_completed"
    session = evt.to_checkout_session()
    assert session.payment_id == "pi_1"
    assert session.buyer_id == 3
    assert session.artwork_ids == [1, 2]
    assert session.currency == "USD"
    assert session.gross == Decimal("100.00")
    assert session.customer_email == "buyer@example.com"


def test_tampered_body_is_rejected():
    from domain.common.exceptions import InvalidSignatureError

    body = _event_body()
    header = _sign(body)
    with pytest.raises(InvalidSignatureError):
        _client().parse_webhook({"Stripe-Signature": header}, body.replace(b"10000", b"1"))


def test_wrong_secret_is_rejected():
    from domain.common.exceptions import InvalidSignatureError

    body = _event_body()
    with pytest.raises(InvalidSignatureError):
        _client().parse_webhook({"Stripe-Signature": _sign(body, secret="whsec_other")}, body)


def test_stale_timestamp_is_rejected():
    from domain.common.exceptions import InvalidSignatureError

    body = _event_body()
    header = _sign(body, timestamp=int(time.time()) - 3600)
    with pytest.raises(InvalidSignatureError):
        _client().parse_webhook({"Stripe-Signature": header}, body)


@pytest.mark.parametrize("headers", [{}, {"Stripe-Signature": "garbage"}])
def test_missing_or_malformed_header_is_rejected(headers):
    from domain.common.exceptions import InvalidSignatureError

    with pytest.raises(InvalidSignatureError):
        _client().parse_webhook(headers, _event_body())


def test_missing_secret_is_rejected():
    from domain.common.exceptions import InvalidSignatureError

    body = _event_body()
    with pytest.raises(InvalidSignatureError):
        _client(webhook_secret="").parse_webhook({"Stripe-Signature": _sign(body)}, body)


def test_non_checkout_events_are_ignored():
    body = json.dumps({"id": "evt_2", "type": "payment_intent.created", "data": {"object": {}}}).encode()
    evt = _client().parse_webhook({"Stripe-Signature": _sign(body)}, body)
    assert evt.kind == "ignored"


@pytest.mark.asyncio
async def test_list_line_items_maps_amounts(monkeypatch):
    calls = []

    def _list(session_id, **params):
        calls.append((session_id, params))
        return {
            "data": [
                {
                    "description": "Sunrise",
                    "quantity": 1,
                    "amount_total": 6000,
                    "currency": "usd",
                    "price": {"unit_amount": 6000},
                },
                {"description": "Prints", "quantity": 3, "amount_total": 4500, "currency": "usd", "price": None},
            ]
        }

    monkeypatch.setattr(stripe.checkout.Session, "list_line_items", _list)

    lines = await _client().list_line_items("cs_1")

    assert calls[0][0] == "cs_1"
    assert calls[0][1]["api_key"] == "sk_test_123"
    assert [(l.description, l.unit_amount, l.quantity, l.line_total) for l in lines] == [
        ("Sunrise", Decimal("60.00"), 1, Decimal("60.00")),
        ("Prints", Decimal("15.00"), 3, Decimal("45.00")),
    ]


@pytest.mark.asyncio
async def test_list_line_items_retries_connection_errors(monkeypatch):
    attempts = []

    def _flaky(session_id, **params):
        attempts.append(session_id)
        if len(attempts) == 1:
            raise stripe.APIConnectionError("connection reset")
        return {"data": []}

    monkeypatch.setattr(stripe.checkout.Session, "list_line_items", _flaky)

    assert await _client().list_line_items("cs_1") == []
    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_list_line_items_requires_secret_key():
    from infrastructure.external.payments.exceptions import PaymentProviderError

    with pytest.raises(PaymentProviderError):
        await _client(secret_key="").list_line_items("cs_1")


def test_signature_is_checked_against_decoded_payload(monkeypatch):
    body = _event_body()
    seen = []
    original = stripe.WebhookSignature.verify_header

    def _spy(payload, header, secret, tolerance=None):
        seen.append(payload)
        return original(payload, header, secret, tolerance=tolerance)

    monkeypatch.setattr(stripe.WebhookSignature, "verify_header", staticmethod(_spy))

    evt = _client().parse_webhook({"Stripe-Signature": _sign(body)}, body)

    assert evt.kind == "checkout_completed"
    assert seen == [body.decode("utf-8")]


def test_non_utf8_body_is_rejected():
    from domain.common.exceptions import InvalidSignatureError

    body = b"\xff\xfe not json"
    with pytest.raises(InvalidSignatureError):
        _client().parse_webhook({"Stripe-Signature": _sign(body)}, body)
