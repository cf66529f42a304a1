"""
Stripe Checkout adapter using the official stripe-python SDK.

Notes on SDK usage:
- Webhook verification uses `stripe.WebhookSignature.verify_header` against
  the raw request body; JSON is decoded only after the signature matches.
- SDK calls are blocking, so they run in a worker thread.
"""
from __future__ import annotations

import asyncio
import json
from decimal import Decimal
from typing import Any, Optional

import stripe

from application.dtos.settlement import InvoiceLine, WebhookEvent, minor_to_decimal
from domain.common.exceptions import InvalidSignatureError
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentProviderError,
    PaymentRecoverableError,
)
from core.config import settings

SIGNATURE_HEADER = "Stripe-Signature"


def _field(obj: Any, name: str) -> Any:
    """Read a field from a StripeObject or a plain dict."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _header(headers: dict[str, Any], name: str) -> Optional[str]:
    wanted = name.lower()
    for key, value in headers.items():
        if str(key).lower() == wanted:
            return value
    return None


class StripeClient(BasePaymentClient):
    provider = "stripe"

    def __init__(
        self,
        *,
        secret_key: Optional[str] = None,
        webhook_secret: Optional[str] = None,
        tolerance: Optional[int] = None,
    ):
        super().__init__()
        self.secret_key = secret_key if secret_key is not None else settings.stripe.secret_key
        self.webhook_secret = webhook_secret if webhook_secret is not None else settings.stripe.webhook_secret
        self.tolerance = tolerance if tolerance is not None else settings.webhook.tolerance_seconds

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent:  # type: ignore[override]
        if not self.webhook_secret:
            raise InvalidSignatureError("Missing STRIPE__WEBHOOK_SECRET", provider=self.provider)
        sig = _header(headers, SIGNATURE_HEADER)
        if not sig:
            raise InvalidSignatureError("Missing Stripe-Signature header", provider=self.provider)
        try:
            payload = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidSignatureError("Webhook body is not UTF-8", provider=self.provider) from exc
        # verify_header formats the signed payload with "%d.%s"; it needs text, not bytes
        try:
            stripe.WebhookSignature.verify_header(payload, sig, self.webhook_secret, tolerance=self.tolerance)
        except (stripe.SignatureVerificationError, ValueError) as exc:
            raise InvalidSignatureError(str(exc), provider=self.provider) from exc

        try:
            event = json.loads(payload)
        except ValueError as exc:
            raise InvalidSignatureError("Webhook body is not valid JSON", provider=self.provider) from exc
        if not isinstance(event, dict):
            raise InvalidSignatureError("Webhook body is not a JSON object", provider=self.provider)

        self._log("webhook_verified", event_id=event.get("id"), event_type=event.get("type"))
        return WebhookEvent(
            id=str(event.get("id") or ""),
            type=str(event.get("type") or ""),
            provider=self.provider,
            data=event.get("data") or {},
            raw_headers=dict(headers),
            raw_body=body,
        )

    async def list_line_items(self, session_id: str) -> list[InvoiceLine]:  # type: ignore[override]
        if not self.secret_key:
            raise PaymentProviderError("STRIPE__SECRET_KEY not configured", provider=self.provider)

        def _fetch():
            return stripe.checkout.Session.list_line_items(session_id, limit=100, api_key=self.secret_key)

        async def _call():
            try:
                return await asyncio.to_thread(_fetch)
            except (stripe.RateLimitError, stripe.APIConnectionError) as exc:
                raise PaymentRecoverableError(str(exc), provider=self.provider) from exc
            except stripe.StripeError as exc:
                raise PaymentProviderError(str(exc), provider=self.provider, provider_code=getattr(exc, "code", None)) from exc

        listing = await self._retry(_call)
        lines = [self._to_line(item) for item in (_field(listing, "data") or [])]
        self._log("line_items_listed", session_id=session_id, count=len(lines))
        return lines

    @staticmethod
    def _to_line(item: Any) -> InvoiceLine:
        currency = str(_field(item, "currency") or settings.marketplace.currency)
        quantity = int(_field(item, "quantity") or 1)
        line_total = minor_to_decimal(int(_field(item, "amount_total") or 0), currency)
        unit_minor = _field(_field(item, "price"), "unit_amount")
        unit_amount = (
            minor_to_decimal(int(unit_minor), currency)
            if unit_minor is not None
            else (line_total / quantity).quantize(Decimal("0.01"))
        )
        return InvoiceLine(
            description=str(_field(item, "description") or "Artwork"),
            unit_amount=unit_amount,
            quantity=quantity,
            line_total=line_total,
        )
