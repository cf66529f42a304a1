"""
Settlement DTOs (Pydantic v2) used at application boundaries.
"""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from domain.common.exceptions import MalformedEventError
from domain.order.entity import ShippingAddress
from shared.codes.settlement_codes import PROVIDER_EVENT_KINDS, ZERO_DECIMAL_CURRENCIES


EventKind = Literal["checkout_completed", "ignored"]


def minor_to_decimal(amount_minor: int, currency: str) -> Decimal:
    """Convert provider minor units to a 2-place Decimal amount."""
    exponent = 0 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 2
    value = Decimal(int(amount_minor)).scaleb(-exponent)
    return value.quantize(Decimal("0.01"))


class ShippingDetails(BaseModel):
    name: Optional[str] = None
    line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_provider(cls, raw: Optional[dict[str, Any]]) -> "ShippingDetails":
        if not isinstance(raw, dict):
            return cls()
        address = raw.get("address") or {}
        return cls(
            name=raw.get("name"),
            line1=address.get("line1"),
            city=address.get("city"),
            state=address.get("state"),
            postal_code=address.get("postal_code"),
            country=address.get("country"),
        )

    def to_address(self) -> ShippingAddress:
        return ShippingAddress(
            name=self.name,
            street=self.line1,
            city=self.city,
            state=self.state,
            zip=self.postal_code,
            country=self.country,
        )


class CheckoutSession(BaseModel):
    """Parsed `checkout.session.completed` payload."""

    session_id: str
    payment_id: str
    amount_total: int
    currency: str
    buyer_id: Optional[int] = None
    artwork_ids: list[int]
    customer_email: Optional[str] = None
    shipping: ShippingDetails = Field(default_factory=ShippingDetails)
    event_id: Optional[str] = None

    @property
    def gross(self) -> Decimal:
        return minor_to_decimal(self.amount_total, self.currency)


class InvoiceLine(BaseModel):
    description: str
    unit_amount: Decimal
    quantity: int = 1
    line_total: Decimal


class WebhookEvent(BaseModel):
    id: str
    type: str
    provider: str
    data: dict[str, Any]
    # raw fields for traceability (optional)
    raw_headers: Optional[dict[str, Any]] = None
    raw_body: Optional[bytes] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def kind(self) -> EventKind:
        mapping = PROVIDER_EVENT_KINDS.get(self.provider, {})
        return mapping.get(self.type, "ignored")  # type: ignore[return-value]

    def to_checkout_session(self, default_currency: str = "USD") -> CheckoutSession:
        """Parse the event object into a CheckoutSession.

        Raises MalformedEventError when required fields or metadata are unusable.
        """
        obj = self.data.get("object") if isinstance(self.data, dict) else None
        if not isinstance(obj, dict):
            raise MalformedEventError("Event has no data.object", event_id=self.id, field="data.object")

        session_id = obj.get("id")
        if not session_id:
            raise MalformedEventError("Checkout session id missing", event_id=self.id, field="id")

        amount_total = obj.get("amount_total")
        if isinstance(amount_total, bool) or not isinstance(amount_total, int) or amount_total < 0:
            raise MalformedEventError("amount_total missing or invalid", event_id=self.id, field="amount_total")

        metadata = obj.get("metadata") or {}
        artwork_ids = _parse_artwork_ids(metadata.get("artworkIds"), self.id)
        buyer_id = _parse_optional_int(metadata.get("userId"), self.id, "metadata.userId")

        customer_details = obj.get("customer_details") or {}
        shipping_raw = obj.get("shipping_details") or (obj.get("collected_information") or {}).get("shipping_details")

        return CheckoutSession(
            session_id=str(session_id),
            payment_id=str(obj.get("payment_intent") or session_id),
            amount_total=amount_total,
            currency=str(obj.get("currency") or default_currency).upper(),
            buyer_id=buyer_id,
            artwork_ids=artwork_ids,
            customer_email=customer_details.get("email") or obj.get("customer_email"),
            shipping=ShippingDetails.from_provider(shipping_raw),
            event_id=self.id,
        )


def _parse_artwork_ids(raw: Any, event_id: str) -> list[int]:
    if raw is None:
        raise MalformedEventError("metadata.artworkIds missing", event_id=event_id, field="metadata.artworkIds")
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
        ids = [int(v) for v in value]
    except (TypeError, ValueError):
        raise MalformedEventError(
            "metadata.artworkIds is not a JSON list of ids", event_id=event_id, field="metadata.artworkIds"
        )
    if not ids:
        raise MalformedEventError("metadata.artworkIds is empty", event_id=event_id, field="metadata.artworkIds")
    return ids


def _parse_optional_int(raw: Any, event_id: str, field: str) -> Optional[int]:
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise MalformedEventError(f"{field} is not an id", event_id=event_id, field=field)


class SettlementResult(BaseModel):
    """Outcome of the authoritative phase (inventory + ledger)."""

    order_id: int
    payment_id: str
    created: bool
    buyer_id: Optional[int] = None
    buyer_email: Optional[str] = None
    transitioned: list[int] = Field(default_factory=list)
    unavailable: dict[int, str] = Field(default_factory=dict)
    missing: list[int] = Field(default_factory=list)
    amount_mismatch: Optional[Decimal] = None
    session: CheckoutSession

    @property
    def anomalies(self) -> list[str]:
        notes: list[str] = []
        if self.amount_mismatch is not None:
            notes.append(f"charged amount differs from item prices by {self.amount_mismatch}")
        if self.unavailable:
            items = ", ".join(f"{k}({v})" for k, v in sorted(self.unavailable.items()))
            notes.append(f"unavailable artworks: {items}")
        if self.missing:
            notes.append(f"missing artworks: {', '.join(str(m) for m in self.missing)}")
        return notes
