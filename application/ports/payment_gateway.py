"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from application.dtos.settlement import InvoiceLine, WebhookEvent


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the payment provider driving settlements."""

    provider: str

    def parse_webhook(self, headers: dict[str, Any], body: bytes) -> WebhookEvent: ...

    async def list_line_items(self, session_id: str) -> list[InvoiceLine]: ...
