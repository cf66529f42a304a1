"""Invoice rendering port."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Protocol, Sequence, runtime_checkable

from application.dtos.settlement import InvoiceLine


@dataclass(frozen=True)
class InvoiceDocument:
    """Everything printed on an invoice; same input renders the same bytes."""

    invoice_number: str
    issued_at: datetime
    currency: str
    balance_due: Decimal
    customer_lines: Sequence[str]
    lines: Sequence[InvoiceLine]


@runtime_checkable
class InvoiceRenderer(Protocol):
    def render(self, document: InvoiceDocument) -> bytes: ...
