"""
Invoice use case: render the order's PDF invoice and store it.

Failures never propagate; the caller gets None and the order stays paid.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Sequence

from application.dtos.settlement import InvoiceLine
from application.ports.invoice_renderer import InvoiceDocument, InvoiceRenderer
from application.ports.storage import StoragePort
from core.logging_config import get_logger
from domain.common.exceptions import RenderError
from domain.order.entity import Order


logger = get_logger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass(frozen=True)
class InvoiceArtifact:
    key: str
    filename: str
    content: bytes
    url: Optional[str] = None


def lines_from_order(order: Order) -> list[InvoiceLine]:
    """Invoice lines built from the order's snapshotted items."""
    return [
        InvoiceLine(
            description=item.title,
            unit_amount=item.price,
            quantity=1,
            line_total=item.price,
        )
        for item in order.items
    ]


class InvoiceService:
    def __init__(
        self,
        renderer: InvoiceRenderer,
        storage: StoragePort,
        *,
        prefix: str = "invoices",
    ) -> None:
        self.renderer = renderer
        self.storage = storage
        self.prefix = prefix.strip("/")

    @staticmethod
    def filename_for(order_id: int) -> str:
        return f"invoice-{order_id}.pdf"

    def key_for(self, order_id: int) -> str:
        return f"{self.prefix}/{self.filename_for(order_id)}"

    def build_document(
        self,
        order: Order,
        lines: Sequence[InvoiceLine],
        customer_lines: Sequence[str] = (),
    ) -> InvoiceDocument:
        if order.id is None or order.created_at is None:
            raise RenderError("Order must be persisted before invoicing", order_id=order.id)
        return InvoiceDocument(
            invoice_number=str(order.id),
            issued_at=order.created_at,
            currency=order.currency,
            balance_due=order.total_amount,
            customer_lines=list(customer_lines) or order.shipping.lines(),
            lines=list(lines) or lines_from_order(order),
        )

    async def generate(
        self,
        order: Order,
        lines: Sequence[InvoiceLine] = (),
        customer_lines: Sequence[str] = (),
    ) -> Optional[InvoiceArtifact]:
        key = self.key_for(order.id) if order.id is not None else None
        try:
            document = self.build_document(order, lines, customer_lines)
            # reportlab is CPU-bound and synchronous
            content = await asyncio.to_thread(self.renderer.render, document)
            outcome = await self.storage.upload(
                content,
                key,
                metadata={"order_id": str(order.id)},
                content_type=PDF_CONTENT_TYPE,
            )
        except Exception as exc:
            error = exc if isinstance(exc, RenderError) else RenderError(str(exc), order_id=order.id)
            logger.error(
                "invoice_render_failed",
                order_id=order.id,
                key=key,
                error_type=error.error_type,
                error=error.message,
                exc_info=exc,
            )
            return None

        logger.info("invoice_stored", order_id=order.id, key=outcome.key, size=len(content))
        return InvoiceArtifact(
            key=outcome.key,
            filename=self.filename_for(order.id),
            content=content,
            url=outcome.url,
        )
