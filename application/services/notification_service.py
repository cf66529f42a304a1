"""
Notification use case: buyer confirmation, operator alert and artist notices.

Each send is an independent task; a failed send is logged and reported,
never raised to the caller.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from html import escape
from typing import Optional, Sequence

from application.ports.mailer import MailAttachment, MailMessage, MailSender
from application.services.invoice_service import PDF_CONTENT_TYPE, InvoiceArtifact
from core.logging_config import get_logger
from domain.common.exceptions import NotificationError
from domain.order.entity import Order


logger = get_logger(__name__)

TEMPLATE_ORDER_CONFIRMATION = "order_confirmation"
TEMPLATE_ADMIN_NEW_ORDER = "admin_new_order"
TEMPLATE_ARTWORK_SOLD = "artwork_sold"


@dataclass(frozen=True)
class ArtistSale:
    """Artworks of one artist sold by this settlement."""

    artist_id: Optional[int]
    email: Optional[str]
    titles: tuple[str, ...]


@dataclass(frozen=True)
class DeliveryOutcome:
    template: str
    recipient: Optional[str]
    error: Optional[str] = None


@dataclass
class DispatchReport:
    sent: list[DeliveryOutcome] = field(default_factory=list)
    failed: list[DeliveryOutcome] = field(default_factory=list)
    skipped: list[DeliveryOutcome] = field(default_factory=list)

    def summary(self) -> str:
        return f"notifications sent={len(self.sent)} failed={len(self.failed)} skipped={len(self.skipped)}"


def order_confirmation(order: Order, to: Optional[str], invoice: Optional[InvoiceArtifact]) -> MailMessage:
    attachments: tuple[MailAttachment, ...] = ()
    if invoice is not None:
        attachments = (MailAttachment(invoice.filename, invoice.content, PDF_CONTENT_TYPE),)
    return MailMessage(
        to=to,
        subject=f"Order Confirmation #{order.id}",
        html=(
            "<h1>Thank you for your order!</h1>"
            f"<p>Your order ID is <strong>{order.id}</strong>.</p>"
            + ("<p>Please find your invoice attached.</p>" if attachments else "")
        ),
        template=TEMPLATE_ORDER_CONFIRMATION,
        attachments=attachments,
    )


def admin_new_order(order: Order, to: Optional[str]) -> MailMessage:
    return MailMessage(
        to=to,
        subject=f"New Order Received #{order.id}",
        html=(
            "<h1>New Order Received</h1>"
            f"<p>Order ID: <strong>{order.id}</strong></p>"
            f"<p>Total Amount: {order.total_amount} {order.currency}</p>"
        ),
        template=TEMPLATE_ADMIN_NEW_ORDER,
    )


def artwork_sold(to: Optional[str], title: str) -> MailMessage:
    return MailMessage(
        to=to,
        subject="Good news! Your Artwork Has Sold",
        html=(
            "<h1>Congratulations!</h1>"
            f"<p>Your artwork <strong>{escape(title)}</strong> has just been sold.</p>"
            "<p>Check your dashboard for details.</p>"
        ),
        template=TEMPLATE_ARTWORK_SOLD,
    )


class NotificationDispatcher:
    def __init__(self, sender: MailSender, *, admin_email: Optional[str]) -> None:
        self.sender = sender
        self.admin_email = admin_email

    def build_messages(
        self,
        order: Order,
        buyer_email: Optional[str],
        artist_sales: Sequence[ArtistSale],
        invoice: Optional[InvoiceArtifact],
    ) -> list[MailMessage]:
        messages = [
            order_confirmation(order, buyer_email, invoice),
            admin_new_order(order, self.admin_email),
        ]
        for sale in artist_sales:
            messages.extend(artwork_sold(sale.email, title) for title in sale.titles)
        return messages

    async def dispatch(
        self,
        order: Order,
        buyer_email: Optional[str],
        artist_sales: Sequence[ArtistSale],
        invoice: Optional[InvoiceArtifact],
    ) -> DispatchReport:
        messages = self.build_messages(order, buyer_email, artist_sales, invoice)
        outcomes = await asyncio.gather(*(self._deliver(order, message) for message in messages))

        report = DispatchReport()
        for status, outcome in outcomes:
            getattr(report, status).append(outcome)
        logger.info(
            "notifications_dispatched",
            order_id=order.id,
            sent=len(report.sent),
            failed=len(report.failed),
            skipped=len(report.skipped),
        )
        return report

    async def _deliver(self, order: Order, message: MailMessage) -> tuple[str, DeliveryOutcome]:
        if not message.to:
            logger.info("notification_skipped", order_id=order.id, template=message.template)
            return "skipped", DeliveryOutcome(message.template, None, "no recipient")
        try:
            await self.sender.send(message)
        except Exception as exc:
            error = NotificationError(str(exc), recipient=message.to, template=message.template)
            logger.warning(
                "notification_failed",
                order_id=order.id,
                template=message.template,
                recipient=message.to,
                error_type=error.error_type,
                error=error.message,
            )
            return "failed", DeliveryOutcome(message.template, message.to, error.message)
        return "sent", DeliveryOutcome(message.template, message.to)
