"""
Settlement use case: turn a verified checkout event into a paid order.

Phases:
- settle: inventory transition, commission snapshot and ledger write in
  one transaction. Failures are audited in a separate transaction and
  re-raised.
- finalize: invoice and notifications for newly created orders, then the
  success audit entry. Never touches inventory or the ledger.
"""
from __future__ import annotations

from collections import OrderedDict
from decimal import Decimal
from typing import Callable, Optional

from application.dtos.settlement import (
    CheckoutSession,
    InvoiceLine,
    SettlementResult,
    WebhookEvent,
)
from application.ports.payment_gateway import PaymentGateway
from application.services.audit_service import AuditRecorder, describe_error
from application.services.commission_config_service import read_commission_rate
from application.services.invoice_service import InvoiceService, lines_from_order
from application.services.notification_service import ArtistSale, NotificationDispatcher
from core.logging_config import get_logger
from domain.artwork.service import InventoryService, InventoryTransition
from domain.common.exceptions import MalformedEventError, PersistenceError
from domain.common.unit_of_work import AbstractUnitOfWork
from domain.order.commission import to_money
from domain.order.entity import Order, OrderItem
from domain.order.service import OrderLedgerService


logger = get_logger(__name__)

REPLAY_NOTE = "duplicate delivery, order already recorded"


def _charged_difference(session: CheckoutSession, order: Order) -> Optional[Decimal]:
    """Charged amount minus the order total, or None when they agree."""
    diff = to_money(session.gross) - order.total_amount
    return diff if diff != 0 else None


class SettlementService:
    def __init__(
        self,
        uow_factory: Callable[..., AbstractUnitOfWork],
        gateway: PaymentGateway,
        invoices: InvoiceService,
        dispatcher: NotificationDispatcher,
        audit: AuditRecorder,
        *,
        default_commission_rate: Decimal,
        currency: str = "USD",
    ) -> None:
        self._uow_factory = uow_factory
        self.gateway = gateway
        self.invoices = invoices
        self.dispatcher = dispatcher
        self.audit = audit
        self.default_commission_rate = default_commission_rate
        self.currency = currency

    async def handle_event(self, event: WebhookEvent) -> Optional[SettlementResult]:
        """Settle a verified event; None for kinds this pipeline ignores.

        Raises MalformedEventError (after auditing it) when the session
        payload cannot be parsed.
        """
        if event.kind != "checkout_completed":
            logger.info("webhook_ignored", event_id=event.id, event_type=event.type)
            return None
        try:
            session = event.to_checkout_session(self.currency)
        except MalformedEventError as exc:
            logger.warning("webhook_malformed", event_id=event.id, field=exc.field, error=exc.message)
            await self.audit.record_failure(exc)
            raise
        return await self.settle(session)

    async def settle(self, session: CheckoutSession) -> SettlementResult:
        logger.info(
            "settlement_started",
            session_id=session.session_id,
            payment_id=session.payment_id,
            buyer_id=session.buyer_id,
            artwork_ids=session.artwork_ids,
        )
        try:
            result = await self._settle(session)
        except Exception as exc:
            logger.error(
                "settlement_failed",
                payment_id=session.payment_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await self.audit.record_failure(exc, buyer_id=session.buyer_id, payment_id=session.payment_id)
            raise
        return result

    async def _settle(self, session: CheckoutSession) -> SettlementResult:
        async with self._uow_factory() as uow:
            ledger = OrderLedgerService(uow.order_repository)
            existing = await uow.order_repository.get_by_payment_id(session.payment_id)
            if existing is not None:
                logger.info("order_replayed", order_id=existing.id, payment_id=session.payment_id)
                return await self._result(uow, session, existing, created=False)

            rate = await read_commission_rate(uow.config_repository, self.default_commission_rate)

            transition = await InventoryService(uow.artwork_repository).mark_sold(session.artwork_ids)
            logger.info(
                "inventory_transitioned",
                payment_id=session.payment_id,
                transitioned=list(transition.transitioned),
                unavailable=transition.unavailable,
                missing=list(transition.missing),
            )

            catalog = await uow.artwork_repository.get_many(transition.requested)
            items = [
                OrderItem(
                    artwork_id=artwork.id,
                    title=artwork.title,
                    price=artwork.price,
                    artist_id=artwork.artist_id,
                )
                for artwork in (catalog[a] for a in transition.requested if a in catalog)
            ]
            draft = Order.place(
                buyer_id=session.buyer_id,
                items=items,
                rate=rate,
                payment_id=session.payment_id,
                currency=session.currency,
                checkout_session_id=session.session_id,
                shipping=session.shipping.to_address(),
            )
            order, created = await ledger.find_or_create(draft)
            if not created:
                # Lost the insert race; discard this transaction's inventory writes
                logger.info("order_replayed", order_id=order.id, payment_id=session.payment_id)
                await uow.rollback()
                return await self._result(None, session, order, created=False)

            result = await self._result(uow, session, order, created=True, transition=transition)
        logger.info(
            "settlement_committed",
            order_id=result.order_id,
            payment_id=result.payment_id,
            total=str(order.total_amount),
            commission=str(order.commission_amount),
            rate=str(order.commission_rate),
        )
        return result

    async def _result(
        self,
        uow: Optional[AbstractUnitOfWork],
        session: CheckoutSession,
        order: Order,
        *,
        created: bool,
        transition: Optional[InventoryTransition] = None,
    ) -> SettlementResult:
        if order.id is None:
            raise PersistenceError("Order has no id after write", operation="settlement.settle")
        buyer_email = session.customer_email
        if uow is not None and order.buyer_id is not None:
            buyer = await uow.user_repository.get_by_id(order.buyer_id)
            if buyer is not None and buyer.contact_email:
                buyer_email = buyer.contact_email
        return SettlementResult(
            order_id=order.id,
            payment_id=order.payment_id,
            created=created,
            buyer_id=order.buyer_id,
            buyer_email=buyer_email,
            transitioned=list(transition.transitioned) if transition else [],
            unavailable=dict(transition.unavailable) if transition else {},
            missing=list(transition.missing) if transition else [],
            amount_mismatch=_charged_difference(session, order) if created else None,
            session=session,
        )

    async def finalize(self, result: SettlementResult) -> None:
        notes = list(result.anomalies)
        try:
            if result.created:
                notes.extend(await self._invoice_and_notify(result))
            else:
                notes.append(REPLAY_NOTE)
        except Exception as exc:
            notes.append(f"finalize failed: {describe_error(exc)}")
            logger.error("settlement_finalize_failed", order_id=result.order_id, error=str(exc))
            raise
        finally:
            await self.audit.record_success(result.order_id, result.buyer_id, notes)
        logger.info("settlement_finalized", order_id=result.order_id, created=result.created)

    async def process(self, session: CheckoutSession) -> SettlementResult:
        result = await self.settle(session)
        await self.finalize(result)
        return result

    async def _invoice_and_notify(self, result: SettlementResult) -> list[str]:
        notes: list[str] = []
        order, artist_sales = await self._load_order(result)

        lines = await self._invoice_lines(result.session.session_id, order)
        customer_lines = order.shipping.lines() or [line for line in (result.buyer_email,) if line]
        invoice = await self.invoices.generate(order, lines, customer_lines)
        if invoice is None:
            notes.append("invoice not generated")

        report = await self.dispatcher.dispatch(order, result.buyer_email, artist_sales, invoice)
        if report.failed or report.skipped:
            notes.append(report.summary())
        return notes

    async def _load_order(self, result: SettlementResult) -> tuple[Order, list[ArtistSale]]:
        async with self._uow_factory(readonly=True) as uow:
            order = await uow.order_repository.get_by_id(result.order_id)
            if order is None:
                raise PersistenceError(
                    f"Order {result.order_id} not found after commit",
                    operation="settlement.finalize",
                )
            transitioned = set(result.transitioned)
            sold = [item for item in order.items if item.artwork_id in transitioned]
            artists = await uow.user_repository.get_many(
                {item.artist_id for item in sold if item.artist_id is not None}
            )

        grouped: "OrderedDict[Optional[int], list[str]]" = OrderedDict()
        for item in sold:
            grouped.setdefault(item.artist_id, []).append(item.title)
        artist_sales = [
            ArtistSale(
                artist_id=artist_id,
                email=artists[artist_id].contact_email if artist_id in artists else None,
                titles=tuple(titles),
            )
            for artist_id, titles in grouped.items()
        ]
        return order, artist_sales

    async def _invoice_lines(self, session_id: str, order: Order) -> list[InvoiceLine]:
        try:
            lines = await self.gateway.list_line_items(session_id)
        except Exception as exc:
            logger.warning("line_items_unavailable", order_id=order.id, session_id=session_id, error=str(exc))
            return lines_from_order(order)
        return lines or lines_from_order(order)
