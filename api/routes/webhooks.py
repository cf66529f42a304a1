"""
Payment webhook routes.

The route stays thin: verify, settle inline, then hand the invoice and
notifications to a background task so the provider gets its ack promptly.
"""
from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from api.dependencies import get_settlement_service, get_stripe_gateway
from application.ports.payment_gateway import PaymentGateway
from application.services.settlement_service import SettlementService
from core.logging_config import get_logger
from domain.common.exceptions import MalformedEventError


router = APIRouter(prefix="/webhooks", tags=["Webhooks"])
logger = get_logger(__name__)

ACK = {"received": True}


@router.post("/stripe", summary="Stripe checkout webhook")
async def stripe_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    gateway: PaymentGateway = Depends(get_stripe_gateway),
    service: SettlementService = Depends(get_settlement_service),
):
    # Signature is checked against the exact bytes received
    raw_body = await request.body()
    event = gateway.parse_webhook(dict(request.headers), raw_body)

    try:
        result = await service.handle_event(event)
    except MalformedEventError:
        # Redelivery cannot fix the payload; already audited
        return ACK

    if result is not None:
        background_tasks.add_task(service.finalize, result)
        logger.info(
            "webhook_settled",
            event_id=event.id,
            order_id=result.order_id,
            created=result.created,
        )
    return ACK
