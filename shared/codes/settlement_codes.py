"""
Settlement specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class SettlementCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Pipeline errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_RECOVERABLE = 60001
    SIGNATURE_ERROR = 60002
    TIMEOUT = 60003
    RATE_LIMITED = 60004
    MALFORMED_EVENT = 60005
    NOTIFICATION_ERROR = 60006
    RENDER_ERROR = 60007


# Provider event type -> internal event kind
PROVIDER_EVENT_KINDS = {
    "stripe": {
        "checkout.session.completed": "checkout_completed",
    },
}

# Currencies without a minor unit (amount_total already in whole units)
ZERO_DECIMAL_CURRENCIES = {"JPY", "KRW"}
