"""Outbound mail port.

Notification use cases build `MailMessage` values; infrastructure senders
(SMTP, console) deliver them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class MailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True)
class MailMessage:
    to: Optional[str]
    subject: str
    html: str
    template: str
    attachments: tuple[MailAttachment, ...] = field(default_factory=tuple)


@runtime_checkable
class MailSender(Protocol):
    async def send(self, message: MailMessage) -> None: ...
