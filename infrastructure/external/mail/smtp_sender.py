"""
SMTP mail sender built on aiosmtplib.

Transient connection failures are retried with exponential backoff;
refused recipients and protocol errors surface immediately.
"""
from __future__ import annotations

from email.message import EmailMessage
from typing import Optional

import aiosmtplib
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from application.ports.mailer import MailMessage
from core.logging_config import get_logger


logger = get_logger(__name__)

TRANSIENT_SMTP_ERRORS = (
    aiosmtplib.SMTPConnectError,
    aiosmtplib.SMTPServerDisconnected,
    aiosmtplib.SMTPTimeoutError,
)


def build_email(message: MailMessage, from_address: str) -> EmailMessage:
    email = EmailMessage()
    email["From"] = from_address
    email["To"] = message.to
    email["Subject"] = message.subject
    email.set_content("This message requires an HTML-capable mail client.")
    email.add_alternative(message.html, subtype="html")
    for attachment in message.attachments:
        maintype, _, subtype = attachment.content_type.partition("/")
        email.add_attachment(
            attachment.content,
            maintype=maintype,
            subtype=subtype or "octet-stream",
            filename=attachment.filename,
        )
    return email


class SMTPMailSender:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        from_address: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = False,
        start_tls: bool = True,
        timeout: float = 10.0,
        retry_attempts: int = 3,
    ) -> None:
        self.host = host
        self.port = port
        self.from_address = from_address
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.start_tls = start_tls and not use_tls
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)

    async def send(self, message: MailMessage) -> None:
        email = build_email(message, self.from_address)
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5.0),
            retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
            reraise=True,
        ):
            with attempt:
                await aiosmtplib.send(
                    email,
                    hostname=self.host,
                    port=self.port,
                    username=self.username,
                    password=self.password,
                    use_tls=self.use_tls,
                    start_tls=self.start_tls,
                    timeout=self.timeout,
                )
        logger.info(
            "mail_sent",
            template=message.template,
            recipient=message.to,
            attempts=attempt.retry_state.attempt_number,
        )
