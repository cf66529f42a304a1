"""Development mail backend: logs messages instead of delivering them."""
from __future__ import annotations

from application.ports.mailer import MailMessage
from core.logging_config import get_logger


logger = get_logger(__name__)


class ConsoleMailSender:
    async def send(self, message: MailMessage) -> None:
        logger.info(
            "mail_console",
            template=message.template,
            recipient=message.to,
            subject=message.subject,
            attachments=[a.filename for a in message.attachments],
        )
