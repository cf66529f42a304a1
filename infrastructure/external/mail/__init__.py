"""
Factory for mail senders selected by MAIL__BACKEND.
"""
from __future__ import annotations

from typing import Optional

from application.ports.mailer import MailSender
from core.config import MailSettings, settings


def get_mail_sender(mail: Optional[MailSettings] = None) -> MailSender:
    cfg = mail or settings.mail
    backend = (cfg.backend or "console").lower()
    if backend == "console":
        from .console_sender import ConsoleMailSender
        return ConsoleMailSender()
    if backend == "smtp":
        from .smtp_sender import SMTPMailSender
        return SMTPMailSender(
            host=cfg.host,
            port=cfg.port,
            from_address=cfg.from_address,
            username=cfg.username,
            password=cfg.password,
            use_tls=cfg.use_tls,
            start_tls=cfg.start_tls,
            timeout=cfg.timeout,
            retry_attempts=cfg.retry_attempts,
        )
    raise ValueError(f"Unsupported mail backend: {backend}")
