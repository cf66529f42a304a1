import aiosmtplib
import pytest

from application.ports.mailer import MailAttachment, MailMessage
from core.config import MailSettings
from infrastructure.external.mail import get_mail_sender
from infrastructure.external.mail.console_sender import ConsoleMailSender
from infrastructure.external.mail.smtp_sender import SMTPMailSender, build_email


def _message():
    return MailMessage(
        to="buyer@example.com",
        subject="Order Confirmation #5",
        html="<h1>Thank you for your order!</h1>",
        template="order_confirmation",
        attachments=(MailAttachment("invoice-5.pdf", b"%PDF-1.4"),),
    )


def _sender(**kwargs):
    return SMTPMailSender(host="smtp.example.com", port=587, from_address="no-reply@example.com", **kwargs)


def test_build_email_has_html_and_attachment():
    email = build_email(_message(), '"Art Marketplace" <no-reply@artmarketplace.com>')

    assert email["To"] == "buyer@example.com"
    assert email["Subject"] == "Order Confirmation #5"
    html = email.get_body(preferencelist=("html",))
    assert "Thank you for your order!" in html.get_content()
    attachments = list(email.iter_attachments())
    assert [a.get_filename() for a in attachments] == ["invoice-5.pdf"]
    assert attachments[0].get_content_type() == "application/pdf"
    assert attachments[0].get_content() == b"%PDF-1.4"


@pytest.mark.asyncio
async def test_smtp_sender_retries_transient_errors(monkeypatch):
    calls = []

    async def _send(message, **kwargs):
        calls.append(kwargs)
        if len(calls) == 1:
            raise aiosmtplib.SMTPConnectError("connection refused")

    monkeypatch.setattr(aiosmtplib, "send", _send)

    await _sender(retry_attempts=2).send(_message())

    assert len(calls) == 2
    assert calls[0]["hostname"] == "smtp.example.com"
    assert calls[0]["start_tls"] is True


@pytest.mark.asyncio
async def test_smtp_sender_does_not_retry_rejections(monkeypatch):
    calls = []

    async def _send(message, **kwargs):
        calls.append(kwargs)
        raise aiosmtplib.SMTPResponseException(550, "mailbox unavailable")

    monkeypatch.setattr(aiosmtplib, "send", _send)

    with pytest.raises(aiosmtplib.SMTPResponseException):
        await _sender(retry_attempts=3).send(_message())
    assert len(calls) == 1


def test_backend_selection():
    assert isinstance(get_mail_sender(MailSettings(backend="console")), ConsoleMailSender)
    smtp = get_mail_sender(MailSettings(backend="smtp", host="mail.local", use_tls=True))
    assert isinstance(smtp, SMTPMailSender)
    assert smtp.start_tls is False
    with pytest.raises(ValueError):
        get_mail_sender(MailSettings(backend="pigeon"))
