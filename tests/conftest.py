"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os
import tempfile

_TMP = tempfile.gettempdir()

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("DATABASE__URL", f"sqlite+aiosqlite:///{os.path.join(_TMP, 'settlement-unused.db')}")
os.environ.setdefault("STRIPE__SECRET_KEY", "sk_test_123")
os.environ.setdefault("STRIPE__WEBHOOK_SECRET", "whsec_test_secret")
os.environ.setdefault("STORAGE__LOCAL_BASE_PATH", os.path.join(_TMP, "settlement-test-storage"))
os.environ.setdefault("MAIL__BACKEND", "console")

import json  # noqa: E402
from decimal import Decimal  # noqa: E402
from functools import partial  # noqa: E402
from types import SimpleNamespace  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from application.dtos.settlement import CheckoutSession, ShippingDetails, WebhookEvent  # noqa: E402
from application.ports.storage import StorageInfo, UploadOutcome  # noqa: E402
from application.services.audit_service import AuditRecorder  # noqa: E402
from application.services.invoice_service import InvoiceService  # noqa: E402
from application.services.notification_service import NotificationDispatcher  # noqa: E402
from application.services.settlement_service import SettlementService  # noqa: E402
from domain.artwork.entity import Artwork, ArtworkStatus  # noqa: E402
from domain.common.exceptions import InvalidSignatureError  # noqa: E402
from domain.user.entity import User, UserRole  # noqa: E402
from infrastructure.database import create_engine_from_url, create_tables, drop_tables  # noqa: E402
from infrastructure.external.invoices.pdf_renderer import ReportlabInvoiceRenderer  # noqa: E402
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork  # noqa: E402


ADMIN_EMAIL = "ops@example.com"


class StubGateway:
    """Accepts headers carrying `Stripe-Signature: valid`; body is the event JSON."""

    provider = "stripe"

    def __init__(self, lines=None, error: Optional[Exception] = None):
        self.lines = list(lines or [])
        self.error = error
        self.listed: list[str] = []

    def parse_webhook(self, headers: dict, body: bytes) -> WebhookEvent:
        signature = {k.lower(): v for k, v in headers.items()}.get("stripe-signature")
        if signature != "valid":
            raise InvalidSignatureError("No signatures found matching the expected signature", provider=self.provider)
        event = json.loads(body)
        return WebhookEvent(id=event["id"], type=event["type"], provider=self.provider, data=event["data"])

    async def list_line_items(self, session_id: str):
        self.listed.append(session_id)
        if self.error is not None:
            raise self.error
        return list(self.lines)


class MemoryStorage:
    def __init__(self, fail: bool = False):
        self.objects: dict[str, bytes] = {}
        self.fail = fail

    def info(self) -> StorageInfo:
        return StorageInfo(type="memory", bucket=None, region=None)

    async def upload(self, data, key, metadata=None, content_type=None) -> UploadOutcome:
        if self.fail:
            raise OSError("disk full")
        self.objects[key] = data
        return UploadOutcome(key=key, etag=None, size=len(data), content_type=content_type)

    async def download(self, key: str) -> bytes:
        return self.objects[key]

    async def exists(self, key: str) -> bool:
        return key in self.objects

    def public_url(self, key: str):
        return None


class RecordingMailer:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.sent = []

    async def send(self, message) -> None:
        if message.to in self.fail_for:
            raise ConnectionError(f"SMTP refused {message.to}")
        self.sent.append(message)


@pytest.fixture
async def engine(tmp_path):
    db_engine = create_engine_from_url(f"sqlite+aiosqlite:///{tmp_path / 'settlement.db'}")
    await create_tables(db_engine)
    yield db_engine
    await drop_tables(db_engine)
    await db_engine.dispose()


@pytest.fixture
def uow_factory(engine):
    session_factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    return partial(SQLAlchemyUnitOfWork, session_factory)


@pytest.fixture
async def catalog(uow_factory):
    """Buyer, two artists, two approved artworks and one pending artwork."""
    async with uow_factory() as uow:
        buyer = await uow.user_repository.create(User(id=None, username="buyer", email="buyer@example.com"))
        monet = await uow.user_repository.create(
            User(id=None, username="monet", email="monet@example.com", role=UserRole.ARTIST)
        )
        kahlo = await uow.user_repository.create(
            User(id=None, username="kahlo", email="kahlo@example.com", role=UserRole.ARTIST)
        )
        sunrise = await uow.artwork_repository.create(
            Artwork(id=None, title="Sunrise", price=Decimal("60.00"), artist_id=monet.id, status=ArtworkStatus.APPROVED)
        )
        harbor = await uow.artwork_repository.create(
            Artwork(id=None, title="Harbor", price=Decimal("40.00"), artist_id=kahlo.id, status=ArtworkStatus.APPROVED)
        )
        draft = await uow.artwork_repository.create(
            Artwork(id=None, title="Draft", price=Decimal("30.00"), artist_id=monet.id, status=ArtworkStatus.PENDING)
        )
    return SimpleNamespace(buyer=buyer, monet=monet, kahlo=kahlo, sunrise=sunrise, harbor=harbor, draft=draft)


@pytest.fixture
def make_session():
    def _make(
        artwork_ids,
        *,
        amount_total: int = 10000,
        buyer_id: Optional[int] = None,
        payment_id: str = "pi_test_1",
        session_id: str = "cs_test_1",
        customer_email: Optional[str] = "guest@example.com",
    ) -> CheckoutSession:
        return CheckoutSession(
            session_id=session_id,
            payment_id=payment_id,
            amount_total=amount_total,
            currency="USD",
            buyer_id=buyer_id,
            artwork_ids=list(artwork_ids),
            customer_email=customer_email,
            shipping=ShippingDetails(
                name="Ada Buyer", line1="1 Main St", city="Springfield", state="IL", postal_code="62701", country="US"
            ),
        )

    return _make


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def renderer():
    return ReportlabInvoiceRenderer(company_name="Art Marketplace Inc.", company_address=["123 Creative Blvd."])


@pytest.fixture
def settlement_service(uow_factory, gateway, storage, mailer, renderer):
    return SettlementService(
        uow_factory=uow_factory,
        gateway=gateway,
        invoices=InvoiceService(renderer, storage),
        dispatcher=NotificationDispatcher(mailer, admin_email=ADMIN_EMAIL),
        audit=AuditRecorder(uow_factory, origin="stripe-webhook"),
        default_commission_rate=Decimal("0.20"),
    )
