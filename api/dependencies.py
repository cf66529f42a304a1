"""
API依赖项 - 结算流程的组装（composition root）
"""
from fastapi import Depends

from application.ports.invoice_renderer import InvoiceRenderer
from application.ports.mailer import MailSender
from application.ports.payment_gateway import PaymentGateway
from application.ports.storage import StoragePort
from application.services.audit_service import AuditRecorder
from application.services.invoice_service import InvoiceService
from application.services.notification_service import NotificationDispatcher
from application.services.settlement_service import SettlementService
from core.config import settings
from infrastructure.adapters.storage_port import StorageProviderPortAdapter, UnavailableStoragePort
from infrastructure.external.invoices.pdf_renderer import ReportlabInvoiceRenderer
from infrastructure.external.mail import get_mail_sender
from infrastructure.external.payments import get_payment_gateway
from infrastructure.external.storage import get_storage_client
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork


async def get_stripe_gateway() -> PaymentGateway:
    return get_payment_gateway("stripe")


async def get_storage_port() -> StoragePort:
    provider = get_storage_client()
    if provider is None:
        # 存储不可用时结算照常进行，发票生成记录 RenderError
        return UnavailableStoragePort()
    return StorageProviderPortAdapter(provider)


async def get_invoice_renderer() -> InvoiceRenderer:
    return ReportlabInvoiceRenderer(
        company_name=settings.marketplace.company_name,
        company_address=settings.marketplace.company_address,
    )


async def get_mailer() -> MailSender:
    return get_mail_sender()


async def get_audit_recorder() -> AuditRecorder:
    return AuditRecorder(uow_factory=SQLAlchemyUnitOfWork, origin=settings.marketplace.audit_origin)


async def get_settlement_service(
    gateway: PaymentGateway = Depends(get_stripe_gateway),
    storage: StoragePort = Depends(get_storage_port),
    renderer: InvoiceRenderer = Depends(get_invoice_renderer),
    mailer: MailSender = Depends(get_mailer),
    audit: AuditRecorder = Depends(get_audit_recorder),
) -> SettlementService:
    return SettlementService(
        uow_factory=SQLAlchemyUnitOfWork,
        gateway=gateway,
        invoices=InvoiceService(renderer, storage, prefix=settings.marketplace.invoice_prefix),
        dispatcher=NotificationDispatcher(mailer, admin_email=settings.mail.admin_email),
        audit=audit,
        default_commission_rate=settings.marketplace.default_commission_rate,
        currency=settings.marketplace.currency,
    )

