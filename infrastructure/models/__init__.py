"""Infrastructure models package exports."""
from .base import Base, metadata
from .user import UserModel
from .artwork import ArtworkModel
from .order import OrderModel, OrderItemModel
from .audit_log import AuditLogModel, AuditLogImmutableError
from .config import ConfigModel

__all__ = [
    "Base",
    "metadata",
    "UserModel",
    "ArtworkModel",
    "OrderModel",
    "OrderItemModel",
    "AuditLogModel",
    "AuditLogImmutableError",
    "ConfigModel",
]
