"""
审计日志数据库模型（只追加）
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, event
from datetime import datetime, timezone

from .base import Base


class AuditLogModel(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String(50), nullable=False, index=True, comment="审计动作")
    user_id = Column(Integer, nullable=True, index=True, comment="关联用户ID")
    details = Column(Text, nullable=False, default="", comment="详情")
    origin = Column(String(100), nullable=False, comment="来源，如 stripe-webhook")
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
        comment="记录时间"
    )

    def __repr__(self):
        return f"<AuditLogModel(id={self.id}, action='{self.action}')>"


class AuditLogImmutableError(RuntimeError):
    pass


@event.listens_for(AuditLogModel, "before_update")
def _reject_update(mapper, connection, target):
    raise AuditLogImmutableError(f"audit log entry {target.id} is append-only")


@event.listens_for(AuditLogModel, "before_delete")
def _reject_delete(mapper, connection, target):
    raise AuditLogImmutableError(f"audit log entry {target.id} cannot be deleted")
