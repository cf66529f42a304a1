"""
审计日志仓储实现（只追加）
"""
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from domain.audit.entity import AuditAction, AuditLogEntry
from domain.audit.repository import AuditLogRepository
from infrastructure.models.audit_log import AuditLogModel
from infrastructure.repositories.base import translate_db_errors


class SQLAlchemyAuditLogRepository(AuditLogRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: AuditLogModel) -> AuditLogEntry:
        return AuditLogEntry(
            id=model.id,
            action=AuditAction(model.action),
            details=model.details,
            origin=model.origin,
            user_id=model.user_id,
            created_at=model.created_at,
        )

    @translate_db_errors("audit.append")
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        created_at = entry.created_at or datetime.now(timezone.utc)
        db_entry = AuditLogModel(
            action=entry.action.value,
            user_id=entry.user_id,
            details=entry.details,
            origin=entry.origin,
            created_at=created_at,
        )
        self.session.add(db_entry)
        await self.session.flush()
        return replace(entry, id=db_entry.id, created_at=created_at)

    @translate_db_errors("audit.list_recent")
    async def list_recent(
        self,
        limit: int = 100,
        action: Optional[AuditAction] = None,
    ) -> List[AuditLogEntry]:
        query = select(AuditLogModel)
        if action is not None:
            query = query.where(AuditLogModel.action == action.value)
        query = query.order_by(AuditLogModel.created_at.desc(), AuditLogModel.id.desc()).limit(limit)
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]
