"""
审计日志仓储接口（只追加，不提供更新/删除）
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .entity import AuditAction, AuditLogEntry


class AuditLogRepository(ABC):

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        """追加审计条目"""
        pass

    @abstractmethod
    async def list_recent(
        self,
        limit: int = 100,
        action: Optional[AuditAction] = None,
    ) -> List[AuditLogEntry]:
        """按时间倒序获取审计条目"""
        pass
