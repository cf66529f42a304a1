"""
键值配置仓储实现
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from domain.config.entity import ConfigEntry
from domain.config.repository import ConfigRepository
from infrastructure.models.config import ConfigModel
from infrastructure.repositories.base import translate_db_errors


class SQLAlchemyConfigRepository(ConfigRepository):

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ConfigModel) -> ConfigEntry:
        return ConfigEntry(key=model.key, value=model.value, updated_at=model.updated_at)

    @translate_db_errors("config.get")
    async def get(self, key: str) -> Optional[ConfigEntry]:
        db_entry = await self.session.get(ConfigModel, key)
        return self._to_entity(db_entry) if db_entry else None

    @translate_db_errors("config.set")
    async def set(self, key: str, value: str) -> ConfigEntry:
        now = datetime.now(timezone.utc)
        db_entry = await self.session.get(ConfigModel, key)
        if db_entry is None:
            db_entry = ConfigModel(key=key, value=value, updated_at=now)
            self.session.add(db_entry)
        else:
            db_entry.value = value
            db_entry.updated_at = now
        await self.session.flush()
        return ConfigEntry(key=key, value=value, updated_at=now)
