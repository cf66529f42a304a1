"""
键值配置表
"""
from sqlalchemy import Column, String, DateTime
from datetime import datetime, timezone

from .base import Base


class ConfigModel(Base):
    __tablename__ = "configs"

    key = Column(String(100), primary_key=True, comment="配置键")
    value = Column(String(500), nullable=False, comment="配置值")
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="更新时间"
    )
