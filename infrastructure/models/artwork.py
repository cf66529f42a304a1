"""
作品数据库模型
"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Text, ForeignKey
from datetime import datetime, timezone

from .base import Base


class ArtworkModel(Base):
    """
    作品数据库模型

    所有业务规则都在 domain.artwork.entity.Artwork 中
    """
    __tablename__ = "artworks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False, comment="作品标题")
    description = Column(Text, nullable=True, comment="作品描述")
    price = Column(Numeric(precision=12, scale=2), nullable=False, comment="售价")
    artist_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True, comment="艺术家ID")
    status = Column(
        String(20),
        nullable=False,
        default="pending",
        index=True,
        comment="状态: pending/approved/rejected/sold"
    )
    uploaded_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        comment="上传时间"
    )

    def __repr__(self):
        return f"<ArtworkModel(id={self.id}, title='{self.title}', status='{self.status}')>"
