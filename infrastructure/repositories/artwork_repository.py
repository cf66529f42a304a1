"""
作品仓储实现 - 使用SQLAlchemy实现数据访问
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.artwork.entity import Artwork, ArtworkStatus
from domain.artwork.repository import ArtworkRepository
from infrastructure.models.artwork import ArtworkModel
from infrastructure.repositories.base import translate_db_errors
from core.logging_config import get_logger


logger = get_logger(__name__)


class SQLAlchemyArtworkRepository(ArtworkRepository):
    """作品仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: ArtworkModel) -> Artwork:
        """将数据库模型转换为领域实体"""
        return Artwork(
            id=model.id,
            title=model.title,
            description=model.description,
            price=Decimal(str(model.price)),
            artist_id=model.artist_id,
            status=ArtworkStatus(model.status),
            uploaded_at=model.uploaded_at,
        )

    def _to_model(self, entity: Artwork) -> ArtworkModel:
        """将领域实体转换为数据库模型"""
        return ArtworkModel(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            price=entity.price,
            artist_id=entity.artist_id,
            status=entity.status.value,
            uploaded_at=entity.uploaded_at or datetime.now(timezone.utc),
        )

    @translate_db_errors("artwork.create")
    async def create(self, artwork: Artwork) -> Artwork:
        db_artwork = self._to_model(artwork)
        self.session.add(db_artwork)
        await self.session.flush()
        await self.session.refresh(db_artwork)
        return self._to_entity(db_artwork)

    @translate_db_errors("artwork.get_by_id")
    async def get_by_id(self, artwork_id: int) -> Optional[Artwork]:
        result = await self.session.execute(
            select(ArtworkModel).where(ArtworkModel.id == artwork_id)
        )
        db_artwork = result.scalar_one_or_none()
        return self._to_entity(db_artwork) if db_artwork else None

    @translate_db_errors("artwork.get_many")
    async def get_many(self, artwork_ids: Iterable[int]) -> Dict[int, Artwork]:
        ids = list(artwork_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(ArtworkModel).where(ArtworkModel.id.in_(ids))
        )
        return {m.id: self._to_entity(m) for m in result.scalars().all()}

    @translate_db_errors("artwork.mark_sold")
    async def mark_sold_if_approved(self, artwork_ids: Iterable[int]) -> List[int]:
        """单条条件 UPDATE：只有 approved 的行会被改为 sold，并发下每行至多一次成功"""
        ids = list(artwork_ids)
        if not ids:
            return []
        stmt = (
            update(ArtworkModel)
            .where(
                ArtworkModel.id.in_(ids),
                ArtworkModel.status == ArtworkStatus.APPROVED.value,
            )
            .values(status=ArtworkStatus.SOLD.value)
            .returning(ArtworkModel.id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        transitioned = [row[0] for row in result.all()]
        logger.info("artworks_marked_sold", requested=ids, transitioned=transitioned)
        return transitioned
