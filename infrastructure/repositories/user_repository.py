"""
用户仓储实现 - 使用SQLAlchemy实现数据访问
"""
from typing import Dict, Iterable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from domain.user.entity import User, UserRole
from domain.user.repository import UserRepository
from infrastructure.models.user import UserModel
from infrastructure.repositories.base import translate_db_errors


class SQLAlchemyUserRepository(UserRepository):
    """用户仓储的SQLAlchemy实现"""

    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, model: UserModel) -> User:
        """将数据库模型转换为领域实体"""
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            role=UserRole(model.role),
            is_active=model.is_active,
        )

    def _to_model(self, entity: User) -> UserModel:
        """将领域实体转换为数据库模型"""
        return UserModel(
            id=entity.id,
            username=entity.username,
            email=entity.email,
            role=entity.role.value,
            is_active=entity.is_active,
        )

    @translate_db_errors("user.create")
    async def create(self, user: User) -> User:
        """创建用户"""
        db_user = self._to_model(user)
        self.session.add(db_user)
        await self.session.flush()  # 获取生成的ID
        await self.session.refresh(db_user)
        return self._to_entity(db_user)

    @translate_db_errors("user.get_by_id")
    async def get_by_id(self, user_id: int) -> Optional[User]:
        """根据ID获取用户"""
        result = await self.session.execute(
            select(UserModel).where(UserModel.id == user_id)
        )
        db_user = result.scalar_one_or_none()
        return self._to_entity(db_user) if db_user else None

    @translate_db_errors("user.get_many")
    async def get_many(self, user_ids: Iterable[int]) -> Dict[int, User]:
        """批量获取用户"""
        ids = list(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(UserModel).where(UserModel.id.in_(ids))
        )
        return {m.id: self._to_entity(m) for m in result.scalars().all()}
