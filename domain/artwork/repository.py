"""
作品仓储接口
"""
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from .entity import Artwork


class ArtworkRepository(ABC):
    """作品仓储抽象接口"""

    @abstractmethod
    async def create(self, artwork: Artwork) -> Artwork:
        """创建作品"""
        pass

    @abstractmethod
    async def get_by_id(self, artwork_id: int) -> Optional[Artwork]:
        """根据ID获取作品"""
        pass

    @abstractmethod
    async def get_many(self, artwork_ids: Iterable[int]) -> Dict[int, Artwork]:
        """批量获取作品，返回 id -> 作品；不存在的ID不出现在结果中"""
        pass

    @abstractmethod
    async def mark_sold_if_approved(self, artwork_ids: Iterable[int]) -> List[int]:
        """
        条件更新：仅将 approved 状态的作品改为 sold

        Returns:
            本次真正完成状态转换的作品ID列表
        """
        pass
