"""
库存领域服务 - 售出状态转换
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Tuple

from .entity import Artwork, ArtworkStatus
from .repository import ArtworkRepository


@dataclass(frozen=True)
class InventoryTransition:
    """
    一次售出转换的结果

    requested: 请求的作品ID（去重后、保持顺序）
    transitioned: 本次由 approved -> sold 的作品ID
    unavailable: 存在但不可售的作品 (id -> 当前状态)
    missing: 不存在的作品ID
    """

    requested: Tuple[int, ...]
    transitioned: Tuple[int, ...]
    unavailable: Dict[int, str] = field(default_factory=dict)
    missing: Tuple[int, ...] = ()

    @property
    def has_anomalies(self) -> bool:
        return bool(self.unavailable or self.missing)


def _dedupe(artwork_ids: Iterable[int]) -> Tuple[int, ...]:
    seen: Dict[int, None] = {}
    for artwork_id in artwork_ids:
        seen.setdefault(int(artwork_id), None)
    return tuple(seen)


class InventoryService:
    """
    库存领域服务

    职责：
    1. 将一批作品从 approved 转为 sold（条件更新，并发安全）
    2. 报告不可售与不存在的作品，不使整批失败
    """

    def __init__(self, artwork_repository: ArtworkRepository):
        self.artwork_repository = artwork_repository

    async def mark_sold(self, artwork_ids: Iterable[int]) -> InventoryTransition:
        requested = _dedupe(artwork_ids)
        if not requested:
            return InventoryTransition(requested=(), transitioned=())

        transitioned_ids = set(await self.artwork_repository.mark_sold_if_approved(requested))
        transitioned = tuple(a for a in requested if a in transitioned_ids)

        unavailable: Dict[int, str] = {}
        missing: Tuple[int, ...] = ()
        leftover = [a for a in requested if a not in transitioned_ids]
        if leftover:
            current: Dict[int, Artwork] = await self.artwork_repository.get_many(leftover)
            missing = tuple(a for a in leftover if a not in current)
            for artwork_id in leftover:
                artwork = current.get(artwork_id)
                if artwork is not None:
                    status = artwork.status
                    unavailable[artwork_id] = status.value if isinstance(status, ArtworkStatus) else str(status)

        return InventoryTransition(
            requested=requested,
            transitioned=transitioned,
            unavailable=unavailable,
            missing=missing,
        )
