import asyncio

import pytest

from domain.artwork.entity import ArtworkStatus
from domain.artwork.service import InventoryService


@pytest.mark.asyncio
async def test_mark_sold_reports_unavailable_and_missing(uow_factory, catalog):
    async with uow_factory() as uow:
        transition = await InventoryService(uow.artwork_repository).mark_sold(
            [catalog.sunrise.id, catalog.draft.id, 9999, catalog.sunrise.id]
        )

    assert transition.requested == (catalog.sunrise.id, catalog.draft.id, 9999)
    assert transition.transitioned == (catalog.sunrise.id,)
    assert transition.unavailable == {catalog.draft.id: "pending"}
    assert transition.missing == (9999,)
    assert transition.has_anomalies

    async with uow_factory(readonly=True) as uow:
        sunrise = await uow.artwork_repository.get_by_id(catalog.sunrise.id)
        draft = await uow.artwork_repository.get_by_id(catalog.draft.id)
    assert sunrise.status == ArtworkStatus.SOLD
    assert draft.status == ArtworkStatus.PENDING


@pytest.mark.asyncio
async def test_second_transition_reports_sold(uow_factory, catalog):
    async with uow_factory() as uow:
        await InventoryService(uow.artwork_repository).mark_sold([catalog.harbor.id])
    async with uow_factory() as uow:
        again = await InventoryService(uow.artwork_repository).mark_sold([catalog.harbor.id])
    assert again.transitioned == ()
    assert again.unavailable == {catalog.harbor.id: "sold"}


@pytest.mark.asyncio
async def test_concurrent_transitions_have_one_winner(uow_factory, catalog):
    async def attempt():
        async with uow_factory() as uow:
            return await InventoryService(uow.artwork_repository).mark_sold([catalog.sunrise.id])

    results = await asyncio.gather(*(attempt() for _ in range(5)))
    winners = [r for r in results if r.transitioned == (catalog.sunrise.id,)]
    assert len(winners) == 1
    assert all(r.unavailable == {catalog.sunrise.id: "sold"} for r in results if r not in winners)


@pytest.mark.asyncio
async def test_rollback_restores_inventory(uow_factory, catalog):
    with pytest.raises(RuntimeError):
        async with uow_factory() as uow:
            await InventoryService(uow.artwork_repository).mark_sold([catalog.sunrise.id])
            raise RuntimeError("ledger failed")

    async with uow_factory(readonly=True) as uow:
        sunrise = await uow.artwork_repository.get_by_id(catalog.sunrise.id)
    assert sunrise.status == ArtworkStatus.APPROVED
