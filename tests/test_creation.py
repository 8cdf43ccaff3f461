"""Tests for inventory-guarded tag creation."""

from __future__ import annotations

import pytest

from treetags.exceptions import InventoryMissingError, QuantityExceededError, RemoteCallError
from treetags.remote import RemoteResult
from treetags.tags import TagCreationRequest, TagCreator

from fakes import ZONE, FakeDataService


def inventory_service(planted: int, tagged: int, created: int | None = None) -> FakeDataService:
    service = FakeDataService(
        {
            "planting_plot_inventory": [
                {
                    "plot_id": ZONE,
                    "species_id": "sp-1",
                    "size_label": "3in",
                    "planted_qty": planted,
                    "created_tag_qty": tagged if created is None else created,
                }
            ]
        }
    )
    service.rpc_results["get_tagged_qty"] = RemoteResult.success(tagged)
    return service


def request(**kwargs) -> TagCreationRequest:
    base = dict(zone_id=ZONE, species_id="sp-1", size_label="3in")
    base.update(kwargs)
    return TagCreationRequest(**base)


@pytest.mark.asyncio
async def test_single_tag_created_in_zone() -> None:
    service = inventory_service(planted=10, tagged=4)

    await TagCreator(service).create(request(qty=2, planting_row=3, notes="north edge"))

    calls = service.calls_to("create_tree_tag")
    assert len(calls) == 1
    assert calls[0]["p_status"] == "in_zone"
    assert calls[0]["p_qty"] == 2
    assert calls[0]["p_planting_row"] == 3
    assert calls[0]["p_notes"] == "north edge"


@pytest.mark.asyncio
async def test_batch_counts_trees_not_tags() -> None:
    service = inventory_service(planted=100, tagged=70)

    with pytest.raises(QuantityExceededError) as exc:
        await TagCreator(service).create(request(qty=2, batch=True, tags_count=20))
    assert exc.value.requested == 40
    assert exc.value.remaining == 30
    assert service.calls_to("create_tree_tags_batch") == []

    await TagCreator(service).create(request(qty=3, batch=True, tags_count=10))
    calls = service.calls_to("create_tree_tags_batch")
    assert calls[0]["p_tags_count"] == 10
    assert "p_status" not in calls[0]


@pytest.mark.asyncio
async def test_missing_inventory_blocks_creation() -> None:
    service = FakeDataService()

    with pytest.raises(InventoryMissingError):
        await TagCreator(service).create(request())
    assert service.calls == []


@pytest.mark.asyncio
async def test_inventory_snapshot_flags_counter_drift() -> None:
    service = inventory_service(planted=5, tagged=8, created=6)

    snapshot = await TagCreator(service).inventory(ZONE, "sp-1", "3in")

    assert snapshot.remaining == 0
    assert snapshot.counter_drift is True


@pytest.mark.asyncio
async def test_rpc_failure_raises() -> None:
    service = inventory_service(planted=10, tagged=0)
    service.rpc_results["create_tree_tag"] = RemoteResult.failure("duplicate code")

    with pytest.raises(RemoteCallError, match="duplicate code"):
        await TagCreator(service).create(request())


def test_request_validation() -> None:
    with pytest.raises(ValueError):
        request(qty=0)
    with pytest.raises(ValueError):
        request(size_label="")
