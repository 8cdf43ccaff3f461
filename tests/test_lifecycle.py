"""Tests for the per-zone lifecycle summary."""

from __future__ import annotations

import pytest

from treetags.exceptions import RemoteFetchError
from treetags.remote import RemoteResult
from treetags.tags import LifecycleSummary
from treetags.workflow import TagStatusOrchestrator

from fakes import ZONE, FakeDataService, tag_row


def lifecycle_row(species: str, size: str, **counts) -> dict:
    row = {
        "zone_id": ZONE,
        "zone_name": "North block",
        "farm_name": "Main farm",
        "species_id": species,
        "species_name_th": f"name-{species}",
        "size_label": size,
        "total_tags": sum(value or 0 for value in counts.values()),
    }
    row.update(counts)
    return row


@pytest.mark.asyncio
async def test_reload_calls_procedure_with_filters() -> None:
    service = FakeDataService()
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [
            lifecycle_row("sp-1", "3in", in_zone_qty=4, dug_qty=1),
            lifecycle_row("sp-2", "5in", dig_ordered_qty=2, planted_qty=None),
        ]
    )

    summary = LifecycleSummary(service, zone_id=ZONE, species_id="sp-1")
    rows = await summary.reload()

    assert service.calls == [
        ("get_tag_lifecycle_by_zone", {"p_zone_id": ZONE, "p_species_id": "sp-1"})
    ]
    assert len(rows) == 2
    assert rows[0].species_name == "name-sp-1"
    assert rows[1].planted_qty == 0
    assert rows[0].stage_counts()["in_zone"] == 4


@pytest.mark.asyncio
async def test_totals_sum_every_stage() -> None:
    service = FakeDataService()
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [
            lifecycle_row("sp-1", "3in", in_zone_qty=4, dug_qty=1),
            lifecycle_row("sp-1", "5in", in_zone_qty=1, shipped_qty=3),
        ]
    )
    summary = LifecycleSummary(service)

    await summary.reload()
    totals = summary.totals()

    assert totals["total_tags"] == 9
    assert totals["in_zone"] == 5
    assert totals["dug"] == 1
    assert totals["shipped"] == 3
    assert totals["cancelled"] == 0


@pytest.mark.asyncio
async def test_remote_failure_raises_and_records_error() -> None:
    service = FakeDataService()
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.failure("permission denied")
    summary = LifecycleSummary(service, zone_id=ZONE)

    with pytest.raises(RemoteFetchError, match="permission denied"):
        await summary.reload()
    assert summary.error is not None
    assert summary.rows == []


@pytest.mark.asyncio
async def test_negative_count_is_rejected() -> None:
    service = FakeDataService()
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [lifecycle_row("sp-1", "3in", dug_qty=-1)]
    )

    with pytest.raises(RemoteFetchError, match="invalid lifecycle row"):
        await LifecycleSummary(service).reload()


@pytest.mark.asyncio
async def test_refreshes_after_successful_transition() -> None:
    service = FakeDataService.with_tags(
        tag_row("a", "T-A", "in_zone"),
        tag_row("b", "T-B", "in_zone"),
    )
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [lifecycle_row("sp-1", "3in", in_zone_qty=1, dig_ordered_qty=1)]
    )
    orchestrator = TagStatusOrchestrator(service)
    summary = LifecycleSummary(service, zone_id=ZONE)
    orchestrator.add_listener(summary.reload)
    await orchestrator.open_zone(ZONE)

    report = await orchestrator.request_transition(
        "dig_ordered", selection=["a"], confirmed=True
    )

    assert report.kind == "success"
    assert len(service.calls_to("get_tag_lifecycle_by_zone")) == 1
    assert summary.totals()["dig_ordered"] == 1


@pytest.mark.asyncio
async def test_not_refreshed_when_every_call_fails() -> None:
    service = FakeDataService.with_tags(tag_row("a", "T-A", "in_zone"))
    service.call_failures["a"] = "denied"
    orchestrator = TagStatusOrchestrator(service)
    summary = LifecycleSummary(service, zone_id=ZONE)
    orchestrator.add_listener(summary.reload)
    await orchestrator.open_zone(ZONE)

    report = await orchestrator.request_transition(
        "dig_ordered", selection=["a"], confirmed=True
    )

    assert report.kind == "failed"
    assert service.calls_to("get_tag_lifecycle_by_zone") == []
