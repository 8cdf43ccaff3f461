"""Typer CLI entrypoint for treetags."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer

from .config import DEFAULT_CONFIG_NAME, Settings, load_settings
from .exceptions import (
    BusyError,
    ConfigError,
    PolicyViolation,
    RemoteCallError,
    RemoteFetchError,
    StaleSelectionError,
    TagCreationError,
    TreeTagsError,
)
from .export import export_tags, tag_url
from .remote import DataService, SupabaseRestService
from .tags import LifecycleSummary, TagCreationRequest, TagCreator, TagTimeline
from .workflow import TagStatusOrchestrator, TransitionReport


EXIT_SUCCESS = 0
EXIT_CANCELLED = 1
EXIT_VALIDATION_ERROR = 2
EXIT_TRANSITION_FAILED = 3
EXIT_REMOTE_ERROR = 4
EXIT_CONFIG_ERROR = 5

T = TypeVar("T")


app = typer.Typer(help="Nursery tree-tag lifecycle tracker")
tags_app = typer.Typer(help="Zone tag commands")
app.add_typer(tags_app, name="tags")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging shared by all commands."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_service(settings: Settings) -> DataService:
    if not settings.backend.configured:
        raise ConfigError(
            Path(DEFAULT_CONFIG_NAME),
            "backend.url and backend.anon_key are required (or set SUPABASE_URL / SUPABASE_ANON_KEY)",
        )
    return SupabaseRestService(settings.backend)


def _settings(config_path: Path) -> Settings:
    try:
        return load_settings(config_path)
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}", err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from exc


def _run(settings: Settings, work: Callable[[DataService], Awaitable[T]]) -> T:
    async def runner() -> T:
        service = build_service(settings)
        try:
            return await work(service)
        finally:
            await service.aclose()

    try:
        return asyncio.run(runner())
    except ConfigError as exc:
        typer.echo(f"Config error: {exc}", err=True)
        raise typer.Exit(EXIT_CONFIG_ERROR) from exc
    except (PolicyViolation, StaleSelectionError, BusyError, TagCreationError) as exc:
        typer.echo(f"Rejected: {exc}", err=True)
        raise typer.Exit(EXIT_VALIDATION_ERROR) from exc
    except (RemoteFetchError, RemoteCallError) as exc:
        typer.echo(f"Remote error: {exc}", err=True)
        raise typer.Exit(EXIT_REMOTE_ERROR) from exc
    except TreeTagsError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(EXIT_REMOTE_ERROR) from exc


def _config_option() -> Path:
    return typer.Option(
        Path(DEFAULT_CONFIG_NAME),
        "--config",
        "-c",
        help="Path to the treetags TOML configuration",
    )


@tags_app.command("list")
def tags_list(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    config_path: Path = _config_option(),
) -> None:
    """List the tags of a zone."""

    settings = _settings(config_path)

    async def work(service: DataService):
        orchestrator = TagStatusOrchestrator(service, settings)
        return await orchestrator.open_zone(zone_id)

    records = _run(settings, work)
    payload = {
        "zone_id": zone_id,
        "tags": [
            {
                "id": record.id,
                "tag_code": record.tag_code,
                "status": record.status.value,
                "raw_status": record.raw_status,
                "species": record.species_name,
                "size_label": record.size_label,
                "qty": record.qty,
                "planting_row": record.planting_row,
                "planting_position": record.planting_position,
                "qr_url": tag_url(settings.app.base_url, record.tag_code),
            }
            for record in records
        ],
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))


@tags_app.command("transition")
def tags_transition(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    target: str = typer.Option(..., "--to", help="Target lifecycle status"),
    tag_codes: Optional[List[str]] = typer.Option(
        None,
        "--tag",
        "-t",
        help="Tag code to include (repeatable)",
    ),
    select_all: bool = typer.Option(False, "--all", help="Select every tag in the zone"),
    correction: bool = typer.Option(
        False,
        "--correction",
        help="Bypass prior-status checks; requires --note",
    ),
    note: Optional[str] = typer.Option(None, "--note", help="Note recorded with the change"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    with_summary: bool = typer.Option(
        False,
        "--summary",
        help="Include the refreshed zone lifecycle counts after a change",
    ),
    config_path: Path = _config_option(),
) -> None:
    """Move selected tags of a zone to a new lifecycle status."""

    settings = _settings(config_path)
    codes = list(tag_codes or [])
    if not codes and not select_all:
        typer.echo("Pass --tag at least once or --all", err=True)
        raise typer.Exit(EXIT_VALIDATION_ERROR)

    summary: Optional[LifecycleSummary] = None

    async def work(service: DataService) -> TransitionReport:
        nonlocal summary
        orchestrator = TagStatusOrchestrator(service, settings, confirm=typer.confirm)
        if with_summary:
            summary = LifecycleSummary(
                service, zone_id=zone_id, procedures=settings.procedures
            )
            orchestrator.add_listener(summary.reload)
        records = await orchestrator.open_zone(zone_id)
        if select_all:
            orchestrator.selection.select_all(record.id for record in records)
        for code in codes:
            record = orchestrator.store.find_by_code(code)
            if record is None:
                raise PolicyViolation(
                    f"tag {code} is not listed in zone {zone_id}",
                    constraint="unknown_tag",
                )
            if record.id not in orchestrator.selection:
                orchestrator.selection.toggle(record.id)
        return await orchestrator.request_transition(
            target,
            correction=correction,
            note=note,
            confirmed=yes,
        )

    report = _run(settings, work)
    payload = report.as_dict()
    if summary is not None and report.succeeded and summary.error is None:
        payload["summary"] = _summary_payload(summary)
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))

    if report.kind == "cancelled":
        raise typer.Exit(EXIT_CANCELLED)
    if report.kind != "success":
        raise typer.Exit(EXIT_TRANSITION_FAILED)


@tags_app.command("delete")
def tags_delete(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    tag_code: str = typer.Argument(..., help="Code of the tag to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    config_path: Path = _config_option(),
) -> None:
    """Delete one tag from a zone."""

    settings = _settings(config_path)

    async def work(service: DataService) -> Optional[str]:
        orchestrator = TagStatusOrchestrator(service, settings)
        await orchestrator.open_zone(zone_id)
        record = orchestrator.store.find_by_code(tag_code)
        if record is None:
            raise PolicyViolation(
                f"tag {tag_code} is not listed in zone {zone_id}",
                constraint="unknown_tag",
            )
        if not yes and not typer.confirm(f"Delete tag {tag_code}?"):
            return None
        await orchestrator.delete_tag(record.id)
        return record.id

    deleted = _run(settings, work)
    if deleted is None:
        raise typer.Exit(EXIT_CANCELLED)
    typer.echo(json.dumps({"deleted": tag_code, "id": deleted}, indent=2))


@tags_app.command("create")
def tags_create(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    species_id: str = typer.Option(..., "--species", help="Species identifier"),
    size_label: str = typer.Option(..., "--size", help="Size label"),
    qty: int = typer.Option(1, "--qty", min=1, help="Trees per tag"),
    batch: bool = typer.Option(False, "--batch", help="Create a run of tags"),
    tags_count: int = typer.Option(10, "--count", min=1, help="Number of tags in batch mode"),
    planting_row: Optional[int] = typer.Option(None, "--row", help="Planting row"),
    planting_position: Optional[int] = typer.Option(None, "--position", help="Position in row"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes"),
    config_path: Path = _config_option(),
) -> None:
    """Create one tag, or a batch, within the zone's untagged inventory."""

    settings = _settings(config_path)
    try:
        request = TagCreationRequest(
            zone_id=zone_id,
            species_id=species_id,
            size_label=size_label,
            qty=qty,
            batch=batch,
            tags_count=tags_count,
            planting_row=planting_row,
            planting_position=planting_position,
            notes=notes,
        )
    except ValueError as exc:
        typer.echo(f"Invalid request: {exc}", err=True)
        raise typer.Exit(EXIT_VALIDATION_ERROR) from exc

    async def work(service: DataService):
        creator = TagCreator(
            service,
            procedures=settings.procedures,
            workflow=settings.workflow,
        )
        return await creator.create(request)

    result = _run(settings, work)
    payload = {
        "zone_id": zone_id,
        "tags": request.tags_count if request.batch else 1,
        "trees": request.requested_trees,
        "result": result,
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str))


@tags_app.command("export")
def tags_export(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    out: Path = typer.Option(
        ...,
        "--out",
        "-o",
        dir_okay=False,
        writable=True,
        help="CSV file to write",
    ),
    config_path: Path = _config_option(),
) -> None:
    """Export the zone's tags with QR link targets to CSV."""

    settings = _settings(config_path)

    async def work(service: DataService):
        orchestrator = TagStatusOrchestrator(service, settings)
        return await orchestrator.open_zone(zone_id)

    records = _run(settings, work)
    try:
        count = export_tags(records, out, settings.app.base_url)
    except OSError as exc:
        typer.echo(f"Failed to write {out}: {exc}", err=True)
        raise typer.Exit(EXIT_REMOTE_ERROR) from exc

    typer.echo(json.dumps({"output": str(out), "rows": count}, indent=2))


def _summary_payload(summary: LifecycleSummary) -> dict:
    return {
        "zone_id": summary.zone_id,
        "species_id": summary.species_id,
        "totals": summary.totals(),
        "rows": [
            {
                "zone_id": row.zone_id,
                "zone_name": row.zone_name,
                "species": row.species_name,
                "species_code": row.species_code,
                "size_label": row.size_label,
                "total_tags": row.total_tags,
                **row.stage_counts(),
            }
            for row in summary.rows
        ],
    }


@tags_app.command("summary")
def tags_summary(
    zone_id: Optional[str] = typer.Argument(None, help="Zone identifier; omit for every zone"),
    species_id: Optional[str] = typer.Option(None, "--species", help="Limit to one species"),
    config_path: Path = _config_option(),
) -> None:
    """Show tag counts per lifecycle stage, grouped by species and size."""

    settings = _settings(config_path)

    async def work(service: DataService) -> LifecycleSummary:
        summary = LifecycleSummary(
            service,
            zone_id=zone_id,
            species_id=species_id,
            procedures=settings.procedures,
        )
        await summary.reload()
        return summary

    summary = _run(settings, work)
    typer.echo(json.dumps(_summary_payload(summary), indent=2, ensure_ascii=False))


@tags_app.command("timeline")
def tags_timeline(
    zone_id: str = typer.Argument(..., help="Zone identifier"),
    tag_code: str = typer.Argument(..., help="Code of the tag"),
    limit: int = typer.Option(30, "--limit", min=1, help="Maximum number of events"),
    offset: int = typer.Option(0, "--offset", min=0, help="Events to skip"),
    config_path: Path = _config_option(),
) -> None:
    """Show the status history of one tag, newest first."""

    settings = _settings(config_path)

    async def work(service: DataService):
        orchestrator = TagStatusOrchestrator(service, settings)
        await orchestrator.open_zone(zone_id)
        record = orchestrator.store.find_by_code(tag_code)
        if record is None:
            raise PolicyViolation(
                f"tag {tag_code} is not listed in zone {zone_id}",
                constraint="unknown_tag",
            )
        timeline = TagTimeline(service, procedures=settings.procedures)
        return record, await timeline.fetch(record.id, limit=limit, offset=offset)

    record, events = _run(settings, work)
    payload = {
        "tag_code": record.tag_code,
        "status": record.status.value,
        "events": [
            {
                "event_at": event.event_at.isoformat(),
                "event_type": event.event_type,
                "from_status": event.from_status,
                "to_status": event.to_status,
                "is_correction": event.is_correction,
                "source": event.source,
                "notes": event.notes,
                "summary": event.describe(),
            }
            for event in events
        ],
    }
    typer.echo(json.dumps(payload, indent=2, ensure_ascii=False))
