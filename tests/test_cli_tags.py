"""CLI tests for tag commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from treetags import cli
from treetags.cli import app
from treetags.remote import RemoteResult

from fakes import ZONE, FakeDataService, tag_row


runner = CliRunner()


@pytest.fixture
def service(monkeypatch: pytest.MonkeyPatch) -> FakeDataService:
    fake = FakeDataService.with_tags(
        tag_row("a", "T-A", "in_zone"),
        tag_row("b", "T-B", "in_zone"),
        tag_row("c", "T-C", "dug"),
    )
    monkeypatch.setattr(cli, "build_service", lambda settings: fake)
    return fake


def run_cli(args: list[str], tmp_path: Path, **kwargs):
    return runner.invoke(app, args + ["--config", str(tmp_path / "none.toml")], **kwargs)


def test_tags_list(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(["tags", "list", ZONE], tmp_path)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert [tag["tag_code"] for tag in payload["tags"]] == ["T-A", "T-B", "T-C"]
    assert payload["tags"][0]["qr_url"].endswith("/tag/T-A")
    assert service.closed is True


def test_transition_success(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(
        ["tags", "transition", ZONE, "--to", "dig_ordered", "-t", "T-A", "-t", "T-B", "--yes"],
        tmp_path,
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["kind"] == "success"
    assert payload["succeeded"] == 2
    assert len(service.calls_to("set_tree_tag_status_v1")) == 2


def test_transition_partial_exit_code(service: FakeDataService, tmp_path: Path) -> None:
    service.call_failures["b"] = "network timeout"

    result = run_cli(
        ["tags", "transition", ZONE, "--to", "dig_ordered", "-t", "T-A", "-t", "T-B", "--yes"],
        tmp_path,
    )

    assert result.exit_code == 3
    payload = json.loads(result.stdout)
    assert payload["message"] == "1 succeeded, 1 failed: network timeout"


def test_transition_policy_violation(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(["tags", "transition", ZONE, "--to", "dig_ordered", "--all", "--yes"], tmp_path)

    assert result.exit_code == 2
    assert service.calls == []


def test_transition_declined_prompt(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(
        ["tags", "transition", ZONE, "--to", "dig_ordered", "-t", "T-A"],
        tmp_path,
        input="n\n",
    )

    assert result.exit_code == 1
    assert service.calls == []


def test_transition_correction(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(
        [
            "tags",
            "transition",
            ZONE,
            "--to",
            "in_zone",
            "-t",
            "T-C",
            "--correction",
            "--note",
            "admin correction per audit #4",
        ],
        tmp_path,
    )

    assert result.exit_code == 0
    assert len(service.calls_to("correct_tree_tag_status_v1")) == 1


def test_transition_unknown_code(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(["tags", "transition", ZONE, "--to", "dug", "-t", "NOPE", "--yes"], tmp_path)
    assert result.exit_code == 2


def test_delete_and_export(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(["tags", "delete", ZONE, "T-B", "--yes"], tmp_path)
    assert result.exit_code == 0
    assert service.deleted == [("tree_tags", "b")]

    out = tmp_path / "tags.csv"
    result = run_cli(["tags", "export", ZONE, "--out", str(out)], tmp_path)
    assert result.exit_code == 0
    assert json.loads(result.stdout)["rows"] == 2
    assert out.exists()


def test_unconfigured_backend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for variable in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_ACCESS_TOKEN"):
        monkeypatch.delenv(variable, raising=False)

    result = run_cli(["tags", "list", ZONE], tmp_path)
    assert result.exit_code == 5


def test_tags_summary(service: FakeDataService, tmp_path: Path) -> None:
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [{"zone_id": ZONE, "species_id": "sp-1", "size_label": "3in", "total_tags": 3, "in_zone_qty": 2, "dug_qty": 1}]
    )

    result = run_cli(["tags", "summary", ZONE, "--species", "sp-1"], tmp_path)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["totals"]["in_zone"] == 2
    assert payload["rows"][0]["dug"] == 1
    assert service.calls_to("get_tag_lifecycle_by_zone") == [
        {"p_zone_id": ZONE, "p_species_id": "sp-1"}
    ]


def test_transition_with_summary(service: FakeDataService, tmp_path: Path) -> None:
    service.rpc_results["get_tag_lifecycle_by_zone"] = RemoteResult.success(
        [{"zone_id": ZONE, "total_tags": 3, "in_zone_qty": 1, "dig_ordered_qty": 1, "dug_qty": 1}]
    )

    result = run_cli(
        ["tags", "transition", ZONE, "--to", "dig_ordered", "-t", "T-A", "--yes", "--summary"],
        tmp_path,
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["summary"]["totals"]["dig_ordered"] == 1
    assert len(service.calls_to("get_tag_lifecycle_by_zone")) == 1


def test_tags_timeline(service: FakeDataService, tmp_path: Path) -> None:
    service.rpc_results["get_tag_timeline_v1"] = RemoteResult.success(
        [
            {
                "event_id": "e1",
                "tag_id": "c",
                "event_type": "status_change",
                "event_at": "2024-03-01T08:30:00+00:00",
                "from_status": "dig_ordered",
                "to_status": "dug",
                "is_correction": False,
            }
        ]
    )

    result = run_cli(["tags", "timeline", ZONE, "T-C", "--limit", "5"], tmp_path)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["tag_code"] == "T-C"
    assert payload["events"][0]["summary"] == "Dig ordered -> Dug"
    assert service.calls_to("get_tag_timeline_v1") == [
        {"p_tag_id": "c", "p_limit": 5, "p_offset": 0}
    ]


def test_tags_timeline_unknown_code(service: FakeDataService, tmp_path: Path) -> None:
    result = run_cli(["tags", "timeline", ZONE, "NOPE"], tmp_path)

    assert result.exit_code == 2
    assert service.calls == []
