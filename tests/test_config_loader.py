"""Unit tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from treetags.config import Settings, load_settings
from treetags.exceptions import ConfigError


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.toml", env={})
    assert isinstance(settings, Settings)
    assert settings.procedures.set_status == "set_tree_tag_status_v1"
    assert settings.workflow.correction_source_tag == "admin_correction"
    assert settings.backend.configured is False


def test_file_values_and_env_override(tmp_path: Path) -> None:
    path = tmp_path / "treetags.toml"
    path.write_text(
        """
[backend]
url = "https://file.supabase.co/"
anon_key = "file-key"

[workflow]
failure_sample_size = 5

[app]
base_url = "https://crm.example.com/"
""".strip()
    )

    settings = load_settings(path, env={"SUPABASE_URL": "https://env.supabase.co"})

    assert settings.backend.url == "https://env.supabase.co"
    assert settings.backend.anon_key == "file-key"
    assert settings.backend.configured is True
    assert settings.workflow.failure_sample_size == 5
    assert settings.app.base_url == "https://crm.example.com"


def test_invalid_values_report_location(tmp_path: Path) -> None:
    path = tmp_path / "treetags.toml"
    path.write_text(
        """
[workflow]
ready_notice_seconds = -1
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_settings(path, env={})

    message = str(exc.value)
    assert "treetags.toml" in message
    assert "workflow" in message


def test_malformed_toml(tmp_path: Path) -> None:
    path = tmp_path / "treetags.toml"
    path.write_text("[backend\nurl = 1")

    with pytest.raises(ConfigError, match="failed to read TOML"):
        load_settings(path, env={})


def test_validation_messages_name_the_toml_key(tmp_path: Path) -> None:
    path = tmp_path / "treetags.toml"
    path.write_text(
        """
[workflow]
ready_notice_seconds = -1

[procedures]
set_status = 7
""".strip()
    )

    with pytest.raises(ConfigError) as exc:
        load_settings(path, env={})

    message = exc.value.message
    assert "workflow: ready_notice_seconds must be positive" in message
    assert "Value error" not in message
    assert "procedures.set_status: " in message
    assert "(got 7)" in message
