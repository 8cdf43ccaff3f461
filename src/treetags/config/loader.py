"""Functions for reading and validating the configuration file."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

from pydantic import ValidationError

from ..exceptions import ConfigError
from .models import Settings


DEFAULT_CONFIG_NAME = "treetags.toml"

ENV_OVERRIDES = {
    "SUPABASE_URL": "url",
    "SUPABASE_ANON_KEY": "anon_key",
    "SUPABASE_ACCESS_TOKEN": "access_token",
}


def load_settings(
    path: Optional[Path] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from *path*, falling back to defaults when it is absent.

    Backend credentials from the environment take precedence over the file.
    """

    path = Path(path) if path is not None else Path(DEFAULT_CONFIG_NAME)
    env = os.environ if env is None else env

    data: Dict[str, Any] = {}
    if path.exists():
        data = _read_toml(path)

    backend = dict(data.get("backend") or {})
    for variable, key in ENV_OVERRIDES.items():
        value = env.get(variable)
        if value:
            backend[key] = value
    if backend:
        data["backend"] = backend

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(path, _describe_errors(exc)) from exc


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        raise ConfigError(path, f"failed to read TOML: {exc}") from exc


def _describe_errors(error: ValidationError) -> str:
    """One ``section.key: reason`` entry per problem, TOML-style paths."""

    entries = []
    for err in error.errors(include_context=False, include_url=False):
        reason = str(err.get("msg", "invalid value"))
        if err.get("type") == "value_error":
            reason = reason.removeprefix("Value error, ")
        elif "input" in err and not isinstance(err["input"], (dict, list)):
            reason = f"{reason} (got {err['input']!r})"
        path = _toml_path(err.get("loc", ()))
        entries.append(f"{path}: {reason}" if path else reason)
    return "; ".join(entries)


def _toml_path(loc: tuple[Any, ...]) -> str:
    path = ""
    for entry in loc:
        if isinstance(entry, int):
            path += f"[{entry}]"
        else:
            path += f".{entry}" if path else str(entry)
    return path
