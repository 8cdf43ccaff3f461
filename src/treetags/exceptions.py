"""Custom exception hierarchy for treetags."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple


class TreeTagsError(Exception):
    """Base error for the treetags package."""


class ConfigError(TreeTagsError):
    """Raised when a configuration file fails validation."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"{self.path.name}: {self.message}")


class RemoteFetchError(TreeTagsError):
    """Raised when the tag collection cannot be loaded."""


class StaleSelectionError(TreeTagsError):
    """Raised when the selection references tags missing from the snapshot."""

    def __init__(self, stale_count: int):
        self.stale_count = stale_count
        super().__init__(
            f"{stale_count} selected tag(s) are no longer listed; selection cleared"
        )


class PolicyViolation(TreeTagsError):
    """Raised when a transition is rejected before any remote call."""

    def __init__(
        self,
        message: str,
        *,
        constraint: str,
        offenders: Sequence[Tuple[str, str]] = (),
        allowed: Sequence[str] = (),
    ):
        self.constraint = constraint
        self.offenders = list(offenders)
        self.allowed = list(allowed)
        super().__init__(message)


class BusyError(TreeTagsError):
    """Raised when a bulk transition is already running."""


class RemoteCallError(TreeTagsError):
    """A single remote procedure or delete call failed."""

    def __init__(self, tag_id: str | None, detail: str):
        self.tag_id = tag_id
        self.detail = detail
        prefix = f"{tag_id}: " if tag_id else ""
        super().__init__(f"{prefix}{detail}")


class TagCreationError(TreeTagsError):
    """Base class for tag creation guard failures."""


class InventoryMissingError(TagCreationError):
    """Raised when no plot inventory exists for the species and size."""


class QuantityExceededError(TagCreationError):
    """Raised when a creation request exceeds the untagged remainder."""

    def __init__(self, requested: int, remaining: int):
        self.requested = requested
        self.remaining = remaining
        super().__init__(
            f"requested {requested} trees but only {remaining} remain untagged"
        )
