"""Tag vocabulary, records, creation and history views."""

from .creation import InventorySnapshot, TagCreationRequest, TagCreator
from .lifecycle import STAGE_COLUMNS, LifecycleRow, LifecycleSummary
from .models import TagRecord
from .status import (
    LEGACY_ALIASES,
    READY_FOR_SALE,
    STATUS_LABELS,
    TagStatus,
    UnknownStatusError,
    normalize_status,
    status_set,
)
from .timeline import TagTimeline, TimelineEvent, status_label

__all__ = [
    "LEGACY_ALIASES",
    "READY_FOR_SALE",
    "STAGE_COLUMNS",
    "STATUS_LABELS",
    "InventorySnapshot",
    "LifecycleRow",
    "LifecycleSummary",
    "TagCreationRequest",
    "TagCreator",
    "TagRecord",
    "TagStatus",
    "TagTimeline",
    "TimelineEvent",
    "UnknownStatusError",
    "normalize_status",
    "status_label",
    "status_set",
]
