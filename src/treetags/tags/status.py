"""Tag lifecycle statuses and legacy aliases."""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class TagStatus(Enum):
    IN_ZONE = "in_zone"
    SELECTED_FOR_DIG = "selected_for_dig"
    ROOT_PRUNE_1 = "root_prune_1"
    ROOT_PRUNE_2 = "root_prune_2"
    ROOT_PRUNE_3 = "root_prune_3"
    ROOT_PRUNE_4 = "root_prune_4"
    READY_TO_LIFT = "ready_to_lift"
    RESERVED = "reserved"
    DIG_ORDERED = "dig_ordered"
    DUG = "dug"
    SHIPPED = "shipped"
    PLANTED = "planted"
    REHAB = "rehab"
    DEAD = "dead"
    CANCELLED = "cancelled"
    LOST = "lost"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


# Stored values that predate the current vocabulary.
LEGACY_ALIASES: Dict[str, TagStatus] = {
    "available": TagStatus.IN_ZONE,
    "planted_customer": TagStatus.PLANTED,
}

STATUS_LABELS: Dict[TagStatus, str] = {
    TagStatus.IN_ZONE: "In zone",
    TagStatus.SELECTED_FOR_DIG: "Selected for dig",
    TagStatus.ROOT_PRUNE_1: "Root prune 1",
    TagStatus.ROOT_PRUNE_2: "Root prune 2",
    TagStatus.ROOT_PRUNE_3: "Root prune 3",
    TagStatus.ROOT_PRUNE_4: "Root prune 4",
    TagStatus.READY_TO_LIFT: "Ready to lift / for sale",
    TagStatus.RESERVED: "Reserved",
    TagStatus.DIG_ORDERED: "Dig ordered",
    TagStatus.DUG: "Dug",
    TagStatus.SHIPPED: "Shipped",
    TagStatus.PLANTED: "Planted at customer",
    TagStatus.REHAB: "Rehab",
    TagStatus.DEAD: "Dead",
    TagStatus.CANCELLED: "Cancelled",
    TagStatus.LOST: "Lost",
}

READY_FOR_SALE = TagStatus.READY_TO_LIFT


class UnknownStatusError(ValueError):
    """Raised for a status string outside the lifecycle vocabulary."""


def normalize_status(value: str | TagStatus) -> TagStatus:
    """Map a stored or user-supplied status to its canonical member."""

    if isinstance(value, TagStatus):
        return value
    key = str(value).strip().lower().replace("-", "_").replace(" ", "_")
    if key in LEGACY_ALIASES:
        return LEGACY_ALIASES[key]
    try:
        return TagStatus(key)
    except ValueError:
        raise UnknownStatusError(f"unknown tag status {value!r}") from None


def status_set(values: Iterable[str | TagStatus]) -> FrozenSet[TagStatus]:
    return frozenset(normalize_status(value) for value in values)
