"""Admissibility rules for bulk status transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..exceptions import PolicyViolation
from ..tags import TagRecord, TagStatus, UnknownStatusError, normalize_status


# Target status -> statuses a tag must currently hold (normal mode only).
# The legacy "available" value is normalized to IN_ZONE before comparison.
REQUIRED_PRIOR: Dict[TagStatus, FrozenSet[TagStatus]] = {
    TagStatus.DIG_ORDERED: frozenset(
        {TagStatus.IN_ZONE, TagStatus.SELECTED_FOR_DIG}
    ),
    TagStatus.DUG: frozenset({TagStatus.DIG_ORDERED}),
    TagStatus.READY_TO_LIFT: frozenset({TagStatus.DUG}),
}

# Stored spellings reported back to the user as acceptable.
_ACCEPTED_SPELLINGS: Dict[TagStatus, Tuple[str, ...]] = {
    TagStatus.IN_ZONE: ("in_zone", "available"),
}


@dataclass(frozen=True)
class TransitionRequest:
    target: TagStatus
    tag_ids: Tuple[str, ...]
    correction: bool = False
    note: Optional[str] = None

    def __post_init__(self) -> None:
        if self.correction and not (self.note or "").strip():
            raise ValueError("correction requests require a note")


class TransitionPolicy:
    """Pure decision logic; never touches the network."""

    def __init__(self, sample_size: int = 3) -> None:
        self.sample_size = sample_size

    def allowed_prior(self, target: TagStatus) -> FrozenSet[TagStatus]:
        return REQUIRED_PRIOR.get(target, frozenset())

    def resolve_target(self, target: TagStatus | str) -> TagStatus:
        try:
            return normalize_status(target)
        except UnknownStatusError as exc:
            raise PolicyViolation(str(exc), constraint="unknown_status") from exc

    def evaluate(
        self,
        records: Sequence[TagRecord],
        target: TagStatus | str,
        *,
        correction: bool = False,
        note: Optional[str] = None,
    ) -> TransitionRequest:
        target = self.resolve_target(target)
        note = (note or "").strip() or None

        if not records:
            raise PolicyViolation(
                "select at least one tag", constraint="empty_selection"
            )

        tag_ids = tuple(record.id for record in records)

        if correction:
            if note is None:
                raise PolicyViolation(
                    "note required in correction mode", constraint="note_required"
                )
            return TransitionRequest(target, tag_ids, correction=True, note=note)

        allowed = self.allowed_prior(target)
        if allowed:
            offenders = [record for record in records if record.status not in allowed]
            if offenders:
                raise self._prior_status_violation(target, offenders, allowed)

        return TransitionRequest(target, tag_ids, correction=False, note=note)

    def confirmation_prompt(self, request: TransitionRequest) -> Optional[str]:
        """Text the user must accept before a normal-mode run, else None."""

        if request.correction:
            return None
        return (
            f"Change status of {len(request.tag_ids)} tag(s) to "
            f"'{request.target.label}'?"
        )

    def _prior_status_violation(
        self,
        target: TagStatus,
        offenders: List[TagRecord],
        allowed: FrozenSet[TagStatus],
    ) -> PolicyViolation:
        shown = offenders[: self.sample_size]
        pairs = [(record.tag_code, record.raw_status or record.status.value) for record in shown]
        accepted = sorted(
            spelling
            for status in allowed
            for spelling in _ACCEPTED_SPELLINGS.get(status, (status.value,))
        )
        listed = ", ".join(f"{code} ({status})" for code, status in pairs)
        remaining = len(offenders) - len(shown)
        if remaining > 0:
            listed += f" and {remaining} more"
        message = (
            f"cannot move to '{target.value}': {listed}; "
            f"allowed prior statuses: {', '.join(accepted)}"
        )
        return PolicyViolation(
            message,
            constraint="prior_status",
            offenders=pairs,
            allowed=accepted,
        )
