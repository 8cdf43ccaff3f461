"""Status history of a single tag."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..config import ProceduresConfig
from ..exceptions import RemoteFetchError
from ..remote import DataService, rows_from
from .status import STATUS_LABELS, UnknownStatusError, normalize_status

logger = logging.getLogger(__name__)


def status_label(value: Optional[str]) -> str:
    """Display label for a stored status, falling back to the raw value."""

    if not value:
        return "-"
    try:
        return STATUS_LABELS[normalize_status(value)]
    except UnknownStatusError:
        return value


class TimelineEvent(BaseModel):
    """One entry of a tag's history, newest first as returned by the server.

    Status columns keep the stored spelling; history may predate the
    current status vocabulary.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    event_id: str
    tag_id: str
    event_type: str
    event_at: datetime
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    actor_user_id: Optional[str] = None
    source: Optional[str] = None
    context_type: Optional[str] = None
    context_id: Optional[str] = None
    notes: Optional[str] = None
    is_correction: bool = False

    @field_validator("event_id", "tag_id", "context_id", mode="before")
    @classmethod
    def stringify_ids(cls, value: Any) -> Any:
        return str(value) if value is not None else value

    @field_validator("is_correction", mode="before")
    @classmethod
    def null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def is_status_change(self) -> bool:
        return self.to_status is not None

    def describe(self) -> str:
        if not self.is_status_change:
            return self.event_type
        text = f"{status_label(self.from_status)} -> {status_label(self.to_status)}"
        if self.is_correction:
            text += " (correction)"
        return text


class TagTimeline:
    def __init__(
        self,
        service: DataService,
        *,
        procedures: Optional[ProceduresConfig] = None,
    ) -> None:
        self._service = service
        self._procedures = procedures or ProceduresConfig()

    async def fetch(self, tag_id: str, *, limit: int = 30, offset: int = 0) -> List[TimelineEvent]:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if offset < 0:
            raise ValueError("offset must be >= 0")

        result = await self._service.call(
            self._procedures.tag_timeline,
            {"p_tag_id": tag_id, "p_limit": limit, "p_offset": offset},
        )
        if not result.ok:
            logger.error("tag timeline error for %s: %s", tag_id, result.error)
            raise RemoteFetchError(f"failed to load timeline for tag {tag_id}: {result.error}")

        events: List[TimelineEvent] = []
        for idx, row in enumerate(rows_from(result)):
            try:
                events.append(TimelineEvent.model_validate(row))
            except ValidationError as exc:
                raise RemoteFetchError(
                    f"invalid timeline row [{idx}] for tag {tag_id}: {exc.errors()[0].get('msg')}"
                ) from exc
        return events
