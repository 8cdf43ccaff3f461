"""Tag records validated at the remote boundary."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .status import TagStatus, normalize_status


class TagRecord(BaseModel):
    """One physical tag as listed by the zone tag view.

    ``status`` is always canonical; ``raw_status`` keeps the stored value
    (possibly a legacy alias) for display.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    tag_code: str
    status: TagStatus
    raw_status: str = ""
    qty: int = Field(default=1, ge=1)
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    species_id: Optional[str] = None
    species_name_th: Optional[str] = None
    species_name_en: Optional[str] = None
    size_label: Optional[str] = None
    planting_row: Optional[int] = None
    planting_position: Optional[int] = None
    notes: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_incoming(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload: Dict[str, Any] = dict(data)
        if payload.get("id") is not None:
            payload["id"] = str(payload["id"])
        raw = payload.get("status")
        if isinstance(raw, str):
            payload.setdefault("raw_status", raw)
            payload["status"] = normalize_status(raw)
        elif isinstance(raw, TagStatus):
            payload.setdefault("raw_status", raw.value)
        return payload

    @property
    def species_name(self) -> str:
        return self.species_name_th or self.species_name_en or ""

    def describe(self) -> str:
        return f"{self.tag_code} ({self.raw_status or self.status.value})"
