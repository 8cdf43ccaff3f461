"""Per-zone tag counts broken down by lifecycle stage."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..config import ProceduresConfig
from ..exceptions import RemoteFetchError
from ..remote import DataService, rows_from

logger = logging.getLogger(__name__)


STAGE_COLUMNS = (
    "in_zone_qty",
    "reserved_qty",
    "dig_ordered_qty",
    "dug_qty",
    "shipped_qty",
    "planted_qty",
    "cancelled_qty",
)


class LifecycleRow(BaseModel):
    """Tag counts for one zone / species / size group."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
    farm_name: Optional[str] = None
    species_id: Optional[str] = None
    species_name_th: Optional[str] = None
    species_name_en: Optional[str] = None
    species_code: Optional[str] = None
    size_label: Optional[str] = None
    total_tags: int = Field(default=0, ge=0)
    in_zone_qty: int = Field(default=0, ge=0)
    reserved_qty: int = Field(default=0, ge=0)
    dig_ordered_qty: int = Field(default=0, ge=0)
    dug_qty: int = Field(default=0, ge=0)
    shipped_qty: int = Field(default=0, ge=0)
    planted_qty: int = Field(default=0, ge=0)
    cancelled_qty: int = Field(default=0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def zero_missing_counts(cls, data: Any) -> Any:
        # Aggregates over empty groups come back as null.
        if not isinstance(data, dict):
            return data
        payload: Dict[str, Any] = dict(data)
        for column in ("total_tags",) + STAGE_COLUMNS:
            if payload.get(column) is None:
                payload[column] = 0
        return payload

    @property
    def species_name(self) -> str:
        return self.species_name_th or self.species_name_en or ""

    def stage_counts(self) -> Dict[str, int]:
        return {column[: -len("_qty")]: getattr(self, column) for column in STAGE_COLUMNS}


class LifecycleSummary:
    """Cached lifecycle counts, refreshable as a tags-changed listener.

    Register :meth:`reload` with ``TagStatusOrchestrator.add_listener`` to
    keep the counts current after each successful bulk change.
    """

    def __init__(
        self,
        service: DataService,
        *,
        zone_id: Optional[str] = None,
        species_id: Optional[str] = None,
        procedures: Optional[ProceduresConfig] = None,
    ) -> None:
        self._service = service
        self._procedures = procedures or ProceduresConfig()
        self.zone_id = zone_id
        self.species_id = species_id
        self.rows: List[LifecycleRow] = []
        self.error: Optional[str] = None

    async def reload(self) -> List[LifecycleRow]:
        self.error = None
        try:
            result = await self._service.call(
                self._procedures.lifecycle_by_zone,
                {"p_zone_id": self.zone_id, "p_species_id": self.species_id},
            )
            if not result.ok:
                raise RemoteFetchError(f"failed to load tag lifecycle summary: {result.error}")
            rows = _parse_rows(rows_from(result))
        except RemoteFetchError as exc:
            logger.error("tag lifecycle summary error: %s", exc)
            self.error = str(exc)
            raise

        self.rows = rows
        logger.debug("loaded %d lifecycle rows for zone %s", len(rows), self.zone_id)
        return rows

    def totals(self) -> Dict[str, int]:
        totals = {"total_tags": sum(row.total_tags for row in self.rows)}
        for column in STAGE_COLUMNS:
            totals[column[: -len("_qty")]] = sum(getattr(row, column) for row in self.rows)
        return totals


def _parse_rows(rows: List[dict]) -> List[LifecycleRow]:
    try:
        return [LifecycleRow.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise RemoteFetchError(
            f"invalid lifecycle row: {exc.errors()[0].get('msg')}"
        ) from exc
