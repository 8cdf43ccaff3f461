"""Single and batch tag creation guarded by plot inventory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config import ProceduresConfig, WorkflowConfig
from ..exceptions import (
    InventoryMissingError,
    QuantityExceededError,
    RemoteCallError,
)
from ..remote import DataService, rows_from
from .status import TagStatus

logger = logging.getLogger(__name__)


@dataclass
class TagCreationRequest:
    zone_id: str
    species_id: str
    size_label: str
    qty: int = 1
    batch: bool = False
    tags_count: int = 10
    planting_row: Optional[int] = None
    planting_position: Optional[int] = None
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.species_id:
            raise ValueError("species_id is required")
        if not self.size_label:
            raise ValueError("size_label is required")
        if self.qty < 1:
            raise ValueError("qty must be >= 1")
        if self.batch and self.tags_count < 1:
            raise ValueError("tags_count must be >= 1")

    @property
    def requested_trees(self) -> int:
        # Trees, not tags: a batch of N tags carries qty trees each.
        return self.qty * self.tags_count if self.batch else self.qty


@dataclass
class InventorySnapshot:
    planted_qty: int
    created_tag_qty: int
    tagged_qty: int

    @property
    def remaining(self) -> int:
        return max(self.planted_qty - self.tagged_qty, 0)

    @property
    def counter_drift(self) -> bool:
        return self.created_tag_qty != self.tagged_qty


class TagCreator:
    def __init__(
        self,
        service: DataService,
        *,
        procedures: Optional[ProceduresConfig] = None,
        workflow: Optional[WorkflowConfig] = None,
    ) -> None:
        self._service = service
        self._procedures = procedures or ProceduresConfig()
        self._workflow = workflow or WorkflowConfig()

    async def inventory(self, zone_id: str, species_id: str, size_label: str) -> InventorySnapshot:
        result = await self._service.query(
            self._workflow.inventory_table,
            {"plot_id": zone_id, "species_id": species_id, "size_label": size_label},
            columns="planted_qty,created_tag_qty",
        )
        rows = rows_from(result) if result.ok else []
        if not rows:
            raise InventoryMissingError(
                f"no inventory for species {species_id} size {size_label} in zone {zone_id}; "
                "add inventory before creating tags"
            )
        row = rows[0]

        tagged = await self._service.call(
            self._procedures.tagged_qty,
            {
                "p_zone_id": zone_id,
                "p_species_id": species_id,
                "p_size_label": size_label,
            },
        )
        tagged_qty = int(tagged.payload or 0) if tagged.ok else 0

        snapshot = InventorySnapshot(
            planted_qty=int(row.get("planted_qty") or 0),
            created_tag_qty=int(row.get("created_tag_qty") or 0),
            tagged_qty=tagged_qty,
        )
        if snapshot.counter_drift:
            logger.warning(
                "created_tag_qty %s differs from tagged count %s for %s/%s",
                snapshot.created_tag_qty,
                snapshot.tagged_qty,
                species_id,
                size_label,
            )
        return snapshot

    async def create(self, request: TagCreationRequest) -> Any:
        snapshot = await self.inventory(request.zone_id, request.species_id, request.size_label)
        if request.requested_trees > snapshot.remaining:
            raise QuantityExceededError(request.requested_trees, snapshot.remaining)

        args: Dict[str, Any] = {
            "p_zone_id": request.zone_id,
            "p_species_id": request.species_id,
            "p_size_label": request.size_label,
            "p_qty": request.qty,
            "p_planting_row": request.planting_row,
            "p_planting_position": request.planting_position,
            "p_notes": request.notes or None,
        }
        if request.batch:
            procedure = self._procedures.create_batch
            args["p_tags_count"] = request.tags_count
        else:
            procedure = self._procedures.create_tag
            args["p_status"] = TagStatus.IN_ZONE.value

        result = await self._service.call(procedure, args)
        if not result.ok:
            raise RemoteCallError(None, f"cannot create tag: {result.error}")
        logger.info(
            "created %s tag(s) for %d tree(s) in zone %s",
            request.tags_count if request.batch else 1,
            request.requested_trees,
            request.zone_id,
        )
        return result.payload
