"""Zone-scoped tag collection backed by the remote tag view."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Set

from pydantic import ValidationError

from ..exceptions import RemoteFetchError
from ..remote import DataService, Ordering, rows_from
from ..tags import TagRecord

logger = logging.getLogger(__name__)


TAG_ORDERING = (
    Ordering("species_name_th"),
    Ordering("size_label"),
    Ordering("planting_row"),
    Ordering("planting_position"),
)


class TagCollectionStore:
    """Current ordered list of tag records for one zone."""

    def __init__(self, service: DataService, resource: str = "view_zone_tree_tags") -> None:
        self._service = service
        self._resource = resource
        self.zone_id: Optional[str] = None
        self.records: List[TagRecord] = []
        self.loading = False
        self.error: Optional[str] = None
        self._by_id: Dict[str, TagRecord] = {}

    @property
    def ids(self) -> Set[str]:
        return set(self._by_id)

    def get(self, tag_id: str) -> Optional[TagRecord]:
        return self._by_id.get(tag_id)

    def find_by_code(self, tag_code: str) -> Optional[TagRecord]:
        for record in self.records:
            if record.tag_code == tag_code:
                return record
        return None

    async def load(self, zone_id: str) -> List[TagRecord]:
        self.zone_id = zone_id
        self.loading = True
        self.error = None
        try:
            result = await self._service.query(
                self._resource, {"zone_id": zone_id}, TAG_ORDERING
            )
            if not result.ok:
                raise RemoteFetchError(f"failed to load tags for zone {zone_id}: {result.error}")
            records = _parse_rows(rows_from(result))
        except RemoteFetchError as exc:
            logger.error("load tree tags error: %s", exc)
            self.error = str(exc)
            raise
        finally:
            self.loading = False

        self.records = records
        self._by_id = {record.id: record for record in records}
        logger.debug("loaded %d tags for zone %s", len(records), zone_id)
        return records

    async def reload(self) -> List[TagRecord]:
        if self.zone_id is None:
            raise RemoteFetchError("no zone loaded; call load() first")
        return await self.load(self.zone_id)


def _parse_rows(rows: List[dict]) -> List[TagRecord]:
    records: List[TagRecord] = []
    for idx, row in enumerate(rows):
        try:
            records.append(TagRecord.model_validate(row))
        except ValidationError as exc:
            code = row.get("tag_code") if isinstance(row, dict) else None
            raise RemoteFetchError(
                f"invalid tag row [{idx}] {code or ''}: {exc.errors()[0].get('msg')}"
            ) from exc
    return records
