"""CSV export of zone tags with their QR link targets."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable
from urllib.parse import quote

import pandas as pd

from .tags import TagRecord


EXPORT_COLUMNS = [
    "tag_code",
    "status",
    "raw_status",
    "status_label",
    "species",
    "size_label",
    "qty",
    "planting_row",
    "planting_position",
    "notes",
    "qr_url",
]


def tag_url(app_base_url: str, tag_code: str) -> str:
    return f"{app_base_url.rstrip('/')}/tag/{quote(tag_code, safe='')}"


def export_tags(records: Iterable[TagRecord], path: Path, app_base_url: str) -> int:
    """Write *records* to *path* as CSV and return the row count."""

    df = pd.DataFrame(
        [
            {
                "tag_code": record.tag_code,
                "status": record.status.value,
                "raw_status": record.raw_status,
                "status_label": record.status.label,
                "species": record.species_name,
                "size_label": record.size_label,
                "qty": record.qty,
                "planting_row": record.planting_row,
                "planting_position": record.planting_position,
                "notes": record.notes,
                "qr_url": tag_url(app_base_url, record.tag_code),
            }
            for record in records
        ],
        columns=EXPORT_COLUMNS,
    )
    if not df.empty:
        for column in ["planting_row", "planting_position"]:
            df[column] = df[column].astype("Int64")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return len(df)
