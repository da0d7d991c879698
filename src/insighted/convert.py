from __future__ import annotations

import json
from pathlib import Path

import polars as pl

from .common import console

# output key -> reference CSV header
COLUMN_MAP = {
    "schoolName": "School.Name",
    "region": "Region",
    "division": "Division",
    "district": "District",
    "province": "Province",
    "municipality": "Municipality",
    "legDistrict": "Legislative.District",
    "barangay": "Barangay",
}
ID_COLUMN = "SchoolID"


def convert_reference_csv(source: Path, target: Path) -> int:
    """Write the auto-fill document `{school_id: {...}}` built from `source`.

    Latitude, longitude and street address are left out; those are entered by
    hand. Rows without a school ID are skipped.

    Returns:
        int: Number of schools written.
    """
    if not source.exists():
        raise FileNotFoundError(f"Missing reference file: {source}")
    df = pl.read_csv(source, infer_schema=False)
    if ID_COLUMN not in df.columns:
        raise ValueError(f"Column {ID_COLUMN!r} missing in {source.name}")

    df = df.with_columns(
        [
            pl.col(header).fill_null("").alias(key)
            if header in df.columns
            else pl.lit("").alias(key)
            for key, header in COLUMN_MAP.items()
        ]
    ).filter(pl.col(ID_COLUMN).is_not_null() & (pl.col(ID_COLUMN) != ""))

    results: dict[str, dict[str, str]] = {}
    for row in df.select([ID_COLUMN, *COLUMN_MAP]).iter_rows(named=True):
        school_id = row.pop(ID_COLUMN)
        results[school_id] = row

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(results), encoding="utf-8")
    console.log(f"[green]✓ Converted {len(results)} schools[/green] → {target}")
    return len(results)
