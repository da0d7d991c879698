from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlite_utils import Database

from .common import console
from .errors import ValidationError

PROFILES_TABLE = "school_profiles"

# column -> payload key
COLUMNS = {
    "school_id": "schoolId",
    "school_name": "schoolName",
    "region": "region",
    "province": "province",
    "division": "division",
    "district": "district",
    "municipality": "municipality",
    "leg_district": "legDistrict",
    "barangay": "barangay",
    "mother_school_id": "motherSchoolId",
    "latitude": "latitude",
    "longitude": "longitude",
    "curricular_offering": "curricularOffering",
    "submitted_by": "submittedBy",
}


class ProfileRepository:
    """Server-side store of submitted school profiles, one row per school ID."""

    def __init__(self, db: Database, table_name: str = PROFILES_TABLE):
        self.db = db
        self.table_name = table_name
        self.db[table_name].create(  # type: ignore
            {**{col: str for col in COLUMNS}, "submitted_at": str},
            pk="school_id",
            if_not_exists=True,
        )

    @classmethod
    def open(cls, path: Path) -> ProfileRepository:
        db = Database(sqlite3.connect(path, check_same_thread=False))
        db.enable_wal()
        return cls(db)

    @property
    def table(self):
        return self.db[self.table_name]

    def upsert(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Insert or overwrite the profile keyed by `payload["schoolId"]`.

        Every column is taken from `payload` (last write wins) and the row is
        stamped with the time of this submission.

        Raises:
            ValidationError: The payload has no school ID.
        """
        if not payload or not str(payload.get("schoolId") or "").strip():
            raise ValidationError("Missing School ID")
        row: dict[str, Any] = {
            col: None if payload.get(key) is None else str(payload[key])
            for col, key in COLUMNS.items()
        }
        row["school_id"] = row["school_id"].strip()
        row["submitted_at"] = datetime.now(timezone.utc).isoformat()
        self.table.upsert(row, pk="school_id")  # type: ignore
        console.log(f"[green]✓ SUCCESS:[/green] saved school {row['school_id']}")
        return row

    def get(self, school_id: str) -> dict[str, Any] | None:
        rows = list(self.table.rows_where("school_id = ?", [school_id]))  # type: ignore
        return rows[0] if rows else None

    def count(self) -> int:
        return self.table.count  # type: ignore
