from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sqlite_utils import Database

from .common import console

OUTBOX_TABLE = "outbox"


@dataclass(frozen=True)
class OutboxItem:
    """A submission staged locally until it can be delivered."""

    id: int
    destination: str
    payload: dict[str, Any]
    label: str
    created_at: str

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> OutboxItem:
        return cls(
            id=row["id"],
            destination=row["destination"],
            payload=json.loads(row["payload"]),
            label=row["label"] or "Untitled Form",
            created_at=row["created_at"],
        )


class OutboxStore:
    """Durable queue of pending submissions kept in a SQLite table.

    Items are listed oldest first (ties broken by insertion id); this order is
    what a sync pass follows.
    Naive timestamps are taken as UTC. `syncing` is set while a sync pass is
    running over this store.
    """

    def __init__(self, db: Database, table_name: str = OUTBOX_TABLE):
        self.db = db
        self.table_name = table_name
        self.syncing = False
        self.db[table_name].create(  # type: ignore
            {
                "id": int,
                "destination": str,
                "payload": str,
                "label": str,
                "created_at": str,
            },
            pk="id",
            if_not_exists=True,
        )

    @classmethod
    def open(cls, path: Path) -> OutboxStore:
        db = Database(path)
        db.enable_wal()
        return cls(db)

    @property
    def table(self):
        return self.db[self.table_name]

    def append(
        self,
        destination: str,
        payload: dict[str, Any],
        label: str | None = None,
        created_at: datetime | None = None,
    ) -> OutboxItem:
        created_at = created_at or datetime.now(timezone.utc)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        # stored in UTC so that sorting the text keeps oldest first
        stamp = created_at.astimezone(timezone.utc).isoformat()
        row = {
            "destination": destination,
            "payload": json.dumps(payload),
            "label": label or "Untitled Form",
            "created_at": stamp,
        }
        item_id = self.table.insert(row).last_pk  # type: ignore
        console.log(f"[yellow]Staged[/yellow] outbox item {item_id}: {row['label']}")
        return OutboxItem.from_row({"id": item_id, **row})

    def list_items(self) -> list[OutboxItem]:
        rows = self.table.rows_where(order_by="created_at, id")  # type: ignore
        return [OutboxItem.from_row(row) for row in rows]

    def get(self, item_id: int) -> OutboxItem | None:
        rows = list(self.table.rows_where("id = ?", [item_id]))  # type: ignore
        return OutboxItem.from_row(rows[0]) if rows else None

    def remove(self, item_id: int) -> None:
        self.table.delete_where("id = ?", [item_id])  # type: ignore

    def count(self) -> int:
        return self.table.count  # type: ignore

    def close(self) -> None:
        self.db.close()
