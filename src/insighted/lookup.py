from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import polars as pl

from .common import console, normalize_key
from .draft import SchoolDraft
from .errors import ReferenceDataError, SchoolNotFound, ValidationError
from .hierarchy import LocationHierarchy
from .resolver import LocationMatch, resolve_location

Record = dict[str, str]

IDENTIFIER_KEY = "schoolid"
ID_SEPARATOR = "."


def load_reference_records(path: Path) -> list[Record]:
    """Read the reference schools CSV with every column kept as text.

    Column order is preserved since field extraction is first-match-wins.
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing reference file: {path}")
    with console.status(f"[bold magenta]Reading[/bold magenta] {path.name}", spinner="dots"):
        df = pl.read_csv(path, infer_schema=False).fill_null("")
    console.log(f"Loaded [green]{df.height}[/green] reference rows from {path.name}")
    return df.to_dicts()


def find_identifier_field(field_names: Iterable[str]) -> str | None:
    for name in field_names:
        if normalize_key(name) == IDENTIFIER_KEY:
            return name
    return None


def truncate_identifier(value: object) -> str:
    """Trim `value` and drop any suffix variant, e.g. `"100001.1"` → `"100001"`."""
    text = "" if value is None else str(value).strip()
    return text.split(ID_SEPARATOR, 1)[0]


def find_reference_record(
    records: Sequence[Record], identifier_field: str, target_id: str
) -> Record | None:
    """Return the first record whose identifier equals `target_id`, or `None`.

    Comparison is exact after trimming both sides and truncating the record's
    identifier at the first separator. Case and punctuation are not normalized.
    """
    target = str(target_id).strip()
    for record in records:
        if truncate_identifier(record.get(identifier_field)) == target:
            return record
    return None


def field_value(record: Record, target: str) -> str:
    """Return the first field whose normalized name contains the normalized `target`.

    Tolerates header variants such as `School.Name`, `school_name` or
    `SchoolName`. An absent field yields an empty string.
    """
    needle = normalize_key(target)
    for name, value in record.items():
        if needle in normalize_key(name):
            return "" if value is None else str(value).strip()
    return ""


def autofill(
    draft: SchoolDraft,
    records: Sequence[Record],
    hierarchy: LocationHierarchy,
) -> tuple[SchoolDraft, LocationMatch]:
    """Pre-fill `draft` from the reference row that carries its school ID.

    Args:
        draft (SchoolDraft): The form being edited; only `school_id` is read.
        records (Sequence[Record]): Rows from `load_reference_records()`.
        hierarchy (LocationHierarchy): Canonical locations to match against.

    Raises:
        ValidationError: The draft has no school ID.
        ReferenceDataError: The reference rows have no school ID column.
        SchoolNotFound: No row carries the school ID.

    Returns:
        tuple[SchoolDraft, LocationMatch]: The filled draft and the cascading
            location options that go with it.
    """
    target_id = draft.require_school_id()

    id_field = find_identifier_field(records[0].keys() if records else [])
    if id_field is None:
        raise ReferenceDataError("Error: 'SchoolID' column missing in CSV.")

    school = find_reference_record(records, id_field, target_id)
    if school is None:
        raise SchoolNotFound(target_id)

    match = resolve_location(
        hierarchy,
        raw_region=field_value(school, "region"),
        raw_province=field_value(school, "province"),
        raw_municipality=field_value(school, "municipality"),
        raw_barangay=field_value(school, "barangay"),
    )
    filled = draft.update(
        school_name=field_value(school, "schoolname"),
        division=field_value(school, "division"),
        district=field_value(school, "district"),
        leg_district=field_value(school, "legdistrict")
        or field_value(school, "legislative"),
        mother_school_id=field_value(school, "motherschool"),
        latitude=field_value(school, "latitude"),
        longitude=field_value(school, "longitude"),
    ).with_location(match)
    console.log(f"[green]✓ Auto-filled[/green] school [cyan]{target_id}[/cyan]")
    return filled, match
