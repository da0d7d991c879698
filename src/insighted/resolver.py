from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .common import normalize_key
from .hierarchy import LocationHierarchy


@dataclass(frozen=True)
class LocationMatch:
    """Matched location values plus the options open to each dependent level."""

    region: str
    province: str
    municipality: str
    barangay: str
    province_options: tuple[str, ...] = ()
    municipality_options: tuple[str, ...] = ()
    barangay_options: tuple[str, ...] = ()


def find_match(options: Iterable[str], value: str | None) -> str | None:
    """Return the first option whose normalized form equals that of `value`.

    A blank `value` (or one made only of punctuation) never matches anything.
    """
    target = normalize_key(value)
    if not target:
        return None
    for option in options:
        if normalize_key(option) == target:
            return option
    return None


def resolve_location(
    hierarchy: LocationHierarchy,
    raw_region: str | None,
    raw_province: str | None,
    raw_municipality: str | None,
    raw_barangay: str | None,
) -> LocationMatch:
    """Map free-text location labels onto the canonical hierarchy.

    Levels are matched top-down. A matched level takes the canonical spelling
    and opens the next level's options; a miss keeps the raw label and leaves
    every level beneath it without options (raw labels passed through as is).
    """
    region = raw_region or ""
    province = raw_province or ""
    municipality = raw_municipality or ""
    barangay = raw_barangay or ""
    province_options: tuple[str, ...] = ()
    municipality_options: tuple[str, ...] = ()
    barangay_options: tuple[str, ...] = ()

    matched = find_match(hierarchy.regions(), region)
    if matched is not None:
        region = matched
        province_options = hierarchy.provinces(region)
        matched = find_match(province_options, province)
        if matched is not None:
            province = matched
            municipality_options = hierarchy.municipalities(region, province)
            matched = find_match(municipality_options, municipality)
            if matched is not None:
                municipality = matched
                barangay_options = hierarchy.barangays(region, province, municipality)
                matched = find_match(barangay_options, barangay)
                if matched is not None:
                    barangay = matched

    return LocationMatch(
        region=region,
        province=province,
        municipality=municipality,
        barangay=barangay,
        province_options=province_options,
        municipality_options=municipality_options,
        barangay_options=barangay_options,
    )
