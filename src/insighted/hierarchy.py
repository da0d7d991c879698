from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

import yaml

from .common import console

Barangays = tuple[str, ...]
Municipalities = Mapping[str, Barangays]
Provinces = Mapping[str, Municipalities]


def _dedupe_sorted(values: Iterable[str]) -> Barangays:
    return tuple(sorted({v for v in values if isinstance(v, str) and v}))


class LocationHierarchy:
    """Canonical Region → Province → Municipality → Barangay tree.

    Built once from a nested mapping and never mutated afterwards. Barangay
    lists are de-duplicated and sorted on construction so that option lists
    handed to a form are stable.
    """

    def __init__(self, tree: Mapping[str, Mapping[str, Mapping[str, Iterable[str]]]]):
        regions: dict[str, Provinces] = {}
        for region, provinces in tree.items():
            if not isinstance(provinces, Mapping):
                raise ValueError(f"Region {region!r} must map to provinces.")
            prov_map: dict[str, Municipalities] = {}
            for province, munis in provinces.items():
                if not isinstance(munis, Mapping):
                    raise ValueError(
                        f"Province {province!r} in {region!r} must map to municipalities."
                    )
                prov_map[province] = MappingProxyType(
                    {muni: _dedupe_sorted(brgys or []) for muni, brgys in munis.items()}
                )
            regions[region] = MappingProxyType(prov_map)
        self._tree: Mapping[str, Provinces] = MappingProxyType(regions)

    def __len__(self) -> int:
        return len(self._tree)

    def __contains__(self, region: object) -> bool:
        return region in self._tree

    def regions(self) -> tuple[str, ...]:
        return tuple(sorted(self._tree))

    def provinces(self, region: str) -> tuple[str, ...]:
        return tuple(sorted(self._tree.get(region, {})))

    def municipalities(self, region: str, province: str) -> tuple[str, ...]:
        return tuple(sorted(self._tree.get(region, {}).get(province, {})))

    def barangays(self, region: str, province: str, municipality: str) -> Barangays:
        return self._tree.get(region, {}).get(province, {}).get(municipality, ())

    def as_dict(self) -> dict[str, dict[str, dict[str, list[str]]]]:
        return {
            region: {
                province: {muni: list(brgys) for muni, brgys in munis.items()}
                for province, munis in provinces.items()
            }
            for region, provinces in self._tree.items()
        }


def load_hierarchy(path: Path) -> LocationHierarchy:
    """Read the canonical hierarchy document at `path`.

    Args:
        path (Path): A `*.json` file, or a `*.yml` / `*.yaml` file with the same nesting.

    Raises:
        FileNotFoundError: `path` does not exist.
        ValueError: The document is not a nested Region → Province → Municipality mapping.

    Returns:
        LocationHierarchy: The immutable tree.
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing locations file: {path}")
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yml", ".yaml"):
        data = yaml.safe_load(text)
    else:
        data = json.loads(text)
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Locations file {path.name} must contain a mapping of regions.")
    hierarchy = LocationHierarchy(data)
    console.log(f"[green]✓ Loaded {len(hierarchy)} regions[/green] from {path.name}")
    return hierarchy
