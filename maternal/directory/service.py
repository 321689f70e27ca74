import json
import random
from collections.abc import Iterable
from pathlib import Path

from loguru import logger
from pydantic import TypeAdapter

from maternal.directory.catalog import FACILITIES
from maternal.domain.exceptions import FacilityNotFoundError
from maternal.domain.models import Facility, SectorMatch

SECTOR_RESULT_LIMIT = 5

# Display-only distance ranges (km) for sector lookups, which carry no user position.
_IN_SECTOR_ESTIMATE_KM = (0.5, 2.5)
_IN_DISTRICT_ESTIMATE_KM = (3.0, 8.0)

_catalog_adapter = TypeAdapter(list[Facility])


def load_catalog(path: Path) -> tuple[Facility, ...]:
    """Load a facility catalog from a JSON array of facility objects."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    facilities = _catalog_adapter.validate_python(raw)
    seen: set[int] = set()
    for facility in facilities:
        if facility.facility_id in seen:
            raise ValueError(f"Duplicate facility id in catalog: {facility.facility_id}")
        seen.add(facility.facility_id)
    logger.info("Loaded {} facilities from {}", len(facilities), path)
    return tuple(facilities)


def _estimate_label(rng: random.Random, bounds: tuple[float, float]) -> str:
    low, high = bounds
    return f"~{rng.uniform(low, high):.1f} km (estimate)"


class FacilityDirectory:
    """Read-only catalog of health facilities, fixed at construction time."""

    def __init__(
        self,
        facilities: Iterable[Facility] = FACILITIES,
        *,
        rng: random.Random | None = None,
    ) -> None:
        self._facilities: tuple[Facility, ...] = tuple(facilities)
        self._by_id: dict[int, Facility] = {f.facility_id: f for f in self._facilities}
        if len(self._by_id) != len(self._facilities):
            raise ValueError("Facility ids must be unique")
        self._rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self._facilities)

    def get_by_id(self, facility_id: int | str) -> Facility:
        """Exact lookup. Numeric strings are accepted since ids often arrive as path params."""
        try:
            key = int(facility_id)
        except (TypeError, ValueError):
            raise FacilityNotFoundError(facility_id) from None
        facility = self._by_id.get(key)
        if facility is None:
            raise FacilityNotFoundError(facility_id)
        return facility

    def exists(self, facility_id: int | str) -> bool:
        try:
            self.get_by_id(facility_id)
        except FacilityNotFoundError:
            return False
        return True

    def get_all(self) -> tuple[Facility, ...]:
        return self._facilities

    def get_by_sector(self, district: str, sector: str) -> list[SectorMatch]:
        """Facilities in the exact sector first, then the rest of the district, at most five.

        ``estimated_distance`` is a labelled placeholder: sector queries carry no
        coordinates, so it is not comparable with :func:`nearest` distances.
        """
        district_key = district.strip().lower()
        sector_key = sector.strip().lower()

        in_district = [f for f in self._facilities if f.district.lower() == district_key]
        exact = [f for f in in_district if f.sector.lower() == sector_key]
        nearby = [f for f in in_district if f.sector.lower() != sector_key]

        matches: list[SectorMatch] = []
        for facility in (exact + nearby)[:SECTOR_RESULT_LIMIT]:
            in_sector = facility in exact
            bounds = _IN_SECTOR_ESTIMATE_KM if in_sector else _IN_DISTRICT_ESTIMATE_KM
            matches.append(
                SectorMatch(
                    facility=facility,
                    is_in_sector=in_sector,
                    estimated_distance=_estimate_label(self._rng, bounds),
                )
            )
        return matches

    def search(self, query: str) -> list[Facility]:
        needle = query.strip().lower()
        if not needle:
            return []
        return [
            f
            for f in self._facilities
            if needle in f.name.lower()
            or needle in f.location.lower()
            or needle in f.district.lower()
            or needle in f.sector.lower()
        ]
