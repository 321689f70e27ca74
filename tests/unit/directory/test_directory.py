import json
import random
import re
from pathlib import Path

import pytest

from maternal.directory.catalog import FACILITIES
from maternal.directory.service import FacilityDirectory, load_catalog
from maternal.domain.exceptions import FacilityNotFoundError

# Fixtures (directory) provided by tests/conftest.py

_ESTIMATE = re.compile(r"^~(\d+\.\d) km \(estimate\)$")


class TestGetById:
    def test_returns_facility(self, directory: FacilityDirectory) -> None:
        assert directory.get_by_id(1).name == "King Faisal Hospital"

    def test_accepts_numeric_string(self, directory: FacilityDirectory) -> None:
        assert directory.get_by_id("6").name == "Kigali Central Hospital (CHK)"

    @pytest.mark.parametrize("facility_id", [0, 99, "abc", ""], ids=["zero", "absent", "text", "empty"])
    def test_unknown_id_raises(self, directory: FacilityDirectory, facility_id: object) -> None:
        with pytest.raises(FacilityNotFoundError):
            directory.get_by_id(facility_id)  # type: ignore[arg-type]

    def test_exists(self, directory: FacilityDirectory) -> None:
        assert directory.exists(3) is True
        assert directory.exists(42) is False


class TestGetAll:
    def test_preserves_catalog_order(self, directory: FacilityDirectory) -> None:
        ids = [f.facility_id for f in directory.get_all()]

        assert ids == list(range(1, 12))

    def test_rejects_duplicate_ids(self) -> None:
        with pytest.raises(ValueError, match="unique"):
            FacilityDirectory([FACILITIES[0], FACILITIES[0]])


class TestGetBySector:
    def test_exact_sector_first_then_district(self, directory: FacilityDirectory) -> None:
        matches = directory.get_by_sector("Gasabo", "Kacyiru")

        assert [m.facility.facility_id for m in matches] == [1, 3, 2]
        assert [m.is_in_sector for m in matches] == [True, True, False]

    def test_is_case_insensitive(self, directory: FacilityDirectory) -> None:
        matches = directory.get_by_sector("gasabo", "KACYIRU")

        assert [m.facility.facility_id for m in matches] == [1, 3, 2]

    def test_unknown_district_returns_empty(self, directory: FacilityDirectory) -> None:
        assert directory.get_by_sector("Atlantis", "Kacyiru") == []

    def test_sector_in_other_district_does_not_match(self, directory: FacilityDirectory) -> None:
        matches = directory.get_by_sector("Kicukiro", "Kacyiru")

        assert {m.facility.facility_id for m in matches} == {4, 5}
        assert not any(m.is_in_sector for m in matches)

    def test_caps_results_at_five(self) -> None:
        base = FACILITIES[0]
        many = [base.model_copy(update={"facility_id": i, "sector": f"S{i}"}) for i in range(1, 9)]
        directory = FacilityDirectory(many, rng=random.Random(1))

        assert len(directory.get_by_sector(base.district, "S1")) == 5

    def test_estimates_are_labelled_and_ordered(self, directory: FacilityDirectory) -> None:
        matches = directory.get_by_sector("Gasabo", "Kacyiru")
        distances = []
        for m in matches:
            match = _ESTIMATE.match(m.estimated_distance)
            assert match, m.estimated_distance
            distances.append(float(match.group(1)))

        in_sector = [d for d, m in zip(distances, matches) if m.is_in_sector]
        nearby = [d for d, m in zip(distances, matches) if not m.is_in_sector]
        assert max(in_sector) < min(nearby)


class TestSearch:
    @pytest.mark.parametrize(
        ("query", "expected_ids"),
        [
            ("faisal", [1]),
            ("KIGALI", [1, 2, 3, 4, 5, 6, 7]),
            ("huye", [8]),
            ("muhoza", [10]),
            ("chuk", [3]),
        ],
        ids=["name", "location", "district", "sector", "abbreviation"],
    )
    def test_matches_fields(
        self, directory: FacilityDirectory, query: str, expected_ids: list[int]
    ) -> None:
        assert [f.facility_id for f in directory.search(query)] == expected_ids

    def test_blank_query_returns_nothing(self, directory: FacilityDirectory) -> None:
        assert directory.search("   ") == []


class TestLoadCatalog:
    def test_loads_json_catalog(self, tmp_path: Path) -> None:
        path = tmp_path / "catalog.json"
        path.write_text(
            json.dumps(
                [
                    {
                        "facility_id": 100,
                        "name": "Test Clinic",
                        "district": "Gasabo",
                        "sector": "Remera",
                        "location": "Remera, Kigali",
                        "coordinates": {"lat": -1.95, "lng": 30.1},
                        "services": ["Maternity"],
                    }
                ]
            )
        )

        facilities = load_catalog(path)

        assert len(facilities) == 1
        assert facilities[0].offers("Maternity")
        assert not facilities[0].offers("Emergency")

    def test_rejects_duplicate_ids(self, tmp_path: Path) -> None:
        record = {
            "facility_id": 1,
            "name": "A",
            "district": "D",
            "sector": "S",
            "location": "L",
            "coordinates": {"lat": 0, "lng": 0},
        }
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([record, record]))

        with pytest.raises(ValueError, match="Duplicate facility id"):
            load_catalog(path)
