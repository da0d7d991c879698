import json
import tempfile
from pathlib import Path

import polars as pl
import pytest
from sqlite_utils import Database

from insighted.hierarchy import LocationHierarchy, load_hierarchy
from insighted.lookup import load_reference_records
from insighted.outbox import OutboxStore

LOCATIONS = {
    "Region I": {
        "Ilocos Norte": {
            "Laoag City": ["Barangay B", "Barangay A", "Barangay A"],
            "Bacarra": ["Libtong"],
        },
        "Pangasinan": {"Dagupan City": ["Bonuan Gueset"]},
    },
    "NCR": {"Metro Manila": {"City of Manila": ["Ermita"]}},
}


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_locations_json(temp_dir):
    """Create a sample canonical hierarchy file."""
    file_path = temp_dir / "locations.json"
    file_path.write_text(json.dumps(LOCATIONS))
    return file_path


@pytest.fixture
def hierarchy(sample_locations_json) -> LocationHierarchy:
    return load_hierarchy(sample_locations_json)


@pytest.fixture
def sample_reference_csv(temp_dir):
    """Create a sample reference schools CSV, headers as in the DepEd masterlist."""
    data = {
        "Region": ["REGION I", "Region I", "NCR"],
        "Division": ["Laoag City", "Ilocos Norte", "Manila"],
        "District": ["Laoag I", "Bacarra", "Ermita"],
        "SchoolID": ["100001.1", "100003", "136001"],
        "School.Name": [
            "Laoag Central Elementary School",
            "Somewhere Elementary School",
            "Ermita Elementary School",
        ],
        "Province": ["ILOCOS NORTE", "Unknown Province", "Metro Manila"],
        "Municipality": ["LAOAG CITY", "Somewhere", "CITY OF MANILA"],
        "Legislative.District": ["1st District", "2nd District", "Lone District"],
        "Barangay": ["barangay a", "Brgy X", "ERMITA"],
        "Mother.School.ID": ["", "100001", ""],
        "Latitude": ["18.1977", "18.2500", "14.5826"],
        "Longitude": ["120.5936", "120.6100", "120.9787"],
    }
    file_path = temp_dir / "schools.csv"
    pl.DataFrame(data).write_csv(file_path)
    return file_path


@pytest.fixture
def records(sample_reference_csv):
    return load_reference_records(sample_reference_csv)


@pytest.fixture
def outbox_store():
    store = OutboxStore(Database(memory=True))
    yield store
    store.close()


@pytest.fixture
def test_env(temp_dir, sample_reference_csv, sample_locations_json, monkeypatch):
    """Set up test environment variables."""
    monkeypatch.setenv("REFERENCE_FILE", str(sample_reference_csv))
    monkeypatch.setenv("LOCATIONS_FILE", str(sample_locations_json))
    monkeypatch.setenv("SCHOOLS_DB_FILE", str(temp_dir / "schools-db.json"))
    monkeypatch.setenv("OUTBOX_DB_FILE", str(temp_dir / "outbox.db"))
    monkeypatch.setenv("PROFILES_DB_FILE", str(temp_dir / "profiles.db"))
    # nothing listens on the discard port, so connections are refused
    monkeypatch.setenv("API_URL", "http://127.0.0.1:9")
    monkeypatch.setenv("HTTP_TIMEOUT", "2")
    monkeypatch.setenv("SUBMITTED_BY", "encoder-01")
    monkeypatch.delenv("CONNECTIVITY_URL", raising=False)
    yield temp_dir
