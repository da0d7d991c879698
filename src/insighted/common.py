import re
from dataclasses import dataclass
from pathlib import Path

from environs import Env
from rich.console import Console

env = Env()
env.read_env()

console = Console()

DEFAULT_API_URL = "http://localhost:3000"
SAVE_SCHOOL_PATH = "/api/save-school"


def normalize_key(text: str | None) -> str:
    """Lower-case `text` and drop every character that is not an ASCII letter or digit.

    Two labels are treated as the same thing when their normalized forms are equal,
    e.g. `"REGION I"` and `"region i"` both become `"regioni"`.
    """
    if not isinstance(text, str):
        return ""
    return re.sub(r"[^a-z0-9]", "", text.lower())


@dataclass(frozen=True)
class Settings:
    """Paths and endpoints read from the environment (or `.env`)."""

    reference_file: Path
    locations_file: Path
    schools_db_file: Path
    outbox_db_file: Path
    profiles_db_file: Path
    api_url: str
    connectivity_url: str
    submitted_by: str | None
    http_timeout: float

    @property
    def save_school_url(self) -> str:
        return self.api_url.rstrip("/") + SAVE_SCHOOL_PATH

    @classmethod
    def from_env(cls) -> "Settings":
        api_url = env.str("API_URL", DEFAULT_API_URL)
        return cls(
            reference_file=env.path("REFERENCE_FILE", Path("data/schools.csv")),
            locations_file=env.path("LOCATIONS_FILE", Path("data/locations.json")),
            schools_db_file=env.path("SCHOOLS_DB_FILE", Path("data/schools-db.json")),
            outbox_db_file=env.path("OUTBOX_DB_FILE", Path("outbox.db")),
            profiles_db_file=env.path("PROFILES_DB_FILE", Path("profiles.db")),
            api_url=api_url,
            connectivity_url=env.str("CONNECTIVITY_URL", api_url),
            submitted_by=env.str("SUBMITTED_BY", None),
            http_timeout=env.float("HTTP_TIMEOUT", 10.0),
        )
