from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any

from .errors import ValidationError
from .resolver import LocationMatch

# draft attribute -> key expected by the save-school endpoint
PAYLOAD_KEYS = {
    "school_id": "schoolId",
    "school_name": "schoolName",
    "region": "region",
    "province": "province",
    "municipality": "municipality",
    "barangay": "barangay",
    "division": "division",
    "district": "district",
    "leg_district": "legDistrict",
    "mother_school_id": "motherSchoolId",
    "latitude": "latitude",
    "longitude": "longitude",
    "curricular_offering": "curricularOffering",
}


@dataclass(frozen=True)
class SchoolDraft:
    """An editable school profile, before it is sent or staged."""

    school_id: str = ""
    school_name: str = ""
    region: str = ""
    province: str = ""
    municipality: str = ""
    barangay: str = ""
    division: str = ""
    district: str = ""
    leg_district: str = ""
    mother_school_id: str = ""
    latitude: str = ""
    longitude: str = ""
    curricular_offering: str = ""

    def update(self, **changes: str | None) -> SchoolDraft:
        """Return a copy with the given non-`None` fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def with_location(self, match: LocationMatch) -> SchoolDraft:
        return replace(
            self,
            region=match.region,
            province=match.province,
            municipality=match.municipality,
            barangay=match.barangay,
        )

    def require_school_id(self) -> str:
        school_id = self.school_id.strip()
        if not school_id:
            raise ValidationError("Missing School ID")
        return school_id

    @property
    def label(self) -> str:
        name = self.school_name.strip() or "Untitled Form"
        return f"School Profile: {name} ({self.school_id.strip()})"

    def to_payload(self, submitted_by: str | None) -> dict[str, Any]:
        """Build the JSON body for the save-school endpoint.

        Raises:
            ValidationError: The school ID or the submitter is missing.
        """
        self.require_school_id()
        if not submitted_by:
            raise ValidationError("Login required.")
        payload = {PAYLOAD_KEYS[k]: v for k, v in asdict(self).items()}
        payload["schoolId"] = self.school_id.strip()
        payload["submittedBy"] = submitted_by
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> SchoolDraft:
        values = {
            attr: str(payload[key])
            for attr, key in PAYLOAD_KEYS.items()
            if payload.get(key) is not None
        }
        return cls(**values)
