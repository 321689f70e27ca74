"""Input structs for the boundary handlers.

Request bodies arrive as loose dicts with camelCase keys (``centerId``,
``reason``...). Each handler validates into one of these before calling the core.
"""

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from maternal.domain.models import (
    NOTES_MAX_LENGTH,
    TIME_PATTERN,
    AppointmentType,
    Coordinates,
    EmergencyContact,
)


class _Input(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class BookAppointmentInput(_Input):
    facility_id: int = Field(validation_alias=AliasChoices("facilityId", "centerId", "facility_id"))
    date: dt.date
    time: str = Field(pattern=TIME_PATTERN)
    appointment_type: AppointmentType = Field(
        validation_alias=AliasChoices("appointmentType", "reason", "appointment_type")
    )
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    contact_email: str | None = Field(
        default=None, validation_alias=AliasChoices("contactEmail", "email", "contact_email")
    )


class RescheduleInput(_Input):
    date: dt.date | None = None
    time: str | None = Field(default=None, pattern=TIME_PATTERN)
    appointment_type: AppointmentType | None = Field(
        default=None,
        validation_alias=AliasChoices("appointmentType", "reason", "appointment_type"),
    )
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)


class AvailabilityQuery(_Input):
    facility_id: int = Field(validation_alias=AliasChoices("facilityId", "centerId", "facility_id"))
    date: dt.date
    appointment_type: AppointmentType | None = Field(
        default=None,
        validation_alias=AliasChoices("appointmentType", "type", "appointment_type"),
    )


class NearestQuery(_Input):
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(validation_alias=AliasChoices("lng", "lon", "longitude"))
    limit: int | None = None


class SectorQuery(_Input):
    district: str = Field(min_length=1)
    sector: str = Field(min_length=1)


class SearchQuery(_Input):
    query: str = Field(validation_alias=AliasChoices("query", "q"))


class EmergencyAlertInput(_Input):
    contact: EmergencyContact = Field(validation_alias=AliasChoices("userData", "contact"))
    location: Coordinates | None = None


class HospitalResponseInput(_Input):
    facility_id: int = Field(
        validation_alias=AliasChoices("hospitalId", "facilityId", "facility_id")
    )


def describe_validation_error(exc: PydanticValidationError) -> str:
    """Flatten pydantic errors into ``"field: message; ..."``."""
    parts = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "body"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)
