import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"

NOTES_MAX_LENGTH = 500


class Coordinates(BaseModel):
    """A point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Facility(BaseModel):
    """A health center in the static directory."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    name: str
    district: str
    sector: str
    location: str
    coordinates: Coordinates
    services: frozenset[str] = frozenset()
    phone: str = ""
    emergency_phone: str = ""
    hours: str = ""
    rating: float | None = None
    email: str | None = None

    def offers(self, service: str) -> bool:
        return service in self.services


class HotlineContact(BaseModel):
    """A national helpline shown alongside the facility directory."""

    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    description: str = ""


class AppointmentType(str, Enum):
    """Recognized appointment reasons."""

    PRENATAL = "prenatal"
    POSTPARTUM = "postpartum"
    VACCINATION = "vaccination"
    MENTAL_HEALTH = "mental_health"
    EMERGENCY = "emergency"
    THERAPY = "therapy"


class AppointmentTypeTemplate(BaseModel):
    """Fixed slot grid and capacity rules for one appointment type."""

    model_config = ConfigDict(frozen=True)

    appointment_type: AppointmentType
    slots: tuple[str, ...]
    duration_minutes: int
    max_per_day: int
    requires_specialist: bool
    priority: str = "normal"
    description: str = "General medical appointment"


class WorkingHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: str = Field(pattern=TIME_PATTERN)
    end: str = Field(pattern=TIME_PATTERN)
    weekend_slots: bool = False


class FacilitySlotOverride(BaseModel):
    """Facility-specific extension of the slot grid (longer hours, extra slots)."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    working_hours: WorkingHours | None = None
    additional_slots: tuple[str, ...] = ()
    max_capacity: int | None = None


class ReservationStatus(str, Enum):
    """Lifecycle states of a reservation."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

    @property
    def is_final(self) -> bool:
        return self is not ReservationStatus.SCHEDULED


class Reservation(BaseModel):
    """A booked appointment. The only mutable entity, changed by replacing it in storage."""

    model_config = ConfigDict(frozen=True)

    reservation_id: str
    facility_id: int
    facility_name: str
    owner_ref: str
    date: dt.date
    time: str = Field(pattern=TIME_PATTERN)
    appointment_type: AppointmentType
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    contact_email: str | None = None
    status: ReservationStatus = ReservationStatus.SCHEDULED
    reminder_sent: bool = False
    created_at: dt.datetime
    updated_at: dt.datetime

    @property
    def slot_key(self) -> tuple[int, dt.date, str]:
        return self.facility_id, self.date, self.time

    @property
    def is_active(self) -> bool:
        return self.status is not ReservationStatus.CANCELLED


class BookingRequest(BaseModel):
    """A request to reserve one slot."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    date: dt.date
    time: str
    appointment_type: str
    owner_ref: str
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)
    contact_email: str | None = None


class RescheduleRequest(BaseModel):
    """Fields left as ``None`` keep their current value."""

    model_config = ConfigDict(frozen=True)

    reservation_id: str
    owner_ref: str
    date: dt.date | None = None
    time: str | None = None
    appointment_type: str | None = None
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)


class RankedFacility(BaseModel):
    """A facility paired with its great-circle distance from the query point."""

    model_config = ConfigDict(frozen=True)

    facility: Facility
    distance_km: float | None = None

    @property
    def display_distance(self) -> float | None:
        return None if self.distance_km is None else round(self.distance_km, 1)


class SectorMatch(BaseModel):
    """A sector lookup hit. ``estimated_distance`` is a display estimate, not a measurement."""

    model_config = ConfigDict(frozen=True)

    facility: Facility
    is_in_sector: bool
    estimated_distance: str


class SlotValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    valid: bool
    available_slots: list[str]
    message: str


class SlotInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    duration_minutes: int
    max_per_day: int
    requires_specialist: bool
    priority: str
    description: str


class Availability(BaseModel):
    """Bookable slots for a facility on a date, net of active reservations."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    facility_name: str
    date: dt.date
    appointment_type: AppointmentType | None = None
    slots: list[str]
    slot_info: SlotInfo | None = None
    total_slots: int
    available_count: int
    booked_count: int


class EmergencyStatus(str, Enum):
    PENDING = "pending"
    RESPONDED = "responded"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class EmergencyContact(BaseModel):
    """Who needs help and how to reach them."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: str | None = None
    age: int | None = None
    gender: str | None = None


class AlertedFacility(BaseModel):
    """Snapshot of a facility at the moment it was alerted."""

    model_config = ConfigDict(frozen=True)

    facility_id: int
    name: str
    phone: str
    emergency_phone: str
    email: str | None = None
    distance_km: float | None = None
    coordinates: Coordinates
    services: frozenset[str]
    notified_at: dt.datetime


class EmergencyAlert(BaseModel):
    """An emergency raised by a user and dispatched to nearby facilities."""

    model_config = ConfigDict(frozen=True)

    emergency_id: str
    owner_ref: str
    contact: EmergencyContact
    location: Coordinates | None = None
    facilities: tuple[AlertedFacility, ...]
    status: EmergencyStatus = EmergencyStatus.PENDING
    responded_facility: AlertedFacility | None = None
    alerted_at: dt.datetime
    responded_at: dt.datetime | None = None
    resolved_at: dt.datetime | None = None
    cancelled_at: dt.datetime | None = None
    notes: str | None = None

    @property
    def response_minutes(self) -> int | None:
        if self.responded_at is None:
            return None
        return int((self.responded_at - self.alerted_at).total_seconds() // 60)


class NotificationKind(str, Enum):
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_REMINDER = "booking_reminder"
    EMERGENCY_DISPATCH = "emergency_dispatch"


class NotificationCommand(BaseModel):
    """A side effect for the caller to deliver after the core call returns."""

    model_config = ConfigDict(frozen=True)

    kind: NotificationKind
    owner_ref: str
    recipient: str | None = None
    reservation: Reservation | None = None
    emergency: EmergencyAlert | None = None
    facility: AlertedFacility | None = None


class BookingOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    reservation: Reservation
    outbox: tuple[NotificationCommand, ...] = ()


class EmergencyOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    alert: EmergencyAlert
    outbox: tuple[NotificationCommand, ...] = ()
