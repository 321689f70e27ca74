import datetime as dt


class MaternalHubError(Exception):
    """Base exception for all core errors."""


class NotFoundError(MaternalHubError):
    """Raised when a referenced record does not exist."""

    kind: str = "Record"

    def __init__(self, key: object) -> None:
        self.key = key
        super().__init__(f"{self.kind} not found: {key}")


class FacilityNotFoundError(NotFoundError):
    kind = "Health center"


class ReservationNotFoundError(NotFoundError):
    kind = "Appointment"


class EmergencyNotFoundError(NotFoundError):
    kind = "Emergency"


class ValidationError(MaternalHubError):
    """Base for input errors detected synchronously. Never retried."""


class InvalidTypeError(ValidationError):
    """Raised when an appointment type is not one of the recognized values."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unknown appointment type: {value!r}")


UnknownTypeError = InvalidTypeError


class InvalidCoordinateError(ValidationError):
    """Raised when latitude or longitude is out of range."""

    def __init__(self, lat: float, lng: float) -> None:
        self.lat = lat
        self.lng = lng
        super().__init__(
            f"Invalid coordinates ({lat}, {lng}): latitude must be within [-90, 90] "
            "and longitude within [-180, 180]"
        )


class InvalidRangeError(ValidationError):
    """Raised when a time-grid range or stride is malformed."""


class InvalidTimeFormatError(ValidationError):
    """Raised when a time-of-day string is not zero-padded 24-hour ``HH:MM``."""

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Invalid time {value!r}: expected HH:MM (24-hour)")


class SlotConflictError(MaternalHubError):
    """Raised when the (facility, date, time) key already holds an active reservation."""

    def __init__(
        self,
        facility_id: int,
        date: dt.date,
        time: str,
        available_slots: list[str] | None = None,
    ) -> None:
        self.facility_id = facility_id
        self.date = date
        self.time = time
        self.available_slots = available_slots or []
        super().__init__(
            f"Slot {time} on {date.isoformat()} is already booked at facility {facility_id}"
        )


class SlotNotOfferedError(MaternalHubError):
    """Raised when the requested time is not offered for this type at this facility."""

    def __init__(self, time: str, available_slots: list[str]) -> None:
        self.time = time
        self.available_slots = available_slots
        super().__init__(f"Slot {time} is not available for this appointment type")


class ForbiddenError(MaternalHubError):
    """Raised when the caller does not own the record they are trying to change."""


class AlreadyFinalizedError(MaternalHubError):
    """Raised when mutating a record that has reached a final status."""


class StorageUnavailableError(MaternalHubError):
    """Raised when storage times out or cannot be reached."""


class UniqueConstraintViolation(MaternalHubError):
    """Raised by storage adapters when an insert or update collides on the slot key."""

    def __init__(self, facility_id: int, date: dt.date, time: str) -> None:
        self.facility_id = facility_id
        self.date = date
        self.time = time
        super().__init__(f"Active reservation already exists for ({facility_id}, {date}, {time})")


class NotificationError(MaternalHubError):
    """Raised by notifier adapters when a message cannot be delivered."""
