from collections.abc import Iterable, Mapping

from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import UnknownTypeError
from maternal.domain.models import (
    AppointmentType,
    AppointmentTypeTemplate,
    FacilitySlotOverride,
    SlotInfo,
    SlotValidation,
)
from maternal.slots.config import (
    APPOINTMENT_TEMPLATES,
    DEFAULT_WORKING_HOURS,
    FACILITY_OVERRIDES,
    OVERRIDE_STRIDE_MINUTES,
    DefaultWorkingHours,
)
from maternal.slots.time_grid import generate_time_slots


def parse_appointment_type(value: AppointmentType | str) -> AppointmentType:
    """Coerce a raw value to :class:`AppointmentType`, raising ``UnknownTypeError``."""
    if isinstance(value, AppointmentType):
        return value
    try:
        return AppointmentType(value)
    except ValueError:
        raise UnknownTypeError(value) from None


class SlotResolver:
    """Derives the bookable ``HH:MM`` grid for a facility and appointment type.

    All methods are pure functions of their arguments and the immutable
    configuration passed at construction. Results are sorted lexicographically,
    which matches chronological order for zero-padded 24-hour times.
    """

    def __init__(
        self,
        directory: FacilityDirectory,
        templates: Mapping[AppointmentType, AppointmentTypeTemplate] = APPOINTMENT_TEMPLATES,
        overrides: Mapping[int, FacilitySlotOverride] = FACILITY_OVERRIDES,
        default_hours: DefaultWorkingHours = DEFAULT_WORKING_HOURS,
    ) -> None:
        self._directory = directory
        self._templates = dict(templates)
        self._overrides = dict(overrides)
        self._default_hours = default_hours

    def resolve_template(self, appointment_type: AppointmentType | str) -> AppointmentTypeTemplate:
        parsed = parse_appointment_type(appointment_type)
        template = self._templates.get(parsed)
        if template is None:
            raise UnknownTypeError(appointment_type)
        return template

    def slot_info(self, appointment_type: AppointmentType | str) -> SlotInfo:
        template = self.resolve_template(appointment_type)
        return SlotInfo(
            duration_minutes=template.duration_minutes,
            max_per_day=template.max_per_day,
            requires_specialist=template.requires_specialist,
            priority=template.priority,
            description=template.description,
        )

    def override_for(self, facility_id: int) -> FacilitySlotOverride | None:
        return self._overrides.get(facility_id)

    def effective_slots(
        self, facility_id: int, appointment_type: AppointmentType | str
    ) -> list[str]:
        """Template slots ∪ facility extras ∪ (emergency only) the global emergency slots."""
        facility = self._directory.get_by_id(facility_id)
        template = self.resolve_template(appointment_type)

        slots = set(template.slots)
        override = self.override_for(facility.facility_id)
        if override is not None:
            slots.update(override.additional_slots)
        if template.appointment_type is AppointmentType.EMERGENCY:
            slots.update(self._default_hours.emergency_slots)
        return sorted(slots)

    def available(
        self,
        facility_id: int,
        appointment_type: AppointmentType | str,
        booked_times: Iterable[str] = (),
    ) -> list[str]:
        booked = set(booked_times)
        return [s for s in self.effective_slots(facility_id, appointment_type) if s not in booked]

    def validate(
        self,
        time: str,
        facility_id: int,
        appointment_type: AppointmentType | str,
        booked_times: Iterable[str] = (),
    ) -> SlotValidation:
        slots = self.available(facility_id, appointment_type, booked_times)
        valid = time in slots
        return SlotValidation(
            valid=valid,
            available_slots=slots,
            message=(
                "Slot is available" if valid else "Slot is not available for this appointment type"
            ),
        )

    def all_slots_for_facility(self, facility_id: int) -> list[str]:
        """Type-agnostic grid: override hours plus extras, else the default working hours."""
        facility = self._directory.get_by_id(facility_id)
        override = self.override_for(facility.facility_id)

        if override is not None and override.working_hours is not None:
            hours = override.working_hours
            slots = set(generate_time_slots(hours.start, hours.end, OVERRIDE_STRIDE_MINUTES))
            slots.update(override.additional_slots)
            return sorted(slots)

        defaults = self._default_hours
        slots = set(generate_time_slots(defaults.start, defaults.end, defaults.stride_minutes))
        if override is not None:
            slots.update(override.additional_slots)
        return sorted(slots)
