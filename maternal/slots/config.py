from pydantic import BaseModel, ConfigDict, Field

from maternal.domain.models import (
    TIME_PATTERN,
    AppointmentType,
    AppointmentTypeTemplate,
    FacilitySlotOverride,
    WorkingHours,
)


class DefaultWorkingHours(BaseModel):
    """Slot grid used when a facility has no override and no type is requested."""

    model_config = ConfigDict(frozen=True)

    start: str = Field(default="09:00", pattern=TIME_PATTERN)
    end: str = Field(default="16:30", pattern=TIME_PATTERN)
    stride_minutes: int = 30
    lunch_start: str = "12:00"
    lunch_end: str = "14:00"
    working_days: tuple[str, ...] = (
        "monday",
        "tuesday",
        "wednesday",
        "thursday",
        "friday",
        "saturday",
    )
    emergency_slots: tuple[str, ...] = ("08:00", "08:30", "17:00", "17:30", "18:00")


DEFAULT_WORKING_HOURS = DefaultWorkingHours()

# Override grids always use a fixed 30 minute stride.
OVERRIDE_STRIDE_MINUTES = 30

APPOINTMENT_TEMPLATES: dict[AppointmentType, AppointmentTypeTemplate] = {
    AppointmentType.PRENATAL: AppointmentTypeTemplate(
        appointment_type=AppointmentType.PRENATAL,
        duration_minutes=60,
        slots=("09:00", "10:00", "11:00", "14:00", "15:00", "16:00"),
        max_per_day=6,
        requires_specialist=True,
        description="Prenatal care appointments for expectant mothers",
    ),
    AppointmentType.POSTPARTUM: AppointmentTypeTemplate(
        appointment_type=AppointmentType.POSTPARTUM,
        duration_minutes=45,
        slots=("09:15", "10:00", "10:45", "14:15", "15:00", "15:45"),
        max_per_day=6,
        requires_specialist=True,
        description="Postpartum care and recovery appointments",
    ),
    AppointmentType.VACCINATION: AppointmentTypeTemplate(
        appointment_type=AppointmentType.VACCINATION,
        duration_minutes=15,
        slots=(
            "09:00", "09:15", "09:30", "09:45", "10:00", "10:15", "10:30", "10:45",
            "11:00", "11:15", "11:30", "11:45", "14:00", "14:15", "14:30", "14:45",
            "15:00", "15:15", "15:30", "15:45", "16:00", "16:15", "16:30",
        ),  # fmt: skip
        max_per_day=20,
        requires_specialist=False,
        description="Child and adult vaccination appointments",
    ),
    AppointmentType.MENTAL_HEALTH: AppointmentTypeTemplate(
        appointment_type=AppointmentType.MENTAL_HEALTH,
        duration_minutes=50,
        slots=("09:10", "10:00", "10:50", "14:10", "15:00", "15:50"),
        max_per_day=6,
        requires_specialist=True,
        description="Mental health and counseling sessions",
    ),
    AppointmentType.EMERGENCY: AppointmentTypeTemplate(
        appointment_type=AppointmentType.EMERGENCY,
        duration_minutes=30,
        slots=(
            "08:00", "08:30", "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
            "14:00", "14:30", "15:00", "15:30", "16:00", "16:30", "17:00", "17:30", "18:00",
        ),  # fmt: skip
        max_per_day=15,
        requires_specialist=False,
        priority="high",
        description="Emergency medical consultations",
    ),
    AppointmentType.THERAPY: AppointmentTypeTemplate(
        appointment_type=AppointmentType.THERAPY,
        duration_minutes=45,
        slots=("09:15", "10:00", "10:45", "11:30", "14:15", "15:00", "15:45"),
        max_per_day=7,
        requires_specialist=True,
        description="Physical therapy and rehabilitation sessions",
    ),
}

FACILITY_OVERRIDES: dict[int, FacilitySlotOverride] = {
    # King Faisal Hospital
    1: FacilitySlotOverride(
        facility_id=1,
        working_hours=WorkingHours(start="08:00", end="18:00", weekend_slots=True),
        additional_slots=("08:00", "08:30", "17:30", "18:00"),
        max_capacity=100,
    ),
    # Kigali University Teaching Hospital (CHUK)
    3: FacilitySlotOverride(
        facility_id=3,
        working_hours=WorkingHours(start="08:00", end="20:00", weekend_slots=True),
        additional_slots=("08:00", "08:30", "18:00", "18:30", "19:00", "19:30", "20:00"),
        max_capacity=150,
    ),
    # Kigali Central Hospital (CHK)
    6: FacilitySlotOverride(
        facility_id=6,
        working_hours=WorkingHours(start="08:00", end="17:00", weekend_slots=True),
        additional_slots=("08:00", "08:30", "16:30", "17:00"),
        max_capacity=80,
    ),
}
