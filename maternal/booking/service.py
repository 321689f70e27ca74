import datetime as dt
import uuid
from collections.abc import Awaitable, Callable
from typing import TypeVar

from loguru import logger

from maternal.booking.ports import ReservationStoreProtocol
from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import (
    AlreadyFinalizedError,
    ForbiddenError,
    InvalidTimeFormatError,
    ReservationNotFoundError,
    SlotConflictError,
    SlotNotOfferedError,
    UniqueConstraintViolation,
)
from maternal.domain.models import (
    AppointmentType,
    Availability,
    BookingOutcome,
    BookingRequest,
    NotificationCommand,
    NotificationKind,
    RescheduleRequest,
    Reservation,
    ReservationStatus,
)
from maternal.domain.storage import call_storage
from maternal.slots.resolver import SlotResolver, parse_appointment_type
from maternal.slots.time_grid import is_valid_time

T = TypeVar("T")


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


class BookingService:
    """Admits or rejects bookings and enforces one active reservation per slot.

    The read-side conflict check gives a friendly error early; the store's
    unique index on ``(facility_id, date, time)`` is what actually decides
    between concurrent bookings of the same slot.
    """

    def __init__(
        self,
        directory: FacilityDirectory,
        resolver: SlotResolver,
        store: ReservationStoreProtocol,
        *,
        timeout_seconds: float = 5.0,
        suggestion_limit: int = 10,
        revalidate_reschedule: bool = True,
        clock: Callable[[], dt.datetime] = _utcnow,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self._directory = directory
        self._resolver = resolver
        self._store = store
        self._timeout = timeout_seconds
        self._suggestion_limit = suggestion_limit
        self._revalidate_reschedule = revalidate_reschedule
        self._clock = clock
        self._id_factory = id_factory

    async def _storage(
        self, operation: str, call: Awaitable[T], timeout: float | None = None
    ) -> T:
        return await call_storage(operation, call, self._timeout if timeout is None else timeout)

    async def _suggestions(
        self,
        facility_id: int,
        appointment_type: AppointmentType,
        date: dt.date,
        timeout: float | None,
    ) -> list[str]:
        booked = await self._storage(
            "list booked times", self._store.list_booked_times(facility_id, date), timeout
        )
        return self._resolver.available(facility_id, appointment_type, booked)[
            : self._suggestion_limit
        ]

    async def _load_owned(
        self, reservation_id: str, owner_ref: str, timeout: float | None
    ) -> Reservation:
        reservation = await self._storage(
            "get reservation", self._store.get(reservation_id), timeout
        )
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        if reservation.owner_ref != owner_ref:
            raise ForbiddenError(f"Appointment {reservation_id} belongs to another user")
        return reservation

    async def book(self, request: BookingRequest, *, timeout: float | None = None) -> BookingOutcome:
        """Reserve a slot.

        Raises:
            FacilityNotFoundError: Unknown facility.
            InvalidTypeError: Unknown appointment type.
            InvalidTimeFormatError: Time is not ``HH:MM``.
            SlotConflictError: The slot already holds an active reservation.
            SlotNotOfferedError: The time is not offered for this type at this facility.
            StorageUnavailableError: Storage timed out or failed.
        """
        facility = self._directory.get_by_id(request.facility_id)
        appointment_type = parse_appointment_type(request.appointment_type)
        if not is_valid_time(request.time):
            raise InvalidTimeFormatError(request.time)

        logger.info(
            "Booking request: facility={}, date={}, time={}, type={}",
            facility.facility_id,
            request.date,
            request.time,
            appointment_type.value,
        )

        existing = await self._storage(
            "find reservation",
            self._store.find_active(facility.facility_id, request.date, request.time),
            timeout,
        )
        if existing is not None:
            suggestions = await self._suggestions(
                facility.facility_id, appointment_type, request.date, timeout
            )
            logger.info("Slot already taken by reservation {}", existing.reservation_id)
            raise SlotConflictError(facility.facility_id, request.date, request.time, suggestions)

        booked = await self._storage(
            "list booked times",
            self._store.list_booked_times(facility.facility_id, request.date),
            timeout,
        )
        validation = self._resolver.validate(
            request.time, facility.facility_id, appointment_type, booked
        )
        if not validation.valid:
            raise SlotNotOfferedError(
                request.time, validation.available_slots[: self._suggestion_limit]
            )

        now = self._clock()
        reservation = Reservation(
            reservation_id=self._id_factory(),
            facility_id=facility.facility_id,
            facility_name=facility.name,
            owner_ref=request.owner_ref,
            date=request.date,
            time=request.time,
            appointment_type=appointment_type,
            notes=request.notes,
            contact_email=request.contact_email,
            created_at=now,
            updated_at=now,
        )

        try:
            stored = await self._storage(
                "insert reservation", self._store.insert(reservation), timeout
            )
        except UniqueConstraintViolation as exc:
            remaining = [s for s in validation.available_slots if s != request.time]
            logger.info("Lost booking race for {} on {}", request.time, request.date)
            raise SlotConflictError(
                facility.facility_id,
                request.date,
                request.time,
                remaining[: self._suggestion_limit],
            ) from exc

        logger.info("Appointment booked: id={}", stored.reservation_id)
        confirmation = NotificationCommand(
            kind=NotificationKind.BOOKING_CONFIRMED,
            owner_ref=stored.owner_ref,
            recipient=request.contact_email,
            reservation=stored,
        )
        return BookingOutcome(reservation=stored, outbox=(confirmation,))

    async def cancel(
        self, reservation_id: str, owner_ref: str, *, timeout: float | None = None
    ) -> Reservation:
        """Cancel an owned reservation, freeing its slot for new bookings.

        Cancelling an already-cancelled reservation returns it unchanged.
        """
        current = await self._load_owned(reservation_id, owner_ref, timeout)
        if current.status is ReservationStatus.CANCELLED:
            return current
        if current.status.is_final:
            raise AlreadyFinalizedError(
                f"Cannot cancel an appointment that is {current.status.value}"
            )

        cancelled = current.model_copy(
            update={"status": ReservationStatus.CANCELLED, "updated_at": self._clock()}
        )
        stored = await self._storage("update reservation", self._store.update(cancelled), timeout)
        logger.info("Appointment cancelled: id={}", reservation_id)
        return stored

    async def reschedule(
        self, request: RescheduleRequest, *, timeout: float | None = None
    ) -> Reservation:
        """Overwrite the provided fields of an owned reservation.

        When ``revalidate_reschedule`` is on, a moved reservation goes through
        the same conflict and offered-slot checks as :meth:`book`.
        """
        current = await self._load_owned(request.reservation_id, request.owner_ref, timeout)
        if current.status is ReservationStatus.COMPLETED:
            raise AlreadyFinalizedError("Cannot update completed appointment")

        changes: dict[str, object] = {"updated_at": self._clock()}
        if request.date is not None:
            changes["date"] = request.date
        if request.time is not None:
            if not is_valid_time(request.time):
                raise InvalidTimeFormatError(request.time)
            changes["time"] = request.time
        if request.appointment_type is not None:
            changes["appointment_type"] = parse_appointment_type(request.appointment_type)
        if request.notes is not None:
            changes["notes"] = request.notes

        candidate = current.model_copy(update=changes)
        moved = candidate.slot_key != current.slot_key
        if moved:
            changes["reminder_sent"] = False
            candidate = current.model_copy(update=changes)

        if moved or candidate.appointment_type is not current.appointment_type:
            if self._revalidate_reschedule:
                if candidate.is_active:
                    await self._check_reschedule_target(current, candidate, timeout)
            else:
                logger.warning(
                    "Reschedule of {} skips slot re-validation (legacy mode)",
                    current.reservation_id,
                )

        try:
            stored = await self._storage(
                "update reservation", self._store.update(candidate), timeout
            )
        except UniqueConstraintViolation as exc:
            raise SlotConflictError(candidate.facility_id, candidate.date, candidate.time) from exc

        logger.info("Appointment updated: id={}", stored.reservation_id)
        return stored

    async def _check_reschedule_target(
        self, current: Reservation, candidate: Reservation, timeout: float | None
    ) -> None:
        holder = await self._storage(
            "find reservation",
            self._store.find_active(candidate.facility_id, candidate.date, candidate.time),
            timeout,
        )
        if holder is not None and holder.reservation_id != current.reservation_id:
            suggestions = await self._suggestions(
                candidate.facility_id, candidate.appointment_type, candidate.date, timeout
            )
            raise SlotConflictError(
                candidate.facility_id, candidate.date, candidate.time, suggestions
            )

        booked = await self._storage(
            "list booked times",
            self._store.list_booked_times(candidate.facility_id, candidate.date),
            timeout,
        )
        # The reservation's own current slot is not a conflict with itself.
        if current.is_active and current.date == candidate.date:
            booked = [t for t in booked if t != current.time]

        validation = self._resolver.validate(
            candidate.time, candidate.facility_id, candidate.appointment_type, booked
        )
        if not validation.valid:
            raise SlotNotOfferedError(
                candidate.time, validation.available_slots[: self._suggestion_limit]
            )

    async def get(
        self, reservation_id: str, owner_ref: str, *, timeout: float | None = None
    ) -> Reservation:
        return await self._load_owned(reservation_id, owner_ref, timeout)

    async def list_for_owner(
        self, owner_ref: str, *, timeout: float | None = None
    ) -> list[Reservation]:
        reservations = await self._storage(
            "list reservations", self._store.list_by_owner(owner_ref), timeout
        )
        return sorted(reservations, key=lambda r: (r.date, r.time))

    async def availability(
        self,
        facility_id: int | str,
        date: dt.date,
        appointment_type: AppointmentType | str | None = None,
        *,
        timeout: float | None = None,
    ) -> Availability:
        """Bookable slots on ``date``; type-agnostic grid when no type is given."""
        facility = self._directory.get_by_id(facility_id)
        parsed = parse_appointment_type(appointment_type) if appointment_type else None

        booked = await self._storage(
            "list booked times",
            self._store.list_booked_times(facility.facility_id, date),
            timeout,
        )
        if parsed is not None:
            grid = self._resolver.effective_slots(facility.facility_id, parsed)
            slot_info = self._resolver.slot_info(parsed)
        else:
            grid = self._resolver.all_slots_for_facility(facility.facility_id)
            slot_info = None

        taken = set(booked)
        slots = [s for s in grid if s not in taken]
        return Availability(
            facility_id=facility.facility_id,
            facility_name=facility.name,
            date=date,
            appointment_type=parsed,
            slots=slots,
            slot_info=slot_info,
            total_slots=len(grid),
            available_count=len(slots),
            booked_count=len(booked),
        )

    async def set_status(
        self,
        reservation_id: str,
        status: ReservationStatus,
        *,
        timeout: float | None = None,
    ) -> Reservation:
        """Administrator transition out of ``scheduled``."""
        current = await self._storage("get reservation", self._store.get(reservation_id), timeout)
        if current is None:
            raise ReservationNotFoundError(reservation_id)
        if current.status is status:
            return current
        if current.status.is_final:
            raise AlreadyFinalizedError(
                f"Appointment {reservation_id} is already {current.status.value}"
            )

        updated = current.model_copy(update={"status": status, "updated_at": self._clock()})
        stored = await self._storage("update reservation", self._store.update(updated), timeout)
        logger.info("Appointment {} marked {}", reservation_id, status.value)
        return stored

    async def delete(self, reservation_id: str, *, timeout: float | None = None) -> None:
        """Administrator hard delete."""
        deleted = await self._storage(
            "delete reservation", self._store.delete(reservation_id), timeout
        )
        if not deleted:
            raise ReservationNotFoundError(reservation_id)
        logger.info("Appointment deleted: id={}", reservation_id)
