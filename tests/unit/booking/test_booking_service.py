import asyncio
import datetime as dt

import pytest

from maternal.booking.adapters.fake import FakeReservationStore
from maternal.booking.service import BookingService
from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import (
    AlreadyFinalizedError,
    FacilityNotFoundError,
    ForbiddenError,
    InvalidTimeFormatError,
    InvalidTypeError,
    ReservationNotFoundError,
    SlotConflictError,
    SlotNotOfferedError,
    StorageUnavailableError,
)
from maternal.domain.models import (
    AppointmentType,
    BookingRequest,
    NotificationKind,
    RescheduleRequest,
    ReservationStatus,
)
from maternal.slots.resolver import SlotResolver

# Fixtures (booking, store, directory, resolver) provided by tests/conftest.py

JUNE_1 = dt.date(2025, 6, 1)


def _request(
    time: str = "09:00",
    *,
    owner: str = "user-1",
    facility_id: int = 1,
    appointment_type: str = "prenatal",
    date: dt.date = JUNE_1,
    contact_email: str | None = "mother@example.com",
) -> BookingRequest:
    return BookingRequest(
        facility_id=facility_id,
        date=date,
        time=time,
        appointment_type=appointment_type,
        owner_ref=owner,
        contact_email=contact_email,
    )


class TestBook:
    @pytest.mark.asyncio
    async def test_books_free_slot(self, booking: BookingService, store: FakeReservationStore) -> None:
        outcome = await booking.book(_request())

        reservation = outcome.reservation
        assert reservation.reservation_id == "r1"
        assert reservation.facility_name == "King Faisal Hospital"
        assert reservation.status is ReservationStatus.SCHEDULED
        assert reservation.appointment_type is AppointmentType.PRENATAL
        assert store.inserted == [reservation]

    @pytest.mark.asyncio
    async def test_emits_confirmation_command(self, booking: BookingService) -> None:
        outcome = await booking.book(_request())

        (command,) = outcome.outbox
        assert command.kind is NotificationKind.BOOKING_CONFIRMED
        assert command.recipient == "mother@example.com"
        assert command.reservation == outcome.reservation
        assert command.owner_ref == "user-1"

    @pytest.mark.asyncio
    async def test_keeps_contact_for_reminders(self, booking: BookingService) -> None:
        outcome = await booking.book(_request())

        moved = await booking.reschedule(
            RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="10:00")
        )

        assert outcome.reservation.contact_email == "mother@example.com"
        assert moved.contact_email == "mother@example.com"

    @pytest.mark.asyncio
    async def test_conflict_then_cancel_frees_slot(self, booking: BookingService) -> None:
        first = await booking.book(_request(owner="user-1"))

        with pytest.raises(SlotConflictError) as exc_info:
            await booking.book(_request(owner="user-2"))
        assert "09:00" not in exc_info.value.available_slots
        assert exc_info.value.available_slots

        await booking.cancel(first.reservation.reservation_id, "user-1")
        retry = await booking.book(_request(owner="user-2"))

        assert retry.reservation.owner_ref == "user-2"
        assert retry.reservation.time == "09:00"

    @pytest.mark.asyncio
    async def test_concurrent_bookings_admit_exactly_one(
        self, booking: BookingService, store: FakeReservationStore
    ) -> None:
        store.blind_reads = True

        results = await asyncio.gather(
            *(booking.book(_request(owner=f"user-{i}")) for i in range(5)),
            return_exceptions=True,
        )

        booked = [r for r in results if not isinstance(r, BaseException)]
        conflicts = [r for r in results if isinstance(r, SlotConflictError)]
        assert len(booked) == 1
        assert len(conflicts) == 4
        assert len(store.inserted) == 1

    @pytest.mark.asyncio
    async def test_unoffered_time_lists_suggestions(self, booking: BookingService) -> None:
        with pytest.raises(SlotNotOfferedError) as exc_info:
            await booking.book(_request("07:00", appointment_type="vaccination", facility_id=2))

        assert exc_info.value.available_slots
        assert len(exc_info.value.available_slots) <= 10
        assert exc_info.value.available_slots[0] == "09:00"

    @pytest.mark.asyncio
    async def test_same_time_other_facility_is_independent(self, booking: BookingService) -> None:
        await booking.book(_request(facility_id=1))
        outcome = await booking.book(_request(facility_id=3))

        assert outcome.reservation.facility_id == 3

    @pytest.mark.asyncio
    async def test_same_time_other_date_is_independent(self, booking: BookingService) -> None:
        await booking.book(_request())
        outcome = await booking.book(_request(date=dt.date(2025, 6, 2)))

        assert outcome.reservation.date == dt.date(2025, 6, 2)

    @pytest.mark.asyncio
    async def test_unknown_facility(self, booking: BookingService) -> None:
        with pytest.raises(FacilityNotFoundError):
            await booking.book(_request(facility_id=99))

    @pytest.mark.asyncio
    async def test_unknown_type(self, booking: BookingService) -> None:
        with pytest.raises(InvalidTypeError):
            await booking.book(_request(appointment_type="dental"))

    @pytest.mark.asyncio
    async def test_bad_time_format(self, booking: BookingService, store: FakeReservationStore) -> None:
        with pytest.raises(InvalidTimeFormatError):
            await booking.book(_request("9:00"))
        assert store.inserted == []

    @pytest.mark.asyncio
    async def test_storage_timeout(self, booking: BookingService, store: FakeReservationStore) -> None:
        store.delay = 0.2

        with pytest.raises(StorageUnavailableError, match="timed out"):
            await booking.book(_request(), timeout=0.01)

    @pytest.mark.asyncio
    async def test_storage_failure(self, booking: BookingService, store: FakeReservationStore) -> None:
        store.insert_error = ConnectionError("connection reset")

        with pytest.raises(StorageUnavailableError, match="connection reset"):
            await booking.book(_request())


class TestCancel:
    @pytest.mark.asyncio
    async def test_cancel_sets_status(self, booking: BookingService) -> None:
        outcome = await booking.book(_request())

        cancelled = await booking.cancel(outcome.reservation.reservation_id, "user-1")

        assert cancelled.status is ReservationStatus.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_is_idempotent(
        self, booking: BookingService, store: FakeReservationStore
    ) -> None:
        outcome = await booking.book(_request())
        first = await booking.cancel("r1", "user-1")

        second = await booking.cancel("r1", "user-1")

        assert second == first
        assert len(store.updated) == 1
        assert outcome.reservation.reservation_id == "r1"

    @pytest.mark.asyncio
    async def test_cancel_by_other_owner_is_forbidden(self, booking: BookingService) -> None:
        await booking.book(_request())

        with pytest.raises(ForbiddenError):
            await booking.cancel("r1", "intruder")

    @pytest.mark.asyncio
    async def test_cancel_missing(self, booking: BookingService) -> None:
        with pytest.raises(ReservationNotFoundError):
            await booking.cancel("nope", "user-1")

    @pytest.mark.parametrize("status", [ReservationStatus.COMPLETED, ReservationStatus.NO_SHOW])
    @pytest.mark.asyncio
    async def test_cancel_finalized_is_rejected(
        self, booking: BookingService, status: ReservationStatus
    ) -> None:
        await booking.book(_request())
        await booking.set_status("r1", status)

        with pytest.raises(AlreadyFinalizedError):
            await booking.cancel("r1", "user-1")


class TestReschedule:
    @pytest.mark.asyncio
    async def test_moves_to_free_slot(self, booking: BookingService) -> None:
        await booking.book(_request())

        moved = await booking.reschedule(
            RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="10:00")
        )

        assert moved.time == "10:00"
        assert "09:00" in (await booking.availability(1, JUNE_1, "prenatal")).slots
        rebooked = await booking.book(_request("09:00", owner="user-2"))
        assert rebooked.reservation.time == "09:00"

    @pytest.mark.asyncio
    async def test_conflict_with_other_reservation(self, booking: BookingService) -> None:
        await booking.book(_request("09:00", owner="user-1"))
        await booking.book(_request("10:00", owner="user-2"))

        with pytest.raises(SlotConflictError):
            await booking.reschedule(
                RescheduleRequest(reservation_id="r2", owner_ref="user-2", time="09:00")
            )

    @pytest.mark.asyncio
    async def test_unoffered_target_is_rejected(self, booking: BookingService) -> None:
        await booking.book(_request())

        with pytest.raises(SlotNotOfferedError):
            await booking.reschedule(
                RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="07:00")
            )

    @pytest.mark.asyncio
    async def test_type_change_in_place_is_not_a_self_conflict(
        self, booking: BookingService
    ) -> None:
        await booking.book(_request())

        updated = await booking.reschedule(
            RescheduleRequest(
                reservation_id="r1", owner_ref="user-1", appointment_type="vaccination"
            )
        )

        assert updated.appointment_type is AppointmentType.VACCINATION
        assert updated.time == "09:00"

    @pytest.mark.asyncio
    async def test_notes_only_update(self, booking: BookingService) -> None:
        await booking.book(_request())

        updated = await booking.reschedule(
            RescheduleRequest(reservation_id="r1", owner_ref="user-1", notes="Bring card")
        )

        assert updated.notes == "Bring card"
        assert updated.time == "09:00"

    @pytest.mark.asyncio
    async def test_moving_resets_reminder(
        self, booking: BookingService, store: FakeReservationStore
    ) -> None:
        await booking.book(_request())
        await store.mark_reminder_sent("r1")

        moved = await booking.reschedule(
            RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="11:00")
        )

        assert moved.reminder_sent is False

    @pytest.mark.asyncio
    async def test_completed_is_rejected(self, booking: BookingService) -> None:
        await booking.book(_request())
        await booking.set_status("r1", ReservationStatus.COMPLETED)

        with pytest.raises(AlreadyFinalizedError, match="completed"):
            await booking.reschedule(
                RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="10:00")
            )

    @pytest.mark.asyncio
    async def test_other_owner_is_forbidden(self, booking: BookingService) -> None:
        await booking.book(_request())

        with pytest.raises(ForbiddenError):
            await booking.reschedule(
                RescheduleRequest(reservation_id="r1", owner_ref="user-2", time="10:00")
            )

    @pytest.mark.asyncio
    async def test_bad_time_format(self, booking: BookingService) -> None:
        await booking.book(_request())

        with pytest.raises(InvalidTimeFormatError):
            await booking.reschedule(
                RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="10h")
            )


class TestLegacyReschedule:
    @pytest.fixture
    def legacy(
        self, directory: FacilityDirectory, resolver: SlotResolver, store: FakeReservationStore
    ) -> BookingService:
        ids = iter(f"r{i}" for i in range(1, 100))
        return BookingService(
            directory, resolver, store, revalidate_reschedule=False, id_factory=lambda: next(ids)
        )

    @pytest.mark.asyncio
    async def test_unoffered_time_is_accepted(self, legacy: BookingService) -> None:
        await legacy.book(_request())

        moved = await legacy.reschedule(
            RescheduleRequest(reservation_id="r1", owner_ref="user-1", time="07:00")
        )

        assert moved.time == "07:00"

    @pytest.mark.asyncio
    async def test_unique_index_still_rejects_collision(self, legacy: BookingService) -> None:
        await legacy.book(_request("09:00", owner="user-1"))
        await legacy.book(_request("10:00", owner="user-2"))

        with pytest.raises(SlotConflictError):
            await legacy.reschedule(
                RescheduleRequest(reservation_id="r2", owner_ref="user-2", time="09:00")
            )


class TestQueries:
    @pytest.mark.asyncio
    async def test_get_checks_owner(self, booking: BookingService) -> None:
        await booking.book(_request())

        assert (await booking.get("r1", "user-1")).reservation_id == "r1"
        with pytest.raises(ForbiddenError):
            await booking.get("r1", "user-2")

    @pytest.mark.asyncio
    async def test_list_for_owner_is_ordered(self, booking: BookingService) -> None:
        await booking.book(_request("15:00"))
        await booking.book(_request("10:00", date=dt.date(2025, 6, 2)))
        await booking.book(_request("09:00"))
        await booking.book(_request("11:00", owner="someone-else"))

        listed = await booking.list_for_owner("user-1")

        assert [(r.date.day, r.time) for r in listed] == [(1, "09:00"), (1, "15:00"), (2, "10:00")]

    @pytest.mark.asyncio
    async def test_list_storage_failure(
        self, booking: BookingService, store: FakeReservationStore
    ) -> None:
        store.list_error = RuntimeError("boom")

        with pytest.raises(StorageUnavailableError):
            await booking.list_for_owner("user-1")


class TestAvailability:
    @pytest.mark.asyncio
    async def test_typed_availability(self, booking: BookingService) -> None:
        await booking.book(_request())

        availability = await booking.availability(1, JUNE_1, "prenatal")

        assert "09:00" not in availability.slots
        assert availability.total_slots == 10
        assert availability.available_count == 9
        assert availability.booked_count == 1
        assert availability.slot_info is not None
        assert availability.slot_info.duration_minutes == 60
        assert availability.appointment_type is AppointmentType.PRENATAL

    @pytest.mark.asyncio
    async def test_untyped_uses_facility_grid(self, booking: BookingService) -> None:
        availability = await booking.availability(2, JUNE_1)

        assert availability.slot_info is None
        assert availability.appointment_type is None
        assert availability.total_slots == 15
        assert availability.available_count == 15
        assert availability.booked_count == 0

    @pytest.mark.asyncio
    async def test_cancelled_slot_is_free_again(self, booking: BookingService) -> None:
        await booking.book(_request())
        await booking.cancel("r1", "user-1")

        availability = await booking.availability(1, JUNE_1, "prenatal")

        assert "09:00" in availability.slots
        assert availability.booked_count == 0


class TestAdmin:
    @pytest.mark.asyncio
    async def test_set_status(self, booking: BookingService) -> None:
        await booking.book(_request())

        completed = await booking.set_status("r1", ReservationStatus.COMPLETED)

        assert completed.status is ReservationStatus.COMPLETED
        with pytest.raises(AlreadyFinalizedError):
            await booking.set_status("r1", ReservationStatus.NO_SHOW)

    @pytest.mark.asyncio
    async def test_set_same_status_is_noop(
        self, booking: BookingService, store: FakeReservationStore
    ) -> None:
        await booking.book(_request())

        await booking.set_status("r1", ReservationStatus.SCHEDULED)

        assert store.updated == []

    @pytest.mark.asyncio
    async def test_set_status_missing(self, booking: BookingService) -> None:
        with pytest.raises(ReservationNotFoundError):
            await booking.set_status("nope", ReservationStatus.COMPLETED)

    @pytest.mark.asyncio
    async def test_delete(self, booking: BookingService) -> None:
        await booking.book(_request())

        await booking.delete("r1")

        with pytest.raises(ReservationNotFoundError):
            await booking.get("r1", "user-1")
        with pytest.raises(ReservationNotFoundError):
            await booking.delete("r1")
