import asyncio
import datetime as dt
from collections.abc import Iterable

from maternal.domain.exceptions import ReservationNotFoundError, UniqueConstraintViolation
from maternal.domain.models import Reservation, ReservationStatus

SlotKey = tuple[int, dt.date, str]


class InMemoryReservationStore:
    """Process-local reservation store with a unique index on the active slot key.

    Suitable for a single process. Every method holds one ``asyncio.Lock``, so
    the index check and the write happen as one step.
    """

    def __init__(self) -> None:
        self._records: dict[str, Reservation] = {}
        self._active: dict[SlotKey, str] = {}
        self._lock = asyncio.Lock()

    async def find_active(
        self, facility_id: int, date: dt.date, time: str
    ) -> Reservation | None:
        async with self._lock:
            reservation_id = self._active.get((facility_id, date, time))
            return self._records.get(reservation_id) if reservation_id else None

    async def insert(self, reservation: Reservation) -> Reservation:
        async with self._lock:
            if reservation.is_active and reservation.slot_key in self._active:
                raise UniqueConstraintViolation(*reservation.slot_key)
            self._records[reservation.reservation_id] = reservation
            if reservation.is_active:
                self._active[reservation.slot_key] = reservation.reservation_id
            return reservation

    async def get(self, reservation_id: str) -> Reservation | None:
        async with self._lock:
            return self._records.get(reservation_id)

    async def update(self, reservation: Reservation) -> Reservation:
        async with self._lock:
            current = self._records.get(reservation.reservation_id)
            if current is None:
                raise ReservationNotFoundError(reservation.reservation_id)

            if reservation.is_active:
                holder = self._active.get(reservation.slot_key)
                if holder is not None and holder != reservation.reservation_id:
                    raise UniqueConstraintViolation(*reservation.slot_key)

            if self._active.get(current.slot_key) == current.reservation_id:
                del self._active[current.slot_key]
            self._records[reservation.reservation_id] = reservation
            if reservation.is_active:
                self._active[reservation.slot_key] = reservation.reservation_id
            return reservation

    async def delete(self, reservation_id: str) -> bool:
        async with self._lock:
            current = self._records.pop(reservation_id, None)
            if current is None:
                return False
            if self._active.get(current.slot_key) == reservation_id:
                del self._active[current.slot_key]
            return True

    async def list_by_owner(self, owner_ref: str) -> list[Reservation]:
        async with self._lock:
            return [r for r in self._records.values() if r.owner_ref == owner_ref]

    async def list_booked_times(self, facility_id: int, date: dt.date) -> list[str]:
        async with self._lock:
            return sorted(
                time for (fid, day, time) in self._active if fid == facility_id and day == date
            )

    async def list_due_for_reminder(self, dates: Iterable[dt.date]) -> list[Reservation]:
        wanted = set(dates)
        async with self._lock:
            return [
                r
                for r in self._records.values()
                if r.date in wanted
                and r.status is ReservationStatus.SCHEDULED
                and not r.reminder_sent
            ]

    async def mark_reminder_sent(self, reservation_id: str) -> None:
        async with self._lock:
            current = self._records.get(reservation_id)
            if current is None:
                raise ReservationNotFoundError(reservation_id)
            self._records[reservation_id] = current.model_copy(update={"reminder_sent": True})
