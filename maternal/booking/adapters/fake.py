import asyncio
import datetime as dt
from collections.abc import Iterable

from maternal.booking.adapters.memory import InMemoryReservationStore
from maternal.domain.models import Reservation


class FakeReservationStore(InMemoryReservationStore):
    """Test double for ``ReservationStoreProtocol`` built on the in-memory store.

    Set ``find_error``, ``insert_error``, etc. to make the corresponding method
    raise. Set ``delay`` to make every call sleep first (for timeout tests).

    ``blind_reads`` makes ``find_active`` and ``list_booked_times`` see nothing,
    so concurrent bookings all pass the read check and only the unique index
    on ``insert`` can tell them apart.

    After calls, inspect ``inserted`` and ``updated``.
    """

    def __init__(self) -> None:
        super().__init__()
        self.inserted: list[Reservation] = []
        self.updated: list[Reservation] = []
        self.delay: float = 0.0
        self.blind_reads: bool = False

        self.find_error: Exception | None = None
        self.insert_error: Exception | None = None
        self.get_error: Exception | None = None
        self.update_error: Exception | None = None
        self.list_error: Exception | None = None
        self.mark_error: Exception | None = None

    async def _before(self, error: Exception | None) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if error:
            raise error

    async def find_active(
        self, facility_id: int, date: dt.date, time: str
    ) -> Reservation | None:
        await self._before(self.find_error)
        if self.blind_reads:
            return None
        return await super().find_active(facility_id, date, time)

    async def insert(self, reservation: Reservation) -> Reservation:
        await self._before(self.insert_error)
        stored = await super().insert(reservation)
        self.inserted.append(stored)
        return stored

    async def get(self, reservation_id: str) -> Reservation | None:
        await self._before(self.get_error)
        return await super().get(reservation_id)

    async def update(self, reservation: Reservation) -> Reservation:
        await self._before(self.update_error)
        stored = await super().update(reservation)
        self.updated.append(stored)
        return stored

    async def list_by_owner(self, owner_ref: str) -> list[Reservation]:
        await self._before(self.list_error)
        return await super().list_by_owner(owner_ref)

    async def list_booked_times(self, facility_id: int, date: dt.date) -> list[str]:
        await self._before(self.list_error)
        if self.blind_reads:
            return []
        return await super().list_booked_times(facility_id, date)

    async def list_due_for_reminder(self, dates: Iterable[dt.date]) -> list[Reservation]:
        await self._before(self.list_error)
        return await super().list_due_for_reminder(dates)

    async def mark_reminder_sent(self, reservation_id: str) -> None:
        await self._before(self.mark_error)
        await super().mark_reminder_sent(reservation_id)
