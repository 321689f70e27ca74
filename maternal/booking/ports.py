import datetime as dt
from collections.abc import Iterable
from typing import Protocol

from maternal.domain.models import Reservation


class ReservationStoreProtocol(Protocol):
    """Persistence for reservations.

    Implementations must enforce a unique constraint on
    ``(facility_id, date, time)`` across non-cancelled reservations, atomically
    with ``insert`` and ``update``, by raising ``UniqueConstraintViolation``.
    """

    async def find_active(
        self, facility_id: int, date: dt.date, time: str
    ) -> Reservation | None:
        """Return the non-cancelled reservation holding this slot, if any."""
        ...

    async def insert(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation.

        Raises:
            UniqueConstraintViolation: If the slot key is already held.
        """
        ...

    async def get(self, reservation_id: str) -> Reservation | None:
        """Fetch a reservation by id."""
        ...

    async def update(self, reservation: Reservation) -> Reservation:
        """Replace a stored reservation with ``reservation`` (same id).

        Raises:
            ReservationNotFoundError: If no reservation has this id.
            UniqueConstraintViolation: If the new slot key is held by another reservation.
        """
        ...

    async def delete(self, reservation_id: str) -> bool:
        """Hard-delete. Returns False if nothing was deleted."""
        ...

    async def list_by_owner(self, owner_ref: str) -> list[Reservation]:
        """All reservations belonging to ``owner_ref``, any status."""
        ...

    async def list_booked_times(self, facility_id: int, date: dt.date) -> list[str]:
        """Times held by non-cancelled reservations at this facility on this date."""
        ...

    async def list_due_for_reminder(self, dates: Iterable[dt.date]) -> list[Reservation]:
        """Scheduled reservations on any of ``dates`` that have not been reminded yet."""
        ...

    async def mark_reminder_sent(self, reservation_id: str) -> None:
        """Flip ``reminder_sent`` to True."""
        ...
