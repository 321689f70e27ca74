import asyncio
import datetime as dt
from collections.abc import Awaitable, Callable

from loguru import logger

from maternal.booking.ports import ReservationStoreProtocol
from maternal.datetime_helpers import resolve_timezone, slot_datetime
from maternal.domain.models import NotificationCommand, NotificationKind, Reservation
from maternal.notifications.ports import NotifierProtocol

RecipientLookup = Callable[[str], Awaitable[str | None]]


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class ReminderJob:
    """Periodic scan that reminds owners of appointments roughly a day ahead.

    A reservation is reminded once: ``reminder_sent`` flips only after the
    notifier accepted the message, so a failed send is retried next cycle.

    The recipient comes from ``recipient_lookup`` when one is configured,
    falling back to the contact captured at booking time. Reservations with
    neither are skipped.
    """

    def __init__(
        self,
        store: ReservationStoreProtocol,
        notifier: NotifierProtocol,
        *,
        clinic_timezone: str = "Africa/Kigali",
        window_start_hours: float = 23,
        window_end_hours: float = 25,
        recipient_lookup: RecipientLookup | None = None,
        clock: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._tz = resolve_timezone(clinic_timezone)
        self._window = (dt.timedelta(hours=window_start_hours), dt.timedelta(hours=window_end_hours))
        self._recipient_lookup = recipient_lookup
        self._clock = clock
        self._stop = asyncio.Event()

    async def _recipient_for(self, reservation: Reservation) -> str | None:
        if self._recipient_lookup is not None:
            found = await self._recipient_lookup(reservation.owner_ref)
            if found:
                return found
        return reservation.contact_email

    async def _remind(self, reservation: Reservation) -> bool:
        # Left unmarked so the reminder goes out once a contact is known.
        recipient = await self._recipient_for(reservation)
        if not recipient:
            logger.warning(
                "No contact for owner of appointment {}; skipping reminder",
                reservation.reservation_id,
            )
            return False

        await self._notifier.send(
            NotificationCommand(
                kind=NotificationKind.BOOKING_REMINDER,
                owner_ref=reservation.owner_ref,
                recipient=recipient,
                reservation=reservation,
            )
        )
        await self._store.mark_reminder_sent(reservation.reservation_id)
        return True

    async def run_once(self, now: dt.datetime | None = None) -> int:
        """Send due reminders and return how many were sent."""
        local_now = (now or self._clock()).astimezone(self._tz)
        window_start = local_now + self._window[0]
        window_end = local_now + self._window[1]

        days = (window_end.date() - window_start.date()).days
        dates = [window_start.date() + dt.timedelta(days=i) for i in range(days + 1)]
        candidates = await self._store.list_due_for_reminder(dates)
        logger.info("Found {} appointment(s) that may need reminders", len(candidates))

        sent = 0
        for reservation in candidates:
            starts_at = slot_datetime(reservation.date, reservation.time, self._tz)
            if not window_start <= starts_at <= window_end:
                continue
            try:
                if await self._remind(reservation):
                    sent += 1
            except Exception as exc:
                logger.error(
                    "Reminder for appointment {} failed: {}", reservation.reservation_id, exc
                )

        logger.info("Reminder check complete: {} sent", sent)
        return sent

    async def run_forever(self, interval_seconds: float = 3600) -> None:
        """Run :meth:`run_once` every ``interval_seconds`` until :meth:`stop` is called."""
        logger.info("Appointment reminder job started (every {}s)", interval_seconds)
        while not self._stop.is_set():
            try:
                await self.run_once()
            except Exception:
                logger.exception("Reminder cycle failed")
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass
        logger.info("Appointment reminder job stopped")

    def stop(self) -> None:
        self._stop.set()
