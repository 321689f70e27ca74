from collections.abc import Callable
from dataclasses import dataclass

from loguru import logger

from maternal.api.handlers import BookingHandlers, EmergencyHandlers, FacilityHandlers
from maternal.booking.adapters.memory import InMemoryReservationStore
from maternal.booking.service import BookingService
from maternal.config import AppConfig, NotifierAdapter
from maternal.directory.catalog import FACILITIES
from maternal.directory.service import FacilityDirectory, load_catalog
from maternal.emergency.adapters.memory import InMemoryEmergencyStore
from maternal.emergency.service import EmergencyService
from maternal.notifications.adapters.email_api import EmailAPINotifier
from maternal.notifications.adapters.log import LogNotifier
from maternal.notifications.outbox import OutboxDispatcher
from maternal.notifications.ports import NotifierProtocol
from maternal.reminders.job import ReminderJob
from maternal.slots.resolver import SlotResolver


@dataclass
class Services:
    directory: FacilityDirectory
    resolver: SlotResolver
    booking: BookingService
    emergency: EmergencyService
    outbox: OutboxDispatcher
    reminders: ReminderJob
    booking_handlers: BookingHandlers
    facility_handlers: FacilityHandlers
    emergency_handlers: EmergencyHandlers

    async def close(self) -> None:
        self.reminders.stop()
        await self.outbox.close()


def _build_log(config: AppConfig) -> NotifierProtocol:
    return LogNotifier()


def _build_email_api(config: AppConfig) -> NotifierProtocol:
    if not config.email.api_key:
        logger.warning("EMAIL_API_KEY is not set; falling back to log notifications")
        return LogNotifier()
    return EmailAPINotifier(
        config.email.api_url,
        api_key=config.email.api_key,
        from_address=config.email.from_address,
        from_name=config.email.from_name,
        timeout=config.email.timeout_seconds,
    )


_NOTIFIERS: dict[NotifierAdapter, Callable[[AppConfig], NotifierProtocol]] = {
    NotifierAdapter.LOG: _build_log,
    NotifierAdapter.EMAIL_API: _build_email_api,
}


def build_notifier(config: AppConfig) -> NotifierProtocol:
    """Build the notifier selected by config."""
    adapter = config.notifications.adapter
    logger.info("Building notifier with adapter: {}", adapter.value)
    return _NOTIFIERS[adapter](config)


def build_services(config: AppConfig) -> Services:
    """Wire the core services with in-memory storage for a single process."""
    catalog_path = config.directory.catalog_path
    facilities = load_catalog(catalog_path) if catalog_path else FACILITIES
    directory = FacilityDirectory(facilities)
    resolver = SlotResolver(directory)

    reservations = InMemoryReservationStore()
    booking = BookingService(
        directory,
        resolver,
        reservations,
        timeout_seconds=config.booking.storage_timeout_seconds,
        suggestion_limit=config.booking.suggestion_limit,
        revalidate_reschedule=config.booking.revalidate_reschedule,
    )
    emergency = EmergencyService(
        directory,
        InMemoryEmergencyStore(),
        dispatch_count=config.directory.emergency_dispatch_count,
        timeout_seconds=config.booking.storage_timeout_seconds,
    )

    notifier = build_notifier(config)
    outbox = OutboxDispatcher(
        notifier,
        max_attempts=config.notifications.max_attempts,
        retry_delay_seconds=config.notifications.retry_delay_seconds,
    )
    reminders = ReminderJob(
        reservations,
        notifier,
        clinic_timezone=config.clinic_timezone,
        window_start_hours=config.reminders.window_start_hours,
        window_end_hours=config.reminders.window_end_hours,
    )
    logger.info("Core services ready ({} facilities)", len(directory))
    return Services(
        directory=directory,
        resolver=resolver,
        booking=booking,
        emergency=emergency,
        outbox=outbox,
        reminders=reminders,
        booking_handlers=BookingHandlers(booking, outbox),
        facility_handlers=FacilityHandlers(
            directory, default_limit=config.directory.nearest_default_limit
        ),
        emergency_handlers=EmergencyHandlers(emergency, outbox),
    )
