import datetime as dt
import itertools
import random

import pytest

from maternal.booking.adapters.fake import FakeReservationStore
from maternal.booking.service import BookingService
from maternal.directory.service import FacilityDirectory
from maternal.emergency.adapters.memory import InMemoryEmergencyStore
from maternal.emergency.service import EmergencyService
from maternal.notifications.adapters.fake import RecordingNotifier
from maternal.notifications.outbox import OutboxDispatcher
from maternal.slots.resolver import SlotResolver

FIXED_NOW = dt.datetime(2025, 5, 20, 8, 0, tzinfo=dt.timezone.utc)


@pytest.fixture
def directory() -> FacilityDirectory:
    return FacilityDirectory(rng=random.Random(7))


@pytest.fixture
def resolver(directory: FacilityDirectory) -> SlotResolver:
    return SlotResolver(directory)


@pytest.fixture
def store() -> FakeReservationStore:
    return FakeReservationStore()


@pytest.fixture
def booking(
    directory: FacilityDirectory, resolver: SlotResolver, store: FakeReservationStore
) -> BookingService:
    counter = itertools.count(1)
    return BookingService(
        directory,
        resolver,
        store,
        timeout_seconds=0.5,
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"r{next(counter)}",
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def outbox(notifier: RecordingNotifier) -> OutboxDispatcher:
    return OutboxDispatcher(notifier, max_attempts=3, retry_delay_seconds=0)


@pytest.fixture
def emergency_store() -> InMemoryEmergencyStore:
    return InMemoryEmergencyStore()


@pytest.fixture
def emergency(
    directory: FacilityDirectory, emergency_store: InMemoryEmergencyStore
) -> EmergencyService:
    return EmergencyService(directory, emergency_store, clock=lambda: FIXED_NOW)
