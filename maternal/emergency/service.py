import datetime as dt
from collections.abc import Callable

from loguru import logger

from maternal.directory.proximity import nearest_emergency
from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import (
    AlreadyFinalizedError,
    EmergencyNotFoundError,
    FacilityNotFoundError,
    ForbiddenError,
)
from maternal.domain.models import (
    AlertedFacility,
    Coordinates,
    EmergencyAlert,
    EmergencyContact,
    EmergencyOutcome,
    EmergencyStatus,
    NotificationCommand,
    NotificationKind,
    RankedFacility,
)
from maternal.domain.storage import call_storage
from maternal.emergency.ports import EmergencyStoreProtocol

DEFAULT_DISPATCH_COUNT = 4


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _snapshot(ranked: RankedFacility, notified_at: dt.datetime) -> AlertedFacility:
    f = ranked.facility
    return AlertedFacility(
        facility_id=f.facility_id,
        name=f.name,
        phone=f.phone,
        emergency_phone=f.emergency_phone,
        email=f.email,
        distance_km=ranked.display_distance,
        coordinates=f.coordinates,
        services=f.services,
        notified_at=notified_at,
    )


class EmergencyService:
    """Raises emergency alerts to the nearest capable facilities and tracks their lifecycle."""

    def __init__(
        self,
        directory: FacilityDirectory,
        store: EmergencyStoreProtocol,
        *,
        dispatch_count: int = DEFAULT_DISPATCH_COUNT,
        timeout_seconds: float = 5.0,
        clock: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self._directory = directory
        self._store = store
        self._dispatch_count = dispatch_count
        self._timeout = timeout_seconds
        self._clock = clock

    async def _load(self, emergency_id: str) -> EmergencyAlert:
        alert = await call_storage("get emergency", self._store.get(emergency_id), self._timeout)
        if alert is None:
            raise EmergencyNotFoundError(emergency_id)
        return alert

    async def _load_owned(self, emergency_id: str, owner_ref: str) -> EmergencyAlert:
        alert = await self._load(emergency_id)
        if alert.owner_ref != owner_ref:
            raise ForbiddenError(f"Emergency {emergency_id} belongs to another user")
        return alert

    async def _save(self, alert: EmergencyAlert) -> EmergencyAlert:
        return await call_storage("update emergency", self._store.update(alert), self._timeout)

    async def raise_alert(
        self,
        owner_ref: str,
        contact: EmergencyContact,
        location: Coordinates | None = None,
    ) -> EmergencyOutcome:
        """Record an alert and return one dispatch command per alerted facility.

        Raises:
            InvalidCoordinateError: ``location`` is out of range.
            FacilityNotFoundError: No emergency-capable facility exists.
        """
        ranked = nearest_emergency(self._directory, location, self._dispatch_count)
        if not ranked:
            raise FacilityNotFoundError("emergency-capable facility")

        now = self._clock()
        facilities = tuple(_snapshot(r, now) for r in ranked)
        alert = EmergencyAlert(
            emergency_id=f"EMG-{int(now.timestamp() * 1000)}-{owner_ref}",
            owner_ref=owner_ref,
            contact=contact,
            location=location,
            facilities=facilities,
            alerted_at=now,
        )
        stored = await call_storage("insert emergency", self._store.insert(alert), self._timeout)

        logger.warning("EMERGENCY ALERT raised: id={}", stored.emergency_id)
        for index, facility in enumerate(facilities, start=1):
            logger.warning(
                "  {}. {} - {}", index, facility.name, facility.emergency_phone
            )

        outbox = tuple(
            NotificationCommand(
                kind=NotificationKind.EMERGENCY_DISPATCH,
                owner_ref=owner_ref,
                recipient=facility.email,
                emergency=stored,
                facility=facility,
            )
            for facility in facilities
        )
        return EmergencyOutcome(alert=stored, outbox=outbox)

    async def get(self, emergency_id: str, owner_ref: str) -> EmergencyAlert:
        return await self._load_owned(emergency_id, owner_ref)

    async def list_for_owner(self, owner_ref: str) -> list[EmergencyAlert]:
        return await call_storage(
            "list emergencies", self._store.list_by_owner(owner_ref), self._timeout
        )

    async def cancel(self, emergency_id: str, owner_ref: str) -> EmergencyAlert:
        alert = await self._load_owned(emergency_id, owner_ref)
        if alert.status is EmergencyStatus.CANCELLED:
            return alert
        if alert.status is EmergencyStatus.RESOLVED:
            raise AlreadyFinalizedError(f"Emergency {emergency_id} is already resolved")

        cancelled = alert.model_copy(
            update={"status": EmergencyStatus.CANCELLED, "cancelled_at": self._clock()}
        )
        stored = await self._save(cancelled)
        logger.info("Emergency cancelled: id={}", emergency_id)
        return stored

    async def respond(self, emergency_id: str, facility_id: int) -> EmergencyAlert:
        """Record that an alerted facility has taken the emergency."""
        alert = await self._load(emergency_id)
        if alert.status in (EmergencyStatus.CANCELLED, EmergencyStatus.RESOLVED):
            raise AlreadyFinalizedError(f"Emergency {emergency_id} is {alert.status.value}")

        facility = next((f for f in alert.facilities if f.facility_id == facility_id), None)
        if facility is None:
            raise FacilityNotFoundError(facility_id)

        responded = alert.model_copy(
            update={
                "status": EmergencyStatus.RESPONDED,
                "responded_facility": facility,
                "responded_at": self._clock(),
            }
        )
        stored = await self._save(responded)
        logger.info("{} responded to {}", facility.name, emergency_id)
        return stored

    async def resolve(self, emergency_id: str, notes: str | None = None) -> EmergencyAlert:
        alert = await self._load(emergency_id)
        if alert.status is EmergencyStatus.CANCELLED:
            raise AlreadyFinalizedError(f"Emergency {emergency_id} was cancelled")
        if alert.status is EmergencyStatus.RESOLVED:
            return alert

        resolved = alert.model_copy(
            update={
                "status": EmergencyStatus.RESOLVED,
                "resolved_at": self._clock(),
                "notes": notes if notes is not None else alert.notes,
            }
        )
        stored = await self._save(resolved)
        logger.info("Emergency resolved: id={}", emergency_id)
        return stored
