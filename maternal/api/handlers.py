from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from maternal.api.presenters import (
    present_availability,
    present_emergency,
    present_facility,
    present_hotline,
    present_ranked,
    present_reservation,
    present_sector_match,
)
from maternal.api.schemas import (
    AvailabilityQuery,
    BookAppointmentInput,
    EmergencyAlertInput,
    HospitalResponseInput,
    NearestQuery,
    RescheduleInput,
    SearchQuery,
    SectorQuery,
    describe_validation_error,
)
from maternal.booking.service import BookingService
from maternal.directory.catalog import EMERGENCY_CONTACTS
from maternal.directory.proximity import DEFAULT_NEAREST_LIMIT, nearest
from maternal.directory.service import FacilityDirectory
from maternal.domain.exceptions import (
    AlreadyFinalizedError,
    ForbiddenError,
    MaternalHubError,
    NotFoundError,
    SlotConflictError,
    SlotNotOfferedError,
    StorageUnavailableError,
    ValidationError,
)
from maternal.domain.models import BookingRequest, HotlineContact, RescheduleRequest
from maternal.emergency.service import EmergencyService
from maternal.notifications.outbox import OutboxDispatcher

_ERROR_CODES: tuple[tuple[type[MaternalHubError], str], ...] = (
    (NotFoundError, "not_found"),
    (ValidationError, "invalid_input"),
    (SlotConflictError, "slot_conflict"),
    (SlotNotOfferedError, "slot_not_offered"),
    (ForbiddenError, "forbidden"),
    (AlreadyFinalizedError, "already_finalized"),
    (StorageUnavailableError, "storage_unavailable"),
)


def _invalid_input(exc: PydanticValidationError) -> dict[str, Any]:
    return {
        "success": False,
        "error": True,
        "code": "invalid_input",
        "message": f"Invalid input: {describe_validation_error(exc)}",
    }


def _failure(exc: MaternalHubError) -> dict[str, Any]:
    """Map a core error to a result dict. Slot errors carry alternatives."""
    code = next((c for cls, c in _ERROR_CODES if isinstance(exc, cls)), "error")
    result: dict[str, Any] = {"success": False, "error": True, "code": code, "message": str(exc)}
    if isinstance(exc, (SlotConflictError, SlotNotOfferedError)):
        result["availableSlots"] = list(exc.available_slots)
    return result


def _unexpected(action: str) -> dict[str, Any]:
    logger.exception("Unexpected error while trying to {}", action)
    return {
        "success": False,
        "error": True,
        "code": "internal",
        "message": f"An unexpected error occurred while trying to {action}.",
    }


class BookingHandlers:
    """Boundary handlers for appointment booking.

    ``owner_ref`` is the already-authenticated principal; handlers never check
    credentials themselves.
    """

    def __init__(self, booking: BookingService, outbox: OutboxDispatcher) -> None:
        self._booking = booking
        self._outbox = outbox

    async def handle_book(self, owner_ref: str, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            data = BookAppointmentInput.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        logger.debug("Handler call: book appointment")

        try:
            outcome = await self._booking.book(
                BookingRequest(
                    facility_id=data.facility_id,
                    date=data.date,
                    time=data.time,
                    appointment_type=data.appointment_type.value,
                    owner_ref=owner_ref,
                    notes=data.notes,
                    contact_email=data.contact_email,
                )
            )
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("book the appointment")

        self._outbox.schedule(outcome.outbox)
        return {
            "success": True,
            "message": "Appointment booked successfully",
            "appointment": present_reservation(outcome.reservation),
        }

    async def handle_list(self, owner_ref: str) -> dict[str, Any]:
        try:
            reservations = await self._booking.list_for_owner(owner_ref)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("fetch appointments")

        return {"success": True, "appointments": [present_reservation(r) for r in reservations]}

    async def handle_get(self, owner_ref: str, reservation_id: str) -> dict[str, Any]:
        try:
            reservation = await self._booking.get(reservation_id, owner_ref)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("fetch the appointment")

        return {"success": True, "appointment": present_reservation(reservation)}

    async def handle_cancel(self, owner_ref: str, reservation_id: str) -> dict[str, Any]:
        try:
            reservation = await self._booking.cancel(reservation_id, owner_ref)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("cancel the appointment")

        return {
            "success": True,
            "message": "Appointment cancelled successfully",
            "appointment": present_reservation(reservation),
        }

    async def handle_reschedule(
        self, owner_ref: str, reservation_id: str, arguments: dict[str, Any]
    ) -> dict[str, Any]:
        try:
            data = RescheduleInput.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        try:
            reservation = await self._booking.reschedule(
                RescheduleRequest(
                    reservation_id=reservation_id,
                    owner_ref=owner_ref,
                    date=data.date,
                    time=data.time,
                    appointment_type=data.appointment_type.value if data.appointment_type else None,
                    notes=data.notes,
                )
            )
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("update the appointment")

        return {
            "success": True,
            "message": "Appointment updated successfully",
            "appointment": present_reservation(reservation),
        }

    async def handle_availability(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            query = AvailabilityQuery.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        try:
            availability = await self._booking.availability(
                query.facility_id, query.date, query.appointment_type
            )
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("fetch appointment slots")

        return {"success": True, **present_availability(availability)}


class FacilityHandlers:
    """Directory and proximity lookups. No I/O, so these are plain functions."""

    def __init__(
        self,
        directory: FacilityDirectory,
        *,
        default_limit: int = DEFAULT_NEAREST_LIMIT,
        hotlines: tuple[HotlineContact, ...] = EMERGENCY_CONTACTS,
    ) -> None:
        self._directory = directory
        self._default_limit = default_limit
        self._hotlines = hotlines

    def handle_list(self) -> dict[str, Any]:
        return {
            "success": True,
            "hospitals": [present_facility(f) for f in self._directory.get_all()],
        }

    def handle_emergency_contacts(self) -> dict[str, Any]:
        return {"success": True, "contacts": [present_hotline(c) for c in self._hotlines]}

    def handle_get(self, facility_id: int | str) -> dict[str, Any]:
        try:
            facility = self._directory.get_by_id(facility_id)
        except MaternalHubError as exc:
            return _failure(exc)
        return {"success": True, "hospital": present_facility(facility)}

    def handle_nearest(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            query = NearestQuery.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        try:
            ranked = nearest(
                self._directory,
                query.lat,
                query.lng,
                self._default_limit if query.limit is None else query.limit,
            )
        except MaternalHubError as exc:
            return _failure(exc)

        return {
            "success": True,
            "userLocation": {"lat": query.lat, "lng": query.lng},
            "count": len(ranked),
            "hospitals": [present_ranked(r) for r in ranked],
        }

    def handle_by_sector(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            query = SectorQuery.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        matches = self._directory.get_by_sector(query.district, query.sector)
        return {
            "success": True,
            "district": query.district,
            "sector": query.sector,
            "count": len(matches),
            "hospitals": [present_sector_match(m) for m in matches],
        }

    def handle_search(self, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            query = SearchQuery.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        results = self._directory.search(query.query)
        return {
            "success": True,
            "count": len(results),
            "hospitals": [present_facility(f) for f in results],
        }


class EmergencyHandlers:
    """Boundary handlers for emergency alerts."""

    def __init__(self, emergency: EmergencyService, outbox: OutboxDispatcher) -> None:
        self._emergency = emergency
        self._outbox = outbox

    async def handle_alert(self, owner_ref: str, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            data = EmergencyAlertInput.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        try:
            outcome = await self._emergency.raise_alert(owner_ref, data.contact, data.location)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("send the emergency alert")

        self._outbox.schedule(outcome.outbox)
        alert = outcome.alert
        return {
            "success": True,
            "message": "Emergency alert sent successfully",
            "emergencyId": alert.emergency_id,
            "alertedHospitals": [f.facility_id for f in alert.facilities],
            "emergency": present_emergency(alert),
        }

    async def handle_status(self, owner_ref: str, emergency_id: str) -> dict[str, Any]:
        try:
            alert = await self._emergency.get(emergency_id, owner_ref)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("get the emergency status")

        return {"success": True, "emergency": present_emergency(alert)}

    async def handle_cancel(self, owner_ref: str, emergency_id: str) -> dict[str, Any]:
        try:
            await self._emergency.cancel(emergency_id, owner_ref)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("cancel the emergency")

        return {"success": True, "message": "Emergency cancelled successfully"}

    async def handle_respond(self, emergency_id: str, arguments: dict[str, Any]) -> dict[str, Any]:
        try:
            data = HospitalResponseInput.model_validate(arguments)
        except PydanticValidationError as exc:
            return _invalid_input(exc)

        try:
            alert = await self._emergency.respond(emergency_id, data.facility_id)
        except MaternalHubError as exc:
            return _failure(exc)
        except Exception:
            return _unexpected("record the hospital response")

        return {
            "success": True,
            "message": "Hospital response recorded",
            "emergency": present_emergency(alert),
        }
