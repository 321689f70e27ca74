from typing import Any

from maternal.domain.models import (
    AlertedFacility,
    Availability,
    EmergencyAlert,
    Facility,
    HotlineContact,
    RankedFacility,
    Reservation,
    SectorMatch,
)


def present_reservation(r: Reservation) -> dict[str, Any]:
    return {
        "id": r.reservation_id,
        "facilityId": r.facility_id,
        "facilityName": r.facility_name,
        "date": r.date.isoformat(),
        "time": r.time,
        "appointmentType": r.appointment_type.value,
        "notes": r.notes,
        "status": r.status.value,
        "createdAt": r.created_at.isoformat(),
        "updatedAt": r.updated_at.isoformat(),
    }


def present_availability(a: Availability) -> dict[str, Any]:
    slot_info: dict[str, Any] | None = None
    if a.slot_info is not None:
        slot_info = {
            "durationMinutes": a.slot_info.duration_minutes,
            "maxPerDay": a.slot_info.max_per_day,
            "requiresSpecialist": a.slot_info.requires_specialist,
            "priority": a.slot_info.priority,
            "description": a.slot_info.description,
        }
    return {
        "slots": list(a.slots),
        "facilityId": a.facility_id,
        "facilityName": a.facility_name,
        "date": a.date.isoformat(),
        "appointmentType": a.appointment_type.value if a.appointment_type else None,
        "slotInfo": slot_info,
        "totalSlots": a.total_slots,
        "availableCount": a.available_count,
        "bookedCount": a.booked_count,
    }


def present_facility(f: Facility) -> dict[str, Any]:
    return {
        "id": f.facility_id,
        "name": f.name,
        "district": f.district,
        "sector": f.sector,
        "location": f.location,
        "phone": f.phone,
        "emergencyPhone": f.emergency_phone,
        "hours": f.hours,
        "rating": f.rating,
        "services": sorted(f.services),
        "coordinates": {"lat": f.coordinates.lat, "lng": f.coordinates.lng},
    }


def present_hotline(c: HotlineContact) -> dict[str, Any]:
    return {"name": c.name, "phone": c.phone, "description": c.description}


def present_ranked(r: RankedFacility) -> dict[str, Any]:
    return {**present_facility(r.facility), "distanceKm": r.display_distance}


def present_sector_match(m: SectorMatch) -> dict[str, Any]:
    return {
        **present_facility(m.facility),
        "isInSector": m.is_in_sector,
        "distance": m.estimated_distance,
        "distanceIsEstimate": True,
    }


def _present_alerted(f: AlertedFacility) -> dict[str, Any]:
    return {
        "id": f.facility_id,
        "name": f.name,
        "phone": f.phone,
        "emergencyPhone": f.emergency_phone,
        "distanceKm": f.distance_km,
        "notifiedAt": f.notified_at.isoformat(),
    }


def present_emergency(alert: EmergencyAlert) -> dict[str, Any]:
    return {
        "emergencyId": alert.emergency_id,
        "status": alert.status.value,
        "contact": {"name": alert.contact.name, "phone": alert.contact.phone},
        "location": (
            {"lat": alert.location.lat, "lng": alert.location.lng} if alert.location else None
        ),
        "hospitals": [_present_alerted(f) for f in alert.facilities],
        "respondedHospital": (
            _present_alerted(alert.responded_facility) if alert.responded_facility else None
        ),
        "alertedAt": alert.alerted_at.isoformat(),
        "responseMinutes": alert.response_minutes,
    }
