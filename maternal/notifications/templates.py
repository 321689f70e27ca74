from typing import NamedTuple

from maternal.datetime_helpers import date_to_long
from maternal.domain.models import NotificationCommand, NotificationKind

PLATFORM_NAME = "Maternal Health Platform"


class Message(NamedTuple):
    subject: str
    text: str


def _appointment_type_label(value: str) -> str:
    return value.replace("_", " ").capitalize()


def render(command: NotificationCommand) -> Message:
    """Build the subject and plain-text body for a notification command."""
    if command.kind is NotificationKind.EMERGENCY_DISPATCH:
        return _render_emergency(command)

    reservation = command.reservation
    if reservation is None:
        raise ValueError(f"{command.kind.value} notification requires a reservation")

    when = date_to_long(reservation.date)
    details = "\n".join(
        [
            f"Health center: {reservation.facility_name}",
            f"Date: {when}",
            f"Time: {reservation.time}",
            f"Type: {_appointment_type_label(reservation.appointment_type.value)}",
            f"Reference: {reservation.reservation_id}",
        ]
    )

    if command.kind is NotificationKind.BOOKING_CONFIRMED:
        return Message(
            subject=f"Appointment Confirmed - {when} at {reservation.time}",
            text=(
                "Your appointment has been booked.\n\n"
                f"{details}\n\n"
                "Please arrive 15 minutes early and bring your health card.\n"
                f"{PLATFORM_NAME}"
            ),
        )

    return Message(
        subject=f"Reminder: Appointment Tomorrow at {reservation.time}",
        text=(
            "This is a reminder of your appointment tomorrow.\n\n"
            f"{details}\n\n"
            "If you can no longer attend, please cancel so someone else can use the slot.\n"
            f"{PLATFORM_NAME}"
        ),
    )


def _render_emergency(command: NotificationCommand) -> Message:
    alert = command.emergency
    if alert is None:
        raise ValueError("emergency_dispatch notification requires an emergency")

    contact = alert.contact
    lines = [
        f"Emergency ID: {alert.emergency_id}",
        f"Patient: {contact.name}",
        f"Phone: {contact.phone}",
    ]
    if contact.age is not None:
        lines.append(f"Age: {contact.age}")
    if alert.location is not None:
        lines.append(f"Location: {alert.location.lat:.5f}, {alert.location.lng:.5f}")
    facility = command.facility
    if facility is not None and facility.distance_km is not None:
        lines.append(f"Distance from your facility: {facility.distance_km:.1f} km")
    lines.append(f"Alerted at: {alert.alerted_at.isoformat()}")

    return Message(
        subject=f"URGENT: Maternal Emergency Alert - {alert.emergency_id}",
        text=(
            "A maternal emergency has been reported near your facility.\n\n"
            + "\n".join(lines)
            + f"\n\nPlease contact the patient immediately.\n{PLATFORM_NAME} - Automated Emergency Alert"
        ),
    )
