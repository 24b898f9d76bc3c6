"""
Slot availability over a set of appointments.

The salon books one chair, hourly, 09:00 through 17:00. A slot is free
when no appointment holds its (date, time).
"""
from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Optional

from .dates import week_dates
from .errors import ValidationError
from .models import Appointment

TIME_SLOTS = [
    "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"
]

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_time(value: str, field_name: str = "time") -> str:
    """
    Zero-pad an ``H:MM`` time and check it against the slot catalog.

    Raises:
        ValidationError: if the time is missing, malformed or not a bookable slot
    """
    if not value:
        raise ValidationError(f"{field_name} is required")

    found = _TIME_RE.match(str(value).strip())
    if not found:
        raise ValidationError(f"Invalid {field_name} '{value}'. Use HH:MM (24-hour)")

    time = f"{int(found.group(1)):02d}:{found.group(2)}"
    if time not in TIME_SLOTS:
        raise ValidationError(
            f"{time} is not a bookable time. Appointments start on the hour from "
            f"{TIME_SLOTS[0]} to {TIME_SLOTS[-1]}"
        )
    return time


def _booked_times(appointments: Iterable[Appointment], day: str, exclude_id: Optional[int]) -> set:
    return {
        appt.time for appt in appointments
        if appt.date == day and appt.id != exclude_id
    }


def available_slots(
    appointments: Iterable[Appointment],
    day: str,
    exclude_id: Optional[int] = None
) -> list[str]:
    """
    Free slot times for *day* in catalog order.

    Args:
        appointments: current appointments
        day: YYYY-MM-DD
        exclude_id: appointment to ignore (the one being edited)
    """
    booked = _booked_times(appointments, day, exclude_id)
    return [time for time in TIME_SLOTS if time not in booked]


def is_booked(
    appointments: Iterable[Appointment],
    day: str,
    time: str,
    exclude_id: Optional[int] = None
) -> bool:
    return time in _booked_times(appointments, day, exclude_id)


def week_availability(appointments: Iterable[Appointment], monday: date) -> dict[str, list[str]]:
    """
    Free slots for the seven days starting at *monday*.

    Returns:
        dict: {"2024-06-10": ["09:00", ...], ..., "2024-06-16": [...]}
    """
    appointments = list(appointments)
    result = {}
    for day in week_dates(monday):
        key = day.strftime("%Y-%m-%d")
        result[key] = available_slots(appointments, key)
    return result


def appointments_on(appointments: Iterable[Appointment], day: str) -> list[Appointment]:
    """The day's appointments ordered by slot."""
    booked = [appt for appt in appointments if appt.date == day]
    return sorted(booked, key=lambda appt: appt.time)
