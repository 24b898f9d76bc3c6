"""In-memory appointment book with the one-appointment-per-slot rule."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from . import phone, slots
from .dates import format_date
from .errors import AmbiguousMatchError, ConflictError, NoChangeError, NotFoundError
from .models import Appointment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CancelResult:
    appointment: Appointment
    match_type: str  # "exact" | "partial"


@dataclass(frozen=True)
class EditResult:
    before: Appointment
    after: Appointment
    changes: list[str]


class AppointmentStore:
    """Owns every appointment; callers only ever get copies back.

    All public methods hold the same re-entrant lock, so a slot check and
    the write that follows it can't interleave with another request.
    """

    def __init__(self, appointments: Optional[Iterable[Appointment]] = None):
        self._lock = threading.RLock()
        self._appointments: list[Appointment] = []
        for appt in appointments or ():
            if slots.is_booked(self._appointments, appt.date, appt.time):
                raise ConflictError(appt.date, appt.time)
            self._appointments.append(appt.model_copy())

    def __len__(self) -> int:
        with self._lock:
            return len(self._appointments)

    # Reads ---------------------------------------------------------------

    def all(self) -> list[Appointment]:
        with self._lock:
            return [appt.model_copy() for appt in self._appointments]

    def get(self, appointment_id: int) -> Appointment | None:
        with self._lock:
            for appt in self._appointments:
                if appt.id == appointment_id:
                    return appt.model_copy()
        return None

    def on_date(self, day: str) -> list[Appointment]:
        with self._lock:
            return [appt.model_copy() for appt in slots.appointments_on(self._appointments, day)]

    def available_slots(self, day: str) -> list[str]:
        with self._lock:
            return slots.available_slots(self._appointments, day)

    def is_booked(self, day: str, time: str) -> bool:
        with self._lock:
            return slots.is_booked(self._appointments, day, time)

    def week_availability(self, monday: date) -> dict[str, list[str]]:
        with self._lock:
            return slots.week_availability(self._appointments, monday)

    # Mutations -----------------------------------------------------------

    def _next_id(self) -> int:
        return max((appt.id for appt in self._appointments), default=0) + 1

    def book(
        self,
        date: str,
        time: str,
        customer_name: str,
        phone_number: str,
        service: str,
        technician: str | None = None,
    ) -> Appointment:
        """Add an appointment; never overwrites an occupied slot."""
        with self._lock:
            for appt in self._appointments:
                if appt.date == date and appt.time == time:
                    raise ConflictError(date, time, holder_id=appt.id)

            appt = Appointment(
                id=self._next_id(),
                date=date,
                time=time,
                customer_name=customer_name,
                phone_number=phone_number,
                service=service,
                technician=technician,
            )
            self._appointments.append(appt)
            logger.info("Booked appointment %s on %s at %s", appt.id, date, time)
            return appt.model_copy()

    def cancel(
        self,
        phone_query: str,
        customer_name: str | None = None,
        date: str | None = None,
        time: str | None = None,
    ) -> CancelResult:
        """Remove the appointment the caller identifies.

        Candidates come from the phone match and are narrowed by name
        substring, date and time. Several survivors without a date or time
        are ambiguous; with one of them given, the earliest booked wins.

        Raises:
            NotFoundError: nothing survives the narrowing
            AmbiguousMatchError: several survive and no date/time was given
        """
        with self._lock:
            found = phone.find_candidates(self._appointments, phone_query)
            candidates = found.matches

            needle = (customer_name or "").strip().lower()
            if needle:
                candidates = [a for a in candidates if needle in a.customer_name.lower()]
            if date:
                candidates = [a for a in candidates if a.date == date]
            if time:
                candidates = [a for a in candidates if a.time == time]

            if not candidates:
                raise NotFoundError(
                    f"No appointment found for phone {phone_query}",
                    phone_number=phone_query,
                    normalized_phone=phone.normalize(phone_query),
                    customer_name=customer_name,
                    date=date,
                    time=time,
                )

            if len(candidates) > 1 and not date and not time:
                raise AmbiguousMatchError(
                    f"{len(candidates)} appointments match phone {phone_query}",
                    [a.model_copy() for a in candidates],
                )

            target = candidates[0]
            self._appointments = [a for a in self._appointments if a.id != target.id]
            logger.info(
                "Cancelled appointment %s on %s at %s (%s phone match)",
                target.id, target.date, target.time, found.match_type,
            )
            return CancelResult(appointment=target.model_copy(), match_type=found.match_type)

    def edit(
        self,
        phone_query: str,
        original_date: str,
        original_time: str,
        new_date: str | None = None,
        new_time: str | None = None,
        new_service: str | None = None,
        new_technician: str | None = None,
    ) -> EditResult:
        """Change an appointment in place, keeping its id and phone number.

        Raises:
            NotFoundError: no appointment with that phone at that date/time
            NoChangeError: every requested value equals the current one
            ConflictError: the new date/time belongs to another appointment
        """
        with self._lock:
            digits = phone.normalize(phone_query)
            target = None
            for appt in self._appointments:
                if (
                    phone.normalize(appt.phone_number) == digits
                    and appt.date == original_date
                    and appt.time == original_time
                ):
                    target = appt
                    break

            if target is None:
                raise NotFoundError(
                    f"No appointment found for phone {phone_query} on {original_date} at {original_time}",
                    phone_number=phone_query,
                    normalized_phone=digits,
                    date=original_date,
                    time=original_time,
                )

            updated = {
                "date": new_date or target.date,
                "time": new_time or target.time,
                "service": new_service or target.service,
                "technician": new_technician or target.technician,
            }
            changed = [name for name, value in updated.items() if getattr(target, name) != value]
            if not changed:
                raise NoChangeError("No changes requested; the appointment already has these details")

            if "date" in changed or "time" in changed:
                if slots.is_booked(self._appointments, updated["date"], updated["time"], exclude_id=target.id):
                    raise ConflictError(updated["date"], updated["time"])

            before = target.model_copy()
            for name in changed:
                setattr(target, name, updated[name])

            logger.info("Edited appointment %s: %s", target.id, ", ".join(changed))
            return EditResult(
                before=before,
                after=target.model_copy(),
                changes=[_describe_change(name, getattr(before, name), updated[name]) for name in changed],
            )


def _describe_change(name: str, old, new) -> str:
    if name == "date":
        old, new = format_date(old), format_date(new)
    return f"{name}: {old or 'none'} -> {new or 'none'}"
