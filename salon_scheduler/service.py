"""
Scheduling service: the five requests the salon's voice agent can make.

Every request resolves its date wording against the injected clock, runs
against the store or the escalation queue, and answers with a typed
response that always carries a spoken-style ``message``. Engine errors
never escape; they become ``success=False`` responses.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Union

from . import phone
from .dates import format_date, is_week_expression, monday_of, parse_date, resolve, week_anchor, week_label
from .errors import (
    AmbiguousMatchError,
    ConflictError,
    NoChangeError,
    NotFoundError,
    SchedulingError,
    ValidationError,
)
from .escalation import EscalationQueue
from .models import (
    Appointment,
    AppointmentCandidate,
    BookingConfirmed,
    CancellationConfirmed,
    CancellationNotFound,
    DayAppointments,
    DayAvailability,
    EditConfirmed,
    Failure,
    ManagerMessage,
    MessageSent,
    MultipleAppointments,
    PendingMessages,
    Priority,
    SlotAvailability,
    WeekAvailability,
)
from .slots import normalize_time
from .store import AppointmentStore

logger = logging.getLogger(__name__)

MIN_BOOKING_DIGITS = 7

AvailabilityResponse = Union[SlotAvailability, DayAvailability, WeekAvailability, Failure]
BookingResponse = Union[BookingConfirmed, Failure]
CancellationResponse = Union[CancellationConfirmed, MultipleAppointments, CancellationNotFound, Failure]
EditResponse = Union[EditConfirmed, Failure]


def _failure(exc: SchedulingError, message: Optional[str] = None) -> Failure:
    return Failure(error=exc.code, message=message or str(exc))


def _required(value: Optional[str], field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field_name} is required")
    return value


class SchedulingService:
    def __init__(
        self,
        store: AppointmentStore,
        queue: Optional[EscalationQueue] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.store = store
        self.queue = queue or EscalationQueue()
        self.clock = clock

    def _resolve_date(self, expression: Optional[str], field_name: str = "date") -> str:
        """Resolve date wording and insist on a real YYYY-MM-DD result."""
        resolved = resolve(_required(expression, field_name), self.clock())
        parse_date(resolved, field_name)
        if resolved != expression:
            logger.debug("Resolved %s %r -> %s", field_name, expression, resolved)
        return resolved

    # check_availability ------------------------------------------------------

    def check_availability(self, date: Optional[str] = None, time: Optional[str] = None) -> AvailabilityResponse:
        """
        Answer an availability question at the granularity the caller asked.

        - date and time: is that one slot free
        - date only: the free slots that day
        - no date, a week wording ("next week"), or a time alone: the week view
        """
        try:
            if not date or is_week_expression(date):
                return self._week_availability(date)

            day = self._resolve_date(date)
            if time:
                slot = normalize_time(time)
                available = not self.store.is_booked(day, slot)
                return SlotAvailability(
                    date=day,
                    time=slot,
                    available=available,
                    message=(
                        f"{slot} on {format_date(day)} is available for booking."
                        if available
                        else f"Sorry, {slot} on {format_date(day)} is already booked."
                    ),
                )

            free = self.store.available_slots(day)
            return DayAvailability(
                date=day,
                available_slots=free,
                message=(
                    f"There are {len(free)} available slots on {format_date(day)}: {', '.join(free)}"
                    if free
                    else f"Sorry, there are no available slots on {format_date(day)}."
                ),
            )
        except ValidationError as e:
            logger.info("Rejected availability check: %s", e)
            return _failure(e)

    def _week_availability(self, expression: Optional[str]) -> WeekAvailability:
        now = self.clock()
        monday = week_anchor(expression, now)
        availability = self.store.week_availability(monday)
        total = sum(len(free) for free in availability.values())

        if monday == monday_of(now.date()):
            message = f"There are {total} available slots this week."
        else:
            message = f"There are {total} available slots the week of {week_label(monday)}."

        return WeekAvailability(
            week_of=monday.strftime("%Y-%m-%d"),
            week_label=week_label(monday),
            availability=availability,
            message=message,
        )

    # book_appointment --------------------------------------------------------

    def book_appointment(
        self,
        date: str,
        time: str,
        customer_name: str,
        phone_number: str,
        service: str,
        technician: Optional[str] = None
    ) -> BookingResponse:
        try:
            day = self._resolve_date(date)
            slot = normalize_time(time)
            customer_name = _required(customer_name, "customer name")
            service = _required(service, "service")
            phone_number = _required(phone_number, "phone number")
            if len(phone.normalize(phone_number)) < MIN_BOOKING_DIGITS:
                raise ValidationError(
                    f"Phone number '{phone_number}' needs at least {MIN_BOOKING_DIGITS} digits"
                )

            appt = self.store.book(
                day, slot, customer_name, phone_number, service,
                technician=(technician or "").strip() or None,
            )
        except ConflictError as e:
            free = self.store.available_slots(e.date)
            message = f"Sorry, the slot at {e.time} on {format_date(e.date)} is already booked."
            if free:
                message += f" Open times that day: {', '.join(free)}."
            logger.info("Booking conflict on %s at %s", e.date, e.time)
            return _failure(e, message)
        except ValidationError as e:
            logger.info("Rejected booking: %s", e)
            return _failure(e)

        with_tech = f" with {appt.technician}" if appt.technician else ""
        return BookingConfirmed(
            appointment=appt,
            message=(
                f"Successfully booked an appointment for {appt.customer_name} on "
                f"{format_date(appt.date)} at {appt.time} for {appt.service}{with_tech}."
            ),
        )

    # cancel_appointment ------------------------------------------------------

    def cancel_appointment(
        self,
        phone_number: str,
        customer_name: Optional[str] = None,
        date: Optional[str] = None,
        time: Optional[str] = None
    ) -> CancellationResponse:
        try:
            phone_number = _required(phone_number, "phone number")
            if not phone.normalize(phone_number):
                raise ValidationError(f"Phone number '{phone_number}' has no digits")
            customer_name = (customer_name or "").strip() or None
            day = self._resolve_date(date) if date else None
            slot = normalize_time(time) if time else None

            result = self.store.cancel(phone_number, customer_name=customer_name, date=day, time=slot)
        except NotFoundError as e:
            return self._cancel_not_found(e)
        except AmbiguousMatchError as e:
            return self._cancel_ambiguous(phone_number, customer_name, e.candidates)
        except ValidationError as e:
            logger.info("Rejected cancellation: %s", e)
            return _failure(e)

        appt = result.appointment
        message = (
            f"Successfully cancelled the appointment for {appt.customer_name} on "
            f"{format_date(appt.date)} at {appt.time} for {appt.service}."
        )
        if result.match_type == "partial":
            message += (
                f" Note: the phone number on file is {appt.phone_number}, "
                f"which matched on its last {phone.PARTIAL_DIGITS} digits."
            )
        return CancellationConfirmed(cancelled_appointment=appt, match_type=result.match_type, message=message)

    def _cancel_not_found(self, e: NotFoundError) -> CancellationNotFound:
        q = e.query
        parts = [f"phone number {q['phone_number']}"]
        if q.get("customer_name"):
            parts.append(f"name {q['customer_name']}")
        where = ""
        if q.get("date"):
            where += f" on {format_date(q['date'])}"
        if q.get("time"):
            where += f" at {q['time']}"

        logger.info("No appointment to cancel for digits %s", q["normalized_phone"])
        return CancellationNotFound(
            phone_number=q["phone_number"],
            normalized_phone=q["normalized_phone"],
            customer_name=q.get("customer_name"),
            date=q.get("date"),
            time=q.get("time"),
            message=(
                f"Sorry, no appointments found for {' and '.join(parts)}{where}. "
                f"I searched for the digits {q['normalized_phone'] or '(none)'}."
            ),
        )

    def _cancel_ambiguous(
        self,
        phone_number: str,
        customer_name: Optional[str],
        candidates: list[Appointment]
    ) -> MultipleAppointments:
        listed = [
            AppointmentCandidate(
                id=appt.id,
                date=appt.date,
                formatted_date=format_date(appt.date),
                time=appt.time,
                service=appt.service,
                phone_number=appt.phone_number,
                customer_name=appt.customer_name,
                technician=appt.technician,
            )
            for appt in candidates
        ]
        who = customer_name or f"The phone number {phone_number}"
        return MultipleAppointments(
            phone_number=phone_number,
            customer_name=customer_name,
            appointments=listed,
            message=(
                f"{who} has {len(listed)} appointments. Please specify a date or time "
                f"to identify which one to cancel."
            ),
        )

    # edit_appointment --------------------------------------------------------

    def edit_appointment(
        self,
        phone_number: str,
        original_date: str,
        original_time: str,
        new_date: Optional[str] = None,
        new_time: Optional[str] = None,
        new_service: Optional[str] = None,
        new_technician: Optional[str] = None,
        customer_name: Optional[str] = None
    ) -> EditResponse:
        """
        Move or change an appointment found by exact phone plus its current
        date and time. ``customer_name`` only personalizes the messages.
        """
        try:
            phone_number = _required(phone_number, "phone number")
            if not phone.normalize(phone_number):
                raise ValidationError(f"Phone number '{phone_number}' has no digits")
            old_day = self._resolve_date(original_date, "original date")
            old_slot = normalize_time(original_time, "original time")
            day = self._resolve_date(new_date, "new date") if new_date else None
            slot = normalize_time(new_time, "new time") if new_time else None

            result = self.store.edit(
                phone_number,
                old_day,
                old_slot,
                new_date=day,
                new_time=slot,
                new_service=(new_service or "").strip() or None,
                new_technician=(new_technician or "").strip() or None,
            )
        except NotFoundError as e:
            who = f" for {customer_name}" if customer_name else ""
            return _failure(
                e,
                f"Sorry, I couldn't find an appointment{who} with phone number {phone_number} on "
                f"{format_date(e.query['date'])} at {e.query['time']}.",
            )
        except NoChangeError as e:
            return _failure(e, "No changes were made because the new details match the current appointment.")
        except ConflictError as e:
            free = self.store.available_slots(e.date)
            message = f"Sorry, {e.time} on {format_date(e.date)} is already booked, so the appointment was not moved."
            if free:
                message += f" Open times that day: {', '.join(free)}."
            logger.info("Edit conflict on %s at %s", e.date, e.time)
            return _failure(e, message)
        except ValidationError as e:
            logger.info("Rejected edit: %s", e)
            return _failure(e)

        after = result.after
        return EditConfirmed(
            original_appointment=result.before,
            updated_appointment=after,
            changes_summary=result.changes,
            message=(
                f"Updated the appointment for {customer_name or after.customer_name}: "
                f"{'; '.join(result.changes)}. It is now on {format_date(after.date)} at "
                f"{after.time} for {after.service}."
            ),
        )

    # send_message_to_manager -------------------------------------------------

    def send_message_to_manager(
        self,
        client_request: str,
        reason: str,
        priority: Optional[Union[Priority, str]] = None
    ) -> Union[MessageSent, Failure]:
        try:
            msg = self.escalate(client_request, reason, priority)
        except ValidationError as e:
            logger.info("Rejected manager message: %s", e)
            return _failure(e)
        return self.message_sent(msg)

    def escalate(
        self,
        client_request: str,
        reason: str,
        priority: Optional[Union[Priority, str]] = None
    ) -> ManagerMessage:
        """Raises ValidationError for a priority other than normal or urgent."""
        try:
            level = Priority(priority) if priority else Priority.normal
        except ValueError:
            allowed = ", ".join(p.value for p in Priority)
            raise ValidationError(f"Priority '{priority}' is not one of: {allowed}") from None
        return self.queue.escalate(client_request, reason, level, now=self.clock())

    @staticmethod
    def message_sent(msg: ManagerMessage) -> MessageSent:
        urgency = " as urgent" if msg.priority is Priority.urgent else ""
        return MessageSent(
            message_id=msg.id,
            message=(
                f"I've passed your request to the manager{urgency}. "
                f"They will get back to you as soon as possible."
            ),
        )

    # Manager side ------------------------------------------------------------

    def respond_to_message(self, message_id: str, response: str) -> ManagerMessage:
        """Raises NotFoundError for unknown or already answered messages."""
        return self.queue.respond(message_id, _required(response, "response"), now=self.clock())

    def pending_messages(self) -> PendingMessages:
        return PendingMessages(pending_count=self.queue.pending_count(), messages=self.queue.pending())

    def appointments_for(self, date: str) -> Union[DayAppointments, Failure]:
        try:
            day = self._resolve_date(date)
        except ValidationError as e:
            return _failure(e)

        booked = self.store.on_date(day)
        return DayAppointments(
            date=day,
            appointments=booked,
            message=(
                f"There are {len(booked)} appointments on {format_date(day)}."
                if booked
                else f"There are no appointments on {format_date(day)}."
            ),
        )
