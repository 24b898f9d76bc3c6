from datetime import datetime

import pytest

from salon_scheduler.models import (
    BookingConfirmed,
    CancellationConfirmed,
    CancellationNotFound,
    DayAvailability,
    EditConfirmed,
    Failure,
    MultipleAppointments,
    SlotAvailability,
    WeekAvailability,
)
from salon_scheduler.seed import demo_appointments
from salon_scheduler.service import SchedulingService
from salon_scheduler.store import AppointmentStore

NOW = datetime(2024, 6, 12, 10, 30)  # a Wednesday


def _service(*appointments):
    return SchedulingService(AppointmentStore(appointments), clock=lambda: NOW)


@pytest.fixture
def svc():
    return _service()


# Scenarios -----------------------------------------------------------------

def test_book_into_empty_store(svc):
    resp = svc.book_appointment("2024-06-10", "10:00", "A", "555-1111", "Manicure")
    assert isinstance(resp, BookingConfirmed)
    assert resp.appointment.id == 1
    assert "Monday, June 10" in resp.message


def test_book_occupied_slot_fails(svc):
    svc.book_appointment("2024-06-10", "10:00", "A", "555-1111", "Manicure")
    resp = svc.book_appointment("2024-06-10", "10:00", "B", "555-2222", "Pedicure")

    assert isinstance(resp, Failure)
    assert resp.success is False
    assert resp.error == "conflict"
    assert "already booked" in resp.message
    assert len(svc.store) == 1


def test_cancel_exact_phone(svc):
    svc.book_appointment("2024-06-10", "10:00", "Sarah", "(555) 123-4567", "Manicure")
    resp = svc.cancel_appointment("5551234567")

    assert isinstance(resp, CancellationConfirmed)
    assert resp.match_type == "exact"
    assert len(svc.store) == 0


def test_cancel_partial_phone(svc):
    svc.book_appointment("2024-06-10", "10:00", "Sarah", "(555) 123-4567", "Manicure")
    resp = svc.cancel_appointment("1234567")

    assert isinstance(resp, CancellationConfirmed)
    assert resp.match_type == "partial"
    assert "(555) 123-4567" in resp.message
    assert len(svc.store) == 0


def test_cancel_multiple_without_hints(svc):
    svc.book_appointment("2024-06-10", "10:00", "Pat", "5551111111", "Manicure")
    svc.book_appointment("2024-06-14", "15:00", "Pat", "5551111111", "Pedicure")
    resp = svc.cancel_appointment("5551111111")

    assert isinstance(resp, MultipleAppointments)
    assert resp.success is False
    assert resp.multiple_appointments is True
    assert len(resp.appointments) == 2
    assert resp.appointments[1].formatted_date == "Friday, June 14"
    assert len(svc.store) == 2


def test_edit_without_changes(svc):
    svc.book_appointment("2024-06-10", "10:00", "Sarah", "5551234567", "Manicure")
    resp = svc.edit_appointment("5551234567", "2024-06-10", "10:00", new_time="10:00")

    assert isinstance(resp, Failure)
    assert resp.error == "no_change"
    assert "No changes" in resp.message


# Availability --------------------------------------------------------------

def test_availability_single_slot(svc):
    svc.book_appointment("2024-06-13", "11:00", "A", "5551111111", "Manicure")

    taken = svc.check_availability("tomorrow", "11:00")
    assert isinstance(taken, SlotAvailability)
    assert (taken.date, taken.available) == ("2024-06-13", False)

    free = svc.check_availability("2024-06-13", "9:00")
    assert free.time == "09:00"
    assert free.available is True


def test_availability_for_a_day(svc):
    svc.book_appointment("2024-06-14", "09:00", "A", "5551111111", "Manicure")
    resp = svc.check_availability("friday")

    assert isinstance(resp, DayAvailability)
    assert resp.date == "2024-06-14"
    assert resp.available_slots[0] == "10:00"
    assert len(resp.available_slots) == 8


def test_availability_full_day(svc):
    for time in ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"]:
        svc.book_appointment("2024-06-14", time, "A", "5551111111", "Manicure")
    resp = svc.check_availability("2024-06-14")
    assert resp.available_slots == []
    assert resp.message.startswith("Sorry")


def test_availability_current_week(svc):
    resp = svc.check_availability()

    assert isinstance(resp, WeekAvailability)
    assert resp.week_of == "2024-06-10"
    assert resp.week_label == "Jun 10 - 16, 2024"
    assert len(resp.availability) == 7
    assert resp.message == "There are 63 available slots this week."


def test_availability_next_week(svc):
    svc.book_appointment("2024-06-18", "12:00", "A", "5551111111", "Manicure")
    resp = svc.check_availability("next week")

    assert isinstance(resp, WeekAvailability)
    assert resp.week_of == "2024-06-17"
    assert "62 available slots the week of Jun 17 - 23, 2024" in resp.message


def test_time_without_date_gives_week_view(svc):
    assert isinstance(svc.check_availability(time="10:00"), WeekAvailability)


def test_unparseable_date_is_a_validation_failure(svc):
    resp = svc.check_availability("the day after my birthday")
    assert isinstance(resp, Failure)
    assert resp.error == "validation"


# Booking validation --------------------------------------------------------

def test_book_resolves_weekday_names(svc):
    resp = svc.book_appointment("Thursday", "14:00", "A", "555-111-2222", "Manicure", technician="Amy")
    assert resp.appointment.date == "2024-06-13"
    assert resp.appointment.technician == "Amy"
    assert "with Amy" in resp.message


@pytest.mark.parametrize("kwargs,fragment", [
    (dict(date="2024-02-30"), "date"),
    (dict(time="18:00"), "not a bookable time"),
    (dict(phone_number="12345"), "at least 7 digits"),
    (dict(customer_name="  "), "customer name"),
])
def test_book_rejects_bad_input(svc, kwargs, fragment):
    args = dict(date="2024-06-13", time="10:00", customer_name="A", phone_number="5551111111", service="Manicure")
    args.update(kwargs)
    resp = svc.book_appointment(**args)

    assert isinstance(resp, Failure)
    assert resp.error == "validation"
    assert fragment in resp.message
    assert len(svc.store) == 0


def test_conflict_message_lists_open_times(svc):
    svc.book_appointment("2024-06-13", "10:00", "A", "5551111111", "Manicure")
    resp = svc.book_appointment("2024-06-13", "10:00", "B", "5552222222", "Manicure")
    assert "Open times that day: 09:00, 11:00" in resp.message


# Cancel --------------------------------------------------------------------

def test_cancel_not_found_reports_digits(svc):
    svc.book_appointment("2024-06-13", "10:00", "A", "5551111111", "Manicure")
    resp = svc.cancel_appointment("(555) 999-0000", date="tomorrow")

    assert isinstance(resp, CancellationNotFound)
    assert resp.normalized_phone == "5559990000"
    assert resp.date == "2024-06-13"
    assert "5559990000" in resp.message
    assert len(svc.store) == 1


def test_cancel_with_weekday_hint(svc):
    svc.book_appointment("2024-06-13", "10:00", "Pat", "5551111111", "Manicure")
    svc.book_appointment("2024-06-14", "10:00", "Pat", "5551111111", "Pedicure")
    resp = svc.cancel_appointment("5551111111", date="friday")

    assert isinstance(resp, CancellationConfirmed)
    assert resp.cancelled_appointment.service == "Pedicure"


def test_cancel_without_digits(svc):
    resp = svc.cancel_appointment("unknown")
    assert isinstance(resp, Failure)
    assert resp.error == "validation"


# Edit ----------------------------------------------------------------------

def test_edit_moves_to_free_slot(svc):
    booked = svc.book_appointment("2024-06-13", "10:00", "Sarah", "(555) 123-4567", "Manicure").appointment
    resp = svc.edit_appointment("555.123.4567", "tomorrow", "10:00", new_date="friday", new_time="15:00")

    assert isinstance(resp, EditConfirmed)
    assert resp.updated_appointment.id == booked.id
    assert (resp.updated_appointment.date, resp.updated_appointment.time) == ("2024-06-14", "15:00")
    assert (resp.original_appointment.date, resp.original_appointment.time) == ("2024-06-13", "10:00")
    assert len(resp.changes_summary) == 2
    assert svc.store.get(booked.id).time == "15:00"


def test_edit_conflict(svc):
    svc.book_appointment("2024-06-13", "10:00", "Sarah", "5551234567", "Manicure")
    svc.book_appointment("2024-06-13", "11:00", "Mike", "5559876543", "Pedicure")
    resp = svc.edit_appointment("5551234567", "2024-06-13", "10:00", new_time="11:00")

    assert isinstance(resp, Failure)
    assert resp.error == "conflict"
    assert svc.store.get(1).time == "10:00"


def test_edit_not_found(svc):
    resp = svc.edit_appointment("5551234567", "2024-06-13", "10:00", new_time="11:00", customer_name="Sarah")
    assert isinstance(resp, Failure)
    assert resp.error == "not_found"
    assert "for Sarah" in resp.message


def test_edit_without_digits(svc):
    svc.book_appointment("2024-06-13", "10:00", "Sarah", "5551234567", "Manicure")
    resp = svc.edit_appointment("abc", "2024-06-13", "10:00", new_time="11:00")

    assert isinstance(resp, Failure)
    assert resp.error == "validation"
    assert "no digits" in resp.message
    assert svc.store.get(1).time == "10:00"


# Escalation ----------------------------------------------------------------

def test_send_message_to_manager(svc):
    resp = svc.send_message_to_manager("Can I come at 8pm?", "Outside hours", "urgent")

    assert resp.success is True
    assert resp.status == "sent"
    assert "as urgent" in resp.message
    assert svc.pending_messages().pending_count == 1

    answered = svc.respond_to_message(resp.message_id, "Sorry, we close at 6")
    assert answered.responded_at == NOW
    assert svc.pending_messages().pending_count == 0


def test_unknown_priority_is_a_validation_failure(svc):
    resp = svc.send_message_to_manager("refund please", "policy", priority="high")

    assert isinstance(resp, Failure)
    assert resp.error == "validation"
    assert "normal, urgent" in resp.message
    assert svc.pending_messages().pending_count == 0


# Listing -------------------------------------------------------------------

def test_appointments_for_seeded_week():
    svc = _service(*demo_appointments(NOW))
    resp = svc.appointments_for("2024-06-10")

    assert [a.customer_name for a in resp.appointments] == ["Sarah Johnson"]
    assert len(svc.store) == 7
