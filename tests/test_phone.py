from salon_scheduler.models import Appointment
from salon_scheduler.phone import find_candidates, normalize


def _appt(id, phone):
    return Appointment(
        id=id, date="2024-06-10", time=f"{8 + id:02d}:00",
        customer_name=f"Client {id}", phone_number=phone, service="Manicure",
    )


POOL = [
    _appt(1, "(555) 123-4567"),
    _appt(2, "+1 555 987 6543"),
    _appt(3, "555.123.4567"),
]


def test_normalize_strips_formatting():
    assert normalize("(555) 123-4567") == "5551234567"
    assert normalize("+1 555 987 6543") == "15559876543"
    assert normalize(None) == ""


def test_exact_match_ignores_formatting():
    found = find_candidates(POOL, "555-123-4567")
    assert found.match_type == "exact"
    assert [a.id for a in found.matches] == [1, 3]


def test_exact_match_wins_over_partial():
    found = find_candidates(POOL, "15559876543")
    assert found.match_type == "exact"
    assert [a.id for a in found.matches] == [2]


def test_partial_match_on_last_seven_digits():
    found = find_candidates(POOL, "987-6543")
    assert found.match_type == "partial"
    assert [a.id for a in found.matches] == [2]


def test_missing_area_code_still_matches():
    found = find_candidates(POOL, "5559876543")
    assert found.match_type == "partial"
    assert [a.id for a in found.matches] == [2]


def test_short_query_never_partially_matches():
    found = find_candidates(POOL, "4567")
    assert found.match_type == "none"
    assert not found


def test_no_digits():
    assert find_candidates(POOL, "call me").match_type == "none"
