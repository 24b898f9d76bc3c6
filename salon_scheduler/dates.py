"""Turn loose date wording from callers ("tomorrow", "next week Monday",
"friday") into calendar dates.

Weekdays are indexed Sunday=0..Saturday=6 here, the way callers count
them; all arithmetic is on whole local calendar days.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from .errors import ValidationError

WEEKDAYS = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

_WEEKDAY_RE = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TWO_WEEKS = ("in two weeks", "in 2 weeks")


def _as_date(reference: date | datetime) -> date:
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def weekday_index(day: date) -> int:
    """Sunday-based weekday index (Sunday=0)."""
    return (day.weekday() + 1) % 7


def _iso(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def resolve(expression: str, reference: date | datetime) -> str:
    """Resolve *expression* against *reference* and return ``YYYY-MM-DD``.

    Unrecognized input comes back unchanged (stripped); callers must
    validate it themselves.
    """
    raw = (expression or "").strip()
    text = raw.lower()
    today = _as_date(reference)
    today_idx = weekday_index(today)

    if text == "today":
        return _iso(today)
    if text == "tomorrow":
        return _iso(today + timedelta(days=1))

    if "next week" in text:
        found = _WEEKDAY_RE.search(text)
        if found:
            days = 7 + (WEEKDAYS.index(found.group(1)) - today_idx)
            # "next week Monday" said on a Monday is the Monday after next
            if days == 7:
                days = 14
            return _iso(today + timedelta(days=days))
        return _iso(monday_of(today) + timedelta(days=7))

    if any(phrase in text for phrase in _TWO_WEEKS):
        return _iso(today + timedelta(days=14))

    if text in WEEKDAYS:
        days = WEEKDAYS.index(text) - today_idx
        if days <= 0:
            days += 7
        return _iso(today + timedelta(days=days))

    return raw


def is_week_expression(expression: str | None) -> bool:
    """True for wording that names a whole week rather than a day."""
    text = (expression or "").strip().lower()
    if text == "this week":
        return True
    if "next week" in text:
        return _WEEKDAY_RE.search(text) is None
    return any(phrase in text for phrase in _TWO_WEEKS)


def week_anchor(expression: str | None, reference: date | datetime) -> date:
    """Monday of the week *expression* refers to; the current week when empty."""
    today = _as_date(reference)
    text = (expression or "").strip().lower()
    if not text or text == "this week":
        return monday_of(today)
    return monday_of(parse_date(resolve(text, today)))


def monday_of(day: date) -> date:
    return day - timedelta(days=(weekday_index(day) + 6) % 7)


def week_dates(monday: date) -> list[date]:
    return [monday + timedelta(days=offset) for offset in range(7)]


def parse_date(value: str, field_name: str = "date") -> date:
    """Strict ``YYYY-MM-DD`` parse.

    Raises:
        ValidationError: if *value* is not a real calendar date in that format
    """
    if not value:
        raise ValidationError(f"{field_name} is required")
    value = str(value).strip()
    if not _ISO_DATE_RE.match(value):
        raise ValidationError(f"Invalid {field_name} '{value}'. Use YYYY-MM-DD")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} '{value}'. Use YYYY-MM-DD") from None


def format_date(value: str | date | None) -> str:
    """Spoken form of a date, e.g. "Monday, June 10"."""
    if not value:
        return "Unknown date"
    if isinstance(value, str):
        try:
            value = datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            return value
    return f"{value.strftime('%A, %B')} {value.day}"


def week_label(monday: date) -> str:
    """Human label for a Monday-start week, e.g. "Jun 10 - 16, 2024"."""
    sunday = monday + timedelta(days=6)
    start_month, end_month = monday.strftime("%b"), sunday.strftime("%b")

    if monday.year != sunday.year:
        return f"{start_month} {monday.day}, {monday.year} - {end_month} {sunday.day}, {sunday.year}"
    if start_month == end_month:
        return f"{start_month} {monday.day} - {sunday.day}, {monday.year}"
    return f"{start_month} {monday.day} - {end_month} {sunday.day}, {monday.year}"
