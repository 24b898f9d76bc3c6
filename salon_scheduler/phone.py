"""Phone-number matching used to find a caller's appointments.

Names collide, phone numbers rarely do, so the phone is the lookup key.
Callers often drop the area code or say the number differently, hence
the partial tier on the last seven digits.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Sequence

from .models import Appointment

PARTIAL_DIGITS = 7

_NON_DIGIT_RE = re.compile(r"\D")

MatchType = Literal["exact", "partial", "none"]


@dataclass(frozen=True)
class PhoneMatch:
    match_type: MatchType
    matches: list[Appointment] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.matches)


def normalize(phone: str | None) -> str:
    return _NON_DIGIT_RE.sub("", phone or "")


def find_candidates(pool: Sequence[Appointment], query: str) -> PhoneMatch:
    """Exact digit match first, then the last-seven-digit suffix.

    Queries shorter than seven digits never match partially.
    """
    digits = normalize(query)
    if not digits:
        return PhoneMatch("none")

    exact = [appt for appt in pool if normalize(appt.phone_number) == digits]
    if exact:
        return PhoneMatch("exact", exact)

    if len(digits) < PARTIAL_DIGITS:
        return PhoneMatch("none")

    suffix = digits[-PARTIAL_DIGITS:]
    partial = [appt for appt in pool if normalize(appt.phone_number)[-PARTIAL_DIGITS:] == suffix]
    if partial:
        return PhoneMatch("partial", partial)
    return PhoneMatch("none")
