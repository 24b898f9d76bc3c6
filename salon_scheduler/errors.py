from __future__ import annotations

from typing import Any


class SchedulingError(RuntimeError):
    """Base class for every recoverable engine failure."""

    code = "error"


class ConflictError(SchedulingError):
    """The requested (date, time) slot is already taken."""

    code = "conflict"

    def __init__(self, date: str, time: str, holder_id: int | None = None):
        super().__init__(f"Slot {time} on {date} is already booked")
        self.date = date
        self.time = time
        self.holder_id = holder_id


class NotFoundError(SchedulingError):
    code = "not_found"

    def __init__(self, message: str, **query: Any):
        super().__init__(message)
        # echo of the lookup parameters, surfaced back to the caller
        self.query = query


class AmbiguousMatchError(SchedulingError):
    """More than one appointment fits an under-specified cancellation."""

    code = "ambiguous"

    def __init__(self, message: str, candidates: list):
        super().__init__(message)
        self.candidates = candidates


class NoChangeError(SchedulingError):
    code = "no_change"


class ValidationError(SchedulingError):
    code = "validation"
