from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Appointment(BaseModel):
    id: int
    date: str  # YYYY-MM-DD
    time: str  # HH:MM, one of slots.TIME_SLOTS
    customer_name: str = Field(alias="customerName")
    phone_number: str = Field(alias="phoneNumber")  # caller's formatting kept for display
    service: str
    technician: str | None = None

    model_config = {
        "populate_by_name": True
    }


class Priority(str, Enum):
    normal = "normal"
    urgent = "urgent"


class MessageStatus(str, Enum):
    pending = "pending"
    responded = "responded"


class ManagerMessage(BaseModel):
    id: str
    client_request: str
    reason: str
    priority: Priority = Priority.normal
    created_at: datetime
    status: MessageStatus = MessageStatus.pending
    response: str | None = None
    responded_at: datetime | None = None


# Requests ------------------------------------------------------------------

class CheckAvailabilityRequest(BaseModel):
    date: str | None = None
    time: str | None = None


class BookAppointmentRequest(BaseModel):
    date: str
    time: str
    customer_name: str = Field(alias="customerName")
    phone_number: str = Field(alias="phoneNumber")
    service: str
    technician: str | None = None

    model_config = {
        "populate_by_name": True
    }


class CancelAppointmentRequest(BaseModel):
    phone_number: str
    customer_name: str | None = None
    date: str | None = None
    time: str | None = None


class EditAppointmentRequest(BaseModel):
    phone_number: str
    original_date: str
    original_time: str
    new_date: str | None = None
    new_time: str | None = None
    new_service: str | None = None
    new_technician: str | None = None
    customer_name: str | None = None


class ManagerMessageRequest(BaseModel):
    client_request: str
    reason: str
    priority: Priority | None = None


class ManagerResponseRequest(BaseModel):
    response: str = Field(min_length=1)


# Responses -----------------------------------------------------------------

class Failure(BaseModel):
    """Any rejected request; `error` is the SchedulingError code."""
    success: Literal[False] = False
    error: str
    message: str


class SlotAvailability(BaseModel):
    date: str
    time: str
    available: bool
    message: str


class DayAvailability(BaseModel):
    date: str
    available_slots: list[str]
    message: str


class WeekAvailability(BaseModel):
    week_of: str  # Monday, YYYY-MM-DD
    week_label: str
    availability: dict[str, list[str]]
    message: str


class BookingConfirmed(BaseModel):
    success: Literal[True] = True
    appointment: Appointment
    message: str


class AppointmentCandidate(BaseModel):
    """One of several appointments matching a cancellation request."""
    id: int
    date: str
    formatted_date: str
    time: str
    service: str
    phone_number: str
    customer_name: str
    technician: str | None = None


class CancellationConfirmed(BaseModel):
    success: Literal[True] = True
    cancelled_appointment: Appointment
    match_type: Literal["exact", "partial"]
    message: str


class MultipleAppointments(BaseModel):
    success: Literal[False] = False
    multiple_appointments: Literal[True] = True
    phone_number: str
    customer_name: str | None = None
    appointments: list[AppointmentCandidate]
    message: str


class CancellationNotFound(BaseModel):
    success: Literal[False] = False
    error: str = "not_found"
    phone_number: str
    normalized_phone: str
    customer_name: str | None = None
    date: str | None = None
    time: str | None = None
    message: str


class EditConfirmed(BaseModel):
    success: Literal[True] = True
    original_appointment: Appointment
    updated_appointment: Appointment
    changes_summary: list[str]
    message: str


class MessageSent(BaseModel):
    success: Literal[True] = True
    message_id: str
    status: Literal["sent"] = "sent"
    message: str


class PendingMessages(BaseModel):
    pending_count: int
    messages: list[ManagerMessage]


class DayAppointments(BaseModel):
    date: str
    appointments: list[Appointment]
    message: str
