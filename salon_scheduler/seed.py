"""Demo appointments spread over the current week, used when SEED_DEMO_DATA is on."""
from __future__ import annotations

from datetime import date, datetime

from .dates import monday_of, week_dates
from .models import Appointment

# (day offset from Monday, time, customer, service, phone)
_DEMO = [
    (0, "10:00", "Sarah Johnson", "Gel Manicure", "(555) 123-4567"),
    (2, "14:00", "Mike Roberts", "Deluxe Pedicure", "(555) 234-5678"),
    (4, "11:00", "Emma Davis", "Gel X Extensions", "(555) 345-6789"),
    (5, "15:00", "David Wilson", "Russian Manicure", "(555) 456-7890"),
    (1, "13:00", "Olivia Smith", "Madison Valgari Luxurious Pedicure", "(555) 567-8901"),
    (3, "16:00", "Jennifer Lee", "Lash Lift & Tint", "(555) 678-9012"),
    (6, "12:00", "Alex Chen", "Brow Lamination", "(555) 789-0123"),
]


def demo_appointments(reference: date | datetime) -> list[Appointment]:
    if isinstance(reference, datetime):
        reference = reference.date()
    days = week_dates(monday_of(reference))

    return [
        Appointment(
            id=idx,
            date=days[offset].strftime("%Y-%m-%d"),
            time=time,
            customer_name=name,
            phone_number=phone_number,
            service=service,
        )
        for idx, (offset, time, name, service, phone_number) in enumerate(_DEMO, start=1)
    ]
