# clinic/services/views.py
"""
Read-only views derived from lists that were already fetched from the store.

Every function here is pure: it takes rows (ORM objects or anything with
the same attributes) and returns a new list, so each GET recomputes them
from the latest snapshot.
"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from clinic.models.all_models import AppointmentStatus, clinic_today

CLOSED_STATUSES = {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}

def _contains(value: Optional[str], needle: str) -> bool:
    return bool(value) and needle in value.lower()

def _normalize(query: Optional[str]) -> str:
    return (query or "").strip().lower()

def search_patients(patients: Iterable, query: Optional[str]) -> List:
    """Case-insensitive match on full name, JMBG, phone and email."""
    patients = list(patients)
    needle = _normalize(query)
    if not needle:
        return patients
    return [
        p for p in patients
        if _contains(f"{p.first_name} {p.last_name}", needle)
        or _contains(p.jmbg, needle)
        or _contains(p.phone, needle)
        or _contains(p.email, needle)
    ]

def search_items(items: Iterable, query: Optional[str]) -> List:
    """Case-insensitive match on item name, category name and supplier."""
    items = list(items)
    needle = _normalize(query)
    if not needle:
        return items
    return [
        item for item in items
        if _contains(item.name, needle)
        or _contains(item.category.name if item.category else None, needle)
        or _contains(item.supplier, needle)
    ]

def low_stock_items(items: Iterable) -> List:
    return [item for item in items if item.current_stock <= item.min_stock_level]

def expiring_soon_items(items: Iterable, today: Optional[date] = None, days: int = 30) -> List:
    # Already-expired items stay in the list.
    today = today or clinic_today()
    cutoff = today + timedelta(days=days)
    return [item for item in items if item.expiry_date is not None and item.expiry_date <= cutoff]

def stock_status(item) -> str:
    if item.current_stock == 0:
        return "out_of_stock"
    if item.current_stock <= item.min_stock_level:
        return "low_stock"
    return "in_stock"

def todays_appointments(appointments: Iterable, selected_date: date) -> List:
    return [a for a in appointments if a.appointment_date == selected_date]

def upcoming_appointments(appointments: Iterable, selected_date: date) -> List:
    return [
        a for a in appointments
        if a.appointment_date > selected_date
        and AppointmentStatus(a.status) not in CLOSED_STATUSES
    ]

def patient_counts(patients: Iterable) -> dict:
    patients = list(patients)
    return {
        "total": len(patients),
        "with_allergies": sum(1 for p in patients if p.allergies),
        "with_chronic_conditions": sum(1 for p in patients if p.chronic_conditions),
    }
