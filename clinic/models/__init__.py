from .all_models import (
    Base, User, Profile, Patient, Appointment, CalendarPermission,
    InventoryCategory, InventoryItem, InventoryTransaction,
    UserRole, AppointmentStatus, TransactionType
)

__all__ = [
    "Base", "User", "Profile", "Patient", "Appointment", "CalendarPermission",
    "InventoryCategory", "InventoryItem", "InventoryTransaction",
    "UserRole", "AppointmentStatus", "TransactionType",
]
