# clinic/models/all_models.py
from sqlalchemy import (
    Column, String, Boolean, DateTime, ForeignKey, Text, Integer, Numeric, Enum, Date, Time,
    Uuid, text, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
import enum
import uuid
from datetime import datetime
import pytz

from clinic.config import settings

Base = declarative_base()

# Timezone setup
CLINIC_TZ = pytz.timezone(settings.TIMEZONE)

def clinic_now():
    return datetime.now(CLINIC_TZ)

def clinic_today():
    return clinic_now().date()

def _enum_values(enum_cls):
    return [member.value for member in enum_cls]

# Enums
class UserRole(str, enum.Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

class TransactionType(str, enum.Enum):
    IN = "in"
    OUT = "out"
    ADJUSTMENT = "adjustment"

# ================================
# USERS & PROFILES
# ================================

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")

class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, unique=True)
    email = Column(String(255), nullable=False)
    full_name = Column(String(200))
    role = Column(Enum(UserRole, name="user_role", values_callable=_enum_values), nullable=False, default=UserRole.RECEPTIONIST)
    phone = Column(String(30))
    specialization = Column(String(150))
    license_number = Column(String(100))
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    user = relationship("User", back_populates="profile")
    appointments_as_doctor = relationship("Appointment", foreign_keys="Appointment.doctor_id", back_populates="doctor")
    created_appointments = relationship("Appointment", foreign_keys="Appointment.created_by", back_populates="creator")
    inventory_transactions = relationship("InventoryTransaction", back_populates="performer")

# ================================
# PATIENTS
# ================================

class Patient(Base):
    __tablename__ = "patients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    date_of_birth = Column(Date)
    jmbg = Column(String(13))  # National personal identification number
    phone = Column(String(30))
    email = Column(String(255))
    address = Column(Text)
    city = Column(String(100))
    emergency_contact_name = Column(String(200))
    emergency_contact_phone = Column(String(30))
    medical_notes = Column(Text)
    allergies = Column(Text)
    chronic_conditions = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    appointments = relationship("Appointment", back_populates="patient")

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

# ================================
# APPOINTMENTS
# ================================

class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    patient_id = Column(Uuid, ForeignKey("patients.id"), nullable=False)
    doctor_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    created_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    appointment_date = Column(Date, nullable=False)
    appointment_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, default=30, nullable=False)
    status = Column(
        Enum(AppointmentStatus, name="appointment_status", values_callable=_enum_values),
        default=AppointmentStatus.SCHEDULED,
        nullable=False
    )
    reason = Column(Text)
    notes = Column(Text)
    diagnosis = Column(Text)
    treatment = Column(Text)
    next_appointment_needed = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    patient = relationship("Patient", back_populates="appointments")
    doctor = relationship("Profile", foreign_keys=[doctor_id], back_populates="appointments_as_doctor")
    creator = relationship("Profile", foreign_keys=[created_by], back_populates="created_appointments")

class CalendarPermission(Base):
    __tablename__ = "calendar_permissions"
    __table_args__ = (UniqueConstraint("user_id", "doctor_id", name="uq_calendar_permission_user_doctor"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    doctor_id = Column(Uuid, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    can_view = Column(Boolean, default=False, nullable=False)
    can_edit = Column(Boolean, default=False, nullable=False)
    created_by = Column(Uuid, ForeignKey("profiles.id"))
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    user = relationship("Profile", foreign_keys=[user_id])
    doctor = relationship("Profile", foreign_keys=[doctor_id])

# ================================
# INVENTORY
# ================================

class InventoryCategory(Base):
    __tablename__ = "inventory_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    items = relationship("InventoryItem", back_populates="category")

class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    category_id = Column(Uuid, ForeignKey("inventory_categories.id"), nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    unit_of_measure = Column(String(20), default="kom", nullable=False)
    current_stock = Column(Integer, default=0, nullable=False)
    min_stock_level = Column(Integer, default=10, nullable=False)
    unit_price = Column(Numeric(10, 2))
    supplier = Column(String(200))
    expiry_date = Column(Date)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), default=clinic_now, onupdate=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    category = relationship("InventoryCategory", back_populates="items")
    transactions = relationship("InventoryTransaction", back_populates="item")

class InventoryTransaction(Base):
    __tablename__ = "inventory_transactions"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    item_id = Column(Uuid, ForeignKey("inventory_items.id"), nullable=False)
    transaction_type = Column(
        Enum(TransactionType, name="transaction_type", values_callable=_enum_values),
        nullable=False
    )
    quantity = Column(Integer, nullable=False)
    reason = Column(Text)
    performed_by = Column(Uuid, ForeignKey("profiles.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), default=clinic_now, server_default=text("CURRENT_TIMESTAMP"))

    # Relationships
    item = relationship("InventoryItem", back_populates="transactions")
    performer = relationship("Profile", back_populates="inventory_transactions")
