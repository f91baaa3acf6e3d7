# clinic/routes/appointments/schemas.py

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import date, time, datetime
from uuid import UUID

from clinic.models.all_models import AppointmentStatus

class AppointmentBase(BaseModel):
    patient_id: UUID
    doctor_id: UUID
    appointment_date: date
    appointment_time: time
    duration_minutes: int = Field(30, ge=5, le=480)
    reason: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('reason', 'notes', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class AppointmentCreate(AppointmentBase):
    pass

class AppointmentUpdate(AppointmentBase):
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    next_appointment_needed: Optional[bool] = None

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class PatientOption(BaseModel):
    id: UUID
    first_name: str
    last_name: str

    class Config:
        from_attributes = True

class DoctorOption(BaseModel):
    id: UUID
    full_name: Optional[str] = None
    specialization: Optional[str] = None

    class Config:
        from_attributes = True

class AppointmentResponse(AppointmentBase):
    id: UUID
    status: AppointmentStatus
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    next_appointment_needed: Optional[bool] = False
    created_by: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[PatientOption] = None
    doctor: Optional[DoctorOption] = None

    class Config:
        from_attributes = True

class AppointmentOverview(BaseModel):
    selected_date: date
    appointments: List[AppointmentResponse]
    today: List[AppointmentResponse]
    upcoming: List[AppointmentResponse]

class AppointmentFormOptions(BaseModel):
    patients: List[PatientOption]
    doctors: List[DoctorOption]
