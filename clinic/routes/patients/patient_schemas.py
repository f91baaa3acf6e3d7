from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
import re

OPTIONAL_TEXT_FIELDS = (
    'date_of_birth', 'jmbg', 'phone', 'email', 'address', 'city',
    'emergency_contact_name', 'emergency_contact_phone',
    'medical_notes', 'allergies', 'chronic_conditions'
)

class PatientBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    date_of_birth: Optional[date] = None
    jmbg: Optional[str] = Field(None, max_length=13)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    emergency_contact_name: Optional[str] = Field(None, max_length=200)
    emergency_contact_phone: Optional[str] = Field(None, max_length=30)
    medical_notes: Optional[str] = None
    allergies: Optional[str] = None
    chronic_conditions: Optional[str] = None

    @field_validator(*OPTIONAL_TEXT_FIELDS, mode='before')
    @classmethod
    def blank_to_none(cls, v):
        # Empty form inputs are stored as NULL
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('jmbg')
    @classmethod
    def validate_jmbg(cls, v):
        if v is not None and not re.fullmatch(r'\d{13}', v):
            raise ValueError('JMBG must be exactly 13 digits')
        return v

class PatientCreate(PatientBase):
    pass

class PatientUpdate(PatientBase):
    pass

class PatientResponse(PatientBase):
    id: UUID
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class PatientSummary(BaseModel):
    total: int
    with_allergies: int
    with_chronic_conditions: int

class PatientListResponse(BaseModel):
    patients: List[PatientResponse]
    summary: PatientSummary
    search: Optional[str] = None
