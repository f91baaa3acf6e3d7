# clinic/routes/admin/schemas.py

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional
from uuid import UUID

from clinic.models.all_models import UserRole
from clinic.routes.auth.schemas import ProfileResponse

class StaffUserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)
    role: UserRole = UserRole.RECEPTIONIST
    phone: Optional[str] = Field(None, max_length=30)
    specialization: Optional[str] = Field(None, max_length=150)
    license_number: Optional[str] = Field(None, max_length=100)

    @field_validator('phone', 'specialization', 'license_number', mode='before')
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class ProfileStatusResponse(BaseModel):
    message: str
    profile: ProfileResponse

class PermissionCreate(BaseModel):
    user_id: UUID
    doctor_id: UUID
    can_view: bool = False
    can_edit: bool = False

class PersonRef(BaseModel):
    full_name: Optional[str] = None
    email: str

    class Config:
        from_attributes = True

class PermissionResponse(BaseModel):
    id: UUID
    user_id: UUID
    doctor_id: UUID
    can_view: bool
    can_edit: bool
    created_at: Optional[datetime] = None
    user: Optional[PersonRef] = None
    doctor: Optional[PersonRef] = None

    class Config:
        from_attributes = True
