# clinic/routes/auth/schemas.py

from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import Optional
from uuid import UUID

from clinic.models.all_models import UserRole

# ================================
# REQUEST SCHEMAS
# ================================

class UserSignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=200)

class UserLoginRequest(BaseModel):
    email: EmailStr
    password: str

class RefreshTokenRequest(BaseModel):
    refresh_token: str

# ================================
# RESPONSE SCHEMAS
# ================================

class ProfileResponse(BaseModel):
    id: UUID
    user_id: UUID
    email: str
    full_name: Optional[str] = None
    role: UserRole
    phone: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class UserLoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    profile: Optional[ProfileResponse] = None
    message: str

class CurrentUserResponse(BaseModel):
    id: UUID
    email: str
    is_active: bool
    last_login_at: Optional[datetime] = None
    profile: Optional[ProfileResponse] = None

    class Config:
        from_attributes = True
