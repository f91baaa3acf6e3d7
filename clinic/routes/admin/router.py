# clinic/routes/admin/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload
from typing import List
from uuid import UUID
import logging

from clinic.database import get_db
from clinic.models.all_models import User, Profile, CalendarPermission, UserRole
from clinic.routes.admin.schemas import (
    StaffUserCreate, ProfileStatusResponse, PermissionCreate, PermissionResponse
)
from clinic.routes.auth.schemas import ProfileResponse
from clinic.utils.auth import AuthContext, require_admin, hash_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

# ================================
# STAFF PROFILES
# ================================

@router.get("/profiles", response_model=List[ProfileResponse])
async def get_profiles(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    """
    All staff profiles, newest first (Admin only)
    """
    try:
        return db.query(Profile).order_by(Profile.created_at.desc()).all()
    except Exception as e:
        logger.exception("Error fetching profiles")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving profiles: {str(e)}"
        )

@router.post("/users", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_staff_user(
    user_data: StaffUserCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    """
    Create a login account and its staff profile in one step (Admin only)
    """
    email = user_data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered"
        )

    try:
        new_user = User(email=email, password=hash_password(user_data.password))
        profile = Profile(
            email=email,
            full_name=user_data.full_name,
            role=user_data.role,
            phone=user_data.phone,
            specialization=user_data.specialization,
            license_number=user_data.license_number
        )
        new_user.profile = profile

        db.add(new_user)
        db.commit()
        db.refresh(profile)

        logger.info("Admin %s created %s account %s", ctx.user.email, profile.role.value, email)
        return profile
    except Exception as e:
        db.rollback()
        logger.exception("Error creating staff user %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating user: {str(e)}"
        )

@router.patch("/profiles/{profile_id}/status", response_model=ProfileStatusResponse)
async def toggle_profile_status(
    profile_id: UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    """
    Flip a profile between active and inactive (Admin only)
    """
    profile = db.query(Profile).filter(Profile.id == profile_id).first()
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found"
        )

    try:
        profile.is_active = not profile.is_active
        db.commit()
        db.refresh(profile)
    except Exception as e:
        db.rollback()
        logger.exception("Error toggling profile %s", profile_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error changing user status: {str(e)}"
        )

    state = "activated" if profile.is_active else "deactivated"
    return ProfileStatusResponse(
        message=f"User {state} successfully",
        profile=ProfileResponse.model_validate(profile)
    )

# ================================
# CALENDAR PERMISSIONS
# ================================

@router.get("/permissions", response_model=List[PermissionResponse])
async def get_permissions(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    try:
        return db.query(CalendarPermission).options(
            joinedload(CalendarPermission.user),
            joinedload(CalendarPermission.doctor)
        ).order_by(CalendarPermission.created_at.desc()).all()
    except Exception as e:
        logger.exception("Error fetching calendar permissions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving permissions: {str(e)}"
        )

@router.post("/permissions", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    permission_data: PermissionCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    """
    Grant a staff member view/edit rights on a doctor's calendar (Admin only)
    """
    grantee = db.query(Profile).filter(Profile.id == permission_data.user_id).first()
    if not grantee:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    doctor = db.query(Profile).filter(Profile.id == permission_data.doctor_id).first()
    if not doctor:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Doctor not found"
        )
    if doctor.role != UserRole.DOCTOR:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Specified profile is not a doctor"
        )

    existing = db.query(CalendarPermission).filter(
        CalendarPermission.user_id == grantee.id,
        CalendarPermission.doctor_id == doctor.id
    ).first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Permission for this user and doctor already exists"
        )

    try:
        permission = CalendarPermission(
            **permission_data.model_dump(),
            created_by=ctx.profile.id
        )
        db.add(permission)
        db.commit()
        db.refresh(permission)
        return permission
    except Exception as e:
        db.rollback()
        logger.exception("Error creating calendar permission")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating permission: {str(e)}"
        )

@router.delete("/permissions/{permission_id}")
async def delete_permission(
    permission_id: UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_admin)
):
    permission = db.query(CalendarPermission).filter(CalendarPermission.id == permission_id).first()
    if not permission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Permission not found"
        )

    try:
        db.delete(permission)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.exception("Error deleting calendar permission %s", permission_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting permission: {str(e)}"
        )

    return {"message": "Permission deleted successfully"}
