# clinic/routes/dashboard/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy import func
from datetime import date
import logging

from clinic.database import get_db
from clinic.models.all_models import (
    Appointment, Patient, InventoryItem, AppointmentStatus, UserRole, clinic_today
)
from clinic.routes.auth.schemas import ProfileResponse
from clinic.utils.auth import AuthContext, require_staff, has_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

class DashboardStats(BaseModel):
    today: date
    today_appointments: int
    total_patients: int
    low_stock_items: int
    pending_appointments: int
    is_admin: bool
    profile: ProfileResponse

@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Counts for the dashboard cards, plus the signed-in profile.
    """
    today = clinic_today()
    try:
        today_appointments = db.query(func.count(Appointment.id)).filter(
            Appointment.appointment_date == today
        ).scalar()
        total_patients = db.query(func.count(Patient.id)).filter(
            Patient.is_active == True
        ).scalar()
        low_stock_items = db.query(func.count(InventoryItem.id)).filter(
            InventoryItem.current_stock <= InventoryItem.min_stock_level
        ).scalar()
        pending_appointments = db.query(func.count(Appointment.id)).filter(
            Appointment.status == AppointmentStatus.SCHEDULED
        ).scalar()
    except Exception as e:
        logger.exception("Error fetching dashboard stats")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving dashboard stats: {str(e)}"
        )

    return DashboardStats(
        today=today,
        today_appointments=today_appointments or 0,
        total_patients=total_patients or 0,
        low_stock_items=low_stock_items or 0,
        pending_appointments=pending_appointments or 0,
        is_admin=has_role(ctx.profile, UserRole.ADMIN),
        profile=ProfileResponse.model_validate(ctx.profile)
    )
