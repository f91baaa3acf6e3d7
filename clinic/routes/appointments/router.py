# clinic/routes/appointments/router.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session, joinedload
from typing import Optional
from datetime import date
import uuid
import logging

from clinic.database import get_db
from clinic.models.all_models import (
    Appointment, Patient, Profile, UserRole, clinic_today
)
from clinic.routes.appointments.schemas import (
    AppointmentCreate, AppointmentUpdate, AppointmentStatusUpdate,
    AppointmentResponse, AppointmentOverview, AppointmentFormOptions,
    PatientOption, DoctorOption
)
from clinic.services.scheduling import StatusTransitionError, check_status_change
from clinic.services.views import todays_appointments, upcoming_appointments
from clinic.utils.auth import AuthContext, require_staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])

def _get_appointment_or_404(db: Session, appointment_id: uuid.UUID) -> Appointment:
    appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
    if not appointment:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Appointment not found"
        )
    return appointment

def _serialize(appointments):
    return [AppointmentResponse.model_validate(a) for a in appointments]

def _check_references(db: Session, patient_id: uuid.UUID, doctor_id: uuid.UUID) -> None:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found"
        )

    doctor = db.query(Profile).filter(Profile.id == doctor_id).first()
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

@router.get("", response_model=AppointmentOverview)
async def get_appointments(
    selected_date: Optional[date] = None,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    All appointments ordered by date and time, with the day view and the
    upcoming list for `selected_date` (defaults to today).
    """
    selected_date = selected_date or clinic_today()
    try:
        rows = db.query(Appointment).options(
            joinedload(Appointment.patient),
            joinedload(Appointment.doctor)
        ).order_by(
            Appointment.appointment_date,
            Appointment.appointment_time
        ).all()
    except Exception as e:
        logger.exception("Error fetching appointments")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving appointments: {str(e)}"
        )

    # Rows whose patient or doctor can no longer be joined are not shown
    appointments = [a for a in rows if a.patient is not None and a.doctor is not None]

    return AppointmentOverview(
        selected_date=selected_date,
        appointments=_serialize(appointments),
        today=_serialize(todays_appointments(appointments, selected_date)),
        upcoming=_serialize(upcoming_appointments(appointments, selected_date))
    )

@router.get("/options", response_model=AppointmentFormOptions)
async def get_form_options(
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Active patients and active doctors for the scheduling form dropdowns.
    """
    try:
        patients = db.query(Patient).filter(
            Patient.is_active == True
        ).order_by(Patient.first_name).all()

        doctors = db.query(Profile).filter(
            Profile.role == UserRole.DOCTOR,
            Profile.is_active == True
        ).order_by(Profile.full_name).all()
    except Exception as e:
        logger.exception("Error fetching appointment form options")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving form options: {str(e)}"
        )

    return AppointmentFormOptions(
        patients=[PatientOption.model_validate(p) for p in patients],
        doctors=[DoctorOption.model_validate(d) for d in doctors]
    )

@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_data: AppointmentCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Schedule a new appointment. New appointments start as `scheduled`.
    """
    try:
        _check_references(db, appointment_data.patient_id, appointment_data.doctor_id)

        db_appointment = Appointment(
            **appointment_data.model_dump(),
            created_by=ctx.profile.id
        )

        db.add(db_appointment)
        db.commit()
        db.refresh(db_appointment)

        return db_appointment

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error creating appointment")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating appointment: {str(e)}"
        )

@router.put("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: uuid.UUID,
    appointment_data: AppointmentUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Update an existing appointment
    """
    try:
        appointment = _get_appointment_or_404(db, appointment_id)
        _check_references(db, appointment_data.patient_id, appointment_data.doctor_id)

        for field, value in appointment_data.model_dump(exclude_unset=True).items():
            setattr(appointment, field, value)

        db.commit()
        db.refresh(appointment)

        return appointment

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error updating appointment %s", appointment_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating appointment: {str(e)}"
        )

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: uuid.UUID,
    status_data: AppointmentStatusUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Set the appointment status. Any status is accepted unless strict
    transitions are enabled in settings.
    """
    try:
        appointment = _get_appointment_or_404(db, appointment_id)
        appointment.status = check_status_change(appointment.status, status_data.status)

        db.commit()
        db.refresh(appointment)

        return appointment

    except HTTPException:
        raise
    except StatusTransitionError as e:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        db.rollback()
        logger.exception("Error updating status of appointment %s", appointment_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating appointment status: {str(e)}"
        )

@router.delete("/{appointment_id}")
async def delete_appointment(
    appointment_id: uuid.UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Delete an appointment
    """
    try:
        appointment = _get_appointment_or_404(db, appointment_id)

        db.delete(appointment)
        db.commit()

        return {"message": "Appointment deleted successfully"}

    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error deleting appointment %s", appointment_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error deleting appointment: {str(e)}"
        )
