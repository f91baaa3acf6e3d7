from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from clinic.database import get_db
from clinic.models.all_models import Patient
from clinic.routes.patients.patient_schemas import (
    PatientCreate, PatientUpdate, PatientResponse, PatientListResponse, PatientSummary
)
from clinic.services.views import search_patients, patient_counts
from clinic.utils.auth import AuthContext, require_staff

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/patients", tags=["patients"])

def _get_patient_or_404(db: Session, patient_id: UUID) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found"
        )
    return patient

@router.get("", response_model=PatientListResponse)
async def get_patients(
    search: Optional[str] = Query(None, description="Search by name, JMBG, phone or email"),
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Active patient roster, newest first, with the summary cards.
    """
    try:
        patients = db.query(Patient).filter(
            Patient.is_active == True
        ).order_by(Patient.created_at.desc()).all()
    except Exception as e:
        logger.exception("Error fetching patients")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error retrieving patients: {str(e)}"
        )

    return PatientListResponse(
        patients=[PatientResponse.model_validate(p) for p in search_patients(patients, search)],
        summary=PatientSummary(**patient_counts(patients)),
        search=search
    )

@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Fetch one patient by id, including soft-deleted records.
    """
    return _get_patient_or_404(db, patient_id)

@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    patient_data: PatientCreate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    try:
        patient = Patient(**patient_data.model_dump())
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient
    except Exception as e:
        db.rollback()
        logger.exception("Error creating patient")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating patient: {str(e)}"
        )

@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: UUID,
    patient_data: PatientUpdate,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Replace the patient's form fields.
    """
    try:
        patient = _get_patient_or_404(db, patient_id)

        for field, value in patient_data.model_dump().items():
            setattr(patient, field, value)

        db.commit()
        db.refresh(patient)
        return patient
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error updating patient %s", patient_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating patient: {str(e)}"
        )

@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: UUID,
    db: Session = Depends(get_db),
    ctx: AuthContext = Depends(require_staff)
):
    """
    Soft delete: the patient leaves the active list but the record is kept.
    """
    try:
        patient = _get_patient_or_404(db, patient_id)
        patient.is_active = False
        db.commit()

        return {"message": "Patient removed from the active list"}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        logger.exception("Error deactivating patient %s", patient_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error removing patient: {str(e)}"
        )
