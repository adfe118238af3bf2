# Patient Management Feature - Router

from fastapi import APIRouter, Depends, Query, status
from typing import Optional, Literal
from awv.features.patients.schemas import (
    CreatePatientRequest,
    UpdatePatientRequest,
    PatientResponse,
    PatientListResponse,
    PatientVisitSummary,
    PatientVisitsResponse,
    PatientSortField,
)
from awv.features.patients.service import PatientService
from awv.features.auth.dependencies import get_current_user, require_roles
from awv.features.auth.models import User
from awv.shared.schemas import MessageResponse, Pagination


router = APIRouter(prefix="/patients", tags=["Patients"])


@router.get("", response_model=PatientListResponse)
async def list_patients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    sort_field: PatientSortField = "last_name",
    sort_order: Literal["asc", "desc"] = "asc",
    current_user: User = Depends(get_current_user),
):
    """
    List patients with search and pagination.

    - **search**: matches first name, last name, email or MRN
    """
    patients, total = await PatientService.list_patients(
        page=page,
        limit=limit,
        search=search,
        sort_field=sort_field,
        direction=1 if sort_order == "asc" else -1,
    )
    return PatientListResponse(
        patients=[PatientService.patient_to_response(p) for p in patients],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    request: CreatePatientRequest,
    current_user: User = Depends(require_roles("admin", "provider", "staff")),
):
    """
    Create a new patient.

    A medical record number is generated when none is supplied.
    """
    patient = await PatientService.create_patient(request)
    return PatientService.patient_to_response(patient)


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    current_user: User = Depends(get_current_user),
):
    """Get a specific patient, including their computed age."""
    patient = await PatientService.get_patient(patient_id)
    return PatientService.patient_to_response(patient)


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    request: UpdatePatientRequest,
    current_user: User = Depends(require_roles("admin", "provider", "staff")),
):
    """Update a patient's information."""
    patient = await PatientService.update_patient(patient_id, request)
    return PatientService.patient_to_response(patient)


@router.delete("/{patient_id}", response_model=MessageResponse)
async def delete_patient(
    patient_id: str,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """
    Permanently delete a patient from the database.

    WARNING: This action cannot be undone. The patient's visits are deleted as well.
    """
    deleted_visits = await PatientService.delete_patient(patient_id)
    return MessageResponse(message=f"Patient deleted along with {deleted_visits} visit(s)")


@router.get("/{patient_id}/visits", response_model=PatientVisitsResponse)
async def get_patient_visits(
    patient_id: str,
    current_user: User = Depends(get_current_user),
):
    """Visit history for a patient, newest first."""
    visits = await PatientService.get_patient_visits(patient_id)
    return PatientVisitsResponse(
        patient_id=patient_id,
        visits=[
            PatientVisitSummary(
                id=str(v.id),
                scheduled_date=v.scheduled_date,
                status=v.status,
                visit_type=v.visit_type,
                template_id=v.template_id,
                provider_id=v.provider_id,
                completed_at=v.completed_at,
            )
            for v in visits
        ],
    )
