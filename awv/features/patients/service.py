# Patient Management Feature - Service

from typing import Optional, List, Tuple
from datetime import datetime
from pymongo.errors import DuplicateKeyError
from awv.features.patients.models import Patient, Address, Insurance, MedicalHistory
from awv.features.patients.schemas import (
    CreatePatientRequest,
    UpdatePatientRequest,
    PatientResponse,
)
from awv.features.auth.models import User
from awv.core.logging import logger
from awv.shared.exceptions import NotFoundException, ConflictException, BadRequestException, parse_object_id
from awv.shared.schemas import regex_filter


_NESTED_DEFAULTS = {
    "address": Address,
    "insurance": Insurance,
    "medical_history": MedicalHistory,
}
_REQUIRED_FIELDS = {"first_name", "last_name", "date_of_birth", "gender"}
_MRN_ATTEMPTS = 5
DUPLICATE_MRN = "A patient with this medical record number already exists"


class PatientService:
    """Service class for patient management operations."""

    @staticmethod
    async def generate_medical_record_number() -> str:
        """Generate the next free medical record number (e.g., MRN000001)."""
        next_number = await Patient.find_all().count() + 1
        while True:
            candidate = f"MRN{next_number:06d}"
            if not await Patient.find_one(Patient.medical_record_number == candidate):
                return candidate
            next_number += 1

    @staticmethod
    async def _ensure_mrn_free(mrn: str, exclude_id=None) -> None:
        existing = await Patient.find_one(Patient.medical_record_number == mrn)
        if existing and existing.id != exclude_id:
            raise ConflictException(DUPLICATE_MRN)

    @staticmethod
    async def _ensure_provider_exists(provider_id: Optional[str]) -> None:
        if not provider_id:
            return
        provider = await User.get(parse_object_id(provider_id, "provider"))
        if not provider:
            raise BadRequestException("Primary care provider not found")

    @staticmethod
    async def create_patient(request: CreatePatientRequest) -> Patient:
        """
        Create a new patient record.

        The unique index on the medical record number settles concurrent
        creates: a supplied number that was taken meanwhile is a 409, a
        generated one is regenerated.
        """
        if request.medical_record_number:
            await PatientService._ensure_mrn_free(request.medical_record_number)

        await PatientService._ensure_provider_exists(request.primary_care_provider_id)

        patient = Patient(
            medical_record_number=request.medical_record_number or "",
            first_name=request.first_name,
            last_name=request.last_name,
            date_of_birth=request.date_of_birth,
            gender=request.gender,
            email=request.email,
            phone=request.phone,
            address=request.address or Address(),
            insurance=request.insurance or Insurance(),
            medical_history=request.medical_history or MedicalHistory(),
            primary_care_provider_id=request.primary_care_provider_id,
        )

        for attempt in range(_MRN_ATTEMPTS):
            if not request.medical_record_number:
                patient.medical_record_number = await PatientService.generate_medical_record_number()
            try:
                await patient.insert()
                break
            except DuplicateKeyError:
                if request.medical_record_number or attempt == _MRN_ATTEMPTS - 1:
                    raise ConflictException(DUPLICATE_MRN)
                logger.warning(f"Generated {patient.medical_record_number} was taken concurrently; retrying")

        logger.info(f"Created patient {patient.medical_record_number} ({patient.full_name})")
        return patient

    @staticmethod
    async def list_patients(
        page: int,
        limit: int,
        search: Optional[str] = None,
        sort_field: str = "last_name",
        direction: int = 1,
    ) -> Tuple[List[Patient], int]:
        """Return one page of patients and the total match count."""
        query = {}
        if search:
            query.update(regex_filter(["first_name", "last_name", "email", "medical_record_number"], search))

        total = await Patient.find(query).count()
        patients = await (
            Patient.find(query)
            .sort((sort_field, direction), ("_id", direction))
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list()
        )
        return patients, total

    @staticmethod
    async def get_patient(patient_id: str) -> Patient:
        """Get a patient by their MongoDB _id."""
        patient = await Patient.get(parse_object_id(patient_id, "patient"))
        if not patient:
            raise NotFoundException("Patient not found")
        return patient

    @staticmethod
    async def update_patient(patient_id: str, request: UpdatePatientRequest) -> Patient:
        """Update patient information. Only fields sent in the request change."""
        patient = await PatientService.get_patient(patient_id)

        changed = []
        for field in request.model_fields_set:
            value = getattr(request, field)

            if value is None and field in _REQUIRED_FIELDS:
                continue
            if value is None and field in _NESTED_DEFAULTS:
                value = _NESTED_DEFAULTS[field]()

            if field == "medical_record_number":
                if not value or not value.strip():
                    continue
                value = value.strip()
                await PatientService._ensure_mrn_free(value, exclude_id=patient.id)
            elif field == "primary_care_provider_id":
                await PatientService._ensure_provider_exists(value)

            setattr(patient, field, value)
            changed.append(field)

        patient.updated_at = datetime.utcnow()
        try:
            await patient.save()
        except DuplicateKeyError:
            raise ConflictException(DUPLICATE_MRN)

        logger.info(f"Updated patient {patient.medical_record_number}: {', '.join(sorted(changed)) or 'no changes'}")
        return patient

    @staticmethod
    async def delete_patient(patient_id: str) -> int:
        """
        Permanently delete a patient and all of their visits.

        Returns:
            int: number of visits removed with the patient
        """
        from awv.features.visits.models import Visit

        patient = await PatientService.get_patient(patient_id)

        logger.info(f"Starting cascade deletion for patient {patient.medical_record_number}")

        result = await Visit.find(Visit.patient_id == str(patient.id)).delete()
        deleted_visits = result.deleted_count if result else 0
        logger.info(f"Deleted {deleted_visits} visits for patient {patient.medical_record_number}")

        await patient.delete()
        logger.info(f"Deleted patient {patient.medical_record_number}")
        return deleted_visits

    @staticmethod
    async def get_patient_visits(patient_id: str) -> list:
        """Visit history for a patient, newest first."""
        from awv.features.visits.models import Visit

        patient = await PatientService.get_patient(patient_id)
        return await Visit.find(Visit.patient_id == str(patient.id)).sort("-scheduled_date").to_list()

    @staticmethod
    def patient_to_response(patient: Patient) -> PatientResponse:
        """Convert Patient document to response schema."""
        return PatientResponse(
            id=str(patient.id),
            first_name=patient.first_name,
            last_name=patient.last_name,
            full_name=patient.full_name,
            date_of_birth=patient.date_of_birth,
            age=patient.age(),
            gender=patient.gender,
            email=patient.email,
            phone=patient.phone,
            address=patient.address,
            medical_record_number=patient.medical_record_number,
            insurance=patient.insurance,
            medical_history=patient.medical_history,
            primary_care_provider_id=patient.primary_care_provider_id,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )
