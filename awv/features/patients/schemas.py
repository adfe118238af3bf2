# Patient Management Feature - Schemas

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Literal
from datetime import date, datetime

from awv.features.patients.models import Gender, Address, Insurance, MedicalHistory
from awv.shared.schemas import Pagination


PatientSortField = Literal["last_name", "first_name", "date_of_birth", "created_at"]


def _check_date_of_birth(v: Optional[date]) -> Optional[date]:
    if v is not None and v > date.today():
        raise ValueError('Date of birth cannot be in the future')
    return v


def _strip_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError('Name cannot be empty')
    return v


# ============== Request Schemas ==============

class CreatePatientRequest(BaseModel):
    """Request schema for creating a new patient."""

    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    date_of_birth: date
    gender: Gender
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    medical_record_number: Optional[str] = Field(None, max_length=50)
    insurance: Optional[Insurance] = None
    medical_history: Optional[MedicalHistory] = None
    primary_care_provider_id: Optional[str] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return _strip_name(v)

    @field_validator('date_of_birth')
    @classmethod
    def check_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        return _check_date_of_birth(v)

    @field_validator('medical_record_number')
    @classmethod
    def blank_mrn_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
        return v or None


class UpdatePatientRequest(BaseModel):
    """Request schema for updating patient information. All fields optional."""

    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[Address] = None
    medical_record_number: Optional[str] = Field(None, max_length=50)
    insurance: Optional[Insurance] = None
    medical_history: Optional[MedicalHistory] = None
    primary_care_provider_id: Optional[str] = None

    @field_validator('first_name', 'last_name')
    @classmethod
    def strip_names(cls, v: Optional[str]) -> Optional[str]:
        return _strip_name(v)

    @field_validator('date_of_birth')
    @classmethod
    def check_date_of_birth(cls, v: Optional[date]) -> Optional[date]:
        return _check_date_of_birth(v)


# ============== Response Schemas ==============

class PatientResponse(BaseModel):
    """Response schema for patient data."""

    id: str
    first_name: str
    last_name: str
    full_name: str
    date_of_birth: date
    age: int
    gender: Gender
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address
    medical_record_number: str
    insurance: Insurance
    medical_history: MedicalHistory
    primary_care_provider_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PatientListResponse(BaseModel):
    """Response schema for list of patients."""

    patients: List[PatientResponse]
    pagination: Pagination


class PatientVisitSummary(BaseModel):
    """A visit as listed in a patient's history."""

    id: str
    scheduled_date: datetime
    status: str
    visit_type: str
    template_id: str
    provider_id: str
    completed_at: Optional[datetime] = None


class PatientVisitsResponse(BaseModel):
    patient_id: str
    visits: List[PatientVisitSummary]
