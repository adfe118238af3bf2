# Visits Feature - Schemas

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal, Any, Dict
from datetime import date, datetime, timezone

from awv.features.visits.models import VisitStatus
from awv.features.assessments.models import HealthPlan
from awv.features.templates.models import Priority
from awv.shared.schemas import Pagination


VisitSortField = Literal["scheduled_date", "created_at", "status"]


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Store datetimes as naive UTC, the way MongoDB hands them back."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


# ============== Request Schemas ==============

class CreateVisitRequest(BaseModel):
    patient_id: str
    template_id: str
    provider_id: Optional[str] = None
    scheduled_date: datetime
    visit_type: str = "annual-wellness"
    location: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('scheduled_date')
    @classmethod
    def normalize_scheduled_date(cls, v: datetime) -> datetime:
        return naive_utc(v)


class UpdateVisitRequest(BaseModel):
    """Schedule fields and notes; ``status`` goes through the state machine."""

    provider_id: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    visit_type: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[VisitStatus] = None
    cancellation_reason: Optional[str] = None

    @field_validator('scheduled_date')
    @classmethod
    def normalize_scheduled_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return naive_utc(v)


class SaveResponsesRequest(BaseModel):
    responses: Dict[str, Any] = Field(default_factory=dict)
    completed_sections: Optional[List[str]] = None


class CustomRecommendation(BaseModel):
    """A recommendation the provider adds by hand at completion."""

    domain: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)
    priority: Priority = "medium"


class CompleteVisitRequest(BaseModel):
    responses: Dict[str, Any] = Field(default_factory=dict)
    additional_recommendations: List[CustomRecommendation] = Field(default_factory=list)
    summary: Optional[str] = None
    notes: Optional[str] = None


class CancelVisitRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ============== Response Schemas ==============

class PatientSummary(BaseModel):
    id: str
    name: str
    medical_record_number: str
    date_of_birth: date
    age: int
    gender: str


class ProviderSummary(BaseModel):
    id: str
    name: str
    email: str
    title: Optional[str] = None
    specialty: Optional[str] = None


class VisitResponse(BaseModel):
    id: str
    patient_id: str
    provider_id: str
    template_id: str
    template_version: int
    patient_name: Optional[str] = None
    provider_name: Optional[str] = None
    template_name: Optional[str] = None
    scheduled_date: datetime
    visit_type: str
    location: Optional[str] = None
    status: VisitStatus
    responses: Dict[str, Any]
    completed_sections: List[str]
    health_plan: Optional[HealthPlan] = None
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class VisitDetailResponse(VisitResponse):
    patient: Optional[PatientSummary] = None
    provider: Optional[ProviderSummary] = None


class VisitListResponse(BaseModel):
    visits: List[VisitResponse]
    pagination: Pagination
