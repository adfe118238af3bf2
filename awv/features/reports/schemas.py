# Reports Feature - Schemas

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date, datetime

from awv.features.assessments.models import HealthPlanRecommendation


class ReportPractice(BaseModel):
    name: str
    address: str
    phone: str
    email: str
    website: Optional[str] = None
    npi: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: str = "#2563EB"


class ReportPatient(BaseModel):
    id: str
    name: str
    first_name: str
    last_name: str
    medical_record_number: str
    date_of_birth: date
    age: int
    gender: str
    phone: Optional[str] = None
    email: Optional[str] = None


class ReportProvider(BaseModel):
    id: Optional[str] = None
    name: str
    email: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None


class ReportVisit(BaseModel):
    id: str
    scheduled_date: datetime
    visit_type: str
    location: Optional[str] = None
    status: str
    template_name: Optional[str] = None
    template_version: int
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class ReportAnswer(BaseModel):
    question_id: str
    question: str
    answer: str


class ReportSection(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    answers: List[ReportAnswer] = Field(default_factory=list)


class ReportDomain(BaseModel):
    domain: str
    recommendations: List[HealthPlanRecommendation]


class VisitReport(BaseModel):
    """Everything a rendered visit report shows, in display order."""

    practice: ReportPractice
    patient: ReportPatient
    provider: ReportProvider
    visit: ReportVisit
    sections: List[ReportSection]
    health_plan: List[ReportDomain]
    summary: Optional[str] = None
    notes: Optional[str] = None
    generated_at: datetime = Field(default_factory=datetime.utcnow)
