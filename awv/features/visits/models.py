# Visits Feature - Models

from typing import Optional, List, Literal, Any, Dict
from datetime import datetime
from beanie import Document, Indexed
from pydantic import Field
from awv.shared.models import TimestampMixin
from awv.features.assessments.models import HealthPlan


VisitStatus = Literal["scheduled", "in-progress", "completed", "cancelled"]

# Allowed status changes; completed and cancelled are terminal
ALLOWED_TRANSITIONS: Dict[str, set] = {
    "scheduled": {"in-progress", "cancelled"},
    "in-progress": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}
OPEN_STATUSES = ("scheduled", "in-progress")


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


class Visit(Document, TimestampMixin):
    """An annual wellness visit of one patient, conducted with one template."""

    patient_id: Indexed(str)
    provider_id: Indexed(str)
    template_id: Indexed(str)
    template_version: int = 1

    scheduled_date: datetime
    visit_type: str = "annual-wellness"
    location: Optional[str] = None
    status: VisitStatus = "scheduled"

    # Answers keyed by question id (composite answers may use "<id>_<part>" keys)
    responses: Dict[str, Any] = Field(default_factory=dict)
    completed_sections: List[str] = Field(default_factory=list)
    health_plan: Optional[HealthPlan] = None
    notes: Optional[str] = None

    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    created_by: Optional[str] = None

    class Settings:
        name = "visits"
        use_state_management = True
        indexes = ["status", "scheduled_date"]

    class Config:
        json_schema_extra = {
            "example": {
                "patient_id": "665f1c2e9b1e8a0012345678",
                "provider_id": "665f1c2e9b1e8a0012345679",
                "template_id": "665f1c2e9b1e8a001234567a",
                "scheduled_date": "2025-03-01T09:30:00",
                "visit_type": "annual-wellness",
                "status": "scheduled",
            }
        }

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES
