# Dashboard Feature - Schemas

from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel


# ============== Dashboard Statistics ==============

class DashboardStatsResponse(BaseModel):
    """Response schema for dashboard statistics."""
    total_patients: int
    total_visits: int
    visits_by_status: Dict[str, int]
    upcoming_visits: int
    completed_last_30_days: int
    active_users: int
    active_templates: int

    class Config:
        json_schema_extra = {
            "example": {
                "total_patients": 284,
                "total_visits": 412,
                "visits_by_status": {"scheduled": 18, "in-progress": 3, "completed": 380, "cancelled": 11},
                "upcoming_visits": 9,
                "completed_last_30_days": 42,
                "active_users": 7,
                "active_templates": 2,
            }
        }


# ============== Upcoming Visits ==============

class UpcomingVisit(BaseModel):
    """A scheduled visit shown on the dashboard."""
    id: str
    patient_id: str
    patient_name: Optional[str] = None
    provider_id: str
    scheduled_date: datetime
    visit_type: str
    location: Optional[str] = None


class UpcomingVisitsResponse(BaseModel):
    """Response schema for upcoming visits."""
    visits: List[UpcomingVisit]
    total: int
