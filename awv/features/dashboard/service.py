# Dashboard Feature - Service

from datetime import datetime, timedelta

from awv.features.dashboard.schemas import (
    DashboardStatsResponse,
    UpcomingVisit,
    UpcomingVisitsResponse,
)
from awv.features.auth.models import User
from awv.features.patients.models import Patient
from awv.features.templates.models import Template
from awv.features.visits.models import Visit, ALLOWED_TRANSITIONS
from awv.shared.exceptions import parse_object_id


class DashboardService:
    """Service for dashboard statistics."""

    @staticmethod
    async def get_dashboard_stats() -> DashboardStatsResponse:
        """
        Get practice-wide dashboard statistics.

        Returns:
            DashboardStatsResponse with aggregated counts
        """
        now = datetime.utcnow()
        next_week = now + timedelta(days=7)
        month_ago = now - timedelta(days=30)

        total_patients = await Patient.find_all().count()
        total_visits = await Visit.find_all().count()

        visits_by_status = {}
        for visit_status in ALLOWED_TRANSITIONS:
            visits_by_status[visit_status] = await Visit.find(Visit.status == visit_status).count()

        # Scheduled visits in the next 7 days
        upcoming_visits = await Visit.find(
            Visit.status == "scheduled",
            Visit.scheduled_date >= now,
            Visit.scheduled_date < next_week,
        ).count()

        completed_last_30_days = await Visit.find(
            Visit.status == "completed",
            Visit.completed_at >= month_ago,
        ).count()

        active_users = await User.find(User.status == "active").count()
        active_templates = await Template.find(Template.is_active == True).count()

        return DashboardStatsResponse(
            total_patients=total_patients,
            total_visits=total_visits,
            visits_by_status=visits_by_status,
            upcoming_visits=upcoming_visits,
            completed_last_30_days=completed_last_30_days,
            active_users=active_users,
            active_templates=active_templates,
        )

    @staticmethod
    async def get_upcoming_visits(limit: int = 5) -> UpcomingVisitsResponse:
        """Next scheduled visits, soonest first, with patient names."""
        visits = await Visit.find(
            Visit.status == "scheduled",
            Visit.scheduled_date >= datetime.utcnow(),
        ).sort([("scheduled_date", 1)]).limit(limit).to_list()

        patient_ids = list({parse_object_id(v.patient_id, "patient") for v in visits})
        patients = await Patient.find({"_id": {"$in": patient_ids}}).to_list() if patient_ids else []
        names = {str(p.id): p.full_name for p in patients}

        return UpcomingVisitsResponse(
            visits=[
                UpcomingVisit(
                    id=str(v.id),
                    patient_id=v.patient_id,
                    patient_name=names.get(v.patient_id),
                    provider_id=v.provider_id,
                    scheduled_date=v.scheduled_date,
                    visit_type=v.visit_type,
                    location=v.location,
                )
                for v in visits
            ],
            total=len(visits),
        )
