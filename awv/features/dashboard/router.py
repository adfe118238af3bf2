# Dashboard Feature - Router

from fastapi import APIRouter, Depends, Query
from awv.features.auth.models import User
from awv.features.auth.dependencies import get_current_user
from awv.features.dashboard.schemas import (
    DashboardStatsResponse,
    UpcomingVisitsResponse,
)
from awv.features.dashboard.service import DashboardService


router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user)
):
    """
    Get dashboard statistics for the practice.

    Returns:
    - Total patients and visits
    - Visit counts by status
    - Visits scheduled in the next 7 days
    - Visits completed in the last 30 days
    - Active users and active templates

    Requires authentication.
    """
    return await DashboardService.get_dashboard_stats()


@router.get("/upcoming", response_model=UpcomingVisitsResponse)
async def get_upcoming_visits(
    limit: int = Query(5, ge=1, le=50, description="Number of visits to return"),
    current_user: User = Depends(get_current_user)
):
    """
    Get the next scheduled visits, soonest first.

    Requires authentication.
    """
    return await DashboardService.get_upcoming_visits(limit=limit)
