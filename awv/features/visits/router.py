# Visits Feature - Router

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from typing import Optional, Literal
from datetime import date
from awv.features.visits.schemas import (
    CreateVisitRequest,
    UpdateVisitRequest,
    SaveResponsesRequest,
    CompleteVisitRequest,
    CancelVisitRequest,
    VisitDetailResponse,
    VisitListResponse,
    VisitSortField,
)
from awv.features.visits.models import VisitStatus
from awv.features.visits.service import VisitService
from awv.features.reports.pdf import PDFReportRenderer
from awv.features.reports.schemas import VisitReport
from awv.features.reports.service import ReportService
from awv.features.practice.service import PracticeService
from awv.features.auth.dependencies import get_current_user, require_roles
from awv.features.auth.models import User
from awv.shared.exceptions import ConflictException
from awv.shared.schemas import MessageResponse, Pagination


router = APIRouter(prefix="/visits", tags=["Visits"])


@router.get("", response_model=VisitListResponse)
async def list_visits(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    patient_id: Optional[str] = None,
    provider_id: Optional[str] = None,
    status: Optional[VisitStatus] = None,
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    sort_field: VisitSortField = "scheduled_date",
    sort_order: Literal["asc", "desc"] = "desc",
    current_user: User = Depends(get_current_user),
):
    """
    List visits with filters and pagination.

    - **from_date** / **to_date**: inclusive range on the scheduled date
    """
    visits, total = await VisitService.list_visits(
        page=page,
        limit=limit,
        patient_id=patient_id,
        provider_id=provider_id,
        status=status,
        from_date=from_date,
        to_date=to_date,
        sort_field=sort_field,
        direction=1 if sort_order == "asc" else -1,
    )
    patients, providers, templates = await VisitService.lookup_names(visits)
    return VisitListResponse(
        visits=[
            VisitService.visit_to_response(
                v,
                patients.get(v.patient_id),
                providers.get(v.provider_id),
                templates.get(v.template_id),
            )
            for v in visits
        ],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=VisitDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_visit(
    request: CreateVisitRequest,
    current_user: User = Depends(require_roles("admin", "provider", "staff")),
):
    """
    Schedule a visit.

    The provider defaults to the caller when the caller is a provider.
    """
    visit = await VisitService.create_visit(request, current_user)
    return await VisitService.to_detail_response(visit)


@router.get("/{visit_id}", response_model=VisitDetailResponse)
async def get_visit(
    visit_id: str,
    current_user: User = Depends(get_current_user),
):
    """Get a visit with patient and provider summaries."""
    visit = await VisitService.get_visit(visit_id)
    return await VisitService.to_detail_response(visit)


@router.put("/{visit_id}", response_model=VisitDetailResponse)
async def update_visit(
    visit_id: str,
    request: UpdateVisitRequest,
    current_user: User = Depends(require_roles("admin", "provider", "staff")),
):
    """
    Update a visit.

    Status changes follow the visit lifecycle; setting ``completed`` runs the
    full completion and requires a provider.
    """
    visit = await VisitService.update_visit(visit_id, request, current_user)
    return await VisitService.to_detail_response(visit)


@router.delete("/{visit_id}", response_model=MessageResponse)
async def delete_visit(
    visit_id: str,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """Delete a visit. Completed visits are kept."""
    await VisitService.delete_visit(visit_id, current_user)
    return MessageResponse(message="Visit deleted successfully")


@router.post("/{visit_id}/start", response_model=VisitDetailResponse)
async def start_visit(
    visit_id: str,
    current_user: User = Depends(get_current_user),
):
    visit = await VisitService.start_visit(visit_id, current_user)
    return await VisitService.to_detail_response(visit)


@router.put("/{visit_id}/responses", response_model=VisitDetailResponse)
async def save_responses(
    visit_id: str,
    request: SaveResponsesRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Save questionnaire answers.

    Answers are merged into those already stored, keyed by question id.
    """
    visit = await VisitService.save_responses(visit_id, request, current_user)
    return await VisitService.to_detail_response(visit)


@router.post("/{visit_id}/complete", response_model=VisitDetailResponse)
async def complete_visit(
    visit_id: str,
    request: CompleteVisitRequest,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """
    Complete a visit and generate its health plan.

    - **responses**: final answers, merged before validation
    - **additional_recommendations**: provider-added items
    - **summary**: overrides the generated summary
    """
    visit = await VisitService.complete_visit(visit_id, request, current_user)
    return await VisitService.to_detail_response(visit)


@router.post("/{visit_id}/cancel", response_model=VisitDetailResponse)
async def cancel_visit(
    visit_id: str,
    request: CancelVisitRequest,
    current_user: User = Depends(get_current_user),
):
    visit = await VisitService.cancel_visit(visit_id, request.reason, current_user)
    return await VisitService.to_detail_response(visit)


async def _build_report(visit_id: str) -> VisitReport:
    visit, patient, template, provider, practice = await VisitService.report_context(visit_id)
    return ReportService.build_report(visit, patient, template, provider, practice)


@router.get("/{visit_id}/report", response_model=VisitReport)
async def get_report(
    visit_id: str,
    current_user: User = Depends(get_current_user),
):
    """Visit report with formatted answers and the health plan grouped by domain."""
    return await _build_report(visit_id)


@router.get("/{visit_id}/report/pdf")
async def get_report_pdf(
    visit_id: str,
    current_user: User = Depends(get_current_user),
):
    """Download the report of a completed visit as a PDF."""
    report = await _build_report(visit_id)
    if report.visit.status != "completed":
        raise ConflictException("Reports can only be generated for completed visits")

    content = PDFReportRenderer().render(report, logo=PracticeService.logo_for_report())
    filename = ReportService.pdf_filename(report)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
