# Visits Feature - Service

from typing import Optional, List, Tuple, Dict
from datetime import date, datetime, time, timedelta
from awv.features.visits.models import Visit, can_transition
from awv.features.visits.schemas import (
    CreateVisitRequest,
    UpdateVisitRequest,
    SaveResponsesRequest,
    CompleteVisitRequest,
    VisitResponse,
    VisitDetailResponse,
    PatientSummary,
    ProviderSummary,
)
from awv.features.assessments.engine import (
    build_recommendations,
    summarize,
    unknown_response_keys,
    validate_responses,
)
from awv.features.assessments.models import HealthPlan, HealthPlanRecommendation
from awv.features.auth.models import User
from awv.features.patients.models import Patient
from awv.features.patients.service import PatientService
from awv.features.templates.models import Template
from awv.features.templates.service import TemplateService
from awv.core.logging import logger
from awv.shared.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    ForbiddenException,
    ValidationFailedException,
    parse_object_id,
)


PROVIDER_ROLES = ("provider", "admin")


class VisitService:
    """Service class for scheduling, conducting and completing visits."""

    # ============== Lookups ==============

    @staticmethod
    async def get_visit(visit_id: str) -> Visit:
        visit = await Visit.get(parse_object_id(visit_id, "visit"))
        if not visit:
            raise NotFoundException("Visit not found")
        return visit

    @staticmethod
    async def _get_provider(provider_id: str) -> User:
        provider = await User.get(parse_object_id(provider_id, "provider"))
        if not provider or provider.role not in PROVIDER_ROLES:
            raise BadRequestException("Provider not found")
        return provider

    @staticmethod
    async def _resolve_patient(patient_id: str) -> Patient:
        patient = await Patient.get(parse_object_id(patient_id, "patient"))
        if not patient:
            raise BadRequestException("Patient not found")
        return patient

    @staticmethod
    async def _resolve_template(template_id: str) -> Template:
        template = await Template.get(parse_object_id(template_id, "template"))
        if not template:
            raise BadRequestException("Template not found")
        return template

    @staticmethod
    async def list_visits(
        page: int,
        limit: int,
        patient_id: Optional[str] = None,
        provider_id: Optional[str] = None,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        sort_field: str = "scheduled_date",
        direction: int = -1,
    ) -> Tuple[List[Visit], int]:
        """Return one page of visits and the total match count."""
        query: Dict = {}
        if patient_id:
            query["patient_id"] = str(parse_object_id(patient_id, "patient"))
        if provider_id:
            query["provider_id"] = str(parse_object_id(provider_id, "provider"))
        if status:
            query["status"] = status
        if from_date or to_date:
            date_range = {}
            if from_date:
                date_range["$gte"] = datetime.combine(from_date, time.min)
            if to_date:
                date_range["$lt"] = datetime.combine(to_date + timedelta(days=1), time.min)
            query["scheduled_date"] = date_range

        total = await Visit.find(query).count()
        visits = await (
            Visit.find(query)
            .sort((sort_field, direction), ("_id", direction))
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list()
        )
        return visits, total

    # ============== Scheduling ==============

    @staticmethod
    async def create_visit(request: CreateVisitRequest, current_user: User) -> Visit:
        """Schedule a visit for an existing patient with an active template."""
        patient = await VisitService._resolve_patient(request.patient_id)
        template = await VisitService._resolve_template(request.template_id)
        if not template.is_active:
            raise BadRequestException("Template is not active")

        if request.provider_id:
            provider = await VisitService._get_provider(request.provider_id)
        elif current_user.role in PROVIDER_ROLES:
            provider = current_user
        else:
            raise BadRequestException("A provider must be assigned to the visit")

        visit = Visit(
            patient_id=str(patient.id),
            provider_id=str(provider.id),
            template_id=str(template.id),
            template_version=template.version,
            scheduled_date=request.scheduled_date,
            visit_type=request.visit_type,
            location=request.location,
            notes=request.notes,
            status="scheduled",
            created_by=str(current_user.id),
        )
        await visit.insert()

        logger.info(
            f"Scheduled visit {visit.id} for patient {patient.medical_record_number} "
            f"with {provider.email} on {visit.scheduled_date.isoformat()}"
        )
        return visit

    @staticmethod
    def _apply_transition(visit: Visit, target: str, reason: Optional[str] = None) -> None:
        """Move a visit to ``target`` or raise 409 when the state machine forbids it."""
        if not can_transition(visit.status, target):
            raise ConflictException(f"Cannot change visit status from {visit.status} to {target}")

        now = datetime.utcnow()
        previous = visit.status
        visit.status = target
        if target == "in-progress":
            visit.started_at = visit.started_at or now
        elif target == "completed":
            visit.completed_at = now
        elif target == "cancelled":
            visit.cancelled_at = now
            visit.cancellation_reason = reason

        logger.info(f"Visit {visit.id} status changed from {previous} to {target}")

    @staticmethod
    async def update_visit(visit_id: str, request: UpdateVisitRequest, current_user: User) -> Visit:
        """Update schedule fields and notes, and route status changes through the state machine."""
        visit = await VisitService.get_visit(visit_id)
        fields = request.model_fields_set - {"status", "cancellation_reason"}
        schedule_fields = fields - {"notes"}

        if request.status == "completed" and visit.status != "completed":
            if current_user.role not in PROVIDER_ROLES:
                raise ForbiddenException("You do not have permission to perform this action")
            if schedule_fields:
                raise BadRequestException(
                    f"Cannot change {', '.join(sorted(schedule_fields))} while completing a visit"
                )
            complete = CompleteVisitRequest(notes=request.notes)
            return await VisitService.complete_visit(visit_id, complete, current_user)

        if schedule_fields and not visit.is_open:
            raise ConflictException(f"Cannot reschedule a {visit.status} visit")

        if "provider_id" in fields and request.provider_id:
            provider = await VisitService._get_provider(request.provider_id)
            visit.provider_id = str(provider.id)
        if "scheduled_date" in fields and request.scheduled_date:
            visit.scheduled_date = request.scheduled_date
        if "visit_type" in fields and request.visit_type:
            visit.visit_type = request.visit_type
        if "location" in fields:
            visit.location = request.location
        if "notes" in fields:
            visit.notes = request.notes

        if request.status and request.status != visit.status:
            VisitService._apply_transition(visit, request.status, request.cancellation_reason)

        visit.update_timestamp()
        await visit.save()

        logger.info(f"Updated visit {visit.id} by {current_user.email}")
        return visit

    @staticmethod
    async def delete_visit(visit_id: str, current_user: User) -> None:
        visit = await VisitService.get_visit(visit_id)
        if visit.status == "completed":
            raise ConflictException("Completed visits cannot be deleted")

        await visit.delete()
        logger.info(f"Deleted visit {visit_id} by {current_user.email}")

    # ============== Conducting ==============

    @staticmethod
    async def start_visit(visit_id: str, current_user: User) -> Visit:
        visit = await VisitService.get_visit(visit_id)
        VisitService._apply_transition(visit, "in-progress")
        visit.update_timestamp()
        await visit.save()
        return visit

    @staticmethod
    def _check_response_keys(template: Template, responses: dict) -> None:
        unknown = unknown_response_keys(template, responses)
        if unknown:
            raise BadRequestException(f"Unknown question id(s): {', '.join(sorted(unknown))}")

    @staticmethod
    async def save_responses(visit_id: str, request: SaveResponsesRequest, current_user: User) -> Visit:
        """Merge answers into a visit; saving answers starts a scheduled visit."""
        visit = await VisitService.get_visit(visit_id)
        if not visit.is_open:
            raise ConflictException(f"Cannot record responses for a {visit.status} visit")

        template = await TemplateService.get_template(visit.template_id)
        VisitService._check_response_keys(template, request.responses)

        if visit.status == "scheduled":
            VisitService._apply_transition(visit, "in-progress")

        visit.responses = {**visit.responses, **request.responses}
        if request.completed_sections is not None:
            section_ids = {section.id for section in template.sections}
            visit.completed_sections = [s for s in dict.fromkeys(request.completed_sections) if s in section_ids]

        visit.update_timestamp()
        await visit.save()

        logger.info(f"Saved {len(request.responses)} response(s) for visit {visit.id}")
        return visit

    @staticmethod
    async def complete_visit(visit_id: str, request: CompleteVisitRequest, current_user: User) -> Visit:
        """
        Complete a visit.

        Final answers are merged and validated, the health plan is generated
        from the template, and status, answers and plan are written in a
        single save.
        """
        visit = await VisitService.get_visit(visit_id)
        if not visit.is_open:
            raise ConflictException(f"Cannot change visit status from {visit.status} to completed")

        template = await TemplateService.get_template(visit.template_id)
        VisitService._check_response_keys(template, request.responses)

        responses = {**visit.responses, **request.responses}
        errors = validate_responses(template, responses)
        if errors:
            raise ValidationFailedException("Required questions are unanswered", errors)

        recommendations = build_recommendations(template, responses)
        recommendations.extend(
            HealthPlanRecommendation(domain=rec.domain, text=rec.text, priority=rec.priority, is_custom=True)
            for rec in request.additional_recommendations
        )

        if visit.status == "scheduled":
            VisitService._apply_transition(visit, "in-progress")
        VisitService._apply_transition(visit, "completed")

        visit.responses = responses
        visit.completed_sections = [section.id for section in template.sections]
        visit.health_plan = HealthPlan(
            recommendations=recommendations,
            summary=request.summary or summarize(recommendations),
        )
        if request.notes is not None:
            visit.notes = request.notes

        visit.update_timestamp()
        await visit.save()

        logger.info(
            f"Completed visit {visit.id} with {len(recommendations)} recommendation(s) by {current_user.email}"
        )
        return visit

    @staticmethod
    async def cancel_visit(visit_id: str, reason: Optional[str], current_user: User) -> Visit:
        visit = await VisitService.get_visit(visit_id)
        VisitService._apply_transition(visit, "cancelled", reason)
        visit.update_timestamp()
        await visit.save()
        return visit

    # ============== Responses ==============

    @staticmethod
    async def lookup_names(visits: List[Visit]) -> Tuple[Dict[str, Patient], Dict[str, User], Dict[str, Template]]:
        """Batch-load the patients, providers and templates referenced by ``visits``."""
        patient_ids = list({parse_object_id(v.patient_id, "patient") for v in visits})
        provider_ids = list({parse_object_id(v.provider_id, "provider") for v in visits})
        template_ids = list({parse_object_id(v.template_id, "template") for v in visits})

        patients = await Patient.find({"_id": {"$in": patient_ids}}).to_list() if patient_ids else []
        providers = await User.find({"_id": {"$in": provider_ids}}).to_list() if provider_ids else []
        templates = await Template.find({"_id": {"$in": template_ids}}).to_list() if template_ids else []

        return (
            {str(p.id): p for p in patients},
            {str(u.id): u for u in providers},
            {str(t.id): t for t in templates},
        )

    @staticmethod
    def visit_to_response(
        visit: Visit,
        patient: Optional[Patient] = None,
        provider: Optional[User] = None,
        template: Optional[Template] = None,
        detail: bool = False,
    ) -> VisitResponse:
        data = dict(
            id=str(visit.id),
            patient_id=visit.patient_id,
            provider_id=visit.provider_id,
            template_id=visit.template_id,
            template_version=visit.template_version,
            patient_name=patient.full_name if patient else None,
            provider_name=provider.name if provider else None,
            template_name=template.name if template else None,
            scheduled_date=visit.scheduled_date,
            visit_type=visit.visit_type,
            location=visit.location,
            status=visit.status,
            responses=visit.responses,
            completed_sections=visit.completed_sections,
            health_plan=visit.health_plan,
            notes=visit.notes,
            started_at=visit.started_at,
            completed_at=visit.completed_at,
            cancelled_at=visit.cancelled_at,
            cancellation_reason=visit.cancellation_reason,
            created_at=visit.created_at,
            updated_at=visit.updated_at,
        )
        if not detail:
            return VisitResponse(**data)

        return VisitDetailResponse(
            **data,
            patient=PatientSummary(
                id=str(patient.id),
                name=patient.full_name,
                medical_record_number=patient.medical_record_number,
                date_of_birth=patient.date_of_birth,
                age=patient.age(),
                gender=patient.gender,
            ) if patient else None,
            provider=ProviderSummary(
                id=str(provider.id),
                name=provider.name,
                email=provider.email,
                title=provider.title,
                specialty=provider.specialty,
            ) if provider else None,
        )

    @staticmethod
    async def to_detail_response(visit: Visit) -> VisitDetailResponse:
        patients, providers, templates = await VisitService.lookup_names([visit])
        return VisitService.visit_to_response(
            visit,
            patients.get(visit.patient_id),
            providers.get(visit.provider_id),
            templates.get(visit.template_id),
            detail=True,
        )

    @staticmethod
    async def report_context(visit_id: str):
        """Load everything a visit report needs."""
        from awv.features.practice.service import PracticeService

        visit = await VisitService.get_visit(visit_id)
        patient = await PatientService.get_patient(visit.patient_id)
        template = await Template.get(parse_object_id(visit.template_id, "template"))
        provider = await User.get(parse_object_id(visit.provider_id, "provider"))
        practice = await PracticeService.get_settings()
        return visit, patient, template, provider, practice
