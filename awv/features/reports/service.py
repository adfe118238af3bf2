# Reports Feature - Service

from typing import Optional
from awv.features.assessments.engine import format_response, group_recommendations, has_answer, visible_questions
from awv.features.auth.models import User
from awv.features.patients.models import Patient
from awv.features.practice.models import PracticeSettings
from awv.features.templates.models import Template
from awv.features.visits.models import Visit
from awv.features.reports.schemas import (
    ReportAnswer,
    ReportDomain,
    ReportPatient,
    ReportPractice,
    ReportProvider,
    ReportSection,
    ReportVisit,
    VisitReport,
)


class ReportService:
    """Assemble visit reports from stored documents."""

    @staticmethod
    def _sections(template: Optional[Template], responses: dict):
        if template is None:
            return []

        visible = {question.id for _, question in visible_questions(template, responses)}
        sections = []
        for section in template.sections:
            answers = [
                ReportAnswer(
                    question_id=question.id,
                    question=question.text,
                    answer=format_response(question, responses.get(question.id), responses),
                )
                for question in section.questions
                if question.id in visible and has_answer(question, responses)
            ]
            sections.append(
                ReportSection(id=section.id, title=section.title, description=section.description, answers=answers)
            )
        return sections

    @staticmethod
    def build_report(
        visit: Visit,
        patient: Patient,
        template: Optional[Template],
        provider: Optional[User],
        practice: PracticeSettings,
    ) -> VisitReport:
        """
        Build the report for a visit.

        Only visible, answered questions are listed. The health plan is
        grouped by domain with high priority first.
        """
        plan = visit.health_plan
        grouped = group_recommendations(plan.recommendations) if plan else {}

        return VisitReport(
            practice=ReportPractice(
                name=practice.name,
                address=practice.full_address,
                phone=practice.phone,
                email=practice.email,
                website=practice.website,
                npi=practice.npi,
                logo_url=practice.logo_url,
                primary_color=practice.primary_color,
            ),
            patient=ReportPatient(
                id=str(patient.id),
                name=patient.full_name,
                first_name=patient.first_name,
                last_name=patient.last_name,
                medical_record_number=patient.medical_record_number,
                date_of_birth=patient.date_of_birth,
                age=patient.age(),
                gender=patient.gender,
                phone=patient.phone,
                email=patient.email,
            ),
            provider=ReportProvider(
                id=str(provider.id),
                name=provider.name,
                email=provider.email,
                title=provider.title,
                specialty=provider.specialty,
                npi=provider.npi,
            ) if provider else ReportProvider(name="Unknown provider"),
            visit=ReportVisit(
                id=str(visit.id),
                scheduled_date=visit.scheduled_date,
                visit_type=visit.visit_type,
                location=visit.location,
                status=visit.status,
                template_name=template.name if template else None,
                template_version=visit.template_version,
                started_at=visit.started_at,
                completed_at=visit.completed_at,
            ),
            sections=ReportService._sections(template, visit.responses),
            health_plan=[ReportDomain(domain=domain, recommendations=recs) for domain, recs in grouped.items()],
            summary=plan.summary if plan else None,
            notes=visit.notes,
        )

    @staticmethod
    def pdf_filename(report: VisitReport) -> str:
        last_name = "".join(ch for ch in report.patient.last_name if ch.isalnum() or ch in "-_") or "Patient"
        return f"AWV_Report_{last_name}_{report.visit.scheduled_date.date().isoformat()}.pdf"
