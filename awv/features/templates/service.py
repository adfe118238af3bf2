# Assessment Templates Feature - Service

import re
from typing import Optional, List
from awv.features.templates.models import Template, Section
from awv.features.templates.schemas import CreateTemplateRequest, UpdateTemplateRequest, TemplateResponse
from awv.features.auth.models import User
from awv.core.logging import logger
from awv.shared.exceptions import (
    NotFoundException,
    ConflictException,
    ValidationFailedException,
    parse_object_id,
)


def validate_sections(sections: List[Section]) -> List[str]:
    """
    Structural checks for template content.

    Ids must be unique across the whole template, multiple-choice questions
    need distinct option values, and conditional logic may only depend on a
    question that appears earlier, which rules out cycles.
    """
    errors = []
    section_ids = set()
    seen_questions = {}

    for section in sections:
        if section.id in section_ids:
            errors.append(f'Duplicate section id "{section.id}"')
        section_ids.add(section.id)

        for question in section.questions:
            if question.id in seen_questions or question.id in section_ids:
                errors.append(f'Duplicate question id "{question.id}"')

            if question.type == "multipleChoice":
                values = [option.value for option in question.options]
                if not values:
                    errors.append(f'Question "{question.text}" needs at least one option')
                elif len(set(values)) != len(values):
                    errors.append(f'Question "{question.text}" has duplicate option values')

            if question.min is not None and question.max is not None and question.min > question.max:
                errors.append(f'Question "{question.text}" has min greater than max')

            logic = question.conditional_logic
            if logic is not None:
                if logic.depends_on == question.id:
                    errors.append(f'Question "{question.text}" cannot depend on itself')
                elif logic.depends_on not in seen_questions:
                    errors.append(
                        f'Question "{question.text}" depends on "{logic.depends_on}", '
                        f'which is not an earlier question in this template'
                    )

            seen_questions[question.id] = question

    return errors


class TemplateService:
    """Service class for assessment template operations."""

    @staticmethod
    def _check(sections: List[Section]) -> None:
        errors = validate_sections(sections)
        if errors:
            raise ValidationFailedException("Invalid template", errors)

    @staticmethod
    async def list_templates(name: Optional[str] = None, active: Optional[bool] = None) -> List[Template]:
        query = {}
        if name:
            query["name"] = {"$regex": re.escape(name), "$options": "i"}
        if active is not None:
            query["is_active"] = active
        return await Template.find(query).sort("-updated_at").to_list()

    @staticmethod
    async def get_template(template_id: str) -> Template:
        template = await Template.get(parse_object_id(template_id, "template"))
        if not template:
            raise NotFoundException("Template not found")
        return template

    @staticmethod
    async def create_template(request: CreateTemplateRequest, created_by: User) -> Template:
        TemplateService._check(request.sections)

        template = Template(
            name=request.name.strip(),
            description=request.description,
            sections=request.sections,
            is_active=request.is_active,
            version=1,
            created_by=str(created_by.id),
        )
        await template.insert()

        logger.info(f"Created template '{template.name}' ({template.id}) by {created_by.email}")
        return template

    @staticmethod
    async def update_template(template_id: str, request: UpdateTemplateRequest, current_user: User) -> Template:
        """Update a template; every update bumps the version."""
        template = await TemplateService.get_template(template_id)

        if request.sections is not None:
            TemplateService._check(request.sections)
            template.sections = request.sections
        if request.name is not None:
            template.name = request.name.strip()
        if "description" in request.model_fields_set:
            template.description = request.description
        if request.is_active is not None:
            template.is_active = request.is_active

        template.version += 1
        template.update_timestamp()
        await template.save()

        logger.info(f"Updated template '{template.name}' to version {template.version} by {current_user.email}")
        return template

    @staticmethod
    async def delete_template(template_id: str, current_user: User) -> None:
        """Delete a template unless scheduled or in-progress visits still use it."""
        from awv.features.visits.models import Visit

        template = await TemplateService.get_template(template_id)

        open_visits = await Visit.find(
            {"template_id": str(template.id), "status": {"$in": ["scheduled", "in-progress"]}}
        ).count()
        if open_visits:
            raise ConflictException(
                f"Template is used by {open_visits} scheduled or in-progress visit(s) and cannot be deleted"
            )

        await template.delete()
        logger.info(f"Deleted template '{template.name}' ({template.id}) by {current_user.email}")

    @staticmethod
    async def duplicate_template(template_id: str, current_user: User) -> Template:
        """Copy a template as an inactive draft at version 1."""
        source = await TemplateService.get_template(template_id)

        copy = Template(
            name=f"{source.name} (Copy)",
            description=source.description,
            sections=[section.model_copy(deep=True) for section in source.sections],
            is_active=False,
            version=1,
            created_by=str(current_user.id),
        )
        await copy.insert()

        logger.info(f"Duplicated template {source.id} as {copy.id}")
        return copy

    @staticmethod
    def template_to_response(template: Template) -> TemplateResponse:
        return TemplateResponse(
            id=str(template.id),
            name=template.name,
            description=template.description,
            sections=template.sections,
            is_active=template.is_active,
            version=template.version,
            created_by=template.created_by,
            question_count=sum(len(section.questions) for section in template.sections),
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
