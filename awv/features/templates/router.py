# Assessment Templates Feature - Router

from fastapi import APIRouter, Depends, status
from typing import Optional
from awv.features.templates.schemas import (
    CreateTemplateRequest,
    UpdateTemplateRequest,
    TemplateResponse,
    TemplateListResponse,
)
from awv.features.templates.service import TemplateService
from awv.features.auth.dependencies import get_current_user, require_roles
from awv.features.auth.models import User
from awv.shared.schemas import MessageResponse


router = APIRouter(prefix="/templates", tags=["Templates"])


@router.get("", response_model=TemplateListResponse)
async def list_templates(
    name: Optional[str] = None,
    active: Optional[bool] = None,
    current_user: User = Depends(get_current_user),
):
    """
    List assessment templates, most recently updated first.

    - **name**: case-insensitive name filter
    - **active**: only active (true) or inactive (false) templates
    """
    templates = await TemplateService.list_templates(name=name, active=active)
    return TemplateListResponse(
        templates=[TemplateService.template_to_response(t) for t in templates],
        total=len(templates),
    )


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def create_template(
    request: CreateTemplateRequest,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """Create a template. Missing section and question ids are generated."""
    template = await TemplateService.create_template(request, current_user)
    return TemplateService.template_to_response(template)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: str,
    current_user: User = Depends(get_current_user),
):
    template = await TemplateService.get_template(template_id)
    return TemplateService.template_to_response(template)


@router.put("/{template_id}", response_model=TemplateResponse)
async def update_template(
    template_id: str,
    request: UpdateTemplateRequest,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """Update a template and increment its version."""
    template = await TemplateService.update_template(template_id, request, current_user)
    return TemplateService.template_to_response(template)


@router.delete("/{template_id}", response_model=MessageResponse)
async def delete_template(
    template_id: str,
    current_user: User = Depends(require_roles("admin")),
):
    """Delete a template that no open visit uses."""
    await TemplateService.delete_template(template_id, current_user)
    return MessageResponse(message="Template deleted successfully")


@router.post("/{template_id}/duplicate", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def duplicate_template(
    template_id: str,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """Copy a template as an inactive draft."""
    template = await TemplateService.duplicate_template(template_id, current_user)
    return TemplateService.template_to_response(template)
