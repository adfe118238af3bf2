# Assessment Templates Feature - Schemas

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from awv.features.templates.models import Section


# ============== Request Schemas ==============

class CreateTemplateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    is_active: bool = True


class UpdateTemplateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    sections: Optional[List[Section]] = None
    is_active: Optional[bool] = None


# ============== Response Schemas ==============

class TemplateResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    sections: List[Section]
    is_active: bool
    version: int
    created_by: Optional[str] = None
    question_count: int
    created_at: datetime
    updated_at: datetime


class TemplateListResponse(BaseModel):
    templates: List[TemplateResponse]
    total: int
