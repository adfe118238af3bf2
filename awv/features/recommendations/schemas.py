# Recommendation Library Feature - Schemas

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from awv.features.templates.models import Priority


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    return list(dict.fromkeys(tag.strip().lower() for tag in tags if tag and tag.strip()))


class CreateRecommendationRequest(BaseModel):
    text: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1, max_length=100)
    priority: Priority = "medium"
    condition: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator('text', 'domain')
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)


class UpdateRecommendationRequest(BaseModel):
    text: Optional[str] = Field(None, min_length=1)
    domain: Optional[str] = Field(None, min_length=1, max_length=100)
    priority: Optional[Priority] = None
    condition: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(v)


class RecommendationResponse(BaseModel):
    id: str
    text: str
    domain: str
    priority: Priority
    condition: Optional[str] = None
    tags: List[str]
    is_custom: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RecommendationListResponse(BaseModel):
    recommendations: List[RecommendationResponse]
    total: int
