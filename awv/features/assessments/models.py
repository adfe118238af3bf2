from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from awv.features.templates.models import Priority


class RecommendationSource(BaseModel):
    """The answer a recommendation was derived from."""

    question_id: str
    question: str
    response: str


class HealthPlanRecommendation(BaseModel):
    domain: str
    text: str
    priority: Priority = "medium"
    source: Optional[RecommendationSource] = None
    is_custom: bool = False


class HealthPlan(BaseModel):
    recommendations: List[HealthPlanRecommendation] = Field(default_factory=list)
    summary: str = ""
    generated_at: datetime = Field(default_factory=datetime.utcnow)
