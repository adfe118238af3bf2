# Recommendation Library Feature - Models

from typing import Optional, List
from beanie import Document, Indexed
from pydantic import Field
from awv.features.templates.models import Priority
from awv.shared.models import TimestampMixin


class Recommendation(Document, TimestampMixin):
    """A reusable recommendation snippet providers can pick from."""

    text: str
    domain: Indexed(str)
    priority: Priority = "medium"
    condition: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    is_custom: bool = False
    created_by: Optional[str] = None

    class Settings:
        name = "recommendations"
        indexes = ["tags", [("is_custom", 1), ("created_by", 1)]]

    class Config:
        json_schema_extra = {
            "example": {
                "text": "Schedule a colonoscopy screening.",
                "domain": "Preventive Screenings",
                "priority": "high",
                "condition": "Age 45-75 with no screening in the last 10 years",
                "tags": ["cancer-screening", "colorectal"],
            }
        }
