# Practice Settings Feature - Models

from typing import Optional, List
from beanie import Document, Indexed
from pydantic import BaseModel, Field
from awv.shared.models import TimestampMixin


SETTINGS_KEY = "default"


class OfficeHours(BaseModel):
    day: str
    open: Optional[str] = None  # "08:00"
    close: Optional[str] = None  # "17:00"
    closed: bool = False


class PracticeSettings(Document, TimestampMixin):
    """Practice-wide settings and branding. Exactly one document exists."""

    key: Indexed(str, unique=True) = SETTINGS_KEY

    name: str
    address: str
    city: str
    state: str
    zip_code: str
    phone: str
    email: str
    website: Optional[str] = None
    tax_id: Optional[str] = None
    npi: Optional[str] = None
    logo_url: Optional[str] = None
    primary_color: str = "#2563EB"
    office_hours: List[OfficeHours] = Field(default_factory=list)

    class Settings:
        name = "practice_settings"
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Healthcare Wellness Center",
                "address": "123 Medical Drive",
                "city": "Healthville",
                "state": "CA",
                "zip_code": "90210",
                "phone": "(555) 123-4567",
                "email": "info@healthcarewellness.com",
                "website": "www.healthcarewellness.com",
            }
        }

    @property
    def full_address(self) -> str:
        return f"{self.address}, {self.city}, {self.state} {self.zip_code}"
