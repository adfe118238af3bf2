# Practice Settings Feature - Schemas

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

from awv.features.practice.models import OfficeHours


class UpdatePracticeRequest(BaseModel):
    """Full update of the practice settings; contact fields are required."""

    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    email: EmailStr
    website: Optional[str] = None
    tax_id: Optional[str] = None
    npi: Optional[str] = None
    primary_color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    office_hours: Optional[List[OfficeHours]] = None


class PracticeResponse(BaseModel):
    id: str
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
    primary_color: str
    office_hours: List[OfficeHours]
    created_at: datetime
    updated_at: datetime


class LogoUploadResponse(BaseModel):
    success: bool = True
    message: str
    logo_url: str
