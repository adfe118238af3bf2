# Patient Management Feature - Models

from typing import Optional, List, Literal
from datetime import date
from beanie import Document, Indexed
from pydantic import BaseModel, Field
from awv.shared.models import TimestampMixin


Gender = Literal["male", "female", "other"]


class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class Insurance(BaseModel):
    provider: Optional[str] = None
    policy_number: Optional[str] = None
    group_number: Optional[str] = None


class MedicalHistory(BaseModel):
    conditions: List[str] = Field(default_factory=list)
    medications: List[str] = Field(default_factory=list)
    allergies: List[str] = Field(default_factory=list)
    surgeries: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class Patient(Document, TimestampMixin):
    """Patient document model for storing patient demographics and history."""

    # Unique medical record number (e.g., MRN000001)
    medical_record_number: Indexed(str, unique=True)

    # Personal information
    first_name: str
    last_name: Indexed(str)
    date_of_birth: date
    gender: Gender
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Address = Field(default_factory=Address)

    insurance: Insurance = Field(default_factory=Insurance)
    medical_history: MedicalHistory = Field(default_factory=MedicalHistory)

    # User id of the primary care provider
    primary_care_provider_id: Optional[str] = None

    class Settings:
        name = "patients"
        use_state_management = True

    class Config:
        json_schema_extra = {
            "example": {
                "first_name": "Sarah",
                "last_name": "Johnson",
                "date_of_birth": "1950-05-15",
                "gender": "female",
                "phone": "+1234567890",
                "medical_record_number": "MRN000001",
                "medical_history": {
                    "conditions": ["Type 2 Diabetes", "Hypertension"],
                    "medications": ["Metformin 500mg"],
                    "allergies": ["Penicillin"],
                },
            }
        }

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age(self, on: Optional[date] = None) -> int:
        """Age in whole years on the given day (today by default)."""
        on = on or date.today()
        years = on.year - self.date_of_birth.year
        if (on.month, on.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return years
