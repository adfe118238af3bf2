from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime

from awv.core.security import validate_password_strength
from awv.features.auth.models import UserRole, UserStatus


# Request Schemas
class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class FirebaseLoginRequest(BaseModel):
    """Firebase sign-in request schema."""

    id_token: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Accept an invitation and set the account password."""

    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=100)
    name: Optional[str] = Field(None, min_length=2, max_length=100)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class ChangePasswordRequest(BaseModel):
    """Change password request schema."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=100)

    @field_validator('new_password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)


class NotificationPreferencesSchema(BaseModel):
    email: bool = True
    in_app: bool = True


class UpdateProfileRequest(BaseModel):
    """Update profile request schema."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None
    notification_preferences: Optional[NotificationPreferencesSchema] = None


# Response Schemas
class UserResponse(BaseModel):
    """User response schema."""

    id: str
    email: str
    name: str
    role: UserRole
    status: UserStatus
    phone: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None
    profile_image: Optional[str] = None
    last_login: Optional[datetime] = None
    notification_preferences: NotificationPreferencesSchema = Field(default_factory=NotificationPreferencesSchema)
    invited_by: Optional[str] = None
    invitation_sent_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TokenResponse(BaseModel):
    """Token response schema."""

    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class InvitationInfoResponse(BaseModel):
    """Public details of a pending invitation."""

    email: str
    name: str
    role: UserRole
    expires_at: Optional[datetime] = None
