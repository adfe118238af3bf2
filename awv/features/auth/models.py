from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field
from pymongo import ASCENDING, IndexModel
from typing import Optional, Literal
from datetime import datetime
from awv.shared.models import TimestampMixin


UserRole = Literal["admin", "provider", "staff"]
UserStatus = Literal["active", "inactive", "pending"]


class NotificationPreferences(BaseModel):
    """Per-user notification switches."""

    email: bool = True
    in_app: bool = True


class User(Document, TimestampMixin):
    """User document model."""

    email: Indexed(EmailStr, unique=True)
    name: str
    password_hash: Optional[str] = None  # Unset until the invitation is accepted

    role: UserRole = "staff"
    status: UserStatus = "pending"

    # Profile
    phone: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None
    profile_image: Optional[str] = None

    # Firebase sign-in link
    firebase_uid: Optional[str] = None

    last_login: Optional[datetime] = None
    notification_preferences: NotificationPreferences = Field(default_factory=NotificationPreferences)

    # Invitation
    invited_by: Optional[str] = None
    invitation_sent_at: Optional[datetime] = None
    invite_token: Optional[str] = None
    invite_expires_at: Optional[datetime] = None

    class Settings:
        name = "users"
        use_state_management = True
        indexes = [
            "invite_token",
            "role",
            "status",
            # Unique only for linked accounts
            IndexModel(
                [("firebase_uid", ASCENDING)],
                unique=True,
                partialFilterExpression={"firebase_uid": {"$type": "string"}},
            ),
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "email": "provider@example.com",
                "name": "Dr. Jane Smith",
                "role": "provider",
                "status": "active",
                "title": "MD",
                "specialty": "Family Medicine",
            }
        }

    @property
    def is_active(self) -> bool:
        return self.status == "active"
