# User Management Feature - Schemas

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Literal

from awv.features.auth.models import UserRole, UserStatus
from awv.features.auth.schemas import UserResponse
from awv.shared.schemas import Pagination


UserSortField = Literal["created_at", "name", "email", "role", "status", "last_login"]


# ============== Request Schemas ==============

class CreateUserRequest(BaseModel):
    """Create a pending user directly."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=100)
    role: UserRole = "staff"
    phone: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class InviteUserRequest(BaseModel):
    """Invite a user by email."""

    email: EmailStr
    name: str = Field(..., min_length=2, max_length=100)
    role: UserRole = "staff"

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


class UpdateUserRequest(BaseModel):
    """Administrative update of another user."""

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    specialty: Optional[str] = None
    npi: Optional[str] = None


# ============== Response Schemas ==============

class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


class InviteUserResponse(BaseModel):
    success: bool = True
    message: str
    user: UserResponse
    email_sent: bool = False
