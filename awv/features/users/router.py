# User Management Feature - Router

from fastapi import APIRouter, Depends, Query, status
from typing import Optional, Literal
from awv.features.auth.models import User, UserRole, UserStatus
from awv.features.auth.schemas import UserResponse
from awv.features.auth.service import AuthService
from awv.features.auth.dependencies import require_roles
from awv.features.users.schemas import (
    CreateUserRequest,
    InviteUserRequest,
    UpdateUserRequest,
    UserListResponse,
    InviteUserResponse,
    UserSortField,
)
from awv.features.users.service import UserService
from awv.shared.schemas import MessageResponse, Pagination


router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
    sort_field: UserSortField = "created_at",
    sort_order: Literal["asc", "desc"] = "desc",
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """
    List users with search, filters and pagination.

    - **search**: matches name or email (case-insensitive)
    - **role** / **status**: exact filters
    """
    users, total = await UserService.list_users(
        page=page,
        limit=limit,
        search=search,
        role=role,
        status=status,
        sort_field=sort_field,
        direction=1 if sort_order == "asc" else -1,
    )
    return UserListResponse(
        users=[AuthService.user_to_response(u) for u in users],
        pagination=Pagination.build(total, page, limit),
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    current_user: User = Depends(require_roles("admin")),
):
    """Create a pending user account."""
    user = await UserService.create_user(request, current_user)
    return AuthService.user_to_response(user)


@router.post("/invite", response_model=InviteUserResponse, status_code=status.HTTP_201_CREATED)
async def invite_user(
    request: InviteUserRequest,
    current_user: User = Depends(require_roles("admin")),
):
    """
    Invite a new user by email.

    The user is stored as pending until they accept the invitation.
    """
    user, email_sent = await UserService.invite_user(request, current_user)
    message = f"Invitation sent to {user.email}" if email_sent else f"Invitation created for {user.email}"
    return InviteUserResponse(
        message=message,
        user=AuthService.user_to_response(user),
        email_sent=email_sent,
    )


@router.post("/{user_id}/resend-invitation", response_model=InviteUserResponse)
async def resend_invitation(
    user_id: str,
    current_user: User = Depends(require_roles("admin")),
):
    """Issue a new invitation token for a pending user."""
    user, email_sent = await UserService.resend_invitation(user_id, current_user)
    return InviteUserResponse(
        message=f"Invitation resent to {user.email}",
        user=AuthService.user_to_response(user),
        email_sent=email_sent,
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    user = await UserService.get_user(user_id)
    return AuthService.user_to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    current_user: User = Depends(require_roles("admin")),
):
    """Update a user's profile, role or status."""
    user = await UserService.update_user(user_id, request, current_user)
    return AuthService.user_to_response(user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    current_user: User = Depends(require_roles("admin")),
):
    """
    Permanently delete a user.

    Admins cannot delete themselves or the last active admin.
    """
    await UserService.delete_user(user_id, current_user)
    return MessageResponse(message="User deleted successfully")
