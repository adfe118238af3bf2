# User Management Feature - Service

from typing import Optional, List, Tuple
from datetime import datetime, timedelta
from awv.config import settings
from awv.features.auth.models import User
from awv.features.users.schemas import CreateUserRequest, InviteUserRequest, UpdateUserRequest
from awv.core.security import generate_invitation_token
from awv.core.email import send_invitation_email
from awv.core.logging import logger
from awv.shared.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    parse_object_id,
)
from awv.shared.schemas import regex_filter


class UserService:
    """Service class for user administration and invitations."""

    @staticmethod
    async def list_users(
        page: int,
        limit: int,
        search: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        sort_field: str = "created_at",
        direction: int = -1,
    ) -> Tuple[List[User], int]:
        """Return one page of users and the total match count."""
        query = {}
        if search:
            query.update(regex_filter(["name", "email"], search))
        if role:
            query["role"] = role
        if status:
            query["status"] = status

        total = await User.find(query).count()
        users = await (
            User.find(query)
            .sort((sort_field, direction), ("_id", direction))
            .skip((page - 1) * limit)
            .limit(limit)
            .to_list()
        )
        return users, total

    @staticmethod
    async def get_user(user_id: str) -> User:
        user = await User.get(parse_object_id(user_id, "user"))
        if not user:
            raise NotFoundException("User not found")
        return user

    @staticmethod
    async def _ensure_email_free(email: str) -> None:
        if await User.find_one(User.email == email):
            raise ConflictException("A user with this email already exists")

    @staticmethod
    async def create_user(request: CreateUserRequest, created_by: User) -> User:
        """Create a user in pending status; they activate through an invitation."""
        await UserService._ensure_email_free(request.email)

        user = User(
            **request.model_dump(),
            status="pending",
            invited_by=str(created_by.id),
        )
        await user.insert()

        logger.info(f"User {user.email} created by {created_by.email}")
        return user

    @staticmethod
    def _issue_invitation(user: User) -> None:
        user.invite_token = generate_invitation_token()
        user.invite_expires_at = datetime.utcnow() + timedelta(hours=settings.INVITATION_EXPIRE_HOURS)
        user.invitation_sent_at = datetime.utcnow()

    @staticmethod
    async def _send_invitation(user: User, inviter: User) -> bool:
        try:
            return await send_invitation_email(
                email=user.email,
                name=user.name,
                role=user.role,
                token=user.invite_token,
                invited_by=inviter.name,
            )
        except Exception as e:
            # Invitation stays valid; the admin can resend it
            logger.error(f"Failed to send invitation email to {user.email}: {e}")
            return False

    @staticmethod
    async def invite_user(request: InviteUserRequest, inviter: User) -> Tuple[User, bool]:
        """
        Create a pending user with a fresh invitation token and email them.

        Returns:
            tuple: (user, email_sent)
        """
        await UserService._ensure_email_free(request.email)

        user = User(
            email=request.email,
            name=request.name,
            role=request.role,
            status="pending",
            invited_by=str(inviter.id),
        )
        UserService._issue_invitation(user)
        await user.insert()

        logger.info(f"Invitation created for {user.email} ({user.role}) by {inviter.email}")

        email_sent = await UserService._send_invitation(user, inviter)
        return user, email_sent

    @staticmethod
    async def resend_invitation(user_id: str, inviter: User) -> Tuple[User, bool]:
        """Rotate the invitation token of a pending user and resend the email."""
        user = await UserService.get_user(user_id)
        if user.status != "pending":
            raise BadRequestException("Only pending users can be re-invited")

        UserService._issue_invitation(user)
        user.update_timestamp()
        await user.save()

        logger.info(f"Invitation resent to {user.email} by {inviter.email}")

        email_sent = await UserService._send_invitation(user, inviter)
        return user, email_sent

    @staticmethod
    async def _count_other_active_admins(user: User) -> int:
        return await User.find(
            User.role == "admin",
            User.status == "active",
            User.id != user.id,
        ).count()

    @staticmethod
    async def update_user(user_id: str, request: UpdateUserRequest, current_user: User) -> User:
        """Update a user; the last active admin cannot be demoted or deactivated."""
        user = await UserService.get_user(user_id)
        update_dict = request.model_dump(exclude_unset=True, exclude_none=True)

        loses_admin = (
            user.role == "admin"
            and user.status == "active"
            and (
                update_dict.get("role", "admin") != "admin"
                or update_dict.get("status", "active") != "active"
            )
        )
        if loses_admin and await UserService._count_other_active_admins(user) == 0:
            raise ConflictException("Cannot demote or deactivate the last active admin")

        for field, value in update_dict.items():
            setattr(user, field, value)

        user.update_timestamp()
        await user.save()

        logger.info(f"User {user.email} updated by {current_user.email}: {', '.join(update_dict) or 'no changes'}")
        return user

    @staticmethod
    async def delete_user(user_id: str, current_user: User) -> None:
        user = await UserService.get_user(user_id)

        if user.id == current_user.id:
            raise BadRequestException("You cannot delete your own account")

        if user.role == "admin" and user.status == "active":
            if await UserService._count_other_active_admins(user) == 0:
                raise ConflictException("Cannot delete the last active admin")

        await user.delete()
        logger.info(f"User {user.email} deleted by {current_user.email}")
