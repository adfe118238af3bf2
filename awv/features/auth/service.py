from datetime import datetime
from typing import Optional
from pymongo.errors import DuplicateKeyError
from awv.features.auth.models import User
from awv.features.auth.schemas import (
    LoginRequest,
    RegisterRequest,
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserResponse,
    TokenResponse,
    InvitationInfoResponse,
    NotificationPreferencesSchema,
)
from awv.core.security import verify_password, get_password_hash, create_access_token
from awv.core.firebase import is_firebase_enabled, verify_firebase_token
from awv.shared.exceptions import (
    BadRequestException,
    NotFoundException,
    CredentialsException,
    ServiceUnavailableException,
    ConflictException,
)
from awv.core.logging import logger


class AuthService:
    """Authentication service for handling auth business logic."""

    @staticmethod
    def user_to_response(user: User) -> UserResponse:
        return UserResponse(
            id=str(user.id),
            email=user.email,
            name=user.name,
            role=user.role,
            status=user.status,
            phone=user.phone,
            title=user.title,
            specialty=user.specialty,
            npi=user.npi,
            profile_image=user.profile_image,
            last_login=user.last_login,
            notification_preferences=NotificationPreferencesSchema(**user.notification_preferences.model_dump()),
            invited_by=user.invited_by,
            invitation_sent_at=user.invitation_sent_at,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    @staticmethod
    def issue_token(user: User) -> TokenResponse:
        access_token = create_access_token(
            data={"sub": user.email, "user_id": str(user.id), "role": user.role}
        )
        return TokenResponse(access_token=access_token, user=AuthService.user_to_response(user))

    @staticmethod
    async def get_user_by_email(email: str) -> Optional[User]:
        """Get user by email address."""
        return await User.find_one(User.email == email.lower())

    @staticmethod
    async def _record_login(user: User) -> None:
        user.last_login = datetime.utcnow()
        await user.save()

    @staticmethod
    async def login(login_data: LoginRequest) -> TokenResponse:
        """
        Authenticate user and return access token.

        Pending and inactive accounts are rejected with the same 401 as a
        wrong password.
        """
        user = await AuthService.get_user_by_email(login_data.email)
        if not user or not verify_password(login_data.password, user.password_hash):
            logger.warning(f"Failed login attempt for {login_data.email}")
            raise CredentialsException("Invalid email or password")

        if not user.is_active:
            logger.warning(f"Login attempt on {user.status} account {user.email}")
            raise CredentialsException("Account is not active")

        await AuthService._record_login(user)
        logger.info(f"User {user.email} logged in")
        return AuthService.issue_token(user)

    @staticmethod
    async def firebase_login(id_token: str) -> TokenResponse:
        """
        Sign in with a Firebase ID token.

        The user is matched on ``firebase_uid`` first, then on the verified
        email; a match by email links the uid to the account.
        """
        if not is_firebase_enabled():
            raise ServiceUnavailableException("Firebase authentication is not configured")

        try:
            decoded = verify_firebase_token(id_token)
        except ValueError as e:
            raise CredentialsException(str(e))

        uid = decoded.get("uid")
        email = (decoded.get("email") or "").lower()

        user = await User.find_one(User.firebase_uid == uid) if uid else None
        if user is None and email:
            user = await AuthService.get_user_by_email(email)
            if user is not None:
                user.firebase_uid = uid
                logger.info(f"Linked Firebase account to {user.email}")

        if user is None:
            logger.warning(f"Firebase sign-in for unknown account {email or uid}")
            raise CredentialsException("No account is registered for this identity")

        if not user.is_active:
            raise CredentialsException("Account is not active")

        try:
            await AuthService._record_login(user)
        except DuplicateKeyError:
            raise ConflictException("This Firebase account is already linked to another user")
        logger.info(f"User {user.email} logged in with Firebase")
        return AuthService.issue_token(user)

    @staticmethod
    async def get_user_by_invite_token(token: str) -> User:
        user = await User.find_one(User.invite_token == token, User.status == "pending")
        if not user:
            raise NotFoundException("Invitation not found or already used")
        return user

    @staticmethod
    async def get_invitation(token: str) -> InvitationInfoResponse:
        """Public lookup of a still-valid invitation."""
        user = await AuthService.get_user_by_invite_token(token)
        if user.invite_expires_at and user.invite_expires_at < datetime.utcnow():
            raise NotFoundException("Invitation has expired")
        return InvitationInfoResponse(
            email=user.email,
            name=user.name,
            role=user.role,
            expires_at=user.invite_expires_at,
        )

    @staticmethod
    async def register(request: RegisterRequest) -> TokenResponse:
        """Accept an invitation: set the password and activate the account."""
        user = await AuthService.get_user_by_invite_token(request.token)

        if user.invite_expires_at and user.invite_expires_at < datetime.utcnow():
            raise BadRequestException("Invitation has expired. Ask an administrator to resend it.")

        user.password_hash = get_password_hash(request.password)
        if request.name:
            user.name = request.name
        user.status = "active"
        user.invite_token = None
        user.invite_expires_at = None
        user.last_login = datetime.utcnow()
        user.update_timestamp()
        await user.save()

        logger.info(f"User {user.email} accepted invitation")
        return AuthService.issue_token(user)

    @staticmethod
    async def update_profile(user: User, request: UpdateProfileRequest) -> User:
        """Update the caller's own profile fields."""
        update_dict = request.model_dump(exclude_unset=True)

        for field, value in update_dict.items():
            if field == "notification_preferences":
                if value is not None:
                    user.notification_preferences = user.notification_preferences.model_copy(update=value)
                continue
            if field == "name" and value is None:
                continue
            setattr(user, field, value)

        user.update_timestamp()
        await user.save()

        logger.info(f"Updated profile for {user.email}")
        return user

    @staticmethod
    async def change_password(user: User, request: ChangePasswordRequest) -> None:
        if not verify_password(request.current_password, user.password_hash):
            raise BadRequestException("Current password is incorrect")

        user.password_hash = get_password_hash(request.new_password)
        user.update_timestamp()
        await user.save()

        logger.info(f"Password changed for {user.email}")
