from fastapi import APIRouter, Depends
from awv.features.auth.schemas import (
    LoginRequest,
    FirebaseLoginRequest,
    RegisterRequest,
    ChangePasswordRequest,
    UpdateProfileRequest,
    UserResponse,
    TokenResponse,
    InvitationInfoResponse,
)
from awv.features.auth.service import AuthService
from awv.features.auth.dependencies import get_current_user
from awv.features.auth.models import User
from awv.shared.schemas import MessageResponse


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(login_data: LoginRequest):
    """
    Login with email and password.

    Returns access token and user information.
    """
    return await AuthService.login(login_data)


@router.post("/firebase", response_model=TokenResponse)
async def firebase_login(request: FirebaseLoginRequest):
    """
    Exchange a Firebase ID token for an API access token.

    The Firebase identity must belong to an existing, active account.
    """
    return await AuthService.firebase_login(request.id_token)


@router.get("/invitations/{token}", response_model=InvitationInfoResponse)
async def get_invitation(token: str):
    """Look up a pending invitation (no authentication required)."""
    return await AuthService.get_invitation(token)


@router.post("/register", response_model=TokenResponse)
async def register(request: RegisterRequest):
    """
    Accept an invitation by choosing a password.

    Activates the account and logs the user in.
    """
    return await AuthService.register(request)


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return AuthService.user_to_response(current_user)


@router.patch("/me", response_model=UserResponse)
async def update_me(
    request: UpdateProfileRequest,
    current_user: User = Depends(get_current_user)
):
    """Update current user profile."""
    user = await AuthService.update_profile(current_user, request)
    return AuthService.user_to_response(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user)
):
    """Change password for the current user."""
    await AuthService.change_password(current_user, request)
    return MessageResponse(message="Password changed successfully")


@router.post("/logout", response_model=MessageResponse)
async def logout(current_user: User = Depends(get_current_user)):
    """
    Logout current user.

    Tokens are stateless; the client discards its token.
    """
    return MessageResponse(message="Logged out successfully")
