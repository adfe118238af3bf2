# Practice Settings Feature - Router

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from awv.features.practice.schemas import UpdatePracticeRequest, PracticeResponse, LogoUploadResponse
from awv.features.practice.service import PracticeService
from awv.features.auth.dependencies import get_current_user, require_roles
from awv.features.auth.models import User
from awv.shared.schemas import MessageResponse


router = APIRouter(prefix="/practice", tags=["Practice"])


@router.get("", response_model=PracticeResponse)
async def get_practice(current_user: User = Depends(get_current_user)):
    """
    Get the practice settings.

    Default settings are created on first access.
    """
    practice = await PracticeService.get_settings()
    return PracticeService.practice_to_response(practice)


@router.put("", response_model=PracticeResponse)
async def update_practice(
    request: UpdatePracticeRequest,
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """Update the practice settings."""
    practice = await PracticeService.update_settings(request, current_user)
    return PracticeService.practice_to_response(practice)


@router.post("/logo", response_model=LogoUploadResponse)
async def upload_logo(
    file: UploadFile = File(...),
    current_user: User = Depends(require_roles("admin", "provider")),
):
    """
    Upload the practice logo.

    - **file**: Image file (JPG or PNG); large images are downscaled
    """
    practice = await PracticeService.upload_logo(file, current_user)
    return LogoUploadResponse(message="Logo uploaded successfully", logo_url=practice.logo_url)


@router.get("/logo")
async def get_logo(current_user: User = Depends(get_current_user)):
    """Download the practice logo."""
    return FileResponse(PracticeService.get_logo_file(), media_type="image/jpeg")


@router.delete("/logo", response_model=MessageResponse)
async def delete_logo(current_user: User = Depends(require_roles("admin", "provider"))):
    """Remove the practice logo."""
    await PracticeService.delete_logo(current_user)
    return MessageResponse(message="Logo removed successfully")
