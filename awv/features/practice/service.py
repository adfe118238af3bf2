# Practice Settings Feature - Service

import io
from datetime import datetime
from pathlib import Path
from typing import Optional
from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError
from pymongo import ReturnDocument
from awv.config import settings
from awv.features.practice.models import PracticeSettings, SETTINGS_KEY
from awv.features.practice.schemas import UpdatePracticeRequest, PracticeResponse
from awv.features.auth.models import User
from awv.core.logging import logger
from awv.shared.exceptions import BadRequestException, NotFoundException


LOGO_FILENAME = "practice_logo.jpg"
ALLOWED_LOGO_TYPES = ["image/jpeg", "image/jpg", "image/png"]


def default_settings() -> dict:
    now = datetime.utcnow()
    return {
        "name": settings.PRACTICE_DEFAULT_NAME,
        "address": settings.PRACTICE_DEFAULT_ADDRESS,
        "city": settings.PRACTICE_DEFAULT_CITY,
        "state": settings.PRACTICE_DEFAULT_STATE,
        "zip_code": settings.PRACTICE_DEFAULT_ZIP,
        "phone": settings.PRACTICE_DEFAULT_PHONE,
        "email": settings.PRACTICE_DEFAULT_EMAIL,
        "website": "www.healthcarewellness.com",
        "tax_id": None,
        "npi": None,
        "logo_url": None,
        "primary_color": "#2563EB",
        "office_hours": [],
        "created_at": now,
        "updated_at": now,
    }


class PracticeService:
    """Service class for the practice settings singleton."""

    @staticmethod
    async def get_settings() -> PracticeSettings:
        """
        Return the practice settings, creating the defaults on first access.

        A single upsert on the unique ``key`` makes concurrent first reads
        converge on one document.
        """
        collection = PracticeSettings.get_motor_collection()
        document = await collection.find_one_and_update(
            {"key": SETTINGS_KEY},
            {"$setOnInsert": default_settings()},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return PracticeSettings.model_validate(document)

    @staticmethod
    async def update_settings(request: UpdatePracticeRequest, current_user: User) -> PracticeSettings:
        practice = await PracticeService.get_settings()

        update_dict = request.model_dump(exclude_unset=True)
        if update_dict.get("primary_color") is None:
            update_dict.pop("primary_color", None)
        if "office_hours" in update_dict:
            update_dict["office_hours"] = request.office_hours or []

        for field, value in update_dict.items():
            setattr(practice, field, value)

        practice.update_timestamp()
        await practice.save()

        logger.info(f"Practice settings updated by {current_user.email}")
        return practice

    @staticmethod
    def logo_path() -> Path:
        return Path(settings.UPLOAD_DIR) / LOGO_FILENAME

    @staticmethod
    def _process_logo(file_content: bytes) -> bytes:
        """Validate the image with Pillow and downscale it to the logo size."""
        try:
            image = Image.open(io.BytesIO(file_content))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            logger.warning(f"Rejected practice logo upload: {e}")
            raise BadRequestException("Invalid image file. Please upload a valid image.")

        # Convert to RGB if necessary (handles RGBA, P, etc.)
        if image.mode in ("RGBA", "LA", "P"):
            image = image.convert("RGBA")
            rgb_image = Image.new("RGB", image.size, (255, 255, 255))
            rgb_image.paste(image, mask=image.split()[3])
            image = rgb_image
        elif image.mode != "RGB":
            image = image.convert("RGB")

        max_size = settings.LOGO_MAX_DIMENSION
        if image.width > max_size or image.height > max_size:
            image.thumbnail((max_size, max_size), Image.Resampling.LANCZOS)

        output = io.BytesIO()
        image.save(output, format="JPEG", quality=90, optimize=True)
        return output.getvalue()

    @staticmethod
    async def upload_logo(file: UploadFile, current_user: User) -> PracticeSettings:
        if file.content_type not in ALLOWED_LOGO_TYPES:
            raise BadRequestException("Invalid file type. Only JPG and PNG images are allowed.")

        file_content = await file.read()
        file_size_mb = len(file_content) / (1024 * 1024)
        if file_size_mb > settings.MAX_LOGO_SIZE_MB:
            raise BadRequestException(
                f"File size exceeds {settings.MAX_LOGO_SIZE_MB}MB limit. Please upload a smaller image."
            )

        processed = PracticeService._process_logo(file_content)

        path = PracticeService.logo_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(processed)

        practice = await PracticeService.get_settings()
        practice.logo_url = f"{settings.API_PREFIX}/practice/logo"
        practice.update_timestamp()
        await practice.save()

        logger.info(f"Practice logo uploaded by {current_user.email} ({len(processed)} bytes)")
        return practice

    @staticmethod
    def get_logo_file() -> Path:
        path = PracticeService.logo_path()
        if not path.exists():
            raise NotFoundException("No logo has been uploaded")
        return path

    @staticmethod
    def logo_for_report() -> Optional[bytes]:
        path = PracticeService.logo_path()
        return path.read_bytes() if path.exists() else None

    @staticmethod
    async def delete_logo(current_user: User) -> None:
        practice = await PracticeService.get_settings()
        path = PracticeService.logo_path()

        if not practice.logo_url and not path.exists():
            raise NotFoundException("No logo has been uploaded")

        path.unlink(missing_ok=True)
        practice.logo_url = None
        practice.update_timestamp()
        await practice.save()

        logger.info(f"Practice logo removed by {current_user.email}")

    @staticmethod
    def practice_to_response(practice: PracticeSettings) -> PracticeResponse:
        return PracticeResponse(
            id=str(practice.id),
            name=practice.name,
            address=practice.address,
            city=practice.city,
            state=practice.state,
            zip_code=practice.zip_code,
            phone=practice.phone,
            email=practice.email,
            website=practice.website,
            tax_id=practice.tax_id,
            npi=practice.npi,
            logo_url=practice.logo_url,
            primary_color=practice.primary_color,
            office_hours=practice.office_hours,
            created_at=practice.created_at,
            updated_at=practice.updated_at,
        )
