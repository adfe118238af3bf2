from typing import Optional
from bson import ObjectId
from beanie import PydanticObjectId
from fastapi import HTTPException, status


class CredentialsException(HTTPException):
    """Exception for invalid credentials."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class NotFoundException(HTTPException):
    """Exception for resource not found."""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class BadRequestException(HTTPException):
    """Exception for bad request."""

    def __init__(self, detail: str = "Bad request"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class ConflictException(HTTPException):
    """Exception for resource conflict."""

    def __init__(self, detail: str = "Resource already exists"):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ForbiddenException(HTTPException):
    """Exception for forbidden access."""

    def __init__(self, detail: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class ServiceUnavailableException(HTTPException):
    """Exception for an optional integration that is not configured."""

    def __init__(self, detail: str = "Service unavailable"):
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=detail,
        )


class ValidationFailedException(BadRequestException):
    """Bad request carrying a list of field-level messages."""

    def __init__(self, detail: str, errors: Optional[list] = None):
        super().__init__(detail)
        self.errors = errors or []


def parse_object_id(value: str, label: str = "resource") -> PydanticObjectId:
    """Convert a path/query id into an ObjectId, raising 400 when malformed."""
    if not value or not ObjectId.is_valid(value):
        raise BadRequestException(f"Invalid {label} ID")
    return PydanticObjectId(value)
