"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from awv.config import settings
from awv.database import Database
from awv.core.logging import logger

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "awv-backend",
        "environment": settings.ENVIRONMENT,
        "version": "1.0.0"
    }


@router.get("/ready")
async def readiness_check():
    """Readiness check; the service is ready once MongoDB answers a ping."""
    try:
        database_ok = await Database.ping()
    except PyMongoError as e:
        logger.warning(f"Readiness check failed: {e}")
        database_ok = False

    if not database_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not ready", "database": "unavailable"},
        )
    return {"status": "ready", "database": "connected"}
