"""FastAPI routers."""

from awv.routers.health import router as health_router

__all__ = ["health_router"]
