"""MongoDB database connection manager."""

from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from typing import Optional

from awv.config import settings
from awv.core.logging import logger


def document_models() -> list:
    """All Beanie document models registered with the database."""
    from awv.features.auth.models import User
    from awv.features.patients.models import Patient
    from awv.features.templates.models import Template
    from awv.features.visits.models import Visit
    from awv.features.recommendations.models import Recommendation
    from awv.features.practice.models import PracticeSettings

    return [User, Patient, Template, Visit, Recommendation, PracticeSettings]


class Database:
    """MongoDB database connection manager."""

    client: Optional[AsyncIOMotorClient] = None

    @classmethod
    async def init(cls, database) -> None:
        """Bind Beanie to an already-created database handle."""
        await init_beanie(database=database, document_models=document_models())

    @classmethod
    async def connect_db(cls):
        """Connect to MongoDB and initialize Beanie."""
        cls.client = AsyncIOMotorClient(settings.MONGODB_URL)
        await cls.init(cls.client[settings.DATABASE_NAME])
        logger.info(f"Connected to MongoDB database: {settings.DATABASE_NAME}")

    @classmethod
    async def close_db(cls):
        """Close MongoDB connection."""
        if cls.client:
            cls.client.close()
            cls.client = None
            logger.info("Closed MongoDB connection")

    @classmethod
    async def ping(cls) -> bool:
        if cls.client is None:
            return False
        await cls.client.admin.command("ping")
        return True
