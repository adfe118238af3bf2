"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient
from pymongo import ASCENDING

from awv.config import settings
from awv.core.security import create_access_token, get_password_hash
from awv.database import Database
from awv.features.auth.models import User
from awv.main import app


TEST_PASSWORD = "Password1"


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from SMTP and the real upload directory."""
    monkeypatch.setattr(settings, "SMTP_USER", "")
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))


@pytest_asyncio.fixture
async def db():
    """A fresh in-memory MongoDB database with Beanie initialised."""
    client = AsyncMongoMockClient()
    database = client["awv_test"]
    await Database.init(database)
    # mongomock drops partialFilterExpression from IndexModel-based
    # create_indexes; recreate the User.firebase_uid index as declared.
    await database["users"].drop_index("firebase_uid_1")
    await database["users"].create_index(
        [("firebase_uid", ASCENDING)],
        unique=True,
        partialFilterExpression={"firebase_uid": {"$type": "string"}},
    )
    yield database


@pytest_asyncio.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


def auth_headers(user: User) -> dict:
    token = create_access_token(data={"sub": user.email, "user_id": str(user.id), "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def make_user(db):
    """Factory inserting users with a known password."""

    async def _make(role: str = "staff", email: str = None, status: str = "active", name: str = None) -> User:
        user = User(
            email=email or f"{role}@example.com",
            name=name or f"Test {role.title()}",
            role=role,
            status=status,
            password_hash=get_password_hash(TEST_PASSWORD),
        )
        await user.insert()
        return user

    return _make


@pytest_asyncio.fixture
async def admin(make_user) -> User:
    return await make_user("admin", name="Alice Admin")


@pytest_asyncio.fixture
async def provider(make_user) -> User:
    return await make_user("provider", name="Dr. Paula Provider")


@pytest_asyncio.fixture
async def staff(make_user) -> User:
    return await make_user("staff", name="Sam Staff")


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers(admin)


@pytest.fixture
def provider_headers(provider) -> dict:
    return auth_headers(provider)


@pytest.fixture
def staff_headers(staff) -> dict:
    return auth_headers(staff)


def awv_template_payload(name: str = "Annual Wellness Visit") -> dict:
    """A template exercising conditional logic and every scored question type."""
    return {
        "name": name,
        "description": "Medicare annual wellness questionnaire",
        "sections": [
            {
                "id": "general",
                "title": "General Health",
                "questions": [
                    {
                        "id": "overall_health",
                        "text": "How would you rate your overall health?",
                        "type": "multipleChoice",
                        "required": True,
                        "options": [
                            {"value": "excellent", "label": "Excellent"},
                            {"value": "good", "label": "Good"},
                            {
                                "value": "poor",
                                "label": "Poor",
                                "recommendation": "Discuss a plan to improve overall health.",
                            },
                        ],
                    },
                    {
                        "id": "smoker",
                        "text": "Do you currently smoke?",
                        "type": "boolean",
                        "required": True,
                        "options": [
                            {
                                "value": True,
                                "label": "Yes",
                                "recommendation": "Offer smoking cessation counseling and resources.",
                            },
                            {"value": False, "label": "No"},
                        ],
                        "recommendation_domain": "Tobacco Use",
                        "recommendation_priority": "high",
                    },
                    {
                        "id": "packs_per_day",
                        "text": "How many packs per day?",
                        "type": "numeric",
                        "required": True,
                        "conditional_logic": {
                            "depends_on": "smoker",
                            "show_when": {"value": True, "operator": "equals"},
                        },
                    },
                ],
            },
            {
                "id": "measurements",
                "title": "Measurements",
                "questions": [
                    {"id": "bmi", "text": "Body mass index", "type": "bmi"},
                    {"id": "vitals", "text": "Vital signs", "type": "vitalSigns"},
                ],
            },
            {
                "id": "screenings",
                "title": "Screenings",
                "questions": [
                    {"id": "phq2", "text": "PHQ-2 depression screening", "type": "phq2"},
                    {
                        "id": "cognition",
                        "text": "Cognitive assessment",
                        "type": "cognitiveAssessment",
                        "config": {"subtype": "mmse"},
                    },
                    {"id": "cage", "text": "CAGE questionnaire", "type": "cageScreening"},
                ],
            },
            {
                "id": "planning",
                "title": "Advance Care Planning",
                "questions": [
                    {
                        "id": "advance_directive",
                        "text": "Do you have an advance directive?",
                        "type": "boolean",
                        "recommendation": "Advance directive on file: {value}.",
                        "recommendation_priority": "low",
                    },
                ],
            },
        ],
    }


# Answers producing six recommendations across six domains
AWV_RESPONSES = {
    "overall_health": "good",
    "smoker": True,
    "packs_per_day": 1,
    "bmi": {"weight": 180, "height": 68},
    "vitals": {"systolic": 142, "diastolic": 88, "heartRate": 72},
    "phq2": {"interest": 1, "depressed": 1},
    "cognition": 22,
    "cage": {"cutDown": True, "annoyed": False, "guilty": False, "eyeOpener": False},
}


@pytest.fixture
def template_payload() -> dict:
    return awv_template_payload()


@pytest.fixture
def patient_payload() -> dict:
    return {
        "first_name": "Margaret",
        "last_name": "Hamilton",
        "date_of_birth": "1950-03-17",
        "gender": "female",
        "email": "margaret@example.com",
        "phone": "(555) 010-2000",
        "address": {"street": "1 Main St", "city": "Springfield", "state": "IL", "zip_code": "62701"},
    }
