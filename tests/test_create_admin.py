"""The create_admin maintenance script."""

import pytest

from awv.core.security import verify_password
from awv.database import Database
from awv.features.auth.models import User
from scripts.create_admin import create_admin


async def no_connection():
    return None


@pytest.fixture
def shared_db(db, monkeypatch):
    """Run the script against the test database."""
    monkeypatch.setattr(Database, "connect_db", no_connection)
    monkeypatch.setattr(Database, "close_db", no_connection)
    return db


async def test_creates_admin_with_default_name(shared_db):
    await create_admin("root@example.com", None, "Sup3rSecret")

    user = await User.find_one(User.email == "root@example.com")
    assert user.name == "Administrator"
    assert user.role == "admin"
    assert user.status == "active"
    assert verify_password("Sup3rSecret", user.password_hash)


async def test_promotion_keeps_existing_name(shared_db, make_user):
    await make_user("staff", email="sam@example.com", status="inactive", name="Sam Staff")

    await create_admin("sam@example.com", None, "Sup3rSecret")

    user = await User.find_one(User.email == "sam@example.com")
    assert user.name == "Sam Staff"
    assert user.role == "admin"
    assert user.status == "active"


async def test_promotion_with_explicit_name(shared_db, make_user):
    await make_user("staff", email="sam@example.com", name="Sam Staff")

    await create_admin("sam@example.com", "Samantha Staff", "Sup3rSecret")

    assert (await User.find_one(User.email == "sam@example.com")).name == "Samantha Staff"
