"""Authentication endpoints, invitations and role checks."""

from datetime import datetime, timedelta

import pytest
from pymongo.errors import DuplicateKeyError

from awv.features.auth.models import User
from awv.features.auth.service import AuthService

from conftest import TEST_PASSWORD, auth_headers


async def test_login_returns_token_and_user(client, provider):
    response = await client.post("/api/auth/login", json={"email": "PROVIDER@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["email"] == "provider@example.com"
    assert data["user"]["role"] == "provider"
    assert "password_hash" not in data["user"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {data['access_token']}"})
    assert me.status_code == 200
    assert me.json()["id"] == str(provider.id)

    stored = await User.get(provider.id)
    assert stored.last_login is not None


async def test_login_with_wrong_password(client, provider):
    response = await client.post("/api/auth/login", json={"email": "provider@example.com", "password": "Wrong1234"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_login_unknown_email(client, db):
    response = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": TEST_PASSWORD})
    assert response.status_code == 401


async def test_inactive_account_cannot_log_in(client, make_user):
    await make_user("staff", email="gone@example.com", status="inactive")

    response = await client.post("/api/auth/login", json={"email": "gone@example.com", "password": TEST_PASSWORD})

    assert response.status_code == 401
    assert response.json()["error"] == "Account is not active"


async def test_login_validation_error_envelope(client, db):
    response = await client.post("/api/auth/login", json={"email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation failed"
    fields = {detail["field"] for detail in body["details"]}
    assert {"email", "password"} <= fields


async def test_protected_route_requires_token(client, db):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}

    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401


async def test_token_of_deactivated_user_is_rejected(client, staff, staff_headers):
    staff.status = "inactive"
    await staff.save()

    response = await client.get("/api/auth/me", headers=staff_headers)
    assert response.status_code == 401


async def test_wrong_role_is_forbidden(client, staff_headers):
    response = await client.post("/api/users/invite", headers=staff_headers, json={"email": "x@example.com", "name": "New Person"})

    assert response.status_code == 403
    assert response.json() == {"error": "You do not have permission to perform this action"}


async def test_update_profile_and_preferences(client, provider_headers):
    response = await client.patch(
        "/api/auth/me",
        headers=provider_headers,
        json={"title": "MD", "specialty": "Geriatrics", "notification_preferences": {"email": False}},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "MD"
    assert data["specialty"] == "Geriatrics"
    assert data["notification_preferences"] == {"email": False, "in_app": True}


async def test_null_name_keeps_existing_name(client, provider, provider_headers):
    response = await client.patch("/api/auth/me", headers=provider_headers, json={"name": None, "phone": "555-0101"})

    assert response.status_code == 200
    assert response.json()["name"] == "Dr. Paula Provider"
    assert response.json()["phone"] == "555-0101"

    response = await client.post("/api/auth/login", json={"email": provider.email, "password": TEST_PASSWORD})
    assert response.status_code == 200


async def test_change_password(client, provider, provider_headers):
    response = await client.post(
        "/api/auth/change-password",
        headers=provider_headers,
        json={"current_password": "Wrong1234", "new_password": "NewPassword2"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Current password is incorrect"

    response = await client.post(
        "/api/auth/change-password",
        headers=provider_headers,
        json={"current_password": TEST_PASSWORD, "new_password": "NewPassword2"},
    )
    assert response.status_code == 200

    login = await client.post("/api/auth/login", json={"email": provider.email, "password": "NewPassword2"})
    assert login.status_code == 200


async def test_weak_new_password_is_rejected(client, provider_headers):
    response = await client.post(
        "/api/auth/change-password",
        headers=provider_headers,
        json={"current_password": TEST_PASSWORD, "new_password": "alllowercase1"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


async def test_invitation_flow(client, admin_headers):
    invite = await client.post(
        "/api/users/invite",
        headers=admin_headers,
        json={"email": "New.Doctor@Example.com", "name": "New Doctor", "role": "provider"},
    )
    assert invite.status_code == 201
    assert invite.json()["email_sent"] is False
    assert invite.json()["user"]["status"] == "pending"

    user = await User.find_one(User.email == "new.doctor@example.com")
    token = user.invite_token
    assert token

    # Pending accounts cannot log in before accepting
    login = await client.post("/api/auth/login", json={"email": "new.doctor@example.com", "password": TEST_PASSWORD})
    assert login.status_code == 401

    info = await client.get(f"/api/auth/invitations/{token}")
    assert info.status_code == 200
    assert info.json()["email"] == "new.doctor@example.com"
    assert info.json()["role"] == "provider"

    registered = await client.post("/api/auth/register", json={"token": token, "password": "Welcome123"})
    assert registered.status_code == 200
    assert registered.json()["user"]["status"] == "active"

    # Tokens are single use
    again = await client.post("/api/auth/register", json={"token": token, "password": "Welcome123"})
    assert again.status_code == 404

    login = await client.post("/api/auth/login", json={"email": "new.doctor@example.com", "password": "Welcome123"})
    assert login.status_code == 200


async def test_expired_invitation(client, db):
    user = User(
        email="late@example.com",
        name="Late Comer",
        role="staff",
        status="pending",
        invite_token="expired-token",
        invite_expires_at=datetime.utcnow() - timedelta(hours=1),
    )
    await user.insert()

    info = await client.get("/api/auth/invitations/expired-token")
    assert info.status_code == 404

    response = await client.post("/api/auth/register", json={"token": "expired-token", "password": "Welcome123"})
    assert response.status_code == 400
    assert "expired" in response.json()["error"]


async def test_firebase_login_disabled_without_credentials(client, db):
    response = await client.post("/api/auth/firebase", json={"id_token": "some-token"})

    assert response.status_code == 503
    assert response.json()["error"] == "Firebase authentication is not configured"


def enable_firebase(monkeypatch, claims=None, error=None):
    def verify(id_token):
        if error:
            raise ValueError(error)
        return claims

    monkeypatch.setattr("awv.features.auth.service.is_firebase_enabled", lambda: True)
    monkeypatch.setattr("awv.features.auth.service.verify_firebase_token", verify)


async def test_firebase_login_by_uid(client, provider, monkeypatch):
    provider.firebase_uid = "fb-provider"
    await provider.save()
    enable_firebase(monkeypatch, {"uid": "fb-provider", "email": "someone-else@example.com"})

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "provider@example.com"
    refreshed = await User.get(provider.id)
    assert refreshed.last_login is not None


async def test_firebase_login_by_email_links_uid(client, staff, monkeypatch):
    enable_firebase(monkeypatch, {"uid": "fb-staff", "email": "STAFF@example.com"})

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 200
    assert response.json()["user"]["email"] == "staff@example.com"
    refreshed = await User.get(staff.id)
    assert refreshed.firebase_uid == "fb-staff"

    # The linked uid now signs in even with a different email claim
    enable_firebase(monkeypatch, {"uid": "fb-staff"})
    response = await client.post("/api/auth/firebase", json={"id_token": "token"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == str(staff.id)


async def test_firebase_login_unknown_identity(client, staff, monkeypatch):
    enable_firebase(monkeypatch, {"uid": "fb-stranger", "email": "stranger@example.com"})

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 401
    assert response.json()["error"] == "No account is registered for this identity"
    assert await User.find_one(User.firebase_uid == "fb-stranger") is None


async def test_firebase_login_inactive_account(client, make_user, monkeypatch):
    await make_user("staff", email="gone@example.com", status="inactive")
    enable_firebase(monkeypatch, {"uid": "fb-gone", "email": "gone@example.com"})

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 401
    assert response.json()["error"] == "Account is not active"


async def test_firebase_login_invalid_token(client, staff, monkeypatch):
    enable_firebase(monkeypatch, error="Invalid Firebase token")

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid Firebase token"


async def test_firebase_uid_is_unique_when_set(db, make_user):
    first = await make_user("staff", email="one@example.com")
    second = await make_user("staff", email="two@example.com")
    await make_user("staff", email="three@example.com")

    first.firebase_uid = "fb-shared"
    await first.save()
    second.firebase_uid = "fb-shared"
    with pytest.raises(DuplicateKeyError):
        await second.save()


async def test_firebase_link_taken_concurrently_conflicts(client, staff, make_user, monkeypatch):
    other = await make_user("provider", email="other@example.com")
    lookup = AuthService.get_user_by_email

    async def link_elsewhere_first(email):
        other.firebase_uid = "fb-contested"
        await other.save()
        return await lookup(email)

    monkeypatch.setattr(AuthService, "get_user_by_email", staticmethod(link_elsewhere_first))
    enable_firebase(monkeypatch, {"uid": "fb-contested", "email": "staff@example.com"})

    response = await client.post("/api/auth/firebase", json={"id_token": "token"})

    assert response.status_code == 409
    refreshed = await User.get(staff.id)
    assert refreshed.firebase_uid is None


async def test_logout(client, staff):
    response = await client.post("/api/auth/logout", headers=auth_headers(staff))
    assert response.status_code == 200
    assert response.json()["success"] is True
