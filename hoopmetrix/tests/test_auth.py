"""
Test suite for the account endpoints used by the guest checkout.
"""
import threading
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from jose import jwt
from sqlalchemy.exc import SQLAlchemyError
from supabase import AuthError

from hoopmetrix.api.endpoints import auth
from hoopmetrix.core import config, supabase_auth
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.supabase_auth import get_current_profile
from hoopmetrix.main import app

SIGNUP_URL = "/api/auth/signup-with-subscription"
SIGNIN_URL = "/api/auth/signin-after-signup"

SIGNUP_BODY = {
    "email": "fan@example.com",
    "password": "hoops123",
    "full_name": "Jordan Fan",
    "planId": "pro",
    "billingCycle": "monthly",
}


@pytest.fixture(autouse=True)
def no_signup_backoff(monkeypatch):
    monkeypatch.setattr(auth, "SIGNUP_RETRY_BACKOFF_SECONDS", 0)


def auth_user(user_id="user-123", email="fan@example.com"):
    return SimpleNamespace(id=user_id, email=email)


@pytest.mark.asyncio
async def test_signup_creates_account_and_profile(client, fake_supabase, monkeypatch):
    """
    Validates:
    - Supabase sign_up receives the credentials and display name
    - A free profile is created for the new user
    - Response echoes planId / billingCycle in camelCase
    """
    # Setup: No existing profile, Supabase returns a user
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    create_profile = AsyncMock()
    monkeypatch.setattr(MembershipService, "create_profile", create_profile)
    fake_supabase.auth.sign_up.return_value = SimpleNamespace(user=auth_user(), session=None)

    # Execute
    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    # Assert
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"] == {"id": "user-123", "email": "fan@example.com", "full_name": "Jordan Fan"}
    assert data["planId"] == "pro"
    assert data["billingCycle"] == "monthly"

    credentials = fake_supabase.auth.sign_up.call_args.args[0]
    assert credentials["email"] == "fan@example.com"
    assert credentials["options"]["data"]["full_name"] == "Jordan Fan"
    create_profile.assert_awaited_once()


@pytest.mark.asyncio
async def test_signup_missing_fields_returns_400(client, fake_supabase):
    response = await client.post(SIGNUP_URL, json={"email": "fan@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email, password, and full name are required"}
    fake_supabase.auth.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_signup_short_password_returns_400(client, fake_supabase):
    response = await client.post(SIGNUP_URL, json={**SIGNUP_BODY, "password": "abc"})

    assert response.status_code == 400
    assert "at least 6 characters" in response.json()["error"]
    fake_supabase.auth.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_signup_existing_email_returns_409(client, fake_supabase, monkeypatch):
    """
    Validates:
    - An email that already has a profile is rejected with 409
    - The error suggests signing in
    - Supabase is never called
    """
    monkeypatch.setattr(
        MembershipService, "get_profile_by_email", AsyncMock(return_value=SimpleNamespace(id=1))
    )

    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    assert response.status_code == 409
    assert "sign in" in response.json()["error"]
    fake_supabase.auth.sign_up.assert_not_called()


@pytest.mark.asyncio
async def test_signup_retries_then_succeeds(client, fake_supabase, monkeypatch):
    """
    Validates:
    - A transient Supabase failure is retried
    - The second attempt's account is used
    """
    # Setup: First sign_up call drops the connection
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    monkeypatch.setattr(MembershipService, "create_profile", AsyncMock())
    fake_supabase.auth.sign_up.side_effect = [
        ConnectionError("connection reset"),
        SimpleNamespace(user=auth_user(), session=None),
    ]

    # Execute
    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    # Assert
    assert response.status_code == 200
    assert fake_supabase.auth.sign_up.call_count == 2


@pytest.mark.asyncio
async def test_signup_gives_up_after_three_attempts(client, fake_supabase, monkeypatch):
    """
    Validates:
    - Supabase is tried exactly SIGNUP_MAX_ATTEMPTS times
    - The last Supabase message is returned with 400
    """
    # Setup: Every attempt is rejected
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    fake_supabase.auth.sign_up.side_effect = AuthError("Signups not allowed", None)

    # Execute
    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    # Assert
    assert response.status_code == 400
    assert response.json() == {"error": "Signups not allowed"}
    assert fake_supabase.auth.sign_up.call_count == auth.SIGNUP_MAX_ATTEMPTS


@pytest.mark.asyncio
async def test_signup_without_user_returns_500(client, fake_supabase, monkeypatch):
    # Setup: Supabase answers without a user
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    fake_supabase.auth.sign_up.return_value = SimpleNamespace(user=None, session=None)

    # Execute
    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    # Assert
    assert response.status_code == 500
    assert response.json() == {"error": "Failed to create user account"}


@pytest.mark.asyncio
async def test_signup_profile_failure_is_not_fatal(client, db_session, fake_supabase, monkeypatch):
    """
    Validates:
    - A failed profile insert is rolled back
    - The account still counts as created
    """
    # Setup: Profile insert fails
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    monkeypatch.setattr(
        MembershipService, "create_profile", AsyncMock(side_effect=SQLAlchemyError("insert failed"))
    )
    fake_supabase.auth.sign_up.return_value = SimpleNamespace(user=auth_user(), session=None)

    # Execute
    response = await client.post(SIGNUP_URL, json=SIGNUP_BODY)

    # Assert
    assert response.status_code == 200
    db_session.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_signin_returns_session_and_membership(client, fake_supabase, monkeypatch):
    """
    Validates:
    - Session tokens from Supabase are returned
    - membership_status comes from the local profile
    """
    monkeypatch.setattr(
        MembershipService,
        "get_profile_by_email",
        AsyncMock(return_value=SimpleNamespace(membership_status="premium")),
    )
    fake_supabase.auth.sign_in_with_password.return_value = SimpleNamespace(
        user=auth_user(),
        session=SimpleNamespace(access_token="access", refresh_token="refresh", expires_at=1735689600),
    )

    response = await client.post(SIGNIN_URL, json={"email": "fan@example.com", "password": "hoops123"})

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["membership_status"] == "premium"
    assert data["session"] == {
        "access_token": "access",
        "refresh_token": "refresh",
        "expires_at": 1735689600,
    }


@pytest.mark.asyncio
async def test_signin_missing_fields_returns_400(client):
    response = await client.post(SIGNIN_URL, json={"email": "fan@example.com"})

    assert response.status_code == 400
    assert response.json() == {"error": "Email and password are required"}


@pytest.mark.asyncio
async def test_signin_auth_error_returns_400(client, fake_supabase):
    # Setup
    fake_supabase.auth.sign_in_with_password.side_effect = AuthError("Email not confirmed", None)

    # Execute
    response = await client.post(SIGNIN_URL, json={"email": "fan@example.com", "password": "hoops123"})

    # Assert
    assert response.status_code == 400
    assert response.json() == {"error": "Email not confirmed"}


@pytest.mark.asyncio
async def test_current_user_requires_token(client):
    response = await client.get("/api/auth/user")

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


@pytest.mark.asyncio
async def test_current_user_returns_profile(client):
    """
    Test GET /api/auth/user for a signed-in admin.

    Validates:
    - membership_status comes from the profile
    - isAdmin reflects the profile role
    """
    # Setup
    app.dependency_overrides[get_current_profile] = lambda: SimpleNamespace(
        supabase_user_id="user-123",
        email="fan@example.com",
        full_name="Jordan Fan",
        membership_status="premium",
        role="admin",
    )

    # Execute
    response = await client.get("/api/auth/user")

    # Assert
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["membership_status"] == "premium"
    assert data["isAdmin"] is True


@pytest.mark.asyncio
async def test_current_user_from_supabase_token(client, monkeypatch):
    """
    Validates:
    - A shared-secret Supabase token is accepted
    - A profile is created on first sight of the user
    """
    # Setup: HS256 token signed with the project secret
    monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode(
        {"sub": "user-123", "email": "fan@example.com", "user_metadata": {"full_name": "Jordan Fan"}},
        "test-secret",
        algorithm="HS256",
    )
    monkeypatch.setattr(MembershipService, "get_profile_by_supabase_id", AsyncMock(return_value=None))
    create_profile = AsyncMock(return_value=SimpleNamespace(
        supabase_user_id="user-123",
        email="fan@example.com",
        full_name="Jordan Fan",
        membership_status="free",
        role="user",
        is_active=True,
    ))
    monkeypatch.setattr(MembershipService, "create_profile", create_profile)

    # Execute
    response = await client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

    # Assert
    assert response.status_code == 200
    assert response.json()["user"]["email"] == "fan@example.com"
    assert response.json()["isAdmin"] is False
    assert create_profile.call_args.args[1:] == ("user-123", "fan@example.com", "Jordan Fan")


@pytest.mark.asyncio
async def test_current_user_inactive_account_forbidden(client, monkeypatch):
    """
    Validates:
    - A valid token for a deactivated profile is refused with 403
    """
    # Setup
    monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "user-123", "email": "fan@example.com"}, "test-secret", algorithm="HS256")
    monkeypatch.setattr(
        MembershipService,
        "get_profile_by_supabase_id",
        AsyncMock(return_value=SimpleNamespace(is_active=False)),
    )

    # Execute
    response = await client.get("/api/auth/user", headers={"Authorization": f"Bearer {token}"})

    # Assert
    assert response.status_code == 403
    assert response.json() == {"error": "User account is inactive"}


@pytest.mark.asyncio
async def test_token_check_runs_off_the_event_loop(client, monkeypatch):
    """
    Validates:
    - Token decoding (which may fetch the JWKS over HTTP) runs in a worker thread
    """
    # Setup: Record the thread the decoder runs on
    loop_thread = threading.get_ident()
    decode_threads = []

    def decode(token):
        decode_threads.append(threading.get_ident())
        return {"sub": "user-123", "email": "fan@example.com"}

    monkeypatch.setattr(supabase_auth, "decode_supabase_jwt", decode)
    monkeypatch.setattr(
        MembershipService,
        "get_profile_by_supabase_id",
        AsyncMock(return_value=SimpleNamespace(
            supabase_user_id="user-123",
            email="fan@example.com",
            full_name="Jordan Fan",
            membership_status="free",
            role="user",
            is_active=True,
        )),
    )

    # Execute
    response = await client.get("/api/auth/user", headers={"Authorization": "Bearer any-token"})

    # Assert
    assert response.status_code == 200
    assert len(decode_threads) == 1
    assert decode_threads[0] != loop_thread
