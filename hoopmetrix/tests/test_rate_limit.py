"""
Test suite for rate limiting.
Tests the key function and the limits on the guest checkout endpoints.
"""
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from jose import jwt
from starlette.requests import Request

from hoopmetrix.core import config
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.rate_limit import get_rate_limit_key

SIGNUP_URL = "/api/auth/signup-with-subscription"
SIGNUP_BODY = {
    "email": "fan@example.com",
    "password": "hoops123",
    "full_name": "Jordan Fan",
    "planId": "pro",
    "billingCycle": "monthly",
}


def make_request(authorization=None, host="203.0.113.7"):
    headers = []
    if authorization:
        headers.append((b"authorization", authorization.encode()))
    return Request({"type": "http", "method": "POST", "path": "/", "headers": headers, "client": (host, 5000)})


def test_key_falls_back_to_ip_without_token():
    assert get_rate_limit_key(make_request()) == "ip:203.0.113.7"


def test_key_ignores_unverifiable_token(monkeypatch):
    """
    Validates:
    - A forged or random Bearer token does not get its own bucket
    """
    # Setup
    monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", "test-secret")
    forged = jwt.encode({"sub": "user-123"}, "not-the-secret", algorithm="HS256")

    # Execute / Assert
    assert get_rate_limit_key(make_request("Bearer random-value")) == "ip:203.0.113.7"
    assert get_rate_limit_key(make_request(f"Bearer {forged}")) == "ip:203.0.113.7"


def test_key_uses_verified_user_id(monkeypatch):
    monkeypatch.setattr(config, "SUPABASE_JWT_SECRET", "test-secret")
    token = jwt.encode({"sub": "user-123", "email": "fan@example.com"}, "test-secret", algorithm="HS256")

    assert get_rate_limit_key(make_request(f"Bearer {token}")) == "user:user-123"


@pytest.mark.asyncio
async def test_signup_limit_survives_rotating_tokens(client, fake_supabase, monkeypatch, rate_limiting):
    """
    Test POST /api/auth/signup-with-subscription under the auth limit.

    Validates:
    - Requests from one IP share a bucket whatever Bearer token they carry
    - Requests over the limit get 429
    """
    # Setup: Every signup succeeds
    monkeypatch.setattr(MembershipService, "get_profile_by_email", AsyncMock(return_value=None))
    monkeypatch.setattr(MembershipService, "create_profile", AsyncMock())
    fake_supabase.auth.sign_up.return_value = SimpleNamespace(
        user=SimpleNamespace(id="user-123", email="fan@example.com"), session=None
    )

    # Execute: 25 requests, each with a fresh fake token
    statuses = []
    for attempt in range(25):
        response = await client.post(
            SIGNUP_URL, json=SIGNUP_BODY, headers={"Authorization": f"Bearer fake-token-{attempt}"}
        )
        statuses.append(response.status_code)

    # Assert: 20/minute allowed, the rest throttled
    assert statuses.count(200) == 20
    assert statuses.count(429) == 5


@pytest.mark.asyncio
async def test_stripe_webhook_is_not_rate_limited(client, rate_limiting):
    """
    Validates:
    - The webhook is exempt from the 300/hour per-IP default limit
    """
    # Execute: More deliveries than the default limit allows
    statuses = set()
    for _ in range(305):
        response = await client.post("/api/webhooks/stripe", content=b"{}")
        statuses.add(response.status_code)

    # Assert: Unsigned payloads are rejected, never throttled
    assert statuses == {400}
