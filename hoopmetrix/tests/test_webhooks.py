"""
Test suite for the Stripe webhook endpoint.

Signature verification is replaced by a stub returning the event under test.
"""
from unittest.mock import AsyncMock

import pytest
import stripe
from sqlalchemy.exc import SQLAlchemyError

from hoopmetrix.api.endpoints import webhooks
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.schemas.membership import MembershipStatus

WEBHOOK_URL = "/api/webhooks/stripe"
SIGNED = {"stripe-signature": "t=1,v1=abc"}


def subscription_event(event_type, status="active", period_end=1767225600):
    return {
        "type": event_type,
        "data": {
            "object": {
                "id": "sub_123",
                "customer": "cus_123",
                "status": status,
                "current_period_end": period_end,
            }
        },
    }


@pytest.fixture
def deliver(monkeypatch):
    """Make signature verification return the given event."""
    def _deliver(event):
        monkeypatch.setattr(webhooks, "construct_event", lambda payload, signature: event)
    return _deliver


@pytest.fixture
def update_membership(monkeypatch):
    mock = AsyncMock(return_value=1)
    monkeypatch.setattr(MembershipService, "update_membership_by_customer", mock)
    return mock


@pytest.mark.asyncio
async def test_missing_signature_returns_400(client):
    """
    Test POST /api/webhooks/stripe without a stripe-signature header.

    Validates:
    - The event is rejected before any parsing
    """
    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}")

    # Assert
    assert response.status_code == 400
    assert response.json() == {"error": "No signature"}


@pytest.mark.asyncio
async def test_invalid_signature_returns_400(client, monkeypatch):
    # Setup: Signature verification fails
    def reject(payload, signature):
        raise stripe.SignatureVerificationError("bad signature", signature)

    monkeypatch.setattr(webhooks, "construct_event", reject)

    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    # Assert
    assert response.status_code == 400
    assert response.json() == {"error": "Webhook handler failed"}


@pytest.mark.asyncio
async def test_active_subscription_sets_premium(client, deliver, update_membership):
    """
    Validates:
    - An active subscription marks the customer's profile premium
    - The expiry is the subscription's current period end
    """
    # Setup
    deliver(subscription_event("customer.subscription.updated"))

    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    # Assert
    assert response.status_code == 200
    assert response.json() == {"received": True}

    _, customer_id, membership_status, expires_at = update_membership.call_args.args
    assert customer_id == "cus_123"
    assert membership_status == MembershipStatus.PREMIUM
    assert int(expires_at.timestamp()) == 1767225600


@pytest.mark.asyncio
async def test_inactive_subscription_sets_free(client, deliver, update_membership):
    """
    Validates:
    - Any status other than 'active' downgrades the profile to free
    - The expiry is cleared
    """
    # Setup
    deliver(subscription_event("customer.subscription.created", status="past_due"))

    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    # Assert
    assert response.status_code == 200
    _, _, membership_status, expires_at = update_membership.call_args.args
    assert membership_status == MembershipStatus.FREE
    assert expires_at is None


@pytest.mark.asyncio
async def test_deleted_subscription_sets_free(client, deliver, update_membership):
    deliver(subscription_event("customer.subscription.deleted", status="canceled"))

    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    assert response.status_code == 200
    _, customer_id, membership_status, _ = update_membership.call_args.args
    assert customer_id == "cus_123"
    assert membership_status == MembershipStatus.FREE


@pytest.mark.asyncio
async def test_payment_events_are_only_logged(client, deliver, update_membership):
    # Setup
    deliver({"type": "payment_intent.succeeded", "data": {"object": {"id": "pi_123"}}})

    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    # Assert: Acknowledged without touching memberships
    assert response.status_code == 200
    update_membership.assert_not_awaited()


@pytest.mark.asyncio
async def test_database_error_returns_500(client, db_session, deliver, monkeypatch):
    """
    Validates:
    - A failed membership update is rolled back
    - Stripe gets a 500 so it retries the delivery
    """
    # Setup: Database update fails
    deliver(subscription_event("customer.subscription.deleted"))
    monkeypatch.setattr(
        MembershipService,
        "update_membership_by_customer",
        AsyncMock(side_effect=SQLAlchemyError("connection lost")),
    )

    # Execute
    response = await client.post(WEBHOOK_URL, content=b"{}", headers=SIGNED)

    # Assert
    assert response.status_code == 500
    assert response.json() == {"error": "Database error"}
    db_session.rollback.assert_awaited_once()
