"""
Webhook endpoint for Stripe subscription events.

Keeps membership status in line with Stripe after checkout: renewals,
payment failures and cancellations all arrive here.
"""
import logging
from datetime import datetime, timezone

import stripe
from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoopmetrix.core.database import get_db
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.rate_limit import limiter
from hoopmetrix.core.stripe_client import get_stripe_keys, subscription_period_end
from hoopmetrix.schemas.membership import MembershipStatus

logger = logging.getLogger(__name__)

router = APIRouter()

SUBSCRIPTION_CHANGED_EVENTS = ("customer.subscription.created", "customer.subscription.updated")


def construct_event(payload: bytes, signature: str):
    """
    Verify the Stripe signature and parse the event.

    Raises:
        ValueError: Invalid payload or missing webhook secret
        stripe.SignatureVerificationError: Bad signature
    """
    webhook_secret = get_stripe_keys().webhook_secret
    if not webhook_secret:
        raise ValueError("Stripe webhook secret is not configured")
    return stripe.Webhook.construct_event(payload, signature, webhook_secret)


@router.post("/stripe")
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(None, alias="stripe-signature"),
    db: AsyncSession = Depends(get_db),
):
    """
    Handle Stripe webhook events.

    Events:
    - customer.subscription.created / updated: premium while the status is
      'active', free otherwise
    - customer.subscription.deleted: back to free
    - payment_intent.succeeded / payment_failed: logged only

    Returns:
        dict: {"received": true}
    """
    if not stripe_signature:
        return JSONResponse({"error": "No signature"}, status_code=status.HTTP_400_BAD_REQUEST)

    payload = await request.body()

    try:
        event = construct_event(payload, stripe_signature)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.error(f"[WEBHOOK] Rejected Stripe event: {e}")
        return JSONResponse({"error": "Webhook handler failed"}, status_code=status.HTTP_400_BAD_REQUEST)

    event_type = event["type"]
    data_object = event["data"]["object"]
    logger.info(f"[WEBHOOK] Received {event_type}")

    try:
        if event_type in SUBSCRIPTION_CHANGED_EVENTS:
            customer_id = data_object["customer"]
            if data_object["status"] == "active":
                period_end = subscription_period_end(data_object)
                expires_at = datetime.fromtimestamp(period_end, tz=timezone.utc) if period_end else None
                updated = await MembershipService.update_membership_by_customer(
                    db, customer_id, MembershipStatus.PREMIUM, expires_at
                )
            else:
                updated = await MembershipService.update_membership_by_customer(
                    db, customer_id, MembershipStatus.FREE, None
                )
            logger.info(f"[WEBHOOK] {updated} profile(s) updated for customer {customer_id}")

        elif event_type == "customer.subscription.deleted":
            customer_id = data_object["customer"]
            updated = await MembershipService.update_membership_by_customer(
                db, customer_id, MembershipStatus.FREE, None
            )
            logger.info(f"[WEBHOOK] Membership ended for customer {customer_id} ({updated} profile(s))")

        elif event_type == "payment_intent.succeeded":
            logger.info(f"[WEBHOOK] Payment {data_object['id']} succeeded")

        elif event_type == "payment_intent.payment_failed":
            logger.warning(f"[WEBHOOK] Payment {data_object['id']} failed")

        else:
            logger.info(f"[WEBHOOK] Unhandled event type {event_type}")

    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[WEBHOOK] Error updating user membership: {e}")
        return JSONResponse({"error": "Database error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return {"received": True}


# Stripe deliveries skip the per-IP default limits
limiter.exempt(handle_stripe_webhook)
