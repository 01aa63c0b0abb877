"""
Stripe billing endpoints for premium memberships.

The checkout runs in two server round-trips around the card confirmation
done by the client:

1. create-subscription-intent: find/create the Stripe customer and open an
   off-session SetupIntent for the card.
2. confirm-subscription: once the SetupIntent succeeded, start the recurring
   subscription and upgrade the member's profile.
"""
import logging

import stripe
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoopmetrix.core import config
from hoopmetrix.core.database import get_db
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.plans import FREE_PLAN_ID, PLAN_CONFIGS, PLAN_DISPLAY_NAME, get_plan_config, list_plans
from hoopmetrix.core.rate_limit import limiter, BILLING_RATE_LIMIT
from hoopmetrix.core.stripe_client import get_stripe, membership_expiry, resolve_price, subscription_period_end
from hoopmetrix.schemas.billing import (
    ConfirmSubscriptionRequest,
    ConfirmSubscriptionResponse,
    ManageSubscriptionRequest,
    SubscriptionIntentRequest,
    SubscriptionIntentResponse,
)
from hoopmetrix.schemas.membership import BillingCycle, MembershipPlanPublic

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/subscriptions/plans", response_model=list[MembershipPlanPublic])
async def list_membership_plans(billing_cycle: BillingCycle = Query(BillingCycle.MONTHLY)):
    """
    Get the membership plans for a billing cycle.

    Public information; no authentication required.
    """
    return list_plans(billing_cycle)


def find_or_create_customer(stripe_client, email: str | None, name: str | None, metadata: dict):
    """Stripe customer for the email, created when none exists yet."""
    customers = stripe_client.Customer.list(email=email, limit=1)
    if customers.data:
        return customers.data[0]
    return stripe_client.Customer.create(email=email, name=name, metadata=metadata)


@router.post("/create-subscription-intent", response_model=SubscriptionIntentResponse)
@limiter.limit(BILLING_RATE_LIMIT)
async def create_subscription_intent(
    request: Request,
    body: SubscriptionIntentRequest,
    stripe_client=Depends(get_stripe),
):
    """
    Open a Stripe SetupIntent for a paid plan.

    Returns the client secret the browser needs to confirm the card, plus
    the customer and SetupIntent ids the confirmation step sends back.

    Raises:
        HTTPException 400: Missing/invalid plan or billing cycle, or free plan
        HTTPException 500: Stripe failure
    """
    if not body.plan_id or not body.billing_cycle:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing planId or billingCycle"
        )

    if body.plan_id == FREE_PLAN_ID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Free plan does not require payment setup"
        )

    if body.plan_id not in PLAN_CONFIGS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

    plan_config = get_plan_config(body.plan_id, body.billing_cycle)
    if plan_config is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid billing cycle")

    details = body.customer_details
    email = details.email if details else None
    name = details.name if details else None

    try:
        price_id, amount = await run_in_threadpool(
            resolve_price,
            stripe_client,
            plan_config["identifier"],
            body.billing_cycle,
            plan_config["default_amount"],
        )
    except stripe.StripeError as e:
        logger.error(f"[STRIPE] Price lookup failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create subscription setup intent"
        )

    try:
        customer = await run_in_threadpool(
            find_or_create_customer,
            stripe_client,
            email,
            name,
            {"planId": body.plan_id, "billingCycle": body.billing_cycle},
        )
    except stripe.StripeError as e:
        logger.error(f"[STRIPE] Error creating/finding customer: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create customer"
        )

    try:
        setup_intent = await run_in_threadpool(
            stripe_client.SetupIntent.create,
            customer=customer.id,
            payment_method_types=["card"],
            usage="off_session",
            metadata={
                "planId": body.plan_id,
                "billingCycle": body.billing_cycle,
                "priceId": price_id,
                "amount": str(amount),
                "plan_name": PLAN_DISPLAY_NAME,
                "customer_email": email or "",
                "customer_name": name or "",
            },
        )
    except stripe.StripeError as e:
        logger.error(f"[STRIPE] Error creating setup intent: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create subscription setup intent"
        )

    logger.info(f"[STRIPE] SetupIntent {setup_intent.id} created for customer {customer.id}")
    return SubscriptionIntentResponse(
        client_secret=setup_intent.client_secret,
        customer_id=customer.id,
        setup_intent_id=setup_intent.id,
        plan_id=body.plan_id,
        billing_cycle=body.billing_cycle,
        amount=amount,
        price_id=price_id,
    )


async def _upgrade_profile(
    db: AsyncSession,
    stripe_client,
    subscription,
    customer_id: str,
    plan_id: str,
    billing_cycle: str,
    price_id: str,
    amount: int | None,
) -> None:
    """
    Upgrade the local profile of the customer's email to premium.

    Never raises: the Stripe subscription already exists, so a failure here
    is logged and left to the webhook to reconcile.
    """
    try:
        customer = await run_in_threadpool(stripe_client.Customer.retrieve, customer_id)
        email = getattr(customer, "email", None)
        if getattr(customer, "deleted", False) or not email:
            logger.error(f"[CONFIRM] Could not read an email for customer {customer_id}")
            return

        period_end = subscription_period_end(subscription)
        expires_at = membership_expiry(period_end, billing_cycle)

        profile = await MembershipService.activate_premium(db, email, customer_id, expires_at)
        if profile is None:
            logger.error(f"[CONFIRM] No profile found with email {email}")
            return

        await MembershipService.record_subscription(
            db,
            profile,
            plan_id=plan_id,
            billing_cycle=billing_cycle,
            stripe_subscription_id=subscription.id,
            stripe_customer_id=customer_id,
            status=subscription.status,
            current_period_end=expires_at,
            stripe_price_id=price_id,
            price_paid_cents=amount,
        )
        logger.info(f"[CONFIRM] Profile {email} upgraded to premium until {expires_at.isoformat()}")
    except (stripe.StripeError, SQLAlchemyError) as e:
        await db.rollback()
        logger.error(f"[CONFIRM] Error updating user profile: {e}")


@router.post("/confirm-subscription", response_model=ConfirmSubscriptionResponse)
@limiter.limit(BILLING_RATE_LIMIT)
async def confirm_subscription(
    request: Request,
    body: ConfirmSubscriptionRequest,
    db: AsyncSession = Depends(get_db),
    stripe_client=Depends(get_stripe),
):
    """
    Start the recurring subscription for a succeeded SetupIntent.

    Raises:
        HTTPException 400: Missing fields, SetupIntent not succeeded, no
            payment method, or unknown plan
        HTTPException 500: Stripe failure creating the subscription
    """
    if not body.setup_intent_id or not body.customer_id or not body.plan_id or not body.billing_cycle:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required parameters"
        )

    plan_config = get_plan_config(body.plan_id, body.billing_cycle)
    if plan_config is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

    try:
        setup_intent = await run_in_threadpool(stripe_client.SetupIntent.retrieve, body.setup_intent_id)

        if setup_intent.status != "succeeded":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Setup intent not succeeded"
            )

        payment_method_id = setup_intent.payment_method
        if not payment_method_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No payment method found"
            )

        price_id, amount = await run_in_threadpool(
            resolve_price,
            stripe_client,
            plan_config["identifier"],
            body.billing_cycle,
            plan_config["default_amount"],
        )
        logger.info(f"[CONFIRM] Using price {price_id} for {body.plan_id}/{body.billing_cycle}")

        subscription = await run_in_threadpool(
            stripe_client.Subscription.create,
            customer=body.customer_id,
            items=[{"price": price_id}],
            default_payment_method=payment_method_id,
            metadata={
                "planId": body.plan_id,
                "billingCycle": body.billing_cycle,
                "plan_name": PLAN_DISPLAY_NAME,
            },
            expand=["latest_invoice.payment_intent"],
        )
    except stripe.StripeError as e:
        logger.error(f"[CONFIRM] Error confirming subscription: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create subscription"
        )

    logger.info(f"[CONFIRM] Created subscription {subscription.id} ({subscription.status})")

    await _upgrade_profile(
        db,
        stripe_client,
        subscription,
        body.customer_id,
        body.plan_id,
        body.billing_cycle,
        price_id,
        amount,
    )

    return ConfirmSubscriptionResponse(
        subscription_id=subscription.id,
        customer_id=body.customer_id,
        status=subscription.status,
        current_period_end=subscription_period_end(subscription),
    )


@router.post("/manage-subscription")
async def manage_subscription(
    body: ManageSubscriptionRequest,
    stripe_client=Depends(get_stripe),
):
    """
    Open the Stripe billing portal or cancel at period end.

    Actions:
    - manage: returns {"url": <billing portal session url>}
    - cancel: sets cancel_at_period_end on the first active subscription

    Raises:
        HTTPException 400: Missing customerId or unknown action
        HTTPException 404: No active subscription to cancel
        HTTPException 500: Stripe failure
    """
    if not body.customer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing customerId")

    if body.action not in ("manage", "cancel"):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid action")

    try:
        if body.action == "manage":
            portal_session = await run_in_threadpool(
                stripe_client.billing_portal.Session.create,
                customer=body.customer_id,
                return_url=f"{config.APP_URL}/dashboard",
            )
            return {"url": portal_session.url}

        subscriptions = await run_in_threadpool(
            stripe_client.Subscription.list, customer=body.customer_id, status="active"
        )
        if not subscriptions.data:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No active subscription found"
            )

        await run_in_threadpool(
            stripe_client.Subscription.modify, subscriptions.data[0].id, cancel_at_period_end=True
        )
    except stripe.StripeError as e:
        logger.error(f"[STRIPE] Error managing subscription: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to manage subscription"
        )

    return {
        "success": True,
        "message": "Subscription will be canceled at the end of the current period",
    }
