"""
Stripe configuration and helpers shared by the billing endpoints.

Keys are chosen by STRIPE_MODE: 'sandbox' and 'test' both use the test keys,
and sandbox is forced whenever the live key pair is incomplete.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import stripe
from dateutil.relativedelta import relativedelta
from fastapi import HTTPException, status

from hoopmetrix.core import config
from hoopmetrix.schemas.membership import BillingCycle

logger = logging.getLogger(__name__)

STRIPE_API_VERSION = "2025-06-30.basil"


@dataclass(frozen=True)
class StripeKeys:
    publishable_key: Optional[str]
    secret_key: Optional[str]
    webhook_secret: Optional[str]
    mode: str
    is_sandbox_mode: bool


def get_stripe_keys() -> StripeKeys:
    """
    Select sandbox or live Stripe keys from the configuration.

    Returns:
        StripeKeys: The key set for the active mode (values may be None)
    """
    mode = config.STRIPE_MODE
    has_live_keys = bool(config.STRIPE_LIVE_PUBLISHABLE_KEY and config.STRIPE_LIVE_SECRET_KEY)
    is_sandbox = mode in ("sandbox", "test") or not has_live_keys

    keys = StripeKeys(
        publishable_key=config.STRIPE_TEST_PUBLISHABLE_KEY if is_sandbox else config.STRIPE_LIVE_PUBLISHABLE_KEY,
        secret_key=config.STRIPE_TEST_SECRET_KEY if is_sandbox else config.STRIPE_LIVE_SECRET_KEY,
        webhook_secret=config.STRIPE_TEST_WEBHOOK_SECRET if is_sandbox else config.STRIPE_LIVE_WEBHOOK_SECRET,
        mode=mode,
        is_sandbox_mode=is_sandbox,
    )

    if not keys.webhook_secret:
        logger.warning(f"[STRIPE] Missing webhook secret for {mode} mode - webhooks may not work")

    return keys


def get_stripe():
    """
    FastAPI dependency returning the configured Stripe module.

    Raises:
        HTTPException 500: If no secret key is configured for the active mode
    """
    keys = get_stripe_keys()
    if not keys.secret_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Payment system not configured. Please add your Stripe secret key to .env"
        )
    stripe.api_key = keys.secret_key
    stripe.api_version = STRIPE_API_VERSION
    return stripe


def resolve_price(stripe_client, identifier: str, billing_cycle: str, default_amount: int) -> tuple[str, int]:
    """
    Resolve a configured plan identifier into a Stripe price id and amount.

    - price_... ids are retrieved to read their unit amount.
    - prod_... ids are searched for an active price whose recurring interval
      matches the billing cycle.
    - Anything else falls back to the identifier with the catalog amount.

    Returns:
        tuple[str, int]: (price id, amount in cents)
    """
    if identifier.startswith("price_"):
        price = stripe_client.Price.retrieve(identifier)
        return identifier, getattr(price, "unit_amount", None) or 0

    if identifier.startswith("prod_"):
        prices = stripe_client.Price.list(product=identifier, active=True)
        target_interval = "month" if billing_cycle == BillingCycle.MONTHLY.value else "year"
        for price in prices.data:
            recurring = getattr(price, "recurring", None)
            if recurring is not None and getattr(recurring, "interval", None) == target_interval:
                return price.id, getattr(price, "unit_amount", None) or 0

    logger.warning(f"[STRIPE] Could not resolve price for '{identifier}', using default amount")
    return identifier, default_amount


def subscription_period_end(subscription) -> Optional[int]:
    """
    Read current_period_end (unix seconds) from a Stripe subscription.

    Newer API versions moved the period onto the subscription items, so the
    first item is consulted when the top-level field is missing.
    """
    period_end = _field(subscription, "current_period_end")
    if period_end:
        return int(period_end)

    data = _field(_field(subscription, "items"), "data")
    if data:
        period_end = _field(data[0], "current_period_end")
        if period_end:
            return int(period_end)
    return None


def _field(obj, name: str):
    # Stripe objects are dicts in older SDKs ('items' would hit dict.items)
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def membership_expiry(period_end: Optional[int], billing_cycle: str) -> datetime:
    """
    Expiry timestamp for a premium membership.

    Uses the subscription's period end, or one billing period from now when
    Stripe did not report it.
    """
    if period_end:
        return datetime.fromtimestamp(period_end, tz=timezone.utc)

    logger.warning("[STRIPE] Subscription has no current_period_end, estimating expiry")
    now = datetime.now(timezone.utc)
    if billing_cycle == BillingCycle.YEARLY.value:
        return now + relativedelta(years=1)
    return now + relativedelta(months=1)
