"""
Membership plan catalog.

Display data for the membership page plus the Stripe price configuration
of the paid plans. Amounts are in cents.
"""
from hoopmetrix.core.config import STRIPE_PRICE_IDS
from hoopmetrix.schemas.membership import BillingCycle, MembershipPlanPublic

FREE_PLAN_ID = "free"
PLAN_DISPLAY_NAME = "HoopMetrix Premium"

_FREE_FEATURES = [
    "Basic player profiles",
    "Team information",
    "Season schedules",
    "Basic statistics",
    "Community discussions",
]

_PRO_FEATURES = [
    "Everything in Free",
    "Advanced statistics & analytics",
    "Player comparison tools",
    "Historical data access",
    "Premium articles & insights",
    "Ad-free experience",
    "Priority customer support",
]

_ELITE_FEATURES = [
    "Everything in Pro Stats",
    "Exclusive insider content",
    "Live game analytics",
    "Custom alerts & notifications",
    "Early access to new features",
    "VIP community access",
    "Monthly expert webinars",
    "Personalized insights dashboard",
]

MEMBERSHIP_PLANS = {
    BillingCycle.MONTHLY: [
        MembershipPlanPublic(
            id="free", name="Free Fan", price=0, interval="month",
            description="Perfect for casual basketball fans",
            features=_FREE_FEATURES,
        ),
        MembershipPlanPublic(
            id="pro", name="Pro Stats", price=9.99, interval="month",
            description="For the serious basketball analyst",
            features=_PRO_FEATURES, is_popular=True, badge="Most Popular",
        ),
        MembershipPlanPublic(
            id="elite", name="Elite Insider", price=19.99, interval="month",
            description="Ultimate basketball experience",
            features=_ELITE_FEATURES, is_premium=True, badge="Premium",
        ),
    ],
    BillingCycle.YEARLY: [
        MembershipPlanPublic(
            id="free", name="Free Fan", price=0, interval="year",
            description="Perfect for casual basketball fans",
            features=_FREE_FEATURES,
        ),
        MembershipPlanPublic(
            id="pro", name="Pro Stats", price=99.99, original_price=119.88,
            interval="year", description="For the serious basketball analyst",
            features=_PRO_FEATURES, is_popular=True, badge="Save 17%",
        ),
        MembershipPlanPublic(
            id="elite", name="Elite Insider", price=199.99, original_price=239.88,
            interval="year", description="Ultimate basketball experience",
            features=_ELITE_FEATURES, is_premium=True, badge="Save 17%",
        ),
    ],
}


# Stripe configuration for the paid plans
PLAN_CONFIGS = {
    "pro": {
        BillingCycle.MONTHLY: {
            "identifier": STRIPE_PRICE_IDS["pro"]["monthly"],
            "default_amount": 999,
        },
        BillingCycle.YEARLY: {
            "identifier": STRIPE_PRICE_IDS["pro"]["yearly"],
            "default_amount": 9999,
        },
    },
    "elite": {
        BillingCycle.MONTHLY: {
            "identifier": STRIPE_PRICE_IDS["elite"]["monthly"],
            "default_amount": 1999,
        },
        BillingCycle.YEARLY: {
            "identifier": STRIPE_PRICE_IDS["elite"]["yearly"],
            "default_amount": 19999,
        },
    },
}


def list_plans(billing_cycle: BillingCycle = BillingCycle.MONTHLY) -> list[MembershipPlanPublic]:
    """Plans shown for the given billing cycle, free plan first."""
    return MEMBERSHIP_PLANS[billing_cycle]


def get_plan_config(plan_id: str, billing_cycle: str) -> dict | None:
    """
    Look up the Stripe price configuration for a paid plan.

    Returns:
        dict | None: {'identifier', 'default_amount'} or None when either the
        plan or the billing cycle is unknown
    """
    plan = PLAN_CONFIGS.get(plan_id)
    if plan is None:
        return None
    try:
        cycle = BillingCycle(billing_cycle)
    except ValueError:
        return None
    return plan.get(cycle)
