"""
Service layer for member profiles and their subscriptions.

Endpoints call these helpers instead of building queries themselves so the
account, billing and webhook flows share one set of database rules.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hoopmetrix.models.user_profile import UserProfile
from hoopmetrix.models.user_subscription import UserSubscription
from hoopmetrix.schemas.membership import MembershipStatus


class MembershipService:
    """
    Service class for membership-related database operations.
    """

    @staticmethod
    async def get_profile_by_email(db: AsyncSession, email: str) -> UserProfile | None:
        result = await db.execute(
            select(UserProfile).where(UserProfile.email == email)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_profile_by_supabase_id(db: AsyncSession, supabase_user_id: str) -> UserProfile | None:
        result = await db.execute(
            select(UserProfile).where(UserProfile.supabase_user_id == supabase_user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def create_profile(
        db: AsyncSession,
        supabase_user_id: str,
        email: str,
        full_name: Optional[str] = None
    ) -> UserProfile:
        """
        Create a free member profile for a freshly registered Supabase user.

        Args:
            db (AsyncSession): Database session
            supabase_user_id (str): auth.users.id from Supabase
            email (str): Member email
            full_name (str, optional): Display name

        Returns:
            UserProfile: The persisted profile
        """
        profile = UserProfile(
            supabase_user_id=supabase_user_id,
            email=email,
            full_name=full_name,
            role="user",
            membership_status=MembershipStatus.FREE.value,
            is_active=True,
        )
        db.add(profile)
        await db.commit()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def activate_premium(
        db: AsyncSession,
        email: str,
        stripe_customer_id: str,
        expires_at: datetime
    ) -> UserProfile | None:
        """
        Mark the profile with this email as premium.

        Returns:
            UserProfile | None: Updated profile, or None if no profile uses the email
        """
        profile = await MembershipService.get_profile_by_email(db, email)
        if profile is None:
            return None

        profile.membership_status = MembershipStatus.PREMIUM.value
        profile.stripe_customer_id = stripe_customer_id
        profile.membership_expires_at = expires_at
        await db.commit()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def record_subscription(
        db: AsyncSession,
        profile: UserProfile,
        plan_id: str,
        billing_cycle: str,
        stripe_subscription_id: str,
        stripe_customer_id: str,
        status: str,
        current_period_end: Optional[datetime] = None,
        stripe_price_id: Optional[str] = None,
        price_paid_cents: Optional[int] = None
    ) -> UserSubscription:
        """
        Store the local record of a confirmed Stripe subscription.
        """
        subscription = UserSubscription(
            user_id=profile.id,
            plan_id=plan_id,
            billing_cycle=billing_cycle,
            status=status,
            stripe_subscription_id=stripe_subscription_id,
            stripe_customer_id=stripe_customer_id,
            stripe_price_id=stripe_price_id,
            current_period_end=current_period_end,
            price_paid_cents=price_paid_cents,
        )
        db.add(subscription)
        await db.commit()
        await db.refresh(subscription)
        return subscription

    @staticmethod
    async def update_membership_by_customer(
        db: AsyncSession,
        stripe_customer_id: str,
        membership_status: MembershipStatus,
        expires_at: Optional[datetime]
    ) -> int:
        """
        Set membership state on every profile linked to a Stripe customer.

        Returns:
            int: Number of profiles updated
        """
        result = await db.execute(
            update(UserProfile)
            .where(UserProfile.stripe_customer_id == stripe_customer_id)
            .values(
                membership_status=membership_status.value,
                membership_expires_at=expires_at,
            )
        )
        if membership_status == MembershipStatus.FREE:
            await db.execute(
                update(UserSubscription)
                .where(UserSubscription.stripe_customer_id == stripe_customer_id)
                .where(UserSubscription.status == "active")
                .values(status="canceled")
            )
        await db.commit()
        return result.rowcount
