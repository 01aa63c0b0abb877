from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hoopmetrix.core.database import Base


class UserSubscription(Base):
    """
    User subscription model.

    One row per Stripe subscription confirmed through checkout. Stripe stays
    the source of truth; this is the local record used for display and history.
    """
    __tablename__ = "user_subscriptions"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign key: relationship to UserProfile
    user_id = Column(
        Integer,
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Plan code from the catalog: 'pro', 'elite'
    plan_id = Column(String(50), nullable=False, index=True)

    # Subscription status as reported by Stripe: 'active', 'trialing', 'canceled', ...
    status = Column(String(50), nullable=False, default="active", index=True)

    # Billing cycle: 'monthly', 'yearly'
    billing_cycle = Column(String(50), nullable=False, default="monthly")

    # Stripe identifiers
    stripe_subscription_id = Column(String(255), nullable=False, unique=True, index=True)
    stripe_customer_id = Column(String(255), nullable=False, index=True)
    stripe_price_id = Column(String(255), nullable=True)

    current_period_end = Column(DateTime(timezone=True), nullable=True, index=True)
    cancel_at_period_end = Column(Boolean, nullable=False, default=False)

    # Price paid (snapshot at subscription time, in cents)
    price_paid_cents = Column(Integer, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    user = relationship(
        "UserProfile",
        back_populates="subscriptions",
        lazy="joined"
    )

    def __repr__(self):
        return f"<UserSubscription(id={self.id}, user_id={self.user_id}, plan_id='{self.plan_id}', status='{self.status}')>"
