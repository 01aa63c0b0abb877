from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from hoopmetrix.core.database import Base


class UserProfile(Base):
    """
    Member profile synchronized with Supabase Auth.

    Note: Passwords are not stored here - Supabase Auth manages authentication.
    This model stores membership state and the link to the Stripe customer.
    """
    __tablename__ = "user_profiles"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Supabase Auth UUID (auth.users.id)
    supabase_user_id = Column(String(255), unique=True, index=True, nullable=False)

    # User email address (Stripe customers are matched on it)
    email = Column(String(255), unique=True, index=True, nullable=False)

    full_name = Column(String(255), nullable=True)

    # User role: 'user', 'admin'
    role = Column(String(50), nullable=False, default="user")

    # Membership: 'free' or 'premium'
    membership_status = Column(String(50), nullable=False, default="free", index=True)
    membership_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Stripe customer id (cus_...), set once the first subscription is confirmed
    stripe_customer_id = Column(String(255), nullable=True, index=True)

    # Account status
    is_active = Column(Boolean, nullable=False, default=True)

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

    # Relationships: One member can have multiple subscriptions (historical)
    subscriptions = relationship(
        "UserSubscription",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select"
    )

    def __repr__(self):
        return f"<UserProfile(id={self.id}, email='{self.email}', membership='{self.membership_status}')>"
