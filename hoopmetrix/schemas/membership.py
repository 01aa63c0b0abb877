from pydantic import BaseModel, Field
from typing import List, Optional
from enum import Enum


class BillingCycle(str, Enum):
    """Billing cycle enumeration"""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class MembershipStatus(str, Enum):
    """Membership level stored on the member profile"""
    FREE = "free"
    PREMIUM = "premium"


class MembershipPlanPublic(BaseModel):
    """
    Public plan information shown on the membership page.
    """
    id: str
    name: str
    price: float = Field(..., ge=0)
    original_price: Optional[float] = None
    interval: str
    description: str
    features: List[str]
    is_popular: bool = False
    is_premium: bool = False
    badge: Optional[str] = None


class MembershipProfile(BaseModel):
    """Authenticated member as returned by /auth/user"""
    id: str
    email: str
    full_name: Optional[str] = None
    membership_status: MembershipStatus = MembershipStatus.FREE
    role: str = "user"
