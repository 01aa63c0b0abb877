"""
Request and response bodies for the account endpoints.

Request fields are optional on purpose: missing values are reported as a
400 with a readable message instead of a 422 validation payload.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from hoopmetrix.schemas.membership import MembershipProfile


class SignupWithSubscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    plan_id: Optional[str] = Field(None, alias="planId")
    billing_cycle: Optional[str] = Field(None, alias="billingCycle")


class SignupUser(BaseModel):
    id: str
    email: str
    full_name: str


class SignupWithSubscriptionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    user: SignupUser
    plan_id: Optional[str] = Field(None, alias="planId")
    billing_cycle: Optional[str] = Field(None, alias="billingCycle")


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SigninUser(BaseModel):
    id: str
    email: str
    membership_status: str = "free"


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = None


class SigninResponse(BaseModel):
    success: bool = True
    user: SigninUser
    session: Optional[SessionTokens] = None


class CurrentUserResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user: MembershipProfile
    is_admin: bool = Field(False, alias="isAdmin")
