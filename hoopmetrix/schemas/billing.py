"""
Request and response bodies for the Stripe billing endpoints.

Field names follow the JSON contract used by the checkout client
(camelCase on the wire).
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class CustomerDetails(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class SubscriptionIntentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    plan_id: Optional[str] = Field(None, alias="planId")
    billing_cycle: Optional[str] = Field(None, alias="billingCycle")
    customer_details: Optional[CustomerDetails] = None


class SubscriptionIntentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    client_secret: str = Field(..., alias="clientSecret")
    customer_id: str = Field(..., alias="customerId")
    setup_intent_id: str = Field(..., alias="setupIntentId")
    plan_id: str = Field(..., alias="planId")
    billing_cycle: str = Field(..., alias="billingCycle")
    amount: int
    price_id: str = Field(..., alias="priceId")


class ConfirmSubscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    setup_intent_id: Optional[str] = Field(None, alias="setupIntentId")
    customer_id: Optional[str] = Field(None, alias="customerId")
    plan_id: Optional[str] = Field(None, alias="planId")
    billing_cycle: Optional[str] = Field(None, alias="billingCycle")


class ConfirmSubscriptionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    subscription_id: str = Field(..., alias="subscriptionId")
    customer_id: str = Field(..., alias="customerId")
    status: str
    current_period_end: Optional[int] = Field(None, alias="currentPeriodEnd")


class ManageSubscriptionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    customer_id: Optional[str] = Field(None, alias="customerId")
    action: Optional[str] = None
