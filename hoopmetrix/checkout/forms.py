"""
Checkout form data and its client-side validation.
"""
from typing import Optional

from pydantic import BaseModel

from hoopmetrix.schemas.membership import BillingCycle

MIN_PASSWORD_LENGTH = 6

MISSING_DETAILS_MESSAGE = "Please enter your name and email"
PASSWORD_TOO_SHORT_MESSAGE = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
PASSWORD_MISMATCH_MESSAGE = "Passwords do not match"


class CheckoutForm(BaseModel):
    """
    Values entered in the payment form.

    password and confirm_password are only used when the buyer has no
    session. card is the payment-input handle passed on to the card
    confirmer (a Stripe PaymentMethod id such as 'pm_card_visa').
    """
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    plan_id: str
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    card: Optional[str] = None


def validate_form(form: CheckoutForm, is_authenticated: bool) -> Optional[str]:
    """
    Check the form before anything is sent.

    Returns:
        str | None: The message to show, or None when the form is valid
    """
    if not form.name.strip() or not form.email.strip():
        return MISSING_DETAILS_MESSAGE

    if is_authenticated:
        return None

    if len(form.password) < MIN_PASSWORD_LENGTH:
        return PASSWORD_TOO_SHORT_MESSAGE

    if form.password != form.confirm_password:
        return PASSWORD_MISMATCH_MESSAGE

    return None
