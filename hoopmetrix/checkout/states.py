"""
States and results of the subscription checkout.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class CheckoutState(str, Enum):
    """
    Step the checkout is in. A submission moves strictly forward through
    these states and ends in DONE or FAILED.
    """
    IDLE = "idle"
    VALIDATING = "validating"
    PROVISIONING_ACCOUNT = "provisioning_account"
    CREATING_SETUP_INTENT = "creating_setup_intent"
    CONFIRMING_CARD = "confirming_card"
    CONFIRMING_SUBSCRIPTION = "confirming_subscription"
    SIGNING_IN = "signing_in"
    DONE = "done"
    FAILED = "failed"


class FailureKind(str, Enum):
    VALIDATION = "validation"              # bad form input, nothing was sent
    ACCOUNT_CONFLICT = "account_conflict"  # signup answered 409
    SERVER = "server"                      # signup or setup intent failed
    PAYMENT_NETWORK = "payment_network"    # card rejected by the payment network
    SUBSCRIPTION = "subscription"          # confirm-subscription failed


# The buyer can fix these by changing the form or signing in
RECOVERABLE_FAILURES = frozenset({
    FailureKind.VALIDATION,
    FailureKind.ACCOUNT_CONFLICT,
    FailureKind.PAYMENT_NETWORK,
})


@dataclass(frozen=True)
class CheckoutFailure:
    kind: FailureKind
    step: CheckoutState
    message: str
    status_code: Optional[int] = None

    @property
    def recoverable(self) -> bool:
        return self.kind in RECOVERABLE_FAILURES


@dataclass
class CheckoutResult:
    """
    Outcome of one submission.

    account_created stays True on later failures: the account is not
    removed when payment does not go through.
    """
    state: CheckoutState
    failure: Optional[CheckoutFailure] = None
    account_created: bool = False
    signed_in: bool = False
    customer_id: Optional[str] = None
    setup_intent_id: Optional[str] = None
    subscription_id: Optional[str] = None
    redirect_url: Optional[str] = None
    session: Optional[dict] = None

    @property
    def succeeded(self) -> bool:
        return self.state == CheckoutState.DONE
