"""
Subscription checkout workflow.

One submission runs these steps in order, each gated on the previous one:

1. Validate the form (no network call on failure)
2. Create the account (guests only)
3. Create the Stripe setup intent
4. Confirm the card with the payment network
5. Confirm the subscription
6. Sign the new account in (failure is logged and ignored)

Nothing is retried and nothing is undone: an account created in step 2
stays in place when a later step fails.
"""
import inspect
import logging
from typing import Callable, Optional

from hoopmetrix.checkout.card import CardConfirmer
from hoopmetrix.checkout.client import CheckoutAPIError, HoopMetrixClient
from hoopmetrix.checkout.forms import CheckoutForm, validate_form
from hoopmetrix.checkout.states import CheckoutFailure, CheckoutResult, CheckoutState, FailureKind

logger = logging.getLogger(__name__)

DEFAULT_REDIRECT_URL = "/membership/success"

ACCOUNT_EXISTS_MESSAGE = "An account with this email already exists. Please sign in instead."
INVALID_SETUP_RESPONSE_MESSAGE = "Payment setup returned an incomplete response"
CARD_NOT_CONFIRMED_MESSAGE = "Card setup was not completed. Please try again."
SUBSCRIPTION_FAILED_MESSAGE = "Failed to confirm subscription"


class CheckoutBusyError(RuntimeError):
    """Raised when submit or cancel is called while a submission is running."""


class SubscriptionCheckoutWorkflow:
    """
    Drives one buyer's payment form through the checkout steps.

    Args:
        client: API client; an authenticated client skips account creation
        card_confirmer: Confirms the setup intent with the payment network
        on_success: Called with the CheckoutResult once the subscription is
            confirmed; may be a plain function or a coroutine function
        on_state_change: Called with every new CheckoutState
        redirect_url: Destination reported on success
    """

    def __init__(
        self,
        client: HoopMetrixClient,
        card_confirmer: CardConfirmer,
        on_success: Optional[Callable] = None,
        on_state_change: Optional[Callable[[CheckoutState], None]] = None,
        redirect_url: str = DEFAULT_REDIRECT_URL,
    ):
        self.client = client
        self.card_confirmer = card_confirmer
        self.on_success = on_success
        self.on_state_change = on_state_change
        self.redirect_url = redirect_url

        self.state = CheckoutState.IDLE
        self.form: Optional[CheckoutForm] = None
        self.error_message: Optional[str] = None
        self._processing = False

    @property
    def is_processing(self) -> bool:
        return self._processing

    def _set_state(self, state: CheckoutState) -> None:
        self.state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _fail(
        self,
        result: CheckoutResult,
        kind: FailureKind,
        message: str,
        status_code: Optional[int] = None,
    ) -> CheckoutResult:
        result.failure = CheckoutFailure(kind=kind, step=self.state, message=message, status_code=status_code)
        result.state = CheckoutState.FAILED
        self.error_message = message
        logger.warning(f"[CHECKOUT] {kind.value} failure during {self.state.value}: {message}")
        self._set_state(CheckoutState.FAILED)
        return result

    async def submit(self, form: CheckoutForm) -> CheckoutResult:
        """
        Run the checkout for the submitted form.

        Failures are returned as a CheckoutResult in the FAILED state, never
        raised.

        Raises:
            CheckoutBusyError: If a submission is already running
        """
        if self._processing:
            raise CheckoutBusyError("Checkout is already processing")

        self._processing = True
        try:
            return await self._run(form)
        finally:
            self._processing = False

    def cancel(self) -> None:
        """
        Discard the form and go back to idle.

        Raises:
            CheckoutBusyError: If a submission is running
        """
        if self._processing:
            raise CheckoutBusyError("Cannot cancel while the checkout is processing")

        self.form = None
        self.error_message = None
        self._set_state(CheckoutState.IDLE)

    async def _run(self, form: CheckoutForm) -> CheckoutResult:
        result = CheckoutResult(state=CheckoutState.IDLE)
        self.form = form
        self.error_message = None

        # 1. Validation
        self._set_state(CheckoutState.VALIDATING)
        is_authenticated = self.client.is_authenticated
        message = validate_form(form, is_authenticated)
        if message:
            return self._fail(result, FailureKind.VALIDATION, message)

        name = form.name.strip()
        email = form.email.strip()
        plan_id = form.plan_id
        billing_cycle = form.billing_cycle.value

        # 2. Account provisioning
        if not is_authenticated:
            self._set_state(CheckoutState.PROVISIONING_ACCOUNT)
            try:
                await self.client.signup(email, form.password, name, plan_id, billing_cycle)
            except CheckoutAPIError as e:
                if e.status_code == 409:
                    return self._fail(result, FailureKind.ACCOUNT_CONFLICT, ACCOUNT_EXISTS_MESSAGE, 409)
                return self._fail(result, FailureKind.SERVER, e.message, e.status_code)
            result.account_created = True
            logger.info(f"[CHECKOUT] Account created for {email}")

        # 3. Setup intent
        self._set_state(CheckoutState.CREATING_SETUP_INTENT)
        try:
            intent = await self.client.create_subscription_intent(plan_id, billing_cycle, name, email)
        except CheckoutAPIError as e:
            return self._fail(result, FailureKind.SERVER, e.message, e.status_code)

        client_secret = intent.get("clientSecret")
        result.customer_id = intent.get("customerId")
        result.setup_intent_id = intent.get("setupIntentId")
        if not client_secret or not result.customer_id or not result.setup_intent_id:
            return self._fail(result, FailureKind.SERVER, INVALID_SETUP_RESPONSE_MESSAGE)

        # 4. Card confirmation
        self._set_state(CheckoutState.CONFIRMING_CARD)
        setup = await self.card_confirmer.confirm_card_setup(client_secret, form.card)
        if setup.error_message:
            return self._fail(result, FailureKind.PAYMENT_NETWORK, setup.error_message)
        if setup.status != "succeeded":
            return self._fail(result, FailureKind.PAYMENT_NETWORK, CARD_NOT_CONFIRMED_MESSAGE)

        # 5. Subscription confirmation
        self._set_state(CheckoutState.CONFIRMING_SUBSCRIPTION)
        try:
            confirmation = await self.client.confirm_subscription(
                result.setup_intent_id, result.customer_id, plan_id, billing_cycle
            )
        except CheckoutAPIError as e:
            return self._fail(result, FailureKind.SUBSCRIPTION, SUBSCRIPTION_FAILED_MESSAGE, e.status_code)

        if not confirmation.get("success"):
            return self._fail(result, FailureKind.SUBSCRIPTION, SUBSCRIPTION_FAILED_MESSAGE)
        result.subscription_id = confirmation.get("subscriptionId")
        logger.info(f"[CHECKOUT] Subscription {result.subscription_id} confirmed for {email}")

        # 6. Auto sign-in, only for the account created above
        if result.account_created:
            self._set_state(CheckoutState.SIGNING_IN)
            try:
                signin = await self.client.signin(email, form.password)
                result.session = signin.get("session") if isinstance(signin, dict) else None
                result.signed_in = True
            except CheckoutAPIError as e:
                logger.warning(f"[CHECKOUT] Auto sign-in failed for {email}, continuing: {e.message}")
            except Exception as e:
                logger.warning(f"[CHECKOUT] Auto sign-in raised for {email}, continuing: {e}")

        # 7. Completion
        result.redirect_url = self.redirect_url
        result.state = CheckoutState.DONE
        self.form = None
        self._set_state(CheckoutState.DONE)

        if self.on_success is not None:
            outcome = self.on_success(result)
            if inspect.isawaitable(outcome):
                await outcome

        return result
