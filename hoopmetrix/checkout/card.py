"""
Card confirmation against the payment network.

Card data never reaches the HoopMetrix API: the setup intent's client
secret and the card handle go straight to Stripe, which answers with the
setup intent's status.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import stripe

from hoopmetrix.core.stripe_client import STRIPE_API_VERSION, get_stripe_keys

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SetupIntentResult:
    status: Optional[str] = None
    id: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error_message is None and self.status == "succeeded"


class CardConfirmer(Protocol):
    async def confirm_card_setup(self, client_secret: str, card: Optional[str]) -> SetupIntentResult:
        ...


def setup_intent_id_from_secret(client_secret: str) -> str:
    # Client secrets look like 'seti_123_secret_abc'
    return client_secret.split("_secret_")[0]


class StripeCardConfirmer:
    """
    Confirms setup intents with the Stripe SDK using the publishable key,
    the same call the browser's Stripe.js makes.
    """

    def __init__(self, publishable_key: Optional[str] = None):
        self.publishable_key = publishable_key or get_stripe_keys().publishable_key

    def _confirm(self, client_secret: str, card: str):
        return stripe.SetupIntent.confirm(
            setup_intent_id_from_secret(client_secret),
            payment_method=card,
            client_secret=client_secret,
            api_key=self.publishable_key,
            stripe_version=STRIPE_API_VERSION,
        )

    async def confirm_card_setup(self, client_secret: str, card: Optional[str]) -> SetupIntentResult:
        if not card:
            return SetupIntentResult(error_message="Please enter your card details")
        if not self.publishable_key:
            return SetupIntentResult(error_message="Payment system not configured")

        try:
            setup_intent = await asyncio.to_thread(self._confirm, client_secret, card)
        except stripe.StripeError as e:
            logger.warning(f"[STRIPE] Card setup rejected: {e}")
            return SetupIntentResult(error_message=e.user_message or str(e))

        return SetupIntentResult(status=setup_intent.status, id=setup_intent.id)
