"""
Test suite for card confirmation with Stripe.
"""
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import stripe

from hoopmetrix.checkout.card import StripeCardConfirmer, setup_intent_id_from_secret


def test_setup_intent_id_from_secret():
    assert setup_intent_id_from_secret("seti_1Abc_secret_XyZ") == "seti_1Abc"


@pytest.mark.asyncio
async def test_confirm_uses_publishable_key(monkeypatch):
    confirm = MagicMock(return_value=SimpleNamespace(status="succeeded", id="seti_1Abc"))
    monkeypatch.setattr(stripe.SetupIntent, "confirm", confirm)

    result = await StripeCardConfirmer("pk_test_123").confirm_card_setup("seti_1Abc_secret_XyZ", "pm_card_visa")

    assert result.succeeded
    assert result.id == "seti_1Abc"
    args, kwargs = confirm.call_args
    assert args == ("seti_1Abc",)
    assert kwargs["payment_method"] == "pm_card_visa"
    assert kwargs["client_secret"] == "seti_1Abc_secret_XyZ"
    assert kwargs["api_key"] == "pk_test_123"


@pytest.mark.asyncio
async def test_card_error_becomes_error_message(monkeypatch):
    error = stripe.CardError(
        "Your card was declined.",
        param=None,
        code="card_declined",
        json_body={"error": {"message": "Your card was declined."}},
    )
    monkeypatch.setattr(stripe.SetupIntent, "confirm", MagicMock(side_effect=error))

    result = await StripeCardConfirmer("pk_test_123").confirm_card_setup("seti_1_secret_x", "pm_card_chargeDeclined")

    assert not result.succeeded
    assert result.error_message == "Your card was declined."


@pytest.mark.asyncio
async def test_missing_card_fails_without_stripe_call(monkeypatch):
    confirm = MagicMock()
    monkeypatch.setattr(stripe.SetupIntent, "confirm", confirm)

    result = await StripeCardConfirmer("pk_test_123").confirm_card_setup("seti_1_secret_x", None)

    assert result.error_message
    confirm.assert_not_called()
