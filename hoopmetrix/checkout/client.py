"""
HTTP client for the HoopMetrix checkout endpoints.

Wraps an httpx.AsyncClient around the four calls the checkout makes.
Every non-2xx answer raises CheckoutAPIError carrying the status code and
the server's message.
"""
import logging
from typing import Optional

import httpx

from hoopmetrix.core import config

logger = logging.getLogger(__name__)


class CheckoutAPIError(Exception):
    """
    Error answer (or no answer) from a checkout endpoint.

    status_code is None when the request never got a response.
    """

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"HTTP {response.status_code}"


class HoopMetrixClient:
    """
    Async client for signup, setup intent, subscription and sign-in calls.

    Pass access_token when the buyer already has a session; it is sent as
    a Bearer token and marks the client as authenticated.
    """

    def __init__(
        self,
        base_url: str = config.API_BASE_URL,
        access_token: Optional[str] = None,
        timeout: float = config.API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token

        headers = {"Content-Type": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: dict) -> dict:
        try:
            response = await self._client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[CHECKOUT] POST {path} failed: {e}")
            raise CheckoutAPIError(None, f"Request failed: {e}") from e

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(f"[CHECKOUT] POST {path} -> {response.status_code}: {message}")
            raise CheckoutAPIError(response.status_code, message)

        try:
            body = response.json()
        except ValueError:
            return {}

        if not isinstance(body, dict):
            logger.warning(f"[CHECKOUT] POST {path} returned a non-object body")
            raise CheckoutAPIError(response.status_code, "Unexpected response from server")
        return body

    async def signup(
        self,
        email: str,
        password: str,
        full_name: str,
        plan_id: str,
        billing_cycle: str,
    ) -> dict:
        return await self._post(
            "/api/auth/signup-with-subscription",
            {
                "email": email,
                "password": password,
                "full_name": full_name,
                "planId": plan_id,
                "billingCycle": billing_cycle,
            },
        )

    async def create_subscription_intent(
        self,
        plan_id: str,
        billing_cycle: str,
        name: str,
        email: str,
    ) -> dict:
        """
        Returns:
            dict: Contains clientSecret, customerId and setupIntentId
        """
        return await self._post(
            "/api/create-subscription-intent",
            {
                "planId": plan_id,
                "billingCycle": billing_cycle,
                "customer_details": {"name": name, "email": email},
            },
        )

    async def confirm_subscription(
        self,
        setup_intent_id: str,
        customer_id: str,
        plan_id: str,
        billing_cycle: str,
    ) -> dict:
        return await self._post(
            "/api/confirm-subscription",
            {
                "setupIntentId": setup_intent_id,
                "customerId": customer_id,
                "planId": plan_id,
                "billingCycle": billing_cycle,
            },
        )

    async def signin(self, email: str, password: str) -> dict:
        return await self._post(
            "/api/auth/signin-after-signup",
            {"email": email, "password": password},
        )
