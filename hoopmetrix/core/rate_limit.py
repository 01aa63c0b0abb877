"""
Rate limiting configuration for the public account and billing endpoints.
"""
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from hoopmetrix.core.config import REDIS_URL
from hoopmetrix.core.supabase_auth import token_subject

logger = logging.getLogger(__name__)

# Limits for the unauthenticated checkout endpoints
AUTH_RATE_LIMIT = "20/minute"
BILLING_RATE_LIMIT = "30/minute"


def get_rate_limit_key(request: Request) -> str:
    """
    Custom key function for rate limiting.

    Priority:
    1. Supabase user id of a verified Bearer token (signed-in member)
    2. IP address (fallback: guests and unverifiable tokens)

    Returns:
        str: Unique identifier for rate limiting
    """
    authorization = request.headers.get("Authorization")
    if authorization and authorization.startswith("Bearer "):
        subject = token_subject(authorization[len("Bearer "):])
        if subject:
            return f"user:{subject}"

    return f"ip:{get_remote_address(request)}"


if REDIS_URL == "memory://":
    logger.warning("[RATE LIMIT] REDIS_URL not configured, using in-memory storage")

limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["300/hour"],
    storage_uri=REDIS_URL,
    strategy="fixed-window",
    headers_enabled=False,
)
