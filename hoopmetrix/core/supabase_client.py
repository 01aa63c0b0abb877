"""
Supabase service-role client used by the account endpoints.
"""
from fastapi import HTTPException, status
from supabase import create_client, Client

from hoopmetrix.core import config


def get_supabase() -> Client:
    """
    FastAPI dependency returning a fresh Supabase client.

    A new client per request keeps one member's sign-in session from leaking
    into another request.

    Raises:
        HTTPException 500: If Supabase is not configured
    """
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Authentication service not configured"
        )
    return create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
