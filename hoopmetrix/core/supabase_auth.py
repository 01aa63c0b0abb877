"""
Supabase session tokens on the API side.

Tokens signed with the project's shared secret (HS256) are checked locally;
asymmetric tokens (ES256/RS256) are checked against the project's JWKS,
fetched once per process. The member profile behind a valid token is
created on first sight.
"""
import logging
from typing import Optional

import requests
from fastapi import Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from hoopmetrix.core import config
from hoopmetrix.core.database import get_db
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

JWKS_TIMEOUT_SECONDS = 5
_DECODE_OPTIONS = {"verify_aud": False}

_jwks: Optional[dict] = None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_jwks() -> Optional[dict]:
    """Signing keys of the Supabase project, or None if they cannot be fetched."""
    global _jwks

    if _jwks is None:
        url = f"{config.SUPABASE_URL}/auth/v1/.well-known/jwks.json"
        try:
            response = requests.get(url, timeout=JWKS_TIMEOUT_SECONDS)
            response.raise_for_status()
            _jwks = response.json()
        except requests.RequestException as e:
            logger.warning(f"[AUTH] Could not fetch JWKS from {url}: {e}")
    return _jwks


def _decode_with_jwks(token: str) -> dict:
    header = jwt.get_unverified_header(token)
    kid = header.get("kid")

    jwks = get_jwks()
    if not jwks:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not fetch JWKS from Supabase"
        )

    signing_key = next((key for key in jwks.get("keys", []) if key.get("kid") == kid), None)
    if signing_key is None:
        raise _unauthorized(f"Could not find public key for kid: {kid}")

    return jwt.decode(
        token,
        signing_key,
        algorithms=[header.get("alg", "ES256")],
        options=_DECODE_OPTIONS,
    )


def decode_supabase_jwt(token: str) -> dict:
    """
    Validate a Supabase access token and return its claims.

    Raises:
        HTTPException 401: Invalid, expired or unknown-key token
        HTTPException 500: JWKS needed but unavailable
    """
    if config.SUPABASE_JWT_SECRET:
        try:
            return jwt.decode(token, config.SUPABASE_JWT_SECRET, algorithms=["HS256"], options=_DECODE_OPTIONS)
        except JWTError as e:
            logger.debug(f"[AUTH] Shared-secret check failed ({e}), trying JWKS")

    try:
        return _decode_with_jwks(token)
    except JWTError as e:
        raise _unauthorized(f"Invalid authentication token: {e}")


def token_subject(token: str) -> Optional[str]:
    """
    'sub' claim of a token whose signature checks out, or None.

    Never goes to the network: JWKS tokens are only checked once the keys
    have been fetched by a real authentication.
    """
    if config.SUPABASE_JWT_SECRET:
        try:
            return jwt.decode(
                token, config.SUPABASE_JWT_SECRET, algorithms=["HS256"], options=_DECODE_OPTIONS
            ).get("sub")
        except JWTError:
            pass

    if _jwks is None:
        return None
    try:
        return _decode_with_jwks(token).get("sub")
    except (JWTError, HTTPException):
        return None


async def get_or_create_profile_from_jwt(payload: dict, db: AsyncSession) -> UserProfile:
    """
    Member profile for the token's Supabase user, created if missing.

    Raises:
        HTTPException 401: Claims without 'sub' or 'email'
    """
    supabase_user_id = payload.get("sub")
    email = payload.get("email")
    if not supabase_user_id or not email:
        raise _unauthorized("Invalid token payload: missing sub or email")

    profile = await MembershipService.get_profile_by_supabase_id(db, supabase_user_id)
    if profile is not None:
        return profile

    full_name = (payload.get("user_metadata") or {}).get("full_name")
    profile = await MembershipService.create_profile(db, supabase_user_id, email, full_name)
    logger.info(f"[AUTH] Profile created on first sign-in: {email}")
    return profile


async def get_current_profile(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """
    Dependency returning the signed-in member.

    Raises:
        HTTPException 401: No or invalid bearer token
        HTTPException 403: Deactivated account
    """
    if credentials is None:
        raise _unauthorized("Authentication required")

    # The first JWKS fetch is a blocking HTTP call
    claims = await run_in_threadpool(decode_supabase_jwt, credentials.credentials)
    profile = await get_or_create_profile_from_jwt(claims, db)

    if not profile.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return profile


# Roles allowed into the admin back-office
BACK_OFFICE_ROLES = ("admin", "editor")


async def require_admin(profile: UserProfile = Depends(get_current_profile)) -> UserProfile:
    """
    Dependency for back-office routes.

    Raises:
        HTTPException 403: Signed-in member without a back-office role
    """
    if profile.role not in BACK_OFFICE_ROLES:
        logger.warning(f"[AUTH] Back-office access refused for {profile.email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This endpoint requires admin privileges"
        )
    return profile
