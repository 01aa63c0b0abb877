"""
Account endpoints used by the guest checkout.

- signup-with-subscription: creates the Supabase account and a free profile
  before payment starts.
- signin-after-signup: signs the new member in once the subscription exists.
- user: returns the signed-in member's profile.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from slowapi.util import get_remote_address
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from supabase import AuthError, Client

from hoopmetrix.core.database import get_db
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.rate_limit import limiter, AUTH_RATE_LIMIT
from hoopmetrix.core.supabase_auth import BACK_OFFICE_ROLES, get_current_profile
from hoopmetrix.core.supabase_client import get_supabase
from hoopmetrix.models.user_profile import UserProfile
from hoopmetrix.schemas.auth import (
    CurrentUserResponse,
    SessionTokens,
    SigninRequest,
    SigninResponse,
    SigninUser,
    SignupUser,
    SignupWithSubscriptionRequest,
    SignupWithSubscriptionResponse,
)
from hoopmetrix.schemas.membership import MembershipProfile

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 6
SIGNUP_MAX_ATTEMPTS = 3
# Wait before retry N is SIGNUP_RETRY_BACKOFF_SECONDS * N
SIGNUP_RETRY_BACKOFF_SECONDS = 1.0

ACCOUNT_EXISTS_MESSAGE = "An account with this email already exists. Please sign in instead."


async def _sign_up_with_retries(supabase: Client, email: str, password: str, full_name: str):
    """
    Call Supabase sign_up, retrying with a linear backoff.

    Returns:
        tuple: (auth response or None, last error message or None)
    """
    last_error = None

    for attempt in range(1, SIGNUP_MAX_ATTEMPTS + 1):
        try:
            logger.info(f"[SIGNUP] Attempt {attempt} for {email}")
            auth_response = await run_in_threadpool(
                supabase.auth.sign_up,
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": full_name}},
                },
            )
            return auth_response, None
        except AuthError as e:
            logger.error(f"[SIGNUP] Attempt {attempt} failed: {e}")
            last_error = e.message or "Failed to create account"
        except Exception as e:
            logger.error(f"[SIGNUP] Attempt {attempt} raised: {e}")
            last_error = f"Connection error on attempt {attempt}: {e}"

        if attempt < SIGNUP_MAX_ATTEMPTS:
            await asyncio.sleep(SIGNUP_RETRY_BACKOFF_SECONDS * attempt)

    return None, last_error


@router.post("/signup-with-subscription", response_model=SignupWithSubscriptionResponse)
@limiter.limit(AUTH_RATE_LIMIT, key_func=get_remote_address)
async def signup_with_subscription(
    request: Request,
    body: SignupWithSubscriptionRequest,
    db: AsyncSession = Depends(get_db),
    supabase: Client = Depends(get_supabase),
):
    """
    Create a member account ahead of a paid subscription.

    Flow:
    1. Validate required fields and password length
    2. Reject emails that already have a profile (409)
    3. Create the Supabase Auth user (up to 3 attempts)
    4. Create the local free profile (failure here is logged, not returned)

    Raises:
        HTTPException 400: Missing fields, short password, or auth failure
        HTTPException 409: Account already exists
        HTTPException 500: Auth service returned no user
    """
    if not body.email or not body.password or not body.full_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email, password, and full name are required"
        )

    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    existing = await MembershipService.get_profile_by_email(db, body.email)
    if existing is not None:
        logger.info(f"[SIGNUP] Account already exists for {body.email}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ACCOUNT_EXISTS_MESSAGE
        )

    auth_response, auth_error = await _sign_up_with_retries(
        supabase, body.email, body.password, body.full_name
    )

    if auth_error:
        logger.error(f"[SIGNUP] Giving up after {SIGNUP_MAX_ATTEMPTS} attempts: {auth_error}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=auth_error)

    if auth_response is None or auth_response.user is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create user account"
        )

    auth_user = auth_response.user

    try:
        await MembershipService.create_profile(db, auth_user.id, auth_user.email, body.full_name)
    except SQLAlchemyError as e:
        # The auth account exists; the profile is recreated lazily on first sign-in
        await db.rollback()
        logger.error(f"[SIGNUP] Profile creation failed for {auth_user.email}: {e}")

    logger.info(f"[SIGNUP] Account created for {auth_user.email}")
    return SignupWithSubscriptionResponse(
        user=SignupUser(id=str(auth_user.id), email=auth_user.email, full_name=body.full_name),
        plan_id=body.plan_id,
        billing_cycle=body.billing_cycle,
    )


@router.post("/signin-after-signup", response_model=SigninResponse)
@limiter.limit(AUTH_RATE_LIMIT, key_func=get_remote_address)
async def signin_after_signup(
    request: Request,
    body: SigninRequest,
    db: AsyncSession = Depends(get_db),
    supabase: Client = Depends(get_supabase),
):
    """
    Sign a newly created member in with the credentials used at checkout.

    Returns the member's current membership status and the session tokens.

    Raises:
        HTTPException 400: Missing credentials or auth failure
        HTTPException 500: Auth service returned no user
    """
    if not body.email or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required"
        )

    try:
        auth_response = await run_in_threadpool(
            supabase.auth.sign_in_with_password,
            {"email": body.email, "password": body.password},
        )
    except AuthError as e:
        logger.error(f"[SIGNIN] Sign in after signup failed for {body.email}: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message or "Failed to sign in"
        )

    if auth_response.user is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to authenticate user"
        )

    profile = await MembershipService.get_profile_by_email(db, body.email)
    membership_status = profile.membership_status if profile else "free"

    session = None
    if auth_response.session is not None:
        session = SessionTokens(
            access_token=auth_response.session.access_token,
            refresh_token=auth_response.session.refresh_token,
            expires_at=auth_response.session.expires_at,
        )

    return SigninResponse(
        user=SigninUser(
            id=str(auth_response.user.id),
            email=auth_response.user.email,
            membership_status=membership_status,
        ),
        session=session,
    )


@router.get("/user", response_model=CurrentUserResponse)
async def get_current_user(profile: UserProfile = Depends(get_current_profile)):
    """
    Return the signed-in member's profile and membership level.
    """
    return CurrentUserResponse(
        user=MembershipProfile(
            id=profile.supabase_user_id,
            email=profile.email,
            full_name=profile.full_name,
            membership_status=profile.membership_status,
            role=profile.role,
        ),
        is_admin=profile.role in BACK_OFFICE_ROLES,
    )
