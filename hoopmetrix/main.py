import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from hoopmetrix.api.router import api_router
from hoopmetrix.core import config
from hoopmetrix.core.database import engine, Base
from hoopmetrix.core.logging_config import setup_logging
from hoopmetrix.core.middleware import request_logging_middleware
from hoopmetrix.core.rate_limit import limiter

logger = logging.getLogger(__name__)


# --- Lifespan events (startup / shutdown) ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context.

    On startup:
      - Configure logging and report configuration problems.
      - Ensure all database tables exist (create if missing).
    """
    setup_logging()
    logger.info("[STARTUP] Starting HoopMetrix API")

    config_status = config.validate_config()
    for error in config_status["errors"]:
        logger.error(f"[CONFIG] {error}")
    for warning in config_status["warnings"]:
        logger.warning(f"[CONFIG] {warning}")

    async with engine.begin() as conn:
        # Create tables automatically if they do not exist
        await conn.run_sync(Base.metadata.create_all)

    yield

    await engine.dispose()
    logger.info("[SHUTDOWN] HoopMetrix API stopped")


# --- FastAPI application instance ---
app = FastAPI(
    title="HoopMetrix API",
    version="1.0.0",
    lifespan=lifespan,
    description="""
    NBA / WNBA player and team browsing plus premium memberships.

    ## Checkout

    1. `POST /api/auth/signup-with-subscription` (guests only)
    2. `POST /api/create-subscription-intent`
    3. Card confirmation with Stripe on the client
    4. `POST /api/confirm-subscription`
    5. `POST /api/auth/signin-after-signup` (new accounts)

    Errors are returned as `{"error": "<message>"}`.
    """
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.middleware("http")(request_logging_middleware)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Render HTTP errors as {"error": <detail>}, the shape the checkout expects.
    """
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


# --- Root health / welcome endpoint ---
@app.get("/")
@limiter.limit("10/minute")
async def root(request: Request):
    """
    Simple health/welcome endpoint.
    """
    return {
        "message": "Welcome to the HoopMetrix API",
        "status": "OK",
        "docs": "/docs",
    }


# --- Mount API routers ---
app.include_router(api_router, prefix="/api")
