"""
Application configuration.

All settings are read from the environment (optionally from a .env file)
once at import time and exposed as module-level constants.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


# ============================================
# APPLICATION
# ============================================
APP_NAME = "HoopMetrix"
APP_URL = os.getenv("APP_URL", "http://localhost:3000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Origins allowed to call the API from a browser
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]


# ============================================
# API CLIENT CONFIGURATION (checkout workflow)
# ============================================
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
API_TIMEOUT = int(os.getenv("API_TIMEOUT", "30"))


# ============================================
# DATABASE CONFIGURATION
# ============================================
DATABASE_URL = os.getenv("DATABASE_URL")


# ============================================
# SUPABASE CONFIGURATION
# ============================================
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")


# ============================================
# STRIPE CONFIGURATION
# ============================================
# 'sandbox' and 'test' are treated the same way
STRIPE_MODE = os.getenv("STRIPE_MODE", "sandbox")

STRIPE_TEST_PUBLISHABLE_KEY = os.getenv("STRIPE_TEST_PUBLISHABLE_KEY")
STRIPE_TEST_SECRET_KEY = os.getenv("STRIPE_TEST_SECRET_KEY")
STRIPE_TEST_WEBHOOK_SECRET = os.getenv("STRIPE_TEST_WEBHOOK_SECRET")

STRIPE_LIVE_PUBLISHABLE_KEY = os.getenv("STRIPE_LIVE_PUBLISHABLE_KEY")
STRIPE_LIVE_SECRET_KEY = os.getenv("STRIPE_LIVE_SECRET_KEY")
STRIPE_LIVE_WEBHOOK_SECRET = os.getenv("STRIPE_LIVE_WEBHOOK_SECRET")

# Price (price_...) or product (prod_...) identifiers per paid plan
STRIPE_PRICE_IDS = {
    "pro": {
        "monthly": os.getenv("STRIPE_PRO_MONTHLY_PRICE_ID", "price_pro_monthly"),
        "yearly": os.getenv("STRIPE_PRO_YEARLY_PRICE_ID", "price_pro_yearly"),
    },
    "elite": {
        "monthly": os.getenv("STRIPE_ELITE_MONTHLY_PRICE_ID", "price_elite_monthly"),
        "yearly": os.getenv("STRIPE_ELITE_YEARLY_PRICE_ID", "price_elite_yearly"),
    },
}


# ============================================
# REDIS CONFIGURATION (Rate Limiting)
# ============================================
REDIS_URL = os.getenv("REDIS_URL", "memory://")


# ============================================
# DATA SYNC CONFIGURATION
# ============================================
CRON_SECRET = os.getenv("CRON_SECRET")
SYNC_DELAY_SECONDS = float(os.getenv("SYNC_DELAY_SECONDS", "1"))


# ============================================
# HELPER FUNCTIONS
# ============================================

def validate_config() -> dict:
    """
    Validate that all required configuration is present.

    Returns:
        dict: Configuration status with warnings and errors
    """
    status = {
        "valid": True,
        "errors": [],
        "warnings": []
    }

    if not DATABASE_URL:
        status["errors"].append("DATABASE_URL not configured in .env")
        status["valid"] = False

    if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
        status["errors"].append(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for account endpoints"
        )
        status["valid"] = False

    if not (STRIPE_TEST_SECRET_KEY or STRIPE_LIVE_SECRET_KEY):
        status["errors"].append("No Stripe secret key configured")
        status["valid"] = False

    if not (STRIPE_TEST_WEBHOOK_SECRET or STRIPE_LIVE_WEBHOOK_SECRET):
        status["warnings"].append("No Stripe webhook secret - webhooks will be rejected")

    if not CRON_SECRET:
        status["warnings"].append("CRON_SECRET not configured - cron sync endpoint is disabled")

    if REDIS_URL == "memory://":
        status["warnings"].append(
            "REDIS_URL not configured - rate limits are kept in memory"
        )

    return status
