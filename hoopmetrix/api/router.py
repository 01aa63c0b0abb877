# hoopmetrix/api/router.py
from fastapi import APIRouter

from hoopmetrix.api.endpoints import admin, auth, cron, players, subscriptions, teams, webhooks

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(subscriptions.router, tags=["subscriptions"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(teams.router, prefix="/teams", tags=["teams"])
api_router.include_router(players.router, prefix="/players", tags=["players"])
api_router.include_router(cron.router, prefix="/cron", tags=["cron"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
