"""
Scheduled jobs triggered over HTTP by the hosting platform's cron.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Header, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from hoopmetrix.core import config
from hoopmetrix.sync import teams_players
from hoopmetrix.sync.nba_stats import NBAStatsError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/sync-nba-data")
async def sync_nba_data(authorization: str | None = Header(None)):
    """
    Run the NBA + WNBA team and roster sync.

    Requires `Authorization: Bearer <CRON_SECRET>`.

    Returns:
        dict: Per-league team/player counts and totals
    """
    if not config.CRON_SECRET or authorization != f"Bearer {config.CRON_SECRET}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        return await teams_players.run_sync()
    except (NBAStatsError, SQLAlchemyError) as e:
        logger.error(f"[SYNC] Sync failed: {e}")
        return JSONResponse(
            {
                "success": False,
                "error": str(e),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
