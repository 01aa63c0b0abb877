"""
Team and roster sync for NBA and WNBA.

For each league:
1. Fetch the teams from the stats game log and upsert them.
2. For every stored team of that league, fetch the current roster and
   upsert its players, pausing between teams to stay under the stats
   API's rate limit.
"""
import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoopmetrix.core import config
from hoopmetrix.core.database import AsyncSessionLocal
from hoopmetrix.models.player import Player
from hoopmetrix.models.team import Team
from hoopmetrix.schemas.player import PlayerCreate
from hoopmetrix.sync import nba_stats

logger = logging.getLogger(__name__)


async def sync_teams(db: AsyncSession, league: str) -> int:
    """
    Fetch and upsert the teams of a league.

    Returns:
        int: Number of teams received from the stats API

    Raises:
        NBAStatsError: If the team list cannot be fetched
        SQLAlchemyError: If the teams cannot be stored
    """
    logger.info(f"[SYNC] Syncing {league} teams...")
    teams = await asyncio.to_thread(nba_stats.fetch_teams, league)

    try:
        for team in teams:
            await db.merge(Team(**team.model_dump()))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[SYNC] Error upserting {league} teams: {e}")
        raise

    logger.info(f"[SYNC] Synced {len(teams)} {league} teams")
    return len(teams)


async def fetch_roster(league: str, team_id: str) -> list[PlayerCreate]:
    """
    Roster of one team, or an empty list when the stats API fails.
    """
    try:
        return await asyncio.to_thread(nba_stats.fetch_roster, league, team_id)
    except nba_stats.NBAStatsError as e:
        logger.error(f"[SYNC] Error fetching roster for team {team_id}: {e}")
        return []


async def upsert_players(db: AsyncSession, players: list[PlayerCreate]) -> int:
    """
    Upsert players by id.

    Returns:
        int: Number of players stored (0 when the batch failed)
    """
    if not players:
        return 0

    try:
        for player in players:
            await db.merge(Player(**player.model_dump()))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[SYNC] Error upserting {len(players)} players: {e}")
        return 0

    return len(players)


async def run_league(db: AsyncSession, league: str, delay_seconds: float | None = None) -> dict:
    """
    Sync the teams and then every roster of one league.

    Returns:
        dict: {"teams": <teams synced>, "players": <players synced>}
    """
    delay = config.SYNC_DELAY_SECONDS if delay_seconds is None else delay_seconds
    logger.info(f"[SYNC] Starting {league} sync...")

    team_count = await sync_teams(db, league)

    result = await db.execute(select(Team.id).where(Team.league == league))
    team_ids = result.scalars().all()

    if not team_ids:
        logger.warning(f"[SYNC] No {league} teams found in database")
        return {"teams": team_count, "players": 0}

    total_players = 0
    for team_id in team_ids:
        logger.info(f"[SYNC] Syncing roster for team {team_id}...")
        players = await fetch_roster(league, team_id)
        synced = await upsert_players(db, players)
        total_players += synced
        logger.info(f"[SYNC] Synced {synced} players for team {team_id}")

        if delay > 0:
            await asyncio.sleep(delay)

    logger.info(f"[SYNC] {league} sync completed")
    return {"teams": team_count, "players": total_players}


async def run_sync(leagues=nba_stats.LEAGUES) -> dict:
    """
    Sync every league in turn with its own database session.

    Returns:
        dict: Summary with per-league counts, totals and a timestamp
    """
    summary = {"success": True, "timestamp": datetime.now(timezone.utc).isoformat()}
    total_teams = 0
    total_players = 0

    for league in leagues:
        async with AsyncSessionLocal() as db:
            counts = await run_league(db, league)
        summary[league.lower()] = counts
        total_teams += counts["teams"]
        total_players += counts["players"]

    summary["total"] = {"teams": total_teams, "players": total_players}
    logger.info(f"[SYNC] NBA + WNBA sync completed: {summary['total']}")
    return summary
