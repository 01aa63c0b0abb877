from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from hoopmetrix.core.database import get_db
from hoopmetrix.models.player import Player
from hoopmetrix.schemas.player import PlayerListResponse, PlayerResponse
from hoopmetrix.api.endpoints.teams import build_pagination

router = APIRouter()


@router.get("/", response_model=PlayerListResponse)
async def list_players(
    league: Optional[str] = Query(None, description="NBA or WNBA"),
    position: Optional[str] = Query(None, description="e.g. G, F, C"),
    team: Optional[str] = Query(None, description="Team id"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """
    List active players, ordered by name, with their team embedded.

    Search matches the player name case-insensitively.
    """
    filters = [Player.is_active.is_(True)]
    if league:
        filters.append(Player.league == league.upper())
    if position:
        filters.append(Player.position == position)
    if team:
        filters.append(Player.team_id == team)
    if search:
        filters.append(Player.name.ilike(f"%{search}%"))

    total = await db.scalar(select(func.count()).select_from(Player).where(*filters))

    stmt = (
        select(Player)
        .where(*filters)
        .order_by(Player.name)
        .offset((page - 1) * limit)
        .limit(limit)
        .options(selectinload(Player.team))
    )
    res = await db.execute(stmt)
    players = res.scalars().all()

    return PlayerListResponse(
        players=[PlayerResponse.model_validate(player) for player in players],
        pagination=build_pagination(page, limit, total or 0),
    )


@router.get("/{player_id}", response_model=PlayerResponse)
async def get_player(player_id: str, db: AsyncSession = Depends(get_db)):
    stmt = (
        select(Player)
        .where(Player.id == player_id)
        .options(selectinload(Player.team))
    )
    res = await db.execute(stmt)
    player = res.scalar_one_or_none()
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player
