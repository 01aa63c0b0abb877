import math
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.orm import selectinload

from hoopmetrix.core.database import get_db
from hoopmetrix.models.team import Team
from hoopmetrix.models.player import Player
from hoopmetrix.schemas.team import Pagination, TeamListResponse, TeamResponse
from hoopmetrix.schemas.player import PlayerResponse

router = APIRouter()


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    return Pagination(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit))


@router.get("/", response_model=TeamListResponse)
async def list_teams(
    league: Optional[str] = Query(None, description="NBA or WNBA"),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    filters = [Team.is_active.is_(True)]
    if league:
        filters.append(Team.league == league.upper())
    if search:
        pattern = f"%{search}%"
        filters.append(or_(Team.name.ilike(pattern), Team.city.ilike(pattern)))

    total = await db.scalar(select(func.count()).select_from(Team).where(*filters))

    stmt = (
        select(Team)
        .where(*filters)
        .order_by(Team.name)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    res = await db.execute(stmt)
    teams = res.scalars().all()

    return TeamListResponse(
        teams=[TeamResponse.model_validate(team) for team in teams],
        pagination=build_pagination(page, limit, total or 0),
    )


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: str, db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(Team).where(Team.id == team_id))
    team = res.scalar_one_or_none()
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.get("/{team_id}/players", response_model=List[PlayerResponse])
async def get_team_players(team_id: str, db: AsyncSession = Depends(get_db)):
    res = await db.execute(select(Team).where(Team.id == team_id))
    if res.scalar_one_or_none() is None:
        raise HTTPException(status_code=404, detail="Team not found")

    stmt = (
        select(Player)
        .where(Player.team_id == team_id)
        .where(Player.is_active.is_(True))
        .order_by(Player.name)
        .options(selectinload(Player.team))
    )
    res = await db.execute(stmt)
    return res.scalars().all()
