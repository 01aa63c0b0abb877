"""
Back-office endpoints for staff members.

Every route requires a signed-in profile with a back-office role
(see require_admin). Teams and players created here get a `custom_` id so
they never collide with the ids written by the stats sync.
"""
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from hoopmetrix.core.database import get_db
from hoopmetrix.core.membership_service import MembershipService
from hoopmetrix.core.supabase_auth import BACK_OFFICE_ROLES, require_admin
from hoopmetrix.models.player import Player
from hoopmetrix.models.team import Team
from hoopmetrix.models.user_profile import UserProfile
from hoopmetrix.schemas.admin import (
    AdminPlayerCreate,
    AdminPlayerListResponse,
    AdminPlayerResult,
    AdminPlayerUpdate,
    AdminStatsResponse,
    AdminTeamCreate,
    AdminTeamListResponse,
    AdminTeamResponse,
    AdminTeamResult,
    AdminTeamUpdate,
    AdminUser,
    AdminUserListResponse,
    AssignRoleRequest,
    RemoveRoleRequest,
    RoleChangeResponse,
)
from hoopmetrix.schemas.membership import MembershipStatus
from hoopmetrix.schemas.player import PlayerResponse
from hoopmetrix.sync.nba_stats import LEAGUES

logger = logging.getLogger(__name__)

router = APIRouter()

PLAIN_ROLE = "user"


def custom_id() -> str:
    return f"custom_{uuid.uuid4().hex[:12]}"


def _blank(*values: Optional[str]) -> bool:
    return any(not value or not value.strip() for value in values)


async def _commit(db: AsyncSession, action: str) -> None:
    """
    Commit the pending back-office change.

    Raises:
        HTTPException 500: Database failure (the session is rolled back)
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"[ADMIN] Failed to {action}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}"
        )


async def _get_team(db: AsyncSession, team_id: str) -> Team:
    res = await db.execute(select(Team).where(Team.id == team_id))
    team = res.scalar_one_or_none()
    if team is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Team not found")
    return team


async def _get_player(db: AsyncSession, player_id: str) -> Player:
    res = await db.execute(
        select(Player).where(Player.id == player_id).options(selectinload(Player.team))
    )
    player = res.scalar_one_or_none()
    if player is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Player not found")
    return player


def _check_league(league: str) -> str:
    league = league.strip().upper()
    if league not in LEAGUES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="League must be NBA or WNBA"
        )
    return league


# ------------------------------------------------------------------
# DASHBOARD
# ------------------------------------------------------------------
@router.get("/stats", response_model=AdminStatsResponse)
async def get_stats(
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Headline counts for the back-office dashboard.
    """
    total_users = await db.scalar(select(func.count()).select_from(UserProfile))
    premium_users = await db.scalar(
        select(func.count())
        .select_from(UserProfile)
        .where(UserProfile.membership_status == MembershipStatus.PREMIUM.value)
    )
    total_teams = await db.scalar(select(func.count()).select_from(Team))
    total_players = await db.scalar(select(func.count()).select_from(Player))

    return AdminStatsResponse(
        totalUsers=total_users or 0,
        activeSubscriptions=premium_users or 0,
        totalTeams=total_teams or 0,
        totalPlayers=total_players or 0,
    )


# ------------------------------------------------------------------
# TEAMS
# ------------------------------------------------------------------
@router.get("/teams", response_model=AdminTeamListResponse)
async def list_all_teams(
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Every team, inactive ones included, with its roster size.
    """
    stmt = (
        select(Team, func.count(Player.id))
        .outerjoin(Player, Player.team_id == Team.id)
        .group_by(Team.id)
        .order_by(Team.name)
    )
    res = await db.execute(stmt)

    teams = [
        AdminTeamResponse.model_validate(team).model_copy(update={"player_count": player_count})
        for team, player_count in res.all()
    ]
    return AdminTeamListResponse(teams=teams)


@router.post("/teams", response_model=AdminTeamResult)
async def create_team(
    body: AdminTeamCreate,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Create a team by hand.

    Raises:
        HTTPException 400: Missing required field or unknown league
        HTTPException 500: Database failure
    """
    if _blank(body.name, body.city, body.abbreviation, body.league):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: name, city, abbreviation, league"
        )
    league = _check_league(body.league)

    team = Team(
        id=custom_id(),
        league=league,
        name=body.name.strip(),
        city=body.city.strip(),
        abbreviation=body.abbreviation.strip().upper(),
        logo_url=body.logo_url,
        conference=body.conference,
        division=body.division,
        is_active=True,
    )
    db.add(team)
    await _commit(db, "create team")

    logger.info(f"[ADMIN] {admin.email} created team {team.id} ({team.name})")
    return AdminTeamResult(
        team=AdminTeamResponse.model_validate(team),
        message="Team created successfully",
    )


@router.put("/teams/{team_id}", response_model=AdminTeamResult)
async def update_team(
    team_id: str,
    body: AdminTeamUpdate,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    team = await _get_team(db, team_id)

    updates = body.model_dump(exclude_unset=True)
    if "league" in updates:
        updates["league"] = _check_league(updates["league"] or "")
    for field, value in updates.items():
        setattr(team, field, value)
    await _commit(db, "update team")

    player_count = await db.scalar(
        select(func.count()).select_from(Player).where(Player.team_id == team.id)
    )
    logger.info(f"[ADMIN] {admin.email} updated team {team.id}: {sorted(updates)}")
    return AdminTeamResult(
        team=AdminTeamResponse.model_validate(team).model_copy(update={"player_count": player_count or 0}),
        message="Team updated successfully",
    )


@router.delete("/teams/{team_id}")
async def delete_team(
    team_id: str,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Delete a team together with its roster.
    """
    team = await _get_team(db, team_id)

    await db.execute(delete(Player).where(Player.team_id == team.id))
    await db.delete(team)
    await _commit(db, "delete team")

    logger.info(f"[ADMIN] {admin.email} deleted team {team_id} and its players")
    return {"success": True, "message": "Team and all players deleted successfully"}


# ------------------------------------------------------------------
# PLAYERS
# ------------------------------------------------------------------
@router.get("/players", response_model=AdminPlayerListResponse)
async def list_all_players(
    league: Optional[str] = Query(None, description="NBA or WNBA"),
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    stmt = select(Player).options(selectinload(Player.team)).order_by(Player.name)
    if league:
        stmt = stmt.where(Player.league == league.upper())

    res = await db.execute(stmt)
    return AdminPlayerListResponse(
        players=[PlayerResponse.model_validate(player) for player in res.scalars().all()]
    )


@router.post("/players", response_model=AdminPlayerResult)
async def create_player(
    body: AdminPlayerCreate,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Add a player to an existing team.

    Raises:
        HTTPException 400: Missing name, team_id or league
        HTTPException 404: Unknown team
        HTTPException 500: Database failure
    """
    if _blank(body.name, body.team_id, body.league):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields: name, team_id, league"
        )
    league = _check_league(body.league)
    team = await _get_team(db, body.team_id)

    player = Player(
        id=custom_id(),
        name=body.name.strip(),
        league=league,
        position=body.position or "",
        jersey_number=body.jersey_number,
        height=body.height,
        weight=body.weight,
        birth_date=body.birth_date,
        college=body.college,
        photo_url=body.photo_url,
        team_id=team.id,
        is_active=True,
    )
    player.team = team
    db.add(player)
    await _commit(db, "create player")

    logger.info(f"[ADMIN] {admin.email} created player {player.id} ({player.name}) on {team.id}")
    return AdminPlayerResult(
        player=PlayerResponse.model_validate(player),
        message="Player created successfully",
    )


@router.put("/players/{player_id}", response_model=AdminPlayerResult)
async def update_player(
    player_id: str,
    body: AdminPlayerUpdate,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    player = await _get_player(db, player_id)

    updates = body.model_dump(exclude_unset=True)
    if "league" in updates:
        updates["league"] = _check_league(updates["league"] or "")

    team_id = updates.pop("team_id", None)
    if team_id and team_id != player.team_id:
        player.team = await _get_team(db, team_id)
        player.team_id = team_id

    for field, value in updates.items():
        setattr(player, field, value)
    await _commit(db, "update player")

    logger.info(f"[ADMIN] {admin.email} updated player {player.id}")
    return AdminPlayerResult(
        player=PlayerResponse.model_validate(player),
        message="Player updated successfully",
    )


@router.delete("/players/{player_id}")
async def delete_player(
    player_id: str,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    player = await _get_player(db, player_id)

    await db.delete(player)
    await _commit(db, "delete player")

    logger.info(f"[ADMIN] {admin.email} deleted player {player_id}")
    return {"success": True, "message": "Player deleted successfully"}


# ------------------------------------------------------------------
# USERS AND ROLES
# ------------------------------------------------------------------
@router.get("/users", response_model=AdminUserListResponse)
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Every member profile, newest first.
    """
    res = await db.execute(select(UserProfile).order_by(UserProfile.created_at.desc()))

    users = [
        AdminUser(
            id=profile.supabase_user_id,
            email=profile.email,
            full_name=profile.full_name,
            membership_status=profile.membership_status,
            role=profile.role,
            is_admin=profile.role in BACK_OFFICE_ROLES,
            is_active=profile.is_active,
            created_at=profile.created_at,
        )
        for profile in res.scalars().all()
    ]
    return AdminUserListResponse(users=users)


@router.post("/assign-role", response_model=RoleChangeResponse)
async def assign_role(
    body: AssignRoleRequest,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Give a member a back-office role.

    Raises:
        HTTPException 400: Missing email or unknown role
        HTTPException 404: No profile with that email
    """
    if _blank(body.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    if body.role not in BACK_OFFICE_ROLES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Invalid role. Must be "admin" or "editor"'
        )

    email = body.email.strip()
    profile = await MembershipService.get_profile_by_email(db, email)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found. Make sure the user has an account."
        )

    had_role = profile.role in BACK_OFFICE_ROLES
    profile.role = body.role
    await _commit(db, "assign admin role")

    logger.info(f"[ADMIN] {admin.email} set role '{body.role}' on {email}")
    if had_role:
        message = f"User {email} role updated to {body.role}"
    else:
        message = f"User {email} has been assigned {body.role} role"
    return RoleChangeResponse(message=message)


@router.post("/remove-role", response_model=RoleChangeResponse)
async def remove_role(
    body: RemoveRoleRequest,
    db: AsyncSession = Depends(get_db),
    admin: UserProfile = Depends(require_admin),
):
    """
    Turn a staff member back into a plain member.

    Raises:
        HTTPException 400: Missing userId
        HTTPException 404: Unknown user or no back-office role
    """
    if _blank(body.user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User ID is required")

    profile = await MembershipService.get_profile_by_supabase_id(db, body.user_id)
    if profile is None or profile.role not in BACK_OFFICE_ROLES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User does not have admin role")

    profile.role = PLAIN_ROLE
    await _commit(db, "remove admin role")

    logger.info(f"[ADMIN] {admin.email} removed the back-office role of {profile.email}")
    return RoleChangeResponse(message="Admin role removed successfully")
