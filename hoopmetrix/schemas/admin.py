from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from hoopmetrix.schemas.player import PlayerResponse
from hoopmetrix.schemas.team import TeamResponse


# ------------------------------------------------------------------
# TEAMS
# ------------------------------------------------------------------
class AdminTeamCreate(BaseModel):
    """
    Team created by hand in the back-office.

    Required fields are checked by the endpoint so a missing one is a 400
    with the list of required fields.
    """
    name: Optional[str] = None
    city: Optional[str] = None
    abbreviation: Optional[str] = None
    league: Optional[str] = None
    logo_url: Optional[str] = None
    conference: Optional[str] = None
    division: Optional[str] = None


class AdminTeamUpdate(BaseModel):
    name: Optional[str] = None
    city: Optional[str] = None
    abbreviation: Optional[str] = None
    league: Optional[str] = None
    logo_url: Optional[str] = None
    conference: Optional[str] = None
    division: Optional[str] = None
    is_active: Optional[bool] = None


class AdminTeamResponse(TeamResponse):
    player_count: int = 0


class AdminTeamListResponse(BaseModel):
    success: bool = True
    teams: List[AdminTeamResponse]


class AdminTeamResult(BaseModel):
    success: bool = True
    team: AdminTeamResponse
    message: str


# ------------------------------------------------------------------
# PLAYERS
# ------------------------------------------------------------------
class AdminPlayerCreate(BaseModel):
    name: Optional[str] = None
    team_id: Optional[str] = None
    league: Optional[str] = None
    position: Optional[str] = None
    jersey_number: Optional[int] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    birth_date: Optional[str] = None
    college: Optional[str] = None
    photo_url: Optional[str] = None


class AdminPlayerUpdate(AdminPlayerCreate):
    is_active: Optional[bool] = None


class AdminPlayerListResponse(BaseModel):
    success: bool = True
    players: List[PlayerResponse]


class AdminPlayerResult(BaseModel):
    success: bool = True
    player: PlayerResponse
    message: str


# ------------------------------------------------------------------
# USERS AND ROLES
# ------------------------------------------------------------------
class AdminUser(BaseModel):
    """
    Member as listed in the back-office; `id` is the Supabase user id.
    """
    id: str
    email: str
    full_name: Optional[str] = None
    membership_status: str
    role: str
    is_admin: bool = Field(False, alias="isAdmin")
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True)


class AdminUserListResponse(BaseModel):
    users: List[AdminUser]


class AssignRoleRequest(BaseModel):
    email: Optional[str] = None
    role: str = "admin"


class RemoveRoleRequest(BaseModel):
    user_id: Optional[str] = Field(None, alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class RoleChangeResponse(BaseModel):
    success: bool = True
    message: str


class AdminStatsResponse(BaseModel):
    totalUsers: int
    activeSubscriptions: int
    totalTeams: int
    totalPlayers: int
