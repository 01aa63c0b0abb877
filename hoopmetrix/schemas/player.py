from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from hoopmetrix.schemas.team import Pagination


# ------------------------------------------------------------------
# SHARED BASE SCHEMA
# ------------------------------------------------------------------
class PlayerBase(BaseModel):
    """
    Shared properties for Player schemas.
    """
    name: str
    league: str
    position: Optional[str] = None
    jersey_number: Optional[int] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    birth_date: Optional[str] = None
    college: Optional[str] = None
    photo_url: Optional[str] = None


# ------------------------------------------------------------------
# CREATION SCHEMA (INPUT, used by the data sync)
# ------------------------------------------------------------------
class PlayerCreate(PlayerBase):
    id: str
    team_id: Optional[str] = None
    is_active: bool = True


# ------------------------------------------------------------------
# RESPONSE SCHEMAS (OUTPUT)
# ------------------------------------------------------------------
class PlayerTeamSummary(BaseModel):
    """
    The team fields embedded in a player response.
    """
    id: str
    name: str
    abbreviation: str
    city: str
    league: str
    logo_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PlayerResponse(PlayerBase):
    id: str
    team_id: Optional[str] = None
    is_active: bool = True
    team: Optional[PlayerTeamSummary] = None

    model_config = ConfigDict(from_attributes=True)


class PlayerListResponse(BaseModel):
    players: List[PlayerResponse]
    pagination: Pagination
