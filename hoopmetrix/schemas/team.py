from typing import List, Optional
from pydantic import BaseModel, ConfigDict


# ------------------------------------------------------------------
# SHARED BASE SCHEMA
# ------------------------------------------------------------------
class TeamBase(BaseModel):
    name: str
    abbreviation: str
    city: str
    league: str
    logo_url: Optional[str] = None
    conference: Optional[str] = None
    division: Optional[str] = None


# ------------------------------------------------------------------
# CREATION SCHEMA (INPUT, used by the data sync)
# ------------------------------------------------------------------
class TeamCreate(TeamBase):
    id: str
    is_active: bool = True


# ------------------------------------------------------------------
# RESPONSE SCHEMAS (OUTPUT)
# ------------------------------------------------------------------
class TeamResponse(TeamBase):
    id: str
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class TeamListResponse(BaseModel):
    teams: List[TeamResponse]
    pagination: Pagination
