"""
Test suite for the Teams endpoints.
Tests list pagination, filtering, detail lookups and response structure.
"""
import pytest

from hoopmetrix.api.endpoints.teams import build_pagination
from hoopmetrix.models.player import Player
from hoopmetrix.models.team import Team


def celtics():
    return Team(
        id="1610612738",
        league="NBA",
        name="Boston Celtics",
        city="Boston",
        abbreviation="BOS",
        logo_url="https://cdn.nba.com/logos/nba/1610612738/primary/L/logo.svg",
        is_active=True,
    )


def test_build_pagination_rounds_up():
    pagination = build_pagination(page=2, limit=20, total=41)

    assert pagination.totalPages == 3
    assert pagination.page == 2


def test_build_pagination_empty():
    assert build_pagination(page=1, limit=20, total=0).totalPages == 0


@pytest.mark.asyncio
async def test_list_teams_basic(client, db_session, make_result):
    """
    Test GET /api/teams with default parameters.

    Validates:
    - Response carries 'teams' and 'pagination'
    - TeamResponse structure has the expected fields
    """
    # Setup: One team, one row in the count query
    db_session.scalar.return_value = 1
    db_session.execute.return_value = make_result([celtics()])

    # Execute
    response = await client.get("/api/teams", follow_redirects=True)

    # Assert: Check response status code
    assert response.status_code == 200, f"Expected 200, got {response.status_code}"

    data = response.json()
    assert data["pagination"] == {"page": 1, "limit": 20, "total": 1, "totalPages": 1}

    team = data["teams"][0]
    for field in ["id", "name", "city", "abbreviation", "league", "logo_url", "is_active"]:
        assert field in team, f"Missing field '{field}' in team response"
    assert team["abbreviation"] == "BOS"


@pytest.mark.asyncio
async def test_list_teams_paginates(client, db_session, make_result):
    """
    Test GET /api/teams with page and limit.

    Validates:
    - totalPages is derived from the count query
    """
    # Setup: 30 teams in total
    db_session.scalar.return_value = 30
    db_session.execute.return_value = make_result([celtics()])

    # Execute
    response = await client.get("/api/teams", params={"page": 2, "limit": 10}, follow_redirects=True)

    # Assert
    assert response.status_code == 200
    assert response.json()["pagination"] == {"page": 2, "limit": 10, "total": 30, "totalPages": 3}


@pytest.mark.asyncio
async def test_list_teams_rejects_invalid_page(client):
    response = await client.get("/api/teams", params={"page": 0}, follow_redirects=True)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_team(client, db_session, make_result):
    """
    Test GET /api/teams/{team_id}.

    Validates:
    - The team is returned by its NBA id
    """
    # Setup
    db_session.execute.return_value = make_result(scalar=celtics())

    # Execute
    response = await client.get("/api/teams/1610612738")

    # Assert
    assert response.status_code == 200
    assert response.json()["name"] == "Boston Celtics"


@pytest.mark.asyncio
async def test_get_team_not_found(client, db_session, make_result):
    db_session.execute.return_value = make_result(scalar=None)

    response = await client.get("/api/teams/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Team not found"}


@pytest.mark.asyncio
async def test_get_team_players(client, db_session, make_result):
    """
    Test GET /api/teams/{team_id}/players.

    Validates:
    - The roster is returned as a list
    - Each player embeds the team summary
    """
    # Setup: Team lookup, then roster query
    team = celtics()
    player = Player(
        id="1628369", name="Jayson Tatum", league="NBA", position="F",
        jersey_number=0, team_id=team.id, is_active=True,
    )
    player.team = team
    db_session.execute.side_effect = [make_result(scalar=team), make_result([player])]

    # Execute
    response = await client.get(f"/api/teams/{team.id}/players")

    # Assert
    assert response.status_code == 200
    players = response.json()
    assert [p["name"] for p in players] == ["Jayson Tatum"]
    assert players[0]["team"]["abbreviation"] == "BOS"
