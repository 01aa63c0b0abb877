"""
Client helpers for the public NBA / WNBA stats endpoints.

The stats API answers with {"resultSets": [{"name", "headers", "rowSet"}]};
every result set is turned into a pandas DataFrame keyed by its headers and
then mapped onto the Team/Player creation schemas.
"""
import logging
from datetime import date
from typing import Optional

import pandas as pd
import requests

from hoopmetrix.schemas.player import PlayerCreate
from hoopmetrix.schemas.team import TeamCreate

logger = logging.getLogger(__name__)

LEAGUES = ("NBA", "WNBA")

STATS_BASE_URLS = {
    "NBA": "https://stats.nba.com/stats",
    "WNBA": "https://stats.wnba.com/stats",
}

LEAGUE_IDS = {"NBA": "00", "WNBA": "10"}

# stats.nba.com rejects requests without browser-like headers
NBA_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/126.0.0.0 Safari/537.36"
    ),
    "Referer": "https://stats.nba.com/",
    "Origin": "https://www.nba.com",
    "x-nba-stats-origin": "stats",
    "x-nba-stats-token": "true",
}

REQUEST_TIMEOUT_SECONDS = 30


class NBAStatsError(Exception):
    """Raised when the stats API cannot be reached or answers with an error."""


# ----------------------------------------------------------------------
# Season / CDN helpers
# ----------------------------------------------------------------------
def current_season(league: str, today: Optional[date] = None) -> str:
    """
    Season label used by the stats API.

    NBA seasons start in October and are labelled 'YYYY-YY'
    (e.g. '2024-25'); WNBA seasons are the calendar year.
    """
    today = today or date.today()
    if league == "WNBA":
        return str(today.year)

    start_year = today.year if today.month >= 10 else today.year - 1
    return f"{start_year}-{str(start_year + 1)[-2:]}"


def team_logo_url(league: str, team_id: str) -> str:
    return f"https://cdn.nba.com/logos/{league.lower()}/{team_id}/primary/L/logo.svg"


def player_headshot_url(league: str, player_id: str) -> str:
    return f"https://cdn.nba.com/headshots/{league.lower()}/latest/260x190/{player_id}.png"


# ----------------------------------------------------------------------
# HTTP
# ----------------------------------------------------------------------
def fetch_stats(league: str, endpoint: str, params: dict) -> dict:
    """
    GET a stats endpoint for the given league.

    Raises:
        NBAStatsError: On connection errors, non-2xx answers or invalid JSON
    """
    url = f"{STATS_BASE_URLS[league]}/{endpoint}"
    logger.info(f"[HTTP] GET {url} {params}")

    try:
        response = requests.get(url, params=params, headers=NBA_HEADERS, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        return response.json()
    except requests.HTTPError as e:
        raise NBAStatsError(f"{league} stats API {e.response.status_code}: {e.response.reason}") from e
    except requests.RequestException as e:
        raise NBAStatsError(f"{league} stats API unreachable: {e}") from e
    except ValueError as e:
        raise NBAStatsError(f"{league} stats API returned invalid JSON") from e


def result_set_frame(payload: dict, index: int = 0) -> pd.DataFrame:
    """
    Build a DataFrame from one entry of a stats payload's resultSets.

    Missing values come back as None rather than NaN.
    """
    try:
        result_set = payload["resultSets"][index]
    except (KeyError, IndexError, TypeError) as e:
        raise NBAStatsError(f"Result set {index} missing from stats payload") from e

    frame = pd.DataFrame(result_set.get("rowSet", []), columns=result_set["headers"])
    return frame.astype(object).where(pd.notna(frame), None)


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------
def _clean_str(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_jersey(value) -> Optional[int]:
    text = _clean_str(value)
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def parse_teams(frame: pd.DataFrame, league: str) -> list[TeamCreate]:
    """
    Map a team-mode leaguegamelog frame to one TeamCreate per team.

    The game log has one row per team and game, so rows are deduplicated
    on TEAM_ID. The city is the team name without its last word.
    """
    if frame.empty:
        return []

    teams = []
    for row in frame.drop_duplicates(subset="TEAM_ID").itertuples(index=False):
        team_id = str(row.TEAM_ID)
        name = str(row.TEAM_NAME)
        teams.append(
            TeamCreate(
                id=team_id,
                name=name,
                abbreviation=str(row.TEAM_ABBREVIATION),
                city=" ".join(name.split(" ")[:-1]),
                league=league,
                logo_url=team_logo_url(league, team_id),
                conference=None,
                division=None,
            )
        )
    return teams


def parse_roster(frame: pd.DataFrame, league: str, team_id: str) -> list[PlayerCreate]:
    """
    Map a commonteamroster frame to PlayerCreate records for one team.
    """
    players = []
    for record in frame.to_dict(orient="records"):
        player_id = str(record["PLAYER_ID"])
        players.append(
            PlayerCreate(
                id=player_id,
                name=str(record["PLAYER"]),
                team_id=str(team_id),
                league=league,
                position=_clean_str(record.get("POSITION")) or "",
                jersey_number=_parse_jersey(record.get("NUM")),
                height=_clean_str(record.get("HEIGHT")),
                weight=_clean_str(record.get("WEIGHT")),
                birth_date=_clean_str(record.get("BIRTH_DATE")),
                college=_clean_str(record.get("SCHOOL")),
                photo_url=player_headshot_url(league, player_id),
                is_active=True,
            )
        )
    return players


# ----------------------------------------------------------------------
# Endpoint wrappers
# ----------------------------------------------------------------------
def fetch_teams(league: str, season: Optional[str] = None) -> list[TeamCreate]:
    """Teams that played in the league's regular season game log."""
    season = season or current_season(league)
    payload = fetch_stats(
        league,
        "leaguegamelog",
        {
            "Counter": 0,
            "Direction": "ASC",
            "LeagueID": LEAGUE_IDS[league],
            "PlayerOrTeam": "T",
            "Season": season,
            "SeasonType": "Regular Season",
            "Sorter": "DATE",
        },
    )
    return parse_teams(result_set_frame(payload), league)


def fetch_roster(league: str, team_id: str, season: Optional[str] = None) -> list[PlayerCreate]:
    """Current roster of one team."""
    season = season or current_season(league)
    payload = fetch_stats(
        league,
        "commonteamroster",
        {"LeagueID": LEAGUE_IDS[league], "Season": season, "TeamID": team_id},
    )
    return parse_roster(result_set_frame(payload), league, team_id)
