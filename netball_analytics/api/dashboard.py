"""Dashboard API client for batch game data."""

import os
from typing import Any, Dict, List, Optional

import aiohttp
from dotenv import load_dotenv

from ..normalizer import normalize_roster, normalize_score, normalize_stat
from ..types import Game, Player
from .types import BatchGameData, PlayerList, RawGame, RawPlayer


DEFAULT_API_URL = "http://localhost:5000"


def _get_base_url() -> str:
    load_dotenv()
    return os.environ.get("DASHBOARD_API_URL", DEFAULT_API_URL).rstrip("/")


def _get_headers() -> Dict[str, str]:
    """Get request headers, loading the API token at runtime."""
    load_dotenv()
    headers = {"Content-Type": "application/json"}
    token = os.environ.get("DASHBOARD_API_TOKEN", "")
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def unwrap_envelope(payload: Any) -> Any:
    """Strip the server's {"success": ..., "data": ...} response envelope if present."""
    if isinstance(payload, dict) and "data" in payload and ("success" in payload or len(payload) == 1):
        return payload["data"]
    return payload


def process_game(raw: RawGame) -> Game:
    """Convert an API game into the engine's Game shape."""
    is_completed = raw.get("statusIsCompleted", raw.get("isCompleted", raw.get("completed", False)))
    allows_statistics = raw.get("statusAllowsStatistics", raw.get("allowsStatistics", True))

    return {
        "id": raw.get("id"),
        "date": raw.get("date", ""),
        "home_team_id": raw.get("homeTeamId"),
        "away_team_id": raw.get("awayTeamId"),
        "home_team_name": raw.get("homeTeamName"),
        "away_team_name": raw.get("awayTeamName"),
        "home_club_id": raw.get("homeClubId"),
        "away_club_id": raw.get("awayClubId"),
        "is_completed": bool(is_completed),
        "allows_statistics": bool(allows_statistics),
        "is_bye": bool(raw.get("isBye", False)),
    }


def process_player(raw: RawPlayer) -> Player:
    """Convert an API player into the engine's Player shape."""
    player_id = raw.get("id")
    display_name = raw.get("displayName")
    if not display_name:
        full_name = f"{raw.get('firstName', '')} {raw.get('lastName', '')}".strip()
        display_name = full_name or f"Player {player_id}"
    return {"id": player_id, "display_name": display_name}


def _game_key(key: Any) -> Optional[int]:
    try:
        return int(key)
    except (TypeError, ValueError):
        return None


def _process_map(raw_map: Any, field_map: Dict[str, str], normalize) -> Dict[int, List[Any]]:
    """Re-key a per-game map by int id and normalize each camelCase row."""
    result: Dict[int, List[Any]] = {}
    if not isinstance(raw_map, dict):
        return result

    for key, rows in raw_map.items():
        game_id = _game_key(key)
        if game_id is None:
            continue
        processed = []
        for row in rows or []:
            if not isinstance(row, dict):
                continue
            renamed = {snake: row.get(camel) for camel, snake in field_map.items() if camel in row}
            clean = normalize(renamed, game_id)
            if clean is not None:
                processed.append(clean)
        result[game_id] = processed
    return result


STAT_FIELDS = {
    "gameId": "game_id",
    "teamId": "team_id",
    "quarter": "quarter",
    "position": "position",
    "goalsFor": "goals_for",
    "goalsAgainst": "goals_against",
}

ROSTER_FIELDS = {
    "gameId": "game_id",
    "quarter": "quarter",
    "position": "position",
    "playerId": "player_id",
}

SCORE_FIELDS = {
    "gameId": "game_id",
    "teamId": "team_id",
    "quarter": "quarter",
    "score": "score",
}


def process_batch(payload: Any) -> BatchGameData:
    """Convert a batch response into engine inputs."""
    data = unwrap_envelope(payload)
    if not isinstance(data, dict):
        data = {}
    raw_games = data.get("games") or []

    return {
        "games": [process_game(g) for g in raw_games if isinstance(g, dict)],
        "scores": _process_map(data.get("scores"), SCORE_FIELDS, normalize_score),
        "stats": _process_map(data.get("stats"), STAT_FIELDS, normalize_stat),
        "rosters": _process_map(data.get("rosters"), ROSTER_FIELDS, normalize_roster),
    }


async def fetch_dashboard_api(
    endpoint: str,
    method: str = "GET",
    body: Optional[Dict[str, Any]] = None,
) -> Optional[Any]:
    """Call a dashboard endpoint and return the unwrapped JSON body, or None on failure."""
    url = f"{_get_base_url()}/{endpoint.lstrip('/')}"
    timeout = aiohttp.ClientTimeout(total=10)
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.request(method, url, json=body, headers=_get_headers()) as response:
                if response.status != 200:
                    error_text = await response.text()
                    print(f"Dashboard API error {response.status}: {error_text[:100]}")
                    return None
                return unwrap_envelope(await response.json())
    except Exception as e:
        print(f"Dashboard API error: {e}")
        return None


async def fetch_team_batch(team_id: int) -> Optional[BatchGameData]:
    """Fetch a team's games with stats, scores and rosters in one call."""
    payload = await fetch_dashboard_api(
        f"api/teams/{team_id}/games/batch",
        method="POST",
        body={"includeStats": True, "includeScores": True, "includeRosters": True},
    )
    if payload is None:
        return None
    return process_batch(payload)


async def fetch_players() -> PlayerList:
    """Fetch players for name labels."""
    payload = await fetch_dashboard_api("api/players")
    if not isinstance(payload, list):
        return []
    return [process_player(p) for p in payload if isinstance(p, dict)]
