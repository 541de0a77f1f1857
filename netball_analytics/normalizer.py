"""Record normalization and per-game indexing shared by every analyzer."""

import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .types import (
    Game,
    PositionStat,
    QuarterGroup,
    QuarterScore,
    RosterAssignment,
)


# Canonical court order, defence to attack
POSITIONS = ("GK", "GD", "WD", "C", "WA", "GA", "GS")
ATTACKING_POSITIONS = ("GS", "GA")
DEFENDING_POSITIONS = ("GD", "GK")
QUARTERS = (1, 2, 3, 4)


def coerce_count(value: Any) -> int:
    """
    Coerce a raw goal/score field to a non-negative int.

    Ints pass through, finite floats and numeric strings are converted.
    Booleans, None, negatives, NaN and anything unparseable become 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return max(int(value), 0)
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            return 0
        if not math.isfinite(number):
            return 0
        return max(int(number), 0)
    return 0


def _coerce_id(value: Any) -> Optional[int]:
    """Parse an identifier, returning None when it is absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def _lookup(mapping: Optional[Mapping[Any, Any]], game_id: Any) -> List[Any]:
    """Fetch a game's rows from a map keyed by int or str game id."""
    if not mapping or game_id is None:
        return []
    rows = mapping.get(game_id)
    if rows is None:
        rows = mapping.get(str(game_id))
    if not isinstance(rows, (list, tuple)):
        return []
    return list(rows)


def normalize_stat(raw: Mapping[str, Any], game_id: Any = None) -> Optional[PositionStat]:
    """Clean a position stat row. Rows without a quarter or known position are dropped."""
    if not isinstance(raw, Mapping):
        return None
    quarter = _coerce_id(raw.get("quarter"))
    position = raw.get("position")
    if quarter is None or position not in POSITIONS:
        return None
    return {
        "game_id": _coerce_id(raw.get("game_id", game_id)),
        "team_id": _coerce_id(raw.get("team_id")),
        "quarter": quarter,
        "position": position,
        "goals_for": coerce_count(raw.get("goals_for")),
        "goals_against": coerce_count(raw.get("goals_against")),
    }


def normalize_roster(raw: Mapping[str, Any], game_id: Any = None) -> Optional[RosterAssignment]:
    """Clean a roster row. Rows without a quarter, position or player are dropped."""
    if not isinstance(raw, Mapping):
        return None
    quarter = _coerce_id(raw.get("quarter"))
    position = raw.get("position")
    player_id = _coerce_id(raw.get("player_id"))
    if quarter is None or position not in POSITIONS or player_id is None:
        return None
    return {
        "game_id": _coerce_id(raw.get("game_id", game_id)),
        "quarter": quarter,
        "position": position,
        "player_id": player_id,
    }


def normalize_score(raw: Mapping[str, Any], game_id: Any = None) -> Optional[QuarterScore]:
    """Clean a quarter score row. Rows without a team or quarter are dropped."""
    if not isinstance(raw, Mapping):
        return None
    team_id = _coerce_id(raw.get("team_id"))
    quarter = _coerce_id(raw.get("quarter"))
    if team_id is None or quarter is None:
        return None
    return {
        "game_id": _coerce_id(raw.get("game_id", game_id)),
        "team_id": team_id,
        "quarter": quarter,
        "score": coerce_count(raw.get("score")),
    }


def eligible_games(games: Optional[Iterable[Game]]) -> List[Game]:
    """Games that are completed and count towards statistics, input order preserved."""
    if not games:
        return []
    return [
        g for g in games
        if isinstance(g, Mapping) and g.get("is_completed") and g.get("allows_statistics")
    ]


def game_stats(
    game_id: Any,
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    team_id: Optional[int] = None,
) -> List[PositionStat]:
    """Normalized stat rows for a game, optionally restricted to one team.

    Rows that carry no team id are kept for any team, since team-scoped
    batch endpoints omit it.
    """
    stats = []
    for raw in _lookup(stats_by_game, game_id):
        stat = normalize_stat(raw, game_id)
        if stat is None:
            continue
        if team_id is not None and stat["team_id"] is not None and stat["team_id"] != team_id:
            continue
        stats.append(stat)
    return stats


def game_rosters(game_id: Any, rosters_by_game: Optional[Mapping[Any, List[Any]]]) -> List[RosterAssignment]:
    """Normalized roster rows for a game."""
    rosters = []
    for raw in _lookup(rosters_by_game, game_id):
        roster = normalize_roster(raw, game_id)
        if roster is not None:
            rosters.append(roster)
    return rosters


def game_scores(game_id: Any, scores_by_game: Optional[Mapping[Any, List[Any]]]) -> List[QuarterScore]:
    """Normalized quarter score rows for a game."""
    scores = []
    for raw in _lookup(scores_by_game, game_id):
        score = normalize_score(raw, game_id)
        if score is not None:
            scores.append(score)
    return scores


def quarter_groups(
    game_id: Any,
    rosters_by_game: Optional[Mapping[Any, List[Any]]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    team_id: Optional[int] = None,
) -> Dict[int, QuarterGroup]:
    """Group a game's roster and stat rows by quarter, quarters ascending."""
    groups: Dict[int, QuarterGroup] = {}

    for roster in game_rosters(game_id, rosters_by_game):
        groups.setdefault(roster["quarter"], {"roster": [], "stats": []})["roster"].append(roster)

    for stat in game_stats(game_id, stats_by_game, team_id):
        groups.setdefault(stat["quarter"], {"roster": [], "stats": []})["stats"].append(stat)

    return {quarter: groups[quarter] for quarter in sorted(groups)}


def team_total_for_quarter(
    game_id: Any,
    quarter: int,
    team_id: int,
    scores_by_game: Optional[Mapping[Any, List[Any]]],
) -> int:
    """Official score for a team in one quarter, 0 if not recorded."""
    for score in game_scores(game_id, scores_by_game):
        if score["quarter"] == quarter and score["team_id"] == team_id:
            return score["score"]
    return 0


def sum_goals(stats: Iterable[PositionStat]) -> Tuple[int, int]:
    """Total goals for and against across stat rows."""
    goals_for = 0
    goals_against = 0
    for stat in stats:
        goals_for += stat["goals_for"]
        goals_against += stat["goals_against"]
    return goals_for, goals_against


def player_names(players: Optional[Iterable[Mapping[str, Any]]]) -> Dict[int, str]:
    """Map player id to display name."""
    names: Dict[int, str] = {}
    for player in players or []:
        player_id = _coerce_id(player.get("id"))
        if player_id is not None:
            names[player_id] = player.get("display_name") or f"Player {player_id}"
    return names


def player_label(player_id: int, names: Mapping[int, str]) -> str:
    """Display name for a player, with a fallback for unknown ids."""
    return names.get(player_id, f"Player {player_id}")
