"""Position effectiveness calculations."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from .normalizer import (
    ATTACKING_POSITIONS,
    DEFENDING_POSITIONS,
    POSITIONS,
    eligible_games,
    game_rosters,
    game_stats,
    player_label,
    player_names,
)
from .opponents import make_opponent_resolver
from .types import (
    Game,
    OpponentResolver,
    Player,
    PlayerPositionOpponentStats,
    PositionAverages,
    PositionOpponentStats,
    PositionStat,
)


def compute_position_averages(
    games: Optional[List[Game]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    team_id: Optional[int],
) -> PositionAverages:
    """
    Average goals per game for GS/GA (scored) and GD/GK (conceded).

    Only games where one of the four circle positions recorded a
    non-zero value count towards the denominator. Games without
    position stats are skipped rather than counted as zero.
    """
    totals = {"GS": 0, "GA": 0, "GD": 0, "GK": 0}
    games_with_position_stats = 0

    for game in eligible_games(games):
        stats = game_stats(game.get("id"), stats_by_game, team_id)
        if not stats or team_id is None:
            continue

        game_totals = {"GS": 0, "GA": 0, "GD": 0, "GK": 0}
        for stat in stats:
            position = stat["position"]
            if position in ATTACKING_POSITIONS:
                game_totals[position] += stat["goals_for"]
            elif position in DEFENDING_POSITIONS:
                game_totals[position] += stat["goals_against"]

        if not any(game_totals.values()):
            continue

        games_with_position_stats += 1
        for position, value in game_totals.items():
            totals[position] += value

    def average(position: str) -> float:
        if games_with_position_stats == 0:
            return 0.0
        return totals[position] / games_with_position_stats

    gs_avg = average("GS")
    ga_avg = average("GA")
    gd_avg = average("GD")
    gk_avg = average("GK")

    return {
        "gs_avg_goals_for": gs_avg,
        "ga_avg_goals_for": ga_avg,
        "gd_avg_goals_against": gd_avg,
        "gk_avg_goals_against": gk_avg,
        "attacking_positions_total": gs_avg + ga_avg,
        "defending_positions_total": gd_avg + gk_avg,
        "games_with_position_stats": games_with_position_stats,
    }


def compute_position_opponent_stats(
    games: Optional[List[Game]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    team_id: int,
    opponent_resolver: Optional[OpponentResolver] = None,
) -> List[PositionOpponentStats]:
    """Cumulative goals per (position, opponent) across eligible games."""
    resolver = opponent_resolver or make_opponent_resolver()
    stats_map: Dict[Tuple[str, str], PositionOpponentStats] = {}

    for game in eligible_games(games):
        opponent = resolver(game, team_id)
        if not opponent:
            continue

        position_totals = {position: [0, 0] for position in POSITIONS}
        for stat in game_stats(game.get("id"), stats_by_game, team_id):
            position_totals[stat["position"]][0] += stat["goals_for"]
            position_totals[stat["position"]][1] += stat["goals_against"]

        for position in POSITIONS:
            goals_for, goals_against = position_totals[position]
            key = (position, opponent)
            entry = stats_map.get(key)
            if entry is None:
                entry = {
                    "position": position,
                    "opponent": opponent,
                    "games_played": 0,
                    "goals_for": 0,
                    "goals_against": 0,
                    "goal_differential": 0,
                    "efficiency": 0.0,
                }
                stats_map[key] = entry

            entry["games_played"] += 1
            entry["goals_for"] += goals_for
            entry["goals_against"] += goals_against
            entry["goal_differential"] = entry["goals_for"] - entry["goals_against"]
            total = entry["goals_for"] + entry["goals_against"]
            entry["efficiency"] = entry["goals_for"] / total if total > 0 else 0.0

    return list(stats_map.values())


def compute_player_position_opponent_stats(
    games: Optional[List[Game]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    rosters_by_game: Optional[Mapping[Any, List[Any]]],
    team_id: int,
    opponent_resolver: Optional[OpponentResolver] = None,
    players: Optional[List[Player]] = None,
) -> List[PlayerPositionOpponentStats]:
    """
    Cumulative goals per (player, position, opponent) across eligible games.

    Each roster row is one quarter played; its goals are the team's stat
    row for that position and quarter (zero when none was recorded).
    """
    resolver = opponent_resolver or make_opponent_resolver()
    names = player_names(players)
    stats_map: Dict[Tuple[int, str, str], PlayerPositionOpponentStats] = {}

    for game in eligible_games(games):
        opponent = resolver(game, team_id)
        if not opponent:
            continue

        game_id = game.get("id")
        quarter_stats: Dict[Tuple[str, int], PositionStat] = {}
        for stat in game_stats(game_id, stats_by_game, team_id):
            quarter_stats.setdefault((stat["position"], stat["quarter"]), stat)

        for roster in game_rosters(game_id, rosters_by_game):
            stat = quarter_stats.get((roster["position"], roster["quarter"]))
            goals_for = stat["goals_for"] if stat else 0
            goals_against = stat["goals_against"] if stat else 0

            key = (roster["player_id"], roster["position"], opponent)
            entry = stats_map.get(key)
            if entry is None:
                entry = {
                    "player_id": roster["player_id"],
                    "player_name": player_label(roster["player_id"], names),
                    "position": roster["position"],
                    "opponent": opponent,
                    "quarters_played": 0,
                    "goals_for": 0,
                    "goals_against": 0,
                    "goal_differential": 0,
                    "efficiency": 0.0,
                }
                stats_map[key] = entry

            entry["quarters_played"] += 1
            entry["goals_for"] += goals_for
            entry["goals_against"] += goals_against
            entry["goal_differential"] = entry["goals_for"] - entry["goals_against"]
            total = entry["goals_for"] + entry["goals_against"]
            entry["efficiency"] = entry["goals_for"] / total if total > 0 else 0.0

    return list(stats_map.values())


def best_position_matchups(
    stats: List[PositionOpponentStats],
    limit: int = 10,
    min_games: int = 2,
) -> List[PositionOpponentStats]:
    """Positions with the best goal differential against an opponent."""
    qualified = [s for s in stats if s["games_played"] >= min_games]
    return sorted(qualified, key=lambda s: s["goal_differential"], reverse=True)[:limit]


def worst_position_matchups(
    stats: List[PositionOpponentStats],
    limit: int = 10,
    min_games: int = 2,
) -> List[PositionOpponentStats]:
    """Positions with the worst goal differential against an opponent."""
    qualified = [s for s in stats if s["games_played"] >= min_games]
    return sorted(qualified, key=lambda s: s["goal_differential"])[:limit]
