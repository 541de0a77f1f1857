"""Player combination effectiveness rankings."""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .normalizer import (
    POSITIONS,
    eligible_games,
    game_rosters,
    game_stats,
    player_label,
    player_names,
    sum_goals,
)
from .opponents import make_opponent_resolver
from .types import (
    CombinationRanking,
    CombinationResult,
    Game,
    OpponentCombinationResult,
    OpponentResolver,
    Player,
)


# Scales win rate (0-1) against a per-game goal differential.
# Tuned separately from FORMATION_WIN_WEIGHT; do not unify.
COMBINATION_WIN_WEIGHT = 10

MIN_COMBINATION_SIZE = 2
MAX_COMBINATION_SIZE = 5
MIN_GAMES_TOGETHER = 2

GENERAL_COMBINATION_LIMIT = 20
OPPONENT_COMBINATION_LIMIT = 30


def player_combinations(player_ids: List[int], size: int) -> List[List[int]]:
    """
    Every `size`-player subset of `player_ids`, in lexicographic index order.

    Backtracks from each index so no valid subset is skipped:
    C(n, size) subsets for n ids.
    """
    if size <= 0 or size > len(player_ids):
        return []

    combinations: List[List[int]] = []
    current: List[int] = []

    def backtrack(start: int) -> None:
        if len(current) == size:
            combinations.append(list(current))
            return
        for i in range(start, len(player_ids)):
            current.append(player_ids[i])
            backtrack(i + 1)
            current.pop()

    backtrack(0)
    return combinations


def combination_key(player_ids: Iterable[int]) -> str:
    """Canonical key: ids ascending, joined with '-'."""
    return "-".join(str(player_id) for player_id in sorted(player_ids))


def _effectiveness(goals_for: int, goals_against: int, wins: int, games: int) -> float:
    if games == 0:
        return 0.0
    return (goals_for - goals_against) / games + (wins / games) * COMBINATION_WIN_WEIGHT


def _ordered_positions(positions: Iterable[str]) -> List[str]:
    held = set(positions)
    return [position for position in POSITIONS if position in held]


def rank_combinations(
    games: Optional[List[Game]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    rosters_by_game: Optional[Mapping[Any, List[Any]]],
    combination_size: int,
    current_team_id: int,
    opponent_resolver: Optional[OpponentResolver] = None,
    position_filter: Optional[Iterable[str]] = None,
    players: Optional[List[Player]] = None,
) -> CombinationRanking:
    """
    Rank groups of `combination_size` players who were on court in the same games.

    Goals are the whole game's totals, i.e. how the team fared while the
    group played together, not what the group scored. With
    `position_filter` (position codes, or a single code), only players
    who held one of those positions in a game are considered for that game.
    """
    if not MIN_COMBINATION_SIZE <= combination_size <= MAX_COMBINATION_SIZE:
        raise ValueError(
            f"combination_size must be between {MIN_COMBINATION_SIZE} and "
            f"{MAX_COMBINATION_SIZE}, got {combination_size}"
        )

    resolver = opponent_resolver or make_opponent_resolver()
    names = player_names(players)
    if isinstance(position_filter, str):
        position_filter = [position_filter]
    wanted_positions = set(position_filter or [])
    combination_map: Dict[str, Dict[str, Any]] = {}

    for game in eligible_games(games):
        game_id = game.get("id")
        rosters = game_rosters(game_id, rosters_by_game)
        if not rosters:
            continue

        goals_for, goals_against = sum_goals(game_stats(game_id, stats_by_game, current_team_id))
        won = goals_for > goals_against

        positions_by_player: Dict[int, List[str]] = {}
        for roster in rosters:
            positions_by_player.setdefault(roster["player_id"], []).append(roster["position"])

        qualifying = sorted(
            player_id for player_id, held in positions_by_player.items()
            if not wanted_positions or wanted_positions.intersection(held)
        )
        if len(qualifying) < combination_size:
            continue

        opponent = resolver(game, current_team_id)

        for combination in player_combinations(qualifying, combination_size):
            key = combination_key(combination)
            data = combination_map.get(key)
            if data is None:
                data = {
                    "player_ids": sorted(combination),
                    "games": 0,
                    "goals_for": 0,
                    "goals_against": 0,
                    "wins": 0,
                    "positions": set(),
                    "opponents": {},
                }
                combination_map[key] = data

            data["games"] += 1
            data["goals_for"] += goals_for
            data["goals_against"] += goals_against
            if won:
                data["wins"] += 1
            for player_id in combination:
                data["positions"].update(positions_by_player[player_id])

            if opponent:
                data["opponents"].setdefault(opponent, []).append({
                    "game_id": game_id,
                    "goals_for": goals_for,
                    "goals_against": goals_against,
                    "won": won,
                })

    general: List[CombinationResult] = []
    per_opponent: List[OpponentCombinationResult] = []

    for key, data in combination_map.items():
        games_played = data["games"]
        total_for = data["goals_for"]
        total_against = data["goals_against"]

        base: CombinationResult = {
            "combination": list(data["player_ids"]),
            "combination_key": key,
            "player_names": [player_label(player_id, names) for player_id in data["player_ids"]],
            "games_played": games_played,
            "total_goals_for": total_for,
            "total_goals_against": total_against,
            "goal_differential": total_for - total_against,
            "average_goals_for": total_for / games_played,
            "average_goals_against": total_against / games_played,
            "win_rate": (data["wins"] / games_played) * 100,
            "effectiveness": _effectiveness(total_for, total_against, data["wins"], games_played),
            "positions": _ordered_positions(data["positions"]),
        }

        if games_played >= MIN_GAMES_TOGETHER:
            general.append(base)

        for opponent, records in data["opponents"].items():
            opponent_games = len(records)
            opponent_for = sum(r["goals_for"] for r in records)
            opponent_against = sum(r["goals_against"] for r in records)
            opponent_wins = sum(1 for r in records if r["won"])

            per_opponent.append({
                **base,
                "opponent": opponent,
                "opponent_games": opponent_games,
                "total_goals_for": opponent_for,
                "total_goals_against": opponent_against,
                "goal_differential": opponent_for - opponent_against,
                "average_goals_for": opponent_for / opponent_games,
                "average_goals_against": opponent_against / opponent_games,
                "win_rate": (opponent_wins / opponent_games) * 100,
                "effectiveness": _effectiveness(opponent_for, opponent_against, opponent_wins, opponent_games),
            })

    general.sort(key=lambda r: r["effectiveness"], reverse=True)
    per_opponent.sort(key=lambda r: r["effectiveness"], reverse=True)

    return {
        "general": general[:GENERAL_COMBINATION_LIMIT],
        "per_opponent": per_opponent[:OPPONENT_COMBINATION_LIMIT],
    }


def filter_by_opponent(
    results: List[OpponentCombinationResult],
    opponent: Optional[str],
) -> List[OpponentCombinationResult]:
    """Rows for one opponent; None or 'all' keeps everything."""
    if not opponent or opponent == "all":
        return list(results)
    return [r for r in results if r["opponent"] == opponent]
