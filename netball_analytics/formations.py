"""Starting-seven (formation) effectiveness rankings."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from .normalizer import (
    POSITIONS,
    eligible_games,
    game_stats,
    player_label,
    player_names,
    quarter_groups,
    sum_goals,
)
from .opponents import make_opponent_resolver
from .types import (
    FormationRanking,
    FormationResult,
    Game,
    OpponentFormationResult,
    OpponentResolver,
    Player,
    RosterAssignment,
)


# Scales win rate (0-1) to roughly the size of a per-quarter goal differential.
# Display heuristic only; tuned separately from COMBINATION_WIN_WEIGHT.
FORMATION_WIN_WEIGHT = 5

GENERAL_FORMATION_LIMIT = 15
OPPONENT_FORMATION_LIMIT = 20

# Minimum quarters a formation needs before it is ranked
MIN_QUARTERS_ALL = 2
MIN_QUARTERS_SINGLE = 1

FormationIdentity = Tuple[Tuple[str, int], ...]


def build_formation(roster: List[RosterAssignment]) -> Optional[Dict[str, int]]:
    """
    Position -> player id for one quarter, in canonical court order.

    Returns None unless all 7 positions are filled. If a position is
    listed twice the first assignment wins.
    """
    lineup: Dict[str, int] = {}
    for assignment in roster:
        lineup.setdefault(assignment["position"], assignment["player_id"])

    if any(position not in lineup for position in POSITIONS):
        return None
    return {position: lineup[position] for position in POSITIONS}


def _new_entry(formation: Dict[str, int]) -> Dict[str, Any]:
    return {
        "formation": formation,
        "game_ids": [],
        "quarters": [],
        "goals_for": 0,
        "goals_against": 0,
        "wins": 0,
        "opponents": {},
    }


def _effectiveness(goals_for: int, goals_against: int, quarters: int, wins: int, games: int) -> float:
    if quarters == 0:
        return 0.0
    win_component = (wins / games) * FORMATION_WIN_WEIGHT if games > 0 else 0.0
    return (goals_for - goals_against) / quarters + win_component


def _general_result(entry: Dict[str, Any], names: Mapping[int, str]) -> FormationResult:
    formation = entry["formation"]
    labelled = {position: player_label(player_id, names) for position, player_id in formation.items()}
    quarters_played = len(entry["quarters"])
    games_played = len(entry["game_ids"])
    goals_for = entry["goals_for"]
    goals_against = entry["goals_against"]

    return {
        "formation": labelled,
        "formation_key": ",".join(f"{position}:{labelled[position]}" for position in POSITIONS),
        "player_ids": dict(formation),
        "games_played": games_played,
        "quarters_played": quarters_played,
        "total_goals_for": goals_for,
        "total_goals_against": goals_against,
        "goal_differential": goals_for - goals_against,
        "average_goals_for": goals_for / quarters_played,
        "average_goals_against": goals_against / quarters_played,
        "win_rate": (entry["wins"] / games_played) * 100 if games_played else 0.0,
        "effectiveness": _effectiveness(goals_for, goals_against, quarters_played, entry["wins"], games_played),
        "quarters": list(entry["quarters"]),
    }


def _opponent_result(
    base: FormationResult,
    opponent: str,
    records: List[Dict[str, Any]],
) -> OpponentFormationResult:
    goals_for = sum(r["goals_for"] for r in records)
    goals_against = sum(r["goals_against"] for r in records)
    wins = len({r["game_id"] for r in records if r["won"]})
    opponent_games = len({r["game_id"] for r in records})
    opponent_quarters = len(records)

    return {
        **base,
        "opponent": opponent,
        "opponent_games": opponent_games,
        "total_goals_for": goals_for,
        "total_goals_against": goals_against,
        "goal_differential": goals_for - goals_against,
        "average_goals_for": goals_for / opponent_quarters,
        "average_goals_against": goals_against / opponent_quarters,
        "win_rate": (wins / opponent_games) * 100 if opponent_games else 0.0,
        "effectiveness": _effectiveness(goals_for, goals_against, opponent_quarters, wins, opponent_games),
    }


def rank_formations(
    games: Optional[List[Game]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    rosters_by_game: Optional[Mapping[Any, List[Any]]],
    current_team_id: int,
    opponent_resolver: Optional[OpponentResolver] = None,
    players: Optional[List[Player]] = None,
    quarter: Optional[int] = None,
) -> FormationRanking:
    """
    Rank complete starting sevens by effectiveness, overall and per opponent.

    Quarter goals come from that quarter's stat rows; wins are counted once
    per game from the game's total goals. Pass `quarter` to analyze a single
    quarter number, which also lowers the minimum sample to one quarter.
    """
    resolver = opponent_resolver or make_opponent_resolver()
    names = player_names(players)
    lineups: Dict[FormationIdentity, Dict[str, Any]] = {}

    for game in eligible_games(games):
        game_id = game.get("id")
        groups = quarter_groups(game_id, rosters_by_game, stats_by_game, current_team_id)
        if not groups:
            continue

        game_goals_for, game_goals_against = sum_goals(game_stats(game_id, stats_by_game, current_team_id))
        game_won = game_goals_for > game_goals_against
        opponent = resolver(game, current_team_id)

        quarters_to_analyze = list(groups) if quarter is None else [quarter]
        for q in quarters_to_analyze:
            group = groups.get(q)
            if group is None:
                continue

            formation = build_formation(group["roster"])
            if formation is None:
                continue

            identity: FormationIdentity = tuple(formation.items())
            entry = lineups.get(identity)
            if entry is None:
                entry = _new_entry(formation)
                lineups[identity] = entry

            quarter_goals_for, quarter_goals_against = sum_goals(group["stats"])
            entry["goals_for"] += quarter_goals_for
            entry["goals_against"] += quarter_goals_against
            entry["quarters"].append(q)

            if game_id not in entry["game_ids"]:
                entry["game_ids"].append(game_id)
                if game_won:
                    entry["wins"] += 1

            if opponent:
                entry["opponents"].setdefault(opponent, []).append({
                    "game_id": game_id,
                    "quarter": q,
                    "goals_for": quarter_goals_for,
                    "goals_against": quarter_goals_against,
                    "won": game_won,
                })

    min_quarters = MIN_QUARTERS_ALL if quarter is None else MIN_QUARTERS_SINGLE
    general: List[FormationResult] = []
    opponent_results: List[OpponentFormationResult] = []

    for entry in lineups.values():
        if len(entry["quarters"]) < min_quarters:
            continue
        base = _general_result(entry, names)
        general.append(base)
        for opponent, records in entry["opponents"].items():
            opponent_results.append(_opponent_result(base, opponent, records))

    general.sort(key=lambda r: r["effectiveness"], reverse=True)
    opponent_results.sort(key=lambda r: r["effectiveness"], reverse=True)

    buckets: Dict[str, List[OpponentFormationResult]] = {}
    for result in opponent_results[:OPPONENT_FORMATION_LIMIT]:
        buckets.setdefault(result["opponent"], []).append(result)

    return {
        "general": general[:GENERAL_FORMATION_LIMIT],
        "per_opponent": {name: buckets[name] for name in sorted(buckets)},
    }
