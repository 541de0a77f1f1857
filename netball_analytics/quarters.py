"""Quarter-level reconciliation of team scores and position stats."""

import math
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .normalizer import (
    ATTACKING_POSITIONS,
    DEFENDING_POSITIONS,
    QUARTERS,
    eligible_games,
    game_scores,
    game_stats,
)
from .types import (
    Game,
    PositionShares,
    PositionStat,
    QuarterBreakdown,
    QuarterBreakdownReport,
    QuarterReconciliation,
    QuarterSummary,
)


TRACKED_POSITIONS = ATTACKING_POSITIONS + DEFENDING_POSITIONS

COMPLETE = "complete"
PARTIAL = "partial"
ESTIMATED = "estimated"
MISSING = "missing"

# Weakest first
QUALITY_ORDER = (MISSING, ESTIMATED, PARTIAL, COMPLETE)


def _official_quarter_score(
    game_id: Any,
    quarter: int,
    team_id: int,
    scores_by_game: Optional[Mapping[Any, List[Any]]],
) -> Optional[Tuple[int, int]]:
    """(for, against) official score for a quarter, None when neither side has one.

    A side without a recorded score counts as 0.
    """
    quarter_scores = [s for s in game_scores(game_id, scores_by_game) if s["quarter"] == quarter]
    team_scores = [s for s in quarter_scores if s["team_id"] == team_id]
    opponent_scores = [s for s in quarter_scores if s["team_id"] != team_id]
    if not team_scores and not opponent_scores:
        return None
    goals_for = team_scores[0]["score"] if team_scores else 0
    goals_against = opponent_scores[0]["score"] if opponent_scores else 0
    return goals_for, goals_against


def reconcile_quarter(
    game_id: Any,
    quarter: int,
    team_id: int,
    scores_by_game: Optional[Mapping[Any, List[Any]]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
) -> QuarterReconciliation:
    """
    Final GS/GA/GK/GD goals for one quarter from the best available source.

    1. Position stats for any circle position: used as recorded
       ("complete" when all four are present, else "partial").
    2. Team quarter scores: team score split 50/50 over GS/GA, opponent
       score split 50/50 over GK/GD ("estimated").
    3. Nothing recorded: zeros ("missing").
    """
    position_stats = [
        s for s in game_stats(game_id, stats_by_game, team_id)
        if s["quarter"] == quarter and s["position"] in TRACKED_POSITIONS
    ]
    if position_stats:
        totals = _circle_totals(position_stats)
        present = {stat["position"] for stat in position_stats}

        return {
            "gs_goals_for": float(totals["GS"]),
            "ga_goals_for": float(totals["GA"]),
            "gk_goals_against": float(totals["GK"]),
            "gd_goals_against": float(totals["GD"]),
            "data_quality": COMPLETE if len(present) == len(TRACKED_POSITIONS) else PARTIAL,
            "has_valid_data": True,
        }

    official = _official_quarter_score(game_id, quarter, team_id, scores_by_game)
    if official is not None:
        goals_for, goals_against = official
        return {
            "gs_goals_for": goals_for / 2,
            "ga_goals_for": goals_for / 2,
            "gk_goals_against": goals_against / 2,
            "gd_goals_against": goals_against / 2,
            "data_quality": ESTIMATED,
            "has_valid_data": True,
        }

    return {
        "gs_goals_for": 0.0,
        "ga_goals_for": 0.0,
        "gk_goals_against": 0.0,
        "gd_goals_against": 0.0,
        "data_quality": MISSING,
        "has_valid_data": False,
    }


def summarize_quarters(
    games: Optional[List[Game]],
    team_id: int,
    scores_by_game: Optional[Mapping[Any, List[Any]]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
) -> List[QuarterSummary]:
    """Season averages per quarter number, built from `reconcile_quarter` for every game."""
    team_games = [
        g for g in eligible_games(games)
        if team_id in (g.get("home_team_id"), g.get("away_team_id"))
    ]

    summaries: List[QuarterSummary] = []
    for quarter in QUARTERS:
        gs = ga = gk = gd = 0.0
        games_with_data = 0
        weakest: Optional[str] = None

        for game in team_games:
            result = reconcile_quarter(game.get("id"), quarter, team_id, scores_by_game, stats_by_game)
            if not result["has_valid_data"]:
                continue
            games_with_data += 1
            gs += result["gs_goals_for"]
            ga += result["ga_goals_for"]
            gk += result["gk_goals_against"]
            gd += result["gd_goals_against"]
            if weakest is None or QUALITY_ORDER.index(result["data_quality"]) < QUALITY_ORDER.index(weakest):
                weakest = result["data_quality"]

        divisor = games_with_data or 1
        summaries.append({
            "quarter": quarter,
            "gs_goals_for": round(gs / divisor, 1),
            "ga_goals_for": round(ga / divisor, 1),
            "gk_goals_against": round(gk / divisor, 1),
            "gd_goals_against": round(gd / divisor, 1),
            "data_quality": weakest or MISSING,
            "has_valid_data": games_with_data > 0,
            "games_with_quarter_data": games_with_data,
        })

    return summaries


EVEN_SHARES: PositionShares = {"gs": 0.5, "ga": 0.5, "gk": 0.5, "gd": 0.5}


def _round1(value: float) -> float:
    """Round half up to one decimal place."""
    return math.floor(value * 10 + 0.5) / 10


def _adjust_for_rounding(first: float, second: float, target: float) -> Tuple[float, float]:
    """Nudge the larger of a rounded pair so the pair sums to target."""
    diff = _round1(target - _round1(first + second))
    if diff != 0 and abs(diff) < 0.11:
        if first >= second:
            first = _round1(first + diff)
        else:
            second = _round1(second + diff)
    return first, second


def _shares(totals: Dict[str, int], fallback: PositionShares) -> PositionShares:
    attack = totals["GS"] + totals["GA"]
    defence = totals["GK"] + totals["GD"]
    return {
        "gs": totals["GS"] / attack if attack > 0 else fallback["gs"],
        "ga": totals["GA"] / attack if attack > 0 else fallback["ga"],
        "gk": totals["GK"] / defence if defence > 0 else fallback["gk"],
        "gd": totals["GD"] / defence if defence > 0 else fallback["gd"],
    }


def _circle_totals(stats: List[PositionStat]) -> Dict[str, int]:
    totals = {position: 0 for position in TRACKED_POSITIONS}
    for stat in stats:
        if stat["position"] in ATTACKING_POSITIONS:
            totals[stat["position"]] += stat["goals_for"]
        elif stat["position"] in DEFENDING_POSITIONS:
            totals[stat["position"]] += stat["goals_against"]
    return totals


def quarter_position_breakdowns(
    games: Optional[List[Game]],
    team_id: int,
    scores_by_game: Optional[Mapping[Any, List[Any]]],
    stats_by_game: Optional[Mapping[Any, List[Any]]],
    fallback_shares: Optional[PositionShares] = None,
) -> QuarterBreakdownReport:
    """
    Split each quarter's average official score across GS/GA and GK/GD.

    The split uses the shares observed in that quarter's position stats
    across the season. Quarters without stats use the season-wide shares
    (or `fallback_shares`, else 50/50) and are flagged `used_fallback`.
    Values are rounded to one decimal with GS+GA and GK+GD corrected to
    match the official averages.
    """
    team_games = [
        g for g in eligible_games(games)
        if team_id in (g.get("home_team_id"), g.get("away_team_id"))
    ]

    # quarter -> per-game circle totals, for games with circle stats in that quarter
    stats_by_quarter: Dict[int, List[Dict[str, int]]] = {quarter: [] for quarter in QUARTERS}
    for game in team_games:
        stats = [
            s for s in game_stats(game.get("id"), stats_by_game, team_id)
            if s["position"] in TRACKED_POSITIONS
        ]
        for quarter in QUARTERS:
            quarter_stats = [s for s in stats if s["quarter"] == quarter]
            if quarter_stats:
                stats_by_quarter[quarter].append(_circle_totals(quarter_stats))

    season_shares = fallback_shares
    if season_shares is None:
        season_totals = {position: 0 for position in TRACKED_POSITIONS}
        for quarter_totals in stats_by_quarter.values():
            for totals in quarter_totals:
                for position, value in totals.items():
                    season_totals[position] += value
        season_shares = _shares(season_totals, EVEN_SHARES)

    breakdowns: List[QuarterBreakdown] = []
    per_quarter: List[int] = []
    for quarter in QUARTERS:
        with_stats = stats_by_quarter[quarter]
        per_quarter.append(len(with_stats))

        if with_stats:
            quarter_totals = {position: sum(t[position] for t in with_stats) for position in TRACKED_POSITIONS}
            shares = _shares(quarter_totals, season_shares)
        else:
            shares = season_shares

        official = [
            score for score in (
                _official_quarter_score(game.get("id"), quarter, team_id, scores_by_game) for game in team_games
            )
            if score is not None
        ]
        goals_for = _round1(sum(s[0] for s in official) / len(official)) if official else 0.0
        goals_against = _round1(sum(s[1] for s in official) / len(official)) if official else 0.0

        gs, ga = _adjust_for_rounding(
            _round1(goals_for * shares["gs"]), _round1(goals_for * shares["ga"]), goals_for
        )
        gk, gd = _adjust_for_rounding(
            _round1(goals_against * shares["gk"]), _round1(goals_against * shares["gd"]), goals_against
        )

        breakdowns.append({
            "quarter": quarter,
            "gs": gs,
            "ga": ga,
            "gk": gk,
            "gd": gd,
            "goals_for": goals_for,
            "goals_against": goals_against,
            "games_with_stats": len(with_stats),
            "used_fallback": not with_stats,
        })

    return {
        "breakdowns": breakdowns,
        "games_with_stats": sum(per_quarter),
        "per_quarter": per_quarter,
    }
