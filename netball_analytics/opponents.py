"""Opponent resolution for opponent-specific breakdowns."""

from typing import Iterable, List, Mapping, Optional

from .normalizer import eligible_games
from .types import Game, OpponentResolver


BYE_OPPONENT = "Bye"


def _is_bye(name: Optional[str]) -> bool:
    return bool(name) and name.strip().lower() == BYE_OPPONENT.lower()


def resolve_opponent(
    game: Game,
    current_team_id: int,
    team_names: Optional[Mapping[int, str]] = None,
    club_team_ids: Optional[Iterable[int]] = None,
) -> Optional[str]:
    """
    Resolve the opponent's name for a game from the current team's perspective.

    Returns None when the current team is on neither side or on both,
    when both sides belong to the same club (intra-club fixture), and
    when the opponent is a bye.
    """
    if game.get("is_bye"):
        return None

    home_id = game.get("home_team_id")
    away_id = game.get("away_team_id")
    is_home = home_id == current_team_id
    is_away = away_id == current_team_id
    if is_home == is_away:
        return None

    club_ids = set(club_team_ids or [])
    if club_ids and home_id in club_ids and away_id in club_ids:
        return None
    home_club = game.get("home_club_id")
    if home_club is not None and home_club == game.get("away_club_id"):
        return None

    if is_home:
        opponent_id = away_id
        name = game.get("away_team_name")
    else:
        opponent_id = home_id
        name = game.get("home_team_name")

    if not name and team_names:
        name = team_names.get(opponent_id)
    if not name:
        name = f"Team {opponent_id}" if opponent_id is not None else None

    if not name or _is_bye(name):
        return None
    return name


def make_opponent_resolver(
    team_names: Optional[Mapping[int, str]] = None,
    club_team_ids: Optional[Iterable[int]] = None,
) -> OpponentResolver:
    """Build the default resolver bound to a team-name lookup and the club's team ids."""
    names = dict(team_names or {})
    club_ids = frozenset(club_team_ids or ())

    def resolver(game: Game, current_team_id: int) -> Optional[str]:
        return resolve_opponent(game, current_team_id, names, club_ids)

    return resolver


def list_opponents(
    games: Optional[Iterable[Game]],
    current_team_id: int,
    opponent_resolver: Optional[OpponentResolver] = None,
) -> List[str]:
    """Sorted, unique opponent names across eligible games."""
    resolver = opponent_resolver or make_opponent_resolver()
    opponents = set()
    for game in eligible_games(games):
        name = resolver(game, current_team_id)
        if name:
            opponents.add(name)
    return sorted(opponents)
