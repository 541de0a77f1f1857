"""TypedDict definitions for dashboard API responses."""

from typing import Any, Dict, List, Optional
from typing_extensions import TypedDict

from ..types import Game, Player, PositionStat, QuarterScore, RosterAssignment


class RawGame(TypedDict, total=False):
    """Game as returned by the dashboard API (camelCase)."""
    id: int
    date: str
    homeTeamId: int
    awayTeamId: int
    homeTeamName: Optional[str]
    awayTeamName: Optional[str]
    homeClubId: Optional[int]
    awayClubId: Optional[int]
    statusIsCompleted: bool
    statusAllowsStatistics: bool
    isBye: bool


class RawGameStat(TypedDict, total=False):
    """Position stat row from the dashboard API."""
    gameId: int
    teamId: Optional[int]
    quarter: int
    position: str
    goalsFor: Any
    goalsAgainst: Any


class RawRoster(TypedDict, total=False):
    """Roster row from the dashboard API."""
    gameId: int
    quarter: int
    position: str
    playerId: int


class RawGameScore(TypedDict, total=False):
    """Quarter score row from the dashboard API."""
    gameId: int
    teamId: int
    quarter: int
    score: Any


class RawPlayer(TypedDict, total=False):
    """Player from the dashboard API."""
    id: int
    displayName: str
    firstName: str
    lastName: str


class BatchGameData(TypedDict):
    """Engine-ready games plus per-game maps."""
    games: List[Game]
    scores: Dict[int, List[QuarterScore]]
    stats: Dict[int, List[PositionStat]]
    rosters: Dict[int, List[RosterAssignment]]


PlayerList = List[Player]
