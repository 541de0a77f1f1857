"""Type definitions for netball performance analytics."""

from typing import Callable, Dict, List, Optional
from typing_extensions import TypedDict


class Game(TypedDict, total=False):
    """Represents a single fixture between two teams."""
    id: int
    home_team_id: int
    away_team_id: int
    is_completed: bool
    allows_statistics: bool  # False for forfeits, byes and similar
    date: str
    home_team_name: Optional[str]
    away_team_name: Optional[str]
    home_club_id: Optional[int]
    away_club_id: Optional[int]
    is_bye: bool


class QuarterScore(TypedDict):
    """Official team score for one quarter of a game."""
    game_id: int
    team_id: int
    quarter: int
    score: int


class PositionStat(TypedDict):
    """Goals recorded against one position for one quarter."""
    game_id: int
    team_id: Optional[int]
    quarter: int
    position: str
    goals_for: int
    goals_against: int


class RosterAssignment(TypedDict):
    """A player assigned to a position for one quarter."""
    game_id: int
    quarter: int
    position: str
    player_id: int


class Player(TypedDict):
    """Player reference data used for labels."""
    id: int
    display_name: str


class QuarterGroup(TypedDict):
    """Roster and stat rows for one quarter of one game."""
    roster: List[RosterAssignment]
    stats: List[PositionStat]


# Maps are keyed by game id
ScoresByGame = Dict[int, List[QuarterScore]]
StatsByGame = Dict[int, List[PositionStat]]
RostersByGame = Dict[int, List[RosterAssignment]]

# (game, current_team_id) -> opponent name, or None to exclude the game
OpponentResolver = Callable[[Game, int], Optional[str]]


class PositionAverages(TypedDict):
    """Average goals per game for the four shooting/defending circle positions."""
    gs_avg_goals_for: float
    ga_avg_goals_for: float
    gd_avg_goals_against: float
    gk_avg_goals_against: float
    attacking_positions_total: float
    defending_positions_total: float
    games_with_position_stats: int


class PositionOpponentStats(TypedDict):
    """One position's cumulative output against one opponent."""
    position: str
    opponent: str
    games_played: int
    goals_for: int
    goals_against: int
    goal_differential: int
    efficiency: float  # goals_for / (goals_for + goals_against)


class PlayerPositionOpponentStats(TypedDict):
    """One player's output in one position against one opponent, by quarter."""
    player_id: int
    player_name: str
    position: str
    opponent: str
    quarters_played: int
    goals_for: int
    goals_against: int
    goal_differential: int
    efficiency: float


class FormationResult(TypedDict):
    """Ranked starting seven."""
    formation: Dict[str, str]  # position -> player name
    formation_key: str  # GK:name,GD:name,...
    player_ids: Dict[str, int]
    games_played: int
    quarters_played: int
    total_goals_for: int
    total_goals_against: int
    goal_differential: int
    average_goals_for: float
    average_goals_against: float
    win_rate: float
    effectiveness: float
    quarters: List[int]


class OpponentFormationResult(FormationResult):
    """Formation results restricted to games against one opponent."""
    opponent: str
    opponent_games: int


class FormationRanking(TypedDict):
    """Formation rankings overall and bucketed per opponent."""
    general: List[FormationResult]
    per_opponent: Dict[str, List[OpponentFormationResult]]


class CombinationResult(TypedDict):
    """Ranked group of players who shared the court."""
    combination: List[int]
    combination_key: str  # ascending ids joined with "-"
    player_names: List[str]
    games_played: int
    total_goals_for: int
    total_goals_against: int
    goal_differential: int
    average_goals_for: float
    average_goals_against: float
    win_rate: float
    effectiveness: float
    positions: List[str]


class OpponentCombinationResult(CombinationResult):
    """Combination results restricted to games against one opponent."""
    opponent: str
    opponent_games: int


class CombinationRanking(TypedDict):
    """Combination rankings overall and against specific opponents."""
    general: List[CombinationResult]
    per_opponent: List[OpponentCombinationResult]


class QuarterReconciliation(TypedDict):
    """Final goal split for one quarter after reconciling all sources."""
    gs_goals_for: float
    ga_goals_for: float
    gk_goals_against: float
    gd_goals_against: float
    data_quality: str  # complete | partial | estimated | missing
    has_valid_data: bool


class QuarterSummary(TypedDict):
    """Season average for one quarter number."""
    quarter: int
    gs_goals_for: float
    ga_goals_for: float
    gk_goals_against: float
    gd_goals_against: float
    data_quality: str
    has_valid_data: bool
    games_with_quarter_data: int


class PositionShares(TypedDict):
    """Share of the team's goals scored by GS/GA and conceded by GK/GD (each pair sums to 1)."""
    gs: float
    ga: float
    gk: float
    gd: float


class QuarterBreakdown(TypedDict):
    """Average official quarter score split across the circle positions."""
    quarter: int
    gs: float
    ga: float
    gk: float
    gd: float
    goals_for: float
    goals_against: float
    games_with_stats: int
    used_fallback: bool  # no position stats for this quarter, season shares used


class QuarterBreakdownReport(TypedDict):
    breakdowns: List[QuarterBreakdown]
    games_with_stats: int
    per_quarter: List[int]
