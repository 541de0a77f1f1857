"""Tests for netball_analytics/positions.py."""

import pytest

from netball_analytics.opponents import make_opponent_resolver
from netball_analytics.positions import (
    best_position_matchups,
    compute_player_position_opponent_stats,
    compute_position_averages,
    compute_position_opponent_stats,
    worst_position_matchups,
)


def _game(game_id, home=100, away=200, completed=True, allows_statistics=True):
    return {
        "id": game_id,
        "home_team_id": home,
        "away_team_id": away,
        "is_completed": completed,
        "allows_statistics": allows_statistics,
        "date": "2025-05-01",
    }


def _stat(position, goals_for=0, goals_against=0, quarter=1, team_id=100):
    return {
        "team_id": team_id,
        "quarter": quarter,
        "position": position,
        "goals_for": goals_for,
        "goals_against": goals_against,
    }


SINGLE_GAME_STATS = {
    1: [
        _stat("GS", goals_for=7),
        _stat("GA", goals_for=5),
        _stat("GK", goals_against=4),
        _stat("GD", goals_against=4),
    ],
}


class TestComputePositionAverages:
    """Tests for compute_position_averages function."""

    def test_single_game_scenario(self):
        """One game with full circle stats averages to the game's values."""
        result = compute_position_averages([_game(1)], SINGLE_GAME_STATS, 100)

        assert result["gs_avg_goals_for"] == 7
        assert result["ga_avg_goals_for"] == 5
        assert result["gd_avg_goals_against"] == 4
        assert result["gk_avg_goals_against"] == 4
        assert result["attacking_positions_total"] == 12
        assert result["defending_positions_total"] == 8
        assert result["games_with_position_stats"] == 1

    def test_averages_across_games(self):
        """Totals are divided by games with position stats."""
        stats = {
            1: [_stat("GS", goals_for=7), _stat("GK", goals_against=2)],
            2: [_stat("GS", goals_for=3), _stat("GK", goals_against=6)],
        }
        result = compute_position_averages([_game(1), _game(2)], stats, 100)

        assert result["gs_avg_goals_for"] == 5
        assert result["gk_avg_goals_against"] == 4
        assert result["games_with_position_stats"] == 2

    def test_sums_quarters_within_game(self):
        """Every quarter's rows count towards the game total."""
        stats = {1: [_stat("GS", goals_for=3, quarter=q) for q in (1, 2, 3, 4)]}
        result = compute_position_averages([_game(1)], stats, 100)
        assert result["gs_avg_goals_for"] == 12

    def test_games_without_stats_not_in_denominator(self):
        """Absent, empty and all-zero stats do not count as games."""
        stats = {
            1: SINGLE_GAME_STATS[1],
            2: [],
            3: [_stat("GS"), _stat("GK")],
        }
        games = [_game(1), _game(2), _game(3), _game(4)]
        result = compute_position_averages(games, stats, 100)

        assert result["games_with_position_stats"] == 1
        assert result["gs_avg_goals_for"] == 7

    def test_only_circle_positions_count(self):
        """Mid-court goals and cross-direction fields are ignored."""
        stats = {1: [
            _stat("C", goals_for=9, goals_against=9),
            _stat("GS", goals_for=4, goals_against=2),
            _stat("GK", goals_for=3, goals_against=5),
        ]}
        result = compute_position_averages([_game(1)], stats, 100)

        assert result["gs_avg_goals_for"] == 4
        assert result["gk_avg_goals_against"] == 5
        assert result["attacking_positions_total"] == 4
        assert result["defending_positions_total"] == 5

    def test_other_team_rows_ignored(self):
        stats = {1: SINGLE_GAME_STATS[1] + [_stat("GS", goals_for=20, team_id=200)]}
        result = compute_position_averages([_game(1)], stats, 100)
        assert result["gs_avg_goals_for"] == 7

    def test_ineligible_games_ignored(self):
        games = [_game(1, completed=False), _game(2, allows_statistics=False)]
        stats = {1: SINGLE_GAME_STATS[1], 2: SINGLE_GAME_STATS[1]}
        result = compute_position_averages(games, stats, 100)
        assert result["games_with_position_stats"] == 0

    def test_malformed_values_coerced(self):
        """A bad value is treated as zero without blanking the report."""
        stats = {1: [_stat("GS", goals_for="seven"), _stat("GA", goals_for="5")]}
        result = compute_position_averages([_game(1)], stats, 100)

        assert result["gs_avg_goals_for"] == 0
        assert result["ga_avg_goals_for"] == 5
        assert result["games_with_position_stats"] == 1

    @pytest.mark.parametrize("games,stats,team_id", [
        ([], {}, 100),
        (None, None, 100),
        ([_game(1)], SINGLE_GAME_STATS, 999),
        ([_game(1)], SINGLE_GAME_STATS, None),
    ])
    def test_empty_input_returns_zeros(self, games, stats, team_id):
        """No usable input degrades to zeros, never a division error."""
        result = compute_position_averages(games, stats, team_id)

        assert result["games_with_position_stats"] == 0
        assert result["gs_avg_goals_for"] == 0
        assert result["attacking_positions_total"] == 0
        assert result["defending_positions_total"] == 0


class TestPositionOpponentStats:
    """Tests for compute_position_opponent_stats and matchup helpers."""

    @pytest.fixture
    def resolver(self):
        return make_opponent_resolver({200: "Eagles", 300: "Hawks"})

    @pytest.fixture
    def games(self):
        return [_game(1, 100, 200), _game(2, 200, 100), _game(3, 100, 300)]

    @pytest.fixture
    def stats(self):
        return {
            1: [_stat("GS", goals_for=7), _stat("GK", goals_against=1)],
            2: [_stat("GS", goals_for=3), _stat("GK", goals_against=5)],
            3: [_stat("GS", goals_for=9)],
        }

    def test_accumulates_per_position_and_opponent(self, games, stats, resolver):
        result = compute_position_opponent_stats(games, stats, 100, resolver)
        by_key = {(r["position"], r["opponent"]): r for r in result}

        gs_eagles = by_key[("GS", "Eagles")]
        assert gs_eagles["games_played"] == 2
        assert gs_eagles["goals_for"] == 10
        assert gs_eagles["goal_differential"] == 10
        assert gs_eagles["efficiency"] == 1.0

        gk_eagles = by_key[("GK", "Eagles")]
        assert gk_eagles["goals_against"] == 6
        assert gk_eagles["goal_differential"] == -6
        assert gk_eagles["efficiency"] == 0.0

        assert by_key[("GS", "Hawks")]["games_played"] == 1

    def test_every_position_reported(self, games, stats, resolver):
        """All seven positions appear for each opponent, even with no goals."""
        result = compute_position_opponent_stats(games, stats, 100, resolver)
        assert len(result) == 14
        assert by_position(result, "Eagles") == ["GK", "GD", "WD", "C", "WA", "GA", "GS"]

    def test_best_and_worst_matchups(self, games, stats, resolver):
        result = compute_position_opponent_stats(games, stats, 100, resolver)

        best = best_position_matchups(result)
        worst = worst_position_matchups(result)

        assert (best[0]["position"], best[0]["opponent"]) == ("GS", "Eagles")
        assert (worst[0]["position"], worst[0]["opponent"]) == ("GK", "Eagles")
        # Hawks were only played once
        assert all(r["opponent"] == "Eagles" for r in best + worst)

    def test_limit(self, games, stats, resolver):
        result = compute_position_opponent_stats(games, stats, 100, resolver)
        assert len(best_position_matchups(result, limit=3)) == 3

    def test_games_without_opponent_skipped(self, stats):
        games = [_game(1, 100, 100)]
        assert compute_position_opponent_stats(games, stats, 100) == []


class TestPlayerPositionOpponentStats:
    """Tests for compute_player_position_opponent_stats function."""

    @pytest.fixture
    def resolver(self):
        return make_opponent_resolver({200: "Eagles", 300: "Hawks"})

    @pytest.fixture
    def games(self):
        return [_game(1, 100, 200), _game(2, 100, 300)]

    @pytest.fixture
    def rosters(self):
        return {
            1: [
                {"quarter": 1, "position": "GS", "player_id": 7},
                {"quarter": 2, "position": "GS", "player_id": 7},
                {"quarter": 3, "position": "GA", "player_id": 7},
                {"quarter": 1, "position": "GK", "player_id": 1},
            ],
            2: [{"quarter": 1, "position": "GS", "player_id": 7}],
        }

    @pytest.fixture
    def stats(self):
        return {
            1: [
                _stat("GS", goals_for=5, goals_against=1, quarter=1),
                _stat("GS", goals_for=3, quarter=2),
                _stat("GK", goals_against=4, quarter=1),
            ],
            2: [_stat("GS", goals_for=8, quarter=1)],
        }

    def test_goals_from_matching_quarter_and_position(self, games, stats, rosters, resolver):
        result = compute_player_position_opponent_stats(games, stats, rosters, 100, resolver)
        by_key = {(r["player_id"], r["position"], r["opponent"]): r for r in result}

        gs_eagles = by_key[(7, "GS", "Eagles")]
        assert gs_eagles["quarters_played"] == 2
        assert gs_eagles["goals_for"] == 8
        assert gs_eagles["goals_against"] == 1
        assert gs_eagles["goal_differential"] == 7
        assert gs_eagles["efficiency"] == pytest.approx(8 / 9)

        # No stat row for GA in quarter 3
        ga_eagles = by_key[(7, "GA", "Eagles")]
        assert ga_eagles["quarters_played"] == 1
        assert ga_eagles["goals_for"] == 0
        assert ga_eagles["efficiency"] == 0.0

        assert by_key[(1, "GK", "Eagles")]["goals_against"] == 4
        assert by_key[(7, "GS", "Hawks")]["goals_for"] == 8
        assert len(result) == 4

    def test_player_names(self, games, stats, rosters, resolver):
        players = [{"id": 7, "display_name": "Ava"}]
        result = compute_player_position_opponent_stats(games, stats, rosters, 100, resolver, players)
        names = {r["player_id"]: r["player_name"] for r in result}
        assert names == {7: "Ava", 1: "Player 1"}

    def test_games_without_opponent_skipped(self, stats, rosters):
        resolver = make_opponent_resolver(club_team_ids=[100, 200, 300])
        games = [_game(1, 100, 200), _game(2, 100, 300)]
        assert compute_player_position_opponent_stats(games, stats, rosters, 100, resolver) == []

    def test_empty_inputs(self):
        assert compute_player_position_opponent_stats(None, None, None, 100) == []


def by_position(result, opponent):
    return [r["position"] for r in result if r["opponent"] == opponent]
