"""Netball analytics report runner."""

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .api.dashboard import fetch_players, fetch_team_batch
from .combinations import rank_combinations
from .formations import rank_formations
from .opponents import list_opponents, make_opponent_resolver
from .positions import (
    best_position_matchups,
    compute_position_averages,
    compute_player_position_opponent_stats,
    compute_position_opponent_stats,
    worst_position_matchups,
)
from .quarters import quarter_position_breakdowns, summarize_quarters


# Output directory (relative to this file) unless overridden
DEFAULT_OUTPUT_DIR = Path(__file__).parent / "output"


def get_output_dir() -> Path:
    """Resolve the report output directory."""
    load_dotenv()
    configured = os.environ.get("NETBALL_ANALYTICS_OUTPUT_DIR")
    return Path(configured) if configured else DEFAULT_OUTPUT_DIR


def write_json(filename: str, data: object) -> None:
    """Write data to JSON file."""
    output_dir = get_output_dir()
    output_dir.mkdir(parents=True, exist_ok=True)
    filepath = output_dir / filename
    with open(filepath, "w") as f:
        json.dump(data, f, indent=2)
    print(f"Written: {filepath}")


async def main(
    team_id: int,
    club_team_ids: Optional[List[int]] = None,
    combination_size: int = 2,
    positions: Optional[List[str]] = None,
    quarter: Optional[int] = None,
) -> None:
    """Fetch a team's games and write every analysis report."""
    try:
        batch = await fetch_team_batch(team_id)
        if batch is None:
            print(f"Could not load games for team {team_id}")
            return
        print(f"Games: {len(batch['games'])} loaded")

        players = await fetch_players()
        print(f"Players: {len(players)} loaded")

        resolver = make_opponent_resolver(club_team_ids=club_team_ids)
        games = batch["games"]
        opponents = list_opponents(games, team_id, resolver)
        print(f"Opponents: {len(opponents)} found")

        write_json("position_averages.json", compute_position_averages(games, batch["stats"], team_id))

        position_opponents = compute_position_opponent_stats(games, batch["stats"], team_id, resolver)
        write_json("position_opponents.json", {
            "all": position_opponents,
            "best": best_position_matchups(position_opponents),
            "worst": worst_position_matchups(position_opponents),
            "players": compute_player_position_opponent_stats(
                games, batch["stats"], batch["rosters"], team_id, resolver, players
            ),
        })

        formations = rank_formations(
            games, batch["stats"], batch["rosters"], team_id, resolver, players, quarter
        )
        print(f"Formations: {len(formations['general'])} ranked")
        write_json("formations.json", formations)

        combinations = rank_combinations(
            games,
            batch["stats"],
            batch["rosters"],
            combination_size,
            team_id,
            resolver,
            position_filter=positions,
            players=players,
        )
        print(f"Combinations: {len(combinations['general'])} ranked")
        write_json("combinations.json", combinations)

        write_json("quarters.json", {
            "opponents": opponents,
            "quarters": summarize_quarters(games, team_id, batch["scores"], batch["stats"]),
            "breakdowns": quarter_position_breakdowns(games, team_id, batch["scores"], batch["stats"]),
        })
        print("Analysis: written")

    except Exception as error:
        print(f"Error: {error}")
        raise


def _parse_int_list(value: str) -> List[int]:
    return [int(part) for part in value.split(",") if part.strip()]


def run() -> None:
    """Parse arguments and run the report."""
    parser = argparse.ArgumentParser(description="Team performance analytics for a netball team")
    parser.add_argument("--team-id", type=int, required=True, help="Team to analyze")
    parser.add_argument("--club-team-ids", type=_parse_int_list, default=None,
                        help="Comma-separated ids of the club's teams (intra-club games are excluded per opponent)")
    parser.add_argument("--combination-size", type=int, default=2, choices=[2, 3, 4, 5])
    parser.add_argument("--positions", default="", help="Comma-separated positions to filter combinations, e.g. GS,GA")
    parser.add_argument("--quarter", type=int, default=None, choices=[1, 2, 3, 4],
                        help="Only analyze formations for this quarter")
    args = parser.parse_args()

    positions = [p.strip().upper() for p in args.positions.split(",") if p.strip()] or None
    asyncio.run(main(args.team_id, args.club_team_ids, args.combination_size, positions, args.quarter))


if __name__ == "__main__":
    run()
