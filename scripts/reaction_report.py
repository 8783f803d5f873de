#!/usr/bin/env python3
# emojireport - Discord reaction leaderboard
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
CLI tool for printing reaction reports as JSON.

Usage:
    python scripts/reaction_report.py                      # Top reactions, last 7 days
    python scripts/reaction_report.py --days 30            # Top reactions, last 30 days
    python scripts/reaction_report.py --view users         # Top reactors
    python scripts/reaction_report.py --user 1234567890    # One user's top reactions
    python scripts/reaction_report.py --emoji tada         # Top users of one emoji
"""

import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import asyncpg
from dotenv import load_dotenv

from counters import AggregationEngine, CounterConfig, CounterError, CounterStore, ReportView

load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print a reaction report as JSON")
    parser.add_argument(
        "--view",
        choices=[v.value for v in ReportView],
        help="Report to print (default: reactions, or inferred from --user/--emoji)",
    )
    parser.add_argument("--days", type=int, help="Window size in days (default: 7)")
    parser.add_argument("--user", help="User id for the 'user' view")
    parser.add_argument("--emoji", help="Reaction name for the 'emoji' view")
    return parser


def resolve_view(args: argparse.Namespace) -> ReportView:
    """Pick the view from --view, falling back to whichever filter was given."""
    if args.view:
        return ReportView(args.view)
    if args.user:
        return ReportView.USER_REACTIONS
    if args.emoji:
        return ReportView.EMOJI_USERS
    return ReportView.TOP_REACTIONS


def to_json(result) -> str:
    if isinstance(result, list):
        payload = [item.to_dict() for item in result]
    else:
        payload = result.to_dict()
    return json.dumps(payload, indent=2, ensure_ascii=False)


async def run_report(args: argparse.Namespace) -> int:
    """Run the requested report and print it."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        print("Error: DATABASE_URL not set", file=sys.stderr)
        return 1

    config = CounterConfig.from_env()
    pool = await asyncpg.create_pool(database_url, min_size=1, max_size=2)
    try:
        engine = AggregationEngine(CounterStore(pool, config), config)
        result = await engine.query(
            resolve_view(args),
            num_days=args.days,
            emoji=args.emoji,
            user_id=args.user,
        )
    except CounterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await pool.close()

    print(to_json(result))
    return 0


def main():
    """Main entry point."""
    args = build_parser().parse_args()
    sys.exit(asyncio.run(run_report(args)))


if __name__ == "__main__":
    main()
