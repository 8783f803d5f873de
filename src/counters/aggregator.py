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
Windowed reaction aggregation.

Reads the most recent N day buckets from the counter store, folds them
into per-reaction totals, and ranks them into one of four views:

- top reactions across everyone
- top users, each with their own top reactions
- top reactions for one user
- top users for one emoji, plus the emoji's total

Merging sums counts (absent keys count as zero), so the totals do not
depend on the order days or records are read in. Rankings sort by count
descending and break ties by key ascending. Entries whose final count
is zero or negative are dropped from every view.
"""

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional, Union

from .config import CounterConfig
from .days import current_day, window_days
from .errors import InvalidQuery
from .models import (
    DailyReactionRecord,
    EmojiBreakdown,
    ReactionRank,
    ReactionTally,
    ReportView,
    UserRank,
    UserTally,
)
from .store import BaseCounterStore

logger = logging.getLogger("emojireport.counters.aggregator")


@dataclass
class ReactionTotals:
    """One reaction's counters summed over a window."""

    count: int = 0
    user_counts: dict[str, int] = field(default_factory=dict)

    def add(self, record: DailyReactionRecord) -> None:
        self.count += record.count
        for user_id, user_count in record.user_counts.items():
            self.user_counts[user_id] = self.user_counts.get(user_id, 0) + user_count

    def active_users(self) -> int:
        """Number of users whose summed contribution is positive."""
        return sum(1 for c in self.user_counts.values() if c > 0)


def merge_records(records: Iterable[DailyReactionRecord]) -> dict[str, ReactionTotals]:
    """Sum daily records into per-reaction totals keyed by reaction name."""
    totals: dict[str, ReactionTotals] = defaultdict(ReactionTotals)
    for record in records:
        totals[record.reaction_name].add(record)
    return dict(totals)


def rank_key(key: str, count: int) -> tuple[int, str]:
    """Sort key: highest count first, then key ascending."""
    return (-count, key)


def rank_counts(counts: dict[str, int]) -> list[tuple[str, int]]:
    """Positive entries of a key -> count mapping, ranked."""
    return sorted(
        ((key, count) for key, count in counts.items() if count > 0),
        key=lambda item: rank_key(*item),
    )


class AggregationEngine:
    """Ranked reaction reports over a sliding window of days."""

    def __init__(
        self,
        store: BaseCounterStore,
        config: Optional[CounterConfig] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        """
        Initialize the aggregation engine.

        Args:
            store: Counter store shared with the ingestor
            config: Counter configuration; defaults to the store's
            clock: Returns "today"; defaults to the current day in the
                configured timezone
        """
        self.store = store
        self.config = config or store.config
        self._clock = clock or (lambda: current_day(self.config.timezone))

    async def fetch_window(
        self, num_days: int, emoji: Optional[str] = None
    ) -> list[DailyReactionRecord]:
        """
        Read every record in the window, optionally for one emoji.

        Days are read concurrently. A write committing during the scan
        may or may not be included.
        """
        if not isinstance(num_days, int) or isinstance(num_days, bool) or num_days < 1:
            raise InvalidQuery(f"Window must be at least one day, got {num_days!r}")

        days = window_days(self._clock(), num_days)
        pages = await asyncio.gather(*(self.store.query_day(day, emoji) for day in days))
        records = [record for page in pages for record in page]
        logger.debug(f"Fetched {len(records)} records over {num_days} day(s)")
        return records

    async def top_reactions(
        self, num_days: Optional[int] = None, emoji: Optional[str] = None
    ) -> list[ReactionRank]:
        """Reactions ranked by total count, with distinct user counts."""
        totals = merge_records(await self.fetch_window(self._days(num_days), emoji))
        ranked = [
            ReactionRank(reaction=name, count=t.count, user_count=t.active_users())
            for name, t in totals.items()
            if t.count > 0
        ]
        ranked.sort(key=lambda r: rank_key(r.reaction, r.count))
        return ranked

    async def top_users(
        self, num_days: Optional[int] = None, emoji: Optional[str] = None
    ) -> list[UserRank]:
        """Users ranked by total reactions, each with their own ranked reactions."""
        totals = merge_records(await self.fetch_window(self._days(num_days), emoji))

        # Invert reaction -> user into user -> reaction
        by_user: dict[str, dict[str, int]] = defaultdict(dict)
        for name, t in totals.items():
            for user_id, count in t.user_counts.items():
                by_user[user_id][name] = by_user[user_id].get(name, 0) + count

        ranked = []
        for user_id, reactions in by_user.items():
            total = sum(reactions.values())
            if total <= 0:
                continue
            ranked.append(
                UserRank(
                    user_id=user_id,
                    count=total,
                    reactions=[ReactionTally(n, c) for n, c in rank_counts(reactions)],
                )
            )
        ranked.sort(key=lambda u: rank_key(u.user_id, u.count))
        return ranked

    async def top_reactions_for_user(
        self, user_id: str, num_days: Optional[int] = None, emoji: Optional[str] = None
    ) -> list[ReactionRank]:
        """Reactions ranked by how often one user used them."""
        if not user_id:
            raise InvalidQuery("A user id is required")
        totals = merge_records(await self.fetch_window(self._days(num_days), emoji))
        counts = {name: t.user_counts.get(user_id, 0) for name, t in totals.items()}
        return [
            ReactionRank(reaction=name, count=count, user_count=1)
            for name, count in rank_counts(counts)
        ]

    async def top_users_for_emoji(
        self, emoji: str, num_days: Optional[int] = None
    ) -> EmojiBreakdown:
        """Users ranked by how often they used one emoji, plus its window total."""
        if not emoji:
            raise InvalidQuery("An emoji is required")
        totals = merge_records(await self.fetch_window(self._days(num_days), emoji))
        emoji_totals = totals.get(emoji, ReactionTotals())
        return EmojiBreakdown(
            emoji=emoji,
            total=emoji_totals.count,
            users=[UserTally(u, c) for u, c in rank_counts(emoji_totals.user_counts)],
        )

    async def query(
        self,
        view: ReportView,
        num_days: Optional[int] = None,
        emoji: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Union[list[ReactionRank], list[UserRank], EmojiBreakdown]:
        """Produce the requested view, optionally restricted to one emoji."""
        if view is ReportView.TOP_REACTIONS:
            return await self.top_reactions(num_days, emoji)
        if view is ReportView.TOP_USERS:
            return await self.top_users(num_days, emoji)
        if view is ReportView.USER_REACTIONS:
            return await self.top_reactions_for_user(user_id, num_days, emoji)
        if view is ReportView.EMOJI_USERS:
            return await self.top_users_for_emoji(emoji, num_days)
        raise InvalidQuery(f"Unknown view: {view!r}")

    def _days(self, num_days: Optional[int]) -> int:
        return self.config.default_window_days if num_days is None else num_days
