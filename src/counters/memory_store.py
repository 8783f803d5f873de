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
Process-local counter store.

Applies the same conditional primitives as the PostgreSQL store against
a dict. Each primitive yields to the event loop once (the stand-in for
a network round-trip) and then checks and mutates without awaiting, so
the check-and-set is atomic with respect to other tasks.

Used when no DATABASE_URL is configured, and in tests.
"""

import asyncio
from datetime import date, datetime, timezone
from typing import Optional

from .config import CounterConfig
from .days import format_day
from .errors import ConcurrencyResolved
from .models import DailyReactionRecord
from .retry import RetryPolicy
from .store import BaseCounterStore


class InMemoryCounterStore(BaseCounterStore):
    """Counter store kept in process memory. Nothing is persisted."""

    def __init__(
        self,
        config: Optional[CounterConfig] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        super().__init__(config, retry)
        self._records: dict[tuple[date, str], DailyReactionRecord] = {}

    def get_record(self, day: date, reaction: str) -> Optional[DailyReactionRecord]:
        """Return a copy of one record, or None if it was never created."""
        record = self._records.get((day, reaction))
        return self._copy(record) if record else None

    def __len__(self) -> int:
        return len(self._records)

    async def _create(self, day: date, reaction: str, user_id: str) -> None:
        await asyncio.sleep(0)
        key = (day, reaction)
        if key in self._records:
            raise ConcurrencyResolved(f"{format_day(day)}/{reaction} exists")
        self._records[key] = DailyReactionRecord(
            day=day,
            reaction_name=reaction,
            count=1,
            user_counts={user_id: 1},
            updated_at=datetime.now(timezone.utc),
        )

    async def _increment(self, day: date, reaction: str, user_id: str) -> None:
        await asyncio.sleep(0)
        record = self._records.get((day, reaction))
        if record is None:
            raise ConcurrencyResolved(f"no record to increment for {format_day(day)}/{reaction}")
        record.count += 1
        record.user_counts[user_id] = record.user_counts.get(user_id, 0) + 1
        record.updated_at = datetime.now(timezone.utc)

    async def _decrement(self, day: date, reaction: str, user_id: str) -> None:
        await asyncio.sleep(0)
        record = self._records.get((day, reaction))
        if record is None or record.user_counts.get(user_id, 0) <= 0:
            raise ConcurrencyResolved(f"nothing to remove on {format_day(day)}/{reaction}")
        record.count -= 1
        record.user_counts[user_id] -= 1
        record.updated_at = datetime.now(timezone.utc)

    async def _fetch_day(
        self, day: date, reaction: Optional[str], limit: int
    ) -> list[DailyReactionRecord]:
        await asyncio.sleep(0)
        matches = [
            self._copy(record)
            for (record_day, name), record in self._records.items()
            if record_day == day and (reaction is None or name == reaction)
        ]
        matches.sort(key=lambda r: r.reaction_name)
        return matches[:limit]

    @staticmethod
    def _copy(record: DailyReactionRecord) -> DailyReactionRecord:
        return DailyReactionRecord(
            day=record.day,
            reaction_name=record.reaction_name,
            count=record.count,
            user_counts=dict(record.user_counts),
            updated_at=record.updated_at,
        )
