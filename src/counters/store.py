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
Counter storage for daily reaction records.

Every mutation is a single conditional statement evaluated by the
database, so concurrent events for the same (day, reaction) key never
lose updates and never drive a user's count below zero:

- create:    INSERT ... ON CONFLICT DO NOTHING (the primary key decides
             which concurrent creator wins; losers fall back to increment)
- increment: UPDATE ... SET count = count + 1, user_counts[user] + 1
- decrement: UPDATE ... WHERE user_counts[user] > 0 (rejected = no-op)
"""

import asyncio
import json
import logging
import re
from datetime import date
from typing import Optional

import asyncpg

from .config import CounterConfig
from .days import format_day
from .errors import ConcurrencyResolved, StoreUnavailableError, TransientError
from .models import DailyReactionRecord
from .retry import RetryPolicy

logger = logging.getLogger("emojireport.counters.store")

# Connection loss, resource exhaustion and lock contention. Anything
# else (bad SQL, constraint violations) is a bug and propagates as-is.
TRANSIENT_DB_ERRORS = (
    asyncpg.exceptions.PostgresConnectionError,
    asyncpg.exceptions.ConnectionDoesNotExistError,
    asyncpg.exceptions.CannotConnectNowError,
    asyncpg.exceptions.InsufficientResourcesError,
    asyncpg.exceptions.SerializationError,
    asyncpg.exceptions.DeadlockDetectedError,
    OSError,
    asyncio.TimeoutError,
)

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class BaseCounterStore:
    """
    Add/remove/query flow shared by every counter backend.

    Subclasses implement four primitives, each one store round-trip:
    ``_create``, ``_increment`` and ``_decrement`` raise ConcurrencyResolved
    when their condition is rejected; all of them raise TransientError when the
    backend is unavailable.
    """

    def __init__(
        self,
        config: Optional[CounterConfig] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        self.config = config or CounterConfig()
        self.retry = retry or RetryPolicy.from_config(self.config)

    async def record_add(self, day: date, reaction: str, user_id: str) -> bool:
        """
        Count one reaction by a user on a day.

        Returns:
            True if this call created the day's record for the reaction
        """
        key = f"{format_day(day)}/{reaction}"
        for _ in range(self.retry.max_attempts):
            try:
                await self.retry.run(
                    lambda: self._create(day, reaction, user_id), f"create {key}"
                )
                logger.debug(f"Created {key} for user {user_id}")
                return True
            except ConcurrencyResolved:
                logger.debug(f"{key} already exists, incrementing")

            try:
                await self.retry.run(
                    lambda: self._increment(day, reaction, user_id), f"increment {key}"
                )
                return False
            except ConcurrencyResolved:
                # The record was deleted between the create and the increment
                logger.warning(f"Increment found no record for {key}, creating it again")

        raise StoreUnavailableError(f"add {key}", self.retry.max_attempts)

    async def record_remove(self, day: date, reaction: str, user_id: str) -> bool:
        """
        Uncount one reaction by a user on a day.

        A no-op when the record is missing or the user has nothing left
        to remove on that day.

        Returns:
            True if the counters were decremented
        """
        key = f"{format_day(day)}/{reaction}"
        try:
            await self.retry.run(
                lambda: self._decrement(day, reaction, user_id), f"decrement {key}"
            )
            return True
        except ConcurrencyResolved:
            logger.debug(f"Nothing to remove for user {user_id} on {key}")
            return False

    async def query_day(
        self, day: date, reaction: Optional[str] = None
    ) -> list[DailyReactionRecord]:
        """
        Fetch a day's records, optionally for a single reaction.

        At most ``config.page_size`` records are returned; further pages
        are not read.
        """
        page_size = self.config.page_size
        records = await self.retry.run(
            lambda: self._fetch_day(day, reaction, page_size),
            f"query {format_day(day)}",
        )
        if len(records) >= page_size:
            logger.warning(
                f"Day {format_day(day)} returned a full page of {page_size} records; "
                f"later records are not included"
            )
        return records

    # ===== Backend primitives =====

    async def _create(self, day: date, reaction: str, user_id: str) -> None:
        raise NotImplementedError

    async def _increment(self, day: date, reaction: str, user_id: str) -> None:
        raise NotImplementedError

    async def _decrement(self, day: date, reaction: str, user_id: str) -> None:
        raise NotImplementedError

    async def _fetch_day(
        self, day: date, reaction: Optional[str], limit: int
    ) -> list[DailyReactionRecord]:
        raise NotImplementedError


class CounterStore(BaseCounterStore):
    """PostgreSQL-backed counter store."""

    def __init__(
        self,
        db_pool: asyncpg.Pool,
        config: Optional[CounterConfig] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        """
        Initialize the counter store.

        Args:
            db_pool: AsyncPG connection pool
            config: Counter configuration (table name, page size, retries)
            retry: Retry policy; built from config when omitted
        """
        super().__init__(config, retry)
        if not _TABLE_NAME_RE.match(self.config.table_name):
            raise ValueError(f"Invalid table name: {self.config.table_name!r}")
        self.db = db_pool
        self.table = self.config.table_name

    async def ensure_schema(self) -> None:
        """Create the counters table if it does not exist."""
        await self._call(
            "execute",
            f"""
            CREATE TABLE IF NOT EXISTS {self.table} (
                day DATE NOT NULL,
                reaction_name TEXT NOT NULL,
                count INTEGER NOT NULL DEFAULT 0,
                user_counts JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                PRIMARY KEY (day, reaction_name)
            )
            """,
        )

    async def _call(self, method: str, query: str, *args):
        """Run a pool method, translating availability failures to TransientError."""
        try:
            return await getattr(self.db, method)(query, *args)
        except TRANSIENT_DB_ERRORS as e:
            raise TransientError(f"{type(e).__name__}: {e}") from e

    async def _create(self, day: date, reaction: str, user_id: str) -> None:
        row = await self._call(
            "fetchrow",
            f"""
            INSERT INTO {self.table} (day, reaction_name, count, user_counts, updated_at)
            VALUES ($1, $2, 1, jsonb_build_object($3::text, 1), NOW())
            ON CONFLICT (day, reaction_name) DO NOTHING
            RETURNING count
            """,
            day,
            reaction,
            user_id,
        )
        if row is None:
            raise ConcurrencyResolved(f"{format_day(day)}/{reaction} exists")

    async def _increment(self, day: date, reaction: str, user_id: str) -> None:
        row = await self._call(
            "fetchrow",
            f"""
            UPDATE {self.table}
            SET count = count + 1,
                user_counts = jsonb_set(
                    user_counts,
                    ARRAY[$3::text],
                    to_jsonb(COALESCE((user_counts->>$3::text)::int, 0) + 1)
                ),
                updated_at = NOW()
            WHERE day = $1 AND reaction_name = $2
            RETURNING count
            """,
            day,
            reaction,
            user_id,
        )
        if row is None:
            raise ConcurrencyResolved(f"no record to increment for {format_day(day)}/{reaction}")

    async def _decrement(self, day: date, reaction: str, user_id: str) -> None:
        row = await self._call(
            "fetchrow",
            f"""
            UPDATE {self.table}
            SET count = count - 1,
                user_counts = jsonb_set(
                    user_counts,
                    ARRAY[$3::text],
                    to_jsonb((user_counts->>$3::text)::int - 1)
                ),
                updated_at = NOW()
            WHERE day = $1 AND reaction_name = $2
                AND user_counts ? $3::text
                AND (user_counts->>$3::text)::int > 0
            RETURNING count
            """,
            day,
            reaction,
            user_id,
        )
        if row is None:
            raise ConcurrencyResolved(f"nothing to remove on {format_day(day)}/{reaction}")

    async def _fetch_day(
        self, day: date, reaction: Optional[str], limit: int
    ) -> list[DailyReactionRecord]:
        query = f"""
            SELECT day, reaction_name, count, user_counts, updated_at
            FROM {self.table}
            WHERE day = $1
        """
        args: list = [day]
        if reaction is not None:
            query += " AND reaction_name = $2"
            args.append(reaction)
        query += f" ORDER BY reaction_name LIMIT ${len(args) + 1}"
        args.append(limit)

        rows = await self._call("fetch", query, *args)
        return [self._row_to_record(row) for row in rows]

    @staticmethod
    def _row_to_record(row) -> DailyReactionRecord:
        user_counts = row["user_counts"]
        # asyncpg returns jsonb as text unless a type codec is registered
        if isinstance(user_counts, str):
            user_counts = json.loads(user_counts)
        return DailyReactionRecord(
            day=row["day"],
            reaction_name=row["reaction_name"],
            count=int(row["count"]),
            user_counts={str(k): int(v) for k, v in (user_counts or {}).items()},
            updated_at=row["updated_at"],
        )
