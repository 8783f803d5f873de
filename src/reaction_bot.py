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
emojireport Discord Bot

Counts emoji reactions as they are added and removed, and answers
/emojireport with leaderboards over the last N days.
"""

import asyncio
import logging
import os
from typing import Optional

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

from commands.report_commands import setup as setup_report_commands
from counters import (
    AggregationEngine,
    BaseCounterStore,
    CounterConfig,
    CounterError,
    CounterStore,
    EventIngestor,
    InMemoryCounterStore,
    InvalidEvent,
    ReactionEvent,
    ReactionKind,
)
from counters.days import validate_timezone

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("emojireport")


class ReactionBot(commands.Bot):
    """Discord bot that counts reactions and serves reaction reports."""

    def __init__(self, config: Optional[CounterConfig] = None):
        intents = discord.Intents.default()
        intents.guild_reactions = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config or CounterConfig.from_env()
        self.db_pool: Optional[asyncpg.Pool] = None
        self.store: Optional[BaseCounterStore] = None
        self.ingestor: Optional[EventIngestor] = None
        self.engine: Optional[AggregationEngine] = None

    async def setup_hook(self):
        """Called when the bot is starting up."""
        database_url = os.getenv("DATABASE_URL")
        logger.info(f"Setup: DATABASE_URL={'set' if database_url else 'missing'}")
        logger.info(f"Setup: REACTIONS_TIMEZONE={self.config.timezone}")
        if not validate_timezone(self.config.timezone):
            raise ValueError(f"Unknown REACTIONS_TIMEZONE: {self.config.timezone}")

        if database_url:
            self.db_pool = await asyncpg.create_pool(database_url)
            store = CounterStore(self.db_pool, self.config)
            await store.ensure_schema()
            logger.info(f"Counting reactions in table {self.config.table_name}")
        else:
            logger.warning("No DATABASE_URL, reaction counts are kept in memory only")
            store = InMemoryCounterStore(self.config)

        # One store handle shared by the write and read paths
        self.store = store
        self.ingestor = EventIngestor(store, self.config)
        self.engine = AggregationEngine(store, self.config)

        await setup_report_commands(self, self.engine, self.config)
        synced = await self.tree.sync()
        logger.info(f"Synced {len(synced)} application command(s)")

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        await self.record_reaction(ReactionKind.ADDED, payload)

    async def on_raw_reaction_remove(self, payload: discord.RawReactionActionEvent):
        await self.record_reaction(ReactionKind.REMOVED, payload)

    async def record_reaction(
        self, kind: ReactionKind, payload: discord.RawReactionActionEvent
    ) -> None:
        """Feed a gateway reaction event to the ingestor."""
        if self.ingestor is None:
            logger.debug("Reaction received before setup finished, ignoring")
            return

        # Gateway reaction events carry no timestamp; bucket by receive time
        event = ReactionEvent(
            kind=kind,
            timestamp=discord.utils.utcnow().timestamp(),
            reaction_name=payload.emoji.name or "",
            user_id=str(payload.user_id),
        )
        try:
            await self.ingestor.ingest(event)
        except InvalidEvent:
            # Already logged by the ingestor (e.g. a deleted custom emoji has no name)
            return
        except CounterError as e:
            logger.error(f"Failed to record {kind.value} reaction: {e}", exc_info=True)

    async def close(self):
        """Close the Discord connection and the database pool."""
        await super().close()
        if self.db_pool is not None:
            await self.db_pool.close()
            self.db_pool = None


async def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = ReactionBot()
    await bot.start(token)


def run():
    """Console entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
