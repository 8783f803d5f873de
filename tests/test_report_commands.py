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

"""Tests for the /emojireport command and its embeds."""

import sys
from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from commands.report_commands import ReportCommands
from commands.report_parser import CommandKind, ReportCommand
from commands.report_views import (
    build_emoji_embed,
    build_top_reactions_embed,
    build_top_users_embed,
    format_emoji,
    plural_days,
    rank_label,
)
from counters import (
    AggregationEngine,
    CounterConfig,
    EmojiBreakdown,
    InMemoryCounterStore,
    ReactionRank,
    ReactionTally,
    StoreUnavailableError,
    UserRank,
)

TODAY = date(2024, 5, 10)


@pytest.fixture
def config():
    return CounterConfig(base_delay_seconds=0)


@pytest.fixture
def store(config):
    return InMemoryCounterStore(config)


@pytest.fixture
def cog(store, config):
    engine = AggregationEngine(store, config, clock=lambda: TODAY)
    return ReportCommands(MagicMock(), engine, config)


def make_interaction():
    interaction = MagicMock()
    interaction.user.id = 1001
    interaction.response.defer = AsyncMock()
    interaction.followup.send = AsyncMock()
    return interaction


class TestFormatting:
    """Test small rendering helpers."""

    def test_format_emoji(self):
        assert format_emoji("🔥") == "🔥"
        assert format_emoji("tada") == "`:tada:`"

    def test_rank_label(self):
        assert rank_label(0) == "01"
        assert rank_label(9) == "10"

    def test_plural_days(self):
        assert plural_days(1) == "day"
        assert plural_days(7) == "7 days"


class TestEmbeds:
    """Test report embeds."""

    def test_top_reactions(self):
        embed = build_top_reactions_embed(
            [ReactionRank("tada", 4, 2), ReactionRank("🔥", 1, 1)], days=7
        )
        assert embed.title == "Top emoji reactions over the last 7 days"
        lines = embed.description.split("\n")
        assert lines[0] == "**01**) `:tada:`  **4** reactions, **2** users"
        assert lines[1] == "**02**) 🔥  **1** reactions, **1** users"

    def test_limit_applies(self):
        ranks = [ReactionRank(f"r{i:02d}", 20 - i, 1) for i in range(15)]
        embed = build_top_reactions_embed(ranks, days=7, limit=10)
        assert len(embed.description.split("\n")) == 10

    def test_empty_top_reactions(self):
        embed = build_top_reactions_embed([], days=1)
        assert embed.description == "No emoji reactions over the last day."

    def test_top_users(self):
        embed = build_top_users_embed(
            [UserRank("42", 3, [ReactionTally("tada", 2), ReactionTally("fire", 1)])], days=7
        )
        assert embed.fields[0].name == "01) 3 reactions"
        assert embed.fields[0].value == "<@42>\n`:tada:` 2x  `:fire:` 1x"

    def test_unused_emoji(self):
        embed = build_emoji_embed(EmojiBreakdown("tada", 0, []), days=7)
        assert embed.description == "`:tada:` was not used over the last 7 days."


class TestBuildReport:
    """Test command dispatch against a real engine."""

    @pytest.mark.asyncio
    async def test_help(self, cog):
        embed = await cog.build_report(ReportCommand(CommandKind.HELP))
        assert embed.title == "Emoji Report"
        assert "/emojireport people" in embed.description

    @pytest.mark.asyncio
    async def test_unknown(self, cog):
        embed = await cog.build_report(ReportCommand(CommandKind.UNKNOWN))
        assert embed.title == "Sorry, I didn't understand that"

    @pytest.mark.asyncio
    async def test_all_emoji(self, cog, store):
        await store.record_add(TODAY, "tada", "1")
        await store.record_add(TODAY, "tada", "2")

        embed = await cog.build_report(ReportCommand(CommandKind.ALL_EMOJI, 1))
        assert embed.description == "**01**) `:tada:`  **2** reactions, **2** users"

    @pytest.mark.asyncio
    async def test_all_users(self, cog, store):
        await store.record_add(TODAY, "tada", "7")

        embed = await cog.build_report(ReportCommand(CommandKind.ALL_USERS, 1))
        assert embed.fields[0].value.startswith("<@7>")

    @pytest.mark.asyncio
    async def test_for_user(self, cog, store):
        await store.record_add(TODAY, "tada", "7")

        embed = await cog.build_report(ReportCommand(CommandKind.FOR_USER, 1, "7"))
        assert "**01**) `:tada:` _1x_" in embed.description

        embed = await cog.build_report(ReportCommand(CommandKind.FOR_USER, 1, "8"))
        assert embed.description.startswith("No emoji reactions by <@8>")

    @pytest.mark.asyncio
    async def test_for_emoji(self, cog, store):
        await store.record_add(TODAY, "tada", "7")
        await store.record_add(TODAY, "tada", "7")

        embed = await cog.build_report(ReportCommand(CommandKind.FOR_EMOJI, 1, "tada"))
        assert embed.description.split("\n") == [
            "`:tada:` was used **2** times. The top users are:",
            "**01**) <@7> _2x_",
        ]


class TestSlashCommand:
    """Test the interaction flow."""

    @pytest.mark.asyncio
    async def test_help_is_private(self, cog):
        interaction = make_interaction()

        await cog.emojireport.callback(cog, interaction, "")

        interaction.response.defer.assert_awaited_once_with(ephemeral=True)
        kwargs = interaction.followup.send.call_args.kwargs
        assert kwargs["ephemeral"] is True
        assert kwargs["embed"].title == "Emoji Report"

    @pytest.mark.asyncio
    async def test_report_is_public(self, cog, store):
        await store.record_add(TODAY, "tada", "7")
        interaction = make_interaction()

        await cog.emojireport.callback(cog, interaction, "emoji 1")

        interaction.response.defer.assert_awaited_once_with(ephemeral=False)
        kwargs = interaction.followup.send.call_args.kwargs
        assert kwargs["ephemeral"] is False
        assert "`:tada:`" in kwargs["embed"].description

    @pytest.mark.asyncio
    async def test_store_outage_is_reported(self, cog):
        cog.engine.top_reactions = AsyncMock(side_effect=StoreUnavailableError("query", 5))
        interaction = make_interaction()

        await cog.emojireport.callback(cog, interaction, "emoji")

        args, kwargs = interaction.followup.send.call_args
        assert "unavailable" in args[0]
        assert kwargs["ephemeral"] is True
