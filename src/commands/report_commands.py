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
Emoji Report Slash Command

/emojireport [query] - reaction leaderboards over a window of days.
Help and errors are only shown to the caller; reports are posted to
the channel.
"""

import logging
from typing import Awaitable, Callable

import discord
from discord import app_commands
from discord.ext import commands

from counters import AggregationEngine, CounterConfig, CounterError
from .report_parser import CommandKind, ReportCommand, parse_report_command
from .report_views import (
    build_emoji_embed,
    build_help_embed,
    build_top_reactions_embed,
    build_top_users_embed,
    build_user_reactions_embed,
)

logger = logging.getLogger("emojireport.commands.report")

PRIVATE_KINDS = {CommandKind.HELP, CommandKind.UNKNOWN}


class ReportCommands(commands.Cog):
    """
    Slash command for reaction reports.

    Commands:
    - /emojireport              - Help
    - /emojireport emoji [N]    - Top reactions
    - /emojireport people [N]   - Top reactors
    - /emojireport @user [N]    - Top reactions by a user
    - /emojireport :emoji: [N]  - Top users of an emoji
    """

    def __init__(
        self,
        bot: commands.Bot,
        engine: AggregationEngine,
        config: CounterConfig,
    ):
        self.bot = bot
        self.engine = engine
        self.config = config
        self._handlers: dict[CommandKind, Callable[[ReportCommand], Awaitable[discord.Embed]]] = {
            CommandKind.HELP: self._help,
            CommandKind.UNKNOWN: self._unknown,
            CommandKind.ALL_EMOJI: self._top_reactions,
            CommandKind.ALL_USERS: self._top_users,
            CommandKind.FOR_USER: self._user_reactions,
            CommandKind.FOR_EMOJI: self._emoji_users,
        }

    @app_commands.command(name="emojireport", description="Emoji reaction leaderboards")
    @app_commands.describe(
        query="emoji, people, @user or :emoji:, optionally followed by a number of days"
    )
    async def emojireport(self, interaction: discord.Interaction, query: str = ""):
        """Show a reaction report."""
        command = parse_report_command(query, self.config.default_window_days)
        private = command.kind in PRIVATE_KINDS
        await interaction.response.defer(ephemeral=private)

        logger.info(
            f"/emojireport {command.kind.value} days={command.days} "
            f"target={command.target} by {interaction.user.id}"
        )

        try:
            embed = await self.build_report(command)
        except CounterError as e:
            logger.error(f"Error building emoji report '{command.raw}': {e}", exc_info=True)
            await interaction.followup.send(
                "Reaction counts are unavailable right now. Please try again later.",
                ephemeral=True,
            )
            return

        await interaction.followup.send(embed=embed, ephemeral=private)

    async def build_report(self, command: ReportCommand) -> discord.Embed:
        """Build the embed for a parsed command."""
        return await self._handlers[command.kind](command)

    # =========================================================================
    # Handlers
    # =========================================================================

    async def _help(self, command: ReportCommand) -> discord.Embed:
        return build_help_embed()

    async def _unknown(self, command: ReportCommand) -> discord.Embed:
        return build_help_embed(unknown=True)

    async def _top_reactions(self, command: ReportCommand) -> discord.Embed:
        ranks = await self.engine.top_reactions(command.days)
        return build_top_reactions_embed(ranks, command.days, self.config.report_limit)

    async def _top_users(self, command: ReportCommand) -> discord.Embed:
        users = await self.engine.top_users(command.days)
        return build_top_users_embed(users, command.days, self.config.report_limit)

    async def _user_reactions(self, command: ReportCommand) -> discord.Embed:
        ranks = await self.engine.top_reactions_for_user(command.target, command.days)
        return build_user_reactions_embed(
            command.target, ranks, command.days, self.config.report_limit
        )

    async def _emoji_users(self, command: ReportCommand) -> discord.Embed:
        breakdown = await self.engine.top_users_for_emoji(command.target, command.days)
        return build_emoji_embed(breakdown, command.days, self.config.report_limit)


async def setup(bot: commands.Bot, engine: AggregationEngine, config: CounterConfig):
    """Register the report commands cog."""
    await bot.add_cog(ReportCommands(bot, engine, config))
