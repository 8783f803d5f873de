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
Report Embeds

Renders aggregation results as Discord embeds.
"""

import discord

from counters import EmojiBreakdown, ReactionRank, UserRank

HELP_LINES = [
    "• `/emojireport emoji` The top emoji reactions over the last 7 days",
    "• `/emojireport people` The top reactors over the last 7 days",
    "• `/emojireport @user` The top emoji reactions by @user over the last 7 days",
    "• `/emojireport :emoji:` The top users of :emoji: over the last 7 days",
    "• `/emojireport help` Show the list of supported commands",
    "",
    "Add a number of days to any report, e.g. `/emojireport people 30`.",
]


def format_emoji(name: str) -> str:
    """Unicode emoji render as themselves, named ones as a `:shortcode:`."""
    if all(ord(ch) > 127 for ch in name):
        return name
    return f"`:{name}:`"


def mention(user_id: str) -> str:
    return f"<@{user_id}>"


def rank_label(index: int) -> str:
    """Zero-padded 1-based rank, e.g. 01, 02, ..."""
    return f"{index + 1:02d}"


def plural_days(days: int) -> str:
    return "day" if days == 1 else f"{days} days"


def build_help_embed(unknown: bool = False) -> discord.Embed:
    """List the supported commands, apologising first if the input was not understood."""
    if unknown:
        title = "Sorry, I didn't understand that"
        color = discord.Color.red()
    else:
        title = "Emoji Report"
        color = discord.Color.blurple()

    return discord.Embed(
        title=title,
        description="\n".join(["I understand the following commands:", *HELP_LINES]),
        color=color,
    )


def build_top_reactions_embed(
    ranks: list[ReactionRank], days: int, limit: int = 10
) -> discord.Embed:
    embed = discord.Embed(
        title=f"Top emoji reactions over the last {plural_days(days)}",
        color=discord.Color.gold(),
    )
    if not ranks:
        embed.description = f"No emoji reactions over the last {plural_days(days)}."
        return embed

    lines = []
    for i, rank in enumerate(ranks[:limit]):
        lines.append(
            f"**{rank_label(i)}**) {format_emoji(rank.reaction)}  "
            f"**{rank.count}** reactions, **{rank.user_count}** users"
        )
    embed.description = "\n".join(lines)
    return embed


def build_top_users_embed(users: list[UserRank], days: int, limit: int = 10) -> discord.Embed:
    embed = discord.Embed(
        title=f"Top reactors over the last {plural_days(days)}",
        color=discord.Color.green(),
    )
    if not users:
        embed.description = f"Nobody reacted over the last {plural_days(days)}."
        return embed

    for i, user in enumerate(users[:limit]):
        breakdown = "  ".join(
            f"{format_emoji(r.name)} {r.count}x" for r in user.reactions[:limit]
        )
        embed.add_field(
            name=f"{rank_label(i)}) {user.count} reactions",
            value=f"{mention(user.user_id)}\n{breakdown}",
            inline=False,
        )
    return embed


def build_user_reactions_embed(
    user_id: str, ranks: list[ReactionRank], days: int, limit: int = 10
) -> discord.Embed:
    embed = discord.Embed(
        title=f"Top emoji reactions over the last {plural_days(days)}",
        color=discord.Color.blue(),
    )
    if not ranks:
        embed.description = (
            f"No emoji reactions by {mention(user_id)} over the last {plural_days(days)} "
            f"\N{WHITE FROWNING FACE}"
        )
        return embed

    lines = [f"The top emoji reactions by {mention(user_id)} are:"]
    for i, rank in enumerate(ranks[:limit]):
        lines.append(f"**{rank_label(i)}**) {format_emoji(rank.reaction)} _{rank.count}x_")
    embed.description = "\n".join(lines)
    return embed


def build_emoji_embed(breakdown: EmojiBreakdown, days: int, limit: int = 10) -> discord.Embed:
    emoji = format_emoji(breakdown.emoji)
    embed = discord.Embed(
        title=f"{emoji} over the last {plural_days(days)}",
        color=discord.Color.orange(),
    )
    if not breakdown.users:
        embed.description = f"{emoji} was not used over the last {plural_days(days)}."
        return embed

    lines = [f"{emoji} was used **{breakdown.total}** times. The top users are:"]
    for i, user in enumerate(breakdown.users[:limit]):
        lines.append(f"**{rank_label(i)}**) {mention(user.user_id)} _{user.count}x_")
    embed.description = "\n".join(lines)
    return embed
