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
Report Command Parser

Turns the text of ``/emojireport <query>`` into a ReportCommand.

Grammar (one subject token, optional day count):

    <empty> | help              -> HELP
    emoji | emojis [N]          -> ALL_EMOJI
    people | users [N]          -> ALL_USERS
    <@123> | <@!123> [N]        -> FOR_USER
    :name: | <:name:1> | 🔥 [N] -> FOR_EMOJI

N is 1-3 digits, defaulting to 7. Anything else is UNKNOWN.
"""

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_DAYS = 7

DAYS_PATTERN = re.compile(r"^[0-9]{1,3}$")

# Discord user mentions, plus the <@U123|name> form Slack sends
USER_MENTION_PATTERN = re.compile(r"^<@!?([A-Za-z0-9]+)(?:\|[^>]*)?>$")

# :name: shortcodes and custom emoji (<:name:id>, <a:name:id> when animated)
SHORTCODE_PATTERN = re.compile(r"^:([^:\s]+):$")
CUSTOM_EMOJI_PATTERN = re.compile(r"^<a?:([A-Za-z0-9_~-]+):\d+>$")


class CommandKind(Enum):
    """What a report command asks for."""

    HELP = "help"
    ALL_EMOJI = "emoji"
    ALL_USERS = "users"
    FOR_USER = "user"
    FOR_EMOJI = "for_emoji"
    UNKNOWN = "unknown"


KEYWORDS = {
    "help": CommandKind.HELP,
    "emoji": CommandKind.ALL_EMOJI,
    "emojis": CommandKind.ALL_EMOJI,
    "people": CommandKind.ALL_USERS,
    "users": CommandKind.ALL_USERS,
}


@dataclass
class ReportCommand:
    """A parsed report command."""

    kind: CommandKind
    days: int = DEFAULT_DAYS
    target: Optional[str] = None  # User id or emoji name
    raw: str = ""


def tokenize(text: Optional[str]) -> list[str]:
    """Split command text on whitespace."""
    return (text or "").split()


def _is_unicode_emoji(token: str) -> bool:
    """
    A token with no ASCII characters and at least one symbol, e.g. "🔥" or "👍🏽".

    Words in non-Latin scripts ("привет", "日本") are letters, not symbols.
    """
    if not all(ord(ch) > 127 for ch in token):
        return False
    return any(unicodedata.category(ch) == "So" for ch in token)


def classify_subject(token: str) -> tuple[CommandKind, Optional[str]]:
    """Classify the first token of a command."""
    keyword = KEYWORDS.get(token.lower())
    if keyword is not None:
        return keyword, None

    match = USER_MENTION_PATTERN.match(token)
    if match:
        return CommandKind.FOR_USER, match.group(1)

    match = SHORTCODE_PATTERN.match(token) or CUSTOM_EMOJI_PATTERN.match(token)
    if match:
        return CommandKind.FOR_EMOJI, match.group(1)

    if _is_unicode_emoji(token):
        return CommandKind.FOR_EMOJI, token

    return CommandKind.UNKNOWN, None


def parse_report_command(text: Optional[str], default_days: int = DEFAULT_DAYS) -> ReportCommand:
    """
    Parse report command text.

    Args:
        text: Text after the command name, e.g. "users 14"
        default_days: Window used when no day count is given

    Returns:
        ReportCommand; kind is UNKNOWN when the text does not fit the grammar
    """
    raw = (text or "").strip()
    tokens = tokenize(raw)

    if not tokens:
        return ReportCommand(CommandKind.HELP, default_days, raw=raw)
    if len(tokens) > 2:
        return ReportCommand(CommandKind.UNKNOWN, default_days, raw=raw)

    kind, target = classify_subject(tokens[0])
    if kind is CommandKind.UNKNOWN:
        return ReportCommand(kind, default_days, raw=raw)

    days = default_days
    if len(tokens) == 2:
        if kind is CommandKind.HELP or not DAYS_PATTERN.match(tokens[1]):
            return ReportCommand(CommandKind.UNKNOWN, default_days, raw=raw)
        days = int(tokens[1])
        if days < 1:
            return ReportCommand(CommandKind.UNKNOWN, default_days, raw=raw)

    return ReportCommand(kind, days, target, raw=raw)
