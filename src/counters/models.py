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
Data types for reaction counting.

Stored records, inbound events, and the ranked result records
produced by the aggregation engine.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional, Union

from .days import format_day


class ReactionKind(Enum):
    """Whether a reaction was added to or removed from a message."""

    ADDED = "added"
    REMOVED = "removed"


class ReportView(Enum):
    """The ranked views the aggregation engine can produce."""

    TOP_REACTIONS = "reactions"
    TOP_USERS = "users"
    USER_REACTIONS = "user"
    EMOJI_USERS = "emoji"


@dataclass
class ReactionEvent:
    """A normalized reaction add/remove event."""

    kind: ReactionKind
    timestamp: Union[int, float, str]  # Unix seconds, as delivered
    reaction_name: str
    user_id: str

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "ReactionEvent":
        """
        Build an event from its wire form.

        Expects ``{kind, timestampSeconds, reactionName, userId}``.

        Raises:
            ValueError: If ``kind`` is not "added" or "removed"
        """
        return cls(
            kind=ReactionKind(payload.get("kind")),
            timestamp=payload.get("timestampSeconds"),
            reaction_name=payload.get("reactionName"),
            user_id=payload.get("userId"),
        )


@dataclass
class DailyReactionRecord:
    """Counters for one reaction on one day."""

    day: date
    reaction_name: str
    count: int
    user_counts: dict[str, int] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "day": format_day(self.day),
            "reaction_name": self.reaction_name,
            "count": self.count,
            "user_counts": dict(self.user_counts),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class ReactionRank:
    """A reaction's standing in a window (top reactions / a user's reactions)."""

    reaction: str
    count: int
    user_count: int = 0  # Distinct users with a positive contribution

    def to_dict(self) -> dict:
        return {"reaction": self.reaction, "count": self.count, "user_count": self.user_count}


@dataclass
class ReactionTally:
    """One entry in a user's own reaction breakdown."""

    name: str
    count: int

    def to_dict(self) -> dict:
        return {"name": self.name, "count": self.count}


@dataclass
class UserRank:
    """A user's standing in a window, with their own top reactions."""

    user_id: str
    count: int
    reactions: list[ReactionTally] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "count": self.count,
            "reactions": [r.to_dict() for r in self.reactions],
        }


@dataclass
class UserTally:
    """One user's use of a single emoji."""

    user_id: str
    count: int

    def to_dict(self) -> dict:
        return {"user_id": self.user_id, "count": self.count}


@dataclass
class EmojiBreakdown:
    """Who used a single emoji over a window, and how often in total."""

    emoji: str
    total: int
    users: list[UserTally] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "emoji": self.emoji,
            "total": self.total,
            "users": [u.to_dict() for u in self.users],
        }
