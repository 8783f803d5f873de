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
Reaction counter package.

Counts emoji reactions per day, per reaction and per user, and ranks
them over a sliding window of days.
"""

from .config import CounterConfig
from .errors import (
    CounterError,
    TransientError,
    StoreUnavailableError,
    ConcurrencyResolved,
    InvalidEvent,
    InvalidQuery,
)
from .models import (
    ReactionKind,
    ReportView,
    ReactionEvent,
    DailyReactionRecord,
    ReactionRank,
    ReactionTally,
    UserRank,
    UserTally,
    EmojiBreakdown,
)
from .retry import RetryPolicy
from .store import BaseCounterStore, CounterStore
from .memory_store import InMemoryCounterStore
from .ingestor import EventIngestor
from .aggregator import AggregationEngine

__all__ = [
    "CounterConfig",
    "CounterError",
    "TransientError",
    "StoreUnavailableError",
    "ConcurrencyResolved",
    "InvalidEvent",
    "InvalidQuery",
    "ReactionKind",
    "ReportView",
    "ReactionEvent",
    "DailyReactionRecord",
    "ReactionRank",
    "ReactionTally",
    "UserRank",
    "UserTally",
    "EmojiBreakdown",
    "RetryPolicy",
    "BaseCounterStore",
    "CounterStore",
    "InMemoryCounterStore",
    "EventIngestor",
    "AggregationEngine",
]
