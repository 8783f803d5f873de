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
Reaction event ingestion.

Validates add/remove events, buckets them by the day they happened,
and applies them to the counter store. Stateless: any number of
ingest calls may run concurrently.
"""

import logging
from datetime import date
from typing import Any, Optional

from .config import CounterConfig
from .days import day_bucket, format_day, parse_timestamp
from .errors import InvalidEvent
from .models import ReactionEvent, ReactionKind
from .store import BaseCounterStore

logger = logging.getLogger("emojireport.counters.ingestor")


class EventIngestor:
    """Applies reaction events to a counter store."""

    def __init__(self, store: BaseCounterStore, config: Optional[CounterConfig] = None):
        """
        Initialize the ingestor.

        Args:
            store: Counter store shared with the aggregation engine
            config: Counter configuration (reference timezone); defaults to the store's
        """
        self.store = store
        self.config = config or store.config

    def bucket_for(self, event: ReactionEvent) -> date:
        """
        Validate an event and return its day bucket.

        Raises:
            InvalidEvent: If the event is missing fields or has a bad timestamp
        """
        if not isinstance(event.kind, ReactionKind):
            raise InvalidEvent(f"Unknown event kind: {event.kind!r}")
        if not isinstance(event.reaction_name, str) or not event.reaction_name.strip():
            raise InvalidEvent("Event has no reaction name")
        if not isinstance(event.user_id, str) or not event.user_id.strip():
            raise InvalidEvent("Event has no user id")
        try:
            seconds = parse_timestamp(event.timestamp)
            return day_bucket(seconds, self.config.timezone)
        except (TypeError, ValueError, OverflowError, OSError) as e:
            raise InvalidEvent(f"Unparsable timestamp {event.timestamp!r}") from e

    async def ingest(self, event: ReactionEvent) -> None:
        """
        Apply one reaction event.

        Adds are always counted (repeats are not deduplicated). Removes
        with nothing to remove are absorbed by the store.

        Raises:
            InvalidEvent: Rejected before touching the store
            StoreUnavailableError: The store stayed unavailable through all retries
        """
        try:
            day = self.bucket_for(event)
        except InvalidEvent as e:
            logger.warning(f"Dropping invalid reaction event: {e}")
            raise

        reaction = event.reaction_name.strip()
        user_id = event.user_id.strip()

        if event.kind is ReactionKind.ADDED:
            await self.store.record_add(day, reaction, user_id)
        else:
            await self.store.record_remove(day, reaction, user_id)

        logger.debug(f"Ingested {event.kind.value} {reaction} by {user_id} on {format_day(day)}")

    async def ingest_payload(self, payload: dict[str, Any]) -> None:
        """
        Apply an event given in wire form.

        Expects ``{kind, timestampSeconds, reactionName, userId}``.

        Raises:
            InvalidEvent: If the payload cannot be turned into an event
        """
        try:
            event = ReactionEvent.from_dict(payload)
        except (AttributeError, ValueError) as e:
            logger.warning(f"Dropping malformed reaction payload: {e}")
            raise InvalidEvent(f"Malformed reaction payload: {e}") from e
        await self.ingest(event)
