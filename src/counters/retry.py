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
Bounded exponential backoff for store round-trips.

Only TransientError is retried. Everything else propagates on the
first failure.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from .config import CounterConfig
from .errors import StoreUnavailableError, TransientError

logger = logging.getLogger("emojireport.counters.retry")

T = TypeVar("T")


class RetryPolicy:
    """
    Retries an async operation on TransientError.

    Delays double from ``base_delay`` (0.3s, 0.6s, 1.2s, ...) until
    ``max_attempts`` is reached. If ``deadline`` is set, it bounds the
    whole loop: an attempt still running at the deadline is cancelled,
    and no sleep is started that would end past it.
    """

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 0.3,
        deadline: Optional[float] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.deadline = deadline

    @classmethod
    def from_config(cls, config: CounterConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            base_delay=config.base_delay_seconds,
            deadline=config.deadline_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return self.base_delay * (2 ** (attempt - 1))

    async def run(self, operation: Callable[[], Awaitable[T]], description: str) -> T:
        """
        Run ``operation`` until it succeeds or retries run out.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            description: Used in log messages and the final error

        Raises:
            StoreUnavailableError: On exhaustion, chained to the last TransientError,
                or when the deadline passes
        """
        loop = asyncio.get_running_loop()
        started = loop.time()

        for attempt in range(1, self.max_attempts + 1):
            try:
                if self.deadline is None:
                    return await operation()
                remaining = self.deadline - (loop.time() - started)
                return await asyncio.wait_for(operation(), max(remaining, 0))
            except asyncio.TimeoutError as e:
                logger.error(
                    f"{description} abandoned during attempt {attempt}: "
                    f"deadline of {self.deadline}s reached"
                )
                raise StoreUnavailableError(description, attempt) from e
            except TransientError as e:
                if attempt == self.max_attempts:
                    logger.error(f"{description} failed after {attempt} attempts: {e}")
                    raise StoreUnavailableError(description, attempt) from e

                delay = self.delay_for(attempt)
                if self.deadline is not None and loop.time() - started + delay > self.deadline:
                    logger.error(
                        f"{description} abandoned after {attempt} attempts: "
                        f"deadline of {self.deadline}s reached"
                    )
                    raise StoreUnavailableError(description, attempt) from e

                logger.warning(
                    f"{description} attempt {attempt}/{self.max_attempts} failed: {e}; "
                    f"retrying in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        # Unreachable: the loop either returns or raises
        raise StoreUnavailableError(description, self.max_attempts)
