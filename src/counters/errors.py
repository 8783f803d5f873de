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

"""Exceptions raised by the reaction counter core."""


class CounterError(Exception):
    """Base class for reaction counter errors."""

    pass


class TransientError(CounterError):
    """The backing store is unavailable or throttling. Safe to retry."""

    pass


class StoreUnavailableError(CounterError):
    """Retries were exhausted (or the deadline passed) on a transient failure."""

    def __init__(self, operation: str, attempts: int):
        self.operation = operation
        self.attempts = attempts
        super().__init__(f"{operation} failed after {attempts} attempt(s)")


class ConcurrencyResolved(CounterError):
    """
    A conditional write was rejected by the store.

    Raised and caught inside the store only: a rejected create means the
    record already exists, a rejected decrement means there was nothing
    to remove.
    """

    pass


class InvalidEvent(CounterError):
    """Raised when a reaction event is missing fields or has a bad timestamp."""

    pass


class InvalidQuery(CounterError):
    """Raised when an aggregation query has an invalid window or filter."""

    pass
