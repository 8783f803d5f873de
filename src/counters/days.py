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
Day bucket helpers.

Counters are partitioned by calendar day in a fixed reference timezone.
The bucket comes from the event's own timestamp so that late deliveries
still land on the day the reaction happened.
"""

import math
from datetime import date, datetime, timedelta
from typing import Union

import pytz

DAY_FORMAT = "%Y-%m-%d"


def validate_timezone(tz_name: str) -> bool:
    """Check whether a timezone name is known to pytz."""
    try:
        pytz.timezone(tz_name)
        return True
    except pytz.UnknownTimeZoneError:
        return False


def parse_timestamp(value: Union[int, float, str]) -> float:
    """
    Parse a unix timestamp in seconds.

    Accepts numbers and numeric strings ("1600000000.000100").

    Raises:
        ValueError: If the value is not a finite, non-negative number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, str):
        value = value.strip()
    seconds = float(value)
    if not math.isfinite(seconds) or seconds < 0:
        raise ValueError(f"Not a timestamp: {value!r}")
    return seconds


def day_bucket(timestamp: float, tz_name: str = "UTC") -> date:
    """Return the calendar day a unix timestamp falls on in the given timezone."""
    # Millisecond precision, matching how event timestamps are reported
    seconds = round(timestamp * 1000) / 1000
    return datetime.fromtimestamp(seconds, tz=pytz.timezone(tz_name)).date()


def current_day(tz_name: str = "UTC") -> date:
    """Today's date in the given timezone."""
    return datetime.now(pytz.timezone(tz_name)).date()


def window_days(today: date, num_days: int) -> list[date]:
    """The most recent ``num_days`` days, newest first, including today."""
    return [today - timedelta(days=i) for i in range(num_days)]


def format_day(day: date) -> str:
    return day.strftime(DAY_FORMAT)
