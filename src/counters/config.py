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
Reaction Counter Configuration

Storage, bucketing, retry and reporting parameters.
Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class CounterConfig:
    """Configuration for the reaction counter."""

    # Storage settings
    table_name: str = "daily_reaction_counts"
    page_size: int = 1000  # Records per day read; no pagination past this

    # Day buckets are computed in this timezone
    timezone: str = "UTC"

    # Retry settings (per store round-trip)
    max_attempts: int = 5
    base_delay_seconds: float = 0.3
    deadline_seconds: Optional[float] = None

    # Reporting settings
    default_window_days: int = 7
    report_limit: int = 10

    @classmethod
    def from_env(cls) -> "CounterConfig":
        """Create config from environment variables with defaults."""
        deadline = os.getenv("REACTIONS_DEADLINE_SECONDS")
        return cls(
            table_name=os.getenv("REACTIONS_TABLE_NAME", "daily_reaction_counts"),
            page_size=int(os.getenv("REACTIONS_PAGE_SIZE", "1000")),
            timezone=os.getenv("REACTIONS_TIMEZONE", "UTC"),
            max_attempts=int(os.getenv("REACTIONS_MAX_ATTEMPTS", "5")),
            base_delay_seconds=float(os.getenv("REACTIONS_RETRY_BASE_DELAY", "0.3")),
            deadline_seconds=float(deadline) if deadline else None,
            default_window_days=int(os.getenv("REACTIONS_DEFAULT_DAYS", "7")),
            report_limit=int(os.getenv("REACTIONS_REPORT_LIMIT", "10")),
        )
