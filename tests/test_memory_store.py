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

"""Concurrency tests for counter semantics, run against the in-memory store."""

import asyncio
import random
import sys
from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from counters.config import CounterConfig
from counters.errors import ConcurrencyResolved
from counters.memory_store import InMemoryCounterStore

DAY = date(2024, 5, 10)


@pytest.fixture
def store():
    return InMemoryCounterStore(CounterConfig(base_delay_seconds=0))


class TestCreation:
    """Test first-writer-wins record creation."""

    @pytest.mark.asyncio
    async def test_concurrent_first_adds_create_one_record(self, store):
        results = await asyncio.gather(
            *(store.record_add(DAY, "tada", f"U{i}") for i in range(20))
        )

        assert results.count(True) == 1
        assert len(store) == 1
        record = store.get_record(DAY, "tada")
        assert record.count == 20
        assert record.user_counts == {f"U{i}": 1 for i in range(20)}

    @pytest.mark.asyncio
    async def test_concurrent_adds_by_one_user(self, store):
        await asyncio.gather(*(store.record_add(DAY, "tada", "U1") for _ in range(10)))

        record = store.get_record(DAY, "tada")
        assert record.count == 10
        assert record.user_counts == {"U1": 10}

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, store):
        await asyncio.gather(
            store.record_add(DAY, "tada", "U1"),
            store.record_add(DAY, "fire", "U1"),
            store.record_add(date(2024, 5, 9), "tada", "U1"),
        )

        assert len(store) == 3
        assert store.get_record(DAY, "tada").count == 1
        assert store.get_record(DAY, "fire").count == 1

    @pytest.mark.asyncio
    async def test_add_lost_between_create_and_increment_is_counted(self, store):
        real_create = store._create
        calls = []

        # First create reports a conflict although no record exists yet
        async def create_rejected_once(day, reaction, user_id):
            calls.append(reaction)
            if len(calls) == 1:
                raise ConcurrencyResolved("exists")
            await real_create(day, reaction, user_id)

        with patch.object(store, "_create", create_rejected_once):
            created = await store.record_add(DAY, "tada", "U1")

        assert created is True
        assert len(calls) == 2
        assert store.get_record(DAY, "tada").user_counts == {"U1": 1}


class TestRemoval:
    """Test that removals never go below zero."""

    @pytest.mark.asyncio
    async def test_remove_without_record_is_noop(self, store):
        assert await store.record_remove(DAY, "tada", "U1") is False
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_remove_by_other_user_is_noop(self, store):
        await store.record_add(DAY, "tada", "U1")

        assert await store.record_remove(DAY, "tada", "U2") is False
        record = store.get_record(DAY, "tada")
        assert record.count == 1
        assert record.user_counts == {"U1": 1}

    @pytest.mark.asyncio
    async def test_record_survives_removal_to_zero(self, store):
        await store.record_add(DAY, "tada", "U1")
        assert await store.record_remove(DAY, "tada", "U1") is True

        record = store.get_record(DAY, "tada")
        assert record.count == 0
        assert record.user_counts == {"U1": 0}

    @pytest.mark.asyncio
    async def test_concurrent_excess_removes_stop_at_zero(self, store):
        for _ in range(3):
            await store.record_add(DAY, "tada", "U1")

        results = await asyncio.gather(
            *(store.record_remove(DAY, "tada", "U1") for _ in range(10))
        )

        assert results.count(True) == 3
        record = store.get_record(DAY, "tada")
        assert record.count == 0
        assert record.user_counts["U1"] == 0

    @pytest.mark.asyncio
    async def test_concurrent_adds_then_removes(self, store):
        await asyncio.gather(*(store.record_add(DAY, "tada", "U1") for _ in range(12)))
        await asyncio.gather(*(store.record_remove(DAY, "tada", "U1") for _ in range(7)))

        record = store.get_record(DAY, "tada")
        assert record.count == 5
        assert record.user_counts == {"U1": 5}


class TestInterleavings:
    """N adds and M <= N removes leave N - M, whatever the order."""

    @staticmethod
    def interleaving(adds: int, removes: int, rng: random.Random) -> list[str]:
        """A random order in which no remove outruns the adds before it."""
        ops, pending_adds, pending_removes, balance = [], adds, removes, 0
        while pending_adds or pending_removes:
            can_remove = pending_removes and balance > 0
            if pending_adds and (not can_remove or rng.random() < 0.5):
                ops.append("add")
                pending_adds -= 1
                balance += 1
            else:
                ops.append("remove")
                pending_removes -= 1
                balance -= 1
        return ops

    @pytest.mark.asyncio
    async def test_random_interleavings(self):
        rng = random.Random(1234)
        for _ in range(25):
            store = InMemoryCounterStore(CounterConfig(base_delay_seconds=0))
            adds = rng.randint(1, 15)
            removes = rng.randint(0, adds)

            for op in self.interleaving(adds, removes, rng):
                if op == "add":
                    await store.record_add(DAY, "tada", "U1")
                else:
                    assert await store.record_remove(DAY, "tada", "U1") is True

            record = store.get_record(DAY, "tada")
            assert record.count == adds - removes
            assert record.user_counts["U1"] == adds - removes

    @pytest.mark.asyncio
    async def test_concurrent_mixed_users_never_negative(self, store):
        ops = []
        for i in range(5):
            ops += [store.record_add(DAY, "tada", f"U{i}") for _ in range(4)]
            ops += [store.record_remove(DAY, "tada", f"U{i}") for _ in range(6)]
        random.Random(99).shuffle(ops)

        await asyncio.gather(*ops)

        record = store.get_record(DAY, "tada")
        assert all(count >= 0 for count in record.user_counts.values())
        assert record.count == sum(record.user_counts.values())


class TestQueryDay:
    """Test in-memory day reads."""

    @pytest.mark.asyncio
    async def test_filters_sorts_and_copies(self, store):
        await store.record_add(DAY, "tada", "U1")
        await store.record_add(DAY, "fire", "U2")
        await store.record_add(date(2024, 5, 9), "fire", "U3")

        records = await store.query_day(DAY)
        assert [r.reaction_name for r in records] == ["fire", "tada"]

        records[0].user_counts["U2"] = 100
        assert store.get_record(DAY, "fire").user_counts == {"U2": 1}

        only_fire = await store.query_day(DAY, "fire")
        assert [(r.reaction_name, r.count) for r in only_fire] == [("fire", 1)]

    @pytest.mark.asyncio
    async def test_page_size_caps_results(self):
        store = InMemoryCounterStore(CounterConfig(page_size=2, base_delay_seconds=0))
        for name in ("a", "b", "c"):
            await store.record_add(DAY, name, "U1")

        records = await store.query_day(DAY)
        assert [r.reaction_name for r in records] == ["a", "b"]
