"""Unit tests for redis_journal.transport.memory module."""

import pytest

from redis_journal.transport.base import CommitOutcome, ScoredValue
from redis_journal.transport.memory import InMemoryTransport


async def seed(transport: InMemoryTransport, key: str, scores: list[int]) -> None:
    transaction = await transport.begin_transaction([])
    for score in scores:
        transaction.stage_sorted_insert(key, score, f"v{score}".encode())
    assert await transaction.commit() is CommitOutcome.COMMITTED


class TestInMemoryTransaction:
    """Test watch-on-commit semantics."""

    async def test_commit_applies_staged_operations(self, transport: InMemoryTransport) -> None:
        transaction = await transport.begin_transaction(["mark"])
        transaction.stage_sorted_insert("log", 1, b"a")
        transaction.stage_set("mark", b"1")

        assert await transaction.commit() is CommitOutcome.COMMITTED
        assert await transport.get("mark") == b"1"
        assert await transport.sorted_range_query("log", 0, 10) == [ScoredValue(1, b"a")]

    async def test_commit_aborts_when_watched_key_changed(
        self, transport: InMemoryTransport
    ) -> None:
        """Nothing staged becomes visible after an abort."""
        transaction = await transport.begin_transaction(["mark"])
        transaction.stage_sorted_insert("log", 1, b"a")
        transaction.stage_set("mark", b"1")
        await transport.set("mark", b"99")

        assert await transaction.commit() is CommitOutcome.ABORTED
        assert await transport.get("mark") == b"99"
        assert await transport.sorted_range_query("log", 0, 10) == []

    async def test_committed_transaction_invalidates_other_watchers(
        self, transport: InMemoryTransport
    ) -> None:
        first = await transport.begin_transaction(["mark"])
        second = await transport.begin_transaction(["mark"])
        first.stage_set("mark", b"1")
        second.stage_set("mark", b"2")

        assert await first.commit() is CommitOutcome.COMMITTED
        assert await second.commit() is CommitOutcome.ABORTED
        assert await transport.get("mark") == b"1"

    async def test_unwatched_changes_do_not_abort(self, transport: InMemoryTransport) -> None:
        transaction = await transport.begin_transaction(["mark-a"])
        transaction.stage_set("mark-a", b"1")
        await transport.set("mark-b", b"1")

        assert await transaction.commit() is CommitOutcome.COMMITTED

    async def test_insert_replaces_entry_at_same_score(
        self, transport: InMemoryTransport
    ) -> None:
        await seed(transport, "log", [1])
        transaction = await transport.begin_transaction([])
        transaction.stage_sorted_insert("log", 1, b"replacement")
        await transaction.commit()

        assert await transport.sorted_range_query("log", 1, 1) == [
            ScoredValue(1, b"replacement")
        ]

    async def test_transaction_cannot_be_reused(self, transport: InMemoryTransport) -> None:
        transaction = await transport.begin_transaction([])
        await transaction.commit()

        with pytest.raises(RuntimeError):
            transaction.stage_set("k", b"v")
        with pytest.raises(RuntimeError):
            await transaction.commit()

    async def test_abort_discards_staged_operations(self, transport: InMemoryTransport) -> None:
        transaction = await transport.begin_transaction([])
        transaction.stage_set("k", b"v")
        await transaction.abort()

        assert await transport.get("k") is None


class TestInMemoryRangeOperations:
    """Test sorted range query and removal."""

    async def test_range_query_is_inclusive_and_ascending(
        self, transport: InMemoryTransport
    ) -> None:
        await seed(transport, "log", [5, 1, 3, 2, 4])

        entries = await transport.sorted_range_query("log", 2, 4)

        assert [e.score for e in entries] == [2, 3, 4]

    async def test_range_query_limit(self, transport: InMemoryTransport) -> None:
        await seed(transport, "log", [1, 2, 3, 4, 5])

        assert [e.score for e in await transport.sorted_range_query("log", 0, 10, (1, 2))] == [
            2,
            3,
        ]
        assert len(await transport.sorted_range_query("log", 0, 10, (0, -1))) == 5

    async def test_range_query_missing_key(self, transport: InMemoryTransport) -> None:
        assert await transport.sorted_range_query("missing", 0, 10) == []

    async def test_range_remove_with_infinite_lower_bound(
        self, transport: InMemoryTransport
    ) -> None:
        await seed(transport, "log", [1, 2, 3])

        removed = await transport.sorted_range_remove("log", float("-inf"), 2)

        assert removed == 2
        assert [e.score for e in await transport.sorted_range_query("log", 0, 10)] == [3]

    async def test_range_remove_missing_key(self, transport: InMemoryTransport) -> None:
        assert await transport.sorted_range_remove("missing", 0, 10) == 0

    async def test_get_missing_key(self, transport: InMemoryTransport) -> None:
        assert await transport.get("missing") is None


class TestInMemoryTransportSurface:
    def test_public_methods_match_store_transport(self) -> None:
        """Only the StoreTransport operations are public."""
        public = {name for name in dir(InMemoryTransport) if not name.startswith("_")}

        assert public == {
            "begin_transaction",
            "sorted_range_query",
            "sorted_range_remove",
            "get",
            "close",
        }
