"""Store transport contract consumed by the journal.

The journal needs only a handful of primitives from its key-value store:
a sorted container keyed by numeric score, a scalar get/set, and an
optimistic transaction that watches keys and commits staged operations as
one unit. Implementations raise TransportError for connectivity, timeout and
protocol failures.
"""

from collections.abc import Collection
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

Score = int | float
"""Sorted-set score bound. Accepts float("-inf") / float("inf")."""


class CommitOutcome(StrEnum):
    """Outcome of committing an optimistic transaction."""

    COMMITTED = "committed"
    ABORTED = "aborted"  # a watched key changed since the transaction began


@dataclass(frozen=True, slots=True)
class ScoredValue:
    """One sorted-set entry returned by a range query.

    Attributes:
        score: Entry score (the record's sequence_nr).
        value: Raw stored bytes.
    """

    score: int
    value: bytes


class Transaction(Protocol):
    """Optimistic transaction: staged operations applied only if no watched
    key changed since the transaction began."""

    def stage_sorted_insert(self, key: str, score: int, value: bytes) -> None:
        """Stage an insert-or-replace of the entry at ``score`` in ``key``."""
        ...

    def stage_set(self, key: str, value: bytes) -> None:
        """Stage a scalar set of ``key`` to ``value``."""
        ...

    async def commit(self) -> CommitOutcome:
        """Apply all staged operations atomically, or none of them."""
        ...

    async def abort(self) -> None:
        """Discard staged operations and release watches."""
        ...


class StoreTransport(Protocol):
    """Key-value store primitives used by EventJournal."""

    async def begin_transaction(self, watch_keys: Collection[str]) -> Transaction:
        """Start an optimistic transaction watching ``watch_keys``."""
        ...

    async def sorted_range_query(
        self,
        key: str,
        score_min: Score,
        score_max: Score,
        limit: tuple[int, int] | None = None,
    ) -> list[ScoredValue]:
        """Return entries with ``score_min <= score <= score_max`` ascending.

        ``limit`` is ``(offset, count)``. A missing key yields an empty list.
        """
        ...

    async def sorted_range_remove(self, key: str, score_min: Score, score_max: Score) -> int:
        """Remove entries in the inclusive score range; return how many."""
        ...

    async def get(self, key: str) -> bytes | None:
        """Return the scalar stored at ``key``, or None when absent."""
        ...

    async def close(self) -> None:
        """Release connections held by the transport."""
        ...
