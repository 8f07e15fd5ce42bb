"""In-process store transport.

InMemoryTransport implements the full transport contract, including
watch-on-commit semantics, without a Redis server. It is used by the test
suite and is handy for local development of entity runtimes.

Every write bumps a per-key version counter. A transaction records the
versions of its watched keys when it begins; commit compares them and either
applies every staged operation or none. Commit never awaits between the
check and the last write, so it is atomic with respect to other coroutines.
"""

from collections.abc import Collection
from dataclasses import dataclass, field

from redis_journal.transport.base import CommitOutcome, Score, ScoredValue


@dataclass(slots=True)
class _SortedInsert:
    key: str
    score: int
    value: bytes


@dataclass(slots=True)
class _Set:
    key: str
    value: bytes


@dataclass
class _KeySpace:
    sorted_sets: dict[str, dict[int, bytes]] = field(default_factory=dict)
    scalars: dict[str, bytes] = field(default_factory=dict)
    versions: dict[str, int] = field(default_factory=dict)

    def touch(self, key: str) -> None:
        self.versions[key] = self.versions.get(key, 0) + 1


class InMemoryTransaction:
    """Transaction against an InMemoryTransport's key space."""

    def __init__(self, space: _KeySpace, watch_keys: Collection[str]) -> None:
        self._space = space
        self._watched = {key: space.versions.get(key, 0) for key in watch_keys}
        self._staged: list[_SortedInsert | _Set] = []
        self._finished = False

    def stage_sorted_insert(self, key: str, score: int, value: bytes) -> None:
        self._ensure_open()
        self._staged.append(_SortedInsert(key, score, value))

    def stage_set(self, key: str, value: bytes) -> None:
        self._ensure_open()
        self._staged.append(_Set(key, value))

    async def commit(self) -> CommitOutcome:
        self._ensure_open()
        self._finished = True
        space = self._space
        if any(space.versions.get(key, 0) != version for key, version in self._watched.items()):
            self._staged.clear()
            return CommitOutcome.ABORTED

        for op in self._staged:
            if isinstance(op, _SortedInsert):
                space.sorted_sets.setdefault(op.key, {})[op.score] = op.value
            else:
                space.scalars[op.key] = op.value
            space.touch(op.key)
        self._staged.clear()
        return CommitOutcome.COMMITTED

    async def abort(self) -> None:
        self._finished = True
        self._staged.clear()

    def _ensure_open(self) -> None:
        if self._finished:
            msg = "Transaction already committed or aborted"
            raise RuntimeError(msg)


class InMemoryTransport:
    """Store transport backed by in-process dictionaries.

    Usage:
        transport = InMemoryTransport()
        journal = EventJournal(transport)
    """

    def __init__(self) -> None:
        self._space = _KeySpace()

    async def begin_transaction(self, watch_keys: Collection[str]) -> InMemoryTransaction:
        return InMemoryTransaction(self._space, watch_keys)

    async def sorted_range_query(
        self,
        key: str,
        score_min: Score,
        score_max: Score,
        limit: tuple[int, int] | None = None,
    ) -> list[ScoredValue]:
        entries = self._space.sorted_sets.get(key, {})
        matches = [
            ScoredValue(score, entries[score])
            for score in sorted(entries)
            if score_min <= score <= score_max
        ]
        if limit is not None:
            offset, count = limit
            matches = matches[offset:] if count < 0 else matches[offset : offset + count]
        return matches

    async def sorted_range_remove(self, key: str, score_min: Score, score_max: Score) -> int:
        entries = self._space.sorted_sets.get(key)
        if not entries:
            return 0
        doomed = [score for score in entries if score_min <= score <= score_max]
        for score in doomed:
            del entries[score]
        if not entries:
            del self._space.sorted_sets[key]
        if doomed:
            self._space.touch(key)
        return len(doomed)

    async def get(self, key: str) -> bytes | None:
        return self._space.scalars.get(key)

    async def close(self) -> None:
        return None
