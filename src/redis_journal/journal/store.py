"""EventJournal: write, replay, truncate and high-water-mark operations.

Each persistence id owns a sorted set of encoded records, scored by
sequence_nr, and a scalar high-water mark. A batch write is made atomic by
staging the record inserts and the high-water-mark update in one optimistic
transaction that watches the high-water-mark key. Every writer of the same
id touches that key, so two racing batches cannot both commit.

All operations return Result values; nothing here retries or suppresses a
failure.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
import inspect

from redis_journal.core.errors import (
    DecodingError,
    EncodingError,
    JournalError,
    OptimisticConflictError,
    TransportError,
    ValidationError,
)
from redis_journal.core.types import PersistenceId, Result, SequenceNr
from redis_journal.journal.codec import JsonRecordCodec, RecordCodec
from redis_journal.journal.keys import highest_sequence_nr_key, journal_key
from redis_journal.journal.record import AtomicBatch, EventRecord
from redis_journal.observability.logging import get_logger
from redis_journal.transport.base import CommitOutcome, StoreTransport, Transaction

log = get_logger(__name__)

ReplaySink = Callable[[EventRecord], None | Awaitable[None]]
"""Receives replayed records in ascending sequence_nr order."""


class EventJournal:
    """Event journal over a StoreTransport.

    Holds no mutable state between calls, so one instance can serve any
    number of concurrent callers and persistence ids.

    Usage:
        journal = EventJournal(RedisTransport.from_config(config.redis))

        batch = AtomicBatch.of("acct-1", [EventRecord(sequence_nr=1, payload=b"...")])
        result = await journal.write_batch(batch)

        await journal.replay("acct-1", 1, 100, 1000, state.apply)
        highest = (await journal.highest_sequence_nr("acct-1")).unwrap()
    """

    def __init__(self, transport: StoreTransport, codec: RecordCodec | None = None) -> None:
        """Initialize the journal.

        Args:
            transport: Store transport holding the journals.
            codec: Record codec. Defaults to the JVM-compatible JSON codec.
        """
        self._transport = transport
        self._codec = codec or JsonRecordCodec()

    async def write_batch(self, batch: AtomicBatch) -> Result[None, JournalError]:
        """Write one batch atomically.

        Steps:
        1. Encode every record; any failure rejects the batch untouched.
        2. Begin a transaction watching the high-water-mark key.
        3. Stage one sorted insert per record, in batch order.
        4. Stage the high-water-mark update.
        5. Commit.

        Args:
            batch: Records of a single persistence id.

        Returns:
            Result.ok(None) once the store acknowledged the commit, otherwise
            Result.err with EncodingError, OptimisticConflictError or
            TransportError. No retry is attempted.
        """
        pid = batch.persistence_id
        try:
            log_key = journal_key(pid)
            mark_key = highest_sequence_nr_key(pid)
        except ValidationError as e:
            return Result.err(e)

        encoded: list[tuple[int, bytes]] = []
        for record in batch.records:
            try:
                encoded.append((record.sequence_nr, self._codec.encode(record)))
            except Exception as e:
                error = _as_encoding_error(e, pid, record.sequence_nr)
                log.error(
                    "journal.batch.encoding_failed",
                    persistence_id=pid,
                    sequence_nr=record.sequence_nr,
                    error=error.message,
                )
                return Result.err(error)

        transaction: Transaction | None = None
        try:
            transaction = await self._transport.begin_transaction([mark_key])
            for sequence_nr, value in encoded:
                transaction.stage_sorted_insert(log_key, sequence_nr, value)
            transaction.stage_set(mark_key, str(batch.highest_sequence_nr).encode("ascii"))
            outcome = await transaction.commit()
        except Exception as e:
            if transaction is not None:
                await self._abort_quietly(transaction, pid)
            error = _as_transport_error(e, "write_batch")
            log.warning(
                "journal.batch.transport_failed",
                persistence_id=pid,
                batch_size=batch.size,
                error=str(error),
            )
            return Result.err(error)

        if outcome is CommitOutcome.ABORTED:
            log.info(
                "journal.batch.conflict",
                persistence_id=pid,
                batch_size=batch.size,
                highest_sequence_nr=batch.highest_sequence_nr,
            )
            return Result.err(
                OptimisticConflictError(
                    f"Concurrent write to journal {pid!r} rejected the batch",
                    persistence_id=pid,
                    watched_keys=[mark_key],
                    details={"highest_sequence_nr": batch.highest_sequence_nr},
                )
            )

        log.debug(
            "journal.batch.committed",
            persistence_id=pid,
            batch_size=batch.size,
            highest_sequence_nr=batch.highest_sequence_nr,
        )
        return Result.ok(None)

    async def write_many(
        self, batches: Sequence[AtomicBatch]
    ) -> list[Result[None, JournalError]]:
        """Write independent batches concurrently.

        A failing batch never affects the others; its failure is reported at
        its own position.

        Args:
            batches: Batches to write, typically one per persistence id.

        Returns:
            One Result per input batch, in input order.
        """
        if not batches:
            return []

        outcomes = await asyncio.gather(
            *(self.write_batch(batch) for batch in batches),
            return_exceptions=True,
        )

        results: list[Result[None, JournalError]] = []
        for batch, outcome in zip(batches, outcomes, strict=True):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                log.error(
                    "journal.batch.unexpected_error",
                    persistence_id=batch.persistence_id,
                    error=str(outcome),
                )
                results.append(Result.err(_as_transport_error(outcome, "write_batch")))
            else:
                results.append(outcome)
        return results

    async def replay(
        self,
        persistence_id: PersistenceId,
        from_sequence_nr: SequenceNr,
        to_sequence_nr: SequenceNr,
        max_count: int,
        sink: ReplaySink,
    ) -> Result[int, JournalError]:
        """Deliver stored records in ``[from, to]`` to ``sink``, ascending.

        Performs a single range query capped at ``max_count`` entries. Records
        are decoded one at a time; on the first decoding failure the records
        before it have already reached the sink and the failure is returned.
        Tombstoned records are delivered like any other.

        Args:
            persistence_id: Journal to read.
            from_sequence_nr: Inclusive lower bound, >= 0.
            to_sequence_nr: Inclusive upper bound.
            max_count: Maximum number of records to deliver, >= 0.
            sink: Called once per record; may be sync or async. Exceptions
                  raised by the sink propagate unchanged.

        Returns:
            Result.ok(number of records delivered), or Result.err with
            ValidationError, DecodingError or TransportError.
        """
        if from_sequence_nr < 0:
            return Result.err(
                ValidationError(
                    "from_sequence_nr must be >= 0",
                    field="from_sequence_nr",
                    value=from_sequence_nr,
                )
            )
        if max_count < 0:
            return Result.err(
                ValidationError("max_count must be >= 0", field="max_count", value=max_count)
            )
        try:
            log_key = journal_key(persistence_id)
        except ValidationError as e:
            return Result.err(e)

        if max_count == 0 or to_sequence_nr < from_sequence_nr:
            return Result.ok(0)

        try:
            entries = await self._transport.sorted_range_query(
                log_key, from_sequence_nr, to_sequence_nr, limit=(0, max_count)
            )
        except Exception as e:
            return Result.err(_as_transport_error(e, "replay"))

        delivered = 0
        for entry in entries:
            try:
                record = self._codec.decode(entry.value)
            except Exception as e:
                error = _as_decoding_error(e, persistence_id, entry.score)
                log.error(
                    "journal.replay.decoding_failed",
                    persistence_id=persistence_id,
                    sequence_nr=entry.score,
                    delivered=delivered,
                    error=error.message,
                )
                return Result.err(error)

            outcome = sink(record)
            if inspect.isawaitable(outcome):
                await outcome
            delivered += 1

        log.debug(
            "journal.replay.completed",
            persistence_id=persistence_id,
            from_sequence_nr=from_sequence_nr,
            to_sequence_nr=to_sequence_nr,
            delivered=delivered,
        )
        return Result.ok(delivered)

    async def delete_to(
        self, persistence_id: PersistenceId, to_sequence_nr: SequenceNr
    ) -> Result[int, JournalError]:
        """Remove every record with sequence_nr <= ``to_sequence_nr``.

        The lower edge is unbounded. The high-water mark is left untouched:
        it keeps reporting the highest sequence_nr ever written.

        Returns:
            Result.ok(number of removed records) or Result.err.
        """
        try:
            log_key = journal_key(persistence_id)
        except ValidationError as e:
            return Result.err(e)

        try:
            removed = await self._transport.sorted_range_remove(
                log_key, float("-inf"), to_sequence_nr
            )
        except Exception as e:
            return Result.err(_as_transport_error(e, "delete_to"))

        log.info(
            "journal.records.deleted",
            persistence_id=persistence_id,
            to_sequence_nr=to_sequence_nr,
            removed=removed,
        )
        return Result.ok(removed)

    async def highest_sequence_nr(
        self, persistence_id: PersistenceId
    ) -> Result[SequenceNr, JournalError]:
        """Read the high-water mark; 0 means nothing was ever written.

        Returns:
            Result.ok(mark), or Result.err with DecodingError when the stored
            value is not a decimal integer, or TransportError.
        """
        try:
            mark_key = highest_sequence_nr_key(persistence_id)
        except ValidationError as e:
            return Result.err(e)

        try:
            raw = await self._transport.get(mark_key)
        except Exception as e:
            return Result.err(_as_transport_error(e, "highest_sequence_nr"))

        if raw is None:
            return Result.ok(0)
        try:
            return Result.ok(int(raw.decode("utf-8")))
        except (UnicodeDecodeError, ValueError) as e:
            error = DecodingError(
                f"High-water mark of {persistence_id!r} is not an integer",
                persistence_id=persistence_id,
                details={"raw": raw[:32].decode("utf-8", "replace")},
            )
            error.__cause__ = e
            return Result.err(error)

    async def close(self) -> None:
        """Close the underlying transport."""
        await self._transport.close()

    @staticmethod
    async def _abort_quietly(transaction: Transaction, persistence_id: str) -> None:
        try:
            await transaction.abort()
        except Exception as e:
            log.warning(
                "journal.batch.abort_failed",
                persistence_id=persistence_id,
                error=str(e),
            )


def _as_transport_error(exc: BaseException, operation: str) -> JournalError:
    """Pass journal errors through; wrap anything else as TransportError."""
    if isinstance(exc, JournalError):
        return exc
    return TransportError.from_exception(exc, operation=operation)


def _as_encoding_error(exc: Exception, persistence_id: str, sequence_nr: int) -> EncodingError:
    if isinstance(exc, EncodingError):
        error = exc
    else:
        error = EncodingError(f"Failed to encode record: {exc}")
        error.__cause__ = exc
    error.persistence_id = persistence_id
    error.sequence_nr = sequence_nr
    return error


def _as_decoding_error(exc: Exception, persistence_id: str, sequence_nr: int) -> DecodingError:
    if isinstance(exc, DecodingError):
        error = exc
    else:
        error = DecodingError(f"Failed to decode record: {exc}")
        error.__cause__ = exc
    error.persistence_id = persistence_id
    error.sequence_nr = sequence_nr
    return error
