"""redis_journal - event-sourcing journal storage on Redis.

Persists ordered, per-entity event logs into Redis sorted sets, with
all-or-nothing batch writes built on optimistic (WATCH/MULTI/EXEC)
transactions.

Example:
    from redis_journal import AtomicBatch, EventJournal, EventRecord, RedisTransport
    from redis_journal.config import RedisConfig

    journal = EventJournal(RedisTransport.from_config(RedisConfig()))
    await journal.write_batch(
        AtomicBatch.of("acct-1", [EventRecord(sequence_nr=1, payload=b"opened")])
    )
"""

from redis_journal.core import (
    DecodingError,
    EncodingError,
    JournalError,
    OptimisticConflictError,
    Result,
    TransportError,
    ValidationError,
)
from redis_journal.journal import AtomicBatch, EventJournal, EventRecord, JsonRecordCodec
from redis_journal.transport import InMemoryTransport, RedisTransport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "main",
    # Journal
    "EventJournal",
    "EventRecord",
    "AtomicBatch",
    "JsonRecordCodec",
    # Transports
    "RedisTransport",
    "InMemoryTransport",
    # Results and errors
    "Result",
    "JournalError",
    "EncodingError",
    "DecodingError",
    "OptimisticConflictError",
    "TransportError",
    "ValidationError",
]


def main() -> None:
    """Main entry point for the redis-journal CLI."""
    from redis_journal.cli.main import app

    app()
