"""redis_journal core module - shared types and errors."""

from redis_journal.core.errors import (
    ConfigError,
    DecodingError,
    EncodingError,
    JournalError,
    OptimisticConflictError,
    TransportError,
    ValidationError,
)
from redis_journal.core.types import PersistenceId, Result, SequenceNr

__all__ = [
    # Types
    "Result",
    "PersistenceId",
    "SequenceNr",
    # Errors
    "JournalError",
    "EncodingError",
    "DecodingError",
    "OptimisticConflictError",
    "TransportError",
    "ValidationError",
    "ConfigError",
]
