"""redis_journal journal module - event log write, replay and truncation."""

from redis_journal.journal.codec import JsonRecordCodec, RecordCodec
from redis_journal.journal.keys import highest_sequence_nr_key, journal_key
from redis_journal.journal.record import AtomicBatch, EventRecord
from redis_journal.journal.serialization import (
    PayloadSerializer,
    PydanticPayloadSerializer,
    from_record,
    to_record,
)
from redis_journal.journal.store import EventJournal, ReplaySink

__all__ = [
    # Data model
    "EventRecord",
    "AtomicBatch",
    # Codec
    "RecordCodec",
    "JsonRecordCodec",
    # Payload serialization
    "PayloadSerializer",
    "PydanticPayloadSerializer",
    "to_record",
    "from_record",
    # Keys
    "journal_key",
    "highest_sequence_nr_key",
    # Journal
    "EventJournal",
    "ReplaySink",
]
