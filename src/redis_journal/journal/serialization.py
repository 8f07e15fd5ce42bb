"""Payload serializers for the embedding application's event types.

The journal stores payloads as opaque bytes. These helpers let an entity
runtime turn its own event type into an EventRecord and back, reporting
failures with the journal's error types.

Usage:
    class Deposited(BaseModel):
        amount: int

    serializer = PydanticPayloadSerializer(Deposited)
    record = to_record(1, Deposited(amount=10), serializer)
    event = from_record(record, serializer)
"""

from typing import Protocol

from pydantic import BaseModel

from redis_journal.core.errors import DecodingError, EncodingError
from redis_journal.journal.record import EventRecord


class PayloadSerializer[T](Protocol):
    """Converts application events to payload bytes and back."""

    def to_bytes(self, event: T) -> bytes: ...

    def from_bytes(self, data: bytes) -> T: ...


class PydanticPayloadSerializer[M: BaseModel]:
    """Serializes a Pydantic model class as UTF-8 JSON."""

    def __init__(self, model: type[M]) -> None:
        self._model = model

    def to_bytes(self, event: M) -> bytes:
        if not isinstance(event, self._model):
            msg = f"Expected {self._model.__name__}, got {type(event).__name__}"
            raise TypeError(msg)
        return event.model_dump_json().encode("utf-8")

    def from_bytes(self, data: bytes) -> M:
        return self._model.model_validate_json(data)


def to_record[T](
    sequence_nr: int,
    event: T,
    serializer: PayloadSerializer[T],
    *,
    deleted: bool = False,
) -> EventRecord:
    """Serialize an application event into an EventRecord.

    Raises:
        EncodingError: If the serializer fails.
    """
    try:
        payload = serializer.to_bytes(event)
    except Exception as e:
        raise EncodingError(
            f"Failed to serialize event: {e}",
            sequence_nr=sequence_nr,
            details={"event_type": type(event).__name__},
        ) from e
    return EventRecord(sequence_nr=sequence_nr, payload=payload, deleted=deleted)


def from_record[T](record: EventRecord, serializer: PayloadSerializer[T]) -> T:
    """Deserialize the payload of a replayed EventRecord.

    Raises:
        DecodingError: If the serializer fails.
    """
    try:
        return serializer.from_bytes(record.payload)
    except Exception as e:
        raise DecodingError(
            f"Failed to deserialize event: {e}",
            sequence_nr=record.sequence_nr,
        ) from e
