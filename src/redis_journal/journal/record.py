"""Journal data model.

EventRecord is the durable unit stored in a journal; AtomicBatch groups the
records of one persistence id that must become visible all together or not
at all. Both are immutable (frozen Pydantic models).
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from redis_journal.core.errors import ValidationError


class EventRecord(BaseModel, frozen=True):
    """One event in a persistence id's journal.

    Attributes:
        sequence_nr: Position of the event in its journal, starting at 1.
        payload: Opaque bytes produced by the embedding application's
                 serializer. Never inspected by the journal.
        deleted: Tombstone marker. Stored and replayed as-is.

    Example:
        record = EventRecord(sequence_nr=1, payload=b'{"amount": 10}')
    """

    sequence_nr: int = Field(ge=1)
    payload: bytes
    deleted: bool = False


class AtomicBatch(BaseModel, frozen=True):
    """Records for exactly one persistence id, written all-or-nothing.

    Attributes:
        persistence_id: Journal the records belong to.
        records: Non-empty, ordered records. Staged in this order.
        highest_sequence_nr: Value the high-water mark is set to when the
                             batch commits. Must cover every record.
    """

    persistence_id: str = Field(min_length=1)
    records: tuple[EventRecord, ...] = Field(min_length=1)
    highest_sequence_nr: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_highest_covers_records(self) -> "AtomicBatch":
        top = max(record.sequence_nr for record in self.records)
        if self.highest_sequence_nr < top:
            msg = (
                f"highest_sequence_nr ({self.highest_sequence_nr}) is below "
                f"the batch's largest sequence_nr ({top})"
            )
            raise ValueError(msg)
        return self

    @classmethod
    def of(
        cls,
        persistence_id: str,
        records: Iterable[EventRecord],
        highest_sequence_nr: int | None = None,
    ) -> "AtomicBatch":
        """Build a batch, defaulting the claimed high-water mark.

        Args:
            persistence_id: Journal the records belong to.
            records: Records in write order.
            highest_sequence_nr: Claimed high-water mark. Defaults to the
                largest sequence_nr among ``records``.

        Returns:
            A validated AtomicBatch.

        Raises:
            ValidationError: If the id is empty, there are no records, or the
                claimed high-water mark does not cover the records.
        """
        records = tuple(records)
        if highest_sequence_nr is None and records:
            highest_sequence_nr = max(record.sequence_nr for record in records)
        try:
            return cls(
                persistence_id=persistence_id,
                records=records,
                highest_sequence_nr=highest_sequence_nr or 0,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or None
            raise ValidationError(
                f"Invalid atomic batch: {first['msg']}",
                field=field,
                details={"persistence_id": persistence_id, "record_count": len(records)},
            ) from e

    @property
    def size(self) -> int:
        """Number of records in the batch."""
        return len(self.records)
