"""Unit tests for redis_journal.journal.record module."""

from pydantic import ValidationError as PydanticValidationError
import pytest

from redis_journal.core.errors import ValidationError
from redis_journal.journal.record import AtomicBatch, EventRecord


class TestEventRecord:
    """Test EventRecord model."""

    def test_defaults_to_not_deleted(self) -> None:
        record = EventRecord(sequence_nr=1, payload=b"x")

        assert record.deleted is False

    def test_rejects_non_positive_sequence_nr(self) -> None:
        """Sequence numbers start at 1."""
        with pytest.raises(PydanticValidationError):
            EventRecord(sequence_nr=0, payload=b"x")

    def test_is_frozen(self) -> None:
        record = EventRecord(sequence_nr=1, payload=b"x")

        with pytest.raises(PydanticValidationError):
            record.deleted = True  # type: ignore[misc]

    def test_empty_payload_allowed(self) -> None:
        """The journal never inspects payloads, so empty is fine."""
        assert EventRecord(sequence_nr=1, payload=b"").payload == b""


class TestAtomicBatch:
    """Test AtomicBatch construction and validation."""

    def test_of_defaults_highest_to_largest_sequence_nr(self) -> None:
        """Records out of order still yield the maximum as the mark."""
        batch = AtomicBatch.of(
            "acct-1",
            [EventRecord(sequence_nr=n, payload=b"") for n in (3, 1, 2)],
        )

        assert batch.highest_sequence_nr == 3
        assert batch.size == 3
        assert [r.sequence_nr for r in batch.records] == [3, 1, 2]

    def test_of_accepts_explicit_highest_above_records(self) -> None:
        """A claimed mark may run ahead of the batch's records."""
        batch = AtomicBatch.of(
            "acct-1", [EventRecord(sequence_nr=1, payload=b"")], highest_sequence_nr=10
        )

        assert batch.highest_sequence_nr == 10

    def test_of_rejects_highest_below_records(self) -> None:
        """The claimed mark must cover every record."""
        with pytest.raises(ValidationError, match="Invalid atomic batch"):
            AtomicBatch.of(
                "acct-1",
                [EventRecord(sequence_nr=5, payload=b"")],
                highest_sequence_nr=4,
            )

    def test_of_rejects_empty_records(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AtomicBatch.of("acct-1", [])

        assert exc_info.value.details["record_count"] == 0

    def test_of_rejects_empty_persistence_id(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            AtomicBatch.of("", [EventRecord(sequence_nr=1, payload=b"")])

        assert exc_info.value.field == "persistence_id"

    def test_of_accepts_generators(self) -> None:
        batch = AtomicBatch.of("a", (EventRecord(sequence_nr=n, payload=b"") for n in (1, 2)))

        assert batch.size == 2
        assert batch.highest_sequence_nr == 2
