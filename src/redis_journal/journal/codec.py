"""Record codec: EventRecord <-> stored bytes.

The default codec writes the same JSON document the JVM journal writers put
into the sorted set, so journals can be shared between the two:

    {"sequenceNr":3,"persistenceRepr":[10,-2,127],"deleted":false}

``persistenceRepr`` holds the payload as signed 8-bit integers. Decoding
accepts signed (-128..127) and unsigned (0..255) byte values.
"""

import json
from typing import Any, Protocol

from redis_journal.core.errors import DecodingError, EncodingError
from redis_journal.journal.record import EventRecord


class RecordCodec(Protocol):
    """Converts records to and from their storage representation.

    Implementations raise EncodingError / DecodingError on failure.
    """

    def encode(self, record: EventRecord) -> bytes:
        """Encode a record into the bytes stored in the ordered log."""
        ...

    def decode(self, data: bytes) -> EventRecord:
        """Decode stored bytes back into a record."""
        ...


def _to_signed(byte: int) -> int:
    return byte - 256 if byte > 127 else byte


class JsonRecordCodec:
    """JSON codec compatible with the JVM journal's storage format."""

    def encode(self, record: EventRecord) -> bytes:
        try:
            document = {
                "sequenceNr": record.sequence_nr,
                "persistenceRepr": [_to_signed(b) for b in record.payload],
                "deleted": record.deleted,
            }
            return json.dumps(document, separators=(",", ":")).encode("utf-8")
        except (AttributeError, TypeError, ValueError) as e:
            raise EncodingError(
                f"Failed to encode record: {e}",
                sequence_nr=getattr(record, "sequence_nr", None),
            ) from e

    def decode(self, data: bytes) -> EventRecord:
        try:
            document = json.loads(data)
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodingError(f"Stored record is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            raise DecodingError(
                "Stored record is not a JSON object",
                details={"type": type(document).__name__},
            )

        sequence_nr = document.get("sequenceNr")
        if not isinstance(sequence_nr, int) or isinstance(sequence_nr, bool):
            raise DecodingError(
                "Stored record has no integer sequenceNr",
                details={"sequenceNr": sequence_nr},
            )

        payload = self._decode_payload(document.get("persistenceRepr"), sequence_nr)

        deleted = document.get("deleted", False)
        if not isinstance(deleted, bool):
            raise DecodingError(
                "Stored record has a non-boolean deleted flag",
                sequence_nr=sequence_nr,
            )

        try:
            return EventRecord(sequence_nr=sequence_nr, payload=payload, deleted=deleted)
        except ValueError as e:
            raise DecodingError(
                f"Stored record is invalid: {e}", sequence_nr=sequence_nr
            ) from e

    @staticmethod
    def _decode_payload(values: Any, sequence_nr: int) -> bytes:
        if not isinstance(values, list):
            raise DecodingError(
                "Stored record has no persistenceRepr byte array",
                sequence_nr=sequence_nr,
            )
        for value in values:
            if not isinstance(value, int) or isinstance(value, bool) or not -128 <= value <= 255:
                raise DecodingError(
                    "Stored record payload contains a non-byte value",
                    sequence_nr=sequence_nr,
                    details={"value": value},
                )
        return bytes(value & 0xFF for value in values)
