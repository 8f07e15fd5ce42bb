"""Redis key namespace for journals.

Both keys derive from the persistence id alone and must stay byte-for-byte
identical to the layout used by existing journals:

    journal:<persistence_id>                     sorted set, scored by sequence_nr
    journal:<persistence_id>:highestSequenceNr   string, decimal high-water mark
"""

from redis_journal.core.errors import ValidationError

JOURNAL_PREFIX = "journal"
HIGHEST_SEQUENCE_NR_SUFFIX = "highestSequenceNr"


def _require_persistence_id(persistence_id: str) -> None:
    if not persistence_id:
        raise ValidationError(
            "Persistence id must be a non-empty string",
            field="persistence_id",
            value=persistence_id,
        )


def journal_key(persistence_id: str) -> str:
    """Key of the ordered log for ``persistence_id``."""
    _require_persistence_id(persistence_id)
    return f"{JOURNAL_PREFIX}:{persistence_id}"


def highest_sequence_nr_key(persistence_id: str) -> str:
    """Key of the high-water mark for ``persistence_id``."""
    return f"{journal_key(persistence_id)}:{HIGHEST_SEQUENCE_NR_SUFFIX}"
