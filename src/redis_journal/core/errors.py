"""Error hierarchy for redis_journal.

Journal operations return these errors inside ``Result.err`` rather than
raising them, so callers can tell which kind of failure occurred and whether
re-submitting the request is safe.

Exception Hierarchy:
    JournalError (base)
    ├── EncodingError            - record could not be turned into bytes
    ├── DecodingError            - stored bytes could not be read back
    ├── OptimisticConflictError  - watched key changed before commit
    ├── TransportError           - store unreachable, timed out, or protocol error
    ├── ValidationError          - caller arguments violate a precondition
    └── ConfigError              - configuration missing or invalid
"""

from collections.abc import Sequence
from typing import Any


class JournalError(Exception):
    """Base exception for all journal errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the failure.
    """

    retriable: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def is_retriable(self) -> bool:
        """Return True if re-submitting the same request may succeed."""
        return self.retriable

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class EncodingError(JournalError):
    """A record could not be encoded into its storage form.

    Raised before any transaction is staged for the containing batch, so the
    batch has no effect on the store.
    """

    def __init__(
        self,
        message: str,
        *,
        persistence_id: str | None = None,
        sequence_nr: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.persistence_id = persistence_id
        self.sequence_nr = sequence_nr


class DecodingError(JournalError):
    """Stored bytes could not be decoded back into a record.

    Attributes:
        persistence_id: Journal being read, when known.
        sequence_nr: Score of the offending entry, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        persistence_id: str | None = None,
        sequence_nr: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.persistence_id = persistence_id
        self.sequence_nr = sequence_nr


class OptimisticConflictError(JournalError):
    """A watched key changed between staging and commit.

    Nothing staged by the rejected transaction became visible.
    """

    retriable = True

    def __init__(
        self,
        message: str,
        *,
        persistence_id: str | None = None,
        watched_keys: Sequence[str] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.persistence_id = persistence_id
        self.watched_keys = tuple(watched_keys)


class TransportError(JournalError):
    """The store transport could not complete a request.

    Covers connectivity loss, timeouts and protocol errors. The original
    exception is kept as ``__cause__``.

    Attributes:
        operation: Transport operation that failed (e.g. "commit", "get").
    """

    retriable = True

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.operation = operation

    @classmethod
    def from_exception(cls, exc: BaseException, *, operation: str) -> "TransportError":
        """Wrap a client exception, preserving it as ``__cause__``."""
        error = cls(
            f"Store request failed during {operation}: {exc}",
            operation=operation,
            details={"original_exception": type(exc).__name__},
        )
        error.__cause__ = exc
        return error


class ValidationError(JournalError):
    """Caller-supplied arguments violate an operation's preconditions.

    Attributes:
        field: Name of the offending argument.
        value: The offending value.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field}, value: {self.value!r})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base


class ConfigError(JournalError):
    """Configuration could not be loaded or failed validation.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file
