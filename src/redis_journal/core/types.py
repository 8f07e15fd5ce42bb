"""Core types for redis_journal - Result type and type aliases.

This module provides:
- Result[T, E]: the success/failure value every journal operation returns
- Type aliases for persistence ids and sequence numbers
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import cast


@dataclass(frozen=True, slots=True)
class Result[T, E]:
    """Either a success (Ok) or a failure (Err).

    Journal operations report expected failures (optimistic conflicts,
    transport outages, codec defects) as Err values instead of raising, so
    that a batch write can report one outcome per input position.

    Usage:
        result = await journal.highest_sequence_nr("acct-1")
        if result.is_ok:
            resume_from(result.value)
        else:
            handle(result.error)
    """

    _value: T | None
    _error: E | None
    _is_ok: bool

    @classmethod
    def ok(cls, value: T) -> "Result[T, E]":
        """Create a successful Result containing the given value."""
        return cls(_value=value, _error=None, _is_ok=True)

    @classmethod
    def err(cls, error: E) -> "Result[T, E]":
        """Create a failed Result containing the given error."""
        return cls(_value=None, _error=error, _is_ok=False)

    @property
    def is_ok(self) -> bool:
        """Return True if this Result is Ok."""
        return self._is_ok

    @property
    def is_err(self) -> bool:
        """Return True if this Result is Err."""
        return not self._is_ok

    def __repr__(self) -> str:
        if self._is_ok:
            return f"Ok({self._value!r})"
        return f"Err({self._error!r})"

    @property
    def value(self) -> T:
        """Return the Ok value.

        Raises:
            ValueError: If this Result is Err.
        """
        if not self._is_ok:
            msg = "Cannot access value on Err result"
            raise ValueError(msg)
        return cast(T, self._value)

    @property
    def error(self) -> E:
        """Return the Err value.

        Raises:
            ValueError: If this Result is Ok.
        """
        if self._is_ok:
            msg = "Cannot access error on Ok result"
            raise ValueError(msg)
        return cast(E, self._error)

    def unwrap(self) -> T:
        """Return the Ok value or raise ValueError carrying the error text."""
        if self._is_ok:
            return cast(T, self._value)
        raise ValueError(str(self._error))

    def unwrap_or(self, default: T) -> T:
        """Return the Ok value, or ``default`` if this Result is Err."""
        if self._is_ok:
            return cast(T, self._value)
        return default

    def map[U](self, fn: Callable[[T], U]) -> "Result[U, E]":
        """Apply ``fn`` to the Ok value; an Err passes through unchanged."""
        if self._is_ok:
            return Result.ok(fn(cast(T, self._value)))
        return Result.err(cast(E, self._error))

    def map_err[F](self, fn: Callable[[E], F]) -> "Result[T, F]":
        """Apply ``fn`` to the Err value; an Ok passes through unchanged."""
        if self._is_ok:
            return Result.ok(cast(T, self._value))
        return Result.err(fn(cast(E, self._error)))


PersistenceId = str
"""Stable identifier of one entity's event log."""

SequenceNr = int
"""Position of an event within one persistence id's log, starting at 1."""
