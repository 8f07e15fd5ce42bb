"""Shared fixtures for redis_journal tests."""

from __future__ import annotations

import asyncio
from collections.abc import Collection

import pytest

from redis_journal.journal.codec import JsonRecordCodec
from redis_journal.journal.record import EventRecord
from redis_journal.journal.store import EventJournal
from redis_journal.transport.memory import InMemoryTransaction, InMemoryTransport


class InterleavingTransport(InMemoryTransport):
    """InMemoryTransport that yields to the event loop after WATCH.

    Lets concurrent writers for the same key all begin their transactions
    before any of them commits.
    """

    async def begin_transaction(self, watch_keys: Collection[str]) -> InMemoryTransaction:
        transaction = await super().begin_transaction(watch_keys)
        await asyncio.sleep(0)
        return transaction


class RacingWriterTransport(InMemoryTransport):
    """InMemoryTransport with a direct scalar write, standing in for another writer."""

    async def set(self, key: str, value: bytes) -> None:
        transaction = await super().begin_transaction([])
        transaction.stage_set(key, value)
        await transaction.commit()


class PoisonPayloadCodec(JsonRecordCodec):
    """JSON codec that refuses to encode payloads equal to b"poison"."""

    def encode(self, record: EventRecord) -> bytes:
        if record.payload == b"poison":
            msg = "payload cannot be represented"
            raise TypeError(msg)
        return super().encode(record)


@pytest.fixture
def transport() -> RacingWriterTransport:
    """Create an empty in-memory transport that tests can write to directly."""
    return RacingWriterTransport()


@pytest.fixture
def journal(transport: InMemoryTransport) -> EventJournal:
    """Create an EventJournal over the in-memory transport."""
    return EventJournal(transport)


@pytest.fixture
def interleaving_transport() -> InterleavingTransport:
    """Create a transport on which racing writers all see the same WATCH state."""
    return InterleavingTransport()


@pytest.fixture
def poison_codec() -> PoisonPayloadCodec:
    """Create a codec that fails to encode b"poison" payloads."""
    return PoisonPayloadCodec()
