"""Store transports for redis_journal.

- StoreTransport / Transaction: the contract EventJournal consumes
- RedisTransport: redis.asyncio implementation
- InMemoryTransport: in-process implementation for tests and development
"""

from redis_journal.transport.base import (
    CommitOutcome,
    ScoredValue,
    StoreTransport,
    Transaction,
)
from redis_journal.transport.memory import InMemoryTransport
from redis_journal.transport.redis_transport import RedisTransport

__all__ = [
    "CommitOutcome",
    "ScoredValue",
    "StoreTransport",
    "Transaction",
    "InMemoryTransport",
    "RedisTransport",
]
