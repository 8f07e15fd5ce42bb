"""Redis store transport built on redis.asyncio.

Maps the transport contract onto Redis commands:

    begin_transaction    WATCH <keys> + MULTI on a transactional pipeline
    stage_sorted_insert  ZREMRANGEBYSCORE key s s + ZADD key s value
    stage_set            SET key value
    commit               EXEC (WatchError -> CommitOutcome.ABORTED)
    sorted_range_query   ZRANGEBYSCORE key min max WITHSCORES [LIMIT off n]
    sorted_range_remove  ZREMRANGEBYSCORE key min max
    get                  GET key

Every other client failure is raised as TransportError.
"""

from collections.abc import Collection
import math
from types import TracebackType
from typing import Any, Self

import redis.asyncio as redis
from redis.asyncio.client import Pipeline
from redis.exceptions import RedisError, WatchError

from redis_journal.config.models import RedisConfig
from redis_journal.core.errors import TransportError
from redis_journal.observability.logging import get_logger
from redis_journal.transport.base import CommitOutcome, Score, ScoredValue

log = get_logger(__name__)

_CLIENT_ERRORS = (RedisError, OSError, TimeoutError)


def _bound(score: Score) -> str | int | float:
    if isinstance(score, float) and math.isinf(score):
        return "-inf" if score < 0 else "+inf"
    return score


class RedisTransaction:
    """Optimistic transaction on a watched Redis pipeline."""

    def __init__(self, pipeline: Pipeline, watch_keys: tuple[str, ...]) -> None:
        self._pipeline = pipeline
        self._watch_keys = watch_keys
        self._finished = False

    def stage_sorted_insert(self, key: str, score: int, value: bytes) -> None:
        self._ensure_open()
        # A score holds at most one entry: drop whatever sits there first.
        self._pipeline.zremrangebyscore(key, score, score)
        self._pipeline.zadd(key, {value: score})

    def stage_set(self, key: str, value: bytes) -> None:
        self._ensure_open()
        self._pipeline.set(key, value)

    async def commit(self) -> CommitOutcome:
        self._ensure_open()
        self._finished = True
        try:
            await self._pipeline.execute()
        except WatchError:
            log.debug("transport.redis.commit_aborted", watch_keys=list(self._watch_keys))
            return CommitOutcome.ABORTED
        except _CLIENT_ERRORS as e:
            raise TransportError.from_exception(e, operation="commit") from e
        finally:
            await self._reset()
        return CommitOutcome.COMMITTED

    async def abort(self) -> None:
        if self._finished:
            return
        self._finished = True
        await self._reset()

    async def _reset(self) -> None:
        try:
            await self._pipeline.reset()
        except _CLIENT_ERRORS as e:
            # The connection is discarded by the pool; the outcome is unaffected.
            log.warning("transport.redis.reset_failed", error=str(e))

    def _ensure_open(self) -> None:
        if self._finished:
            msg = "Transaction already committed or aborted"
            raise RuntimeError(msg)


class RedisTransport:
    """Store transport talking to a Redis server.

    Usage:
        async with RedisTransport.from_config(RedisConfig(host="localhost")) as transport:
            journal = EventJournal(transport)
            await journal.highest_sequence_nr("acct-1")
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisTransport":
        """Build a transport and its client from connection parameters."""
        options: dict[str, Any] = {
            "socket_timeout": config.socket_timeout,
            "socket_connect_timeout": config.socket_connect_timeout,
            "decode_responses": False,
        }
        if config.username:
            options["username"] = config.username
        if config.password:
            options["password"] = config.password

        if config.url:
            client = redis.from_url(config.url, **options)
        else:
            client = redis.Redis(
                host=config.host,
                port=config.port,
                db=config.db,
                ssl=config.ssl,
                **options,
            )
        return cls(client)

    @property
    def client(self) -> redis.Redis:
        """The underlying redis.asyncio client."""
        return self._client

    async def begin_transaction(self, watch_keys: Collection[str]) -> RedisTransaction:
        keys = tuple(watch_keys)
        pipeline = self._client.pipeline(transaction=True)
        try:
            if keys:
                await pipeline.watch(*keys)
            pipeline.multi()
        except _CLIENT_ERRORS as e:
            await pipeline.reset()
            raise TransportError.from_exception(e, operation="watch") from e
        return RedisTransaction(pipeline, keys)

    async def sorted_range_query(
        self,
        key: str,
        score_min: Score,
        score_max: Score,
        limit: tuple[int, int] | None = None,
    ) -> list[ScoredValue]:
        paging: dict[str, int] = {}
        if limit is not None:
            paging = {"start": limit[0], "num": limit[1]}
        try:
            rows = await self._client.zrangebyscore(
                key, _bound(score_min), _bound(score_max), withscores=True, **paging
            )
        except _CLIENT_ERRORS as e:
            raise TransportError.from_exception(e, operation="zrangebyscore") from e
        return [ScoredValue(int(score), value) for value, score in rows]

    async def sorted_range_remove(self, key: str, score_min: Score, score_max: Score) -> int:
        try:
            return int(
                await self._client.zremrangebyscore(key, _bound(score_min), _bound(score_max))
            )
        except _CLIENT_ERRORS as e:
            raise TransportError.from_exception(e, operation="zremrangebyscore") from e

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(key)
        except _CLIENT_ERRORS as e:
            raise TransportError.from_exception(e, operation="get") from e

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
