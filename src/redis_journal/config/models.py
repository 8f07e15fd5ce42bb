"""Pydantic models for redis_journal configuration.

Classes:
    RedisConfig: Connection parameters for the Redis transport
    JournalConfig: Top-level configuration combining all sections
"""

from pathlib import Path
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from redis_journal.observability.logging import LoggingConfig


class RedisConfig(BaseModel, frozen=True):
    """Connection parameters for the Redis transport.

    When ``url`` is set it takes precedence over the individual host/port/db
    fields (``redis://`` or ``rediss://`` schemes).

    Attributes:
        url: Optional Redis URL
        host: Server host name
        port: Server port
        db: Logical database index
        username: ACL user name
        password: Server password
        ssl: Whether to connect with TLS
        socket_timeout: Seconds to wait for a reply before failing
        socket_connect_timeout: Seconds to wait for a connection
    """

    url: str | None = None
    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0)
    username: str | None = None
    password: str | None = None
    ssl: bool = False
    socket_timeout: float = Field(default=5.0, gt=0)
    socket_connect_timeout: float = Field(default=5.0, gt=0)

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate that the URL uses a Redis scheme."""
        if v is None:
            return v
        scheme = urlsplit(v).scheme
        if scheme not in ("redis", "rediss", "unix"):
            msg = f"Unsupported Redis URL scheme: {scheme or '<none>'}"
            raise ValueError(msg)
        return v


class JournalConfig(BaseModel, frozen=True):
    """Top-level redis_journal configuration.

    Attributes:
        redis: Redis connection parameters
        logging: Logging configuration
        replay_max_default: Default page size for CLI replays
    """

    redis: RedisConfig = Field(default_factory=RedisConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    replay_max_default: int = Field(default=1000, ge=1)


def get_default_config() -> JournalConfig:
    """Get the default configuration."""
    return JournalConfig()


def get_config_dir() -> Path:
    """Get the redis_journal configuration directory path.

    Returns:
        Path to ~/.redis_journal/
    """
    return Path.home() / ".redis_journal"
