"""Configuration module for redis_journal.

Configuration is stored in ~/.redis_journal/config.yaml and only concerns
the operator tooling and the Redis transport factory; EventJournal itself
takes an already-built transport.

Usage:
    from redis_journal.config import load_config

    config = load_config()
    transport = RedisTransport.from_config(config.redis)
"""

from redis_journal.config.loader import (
    config_exists,
    create_default_config,
    load_config,
    load_config_or_default,
)
from redis_journal.config.models import (
    JournalConfig,
    LoggingConfig,
    RedisConfig,
    get_config_dir,
    get_default_config,
)

__all__ = [
    # Models
    "JournalConfig",
    "RedisConfig",
    "LoggingConfig",
    # Loader functions
    "load_config",
    "load_config_or_default",
    "create_default_config",
    "config_exists",
    # Model helpers
    "get_config_dir",
    "get_default_config",
]
