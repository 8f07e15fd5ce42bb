"""Configuration loading for redis_journal.

Functions:
    load_config: Load configuration from ~/.redis_journal/config.yaml
    create_default_config: Write a default configuration file
    config_exists: Check whether a configuration file exists

Environment overrides (applied after the file is read):
    REDIS_JOURNAL_URL       -> redis.url
    REDIS_JOURNAL_PASSWORD  -> redis.password
"""

import os
from pathlib import Path
import stat
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError
import yaml

from redis_journal.config.models import JournalConfig, get_config_dir, get_default_config
from redis_journal.core.errors import ConfigError

_ENV_OVERRIDES = {
    "REDIS_JOURNAL_URL": "url",
    "REDIS_JOURNAL_PASSWORD": "password",
}


def _load_env_files() -> None:
    load_dotenv()  # Current directory .env
    load_dotenv(get_config_dir() / ".env")


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    redis_section = dict(config_dict.get("redis") or {})
    for env_name, field in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            redis_section[field] = value
    if redis_section:
        config_dict = {**config_dict, "redis": redis_section}
    return config_dict


def _validate(config_dict: dict[str, Any], config_path: Path | None) -> JournalConfig:
    """Validate a config mapping, reporting failures as ConfigError."""
    try:
        return JournalConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            error_messages.append(f"  - {loc}: {error['msg']}")

        first_loc = e.errors()[0]["loc"] if e.errors() else ()
        raise ConfigError(
            "Configuration validation failed:\n" + "\n".join(error_messages),
            config_key=".".join(str(x) for x in first_loc) or None,
            config_file=str(config_path) if config_path else None,
            details={"validation_errors": e.errors()},
        ) from e


def create_default_config(
    config_dir: Path | None = None,
    *,
    overwrite: bool = False,
) -> Path:
    """Create a default config.yaml.

    The file may later hold a Redis password, so it is created with
    owner-only permissions (chmod 600).

    Args:
        config_dir: Directory to create the file in. Defaults to ~/.redis_journal/
        overwrite: If True, overwrite an existing file.

    Returns:
        Path to the written config file.

    Raises:
        ConfigError: If the file exists and overwrite=False.
    """
    if config_dir is None:
        config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    config_path = config_dir / "config.yaml"
    if config_path.exists() and not overwrite:
        raise ConfigError(
            f"Configuration file already exists: {config_path}",
            config_file=str(config_path),
        )

    with config_path.open("w") as f:
        yaml.dump(
            get_default_config().model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    os.chmod(config_path, stat.S_IRUSR | stat.S_IWUSR)

    return config_path


def load_config(config_path: Path | None = None) -> JournalConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to config file. Defaults to ~/.redis_journal/config.yaml.

    Returns:
        Validated JournalConfig instance.

    Raises:
        ConfigError: If file doesn't exist, is malformed, or fails validation.
    """
    _load_env_files()

    if config_path is None:
        config_path = get_config_dir() / "config.yaml"

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            "Run `redis-journal config init` to create default configuration.",
            config_file=str(config_path),
        )

    try:
        with config_path.open() as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse configuration file: {e}",
            config_file=str(config_path),
            details={"yaml_error": str(e)},
        ) from e

    if config_dict is None:
        config_dict = {}
    if not isinstance(config_dict, dict):
        raise ConfigError(
            "Configuration file must contain a mapping",
            config_file=str(config_path),
        )

    return _validate(_apply_env_overrides(config_dict), config_path)


def load_config_or_default(config_path: Path | None = None) -> JournalConfig:
    """Load configuration, falling back to defaults when no file exists.

    Environment overrides still apply to the defaults.

    Raises:
        ConfigError: If an existing file or an environment override is invalid.
    """
    path = config_path or get_config_dir() / "config.yaml"
    if path.exists():
        return load_config(path)
    _load_env_files()
    return _validate(_apply_env_overrides({}), None)


def config_exists() -> bool:
    """Check if the configuration file exists."""
    return (get_config_dir() / "config.yaml").exists()
