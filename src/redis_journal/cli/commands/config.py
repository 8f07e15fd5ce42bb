"""Config command group for redis-journal."""

from pathlib import Path
from typing import Annotated

import typer

from redis_journal.cli.formatters import (
    console,
    create_key_value_table,
    print_error,
    print_success,
)
from redis_journal.config.loader import create_default_config, load_config_or_default
from redis_journal.core.errors import ConfigError

app = typer.Typer(
    name="config",
    help="Manage redis-journal configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    directory: Annotated[
        Path | None,
        typer.Option("--dir", help="Directory for config.yaml (default ~/.redis_journal)."),
    ] = None,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Overwrite an existing file.")
    ] = False,
) -> None:
    """Create a default config.yaml."""
    try:
        path = create_default_config(directory, overwrite=force)
    except ConfigError as e:
        print_error(e.message, title="Configuration error")
        raise typer.Exit(1) from e
    print_success(f"Wrote {path}")


@app.command()
def show(
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config.yaml.", dir_okay=False),
    ] = None,
) -> None:
    """Display the effective configuration. Passwords are masked."""
    try:
        loaded = load_config_or_default(config)
    except ConfigError as e:
        print_error(str(e), title="Configuration error")
        raise typer.Exit(1) from e

    redis = loaded.redis
    data = {
        "redis.url": redis.url,
        "redis.host": redis.host,
        "redis.port": redis.port,
        "redis.db": redis.db,
        "redis.username": redis.username,
        "redis.password": "<set>" if redis.password else None,
        "redis.ssl": redis.ssl,
        "redis.socket_timeout": redis.socket_timeout,
        "logging.mode": loaded.logging.mode.value,
        "logging.level": loaded.logging.level,
        "replay_max_default": loaded.replay_max_default,
    }
    console.print(create_key_value_table(data, "Current Configuration"))


__all__ = ["app"]
