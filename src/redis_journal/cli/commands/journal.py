"""Journal inspection commands.

Each command opens a Redis transport from the configuration, runs one
EventJournal operation and closes the transport again.
"""

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated

import typer

from redis_journal.cli.formatters import (
    console,
    create_records_table,
    print_error,
    print_info,
    print_success,
)
from redis_journal.config.loader import load_config_or_default
from redis_journal.config.models import JournalConfig
from redis_journal.core.errors import ConfigError, JournalError
from redis_journal.core.types import Result
from redis_journal.journal.record import EventRecord
from redis_journal.journal.store import EventJournal
from redis_journal.observability.logging import configure_logging
from redis_journal.transport.base import StoreTransport
from redis_journal.transport.redis_transport import RedisTransport

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to config.yaml.", dir_okay=False),
]


def open_transport(config_path: Path | None) -> StoreTransport:
    """Build the transport used by the CLI commands."""
    config = load_config_or_default(config_path)
    configure_logging(config.logging)
    return RedisTransport.from_config(config.redis)


def _load_config(config_path: Path | None) -> JournalConfig:
    try:
        return load_config_or_default(config_path)
    except ConfigError as e:
        print_error(e.message, title="Configuration error")
        raise typer.Exit(1) from e


def _run[T](
    config_path: Path | None,
    operation: Callable[[EventJournal], Awaitable[Result[T, JournalError]]],
) -> T:
    """Run one journal operation, exiting with code 1 on failure."""

    async def _execute() -> Result[T, JournalError]:
        journal = EventJournal(open_transport(config_path))
        try:
            return await operation(journal)
        finally:
            await journal.close()

    try:
        result = asyncio.run(_execute())
    except ConfigError as e:
        print_error(e.message, title="Configuration error")
        raise typer.Exit(1) from e

    if result.is_err:
        error = result.error
        title = type(error).__name__
        if error.is_retriable:
            title += " (retriable)"
        print_error(str(error), title=title)
        raise typer.Exit(1)
    return result.value


def highest(
    persistence_id: Annotated[str, typer.Argument(help="Persistence id of the journal.")],
    config: ConfigOption = None,
) -> None:
    """Show the highest sequence number ever written to a journal."""
    mark = _run(config, lambda journal: journal.highest_sequence_nr(persistence_id))
    console.print(mark)


def replay(
    persistence_id: Annotated[str, typer.Argument(help="Persistence id of the journal.")],
    from_sequence_nr: Annotated[
        int, typer.Option("--from", help="First sequence number (inclusive).", min=0)
    ] = 0,
    to_sequence_nr: Annotated[
        int | None, typer.Option("--to", help="Last sequence number (inclusive).")
    ] = None,
    max_count: Annotated[
        int | None, typer.Option("--max", "-n", help="Maximum number of records.", min=0)
    ] = None,
    config: ConfigOption = None,
) -> None:
    """List stored records of a journal in sequence order."""
    if max_count is None:
        max_count = _load_config(config).replay_max_default
    upper = to_sequence_nr if to_sequence_nr is not None else 2**63 - 1
    records: list[EventRecord] = []

    delivered = _run(
        config,
        lambda journal: journal.replay(
            persistence_id, from_sequence_nr, upper, max_count, records.append
        ),
    )
    if not delivered:
        print_info(f"No records found for {persistence_id}")
        return
    console.print(create_records_table(records, title=f"journal:{persistence_id}"))


def delete_to(
    persistence_id: Annotated[str, typer.Argument(help="Persistence id of the journal.")],
    to_sequence_nr: Annotated[int, typer.Argument(help="Delete records up to this number.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
    config: ConfigOption = None,
) -> None:
    """Delete every record up to and including a sequence number.

    The journal's highest sequence number is not changed.
    """
    if not yes:
        typer.confirm(
            f"Delete records of {persistence_id} up to {to_sequence_nr}?",
            abort=True,
        )
    removed = _run(config, lambda journal: journal.delete_to(persistence_id, to_sequence_nr))
    print_success(f"Removed {removed} record(s) from {persistence_id}")


__all__ = ["delete_to", "highest", "open_transport", "replay"]
