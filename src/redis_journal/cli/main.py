"""redis-journal CLI main entry point.

This module defines the main Typer application and registers the journal
commands and the config command group.
"""

from typing import Annotated

import typer

from redis_journal import __version__
from redis_journal.cli.commands import config, journal
from redis_journal.cli.formatters import console

app = typer.Typer(
    name="redis-journal",
    help="Inspect and maintain event journals stored in Redis.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("highest")(journal.highest)
app.command("replay")(journal.replay)
app.command("delete-to")(journal.delete_to)
app.add_typer(config.app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]redis-journal[/] version [green]{__version__}[/]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Inspect and maintain event journals stored in Redis.

    Connection settings come from ~/.redis_journal/config.yaml, or the
    REDIS_JOURNAL_URL environment variable.
    """


__all__ = ["app", "main"]
