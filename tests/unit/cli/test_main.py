"""Unit tests for the redis-journal CLI.

Commands run against an InMemoryTransport patched in place of the Redis
transport, so no server is needed.
"""

import asyncio
from pathlib import Path
import re

import pytest
from typer.testing import CliRunner

from redis_journal import __version__
from redis_journal.cli.commands import journal as journal_commands
from redis_journal.cli.formatters import payload_preview
from redis_journal.cli.main import app
from redis_journal.journal.record import AtomicBatch, EventRecord
from redis_journal.journal.store import EventJournal
from redis_journal.transport.memory import InMemoryTransport

runner = CliRunner()


def plain(output: str) -> str:
    """Strip ANSI codes (Rich adds color formatting)."""
    return re.sub(r"\x1b\[[0-9;]*m", "", output)


class BrokenTransport(InMemoryTransport):
    """Transport whose reads always time out."""

    async def get(self, key: str) -> bytes | None:
        raise TimeoutError("read timed out")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CLI config lookups away from the real home directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("REDIS_JOURNAL_URL", raising=False)
    monkeypatch.delenv("REDIS_JOURNAL_PASSWORD", raising=False)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryTransport:
    """Patch the CLI to use one shared in-memory transport."""
    transport = InMemoryTransport()
    monkeypatch.setattr(journal_commands, "open_transport", lambda config_path: transport)
    return transport


def seed(transport: InMemoryTransport, persistence_id: str, sequence_nrs: range) -> None:
    batch = AtomicBatch.of(
        persistence_id,
        [EventRecord(sequence_nr=n, payload=f"event-{n}".encode()) for n in sequence_nrs],
    )
    assert asyncio.run(EventJournal(transport).write_batch(batch)).is_ok


class TestMainApp:
    """Tests for the main Typer application."""

    def test_app_has_help(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "event journals" in result.output
        for command in ("highest", "replay", "delete-to", "config"):
            assert command in result.output

    @pytest.mark.parametrize("flag", ["--version", "-V"])
    def test_app_version_option(self, flag: str) -> None:
        result = runner.invoke(app, [flag])

        assert result.exit_code == 0
        assert f"redis-journal version {__version__}" in plain(result.output)

    def test_no_args_shows_help(self) -> None:
        """no_args_is_help exits with code 2."""
        result = runner.invoke(app, [])

        assert result.exit_code == 2
        assert "Usage" in result.output


class TestHighestCommand:
    def test_highest_prints_mark(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 4))

        result = runner.invoke(app, ["highest", "acct-1"])

        assert result.exit_code == 0
        assert result.output.strip() == "3"

    def test_highest_unknown_id_prints_zero(self, store: InMemoryTransport) -> None:
        result = runner.invoke(app, ["highest", "ghost"])

        assert result.exit_code == 0
        assert result.output.strip() == "0"

    def test_transport_failure_exits_with_error_panel(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        transport = BrokenTransport()
        monkeypatch.setattr(journal_commands, "open_transport", lambda config_path: transport)

        result = runner.invoke(app, ["highest", "acct-1"])

        assert result.exit_code == 1
        assert "TransportError (retriable)" in plain(result.output)

    def test_invalid_config_file_exits_with_error(self, tmp_path: Path) -> None:
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("redis:\n  port: 0\n")

        result = runner.invoke(app, ["highest", "acct-1", "--config", str(config_path)])

        assert result.exit_code == 1
        assert "Configuration error" in plain(result.output)

    def test_invalid_env_url_without_config_file_exits_with_error(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A bad REDIS_JOURNAL_URL is reported even when no config file exists."""
        monkeypatch.setenv("REDIS_JOURNAL_URL", "http://example")

        result = runner.invoke(app, ["highest", "acct-1"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Configuration error" in plain(result.output)


class TestReplayCommand:
    def test_replay_lists_records(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 4))

        result = runner.invoke(app, ["replay", "acct-1"])

        output = plain(result.output)
        assert result.exit_code == 0
        assert "journal:acct-1" in output
        for n in (1, 2, 3):
            assert f"event-{n}" in output

    def test_replay_respects_range_and_max(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 11))

        result = runner.invoke(app, ["replay", "acct-1", "--from", "4", "--to", "9", "-n", "2"])

        output = plain(result.output)
        assert result.exit_code == 0
        assert "event-4" in output
        assert "event-5" in output
        assert "event-6" not in output
        assert "event-3" not in output

    def test_replay_empty_journal(self, store: InMemoryTransport) -> None:
        result = runner.invoke(app, ["replay", "ghost"])

        assert result.exit_code == 0
        assert "No records found for ghost" in plain(result.output)

    def test_replay_corrupt_entry_reports_decoding_error(
        self, store: InMemoryTransport
    ) -> None:
        async def corrupt() -> None:
            transaction = await store.begin_transaction([])
            transaction.stage_sorted_insert("journal:acct-1", 1, b"garbage")
            await transaction.commit()

        asyncio.run(corrupt())

        result = runner.invoke(app, ["replay", "acct-1"])

        assert result.exit_code == 1
        assert "DecodingError" in plain(result.output)

    def test_replay_invalid_config_for_default_max(self, tmp_path: Path) -> None:
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("replay_max_default: 0\n")

        result = runner.invoke(app, ["replay", "acct-1", "-c", str(config_path)])

        assert result.exit_code == 1
        assert "Configuration error" in plain(result.output)


class TestDeleteToCommand:
    def test_delete_to_with_yes(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 11))

        result = runner.invoke(app, ["delete-to", "acct-1", "5", "--yes"])

        assert result.exit_code == 0
        assert "Removed 5 record(s) from acct-1" in plain(result.output)
        remaining = asyncio.run(store.sorted_range_query("journal:acct-1", 0, 100))
        assert [e.score for e in remaining] == [6, 7, 8, 9, 10]
        assert runner.invoke(app, ["highest", "acct-1"]).output.strip() == "10"

    def test_delete_to_confirms(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 3))

        result = runner.invoke(app, ["delete-to", "acct-1", "1"], input="y\n")

        assert result.exit_code == 0
        assert "Removed 1 record(s)" in plain(result.output)

    def test_delete_to_declined_changes_nothing(self, store: InMemoryTransport) -> None:
        seed(store, "acct-1", range(1, 3))

        result = runner.invoke(app, ["delete-to", "acct-1", "2"], input="n\n")

        assert result.exit_code == 1
        remaining = asyncio.run(store.sorted_range_query("journal:acct-1", 0, 100))
        assert len(remaining) == 2


class TestConfigCommands:
    def test_config_init_and_show(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 0
        assert (tmp_path / ".redis_journal" / "config.yaml").exists()

        shown = runner.invoke(app, ["config", "show"])
        output = plain(shown.output)
        assert shown.exit_code == 0
        assert "redis.host" in output
        assert "localhost" in output

    def test_config_init_refuses_existing(self) -> None:
        runner.invoke(app, ["config", "init"])

        result = runner.invoke(app, ["config", "init"])

        assert result.exit_code == 1
        assert "already exists" in plain(result.output)

    def test_config_show_masks_password(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REDIS_JOURNAL_PASSWORD", "hunter2")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "hunter2" not in result.output
        assert "<set>" in plain(result.output)


class TestPayloadPreview:
    def test_text_payload(self) -> None:
        assert payload_preview(b"hello") == "hello"

    def test_binary_payload_as_hex(self) -> None:
        assert payload_preview(b"\xff\x00") == "ff00"

    def test_long_payload_truncated(self) -> None:
        assert payload_preview(b"a" * 60, limit=10) == "a" * 10 + "…"

    def test_truncation_inside_multibyte_character_stays_text(self) -> None:
        """A cut through a 2-byte character drops the partial bytes."""
        assert payload_preview("é".encode() * 30, limit=5) == "éé…"

    def test_binary_payload_with_valid_utf8_prefix_is_hex(self) -> None:
        assert payload_preview(b"ab" + b"\xff" * 10, limit=2) == "6162…"
