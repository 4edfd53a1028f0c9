"""Tests for the command line interface."""
import pytest
from conftest import ScriptedLLM
from typer.testing import CliRunner

import toodles.cli.app as cli_app
from toodles.agent import THINKING_MESSAGE

runner = CliRunner()

ENV_VARS = [
    "TOODLES_STORE_BACKEND",
    "TOODLES_SQLITE_PATH",
    "TOODLES_PREFIX",
    "TOODLES_REWARD_RULE",
    "TOODLES_LOG_LEVEL",
    "OPENAI_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TOODLES_LOG_LEVEL", "WARNING")


@pytest.fixture
def sqlite_env(monkeypatch, tmp_path):
    db_path = tmp_path / "toodles.db"
    monkeypatch.setenv("TOODLES_STORE_BACKEND", "sqlite")
    monkeypatch.setenv("TOODLES_SQLITE_PATH", str(db_path))
    return db_path


class TestMemoryBackend:
    """Commands against the default in-memory backend."""

    def test_stats_for_new_user(self):
        result = runner.invoke(cli_app.app, ["stats", "u1"])

        assert result.exit_code == 0
        assert "Positive" in result.output
        assert "neutral" in result.output

    def test_history_for_new_user(self):
        result = runner.invoke(cli_app.app, ["history", "u1"])

        assert result.exit_code == 0
        assert "No messages for u1" in result.output

    def test_reset_with_yes(self):
        result = runner.invoke(cli_app.app, ["reset", "u1", "--yes"])

        assert result.exit_code == 0
        assert "Reset u1." in result.output

    def test_reset_aborted(self):
        result = runner.invoke(cli_app.app, ["reset", "u1"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output

    def test_invalid_backend_exits(self, monkeypatch):
        monkeypatch.setenv("TOODLES_STORE_BACKEND", "redis")

        result = runner.invoke(cli_app.app, ["stats", "u1"])

        assert result.exit_code == 1
        assert "invalid configuration" in result.output

    def test_chat_requires_api_key(self):
        result = runner.invoke(cli_app.app, ["chat"])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY not set" in result.output


class TestSQLiteBackend:
    """Commands against a SQLite file, so state survives between commands."""

    def test_init_db_creates_file(self, sqlite_env):
        result = runner.invoke(cli_app.app, ["init-db"])

        assert result.exit_code == 0
        assert "initialized successfully" in result.output
        assert sqlite_env.exists()

    def test_chat_turn_is_persisted(self, sqlite_env, monkeypatch):
        llm = ScriptedLLM("positive", "Honk honk!")
        monkeypatch.setattr(cli_app, "require_llm", lambda settings, console: llm)

        result = runner.invoke(
            cli_app.app,
            ["chat", "--user", "u1", "--name", "Bozo"],
            input="!toodles hello clown\nquit\n",
        )

        assert result.exit_code == 0
        assert THINKING_MESSAGE in result.output
        assert "Honk honk!" in result.output
        assert llm.closed

        history = runner.invoke(cli_app.app, ["history", "u1"])
        assert history.exit_code == 0
        assert "hello clown" in history.output
        assert "Honk honk!" in history.output

        stats = runner.invoke(cli_app.app, ["stats", "u1"])
        assert stats.exit_code == 0
        assert "1" in stats.output

    def test_reset_clears_history(self, sqlite_env, monkeypatch):
        llm = ScriptedLLM("negative", "Hmph.")
        monkeypatch.setattr(cli_app, "require_llm", lambda settings, console: llm)
        runner.invoke(cli_app.app, ["chat", "-u", "u1"], input="boo\nq\n")

        result = runner.invoke(cli_app.app, ["reset", "u1", "--history", "-y"])
        assert result.exit_code == 0

        history = runner.invoke(cli_app.app, ["history", "u1"])
        assert "No messages for u1" in history.output

    def test_init_db_reset_drops_stored_state(self, sqlite_env, monkeypatch):
        llm = ScriptedLLM("positive", "Honk!")
        monkeypatch.setattr(cli_app, "require_llm", lambda settings, console: llm)
        runner.invoke(cli_app.app, ["chat", "-u", "u1"], input="hi\nq\n")

        result = runner.invoke(cli_app.app, ["init-db", "--reset", "--yes"])

        assert result.exit_code == 0
        assert "Dropping sqlite tables" in result.output
        assert "initialized successfully" in result.output

        history = runner.invoke(cli_app.app, ["history", "u1"])
        assert "No messages for u1" in history.output

    def test_init_db_reset_aborted_keeps_state(self, sqlite_env, monkeypatch):
        llm = ScriptedLLM("positive", "Honk!")
        monkeypatch.setattr(cli_app, "require_llm", lambda settings, console: llm)
        runner.invoke(cli_app.app, ["chat", "-u", "u1"], input="hi\nq\n")

        result = runner.invoke(cli_app.app, ["init-db", "--reset"], input="n\n")

        assert result.exit_code == 0
        assert "Aborted." in result.output

        history = runner.invoke(cli_app.app, ["history", "u1"])
        assert "Honk!" in history.output
