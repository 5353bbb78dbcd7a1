"""Tests for CLI commands."""

import asyncio
import json
import logging

import pytest

from tests.conftest import ALEX, BOSS, GAMING, NOBODY, WORK, audit_count
from truename.cli.app import app
from truename.cli.runtime import open_runtime
from truename.config import load_config
from truename.logging import JSONLHandler


class TestResolveCommand:
    """Tests for 'truename resolve'."""

    def test_resolve_preferred_name(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["resolve", ALEX, "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Alex" in result.stdout
        assert "preferred_fallback" in result.stdout

    def test_resolve_with_consent_json(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app,
            ["resolve", ALEX, "--requester", BOSS, "--json", "-c", str(config_file)],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["name"] == "Alexander Smith"
        assert data["source"] == "consent_based"
        assert data["metadata"]["consent_id"] == "consent-boss"

    def test_resolve_context(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app,
            ["resolve", ALEX, "--context", GAMING, "--json", "-c", str(config_file)],
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["name"] == "Al"

    def test_resolve_uses_configured_anonymous_name(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["resolve", NOBODY, "--json", "--config", str(config_file)]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["name"] == "Someone"

    def test_resolve_is_audited(self, cli_runner, config_file, seeded_db_path):
        cli_runner.invoke(app, ["resolve", ALEX, "--config", str(config_file)])
        assert audit_count(seeded_db_path, ALEX) == 1

    def test_resolve_missing_config(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["resolve", ALEX, "--config", str(tmp_path / "missing.toml")]
        )
        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestCommandLogging:
    @pytest.mark.parametrize(
        "args",
        [
            ["resolve", ALEX],
            ["batch", ALEX, GAMING],
            ["benchmark", ALEX, "-n", "1"],
            ["audit", ALEX],
        ],
    )
    def test_log_to_file_is_honoured(
        self, cli_runner, config_file, truename_home, args
    ):
        with config_file.open("a") as f:
            f.write("\n[logging]\nlog_to_file = true\n")

        result = cli_runner.invoke(app, [*args, "--config", str(config_file)])

        root = logging.getLogger()
        try:
            assert result.exit_code == 0
            assert any(isinstance(h, JSONLHandler) for h in root.handlers)
            assert (truename_home / "logs").is_dir()
        finally:
            for handler in root.handlers:
                handler.close()


class TestOpenRuntime:
    def test_each_runtime_owns_its_database(self, config_file):
        config = load_config(config_file)

        async def run():
            async with open_runtime(config) as first, open_runtime(config) as second:
                assert first.database is not second.database
                assert first.store is not second.store
                assert await first.database.ping()
                return first, second

        first, second = asyncio.run(run())

        assert not first.database.is_connected
        assert not second.database.is_connected


class TestBatchCommand:
    def test_batch_json(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app,
            ["batch", ALEX, WORK, GAMING, "Unknown", "--json", "-c", str(config_file)],
        )
        assert result.exit_code == 0
        names = [r["name"] for r in json.loads(result.stdout)["results"]]
        assert names == ["Alexander Smith", "Al", "Alex"]

    def test_batch_table(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["batch", ALEX, GAMING, "--config", str(config_file)]
        )
        assert result.exit_code == 0
        assert "context_specific" in result.stdout

    def test_batch_requires_contexts(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["batch", ALEX, "--config", str(config_file)])
        assert result.exit_code != 0


class TestBenchmarkCommand:
    def test_benchmark_json(self, cli_runner, config_file, seeded_db_path):
        result = cli_runner.invoke(
            app,
            ["benchmark", ALEX, "-n", "3", "--json", "--config", str(config_file)],
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["iterations"] == 3
        assert data["min_ms"] <= data["max_ms"]
        assert audit_count(seeded_db_path, ALEX) == 3

    def test_benchmark_rejects_zero_iterations(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["benchmark", ALEX, "-n", "0", "--config", str(config_file)]
        )
        assert result.exit_code == 1
        assert "iterations" in result.stdout


class TestAuditCommand:
    def test_audit_lists_disclosures(self, cli_runner, config_file):
        cli_runner.invoke(
            app, ["resolve", ALEX, "--requester", BOSS, "--config", str(config_file)]
        )
        cli_runner.invoke(
            app, ["resolve", ALEX, "--context", GAMING, "--config", str(config_file)]
        )

        result = cli_runner.invoke(
            app, ["audit", ALEX, "--json", "--config", str(config_file)]
        )

        assert result.exit_code == 0
        entries = json.loads(result.stdout)
        assert [e["details"]["resolution_type"] for e in entries] == [
            "context_specific",
            "consent_based",
        ]
        assert entries[1]["requester_id"] == BOSS

    def test_audit_empty(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["audit", NOBODY, "--config", str(config_file)])
        assert result.exit_code == 0
        assert "No audit entries" in result.stdout


class TestDbCommand:
    def test_db_init_creates_tables(self, cli_runner, tmp_path):
        db_path = tmp_path / "fresh" / "names.db"
        config_path = tmp_path / "fresh.toml"
        config_path.write_text(f'[database]\npath = "{db_path.as_posix()}"\n')

        result = cli_runner.invoke(app, ["db", "init", "--config", str(config_path)])

        assert result.exit_code == 0
        assert "initialized" in result.stdout
        assert db_path.exists()

        status = cli_runner.invoke(app, ["db", "status", "--config", str(config_path)])
        assert status.exit_code == 0
        assert "audit_log_entries" in status.stdout

    def test_db_status_counts_rows(self, cli_runner, config_file):
        result = cli_runner.invoke(app, ["db", "status", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "profiles" in result.stdout
        assert "consents" in result.stdout


class TestConfigCommand:
    """Tests for 'truename config'."""

    def test_config_show(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["config", "show", "--path", str(config_file)]
        )
        assert result.exit_code == 0
        assert "Someone" in result.stdout

    def test_config_show_masks_database_url(self, cli_runner, tmp_path):
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            '[database]\nurl = "postgresql+asyncpg://app:topsecret@db/names"\n'
        )

        result = cli_runner.invoke(app, ["config", "show", "--path", str(config_path)])

        assert result.exit_code == 0
        assert "topsecret" not in result.stdout

    def test_config_show_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(
            app, ["config", "show", "--path", str(tmp_path / "missing.toml")]
        )
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_config_validate_success(self, cli_runner, config_file):
        result = cli_runner.invoke(
            app, ["config", "validate", "--path", str(config_file)]
        )
        assert result.exit_code == 0
        assert "valid" in result.stdout.lower()

    def test_config_validate_invalid_toml(self, cli_runner, tmp_path):
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("not valid toml [[[")

        result = cli_runner.invoke(
            app, ["config", "validate", "--path", str(invalid_file)]
        )
        assert result.exit_code == 1
        assert "Invalid TOML" in result.stdout

    def test_config_validate_invalid_config(self, cli_runner, tmp_path):
        invalid_config = tmp_path / "bad_config.toml"
        invalid_config.write_text('[resolution]\nanonymous_name = "  "\n')

        result = cli_runner.invoke(
            app, ["config", "validate", "--path", str(invalid_config)]
        )
        assert result.exit_code == 1
        assert "invalid" in result.stdout.lower()


class TestServeCommand:
    def test_serve_builds_app_from_config(self, cli_runner, config_file, monkeypatch):
        captured: dict = {}

        async def fake_run(self) -> None:
            captured["host"] = self._host
            captured["port"] = self._port
            captured["app"] = self._app

        monkeypatch.setattr("truename.server.runner.ServerRunner.run", fake_run)

        result = cli_runner.invoke(
            app, ["serve", "--port", "9999", "--config", str(config_file)]
        )

        assert result.exit_code == 0
        assert captured["host"] == "127.0.0.1"
        assert captured["port"] == 9999
        assert captured["app"].title == "TrueName"
