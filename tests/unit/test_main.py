"""
Unit tests for the main module: composition root and CLI.

Commands run through click's CliRunner; the network side is replaced by
patching fetch_crlset where main.py looks it up.
"""

from __future__ import annotations

import base64
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import structlog
from click.testing import CliRunner

from crlset import __version__
from crlset.main import _std_sinks, cli, configure_structlog
from crlset.railway import ErrorCode, Result
from tests.builders import ZERO_SPKI, encode_crlset

QUIET = {"CRLSET_LOG_LEVEL": "WARNING"}


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


class TestConfigureStructlog:
    """Verify structlog configuration function."""

    def test_configure_structlog_sets_log_level(self) -> None:
        configure_structlog("WARNING")
        assert structlog.is_configured()

    def test_configure_structlog_invalid_level_falls_back(self) -> None:
        """
        GIVEN an invalid log_level string
        WHEN configure_structlog is called
        THEN it falls back to INFO (no crash).
        """
        configure_structlog("NONEXISTENT")
        structlog.get_logger().info("still.works")

    def test_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_structlog("INFO")
        structlog.get_logger().info("stderr.event", answer=42)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "stderr.event" in captured.err

    def test_diagnostics_use_process_stderr(self) -> None:
        assert _std_sinks().diagnostics is sys.stderr


class TestCliBasics:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"], env=QUIET)
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_usage_error(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["dump"], env=QUIET)
        assert result.exit_code == 2

    def test_unknown_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["frobnicate"], env=QUIET)
        assert result.exit_code == 2

    def test_offline_commands_ignore_network_settings(self, runner: CliRunner, scenario_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["dump", str(scenario_file)],
            env={**QUIET, "CRLSET_HTTP_TIMEOUT_SECONDS": "0"},
        )
        assert result.exit_code == 0


class TestDumpCommands:
    def test_dump(self, runner: CliRunner, scenario_file: Path) -> None:
        result = runner.invoke(cli, ["dump", str(scenario_file)], env=QUIET)

        assert result.exit_code == 0
        lines = result.stdout_bytes.splitlines()
        assert lines == [
            b"\\\\x" + ZERO_SPKI.hex().encode() + b"\t\\\\xab\t",
            b"\\\\x" + ZERO_SPKI.hex().encode() + b"\t\\\\x0102\t",
        ]

    def test_dump_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["dump", str(tmp_path / "missing")], env=QUIET)

        assert result.exit_code == 1
        assert "Failed to read CRLSet" in result.output

    def test_dump_truncated_file(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "crl-set"
        path.write_bytes(encode_crlset(None, [(ZERO_SPKI, [b"\x01\x02"])])[:-1])
        result = runner.invoke(cli, ["dump", str(path)], env=QUIET)

        assert result.exit_code == 1
        assert "CRLSet truncated at serial" in result.output

    @pytest.mark.parametrize("command", ["dumpSPKIs", "dump-spkis"])
    def test_dump_spkis(self, runner: CliRunner, tmp_path: Path, command: str) -> None:
        path = tmp_path / "crl-set"
        path.write_bytes(encode_crlset({"BlockedSPKIs": [base64.b64encode(b"\x07" * 32).decode()]}))
        result = runner.invoke(cli, [command, str(path)], env=QUIET)

        assert result.exit_code == 0
        assert result.stdout_bytes == b"\t\t\\\\x" + (b"07" * 32) + b"\n"


class TestFetchCommand:
    @patch("crlset.main.fetch_crlset")
    def test_fetch_writes_crlset(self, mock_fetch: MagicMock, runner: CliRunner) -> None:
        mock_fetch.return_value = Result.success(b"\x00\x00raw crlset")
        result = runner.invoke(cli, ["fetch"], env=QUIET)

        assert result.exit_code == 0
        assert result.stdout_bytes == b"\x00\x00raw crlset"
        mock_fetch.assert_called_once()

    @patch("crlset.main.fetch_crlset")
    def test_fetch_to_file(self, mock_fetch: MagicMock, runner: CliRunner, tmp_path: Path) -> None:
        mock_fetch.return_value = Result.success(b"crlset bytes")
        target = tmp_path / "crl-set"
        result = runner.invoke(cli, ["fetch", "-o", str(target)], env=QUIET)

        assert result.exit_code == 0
        assert target.read_bytes() == b"crlset bytes"
        assert result.stdout_bytes == b""

    @patch("crlset.main.fetch_crlset")
    def test_fetch_failure(self, mock_fetch: MagicMock, runner: CliRunner) -> None:
        mock_fetch.return_value = Result.failure(
            ErrorCode.EXTERNAL_SERVICE_ERROR, "Failed to get current version: 503"
        )
        result = runner.invoke(cli, ["fetch"], env=QUIET)

        assert result.exit_code == 1
        assert "Failed to get current version" in result.output

    @patch("crlset.main.fetch_crlset")
    def test_fetch_invalid_configuration(self, mock_fetch: MagicMock, runner: CliRunner) -> None:
        """
        GIVEN a network setting that fails validation
        WHEN fetch runs
        THEN it exits 1 with the configuration error and never fetches.
        """
        result = runner.invoke(cli, ["fetch"], env={**QUIET, "CRLSET_HTTP_TIMEOUT_SECONDS": "0"})

        assert result.exit_code == 1
        assert "Configuration error" in result.output
        mock_fetch.assert_not_called()
