"""Tests for CLI commands."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from planning_relay.cli import main
from planning_relay.exceptions import ConnectivityError


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with patch("planning_relay.cli.setup_logging"):
        yield CliRunner()


@pytest.fixture
def batch_files(tmp_path, pdf_bytes):
    document = tmp_path / "planning.pdf"
    document.write_bytes(pdf_bytes)
    recipients = tmp_path / "recipients.json"
    recipients.write_text(json.dumps([
        {"name": "Alice", "email": "alice@example.com"},
        {"name": "Bob", "email": ""},
    ]))
    return str(document), str(recipients)


class TestSendCommand:
    """Tests for the send command."""

    def test_dry_run_weekly(self, runner, batch_files):
        """Test a dry run of a weekly batch."""
        document, recipients = batch_files

        result = runner.invoke(main, [
            "send", "--document", document, "--recipients", recipients,
            "--start", "2024-06-03", "--dry-run",
        ])

        assert result.exit_code == 0, result.output
        outcomes = json.loads(result.stdout)
        assert len(outcomes) == 1
        assert outcomes[0]["employee"]["name"] == "Alice"
        assert outcomes[0]["success"] is True

    def test_custom_options_go_together(self, runner, batch_files):
        """Test that custom content options must be given together."""
        document, recipients = batch_files

        result = runner.invoke(main, [
            "send", "--document", document, "--recipients", recipients,
            "--start", "2024-06-01", "--mode", "monthly", "--subject", "Juin", "--dry-run",
        ])

        assert result.exit_code == 1

    def test_invalid_start_date(self, runner, batch_files):
        """Test rejecting an invalid start date."""
        document, recipients = batch_files

        result = runner.invoke(main, [
            "send", "--document", document, "--recipients", recipients,
            "--start", "soon", "--dry-run",
        ])

        assert result.exit_code == 1


class TestVerifyCommand:
    """Tests for the verify command."""

    def test_failure_exit_code(self, runner):
        """Test the exit code when verification fails."""
        error = ConnectivityError("Connection refused", code="ECONNECTION", command="CONN")
        with patch("planning_relay.cli.SMTPTransport.verify", side_effect=error):
            result = runner.invoke(main, ["verify"])

        assert result.exit_code == 1

    def test_success(self, runner):
        """Test a successful verification."""
        with patch("planning_relay.cli.SMTPTransport.verify", return_value=None):
            result = runner.invoke(main, ["verify"])

        assert result.exit_code == 0
        assert "is ready" in result.output
