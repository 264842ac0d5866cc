"""
Unit tests for CLI commands.
"""

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from stepwise import __version__
from stepwise.cli.app import app
from stepwise.cli.runtime import parse_assignments, parse_value

TINY_WIZARD = {
    "id": "tiny",
    "title": "Tiny",
    "steps": [
        {
            "id": "profile",
            "title": "Profile",
            "fields": [{"id": "name", "label": "Name", "required": True, "validation": {"min_length": 2}}],
        }
    ],
}


@pytest.fixture
def tiny_wizard(temp_dir: Path) -> Path:
    path = temp_dir / "tiny.yaml"
    path.write_text(yaml.dump(TINY_WIZARD))
    return path


@pytest.fixture
def persisted_wizard(temp_dir: Path) -> Path:
    definition = {
        **TINY_WIZARD,
        "id": "kept",
        "persistence": {"enabled": True, "storage_type": "local"},
        "steps": TINY_WIZARD["steps"] + [{"id": "extras", "title": "Extras", "optional": True}],
    }
    path = temp_dir / "kept.yaml"
    path.write_text(yaml.dump(definition))
    return path


def test_version(cli_runner: CliRunner) -> None:
    """Test --version flag."""
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_help(cli_runner: CliRunner) -> None:
    """Test --help flag."""
    result = cli_runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "wizard" in result.stdout
    assert "form" in result.stdout
    assert "config" in result.stdout


class TestWizardCommands:
    """Tests for the wizard command group."""

    def test_list(self, cli_runner: CliRunner) -> None:
        """Test bundled wizards are listed."""
        result = cli_runner.invoke(app, ["wizard", "list"])
        assert result.exit_code == 0
        assert "project-setup" in result.stdout
        assert "user-onboarding" in result.stdout

    def test_show_builtin(self, cli_runner: CliRunner) -> None:
        """Test the steps of a bundled wizard are shown."""
        result = cli_runner.invoke(app, ["wizard", "show", "--builtin", "project-setup"])
        assert result.exit_code == 0
        assert "Navigation: linear" in result.stdout
        assert "Submit: POST /projects" in result.stdout

    def test_show_requires_one_source(self, cli_runner: CliRunner, tiny_wizard: Path) -> None:
        """Test a file and --builtin are mutually exclusive."""
        assert cli_runner.invoke(app, ["wizard", "show"]).exit_code == 2
        result = cli_runner.invoke(app, ["wizard", "show", str(tiny_wizard), "--builtin", "project-setup"])
        assert result.exit_code == 2

    def test_show_unknown_builtin(self, cli_runner: CliRunner) -> None:
        """Test unknown bundled names fail."""
        result = cli_runner.invoke(app, ["wizard", "show", "--builtin", "checkout"])
        assert result.exit_code == 1
        assert "Unknown built-in wizard" in result.stdout

    def test_run_and_submit(self, cli_runner: CliRunner, tiny_wizard: Path) -> None:
        """Test a scripted run fills the step and submits locally."""
        result = cli_runner.invoke(app, ["wizard", "run", str(tiny_wizard)], input="fill\nAlice\nsubmit\n")

        assert result.exit_code == 0, result.stdout
        assert "Submitted successfully!" in result.stdout
        assert '"Alice"' in result.stdout

    def test_run_quit(self, cli_runner: CliRunner, tiny_wizard: Path) -> None:
        """Test quitting ends without submitting."""
        result = cli_runner.invoke(app, ["wizard", "run", str(tiny_wizard)], input="quit\n")

        assert result.exit_code == 0
        assert "Submitted successfully!" not in result.stdout

    def test_status_and_reset(self, cli_runner: CliRunner, persisted_wizard: Path) -> None:
        """Test saved progress is reported and can be cleared."""
        result = cli_runner.invoke(app, ["wizard", "status", str(persisted_wizard)])
        assert "No saved progress" in result.stdout

        run = cli_runner.invoke(app, ["wizard", "run", str(persisted_wizard)], input="fill\nAlice\nnext\nquit\n")
        assert run.exit_code == 0, run.stdout

        status = cli_runner.invoke(app, ["wizard", "status", str(persisted_wizard), "--json"])
        assert status.exit_code == 0
        snapshot = json.loads(status.stdout)
        assert snapshot["currentStepIndex"] == 1
        assert snapshot["completedSteps"] == ["profile"]

        reset = cli_runner.invoke(app, ["wizard", "reset", str(persisted_wizard)])
        assert reset.exit_code == 0
        assert "Cleared saved progress" in reset.stdout

        after = cli_runner.invoke(app, ["wizard", "status", str(persisted_wizard)])
        assert "No saved progress" in after.stdout

    def test_status_without_persistence(self, cli_runner: CliRunner, tiny_wizard: Path) -> None:
        """Test status explains when nothing is persisted."""
        result = cli_runner.invoke(app, ["wizard", "status", str(tiny_wizard)])
        assert result.exit_code == 0
        assert "disabled" in result.stdout


class TestFormCommands:
    """Tests for the form command group."""

    def test_list(self, cli_runner: CliRunner) -> None:
        """Test bundled forms are listed."""
        result = cli_runner.invoke(app, ["form", "list"])
        assert result.exit_code == 0
        assert "user-registration" in result.stdout

    def test_visibility_json(self, cli_runner: CliRunner) -> None:
        """Test business fields appear for business accounts."""
        base = ["form", "visibility", "--builtin", "user-registration", "--json"]

        personal = json.loads(cli_runner.invoke(app, base).stdout)
        assert personal["companyName"] is False

        result = cli_runner.invoke(app, base + ["--set", "accountType=business"])
        assert result.exit_code == 0
        business = json.loads(result.stdout)
        assert business["companyName"] is True
        assert business["email"] is True

    def test_visibility_bad_assignment(self, cli_runner: CliRunner) -> None:
        """Test malformed --set values are rejected."""
        result = cli_runner.invoke(
            app, ["form", "visibility", "--builtin", "user-registration", "--set", "accountType"]
        )
        assert result.exit_code == 2


class TestConfigCommands:
    """Tests for the config command group."""

    def test_show_json(self, cli_runner: CliRunner) -> None:
        """Test the effective configuration is printed as JSON."""
        result = cli_runner.invoke(app, ["config", "show", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["logging"]["level"] == "WARNING"
        assert data["storage"]["default_type"] == "local"

    def test_show_section(self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test a single section reflects environment overrides."""
        monkeypatch.setenv("STEPWISE_SUBMIT__BASE_URL", "https://api.example.com")

        result = cli_runner.invoke(app, ["config", "show", "submit", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["base_url"] == "https://api.example.com"

    def test_show_unknown_section(self, cli_runner: CliRunner) -> None:
        """Test unknown sections fail."""
        result = cli_runner.invoke(app, ["config", "show", "providers"])
        assert result.exit_code == 1

    def test_show_sources(self, cli_runner: CliRunner) -> None:
        """Test the source table lists global and project files."""
        result = cli_runner.invoke(app, ["config", "show", "--sources"])
        assert result.exit_code == 0
        assert "global" in result.stdout
        assert "project" in result.stdout


class TestParsing:
    """Tests for command-line value parsing."""

    def test_parse_value(self):
        """Test JSON literals are decoded and other text kept."""
        assert parse_value("true") is True
        assert parse_value("42") == 42
        assert parse_value('["a", "b"]') == ["a", "b"]
        assert parse_value("business") == "business"

    def test_parse_assignments(self):
        """Test key=value pairs."""
        assert parse_assignments(["a=1", "b=x=y"]) == {"a": 1, "b": "x=y"}
