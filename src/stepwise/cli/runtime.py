"""
Shared wiring for CLI commands.

Resolves definitions from paths or built-in names and builds stores and
submitters from the application configuration.
"""

import json
from pathlib import Path
from typing import Any

import typer

from stepwise.cli.output import print_error
from stepwise.config import Config, ConfigurationError, get_config
from stepwise.exceptions import WizardConfigError
from stepwise.forms import FormConfig, load_builtin_form, load_form_config
from stepwise.storage.paths import expand_path
from stepwise.storage.stores import KeyValueStore, StorageType, create_store
from stepwise.submit import HttpSubmitter, Submitter, local_submit
from stepwise.wizard import WizardConfig, load_builtin_wizard, load_wizard_config


def load_app_config() -> Config:
    try:
        return get_config()
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e


def resolve_wizard(path: Path | None, builtin: str | None) -> WizardConfig:
    """Load a wizard from a file or by built-in name, exiting on failure."""
    if (path is None) == (builtin is None):
        print_error("Give either a definition file or --builtin NAME.")
        raise typer.Exit(2)
    try:
        if builtin is not None:
            return load_builtin_wizard(builtin)
        return load_wizard_config(path)
    except WizardConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def resolve_form(path: Path | None, builtin: str | None) -> FormConfig:
    """Load a form from a file or by built-in name, exiting on failure."""
    if (path is None) == (builtin is None):
        print_error("Give either a definition file or --builtin NAME.")
        raise typer.Exit(2)
    try:
        if builtin is not None:
            return load_builtin_form(builtin)
        return load_form_config(path)
    except WizardConfigError as e:
        print_error(str(e))
        raise typer.Exit(1) from e


def build_store(storage_type: StorageType | str, config: Config) -> KeyValueStore:
    """Create the store for a scope, honouring ``storage.state_dir``."""
    base_path = expand_path(config.storage.state_dir) if config.storage.state_dir else None
    return create_store(storage_type, base_path=base_path)


def build_submitter(config: Config) -> Submitter:
    """HTTP submitter when ``submit.base_url`` is configured, local echo otherwise."""
    if not config.submit.base_url:
        return local_submit
    return HttpSubmitter(
        base_url=config.submit.base_url,
        timeout=config.submit.timeout_seconds,
        headers=config.submit.headers,
    )


def parse_value(value: str) -> Any:
    """
    Parse a command-line value.

    JSON literals (numbers, booleans, null, lists, objects, quoted strings)
    are decoded; anything else is kept as a string.
    """
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs, exiting on malformed input."""
    values: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, raw = assignment.partition("=")
        if not sep or not key.strip():
            print_error(f"Expected key=value, got '{assignment}'")
            raise typer.Exit(2)
        values[key.strip()] = parse_value(raw)
    return values
