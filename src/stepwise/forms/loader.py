"""
Form definition loader.

Reads form definitions from YAML files; built-in definitions ship in the
``defaults`` directory next to this module.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from stepwise.exceptions import WizardConfigError
from stepwise.forms.models import FormConfig

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).parent / "defaults"


def read_definition(path: Path) -> dict[str, Any]:
    """
    Read a YAML definition file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed mapping.

    Raises:
        WizardConfigError: If the file is missing, unreadable or not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise WizardConfigError(f"Definition not found: {path}") from e
    except yaml.YAMLError as e:
        raise WizardConfigError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise WizardConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(content, dict):
        raise WizardConfigError(f"Definition in {path} must be a mapping")
    return content


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into one line per problem."""
    return "; ".join(
        f"{'.'.join(str(part) for part in detail['loc']) or '<root>'}: {detail['msg']}"
        for detail in error.errors()
    )


def builtin_names(directory: Path) -> list[str]:
    """Names of the YAML definitions in a directory, dash-separated."""
    return sorted(path.stem.replace("_", "-") for path in directory.glob("*.yaml"))


def load_form_config(path: Path | str) -> FormConfig:
    """
    Load a form definition from YAML.

    Raises:
        WizardConfigError: If the file cannot be read or does not describe a form.
    """
    path = Path(path)
    data = read_definition(path)
    try:
        config = FormConfig.model_validate(data)
    except ValidationError as e:
        raise WizardConfigError(f"Invalid form definition {path}: {describe_validation_error(e)}") from e
    logger.debug(f"Loaded form '{config.id}' from {path}")
    return config


def list_builtin_forms() -> list[str]:
    """Names of the bundled form definitions."""
    return builtin_names(BUILTIN_DIR)


def load_builtin_form(name: str) -> FormConfig:
    """
    Load a bundled form definition by name (e.g. ``user-registration``).

    Raises:
        WizardConfigError: If no bundled form has this name.
    """
    path = BUILTIN_DIR / f"{name.replace('-', '_')}.yaml"
    if not path.exists():
        available = ", ".join(list_builtin_forms()) or "none"
        raise WizardConfigError(f"Unknown built-in form '{name}' (available: {available})")
    return load_form_config(path)
