"""
Wizard definition loader.

YAML definitions describe each step's fields; steps without an explicit
schema validate those fields with a generated one.
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from stepwise.exceptions import WizardConfigError
from stepwise.forms.loader import builtin_names, describe_validation_error, read_definition
from stepwise.forms.schema import VisibleFieldsSchema
from stepwise.wizard.models import WizardConfig

logger = logging.getLogger(__name__)

BUILTIN_DIR = Path(__file__).parent / "defaults"


def with_field_schemas(config: WizardConfig) -> WizardConfig:
    """Give every step that has fields but no schema a generated one."""
    steps = []
    for step in config.steps:
        if step.validation_schema is None and step.fields:
            schema = VisibleFieldsSchema(f"{config.id}-{step.id}", step.fields)
            step = step.model_copy(update={"validation_schema": schema})
        steps.append(step)
    return config.model_copy(update={"steps": steps})


def load_wizard_config(path: Path | str) -> WizardConfig:
    """
    Load a wizard definition from YAML.

    Args:
        path: Path to the definition.

    Returns:
        Wizard configuration with field schemas attached.

    Raises:
        WizardConfigError: If the file cannot be read or does not describe a wizard.
    """
    path = Path(path)
    data = read_definition(path)
    try:
        config = WizardConfig.model_validate(data)
    except ValidationError as e:
        raise WizardConfigError(f"Invalid wizard definition {path}: {describe_validation_error(e)}") from e
    logger.debug(f"Loaded wizard '{config.id}' with {len(config.steps)} steps from {path}")
    return with_field_schemas(config)


def list_builtin_wizards() -> list[str]:
    """Names of the bundled wizard definitions."""
    return builtin_names(BUILTIN_DIR)


def load_builtin_wizard(name: str) -> WizardConfig:
    """
    Load a bundled wizard by name (e.g. ``project-setup``).

    Raises:
        WizardConfigError: If no bundled wizard has this name.
    """
    path = BUILTIN_DIR / f"{name.replace('-', '_')}.yaml"
    if not path.exists():
        available = ", ".join(list_builtin_wizards()) or "none"
        raise WizardConfigError(f"Unknown built-in wizard '{name}' (available: {available})")
    return load_wizard_config(path)
