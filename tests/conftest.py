"""
Pytest configuration and fixtures for stepwise tests.
"""

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from pydantic import BaseModel, Field
from typer.testing import CliRunner

from stepwise.config import clear_config_cache
from stepwise.storage.stores import MemoryStore, reset_session_store
from stepwise.wizard.models import WizardConfig, WizardStep


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def stepwise_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Point ~/.stepwise at a temporary directory and reset process-wide caches."""
    home = temp_dir / ".stepwise"
    monkeypatch.setenv("STEPWISE_HOME", str(home))
    monkeypatch.chdir(temp_dir)
    clear_config_cache()
    reset_session_store()
    yield home
    clear_config_cache()
    reset_session_store()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Provide an empty in-memory store."""
    return MemoryStore()


class NameSchema(BaseModel):
    """Step schema requiring a name of at least two characters."""

    name: str = Field(min_length=2)


def make_wizard(
    count: int = 5,
    *,
    skippable: tuple[int, ...] = (),
    optional: tuple[int, ...] = (),
    schemas: dict[int, Any] | None = None,
    **config: Any,
) -> WizardConfig:
    """Build a wizard with steps ``step-1`` .. ``step-N`` titled ``Step N``."""
    schemas = schemas or {}
    steps = [
        WizardStep(
            id=f"step-{index + 1}",
            title=f"Step {index + 1}",
            skippable=index in skippable,
            optional=index in optional,
            validation_schema=schemas.get(index),
        )
        for index in range(count)
    ]
    return WizardConfig(id=config.pop("id", "test-wizard"), title="Test Wizard", steps=steps, **config)


@pytest.fixture
def linear_config() -> WizardConfig:
    """Five-step linear wizard; step 2 is skippable and step 1 validates a name."""
    return make_wizard(5, skippable=(1,), schemas={0: NameSchema})


@pytest.fixture
def non_linear_config() -> WizardConfig:
    """Five-step non-linear wizard."""
    return make_wizard(5, navigation_mode="non-linear")


@pytest.fixture
def registration_form_dict() -> dict[str, Any]:
    """Provide a small form definition with a conditional business field."""
    return {
        "id": "registration",
        "title": "Registration",
        "fields": [
            {
                "id": "email",
                "label": "Email",
                "type": "email",
                "required": True,
            },
            {
                "id": "accountType",
                "label": "Account Type",
                "type": "radio",
                "required": True,
                "default_value": "personal",
                "options": [
                    {"label": "Personal", "value": "personal"},
                    {"label": "Business", "value": "business"},
                ],
            },
            {
                "id": "companyName",
                "label": "Company Name",
                "type": "text",
                "required": True,
                "conditional": {
                    "mode": "all",
                    "rules": [{"field": "accountType", "operator": "equals", "value": "business"}],
                },
                "validation": {"min_length": 2},
            },
        ],
    }


@pytest.fixture
def wizard_factory():
    """Provide the ``make_wizard`` builder."""
    return make_wizard
