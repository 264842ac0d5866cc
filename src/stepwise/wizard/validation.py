"""
Step validation.

Runs a step's schema over the whole step object and keeps one error message
per field.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from stepwise.exceptions import SchemaValidationError
from stepwise.schema import errors_from_issues
from stepwise.wizard.models import WizardStep

logger = logging.getLogger(__name__)

ErrorsCallback = Callable[[dict[str, str]], None]


@dataclass
class ValidationResult:
    """Outcome of validating a step."""

    valid: bool
    errors: dict[str, str] = field(default_factory=dict)


class StepValidator:
    """Validates one step and tracks its field errors."""

    def __init__(self, step: WizardStep, on_change: ErrorsCallback | None = None):
        """Initialize the validator.

        Args:
            step: Step whose ``validation_schema`` is applied.
            on_change: Receives a copy of the error map after every change.
        """
        self.step = step
        self.errors: dict[str, str] = {}
        self.is_validating = False
        self._on_change = on_change

    @property
    def is_valid(self) -> bool:
        return not self.errors

    async def _run(self, data: Any) -> dict[str, str]:
        schema = self.step.validation_schema
        if schema is None:
            return {}
        self.is_validating = True
        try:
            await schema.parse({} if data is None else data)
        except SchemaValidationError as e:
            return errors_from_issues(e.issues)
        finally:
            self.is_validating = False
        return {}

    async def validate(self, data: Any) -> ValidationResult:
        """Validate the whole step object and replace the error map."""
        self.errors = await self._run(data)
        self._notify()
        if self.errors:
            logger.debug(f"Step '{self.step.id}' invalid: {sorted(self.errors)}")
        return ValidationResult(valid=not self.errors, errors=dict(self.errors))

    async def validate_field(self, name: str, value: Any, data: dict[str, Any] | None = None) -> bool:
        """
        Re-validate one field in the context of the full step data.

        Only the entry for ``name`` is updated; other fields keep their errors.
        ``on_change`` is not notified.

        Args:
            name: Field name.
            value: New value of the field.
            data: Current step data.

        Returns:
            Whether the field is valid.
        """
        errors = await self._run({**(data or {}), name: value})
        if name in errors:
            self.errors[name] = errors[name]
        else:
            self.errors.pop(name, None)
        return name not in errors

    def clear_errors(self) -> None:
        self.errors = {}
        self._notify()

    def clear_field_error(self, name: str) -> None:
        self.errors.pop(name, None)
        self._notify()

    def set_field_error(self, name: str, message: str) -> None:
        self.errors[name] = message
        self._notify()

    def can_complete(self) -> bool:
        """Optional steps can always be completed; required ones need no errors."""
        return self.step.optional or not self.errors

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(dict(self.errors))
