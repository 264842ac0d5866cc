"""
Exceptions for Stepwise.

Validation problems are normally recorded as error maps rather than raised;
these exceptions cover the boundaries where a caller has to react.
"""

from __future__ import annotations

from dataclasses import dataclass


class StepwiseError(Exception):
    """Base exception for Stepwise errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class WizardConfigError(StepwiseError):
    """Wizard or form definition is invalid or cannot be loaded."""

    pass


@dataclass(frozen=True)
class SchemaIssue:
    """A single schema failure located by its path inside the validated data."""

    path: tuple[str | int, ...]
    message: str

    @property
    def field(self) -> str:
        """Top-level field the issue belongs to, or an empty string for root issues."""
        if not self.path:
            return ""
        return str(self.path[0])


class SchemaValidationError(StepwiseError):
    """Raised by a step schema when data does not satisfy it."""

    def __init__(self, issues: list[SchemaIssue]):
        summary = "; ".join(
            f"{'.'.join(str(part) for part in issue.path) or '<root>'}: {issue.message}"
            for issue in issues
        )
        super().__init__(summary or "Validation failed")
        self.issues = issues


class SubmissionError(StepwiseError):
    """Submission transport failed or the endpoint rejected the payload."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class PersistenceError(StepwiseError):
    """A keyed store could not read, write or remove an entry."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key
