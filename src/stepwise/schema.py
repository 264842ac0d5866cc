"""
Step and form schemas.

A schema is any object with an async ``parse(data)`` that returns the parsed
data or raises ``SchemaValidationError`` carrying located issues. Pydantic
models are adapted with ``ModelSchema``; ``RefinedSchema`` layers async
cross-field or remote checks on top of a base schema.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ValidationError

from stepwise.exceptions import SchemaIssue, SchemaValidationError

logger = logging.getLogger(__name__)

ROOT_ERROR_KEY = "__root__"

RefinementResult = Union[list[SchemaIssue], dict[str, str], None]
Refinement = Callable[[Any], Union[RefinementResult, Awaitable[RefinementResult]]]


@runtime_checkable
class StepSchema(Protocol):
    """Validator object with an async parse."""

    async def parse(self, data: Any) -> Any: ...


class ModelSchema:
    """Adapts a pydantic model class to the schema protocol."""

    def __init__(self, model: type[BaseModel], messages: dict[str, str] | None = None):
        """Initialize the adapter.

        Args:
            model: Pydantic model validating the whole step object.
            messages: Per-field replacement messages keyed by top-level field name.
        """
        self.model = model
        self.messages = dict(messages or {})

    async def parse(self, data: Any) -> dict[str, Any]:
        try:
            parsed = self.model.model_validate(data)
        except ValidationError as e:
            raise SchemaValidationError(self._issues(e)) from e
        return parsed.model_dump(by_alias=True)

    def _issues(self, error: ValidationError) -> list[SchemaIssue]:
        issues = []
        for detail in error.errors():
            path = tuple(detail.get("loc", ()))
            message = detail.get("msg", "Invalid value")
            if path and str(path[0]) in self.messages:
                message = self.messages[str(path[0])]
            issues.append(SchemaIssue(path=path, message=message))
        return issues

    def __repr__(self) -> str:
        return f"<ModelSchema {self.model.__name__}>"


class RefinedSchema:
    """Runs extra checks after a base schema accepts the data.

    Each refinement receives the parsed data and returns issues as a list of
    ``SchemaIssue`` or a ``{field: message}`` mapping; refinements may be
    coroutines, which is how remote checks (e.g. "is this name taken?") plug in.
    """

    def __init__(self, base: StepSchema, *refinements: Refinement):
        self.base = base
        self.refinements = list(refinements)

    async def parse(self, data: Any) -> Any:
        parsed = await self.base.parse(data)
        issues: list[SchemaIssue] = []
        for refinement in self.refinements:
            result = refinement(parsed)
            if inspect.isawaitable(result):
                result = await result
            issues.extend(_as_issues(result))
        if issues:
            raise SchemaValidationError(issues)
        return parsed


def _as_issues(result: RefinementResult) -> list[SchemaIssue]:
    if not result:
        return []
    if isinstance(result, dict):
        return [SchemaIssue(path=(field,), message=message) for field, message in result.items()]
    return list(result)


def as_schema(value: Any) -> StepSchema | None:
    """Coerce a pydantic model class into a schema; pass schemas through.

    Raises:
        TypeError: If ``value`` is neither a schema nor a pydantic model class.
    """
    if value is None:
        return None
    if isinstance(value, type) and issubclass(value, BaseModel):
        return ModelSchema(value)
    if isinstance(value, StepSchema):
        return value
    raise TypeError(f"Unsupported validation schema: {value!r}")


def errors_from_issues(issues: list[SchemaIssue]) -> dict[str, str]:
    """
    Collapse issues into one message per field.

    The first issue for a field wins; issues without a path are reported
    under ``ROOT_ERROR_KEY``.
    """
    errors: dict[str, str] = {}
    for issue in issues:
        key = issue.field or ROOT_ERROR_KEY
        errors.setdefault(key, issue.message)
    return errors
