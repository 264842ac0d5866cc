"""
Conditional field visibility.

Evaluates per-field rule groups against the current form values. Visibility
never touches the values themselves: a hidden field keeps its last value so
showing it again restores what the user typed.
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable

from stepwise.forms.models import ConditionalGroup, ConditionalOperator, ConditionalRule, FieldConfig


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _strict_equals(left: Any, right: Any) -> bool:
    # True == 1 in Python; rule operands must also agree on being booleans
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right


def _is_empty(value: Any) -> bool:
    if value is None or value == "":
        return True
    if _is_sequence(value):
        return len(value) == 0
    return False


def _contains(value: Any, operand: Any) -> bool | None:
    """Containment test, or None when the operand types do not support one."""
    if isinstance(value, str) and isinstance(operand, str):
        return operand.lower() in value.lower()
    if _is_sequence(value):
        return any(_strict_equals(item, operand) for item in value)
    return None


def _compare(check: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def evaluate(value: Any, operand: Any) -> bool:
        if _is_number(value) and _is_number(operand):
            return check(value, operand)
        return False

    return evaluate


def _not_contains(value: Any, operand: Any) -> bool:
    result = _contains(value, operand)
    return True if result is None else not result


_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    ConditionalOperator.EQUALS.value: _strict_equals,
    ConditionalOperator.NOT_EQUALS.value: lambda value, operand: not _strict_equals(value, operand),
    ConditionalOperator.CONTAINS.value: lambda value, operand: bool(_contains(value, operand)),
    ConditionalOperator.NOT_CONTAINS.value: _not_contains,
    ConditionalOperator.GREATER_THAN.value: _compare(lambda a, b: a > b),
    ConditionalOperator.LESS_THAN.value: _compare(lambda a, b: a < b),
    ConditionalOperator.GREATER_THAN_OR_EQUAL.value: _compare(lambda a, b: a >= b),
    ConditionalOperator.LESS_THAN_OR_EQUAL.value: _compare(lambda a, b: a <= b),
    ConditionalOperator.IS_EMPTY.value: lambda value, _operand: _is_empty(value),
    ConditionalOperator.IS_NOT_EMPTY.value: lambda value, _operand: not _is_empty(value),
}


def evaluate_rule(rule: ConditionalRule, value: Any) -> bool:
    """
    Evaluate a single conditional rule against the watched field's value.

    Args:
        rule: Rule to evaluate.
        value: Current value of ``rule.field`` (None when unset).

    Returns:
        Whether the rule holds. Unknown operators evaluate to False.
    """
    handler = _OPERATORS.get(rule.operator)
    if handler is None:
        return False
    return handler(value, rule.value)


def evaluate_group(group: ConditionalGroup, form_values: Mapping[str, Any]) -> bool:
    """
    Evaluate a rule group against the form values.

    ``any`` combines results with OR, ``all`` with AND. An empty ``any`` group
    is False and an empty ``all`` group is True.
    """
    results = (evaluate_rule(rule, form_values.get(rule.field)) for rule in group.rules)
    if group.mode == "any":
        return any(results)
    return all(results)


def compute_visibility(
    fields: Iterable[FieldConfig],
    form_values: Mapping[str, Any],
) -> dict[str, bool]:
    """
    Compute the visibility flag of every field.

    Args:
        fields: Field configurations.
        form_values: Current values keyed by field name.

    Returns:
        Mapping of field id to visibility.
    """
    visibility: dict[str, bool] = {}
    for field in fields:
        if field.conditional is None:
            visibility[field.id] = True
        else:
            visibility[field.id] = evaluate_group(field.conditional, form_values)
    return visibility


class FieldVisibility:
    """Visibility of a field set for one snapshot of form values."""

    def __init__(self, fields: Sequence[FieldConfig], form_values: Mapping[str, Any]):
        self._fields = list(fields)
        self._visibility = compute_visibility(self._fields, form_values)

    def is_visible(self, field_id: str) -> bool:
        """Whether a field is visible; unknown ids count as visible."""
        return self._visibility.get(field_id, True)

    @property
    def visibility(self) -> dict[str, bool]:
        return dict(self._visibility)

    @property
    def visible_fields(self) -> list[FieldConfig]:
        return [field for field in self._fields if self.is_visible(field.id)]

    @property
    def hidden_fields(self) -> list[FieldConfig]:
        return [field for field in self._fields if not self.is_visible(field.id)]

    @property
    def visible_count(self) -> int:
        return len(self.visible_fields)

    def __repr__(self) -> str:
        return f"<FieldVisibility visible={self.visible_count}/{len(self._fields)}>"
