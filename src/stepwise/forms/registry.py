"""Field widget registry mapping field types to console widgets."""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from rich.console import Console
from rich.prompt import Confirm, FloatPrompt, Prompt

from stepwise.forms.models import FieldConfig, FieldType

logger = logging.getLogger(__name__)


class FieldWidget(ABC):
    """Reads and displays the value of one kind of field."""

    @abstractmethod
    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        """Ask the user for a new value.

        Args:
            field: Field being edited.
            current: Current value, offered as the default.
            console: Console to prompt on.

        Returns:
            The entered value.
        """

    def render(self, field: FieldConfig, value: Any) -> str:
        """Format a value for display."""
        if value is None or value == "":
            return "-"
        return str(value)

    @staticmethod
    def label(field: FieldConfig) -> str:
        marker = " [red]*[/red]" if field.required else ""
        return f"{field.label}{marker}"


class TextWidget(FieldWidget):
    """Single-line text input; passwords are hidden."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        password = field.type == FieldType.PASSWORD.value
        default = "" if current is None else str(current)
        return Prompt.ask(
            self.label(field),
            console=console,
            default=default,
            password=password,
            show_default=bool(default) and not password,
        )

    def render(self, field: FieldConfig, value: Any) -> str:
        if field.type == FieldType.PASSWORD.value and value:
            return "********"
        return super().render(field, value)


class TextareaWidget(FieldWidget):
    """Multi-line input terminated by an empty line."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        console.print(f"{self.label(field)} [dim](finish with an empty line)[/dim]")
        lines: list[str] = []
        while True:
            line = console.input("")
            if not line:
                break
            lines.append(line)
        if not lines and current:
            return current
        return "\n".join(lines)

    def render(self, field: FieldConfig, value: Any) -> str:
        text = super().render(field, value)
        return text if len(text) <= 60 else f"{text[:57]}..."


class NumberWidget(FieldWidget):
    """Numeric input."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        default = current if isinstance(current, (int, float)) and not isinstance(current, bool) else ...
        value = FloatPrompt.ask(self.label(field), console=console, default=default)
        return int(value) if float(value).is_integer() else value


class CheckboxWidget(FieldWidget):
    """Yes/no input."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        return Confirm.ask(self.label(field), console=console, default=bool(current))

    def render(self, field: FieldConfig, value: Any) -> str:
        return "yes" if value is True else "no"


class SelectWidget(FieldWidget):
    """Single choice among the field's options (select and radio)."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        choices = [option for option in field.options if not option.disabled]
        if not choices:
            return TextWidget().prompt(field, current, console)
        for index, option in enumerate(choices, start=1):
            console.print(f"  [cyan]{index}[/cyan]. {option.label}")
        default = next(
            (str(index) for index, option in enumerate(choices, start=1) if option.value == current),
            "",
        )
        selection = Prompt.ask(
            self.label(field),
            console=console,
            choices=[str(index) for index in range(1, len(choices) + 1)],
            default=default or ...,
            show_choices=False,
        )
        return choices[int(selection) - 1].value

    def render(self, field: FieldConfig, value: Any) -> str:
        for option in field.options:
            if option.value == value:
                return option.label
        return super().render(field, value)


class MultiSelectWidget(FieldWidget):
    """Several choices entered as comma-separated option numbers."""

    def prompt(self, field: FieldConfig, current: Any, console: Console) -> Any:
        choices = [option for option in field.options if not option.disabled]
        for index, option in enumerate(choices, start=1):
            console.print(f"  [cyan]{index}[/cyan]. {option.label}")
        selected = current if isinstance(current, list) else []
        default = ",".join(
            str(index) for index, option in enumerate(choices, start=1) if option.value in selected
        )
        while True:
            response = Prompt.ask(
                f"{self.label(field)} [dim](comma-separated)[/dim]",
                console=console,
                default=default,
                show_default=bool(default),
            )
            picks = [item.strip() for item in response.split(",") if item.strip()]
            if all(pick.isdigit() and 1 <= int(pick) <= len(choices) for pick in picks):
                return [choices[int(pick) - 1].value for pick in dict.fromkeys(picks)]
            console.print(f"[yellow]![/yellow] Enter numbers between 1 and {len(choices)}.")

    def render(self, field: FieldConfig, value: Any) -> str:
        if not isinstance(value, list) or not value:
            return "-"
        labels = {option.value: option.label for option in field.options if isinstance(option.value, str)}
        return ", ".join(labels.get(item, str(item)) for item in value)


def _type_key(field_type: FieldType | str) -> str:
    return field_type.value if isinstance(field_type, Enum) else str(field_type)


class FieldRegistry:
    """Dispatch table from field type to widget.

    Custom field types are added with ``register`` when the application
    starts; lookups of unknown types fall back to the text widget.
    """

    def __init__(self, fallback: FieldWidget | None = None):
        self._widgets: dict[str, FieldWidget] = {}
        self._fallback = fallback or TextWidget()

    def register(
        self,
        field_type: FieldType | str,
        widget: FieldWidget,
        replace: bool = False,
    ) -> None:
        """Register a widget for a field type.

        Args:
            field_type: Built-in or custom field type.
            widget: Widget handling the type.
            replace: Allow overriding an existing registration.

        Raises:
            ValueError: If the type is already registered and ``replace`` is False.
        """
        key = _type_key(field_type)
        if key in self._widgets and not replace:
            raise ValueError(f"Field type '{key}' is already registered")
        self._widgets[key] = widget
        logger.debug(f"Registered field widget: {key} -> {type(widget).__name__}")

    def get(self, field_type: FieldType | str) -> FieldWidget:
        """Get the widget for a field type, or the fallback."""
        return self._widgets.get(_type_key(field_type), self._fallback)

    def registered_types(self) -> list[str]:
        return list(self._widgets)

    def __contains__(self, field_type: object) -> bool:
        if not isinstance(field_type, (str, Enum)):
            return False
        return _type_key(field_type) in self._widgets

    def __len__(self) -> int:
        return len(self._widgets)

    def __repr__(self) -> str:
        return f"<FieldRegistry types=[{', '.join(self._widgets)}]>"


def create_default_registry() -> FieldRegistry:
    """Create a registry with widgets for every built-in field type."""
    registry = FieldRegistry()
    text = TextWidget()
    for field_type in (
        FieldType.TEXT,
        FieldType.EMAIL,
        FieldType.PASSWORD,
        FieldType.TEL,
        FieldType.URL,
        FieldType.DATE,
        FieldType.TIME,
        FieldType.DATETIME_LOCAL,
    ):
        registry.register(field_type, text)
    registry.register(FieldType.NUMBER, NumberWidget())
    registry.register(FieldType.TEXTAREA, TextareaWidget())
    select = SelectWidget()
    registry.register(FieldType.SELECT, select)
    registry.register(FieldType.RADIO, select)
    registry.register(FieldType.MULTISELECT, MultiSelectWidget())
    registry.register(FieldType.CHECKBOX, CheckboxWidget())
    return registry
