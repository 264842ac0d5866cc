"""Rich rendering of wizards, steps and fields."""

from collections.abc import Mapping
from typing import Any

from rich.console import Console
from rich.progress_bar import ProgressBar
from rich.table import Table

from stepwise.forms.conditions import FieldVisibility
from stepwise.forms.models import FieldConfig
from stepwise.forms.registry import FieldRegistry
from stepwise.wizard.machine import WizardMachine
from stepwise.wizard.models import StepStatus, WizardConfig, WizardState

STATUS_STYLES = {
    StepStatus.INCOMPLETE: "[dim]incomplete[/dim]",
    StepStatus.COMPLETE: "[green]complete[/green]",
    StepStatus.ERROR: "[red]error[/red]",
    StepStatus.SKIPPED: "[yellow]skipped[/yellow]",
}


def steps_table(config: WizardConfig, state: WizardState | None = None) -> Table:
    """Table of a wizard's steps, with status when a state is given."""
    table = Table(title=config.title or config.id)
    if config.show_step_numbers:
        table.add_column("#", style="dim", justify="right")
    table.add_column("Step", style="cyan")
    table.add_column("Title")
    table.add_column("Flags")
    table.add_column("Fields", justify="right")
    if state is not None:
        table.add_column("Status")

    for index, step in enumerate(config.steps):
        flags = ", ".join(
            name for name, on in (("optional", step.optional), ("skippable", step.skippable)) if on
        )
        row = [step.id, step.title, flags or "-", str(len(step.fields))]
        if config.show_step_numbers:
            marker = ">" if state is not None and index == state.current_step_index else ""
            row.insert(0, f"{marker}{index + 1}")
        if state is not None:
            status = state.step_status.get(step.id, StepStatus.INCOMPLETE)
            row.append(STATUS_STYLES[StepStatus(status)])
        table.add_row(*row)
    return table


def render_header(machine: WizardMachine, console: Console) -> None:
    """Print the current step with the progress bar and any errors."""
    config = machine.config
    nav = machine.navigation
    step = machine.current_step

    console.rule(f"[bold]{config.title or config.id}[/bold]")
    if config.show_progress_bar:
        console.print(ProgressBar(total=100, completed=nav.progress, width=40))
        console.print(f"[dim]{nav.progress:.0f}% complete[/dim]")
    number = f"Step {nav.current_step_number}/{nav.total_steps}: " if config.show_step_numbers else ""
    console.print(f"[bold cyan]{number}{step.title}[/bold cyan]")
    if step.description:
        console.print(f"[dim]{step.description}[/dim]")
    for name, message in machine.current_step_errors.items():
        console.print(f"  [red]✗[/red] {name}: {message}")
    for message in machine.state.wizard_errors:
        console.print(f"[red]✗[/red] {message}")


def values_table(
    fields: list[FieldConfig],
    values: Mapping[str, Any],
    registry: FieldRegistry,
    title: str | None = None,
) -> Table:
    """Table of field values rendered by their widgets; hidden fields are marked."""
    visibility = FieldVisibility(fields, values)
    table = Table(title=title)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_column("Visible")
    for field in fields:
        widget = registry.get(field.type)
        visible = visibility.is_visible(field.id)
        table.add_row(
            field.label,
            widget.render(field, values.get(field.name)),
            "[green]yes[/green]" if visible else "[dim]no[/dim]",
        )
    return table


def prompt_fields(
    fields: list[FieldConfig],
    values: dict[str, Any],
    registry: FieldRegistry,
    console: Console,
    only: set[str] | None = None,
) -> dict[str, Any]:
    """
    Prompt for every visible field in order.

    Visibility is recomputed after each answer, so fields revealed by an
    earlier answer are asked for in the same pass.

    Args:
        fields: Fields to prompt for.
        values: Current values keyed by field name; updated in place.
        registry: Widget registry.
        console: Console to prompt on.
        only: Restrict prompting to these field names.

    Returns:
        The updated values.
    """
    for field in fields:
        if only is not None and field.name not in only:
            continue
        if field.disabled or field.read_only:
            continue
        if not FieldVisibility(fields, values).is_visible(field.id):
            continue
        if field.help_text:
            console.print(f"[dim]{field.help_text}[/dim]")
        widget = registry.get(field.type)
        values[field.name] = widget.prompt(field, values.get(field.name), console)
    return values
