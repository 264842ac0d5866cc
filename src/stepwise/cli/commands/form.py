"""
stepwise form - Inspect and fill standalone forms.

Usage:
    stepwise form list
    stepwise form visibility --builtin user-registration --set accountType=business
    stepwise form fill --builtin user-registration
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.prompt import Confirm

from stepwise.cli.output import print_error, print_info, print_success, print_warning
from stepwise.cli.render import prompt_fields, values_table
from stepwise.cli.runtime import (
    build_store,
    build_submitter,
    load_app_config,
    parse_assignments,
    resolve_form,
)
from stepwise.exceptions import SubmissionError
from stepwise.forms import FieldVisibility, FormSession, create_default_registry, list_builtin_forms
from stepwise.forms.registry import FieldRegistry

app = typer.Typer(
    name="form",
    help="Inspect and fill standalone forms.",
)

console = Console()

DefinitionPath = Annotated[
    Path | None,
    typer.Argument(help="Form definition file (YAML).", exists=True, dir_okay=False),
]
BuiltinName = Annotated[
    str | None,
    typer.Option("--builtin", "-b", help="Use a bundled form (see 'stepwise form list')."),
]


@app.command("list")
def list_forms() -> None:
    """List bundled forms."""
    for name in list_builtin_forms():
        console.print(f"  [cyan]{name}[/cyan]")


@app.command()
def visibility(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Field value as key=value (JSON values allowed)."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the visibility map as JSON."),
    ] = False,
) -> None:
    """Show which fields are visible for a set of values."""
    config = resolve_form(path, builtin)
    values = config.default_values()
    values.update(parse_assignments(assignments or []))
    fields = config.all_fields()
    visible = FieldVisibility(fields, values)

    if json_output:
        console.print_json(json.dumps(visible.visibility))
        return

    registry = create_default_registry()
    console.print(values_table(fields, values, registry, title=config.title or config.id))
    console.print(f"  [dim]Visible:[/dim] {visible.visible_count}/{len(fields)}")


@app.command()
def fill(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Discard any saved draft first."),
    ] = False,
) -> None:
    """Fill, validate and submit a form interactively."""
    config = resolve_form(path, builtin)
    app_config = load_app_config()
    session = FormSession(
        config,
        store=build_store(app_config.storage.default_type, app_config),
        submitter=build_submitter(app_config),
    )
    if clear:
        session.clear()
    elif session.values != config.default_values():
        print_info("Restored saved draft.")

    try:
        result = asyncio.run(_fill_interactive(session, create_default_registry()))
    except KeyboardInterrupt:
        session.persistence.flush()
        print_warning("Interrupted; draft saved.")
        raise typer.Exit(130)

    if session.error_message:
        raise typer.Exit(1)
    if session.success_message:
        print_success(session.success_message)
        if result:
            console.print_json(json.dumps(result, default=str))


async def _fill_interactive(session: FormSession, registry: FieldRegistry) -> Any:
    """Prompt for all visible fields, then re-prompt invalid ones until valid."""
    fields = session.config.all_fields()
    if session.config.title:
        console.rule(f"[bold]{session.config.title}[/bold]")
    if session.config.description:
        console.print(f"[dim]{session.config.description}[/dim]")

    only: set[str] | None = None
    while True:
        values = prompt_fields(fields, dict(session.values), registry, console, only=only)
        session.set_values(values)
        errors = await session.validate()
        if not errors:
            break
        for name, message in errors.items():
            print_error(f"{name}: {message}")
        if not Confirm.ask("Correct the invalid fields?", console=console, default=True):
            session.persistence.flush()
            print_info("Draft saved.")
            return None
        only = set(errors)

    try:
        return await session.submit()
    except SubmissionError as e:
        print_error(f"{session.error_message} ({e.message})")
        return None
