"""
stepwise wizard - Run and inspect multi-step wizards.

Usage:
    stepwise wizard list
    stepwise wizard show --builtin project-setup
    stepwise wizard run ./onboarding.yaml
    stepwise wizard status --builtin project-setup
    stepwise wizard reset --builtin project-setup
"""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.prompt import Prompt

from stepwise.cli.output import print_error, print_info, print_success, print_warning
from stepwise.cli.render import prompt_fields, render_header, steps_table, values_table
from stepwise.cli.runtime import build_store, build_submitter, load_app_config, resolve_wizard
from stepwise.exceptions import SubmissionError
from stepwise.forms.registry import FieldRegistry, create_default_registry
from stepwise.wizard import WizardMachine, list_builtin_wizards

app = typer.Typer(
    name="wizard",
    help="Run and inspect multi-step wizards.",
)

console = Console()

DefinitionPath = Annotated[
    Path | None,
    typer.Argument(help="Wizard definition file (YAML).", exists=True, dir_okay=False),
]
BuiltinName = Annotated[
    str | None,
    typer.Option("--builtin", "-b", help="Use a bundled wizard (see 'stepwise wizard list')."),
]


def _machine(path: Path | None, builtin: str | None) -> WizardMachine:
    config = resolve_wizard(path, builtin)
    app_config = load_app_config()
    store = build_store(config.persistence.storage_type, app_config)
    return WizardMachine(config, store=store, submitter=build_submitter(app_config))


@app.command("list")
def list_wizards() -> None:
    """List bundled wizards."""
    for name in list_builtin_wizards():
        console.print(f"  [cyan]{name}[/cyan]")


@app.command()
def show(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
) -> None:
    """Show a wizard's steps and settings."""
    config = resolve_wizard(path, builtin)
    console.print(steps_table(config))
    console.print(f"  [dim]Navigation:[/dim] {config.navigation_mode.value}")
    persistence = config.persistence
    if persistence.enabled:
        console.print(
            f"  [dim]Persistence:[/dim] {persistence.storage_type.value} "
            f"(key: {persistence.storage_key})"
        )
    else:
        console.print("  [dim]Persistence:[/dim] disabled")
    if config.submit.endpoint:
        console.print(f"  [dim]Submit:[/dim] {config.submit.method} {config.submit.endpoint}")


@app.command()
def status(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output the saved snapshot as JSON."),
    ] = False,
) -> None:
    """Show saved progress of a wizard."""
    machine = _machine(path, builtin)
    if not machine.persistence.enabled:
        print_warning(f"Persistence is disabled for '{machine.config.id}'.")
        return
    if not machine.load_persisted_state():
        print_info(f"No saved progress for '{machine.config.id}'.")
        return

    if json_output:
        console.print_json(machine.snapshot().to_json())
        return
    console.print(steps_table(machine.config, machine.state))
    console.print(f"  [dim]Progress:[/dim] {machine.navigation.progress:.0f}%")


@app.command()
def reset(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
) -> None:
    """Discard saved progress of a wizard."""
    machine = _machine(path, builtin)
    if not machine.persistence.enabled:
        print_warning(f"Persistence is disabled for '{machine.config.id}'.")
        return
    machine.reset_wizard()
    print_success(f"Cleared saved progress for '{machine.config.id}'.")


@app.command()
def run(
    path: DefinitionPath = None,
    builtin: BuiltinName = None,
    restart: Annotated[
        bool,
        typer.Option("--restart", help="Ignore saved progress and start over."),
    ] = False,
) -> None:
    """Run a wizard interactively."""
    machine = _machine(path, builtin)
    if restart:
        machine.reset_wizard()
    elif machine.state.current_step_index or machine.state.completed_steps:
        print_info(f"Resuming at step {machine.state.current_step_index + 1}.")

    try:
        result = asyncio.run(_run_interactive(machine, create_default_registry()))
    except KeyboardInterrupt:
        machine.flush()
        print_warning("Interrupted.")
        raise typer.Exit(130)

    if result is None:
        return
    print_success(machine.config.submit.success_message)
    if result:
        console.print_json(json.dumps(result, default=str))


def _step_values(machine: WizardMachine) -> dict[str, Any]:
    step = machine.current_step
    values = {
        field.name: "" if field.default_value is None else field.default_value
        for field in step.fields
    }
    data = machine.current_step_data
    if isinstance(data, dict):
        values.update(data)
    return values


def _default_action(machine: WizardMachine) -> str:
    if machine.current_step.fields and machine.current_step_data is None:
        return "fill"
    if machine.navigation.is_last_step:
        return "submit"
    return "next"


async def _fill(machine: WizardMachine, registry: FieldRegistry) -> None:
    step = machine.current_step
    if not step.fields:
        print_info("This step has no fields.")
        return
    values = prompt_fields(step.fields, _step_values(machine), registry, console)
    machine.update_step_data(step.id, values)
    result = await machine.validate_current_step()
    if result.valid:
        print_success("Step is valid.")


async def _run_interactive(machine: WizardMachine, registry: FieldRegistry) -> Any:
    """Drive the machine from console prompts until submitted or quit."""
    while not machine.state.is_completed:
        render_header(machine, console)
        nav = machine.navigation
        choices = ["fill", "review"]
        if not nav.is_last_step:
            choices.append("next")
        if nav.can_go_previous:
            choices.append("back")
        if machine.current_step.skippable:
            choices.append("skip")
        choices += ["jump", "submit", "quit"]

        action = Prompt.ask("Action", console=console, choices=choices, default=_default_action(machine))

        if action == "fill":
            await _fill(machine, registry)
        elif action == "review":
            console.print(values_table(machine.current_step.fields, _step_values(machine), registry))
        elif action == "next":
            if not await machine.advance():
                print_warning("Fix the errors above before continuing.")
        elif action == "back":
            machine.previous_step()
        elif action == "skip":
            machine.skip_step()
        elif action == "jump":
            target = Prompt.ask("Step number", console=console)
            if not target.isdigit() or not nav.can_go_to_step(int(target) - 1):
                print_warning(f"Cannot jump to step {target}.")
            else:
                machine.go_to_step(int(target) - 1)
        elif action == "submit":
            try:
                result = await machine.submit_wizard()
            except SubmissionError as e:
                print_error(f"{machine.config.submit.error_message} ({e.message})")
                continue
            if machine.state.is_completed:
                return result if result is not None else {}
        elif action == "quit":
            machine.flush()
            if machine.persistence.enabled:
                print_info("Progress saved.")
            return None
    return None
