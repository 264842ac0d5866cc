"""
stepwise config - Configuration inspection commands.

Usage:
    stepwise config show
    stepwise config show submit
    stepwise config show --json
    stepwise config show --sources
"""

import json
from typing import Annotated

import typer
import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from stepwise.config import ConfigurationError, get_config_sources, load_config

app = typer.Typer(
    name="config",
    help="Configuration inspection.",
)

console = Console()


@app.command()
def show(
    section: Annotated[
        str | None,
        typer.Argument(help="Config section to show (storage, submit or logging)."),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
    sources: Annotated[
        bool,
        typer.Option("--sources", help="Show configuration source files."),
    ] = False,
) -> None:
    """Show the effective configuration."""
    if sources:
        table = Table(title="Configuration Sources")
        table.add_column("Source", style="cyan")
        table.add_column("Path", style="green")
        table.add_column("Status")

        for source_name, source_path in get_config_sources().items():
            if source_path:
                table.add_row(source_name, str(source_path), "[green]loaded[/green]")
            else:
                table.add_row(source_name, "-", "[dim]not found[/dim]")

        console.print(table)
        return

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(1)

    config_dict = config.model_dump(mode="json")
    if section:
        if section not in config_dict:
            console.print(f"[red]Section '{section}' not found in configuration.[/red]")
            raise typer.Exit(1)
        config_dict = config_dict[section]

    if json_output:
        console.print_json(json.dumps(config_dict))
        return

    output = yaml.dump(config_dict, default_flow_style=False, sort_keys=False, allow_unicode=True)
    if section:
        console.print(Panel(Syntax(output, "yaml", theme="monokai"), title=f"[cyan]{section}[/cyan]"))
    else:
        console.print(Syntax(output, "yaml", theme="monokai"))
