"""
Main Typer application for the stepwise CLI.

This module defines the root CLI application and registers all command groups.
"""

import logging
from typing import Annotated

import typer

from stepwise import __version__
from stepwise.cli.commands import config, form, wizard
from stepwise.cli.output import print_info, print_warning, setup_logging
from stepwise.config import ConfigurationError, get_config

# Create the main Typer app
app = typer.Typer(
    name="stepwise",
    help="Run configuration-driven forms and multi-step wizards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"stepwise version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug output to stderr.",
        ),
    ] = False,
) -> None:
    """
    [bold blue]stepwise[/bold blue] - forms and wizards from YAML

    Run a wizard with [bold]stepwise wizard run --builtin project-setup[/bold].
    """
    if verbose:
        setup_logging(logging.DEBUG)
        return
    try:
        level = get_config().logging.level
    except ConfigurationError as e:
        print_warning(f"Ignoring invalid configuration: {e}")
        level = "WARNING"
    setup_logging(level)


# Register command groups
app.add_typer(wizard.app, name="wizard")
app.add_typer(form.app, name="form")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
