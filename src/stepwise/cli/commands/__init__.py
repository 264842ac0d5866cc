"""CLI command modules."""

from stepwise.cli.commands import config, form, wizard

__all__ = ["config", "form", "wizard"]
