"""
Stepwise - configuration-driven forms and multi-step wizards.

Provides the wizard state machine, step validation, navigation policy,
conditional field visibility and persistence, plus a small CLI to run
wizard and form definitions from YAML.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("stepwise")
except PackageNotFoundError:
    __version__ = "0.4.0"

__all__ = [
    "__version__",
]
