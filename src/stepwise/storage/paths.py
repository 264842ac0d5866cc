"""
Path utilities for Stepwise.

Provides consistent path resolution for configuration and persisted state.
"""

import os
from pathlib import Path


def get_stepwise_home() -> Path:
    """
    Get the Stepwise home directory.

    Resolution order:
    1. STEPWISE_HOME environment variable
    2. Default: ~/.stepwise

    Returns:
        Path to the Stepwise home directory.
    """
    env_home = os.environ.get("STEPWISE_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path.home() / ".stepwise"


def get_global_config_path() -> Path:
    """
    Get the path to the global configuration file.

    Returns:
        Path to ~/.stepwise/config.yaml
    """
    return get_stepwise_home() / "config.yaml"


def get_state_dir() -> Path:
    """
    Get the directory holding durable wizard and form state.

    Returns:
        Path to ~/.stepwise/state/
    """
    return get_stepwise_home() / "state"


def find_project_config(start_path: Path | None = None) -> Path | None:
    """
    Find the project configuration file by traversing up the directory tree.

    Looks for .stepwise/project.yaml starting from the given path
    (or current directory) and moving up to the root.

    Args:
        start_path: Starting directory to search from. Defaults to cwd.

    Returns:
        Path to the project config if found, None otherwise.
    """
    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    while True:
        project_config = current / ".stepwise" / "project.yaml"
        if project_config.exists():
            return project_config
        if current == current.parent:
            return None
        current = current.parent


def expand_path(path: str | Path) -> Path:
    """
    Expand a path string, handling ~ and environment variables.

    Args:
        path: Path string or Path object.

    Returns:
        Expanded and resolved Path.
    """
    if isinstance(path, str):
        path = os.path.expandvars(path)
        path = os.path.expanduser(path)
    return Path(path).resolve()
