"""
Configuration module for Stepwise.

Handles loading, merging, and validating application configuration.
"""

from stepwise.config.loader import (
    ConfigurationError,
    apply_env_overrides,
    clear_config_cache,
    deep_merge,
    get_config,
    get_config_sources,
    load_config,
    load_yaml_file,
    set_nested_value,
)
from stepwise.config.schema import Config, LoggingConfig, StorageConfig, SubmitConfig

__all__ = [
    "Config",
    "ConfigurationError",
    "LoggingConfig",
    "StorageConfig",
    "SubmitConfig",
    "apply_env_overrides",
    "clear_config_cache",
    "deep_merge",
    "get_config",
    "get_config_sources",
    "load_config",
    "load_yaml_file",
    "set_nested_value",
]
