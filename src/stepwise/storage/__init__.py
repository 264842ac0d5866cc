"""
Storage module for Stepwise.

Provides path resolution, keyed stores and the debounce utility used by
wizard and form persistence.
"""

from stepwise.storage.debounce import Debouncer
from stepwise.storage.paths import (
    expand_path,
    find_project_config,
    get_global_config_path,
    get_state_dir,
    get_stepwise_home,
)
from stepwise.storage.stores import (
    FileStore,
    KeyValueStore,
    MemoryStore,
    StorageType,
    create_store,
    get_session_store,
    reset_session_store,
)

__all__ = [
    "Debouncer",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
    "StorageType",
    "create_store",
    "expand_path",
    "find_project_config",
    "get_global_config_path",
    "get_session_store",
    "get_state_dir",
    "get_stepwise_home",
    "reset_session_store",
]
