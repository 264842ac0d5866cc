"""
Keyed string stores backing wizard and form persistence.

Two scopes are available: a durable file store that survives restarts and a
session store that lives as long as the process.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import quote

from stepwise.exceptions import PersistenceError
from stepwise.storage.paths import get_state_dir

logger = logging.getLogger(__name__)


class StorageType(str, Enum):
    """Scope of a persistence store."""

    LOCAL = "local"  # Durable across sessions
    SESSION = "session"  # Process lifetime only


@runtime_checkable
class KeyValueStore(Protocol):
    """Keyed get/set/remove over string values."""

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """Session-scoped store kept in a dictionary."""

    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items


class FileStore:
    """Durable store writing one JSON document per key.

    Keys are percent-encoded into file names under ``base_path``, so distinct
    keys never share a file.
    """

    def __init__(self, base_path: Path | str | None = None):
        """Initialize the file store.

        Args:
            base_path: Directory for state files. Defaults to ~/.stepwise/state.
        """
        if base_path is None:
            self.base_path = get_state_dir()
        else:
            self.base_path = Path(base_path).expanduser().resolve()

    def path_for(self, key: str) -> Path:
        """Get the file backing ``key``."""
        safe = quote(key, safe="")
        return self.base_path / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read {path}: {e}", key=key) from e

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot write {path}: {e}", key=key) from e

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot remove {path}: {e}", key=key) from e


# Session stores are shared per process so that every wizard opened with
# storage_type=session in the same run sees the same entries.
_session_store: MemoryStore | None = None


def get_session_store() -> MemoryStore:
    """Get the process-wide session store."""
    global _session_store
    if _session_store is None:
        _session_store = MemoryStore()
    return _session_store


def reset_session_store() -> None:
    """Drop the process-wide session store.

    Useful for testing.
    """
    global _session_store
    _session_store = None


def create_store(
    storage_type: StorageType | str = StorageType.LOCAL,
    base_path: Path | str | None = None,
) -> KeyValueStore:
    """Create the store for a storage scope.

    Args:
        storage_type: ``local`` for a durable file store, ``session`` for the
            in-process store.
        base_path: Directory for the file store.

    Returns:
        A keyed store.
    """
    scope = StorageType(storage_type)
    if scope is StorageType.SESSION:
        return get_session_store()
    logger.debug(f"Using file store at {base_path or get_state_dir()}")
    return FileStore(base_path)
