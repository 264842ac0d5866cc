"""
Draft persistence for forms.

Form values are saved as a timestamped envelope so stale drafts can be
discarded. Saves triggered by edits are debounced.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from stepwise.exceptions import PersistenceError
from stepwise.forms.models import FormPersistenceConfig
from stepwise.storage.debounce import Debouncer
from stepwise.storage.stores import KeyValueStore

logger = logging.getLogger(__name__)


class FormPersistence:
    """Saves, restores and expires form drafts in a keyed store."""

    def __init__(self, config: FormPersistenceConfig, store: KeyValueStore):
        """Initialize form persistence.

        Args:
            config: Persistence settings; nothing is stored unless enabled.
            store: Store holding the drafts.
        """
        self.config = config
        self.store = store
        self._debouncer: Debouncer[dict[str, Any]] = Debouncer(
            self.save_to_storage, config.debounce_ms / 1000
        )

    @property
    def enabled(self) -> bool:
        return self.config.enabled and bool(self.config.storage_key)

    @property
    def key(self) -> str:
        return self.config.storage_key or ""

    @property
    def max_age(self) -> timedelta:
        return timedelta(days=self.config.max_age_days)

    def save_to_storage(self, data: dict[str, Any]) -> None:
        """Write a draft immediately."""
        if not self.enabled:
            return
        envelope = {"data": data, "timestamp": _now().isoformat()}
        try:
            self.store.set_item(self.key, json.dumps(envelope, default=str))
        except (PersistenceError, TypeError, ValueError) as e:
            logger.error(f"Failed to save form draft '{self.key}': {e}")

    def schedule_save(self, data: dict[str, Any]) -> None:
        """Save a draft once edits pause for ``debounce_ms``."""
        if self.enabled:
            self._debouncer.call(dict(data))

    def flush(self) -> bool:
        """Write any pending debounced draft now."""
        return self._debouncer.flush()

    def load_from_storage(self) -> dict[str, Any] | None:
        """Load the saved draft.

        Drafts older than ``max_age_days`` are removed and ignored.

        Returns:
            The saved values, or None when absent, expired or unreadable.
        """
        if not self.enabled:
            return None
        envelope = self._read_envelope()
        if envelope is None:
            return None
        data, timestamp = envelope
        if _now() - timestamp > self.max_age:
            logger.info(f"Discarding expired form draft '{self.key}'")
            self.clear_storage()
            return None
        return data

    def clear_storage(self) -> None:
        """Remove the draft and any pending save."""
        self._debouncer.cancel()
        if not self.enabled:
            return
        try:
            self.store.remove_item(self.key)
        except PersistenceError as e:
            logger.error(f"Failed to clear form draft '{self.key}': {e}")

    def get_storage_info(self) -> dict[str, Any] | None:
        """Describe the saved draft: when it was written and how old it is."""
        if not self.enabled:
            return None
        envelope = self._read_envelope()
        if envelope is None:
            return None
        _data, timestamp = envelope
        age_ms = int((_now() - timestamp).total_seconds() * 1000)
        return {
            "exists": True,
            "timestamp": timestamp,
            "age_ms": age_ms,
            "age_minutes": age_ms // (60 * 1000),
            "age_hours": age_ms // (60 * 60 * 1000),
            "age_days": age_ms // (24 * 60 * 60 * 1000),
        }

    def _read_envelope(self) -> tuple[dict[str, Any], datetime] | None:
        try:
            raw = self.store.get_item(self.key)
        except PersistenceError as e:
            logger.warning(f"Failed to read form draft '{self.key}': {e}")
            return None
        if not raw:
            return None
        try:
            envelope = json.loads(raw)
            data = envelope["data"]
            timestamp = datetime.fromisoformat(envelope["timestamp"])
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Ignoring corrupt form draft '{self.key}': {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"Ignoring form draft '{self.key}': data is not an object")
            return None
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return data, timestamp


def _now() -> datetime:
    return datetime.now(timezone.utc)
