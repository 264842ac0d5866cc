"""
Wizard progress persistence.

Snapshots are stored as camelCase JSON under the wizard's storage key. Every
failure is logged and reported as "no saved state" so persistence problems
never stop the wizard.
"""

import logging

from pydantic import ValidationError

from stepwise.exceptions import PersistenceError
from stepwise.storage.stores import KeyValueStore, create_store
from stepwise.wizard.models import WizardPersistenceConfig, WizardSnapshot

logger = logging.getLogger(__name__)


class WizardPersistence:
    """Save, load and clear wizard snapshots in a keyed store."""

    def __init__(self, config: WizardPersistenceConfig, store: KeyValueStore | None = None):
        """Initialize wizard persistence.

        Args:
            config: Persistence settings.
            store: Store to use. Defaults to the store for ``config.storage_type``.
        """
        self.config = config
        self.store = store if store is not None else create_store(config.storage_type)

    @property
    def key(self) -> str:
        return self.config.storage_key or ""

    @property
    def enabled(self) -> bool:
        return self.config.enabled and bool(self.key)

    def save(self, snapshot: WizardSnapshot) -> bool:
        """Write a snapshot.

        Returns:
            True if the snapshot was written.
        """
        if not self.enabled:
            return False
        try:
            self.store.set_item(self.key, snapshot.to_json())
        except (PersistenceError, ValueError) as e:
            logger.error(f"Failed to save wizard state '{self.key}': {e}")
            return False
        logger.debug(f"Saved wizard state '{self.key}'")
        return True

    def load(self) -> WizardSnapshot | None:
        """Read the saved snapshot, or None when absent or unreadable."""
        if not self.enabled:
            return None
        try:
            raw = self.store.get_item(self.key)
        except PersistenceError as e:
            logger.warning(f"Failed to read wizard state '{self.key}': {e}")
            return None
        if not raw:
            return None
        try:
            return WizardSnapshot.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring corrupt wizard state '{self.key}': {e.error_count()} error(s)")
            return None

    def clear(self) -> None:
        """Remove the saved snapshot."""
        if not self.enabled:
            return
        try:
            self.store.remove_item(self.key)
        except PersistenceError as e:
            logger.error(f"Failed to clear wizard state '{self.key}': {e}")
            return
        logger.debug(f"Cleared wizard state '{self.key}'")
