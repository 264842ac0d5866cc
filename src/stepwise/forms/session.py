"""
Standalone form session.

Holds the values of one form, keeps field visibility in step with them,
autosaves drafts and runs validation and submission.
"""

import logging
from typing import Any

from stepwise.exceptions import SchemaValidationError
from stepwise.forms.conditions import FieldVisibility
from stepwise.forms.models import FormConfig
from stepwise.forms.persistence import FormPersistence
from stepwise.forms.schema import VisibleFieldsSchema
from stepwise.schema import errors_from_issues
from stepwise.storage.stores import KeyValueStore, MemoryStore
from stepwise.submit import Submitter, local_submit

logger = logging.getLogger(__name__)


class FormSession:
    """Values, visibility, drafts and submission of a single form."""

    def __init__(
        self,
        config: FormConfig,
        *,
        store: KeyValueStore | None = None,
        submitter: Submitter | None = None,
    ):
        """Initialize the session.

        Values start from the field defaults; a saved draft replaces them when
        persistence is enabled.

        Args:
            config: Form configuration.
            store: Draft store. Defaults to an in-memory store.
            submitter: Submission transport. Defaults to ``local_submit``.
        """
        self.config = config
        self.persistence = FormPersistence(config.persistence, store or MemoryStore())
        self.submitter: Submitter = submitter or local_submit

        self.values: dict[str, Any] = config.default_values()
        self.errors: dict[str, str] = {}
        self.is_dirty = False
        self.is_submitting = False
        self.success_message: str | None = None
        self.error_message: str | None = None

        draft = self.persistence.load_from_storage()
        if draft is not None:
            logger.info(f"Restored form draft for '{config.id}'")
            self.values.update(draft)

        self._schema = VisibleFieldsSchema(config.id, config.all_fields())
        self._visibility = FieldVisibility(config.all_fields(), self.values)

    @property
    def visibility(self) -> FieldVisibility:
        return self._visibility

    def set_value(self, name: str, value: Any) -> None:
        """Update one value, recompute visibility and schedule a draft save.

        Hidden fields keep their values.
        """
        self.values[name] = value
        self.errors.pop(name, None)
        self.is_dirty = True
        self._visibility = FieldVisibility(self.config.all_fields(), self.values)
        self.persistence.schedule_save(self.values)

    def set_values(self, values: dict[str, Any]) -> None:
        for name, value in values.items():
            self.set_value(name, value)

    async def validate(self) -> dict[str, str]:
        """Validate the visible fields.

        Returns:
            Error messages keyed by field name; empty when valid.
        """
        try:
            await self._schema.parse(self.values)
        except SchemaValidationError as e:
            self.errors = errors_from_issues(e.issues)
        else:
            self.errors = {}
        return dict(self.errors)

    def visible_values(self) -> dict[str, Any]:
        """Values of the visible fields only."""
        return {
            field.name: self.values.get(field.name)
            for field in self._visibility.visible_fields
        }

    async def submit(self) -> Any:
        """Validate and submit the visible values.

        Returns:
            The submitter's result, or None when validation failed or a
            submission is already running.

        Raises:
            Exception: Whatever the submitter raised, after ``error_message``
                has been recorded.
        """
        if self.is_submitting:
            return None
        self.success_message = None
        self.error_message = None

        errors = await self.validate()
        if errors:
            logger.debug(f"Form '{self.config.id}' has {len(errors)} invalid field(s)")
            return None

        submit = self.config.submit
        payload = self.visible_values()
        self.is_submitting = True
        try:
            result = await self.submitter(submit.endpoint or "", submit.method, payload)
        except Exception as e:
            self.error_message = submit.error_message
            logger.error(f"Form '{self.config.id}' submission failed: {e}")
            raise
        finally:
            self.is_submitting = False

        self.success_message = submit.success_message
        self.is_dirty = False
        if self.config.persistence.clear_on_submit:
            self.persistence.clear_storage()
        else:
            self.persistence.flush()
        logger.info(f"Form '{self.config.id}' submitted")
        return result

    def reset(self) -> None:
        """Return to the default values, keeping any saved draft."""
        self.values = self.config.default_values()
        self.errors = {}
        self.is_dirty = False
        self.success_message = None
        self.error_message = None
        self._visibility = FieldVisibility(self.config.all_fields(), self.values)

    def clear(self) -> None:
        """Return to the default values and delete the saved draft."""
        self.reset()
        self.persistence.clear_storage()

    def __repr__(self) -> str:
        return f"<FormSession {self.config.id} dirty={self.is_dirty} {self._visibility!r}>"
