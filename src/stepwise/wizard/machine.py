"""
Wizard state machine.

Owns the step index and per-step data, errors and status, and exposes the
transitions the UI triggers: next, previous, jump, skip, complete and submit.
Refused transitions are silent and return False; callers consult
``navigation`` to explain why.
"""

import logging
from collections.abc import Mapping
from typing import Any, Callable

from stepwise.storage.debounce import Debouncer
from stepwise.storage.stores import KeyValueStore
from stepwise.submit import Submitter, local_submit
from stepwise.wizard.models import (
    NavigationMode,
    StepStatus,
    WizardConfig,
    WizardSnapshot,
    WizardState,
    WizardStep,
)
from stepwise.wizard.navigation import NavigationInfo, compute_navigation
from stepwise.wizard.persistence import WizardPersistence
from stepwise.wizard.validation import StepValidator, ValidationResult

logger = logging.getLogger(__name__)

MISSING_STEPS_MESSAGE = "Please complete all required steps: {titles}"


class WizardMachine:
    """State container and transitions for one wizard run."""

    def __init__(
        self,
        config: WizardConfig,
        *,
        submitter: Submitter | None = None,
        store: KeyValueStore | None = None,
        on_complete: Callable[[dict[str, Any]], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_step_change: Callable[[int], None] | None = None,
    ):
        """Initialize the machine.

        Saved progress is restored immediately when persistence is enabled
        with ``restore_on_mount``.

        Args:
            config: Wizard configuration.
            submitter: Submission transport. Defaults to ``local_submit``.
            store: Persistence store. Defaults to the store for
                ``config.persistence.storage_type``.
            on_complete: Called with the payload after a successful submission.
            on_error: Called with the exception when submission fails.
            on_step_change: Called with the new index after every move.
        """
        self.config = config
        self.state = WizardState.initial(config)
        self.submitter: Submitter = submitter or local_submit
        self.persistence = WizardPersistence(config.persistence, store)
        self.on_complete = on_complete
        self.on_error = on_error
        self.on_step_change = on_step_change

        self._validators: dict[str, StepValidator] = {}
        self._save_debouncer: Debouncer[WizardSnapshot] = Debouncer(
            self.persistence.save, config.persistence.debounce_ms / 1000
        )

        if self.persistence.enabled and config.persistence.restore_on_mount:
            self.load_persisted_state()

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def current_step(self) -> WizardStep:
        return self.config.steps[self.state.current_step_index]

    @property
    def current_step_data(self) -> Any:
        return self.state.step_data.get(self.current_step.id)

    @property
    def current_step_errors(self) -> dict[str, str]:
        return dict(self.state.step_errors.get(self.current_step.id, {}))

    @property
    def navigation(self) -> NavigationInfo:
        return compute_navigation(self.config, self.state)

    @property
    def last_index(self) -> int:
        return len(self.config.steps) - 1

    def status_of(self, step_id: str) -> StepStatus:
        self._require_step(step_id)
        return self.state.step_status.get(step_id, StepStatus.INCOMPLETE)

    def aggregated_data(self) -> dict[str, Any]:
        """
        Flatten all step data into one mapping for review screens.

        Mapping step data is merged in step order; any other value is kept
        under its step id.
        """
        merged: dict[str, Any] = {}
        for step in self.config.steps:
            if step.id not in self.state.step_data:
                continue
            data = self.state.step_data[step.id]
            if isinstance(data, Mapping):
                merged.update(data)
            else:
                merged[step.id] = data
        return merged

    def validator_for(self, step_id: str) -> StepValidator:
        """Get the validator of a step; its error changes are recorded on the state."""
        step = self._require_step(step_id)
        if step_id not in self._validators:
            self._validators[step_id] = StepValidator(
                step, on_change=lambda errors: self.set_step_errors(step_id, errors)
            )
        return self._validators[step_id]

    # =========================================================================
    # Navigation
    # =========================================================================

    def next_step(self) -> bool:
        """
        Move to the next step.

        A required step that is not completed and has recorded errors blocks
        the move, in both navigation modes.

        Returns:
            True if the index moved.
        """
        if self._locked("next"):
            return False
        index = self.state.current_step_index
        if index >= self.last_index:
            return False
        step = self.current_step
        if (
            not step.optional
            and step.id not in self.state.completed_steps
            and self.state.step_errors.get(step.id)
        ):
            logger.debug(f"Next refused: step '{step.id}' has errors")
            return False
        return self._move_to(index + 1)

    def previous_step(self) -> bool:
        """Move to the previous step. ``allow_back_navigation`` only affects the UI."""
        if self._locked("previous"):
            return False
        index = self.state.current_step_index
        if index == 0:
            return False
        return self._move_to(index - 1)

    def go_to_step(self, target: int) -> bool:
        """
        Jump to a step.

        Linear wizards may go back to any earlier step or forward by exactly
        one (with the same gate as ``next_step``). Non-linear wizards may go
        to any step.

        Returns:
            True if the index moved.
        """
        if self._locked("jump"):
            return False
        if not 0 <= target <= self.last_index:
            logger.debug(f"Jump refused: step {target} out of range")
            return False
        index = self.state.current_step_index
        if target == index:
            return False
        if self.config.navigation_mode == NavigationMode.NON_LINEAR or target < index:
            return self._move_to(target)
        if target == index + 1:
            return self.next_step()
        logger.debug(f"Jump refused: step {target} is ahead of step {index + 1} in linear mode")
        return False

    def skip_step(self) -> bool:
        """
        Skip the current step if it is skippable and move forward.

        Returns:
            True if the step was skipped.
        """
        if self._locked("skip"):
            return False
        step = self.current_step
        if not step.skippable:
            logger.debug(f"Skip refused: step '{step.id}' is not skippable")
            return False
        self.state.skipped_steps.add(step.id)
        self.state.completed_steps.discard(step.id)
        self.state.step_status[step.id] = StepStatus.SKIPPED
        logger.debug(f"Skipped step '{step.id}'")
        if self.state.current_step_index < self.last_index:
            self._move_to(self.state.current_step_index + 1)
        else:
            self._changed()
        return True

    def _move_to(self, index: int) -> bool:
        self.state.current_step_index = max(0, min(index, self.last_index))
        logger.debug(f"Moved to step {self.state.current_step_index + 1}/{len(self.config.steps)}")
        self._changed()
        if self.on_step_change is not None:
            self.on_step_change(self.state.current_step_index)
        return True

    def _locked(self, action: str) -> bool:
        if self.state.is_completed:
            logger.debug(f"Ignoring {action}: wizard already completed")
            return True
        return False

    # =========================================================================
    # Step data and status
    # =========================================================================

    def update_step_data(self, step_id: str, data: Any) -> None:
        """Replace a step's data wholesale."""
        self._require_step(step_id)
        self.state.step_data[step_id] = data
        self._changed()

    def set_step_errors(self, step_id: str, errors: Mapping[str, str]) -> None:
        """
        Replace a step's error map.

        Any errors set the status to ``error``. An empty map marks the step
        complete, even if the user never confirmed it.
        """
        self._require_step(step_id)
        self.state.step_errors[step_id] = dict(errors)
        if errors:
            self.state.step_status[step_id] = StepStatus.ERROR
        else:
            self.state.step_status[step_id] = StepStatus.COMPLETE
            self.state.completed_steps.add(step_id)
            self.state.skipped_steps.discard(step_id)
        self._changed()

    def complete_step(self, step_id: str) -> None:
        self._require_step(step_id)
        self.state.completed_steps.add(step_id)
        self.state.skipped_steps.discard(step_id)
        self.state.step_status[step_id] = StepStatus.COMPLETE
        self._changed()

    def uncomplete_step(self, step_id: str) -> None:
        """Return a completed step to ``incomplete``."""
        self._require_step(step_id)
        self.state.completed_steps.discard(step_id)
        if self.state.step_status.get(step_id) == StepStatus.COMPLETE:
            self.state.step_status[step_id] = StepStatus.INCOMPLETE
        self._changed()

    async def validate_current_step(self) -> ValidationResult:
        """Validate the current step's data and record the errors."""
        step = self.current_step
        return await self.validator_for(step.id).validate(self.state.step_data.get(step.id))

    async def validate_field(self, name: str, value: Any) -> bool:
        """
        Set one field of the current step's data and re-validate it.

        The step's error map is recorded, but a passing field never completes
        the step; only ``validate_current_step`` or ``complete_step`` do.
        """
        step = self.current_step
        data = self.state.step_data.get(step.id)
        data = dict(data) if isinstance(data, Mapping) else {}
        data[name] = value
        self.update_step_data(step.id, data)

        validator = self.validator_for(step.id)
        valid = await validator.validate_field(name, value, data)
        self.state.step_errors[step.id] = dict(validator.errors)
        if validator.errors:
            self.state.step_status[step.id] = StepStatus.ERROR
        self._changed()
        return valid

    async def advance(self) -> bool:
        """
        Validate the current step, complete it and move next.

        Returns:
            True if the index moved.
        """
        if self._locked("advance"):
            return False
        result = await self.validate_current_step()
        if not result.valid:
            return False
        self.complete_step(self.current_step.id)
        return self.next_step()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def reset_wizard(self) -> None:
        """Return to the initial state and drop saved progress."""
        self._save_debouncer.cancel()
        self.state = WizardState.initial(self.config)
        self._validators.clear()
        self.persistence.clear()
        logger.info(f"Wizard '{self.config.id}' reset")
        if self.on_step_change is not None:
            self.on_step_change(0)

    def missing_required_steps(self) -> list[WizardStep]:
        """Required steps that are neither completed nor skipped."""
        done = self.state.completed_steps | self.state.skipped_steps
        return [step for step in self.config.steps if not step.optional and step.id not in done]

    async def submit_wizard(self) -> Any:
        """
        Submit the data of every step.

        Does nothing while a submission is running or after completion. When
        required steps are missing, records one error naming them.

        Returns:
            The submitter's result, or None when nothing was submitted.

        Raises:
            Exception: Whatever the submitter raised, after the configured
                error message has been recorded and ``on_error`` called.
        """
        if self.state.is_submitting or self.state.is_completed:
            return None

        missing = self.missing_required_steps()
        if missing:
            titles = ", ".join(step.title for step in missing)
            self.state.wizard_errors = [MISSING_STEPS_MESSAGE.format(titles=titles)]
            logger.debug(f"Submission refused: missing {[step.id for step in missing]}")
            return None

        submit = self.config.submit
        payload = {
            step.id: self.state.step_data[step.id]
            for step in self.config.steps
            if self.state.step_data.get(step.id) is not None
        }
        self.state.wizard_errors = []
        self.state.is_submitting = True

        try:
            result = await self.submitter(submit.endpoint, submit.method, payload)
        except Exception as e:
            self.state.is_submitting = False
            self.state.wizard_errors = [submit.error_message]
            logger.error(f"Wizard '{self.config.id}' submission failed: {e}")
            if self.on_error is not None:
                self.on_error(e)
            raise

        self.state.is_submitting = False
        self.state.is_completed = True
        logger.info(f"Wizard '{self.config.id}' submitted")
        if self.config.persistence.clear_on_submit:
            self._save_debouncer.cancel()
            self.persistence.clear()
        else:
            self.persist_state()
        if self.on_complete is not None:
            self.on_complete(payload)
        return result

    # =========================================================================
    # Persistence
    # =========================================================================

    def snapshot(self) -> WizardSnapshot:
        return self.state.snapshot(self.config.step_ids)

    def persist_state(self) -> bool:
        """Write the current snapshot now, replacing any pending save."""
        self._save_debouncer.cancel()
        return self.persistence.save(self.snapshot())

    def flush(self) -> bool:
        """Write a pending debounced save now."""
        return self._save_debouncer.flush()

    def load_persisted_state(self) -> bool:
        """
        Restore saved progress.

        Unknown step ids are dropped, the index is clamped into range and a
        step found in both the completed and skipped sets counts as completed.

        Returns:
            True if a snapshot was restored.
        """
        snapshot = self.persistence.load()
        if snapshot is None:
            return False
        self._apply_snapshot(snapshot)
        logger.info(f"Restored wizard '{self.config.id}' at step {self.state.current_step_index + 1}")
        return True

    def _apply_snapshot(self, snapshot: WizardSnapshot) -> None:
        known = set(self.config.step_ids)
        completed = {step_id for step_id in snapshot.completed_steps if step_id in known}
        skipped = {step_id for step_id in snapshot.skipped_steps if step_id in known} - completed

        state = WizardState.initial(self.config)
        state.current_step_index = max(0, min(snapshot.current_step_index, self.last_index))
        state.completed_steps = completed
        state.skipped_steps = skipped
        state.step_data = {k: v for k, v in snapshot.step_data.items() if k in known}
        for step_id, status in snapshot.step_status.items():
            if step_id not in known:
                continue
            if status in (StepStatus.COMPLETE, StepStatus.SKIPPED):
                status = StepStatus.INCOMPLETE
            state.step_status[step_id] = status
        for step_id in completed:
            state.step_status[step_id] = StepStatus.COMPLETE
        for step_id in skipped:
            state.step_status[step_id] = StepStatus.SKIPPED
        self.state = state
        self._validators.clear()

    def _changed(self) -> None:
        if self.persistence.enabled:
            self._save_debouncer.call(self.snapshot())

    def _require_step(self, step_id: str) -> WizardStep:
        step = self.config.get_step(step_id)
        if step is None:
            raise ValueError(f"Unknown step: {step_id}")
        return step

    def __repr__(self) -> str:
        return (
            f"<WizardMachine {self.config.id} "
            f"step={self.state.current_step_index + 1}/{len(self.config.steps)} "
            f"completed={self.state.is_completed}>"
        )
