"""
Wizard models for Stepwise.

Defines the wizard configuration, the mutable wizard state and the snapshot
written to persistent storage.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from stepwise.forms.models import FieldConfig
from stepwise.schema import StepSchema, as_schema
from stepwise.storage.stores import StorageType


class StepStatus(str, Enum):
    """Per-step status."""

    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    ERROR = "error"
    SKIPPED = "skipped"


class NavigationMode(str, Enum):
    """How freely the user may move between steps."""

    LINEAR = "linear"
    NON_LINEAR = "non-linear"


# =============================================================================
# Configuration
# =============================================================================


class WizardStep(BaseModel):
    """A single wizard step. Immutable once configured."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    title: str
    description: str | None = None
    optional: bool = False
    skippable: bool = False
    fields: list[FieldConfig] = Field(default_factory=list)
    validation_schema: Any = Field(default=None, exclude=True, repr=False)

    @field_validator("validation_schema", mode="before")
    @classmethod
    def _coerce_schema(cls, value: Any) -> StepSchema | None:
        try:
            return as_schema(value)
        except TypeError as e:
            raise ValueError(str(e)) from e


class WizardPersistenceConfig(BaseModel):
    """Where and when wizard progress is persisted."""

    enabled: bool = False
    storage_key: str | None = None
    storage_type: StorageType = StorageType.LOCAL
    clear_on_submit: bool = True
    restore_on_mount: bool = True
    debounce_ms: int = Field(default=0, ge=0)


class WizardSubmitConfig(BaseModel):
    """Final submission settings."""

    endpoint: str = ""
    method: str = "POST"
    submit_button_text: str = "Submit"
    success_message: str = "Submitted successfully!"
    error_message: str = "Failed to submit. Please try again."


class WizardConfig(BaseModel):
    """Configuration of a multi-step wizard."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str
    title: str = ""
    description: str | None = None
    navigation_mode: NavigationMode = NavigationMode.LINEAR
    allow_back_navigation: bool = True
    show_progress_bar: bool = True
    show_step_numbers: bool = True
    steps: list[WizardStep] = Field(min_length=1)
    persistence: WizardPersistenceConfig = Field(default_factory=WizardPersistenceConfig)
    submit: WizardSubmitConfig = Field(default_factory=WizardSubmitConfig)

    @model_validator(mode="after")
    def _check_steps(self) -> "WizardConfig":
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id: {step.id}")
            seen.add(step.id)
        if self.persistence.storage_key is None:
            self.persistence.storage_key = self.id
        return self

    @property
    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]

    def get_step(self, step_id: str) -> WizardStep | None:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


# =============================================================================
# State
# =============================================================================


class WizardSnapshot(BaseModel):
    """Persisted subset of the wizard state.

    Serialized with camelCase keys (``currentStepIndex``, ``completedSteps``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_step_index: int = Field(default=0, ge=0)
    completed_steps: list[str] = Field(default_factory=list)
    skipped_steps: list[str] = Field(default_factory=list)
    step_data: dict[str, Any] = Field(default_factory=dict)
    step_status: dict[str, StepStatus] = Field(default_factory=dict)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class WizardState(BaseModel):
    """The mutable wizard aggregate.

    Owned by a single ``WizardMachine``; mutate it only through the machine so
    the status and step-set invariants hold.
    """

    current_step_index: int = 0
    completed_steps: set[str] = Field(default_factory=set)
    skipped_steps: set[str] = Field(default_factory=set)
    step_data: dict[str, Any] = Field(default_factory=dict)
    step_errors: dict[str, dict[str, str]] = Field(default_factory=dict)
    step_status: dict[str, StepStatus] = Field(default_factory=dict)
    is_submitting: bool = False
    is_completed: bool = False
    wizard_errors: list[str] = Field(default_factory=list)

    @classmethod
    def initial(cls, config: WizardConfig) -> "WizardState":
        """Fresh state for a configuration: first step, everything incomplete."""
        return cls(step_status={step.id: StepStatus.INCOMPLETE for step in config.steps})

    def snapshot(self, step_order: list[str] | None = None) -> WizardSnapshot:
        """Capture the persisted fields.

        Args:
            step_order: Orders the step sets; sorted alphabetically when omitted.
        """

        def ordered(ids: set[str]) -> list[str]:
            if step_order is None:
                return sorted(ids)
            rank = {step_id: index for index, step_id in enumerate(step_order)}
            return sorted(ids, key=lambda step_id: (rank.get(step_id, len(rank)), step_id))

        return WizardSnapshot(
            current_step_index=self.current_step_index,
            completed_steps=ordered(self.completed_steps),
            skipped_steps=ordered(self.skipped_steps),
            step_data=dict(self.step_data),
            step_status=dict(self.step_status),
        )
