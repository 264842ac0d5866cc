"""
Wizard module for Stepwise.

The multi-step wizard state machine with its models, navigation policy,
step validation, persistence and YAML loading.
"""

from stepwise.wizard.loader import (
    list_builtin_wizards,
    load_builtin_wizard,
    load_wizard_config,
    with_field_schemas,
)
from stepwise.wizard.machine import WizardMachine
from stepwise.wizard.models import (
    NavigationMode,
    StepStatus,
    WizardConfig,
    WizardPersistenceConfig,
    WizardSnapshot,
    WizardState,
    WizardStep,
    WizardSubmitConfig,
)
from stepwise.wizard.navigation import NavigationInfo, compute_navigation, compute_progress
from stepwise.wizard.persistence import WizardPersistence
from stepwise.wizard.validation import StepValidator, ValidationResult

__all__ = [
    # Models
    "NavigationMode",
    "StepStatus",
    "WizardConfig",
    "WizardPersistenceConfig",
    "WizardSnapshot",
    "WizardState",
    "WizardStep",
    "WizardSubmitConfig",
    # Machine
    "WizardMachine",
    "NavigationInfo",
    "compute_navigation",
    "compute_progress",
    "StepValidator",
    "ValidationResult",
    "WizardPersistence",
    # Loading
    "list_builtin_wizards",
    "load_builtin_wizard",
    "load_wizard_config",
    "with_field_schemas",
]
