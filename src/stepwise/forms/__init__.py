"""
Forms module for Stepwise.

Field and form configuration, conditional visibility, declarative schemas,
the field widget registry, draft persistence and the standalone form session.
"""

from stepwise.forms.conditions import (
    FieldVisibility,
    compute_visibility,
    evaluate_group,
    evaluate_rule,
)
from stepwise.forms.loader import list_builtin_forms, load_builtin_form, load_form_config
from stepwise.forms.models import (
    ConditionalGroup,
    ConditionalOperator,
    ConditionalRule,
    FieldConfig,
    FieldOption,
    FieldRules,
    FieldType,
    FormConfig,
    FormPersistenceConfig,
    FormSection,
    FormSubmitConfig,
)
from stepwise.forms.persistence import FormPersistence
from stepwise.forms.registry import FieldRegistry, FieldWidget, create_default_registry
from stepwise.forms.schema import build_form_schema, field_annotation
from stepwise.forms.session import FormSession

__all__ = [
    # Models
    "ConditionalGroup",
    "ConditionalOperator",
    "ConditionalRule",
    "FieldConfig",
    "FieldOption",
    "FieldRules",
    "FieldType",
    "FormConfig",
    "FormPersistenceConfig",
    "FormSection",
    "FormSubmitConfig",
    # Visibility
    "FieldVisibility",
    "compute_visibility",
    "evaluate_group",
    "evaluate_rule",
    # Schemas
    "build_form_schema",
    "field_annotation",
    # Widgets
    "FieldRegistry",
    "FieldWidget",
    "create_default_registry",
    # Session
    "FormPersistence",
    "FormSession",
    # Loading
    "list_builtin_forms",
    "load_builtin_form",
    "load_form_config",
]
