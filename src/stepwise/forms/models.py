"""
Form models for Stepwise.

Defines field, conditional rule and form configuration structures. Forms
and wizard steps are both described with these models.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# =============================================================================
# Conditional Logic
# =============================================================================


class ConditionalOperator(str, Enum):
    """Operators understood by the rule evaluator."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class ConditionalRule(BaseModel):
    """Visibility rule watching a sibling field.

    The operator is kept as a plain string so definitions with operators this
    version does not know still load; such rules evaluate to False.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    operator: str
    value: Any = None

    @field_validator("operator", mode="before")
    @classmethod
    def _operator_value(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        return value


class ConditionalGroup(BaseModel):
    """Rules deciding one field's visibility, combined with OR or AND."""

    model_config = ConfigDict(frozen=True)

    mode: Literal["any", "all"] = "all"
    rules: list[ConditionalRule] = Field(default_factory=list)


# =============================================================================
# Fields
# =============================================================================


class FieldType(str, Enum):
    """Built-in field types."""

    TEXT = "text"
    EMAIL = "email"
    PASSWORD = "password"
    NUMBER = "number"
    TEL = "tel"
    URL = "url"
    DATE = "date"
    TIME = "time"
    DATETIME_LOCAL = "datetime-local"
    TEXTAREA = "textarea"
    SELECT = "select"
    MULTISELECT = "multiselect"
    CHECKBOX = "checkbox"
    RADIO = "radio"


TEXT_LIKE_TYPES = frozenset(
    {
        FieldType.TEXT.value,
        FieldType.EMAIL.value,
        FieldType.PASSWORD.value,
        FieldType.TEL.value,
        FieldType.URL.value,
        FieldType.DATE.value,
        FieldType.TIME.value,
        FieldType.DATETIME_LOCAL.value,
        FieldType.TEXTAREA.value,
    }
)


class FieldOption(BaseModel):
    """A selectable option for select, radio and multiselect fields."""

    label: str
    value: Any
    disabled: bool = False


class FieldRules(BaseModel):
    """Declarative validation rules for a field."""

    model_config = ConfigDict(extra="forbid")

    min_length: int | None = Field(default=None, ge=0)
    max_length: int | None = Field(default=None, ge=0)
    pattern: str | None = None
    ge: float | None = None
    le: float | None = None
    min_items: int | None = Field(default=None, ge=0)
    format: Literal["email", "url"] | None = None
    must_accept: bool = False
    message: str | None = None  # Replaces every message for the field


class FieldConfig(BaseModel):
    """Configuration of a single form field."""

    id: str
    name: str = ""
    label: str = ""
    type: str = FieldType.TEXT.value
    placeholder: str | None = None
    help_text: str | None = None
    required: bool = False
    disabled: bool = False
    read_only: bool = False
    col_span: int = Field(default=12, ge=1, le=12)
    options: list[FieldOption] = Field(default_factory=list)
    default_value: Any = None
    conditional: ConditionalGroup | None = None
    validation: FieldRules | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            field_type = data.get("type")
            if isinstance(field_type, Enum):
                data["type"] = field_type.value
            if not data.get("name"):
                data["name"] = data.get("id", "")
            if not data.get("label"):
                data["label"] = str(data.get("name") or data.get("id", "")).replace("_", " ").title()
        return data

    @property
    def option_values(self) -> list[Any]:
        """Values of the options a user may pick."""
        return [option.value for option in self.options if not option.disabled]


# =============================================================================
# Forms
# =============================================================================


class FormSection(BaseModel):
    """A titled group of fields."""

    id: str
    title: str
    description: str | None = None
    collapsible: bool = False
    default_collapsed: bool = False
    fields: list[FieldConfig] = Field(default_factory=list)


class FormPersistenceConfig(BaseModel):
    """Draft persistence settings for a form."""

    enabled: bool = False
    storage_key: str | None = None
    debounce_ms: int = Field(default=1000, ge=0)
    clear_on_submit: bool = False
    max_age_days: float = Field(default=7, gt=0)


class FormSubmitConfig(BaseModel):
    """Submission settings for a form."""

    endpoint: str | None = None
    method: str = "POST"
    submit_button_text: str = "Submit"
    reset_button_text: str = "Reset"
    clear_button_text: str = "Clear"
    success_message: str = "Form submitted successfully!"
    error_message: str = "Failed to submit form. Please try again."


class FormConfig(BaseModel):
    """Configuration of a standalone form.

    Either ``fields`` or ``sections`` describes the layout.
    """

    id: str
    title: str = ""
    description: str | None = None
    fields: list[FieldConfig] | None = None
    sections: list[FormSection] | None = None
    persistence: FormPersistenceConfig = Field(default_factory=FormPersistenceConfig)
    submit: FormSubmitConfig = Field(default_factory=FormSubmitConfig)

    @model_validator(mode="after")
    def _check_fields(self) -> "FormConfig":
        if self.persistence.storage_key is None:
            self.persistence.storage_key = self.id
        seen: set[str] = set()
        for field in self.all_fields():
            if field.id in seen:
                raise ValueError(f"Duplicate field id: {field.id}")
            seen.add(field.id)
        return self

    def all_fields(self) -> list[FieldConfig]:
        """Get all fields, flattening sections."""
        if self.fields is not None:
            return list(self.fields)
        if self.sections is not None:
            return [field for section in self.sections for field in section.fields]
        return []

    def get_field(self, field_id: str) -> FieldConfig | None:
        """Get a field by id."""
        for field in self.all_fields():
            if field.id == field_id:
                return field
        return None

    def required_fields(self) -> list[str]:
        """Ids of required fields."""
        return [field.id for field in self.all_fields() if field.required]

    def default_values(self) -> dict[str, Any]:
        """Initial values keyed by field name."""
        return {
            field.name: "" if field.default_value is None else field.default_value
            for field in self.all_fields()
        }
