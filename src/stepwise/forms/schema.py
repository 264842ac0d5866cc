"""
Build pydantic schemas from declarative field rules.

Wizard steps and forms defined in YAML cannot carry code, so their
validation is generated from each field's type and ``FieldRules``.
"""

import re
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    confloat,
    conlist,
    create_model,
)
from pydantic_core import PydanticCustomError

from stepwise.forms.conditions import FieldVisibility
from stepwise.forms.models import TEXT_LIKE_TYPES, FieldConfig, FieldRules, FieldType
from stepwise.schema import ModelSchema

_FORMATS: dict[str, tuple[re.Pattern[str], str]] = {
    "email": (
        re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+"),
        "Please enter a valid email address",
    ),
    "url": (
        re.compile(r"https?://[^\s/$.?#][^\s]*"),
        "Please enter a valid URL",
    ),
}


def _format_validator(kind: str) -> AfterValidator:
    pattern, message = _FORMATS[kind]

    def check(value: str) -> str:
        if not pattern.fullmatch(value):
            raise PydanticCustomError(f"{kind}_format", message)
        return value

    return AfterValidator(check)


def _required_validator(field: FieldConfig) -> BeforeValidator:
    message = f"{field.label} is required"

    def check(value: Any) -> Any:
        if value is None or value == "" or value == []:
            raise PydanticCustomError("required", message)
        return value

    return BeforeValidator(check)


def _choices(values: list[Any]) -> Any:
    hashable = [value for value in values if isinstance(value, (str, int, float, bool))]
    if not hashable:
        return Any
    return Literal[tuple(hashable)]


def _text_annotation(field: FieldConfig, rules: FieldRules) -> Any:
    constraints = StringConstraints(
        min_length=rules.min_length,
        max_length=rules.max_length,
        pattern=rules.pattern,
    )
    fmt = rules.format
    if fmt is None and field.type in _FORMATS:
        fmt = field.type
    if fmt is not None:
        return Annotated[str, constraints, _format_validator(fmt)]
    return Annotated[str, constraints]


def field_annotation(field: FieldConfig) -> Any:
    """
    Get the pydantic annotation validating a field's value.

    Args:
        field: Field configuration.

    Returns:
        Annotation accepting the value a user may enter for the field.
    """
    rules = field.validation or FieldRules()
    field_type = field.type

    if field_type == FieldType.NUMBER.value:
        return confloat(ge=rules.ge, le=rules.le)
    if field_type == FieldType.CHECKBOX.value:
        return Literal[True] if rules.must_accept else bool
    if field_type == FieldType.MULTISELECT.value:
        item = _choices(field.option_values) if field.options else Any
        return conlist(item, min_length=rules.min_items)
    if field_type in (FieldType.SELECT.value, FieldType.RADIO.value) and field.options:
        return _choices(field.option_values)
    if field_type in TEXT_LIKE_TYPES:
        return _text_annotation(field, rules)
    # Custom registered types validate only what their rules say
    if rules.min_length is not None or rules.max_length is not None or rules.pattern:
        return _text_annotation(field, rules)
    return Any


def build_form_schema(name: str, fields: list[FieldConfig]) -> ModelSchema:
    """
    Build a schema validating the values of ``fields``.

    Required fields must be present and non-blank; optional fields also
    accept ``None`` and the empty string a blank input produces.
    ``FieldRules.message`` replaces every message reported for its field.

    Args:
        name: Model name (used in reprs and error titles).
        fields: Fields to validate; hidden fields should be filtered out first.

    Returns:
        Schema over a dict keyed by field name.
    """
    definitions: dict[str, Any] = {}
    messages: dict[str, str] = {}

    for index, field in enumerate(fields):
        annotation = field_annotation(field)
        if field.required:
            required = Annotated[annotation, _required_validator(field)]
            definitions[f"field_{index}"] = (
                required,
                Field(default=None, alias=field.name, validate_default=True),
            )
        else:
            optional = Optional[Union[annotation, Literal[""]]]
            definitions[f"field_{index}"] = (optional, Field(default=None, alias=field.name))
        if field.validation and field.validation.message:
            messages[field.name] = field.validation.message

    model = create_model(
        _model_name(name),
        __config__=ConfigDict(extra="ignore", regex_engine="python-re"),
        **definitions,
    )
    return ModelSchema(model, messages=messages)


def _model_name(name: str) -> str:
    cleaned = re.sub(r"[^0-9A-Za-z]+", " ", name).title().replace(" ", "")
    return f"{cleaned or 'Form'}Schema"


class VisibleFieldsSchema:
    """Validates only the fields whose conditions hold for the data being parsed.

    The field set, and so the generated model, depends on the values; models
    are cached per visible set.
    """

    def __init__(self, name: str, fields: list[FieldConfig]):
        self.name = name
        self.fields = list(fields)
        self._schemas: dict[tuple[str, ...], ModelSchema] = {}

    def schema_for(self, values: Mapping[str, Any]) -> ModelSchema:
        visible = FieldVisibility(self.fields, values).visible_fields
        key = tuple(field.id for field in visible)
        if key not in self._schemas:
            self._schemas[key] = build_form_schema(self.name, visible)
        return self._schemas[key]

    async def parse(self, data: Any) -> dict[str, Any]:
        values = data if isinstance(data, Mapping) else {}
        return await self.schema_for(values).parse(data)

    def __repr__(self) -> str:
        return f"<VisibleFieldsSchema {self.name} fields={len(self.fields)}>"
