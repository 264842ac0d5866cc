"""Tests for the step validator."""

import pytest

from stepwise.schema import ROOT_ERROR_KEY, RefinedSchema
from stepwise.wizard.models import WizardConfig
from stepwise.wizard.validation import StepValidator


class RecordingErrors:
    """Collects error maps reported by a validator."""

    def __init__(self):
        self.calls = []

    def __call__(self, errors):
        self.calls.append(errors)


class TestStepValidator:
    """Tests for StepValidator."""

    @pytest.mark.asyncio
    async def test_step_without_schema_is_valid(self, wizard_factory):
        """Test steps without a schema always validate."""
        step = wizard_factory(1).steps[0]
        result = await StepValidator(step).validate({"anything": 1})

        assert result.valid is True
        assert result.errors == {}

    @pytest.mark.asyncio
    async def test_validate_reports_changes(self, linear_config: WizardConfig):
        """Test validation replaces the error map and notifies."""
        recorder = RecordingErrors()
        validator = StepValidator(linear_config.steps[0], on_change=recorder)

        result = await validator.validate({"name": "a"})
        assert result.valid is False
        assert list(result.errors) == ["name"]
        assert validator.is_valid is False
        assert validator.is_validating is False

        result = await validator.validate({"name": "Ada"})
        assert result.valid is True
        assert recorder.calls[-1] == {}
        assert len(recorder.calls) == 2

    @pytest.mark.asyncio
    async def test_root_issues(self, wizard_factory):
        """Test refinements without a field are reported under the root key."""

        class AnyMapping:
            async def parse(self, data):
                return data

        def passwords_match(data):
            if data.get("password") != data.get("confirm"):
                return {"": "Passwords do not match"}
            return None

        schema = RefinedSchema(AnyMapping(), passwords_match)
        step = wizard_factory(1, schemas={0: schema}).steps[0]
        result = await StepValidator(step).validate({"password": "a", "confirm": "b"})

        assert result.errors == {ROOT_ERROR_KEY: "Passwords do not match"}

    @pytest.mark.asyncio
    async def test_async_refinement(self, wizard_factory):
        """Test refinements may be coroutines."""

        class AnyMapping:
            async def parse(self, data):
                return data

        async def username_available(data):
            if data.get("username") == "admin":
                return {"username": "Username is taken"}
            return {}

        step = wizard_factory(1, schemas={0: RefinedSchema(AnyMapping(), username_available)}).steps[0]
        validator = StepValidator(step)

        assert (await validator.validate({"username": "admin"})).errors == {"username": "Username is taken"}
        assert (await validator.validate({"username": "ada"})).valid is True

    @pytest.mark.asyncio
    async def test_validate_field(self, linear_config: WizardConfig):
        """Test single-field validation only touches that field and does not notify."""
        recorder = RecordingErrors()
        validator = StepValidator(linear_config.steps[0], on_change=recorder)
        validator.set_field_error("other", "Keep me")

        assert await validator.validate_field("name", "a") is False
        assert set(validator.errors) == {"other", "name"}

        assert await validator.validate_field("name", "Ada") is True
        assert validator.errors == {"other": "Keep me"}
        assert recorder.calls == [{"other": "Keep me"}]

    def test_error_helpers(self, wizard_factory):
        """Test manual error edits and can_complete."""
        config = wizard_factory(2, optional=(1,))
        required = StepValidator(config.steps[0])
        optional = StepValidator(config.steps[1])

        required.set_field_error("name", "Required")
        optional.set_field_error("bio", "Too long")
        assert required.can_complete() is False
        assert optional.can_complete() is True

        required.clear_field_error("name")
        assert required.can_complete() is True

        optional.clear_errors()
        assert optional.errors == {}
