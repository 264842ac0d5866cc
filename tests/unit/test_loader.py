"""Tests for loading wizard and form definitions."""

from pathlib import Path

import pytest

from stepwise.exceptions import SchemaValidationError, WizardConfigError
from stepwise.forms.loader import list_builtin_forms, load_builtin_form, load_form_config
from stepwise.forms.schema import VisibleFieldsSchema
from stepwise.schema import errors_from_issues
from stepwise.storage.stores import MemoryStore
from stepwise.wizard.loader import list_builtin_wizards, load_builtin_wizard, load_wizard_config
from stepwise.wizard.machine import WizardMachine
from stepwise.wizard.models import NavigationMode, StepStatus


class TestBuiltins:
    """Tests for the bundled definitions."""

    def test_list_builtins(self):
        """Test bundled names use dashes."""
        assert list_builtin_wizards() == ["project-setup", "user-onboarding"]
        assert list_builtin_forms() == ["user-registration"]

    def test_project_setup(self):
        """Test the project setup wizard loads with generated schemas."""
        config = load_builtin_wizard("project-setup")

        assert config.id == "project-setup-wizard"
        assert config.navigation_mode == NavigationMode.LINEAR
        assert config.step_ids[0] == "project-info"
        assert config.get_step("team-members").skippable is True
        assert isinstance(config.steps[0].validation_schema, VisibleFieldsSchema)

    def test_user_onboarding(self):
        """Test the onboarding wizard is non-linear and session scoped."""
        config = load_builtin_wizard("user-onboarding")

        assert config.navigation_mode == NavigationMode.NON_LINEAR
        assert config.persistence.storage_type.value == "session"
        assert config.get_step("welcome").validation_schema is None

    def test_user_registration(self):
        """Test the registration form loads its sections."""
        config = load_builtin_form("user-registration")

        field = config.get_field("companyName")
        assert field is not None and field.conditional is not None
        assert config.persistence.clear_on_submit is True

    def test_unknown_builtin(self):
        """Test unknown names list what is available."""
        with pytest.raises(WizardConfigError, match="project-setup"):
            load_builtin_wizard("checkout")
        with pytest.raises(WizardConfigError, match="user-registration"):
            load_builtin_form("checkout")

    @pytest.mark.asyncio
    async def test_project_info_validation(self):
        """Test generated schemas gate the first project setup step."""
        config = load_builtin_wizard("project-setup")
        machine = WizardMachine(config, store=MemoryStore())

        machine.update_step_data("project-info", {"projectName": "ab"})
        result = await machine.validate_current_step()
        assert set(result.errors) == {"projectName", "projectDescription", "projectType"}
        assert result.errors["projectType"] == "Please select a project type"

        machine.update_step_data(
            "project-info",
            {
                "projectName": "Atlas",
                "projectDescription": "Internal tooling portal",
                "projectType": "web",
            },
        )
        assert (await machine.validate_current_step()).valid is True
        assert machine.status_of("project-info") == StepStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_conditional_required_field(self):
        """Test slackChannel is only required when Slack is enabled."""
        config = load_builtin_wizard("project-setup")
        schema = config.get_step("project-settings").validation_schema

        data = {"notifySlack": False, "slackChannel": ""}
        assert await schema.parse(data) is not None

        data["notifySlack"] = True
        with pytest.raises(SchemaValidationError) as exc_info:
            await schema.parse(data)
        assert errors_from_issues(exc_info.value.issues) == {"slackChannel": "Slack Channel is required"}


class TestDefinitionFiles:
    """Tests for loading definitions from paths."""

    def test_missing_file(self, temp_dir: Path):
        """Test missing files raise WizardConfigError."""
        with pytest.raises(WizardConfigError, match="not found"):
            load_wizard_config(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir: Path):
        """Test malformed YAML raises WizardConfigError."""
        path = temp_dir / "bad.yaml"
        path.write_text("id: [unclosed\n")

        with pytest.raises(WizardConfigError, match="Invalid YAML"):
            load_wizard_config(path)

    def test_not_a_mapping(self, temp_dir: Path):
        """Test definitions must be mappings."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(WizardConfigError, match="mapping"):
            load_form_config(path)

    def test_invalid_definition(self, temp_dir: Path):
        """Test schema problems are described by location."""
        path = temp_dir / "empty.yaml"
        path.write_text("id: empty\nsteps: []\n")

        with pytest.raises(WizardConfigError, match="steps"):
            load_wizard_config(path)

    def test_duplicate_steps(self, temp_dir: Path):
        """Test duplicate step ids are rejected."""
        path = temp_dir / "dup.yaml"
        path.write_text("id: dup\nsteps:\n  - {id: a, title: A}\n  - {id: a, title: B}\n")

        with pytest.raises(WizardConfigError, match="Duplicate step id"):
            load_wizard_config(path)
