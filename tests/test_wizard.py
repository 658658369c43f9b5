"""Unit tests for the wizard flow controller.

Tests cover:
- Gated forward navigation (data validation, dry run)
- Unconditional backward navigation
- Jumping between steps
- State mutators and request building
"""

import pytest

from dbmt.exceptions import WizardError
from dbmt.models import MigrationType
from dbmt.wizard import (
    ConnectionSettings,
    WizardController,
    WizardState,
    WizardStep,
)


def _walk_to(wizard, step):
    wizard.set_validation_passed(True)
    wizard.set_dry_run_passed(True)
    assert wizard.go_to(step)


# ── Tests: Navigation ─────────────────────────────────────────────────────


class TestNavigation:

    def test_starts_on_first_step(self):
        wizard = WizardController()

        assert wizard.current_step == WizardStep.SOURCE_DB
        assert wizard.step_number == 1
        assert wizard.total_steps == 10
        assert wizard.progress_percentage == 0

    def test_ungated_steps_advance_freely(self):
        wizard = WizardController()

        for expected in range(2, 8):
            assert wizard.advance()
            assert wizard.step_number == expected

        assert wizard.current_step == WizardStep.DATA_VALIDATION

    def test_validation_step_blocks_until_passed(self):
        wizard = WizardController()
        wizard.go_to(WizardStep.DATA_VALIDATION)

        assert not wizard.can_proceed()
        assert not wizard.advance()
        assert wizard.current_step == WizardStep.DATA_VALIDATION

        wizard.set_validation_passed(True)
        assert wizard.advance()
        assert wizard.current_step == WizardStep.DRY_RUN

    def test_dry_run_step_blocks_until_passed(self):
        wizard = WizardController()
        wizard.set_validation_passed(True)
        wizard.go_to(WizardStep.DRY_RUN)

        assert not wizard.advance()

        wizard.set_dry_run_passed(True)
        assert wizard.advance()
        assert wizard.current_step == WizardStep.REVIEW

    def test_cannot_advance_past_last_step(self):
        wizard = WizardController()
        _walk_to(wizard, WizardStep.EXECUTE)

        assert wizard.is_last
        assert not wizard.can_proceed()
        assert not wizard.advance()
        assert wizard.progress_percentage == 100

    def test_retreat_is_unconditional_except_at_start(self):
        wizard = WizardController()
        assert not wizard.retreat()

        wizard.go_to(WizardStep.DATA_VALIDATION)
        assert wizard.retreat()
        assert wizard.current_step == WizardStep.FIELD_MAPPING

    def test_retreat_from_gated_step(self):
        wizard = WizardController()
        wizard.set_validation_passed(True)
        wizard.go_to(WizardStep.DRY_RUN)

        assert wizard.retreat()
        assert wizard.current_step == WizardStep.DATA_VALIDATION


class TestGoTo:

    def test_forward_jump_blocked_by_gate(self):
        wizard = WizardController()

        assert not wizard.go_to(WizardStep.REVIEW)
        assert wizard.current_step == WizardStep.SOURCE_DB

    def test_forward_jump_up_to_gated_step(self):
        wizard = WizardController()

        assert wizard.go_to(WizardStep.DATA_VALIDATION)

    def test_backward_jump_always_allowed(self):
        wizard = WizardController()
        _walk_to(wizard, WizardStep.REVIEW)
        wizard.set_validation_passed(False)

        assert wizard.go_to(WizardStep.SOURCE_DB)
        assert wizard.current_step == WizardStep.SOURCE_DB

    def test_unknown_step(self):
        wizard = WizardController(steps=[WizardStep.SOURCE_DB, WizardStep.TARGET_DB])

        with pytest.raises(WizardError):
            wizard.go_to(WizardStep.EXECUTE)
        with pytest.raises(WizardError):
            wizard.go_to(42)

    def test_custom_steps_progress(self):
        wizard = WizardController(
            steps=[WizardStep.SOURCE_DB, WizardStep.TARGET_DB, WizardStep.REVIEW]
        )
        wizard.advance()

        assert wizard.progress_percentage == 50

    def test_empty_steps_rejected(self):
        with pytest.raises(WizardError):
            WizardController(steps=[])


# ── Tests: State ──────────────────────────────────────────────────────────


class TestState:

    def test_defaults(self):
        state = WizardState()

        assert state.source_config.port == 5432
        assert state.target_config.port == 27017
        assert state.dry_run_options.batch_size == 1000
        assert state.dry_run_options.enable_validation is True
        assert state.migration_options.truncate_target is False
        assert not state.validation_passed
        assert not state.dry_run_passed

    def test_update_state(self):
        wizard = WizardController()
        wizard.update_state(source_config=ConnectionSettings(type="mysql", port=3306))

        assert wizard.state.source_config.type == "mysql"

    def test_update_state_rejects_unknown_fields(self):
        with pytest.raises(WizardError):
            WizardController().update_state(colour="blue")

    def test_logs_are_timestamped_and_resettable(self):
        wizard = WizardController()
        entry = wizard.add_migration_log("Starting migration process...")

        assert entry.startswith("[")
        assert entry.endswith("] Starting migration process...")
        assert wizard.state.migration_logs == [entry]

        wizard.reset_migration_logs()
        assert wizard.state.migration_logs == []

    def test_progress_is_clamped(self):
        wizard = WizardController()

        wizard.update_migration_progress(150)
        assert wizard.state.migration_progress == 100
        wizard.update_migration_progress(-5)
        assert wizard.state.migration_progress == 0

    def test_build_request(self):
        wizard = WizardController()
        wizard.update_state(
            source_config=ConnectionSettings(type="postgresql", database="shop"),
            target_config=ConnectionSettings(type="mongodb", port=27017),
        )

        request = wizard.build_request("shop", dry_run=True, migration_type=MigrationType.SCHEMA_ONLY)

        assert request.name == "shop"
        assert request.is_dry_run
        assert request.migration_type == MigrationType.SCHEMA_ONLY
        assert request.source_config["type"] == "postgresql"
        assert request.source_config["database"] == "shop"
        assert "password" not in request.source_config
        assert request.options.batch_size == 1000
