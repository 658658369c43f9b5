"""Step-gated migration configuration wizard."""

import logging
from dataclasses import dataclass, field, fields, asdict
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .api.models import MigrationRequest
from .exceptions import WizardError
from .models.migration import MigrationType

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    """Wizard steps in display order."""
    SOURCE_DB = 1
    TARGET_DB = 2
    CONNECTIVITY = 3
    SOURCE_CONFIG = 4
    TARGET_CONFIG = 5
    FIELD_MAPPING = 6
    DATA_VALIDATION = 7
    DRY_RUN = 8
    REVIEW = 9
    EXECUTE = 10

    @property
    def title(self) -> str:
        return STEP_TITLES[self]


STEP_TITLES = {
    WizardStep.SOURCE_DB: "Source DB",
    WizardStep.TARGET_DB: "Target DB",
    WizardStep.CONNECTIVITY: "Connectivity",
    WizardStep.SOURCE_CONFIG: "Source Config",
    WizardStep.TARGET_CONFIG: "Target Config",
    WizardStep.FIELD_MAPPING: "Field Mapping",
    WizardStep.DATA_VALIDATION: "Data Validation",
    WizardStep.DRY_RUN: "Dry Run",
    WizardStep.REVIEW: "Review",
    WizardStep.EXECUTE: "Execute",
}


@dataclass
class ConnectionSettings:
    """Connection details for one side of the migration."""
    type: str = ""
    host: str = "localhost"
    port: int = 5432
    database: str = ""
    username: str = ""
    password: str = ""
    use_ssl: bool = True

    def to_config(self) -> Dict[str, Any]:
        """Connection config as sent in a migration request."""
        return {
            "type": self.type,
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "username": self.username,
            "useSSL": self.use_ssl,
        }


@dataclass
class FieldMappingRule:
    source_field: str
    target_field: str


@dataclass
class ValidationRule:
    field: str
    rule: str


@dataclass
class DryRunOptions:
    batch_size: int = 1000
    enable_validation: bool = True


@dataclass
class ExecutionOptions:
    truncate_target: bool = False


@dataclass
class WizardState:
    """Everything the wizard collects before a migration is submitted."""
    source_config: ConnectionSettings = field(default_factory=ConnectionSettings)
    target_config: ConnectionSettings = field(
        default_factory=lambda: ConnectionSettings(port=27017)
    )
    field_mappings: List[FieldMappingRule] = field(default_factory=list)
    validation_rules: List[ValidationRule] = field(default_factory=list)
    dry_run_options: DryRunOptions = field(default_factory=DryRunOptions)
    migration_options: ExecutionOptions = field(default_factory=ExecutionOptions)
    validation_passed: bool = False
    dry_run_passed: bool = False
    migration_progress: float = 0
    migration_logs: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


StepGate = Callable[[WizardState], bool]

DEFAULT_GATES: Dict[WizardStep, StepGate] = {
    WizardStep.DATA_VALIDATION: lambda state: state.validation_passed,
    WizardStep.DRY_RUN: lambda state: state.dry_run_passed,
}

_STATE_FIELDS = {f.name for f in fields(WizardState)}


class WizardController:
    """
    Sequences the wizard steps.

    Moving forward out of a step requires that step's gate to pass: data
    validation needs ``validation_passed`` and the dry run needs
    ``dry_run_passed``. Every other step is ungated. Moving back is always
    allowed except from the first step.
    """

    def __init__(
        self,
        state: Optional[WizardState] = None,
        steps: Sequence[WizardStep] = tuple(WizardStep),
        gates: Optional[Dict[WizardStep, StepGate]] = None
    ):
        if not steps:
            raise WizardError("A wizard needs at least one step")
        self.state = state or WizardState()
        self.steps = list(steps)
        self.gates = dict(DEFAULT_GATES if gates is None else gates)
        self._index = 0

    @property
    def current_step(self) -> WizardStep:
        return self.steps[self._index]

    @property
    def step_number(self) -> int:
        """1-based position of the current step."""
        return self._index + 1

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self.steps) - 1

    @property
    def progress_percentage(self) -> float:
        if len(self.steps) == 1:
            return 100.0
        return self._index / (len(self.steps) - 1) * 100

    def _gate_passes(self, step: WizardStep) -> bool:
        gate = self.gates.get(step)
        return gate is None or bool(gate(self.state))

    def can_proceed(self) -> bool:
        """Whether the current step's gate lets the wizard move forward."""
        return not self.is_last and self._gate_passes(self.current_step)

    def advance(self) -> bool:
        """Move to the next step. Returns False when gated or already last."""
        if not self.can_proceed():
            logger.debug(f"Cannot advance past {self.current_step.name}")
            return False
        self._index += 1
        return True

    def retreat(self) -> bool:
        """Move to the previous step. Returns False on the first step."""
        if self.is_first:
            return False
        self._index -= 1
        return True

    def go_to(self, step: WizardStep) -> bool:
        """
        Jump to a step.

        Jumping back is always allowed. Jumping forward is allowed only if
        every step passed on the way has an open gate.
        """
        try:
            target = self.steps.index(WizardStep(step))
        except ValueError:
            raise WizardError(f"Step not in this wizard: {step}") from None

        for index in range(self._index, target):
            if not self._gate_passes(self.steps[index]):
                logger.debug(f"Jump to {WizardStep(step).name} blocked at {self.steps[index].name}")
                return False

        self._index = target
        return True

    # State updates

    def update_state(self, **changes: Any) -> WizardState:
        """Replace top-level state fields."""
        unknown = set(changes) - _STATE_FIELDS
        if unknown:
            raise WizardError(f"Unknown wizard state fields: {', '.join(sorted(unknown))}")
        for name, value in changes.items():
            setattr(self.state, name, value)
        return self.state

    def add_migration_log(self, message: str) -> str:
        entry = f"[{datetime.now(timezone.utc).isoformat()}] {message}"
        self.state.migration_logs.append(entry)
        return entry

    def reset_migration_logs(self) -> None:
        self.state.migration_logs = []

    def set_validation_passed(self, passed: bool) -> None:
        self.state.validation_passed = passed

    def set_dry_run_passed(self, passed: bool) -> None:
        self.state.dry_run_passed = passed

    def update_migration_progress(self, progress: float) -> None:
        self.state.migration_progress = max(0.0, min(float(progress), 100.0))

    def build_request(
        self,
        name: str,
        description: str = "",
        dry_run: bool = False,
        migration_type: MigrationType = MigrationType.FULL
    ) -> MigrationRequest:
        """Turn the collected state into a migration request."""
        options = self.state.dry_run_options
        return MigrationRequest(
            name=name,
            description=description or None,
            source_config=self.state.source_config.to_config(),
            target_config=self.state.target_config.to_config(),
            migration_type=migration_type,
            options={
                "batchSize": options.batch_size,
                "enableValidation": options.enable_validation,
                "dryRun": dry_run,
            },
        )
