"""Migration orchestrator - records submissions, dry runs and validations."""

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

from .models.migration import (
    LogLevel,
    MigrationLogEntry,
    MigrationRecord,
    MigrationStatus,
    ValidationReportRecord,
)
from .services.complexity import DryRunAnalysis, analyze
from .services.progress import ProgressSimulator
from .services.validator import MigrationValidator, ValidationOutcome
from .storage import MigrationStore

if TYPE_CHECKING:
    from .api.models import MigrationRequest

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """
    Coordinates a migration submission.

    Handles:
    - Recording the migration row and its start log
    - Dry-run complexity analysis
    - Handing real runs to the progress simulator
    - Validation reports
    - Status lookups

    No database is ever contacted; results are computed or canned.
    """

    def __init__(
        self,
        store: MigrationStore,
        progress_interval: float = 2.0,
        validator: Optional[MigrationValidator] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Table storage for migrations, logs and reports
            progress_interval: Seconds between simulated progress steps
            validator: Validation check runner
        """
        self.store = store
        self.validator = validator or MigrationValidator()
        self.simulator = ProgressSimulator(store, interval=progress_interval)

    def submit(
        self,
        request: "MigrationRequest",
        user_id: str
    ) -> Tuple[MigrationRecord, Optional[DryRunAnalysis]]:
        """
        Record a migration request.

        Dry runs are analyzed immediately and stay ``pending``. Real runs are
        recorded as ``running``; the caller schedules :meth:`run_progress`.

        Returns:
            The migration row, and the analysis for dry runs (else None)
        """
        dry_run = request.is_dry_run
        source_config = request.source_config
        target_config = request.target_config

        migration = self.store.create_migration(
            name=request.name,
            description=request.description,
            source_db_type=source_config.get("type"),
            target_db_type=target_config.get("type"),
            source_config=source_config,
            target_config=target_config,
            migration_type=request.migration_type,
            status=MigrationStatus.PENDING if dry_run else MigrationStatus.RUNNING,
            created_by=user_id,
        )

        options = request.options.model_dump(by_alias=True) if request.options else None
        self.store.add_log(
            migration.id,
            f"Migration {'dry run' if dry_run else 'execution'} started",
            level=LogLevel.INFO,
            details={"options": options},
        )
        logger.info(
            f"Migration {migration.id} ({migration.source_db_type} -> "
            f"{migration.target_db_type}) {'dry run' if dry_run else 'execution'} "
            f"submitted by {user_id}"
        )

        if not dry_run:
            return migration, None

        analysis = analyze(source_config, target_config)
        self.store.add_log(
            migration.id,
            "Dry run analysis completed",
            level=LogLevel.INFO,
            details=analysis.to_dict(),
        )
        logger.info(
            f"Dry run {migration.id}: complexity {analysis.complexity_score}, "
            f"estimated {analysis.estimated_time}"
        )
        return migration, analysis

    def run_progress(self, migration_id: str) -> None:
        """Simulate the progress of a running migration."""
        self.simulator.run(migration_id)

    def get_migration(self, migration_id: str) -> Optional[MigrationRecord]:
        return self.store.get_migration(migration_id)

    def list_migrations(self) -> List[MigrationRecord]:
        return self.store.list_migrations()

    def list_logs(self, migration_id: str) -> List[MigrationLogEntry]:
        return self.store.list_logs(migration_id)

    def validate(
        self,
        migration_id: str,
        validation_type: Optional[str]
    ) -> Tuple[ValidationOutcome, ValidationReportRecord]:
        """Run a validation check and persist it as a report."""
        outcome = self.validator.validate(migration_id, validation_type)

        report = self.store.add_validation_report(
            migration_id=migration_id,
            validation_type=validation_type or "",
            source_result=outcome.source,
            target_result=outcome.target,
            is_valid=outcome.is_valid,
            discrepancies=outcome.discrepancies,
        )
        logger.info(
            f"Validation {validation_type} for {migration_id}: "
            f"{'valid' if outcome.is_valid else 'invalid'}"
        )
        return outcome, report

    def list_validation_reports(self, migration_id: str) -> List[ValidationReportRecord]:
        return self.store.list_validation_reports(migration_id)
