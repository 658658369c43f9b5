"""Simulated migration progress."""

import logging
import time
from typing import List, Optional

from ..models.migration import LogLevel, MigrationStatus
from ..storage import MigrationStore

logger = logging.getLogger(__name__)

PROGRESS_STEPS = [
    "Connecting to source database",
    "Analyzing source schema",
    "Connecting to target database",
    "Creating target schema",
    "Starting data transfer",
    "Validating data integrity",
    "Migration completed",
]


def step_progress(index: int, total: int = len(PROGRESS_STEPS)) -> int:
    """Percentage reached once step ``index`` (0-based) has run."""
    return int(round((index + 1) / total * 100))


class ProgressSimulator:
    """
    Walks a running migration through the fixed progress steps.

    Step ``i`` fires ``i * interval`` seconds after the run starts. Nothing is
    migrated; each step only updates the row and appends a log entry. The
    simulation lives in the serving process and is lost if it exits.
    """

    def __init__(
        self,
        store: MigrationStore,
        interval: float = 2.0,
        steps: Optional[List[str]] = None
    ):
        self.store = store
        self.interval = interval
        self.steps = steps or list(PROGRESS_STEPS)

    def apply_step(self, migration_id: str, index: int) -> int:
        """Record step ``index`` for a migration and return its progress."""
        total = len(self.steps)
        progress = step_progress(index, total)
        is_last = index == total - 1

        self.store.update_migration(
            migration_id,
            progress_percentage=progress,
            status=MigrationStatus.COMPLETED if is_last else MigrationStatus.RUNNING,
        )
        self.store.add_log(
            migration_id,
            self.steps[index],
            level=LogLevel.INFO,
            details={"progress": progress},
        )
        return progress

    def run(self, migration_id: str) -> None:
        """
        Run every step, spaced ``interval`` seconds apart.

        Blocking; the app schedules it as a sync background task so it runs
        in the threadpool.
        """
        try:
            for index in range(len(self.steps)):
                if index and self.interval > 0:
                    time.sleep(self.interval)

                progress = self.apply_step(migration_id, index)
                logger.info(f"Migration {migration_id}: {self.steps[index]} ({progress}%)")

        except Exception as e:
            logger.exception(f"Progress simulation failed for {migration_id}")
            self._mark_failed(migration_id, str(e))

    def _mark_failed(self, migration_id: str, error: str) -> None:
        if self.store.get_migration(migration_id) is None:
            return
        self.store.update_migration(migration_id, status=MigrationStatus.FAILED)
        self.store.add_log(
            migration_id,
            "Migration failed",
            level=LogLevel.ERROR,
            details={"error": error},
        )
