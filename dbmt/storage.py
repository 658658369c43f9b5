"""Table storage for migrations, migration logs and validation reports."""

import json
import logging
import os
import threading
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .exceptions import StoreError
from .models.migration import (
    MigrationRecord,
    MigrationLogEntry,
    ValidationReportRecord,
    MigrationStatus,
    MigrationType,
    LogLevel,
    utcnow,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_COLUMNS = {"id", "created_at", "created_by"}
_MIGRATION_COLUMNS = {f.name for f in fields(MigrationRecord)} - _IMMUTABLE_COLUMNS


def _newest_first(rows: List[Any], attr: str) -> List[Any]:
    # Reverse insertion order first so rows sharing a timestamp stay newest first.
    return sorted(reversed(rows), key=lambda r: getattr(r, attr), reverse=True)


class MigrationStore:
    """
    In-memory store with the ``migrations``, ``migration_logs`` and
    ``validation_reports`` tables.

    Identifiers are assigned by the store. Logs and reports must reference an
    existing migration.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._migrations: Dict[str, MigrationRecord] = {}
        self._logs: List[MigrationLogEntry] = []
        self._reports: List[ValidationReportRecord] = []

    # Migrations

    def create_migration(
        self,
        name: str,
        source_db_type: str,
        target_db_type: str,
        description: Optional[str] = None,
        source_config: Optional[Dict[str, Any]] = None,
        target_config: Optional[Dict[str, Any]] = None,
        migration_type: MigrationType = MigrationType.FULL,
        status: MigrationStatus = MigrationStatus.PENDING,
        created_by: Optional[str] = None,
    ) -> MigrationRecord:
        """Insert a migration row."""
        record = MigrationRecord(
            name=name,
            description=description,
            source_db_type=source_db_type,
            target_db_type=target_db_type,
            source_config=source_config or {},
            target_config=target_config or {},
            migration_type=MigrationType(migration_type),
            status=MigrationStatus(status),
            created_by=created_by,
        )
        with self._lock:
            self._migrations[record.id] = record
            self._commit(lambda: self._migrations.pop(record.id))
        return record

    def get_migration(self, migration_id: str) -> Optional[MigrationRecord]:
        """Get a migration by ID, or None."""
        with self._lock:
            return self._migrations.get(migration_id)

    def list_migrations(self) -> List[MigrationRecord]:
        """List all migrations, newest first."""
        with self._lock:
            return _newest_first(list(self._migrations.values()), "created_at")

    def update_migration(self, migration_id: str, **changes: Any) -> MigrationRecord:
        """Update columns of a migration row."""
        unknown = set(changes) - _MIGRATION_COLUMNS
        if unknown:
            raise StoreError(f"Unknown migration columns: {', '.join(sorted(unknown))}")

        if "status" in changes:
            changes["status"] = MigrationStatus(changes["status"])
        if "migration_type" in changes:
            changes["migration_type"] = MigrationType(changes["migration_type"])

        with self._lock:
            record = self._migrations.get(migration_id)
            if record is None:
                raise StoreError(f"Migration not found: {migration_id}")
            previous = {column: getattr(record, column) for column in changes}
            previous["updated_at"] = record.updated_at
            for column, value in changes.items():
                setattr(record, column, value)
            record.updated_at = utcnow()

            def restore():
                for column, value in previous.items():
                    setattr(record, column, value)

            self._commit(restore)
            return record

    # Logs

    def add_log(
        self,
        migration_id: str,
        message: str,
        level: LogLevel = LogLevel.INFO,
        details: Optional[Dict[str, Any]] = None,
    ) -> MigrationLogEntry:
        """Append a log row for a migration."""
        entry = MigrationLogEntry(
            migration_id=migration_id,
            message=message,
            level=LogLevel(level),
            details=details or {},
        )
        with self._lock:
            self._check_reference(migration_id, "migration_logs")
            self._logs.append(entry)
            self._commit(self._logs.pop)
        return entry

    def list_logs(self, migration_id: str) -> List[MigrationLogEntry]:
        """List log rows of a migration in insertion order."""
        with self._lock:
            return [entry for entry in self._logs if entry.migration_id == migration_id]

    # Validation reports

    def add_validation_report(
        self,
        migration_id: str,
        validation_type: str,
        source_result: Optional[Dict[str, Any]] = None,
        target_result: Optional[Dict[str, Any]] = None,
        is_valid: bool = False,
        discrepancies: Optional[Dict[str, Any]] = None,
    ) -> ValidationReportRecord:
        """Insert a validation report row."""
        report = ValidationReportRecord(
            migration_id=migration_id,
            validation_type=validation_type,
            source_result=source_result or {},
            target_result=target_result or {},
            is_valid=is_valid,
            discrepancies=discrepancies,
        )
        with self._lock:
            self._check_reference(migration_id, "validation_reports")
            self._reports.append(report)
            self._commit(self._reports.pop)
        return report

    def list_validation_reports(self, migration_id: str) -> List[ValidationReportRecord]:
        """List validation reports of a migration, newest first."""
        with self._lock:
            reports = [r for r in self._reports if r.migration_id == migration_id]
            return _newest_first(reports, "validated_at")

    def _check_reference(self, migration_id: str, table: str) -> None:
        if migration_id not in self._migrations:
            raise StoreError(
                f'insert on table "{table}" violates foreign key constraint: '
                f"migration {migration_id} does not exist"
            )

    def _commit(self, undo: Callable[[], Any]) -> None:
        """Run the write hook, undoing the in-memory change if it fails."""
        try:
            self._after_write()
        except Exception as e:
            undo()
            logger.error(f"Store write failed, change rolled back: {e}")
            raise StoreError(f"Store write failed: {e}") from e

    def _after_write(self) -> None:
        """Hook called with the lock held after every write."""

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        """Snapshot every table."""
        with self._lock:
            return {
                "migrations": [m.to_dict() for m in self._migrations.values()],
                "migration_logs": [e.to_dict() for e in self._logs],
                "validation_reports": [r.to_dict() for r in self._reports],
            }


class JsonFileStore(MigrationStore):
    """
    Store that snapshots its tables to a JSON file after each write.

    Existing snapshots are loaded on construction so migration history
    survives restarts.
    """

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return

        with open(self.path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise StoreError(f"Corrupt store file {self.path}: {e}") from e

        for row in data.get("migrations", []):
            record = MigrationRecord.from_dict(row)
            self._migrations[record.id] = record
        self._logs = [MigrationLogEntry.from_dict(row) for row in data.get("migration_logs", [])]
        self._reports = [
            ValidationReportRecord.from_dict(row) for row in data.get("validation_reports", [])
        ]
        logger.info(
            f"Loaded {len(self._migrations)} migrations from {self.path}"
        )

    def _after_write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        os.replace(tmp_path, self.path)


def create_store(data_file: Optional[str] = None) -> MigrationStore:
    """Create the store selected by configuration."""
    if data_file:
        return JsonFileStore(data_file)
    return MigrationStore()
