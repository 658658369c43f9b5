"""Data models for the migration tool."""

from .migration import (
    MigrationType,
    MigrationStatus,
    LogLevel,
    ValidationType,
    MigrationRecord,
    MigrationLogEntry,
    ValidationReportRecord,
)

__all__ = [
    "MigrationType",
    "MigrationStatus",
    "LogLevel",
    "ValidationType",
    "MigrationRecord",
    "MigrationLogEntry",
    "ValidationReportRecord",
]
