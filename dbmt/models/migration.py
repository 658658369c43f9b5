"""Persisted migration rows."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum
from datetime import datetime, timezone
import uuid

from dateutil import parser as date_parser


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return date_parser.isoparse(value)


class MigrationType(str, Enum):
    """What a migration moves."""
    FULL = "full"
    INCREMENTAL = "incremental"
    SCHEMA_ONLY = "schema_only"
    DATA_ONLY = "data_only"


class MigrationStatus(str, Enum):
    """Status of a migration row."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class LogLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ValidationType(str, Enum):
    """Validation checks with a known report shape."""
    ROW_COUNT = "row_count"
    CHECKSUM = "checksum"
    DATA_INTEGRITY = "data_integrity"


@dataclass
class MigrationRecord:
    """A row of the ``migrations`` table."""
    name: str
    source_db_type: str
    target_db_type: str
    id: str = field(default_factory=_new_id)
    description: Optional[str] = None
    source_config: Dict[str, Any] = field(default_factory=dict)
    target_config: Dict[str, Any] = field(default_factory=dict)
    migration_type: MigrationType = MigrationType.FULL
    status: MigrationStatus = MigrationStatus.PENDING
    progress_percentage: int = 0
    created_by: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the row representation returned by the API."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "source_db_type": self.source_db_type,
            "target_db_type": self.target_db_type,
            "source_config": self.source_config,
            "target_config": self.target_config,
            "migration_type": self.migration_type.value,
            "status": self.status.value,
            "progress_percentage": self.progress_percentage,
            "created_by": self.created_by,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationRecord":
        """Create from a row representation."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("description"),
            source_db_type=data.get("source_db_type", ""),
            target_db_type=data.get("target_db_type", ""),
            source_config=data.get("source_config") or {},
            target_config=data.get("target_config") or {},
            migration_type=MigrationType(data.get("migration_type", "full")),
            status=MigrationStatus(data.get("status", "pending")),
            progress_percentage=data.get("progress_percentage", 0),
            created_by=data.get("created_by"),
            created_at=_parse_datetime(data.get("created_at")) or utcnow(),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


@dataclass
class MigrationLogEntry:
    """A row of the append-only ``migration_logs`` table."""
    migration_id: str
    message: str
    level: LogLevel = LogLevel.INFO
    details: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "migration_id": self.migration_id,
            "level": self.level.value,
            "message": self.message,
            "details": self.details,
            "created_at": _isoformat(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationLogEntry":
        return cls(
            id=data["id"],
            migration_id=data["migration_id"],
            message=data.get("message", ""),
            level=LogLevel(data.get("level", "info")),
            details=data.get("details") or {},
            created_at=_parse_datetime(data.get("created_at")) or utcnow(),
        )


@dataclass
class ValidationReportRecord:
    """A row of the ``validation_reports`` table."""
    migration_id: str
    validation_type: str
    source_result: Dict[str, Any] = field(default_factory=dict)
    target_result: Dict[str, Any] = field(default_factory=dict)
    is_valid: bool = False
    discrepancies: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=_new_id)
    validated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "migration_id": self.migration_id,
            "validation_type": self.validation_type,
            "source_result": self.source_result,
            "target_result": self.target_result,
            "is_valid": self.is_valid,
            "discrepancies": self.discrepancies,
            "validated_at": _isoformat(self.validated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidationReportRecord":
        return cls(
            id=data["id"],
            migration_id=data["migration_id"],
            validation_type=data.get("validation_type", ""),
            source_result=data.get("source_result") or {},
            target_result=data.get("target_result") or {},
            is_valid=bool(data.get("is_valid", False)),
            discrepancies=data.get("discrepancies"),
            validated_at=_parse_datetime(data.get("validated_at")) or utcnow(),
        )
