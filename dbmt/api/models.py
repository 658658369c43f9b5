"""Pydantic models for API requests and responses.

Request and response bodies use camelCase on the wire; persisted rows keep
their snake_case column names.
"""

from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models.migration import MigrationType, MigrationStatus, LogLevel


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# Request Models
class MigrationOptions(_CamelModel):
    batch_size: Optional[int] = Field(default=None, alias="batchSize")
    enable_validation: Optional[bool] = Field(default=None, alias="enableValidation")
    dry_run: bool = Field(default=False, alias="dryRun")


class MigrationRequest(_CamelModel):
    name: str = ""
    description: Optional[str] = None
    source_config: Dict[str, Any] = Field(alias="sourceConfig")
    target_config: Dict[str, Any] = Field(alias="targetConfig")
    migration_type: MigrationType = Field(default=MigrationType.FULL, alias="migrationType")
    options: Optional[MigrationOptions] = None

    @property
    def is_dry_run(self) -> bool:
        return bool(self.options and self.options.dry_run)


class ValidationRequest(_CamelModel):
    migration_id: str = Field(alias="migrationId")
    validation_type: Optional[str] = Field(default=None, alias="validationType")


# Response Models
class DryRunResponse(_CamelModel):
    migration_id: str = Field(alias="migrationId")
    dry_run: Literal[True] = Field(default=True, alias="dryRun")
    complexity_score: int = Field(alias="complexityScore")
    estimated_time: str = Field(alias="estimatedTime")
    recommendations: List[str]


class MigrationStartedResponse(_CamelModel):
    migration_id: str = Field(alias="migrationId")
    status: Literal["started"] = "started"


class ValidationResponse(_CamelModel):
    migration_id: str = Field(alias="migrationId")
    validation_type: Optional[str] = Field(default=None, alias="validationType")
    source: Dict[str, Any]
    target: Dict[str, Any]
    is_valid: bool = Field(alias="isValid")
    discrepancies: Optional[Dict[str, Any]] = None


class MigrationRow(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    source_db_type: Optional[str] = None
    target_db_type: Optional[str] = None
    source_config: Dict[str, Any]
    target_config: Dict[str, Any]
    migration_type: MigrationType
    status: MigrationStatus
    progress_percentage: int
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class MigrationLogRow(BaseModel):
    id: str
    migration_id: str
    level: LogLevel
    message: str
    details: Dict[str, Any]
    created_at: datetime


class ValidationReportRow(BaseModel):
    id: str
    migration_id: str
    validation_type: str
    source_result: Dict[str, Any]
    target_result: Dict[str, Any]
    is_valid: bool
    discrepancies: Optional[Dict[str, Any]] = None
    validated_at: datetime


class ErrorResponse(BaseModel):
    error: str
