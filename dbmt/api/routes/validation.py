"""Validation report endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ...orchestrator import MigrationOrchestrator
from ..auth import User
from ..deps import get_orchestrator, require_user
from ..errors import translate_errors
from ..models import ValidationRequest, ValidationResponse, ValidationReportRow

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ValidationResponse)
async def validate_migration(
    data: ValidationRequest,
    user: User = Depends(require_user),
    orchestrator: MigrationOrchestrator = Depends(get_orchestrator),
):
    """Run a validation check against a migration and store the report."""
    with translate_errors("Validation"):
        outcome, _ = orchestrator.validate(data.migration_id, data.validation_type)

    return ValidationResponse(
        migration_id=data.migration_id,
        validation_type=data.validation_type,
        source=outcome.source,
        target=outcome.target,
        is_valid=outcome.is_valid,
        discrepancies=outcome.discrepancies,
    )


@router.get("", response_model=List[ValidationReportRow])
async def list_validation_reports(
    migration_id: Optional[str] = Query(default=None, alias="migrationId"),
    user: User = Depends(require_user),
    orchestrator: MigrationOrchestrator = Depends(get_orchestrator),
):
    """List the validation reports of a migration, newest first."""
    if not migration_id:
        return []

    with translate_errors("Validation report lookup"):
        return [r.to_dict() for r in orchestrator.list_validation_reports(migration_id)]
