"""Migration submission and status endpoints."""

import logging
from typing import List, Optional, Union

from fastapi import APIRouter, BackgroundTasks, Depends, Query

from ...orchestrator import MigrationOrchestrator
from ..auth import User
from ..deps import get_orchestrator, require_user
from ..errors import translate_errors
from ..models import (
    DryRunResponse,
    MigrationLogRow,
    MigrationRequest,
    MigrationStartedResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=Union[DryRunResponse, MigrationStartedResponse])
async def submit_migration(
    data: MigrationRequest,
    background_tasks: BackgroundTasks,
    user: User = Depends(require_user),
    orchestrator: MigrationOrchestrator = Depends(get_orchestrator),
):
    """Record a migration; analyze it (dry run) or start the simulated run."""
    with translate_errors("Migration submission"):
        migration, analysis = orchestrator.submit(data, user.id)

    if analysis is not None:
        return DryRunResponse(
            migration_id=migration.id,
            complexity_score=analysis.complexity_score,
            estimated_time=analysis.estimated_time,
            recommendations=analysis.recommendations,
        )

    # Runs after the response is sent, inside this process only
    background_tasks.add_task(orchestrator.run_progress, migration.id)
    return MigrationStartedResponse(migration_id=migration.id)


@router.get("")
async def get_migrations(
    id: Optional[str] = Query(default=None),
    user: User = Depends(require_user),
    orchestrator: MigrationOrchestrator = Depends(get_orchestrator),
):
    """Get one migration row (null when missing), or all rows newest first."""
    with translate_errors("Migration lookup"):
        if id:
            migration = orchestrator.get_migration(id)
            return migration.to_dict() if migration else None

        return [m.to_dict() for m in orchestrator.list_migrations()]


@router.get("/logs", response_model=List[MigrationLogRow])
async def get_migration_logs(
    id: str = Query(...),
    user: User = Depends(require_user),
    orchestrator: MigrationOrchestrator = Depends(get_orchestrator),
):
    """Get the log rows of a migration, oldest first."""
    with translate_errors("Migration log lookup"):
        return [entry.to_dict() for entry in orchestrator.list_logs(id)]
