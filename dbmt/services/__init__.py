"""Services backing the orchestration endpoints."""

from .complexity import DryRunAnalysis, analyze
from .validator import MigrationValidator, ValidationOutcome
from .progress import ProgressSimulator, PROGRESS_STEPS

__all__ = [
    "DryRunAnalysis",
    "analyze",
    "MigrationValidator",
    "ValidationOutcome",
    "ProgressSimulator",
    "PROGRESS_STEPS",
]
