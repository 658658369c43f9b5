"""Dry-run complexity analysis."""

import math
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)

BASE_TIME_MINUTES = 30
DEFAULT_ESTIMATED_TABLES = 10
MAX_SCORE = 100

ENGINE_MISMATCH_WEIGHT = 30
MANY_TABLES_THRESHOLD = 50
MANY_TABLES_WEIGHT = 40
SOME_TABLES_THRESHOLD = 20
SOME_TABLES_WEIGHT = 20
JSON_FIELDS_WEIGHT = 15
BLOB_FIELDS_WEIGHT = 25

HIGH_COMPLEXITY_RECOMMENDATIONS = [
    "Consider breaking this migration into smaller batches",
    "Schedule during low-traffic hours",
    "Ensure adequate backup strategy is in place",
]
MEDIUM_COMPLEXITY_RECOMMENDATIONS = [
    "Enable detailed logging for troubleshooting",
    "Consider running validation checks post-migration",
]
LOW_COMPLEXITY_RECOMMENDATION = "This migration has low complexity and should complete smoothly"


@dataclass
class DryRunAnalysis:
    """Result of a dry-run analysis."""
    complexity_score: int
    estimated_time: str
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexityScore": self.complexity_score,
            "estimatedTime": self.estimated_time,
            "recommendations": self.recommendations,
        }


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _as_number(value: Any, default: int) -> float:
    try:
        number = float(value)
    except OverflowError:
        return float("inf")
    except (TypeError, ValueError):
        return default
    return number or default


def calculate_complexity_score(
    source_config: Mapping[str, Any],
    target_config: Mapping[str, Any]
) -> int:
    """
    Score how hard a migration is on a 0-100 scale.

    Args:
        source_config: Source connection config (``type``, ``estimatedTables``,
            ``hasJsonFields``, ``hasBlobs``)
        target_config: Target connection config (``type``)

    Returns:
        Additive score clamped to [0, 100]
    """
    score = 0

    if source_config.get("type") != target_config.get("type"):
        score += ENGINE_MISMATCH_WEIGHT

    estimated_tables = _as_number(source_config.get("estimatedTables"), DEFAULT_ESTIMATED_TABLES)
    if estimated_tables > MANY_TABLES_THRESHOLD:
        score += MANY_TABLES_WEIGHT
    elif estimated_tables > SOME_TABLES_THRESHOLD:
        score += SOME_TABLES_WEIGHT

    if source_config.get("hasJsonFields"):
        score += JSON_FIELDS_WEIGHT
    if source_config.get("hasBlobs"):
        score += BLOB_FIELDS_WEIGHT

    return max(0, min(score, MAX_SCORE))


def estimate_migration_time(complexity_score: int) -> str:
    """Estimate wall time from the complexity score as a human-readable string."""
    estimated_minutes = BASE_TIME_MINUTES + BASE_TIME_MINUTES * complexity_score / 100

    if estimated_minutes < 60:
        return f"{_round_half_up(estimated_minutes)} minutes"

    hours = _round_half_up(estimated_minutes / 60 * 10) / 10
    if hours == 1:
        return "1 hour"
    if hours.is_integer():
        return f"{int(hours)} hours"
    return f"{hours} hours"


def generate_recommendations(complexity_score: int) -> List[str]:
    """Pick the recommendation bands for a score. Never empty."""
    recommendations = []

    if complexity_score > 70:
        recommendations.extend(HIGH_COMPLEXITY_RECOMMENDATIONS)

    if complexity_score > 50:
        recommendations.extend(MEDIUM_COMPLEXITY_RECOMMENDATIONS)
    else:
        recommendations.append(LOW_COMPLEXITY_RECOMMENDATION)

    return recommendations


def analyze(
    source_config: Mapping[str, Any],
    target_config: Mapping[str, Any]
) -> DryRunAnalysis:
    """Run the full dry-run analysis for a source/target pair."""
    score = calculate_complexity_score(source_config, target_config)
    analysis = DryRunAnalysis(
        complexity_score=score,
        estimated_time=estimate_migration_time(score),
        recommendations=generate_recommendations(score),
    )
    logger.debug(
        f"Scored {source_config.get('type')} -> {target_config.get('type')}: "
        f"{score} ({analysis.estimated_time})"
    )
    return analysis
