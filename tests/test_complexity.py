"""Unit tests for the dry-run complexity analysis.

Tests cover:
- Additive scoring terms and clamping
- Time estimate formatting at the minutes/hours boundary
- Recommendation bands
"""

import itertools

import pytest

from dbmt.services.complexity import (
    HIGH_COMPLEXITY_RECOMMENDATIONS,
    LOW_COMPLEXITY_RECOMMENDATION,
    MEDIUM_COMPLEXITY_RECOMMENDATIONS,
    analyze,
    calculate_complexity_score,
    estimate_migration_time,
    generate_recommendations,
)


# ── Tests: Scoring ────────────────────────────────────────────────────────


class TestComplexityScore:

    def test_same_engine_small_schema_scores_zero(self):
        source = {"type": "postgresql", "estimatedTables": 20}
        target = {"type": "postgresql"}

        assert calculate_complexity_score(source, target) == 0

    def test_engine_mismatch_only(self):
        assert calculate_complexity_score({"type": "postgresql"}, {"type": "mongodb"}) == 30

    def test_missing_table_count_defaults_to_small(self):
        assert calculate_complexity_score({"type": "mysql"}, {"type": "mysql"}) == 0

    @pytest.mark.parametrize("tables, expected", [
        (20, 0),
        (21, 20),
        (50, 20),
        (51, 40),
        (500, 40),
    ])
    def test_table_count_bands(self, tables, expected):
        source = {"type": "mysql", "estimatedTables": tables}
        assert calculate_complexity_score(source, {"type": "mysql"}) == expected

    def test_json_and_blob_fields(self):
        source = {"type": "mysql", "hasJsonFields": True, "hasBlobs": True}
        assert calculate_complexity_score(source, {"type": "mysql"}) == 40

    def test_score_is_clamped_to_100(self):
        source = {
            "type": "oracle",
            "estimatedTables": 200,
            "hasJsonFields": True,
            "hasBlobs": True,
        }
        # 30 + 40 + 15 + 25 = 110
        assert calculate_complexity_score(source, {"type": "neo4j"}) == 100

    def test_score_always_in_range(self):
        for mismatch, tables, has_json, has_blobs in itertools.product(
            [False, True], [None, 0, 10, 21, 51], [False, True], [False, True]
        ):
            source = {"type": "a", "hasJsonFields": has_json, "hasBlobs": has_blobs}
            if tables is not None:
                source["estimatedTables"] = tables
            target = {"type": "b" if mismatch else "a"}

            assert 0 <= calculate_complexity_score(source, target) <= 100

    def test_non_numeric_table_count_uses_default(self):
        source = {"type": "mysql", "estimatedTables": "lots"}
        assert calculate_complexity_score(source, {"type": "mysql"}) == 0

    def test_huge_table_count_scores_as_large_schema(self):
        source = {"type": "mysql", "estimatedTables": 10 ** 400}
        assert calculate_complexity_score(source, {"type": "mysql"}) == 40


# ── Tests: Time Estimate ──────────────────────────────────────────────────


class TestEstimatedTime:

    def test_zero_score_is_thirty_minutes(self):
        assert estimate_migration_time(0) == "30 minutes"

    def test_engine_mismatch_estimate(self):
        assert estimate_migration_time(30) == "39 minutes"

    def test_half_minutes_round_up(self):
        # 30 + 4.5
        assert estimate_migration_time(15) == "35 minutes"

    def test_just_below_an_hour(self):
        assert estimate_migration_time(95) == "59 minutes"

    def test_sixty_minutes_reports_hours(self):
        assert estimate_migration_time(100) == "1 hour"


# ── Tests: Recommendations ────────────────────────────────────────────────


class TestRecommendations:

    def test_low_complexity(self):
        assert generate_recommendations(0) == [LOW_COMPLEXITY_RECOMMENDATION]
        assert generate_recommendations(50) == [LOW_COMPLEXITY_RECOMMENDATION]

    def test_medium_complexity(self):
        assert generate_recommendations(55) == MEDIUM_COMPLEXITY_RECOMMENDATIONS
        assert generate_recommendations(70) == MEDIUM_COMPLEXITY_RECOMMENDATIONS

    def test_high_complexity_includes_both_bands(self):
        assert generate_recommendations(85) == (
            HIGH_COMPLEXITY_RECOMMENDATIONS + MEDIUM_COMPLEXITY_RECOMMENDATIONS
        )

    def test_never_empty(self):
        for score in range(0, 101):
            assert generate_recommendations(score)


class TestAnalyze:

    def test_postgres_to_mongo(self):
        analysis = analyze({"type": "postgresql"}, {"type": "mongodb"})

        assert analysis.complexity_score == 30
        assert analysis.estimated_time == "39 minutes"
        assert analysis.recommendations == [LOW_COMPLEXITY_RECOMMENDATION]
        assert analysis.to_dict() == {
            "complexityScore": 30,
            "estimatedTime": "39 minutes",
            "recommendations": [LOW_COMPLEXITY_RECOMMENDATION],
        }
