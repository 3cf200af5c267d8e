"""
Tests for the points accumulator and performance tiers.
"""

import pytest

from quizflow.engine.plan import TierThresholds
from quizflow.runtime import PerformanceTier, PointsManager, performance_tier
from quizflow.runtime.points import score_percent


class TestScorePercent:
    @pytest.mark.parametrize(
        "correct,total,expected",
        [(0, 0, 0), (0, 4, 0), (1, 3, 33), (2, 3, 67), (1, 2, 50), (179, 200, 90), (4, 4, 100)],
    )
    def test_rounding(self, correct, total, expected):
        assert score_percent(correct, total) == expected


class TestPerformanceTier:
    @pytest.mark.parametrize(
        "correct,tier",
        [
            (10, PerformanceTier.TOP),
            (9, PerformanceTier.TOP),
            (8, PerformanceTier.SECOND),
            (7, PerformanceTier.SECOND),
            (6, PerformanceTier.THIRD),
            (5, PerformanceTier.THIRD),
            (4, PerformanceTier.ENCOURAGEMENT),
            (0, PerformanceTier.ENCOURAGEMENT),
        ],
    )
    def test_default_boundaries(self, correct, tier):
        assert performance_tier(correct, 10) == tier

    def test_half_percent_rounds_up_into_tier(self):
        assert performance_tier(179, 200) == PerformanceTier.TOP

    def test_no_questions(self):
        assert performance_tier(0, 0) == PerformanceTier.ENCOURAGEMENT

    def test_custom_thresholds(self):
        thresholds = TierThresholds(top=100, second=80, third=60)
        assert performance_tier(9, 10, thresholds) == PerformanceTier.SECOND
        assert performance_tier(10, 10, thresholds) == PerformanceTier.TOP

    def test_message_keys(self):
        assert PerformanceTier.TOP.message_key == "tier_top"
        assert PerformanceTier.ENCOURAGEMENT.message_key == "tier_encouragement"


class TestPointsManager:
    def test_accumulates(self):
        points = PointsManager()
        assert points.add_points(5) == 5
        assert points.add_points(1) == 6
        assert points.current == 6

    def test_never_negative(self):
        points = PointsManager()
        points.add_points(2)
        assert points.add_points(-10) == 0

    def test_reset(self):
        points = PointsManager()
        points.add_points(3)
        points.reset()
        assert points.current == 0
