"""
Points accumulator and performance tiers
"""

from enum import Enum
from typing import Optional

from quizflow.engine.plan import TierThresholds
from quizflow.utils.logger import get_logger

logger = get_logger(__name__)


class PerformanceTier(str, Enum):
    TOP = "top"
    SECOND = "second"
    THIRD = "third"
    ENCOURAGEMENT = "encouragement"

    @property
    def message_key(self) -> str:
        return f"tier_{self.value}"


def score_percent(correct: int, total: int) -> int:
    """Rounded percentage, half away from zero; no questions means 0"""
    if total <= 0:
        return 0
    return int(correct * 100 / total + 0.5)


def performance_tier(
    correct: int, total: int, thresholds: Optional[TierThresholds] = None
) -> PerformanceTier:
    thresholds = thresholds or TierThresholds()
    percent = score_percent(correct, total)
    if percent >= thresholds.top:
        return PerformanceTier.TOP
    if percent >= thresholds.second:
        return PerformanceTier.SECOND
    if percent >= thresholds.third:
        return PerformanceTier.THIRD
    return PerformanceTier.ENCOURAGEMENT


class PointsManager:
    """Single non-negative score accumulator owned by one session"""

    def __init__(self):
        self._points = 0

    @property
    def current(self) -> int:
        return self._points

    def add_points(self, delta: int) -> int:
        self._points = max(0, self._points + int(delta))
        logger.debug(f"[Points] {delta:+d} -> {self._points}")
        return self._points

    def reset(self) -> None:
        self._points = 0
