"""
Deadline-based countdown timer
"""

import math
from enum import Enum
from typing import Callable, Optional

from quizflow.utils.logger import get_logger

from .clock import MonotonicClock

logger = get_logger(__name__)


class TimerLevel(str, Enum):
    DEFAULT = "default"
    WARNING = "warning"
    DANGER = "danger"


def whole_seconds(remaining: float) -> int:
    return max(0, int(math.floor(remaining)))


def format_remaining(remaining: float) -> str:
    """Render remaining time as ``m:ss``, truncated to whole seconds"""
    minutes, seconds = divmod(whole_seconds(remaining), 60)
    return f"{minutes}:{seconds:02d}"


def timer_level(remaining: float, warning: int = 30, danger: int = 10) -> TimerLevel:
    seconds = whole_seconds(remaining)
    if seconds <= danger:
        return TimerLevel.DANGER
    if seconds <= warning:
        return TimerLevel.WARNING
    return TimerLevel.DEFAULT


class TimerManager:
    """
    Countdown measured against a deadline rather than by decrementing.

    ``on_frame`` is the frame callback: it recomputes the remaining time
    from the clock and fires ``on_expired`` exactly once when it hits zero.
    """

    def __init__(
        self,
        limit_seconds: int,
        clock=None,
        warning_threshold: int = 30,
        danger_threshold: int = 10,
        on_expired: Optional[Callable[[], None]] = None,
    ):
        self.limit_seconds = limit_seconds
        self.clock = clock or MonotonicClock()
        self.warning_threshold = warning_threshold
        self.danger_threshold = danger_threshold
        self.on_expired = on_expired
        self._deadline: Optional[float] = None
        self._remaining = float(limit_seconds)
        self.running = False
        self.visible = False
        self.expired = False

    def start(self) -> None:
        if self.running or self.expired:
            return
        self._deadline = self.clock.now() + self.limit_seconds
        self._remaining = float(self.limit_seconds)
        self.running = True
        self.visible = True
        logger.info(f"[Timer] Started with {self.limit_seconds}s")

    def on_frame(self) -> float:
        if not self.running:
            return self._remaining
        self._remaining = max(0.0, self._deadline - self.clock.now())
        if self._remaining <= 0:
            self.running = False
            self.expired = True
            logger.info("[Timer] Time expired")
            if self.on_expired is not None:
                self.on_expired()
        return self._remaining

    def stop(self) -> None:
        """Cancel the frame loop and hide the display; safe to call repeatedly"""
        if self.running:
            logger.debug(f"[Timer] Stopped with {self.display} left")
        self.running = False
        self.visible = False

    def reset(self) -> None:
        self.stop()
        self._deadline = None
        self._remaining = float(self.limit_seconds)
        self.expired = False
        self.visible = False

    @property
    def deadline(self) -> Optional[float]:
        return self._deadline if self.running else None

    @property
    def remaining(self) -> float:
        return self._remaining

    @property
    def display(self) -> str:
        return format_remaining(self._remaining)

    @property
    def level(self) -> TimerLevel:
        return timer_level(self._remaining, self.warning_threshold, self.danger_threshold)
