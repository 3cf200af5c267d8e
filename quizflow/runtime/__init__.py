"""
Headless quiz runtime: the same state machine the emitted script runs
"""

from .clock import ManualClock, MonotonicClock
from .interaction import (
    ButtonsInteraction,
    InteractionHandler,
    NodeMatchingInteraction,
    create_interaction,
)
from .lead import (
    HttpLeadSink,
    LeadCaptureGate,
    LeadSink,
    LoggingLeadSink,
    MemoryLeadSink,
    create_lead_sink,
)
from .machine import CompletionReason, MachineState, Phase, initial_transition, transition
from .matching import EdgeStatus, MatchingBoard, MatchResult, shuffle_answers
from .points import PerformanceTier, PointsManager, performance_tier
from .session import QuizResult, QuizSession
from .timer import TimerLevel, TimerManager, format_remaining, timer_level

__all__ = [
    "QuizSession",
    "QuizResult",
    "MachineState",
    "Phase",
    "CompletionReason",
    "initial_transition",
    "transition",
    "PointsManager",
    "PerformanceTier",
    "performance_tier",
    "TimerManager",
    "TimerLevel",
    "format_remaining",
    "timer_level",
    "LeadCaptureGate",
    "LeadSink",
    "HttpLeadSink",
    "MemoryLeadSink",
    "LoggingLeadSink",
    "create_lead_sink",
    "MatchingBoard",
    "MatchResult",
    "EdgeStatus",
    "shuffle_answers",
    "InteractionHandler",
    "ButtonsInteraction",
    "NodeMatchingInteraction",
    "create_interaction",
    "ManualClock",
    "MonotonicClock",
]
