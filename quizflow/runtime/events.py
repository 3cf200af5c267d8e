"""
Runtime events and effects.

Events are the only inputs of the scene state machine. Effects are the
instructions it returns; the session applies them through the managers and
publishes them to subscribers (renderers, anchor hosts).
"""

from dataclasses import dataclass
from typing import Optional, Union


# Events


@dataclass(frozen=True)
class LeadAccepted:
    """The lead form validated successfully"""


@dataclass(frozen=True)
class AnswerSelected:
    scene_index: int
    answer_id: str


@dataclass(frozen=True)
class SceneEvaluated:
    """Result of a node-matching check on the active scene"""

    scene_index: int
    correct_count: int
    total: int
    award: int = 0


@dataclass(frozen=True)
class AdvanceDue:
    from_index: int


@dataclass(frozen=True)
class TimerExpired:
    pass


@dataclass(frozen=True)
class Restart:
    pass


Event = Union[LeadAccepted, AnswerSelected, SceneEvaluated, AdvanceDue, TimerExpired, Restart]


# Effects


@dataclass(frozen=True)
class ShowScene:
    index: int
    previous: Optional[int] = None


@dataclass(frozen=True)
class HideAnchors:
    scene_index: int


@dataclass(frozen=True)
class ShowAnchors:
    scene_index: int


@dataclass(frozen=True)
class AwardPoints:
    points: int


@dataclass(frozen=True)
class ShowFeedback:
    scene_index: int
    answer_id: str
    correct: bool
    correct_answer_id: Optional[str] = None


@dataclass(frozen=True)
class ShowMatchFeedback:
    scene_index: int
    correct_count: int
    total: int

    @property
    def all_correct(self) -> bool:
        return self.total > 0 and self.correct_count == self.total


@dataclass(frozen=True)
class ShowMessage:
    key: str


@dataclass(frozen=True)
class HighlightAnchor:
    scene_index: int
    position: int


@dataclass(frozen=True)
class LockScene:
    scene_index: int


@dataclass(frozen=True)
class Schedule:
    event: Event
    delay: float


@dataclass(frozen=True)
class StartTimer:
    pass


@dataclass(frozen=True)
class StopTimer:
    pass


@dataclass(frozen=True)
class DisableControls:
    pass


@dataclass(frozen=True)
class EnterCompleted:
    reason: str
    correct_scenes: int
    total_question_scenes: int
    results_index: Optional[int] = None


@dataclass(frozen=True)
class PersistLead:
    pass


@dataclass(frozen=True)
class ResetSession:
    pass


Effect = Union[
    ShowScene,
    HideAnchors,
    ShowAnchors,
    AwardPoints,
    ShowFeedback,
    ShowMatchFeedback,
    ShowMessage,
    HighlightAnchor,
    LockScene,
    Schedule,
    StartTimer,
    StopTimer,
    DisableControls,
    EnterCompleted,
    PersistLead,
    ResetSession,
]
