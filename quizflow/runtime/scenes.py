"""
Scene state manager - owns the machine state of one session
"""

from typing import Optional, Tuple

from quizflow.engine.plan import QuizPlan, ScenePlan
from quizflow.utils.logger import get_logger

from .events import Effect, Event
from .machine import MachineState, Phase, initial_transition, transition

logger = get_logger(__name__)


class SceneStateManager:
    def __init__(self, plan: QuizPlan):
        self.plan = plan
        self.state = MachineState(phase=Phase.LEAD_GATE)

    def start(self) -> Tuple[Effect, ...]:
        result = initial_transition(self.plan)
        self.state = result.state
        return result.effects

    def apply(self, event: Event) -> Tuple[Effect, ...]:
        result = transition(self.state, event, self.plan)
        if result.state != self.state:
            logger.debug(
                f"[Scenes] {type(event).__name__}: {self.state.phase.value}"
                f"({self.state.scene_index}) -> {result.state.phase.value}({result.state.scene_index})"
            )
        self.state = result.state
        return result.effects

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def current_index(self) -> Optional[int]:
        return self.state.scene_index

    @property
    def current_scene(self) -> Optional[ScenePlan]:
        if self.state.scene_index is None:
            return None
        return self.plan.scenes[self.state.scene_index]

    @property
    def correct_scenes(self) -> int:
        return self.state.correct_scenes

    @property
    def is_completed(self) -> bool:
        return self.state.phase == Phase.COMPLETED

    def is_scene_answered(self, index: int) -> bool:
        return index in self.state.answered
