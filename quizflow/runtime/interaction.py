"""
Runtime interaction handlers.

Both interaction modes share one interface: the session binds a dispatch
callback, loads every scene it enters and routes user gestures through
``handle``. Each handler turns gestures into state machine events.
"""

import random
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from quizflow.engine.plan import ScenePlan
from quizflow.schemas.graph import InteractionMode
from quizflow.utils.logger import get_logger

from .events import AnswerSelected, Event, SceneEvaluated
from .matching import MatchingBoard, MatchResult

logger = get_logger(__name__)

Dispatch = Callable[[Event], None]


class InteractionHandler(ABC):
    mode: InteractionMode
    gestures: tuple = ()

    def __init__(self):
        self.scene: Optional[ScenePlan] = None
        self.disabled = False
        self._dispatch: Optional[Dispatch] = None

    def bind(self, dispatch: Dispatch) -> None:
        self._dispatch = dispatch

    def load_scene(self, scene: ScenePlan) -> None:
        self.scene = scene
        self.disabled = False

    def handle(self, gesture: str, **data):
        """Route a named user gesture to the handler method of the same name"""
        if gesture not in self.gestures:
            raise ValueError(f"Gesture '{gesture}' is not supported in {self.mode.value} mode")
        return getattr(self, gesture)(**data)

    @abstractmethod
    def evaluate(self) -> Optional[Event]:
        """Build the event describing the user's answer to the active scene"""

    def disable(self) -> None:
        self.disabled = True

    def reset(self) -> None:
        self.scene = None
        self.disabled = False

    @property
    def active(self) -> bool:
        return self.scene is not None and bool(self.scene.questions) and not self.disabled

    def _emit(self, event: Optional[Event]) -> None:
        if event is not None and self._dispatch is not None:
            self._dispatch(event)


class ButtonsInteraction(InteractionHandler):
    mode = InteractionMode.BUTTONS
    gestures = ("select",)

    def __init__(self):
        super().__init__()
        self.selected: Optional[str] = None

    def load_scene(self, scene: ScenePlan) -> None:
        super().load_scene(scene)
        self.selected = None

    def select(self, answer_id: str, scene_index: Optional[int] = None) -> bool:
        if not self.active:
            return False
        if scene_index is not None and scene_index != self.scene.index:
            logger.debug(f"[Interaction] Ignoring click on inactive scene {scene_index}")
            return False
        self.selected = answer_id
        self._emit(self.evaluate())
        return True

    def evaluate(self) -> Optional[Event]:
        if self.scene is None or self.selected is None:
            return None
        return AnswerSelected(self.scene.index, self.selected)


class NodeMatchingInteraction(InteractionHandler):
    mode = InteractionMode.NODES
    gestures = ("begin_edge", "move_pointer", "release", "connect", "check", "clear")

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__()
        self.board = MatchingBoard(rng)
        self.last_result: Optional[MatchResult] = None

    def load_scene(self, scene: ScenePlan) -> None:
        super().load_scene(scene)
        self.last_result = None
        if scene.questions:
            self.board.load(scene)

    @property
    def answer_order(self) -> List[str]:
        return list(self.board.answer_order)

    @property
    def edges(self) -> Dict[str, str]:
        return dict(self.board.edges)

    def begin_edge(self, question_id: str) -> bool:
        return self.active and self.board.begin_edge(question_id)

    def move_pointer(self, x: float, y: float) -> None:
        if self.active:
            self.board.move_pointer(x, y)

    def release(self, answer_id: Optional[str] = None) -> bool:
        if not self.active:
            return False
        return self.board.release(answer_id) is not None

    def connect(self, question_id: str, answer_id: str) -> bool:
        return self.active and self.board.connect(question_id, answer_id)

    def clear(self) -> None:
        if self.active:
            self.board.clear()

    def check(self) -> Optional[MatchResult]:
        if not self.active:
            return None
        self._emit(self.evaluate())
        return self.last_result

    def evaluate(self) -> Optional[Event]:
        if self.scene is None or not self.scene.questions:
            return None
        result = self.board.evaluate()
        self.last_result = result
        return SceneEvaluated(
            scene_index=self.scene.index,
            correct_count=result.correct_count,
            total=result.total,
            award=result.award,
        )


def create_interaction(
    mode: InteractionMode, rng: Optional[random.Random] = None
) -> InteractionHandler:
    """Create the interaction handler for a mode"""
    if mode == InteractionMode.NODES:
        return NodeMatchingInteraction(rng)
    return ButtonsInteraction()
