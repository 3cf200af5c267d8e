"""
Node-matching board: questions connected to answers by drawn edges
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Set, Tuple, TypeVar

from quizflow.engine.plan import ScenePlan
from quizflow.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def shuffle_answers(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Uniform Fisher-Yates permutation; the input is left untouched"""
    rng = rng or random.Random()
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


class EdgeStatus(str, Enum):
    PENDING = "pending"
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class MatchResult:
    correct_count: int
    total: int
    award: int
    statuses: Dict[str, EdgeStatus] = field(default_factory=dict)

    @property
    def all_correct(self) -> bool:
        return self.total > 0 and self.correct_count == self.total


class MatchingBoard:
    """
    Edges of the active scene, keyed by question id.

    A question has at most one outgoing edge; several questions may point
    at the same answer.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.scene: Optional[ScenePlan] = None
        self.answer_order: List[str] = []
        self.edges: Dict[str, str] = {}
        self.statuses: Dict[str, EdgeStatus] = {}
        self.pending_question: Optional[str] = None
        self.pointer: Optional[Tuple[float, float]] = None
        self._awarded: Set[str] = set()

    def load(self, scene: ScenePlan) -> List[str]:
        """Reset the board for a scene and reshuffle its answers"""
        self.scene = scene
        self.answer_order = shuffle_answers([a.id for a in scene.answers], self.rng)
        self.edges = {}
        self.statuses = {}
        self.pending_question = None
        self.pointer = None
        self._awarded = set()
        return self.answer_order

    def _question_ids(self) -> List[str]:
        return [q.id for q in self.scene.questions] if self.scene else []

    def begin_edge(self, question_id: str) -> bool:
        """Pointer-down on a question starts a provisional edge"""
        if question_id not in self._question_ids():
            return False
        self.pending_question = question_id
        return True

    def move_pointer(self, x: float, y: float) -> None:
        if self.pending_question is not None:
            self.pointer = (x, y)

    def release(self, answer_id: Optional[str]) -> Optional[Tuple[str, str]]:
        """Pointer-up: commit over an answer, otherwise drop the provisional edge"""
        question_id = self.pending_question
        self.pending_question = None
        self.pointer = None
        if question_id is None or answer_id is None:
            return None
        if self.connect(question_id, answer_id):
            return (question_id, answer_id)
        return None

    def connect(self, question_id: str, answer_id: str) -> bool:
        if self.scene is None or question_id not in self._question_ids():
            return False
        if self.scene.answer(answer_id) is None:
            return False
        previous = self.edges.get(question_id)
        if previous is not None and previous != answer_id:
            logger.debug(f"[Matching] Replacing edge {question_id} -> {previous}")
        self.edges[question_id] = answer_id
        self.statuses[question_id] = EdgeStatus.PENDING
        return True

    def clear(self) -> None:
        """Remove all edges; points already awarded are kept"""
        self.edges = {}
        self.statuses = {}
        self.pending_question = None
        self.pointer = None

    def evaluate(self) -> MatchResult:
        if self.scene is None:
            return MatchResult(correct_count=0, total=0, award=0)
        correct_count = 0
        award = 0
        statuses: Dict[str, EdgeStatus] = {}
        for question in self.scene.questions:
            target = self.edges.get(question.id)
            if question.correct_answer_id is None:
                # nothing to validate against: accepted, never scored
                correct_count += 1
                if target is not None:
                    statuses[question.id] = EdgeStatus.CORRECT
                continue
            if target is None:
                continue
            if target == question.correct_answer_id:
                statuses[question.id] = EdgeStatus.CORRECT
                correct_count += 1
                if question.id not in self._awarded:
                    self._awarded.add(question.id)
                    award += self.scene.answer(target).points
            else:
                statuses[question.id] = EdgeStatus.INCORRECT
        self.statuses = statuses
        result = MatchResult(
            correct_count=correct_count,
            total=len(self.scene.questions),
            award=award,
            statuses=dict(statuses),
        )
        logger.debug(
            f"[Matching] Scene {self.scene.index}: {correct_count} of {result.total} correct"
        )
        return result
