"""
Scene state machine.

``transition`` is a pure function of (state, event, plan). It never touches
managers or rendering; everything observable is returned as effects.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from quizflow.engine.plan import QuizPlan
from quizflow.utils.logger import get_logger

from .events import (
    AdvanceDue,
    AnswerSelected,
    AwardPoints,
    DisableControls,
    Effect,
    EnterCompleted,
    Event,
    HideAnchors,
    HighlightAnchor,
    LeadAccepted,
    LockScene,
    PersistLead,
    ResetSession,
    Restart,
    SceneEvaluated,
    Schedule,
    ShowAnchors,
    ShowFeedback,
    ShowMatchFeedback,
    ShowMessage,
    ShowScene,
    StartTimer,
    StopTimer,
    TimerExpired,
)

logger = get_logger(__name__)


class Phase(str, Enum):
    LEAD_GATE = "lead_gate"
    SCENE_ACTIVE = "scene_active"
    TRANSITIONING = "transitioning"
    COMPLETED = "completed"


class CompletionReason(str, Enum):
    RESULTS = "results"
    EXHAUSTED = "exhausted"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class MachineState:
    phase: Phase
    scene_index: Optional[int] = None
    answered: FrozenSet[int] = frozenset()
    correct_scenes: int = 0
    completion_reason: Optional[CompletionReason] = None


@dataclass(frozen=True)
class Transition:
    state: MachineState
    effects: Tuple[Effect, ...] = ()


def _enter_scene(
    state: MachineState, index: Optional[int], plan: QuizPlan, effects: List[Effect]
) -> MachineState:
    """Move to ``index``; a missing index or the results scene completes"""
    previous = state.scene_index
    if index is None:
        return _complete(state, CompletionReason.EXHAUSTED, plan, effects)

    if previous is not None and previous != index:
        effects.append(HideAnchors(previous))
    effects.append(ShowAnchors(index))
    effects.append(ShowScene(index, previous if previous != index else None))
    state = replace(state, phase=Phase.SCENE_ACTIVE, scene_index=index)

    if plan.scenes[index].is_results:
        return _complete(state, CompletionReason.RESULTS, plan, effects)
    return state


def _complete(
    state: MachineState, reason: CompletionReason, plan: QuizPlan, effects: List[Effect]
) -> MachineState:
    results_index = plan.results_index
    if reason == CompletionReason.TIMEOUT and results_index is not None:
        previous = state.scene_index
        if previous is not None and previous != results_index:
            effects.append(HideAnchors(previous))
        if previous != results_index:
            effects.append(ShowAnchors(results_index))
            effects.append(ShowScene(results_index, previous))
        state = replace(state, scene_index=results_index)

    effects.append(StopTimer())
    effects.append(
        EnterCompleted(
            reason=reason.value,
            correct_scenes=state.correct_scenes,
            total_question_scenes=plan.total_question_scenes,
            results_index=results_index if state.scene_index == results_index else None,
        )
    )
    effects.append(PersistLead())
    return replace(state, phase=Phase.COMPLETED, completion_reason=reason)


def initial_transition(plan: QuizPlan) -> Transition:
    """Starting state: the lead gate if configured, else the first playable scene"""
    state = MachineState(phase=Phase.LEAD_GATE)
    if plan.lead is not None:
        return Transition(state)
    return _start(state, plan)


def _start(state: MachineState, plan: QuizPlan) -> Transition:
    effects: List[Effect] = []
    if plan.timer.enabled:
        effects.append(StartTimer())
    state = _enter_scene(state, plan.first_playable(), plan, effects)
    return Transition(state, tuple(effects))


def _accepts_answer(state: MachineState, scene_index: int) -> bool:
    return (
        state.phase == Phase.SCENE_ACTIVE
        and state.scene_index == scene_index
        and scene_index not in state.answered
    )


def transition(state: MachineState, event: Event, plan: QuizPlan) -> Transition:
    """Apply one event; stale or duplicate events leave the state unchanged"""
    effects: List[Effect] = []

    if isinstance(event, Restart):
        effects.append(StopTimer())
        if state.scene_index is not None:
            effects.append(HideAnchors(state.scene_index))
        effects.append(ResetSession())
        restarted = initial_transition(plan)
        return Transition(restarted.state, tuple(effects) + restarted.effects)

    if isinstance(event, LeadAccepted):
        if state.phase != Phase.LEAD_GATE:
            logger.debug("[Machine] Ignoring lead acceptance outside the lead gate")
            return Transition(state)
        return _start(state, plan)

    if isinstance(event, AnswerSelected):
        if not _accepts_answer(state, event.scene_index):
            logger.debug(f"[Machine] Ignoring stale answer for scene {event.scene_index}")
            return Transition(state)
        scene = plan.scenes[event.scene_index]
        answer = scene.answer(event.answer_id)
        if answer is None:
            logger.debug(f"[Machine] Unknown answer {event.answer_id!r} for scene {scene.index}")
            return Transition(state)

        correct_id = scene.questions[0].correct_answer_id if scene.questions else None
        effects.append(LockScene(scene.index))
        effects.append(ShowFeedback(scene.index, answer.id, answer.is_correct, correct_id))
        if answer.is_correct:
            effects.append(AwardPoints(answer.points))
        correct_answer = scene.answer(correct_id) if correct_id else None
        if correct_answer is not None:
            effects.append(HighlightAnchor(scene.index, correct_answer.position))
        effects.append(Schedule(AdvanceDue(scene.index), plan.tuning.feedback_delay))
        state = replace(
            state,
            phase=Phase.TRANSITIONING,
            answered=state.answered | {scene.index},
            correct_scenes=state.correct_scenes + (1 if answer.is_correct else 0),
        )
        return Transition(state, tuple(effects))

    if isinstance(event, SceneEvaluated):
        if not _accepts_answer(state, event.scene_index):
            logger.debug(f"[Machine] Ignoring stale check for scene {event.scene_index}")
            return Transition(state)
        if event.award > 0:
            effects.append(AwardPoints(event.award))
        feedback = ShowMatchFeedback(event.scene_index, event.correct_count, event.total)
        effects.append(feedback)
        if not feedback.all_correct:
            return Transition(state, tuple(effects))
        scene = plan.scenes[event.scene_index]
        effects.append(LockScene(event.scene_index))
        effects.append(Schedule(AdvanceDue(event.scene_index), plan.tuning.advance_delay))
        state = replace(
            state,
            phase=Phase.TRANSITIONING,
            answered=state.answered | {event.scene_index},
            correct_scenes=state.correct_scenes + (1 if scene.has_correct_answer else 0),
        )
        return Transition(state, tuple(effects))

    if isinstance(event, AdvanceDue):
        if state.phase != Phase.TRANSITIONING or state.scene_index != event.from_index:
            logger.debug(f"[Machine] Ignoring stale advance from scene {event.from_index}")
            return Transition(state)
        state = _enter_scene(state, plan.next_playable(event.from_index), plan, effects)
        return Transition(state, tuple(effects))

    if isinstance(event, TimerExpired):
        if state.phase not in (Phase.SCENE_ACTIVE, Phase.TRANSITIONING):
            return Transition(state)
        state = _complete(state, CompletionReason.TIMEOUT, plan, effects)
        # must follow ShowScene: loading a scene re-enables controls
        effects.append(DisableControls())
        effects.append(ShowMessage("time_up"))
        return Transition(state, tuple(effects))

    raise ValueError(f"Unknown event: {event!r}")
