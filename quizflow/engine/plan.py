"""
Quiz plan - the immutable facts derived from a scene graph at compile time.

Both the emitted browser runtime and the headless Python runtime are driven
by the same plan so that question numbering, playable scene order, resolved
correct answers and point values never diverge between the two.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from quizflow.schemas.graph import (
    BuildOptions,
    InteractionMode,
    LeadCollectionConfig,
    Scene,
    SceneGraph,
    TimerConfig,
    effective_lead_collection,
    effective_show_points,
)
from quizflow.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class TierThresholds:
    """Minimum rounded percentages for the top three performance tiers"""

    top: int = 90
    second: int = 70
    third: int = 50


@dataclass(frozen=True)
class RuntimeTuning:
    """Deployment-level runtime parameters sourced from settings"""

    warning_threshold: int = 30
    danger_threshold: int = 10
    tiers: TierThresholds = field(default_factory=TierThresholds)
    feedback_delay: float = 1.0
    advance_delay: float = 1.5
    lead_endpoint: str = "/api/v1/leads"
    locale: str = "en"

    @classmethod
    def from_settings(cls, settings=None, locale: Optional[str] = None) -> "RuntimeTuning":
        if settings is None:
            from quizflow.config import settings
        return cls(
            warning_threshold=settings.timer_warning_threshold_seconds,
            danger_threshold=settings.timer_danger_threshold_seconds,
            tiers=TierThresholds(
                top=settings.tier_top_percent,
                second=settings.tier_second_percent,
                third=settings.tier_third_percent,
            ),
            feedback_delay=settings.answer_feedback_delay_seconds,
            advance_delay=settings.matching_advance_delay_seconds,
            lead_endpoint=settings.lead_endpoint,
            locale=locale or settings.default_locale,
        )


@dataclass(frozen=True)
class AnswerPlan:
    id: str
    text: str
    position: int
    is_correct: bool
    points: int
    enable_points: bool = False
    shape: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class QuestionPlan:
    id: str
    text: str
    correct_answer_id: Optional[str]


@dataclass(frozen=True)
class ScenePlan:
    index: int
    scene_id: str
    question_number: Optional[int]
    is_results: bool
    questions: Tuple[QuestionPlan, ...] = ()
    answers: Tuple[AnswerPlan, ...] = ()

    @property
    def playable(self) -> bool:
        return bool(self.questions) or self.is_results

    @property
    def has_correct_answer(self) -> bool:
        return any(q.correct_answer_id for q in self.questions)

    def answer(self, answer_id: str) -> Optional[AnswerPlan]:
        for answer in self.answers:
            if answer.id == answer_id:
                return answer
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "sceneId": self.scene_id,
            "questionNumber": self.question_number,
            "isResults": self.is_results,
            "questions": [
                {"id": q.id, "text": q.text, "correctAnswerId": q.correct_answer_id}
                for q in self.questions
            ],
            "answers": [
                {
                    "id": a.id,
                    "text": a.text,
                    "position": a.position,
                    "isCorrect": a.is_correct,
                    "points": a.points,
                    "enablePoints": a.enable_points,
                }
                for a in self.answers
            ],
        }


@dataclass(frozen=True)
class QuizPlan:
    scenes: Tuple[ScenePlan, ...]
    total_question_scenes: int
    results_index: Optional[int]
    mode: InteractionMode
    show_points: bool
    timer: TimerConfig
    lead: Optional[LeadCollectionConfig]
    canvas_id: Optional[str] = None
    tuning: RuntimeTuning = field(default_factory=RuntimeTuning)

    @property
    def total_scenes(self) -> int:
        return len(self.scenes)

    def first_playable(self) -> Optional[int]:
        return self.next_playable(-1)

    def next_playable(self, index: int) -> Optional[int]:
        """Next index after ``index`` holding a question or the results scene"""
        for scene in self.scenes[index + 1 :]:
            if scene.playable:
                return scene.index
        return None

    def to_runtime_config(self) -> Dict[str, Any]:
        tuning = self.tuning
        lead = None
        if self.lead is not None:
            lead = {
                "collectName": self.lead.collect_name,
                "collectEmail": self.lead.collect_email,
                "collectPhone": self.lead.collect_phone,
                "requiredField": self.lead.required_field,
            }
        return {
            "mode": self.mode.value,
            "showPoints": self.show_points,
            "totalScenes": self.total_scenes,
            "totalQuestionScenes": self.total_question_scenes,
            "resultsIndex": self.results_index,
            "canvasId": self.canvas_id,
            "timer": {
                "enabled": self.timer.enabled,
                "limitSeconds": self.timer.limit_seconds,
                "position": self.timer.position.value,
                "warningThreshold": tuning.warning_threshold,
                "dangerThreshold": tuning.danger_threshold,
            },
            "lead": lead,
            "leadEndpoint": tuning.lead_endpoint,
            "feedbackDelayMs": int(tuning.feedback_delay * 1000),
            "advanceDelayMs": int(tuning.advance_delay * 1000),
            "tiers": {
                "top": tuning.tiers.top,
                "second": tuning.tiers.second,
                "third": tuning.tiers.third,
            },
            "locale": tuning.locale,
            "scenes": [scene.to_dict() for scene in self.scenes],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_runtime_config(), sort_keys=True, ensure_ascii=True)


def _resolve_correct_answers(scene: Scene) -> Tuple[Optional[str], ...]:
    """
    Pair each question with a correct answer.

    Question k takes the k-th answer flagged correct; when there are fewer
    correct answers than questions, the remaining questions fall back to the
    first one. A scene with no correct answer resolves to None everywhere.
    """
    correct = [a.id for a in scene.answers if a.is_correct]
    resolved = []
    for k, _ in enumerate(scene.questions):
        if k < len(correct):
            resolved.append(correct[k])
        elif correct:
            resolved.append(correct[0])
        else:
            resolved.append(None)
    return tuple(resolved)


def _plan_answers(
    scene: Scene, mode: InteractionMode, correct_ids: Tuple[Optional[str], ...]
) -> Tuple[AnswerPlan, ...]:
    if mode == InteractionMode.BUTTONS:
        # Single-select: only the first resolved answer validates
        winners = {correct_ids[0]} if correct_ids and correct_ids[0] else set()
    else:
        winners = {cid for cid in correct_ids if cid}
    plans = []
    for position, answer in enumerate(scene.answers):
        anchor = scene.object_nodes[position] if position < len(scene.object_nodes) else None
        plans.append(
            AnswerPlan(
                id=answer.id,
                text=answer.content,
                position=position,
                is_correct=answer.id in winners,
                points=answer.award,
                enable_points=answer.enable_points,
                shape=anchor.type if anchor else None,
                color=anchor.color if anchor else None,
            )
        )
    return tuple(plans)


def build_plan(
    graph: SceneGraph,
    options: BuildOptions,
    tuning: Optional[RuntimeTuning] = None,
) -> QuizPlan:
    """Derive the immutable quiz plan for a graph and build options"""
    if tuning is None:
        tuning = RuntimeTuning.from_settings(locale=options.locale)
    elif options.locale and options.locale != tuning.locale:
        tuning = replace(tuning, locale=options.locale)

    mode = options.interaction_mode
    scenes = []
    question_number = 0
    results_index = None

    for index, scene in enumerate(graph.scenes):
        number = None
        questions: Tuple[QuestionPlan, ...] = ()
        answers: Tuple[AnswerPlan, ...] = ()

        if scene.has_question and not scene.is_results_scene:
            question_number += 1
            number = question_number
            correct_ids = _resolve_correct_answers(scene)
            questions = tuple(
                QuestionPlan(id=q.id, text=q.content, correct_answer_id=cid)
                for q, cid in zip(scene.questions, correct_ids)
            )
            answers = _plan_answers(scene, mode, correct_ids)
            if not any(correct_ids):
                logger.warning(
                    f"[Plan] Scene {index} ({scene.id}) has no correct answer; nothing will validate"
                )

        if scene.is_results_scene and results_index is None:
            results_index = index

        scenes.append(
            ScenePlan(
                index=index,
                scene_id=scene.id,
                question_number=number,
                is_results=scene.is_results_scene,
                questions=questions,
                answers=answers,
            )
        )

    return QuizPlan(
        scenes=tuple(scenes),
        total_question_scenes=question_number,
        results_index=results_index,
        mode=mode,
        show_points=effective_show_points(graph, options),
        timer=options.timer_config,
        lead=effective_lead_collection(graph, options),
        canvas_id=options.canvas_id,
        tuning=tuning,
    )
