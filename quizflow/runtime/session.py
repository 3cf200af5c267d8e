"""
Quiz session - the headless execution context of one quiz run.

A session owns every manager (scenes, points, timer, lead gate and the
interaction handler), serializes events through a FIFO queue and keeps
delayed events (feedback delay, auto-advance) until ``tick`` releases them.
"""

import asyncio
import heapq
import itertools
import random
import threading
import uuid
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Set, Tuple

from quizflow.engine.messages import get_messages
from quizflow.engine.plan import QuizPlan, ScenePlan
from quizflow.schemas.graph import InteractionMode
from quizflow.schemas.lead import LeadSubmission
from quizflow.utils.logger import get_logger

from .clock import MonotonicClock
from .events import (
    AwardPoints,
    DisableControls,
    Effect,
    EnterCompleted,
    Event,
    LeadAccepted,
    LockScene,
    PersistLead,
    ResetSession,
    Restart,
    Schedule,
    ShowFeedback,
    ShowMatchFeedback,
    ShowMessage,
    ShowScene,
    StartTimer,
    StopTimer,
    TimerExpired,
)
from .interaction import create_interaction
from .lead import LeadCaptureGate, LeadSink, LeadValidation
from .machine import Phase
from .points import PerformanceTier, PointsManager, performance_tier, score_percent
from .scenes import SceneStateManager
from .timer import TimerManager

logger = get_logger(__name__)

Subscriber = Callable[[Effect, "QuizSession"], None]


@dataclass(frozen=True)
class QuizResult:
    score: int
    correct_scenes: int
    total_question_scenes: int
    percent: int
    tier: PerformanceTier
    reason: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "correct_scenes": self.correct_scenes,
            "total_question_scenes": self.total_question_scenes,
            "percent": self.percent,
            "tier": self.tier.value,
            "reason": self.reason,
            "message": self.message,
        }


class QuizSession:
    def __init__(
        self,
        plan: QuizPlan,
        clock=None,
        lead_sink: Optional[LeadSink] = None,
        rng: Optional[random.Random] = None,
        session_id: Optional[str] = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.plan = plan
        self.clock = clock or MonotonicClock()
        self.messages = get_messages(plan.tuning.locale)

        self.scenes = SceneStateManager(plan)
        self.points = PointsManager()
        self.timer = TimerManager(
            plan.timer.limit_seconds,
            clock=self.clock,
            warning_threshold=plan.tuning.warning_threshold,
            danger_threshold=plan.tuning.danger_threshold,
            on_expired=lambda: self.dispatch(TimerExpired()),
        )
        self.lead_gate = LeadCaptureGate(plan.lead, sink=lead_sink, canvas_id=plan.canvas_id)
        self.interaction = create_interaction(plan.mode, rng)
        self.interaction.bind(self.dispatch)

        self.feedback: Optional[str] = None
        self.history: Deque[Effect] = deque(maxlen=500)
        self._result: Optional[QuizResult] = None
        self._queue: Deque[Event] = deque()
        self._delayed: List[Tuple[float, int, Event]] = []
        self._sequence = itertools.count()
        self._dispatching = False
        self._subscribers: List[Subscriber] = []
        self._tasks: Set[asyncio.Task] = set()
        self._threads: List[threading.Thread] = []

        logger.info(
            f"[Session] {self.id} created: {plan.total_scenes} scenes, mode={plan.mode.value}, "
            f"lead={'on' if plan.lead else 'off'}, timer={'on' if plan.timer.enabled else 'off'}"
        )
        self._apply_all(self.scenes.start())

    # Event loop

    def subscribe(self, subscriber: Subscriber) -> None:
        self._subscribers.append(subscriber)

    def dispatch(self, event: Event) -> None:
        """Queue an event; events raised while applying effects run after it"""
        self._queue.append(event)
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._queue:
                current = self._queue.popleft()
                self._apply_all(self.scenes.apply(current))
        finally:
            self._dispatching = False

    def tick(self) -> None:
        """Release due delayed events and run one timer frame"""
        now = self.clock.now()
        deadline = self.timer.deadline
        self._release_due(now if deadline is None else min(now, deadline))
        self.timer.on_frame()
        self._release_due(now)

    def _release_due(self, until: float) -> None:
        while self._delayed and self._delayed[0][0] <= until:
            _, _, event = heapq.heappop(self._delayed)
            self.dispatch(event)

    @property
    def pending_events(self) -> int:
        return len(self._delayed)

    def _apply_all(self, effects) -> None:
        for effect in effects:
            self._apply(effect)
            self.history.append(effect)
            for subscriber in self._subscribers:
                subscriber(effect, self)

    def _apply(self, effect: Effect) -> None:
        if isinstance(effect, ShowScene):
            self.feedback = None
            self.interaction.load_scene(self.plan.scenes[effect.index])
        elif isinstance(effect, AwardPoints):
            self.points.add_points(effect.points)
        elif isinstance(effect, (LockScene, DisableControls)):
            self.interaction.disable()
        elif isinstance(effect, Schedule):
            due = self.clock.now() + effect.delay
            heapq.heappush(self._delayed, (due, next(self._sequence), effect.event))
        elif isinstance(effect, StartTimer):
            self.timer.start()
        elif isinstance(effect, StopTimer):
            self.timer.stop()
        elif isinstance(effect, ShowFeedback):
            self.feedback = self.messages["correct" if effect.correct else "incorrect"]
        elif isinstance(effect, ShowMatchFeedback):
            if effect.all_correct:
                self.feedback = self.messages["all_correct"]
            else:
                self.feedback = self.messages["partial"].format(
                    correct=effect.correct_count, total=effect.total
                )
        elif isinstance(effect, ShowMessage):
            self.feedback = self.messages.get(effect.key, effect.key)
        elif isinstance(effect, EnterCompleted):
            self._result = self._build_result(effect)
            logger.info(
                f"[Session] {self.id} completed ({effect.reason}): "
                f"{effect.correct_scenes}/{effect.total_question_scenes} correct, "
                f"{self.points.current} points"
            )
        elif isinstance(effect, PersistLead):
            submission = self.lead_gate.persist(self.points.current)
            if submission is not None:
                self._spawn(submission)
        elif isinstance(effect, ResetSession):
            self.points.reset()
            self.timer.reset()
            self.lead_gate.reset()
            self.interaction.reset()
            self._delayed.clear()
            self._result = None
            self.feedback = None
            logger.info(f"[Session] {self.id} restarted")

    def _build_result(self, effect: EnterCompleted) -> QuizResult:
        tier = performance_tier(
            effect.correct_scenes, effect.total_question_scenes, self.plan.tuning.tiers
        )
        return QuizResult(
            score=self.points.current,
            correct_scenes=effect.correct_scenes,
            total_question_scenes=effect.total_question_scenes,
            percent=score_percent(effect.correct_scenes, effect.total_question_scenes),
            tier=tier,
            reason=effect.reason,
            message=self.messages[tier.message_key],
        )

    def _spawn(self, submission) -> None:
        """Send the lead in the background; the caller never waits on the sink"""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            thread = threading.Thread(
                target=asyncio.run, args=(submission,), name=f"lead-{self.id[:8]}", daemon=True
            )
            self._threads.append(thread)
            thread.start()
            return
        task = loop.create_task(submission)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until lead submissions sent from a background thread finish"""
        threads, self._threads = self._threads, []
        for thread in threads:
            thread.join(timeout)

    async def flush(self) -> None:
        """Wait for in-flight lead submissions"""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
        if self._threads:
            await asyncio.to_thread(self.join)

    # User actions

    def submit_lead(self, name: str = "", email: str = "", phone: str = "") -> LeadValidation:
        if self.phase != Phase.LEAD_GATE:
            logger.debug(f"[Session] {self.id} ignoring lead form outside the lead gate")
            return LeadValidation(ok=False, error_key="lead_closed")
        result = self.lead_gate.submit(LeadSubmission(name=name, email=email, phone=phone))
        if result.ok:
            self.dispatch(LeadAccepted())
        else:
            self.feedback = self.messages[result.error_key]
        return result

    def select_answer(self, answer_id: str, scene_index: Optional[int] = None) -> bool:
        return self.interaction.handle("select", answer_id=answer_id, scene_index=scene_index)

    def begin_edge(self, question_id: str) -> bool:
        return self.interaction.handle("begin_edge", question_id=question_id)

    def move_pointer(self, x: float, y: float) -> None:
        self.interaction.handle("move_pointer", x=x, y=y)

    def release_edge(self, answer_id: Optional[str] = None) -> bool:
        return self.interaction.handle("release", answer_id=answer_id)

    def connect(self, question_id: str, answer_id: str) -> bool:
        return self.interaction.handle("connect", question_id=question_id, answer_id=answer_id)

    def check(self):
        return self.interaction.handle("check")

    def clear(self) -> None:
        self.interaction.handle("clear")

    def restart(self) -> None:
        self.dispatch(Restart())

    # Introspection

    @property
    def phase(self) -> Phase:
        return self.scenes.phase

    @property
    def current_scene(self) -> Optional[ScenePlan]:
        return self.scenes.current_scene

    @property
    def is_completed(self) -> bool:
        return self.scenes.is_completed

    @property
    def result(self) -> Optional[QuizResult]:
        return self._result

    def snapshot(self) -> Dict[str, Any]:
        scene = self.current_scene
        data: Dict[str, Any] = {
            "id": self.id,
            "mode": self.plan.mode.value,
            "phase": self.phase.value,
            "scene_index": self.scenes.current_index,
            "question_number": scene.question_number if scene else None,
            "total_question_scenes": self.plan.total_question_scenes,
            "points": self.points.current,
            "show_points": self.plan.show_points,
            "feedback": self.feedback,
            "timer": {
                "enabled": self.plan.timer.enabled,
                "running": self.timer.running,
                "visible": self.timer.visible,
                "remaining": self.timer.display,
                "level": self.timer.level.value,
            },
            "lead": {
                "enabled": self.lead_gate.enabled,
                "saved": self.lead_gate.saved,
                "error": self.lead_gate.last_error,
            },
            "result": self._result.to_dict() if self._result else None,
        }
        if self.plan.mode == InteractionMode.NODES:
            data["answer_order"] = self.interaction.answer_order
            data["edges"] = self.interaction.edges
        return data
