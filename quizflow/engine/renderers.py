"""
Scene renderers - the compile-side half of each interaction mode
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from quizflow.schemas.graph import InteractionMode, TimerPosition

from .messages import get_messages
from .plan import QuizPlan, ScenePlan

TIMER_POSITIONS: Dict[TimerPosition, str] = {
    TimerPosition.TOP_LEFT: "top: 10px; left: 10px;",
    TimerPosition.TOP_CENTER: "top: 10px; left: 50%; transform: translateX(-50%);",
    TimerPosition.TOP_RIGHT: "top: 10px; right: 10px;",
    TimerPosition.BOTTOM_LEFT: "bottom: 80px; left: 10px;",
    TimerPosition.BOTTOM_RIGHT: "bottom: 80px; right: 10px;",
}

_environment: Optional[Environment] = None


def create_environment() -> Environment:
    """Jinja environment over the packaged templates, HTML autoescaped"""
    return Environment(
        loader=PackageLoader("quizflow", "templates"),
        autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def get_environment() -> Environment:
    global _environment
    if _environment is None:
        _environment = create_environment()
    return _environment


def format_clock(seconds: int) -> str:
    minutes, secs = divmod(max(0, int(seconds)), 60)
    return f"{minutes}:{secs:02d}"


class SceneRenderer(ABC):
    """Renders scene containers for one interaction mode"""

    mode: InteractionMode

    def __init__(
        self,
        environment: Optional[Environment] = None,
        messages: Optional[Dict[str, str]] = None,
    ):
        self.environment = environment or get_environment()
        self.messages = messages or get_messages()

    def _render(self, template_name: str, **context) -> Markup:
        template = self.environment.get_template(template_name)
        return Markup(template.render(messages=self.messages, **context))

    def render(self, scene: ScenePlan, visible: bool = False) -> Markup:
        """Render one scene container; every scene yields exactly one"""
        if scene.is_results:
            return self._render("_results_scene.html.j2", scene=scene, visible=visible)
        if not scene.questions:
            return self._render("_empty_scene.html.j2", scene=scene, visible=visible)
        return self.render_question_scene(scene, visible)

    @abstractmethod
    def render_question_scene(self, scene: ScenePlan, visible: bool) -> Markup:
        pass

    def render_controls(self, plan: QuizPlan) -> Markup:
        """Markup shared by all scenes of this mode"""
        return Markup("")


class ButtonsRenderer(SceneRenderer):
    """One button per answer, correctness carried as inert data attributes"""

    mode = InteractionMode.BUTTONS

    def render_question_scene(self, scene: ScenePlan, visible: bool) -> Markup:
        return self._render("_buttons_scene.html.j2", scene=scene, visible=visible)


class NodeMatchingRenderer(SceneRenderer):
    """Two-column question/answer layout over a shared connection overlay"""

    mode = InteractionMode.NODES

    def render_question_scene(self, scene: ScenePlan, visible: bool) -> Markup:
        return self._render("_nodes_scene.html.j2", scene=scene, visible=visible)

    def render_controls(self, plan: QuizPlan) -> Markup:
        return self._render("_matching_controls.html.j2", plan=plan)


RENDERERS: Dict[InteractionMode, Type[SceneRenderer]] = {
    InteractionMode.BUTTONS: ButtonsRenderer,
    InteractionMode.NODES: NodeMatchingRenderer,
}


def get_renderer(
    mode: InteractionMode,
    environment: Optional[Environment] = None,
    messages: Optional[Dict[str, str]] = None,
) -> SceneRenderer:
    """Factory for the renderer of an interaction mode"""
    renderer_class = RENDERERS.get(mode)
    if renderer_class is None:
        raise ValueError(f"Unknown interaction mode: {mode}")
    return renderer_class(environment=environment, messages=messages)
