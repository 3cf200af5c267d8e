"""
Quiz compiler - converts scene graphs to markup and behavior script artifacts
"""

import json
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment
from markupsafe import Markup

from quizflow.schemas.artifact import CompiledArtifact
from quizflow.schemas.graph import BuildOptions, SceneGraph
from quizflow.schemas.validation import validate_build_options, validate_scene_graph
from quizflow.utils.logger import get_logger

from .messages import get_messages
from .plan import QuizPlan, RuntimeTuning, build_plan
from .renderers import TIMER_POSITIONS, format_clock, get_environment, get_renderer

logger = get_logger(__name__)

RUNTIME_SOURCE = "runtime.js"

_SCRIPT_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"}


def serialize_config(config: Dict[str, Any]) -> str:
    """Deterministic JSON that is safe inside a <script> element"""
    text = json.dumps(config, sort_keys=True, ensure_ascii=True, separators=(",", ":"))
    for char, escaped in _SCRIPT_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


class QuizCompiler:
    """Compiles a scene graph and build options into a CompiledArtifact"""

    def __init__(
        self,
        tuning: Optional[RuntimeTuning] = None,
        environment: Optional[Environment] = None,
    ):
        self.tuning = tuning
        self.environment = environment or get_environment()
        self._runtime_source: Optional[str] = None

    @property
    def runtime_source(self) -> str:
        # Loaded raw so the script is never parsed as a template
        if self._runtime_source is None:
            source, _, _ = self.environment.loader.get_source(self.environment, RUNTIME_SOURCE)
            self._runtime_source = source
        return self._runtime_source

    def plan(self, graph: SceneGraph, options: BuildOptions) -> QuizPlan:
        return build_plan(graph, options, self.tuning)

    def compile(self, graph: SceneGraph, options: BuildOptions) -> CompiledArtifact:
        plan = self.plan(graph, options)
        messages = get_messages(plan.tuning.locale)

        markup = self._render_markup(plan, messages)
        config = plan.to_runtime_config()
        config["messages"] = messages
        config_json = serialize_config(config)
        script = self.environment.get_template("behavior.js.j2").render(
            runtime_source=self.runtime_source, config_json=config_json
        )

        logger.info(
            f"[Compiler] Compiled {plan.total_scenes} scenes "
            f"({plan.total_question_scenes} with questions) in {plan.mode.value} mode"
        )
        return CompiledArtifact(
            markup=markup,
            script=script,
            runtime_config=config_json,
            interaction_mode=plan.mode,
        )

    def _render_markup(self, plan: QuizPlan, messages: Dict[str, str]) -> str:
        renderer = get_renderer(plan.mode, self.environment, messages)
        first = plan.first_playable()
        scenes = [renderer.render(scene, visible=scene.index == first) for scene in plan.scenes]

        first_number = plan.scenes[first].question_number if first is not None else None
        progress = Markup(messages["progress"]).format(
            current=Markup('<span id="current-scene-number">{}</span>').format(first_number or 1),
            total=plan.total_question_scenes,
        )

        return self.environment.get_template("quiz.html.j2").render(
            plan=plan,
            messages=messages,
            scenes=scenes,
            controls=renderer.render_controls(plan),
            progress=progress,
            timer_style=TIMER_POSITIONS[plan.timer.position],
            timer_display=format_clock(plan.timer.limit_seconds),
            lead_fields=self._lead_fields(plan, messages),
        )

    @staticmethod
    def _lead_fields(plan: QuizPlan, messages: Dict[str, str]) -> List[Dict[str, Any]]:
        if plan.lead is None:
            return []
        required = plan.lead.required_field
        fields = []
        for name, enabled, input_type in (
            ("name", plan.lead.collect_name, "text"),
            ("email", plan.lead.collect_email, "email"),
            ("phone", plan.lead.collect_phone, "tel"),
        ):
            if enabled:
                fields.append(
                    {
                        "name": name,
                        "label": messages[f"lead_{name}"],
                        "placeholder": messages[f"lead_{name}_placeholder"],
                        "input_type": input_type,
                        "required": name == required,
                    }
                )
        return fields

    def render_document(self, artifact: CompiledArtifact, title: str = "Quiz") -> str:
        """Wrap an artifact into a standalone HTML page"""
        locale = artifact.config.get("locale", "en")
        return self.environment.get_template("document.html.j2").render(
            title=title,
            locale=locale,
            markup=Markup(artifact.markup),
            script=Markup(artifact.script),
        )


def compile_quiz(
    graph: Union[SceneGraph, Dict[str, Any]],
    options: Union[BuildOptions, Dict[str, Any], None] = None,
    tuning: Optional[RuntimeTuning] = None,
) -> CompiledArtifact:
    """Compile a scene graph; dicts are validated first"""
    compiler = QuizCompiler(tuning=tuning)
    return compiler.compile(validate_scene_graph(graph), validate_build_options(options))


def render_document(artifact: CompiledArtifact, title: str = "Quiz") -> str:
    return QuizCompiler().render_document(artifact, title)
