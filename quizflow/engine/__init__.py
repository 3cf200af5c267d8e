"""
QuizFlow compiler engine
"""

from .compiler import QuizCompiler, compile_quiz, render_document, serialize_config
from .messages import get_messages
from .plan import QuizPlan, RuntimeTuning, ScenePlan, TierThresholds, build_plan
from .renderers import ButtonsRenderer, NodeMatchingRenderer, SceneRenderer, get_renderer
from .validator import inspect_graph

__all__ = [
    "QuizCompiler",
    "compile_quiz",
    "render_document",
    "serialize_config",
    "QuizPlan",
    "ScenePlan",
    "RuntimeTuning",
    "TierThresholds",
    "build_plan",
    "SceneRenderer",
    "ButtonsRenderer",
    "NodeMatchingRenderer",
    "get_renderer",
    "get_messages",
    "inspect_graph",
]
