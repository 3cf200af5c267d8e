"""
Scene graph schema definitions.

The scene graph is the immutable description of a quiz handed to the
compiler: ordered scenes holding question/answer data nodes, visual anchor
object nodes and the build options that parameterize the emitted runtime.
Keys are accepted in snake_case or in the camelCase produced by the graph
editor (``dataType``, ``isCorrect``, ``spaceData``...).
"""

import re
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from quizflow.utils.logger import get_logger

logger = get_logger(__name__)

MIN_TIMER_SECONDS = 10
MAX_TIMER_SECONDS = 3600
DEFAULT_TIMER_SECONDS = 60
DEFAULT_OBJECT_COLOR = "#FF0000"

_SAFE_COLOR = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20})$")


class GraphModel(BaseModel):
    """Base model: frozen, camelCase aliases, unknown keys ignored"""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )


class InteractionMode(str, Enum):
    """How the user answers each scene"""

    BUTTONS = "buttons"
    NODES = "nodes"


class TimerPosition(str, Enum):
    """Screen presets for the countdown display"""

    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"


class QuestionNode(GraphModel):
    """A question content unit"""

    data_type: Literal["question"] = "question"
    id: str = Field(..., description="Node identifier")
    content: str = Field(default="", description="Question text")


class AnswerNode(GraphModel):
    """An answer content unit with optional point value"""

    data_type: Literal["answer"] = "answer"
    id: str = Field(..., description="Node identifier")
    content: str = Field(default="", description="Answer text")
    is_correct: bool = Field(default=False)
    enable_points: bool = Field(default=False)
    points_value: int = Field(default=0)

    @field_validator("points_value", mode="before")
    @classmethod
    def coerce_points(cls, v):
        if v is None or v == "":
            return 0
        try:
            return int(v)
        except (TypeError, ValueError):
            return 0

    @property
    def award(self) -> int:
        """Points granted when this answer is the correct one"""
        if self.enable_points and self.points_value > 0:
            return self.points_value
        return 1


DataNode = Annotated[Union[QuestionNode, AnswerNode], Field(discriminator="data_type")]


def rgb_to_hex(rgb: Dict[str, Any]) -> Optional[str]:
    """Convert a material color with channels in [0, 1] to ``#rrggbb``"""
    channels = []
    for key in ("r", "g", "b"):
        try:
            value = float(rgb.get(key, 0.0))
        except (TypeError, ValueError):
            return None
        channels.append(round(max(0.0, min(1.0, value)) * 255))
    return "#" + "".join(f"{c:02x}" for c in channels)


class ObjectNode(GraphModel):
    """
    Visual anchor correlated by position with an answer.

    Only the shape and color matter here: they drive the thumbnail shown
    beside the paired answer and the highlight on correct answers.
    """

    id: Optional[str] = None
    type: str = Field(default="box", description="Shape: box, sphere, cylinder, plane, cone, circle")
    color: str = Field(default=DEFAULT_OBJECT_COLOR)

    @model_validator(mode="before")
    @classmethod
    def normalize_color(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        color = data.get("color")
        material = data.get("material")
        if not isinstance(material, dict):
            material = {}
        if isinstance(color, dict):
            data["color"] = rgb_to_hex(color)
        elif not isinstance(color, str) and isinstance(material.get("color"), dict):
            data["color"] = rgb_to_hex(material["color"])
        if not isinstance(data.get("color"), str) or not _SAFE_COLOR.match(data["color"]):
            data["color"] = DEFAULT_OBJECT_COLOR
        if not data.get("type"):
            data["type"] = "box"
        return data


class LeadCollectionConfig(GraphModel):
    """Which contact fields the pre-quiz form collects"""

    collect_name: bool = False
    collect_email: bool = False
    collect_phone: bool = False

    @property
    def enabled(self) -> bool:
        return self.collect_name or self.collect_email or self.collect_phone

    @property
    def required_field(self) -> Optional[str]:
        """First enabled field in priority order: name, email, phone"""
        for name, flag in (
            ("name", self.collect_name),
            ("email", self.collect_email),
            ("phone", self.collect_phone),
        ):
            if flag:
                return name
        return None


class SpaceData(GraphModel):
    """Space-level settings carried by a scene (only the first scene's count)"""

    lead_collection: Optional[LeadCollectionConfig] = None
    show_points: bool = False

    @model_validator(mode="before")
    @classmethod
    def lift_inputs(cls, data: Any) -> Any:
        # The editor sometimes nests flags under "inputs"
        if isinstance(data, dict) and isinstance(data.get("inputs"), dict):
            data = dict(data)
            inputs = data["inputs"]
            if inputs.get("showPoints") and not data.get("showPoints"):
                data["showPoints"] = True
            if "leadCollection" in inputs and "leadCollection" not in data:
                data["leadCollection"] = inputs["leadCollection"]
        return data


class Scene(GraphModel):
    """One step of the quiz"""

    id: str = Field(..., validation_alias=AliasChoices("id", "spaceId", "space_id"))
    data_nodes: Tuple[DataNode, ...] = ()
    object_nodes: Tuple[ObjectNode, ...] = ()
    is_results_scene: bool = False
    space_data: Optional[SpaceData] = None

    @field_validator("data_nodes", mode="before")
    @classmethod
    def normalize_data_nodes(cls, v):
        if v is None:
            return ()
        nodes = []
        for raw in v:
            if not isinstance(raw, dict):
                nodes.append(raw)
                continue
            kind = raw.get("dataType", raw.get("data_type"))
            kind = kind.lower() if isinstance(kind, str) else None
            if kind not in ("question", "answer"):
                logger.warning(f"[Graph] Ignoring data node {raw.get('id')!r} with type {kind!r}")
                continue
            node = {k: val for k, val in raw.items() if k != "data_type"}
            node["dataType"] = kind
            nodes.append(node)
        return tuple(nodes)

    @field_validator("object_nodes", mode="before")
    @classmethod
    def default_object_nodes(cls, v):
        return () if v is None else v

    @property
    def questions(self) -> List[QuestionNode]:
        return [n for n in self.data_nodes if isinstance(n, QuestionNode)]

    @property
    def answers(self) -> List[AnswerNode]:
        return [n for n in self.data_nodes if isinstance(n, AnswerNode)]

    @property
    def has_question(self) -> bool:
        return any(isinstance(n, QuestionNode) for n in self.data_nodes)


class SceneGraph(GraphModel):
    """Ordered scenes compiled into a single quiz runtime"""

    scenes: Tuple[Scene, ...] = ()
    total_scenes: int = 0

    @model_validator(mode="before")
    @classmethod
    def sync_total(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        scenes = data.get("scenes") or ()
        if not isinstance(scenes, (list, tuple)):
            return data
        declared = data.get("totalScenes", data.get("total_scenes"))
        if declared is not None and declared != len(scenes):
            logger.warning(
                f"[Graph] totalScenes={declared} disagrees with {len(scenes)} scenes; using scene count"
            )
        data.pop("totalScenes", None)
        data["total_scenes"] = len(scenes)
        return data

    @property
    def question_scene_count(self) -> int:
        return sum(1 for s in self.scenes if s.has_question)


class TimerConfig(GraphModel):
    """Countdown configuration"""

    enabled: bool = False
    limit_seconds: int = DEFAULT_TIMER_SECONDS
    position: TimerPosition = TimerPosition.TOP_CENTER

    @field_validator("limit_seconds", mode="before")
    @classmethod
    def clamp_limit(cls, v):
        try:
            seconds = int(v) if v else DEFAULT_TIMER_SECONDS
        except (TypeError, ValueError):
            seconds = DEFAULT_TIMER_SECONDS
        return max(MIN_TIMER_SECONDS, min(MAX_TIMER_SECONDS, seconds))

    @field_validator("position", mode="before")
    @classmethod
    def fallback_position(cls, v):
        valid = {p.value for p in TimerPosition}
        if isinstance(v, TimerPosition):
            return v
        return v if v in valid else TimerPosition.TOP_CENTER.value

    @field_validator("enabled", mode="before")
    @classmethod
    def strict_enabled(cls, v):
        return v is True or v == "true"


class BuildOptions(GraphModel):
    """Options controlling how a scene graph is compiled"""

    interaction_mode: InteractionMode = InteractionMode.BUTTONS
    show_points: bool = False
    timer_config: TimerConfig = Field(default_factory=TimerConfig)
    lead_collection: Optional[LeadCollectionConfig] = None
    canvas_id: Optional[str] = Field(
        default=None, description="Identifier embedded in lead payloads"
    )
    locale: Optional[Literal["en", "ru"]] = Field(
        default=None, description="UI language; falls back to the configured default"
    )

    @field_validator("interaction_mode", mode="before")
    @classmethod
    def fallback_mode(cls, v):
        if isinstance(v, InteractionMode):
            return v
        return InteractionMode.NODES.value if v == "nodes" else InteractionMode.BUTTONS.value

    @field_validator("timer_config", mode="before")
    @classmethod
    def default_timer(cls, v):
        return {} if v is None else v


def effective_lead_collection(
    graph: SceneGraph, options: BuildOptions
) -> Optional[LeadCollectionConfig]:
    """Lead config from the options, else from the first scene's space data"""
    if options.lead_collection and options.lead_collection.enabled:
        return options.lead_collection
    if graph.scenes and graph.scenes[0].space_data:
        lead = graph.scenes[0].space_data.lead_collection
        if lead and lead.enabled:
            return lead
    return None


def effective_show_points(graph: SceneGraph, options: BuildOptions) -> bool:
    """Points are shown if the options or any scene asks for them"""
    if options.show_points:
        return True
    return any(s.space_data is not None and s.space_data.show_points for s in graph.scenes)


def graph_summary(graph: SceneGraph) -> Dict[str, int]:
    return {
        "scenes": graph.total_scenes,
        "question_scenes": graph.question_scene_count,
        "results_scenes": sum(1 for s in graph.scenes if s.is_results_scene),
    }
