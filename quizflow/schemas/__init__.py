"""
Data models and validation for the QuizFlow compiler
"""

from .artifact import CompiledArtifact
from .graph import (
    AnswerNode,
    BuildOptions,
    InteractionMode,
    LeadCollectionConfig,
    ObjectNode,
    QuestionNode,
    Scene,
    SceneGraph,
    SpaceData,
    TimerConfig,
    TimerPosition,
)
from .lead import LEAD_PAYLOAD_SCHEMA, LeadPayload, LeadSubmission
from .validation import (
    GraphValidationError,
    validate_build_options,
    validate_json_schema,
    validate_lead_payload,
    validate_scene_graph,
)

__all__ = [
    # Scene graph
    "SceneGraph",
    "Scene",
    "QuestionNode",
    "AnswerNode",
    "ObjectNode",
    "SpaceData",
    # Build options
    "BuildOptions",
    "InteractionMode",
    "TimerConfig",
    "TimerPosition",
    "LeadCollectionConfig",
    # Output and lead payloads
    "CompiledArtifact",
    "LeadPayload",
    "LeadSubmission",
    "LEAD_PAYLOAD_SCHEMA",
    # Validation functions
    "GraphValidationError",
    "validate_scene_graph",
    "validate_build_options",
    "validate_json_schema",
    "validate_lead_payload",
]
