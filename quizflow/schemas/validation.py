"""
Schema validation utilities
"""

from typing import Any, Dict, Optional

from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import ValidationError

from .graph import BuildOptions, SceneGraph
from .lead import LEAD_PAYLOAD_SCHEMA


class GraphValidationError(ValueError):
    """Raised when scene graph or build option JSON cannot be parsed"""


def validate_scene_graph(graph_data: Dict[str, Any]) -> SceneGraph:
    """Validate and parse a scene graph"""
    if isinstance(graph_data, SceneGraph):
        return graph_data
    try:
        return SceneGraph.model_validate(graph_data)
    except ValidationError as e:
        raise GraphValidationError(f"Invalid scene graph: {e}") from e


def validate_build_options(options_data: Optional[Dict[str, Any]]) -> BuildOptions:
    """Validate and parse build options; missing options mean defaults"""
    if isinstance(options_data, BuildOptions):
        return options_data
    try:
        return BuildOptions.model_validate(options_data or {})
    except ValidationError as e:
        raise GraphValidationError(f"Invalid build options: {e}") from e


def validate_json_schema(data: Dict[str, Any], schema: Dict[str, Any]) -> bool:
    """Validate data against a JSON schema"""
    try:
        validate(instance=data, schema=schema)
        return True
    except JSONSchemaValidationError as e:
        raise ValueError(f"JSON schema validation failed: {e.message}") from e


def validate_lead_payload(payload: Dict[str, Any]) -> bool:
    """Validate a wire-format lead payload"""
    return validate_json_schema(payload, LEAD_PAYLOAD_SCHEMA)
