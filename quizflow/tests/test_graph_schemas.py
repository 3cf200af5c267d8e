"""
Unit tests for scene graph models and validation helpers.
"""

import pytest
from pydantic import ValidationError

from quizflow.schemas import (
    AnswerNode,
    BuildOptions,
    GraphValidationError,
    InteractionMode,
    LeadCollectionConfig,
    ObjectNode,
    QuestionNode,
    SceneGraph,
    TimerConfig,
    TimerPosition,
    validate_build_options,
    validate_scene_graph,
)
from quizflow.schemas.graph import effective_lead_collection, effective_show_points


class TestSceneGraph:
    """Test parsing of editor-shaped scene graphs"""

    def test_parses_camel_case_graph(self, buttons_graph):
        graph = validate_scene_graph(buttons_graph)
        assert graph.total_scenes == 4
        first = graph.scenes[0]
        assert first.id == "s1"
        assert isinstance(first.data_nodes[0], QuestionNode)
        assert [a.id for a in first.answers] == ["a1", "a2"]
        assert first.answers[0].is_correct is True
        assert graph.scenes[3].is_results_scene is True

    def test_total_scenes_follows_scene_count(self, buttons_graph):
        buttons_graph["totalScenes"] = 10
        graph = validate_scene_graph(buttons_graph)
        assert graph.total_scenes == len(graph.scenes) == 4

    def test_data_type_is_case_insensitive(self):
        graph = SceneGraph.model_validate(
            {"scenes": [{"id": "s", "dataNodes": [{"id": "q", "dataType": "Question", "content": "?"}]}]}
        )
        assert graph.scenes[0].has_question

    def test_unknown_data_nodes_are_dropped(self):
        graph = SceneGraph.model_validate(
            {
                "scenes": [
                    {
                        "id": "s",
                        "dataNodes": [
                            {"id": "x", "dataType": "video"},
                            {"id": "a", "dataType": "answer", "content": "A"},
                        ],
                    }
                ]
            }
        )
        assert [n.id for n in graph.scenes[0].data_nodes] == ["a"]
        assert not graph.scenes[0].has_question

    def test_scene_accepts_space_id(self):
        graph = SceneGraph.model_validate({"scenes": [{"spaceId": "space-1"}]})
        assert graph.scenes[0].id == "space-1"

    def test_graph_is_frozen(self, buttons_graph):
        graph = validate_scene_graph(buttons_graph)
        with pytest.raises(ValidationError):
            graph.total_scenes = 1

    def test_invalid_graph_raises(self):
        with pytest.raises(GraphValidationError):
            validate_scene_graph({"scenes": [{"dataNodes": []}]})
        with pytest.raises(GraphValidationError):
            validate_scene_graph({"scenes": 5})

    def test_graph_validation_error_is_value_error(self):
        assert issubclass(GraphValidationError, ValueError)


class TestAnswerPoints:
    """Test point awards carried by answers"""

    def test_default_award_is_one(self):
        assert AnswerNode(id="a").award == 1

    def test_enabled_positive_value(self):
        assert AnswerNode(id="a", enable_points=True, points_value=5).award == 5

    def test_disabled_value_is_ignored(self):
        assert AnswerNode(id="a", enable_points=False, points_value=5).award == 1

    def test_non_positive_value_falls_back(self):
        assert AnswerNode(id="a", enable_points=True, points_value=0).award == 1
        assert AnswerNode(id="a", enable_points=True, points_value=-3).award == 1

    def test_points_value_coerced(self):
        answer = AnswerNode.model_validate({"id": "a", "enablePoints": True, "pointsValue": "7"})
        assert answer.award == 7


class TestObjectNode:
    """Test anchor color normalization"""

    def test_material_color_to_hex(self):
        node = ObjectNode.model_validate({"type": "sphere", "material": {"color": {"r": 1, "g": 0.5, "b": 0}}})
        assert node.color == "#ff8000"

    def test_rgb_color_object(self):
        node = ObjectNode.model_validate({"color": {"r": 0, "g": 0, "b": 1}})
        assert node.color == "#0000ff"

    def test_named_and_hex_colors_kept(self):
        assert ObjectNode(color="blue").color == "blue"
        assert ObjectNode(color="#abc").color == "#abc"

    def test_unsafe_color_replaced(self):
        node = ObjectNode.model_validate({"color": "red;background:url(x)"})
        assert node.color == "#FF0000"

    def test_missing_type_defaults_to_box(self):
        assert ObjectNode.model_validate({"type": ""}).type == "box"


class TestTimerConfig:
    """Test timer defaults and clamping"""

    def test_defaults(self):
        timer = TimerConfig()
        assert timer.enabled is False
        assert timer.limit_seconds == 60
        assert timer.position == TimerPosition.TOP_CENTER

    @pytest.mark.parametrize(
        "raw,expected",
        [(5, 10), (10, 10), (90, 90), (3600, 3600), (99999, 3600), (None, 60), (0, 60), ("abc", 60)],
    )
    def test_limit_clamped(self, raw, expected):
        assert TimerConfig.model_validate({"limitSeconds": raw}).limit_seconds == expected

    def test_unknown_position_falls_back(self):
        assert TimerConfig.model_validate({"position": "middle"}).position == TimerPosition.TOP_CENTER

    def test_known_position(self):
        timer = TimerConfig.model_validate({"enabled": True, "position": "bottom-right"})
        assert timer.enabled is True
        assert timer.position == TimerPosition.BOTTOM_RIGHT


class TestBuildOptions:
    """Test build options parsing and effective values"""

    def test_defaults(self):
        options = validate_build_options(None)
        assert options.interaction_mode == InteractionMode.BUTTONS
        assert options.show_points is False
        assert options.lead_collection is None
        assert options.timer_config.enabled is False

    def test_unknown_mode_falls_back_to_buttons(self):
        assert BuildOptions.model_validate({"interactionMode": "swipe"}).interaction_mode == InteractionMode.BUTTONS

    def test_nodes_mode(self):
        assert BuildOptions.model_validate({"interactionMode": "nodes"}).interaction_mode == InteractionMode.NODES

    def test_invalid_locale_rejected(self):
        with pytest.raises(GraphValidationError):
            validate_build_options({"locale": "de"})

    def test_lead_required_field_priority(self):
        assert LeadCollectionConfig(collect_email=True, collect_phone=True).required_field == "email"
        assert LeadCollectionConfig(collect_name=True, collect_email=True).required_field == "name"
        assert LeadCollectionConfig(collect_phone=True).required_field == "phone"
        assert LeadCollectionConfig().required_field is None
        assert LeadCollectionConfig().enabled is False

    def test_lead_from_first_scene(self, buttons_graph):
        buttons_graph["scenes"][0]["spaceData"] = {"leadCollection": {"collectEmail": True}}
        graph = validate_scene_graph(buttons_graph)
        lead = effective_lead_collection(graph, BuildOptions())
        assert lead is not None and lead.collect_email

    def test_option_lead_wins(self, buttons_graph):
        buttons_graph["scenes"][0]["spaceData"] = {"leadCollection": {"collectEmail": True}}
        graph = validate_scene_graph(buttons_graph)
        options = BuildOptions.model_validate({"leadCollection": {"collectName": True}})
        assert effective_lead_collection(graph, options).required_field == "name"

    def test_show_points_from_any_scene_inputs(self, buttons_graph):
        buttons_graph["scenes"][2]["spaceData"] = {"inputs": {"showPoints": True}}
        graph = validate_scene_graph(buttons_graph)
        assert effective_show_points(graph, BuildOptions()) is True
        assert effective_show_points(validate_scene_graph({"scenes": []}), BuildOptions()) is False
