"""
Shared fixtures: small scene graphs in the editor's camelCase shape
"""

import random

import pytest

from quizflow.engine.plan import RuntimeTuning, build_plan
from quizflow.runtime import ManualClock, MemoryLeadSink, QuizSession
from quizflow.schemas import validate_build_options, validate_scene_graph


def question_scene(scene_id, question, answers, objects=None, space_data=None):
    nodes = [{"id": f"{scene_id}-q", "dataType": "question", "content": question}]
    for answer in answers:
        nodes.append({"dataType": "answer", **answer})
    scene = {"id": scene_id, "dataNodes": nodes, "objectNodes": objects or []}
    if space_data is not None:
        scene["spaceData"] = space_data
    return scene


@pytest.fixture
def buttons_graph():
    """Two question scenes with an empty scene between them, then results"""
    return {
        "totalScenes": 4,
        "scenes": [
            question_scene(
                "s1",
                "Capital of France?",
                [
                    {"id": "a1", "content": "Paris", "isCorrect": True, "enablePoints": True, "pointsValue": 5},
                    {"id": "a2", "content": "Lyon", "isCorrect": False},
                ],
                objects=[{"type": "sphere", "color": "#00ff00"}, {"type": "box", "color": "blue"}],
            ),
            {"id": "s-empty", "dataNodes": [], "objectNodes": []},
            question_scene(
                "s2",
                "2 + 2?",
                [
                    {"id": "b1", "content": "3", "isCorrect": False},
                    {"id": "b2", "content": "4", "isCorrect": True},
                ],
            ),
            {"id": "s-results", "dataNodes": [], "isResultsScene": True},
        ],
    }


@pytest.fixture
def matching_graph():
    """One matching scene with two questions and two answers, then results"""
    return {
        "scenes": [
            {
                "id": "m1",
                "dataNodes": [
                    {"id": "q1", "dataType": "question", "content": "Sun"},
                    {"id": "q2", "dataType": "question", "content": "Moon"},
                    {"id": "ans-day", "dataType": "answer", "content": "Day", "isCorrect": True},
                    {"id": "ans-night", "dataType": "answer", "content": "Night", "isCorrect": True},
                ],
            },
            {"id": "m-results", "dataNodes": [], "isResultsScene": True},
        ],
    }


@pytest.fixture
def tuning():
    return RuntimeTuning()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sink():
    return MemoryLeadSink()


@pytest.fixture
def make_session(tuning, clock, sink):
    """Build a session with a manual clock, in-memory sink and seeded shuffling"""

    def factory(graph, options=None, seed=7):
        plan = build_plan(validate_scene_graph(graph), validate_build_options(options), tuning)
        return QuizSession(plan, clock=clock, lead_sink=sink, rng=random.Random(seed))

    return factory
