"""
Graph inspection: non-fatal issues worth showing to a quiz author
"""

from typing import List

from quizflow.schemas.graph import SceneGraph


def inspect_graph(graph: SceneGraph) -> List[str]:
    """Return human-readable issues; an empty list means the graph looks sound"""
    issues: List[str] = []
    results = [i for i, scene in enumerate(graph.scenes) if scene.is_results_scene]

    for index, scene in enumerate(graph.scenes):
        if scene.is_results_scene or not scene.has_question:
            continue
        correct = [a for a in scene.answers if a.is_correct]
        if not scene.answers:
            issues.append(f"Scene {index} ({scene.id}) has questions but no answers")
        elif not correct:
            issues.append(f"Scene {index} ({scene.id}) has no correct answer")
        elif len(correct) > len(scene.questions):
            issues.append(
                f"Scene {index} ({scene.id}) has {len(correct)} correct answers for "
                f"{len(scene.questions)} question(s); only the first {len(scene.questions)} count"
            )

    if not results and graph.question_scene_count:
        issues.append("Graph has no results scene")
    if len(results) > 1:
        issues.append(f"Graph has {len(results)} results scenes; only scene {results[0]} is reachable")
    if results:
        playable_after = [
            i
            for i, scene in enumerate(graph.scenes)
            if i > results[0] and scene.has_question and not scene.is_results_scene
        ]
        if playable_after:
            issues.append(
                f"Results scene {results[0]} is not terminal; scenes {playable_after} are never reached"
            )
    return issues
