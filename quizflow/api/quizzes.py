"""
Quiz compilation API endpoints.

Compiles scene graphs into markup + behavior script artifacts, renders
standalone preview pages and reports non-fatal graph issues.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from quizflow.engine.compiler import QuizCompiler
from quizflow.engine.validator import inspect_graph
from quizflow.schemas import GraphValidationError, validate_build_options, validate_scene_graph
from quizflow.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


class CompileRequest(BaseModel):
    """Scene graph plus optional build options"""

    graph: Dict[str, Any] = Field(..., description="Scene graph JSON")
    options: Optional[Dict[str, Any]] = Field(
        default=None, description="Build options; defaults are used when omitted"
    )


class PreviewRequest(CompileRequest):
    title: str = Field(default="Quiz", max_length=200)


class CompileResponse(BaseModel):
    markup: str
    script: str
    runtime_config: Dict[str, Any]
    interaction_mode: str
    content_hash: str
    issues: List[str] = []


class InspectResponse(BaseModel):
    total_scenes: int
    question_scenes: int
    issues: List[str]


def _parse(request: CompileRequest):
    try:
        return validate_scene_graph(request.graph), validate_build_options(request.options)
    except GraphValidationError as e:
        logger.warning(f"[API] Rejected graph: {e}")
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/compile", response_model=CompileResponse)
async def compile_quiz_endpoint(request: CompileRequest):
    """Compile a scene graph into a markup fragment and behavior script"""
    logger.info("=" * 60)
    logger.info("QUIZ COMPILE REQUEST")
    graph, options = _parse(request)
    logger.info(f"Scenes: {graph.total_scenes}, mode: {options.interaction_mode.value}")

    artifact = QuizCompiler().compile(graph, options)
    issues = inspect_graph(graph)
    for issue in issues:
        logger.warning(f"[API] Graph issue: {issue}")

    logger.info(f"✓ Compiled artifact {artifact.content_hash[:12]}")
    return CompileResponse(
        markup=artifact.markup,
        script=artifact.script,
        runtime_config=artifact.config,
        interaction_mode=artifact.interaction_mode.value,
        content_hash=artifact.content_hash,
        issues=issues,
    )


@router.post("/preview", response_class=HTMLResponse)
async def preview_quiz(request: PreviewRequest):
    """Compile a scene graph and wrap it into a standalone HTML page"""
    graph, options = _parse(request)
    compiler = QuizCompiler()
    artifact = compiler.compile(graph, options)
    return HTMLResponse(content=compiler.render_document(artifact, title=request.title))


@router.post("/inspect", response_model=InspectResponse)
async def inspect_quiz(request: CompileRequest):
    """Report graph issues without compiling"""
    graph, _ = _parse(request)
    issues = inspect_graph(graph)
    logger.info(f"[API] Inspected graph: {len(issues)} issue(s)")
    return InspectResponse(
        total_scenes=graph.total_scenes,
        question_scenes=graph.question_scene_count,
        issues=issues,
    )
