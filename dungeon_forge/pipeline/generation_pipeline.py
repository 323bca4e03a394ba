"""
Generation Pipeline with Graph Fallback
=======================================

Two-stage generation for a single request:

    Stage 1 (graph):    parse generator -> resolve parameters -> execute
    Stage 2 (fallback): seed-only generator, run when there is no graph or
                        stage 1 reports FAILED

Stage 1 never raises GraphError to the caller; it returns a StageResult
whose status says whether stage 2 is needed. The final GenerationResult is
tagged with the GenerationPath that produced its layout, and always
carries a layout.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from dungeon_forge.core.definitions import ParameterType
from dungeon_forge.core.errors import GraphError
from dungeon_forge.core.layout import DungeonLayout
from dungeon_forge.core.rng import SeededRng
from dungeon_forge.evaluation.constraints import evaluate_constraints
from dungeon_forge.generation.fallback_generator import generate_fallback_dungeon
from dungeon_forge.generation.graph_executor import GraphExecutor
from dungeon_forge.generation.node_graph import GeneratorDocument, Parameter
from dungeon_forge.pipeline.models import (
    GenerationMetadata,
    GenerationPath,
    GenerationRequest,
    GenerationResult,
    GeneratorInput,
)
from dungeon_forge.utils.graph_utils import validate_graph_topology

logger = logging.getLogger(__name__)


class StageStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class StageResult:
    """Outcome of the graph stage."""
    status: StageStatus
    layout: Optional[DungeonLayout] = None
    document: Optional[GeneratorDocument] = None
    error: Optional[str] = None
    node_executions: int = 0


# ===== Parameter resolution =====

def _clamp(value: Any, param: Parameter) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return value
    if param.min is not None and value < param.min:
        return param.min
    if param.max is not None and value > param.max:
        return param.max
    return value


def resolve_parameters(
    document: Optional[GeneratorDocument],
    parameters: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Merge request parameters with the generator's declared defaults.

    Declared parameters missing from the request take their default;
    number parameters are clamped into [min, max]. Undeclared request keys
    pass through untouched.
    """
    resolved = dict(parameters)
    if document is None:
        return resolved

    for param in document.parameters:
        if param.name not in resolved:
            if param.default is None:
                continue
            resolved[param.name] = param.default
        if param.param_type is ParameterType.NUMBER:
            resolved[param.name] = _clamp(resolved[param.name], param)
    return resolved


# ===== Stages =====

def load_generator(generator: GeneratorInput) -> GeneratorDocument:
    """Return a GeneratorDocument, parsing raw dicts (raises GraphError)."""
    if isinstance(generator, GeneratorDocument):
        return generator
    if not isinstance(generator, dict):
        raise GraphError(f"Generator must be a document object, got {type(generator).__name__}")
    return GeneratorDocument.from_dict(generator)


def run_graph_stage(
    generator: GeneratorInput,
    seed: int,
    parameters: Dict[str, Any],
    check_topology: bool = True,
) -> StageResult:
    """
    Parse and execute a generator graph.

    Args:
        check_topology: Log static graph issues before executing

    Returns:
        StageResult with SUCCESS and a layout, or FAILED and the error text
    """
    document = None
    executor = None
    try:
        document = load_generator(generator)
        if check_topology:
            is_valid, issues = validate_graph_topology(document.graph)
            if not is_valid:
                logger.warning(f"Generator '{document.id}' topology issues: {issues}")

        executor = GraphExecutor(seed, resolve_parameters(document, parameters))
        layout = executor.execute(document)
    except GraphError as e:
        return StageResult(
            status=StageStatus.FAILED,
            document=document,
            error=str(e),
            node_executions=executor.node_executions if executor is not None else 0,
        )

    return StageResult(
        status=StageStatus.SUCCESS,
        layout=layout,
        document=document,
        node_executions=executor.node_executions,
    )


def run_fallback_stage(seed: int) -> DungeonLayout:
    return generate_fallback_dungeon(SeededRng(seed))


# ===== Entry point =====

def generate_once(request: GenerationRequest, check_topology: bool = True) -> GenerationResult:
    """
    Generate one layout for the request.

    Never raises for graph problems: a failing graph produces a fallback
    layout with success=False and one "Graph execution error" message.

    Args:
        request: Seed, optional generator and parameters
        check_topology: Log static graph issues before executing

    Returns:
        GenerationResult whose data is always a layout
    """
    start = time.perf_counter()
    errors: List[str] = []
    success = True
    document = None
    node_executions = 0

    if request.generator is not None:
        stage = run_graph_stage(
            request.generator, request.seed, request.parameters, check_topology
        )
        document = stage.document
        node_executions = stage.node_executions

        if stage.status is StageStatus.SUCCESS:
            layout = stage.layout
            path = GenerationPath.GRAPH
        else:
            logger.warning(f"Graph generation failed for seed {request.seed}: {stage.error}; using fallback")
            errors.append(f"Graph execution error: {stage.error}")
            success = False
            layout = run_fallback_stage(request.seed)
            path = GenerationPath.FALLBACK_AFTER_ERROR
    else:
        layout = run_fallback_stage(request.seed)
        path = GenerationPath.FALLBACK

    constraints = document.constraints if document is not None else []
    constraint_results = evaluate_constraints(layout, constraints)

    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.debug(
        f"Seed {request.seed}: {len(layout.rooms)} rooms via {path.value} in {duration_ms}ms"
    )

    return GenerationResult(
        seed=request.seed,
        timestamp=int(time.time()),
        success=success,
        data=layout,
        constraint_results=constraint_results,
        metadata=GenerationMetadata(
            node_executions=node_executions,
            retry_count=0,
            path=path,
        ),
        errors=errors,
        duration_ms=duration_ms,
    )
