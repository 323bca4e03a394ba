"""
Batch Simulation
================

Runs the generation pipeline over seeds seed_start .. seed_start + N - 1
and summarizes per-run metrics:

    roomCount   rooms in the layout
    pathLength  connections + 1
    enemyCount  spawn points
    itemCount   always 0 (loot nodes do not feed this metric yet)

Runs are independent, so they can be spread across processes
(workers > 1). Samples are collected in run order and each metric is
sorted once, after collection, which makes parallel and serial results
identical.

Success rate is always 1.0: a run that fell
back still produced a layout. Fallbacks show up in `warnings` and in the
constraint pass rates instead.
"""

import logging
import multiprocessing as mp
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from dungeon_forge.core.errors import GraphError
from dungeon_forge.evaluation.statistics import compute_distribution_stats
from dungeon_forge.generation.node_graph import GeneratorDocument
from dungeon_forge.pipeline.generation_pipeline import generate_once
from dungeon_forge.pipeline.models import (
    ConstraintStats,
    GenerationRequest,
    GeneratorInput,
    SimulationConfig,
    SimulationResults,
    SimulationStatistics,
)
from dungeon_forge.utils.graph_utils import validate_graph_topology

logger = logging.getLogger(__name__)


@dataclass
class SimulationTask:
    index: int
    seed: int
    generator: Optional[GeneratorInput]
    parameters: Dict[str, Any]


@dataclass
class RunSample:
    """Scalars collected from one run."""
    index: int
    seed: int
    room_count: float
    path_length: float
    enemy_count: float
    item_count: float
    errors: List[str] = field(default_factory=list)
    constraints: List[Tuple[str, bool]] = field(default_factory=list)


def simulate_run(task: SimulationTask) -> RunSample:
    """Generate one layout and extract its metrics (module level for pickling)."""
    result = generate_once(
        GenerationRequest(seed=task.seed, generator=task.generator, parameters=task.parameters),
        check_topology=False,
    )
    layout = result.data
    return RunSample(
        index=task.index,
        seed=task.seed,
        room_count=float(len(layout.rooms)),
        path_length=float(len(layout.connections) + 1),
        enemy_count=float(len(layout.spawn_points)),
        item_count=0.0,
        errors=list(result.errors),
        constraints=[(c.constraint_id, c.passed) for c in result.constraint_results],
    )


def _prepare_generator(generator: Optional[GeneratorInput]) -> Optional[GeneratorInput]:
    """Parse the generator once up front; on failure keep the raw input so
    every run reports the same document error."""
    if generator is None or isinstance(generator, GeneratorDocument):
        document = generator
    else:
        try:
            document = GeneratorDocument.from_dict(generator)
        except GraphError as e:
            logger.warning(f"Generator document is invalid, every run will fall back: {e}")
            return generator

    if document is not None:
        is_valid, issues = validate_graph_topology(document.graph)
        if not is_valid:
            logger.warning(f"Generator '{document.id}' topology issues: {issues}")
    return document


def _collect(
    samples: Iterable[RunSample],
    cancel_event: Optional[threading.Event],
) -> Tuple[List[RunSample], bool]:
    collected = []
    iterator = iter(samples)
    while True:
        if cancel_event is not None and cancel_event.is_set():
            return collected, True
        try:
            collected.append(next(iterator))
        except StopIteration:
            return collected, False


def run_simulation(
    config: SimulationConfig,
    cancel_event: Optional[threading.Event] = None,
) -> SimulationResults:
    """
    Run config.run_count generations and summarize them.

    Args:
        config: Run count, seed start, generator, parameters, workers
        cancel_event: Best-effort stop signal checked between runs;
            completed runs are still summarized

    Returns:
        SimulationResults with per-metric DistributionStats
    """
    start = time.perf_counter()
    generator = _prepare_generator(config.generator)
    first_seed = config.first_seed

    tasks = [
        SimulationTask(i, first_seed + i, generator, dict(config.parameters))
        for i in range(config.run_count)
    ]

    logger.info(
        f"Simulating {config.run_count} runs from seed {first_seed} "
        f"({config.workers} worker{'s' if config.workers != 1 else ''})"
    )

    if config.workers > 1 and len(tasks) > 1:
        with mp.Pool(processes=min(config.workers, len(tasks))) as pool:
            samples, cancelled = _collect(pool.imap(simulate_run, tasks), cancel_event)
    else:
        samples, cancelled = _collect(map(simulate_run, tasks), cancel_event)

    samples.sort(key=lambda s: s.index)

    warnings = []
    constraint_passes: Dict[str, List[bool]] = {}
    for sample in samples:
        for error in sample.errors:
            warnings.append(f"Run {sample.index} (seed {sample.seed}): {error}")
        for constraint_id, passed in sample.constraints:
            constraint_passes.setdefault(constraint_id, []).append(passed)
    if cancelled:
        warnings.append(f"Simulation cancelled after {len(samples)} of {config.run_count} runs")

    statistics = SimulationStatistics(
        room_count=compute_distribution_stats([s.room_count for s in samples]),
        path_length=compute_distribution_stats([s.path_length for s in samples]),
        enemy_count=compute_distribution_stats([s.enemy_count for s in samples]),
        item_count=compute_distribution_stats([s.item_count for s in samples]),
    )
    constraint_results = {
        constraint_id: ConstraintStats(
            pass_rate=sum(passes) / len(passes),
            violations=len(passes) - sum(passes),
        )
        for constraint_id, passes in constraint_passes.items()
    }

    runs = len(samples)
    duration_ms = int((time.perf_counter() - start) * 1000)
    logger.info(
        f"Simulation finished: {runs} runs in {duration_ms}ms, "
        f"mean rooms {statistics.room_count.mean:.2f}, {len(warnings)} warnings"
    )

    return SimulationResults(
        config=config,
        runs=runs,
        success_rate=1.0,
        duration_ms=duration_ms,
        statistics=statistics,
        constraint_results=constraint_results,
        warnings=warnings,
    )
