"""
Dungeon Forge Pipeline Module
=============================

Request-level entry points for the host application.

Usage:
    from dungeon_forge.pipeline import GenerationRequest, generate_once

    result = generate_once(GenerationRequest(seed=42, generator=document))
    print(f"Generated {len(result.data.rooms)} rooms via {result.metadata.path.value}")

    results = run_simulation(SimulationConfig(run_count=500, generator=document))
    print(f"Mean rooms: {results.statistics.room_count.mean:.1f}")
"""

from dungeon_forge.pipeline.models import (
    GenerationPath,
    GenerationRequest,
    GenerationMetadata,
    GenerationResult,
    SimulationConfig,
    SimulationStatistics,
    ConstraintStats,
    SimulationResults,
)
from dungeon_forge.pipeline.generation_pipeline import (
    StageStatus,
    StageResult,
    resolve_parameters,
    load_generator,
    run_graph_stage,
    run_fallback_stage,
    generate_once,
)
from dungeon_forge.pipeline.simulation import (
    SimulationTask,
    RunSample,
    simulate_run,
    run_simulation,
)

__all__ = [
    # Models
    'GenerationPath',
    'GenerationRequest',
    'GenerationMetadata',
    'GenerationResult',
    'SimulationConfig',
    'SimulationStatistics',
    'ConstraintStats',
    'SimulationResults',
    # Generation
    'StageStatus',
    'StageResult',
    'resolve_parameters',
    'load_generator',
    'run_graph_stage',
    'run_fallback_stage',
    'generate_once',
    # Simulation
    'SimulationTask',
    'RunSample',
    'simulate_run',
    'run_simulation',
]
