"""
Request / Result Shapes
=======================

Dataclasses exchanged with the host application. Each has from_dict /
to_dict for the camelCase JSON the host speaks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from dungeon_forge.core.definitions import MAX_SEED
from dungeon_forge.core.layout import DungeonLayout
from dungeon_forge.evaluation.constraints import ConstraintResult
from dungeon_forge.evaluation.statistics import DistributionStats
from dungeon_forge.generation.node_graph import GeneratorDocument

GeneratorInput = Union[GeneratorDocument, Dict[str, Any]]


def _check_seed(seed: int, name: str = "seed") -> None:
    if isinstance(seed, bool) or not isinstance(seed, int) or not 0 <= seed < MAX_SEED:
        raise ValueError(f"{name} must be a 64-bit unsigned integer, got {seed!r}")


class GenerationPath(Enum):
    """Which generator produced the layout."""
    GRAPH = "graph"
    FALLBACK = "fallback"                          # No graph supplied
    FALLBACK_AFTER_ERROR = "fallback_after_error"  # Graph failed, fallback used


@dataclass
class GenerationRequest:
    """
    One generation call.

    Args:
        seed: 64-bit unsigned seed
        generator: Parsed GeneratorDocument or its raw dict (parsed lazily
            so document errors degrade to the fallback generator)
        generator_id: Id echoed by the host
        parameters: Free-form values; minRoomSize / maxRoomSize are read
    """
    seed: int
    generator: Optional[GeneratorInput] = None
    generator_id: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        _check_seed(self.seed)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GenerationRequest':
        return cls(
            seed=data['seed'],
            generator=data.get('generator'),
            generator_id=str(data.get('generatorId', '')),
            parameters=dict(data.get('parameters') or {}),
        )


@dataclass
class GenerationMetadata:
    node_executions: int = 0
    retry_count: int = 0  # No retry loop exists; always 0
    path: GenerationPath = GenerationPath.FALLBACK

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodeExecutions': self.node_executions,
            'retryCount': self.retry_count,
            'path': self.path.value,
        }


@dataclass
class GenerationResult:
    seed: int
    timestamp: int
    success: bool
    data: DungeonLayout
    constraint_results: List[ConstraintResult] = field(default_factory=list)
    metadata: GenerationMetadata = field(default_factory=GenerationMetadata)
    errors: List[str] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'seed': self.seed,
            'timestamp': self.timestamp,
            'success': self.success,
            'data': self.data.to_dict(),
            'constraintResults': [c.to_dict() for c in self.constraint_results],
            'metadata': self.metadata.to_dict(),
            'errors': list(self.errors),
            'durationMs': self.duration_ms,
        }


@dataclass
class SimulationConfig:
    """
    Batch simulation settings.

    Args:
        run_count: Number of generations
        seed_start: Seed of run 0 (run i uses seed_start + i); None means 0
        generator: Same as GenerationRequest.generator
        workers: Processes to spread runs over (1 = run in-process)
    """
    run_count: int
    generator_id: str = ""
    seed_start: Optional[int] = None
    parameters: Dict[str, Any] = field(default_factory=dict)
    generator: Optional[GeneratorInput] = None
    workers: int = 1

    def __post_init__(self):
        if self.run_count < 0:
            raise ValueError(f"run_count must not be negative, got {self.run_count}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.seed_start is not None:
            _check_seed(self.seed_start, "seed_start")
        if self.run_count:
            _check_seed(self.first_seed + self.run_count - 1, "last simulation seed")

    @property
    def first_seed(self) -> int:
        return self.seed_start if self.seed_start is not None else 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SimulationConfig':
        return cls(
            run_count=int(data['runCount']),
            generator_id=str(data.get('generatorId', '')),
            seed_start=data.get('seedStart'),
            parameters=dict(data.get('parameters') or {}),
            generator=data.get('generator'),
            workers=int(data.get('workers', 1)),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'generatorId': self.generator_id,
            'runCount': self.run_count,
            'parameters': dict(self.parameters),
            'workers': self.workers,
        }
        if self.seed_start is not None:
            data['seedStart'] = self.seed_start
        return data


@dataclass
class SimulationStatistics:
    room_count: DistributionStats = field(default_factory=DistributionStats)
    path_length: DistributionStats = field(default_factory=DistributionStats)
    enemy_count: DistributionStats = field(default_factory=DistributionStats)
    item_count: DistributionStats = field(default_factory=DistributionStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'roomCount': self.room_count.to_dict(),
            'pathLength': self.path_length.to_dict(),
            'enemyCount': self.enemy_count.to_dict(),
            'itemCount': self.item_count.to_dict(),
        }


@dataclass
class ConstraintStats:
    pass_rate: float
    violations: int

    def to_dict(self) -> Dict[str, Any]:
        return {'passRate': self.pass_rate, 'violations': self.violations}


@dataclass
class SimulationResults:
    config: SimulationConfig
    runs: int
    success_rate: float
    duration_ms: int
    statistics: SimulationStatistics
    constraint_results: Dict[str, ConstraintStats] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'config': self.config.to_dict(),
            'runs': self.runs,
            'successRate': self.success_rate,
            'durationMs': self.duration_ms,
            'statistics': self.statistics.to_dict(),
            'constraintResults': {k: v.to_dict() for k, v in self.constraint_results.items()},
            'warnings': list(self.warnings),
        }
