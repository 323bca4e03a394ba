"""
Dungeon Forge Generation Module
===============================

Layout synthesis from node graphs:
- node_graph: Generator documents parsed into typed nodes and edges
- room_generator: Room, chain, door and entity synthesis
- graph_executor: Deterministic node-graph interpreter
- fallback_generator: Seed-only generator used without a usable graph
"""

from .node_graph import (
    NodeGraph,
    GraphNode,
    Edge,
    Port,
    PortRef,
    NodeGroup,
    GeneratorDocument,
    Constraint,
    Parameter,
    RoomChainConfig,
    SpawnPointConfig,
    EncounterConfig,
    LootDropConfig,
    LoopConfig,
    parse_node_config,
)
from .room_generator import RoomConfig, RoomGenerator
from .graph_executor import ExecutionContext, GraphExecutor
from .fallback_generator import generate_fallback_dungeon

__all__ = [
    # Documents
    'NodeGraph',
    'GraphNode',
    'Edge',
    'Port',
    'PortRef',
    'NodeGroup',
    'GeneratorDocument',
    'Constraint',
    'Parameter',
    'RoomChainConfig',
    'SpawnPointConfig',
    'EncounterConfig',
    'LootDropConfig',
    'LoopConfig',
    'parse_node_config',
    # Synthesis
    'RoomConfig',
    'RoomGenerator',
    'ExecutionContext',
    'GraphExecutor',
    'generate_fallback_dungeon',
]
