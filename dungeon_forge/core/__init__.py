"""
Dungeon Forge Core Module
=========================

Shared building blocks for every generator:
- definitions: Node types, directions, shapes and engine constants
- errors: Named graph loading / execution errors
- rng: Seeded deterministic random stream
- layout: Rooms, connections, spawn points and the DungeonLayout output

Usage:
    from dungeon_forge.core import SeededRng, DungeonLayout, NodeType
"""

from dungeon_forge.core.definitions import (
    NodeType,
    GeneratorType,
    ConstraintType,
    ConstraintSeverity,
    ParameterType,
    Direction,
    RoomShape,
    MAX_NODE_EXECUTIONS,
)
from dungeon_forge.core.errors import (
    GraphError,
    GraphDocumentError,
    NodeConfigError,
    MissingEntryNodeError,
    NodeNotFoundError,
    ExecutionLimitError,
)
from dungeon_forge.core.rng import SeededRng
from dungeon_forge.core.layout import (
    LayoutPosition,
    Rectangle,
    PlacedEntity,
    GeneratedRoom,
    RoomConnection,
    SpawnPoint,
    DungeonLayout,
)

__all__ = [
    # Definitions
    'NodeType',
    'GeneratorType',
    'ConstraintType',
    'ConstraintSeverity',
    'ParameterType',
    'Direction',
    'RoomShape',
    'MAX_NODE_EXECUTIONS',
    # Errors
    'GraphError',
    'GraphDocumentError',
    'NodeConfigError',
    'MissingEntryNodeError',
    'NodeNotFoundError',
    'ExecutionLimitError',
    # RNG
    'SeededRng',
    # Layout
    'LayoutPosition',
    'Rectangle',
    'PlacedEntity',
    'GeneratedRoom',
    'RoomConnection',
    'SpawnPoint',
    'DungeonLayout',
]
