"""
DUNGEON FORGE DEFINITIONS
=========================
Central constants and type definitions for the generation engine.

This file is the SINGLE SOURCE OF TRUTH for:
- Node type tags used by graph documents
- Cursor directions and room shapes
- Room / spacing defaults for the synthesizers
- Execution guard and statistics constants

Import from here instead of duplicating constants across modules.
"""

from enum import Enum
from typing import Tuple


# ==========================================
# NODE TYPES
# ==========================================

class NodeType(Enum):
    """Node type tags as written by the graph editor (snake_case on the wire)."""
    # Structural
    START = "start"
    OUTPUT = "output"
    SUBGRAPH = "subgraph"
    # Room / space
    ROOM = "room"
    ROOM_CHAIN = "room_chain"
    BRANCH = "branch"
    MERGE = "merge"
    # Content
    SPAWN_POINT = "spawn_point"
    LOOT_DROP = "loot_drop"
    ENCOUNTER = "encounter"
    PROP = "prop"
    # Logic
    RANDOM_SELECT = "random_select"
    SEQUENCE = "sequence"
    CONDITION = "condition"
    LOOP = "loop"
    # Distribution
    DISTRIBUTION = "distribution"
    CURVE = "curve"
    TABLE = "table"


class GeneratorType(Enum):
    DUNGEON = "dungeon"
    LOOT = "loot"
    ENCOUNTER = "encounter"
    CUSTOM = "custom"


class ConstraintType(Enum):
    DISTANCE = "distance"
    COUNT = "count"
    DENSITY = "density"
    PROGRESSION = "progression"
    REQUIRED = "required"
    FORBIDDEN = "forbidden"
    CONNECTED = "connected"
    CUSTOM = "custom"


class ConstraintSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"


class ParameterType(Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"


# ==========================================
# CURSOR DIRECTION
# ==========================================

class Direction(Enum):
    """Axis-aligned facing of the placement cursor."""
    RIGHT = "right"
    LEFT = "left"
    UP = "up"
    DOWN = "down"

    def opposite(self) -> 'Direction':
        return _OPPOSITES[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.RIGHT, Direction.LEFT)


_OPPOSITES = {
    Direction.RIGHT: Direction.LEFT,
    Direction.LEFT: Direction.RIGHT,
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
}

# Branch i takes BRANCH_DIRECTIONS[i % 4]
BRANCH_DIRECTIONS: Tuple[Direction, ...] = (
    Direction.RIGHT,
    Direction.DOWN,
    Direction.LEFT,
    Direction.UP,
)


# ==========================================
# ROOM SHAPES
# ==========================================

class RoomShape(Enum):
    """Room outline tag. Only recorded in metadata; bounds stay rectangular."""
    RECTANGULAR = "Rectangular"
    L_SHAPED = "LShaped"
    CIRCULAR = "Circular"
    IRREGULAR = "Irregular"

    @classmethod
    def parse(cls, text: str) -> 'RoomShape':
        """Case-insensitive lookup; unknown names map to RECTANGULAR."""
        return _SHAPE_ALIASES.get(str(text).lower(), cls.RECTANGULAR)


_SHAPE_ALIASES = {
    'l-shaped': RoomShape.L_SHAPED,
    'lshaped': RoomShape.L_SHAPED,
    'circular': RoomShape.CIRCULAR,
    'circle': RoomShape.CIRCULAR,
    'irregular': RoomShape.IRREGULAR,
}


# ==========================================
# ROOM DEFAULTS
# ==========================================

DEFAULT_MIN_ROOM_WIDTH = 5.0
DEFAULT_MAX_ROOM_WIDTH = 10.0
DEFAULT_MIN_ROOM_HEIGHT = 5.0
DEFAULT_MAX_ROOM_HEIGHT = 10.0
DEFAULT_ROOM_TYPE = "default"

ROOM_GAP_RANGE = (3.0, 8.0)         # Spacing between consecutive graph rooms
CHAIN_JITTER_RANGE = (-2.0, 2.0)    # Non-linear chain wobble, both axes
CHAIN_RIGHTWARD_PROBABILITY = 0.7   # Non-linear chains still prefer moving right
BRANCH_OFFSET = 15.0                # Perpendicular offset per branch index
DOOR_EDGE_RANGE = (0.25, 0.75)      # Doors sit on the middle half of an edge
ENTITY_PADDING = 1.5                # Entities keep this far from walls
SPAWN_POINT_PADDING = 1.0           # Spawn points keep this far from walls

# Node-local defaults
DEFAULT_CHAIN_COUNT = 3
DEFAULT_CHAIN_LINEAR = True
DEFAULT_SPAWN_TYPE = "enemy"
DEFAULT_ENEMY_COUNT = 2
DEFAULT_ITEM_COUNT = 1
DEFAULT_LOOP_ITERATIONS = 3

ENEMY_ENTITY = "enemy"
LOOT_ENTITY = "loot"


# ==========================================
# FALLBACK GENERATOR
# ==========================================

FALLBACK_ROOM_COUNT = (4, 8)                    # Inclusive
FALLBACK_ROOM_SIZE = (5.0, 10.0)                # Half-open, both axes
FALLBACK_INTERIOR_TYPES = ("default", "treasure", "boss", "shop")
FALLBACK_SPACING = 5.0
FALLBACK_GAP_RANGE = (0.0, 10.0)
FALLBACK_DRIFT_RANGE = (-5.0, 5.0)
FALLBACK_SPAWN_COUNT = (1, 3)                   # Inclusive
FALLBACK_SPAWN_JITTER = (-2.0, 2.0)

START_ROOM_TYPE = "start"
BOSS_ROOM_TYPE = "boss"


# ==========================================
# EXECUTION / STATISTICS
# ==========================================

MAX_NODE_EXECUTIONS = 1000
MAX_REPORTED_CYCLES = 5  # Topology validation lists at most this many cycles
HISTOGRAM_BUCKETS = 10
PERCENTILES = (5, 25, 75, 95)
MAX_SEED = 2 ** 64
