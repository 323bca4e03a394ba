"""
Layout Constraint Checks
========================

Checks a finished DungeonLayout against the constraints a generator
declares, plus the built-in "connected" check every layout gets.

Supported constraint types and their parameters:
    connected    (none)                 room graph is one component
    count        target, roomType, entityType, min, max
    required     roomType               at least one room of that type
    forbidden    roomType               no room of that type
    distance     min, max               player start to first exit
    density      min, max               (entities + spawns) per room
    progression  -                      reported, not evaluated
    custom       -                      reported, not evaluated
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from dungeon_forge.core.definitions import ConstraintType
from dungeon_forge.core.layout import DungeonLayout
from dungeon_forge.generation.node_graph import Constraint
from dungeon_forge.utils.graph_utils import find_unreachable_rooms

logger = logging.getLogger(__name__)

CONNECTED_CONSTRAINT_ID = "connected"


@dataclass
class ConstraintResult:
    constraint_id: str
    passed: bool
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {'constraintId': self.constraint_id, 'passed': self.passed}
        if self.message is not None:
            data['message'] = self.message
        return data


def _bound(params: Dict[str, Any], key: str) -> Optional[float]:
    value = params.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _within(value: float, params: Dict[str, Any]) -> bool:
    lo = _bound(params, 'min')
    hi = _bound(params, 'max')
    if lo is not None and value < lo:
        return False
    if hi is not None and value > hi:
        return False
    return True


def _describe_range(params: Dict[str, Any]) -> str:
    lo = _bound(params, 'min')
    hi = _bound(params, 'max')
    return f"[{'-inf' if lo is None else lo}, {'inf' if hi is None else hi}]"


def check_connected(layout: DungeonLayout, constraint_id: str = CONNECTED_CONSTRAINT_ID) -> ConstraintResult:
    unreachable = find_unreachable_rooms(layout)
    if unreachable:
        return ConstraintResult(
            constraint_id, False,
            f"{len(unreachable)} rooms unreachable: {', '.join(unreachable)}",
        )
    return ConstraintResult(constraint_id, True, "All rooms reachable")


def _count_target(layout: DungeonLayout, params: Dict[str, Any]) -> float:
    target = params.get('target', 'rooms')
    room_type = params.get('roomType')
    entity_type = params.get('entityType')

    if target == 'rooms':
        return sum(1 for r in layout.rooms if room_type is None or r.room_type == room_type)
    if target == 'connections':
        return len(layout.connections)
    if target == 'spawnPoints':
        return sum(1 for s in layout.spawn_points if entity_type is None or s.spawn_type == entity_type)
    if target == 'entities':
        return sum(
            1 for r in layout.rooms for e in r.entities
            if entity_type is None or e.entity_type == entity_type
        )
    raise ValueError(f"Unknown count target '{target}'")


def evaluate_constraint(layout: DungeonLayout, constraint: Constraint) -> ConstraintResult:
    """Evaluate one declared constraint."""
    params = constraint.parameters
    ctype = constraint.constraint_type

    if ctype is ConstraintType.CONNECTED:
        result = check_connected(layout, constraint.id)
        passed, detail = result.passed, result.message
    elif ctype is ConstraintType.COUNT:
        try:
            value = _count_target(layout, params)
        except ValueError as e:
            return ConstraintResult(constraint.id, False, str(e))
        passed = _within(value, params)
        detail = f"count {value:g} in {_describe_range(params)}"
    elif ctype in (ConstraintType.REQUIRED, ConstraintType.FORBIDDEN):
        room_type = params.get('roomType')
        present = any(r.room_type == room_type for r in layout.rooms)
        passed = present if ctype is ConstraintType.REQUIRED else not present
        detail = f"room type '{room_type}' {'present' if present else 'absent'}"
    elif ctype is ConstraintType.DISTANCE:
        if not layout.exits:
            return ConstraintResult(constraint.id, False, constraint.error_message or "Layout has no exit")
        value = layout.player_start.distance_to(layout.exits[0])
        passed = _within(value, params)
        detail = f"start-to-exit distance {value:.2f} in {_describe_range(params)}"
    elif ctype is ConstraintType.DENSITY:
        content = layout.entity_count + len(layout.spawn_points)
        value = content / len(layout.rooms) if layout.rooms else 0.0
        passed = _within(value, params)
        detail = f"density {value:.2f} per room in {_describe_range(params)}"
    else:
        logger.debug(f"Constraint '{constraint.id}' ({ctype.value}) is not evaluated")
        return ConstraintResult(constraint.id, True, f"Constraint type '{ctype.value}' is not evaluated")

    if passed:
        return ConstraintResult(constraint.id, True, detail)
    return ConstraintResult(constraint.id, False, constraint.error_message or detail)


def evaluate_constraints(
    layout: DungeonLayout,
    constraints: Sequence[Constraint] = (),
) -> List[ConstraintResult]:
    """
    Evaluate the built-in connectivity check and every declared constraint.

    The built-in check is skipped when a declared constraint reuses its id.
    """
    results = []
    if not any(c.id == CONNECTED_CONSTRAINT_ID for c in constraints):
        results.append(check_connected(layout))
    for constraint in constraints:
        results.append(evaluate_constraint(layout, constraint))

    failed = [r.constraint_id for r in results if not r.passed]
    if failed:
        logger.debug(f"Constraints failed: {failed}")
    return results
