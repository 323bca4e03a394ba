"""
Fallback Procedural Generator
=============================

Seed-only dungeon generator used when a request carries no graph or the
graph fails to execute.

Algorithm:
1. Draw a room count in [4, 8]
2. First room is "start", last is "boss", the rest are drawn from
   default / treasure / boss / shop
3. Rooms wander right or down from the origin with random gaps
4. Each room links to its predecessor through fixed mid-edge doors
5. Rooms that are neither start nor boss get 1-3 enemy spawns near center

Output: DungeonLayout with len(rooms) - 1 connections
"""

import logging

from dungeon_forge.core.definitions import (
    BOSS_ROOM_TYPE,
    ENEMY_ENTITY,
    FALLBACK_DRIFT_RANGE,
    FALLBACK_GAP_RANGE,
    FALLBACK_INTERIOR_TYPES,
    FALLBACK_ROOM_COUNT,
    FALLBACK_ROOM_SIZE,
    FALLBACK_SPACING,
    FALLBACK_SPAWN_COUNT,
    FALLBACK_SPAWN_JITTER,
    START_ROOM_TYPE,
)
from dungeon_forge.core.layout import (
    DungeonLayout,
    GeneratedRoom,
    LayoutPosition,
    Rectangle,
    RoomConnection,
    SpawnPoint,
)
from dungeon_forge.core.rng import SeededRng

logger = logging.getLogger(__name__)


def generate_fallback_dungeon(rng: SeededRng) -> DungeonLayout:
    """
    Generate a simple room sequence from the random stream alone.

    Args:
        rng: Run random stream (consumed; pass a fresh one per run)

    Returns:
        DungeonLayout starting in a "start" room and ending in a "boss" room
    """
    room_count = rng.randint(*FALLBACK_ROOM_COUNT)
    rooms = []
    connections = []
    spawn_points = []

    x, y = 0.0, 0.0

    for i in range(room_count):
        if i == 0:
            room_type = START_ROOM_TYPE
        elif i == room_count - 1:
            room_type = BOSS_ROOM_TYPE
        else:
            room_type = rng.choice(FALLBACK_INTERIOR_TYPES)

        width = rng.uniform(*FALLBACK_ROOM_SIZE)
        height = rng.uniform(*FALLBACK_ROOM_SIZE)
        room = GeneratedRoom(
            id=f"room_{i}",
            room_type=room_type,
            bounds=Rectangle(x, y, width, height),
        )
        rooms.append(room)

        if i > 0 and room_type != BOSS_ROOM_TYPE:
            center = room.center
            for j in range(rng.randint(*FALLBACK_SPAWN_COUNT)):
                spawn_points.append(SpawnPoint(
                    id=f"spawn_{i}_{j}",
                    spawn_type=ENEMY_ENTITY,
                    position=LayoutPosition(
                        center.x + rng.uniform(*FALLBACK_SPAWN_JITTER),
                        center.y + rng.uniform(*FALLBACK_SPAWN_JITTER),
                    ),
                    room_id=room.id,
                ))

        if i > 0:
            prev = rooms[i - 1].bounds
            connections.append(RoomConnection(
                from_room_id=rooms[i - 1].id,
                to_room_id=room.id,
                from_door=LayoutPosition(prev.right, prev.y + prev.height / 2.0),
                to_door=LayoutPosition(x, y + height / 2.0),
            ))

        # Next room goes right, or down with an optional sideways drift
        if rng.chance(0.5):
            x += width + FALLBACK_SPACING + rng.uniform(*FALLBACK_GAP_RANGE)
        else:
            y += height + FALLBACK_SPACING + rng.uniform(*FALLBACK_GAP_RANGE)
            if rng.chance(0.5):
                x += rng.uniform(*FALLBACK_DRIFT_RANGE)

    logger.debug(f"Fallback dungeon: {len(rooms)} rooms, {len(spawn_points)} spawn points")
    return DungeonLayout.from_rooms(rooms, connections, spawn_points)
