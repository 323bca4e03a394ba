"""
Room Synthesizer
================

Builds individual rooms, chains of rooms, door positions and in-room
entities from a RoomConfig and the run's SeededRng.

Every function takes the rng explicitly; the order of draws is part of the
determinism contract, so callers must not reorder calls between runs.

Usage:
    rng = SeededRng(42)
    room = RoomGenerator.generate(rng, RoomConfig(), LayoutPosition(0, 0), "room_0")
    RoomGenerator.add_entities(rng, room, "enemy", 2, 4)
"""

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional

from dungeon_forge.core.definitions import (
    CHAIN_JITTER_RANGE,
    CHAIN_RIGHTWARD_PROBABILITY,
    DEFAULT_MAX_ROOM_HEIGHT,
    DEFAULT_MAX_ROOM_WIDTH,
    DEFAULT_MIN_ROOM_HEIGHT,
    DEFAULT_MIN_ROOM_WIDTH,
    DEFAULT_ROOM_TYPE,
    DOOR_EDGE_RANGE,
    ENTITY_PADDING,
    ROOM_GAP_RANGE,
    Direction,
    RoomShape,
)
from dungeon_forge.core.layout import (
    GeneratedRoom,
    LayoutPosition,
    PlacedEntity,
    Rectangle,
)
from dungeon_forge.core.rng import SeededRng

logger = logging.getLogger(__name__)


@dataclass
class RoomConfig:
    """Size bounds and descriptive tags for synthesized rooms."""
    min_width: float = DEFAULT_MIN_ROOM_WIDTH
    max_width: float = DEFAULT_MAX_ROOM_WIDTH
    min_height: float = DEFAULT_MIN_ROOM_HEIGHT
    max_height: float = DEFAULT_MAX_ROOM_HEIGHT
    shape: RoomShape = RoomShape.RECTANGULAR
    room_type: str = DEFAULT_ROOM_TYPE
    tags: List[str] = field(default_factory=list)

    def with_size_overrides(
        self,
        min_size: Optional[float] = None,
        max_size: Optional[float] = None,
    ) -> 'RoomConfig':
        """
        Copy with both axes' bounds replaced by request-level overrides.

        Args:
            min_size: New min_width and min_height (None keeps current)
            max_size: New max_width and max_height (None keeps current)
        """
        config = self
        if min_size is not None:
            config = replace(config, min_width=min_size, min_height=min_size)
        if max_size is not None:
            config = replace(config, max_width=max_size, max_height=max_size)
        return config


class RoomGenerator:
    """Stateless room synthesis helpers."""

    @staticmethod
    def generate(
        rng: SeededRng,
        config: RoomConfig,
        base_position: LayoutPosition,
        room_id: str,
    ) -> GeneratedRoom:
        """
        Generate one room with its top-left corner at base_position.

        Args:
            rng: Run random stream
            config: Size bounds, type and tags
            base_position: Top-left corner of the new room
            room_id: Id assigned to the room

        Returns:
            GeneratedRoom with no entities yet
        """
        width = rng.uniform(config.min_width, config.max_width)
        height = rng.uniform(config.min_height, config.max_height)

        metadata = {'shape': config.shape.value}
        if config.tags:
            metadata['tags'] = list(config.tags)

        return GeneratedRoom(
            id=room_id,
            room_type=config.room_type,
            bounds=Rectangle(base_position.x, base_position.y, width, height),
            metadata=metadata,
        )

    @staticmethod
    def generate_chain(
        rng: SeededRng,
        count: int,
        config: RoomConfig,
        start_position: LayoutPosition,
        base_id: str,
        linear: bool,
    ) -> List[GeneratedRoom]:
        """
        Generate `count` rooms laid out one after another.

        Linear chains always step right. Non-linear chains step right with
        probability 0.7 (down otherwise) and wobble on both axes.
        """
        rooms = []
        cursor = start_position.copy()

        for i in range(count):
            room = RoomGenerator.generate(rng, config, cursor.copy(), f"{base_id}_{i}")

            if linear or rng.chance(CHAIN_RIGHTWARD_PROBABILITY):
                cursor.x += room.bounds.width + rng.uniform(*ROOM_GAP_RANGE)
            else:
                cursor.y += room.bounds.height + rng.uniform(*ROOM_GAP_RANGE)

            if not linear:
                cursor.x += rng.uniform(*CHAIN_JITTER_RANGE)
                cursor.y += rng.uniform(*CHAIN_JITTER_RANGE)

            rooms.append(room)

        return rooms

    @staticmethod
    def add_entities(
        rng: SeededRng,
        room: GeneratedRoom,
        entity_type: str,
        min_count: int,
        max_count: int,
    ) -> None:
        """Place a random number of entities inside room (mutates room)."""
        count = rng.randint(min_count, max_count)
        bounds = room.bounds

        for i in range(count):
            x = bounds.x + rng.uniform(ENTITY_PADDING, bounds.width - ENTITY_PADDING)
            y = bounds.y + rng.uniform(ENTITY_PADDING, bounds.height - ENTITY_PADDING)
            room.entities.append(PlacedEntity(
                id=f"{room.id}_{entity_type}_entity_{i}",
                entity_type=entity_type,
                position=LayoutPosition(x, y),
            ))

        logger.debug(f"Room {room.id}: placed {count} '{entity_type}' entities")

    @staticmethod
    def get_center(room: GeneratedRoom) -> LayoutPosition:
        return room.center

    @staticmethod
    def get_door_position(
        room: GeneratedRoom,
        direction: Direction,
        rng: SeededRng,
    ) -> LayoutPosition:
        """Point on the edge facing `direction`, kept off the corners."""
        bounds = room.bounds
        lo, hi = DOOR_EDGE_RANGE

        if direction is Direction.RIGHT:
            return LayoutPosition(bounds.right, bounds.y + rng.uniform(bounds.height * lo, bounds.height * hi))
        if direction is Direction.LEFT:
            return LayoutPosition(bounds.x, bounds.y + rng.uniform(bounds.height * lo, bounds.height * hi))
        if direction is Direction.DOWN:
            return LayoutPosition(bounds.x + rng.uniform(bounds.width * lo, bounds.width * hi), bounds.bottom)
        return LayoutPosition(bounds.x + rng.uniform(bounds.width * lo, bounds.width * hi), bounds.y)
