"""
Layout Data Model
=================

Output types of a generation run: rooms, connections, spawn points and the
final DungeonLayout. All coordinates are abstract world units (floats).

Every type round-trips through a camelCase dict (to_dict / from_dict) so a
host UI can consume the layout as JSON.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class LayoutPosition:
    """2D point in world units."""
    x: float = 0.0
    y: float = 0.0

    def copy(self) -> 'LayoutPosition':
        return LayoutPosition(self.x, self.y)

    def distance_to(self, other: 'LayoutPosition') -> float:
        return ((self.x - other.x) ** 2 + (self.y - other.y) ** 2) ** 0.5

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LayoutPosition':
        return cls(float(data.get('x', 0.0)), float(data.get('y', 0.0)))


@dataclass
class Rectangle:
    """Axis-aligned rectangle anchored at its top-left corner."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, point: LayoutPosition, padding: float = 0.0) -> bool:
        """Check if point lies inside the rectangle shrunk by `padding`."""
        return (self.x + padding <= point.x <= self.right - padding and
                self.y + padding <= point.y <= self.bottom - padding)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Rectangle':
        return cls(
            float(data['x']), float(data['y']),
            float(data['width']), float(data['height']),
        )


@dataclass
class PlacedEntity:
    """Entity (enemy, loot, ...) placed inside a room."""
    id: str
    entity_type: str
    position: LayoutPosition
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.entity_type,
            'position': self.position.to_dict(),
            'metadata': dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlacedEntity':
        return cls(
            id=data['id'],
            entity_type=data['type'],
            position=LayoutPosition.from_dict(data['position']),
            metadata=dict(data.get('metadata') or {}),
        )


@dataclass
class GeneratedRoom:
    """Rectangular room produced by a synthesizer."""
    id: str
    room_type: str
    bounds: Rectangle
    tiles: Optional[List[List[int]]] = None  # Not filled by the engine
    entities: List[PlacedEntity] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def center(self) -> LayoutPosition:
        return LayoutPosition(
            self.bounds.x + self.bounds.width / 2.0,
            self.bounds.y + self.bounds.height / 2.0,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.room_type,
            'bounds': self.bounds.to_dict(),
            'entities': [e.to_dict() for e in self.entities],
            'metadata': dict(self.metadata),
        }
        if self.tiles is not None:
            data['tiles'] = [list(row) for row in self.tiles]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeneratedRoom':
        return cls(
            id=data['id'],
            room_type=data['type'],
            bounds=Rectangle.from_dict(data['bounds']),
            tiles=data.get('tiles'),
            entities=[PlacedEntity.from_dict(e) for e in data.get('entities', [])],
            metadata=dict(data.get('metadata') or {}),
        )


@dataclass
class RoomConnection:
    """Door pair linking two rooms."""
    from_room_id: str
    to_room_id: str
    from_door: LayoutPosition
    to_door: LayoutPosition

    def to_dict(self) -> Dict[str, Any]:
        return {
            'fromRoomId': self.from_room_id,
            'toRoomId': self.to_room_id,
            'fromDoor': self.from_door.to_dict(),
            'toDoor': self.to_door.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RoomConnection':
        return cls(
            from_room_id=data['fromRoomId'],
            to_room_id=data['toRoomId'],
            from_door=LayoutPosition.from_dict(data['fromDoor']),
            to_door=LayoutPosition.from_dict(data['toDoor']),
        )


@dataclass
class SpawnPoint:
    id: str
    spawn_type: str
    position: LayoutPosition
    room_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.spawn_type,
            'position': self.position.to_dict(),
            'roomId': self.room_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SpawnPoint':
        return cls(
            id=data['id'],
            spawn_type=data['type'],
            position=LayoutPosition.from_dict(data['position']),
            room_id=data['roomId'],
        )


@dataclass
class DungeonLayout:
    """
    Final output of one generation run.

    The caller owns the layout outright; generators keep no reference.
    """
    rooms: List[GeneratedRoom] = field(default_factory=list)
    connections: List[RoomConnection] = field(default_factory=list)
    spawn_points: List[SpawnPoint] = field(default_factory=list)
    player_start: LayoutPosition = field(default_factory=LayoutPosition)
    exits: List[LayoutPosition] = field(default_factory=list)

    @classmethod
    def from_rooms(
        cls,
        rooms: List[GeneratedRoom],
        connections: List[RoomConnection],
        spawn_points: List[SpawnPoint],
    ) -> 'DungeonLayout':
        """Build a layout, deriving player start and exit from the room order."""
        player_start = rooms[0].center if rooms else LayoutPosition(0.0, 0.0)
        exits = [rooms[-1].center] if rooms else []
        return cls(
            rooms=rooms,
            connections=connections,
            spawn_points=spawn_points,
            player_start=player_start,
            exits=exits,
        )

    def get_room(self, room_id: str) -> Optional[GeneratedRoom]:
        for room in self.rooms:
            if room.id == room_id:
                return room
        return None

    @property
    def entity_count(self) -> int:
        return sum(len(room.entities) for room in self.rooms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rooms': [r.to_dict() for r in self.rooms],
            'connections': [c.to_dict() for c in self.connections],
            'spawnPoints': [s.to_dict() for s in self.spawn_points],
            'playerStart': self.player_start.to_dict(),
            'exits': [e.to_dict() for e in self.exits],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DungeonLayout':
        return cls(
            rooms=[GeneratedRoom.from_dict(r) for r in data.get('rooms', [])],
            connections=[RoomConnection.from_dict(c) for c in data.get('connections', [])],
            spawn_points=[SpawnPoint.from_dict(s) for s in data.get('spawnPoints', [])],
            player_start=LayoutPosition.from_dict(data.get('playerStart') or {}),
            exits=[LayoutPosition.from_dict(e) for e in data.get('exits', [])],
        )
