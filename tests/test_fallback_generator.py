"""
Tests for the seed-only fallback generator.
"""

import pytest

from dungeon_forge.core.rng import SeededRng
from dungeon_forge.generation.fallback_generator import generate_fallback_dungeon
from dungeon_forge.utils.graph_utils import is_layout_connected

SEEDS = list(range(30)) + [2 ** 63, 2 ** 64 - 1]


class TestFallbackDungeon:
    """Shape of fallback layouts across many seeds."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_room_count_and_ends(self, seed):
        layout = generate_fallback_dungeon(SeededRng(seed))

        assert 4 <= len(layout.rooms) <= 8
        assert layout.rooms[0].room_type == 'start'
        assert layout.rooms[-1].room_type == 'boss'
        for room in layout.rooms[1:-1]:
            assert room.room_type in ('default', 'treasure', 'boss', 'shop')

    @pytest.mark.parametrize("seed", SEEDS)
    def test_rooms_link_in_sequence(self, seed):
        layout = generate_fallback_dungeon(SeededRng(seed))

        assert len(layout.connections) == len(layout.rooms) - 1
        for i, conn in enumerate(layout.connections):
            assert conn.from_room_id == layout.rooms[i].id
            assert conn.to_room_id == layout.rooms[i + 1].id
        assert is_layout_connected(layout)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_room_sizes(self, seed):
        for room in generate_fallback_dungeon(SeededRng(seed)).rooms:
            assert 5 <= room.bounds.width < 10
            assert 5 <= room.bounds.height < 10

    @pytest.mark.parametrize("seed", SEEDS)
    def test_spawn_points(self, seed):
        layout = generate_fallback_dungeon(SeededRng(seed))

        per_room = {}
        for spawn in layout.spawn_points:
            room = layout.get_room(spawn.room_id)
            assert room is not None
            assert spawn.spawn_type == 'enemy'
            assert room.id != layout.rooms[0].id
            assert room.room_type != 'boss'
            center = room.center
            assert abs(spawn.position.x - center.x) <= 2
            assert abs(spawn.position.y - center.y) <= 2
            per_room[room.id] = per_room.get(room.id, 0) + 1

        for room in layout.rooms[1:-1]:
            if room.room_type != 'boss':
                assert 1 <= per_room.get(room.id, 0) <= 3

    def test_start_and_exit(self):
        layout = generate_fallback_dungeon(SeededRng(42))
        assert layout.player_start == layout.rooms[0].center
        assert layout.exits == [layout.rooms[-1].center]

    def test_deterministic(self):
        a = generate_fallback_dungeon(SeededRng(31337))
        b = generate_fallback_dungeon(SeededRng(31337))
        assert a.to_dict() == b.to_dict()

    def test_seeds_differ(self):
        layouts = {str(generate_fallback_dungeon(SeededRng(s)).to_dict()) for s in range(5)}
        assert len(layouts) == 5
