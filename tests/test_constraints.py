"""
Tests for layout constraint evaluation.
"""

import pytest

from dungeon_forge.core.layout import (
    DungeonLayout,
    GeneratedRoom,
    LayoutPosition,
    PlacedEntity,
    Rectangle,
    RoomConnection,
    SpawnPoint,
)
from dungeon_forge.evaluation.constraints import (
    CONNECTED_CONSTRAINT_ID,
    check_connected,
    evaluate_constraint,
    evaluate_constraints,
)
from dungeon_forge.generation.node_graph import Constraint


def make_room(room_id, room_type='default', x=0.0, entities=0):
    room = GeneratedRoom(room_id, room_type, Rectangle(x, 0.0, 10.0, 10.0))
    for i in range(entities):
        room.entities.append(PlacedEntity(f"{room_id}_e{i}", 'enemy', LayoutPosition(x + 5, 5)))
    return room


def link(a, b):
    return RoomConnection(a, b, LayoutPosition(), LayoutPosition())


@pytest.fixture
def layout():
    """start -> default -> boss, 20 units apart, 3 entities and 1 spawn."""
    rooms = [
        make_room('r0', 'start', 0.0),
        make_room('r1', 'default', 20.0, entities=3),
        make_room('r2', 'boss', 40.0),
    ]
    spawns = [SpawnPoint('spawn_0', 'enemy', LayoutPosition(25, 5), 'r1')]
    return DungeonLayout.from_rooms(rooms, [link('r0', 'r1'), link('r1', 'r2')], spawns)


def constraint(constraint_id, ctype, error_message='', **params):
    return Constraint.from_dict({
        'id': constraint_id, 'type': ctype,
        'parameters': params, 'errorMessage': error_message,
    })


class TestConnected:
    """Built-in connectivity check."""

    def test_connected_layout(self, layout):
        result = check_connected(layout)
        assert result.passed
        assert result.constraint_id == CONNECTED_CONSTRAINT_ID

    def test_disconnected_layout(self, layout):
        layout.connections = layout.connections[:1]
        result = check_connected(layout)
        assert not result.passed
        assert 'r2' in result.message

    def test_empty_layout_is_connected(self):
        assert check_connected(DungeonLayout()).passed

    def test_builtin_always_reported(self, layout):
        results = evaluate_constraints(layout)
        assert [r.constraint_id for r in results] == ['connected']

    def test_declared_connected_replaces_builtin(self, layout):
        layout.connections = []
        results = evaluate_constraints(layout, [constraint('connected', 'connected', 'Rooms split')])
        assert len(results) == 1
        assert not results[0].passed
        assert results[0].message == 'Rooms split'


class TestDeclaredConstraints:
    """Declared constraint types."""

    def test_count_rooms(self, layout):
        assert evaluate_constraint(layout, constraint('c', 'count', min=3, max=3)).passed
        assert not evaluate_constraint(layout, constraint('c', 'count', min=4)).passed

    def test_count_by_room_type(self, layout):
        assert evaluate_constraint(layout, constraint('c', 'count', roomType='boss', min=1, max=1)).passed

    def test_count_other_targets(self, layout):
        assert evaluate_constraint(layout, constraint('c', 'count', target='connections', min=2, max=2)).passed
        assert evaluate_constraint(layout, constraint('c', 'count', target='spawnPoints', min=1, max=1)).passed
        assert evaluate_constraint(layout, constraint('c', 'count', target='entities', min=3, max=3)).passed
        assert evaluate_constraint(
            layout, constraint('c', 'count', target='entities', entityType='loot', max=0)
        ).passed

    def test_count_unknown_target(self, layout):
        result = evaluate_constraint(layout, constraint('c', 'count', target='doors'))
        assert not result.passed
        assert 'doors' in result.message

    def test_required_and_forbidden(self, layout):
        assert evaluate_constraint(layout, constraint('r', 'required', roomType='boss')).passed
        assert not evaluate_constraint(layout, constraint('r', 'required', roomType='shop')).passed
        assert evaluate_constraint(layout, constraint('f', 'forbidden', roomType='shop')).passed
        assert not evaluate_constraint(layout, constraint('f', 'forbidden', roomType='start')).passed

    def test_distance(self, layout):
        # Centers at x=5 and x=45
        assert evaluate_constraint(layout, constraint('d', 'distance', min=39, max=41)).passed
        assert not evaluate_constraint(layout, constraint('d', 'distance', max=30)).passed

    def test_distance_without_exit(self):
        result = evaluate_constraint(DungeonLayout(), constraint('d', 'distance', min=1))
        assert not result.passed

    def test_density(self, layout):
        # (3 entities + 1 spawn) / 3 rooms
        assert evaluate_constraint(layout, constraint('d', 'density', min=1.3, max=1.4)).passed
        assert not evaluate_constraint(layout, constraint('d', 'density', min=2)).passed

    @pytest.mark.parametrize("ctype", ['progression', 'custom'])
    def test_unevaluated_types_pass(self, layout, ctype):
        result = evaluate_constraint(layout, constraint('x', ctype))
        assert result.passed
        assert 'not evaluated' in result.message

    def test_failure_uses_error_message(self, layout):
        result = evaluate_constraint(layout, constraint('shop', 'required', 'Needs a shop', roomType='shop'))
        assert result.message == 'Needs a shop'

    def test_failure_without_error_message_describes(self, layout):
        result = evaluate_constraint(layout, constraint('shop', 'required', roomType='shop'))
        assert "'shop' absent" in result.message

    def test_results_in_declaration_order(self, layout):
        results = evaluate_constraints(layout, [
            constraint('a', 'required', roomType='boss'),
            constraint('b', 'forbidden', roomType='boss'),
        ])
        assert [(r.constraint_id, r.passed) for r in results] == [
            ('connected', True), ('a', True), ('b', False),
        ]

    def test_result_to_dict(self, layout):
        data = evaluate_constraints(layout)[0].to_dict()
        assert data == {'constraintId': 'connected', 'passed': True, 'message': 'All rooms reachable'}
