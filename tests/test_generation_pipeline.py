"""
Tests for single-request generation with graph fallback.
"""

import logging
import time

import pytest

from dungeon_forge.core.errors import GraphError
from dungeon_forge.core.rng import SeededRng
from dungeon_forge.generation.fallback_generator import generate_fallback_dungeon
from dungeon_forge.generation.node_graph import GeneratorDocument
from dungeon_forge.pipeline.generation_pipeline import (
    StageStatus,
    generate_once,
    load_generator,
    resolve_parameters,
    run_graph_stage,
)
from dungeon_forge.pipeline.models import GenerationPath, GenerationRequest

from graph_fixtures import chain_edges, document, edge, node, single_room_document

SIZE_PARAMETERS = [
    {'name': 'minRoomSize', 'type': 'number', 'default': 6, 'min': 3, 'max': 12},
    {'name': 'maxRoomSize', 'type': 'number', 'default': 6, 'min': 3, 'max': 12},
    {'name': 'theme', 'type': 'select', 'default': 'crypt', 'options': ['crypt', 'cave']},
]


def cyclic_document():
    return document(
        [node('s', 'start'), node('a', 'room'), node('b', 'room')],
        [edge('e0', 's', 'a'), edge('e1', 'a', 'b'), edge('e2', 'b', 'a')],
    )


class TestParameterResolution:
    """Declared defaults and clamping."""

    @pytest.fixture
    def doc(self):
        return GeneratorDocument.from_dict(single_room_document(parameters=SIZE_PARAMETERS))

    def test_defaults_fill_missing(self, doc):
        assert resolve_parameters(doc, {}) == {'minRoomSize': 6, 'maxRoomSize': 6, 'theme': 'crypt'}

    def test_numbers_clamped(self, doc):
        resolved = resolve_parameters(doc, {'minRoomSize': 1, 'maxRoomSize': 50})
        assert resolved['minRoomSize'] == 3
        assert resolved['maxRoomSize'] == 12

    def test_in_range_values_kept(self, doc):
        assert resolve_parameters(doc, {'minRoomSize': 4.5})['minRoomSize'] == 4.5

    def test_undeclared_and_non_numeric_pass_through(self, doc):
        resolved = resolve_parameters(doc, {'minRoomSize': 'big', 'extra': 1})
        assert resolved['minRoomSize'] == 'big'
        assert resolved['extra'] == 1

    def test_no_document(self):
        assert resolve_parameters(None, {'a': 1}) == {'a': 1}

    def test_request_not_mutated(self, doc):
        params = {'minRoomSize': 100}
        resolve_parameters(doc, params)
        assert params == {'minRoomSize': 100}


class TestGraphStage:
    """Stage 1 reports failures instead of raising."""

    def test_success(self):
        stage = run_graph_stage(single_room_document(), 5, {})
        assert stage.status is StageStatus.SUCCESS
        assert len(stage.layout.rooms) == 1
        assert stage.node_executions == 3
        assert stage.document.id == 'test-gen'

    def test_document_error(self):
        stage = run_graph_stage(single_room_document(minWidth='wide'), 5, {})
        assert stage.status is StageStatus.FAILED
        assert stage.document is None
        assert 'room1' in stage.error
        assert stage.node_executions == 0

    def test_execution_error_keeps_count(self):
        stage = run_graph_stage(cyclic_document(), 5, {})
        assert stage.status is StageStatus.FAILED
        assert stage.node_executions == 1001

    def test_load_generator_rejects_non_documents(self):
        with pytest.raises(GraphError):
            load_generator(['not', 'a', 'document'])


class TestGenerateOnce:
    """End-to-end single generation."""

    def test_no_generator_uses_fallback(self):
        result = generate_once(GenerationRequest(seed=9))

        assert result.success
        assert result.errors == []
        assert result.metadata.path is GenerationPath.FALLBACK
        assert result.metadata.node_executions == 0
        assert result.data.to_dict() == generate_fallback_dungeon(SeededRng(9)).to_dict()
        assert [c.constraint_id for c in result.constraint_results] == ['connected']

    def test_graph_generation(self):
        result = generate_once(GenerationRequest(seed=9, generator=single_room_document()))

        assert result.success
        assert result.metadata.path is GenerationPath.GRAPH
        assert result.metadata.node_executions == 3
        assert result.metadata.retry_count == 0
        assert len(result.data.rooms) == 1
        assert result.data.connections == []

    def test_accepts_parsed_document(self):
        doc = GeneratorDocument.from_dict(single_room_document())
        result = generate_once(GenerationRequest(seed=1, generator=doc))
        assert result.metadata.path is GenerationPath.GRAPH

    def test_failing_graph_falls_back(self):
        result = generate_once(GenerationRequest(seed=21, generator=document([node('a', 'room')], [])))

        assert not result.success
        assert result.metadata.path is GenerationPath.FALLBACK_AFTER_ERROR
        assert len(result.errors) == 1
        assert result.errors[0] == 'Graph execution error: No Start node found in graph'
        assert result.data.to_dict() == generate_fallback_dungeon(SeededRng(21)).to_dict()

    def test_malformed_document_falls_back(self):
        result = generate_once(GenerationRequest(seed=3, generator=single_room_document(maxWidth=True)))
        assert not result.success
        assert result.errors[0].startswith('Graph execution error: Node room1')
        assert 4 <= len(result.data.rooms) <= 8

    def test_loop_guard_reported(self):
        result = generate_once(GenerationRequest(seed=3, generator=cyclic_document()))
        assert not result.success
        assert result.metadata.node_executions == 1001
        assert 'Maximum node executions exceeded' in result.errors[0]

    def test_dense_cycles_fall_back_quickly(self, caplog):
        ids = [f"m{i}" for i in range(12)]
        nodes = [node('s', 'start')] + [node(i, 'merge') for i in ids]
        edges = [edge('in', 's', 'm0')] + [edge(f"{a}-{b}", a, b) for a in ids for b in ids if a != b]

        started = time.perf_counter()
        with caplog.at_level(logging.WARNING):
            result = generate_once(GenerationRequest(seed=5, generator=document(nodes, edges)))
        elapsed = time.perf_counter() - started

        assert elapsed < 5.0
        assert not result.success
        assert result.metadata.path is GenerationPath.FALLBACK_AFTER_ERROR
        assert 'Maximum node executions exceeded' in result.errors[0]
        topology = [r.getMessage() for r in caplog.records if 'topology issues' in r.getMessage()]
        assert len(topology) == 1
        assert len(topology[0]) < 1000

    @pytest.mark.parametrize("field, value", [
        ('inputs', None),
        ('metadata', 'x'),
        ('min', '1'),
    ])
    def test_wrong_json_kind_falls_back(self, field, value):
        data = single_room_document(parameters=[{'name': 'minRoomSize', 'type': 'number', 'default': 4}])
        if field == 'inputs':
            data['graph']['nodes'][1]['inputs'] = value
        elif field == 'metadata':
            data['graph']['edges'][0]['metadata'] = value
        else:
            data['parameters'][0]['min'] = value

        result = generate_once(GenerationRequest(seed=9, generator=data))

        assert not result.success
        assert result.metadata.path is GenerationPath.FALLBACK_AFTER_ERROR
        assert result.errors[0].startswith('Graph execution error:')
        assert f"'{field}'" in result.errors[0]
        assert result.data.to_dict() == generate_fallback_dungeon(SeededRng(9)).to_dict()

    def test_declared_parameters_shape_rooms(self):
        data = single_room_document(parameters=SIZE_PARAMETERS)
        result = generate_once(GenerationRequest(seed=4, generator=data))
        room = result.data.rooms[0]
        assert (room.bounds.width, room.bounds.height) == (6.0, 6.0)

        result = generate_once(GenerationRequest(
            seed=4, generator=data, parameters={'minRoomSize': 100, 'maxRoomSize': 100},
        ))
        assert result.data.rooms[0].bounds.width == 12.0

    def test_declared_constraints_evaluated(self):
        data = single_room_document(
            roomType='boss',
            constraints=[
                {'id': 'boss', 'type': 'required', 'parameters': {'roomType': 'boss'}},
                {'id': 'size', 'type': 'count', 'parameters': {'min': 2}, 'errorMessage': 'Too small'},
            ],
        )
        result = generate_once(GenerationRequest(seed=4, generator=data))
        outcomes = {c.constraint_id: (c.passed, c.message) for c in result.constraint_results}

        assert outcomes['connected'][0]
        assert outcomes['boss'][0]
        assert outcomes['size'] == (False, 'Too small')
        assert result.success

    def test_deterministic(self):
        data = document(
            [node('s', 'start'), node('c', 'room_chain', count=4, linear=False),
             node('e', 'encounter'), node('o', 'output')],
            chain_edges('s', 'c', 'e', 'o'),
        )
        a = generate_once(GenerationRequest(seed=2 ** 64 - 1, generator=data))
        b = generate_once(GenerationRequest(seed=2 ** 64 - 1, generator=data))
        assert a.data.to_dict() == b.data.to_dict()

    def test_to_dict(self):
        data = generate_once(GenerationRequest(seed=1)).to_dict()
        assert set(data) == {
            'seed', 'timestamp', 'success', 'data', 'constraintResults',
            'metadata', 'errors', 'durationMs',
        }
        assert data['metadata'] == {'nodeExecutions': 0, 'retryCount': 0, 'path': 'fallback'}
        assert set(data['data']) == {'rooms', 'connections', 'spawnPoints', 'playerStart', 'exits'}


class TestGenerationRequest:
    """Request validation."""

    @pytest.mark.parametrize("seed", [-1, 2 ** 64, 1.5, True])
    def test_rejects_bad_seed(self, seed):
        with pytest.raises(ValueError):
            GenerationRequest(seed=seed)

    def test_from_dict(self):
        request = GenerationRequest.from_dict({'seed': 8, 'generatorId': 'g', 'parameters': {'a': 1}})
        assert (request.seed, request.generator_id, request.parameters) == (8, 'g', {'a': 1})
        assert request.generator is None
