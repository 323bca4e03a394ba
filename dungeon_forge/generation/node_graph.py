"""
Node Graph Documents
====================

Parses the generator documents written by the graph editor into typed,
immutable-by-convention Python objects.

Each node's free-form `data` mapping is parsed ONCE here into a typed
config for its variant (RoomConfig, RoomChainConfig, ...). A key that is
present but of the wrong kind raises NodeConfigError at load time; an
absent key takes its default.

Wire format (camelCase, as produced by the editor):
    {
        "id": "gen", "name": "Crypt", "type": "dungeon",
        "graph": {
            "nodes": [{"id": "start", "type": "start",
                       "position": {"x": 0, "y": 0},
                       "data": {"label": "Start"},
                       "inputs": [], "outputs": [...]}],
            "edges": [{"id": "e1",
                       "source": {"nodeId": "start", "portId": "out"},
                       "target": {"nodeId": "room1", "portId": "in"}}]
        },
        "constraints": [...], "parameters": [...]
    }
"""

import logging
import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import networkx as nx

from dungeon_forge.core.definitions import (
    DEFAULT_CHAIN_COUNT,
    DEFAULT_CHAIN_LINEAR,
    DEFAULT_ENEMY_COUNT,
    DEFAULT_ITEM_COUNT,
    DEFAULT_LOOP_ITERATIONS,
    DEFAULT_SPAWN_TYPE,
    ConstraintSeverity,
    ConstraintType,
    GeneratorType,
    NodeType,
    ParameterType,
    RoomShape,
)
from dungeon_forge.core.errors import (
    GraphDocumentError,
    MissingEntryNodeError,
    NodeConfigError,
)
from dungeon_forge.generation.room_generator import RoomConfig

logger = logging.getLogger(__name__)


# ============================================================================
# TYPED NODE CONFIGS
# ============================================================================

@dataclass(frozen=True)
class RoomChainConfig:
    room: RoomConfig
    count: int = DEFAULT_CHAIN_COUNT
    linear: bool = DEFAULT_CHAIN_LINEAR


@dataclass(frozen=True)
class SpawnPointConfig:
    spawn_type: str = DEFAULT_SPAWN_TYPE


@dataclass(frozen=True)
class EncounterConfig:
    enemy_count: int = DEFAULT_ENEMY_COUNT


@dataclass(frozen=True)
class LootDropConfig:
    item_count: int = DEFAULT_ITEM_COUNT


@dataclass(frozen=True)
class LoopConfig:
    iterations: int = DEFAULT_LOOP_ITERATIONS


NodeConfig = Union[
    RoomConfig, RoomChainConfig, SpawnPointConfig,
    EncounterConfig, LootDropConfig, LoopConfig, None,
]


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _read_number(node_id: str, extra: Dict[str, Any], key: str, default: float) -> float:
    if key not in extra or extra[key] is None:
        return default
    value = extra[key]
    if not _is_number(value):
        raise NodeConfigError(node_id, key, f"expected a number, got {value!r}")
    return float(value)


def _read_count(node_id: str, extra: Dict[str, Any], key: str, default: int) -> int:
    if key not in extra or extra[key] is None:
        return default
    value = extra[key]
    if not _is_number(value) or not float(value).is_integer():
        raise NodeConfigError(node_id, key, f"expected a whole number, got {value!r}")
    if value < 0:
        raise NodeConfigError(node_id, key, f"must not be negative, got {value!r}")
    return int(value)


def _read_bool(node_id: str, extra: Dict[str, Any], key: str, default: bool) -> bool:
    if key not in extra or extra[key] is None:
        return default
    value = extra[key]
    if not isinstance(value, bool):
        raise NodeConfigError(node_id, key, f"expected true/false, got {value!r}")
    return value


def _read_str(node_id: str, extra: Dict[str, Any], key: str, default: str) -> str:
    if key not in extra or extra[key] is None:
        return default
    value = extra[key]
    if not isinstance(value, str):
        raise NodeConfigError(node_id, key, f"expected a string, got {value!r}")
    return value


def _read_room_config(node_id: str, extra: Dict[str, Any]) -> RoomConfig:
    defaults = RoomConfig()

    tags = extra.get('tags')
    if tags is None:
        tags = []
    elif not isinstance(tags, list):
        raise NodeConfigError(node_id, 'tags', f"expected a list, got {tags!r}")
    # Non-string tags are dropped, matching how the editor stores free text
    tags = [t for t in tags if isinstance(t, str)]

    return RoomConfig(
        min_width=_read_number(node_id, extra, 'minWidth', defaults.min_width),
        max_width=_read_number(node_id, extra, 'maxWidth', defaults.max_width),
        min_height=_read_number(node_id, extra, 'minHeight', defaults.min_height),
        max_height=_read_number(node_id, extra, 'maxHeight', defaults.max_height),
        shape=RoomShape.parse(_read_str(node_id, extra, 'shape', 'rectangular')),
        room_type=_read_str(node_id, extra, 'roomType', defaults.room_type),
        tags=tags,
    )


def parse_node_config(node_id: str, node_type: NodeType, extra: Dict[str, Any]) -> NodeConfig:
    """
    Parse the free-form node data into the typed config for its variant.

    Returns None for variants that carry no configuration.

    Raises:
        NodeConfigError: A known key holds a value of the wrong kind
    """
    if node_type is NodeType.ROOM:
        return _read_room_config(node_id, extra)
    if node_type is NodeType.ROOM_CHAIN:
        return RoomChainConfig(
            room=_read_room_config(node_id, extra),
            count=_read_count(node_id, extra, 'count', DEFAULT_CHAIN_COUNT),
            linear=_read_bool(node_id, extra, 'linear', DEFAULT_CHAIN_LINEAR),
        )
    if node_type is NodeType.SPAWN_POINT:
        return SpawnPointConfig(_read_str(node_id, extra, 'spawnType', DEFAULT_SPAWN_TYPE))
    if node_type is NodeType.ENCOUNTER:
        return EncounterConfig(_read_count(node_id, extra, 'enemyCount', DEFAULT_ENEMY_COUNT))
    if node_type is NodeType.LOOT_DROP:
        return LootDropConfig(_read_count(node_id, extra, 'itemCount', DEFAULT_ITEM_COUNT))
    if node_type is NodeType.LOOP:
        return LoopConfig(_read_count(node_id, extra, 'iterations', DEFAULT_LOOP_ITERATIONS))
    return None


# ============================================================================
# GRAPH STRUCTURES
# ============================================================================

def _require(data: Dict[str, Any], key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise GraphDocumentError(f"{where}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise GraphDocumentError(f"{where}: missing required key '{key}'")
    return data[key]


def _parse_enum(enum_cls, value: Any, where: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise GraphDocumentError(f"{where}: unknown {enum_cls.__name__} '{value}'") from None


def _read_list(data: Dict[str, Any], key: str, where: str) -> List[Any]:
    """data[key] as a list; an absent key reads as empty, null does not."""
    if key not in data:
        return []
    value = data[key]
    if not isinstance(value, list):
        raise GraphDocumentError(f"{where}: '{key}' must be a list, got {type(value).__name__}")
    return value


def _read_object(data: Dict[str, Any], key: str, where: str) -> Dict[str, Any]:
    """Shallow copy of data[key] as a dict; absent or null reads as empty."""
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise GraphDocumentError(f"{where}: '{key}' must be an object, got {type(value).__name__}")
    return dict(value)


def _read_bound(data: Dict[str, Any], key: str, where: str) -> Optional[float]:
    value = data.get(key)
    if value is None:
        return None
    if not _is_number(value):
        raise GraphDocumentError(f"{where}: '{key}' must be a number, got {value!r}")
    return value


@dataclass(frozen=True)
class PortRef:
    node_id: str
    port_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str) -> 'PortRef':
        return cls(
            node_id=str(_require(data, 'nodeId', where)),
            port_id=str(_require(data, 'portId', where)),
        )

    def to_dict(self) -> Dict[str, str]:
        return {'nodeId': self.node_id, 'portId': self.port_id}


@dataclass(frozen=True)
class Port:
    id: str
    port_type: str  # 'input' | 'output'
    data_type: str
    label: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], where: str) -> 'Port':
        port_type = str(_require(data, 'type', where))
        if port_type not in ('input', 'output'):
            raise GraphDocumentError(f"{where}: unknown port type '{port_type}'")
        return cls(
            id=str(_require(data, 'id', where)),
            port_type=port_type,
            data_type=str(data.get('dataType', 'flow')),
            label=data.get('label'),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'type': self.port_type, 'dataType': self.data_type}
        if self.label is not None:
            data['label'] = self.label
        return data


@dataclass(frozen=True)
class Edge:
    id: str
    source: PortRef
    target: PortRef
    label: Optional[str] = None
    animated: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Edge':
        edge_id = str(_require(data, 'id', 'edge'))
        where = f"edge {edge_id}"
        metadata = _read_object(data, 'metadata', where)
        return cls(
            id=edge_id,
            source=PortRef.from_dict(_require(data, 'source', where), where),
            target=PortRef.from_dict(_require(data, 'target', where), where),
            label=metadata.get('label'),
            animated=bool(metadata.get('animated', False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {'id': self.id, 'source': self.source.to_dict(), 'target': self.target.to_dict()}
        if self.label is not None or self.animated:
            data['metadata'] = {'label': self.label, 'animated': self.animated}
        return data


@dataclass
class GraphNode:
    """Node in the generator graph with its parsed config."""
    id: str
    node_type: NodeType
    label: str = ""
    config: NodeConfig = None
    extra: Dict[str, Any] = field(default_factory=dict)  # Raw data minus label
    position: Dict[str, float] = field(default_factory=lambda: {'x': 0.0, 'y': 0.0})
    inputs: List[Port] = field(default_factory=list)
    outputs: List[Port] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GraphNode':
        node_id = str(_require(data, 'id', 'node'))
        where = f"node {node_id}"
        node_type = _parse_enum(NodeType, _require(data, 'type', where), where)

        node_data = _read_object(data, 'data', where)
        label = str(node_data.pop('label', ''))

        return cls(
            id=node_id,
            node_type=node_type,
            label=label,
            config=parse_node_config(node_id, node_type, node_data),
            extra=node_data,
            position=_read_object(data, 'position', where) or {'x': 0.0, 'y': 0.0},
            inputs=[Port.from_dict(p, where) for p in _read_list(data, 'inputs', where)],
            outputs=[Port.from_dict(p, where) for p in _read_list(data, 'outputs', where)],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.node_type.value,
            'position': dict(self.position),
            'data': {'label': self.label, **self.extra},
            'inputs': [p.to_dict() for p in self.inputs],
            'outputs': [p.to_dict() for p in self.outputs],
        }


@dataclass(frozen=True)
class NodeGroup:
    id: str
    name: str
    node_ids: List[str]
    color: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NodeGroup':
        group_id = str(_require(data, 'id', 'group'))
        return cls(
            id=group_id,
            name=str(data.get('name', '')),
            node_ids=[str(n) for n in _read_list(data, 'nodeIds', f"group {group_id}")],
            color=data.get('color'),
        )


class NodeGraph:
    """
    Nodes plus ordered edges. Outgoing edges keep document order, which
    the interpreter relies on for sequence / branch semantics.
    """

    def __init__(
        self,
        nodes: List[GraphNode],
        edges: List[Edge],
        groups: Optional[List[NodeGroup]] = None,
    ):
        self.nodes = list(nodes)
        self.edges = list(edges)
        self.groups = list(groups or [])

        self._nodes_by_id: Dict[str, GraphNode] = {}
        for node in self.nodes:
            if node.id in self._nodes_by_id:
                raise GraphDocumentError(f"Duplicate node id '{node.id}'")
            self._nodes_by_id[node.id] = node

        self._outgoing: Dict[str, List[Edge]] = {}
        for edge in self.edges:
            self._outgoing.setdefault(edge.source.node_id, []).append(edge)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NodeGraph':
        if not isinstance(data, dict):
            raise GraphDocumentError("graph: expected an object")
        return cls(
            nodes=[GraphNode.from_dict(n) for n in _read_list(data, 'nodes', 'graph')],
            edges=[Edge.from_dict(e) for e in _read_list(data, 'edges', 'graph')],
            groups=[NodeGroup.from_dict(g) for g in _read_list(data, 'groups', 'graph')],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
            'groups': [
                {'id': g.id, 'name': g.name, 'nodeIds': list(g.node_ids), 'color': g.color}
                for g in self.groups
            ],
        }

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        return self._nodes_by_id.get(node_id)

    def outgoing_edges(self, node_id: str) -> List[Edge]:
        return list(self._outgoing.get(node_id, []))

    def nodes_of_type(self, node_type: NodeType) -> List[GraphNode]:
        return [n for n in self.nodes if n.node_type is node_type]

    def find_entry_node(self) -> GraphNode:
        """
        Return the unique Start node.

        Raises:
            MissingEntryNodeError: No Start node exists
            GraphDocumentError: More than one Start node exists
        """
        starts = self.nodes_of_type(NodeType.START)
        if not starts:
            raise MissingEntryNodeError()
        if len(starts) > 1:
            ids = ", ".join(n.id for n in starts)
            raise GraphDocumentError(f"Graph has {len(starts)} Start nodes ({ids}); exactly one is required")
        return starts[0]

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Convert to a NetworkX MultiDiGraph for topology analysis.

        Edge keys are edge ids. Edges whose endpoints are missing create
        bare nodes flagged with missing=True.
        """
        G = nx.MultiDiGraph()
        for node in self.nodes:
            G.add_node(node.id, node_type=node.node_type.value, label=node.label)
        for edge in self.edges:
            for endpoint in (edge.source.node_id, edge.target.node_id):
                if endpoint not in G:
                    G.add_node(endpoint, missing=True)
            G.add_edge(edge.source.node_id, edge.target.node_id, key=edge.id)
        return G


# ============================================================================
# GENERATOR DOCUMENT
# ============================================================================

@dataclass(frozen=True)
class Constraint:
    id: str
    constraint_type: ConstraintType
    parameters: Dict[str, Any] = field(default_factory=dict)
    error_message: str = ""
    severity: ConstraintSeverity = ConstraintSeverity.ERROR

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Constraint':
        constraint_id = str(_require(data, 'id', 'constraint'))
        where = f"constraint {constraint_id}"
        return cls(
            id=constraint_id,
            constraint_type=_parse_enum(ConstraintType, _require(data, 'type', where), where),
            parameters=_read_object(data, 'parameters', where),
            error_message=str(data.get('errorMessage', '')),
            severity=_parse_enum(ConstraintSeverity, data.get('severity', 'error'), where),
        )


@dataclass(frozen=True)
class Parameter:
    name: str
    param_type: ParameterType
    default: Any = None
    min: Optional[float] = None
    max: Optional[float] = None
    options: List[str] = field(default_factory=list)
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Parameter':
        name = str(_require(data, 'name', 'parameter'))
        where = f"parameter {name}"
        return cls(
            name=name,
            param_type=_parse_enum(ParameterType, _require(data, 'type', where), where),
            default=data.get('default'),
            min=_read_bound(data, 'min', where),
            max=_read_bound(data, 'max', where),
            options=list(_read_list(data, 'options', where)),
            description=data.get('description'),
        )


@dataclass
class GeneratorDocument:
    """A named generator: graph plus declared constraints and parameters."""
    id: str
    name: str
    graph: NodeGraph
    generator_type: GeneratorType = GeneratorType.DUNGEON
    description: str = ""
    constraints: List[Constraint] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    output_schema: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GeneratorDocument':
        """
        Parse a generator document.

        Raises:
            GraphDocumentError: Missing keys, unknown enum tags, duplicate
                node ids or malformed node configuration
        """
        generator_id = str(_require(data, 'id', 'generator'))
        where = f"generator {generator_id}"
        document = cls(
            id=generator_id,
            name=str(data.get('name', generator_id)),
            graph=NodeGraph.from_dict(_require(data, 'graph', where)),
            generator_type=_parse_enum(GeneratorType, data.get('type', 'dungeon'), where),
            description=str(data.get('description', '')),
            constraints=[Constraint.from_dict(c) for c in _read_list(data, 'constraints', where)],
            parameters=[Parameter.from_dict(p) for p in _read_list(data, 'parameters', where)],
            output_schema=data.get('outputSchema'),
        )
        logger.debug(
            f"Loaded generator '{document.name}': {len(document.graph.nodes)} nodes, "
            f"{len(document.graph.edges)} edges"
        )
        return document
