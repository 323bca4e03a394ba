"""
Graph Executor
==============

Interprets a generator node graph to build a dungeon layout:
1. Start at the unique Start node
2. Execute each node's behavior against an ExecutionContext
3. Follow outgoing edges (in document order) depth-first
4. Stop a branch at an Output node

Traversal uses an explicit stack of step iterators instead of Python
recursion, so the 1000-visit loop guard fires before the interpreter's own
recursion limit could. Each stack frame is the continuation of one node:
a list of edges for plain nodes, or a generator for Branch / Loop nodes
that mutates the cursor between the subtrees it yields.

Node behaviors:
    start, merge, unknown   pass through to outgoing edges
    output                  end of this branch
    room / room_chain       synthesize rooms, connect, advance cursor
    spawn_point             spawn point in the latest room
    encounter / loot_drop   entities in the latest room
    branch                  fan out with one direction per edge
    random_select           follow one edge at random
    sequence                follow every edge in order
    loop                    follow every edge `iterations` times
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from dungeon_forge.core.definitions import (
    BRANCH_DIRECTIONS,
    BRANCH_OFFSET,
    ENEMY_ENTITY,
    LOOT_ENTITY,
    MAX_NODE_EXECUTIONS,
    ROOM_GAP_RANGE,
    SPAWN_POINT_PADDING,
    Direction,
    NodeType,
)
from dungeon_forge.core.errors import ExecutionLimitError, NodeNotFoundError
from dungeon_forge.core.layout import (
    DungeonLayout,
    GeneratedRoom,
    LayoutPosition,
    RoomConnection,
    SpawnPoint,
)
from dungeon_forge.core.rng import SeededRng
from dungeon_forge.generation.node_graph import (
    Edge,
    GeneratorDocument,
    GraphNode,
    NodeGraph,
)
from dungeon_forge.generation.room_generator import RoomConfig, RoomGenerator

logger = logging.getLogger(__name__)

# A traversal step: the entry node id, or an edge whose target is visited next
Step = Union[str, Edge]


@dataclass
class ExecutionContext:
    """Mutable state of one execute() call; never shared between runs."""
    rooms: List[GeneratedRoom] = field(default_factory=list)
    connections: List[RoomConnection] = field(default_factory=list)
    spawn_points: List[SpawnPoint] = field(default_factory=list)
    current_position: LayoutPosition = field(default_factory=LayoutPosition)
    current_direction: Direction = Direction.RIGHT
    node_executions: int = 0
    variables: Dict[str, Any] = field(default_factory=dict)

    @property
    def last_room(self) -> Optional[GeneratedRoom]:
        return self.rooms[-1] if self.rooms else None

    def to_layout(self) -> DungeonLayout:
        return DungeonLayout.from_rooms(self.rooms, self.connections, self.spawn_points)


def _numeric_parameter(parameters: Dict[str, Any], name: str) -> Optional[float]:
    value = parameters.get(name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class GraphExecutor:
    """
    Deterministic node-graph interpreter.

    Args:
        seed: 64-bit unsigned seed for the run's SeededRng
        parameters: Request parameters; minRoomSize / maxRoomSize override
            every room's width and height bounds
        max_node_executions: Loop guard

    Example:
        >>> executor = GraphExecutor(seed=12345)
        >>> layout = executor.execute(generator)
        >>> executor.node_executions
        3
    """

    def __init__(
        self,
        seed: int,
        parameters: Optional[Dict[str, Any]] = None,
        max_node_executions: int = MAX_NODE_EXECUTIONS,
    ):
        self.seed = seed
        self.rng = SeededRng(seed)
        self.parameters = dict(parameters or {})
        self.max_node_executions = max_node_executions
        self._min_room_size = _numeric_parameter(self.parameters, 'minRoomSize')
        self._max_room_size = _numeric_parameter(self.parameters, 'maxRoomSize')
        self._last_context: Optional[ExecutionContext] = None

    @property
    def node_executions(self) -> int:
        """Nodes visited by the most recent execute() call (0 before any)."""
        if self._last_context is None:
            return 0
        return self._last_context.node_executions

    def execute(self, graph: Union[NodeGraph, GeneratorDocument]) -> DungeonLayout:
        """
        Run the graph and build a layout.

        Raises:
            MissingEntryNodeError: Graph has no Start node
            NodeNotFoundError: An edge targets an unknown node
            ExecutionLimitError: More than max_node_executions visits
        """
        if isinstance(graph, GeneratorDocument):
            graph = graph.graph

        ctx = ExecutionContext()
        self._last_context = ctx

        entry = graph.find_entry_node()
        self._traverse(entry.id, graph, ctx)

        logger.debug(
            f"Graph executed: {ctx.node_executions} node visits, {len(ctx.rooms)} rooms, "
            f"{len(ctx.connections)} connections, {len(ctx.spawn_points)} spawn points"
        )
        return ctx.to_layout()

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _traverse(self, entry_id: str, graph: NodeGraph, ctx: ExecutionContext) -> None:
        stack: List[Iterator[Step]] = [iter([entry_id])]

        while stack:
            try:
                step = next(stack[-1])
            except StopIteration:
                stack.pop()
                continue

            if isinstance(step, Edge):
                node = graph.get_node(step.target.node_id)
                if node is None:
                    raise NodeNotFoundError(step.target.node_id, step.id)
            else:
                node = graph.get_node(step)
                if node is None:
                    raise NodeNotFoundError(step)

            continuation = self._execute_node(node, graph, ctx)
            if continuation is not None:
                stack.append(iter(continuation))

    def _execute_node(
        self,
        node: GraphNode,
        graph: NodeGraph,
        ctx: ExecutionContext,
    ) -> Optional[Iterable[Step]]:
        """Run one node; return the steps that follow it (None ends the branch)."""
        ctx.node_executions += 1
        if ctx.node_executions > self.max_node_executions:
            raise ExecutionLimitError(self.max_node_executions)

        node_type = node.node_type
        logger.debug(f"[{ctx.node_executions}] {node_type.value} '{node.id}'")

        if node_type is NodeType.OUTPUT:
            return None
        if node_type is NodeType.ROOM:
            self._execute_room(node, ctx)
        elif node_type is NodeType.ROOM_CHAIN:
            self._execute_room_chain(node, ctx)
        elif node_type is NodeType.SPAWN_POINT:
            self._execute_spawn_point(node, ctx)
        elif node_type is NodeType.ENCOUNTER:
            if ctx.last_room is not None:
                count = node.config.enemy_count
                RoomGenerator.add_entities(self.rng, ctx.last_room, ENEMY_ENTITY, count, count + 2)
        elif node_type is NodeType.LOOT_DROP:
            if ctx.last_room is not None:
                count = node.config.item_count
                RoomGenerator.add_entities(self.rng, ctx.last_room, LOOT_ENTITY, count, count + 1)
        elif node_type is NodeType.BRANCH:
            return self._branch_steps(node, graph, ctx)
        elif node_type is NodeType.RANDOM_SELECT:
            edges = graph.outgoing_edges(node.id)
            if not edges:
                return None
            return [edges[self.rng.index(len(edges))]]
        elif node_type is NodeType.SEQUENCE:
            return graph.outgoing_edges(node.id)
        elif node_type is NodeType.LOOP:
            return self._loop_steps(node, graph)
        # START, MERGE and the value / logic nodes without behavior fall through

        return graph.outgoing_edges(node.id)

    # ------------------------------------------------------------------
    # Room nodes
    # ------------------------------------------------------------------

    def _room_config(self, config: RoomConfig) -> RoomConfig:
        return config.with_size_overrides(self._min_room_size, self._max_room_size)

    def _connect(self, ctx: ExecutionContext, from_room: GeneratedRoom, to_room: GeneratedRoom) -> None:
        direction = ctx.current_direction
        from_door = RoomGenerator.get_door_position(from_room, direction, self.rng)
        to_door = RoomGenerator.get_door_position(to_room, direction.opposite(), self.rng)
        ctx.connections.append(RoomConnection(
            from_room_id=from_room.id,
            to_room_id=to_room.id,
            from_door=from_door,
            to_door=to_door,
        ))

    def _advance_cursor(self, ctx: ExecutionContext, room: GeneratedRoom) -> None:
        """Move the cursor past `room` along the current direction plus a gap."""
        spacing = self.rng.uniform(*ROOM_GAP_RANGE)
        bounds = room.bounds
        direction = ctx.current_direction

        if direction is Direction.RIGHT:
            ctx.current_position.x = bounds.right + spacing
        elif direction is Direction.LEFT:
            ctx.current_position.x = bounds.x - spacing
        elif direction is Direction.DOWN:
            ctx.current_position.y = bounds.bottom + spacing
        else:
            ctx.current_position.y = bounds.y - spacing

    def _execute_room(self, node: GraphNode, ctx: ExecutionContext) -> None:
        config = self._room_config(node.config)
        room_id = f"room_{len(ctx.rooms)}"
        room = RoomGenerator.generate(self.rng, config, ctx.current_position.copy(), room_id)

        if ctx.last_room is not None:
            self._connect(ctx, ctx.last_room, room)

        self._advance_cursor(ctx, room)
        ctx.rooms.append(room)

    def _execute_room_chain(self, node: GraphNode, ctx: ExecutionContext) -> None:
        chain_config = node.config
        config = self._room_config(chain_config.room)
        base_id = f"chain_{len(ctx.rooms)}"

        chain = RoomGenerator.generate_chain(
            self.rng,
            chain_config.count,
            config,
            ctx.current_position.copy(),
            base_id,
            chain_config.linear,
        )
        if not chain:
            return

        if ctx.last_room is not None:
            self._connect(ctx, ctx.last_room, chain[0])
        for from_room, to_room in zip(chain, chain[1:]):
            self._connect(ctx, from_room, to_room)

        self._advance_cursor(ctx, chain[-1])
        ctx.rooms.extend(chain)

    # ------------------------------------------------------------------
    # Content nodes
    # ------------------------------------------------------------------

    def _execute_spawn_point(self, node: GraphNode, ctx: ExecutionContext) -> None:
        room = ctx.last_room
        if room is None:
            return

        bounds = room.bounds
        position = LayoutPosition(
            bounds.x + self.rng.uniform(SPAWN_POINT_PADDING, bounds.width - SPAWN_POINT_PADDING),
            bounds.y + self.rng.uniform(SPAWN_POINT_PADDING, bounds.height - SPAWN_POINT_PADDING),
        )
        ctx.spawn_points.append(SpawnPoint(
            id=f"spawn_{len(ctx.spawn_points)}",
            spawn_type=node.config.spawn_type,
            position=position,
            room_id=room.id,
        ))

    # ------------------------------------------------------------------
    # Flow nodes
    # ------------------------------------------------------------------

    def _branch_steps(self, node: GraphNode, graph: NodeGraph, ctx: ExecutionContext) -> Iterator[Step]:
        """
        Yield each outgoing edge after pointing the cursor down that branch.

        Branch i faces BRANCH_DIRECTIONS[i % 4] and starts from the branch
        node's position shifted i * BRANCH_OFFSET perpendicular to that
        direction. The original direction is restored once every branch is
        done; the position is left where the last branch put it.
        """
        original_position = ctx.current_position.copy()
        original_direction = ctx.current_direction

        for i, edge in enumerate(graph.outgoing_edges(node.id)):
            direction = BRANCH_DIRECTIONS[i % len(BRANCH_DIRECTIONS)]
            position = original_position.copy()
            if direction.is_horizontal:
                position.y += i * BRANCH_OFFSET
            else:
                position.x += i * BRANCH_OFFSET

            ctx.current_direction = direction
            ctx.current_position = position
            yield edge

        ctx.current_direction = original_direction

    def _loop_steps(self, node: GraphNode, graph: NodeGraph) -> Iterator[Step]:
        edges = [e for e in graph.outgoing_edges(node.id) if e.target.node_id != node.id]
        for _ in range(node.config.iterations):
            yield from edges
