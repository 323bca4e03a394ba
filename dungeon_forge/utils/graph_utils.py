"""
Graph Topology Utilities
========================

NetworkX helpers for the two graphs the engine deals with:
- the generator node graph (directed, may contain cycles)
- the room graph of a finished layout (undirected, rooms + connections)

Usage:
    from dungeon_forge.utils.graph_utils import validate_graph_topology

    is_valid, issues = validate_graph_topology(document.graph)
    if not is_valid:
        print(f"Graph has problems: {issues}")
"""

import logging
from typing import List, Set, Tuple

import networkx as nx

from dungeon_forge.core.definitions import MAX_REPORTED_CYCLES, NodeType
from dungeon_forge.core.layout import DungeonLayout
from dungeon_forge.generation.node_graph import NodeGraph

logger = logging.getLogger(__name__)


# ==========================================
# NODE GRAPH ANALYSIS
# ==========================================

def find_nodes_by_type(G: nx.MultiDiGraph, node_type: NodeType) -> List[str]:
    """Return ids of all nodes in G tagged with node_type."""
    return [n for n, data in G.nodes(data=True) if data.get('node_type') == node_type.value]


def find_dangling_edges(graph: NodeGraph) -> List[str]:
    """Ids of edges whose source or target node does not exist."""
    dangling = []
    for edge in graph.edges:
        if graph.get_node(edge.source.node_id) is None or graph.get_node(edge.target.node_id) is None:
            dangling.append(edge.id)
    return dangling


def find_unreachable_nodes(graph: NodeGraph) -> Set[str]:
    """Nodes that no path from the Start node(s) reaches."""
    G = graph.to_networkx()
    starts = find_nodes_by_type(G, NodeType.START)
    reachable: Set[str] = set(starts)
    for start in starts:
        reachable |= nx.descendants(G, start)
    return {node.id for node in graph.nodes} - reachable


def find_non_terminating_cycles(G: nx.MultiDiGraph) -> List[List[str]]:
    """
    Groups of nodes that form cycles the interpreter can never leave.

    Every node except Output and Random Select follows all of its edges,
    so a cycle avoiding both runs until the visit limit. Removing those
    nodes (and Loop self-edges, which Loop nodes skip) leaves such cycles
    as the non-trivial strongly connected components of what remains.
    Each group is sorted; groups are ordered by their first node id.
    """
    breakers = {NodeType.OUTPUT.value, NodeType.RANDOM_SELECT.value}
    D = nx.DiGraph(G)
    D.remove_nodes_from([n for n, t in D.nodes(data='node_type') if t in breakers])
    D.remove_edges_from([
        (n, n) for n, t in D.nodes(data='node_type')
        if t == NodeType.LOOP.value and D.has_edge(n, n)
    ])

    groups = []
    for component in nx.strongly_connected_components(D):
        if len(component) == 1:
            (n,) = component
            if not D.has_edge(n, n):
                continue
        groups.append(sorted(component))
    return sorted(groups)


def _describe_cycle(group: List[str], limit: int = 10) -> str:
    shown = ', '.join(group[:limit])
    if len(group) > limit:
        shown += f", ... ({len(group)} nodes)"
    return f"Cycle never terminates through nodes: {shown}"


def validate_graph_topology(graph: NodeGraph) -> Tuple[bool, List[str]]:
    """
    Static checks on a node graph before it is executed.

    Checks:
    - Exactly one Start node
    - Every edge endpoint resolves to a node
    - At least one Output node is reachable from Start
    - Cycles pass through an Output or Random Select node (at most
      MAX_REPORTED_CYCLES offending cycles are listed)

    Unreachable nodes are logged but do not invalidate the graph.

    Returns:
        Tuple of (is_valid, issue_messages)
    """
    issues = []
    G = graph.to_networkx()

    starts = find_nodes_by_type(G, NodeType.START)
    if len(starts) != 1:
        issues.append(f"Graph must have exactly one Start node (found {len(starts)})")

    dangling = find_dangling_edges(graph)
    if dangling:
        issues.append(f"Edges reference missing nodes: {', '.join(dangling)}")

    if len(starts) == 1:
        reachable = nx.descendants(G, starts[0])
        outputs = set(find_nodes_by_type(G, NodeType.OUTPUT))
        if not reachable & outputs:
            issues.append("No Output node is reachable from Start")

        live = reachable | {starts[0]}
        cycles = [g for g in find_non_terminating_cycles(G) if g[0] in live]
        issues.extend(_describe_cycle(g) for g in cycles[:MAX_REPORTED_CYCLES])
        if len(cycles) > MAX_REPORTED_CYCLES:
            issues.append(f"... and {len(cycles) - MAX_REPORTED_CYCLES} more non-terminating cycles")

    unreachable = find_unreachable_nodes(graph)
    if unreachable:
        logger.info(f"Nodes unreachable from Start: {sorted(unreachable)}")

    return len(issues) == 0, issues


# ==========================================
# LAYOUT ROOM GRAPH
# ==========================================

def layout_to_networkx(layout: DungeonLayout) -> nx.Graph:
    """Undirected room graph: one node per room, one edge per connection."""
    G = nx.Graph()
    for room in layout.rooms:
        G.add_node(room.id, room_type=room.room_type)
    for conn in layout.connections:
        G.add_edge(conn.from_room_id, conn.to_room_id)
    return G


def find_unreachable_rooms(layout: DungeonLayout) -> List[str]:
    """Rooms not connected to the first room, in layout order."""
    if not layout.rooms:
        return []
    G = layout_to_networkx(layout)
    reachable = nx.node_connected_component(G, layout.rooms[0].id)
    return [room.id for room in layout.rooms if room.id not in reachable]


def is_layout_connected(layout: DungeonLayout) -> bool:
    """True when every room can be reached from every other (empty counts)."""
    return not find_unreachable_rooms(layout)
