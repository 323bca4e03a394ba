"""
Utility Module for Dungeon Forge
================================

Graph utilities for node graphs and layout room graphs (NetworkX based).
"""

from .graph_utils import (
    find_nodes_by_type,
    find_dangling_edges,
    find_unreachable_nodes,
    find_non_terminating_cycles,
    validate_graph_topology,
    layout_to_networkx,
    find_unreachable_rooms,
    is_layout_connected,
)

__all__ = [
    'find_nodes_by_type',
    'find_dangling_edges',
    'find_unreachable_nodes',
    'find_non_terminating_cycles',
    'validate_graph_topology',
    'layout_to_networkx',
    'find_unreachable_rooms',
    'is_layout_connected',
]
