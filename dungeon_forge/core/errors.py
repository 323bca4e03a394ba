"""
Named errors raised while loading or interpreting a node graph.

Every error here derives from GraphError. The generation pipeline catches
GraphError, switches to the fallback generator and reports the message.
"""

from typing import Optional


class GraphError(Exception):
    """Base class for graph document and graph execution failures."""


class GraphDocumentError(GraphError):
    """The graph or generator document could not be parsed."""


class NodeConfigError(GraphDocumentError):
    """A node carries a configuration value of the wrong kind."""

    def __init__(self, node_id: str, key: str, reason: str):
        self.node_id = node_id
        self.key = key
        super().__init__(f"Node {node_id}: invalid '{key}' ({reason})")


class MissingEntryNodeError(GraphError):
    def __init__(self, message: str = "No Start node found in graph"):
        super().__init__(message)


class NodeNotFoundError(GraphError):
    """An edge references a node id that is not part of the graph."""

    def __init__(self, node_id: str, edge_id: Optional[str] = None):
        self.node_id = node_id
        self.edge_id = edge_id
        if edge_id is None:
            super().__init__(f"Node {node_id} not found")
        else:
            super().__init__(f"Node {node_id} not found (edge {edge_id})")


class ExecutionLimitError(GraphError):
    """Traversal visited more nodes than the loop guard allows."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Maximum node executions exceeded ({limit}, possible infinite loop)"
        )
