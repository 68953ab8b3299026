"""
Exception hierarchy for structural graph failures and configuration problems.

Scoring never raises: low confidence is data, not an error.
"""

from typing import Optional


class IacGraphError(Exception):
    """Base class for all iacgraph errors."""


class GraphError(IacGraphError):
    """Raised when a graph operation is structurally invalid."""


class InvalidNodeError(GraphError):
    """
    Raised when a node cannot be added to a graph.

    Attributes:
        node_id: The offending id (may be empty).
        reason: Why the node was rejected.
    """

    def __init__(self, node_id: Optional[str], reason: str = "Node must have an id"):
        self.node_id = node_id
        self.reason = reason
        super().__init__(f"{reason} (id={node_id!r})")


class InvalidEdgeError(GraphError):
    """Raised when an edge is missing its id, source or target."""

    def __init__(self, edge_id: Optional[str], reason: str):
        self.edge_id = edge_id
        self.reason = reason
        super().__init__(f"Edge {edge_id!r}: {reason}")


class DanglingEdgeError(GraphError):
    """
    Raised when an edge endpoint does not exist in the node set.

    Attributes:
        edge_id: Id of the rejected edge.
        node_id: The missing endpoint.
    """
    endpoint = "endpoint"

    def __init__(self, edge_id: str, node_id: str):
        self.edge_id = edge_id
        self.node_id = node_id
        super().__init__(f"{self.endpoint.capitalize()} node not found: {node_id} (edge {edge_id})")


class DanglingSourceError(DanglingEdgeError):
    endpoint = "source"


class DanglingTargetError(DanglingEdgeError):
    endpoint = "target"


class NodeConflictError(GraphError):
    """Raised by the merger when two graphs define the same node id."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node conflict: {node_id}")


class GraphLimitError(GraphError):
    """Raised when input exceeds a configured size limit."""

    def __init__(self, limit_name: str, actual: int, limit: int, subject: Optional[str] = None):
        self.limit_name = limit_name
        self.actual = actual
        self.limit = limit
        self.subject = subject
        where = f" for {subject}" if subject else ""
        super().__init__(f"{limit_name} exceeded{where}: {actual} > {limit}")


class ConfigError(IacGraphError):
    """
    Raised when a configuration file cannot be loaded.

    Attributes:
        path: File that failed to load.
        message: Human-readable error message.
    """

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")
