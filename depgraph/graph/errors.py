"""Exceptions raised by the dependency graph.

All graph errors derive from DependencyGraphError so callers can catch the
whole family with a single except clause.
"""

from collections.abc import Hashable, Sequence
from typing import Any


class DependencyGraphError(Exception):
    """Base class for dependency graph errors."""

    def __init__(self, message: str):
        """Initialize the exception with a descriptive message.

        Args:
            message: Description of the error
        """
        super().__init__(message)
        self.message = message


class NodeNotFoundError(DependencyGraphError):
    """Exception raised when an operation references a node not in the graph.

    Attributes:
        node: The missing node
    """

    def __init__(self, node: Hashable, role: str | None = None):
        """Initialize the exception for a missing node.

        Args:
            node: The node that does not exist in the graph
            role: Optional endpoint role ("from" or "to") for edge operations
        """
        if role is None:
            message = f"Node does not exist: {node!r}"
        else:
            message = f'Node "{role}" does not exist: {node!r}'
        super().__init__(message)
        self.node = node
        self.role = role


class CircularDependencyError(DependencyGraphError):
    """Exception raised when a circular dependency is detected.

    The path runs from the first occurrence of the repeated node through to
    the repeated node again, e.g. ``[a, b, c, a]``.

    Attributes:
        path: The nodes forming the cycle, first and last being the same node
        node: The node the cycle was detected on
    """

    def __init__(self, path: Sequence[Any]):
        """Initialize the exception from a cycle path.

        Args:
            path: Nodes forming the cycle, ending with the repeated node
        """
        self.path = list(path)
        self.node = self.path[-1]
        link = " -> ".join(str(node) for node in self.path)
        super().__init__(f"Detected circular dependencies ({link})")
