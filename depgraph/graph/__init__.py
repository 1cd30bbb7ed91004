"""Graph module for dependency management and topological ordering.

This module provides a generic dependency graph with direct and transitive
dependency queries, cycle detection with path reporting, and an overall
processing order computed by an iterative depth-first traversal.
"""

from depgraph.graph.dependency_graph import DependencyGraph
from depgraph.graph.errors import CircularDependencyError, DependencyGraphError, NodeNotFoundError
from depgraph.graph.traversal import DepthFirstTraversal
from depgraph.graph.validator import GraphValidator, ValidationReport

__all__ = [
    "CircularDependencyError",
    "DependencyGraph",
    "DependencyGraphError",
    "DepthFirstTraversal",
    "GraphValidator",
    "NodeNotFoundError",
    "ValidationReport",
]
