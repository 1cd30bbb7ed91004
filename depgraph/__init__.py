"""Generic dependency graph with cycle detection and topological ordering."""

import logging

from depgraph.config import GraphConfig, load_config
from depgraph.graph import (
    CircularDependencyError,
    DependencyGraph,
    DependencyGraphError,
    DepthFirstTraversal,
    GraphValidator,
    NodeNotFoundError,
    ValidationReport,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "CircularDependencyError",
    "DependencyGraph",
    "DependencyGraphError",
    "DepthFirstTraversal",
    "GraphConfig",
    "GraphValidator",
    "NodeNotFoundError",
    "ValidationReport",
    "load_config",
]
