"""Dependency graph storing nodes and their dependency edges.

This module provides the DependencyGraph class which stores nodes and
"depends on" edges in two mirrored adjacency indexes and answers ordering
questions about them: direct and transitive dependencies or dependents, entry
nodes, and an overall processing order covering every node.
"""

import logging
from collections.abc import Hashable, Iterable, Iterator
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from depgraph.graph.errors import CircularDependencyError, NodeNotFoundError
from depgraph.graph.traversal import DepthFirstTraversal

if TYPE_CHECKING:
    from depgraph.config import GraphConfig

# Silent until the application configures logging
logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)

T = TypeVar("T", bound=Hashable)


class DependencyGraph(Generic[T]):
    """Directed graph of dependencies between hashable nodes.

    An edge added with ``add_dependency(a, b)`` means "a depends on b", so b
    is processed before a in every order the graph computes. Nodes and edges
    are kept in insertion order, which makes every query deterministic.

    Thread-safety:
        This class is NOT thread-safe. If concurrent access is required,
        protect all method calls with external synchronization (e.g.,
        threading.Lock).

    Attributes:
        allow_circular_dependencies: If False (the default), traversal-based
            queries raise CircularDependencyError when they meet a cycle.
            If True, cyclic back-edges are skipped silently.

    Example:
        >>> graph = DependencyGraph()
        >>> graph.add_nodes("a", "b", "c")
        >>> graph.add_dependency("a", "b")
        >>> graph.add_dependency("b", "c")
        >>> graph.get_overall_order()
        ['c', 'b', 'a']
    """

    def __init__(self, allow_circular_dependencies: bool = False):
        """Initialize an empty dependency graph.

        Args:
            allow_circular_dependencies: Whether cycles are tolerated
        """
        self.allow_circular_dependencies = allow_circular_dependencies
        self._nodes: dict[T, None] = {}
        self._outgoing_edges: dict[T, dict[T, None]] = {}
        self._incoming_edges: dict[T, dict[T, None]] = {}

        logger.debug(
            "dependency_graph_initialized",
            allow_circular_dependencies=allow_circular_dependencies,
        )

    @classmethod
    def from_config(cls, config: "GraphConfig") -> "DependencyGraph[Any]":
        """Create an empty graph configured from a GraphConfig.

        Args:
            config: Loaded graph configuration

        Returns:
            A new, empty DependencyGraph
        """
        return cls(allow_circular_dependencies=config.allow_circular_dependencies)

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[tuple[T, T]],
        allow_circular_dependencies: bool = False,
    ) -> "DependencyGraph[T]":
        """Build a graph from ``(from, to)`` pairs, adding nodes as needed.

        Args:
            edges: Pairs where the first node depends on the second
            allow_circular_dependencies: Whether cycles are tolerated

        Returns:
            A new DependencyGraph containing every node and edge

        Example:
            >>> graph = DependencyGraph.from_edges([("a", "b"), ("b", "c")])
            >>> graph.get_dependencies_of("a")
            ['c', 'b']
        """
        graph: DependencyGraph[T] = cls(allow_circular_dependencies=allow_circular_dependencies)
        for from_node, to_node in edges:
            graph.add_node(from_node)
            graph.add_node(to_node)
            graph.add_dependency(from_node, to_node)
        return graph

    @property
    def size(self) -> int:
        """The number of nodes in the graph."""
        return len(self._nodes)

    @property
    def nodes(self) -> tuple[T, ...]:
        """All nodes, in the order they were added."""
        return tuple(self._nodes)

    def add_node(self, node: T) -> None:
        """Add a node to the graph. Adding an existing node does nothing.

        Args:
            node: The node to add
        """
        if node in self._nodes:
            return

        self._nodes[node] = None
        self._outgoing_edges[node] = {}
        self._incoming_edges[node] = {}

        logger.debug("node_added", node=node, node_count=len(self._nodes))

    def add_nodes(self, *nodes: T) -> None:
        """Add several nodes at once.

        Args:
            *nodes: The nodes to add
        """
        for node in nodes:
            self.add_node(node)

    def remove_node(self, node: T) -> None:
        """Remove a node and every edge that references it.

        Removing a node that is not in the graph does nothing.

        Args:
            node: The node to remove
        """
        if node not in self._nodes:
            return

        del self._nodes[node]
        outgoing = self._outgoing_edges.pop(node)
        incoming = self._incoming_edges.pop(node)

        for target in outgoing:
            self._incoming_edges.get(target, {}).pop(node, None)
        for source in incoming:
            self._outgoing_edges.get(source, {}).pop(node, None)

        logger.debug(
            "node_removed",
            node=node,
            dependencies_removed=len(outgoing),
            dependents_removed=len(incoming),
        )

    def has_node(self, node: T) -> bool:
        """Return True if the node exists in the graph.

        Args:
            node: The node to look up
        """
        return node in self._nodes

    def add_dependency(self, from_node: T, to_node: T) -> None:
        """Make ``from_node`` depend on ``to_node``.

        Both nodes must already exist. Adding an existing edge does nothing.

        Args:
            from_node: The dependent node
            to_node: The node it depends on

        Raises:
            NodeNotFoundError: If either node does not exist
        """
        if from_node not in self._nodes:
            logger.error("add_dependency_missing_node", role="from", node=from_node)
            raise NodeNotFoundError(from_node, role="from")

        if to_node not in self._nodes:
            logger.error("add_dependency_missing_node", role="to", node=to_node)
            raise NodeNotFoundError(to_node, role="to")

        self._outgoing_edges[from_node][to_node] = None
        self._incoming_edges[to_node][from_node] = None

        logger.debug("dependency_added", from_node=from_node, to_node=to_node)

    def remove_dependency(self, from_node: T, to_node: T) -> None:
        """Remove the edge ``from_node -> to_node`` if present.

        Missing nodes or edges are ignored.

        Args:
            from_node: The dependent node
            to_node: The node it depends on
        """
        if from_node in self._nodes:
            self._outgoing_edges[from_node].pop(to_node, None)

        if to_node in self._nodes:
            self._incoming_edges[to_node].pop(from_node, None)

        logger.debug("dependency_removed", from_node=from_node, to_node=to_node)

    def iter_edges(self) -> Iterator[tuple[T, T]]:
        """Yield every ``(from, to)`` edge in declaration order."""
        for from_node, targets in self._outgoing_edges.items():
            for to_node in targets:
                yield from_node, to_node

    def get_direct_dependencies_of(self, node: T) -> list[T]:
        """Return the nodes that ``node`` directly depends on.

        Raises:
            NodeNotFoundError: If the node does not exist
        """
        self._require_node(node)
        return list(self._outgoing_edges[node])

    def get_direct_dependents_of(self, node: T) -> list[T]:
        """Return the nodes that directly depend on ``node``.

        Raises:
            NodeNotFoundError: If the node does not exist
        """
        self._require_node(node)
        return list(self._incoming_edges[node])

    def get_dependencies_of(self, node: T, filter_leaves: bool = False) -> list[T]:
        """Return every node that ``node`` depends on, transitively.

        The result is in processing order (deepest dependency first) and
        never contains ``node`` itself.

        Args:
            node: The node to query
            filter_leaves: If True, only return nodes that depend on nothing

        Returns:
            List of transitive dependencies

        Raises:
            NodeNotFoundError: If the node does not exist
            CircularDependencyError: If a cycle is reachable from the node and
                circular dependencies are not allowed

        Example:
            >>> graph = DependencyGraph.from_edges([("a", "b"), ("b", "c")])
            >>> graph.get_dependencies_of("a", filter_leaves=True)
            ['c']
        """
        self._require_node(node)
        return self._collect_reachable(self._outgoing_edges, node, filter_leaves)

    def get_dependents_of(self, node: T, filter_leaves: bool = False) -> list[T]:
        """Return every node that depends on ``node``, transitively.

        Args:
            node: The node to query
            filter_leaves: If True, only return nodes nothing else depends on

        Returns:
            List of transitive dependents, never containing ``node`` itself

        Raises:
            NodeNotFoundError: If the node does not exist
            CircularDependencyError: If a cycle is reachable from the node and
                circular dependencies are not allowed
        """
        self._require_node(node)
        return self._collect_reachable(self._incoming_edges, node, filter_leaves)

    def get_entry_nodes(self) -> list[T]:
        """Return the nodes that nothing depends on."""
        return [node for node in self._nodes if not self._incoming_edges[node]]

    def get_leaf_nodes(self) -> list[T]:
        """Return the nodes that depend on nothing."""
        return [node for node in self._nodes if not self._outgoing_edges[node]]

    def get_overall_order(self, filter_leaves: bool = False) -> list[T]:
        """Compute a processing order covering every node in the graph.

        Every dependency appears before its dependents. Disconnected subgraphs
        are all included. When circular dependencies are allowed, nodes on a
        cycle still appear exactly once; the cyclic back-edge is ignored.

        Args:
            filter_leaves: If True, only return nodes that depend on nothing

        Returns:
            List of nodes in processing order

        Raises:
            CircularDependencyError: If the graph contains a cycle and
                circular dependencies are not allowed
        """
        if not self._nodes:
            return []

        nodes = list(self._nodes)

        # Check every node so cycles in subgraphs without an entry node are found too
        if not self.allow_circular_dependencies:
            validation = DepthFirstTraversal(self._outgoing_edges)
            try:
                for node in nodes:
                    validation.visit(node)
            except CircularDependencyError as e:
                logger.error("circular_dependency_detected", path=e.path, node=e.node)
                raise

        traversal = DepthFirstTraversal(
            self._outgoing_edges,
            filter_leaves=filter_leaves,
            allow_circular_dependencies=self.allow_circular_dependencies,
        )

        for node in nodes:
            if not self._incoming_edges[node]:
                traversal.visit(node)

        # Pure cycles have no entry node and are only reached from here
        if self.allow_circular_dependencies:
            for node in nodes:
                if node not in traversal.result:
                    traversal.visit(node)

        if traversal.skipped_back_edges:
            logger.debug("circular_dependencies_skipped", count=traversal.skipped_back_edges)

        order = traversal.order

        logger.debug(
            "overall_order_computed",
            node_count=len(nodes),
            order_length=len(order),
            filter_leaves=filter_leaves,
        )

        return order

    def find_cycle(self) -> list[T] | None:
        """Return the first cycle found in the graph, or None if it is acyclic.

        This check is strict regardless of ``allow_circular_dependencies``.

        Returns:
            Cycle path such as ``[a, b, a]``, or None
        """
        traversal = DepthFirstTraversal(self._outgoing_edges)
        try:
            for node in self._nodes:
                traversal.visit(node)
        except CircularDependencyError as e:
            return e.path
        return None

    def has_cycle(self) -> bool:
        """Return True if the graph contains at least one cycle."""
        return self.find_cycle() is not None

    def get_stats(self) -> dict[str, int | bool]:
        """Get statistics about the current graph state.

        Returns:
            Dictionary with graph statistics including:
                - total_nodes: Number of nodes in the graph
                - total_dependencies: Number of edges
                - entry_nodes: Number of nodes nothing depends on
                - leaf_nodes: Number of nodes that depend on nothing
                - allow_circular_dependencies: Current cycle policy
        """
        stats: dict[str, int | bool] = {
            "total_nodes": len(self._nodes),
            "total_dependencies": sum(len(targets) for targets in self._outgoing_edges.values()),
            "entry_nodes": len(self.get_entry_nodes()),
            "leaf_nodes": len(self.get_leaf_nodes()),
            "allow_circular_dependencies": self.allow_circular_dependencies,
        }

        logger.debug("graph_stats_retrieved", **stats)

        return stats

    def copy(self) -> "DependencyGraph[T]":
        """Create an independent copy of the graph.

        Returns:
            A new DependencyGraph with the same nodes, edges and cycle policy
        """
        new_graph = type(self)(
            allow_circular_dependencies=self.allow_circular_dependencies,
        )
        new_graph._nodes = dict(self._nodes)
        new_graph._outgoing_edges = {node: dict(targets) for node, targets in self._outgoing_edges.items()}
        new_graph._incoming_edges = {node: dict(sources) for node, sources in self._incoming_edges.items()}

        logger.debug("dependency_graph_copied", node_count=len(self._nodes))

        return new_graph

    def _require_node(self, node: T) -> None:
        if node not in self._nodes:
            logger.warning("node_not_found", node=node)
            raise NodeNotFoundError(node)

    def _collect_reachable(
        self,
        edges: dict[T, dict[T, None]],
        node: T,
        filter_leaves: bool,
    ) -> list[T]:
        traversal = DepthFirstTraversal(
            edges,
            filter_leaves=filter_leaves,
            allow_circular_dependencies=self.allow_circular_dependencies,
        )
        try:
            traversal.visit(node)
        except CircularDependencyError as e:
            logger.error("circular_dependency_detected", path=e.path, node=e.node, start=node)
            raise

        if traversal.skipped_back_edges:
            logger.debug(
                "circular_dependencies_skipped",
                count=traversal.skipped_back_edges,
                start=node,
            )

        traversal.result.pop(node, None)
        return traversal.order

    def __len__(self) -> int:
        """Return the number of nodes in the graph."""
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        """Check if a node is in the graph."""
        return node in self._nodes

    def __repr__(self) -> str:
        edge_count = sum(len(targets) for targets in self._outgoing_edges.values())
        return f"DependencyGraph(nodes={len(self._nodes)}, dependencies={edge_count})"
