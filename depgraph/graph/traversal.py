"""Iterative depth-first traversal used by every dependency graph query.

The traversal walks an adjacency mapping with an explicit stack instead of
recursion, so arbitrarily long dependency chains never hit the interpreter's
recursion limit. Nodes are emitted in post-order: a node is added to the
result only after everything it points to has been emitted, which is what
turns the result into a topological order.
"""

from collections.abc import Collection, Hashable, Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from depgraph.graph.errors import CircularDependencyError

T = TypeVar("T", bound=Hashable)


@dataclass
class _Frame(Generic[T]):
    """A work-stack entry.

    Attributes:
        node: The node this frame refers to
        expanded: Whether the node's adjacency targets were already pushed
    """

    node: T
    expanded: bool = False


class DepthFirstTraversal(Generic[T]):
    """Reusable post-order depth-first traversal over an adjacency mapping.

    One instance keeps its ``visited`` set and result collector across calls
    to ``visit()``, so it can be run from several start nodes and every node
    reachable from more than one of them is processed once.

    Attributes:
        visited: Nodes fully processed, shared across visits
        result: Ordered-set collector of emitted nodes
        skipped_back_edges: Number of cyclic back-edges skipped while
            circular dependencies are allowed

    Thread-safety:
        This class is NOT thread-safe. It reads the adjacency mapping without
        copying it; the mapping must not be mutated while a visit runs.

    Example:
        >>> edges = {"a": ["b"], "b": ["c"], "c": []}
        >>> traversal = DepthFirstTraversal(edges)
        >>> traversal.visit("a")
        >>> traversal.order
        ['c', 'b', 'a']
    """

    def __init__(
        self,
        edges: Mapping[T, Collection[T]],
        filter_leaves: bool = False,
        allow_circular_dependencies: bool = False,
        result: dict[T, None] | None = None,
        visited: set[T] | None = None,
    ):
        """Initialize the traversal.

        Args:
            edges: Mapping from node to the nodes it points to. Nodes missing
                from the mapping are treated as having no targets.
            filter_leaves: If True, only emit nodes with no targets
            allow_circular_dependencies: If True, skip back-edges instead of
                raising CircularDependencyError
            result: Optional ordered-set collector (a dict with ``None``
                values) to populate. A fresh one is created if omitted.
            visited: Optional set of nodes already fully processed. It is
                updated in place, so several traversals can share it and
                skip subgraphs an earlier one cleared.
        """
        self.edges = edges
        self.filter_leaves = filter_leaves
        self.allow_circular_dependencies = allow_circular_dependencies
        self.result: dict[T, None] = {} if result is None else result
        self.visited: set[T] = set() if visited is None else visited
        self.skipped_back_edges = 0

    @property
    def order(self) -> list[T]:
        """Nodes emitted so far, in post-order."""
        return list(self.result)

    def visit(self, start: T) -> None:
        """Traverse everything reachable from ``start``.

        Args:
            start: The node to start from

        Raises:
            CircularDependencyError: If a cycle is reachable from ``start``
                and circular dependencies are not allowed
        """
        if start in self.visited:
            return

        in_current_path: set[T] = set()
        current_path: list[T] = []
        stack: list[_Frame[T]] = [_Frame(start)]

        while stack:
            frame = stack[-1]
            node = frame.node

            if not frame.expanded:
                if node in self.visited:
                    stack.pop()
                    continue

                if node in in_current_path:
                    if self.allow_circular_dependencies:
                        self.skipped_back_edges += 1
                        stack.pop()
                        continue

                    current_path.append(node)
                    raise CircularDependencyError(
                        current_path[current_path.index(node) :],
                    )

                in_current_path.add(node)
                current_path.append(node)

                # Reversed so the first declared target is processed first
                stack.extend(_Frame(target) for target in reversed(list(self.edges.get(node, ()))))

                frame.expanded = True
            else:
                stack.pop()
                current_path.pop()
                in_current_path.discard(node)
                self.visited.add(node)

                if not self.filter_leaves or not self.edges.get(node):
                    self.result[node] = None

    def __call__(self, start: T) -> None:
        """Alias for ``visit`` so an instance can be passed where a callable is expected."""
        self.visit(start)
