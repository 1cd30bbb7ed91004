"""Graph validation with detailed cycle detection and reporting.

This module provides validation for dependency graphs, including cycle
detection with path reporting, isolated node detection, and Mermaid/Graphviz
rendering of the graph.
"""

import logging
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Any

import structlog

from depgraph.graph.dependency_graph import DependencyGraph
from depgraph.graph.errors import CircularDependencyError
from depgraph.graph.traversal import DepthFirstTraversal

# Silent until the application configures logging
logger = structlog.wrap_logger(logging.getLogger(__name__), wrapper_class=structlog.stdlib.BoundLogger)


@dataclass
class ValidationReport:
    """Report containing validation results for a dependency graph.

    Attributes:
        is_valid: Whether the graph passed all validation checks
        errors: List of error messages (critical issues)
        warnings: List of warning messages (potential issues)
        cycles: List of detected cycles, each a list of nodes whose first and
            last element are the same node
        isolated_nodes: Nodes with neither dependencies nor dependents
        entry_nodes: Nodes nothing depends on
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cycles: list[list[Any]] = field(default_factory=list)
    isolated_nodes: list[Any] = field(default_factory=list)
    entry_nodes: list[Any] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message and mark validation as failed."""
        self.errors.append(message)
        self.is_valid = False
        logger.error("validation_error", message=message)

    def add_warning(self, message: str) -> None:
        """Add a warning message without failing validation."""
        self.warnings.append(message)
        logger.warning("validation_warning", message=message)

    def summary(self) -> str:
        """Generate a human-readable summary of the validation report."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.append(f"Cycles: {len(self.cycles)}")
        lines.append(f"Isolated Nodes: {len(self.isolated_nodes)}")
        lines.append(f"Entry Nodes: {len(self.entry_nodes)}")

        if self.errors:
            lines.append("\nErrors:")
            lines.extend(f"  - {error}" for error in self.errors)

        if self.warnings:
            lines.append("\nWarnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)

        if self.cycles:
            lines.append("\nCycles Detected:")
            for i, cycle in enumerate(self.cycles, 1):
                lines.append(f"  {i}. {_format_path(cycle)}")

        if self.isolated_nodes:
            lines.append(f"\nIsolated Nodes: {', '.join(str(node) for node in self.isolated_nodes)}")

        return "\n".join(lines)


class GraphValidator:
    """Validator for dependency graphs with detailed error reporting.

    This class provides:
    - Cycle detection with complete path information, reporting every
      distinct cycle rather than stopping at the first one
    - Isolated node detection
    - Graph visualization generation
    """

    def validate(self, graph: DependencyGraph[Any]) -> ValidationReport:
        """Validate a dependency graph and generate a detailed report.

        Cycles are errors unless the graph allows circular dependencies, in
        which case they are reported as warnings.

        Args:
            graph: The DependencyGraph to validate

        Returns:
            ValidationReport containing all validation results
        """
        logger.info("starting_graph_validation", node_count=graph.size)

        report = ValidationReport()
        report.entry_nodes = graph.get_entry_nodes()

        cycles = self._detect_cycles(graph)
        if cycles:
            report.cycles = cycles
            for cycle in cycles:
                message = f"Cycle detected: {_format_path(cycle)}"
                if graph.allow_circular_dependencies:
                    report.add_warning(message)
                else:
                    report.add_error(message)

        isolated = self._find_isolated_nodes(graph)
        if isolated:
            report.isolated_nodes = isolated
            isolated_str = ", ".join(str(node) for node in isolated)
            report.add_warning(f"Isolated nodes with no dependencies or dependents: {isolated_str}")

        logger.info(
            "graph_validation_complete",
            is_valid=report.is_valid,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
        )

        return report

    def _detect_cycles(self, graph: DependencyGraph[Any]) -> list[list[Any]]:
        """Detect the distinct cycles reachable from each node.

        A strict traversal is started at every node not yet cleared. All
        traversals share one visited set: a node only becomes visited once
        everything reachable from it closed without a cycle, so cleared
        subgraphs are never walked twice. Each cycle raised is recorded once,
        keyed on its member set, so rotations of the same cycle found from
        different start nodes are not repeated.

        Args:
            graph: The graph to scan

        Returns:
            List of cycles, each a list of nodes forming the cycle
        """
        edges = {node: graph.get_direct_dependencies_of(node) for node in graph.nodes}
        seen: set[frozenset[Hashable]] = set()
        cleared: set[Any] = set()
        cycles: list[list[Any]] = []

        for node in graph.nodes:
            try:
                DepthFirstTraversal(edges, visited=cleared).visit(node)
            except CircularDependencyError as e:
                members = frozenset(e.path)
                if members not in seen:
                    seen.add(members)
                    cycles.append(e.path)

        if cycles:
            logger.debug("cycles_found", count=len(cycles))

        return cycles

    def _find_isolated_nodes(self, graph: DependencyGraph[Any]) -> list[Any]:
        """Find nodes with neither dependencies nor dependents.

        Args:
            graph: The graph to scan

        Returns:
            List of isolated nodes in graph order
        """
        leaves = set(graph.get_leaf_nodes())
        isolated = [node for node in graph.get_entry_nodes() if node in leaves]

        if isolated:
            logger.debug("isolated_nodes_found", count=len(isolated))

        return isolated

    def generate_visualization(
        self,
        graph: DependencyGraph[Any],
        output_format: str = "mermaid",
    ) -> str:
        """Generate a visual representation of the dependency graph.

        Args:
            graph: The DependencyGraph to visualize
            output_format: Output format ('mermaid' or 'dot')

        Returns:
            String representation of the graph in the requested format

        Raises:
            ValueError: If an unsupported format is requested
        """
        output_format = output_format.lower().strip()

        if output_format == "mermaid":
            return self._generate_mermaid(graph)
        if output_format == "dot":
            return self._generate_graphviz(graph)
        error_msg = f"Unsupported format: {output_format}. Use 'mermaid' or 'dot'."
        raise ValueError(error_msg)

    def _generate_mermaid(self, graph: DependencyGraph[Any]) -> str:
        """Generate a Mermaid flowchart representation.

        Nodes get positional ids (n0, n1, ...) and keep their text as a
        quoted label. Arrows point from a dependency to the node that depends
        on it.
        """
        lines = ["graph TD"]

        if not graph.size:
            lines.append("    Empty[Empty Graph]")
            return "\n".join(lines)

        ids = {node: f"n{index}" for index, node in enumerate(graph.nodes)}

        for node, node_id in ids.items():
            lines.append(f'    {node_id}["{_mermaid_label(node)}"]')

        for from_node, to_node in graph.iter_edges():
            lines.append(f"    {ids[to_node]} --> {ids[from_node]}")

        return "\n".join(lines)

    def _generate_graphviz(self, graph: DependencyGraph[Any]) -> str:
        """Generate a Graphviz DOT representation."""

        def escape_dot_string(s: str) -> str:
            """Escape double quotes for DOT format."""
            return s.replace('"', '\\"')

        lines = ["digraph DependencyGraph {"]
        lines.append("    rankdir=LR;")
        lines.append("    node [shape=box, style=rounded];")

        if not graph.size:
            lines.append('    Empty [label="Empty Graph"];')
        else:
            lines.extend(f'    "{escape_dot_string(str(node))}";' for node in graph.nodes)
            lines.extend(
                f'    "{escape_dot_string(str(to_node))}" -> "{escape_dot_string(str(from_node))}";'
                for from_node, to_node in graph.iter_edges()
            )

        lines.append("}")
        return "\n".join(lines)


def _format_path(path: list[Any]) -> str:
    return " -> ".join(str(node) for node in path)


def _mermaid_label(node: Any) -> str:
    # Double quotes end a quoted Mermaid label
    return str(node).replace('"', "#quot;")
