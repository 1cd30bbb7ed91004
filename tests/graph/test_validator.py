"""Unit tests for GraphValidator class.

Tests cover:
- Cycle detection with path reporting
- Isolated node detection
- Validation report generation
- Graph visualization
- Edge cases and error conditions
"""

from collections.abc import Mapping

import pytest

import depgraph.graph.validator as validator_module
from depgraph.graph.dependency_graph import DependencyGraph
from depgraph.graph.traversal import DepthFirstTraversal
from depgraph.graph.validator import GraphValidator, ValidationReport


class TestValidationReport:
    """Test ValidationReport functionality."""

    def test_initialization(self):
        """Test that ValidationReport initializes correctly."""
        report = ValidationReport()

        assert report.is_valid is True
        assert report.errors == []
        assert report.warnings == []
        assert report.cycles == []
        assert report.isolated_nodes == []
        assert report.entry_nodes == []

    def test_add_error(self):
        """Test adding errors marks validation as failed."""
        report = ValidationReport()
        report.add_error("Test error")

        assert not report.is_valid
        assert report.errors == ["Test error"]

    def test_add_warning(self):
        """Test adding warnings doesn't fail validation."""
        report = ValidationReport()
        report.add_warning("Test warning")

        assert report.is_valid
        assert report.warnings == ["Test warning"]

    def test_summary_empty_report(self):
        """Test summary generation for empty report."""
        summary = ValidationReport().summary()

        assert "Validation Status: PASS" in summary
        assert "Errors: 0" in summary
        assert "Warnings: 0" in summary

    def test_summary_with_errors(self):
        """Test summary generation with errors."""
        report = ValidationReport()
        report.add_error("Error 1")
        report.add_error("Error 2")
        summary = report.summary()

        assert "Validation Status: FAIL" in summary
        assert "Errors: 2" in summary
        assert "  - Error 1" in summary
        assert "  - Error 2" in summary

    def test_summary_with_cycles(self):
        """Test summary generation with cycle information."""
        report = ValidationReport()
        report.cycles = [["plugin-a", "plugin-b", "plugin-a"]]
        summary = report.summary()

        assert "Cycles: 1" in summary
        assert "1. plugin-a -> plugin-b -> plugin-a" in summary

    def test_summary_with_non_string_nodes(self):
        """Test summary renders arbitrary node values."""
        report = ValidationReport()
        report.cycles = [[1, 2, 1]]
        report.isolated_nodes = [("pkg", 3)]
        summary = report.summary()

        assert "1 -> 2 -> 1" in summary
        assert "Isolated Nodes: ('pkg', 3)" in summary


class TestCycleDetection:
    """Test detailed cycle detection with path reporting."""

    def test_no_cycles_in_valid_graph(self):
        """Test that valid graphs report no cycles."""
        graph = DependencyGraph.from_edges([("b", "a")])

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert report.cycles == []
        assert report.errors == []

    def test_simple_two_node_cycle(self):
        """Test detection of simple two-node cycle with path."""
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "a")])

        report = GraphValidator().validate(graph)

        assert not report.is_valid
        assert report.cycles == [["a", "b", "a"]]
        assert report.errors == ["Cycle detected: a -> b -> a"]

    def test_self_dependency_cycle(self):
        """Test detection of a node depending on itself."""
        graph = DependencyGraph.from_edges([("a", "a")])

        report = GraphValidator().validate(graph)

        assert not report.is_valid
        assert report.cycles == [["a", "a"]]

    def test_three_node_cycle(self):
        """Test detection of three-node cycle with complete path."""
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "c"), ("c", "a")])

        report = GraphValidator().validate(graph)

        assert report.cycles == [["a", "b", "c", "a"]]

    def test_complex_graph_with_cycle(self):
        """Test cycle detection in graph with both valid and cyclic parts."""
        graph = DependencyGraph.from_edges([("b", "a"), ("c", "d"), ("d", "c")])

        report = GraphValidator().validate(graph)

        assert not report.is_valid
        assert report.cycles == [["c", "d", "c"]]

    def test_multiple_cycles(self):
        """Test every independent cycle is reported once."""
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "a"), ("c", "d"), ("d", "c")])

        report = GraphValidator().validate(graph)

        assert report.cycles == [["a", "b", "a"], ["c", "d", "c"]]
        assert len(report.errors) == 2

    def test_cycles_are_warnings_when_allowed(self):
        """Test tolerated cycles do not fail validation."""
        graph = DependencyGraph.from_edges(
            [("a", "b"), ("b", "a")],
            allow_circular_dependencies=True,
        )

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert report.cycles == [["a", "b", "a"]]
        assert report.warnings == ["Cycle detected: a -> b -> a"]


class TestIsolatedNodes:
    """Test detection of isolated nodes."""

    def test_no_isolated_nodes(self):
        """Test connected graphs report no isolated nodes."""
        graph = DependencyGraph.from_edges([("b", "a"), ("c", "b")])

        report = GraphValidator().validate(graph)

        assert report.isolated_nodes == []
        assert report.warnings == []

    def test_isolated_node_is_warning(self):
        """Test an unconnected node is a warning, not an error."""
        graph = DependencyGraph.from_edges([("b", "a")])
        graph.add_node("solo")

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert report.isolated_nodes == ["solo"]
        assert report.warnings == ["Isolated nodes with no dependencies or dependents: solo"]

    def test_entry_nodes_recorded(self):
        """Test the report lists entry nodes."""
        graph = DependencyGraph.from_edges([("app", "core"), ("cli", "core")])

        report = GraphValidator().validate(graph)

        assert report.entry_nodes == ["app", "cli"]


class TestGraphVisualization:
    """Test graph visualization generation."""

    def test_mermaid_visualization_empty_graph(self):
        """Test Mermaid visualization for empty graph."""
        viz = GraphValidator().generate_visualization(DependencyGraph(), output_format="mermaid")

        assert viz == "graph TD\n    Empty[Empty Graph]"

    def test_mermaid_visualization_simple_graph(self):
        """Test arrows point from dependency to dependent."""
        graph = DependencyGraph.from_edges([("task-2", "task-1")])

        viz = GraphValidator().generate_visualization(graph)

        assert viz.splitlines() == [
            "graph TD",
            '    n0["task-2"]',
            '    n1["task-1"]',
            "    n1 --> n0",
        ]

    def test_mermaid_ids_do_not_collide(self):
        """Test names differing only in punctuation get distinct ids."""
        graph = DependencyGraph.from_edges([("a-b", "a_b"), ("a.b", "a_b")])

        viz = GraphValidator().generate_visualization(graph, output_format="mermaid")

        assert viz.splitlines() == [
            "graph TD",
            '    n0["a-b"]',
            '    n1["a_b"]',
            '    n2["a.b"]',
            "    n1 --> n0",
            "    n1 --> n2",
        ]

    def test_mermaid_non_string_nodes_are_labels_only(self):
        """Test tuple nodes only appear inside quoted labels."""
        graph = DependencyGraph.from_edges([(("pkg", 1), ("pkg", 2))])

        viz = GraphValidator().generate_visualization(graph, output_format="mermaid")

        assert viz.splitlines() == [
            "graph TD",
            "    n0[\"('pkg', 1)\"]",
            "    n1[\"('pkg', 2)\"]",
            "    n1 --> n0",
        ]

    def test_mermaid_escapes_quotes_in_labels(self):
        """Test double quotes in node names do not end the label."""
        graph = DependencyGraph()
        graph.add_node('say "hi"')

        viz = GraphValidator().generate_visualization(graph, output_format="mermaid")

        assert '    n0["say #quot;hi#quot;"]' in viz

    def test_graphviz_visualization_simple_graph(self):
        """Test Graphviz DOT visualization."""
        graph = DependencyGraph.from_edges([("task-2", "task-1")])

        viz = GraphValidator().generate_visualization(graph, output_format="dot")

        assert viz.startswith("digraph DependencyGraph {")
        assert '    "task-1" -> "task-2";' in viz
        assert viz.endswith("}")

    def test_graphviz_escapes_quotes(self):
        """Test double quotes in node names are escaped."""
        graph = DependencyGraph()
        graph.add_node('say "hi"')

        viz = GraphValidator().generate_visualization(graph, output_format="dot")

        assert '    "say \\"hi\\"";' in viz

    def test_graphviz_visualization_empty_graph(self):
        """Test DOT visualization for empty graph."""
        viz = GraphValidator().generate_visualization(DependencyGraph(), output_format="dot")

        assert 'Empty [label="Empty Graph"];' in viz

    def test_format_is_case_insensitive(self):
        """Test format names are normalized."""
        graph = DependencyGraph.from_edges([("b", "a")])

        viz = GraphValidator().generate_visualization(graph, output_format=" DOT ")

        assert "digraph DependencyGraph" in viz

    def test_unsupported_visualization_format(self):
        """Test that unsupported format raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported format"):
            GraphValidator().generate_visualization(DependencyGraph(), output_format="invalid")


class TestEdgeCases:
    """Test edge cases and special scenarios."""

    def test_empty_graph_validation(self):
        """Test validation of empty graph."""
        report = GraphValidator().validate(DependencyGraph())

        assert report.is_valid
        assert report.cycles == []
        assert report.isolated_nodes == []

    def test_long_dependency_chain(self):
        """Test validation of long linear dependency chain."""
        graph = DependencyGraph.from_edges((f"task-{i}", f"task-{i - 1}") for i in range(2, 11))

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert report.cycles == []
        assert report.entry_nodes == ["task-10"]

    def test_validation_report_summary_completeness(self):
        """Test that validation report summary contains all relevant info."""
        graph = DependencyGraph.from_edges([("a", "b"), ("b", "a")])
        graph.add_node("solo")

        summary = GraphValidator().validate(graph).summary()

        assert "Validation Status: FAIL" in summary
        assert "Cycles Detected:" in summary
        assert "Isolated Nodes: solo" in summary
        assert "Errors: 1" in summary
        assert "Warnings: 1" in summary

    def test_cycle_scan_expands_each_node_once(self, monkeypatch):
        """Test cleared subgraphs are not walked again from later start nodes."""

        class CountingEdges(Mapping):
            def __init__(self, edges):
                self.edges = edges
                self.lookups = 0

            def __getitem__(self, key):
                return self.edges[key]

            def __iter__(self):
                return iter(self.edges)

            def __len__(self):
                return len(self.edges)

            def get(self, key, default=None):
                self.lookups += 1
                return self.edges.get(key, default)

        counting = {}

        def counting_traversal(edges, **kwargs):
            wrapped = counting.setdefault("edges", CountingEdges(edges))
            return DepthFirstTraversal(wrapped, **kwargs)

        monkeypatch.setattr(validator_module, "DepthFirstTraversal", counting_traversal)

        length = 5000
        graph = DependencyGraph()
        graph.add_nodes(*range(length))
        for i in range(1, length):
            graph.add_dependency(i, i - 1)

        report = GraphValidator().validate(graph)

        assert report.is_valid
        assert counting["edges"].lookups == length
