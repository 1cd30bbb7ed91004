"""Demonstration of ordering plugin loads with the dependency graph.

This example builds a small plugin graph, prints the load order, shows how a
circular dependency is reported, and then loads the same graph again with
circular dependencies tolerated. Run after ``pip install -e .``.
"""

from depgraph import CircularDependencyError, DependencyGraph, GraphValidator
from depgraph.log_config import bind_context, clear_context, configure_logging, get_logger

PLUGINS = {
    "web": ["auth", "templates"],
    "auth": ["db", "crypto"],
    "templates": ["config"],
    "db": ["config"],
    "crypto": [],
    "config": [],
    "metrics": [],
}


def build_graph(allow_circular_dependencies: bool = False) -> DependencyGraph[str]:
    """Build the plugin graph from the PLUGINS table."""
    graph: DependencyGraph[str] = DependencyGraph(
        allow_circular_dependencies=allow_circular_dependencies,
    )
    graph.add_nodes(*PLUGINS)
    for plugin, requirements in PLUGINS.items():
        for requirement in requirements:
            graph.add_dependency(plugin, requirement)
    return graph


def main() -> None:
    """Main demonstration function."""
    configure_logging(level="INFO", json_logs=False)
    logger = get_logger(__name__)

    bind_context(run="plugin-demo")

    graph = build_graph()
    logger.info("load_order", order=graph.get_overall_order())
    logger.info("needed_by_web", plugins=graph.get_dependencies_of("web"))
    logger.info("affected_by_config", plugins=graph.get_dependents_of("config"))

    # config now wants something from web: a cycle
    graph.add_dependency("config", "web")
    try:
        graph.get_overall_order()
    except CircularDependencyError as e:
        logger.warning("plugin_cycle", path=e.path, node=e.node)

    validator = GraphValidator()
    print(validator.validate(graph).summary())
    print(validator.generate_visualization(graph, output_format="mermaid"))

    graph.allow_circular_dependencies = True
    logger.info("load_order_with_cycles", order=graph.get_overall_order())

    clear_context()


if __name__ == "__main__":
    main()
