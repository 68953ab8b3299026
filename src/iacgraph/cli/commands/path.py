"""
Path Command - Shortest dependency path between two nodes.
"""

import sys

import click
from rich.console import Console

from ...graph.traversal import TraversalEngine
from ..utils import echo_warning, load_graph

console = Console()


@click.command()
@click.argument("graph_file", type=click.Path())
@click.argument("source")
@click.argument("target")
@click.pass_obj
def path(settings, graph_file: str, source: str, target: str) -> None:
    """Find the shortest path from SOURCE to TARGET along dependency edges."""
    graph = load_graph(graph_file, settings)
    if graph is None:
        sys.exit(1)

    result = TraversalEngine().get_shortest_path(graph, source, target)
    if result is None:
        echo_warning(f"No path from {source} to {target}")
        sys.exit(1)

    console.print(f"[bold]{result.length} hop(s):[/bold] {' -> '.join(result.node_ids)}")
