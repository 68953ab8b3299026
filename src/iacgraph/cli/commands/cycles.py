"""
Cycles Command - List dependency cycles.
"""

import json
import sys

import click
from rich.console import Console

from ...graph.cycles import CycleDetector
from ..utils import echo_success, echo_warning, load_graph

console = Console()


@click.command()
@click.argument("graph_file", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def cycles(settings, graph_file: str, as_json: bool) -> None:
    """Detect cycles in a graph document."""
    graph = load_graph(graph_file, settings)
    if graph is None:
        sys.exit(1)

    result = CycleDetector().detect_cycles(graph)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
        return

    if not result.has_cycles:
        echo_success("No cycles found")
        return

    echo_warning(
        f"{result.stats.cycles_found} cycle(s) across {result.stats.nodes_in_cycles} node(s)"
    )
    for i, cycle in enumerate(result.cycles, 1):
        console.print(f"  [bold]{i}.[/bold] {' -> '.join(cycle.node_ids)} [dim](length {cycle.length})[/dim]")
