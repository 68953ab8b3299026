"""
Stats Command - Summary statistics for a graph document.
"""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from ...graph.stats import get_graph_stats
from ..utils import load_graph

console = Console()


@click.command()
@click.argument("graph_file", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def stats(settings, graph_file: str, as_json: bool) -> None:
    """Show node, edge and degree statistics."""
    graph = load_graph(graph_file, settings)
    if graph is None:
        sys.exit(1)

    graph_stats = get_graph_stats(graph)

    if as_json:
        click.echo(json.dumps(graph_stats.model_dump(mode="json"), indent=2))
        return

    console.print(f"\n[bold]Graph {graph.id}[/bold]")
    console.print(f"  Nodes:       {graph_stats.node_count}")
    console.print(f"  Edges:       {graph_stats.edge_count}")
    console.print(f"  Orphans:     {graph_stats.orphan_nodes}")
    console.print(f"  Avg degree:  {graph_stats.avg_edges_per_node:.2f}")
    console.print(f"  Max in/out:  {graph_stats.max_in_degree}/{graph_stats.max_out_degree}")
    console.print(f"  Density:     {graph_stats.density:.4f}")

    if graph_stats.nodes_by_type:
        table = Table(title="Nodes by type")
        table.add_column("Type")
        table.add_column("Count", justify="right")
        for node_type, count in sorted(graph_stats.nodes_by_type.items(), key=lambda x: -x[1]):
            table.add_row(node_type, str(count))
        console.print(table)
