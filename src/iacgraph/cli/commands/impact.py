"""
Impact Command - Calculate the downstream blast radius of changed nodes.
"""

import json
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from ...analysis.impact import ImpactAnalyzer, RiskLevel
from ..utils import echo_error, load_graph

console = Console()

RISK_STYLES = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}


@click.command()
@click.argument("graph_file", type=click.Path())
@click.argument("node_ids", nargs=-1)
@click.option("--max-depth", type=int, default=None,
              help="Maximum traversal depth (default 10)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def impact(settings, graph_file: str, node_ids: tuple, max_depth: Optional[int], as_json: bool) -> None:
    """Show what is affected when NODE_IDS change."""
    if not node_ids:
        echo_error("Provide at least one node id to analyze")
        sys.exit(1)

    graph = load_graph(graph_file, settings)
    if graph is None:
        sys.exit(1)

    missing = [nid for nid in node_ids if not graph.has_node(nid)]
    for nid in missing:
        echo_error(f"Node not found: {nid}")
    if len(missing) == len(node_ids):
        sys.exit(1)

    result = ImpactAnalyzer().analyze_impact(graph, node_ids, max_depth=max_depth)

    if as_json:
        click.echo(json.dumps({
            "changed": result.changed_node_ids,
            "direct": [n.id for n in result.direct_impact],
            "transitive": [n.id for n in result.transitive_impact],
            "summary": result.summary.model_dump(mode="json"),
        }, indent=2))
        return

    summary = result.summary
    style = RISK_STYLES[summary.risk_level]
    console.print(
        f"\n[bold]Impact:[/bold] {summary.total_impacted} node(s), "
        f"risk [{style}]{summary.risk_level.value.upper()}[/{style}]"
    )
    if not summary.total_impacted:
        return

    table = Table()
    table.add_column("Node")
    table.add_column("Type")
    table.add_column("Impact")
    for node in result.direct_impact:
        table.add_row(node.id, node.type.value, "direct")
    for node in result.transitive_impact:
        table.add_row(node.id, node.type.value, "transitive")
    console.print(table)
