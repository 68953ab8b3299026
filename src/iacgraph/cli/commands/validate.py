"""
Validate Command - Structural checks on a graph document.

Edges are kept as written (no endpoint checks on load) so that dangling
references show up as validation errors.
"""

import json
import sys

import click
from rich.console import Console
from rich.table import Table

from ...graph.builder import GraphBuilder
from ...graph.validator import GraphValidator
from ..utils import echo_success, read_graph_document

console = Console()


@click.command()
@click.argument("graph_file", type=click.Path())
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def validate(graph_file: str, as_json: bool) -> None:
    """Validate a graph document. Exits non-zero on errors."""
    document = read_graph_document(graph_file)
    if document is None:
        sys.exit(1)
    graph_id, nodes, edges = document

    builder = GraphBuilder(graph_id=graph_id, validate_on_add=False, allow_duplicate_edges=True)
    builder.add_nodes(nodes)
    builder.add_edges(edges)
    graph = builder.build()

    result = GraphValidator().validate(graph)

    if as_json:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        issues = [("error", i) for i in result.errors] + [("warning", i) for i in result.warnings]
        if issues:
            table = Table(title=f"Validation of {graph_file}")
            table.add_column("Severity")
            table.add_column("Code")
            table.add_column("Message")
            for severity, issue in issues:
                style = "red" if severity == "error" else "yellow"
                table.add_row(f"[{style}]{severity}[/{style}]", issue.code, issue.message)
            console.print(table)

        if result.is_valid:
            echo_success(
                f"Graph is valid ({graph.node_count} nodes, {graph.edge_count} edges, "
                f"{len(result.warnings)} warnings)"
            )
        else:
            click.echo(f"Graph is invalid: {len(result.errors)} errors")

    if not result.is_valid:
        sys.exit(1)
