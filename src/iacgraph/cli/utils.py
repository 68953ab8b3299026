"""
CLI Utilities - Shared helpers for the command line.

Graph documents are JSON files of the form::

    {"id": "optional", "nodes": [...], "edges": [...]}

Evidence documents hold ``{"evidence": [...]}``.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
from pydantic import ValidationError

from ..core.evidence import Evidence
from ..core.exceptions import GraphError
from ..core.types import DependencyGraph, GraphEdge, Node, parse_node
from ..service import GraphService
from ..settings import Settings


def echo_success(message: str) -> None:
    click.echo(click.style(f"✅ {message}", fg="green"))


def echo_error(message: str) -> None:
    click.echo(click.style(f"❌ {message}", fg="red"), err=True)


def echo_warning(message: str) -> None:
    click.echo(click.style(f"⚠️  {message}", fg="yellow"))


def echo_info(message: str) -> None:
    click.echo(click.style(f"   {message}", dim=True))


def _read_json(path: str) -> Optional[Dict[str, Any]]:
    file_path = Path(path)
    if not file_path.exists():
        echo_error(f"File not found: {path}")
        return None
    try:
        data = json.loads(file_path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        echo_error(f"Failed to read {path}: {e}")
        return None
    if not isinstance(data, dict):
        echo_error(f"Expected a JSON object in {path}")
        return None
    return data


def read_graph_document(path: str) -> Optional[Tuple[Optional[str], List[Node], List[GraphEdge]]]:
    """
    Parse a graph document into candidate nodes and edges.

    Returns:
        (graph_id, nodes, edges), or None if the document could not be parsed.
    """
    data = _read_json(path)
    if data is None:
        return None
    try:
        nodes = [parse_node(n) for n in data.get("nodes", [])]
        edges = [GraphEdge.model_validate(e) for e in data.get("edges", [])]
    except (ValidationError, AttributeError) as e:
        echo_error(f"Invalid graph document {path}: {e}")
        return None
    return data.get("id"), nodes, edges


def load_graph(path: str, settings: Optional[Settings] = None) -> Optional[DependencyGraph]:
    """
    Load and build a graph, dropping edges whose endpoints are missing.

    Returns:
        The built graph, or None if loading failed (an error is printed).
    """
    document = read_graph_document(path)
    if document is None:
        return None
    graph_id, nodes, edges = document

    service = GraphService((settings or Settings()).graph)
    try:
        return service.build_graph(nodes, edges, graph_id=graph_id)
    except GraphError as e:
        echo_error(f"Failed to build graph: {e}")
        return None


def load_evidence(path: str) -> Optional[List[Evidence]]:
    data = _read_json(path)
    if data is None:
        return None
    try:
        return [Evidence.model_validate(e) for e in data.get("evidence", [])]
    except ValidationError as e:
        echo_error(f"Invalid evidence document {path}: {e}")
        return None
