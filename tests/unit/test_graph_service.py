"""
Unit tests for the GraphService facade.
"""

import logging

import pytest

from iacgraph.core.exceptions import GraphLimitError
from iacgraph.core.types import EdgeType, GraphEdge, Node
from iacgraph.service import GraphService, GraphServiceConfig


def _edge(source, target, edge_type=EdgeType.REFERENCES):
    return GraphEdge(id=f"{source}->{target}", source=source, target=target, type=edge_type)


@pytest.fixture
def service():
    return GraphService()


class TestBuildGraph:
    def test_builds_vpc(self, service, vpc_nodes):
        edges = [
            _edge("aws_subnet.public", "aws_vpc.main"),
            _edge("aws_instance.web", "aws_subnet.public"),
            _edge("aws_instance.web", "var.ami_id", EdgeType.INPUT_VARIABLE),
        ]
        graph = service.build_graph(vpc_nodes, edges, graph_id="vpc")

        assert graph.id == "vpc"
        assert graph.node_count == 4
        assert graph.edge_count == 3
        assert service.validate(graph).is_valid

    def test_drops_dangling_edges(self, service, caplog):
        nodes = [Node(id="a"), Node(id="b")]
        edges = [_edge("a", "b"), _edge("a", "ghost"), _edge("ghost", "b")]

        with caplog.at_level(logging.WARNING, logger="iacgraph.service"):
            graph = service.build_graph(nodes, edges)

        assert [e.id for e in graph.edges] == ["a->b"]
        assert "Dropping edge a->ghost: missing target node" in caplog.text
        assert "Dropping edge ghost->b: missing source node" in caplog.text

    def test_max_nodes(self):
        service = GraphService(GraphServiceConfig(max_nodes=2))
        with pytest.raises(GraphLimitError) as exc:
            service.build_graph([Node(id=str(i)) for i in range(3)], [])
        assert exc.value.limit_name == "max_nodes"
        assert exc.value.actual == 3

    def test_max_edges_per_node(self):
        service = GraphService(GraphServiceConfig(max_edges_per_node=1))
        nodes = [Node(id="a"), Node(id="b"), Node(id="c")]
        with pytest.raises(GraphLimitError) as exc:
            service.build_graph(nodes, [_edge("a", "b"), _edge("a", "c")])
        assert exc.value.subject == "a"

    def test_logs_cycle_warning(self, service, caplog):
        nodes = [Node(id="a"), Node(id="b")]
        with caplog.at_level(logging.DEBUG, logger="iacgraph.service"):
            service.build_graph(nodes, [_edge("a", "b"), _edge("b", "a")])
        assert "CYCLE_DETECTED" in caplog.text


class TestDelegation:
    def test_queries(self, service, vpc_graph, sg_cycle_graph):
        assert service.detect_cycles(sg_cycle_graph).has_cycles
        assert service.get_downstream(vpc_graph, "aws_vpc.main", include_start=False).node_ids() == [
            "aws_subnet.public", "aws_instance.web",
        ]
        assert "aws_vpc.main" in service.get_upstream(vpc_graph, "aws_subnet.public").node_ids()
        assert service.get_shortest_path(vpc_graph, "aws_subnet.public", "aws_vpc.main").length == 1
        assert service.analyze_impact(vpc_graph, ["aws_vpc.main"]).summary.total_impacted == 2
        assert service.extract_subgraph(vpc_graph, node_ids=["aws_vpc.main"]).node_count == 1
        assert service.merge_graphs([vpc_graph, sg_cycle_graph]).node_count == 7
        assert service.get_stats(vpc_graph).edge_count == 3
