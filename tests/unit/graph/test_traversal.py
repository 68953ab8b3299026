"""
Unit tests for downstream/upstream traversal and shortest paths.
"""

import pytest

from iacgraph.core.types import EdgeType, Node
from iacgraph.graph.builder import GraphBuilder
from iacgraph.graph.traversal import (
    TraversalEngine,
    TraversalOptions,
    get_downstream,
    get_shortest_path,
    get_upstream,
)


@pytest.fixture
def engine():
    return TraversalEngine()


class TestDownstream:
    def test_follows_incoming_edges(self, engine, vpc_graph):
        result = engine.get_downstream(vpc_graph, "aws_vpc.main")

        assert result.node_ids() == ["aws_vpc.main", "aws_subnet.public", "aws_instance.web"]
        assert result.stats.max_depth_reached == 2
        assert result.stats.nodes_visited == 3

    def test_paths_per_visited_node(self, engine, vpc_graph):
        result = engine.get_downstream(vpc_graph, "aws_vpc.main")
        paths = {p.end_node_id: p for p in result.paths}

        assert paths["aws_subnet.public"].length == 1
        assert paths["aws_instance.web"].node_ids == ["aws_vpc.main", "aws_subnet.public", "aws_instance.web"]
        assert all(p.start_node_id == "aws_vpc.main" for p in result.paths)

    def test_exclude_start(self, vpc_graph):
        result = get_downstream(vpc_graph, "aws_vpc.main", include_start=False)
        assert "aws_vpc.main" not in result.node_ids()

    def test_max_depth(self, engine, vpc_graph):
        result = engine.get_downstream(vpc_graph, "aws_vpc.main", TraversalOptions(max_depth=1))
        assert result.node_ids() == ["aws_vpc.main", "aws_subnet.public"]

    def test_edge_type_filter(self, vpc_graph):
        result = get_downstream(vpc_graph, "var.ami_id", edge_types={EdgeType.REFERENCES})
        assert result.node_ids() == ["var.ami_id"]

        result = get_downstream(vpc_graph, "var.ami_id", edge_types={EdgeType.INPUT_VARIABLE})
        assert result.node_ids() == ["var.ami_id", "aws_instance.web"]

    def test_missing_start_is_empty(self, engine, vpc_graph):
        result = engine.get_downstream(vpc_graph, "ghost")
        assert result.nodes == []
        assert result.paths == []
        assert result.stats.nodes_visited == 0

    def test_cycle_terminates(self, engine, sg_cycle_graph):
        result = engine.get_downstream(sg_cycle_graph, "aws_security_group.a", max_depth=None)
        assert len(result.nodes) == 3


class TestUpstream:
    def test_follows_outgoing_edges(self, vpc_graph):
        result = get_upstream(vpc_graph, "aws_instance.web")
        assert set(result.node_ids()) == {"aws_instance.web", "aws_subnet.public", "var.ami_id", "aws_vpc.main"}

    def test_leaf_has_no_upstream(self, vpc_graph):
        assert get_upstream(vpc_graph, "aws_vpc.main", include_start=False).nodes == []


class TestShortestPath:
    def test_path_follows_edges(self, vpc_graph):
        path = get_shortest_path(vpc_graph, "aws_instance.web", "aws_vpc.main")

        assert path.node_ids == ["aws_instance.web", "aws_subnet.public", "aws_vpc.main"]
        assert path.length == 2
        assert path.edge_ids == [
            "aws_instance.web->aws_subnet.public:references",
            "aws_subnet.public->aws_vpc.main:references",
        ]

    def test_same_node(self, vpc_graph):
        path = get_shortest_path(vpc_graph, "aws_vpc.main", "aws_vpc.main")
        assert path.node_ids == ["aws_vpc.main"]
        assert path.length == 0

    def test_no_path_against_direction(self, vpc_graph):
        assert get_shortest_path(vpc_graph, "aws_vpc.main", "aws_instance.web") is None

    def test_missing_endpoint(self, vpc_graph):
        assert get_shortest_path(vpc_graph, "ghost", "aws_vpc.main") is None
        assert get_shortest_path(vpc_graph, "aws_vpc.main", "ghost") is None

    def test_prefers_shortest(self):
        builder = GraphBuilder()
        builder.add_nodes(Node(id=n) for n in "abcd")
        builder.add_edge_by_ids("a", "b", EdgeType.DEPENDS_ON)
        builder.add_edge_by_ids("b", "c", EdgeType.DEPENDS_ON)
        builder.add_edge_by_ids("c", "d", EdgeType.DEPENDS_ON)
        builder.add_edge_by_ids("a", "d", EdgeType.DEPENDS_ON)

        assert get_shortest_path(builder.build(), "a", "d").length == 1
