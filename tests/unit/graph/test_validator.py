"""
Unit tests for graph validation.
"""

import pytest

from iacgraph.core.types import EdgeType, GraphEdge, Node
from iacgraph.graph.builder import GraphBuilder, create_empty_graph
from iacgraph.graph.validator import (
    CYCLE_DETECTED,
    DANGLING_SOURCE,
    DANGLING_TARGET,
    ORPHAN_NODE,
    SELF_LOOP,
    GraphValidator,
    validate_graph,
)


@pytest.fixture
def validator():
    return GraphValidator()


def _graph(node_ids, edges, validate_on_add=True):
    builder = GraphBuilder(validate_on_add=validate_on_add)
    builder.add_nodes(Node(id=nid) for nid in node_ids)
    for source, target in edges:
        builder.add_edge_by_ids(source, target, EdgeType.DEPENDS_ON)
    return builder.build()


class TestValidate:
    def test_vpc_graph_is_valid(self, vpc_graph):
        result = validate_graph(vpc_graph)
        assert result.is_valid
        assert result.errors == []

    def test_dangling_edges_are_errors(self, validator):
        builder = GraphBuilder(validate_on_add=False)
        builder.add_node(Node(id="a"))
        builder.add_edge(GraphEdge(id="e1", source="ghost", target="a", type=EdgeType.REFERENCES))
        builder.add_edge(GraphEdge(id="e2", source="a", target="phantom", type=EdgeType.REFERENCES))

        result = validator.validate(builder.build())

        assert not result.is_valid
        assert [i.code for i in result.errors] == [DANGLING_SOURCE, DANGLING_TARGET]
        assert result.errors[0].edge_id == "e1"

    def test_warnings_do_not_invalidate(self, validator):
        graph = _graph(["a", "b", "lonely"], [("a", "a"), ("a", "b"), ("b", "a")])
        result = validator.validate(graph)

        codes = {i.code for i in result.warnings}
        assert result.is_valid
        assert {SELF_LOOP, ORPHAN_NODE, CYCLE_DETECTED} <= codes
        orphan = next(i for i in result.warnings if i.code == ORPHAN_NODE)
        assert orphan.node_id == "lonely"


class TestCycles:
    def test_empty_graph_has_no_cycles(self, validator):
        assert validator.has_cycles(create_empty_graph()) is False

    def test_chain_has_no_cycles(self, validator, vpc_graph):
        assert validator.has_cycles(vpc_graph) is False

    def test_security_group_cycle(self, validator, sg_cycle_graph):
        assert validator.has_cycles(sg_cycle_graph) is True
        assert len(validator.find_cycles(sg_cycle_graph)) == 1

    def test_self_loop_is_cycle(self, validator):
        assert validator.has_cycles(_graph(["a"], [("a", "a")])) is True

    def test_has_cycles_agrees_with_detector(self, validator, vpc_graph, sg_cycle_graph):
        for graph in (vpc_graph, sg_cycle_graph, _graph(["a", "b"], [("a", "b"), ("b", "a")])):
            assert validator.has_cycles(graph) == bool(validator.find_cycles(graph))

    def test_long_chain_does_not_recurse(self, validator):
        ids = [f"n{i}" for i in range(3000)]
        graph = _graph(ids, list(zip(ids, ids[1:])))
        assert validator.has_cycles(graph) is False


class TestQueries:
    def test_orphans(self, validator, vpc_graph):
        assert validator.find_orphan_nodes(vpc_graph) == []
        assert validator.find_orphan_nodes(_graph(["a", "b"], [])) == ["a", "b"]

    def test_unreachable(self, validator, vpc_graph):
        assert validator.find_unreachable_nodes(vpc_graph, "aws_instance.web") == []
        assert set(validator.find_unreachable_nodes(vpc_graph, "aws_vpc.main")) == {
            "aws_subnet.public", "aws_instance.web", "var.ami_id",
        }

    def test_unreachable_from_missing_start(self, validator, vpc_graph):
        assert set(validator.find_unreachable_nodes(vpc_graph, "ghost")) == set(vpc_graph.nodes)

    def test_topological_order(self, validator, vpc_graph):
        order = validator.get_topological_order(vpc_graph)
        assert order.index("aws_instance.web") < order.index("aws_subnet.public") < order.index("aws_vpc.main")

    def test_topological_order_cyclic(self, validator, sg_cycle_graph):
        assert validator.get_topological_order(sg_cycle_graph) is None

    def test_topological_order_self_loop(self, validator):
        assert validator.get_topological_order(_graph(["a", "b"], [("a", "b"), ("b", "b")])) is None

    def test_topological_order_covers_all_nodes(self, validator):
        graph = _graph(["a", "b", "c", "lonely"], [("a", "b"), ("a", "c"), ("b", "c")])
        order = validator.get_topological_order(graph)

        assert sorted(order) == ["a", "b", "c", "lonely"]
        assert order.index("a") < order.index("b") < order.index("c")

    def test_unreachable_through_cycle(self, validator):
        graph = _graph(["a", "b", "c", "d"], [("a", "b"), ("b", "c"), ("c", "a"), ("d", "a")])

        assert validator.find_unreachable_nodes(graph, "b") == ["d"]
        assert validator.find_unreachable_nodes(graph, "d") == []
