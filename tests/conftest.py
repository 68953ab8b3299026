"""Shared fixtures: small Terraform graphs."""

import pytest

from iacgraph.core.types import (
    EdgeType,
    NodeLocation,
    NodeType,
    TerraformResourceNode,
    TerraformVariableNode,
)
from iacgraph.graph.builder import GraphBuilder


def _resource(resource_id: str, line: int = 1, file: str = "main.tf") -> TerraformResourceNode:
    resource_type, name = resource_id.split(".", 1)
    return TerraformResourceNode(
        id=resource_id,
        name=name,
        resource_type=resource_type,
        provider="aws",
        location=NodeLocation(file=file, line_start=line, line_end=line + 5),
    )


@pytest.fixture
def vpc_nodes():
    """VPC chain: instance -> subnet -> vpc, instance -> var.ami_id."""
    return [
        _resource("aws_vpc.main", 1),
        _resource("aws_subnet.public", 10),
        _resource("aws_instance.web", 20),
        TerraformVariableNode(
            id="var.ami_id",
            name="ami_id",
            type=NodeType.TERRAFORM_VARIABLE,
            variable_type="string",
            location=NodeLocation(file="variables.tf", line_start=1, line_end=3),
        ),
    ]


@pytest.fixture
def vpc_builder(vpc_nodes):
    builder = GraphBuilder(graph_id="vpc")
    builder.add_nodes(vpc_nodes)
    builder.add_edge_by_ids("aws_subnet.public", "aws_vpc.main", EdgeType.REFERENCES)
    builder.add_edge_by_ids("aws_instance.web", "aws_subnet.public", EdgeType.REFERENCES)
    builder.add_edge_by_ids("aws_instance.web", "var.ami_id", EdgeType.INPUT_VARIABLE)
    return builder


@pytest.fixture
def vpc_graph(vpc_builder):
    return vpc_builder.build()


@pytest.fixture
def sg_cycle_graph():
    """Three security groups referencing each other: a -> b -> c -> a."""
    builder = GraphBuilder(graph_id="sg-cycle")
    for name in ("a", "b", "c"):
        builder.add_node(_resource(f"aws_security_group.{name}", file="sg.tf"))
    builder.add_edge_by_ids("aws_security_group.a", "aws_security_group.b", EdgeType.REFERENCES)
    builder.add_edge_by_ids("aws_security_group.b", "aws_security_group.c", EdgeType.REFERENCES)
    builder.add_edge_by_ids("aws_security_group.c", "aws_security_group.a", EdgeType.REFERENCES)
    return builder.build()
