"""
Core type definitions for the infrastructure dependency graph.

Nodes and edges are pydantic models keyed by stable string ids. Node and edge
kinds are closed StrEnums with an UNKNOWN member so that payloads produced by
newer parsers still load.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

MetadataValue = Union[str, int, float, bool, List[str]]


class NodeType(StrEnum):
    """Kinds of infrastructure constructs a node can represent."""
    # Terraform
    TERRAFORM_RESOURCE = "terraform_resource"
    TERRAFORM_DATA = "terraform_data"
    TERRAFORM_MODULE = "terraform_module"
    TERRAFORM_VARIABLE = "terraform_variable"
    TERRAFORM_OUTPUT = "terraform_output"
    TERRAFORM_LOCAL = "terraform_local"
    TERRAFORM_PROVIDER = "terraform_provider"
    # Kubernetes
    K8S_DEPLOYMENT = "k8s_deployment"
    K8S_SERVICE = "k8s_service"
    K8S_CONFIGMAP = "k8s_configmap"
    K8S_SECRET = "k8s_secret"
    K8S_INGRESS = "k8s_ingress"
    K8S_POD = "k8s_pod"
    K8S_STATEFULSET = "k8s_statefulset"
    K8S_DAEMONSET = "k8s_daemonset"
    K8S_JOB = "k8s_job"
    K8S_CRONJOB = "k8s_cronjob"
    K8S_NAMESPACE = "k8s_namespace"
    K8S_SERVICEACCOUNT = "k8s_serviceaccount"
    K8S_ROLE = "k8s_role"
    K8S_ROLEBINDING = "k8s_rolebinding"
    K8S_CLUSTERROLE = "k8s_clusterrole"
    K8S_CLUSTERROLEBINDING = "k8s_clusterrolebinding"
    K8S_PERSISTENTVOLUME = "k8s_persistentvolume"
    K8S_PERSISTENTVOLUMECLAIM = "k8s_persistentvolumeclaim"
    K8S_STORAGECLASS = "k8s_storageclass"
    K8S_NETWORKPOLICY = "k8s_networkpolicy"
    # Helm
    HELM_CHART = "helm_chart"
    HELM_RELEASE = "helm_release"
    HELM_VALUE = "helm_value"
    # Terragrunt
    TG_CONFIG = "tg_config"
    TG_INCLUDE = "tg_include"
    TG_DEPENDENCY = "tg_dependency"

    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "NodeType":
        return cls.UNKNOWN


class EdgeType(StrEnum):
    """Kinds of directed relationships between nodes."""
    # Resource dependencies
    DEPENDS_ON = "depends_on"
    REFERENCES = "references"
    CREATES = "creates"
    DESTROYS = "destroys"
    # Modules
    MODULE_CALL = "module_call"
    MODULE_SOURCE = "module_source"
    MODULE_PROVIDER = "module_provider"
    # Variable / output flow
    INPUT_VARIABLE = "input_variable"
    OUTPUT_VALUE = "output_value"
    LOCAL_REFERENCE = "local_reference"
    # Providers
    PROVIDER_CONFIG = "provider_config"
    PROVIDER_ALIAS = "provider_alias"
    # Data sources
    DATA_SOURCE = "data_source"
    DATA_REFERENCE = "data_reference"
    # Kubernetes
    SELECTOR_MATCH = "selector_match"
    NAMESPACE_MEMBER = "namespace_member"
    VOLUME_MOUNT = "volume_mount"
    SERVICE_TARGET = "service_target"
    INGRESS_BACKEND = "ingress_backend"
    RBAC_BINDING = "rbac_binding"
    CONFIGMAP_REF = "configmap_ref"
    SECRET_REF = "secret_ref"
    # Terragrunt
    TG_INCLUDES = "tg_includes"
    TG_DEPENDS_ON = "tg_depends_on"
    TG_PASSES_INPUT = "tg_passes_input"
    TG_SOURCES = "tg_sources"

    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "EdgeType":
        return cls.UNKNOWN


class NodeLocation(BaseModel):
    """Source position of a construct. Lines and columns are 1-based."""
    file: str
    line_start: int = Field(default=1, ge=1)
    line_end: int = Field(default=1, ge=1)
    column_start: Optional[int] = Field(default=None, ge=1)
    column_end: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(frozen=True)


class Node(BaseModel):
    """
    A single infrastructure construct.

    Re-adding a node with the same id to a builder replaces the earlier one.
    """
    id: str
    name: str = ""
    type: NodeType = NodeType.UNKNOWN
    location: Optional[NodeLocation] = None
    metadata: Dict[str, MetadataValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore")

    def with_metadata(self, **kwargs: MetadataValue) -> "Node":
        merged = {**self.metadata, **kwargs}
        return self.model_copy(update={"metadata": merged})

    def __hash__(self):
        return hash(self.id)


# --- Variant nodes ---

class TerraformResourceNode(Node):
    type: NodeType = NodeType.TERRAFORM_RESOURCE
    resource_type: str = ""
    provider: str = ""
    provider_alias: Optional[str] = None
    count: Optional[Union[int, str]] = None
    for_each: Optional[str] = None
    depends_on: List[str] = Field(default_factory=list)


class TerraformModuleNode(Node):
    type: NodeType = NodeType.TERRAFORM_MODULE
    source: str = ""
    source_type: str = "unknown"
    version: Optional[str] = None
    providers: Dict[str, str] = Field(default_factory=dict)


class TerraformVariableNode(Node):
    type: NodeType = NodeType.TERRAFORM_VARIABLE
    variable_type: Optional[str] = None
    default: Optional[Any] = None
    description: Optional[str] = None
    sensitive: bool = False
    nullable: bool = True


class K8sDeploymentNode(Node):
    type: NodeType = NodeType.K8S_DEPLOYMENT
    namespace: Optional[str] = None
    replicas: Optional[int] = None
    selector: Dict[str, str] = Field(default_factory=dict)


class K8sServiceNode(Node):
    type: NodeType = NodeType.K8S_SERVICE
    namespace: Optional[str] = None
    service_type: str = "ClusterIP"
    selector: Dict[str, str] = Field(default_factory=dict)


class HelmChartNode(Node):
    type: NodeType = NodeType.HELM_CHART
    chart_name: str = ""
    chart_version: Optional[str] = None
    repository: Optional[str] = None


class HelmReleaseNode(Node):
    type: NodeType = NodeType.HELM_RELEASE
    chart_ref: str = ""
    namespace: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class TerragruntConfigNode(Node):
    type: NodeType = NodeType.TG_CONFIG
    terraform_source: Optional[str] = None
    has_remote_state: bool = False
    include_count: int = 0
    dependency_count: int = 0


class TerragruntDependencyNode(Node):
    type: NodeType = NodeType.TG_DEPENDENCY
    dependency_name: str = ""
    config_path: str = ""
    resolved_path: Optional[str] = None
    skip_outputs: bool = False


NODE_MODELS: Dict[NodeType, type] = {
    NodeType.TERRAFORM_RESOURCE: TerraformResourceNode,
    NodeType.TERRAFORM_MODULE: TerraformModuleNode,
    NodeType.TERRAFORM_VARIABLE: TerraformVariableNode,
    NodeType.K8S_DEPLOYMENT: K8sDeploymentNode,
    NodeType.K8S_SERVICE: K8sServiceNode,
    NodeType.HELM_CHART: HelmChartNode,
    NodeType.HELM_RELEASE: HelmReleaseNode,
    NodeType.TG_CONFIG: TerragruntConfigNode,
    NodeType.TG_DEPENDENCY: TerragruntDependencyNode,
}


def parse_node(data: Dict[str, Any]) -> Node:
    """Validate a raw node payload into its variant model (or plain Node)."""
    node_type = NodeType(data.get("type", NodeType.UNKNOWN))
    model = NODE_MODELS.get(node_type, Node)
    return model.model_validate(data)


def is_terraform_node(node: Node) -> bool:
    return node.type.startswith("terraform_")


def is_k8s_node(node: Node) -> bool:
    return node.type.startswith("k8s_")


def is_helm_node(node: Node) -> bool:
    return node.type.startswith("helm_")


def is_terragrunt_node(node: Node) -> bool:
    return node.type.startswith("tg_")


class EdgeMetadata(BaseModel):
    """
    Metadata carried by every edge.

    Extra keys are kept (e.g. Terragrunt ``dependency_name``).
    """
    implicit: bool = False
    confidence: int = Field(default=100, ge=0, le=100)
    attribute: Optional[str] = None
    evidence_ids: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="allow")


class GraphEdge(BaseModel):
    """Directed, confidence-bearing relationship between two nodes."""
    id: str
    source: str
    target: str
    type: EdgeType
    label: Optional[str] = None
    metadata: EdgeMetadata = Field(default_factory=EdgeMetadata)

    model_config = ConfigDict(frozen=True)

    @property
    def confidence(self) -> int:
        return self.metadata.confidence

    def is_self_loop(self) -> bool:
        return self.source == self.target

    def with_confidence(self, confidence: int, implicit: Optional[bool] = None) -> "GraphEdge":
        update: Dict[str, Any] = {"confidence": confidence}
        if implicit is not None:
            update["implicit"] = implicit
        return self.model_copy(update={"metadata": self.metadata.model_copy(update=update)})

    def __hash__(self):
        return hash((self.id, self.source, self.target, self.type))


class GraphMetadata(BaseModel):
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_files: List[str] = Field(default_factory=list)
    node_counts: Dict[str, int] = Field(default_factory=dict)
    edge_counts: Dict[str, int] = Field(default_factory=dict)
    build_time_ms: float = 0.0

    model_config = ConfigDict(frozen=True)


class DependencyGraph(BaseModel):
    """
    Immutable graph snapshot produced by ``GraphBuilder.build()``.

    Adjacency lookups are indexed lazily on first use.
    """
    id: str
    nodes: Dict[str, Node] = Field(default_factory=dict)
    edges: Tuple[GraphEdge, ...] = ()
    metadata: GraphMetadata = Field(default_factory=GraphMetadata)

    model_config = ConfigDict(frozen=True)

    _outgoing: Optional[Dict[str, List[GraphEdge]]] = PrivateAttr(default=None)
    _incoming: Optional[Dict[str, List[GraphEdge]]] = PrivateAttr(default=None)

    def _ensure_index(self) -> None:
        if self._outgoing is not None:
            return
        outgoing: Dict[str, List[GraphEdge]] = {}
        incoming: Dict[str, List[GraphEdge]] = {}
        for edge in self.edges:
            outgoing.setdefault(edge.source, []).append(edge)
            incoming.setdefault(edge.target, []).append(edge)
        self._outgoing = outgoing
        self._incoming = incoming

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def outgoing_edges(self, node_id: str) -> List[GraphEdge]:
        """Edges whose source is ``node_id``, in insertion order."""
        self._ensure_index()
        return list(self._outgoing.get(node_id, ()))

    def incoming_edges(self, node_id: str) -> List[GraphEdge]:
        """Edges whose target is ``node_id``, in insertion order."""
        self._ensure_index()
        return list(self._incoming.get(node_id, ()))

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nodes": [node.model_dump(mode="json") for node in self.nodes.values()],
            "edges": [edge.model_dump(mode="json") for edge in self.edges],
            "metadata": self.metadata.model_dump(mode="json"),
        }
