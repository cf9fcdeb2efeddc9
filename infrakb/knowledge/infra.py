"""Infrastructure component vocabulary and the diagram spec anti-patterns inspect.

COMPONENT_TYPES is the closed set of component-type identifiers that knowledge
entries may reference. The catalogue checks every reference against it once,
at load time.

InfraSpec is the minimal shape of a parsed infrastructure diagram: a list of
typed nodes and the connections between them. Anti-pattern detection
predicates and the context enricher operate on it.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

SECURITY_TYPES = ("firewall", "waf", "ids-ips", "vpn-gateway", "nac", "dlp")
NETWORK_TYPES = ("router", "switch-l2", "switch-l3", "load-balancer", "sd-wan", "dns", "cdn")
COMPUTE_TYPES = ("web-server", "app-server", "db-server", "container", "vm", "kubernetes")
CLOUD_TYPES = ("aws-vpc", "azure-vnet", "gcp-network", "private-cloud")
STORAGE_TYPES = ("san-nas", "object-storage", "backup", "cache", "storage")
AUTH_TYPES = ("ldap-ad", "sso", "mfa", "iam")
TELECOM_TYPES = ("central-office", "base-station", "olt", "customer-premise", "idc")
WAN_TYPES = (
    "pe-router",
    "p-router",
    "mpls-network",
    "dedicated-line",
    "metro-ethernet",
    "corporate-internet",
    "vpn-service",
    "sd-wan-service",
    "private-5g",
    "core-network",
    "upf",
    "ring-network",
)
GENERIC_TYPES = ("user", "internet", "zone")

COMPONENT_TYPES: frozenset[str] = frozenset(
    SECURITY_TYPES
    + NETWORK_TYPES
    + COMPUTE_TYPES
    + CLOUD_TYPES
    + STORAGE_TYPES
    + AUTH_TYPES
    + TELECOM_TYPES
    + WAN_TYPES
    + GENERIC_TYPES
)


class InfraNode(BaseModel):
    """Single node in a diagram."""

    id: str
    type: str
    label: str = ""
    tier: str | None = None
    zone: str | None = None


class Connection(BaseModel):
    """Edge between two node IDs."""

    source: str
    target: str
    flow_type: str | None = None
    bidirectional: bool = False


class InfraSpec(BaseModel):
    """Parsed infrastructure diagram."""

    name: str | None = None
    nodes: list[InfraNode] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)

    def node_types(self) -> set[str]:
        return {n.type for n in self.nodes}


# ---------------------------------------------------------------------------
# Spec inspection helpers used by anti-pattern predicates
# ---------------------------------------------------------------------------


def has_node_type(spec: InfraSpec, node_type: str) -> bool:
    return any(n.type == node_type for n in spec.nodes)


def has_any_node_type(spec: InfraSpec, node_types: tuple[str, ...] | list[str]) -> bool:
    return any(n.type in node_types for n in spec.nodes)


def count_nodes_by_type(spec: InfraSpec, node_type: str) -> int:
    return sum(1 for n in spec.nodes if n.type == node_type)


def is_directly_connected(spec: InfraSpec, source_type: str, target_type: str) -> bool:
    """Return True if any node of *source_type* has an edge to any node of *target_type*.

    Edge direction is ignored.
    """
    source_ids = {n.id for n in spec.nodes if n.type == source_type}
    target_ids = {n.id for n in spec.nodes if n.type == target_type}
    return any(
        (c.source in source_ids and c.target in target_ids)
        or (c.target in source_ids and c.source in target_ids)
        for c in spec.connections
    )
