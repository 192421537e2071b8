"""Configuration data structures for the demo lab.

These dataclasses describe the cluster, the Cilium release, the FRR peering
router, the sample application and its Gateway.  Every field carries the
default the lab was built around so an empty (or absent) YAML file yields a
working setup.  :mod:`cilium_demo_cli.config` turns YAML into these objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence, Tuple


REQUIRED_TOOLS: Tuple[str, ...] = ("docker", "kind", "kubectl", "helm", "cilium", "mkcert")

GATEWAY_API_CRDS: Tuple[str, ...] = (
    "gatewayclasses",
    "gateways",
    "httproutes",
    "referencegrants",
    "grpcroutes",
)


@dataclass(frozen=True)
class ClusterSettings:
    """Kind cluster description."""

    name: str = "kind"
    topology_file: str = "kind.yaml"
    network: str = "kind"

    @property
    def context(self) -> str:
        return f"kind-{self.name}"


@dataclass(frozen=True)
class CiliumSettings:
    """Cilium Helm release and Gateway API CRD versions."""

    version: str = "1.18.4"
    gateway_api_version: str = "v1.2.0"
    helm_repo_name: str = "cilium"
    helm_repo_url: str = "https://helm.cilium.io/"
    release_name: str = "cilium"
    namespace: str = "kube-system"
    values_file: str = "cilium-gatewayapi-values.yaml"
    l2_policy_file: str = "l2-announcement-policy.yaml"
    lb_pool_file: str = "loadbalancer-ip-pool.yaml"
    wait_duration: str = "5m"

    @property
    def chart(self) -> str:
        return f"{self.helm_repo_name}/cilium"

    def crd_urls(self) -> Sequence[str]:
        base = (
            "https://raw.githubusercontent.com/kubernetes-sigs/gateway-api/"
            f"{self.gateway_api_version}/config/crd/standard"
        )
        return [f"{base}/gateway.networking.k8s.io_{crd}.yaml" for crd in GATEWAY_API_CRDS]


@dataclass(frozen=True)
class BGPPeer:
    """A BGP neighbour of the FRR router (one per Cilium BGP speaker).

    Attributes
    ----------
    address:
        The neighbour IP address as a string.
    remote_asn:
        The peer Autonomous System Number.
    description:
        Optional human readable label, usually the Kind node name.
    """

    address: str
    remote_asn: int
    description: Optional[str] = None


@dataclass(frozen=True)
class RouterSettings:
    """FRR container and BGP peering knobs."""

    image: str = "frrouting/frr:v8.2.2"
    container_name: str = "frr"
    local_asn: int = 64512
    cilium_asn: int = 64513
    config_dir: str = "frr"
    peer_file: str = "bgp-peer.yaml"
    advertisement_file: str = "bgp-advertisement.yaml"
    peer_config_name: str = "frr"
    ready_attempts: int = 5
    ready_interval: float = 3.0


@dataclass(frozen=True)
class ApplicationSettings:
    """Sample application deployed into the cluster."""

    namespace: str = "ciscoboutique"
    manifests_file: str = "boutique-manifests.yaml"
    settle_seconds: float = 10.0
    deployments_timeout: str = "600s"
    pods_timeout: str = "120s"


@dataclass(frozen=True)
class GatewaySettings:
    """Gateway, routes and TLS material for the sample application."""

    name: str = "cisco-boutique-gateway"
    gateway_class: str = "cilium"
    manifest_file: str = "gateway-api-example.yaml"
    tls_secret: str = "demo-cert"
    cert_domain: str = "*.cilium.rocks"
    timeout: str = "120s"
    hostnames: Sequence[str] = (
        "boutique.cilium.rocks",
        "www.boutique.cilium.rocks",
        "api.boutique.cilium.rocks",
        "admin.boutique.cilium.rocks",
        "health.boutique.cilium.rocks",
    )

    @property
    def cert_file(self) -> str:
        # mkcert names wildcard certs "_wildcard.<domain>.pem"
        return f"{self.cert_domain.replace('*', '_wildcard')}.pem"

    @property
    def key_file(self) -> str:
        return f"{self.cert_domain.replace('*', '_wildcard')}-key.pem"

    @property
    def primary_host(self) -> str:
        return self.hostnames[0]


@dataclass(frozen=True)
class LabConfig:
    """Root configuration object handed to every step."""

    assets_dir: Path = Path("deploy")
    cluster: ClusterSettings = field(default_factory=ClusterSettings)
    cilium: CiliumSettings = field(default_factory=CiliumSettings)
    router: RouterSettings = field(default_factory=RouterSettings)
    application: ApplicationSettings = field(default_factory=ApplicationSettings)
    gateway: GatewaySettings = field(default_factory=GatewaySettings)
    required_tools: Sequence[str] = REQUIRED_TOOLS
    state_dir: Path = Path(".cilium-demo")

    def asset(self, name: str) -> Path:
        """Return the path of ``name`` inside the assets directory."""

        return self.assets_dir / name

    @property
    def router_config_dir(self) -> Path:
        return self.assets_dir / self.router.config_dir
