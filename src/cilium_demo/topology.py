"""Kind node-topology helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

import yaml

from .errors import MissingFileError


@dataclass(frozen=True)
class ClusterTopology:
    """Node roles declared in a Kind cluster config, in file order."""

    roles: Sequence[str]

    @property
    def workers(self) -> int:
        return sum(1 for role in self.roles if role == "worker")

    @property
    def control_planes(self) -> int:
        return sum(1 for role in self.roles if role == "control-plane")

    def node_names(self, cluster_name: str) -> List[str]:
        """Return the container names Kind assigns to the declared nodes.

        Kind numbers nodes per role: ``<name>-worker``, ``<name>-worker2``...
        """

        names: List[str] = []
        seen = {}
        for role in self.roles:
            seen[role] = seen.get(role, 0) + 1
            suffix = "" if seen[role] == 1 else str(seen[role])
            names.append(f"{cluster_name}-{role}{suffix}")
        return names

    def worker_names(self, cluster_name: str) -> List[str]:
        return worker_nodes(self.node_names(cluster_name))


def _is_worker(node_name: str) -> bool:
    # kind names workers <cluster>-worker, <cluster>-worker2, ...
    return re.search(r"-worker\d*$", node_name) is not None


def load_topology(path: Path) -> ClusterTopology:
    if not path.exists():
        raise MissingFileError(f"{path.name} not found in {path.parent}")

    data = yaml.safe_load(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a Kind Cluster mapping")

    nodes = data.get("nodes")
    if not nodes:
        # Kind defaults to a single control-plane node
        return ClusterTopology(roles=("control-plane",))
    if not isinstance(nodes, list):
        raise ValueError("'nodes' must be a list")

    roles = []
    for node in nodes:
        role = str((node or {}).get("role", "control-plane"))
        if role not in ("control-plane", "worker"):
            raise ValueError(f"Unsupported node role '{role}'")
        roles.append(role)
    return ClusterTopology(roles=tuple(roles))


def worker_nodes(node_names: Sequence[str]) -> List[str]:
    """Filter the BGP speakers (worker nodes) out of ``node_names``.

    Control-plane and external load-balancer nodes are dropped.
    """

    return [name for name in node_names if _is_worker(name)]
