"""Cilium BGP control-plane objects generated at runtime."""

from __future__ import annotations

from typing import Any, Dict

import yaml

from .config import RouterSettings


def build_cluster_config(settings: RouterSettings, peer_address: str) -> Dict[str, Any]:
    """Return a ``CiliumBGPClusterConfig`` peering worker nodes with the router.

    Control-plane nodes are excluded so the speakers match the neighbours the
    router was rendered with.
    """

    return {
        "apiVersion": "cilium.io/v2",
        "kind": "CiliumBGPClusterConfig",
        "metadata": {"name": settings.peer_config_name},
        "spec": {
            "nodeSelector": {
                "matchExpressions": [
                    {
                        "key": "node-role.kubernetes.io/control-plane",
                        "operator": "DoesNotExist",
                    }
                ]
            },
            "bgpInstances": [
                {
                    "name": str(settings.cilium_asn),
                    "localASN": settings.cilium_asn,
                    "peers": [
                        {
                            "name": settings.peer_config_name,
                            "peerASN": settings.local_asn,
                            "peerAddress": peer_address,
                            "peerConfigRef": {"name": settings.peer_config_name},
                        }
                    ],
                }
            ],
        },
    }


def render_cluster_config(settings: RouterSettings, peer_address: str) -> str:
    return yaml.safe_dump(build_cluster_config(settings, peer_address), sort_keys=False)
