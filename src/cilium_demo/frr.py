"""FRR configuration rendering for the external peering router."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from .config import BGPPeer, RouterSettings


FRR_HEADER = "log syslog informational"

ROUTE_MAPS = """route-map ACCEPT-IN permit 10
route-map DENY-OUT deny 10"""


@dataclass
class RenderResult:
    """Result of an FRR rendering operation."""

    config_text: str
    output_path: Path
    peers: Sequence[BGPPeer]


class FRRConfigRenderer:
    """Render ``frr.conf`` for a router peering with every Cilium speaker.

    The router only accepts routes; it never advertises anything back into
    the cluster (``DENY-OUT``).
    """

    def __init__(self, settings: RouterSettings, output_dir: Path) -> None:
        self._settings = settings
        self._output_dir = output_dir

    def render(self, router_id: str, peers: Iterable[BGPPeer]) -> RenderResult:
        unique = _unique_peers(peers)
        sections = [
            FRR_HEADER,
            f"router id {router_id}",
            "",
            self._render_router(router_id, unique),
            "",
            ROUTE_MAPS,
        ]
        body = "\n".join(sections) + "\n"

        self._output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self._output_dir / "frr.conf"
        output_path.write_text(body)

        return RenderResult(config_text=body, output_path=output_path, peers=unique)

    def _render_router(self, router_id: str, peers: Sequence[BGPPeer]) -> str:
        lines = [
            f"router bgp {self._settings.local_asn}",
            f" bgp router-id {router_id}",
        ]
        for peer in peers:
            lines.extend(self._render_neighbor_block(peer))
            lines.append("")

        lines.append(" address-family ipv4 unicast")
        for index, peer in enumerate(peers):
            if index:
                lines.append("")
            lines.extend(self._render_af_block(peer))
        lines.append(" exit-address-family")
        return "\n".join(lines)

    def _render_neighbor_block(self, peer: BGPPeer) -> list[str]:
        lines = [f" neighbor {peer.address} remote-as {peer.remote_asn}"]
        if peer.description:
            lines.append(f" neighbor {peer.address} description {peer.description}")
        lines.append(f" neighbor {peer.address} update-source eth0")
        return lines

    def _render_af_block(self, peer: BGPPeer) -> list[str]:
        return [
            f"  neighbor {peer.address} activate",
            f"  neighbor {peer.address} soft-reconfiguration inbound",
            f"  neighbor {peer.address} route-map ACCEPT-IN in",
            f"  neighbor {peer.address} route-map DENY-OUT out",
        ]


def _unique_peers(peers: Iterable[BGPPeer]) -> list[BGPPeer]:
    """De-duplicate by address, keeping the first occurrence."""

    seen = {}
    for peer in peers:
        seen.setdefault(peer.address, peer)
    return list(seen.values())
