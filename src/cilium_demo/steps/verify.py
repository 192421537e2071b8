"""Post-setup verification and the final summary.

Nothing here fails the run: by the time these steps execute every resource
has passed its readiness wait, so a failing query only means a report line is
missing.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .base import Step, StepContext
from .gateway import gateway_address

LOG = logging.getLogger(__name__)


def _report(ctx: StepContext, sections: Sequence[Tuple[str, List[str], str]]) -> None:
    for title, cmd, warning in sections:
        print(f"{title}:")
        result = ctx.runner.run(cmd, check=False, capture=False)
        if result.returncode != 0:
            LOG.warning(warning)
        print()


class VerifyDeployment(Step):
    name = "verify-deployment"

    def run(self, ctx: StepContext) -> None:
        namespace = ctx.config.application.namespace
        LOG.info("Verifying deployment...")
        _report(
            ctx,
            [
                ("Cluster nodes", ["kubectl", "get", "nodes", "-o", "wide"], "Could not list nodes"),
                ("Cilium status", ["cilium", "status"], "Cilium status unavailable"),
                ("Boutique pods", ["kubectl", "get", "pods", "-n", namespace, "-o", "wide"], "Could not list pods"),
                ("Services", ["kubectl", "get", "svc", "-n", namespace], "Could not list services"),
                ("Gateway", ["kubectl", "get", "gateway", "-n", namespace], "Could not list gateways"),
                ("HTTPRoutes", ["kubectl", "get", "httproute", "-n", namespace], "Could not list HTTPRoutes"),
            ],
        )
        LOG.info("Deployment verification complete")


class VerifyBGP(Step):
    name = "verify-bgp"

    def run(self, ctx: StepContext) -> None:
        router = ctx.config.router
        LOG.info("Verifying BGP peering...")
        sections = [("Cilium BGP peers", ["cilium", "bgp", "peers"], "Could not query Cilium BGP peers")]
        if ctx.router_ip:
            sections.append(
                (
                    f"Cilium BGP advertised routes to FRR ({ctx.router_ip})",
                    ["cilium", "bgp", "routes", "advertised", "ipv4", "unicast", "peer", ctx.router_ip],
                    "No advertised routes yet (BGP session may still be converging)",
                )
            )
        sections.append(
            (
                "FRR received routes",
                ["docker", "exec", router.container_name, "vtysh", "-c", "show bgp ipv4 unicast"],
                "FRR BGP table not yet populated (may take a few seconds)",
            )
        )
        _report(ctx, sections)
        LOG.info("BGP verification complete")


def summary_lines(ctx: StepContext, address: str) -> List[str]:
    host = ctx.config.gateway.primary_host
    router = ctx.config.router.container_name
    return [
        f"Gateway IP: {address}",
        "",
        "Quick test commands:",
        f"  curl -H 'Host: {host}' http://{address}/",
        f"  curl -I -H 'Host: {host}' http://{address}/redirect-to-cisco-store",
        "",
        "L2 announcements (local access):",
        "  kubectl get ciliuml2announcementpolicy",
        "  kubectl get leases -n kube-system -l cilium.io/l2-announcement",
        "",
        "BGP commands:",
        "  cilium bgp peers",
        f"  docker exec {router} vtysh -c 'show bgp ipv4 unicast'",
        f"  docker exec {router} vtysh -c 'show bgp summary'",
        "",
        "Hubble:",
        "  cilium-demo hubble",
        "",
        "Gateway API demo:",
        "  cilium-demo gateway status",
        "  cilium-demo gateway test",
        "  cilium-demo gateway canary",
        "",
        "Cleanup:",
        "  cilium-demo cleanup",
    ]


class ShowSummary(Step):
    name = "summary"

    def run(self, ctx: StepContext) -> None:
        address = gateway_address(ctx) or "<pending>"
        print()
        print("=" * 60)
        LOG.info("Cilium demo environment is ready!")
        print("=" * 60)
        for line in summary_lines(ctx, address):
            print(line)
        print()
