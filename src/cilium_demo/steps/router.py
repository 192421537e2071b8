"""FRR peering router and the matching Cilium BGP configuration."""

from __future__ import annotations

import logging
from typing import List

from ..bgp import render_cluster_config
from ..config import BGPPeer
from ..errors import LabError
from ..frr import FRRConfigRenderer
from ..runner import CommandRunner
from ..topology import load_topology, worker_nodes
from .base import Step, StepContext

LOG = logging.getLogger(__name__)

IP_TEMPLATE = "{{range .NetworkSettings.Networks}}{{.IPAddress}}{{end}}"

ROUTER_FILES = ("daemons", "vtysh.conf")


def container_ip(runner: CommandRunner, name: str) -> str:
    address = runner.output(["docker", "inspect", "-f", IP_TEMPLATE, name])
    if not address:
        raise LabError(f"container '{name}' has no IP address")
    return address


def discover_worker_peers(ctx: StepContext) -> List[BGPPeer]:
    """Return one peer per non control-plane Kind node, with its current IP."""

    cluster = ctx.config.cluster
    names = ctx.runner.output(["kind", "get", "nodes", "--name", cluster.name]).split()
    workers = sorted(worker_nodes(names))
    if not workers:
        raise LabError(f"no worker nodes found in cluster '{cluster.name}'")

    topology_path = ctx.config.asset(cluster.topology_file)
    if topology_path.exists():
        expected = load_topology(topology_path).worker_names(cluster.name)
        if sorted(expected) != workers:
            LOG.warning("Worker nodes %s differ from topology %s", workers, expected)

    peers = []
    for node in workers:
        address = container_ip(ctx.runner, node)
        LOG.info("  %-14s IP: %s", node, address)
        peers.append(BGPPeer(address=address, remote_asn=ctx.config.router.cilium_asn, description=node))
    return peers


class DeployRouter(Step):
    """(Re)create the FRR container and configure it for the discovered speakers."""

    name = "deploy-router"

    def run(self, ctx: StepContext) -> None:
        settings = ctx.config.router
        LOG.info("Deploying FRR router for BGP peering...")
        static_files = [ctx.require_asset(f"{settings.config_dir}/{name}") for name in ROUTER_FILES]

        peers = discover_worker_peers(ctx)

        ctx.runner.run(["docker", "rm", "-f", settings.container_name], check=False)
        ctx.runner.run(
            [
                "docker", "run", "-d",
                "--name", settings.container_name,
                "--network", ctx.config.cluster.network,
                "--privileged",
                settings.image,
                "/bin/bash", "-c", "tail -f /dev/null",
            ]
        )
        router_ip = container_ip(ctx.runner, settings.container_name)
        LOG.info("  FRR router     IP: %s", router_ip)

        renderer = FRRConfigRenderer(settings, ctx.config.router_config_dir)
        result = renderer.render(router_ip, peers)
        LOG.debug("Rendered FRR config to %s", result.output_path)

        for path in [result.output_path, *static_files]:
            ctx.runner.run(["docker", "cp", str(path), f"{settings.container_name}:/etc/frr/{path.name}"])
        ctx.runner.run(["docker", "exec", settings.container_name, "/usr/lib/frr/frrinit.sh", "restart"])

        ctx.worker_peers = list(result.peers)
        ctx.router_ip = router_ip

        if self._wait_for_bgpd(ctx):
            LOG.info("FRR router deployed (AS %s, IP %s)", settings.local_asn, router_ip)
        else:
            LOG.warning("FRR started but BGP daemon may still be initializing")

    def _wait_for_bgpd(self, ctx: StepContext) -> bool:
        settings = ctx.config.router
        probe = ["docker", "exec", settings.container_name, "vtysh", "-c", "show bgp summary"]
        for _ in range(settings.ready_attempts):
            ctx.runner.sleep(settings.ready_interval)
            if ctx.runner.succeeds(probe):
                return True
        return False


class ConfigureBGPPeering(Step):
    name = "bgp-peering"

    def run(self, ctx: StepContext) -> None:
        settings = ctx.config.router
        if not ctx.router_ip:
            raise LabError("FRR router address unknown; deploy the router first")

        LOG.info("Configuring Cilium BGP peering with FRR (%s)...", ctx.router_ip)
        ctx.kubectl_apply(settings.peer_file)
        ctx.kubectl_apply(settings.advertisement_file)
        ctx.runner.run(
            ["kubectl", "apply", "-f", "-"],
            input=render_cluster_config(settings, ctx.router_ip),
        )
        LOG.info(
            "BGP peering configured (Cilium AS %s <-> FRR AS %s)",
            settings.cilium_asn,
            settings.local_asn,
        )
