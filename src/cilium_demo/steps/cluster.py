"""Kind cluster lifecycle: stale state removal and fresh creation."""

from __future__ import annotations

import logging

from ..runner import CommandRunner
from ..topology import load_topology
from .base import Step, StepContext

LOG = logging.getLogger(__name__)


def container_exists(runner: CommandRunner, name: str) -> bool:
    result = runner.run(["docker", "ps", "-a", "--format", "{{.Names}}"], check=False)
    return name in (result.stdout or "").split()


def cluster_exists(runner: CommandRunner, name: str) -> bool:
    result = runner.run(["kind", "get", "clusters"], check=False)
    return name in (result.stdout or "").split()


def remove_container(runner: CommandRunner, name: str) -> bool:
    if not container_exists(runner, name):
        return False
    runner.run(["docker", "rm", "-f", name], check=False)
    return True


def delete_cluster(runner: CommandRunner, name: str) -> bool:
    if not cluster_exists(runner, name):
        return False
    runner.run(["kind", "delete", "cluster", "--name", name], capture=False)
    return True


class RemoveStaleEnvironment(Step):
    """Delete a leftover router container and cluster so creation starts clean."""

    name = "cleanup-existing"

    def run(self, ctx: StepContext) -> None:
        router = ctx.config.router.container_name
        cluster = ctx.config.cluster.name

        if remove_container(ctx.runner, router):
            LOG.warning("Removed existing FRR container '%s'", router)

        if delete_cluster(ctx.runner, cluster):
            LOG.warning("Deleted existing Kind cluster '%s'", cluster)


class CreateCluster(Step):
    name = "create-cluster"

    def run(self, ctx: StepContext) -> None:
        cluster = ctx.config.cluster
        topology_path = ctx.require_asset(cluster.topology_file)
        topology = load_topology(topology_path)
        LOG.info(
            "Creating Kind cluster '%s' (%d control-plane, %d workers)...",
            cluster.name,
            topology.control_planes,
            topology.workers,
        )

        ctx.runner.run(
            ["kind", "create", "cluster", f"--config={topology_path}", "--name", cluster.name],
            capture=False,
        )
        ctx.runner.run(["kubectl", "cluster-info", "--context", cluster.context], capture=False)
        LOG.info("Kind cluster created")
