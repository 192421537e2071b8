"""Environment teardown.

The inverse of :class:`~cilium_demo.sequencer.SetupSequencer`.  Each
operation tolerates the resource already being gone, so a partial or
repeated cleanup converges to the same empty state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .background import stop_background_processes
from .config import LabConfig
from .runner import CommandRunner
from .steps.cluster import delete_cluster, remove_container
from .steps.prerequisites import ensure_tools

LOG = logging.getLogger(__name__)


@dataclass
class TeardownReport:
    background_stopped: int = 0
    router_removed: bool = False
    cluster_deleted: bool = False
    kubeconfig_entries: List[str] = field(default_factory=list)
    networks_removed: List[str] = field(default_factory=list)
    volumes_pruned: bool = False


class Teardown:
    def __init__(self, config: LabConfig, runner: CommandRunner) -> None:
        self._config = config
        self._runner = runner

    def run(self, prune_volumes: bool = False) -> TeardownReport:
        report = TeardownReport()

        LOG.info("Stopping any running Hubble UI processes...")
        report.background_stopped = stop_background_processes(self._runner)
        report.router_removed = self.remove_router()
        report.cluster_deleted = self.delete_cluster()
        report.kubeconfig_entries = self.remove_kubeconfig_entries()
        report.networks_removed = self.remove_networks()
        if prune_volumes:
            LOG.warning("Cleaning up dangling Docker volumes...")
            self._runner.run(["docker", "volume", "prune", "-f"], check=False)
            report.volumes_pruned = True
        return report

    def remove_router(self) -> bool:
        name = self._config.router.container_name
        LOG.info("Stopping FRR router container...")
        if remove_container(self._runner, name):
            LOG.info("FRR container removed")
            return True
        LOG.warning("No FRR container found")
        return False

    def delete_cluster(self) -> bool:
        ensure_tools(self._runner, ["kind"])
        name = self._config.cluster.name
        if delete_cluster(self._runner, name):
            LOG.info("Kind cluster '%s' deleted successfully", name)
            return True
        LOG.warning("No Kind cluster '%s' found", name)
        return False

    def remove_kubeconfig_entries(self) -> List[str]:
        """Drop the context, cluster and user Kind wrote into kubeconfig."""

        LOG.info("Cleaning up kubectl context...")
        if self._runner.which("kubectl") is None:
            LOG.warning("kubectl not found, skipping kubeconfig cleanup")
            return []

        entry = self._config.cluster.context
        removed = []
        for kind, listing in (
            ("context", ["kubectl", "config", "get-contexts", "-o", "name"]),
            ("cluster", ["kubectl", "config", "get-clusters"]),
            ("user", ["kubectl", "config", "get-users"]),
        ):
            names = self._runner.run(listing, check=False).stdout or ""
            if entry not in names.split():
                continue
            self._runner.run(["kubectl", "config", f"delete-{kind}", entry], check=False)
            LOG.info("Removed kubectl %s '%s'", kind, entry)
            removed.append(kind)
        return removed

    def remove_networks(self) -> List[str]:
        LOG.info("Cleaning up Docker resources...")
        listing = self._runner.run(
            ["docker", "network", "ls", "--filter", f"name={self._config.cluster.network}",
             "--format", "{{.Name}}"],
            check=False,
        )
        removed = []
        for network in (listing.stdout or "").split():
            if self._runner.succeeds(["docker", "network", "rm", network]):
                removed.append(network)
            else:
                LOG.debug("could not remove docker network %s", network)
        if removed:
            LOG.info("Removed Kind Docker networks: %s", ", ".join(removed))
        return removed
