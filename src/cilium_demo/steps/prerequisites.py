"""Local tool and container runtime checks."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from ..errors import PrerequisiteError
from ..runner import CommandRunner
from .base import Step, StepContext

LOG = logging.getLogger(__name__)

INSTALL_HINTS: Dict[str, str] = {
    "docker": "https://docs.docker.com/get-docker/",
    "kind": "https://kind.sigs.k8s.io/docs/user/quick-start/#installation",
    "kubectl": "https://kubernetes.io/docs/tasks/tools/",
    "helm": "https://helm.sh/docs/intro/install/",
    "cilium": "https://docs.cilium.io/en/stable/gettingstarted/k8s-install-default/#install-the-cilium-cli",
    "mkcert": "https://github.com/FiloSottile/mkcert#installation",
}


def missing_tools(runner: CommandRunner, tools: Sequence[str]) -> List[str]:
    return [tool for tool in tools if runner.which(tool) is None]


def ensure_tools(runner: CommandRunner, tools: Sequence[str]) -> None:
    missing = missing_tools(runner, tools)
    if missing:
        hints = [f"{tool}: {INSTALL_HINTS.get(tool, 'see vendor docs')}" for tool in missing]
        raise PrerequisiteError(f"Missing required tools: {' '.join(missing)}", hints)


class CheckPrerequisites(Step):
    name = "prerequisites"

    def run(self, ctx: StepContext) -> None:
        LOG.info("Checking prerequisites...")
        ensure_tools(ctx.runner, ctx.config.required_tools)

        if not ctx.runner.succeeds(["docker", "info"]):
            raise PrerequisiteError("Docker is not running. Please start Docker and try again.")

        LOG.info("All prerequisites met")
