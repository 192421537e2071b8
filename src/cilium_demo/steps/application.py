"""Sample application deployment."""

from __future__ import annotations

import logging

from ..errors import ReadinessTimeout
from .base import Step, StepContext

LOG = logging.getLogger(__name__)


class DeployApplication(Step):
    name = "deploy-application"

    def run(self, ctx: StepContext) -> None:
        app = ctx.config.application
        LOG.info("Deploying boutique application into '%s'...", app.namespace)
        ctx.kubectl_apply(app.manifests_file)

        LOG.info("Waiting for boutique pods to be ready (timeout: %s)...", app.deployments_timeout)
        # apply returns before the deployment controller has created anything
        ctx.runner.sleep(app.settle_seconds)

        self._wait(
            ctx,
            ["kubectl", "wait", "--for=condition=Available", "deployments", "--all",
             "-n", app.namespace, f"--timeout={app.deployments_timeout}"],
            "Some boutique deployments did not become available",
        )
        self._wait(
            ctx,
            ["kubectl", "wait", "--for=condition=Ready", "pods", "--all",
             "-n", app.namespace, f"--timeout={app.pods_timeout}"],
            "Some boutique pods did not become ready",
        )
        LOG.info("Boutique application deployed")

    def _wait(self, ctx: StepContext, cmd, message: str) -> None:
        result = ctx.runner.run(cmd, check=False, capture=False)
        if result.returncode == 0:
            return
        pods = ctx.runner.run(
            ["kubectl", "get", "pods", "-n", ctx.config.application.namespace, "-o", "wide"],
            check=False,
        )
        raise ReadinessTimeout(message, (pods.stdout or "").rstrip())
