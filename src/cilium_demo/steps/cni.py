"""Gateway API CRDs, the Cilium release and its L2 / LB-IPAM objects."""

from __future__ import annotations

import logging

from ..errors import ReadinessTimeout
from .base import Step, StepContext

LOG = logging.getLogger(__name__)


def ensure_helm_repo(ctx: StepContext) -> None:
    cilium = ctx.config.cilium
    # "already exists" is fine
    ctx.runner.run(["helm", "repo", "add", cilium.helm_repo_name, cilium.helm_repo_url], check=False)
    ctx.runner.run(["helm", "repo", "update", cilium.helm_repo_name])


def collect_cilium_diagnostics(ctx: StepContext) -> str:
    namespace = ctx.config.cilium.namespace
    commands = [
        ["cilium", "status"],
        ["kubectl", "get", "pods", "-n", namespace, "-l", "k8s-app=cilium", "-o", "wide"],
        ["kubectl", "get", "pods", "-n", namespace, "-l", "k8s-app=cilium-envoy", "-o", "wide"],
    ]
    chunks = []
    for cmd in commands:
        result = ctx.runner.run(cmd, check=False)
        output = "\n".join(
            text.rstrip() for text in (result.stdout or "", result.stderr or "") if text.strip()
        )
        chunks.append(f"$ {' '.join(cmd)}\n{output}")
    return "\n\n".join(chunks)


class InstallGatewayAPICRDs(Step):
    name = "gateway-api-crds"

    def run(self, ctx: StepContext) -> None:
        LOG.info("Installing Gateway API CRDs (%s)...", ctx.config.cilium.gateway_api_version)
        for url in ctx.config.cilium.crd_urls():
            ctx.runner.run(["kubectl", "apply", "-f", url], capture=False)
        LOG.info("Gateway API CRDs installed")


class InstallCilium(Step):
    """Install (or upgrade) the Cilium release and block until it is ready."""

    name = "install-cilium"

    def run(self, ctx: StepContext) -> None:
        cilium = ctx.config.cilium
        values = ctx.require_asset(cilium.values_file)
        LOG.info("Installing Cilium %s with Gateway API + BGP + L2 announcements + Hubble...", cilium.version)
        ensure_helm_repo(ctx)
        ctx.runner.run(
            [
                "helm",
                "upgrade",
                "--install",
                cilium.release_name,
                cilium.chart,
                "--version",
                cilium.version,
                "--namespace",
                cilium.namespace,
                "--values",
                str(values),
            ],
            capture=False,
        )

        LOG.info("Waiting for Cilium to be ready (timeout: %s)...", cilium.wait_duration)
        ready = ctx.runner.run(
            ["cilium", "status", "--wait", "--wait-duration", cilium.wait_duration],
            check=False,
            capture=False,
        )
        if ready.returncode != 0:
            raise ReadinessTimeout(
                f"Cilium did not become ready within {cilium.wait_duration}",
                collect_cilium_diagnostics(ctx),
            )
        LOG.info("Cilium installed")


class ConfigureL2Announcements(Step):
    name = "l2-announcements"

    def run(self, ctx: StepContext) -> None:
        LOG.info("Configuring L2 announcement policy...")
        ctx.kubectl_apply(ctx.config.cilium.l2_policy_file)
        LOG.info("L2 announcement policy applied")


class ConfigureLoadBalancerPool(Step):
    name = "loadbalancer-pool"

    def run(self, ctx: StepContext) -> None:
        LOG.info("Configuring LoadBalancer IP pool...")
        ctx.kubectl_apply(ctx.config.cilium.lb_pool_file)
        LOG.info("LoadBalancer IP pool configured")
