"""TLS material, Gateway and HTTPRoutes for the sample application."""

from __future__ import annotations

import logging

from ..errors import ReadinessTimeout
from .base import Step, StepContext

LOG = logging.getLogger(__name__)


def ensure_certificate(ctx: StepContext) -> bool:
    """Generate the wildcard certificate unless both files already exist.

    Returns ``True`` when a new certificate was created.
    """

    gateway = ctx.config.gateway
    assets = ctx.config.assets_dir
    if (assets / gateway.cert_file).exists() and (assets / gateway.key_file).exists():
        LOG.info("TLS certificate already exists, skipping generation")
        return False

    LOG.info("Generating wildcard certificate for %s...", gateway.cert_domain)
    assets.mkdir(parents=True, exist_ok=True)
    ctx.runner.run(["mkcert", gateway.cert_domain], cwd=assets)
    return True


def ensure_tls_secret(ctx: StepContext) -> None:
    gateway = ctx.config.gateway
    assets = ctx.config.assets_dir
    manifest = ctx.runner.output(
        [
            "kubectl", "create", "secret", "tls", gateway.tls_secret,
            f"--key={assets / gateway.key_file}",
            f"--cert={assets / gateway.cert_file}",
            "-n", ctx.config.application.namespace,
            "--dry-run=client", "-o", "yaml",
        ]
    )
    ctx.runner.run(["kubectl", "apply", "-f", "-"], input=manifest)


def apply_gateway(ctx: StepContext) -> None:
    gateway = ctx.config.gateway
    ctx.kubectl_apply(gateway.manifest_file)

    LOG.info("Waiting for Gateway to be programmed...")
    result = ctx.runner.run(
        [
            "kubectl", "wait", "--for=condition=Programmed",
            f"gateway/{gateway.name}",
            "-n", ctx.config.application.namespace,
            f"--timeout={gateway.timeout}",
        ],
        check=False,
        capture=False,
    )
    if result.returncode != 0:
        describe = ctx.runner.run(
            ["kubectl", "describe", "gateway", gateway.name, "-n", ctx.config.application.namespace],
            check=False,
        )
        raise ReadinessTimeout(
            f"Gateway '{gateway.name}' was not programmed within {gateway.timeout}",
            (describe.stdout or "").rstrip(),
        )


def gateway_address(ctx: StepContext) -> str:
    """Return the first address assigned to the Gateway, or ``""``."""

    return ctx.runner.output(
        [
            "kubectl", "get", "gateway", ctx.config.gateway.name,
            "-n", ctx.config.application.namespace,
            "-o", "jsonpath={.status.addresses[0].value}",
        ],
        check=False,
    )


class DeployGateway(Step):
    name = "deploy-gateway"

    def run(self, ctx: StepContext) -> None:
        LOG.info("Deploying Gateway API routes...")
        ensure_certificate(ctx)
        ensure_tls_secret(ctx)
        apply_gateway(ctx)
        LOG.info("Gateway API deployed")
