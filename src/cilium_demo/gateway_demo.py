"""Gateway API demo commands.

Traffic splitting, header-based canary routing and the redirect are all
declared in the Gateway manifest and enforced by Cilium; these commands only
deploy that manifest, report its status and print ready-to-run curl commands.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from .errors import PrerequisiteError
from .steps.base import StepContext
from .steps.gateway import apply_gateway, ensure_certificate, ensure_tls_secret, gateway_address
from .steps.prerequisites import ensure_tools

LOG = logging.getLogger(__name__)

REQUIRED_CRDS = (
    "gatewayclasses.gateway.networking.k8s.io",
    "gateways.gateway.networking.k8s.io",
    "httproutes.gateway.networking.k8s.io",
)

USAGE = """Gateway API demo commands

Usage: cilium-demo gateway [COMMAND]

Commands:
  deploy     Deploy Gateway API resources (default)
  status     Show Gateway API status
  test       Show test commands for the routes
  dns        Show DNS configuration instructions
  canary     Show canary deployment demo
  cleanup    Remove Gateway API resources
  help       Show this help message
"""


class GatewayDemo:
    def __init__(self, ctx: StepContext) -> None:
        self._ctx = ctx
        self._commands: dict[str, Callable[[], int]] = {
            "deploy": self.deploy,
            "status": self.status,
            "test": self.test,
            "dns": self.dns,
            "canary": self.canary,
            "cleanup": self.cleanup,
            "help": self.help,
        }

    def dispatch(self, command: str) -> int:
        handler = self._commands.get(command)
        if handler is None:
            LOG.error("Unknown command: %s", command)
            self.help()
            return 1
        return handler()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def deploy(self) -> int:
        LOG.info("Checking prerequisites...")
        ensure_tools(self._ctx.runner, ["mkcert", "kubectl"])
        self.check_crds()

        ensure_certificate(self._ctx)
        ensure_tls_secret(self._ctx)
        LOG.info("TLS secret created/updated")
        apply_gateway(self._ctx)
        LOG.info("Gateway API resources deployed successfully")

        # give the controller a moment to publish status
        self._ctx.runner.sleep(5)
        if self.status() == 0:
            self.dns()
        return 0

    def status(self) -> int:
        gateway = self._ctx.config.gateway
        namespace = self._ctx.config.application.namespace
        for title, cmd in (
            ("GatewayClass", ["kubectl", "get", "gatewayclass", gateway.gateway_class, "-o", "wide"]),
            ("Gateway", ["kubectl", "get", "gateway", "-n", namespace, gateway.name, "-o", "wide"]),
            ("HTTPRoutes", ["kubectl", "get", "httproute", "-n", namespace]),
            ("Gateway Details", ["kubectl", "describe", "gateway", gateway.name, "-n", namespace]),
        ):
            print(f"{title}:")
            self._ctx.runner.run(cmd, check=False, capture=False)
            print()

        address = gateway_address(self._ctx)
        if address:
            LOG.info("Gateway IP: %s", address)
            return 0

        LOG.warning("Gateway IP not yet assigned. Checking service...")
        self._ctx.runner.run(
            ["kubectl", "get", "svc", "-n", namespace,
             "-l", f"gateway.networking.k8s.io/gateway-name={gateway.name}"],
            check=False,
            capture=False,
        )
        return 1

    def test(self) -> int:
        address = self._require_address("test routes")
        if address is None:
            return 1

        host = self._ctx.config.gateway.primary_host
        ca_root = self._mkcert_ca_root()
        lines = []
        if ca_root is not None:
            lines += [
                f"export GATEWAY_IP={address}",
                f'export CA_ROOT="{ca_root}"',
                "",
                "# HTTPS frontend route",
                f'curl -s --resolve "{host}:443:$GATEWAY_IP" --cacert "$CA_ROOT/rootCA.pem" https://{host}/',
                "",
                "# HTTPS API route",
                f'curl -s --resolve "api.{host}:443:$GATEWAY_IP" --cacert "$CA_ROOT/rootCA.pem" '
                f"https://api.{host}/api/products",
                "",
            ]
        else:
            LOG.warning("mkcert CA not found, showing HTTP examples only")

        lines += [
            "# HTTP routes",
            f"curl -H 'Host: {host}' http://{address}/",
            f"curl -H 'Host: api.{host}' http://{address}/api/products",
            f"curl -H 'Host: admin.{host}' http://{address}/admin",
            f"curl -H 'Host: health.{host}' http://{address}/health/frontend",
            "",
            "# Redirect (expect 301)",
            f"curl -H 'Host: {host}' -I http://{address}/redirect-to-cisco-store",
        ]
        _print_lines(lines)
        return 0

    def dns(self) -> int:
        address = self._require_address("configure DNS")
        if address is None:
            return 1

        entries = [f"{address} {hostname}" for hostname in self._ctx.config.gateway.hostnames]
        LOG.warning("To access the Gateway API routes, add these entries to /etc/hosts:")
        _print_lines(entries + ["", "sudo bash -c 'cat << EOF >> /etc/hosts", *entries, "EOF'"])
        return 0

    def canary(self) -> int:
        address = gateway_address(self._ctx) or "<GATEWAY_IP>"
        host = self._ctx.config.gateway.primary_host
        LOG.info("Checkout traffic: 90% stable, 10% canary; 'X-User-Type: beta' always hits the canary")
        lines = [
            "# Regular user",
            f"curl -H 'Host: {host}' http://{address}/api/checkout",
            "",
            "# Beta user",
            f"curl -H 'Host: {host}' -H 'X-User-Type: beta' http://{address}/api/checkout",
        ]
        ca_root = self._mkcert_ca_root()
        if ca_root is not None:
            lines += [
                "",
                "# Beta user over HTTPS",
                f'curl -s --resolve "{host}:443:{address}" --cacert "{ca_root}/rootCA.pem" '
                f"-H 'X-User-Type: beta' https://{host}/api/checkout",
            ]
        _print_lines(lines)
        return 0

    def cleanup(self) -> int:
        manifest = self._ctx.config.asset(self._ctx.config.gateway.manifest_file)
        if not manifest.exists():
            LOG.warning("%s not found, skipping cleanup", manifest.name)
            return 0
        self._ctx.runner.run(
            ["kubectl", "delete", "-f", str(manifest), "--ignore-not-found=true"],
            capture=False,
        )
        LOG.info("Gateway API resources cleaned up")
        return 0

    def help(self) -> int:
        print(USAGE)
        return 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def check_crds(self) -> None:
        LOG.info("Checking Gateway API CRDs...")
        missing = [
            crd for crd in REQUIRED_CRDS
            if not self._ctx.runner.succeeds(["kubectl", "get", "crd", crd])
        ]
        if missing:
            raise PrerequisiteError(
                f"Missing Gateway API CRDs: {' '.join(missing)}",
                ["run 'cilium-demo setup' first to install the Gateway API CRDs"],
            )

    def _require_address(self, action: str) -> str | None:
        address = gateway_address(self._ctx)
        if not address:
            LOG.error("Gateway IP not available. Cannot %s.", action)
            return None
        return address

    def _mkcert_ca_root(self) -> Path | None:
        if self._ctx.runner.which("mkcert") is None:
            return None
        root = self._ctx.runner.output(["mkcert", "-CAROOT"], check=False)
        if root and (Path(root) / "rootCA.pem").exists():
            return Path(root)
        return None


def _print_lines(lines: list[str]) -> None:
    for line in lines:
        print(line)
    print()
