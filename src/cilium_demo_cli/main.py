"""Entry point for the ``cilium-demo`` command."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from cilium_demo.background import launch_hubble_ui
from cilium_demo.cleanup import Teardown, TeardownReport
from cilium_demo.config import LabConfig
from cilium_demo.errors import LabError, PrerequisiteError, ReadinessTimeout
from cilium_demo.gateway_demo import GatewayDemo
from cilium_demo.runner import CommandRunner
from cilium_demo.sequencer import SetupSequencer
from cilium_demo.steps import SETUP_STEPS, StepContext
from cilium_demo.steps.prerequisites import ensure_tools

from .config import load_config

LOG = logging.getLogger(__name__)

Prompt = Callable[[str], str]


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


def _confirm(question: str, prompt: Prompt) -> bool:
    try:
        answer = prompt(f"{question} (y/N): ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _report_error(exc: LabError) -> None:
    LOG.error("%s", exc)
    if isinstance(exc, PrerequisiteError):
        for hint in exc.hints:
            LOG.info("  %s", hint)
    if isinstance(exc, ReadinessTimeout) and exc.diagnostics:
        print(exc.diagnostics, file=sys.stderr)


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
def _cmd_setup(args: argparse.Namespace, config: LabConfig, runner: CommandRunner, prompt: Prompt) -> int:
    sequencer = SetupSequencer(config, runner)
    for name in args.skip:
        sequencer.skip(name)
    sequencer.run()
    return 0


def _print_teardown_summary(config: LabConfig, report: TeardownReport) -> None:
    def mark(done: bool) -> str:
        return "x" if done else " "

    print()
    print("What was cleaned up:")
    print(f"  [{mark(report.router_removed)}] FRR router container '{config.router.container_name}'")
    print(f"  [{mark(report.cluster_deleted)}] Kind cluster '{config.cluster.name}'")
    print(f"  [{mark(bool(report.kubeconfig_entries))}] kubectl context and config")
    print(f"  [{mark(report.background_stopped > 0)}] Background processes (Hubble UI, port-forwards)")
    print(f"  [{mark(bool(report.networks_removed))}] Kind Docker networks")
    print(f"  [{mark(report.volumes_pruned)}] Dangling Docker volumes")
    print()
    print("To reclaim all unused Docker resources: docker system prune -a")
    print()


def _cmd_cleanup(args: argparse.Namespace, config: LabConfig, runner: CommandRunner, prompt: Prompt) -> int:
    if not args.yes:
        LOG.warning("This will delete the Kind cluster and clean up all demo resources.")
        if not _confirm("Are you sure you want to proceed?", prompt):
            LOG.info("Cleanup cancelled")
            return 0

    prune = args.prune_volumes
    if not prune and not args.yes:
        prune = _confirm(
            "Clean up dangling Docker volumes? This might affect other Docker projects.",
            prompt,
        )

    report = Teardown(config, runner).run(prune_volumes=prune)
    _print_teardown_summary(config, report)
    LOG.info("Demo cleanup completed successfully!")
    return 0


def _cmd_gateway(args: argparse.Namespace, config: LabConfig, runner: CommandRunner, prompt: Prompt) -> int:
    demo = GatewayDemo(StepContext(config=config, runner=runner))
    return demo.dispatch(args.command)


def _cmd_hubble(args: argparse.Namespace, config: LabConfig, runner: CommandRunner, prompt: Prompt) -> int:
    ensure_tools(runner, ["cilium"])
    launch_hubble_ui(runner, config.state_dir)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cilium-demo",
        description="Build and tear down the local Cilium BGP / Gateway API demo",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an optional YAML lab configuration file",
    )
    parser.add_argument(
        "--assets-dir",
        type=Path,
        default=None,
        help="Directory holding kind.yaml, Helm values and manifests (default: deploy)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="subcommand")

    setup = sub.add_parser("setup", help="Tear down and rebuild the whole environment")
    setup.add_argument(
        "--skip",
        action="append",
        default=[],
        choices=[step.name for step in SETUP_STEPS],
        metavar="STEP",
        help="Skip a setup step (repeatable)",
    )
    setup.set_defaults(handler=_cmd_setup)

    cleanup = sub.add_parser("cleanup", help="Remove the cluster, router and leftovers")
    cleanup.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    cleanup.add_argument("--prune-volumes", action="store_true", help="Also prune dangling Docker volumes")
    cleanup.set_defaults(handler=_cmd_cleanup)

    gateway = sub.add_parser("gateway", help="Gateway API demo commands")
    gateway.add_argument("command", nargs="?", default="deploy", help="deploy|status|test|dns|canary|cleanup|help")
    gateway.set_defaults(handler=_cmd_gateway)

    hubble = sub.add_parser("hubble", help="Launch the Hubble UI in the background")
    hubble.set_defaults(handler=_cmd_hubble)

    return parser


def main(
    argv: list[str] | None = None,
    runner: CommandRunner | None = None,
    prompt: Prompt = input,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    if args.subcommand is None:
        parser.print_help()
        return 1

    try:
        config = load_config(args.config, args.assets_dir)
    except (OSError, ValueError, TypeError) as exc:
        LOG.error("failed to load configuration: %s", exc)
        return 1

    try:
        return args.handler(args, config, runner or CommandRunner(), prompt)
    except LabError as exc:
        _report_error(exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
