"""Detached helper processes (Hubble UI, port-forwards)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .runner import CommandRunner

LOG = logging.getLogger(__name__)

HUBBLE_UI_CMD = ("cilium", "hubble", "ui")

# pgrep/pkill -f patterns for everything cleanup should stop
BACKGROUND_PATTERNS: Sequence[str] = (
    "cilium hubble ui",
    "kubectl.*port-forward.*hubble",
)


def launch_hubble_ui(runner: CommandRunner, state_dir: Path) -> int:
    """Start the Hubble UI in the background and return its pid."""

    log_path = state_dir / "hubble-ui.log"
    pid = runner.spawn(HUBBLE_UI_CMD, log_path)
    LOG.info("Hubble UI started in the background (pid %d, log %s)", pid, log_path)
    return pid


def stop_background_processes(
    runner: CommandRunner,
    patterns: Sequence[str] = BACKGROUND_PATTERNS,
    grace: float = 2.0,
) -> int:
    """Kill processes matching ``patterns``; return how many patterns matched."""

    stopped = 0
    for pattern in patterns:
        if not runner.succeeds(["pgrep", "-f", pattern]):
            continue
        LOG.warning("Found running '%s' processes. Stopping them...", pattern)
        runner.run(["pkill", "-f", pattern], check=False)
        runner.sleep(grace)
        stopped += 1
    return stopped
