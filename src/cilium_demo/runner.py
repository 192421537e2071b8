"""Thin wrapper around :mod:`subprocess` for the external CLIs.

All steps go through :class:`CommandRunner` so that tests can swap in a
recording fake and so every invocation is logged the same way.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from pathlib import Path
from typing import Optional, Sequence

from .errors import CommandError

LOG = logging.getLogger(__name__)


class CommandRunner:
    """Run external commands and report their results."""

    def run(
        self,
        cmd: Sequence[str],
        *,
        check: bool = True,
        input: Optional[str] = None,
        capture: bool = True,
        cwd: Optional[Path] = None,
    ) -> subprocess.CompletedProcess[str]:
        """Execute ``cmd``.

        With ``capture=False`` output is streamed to the terminal, which is
        what we want for long running commands such as ``kind create``.
        ``check`` raises :class:`CommandError` on a non-zero exit status;
        without it a missing executable is reported as status 127.
        """

        LOG.debug("Executing: %s", " ".join(cmd))
        try:
            result = subprocess.run(
                list(cmd),
                input=input,
                capture_output=capture,
                text=True,
                check=False,
                cwd=cwd,
            )
        except FileNotFoundError as exc:
            if check:
                raise CommandError(cmd, 127, str(exc)) from exc
            return subprocess.CompletedProcess(list(cmd), 127, "", str(exc))

        if check and result.returncode != 0:
            raise CommandError(cmd, result.returncode, result.stderr or "")
        return result

    def succeeds(self, cmd: Sequence[str]) -> bool:
        """Return ``True`` when ``cmd`` exits with status 0."""

        return self.run(cmd, check=False).returncode == 0

    def output(self, cmd: Sequence[str], *, check: bool = True) -> str:
        """Return the stripped stdout of ``cmd``."""

        return (self.run(cmd, check=check).stdout or "").strip()

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def spawn(self, cmd: Sequence[str], log_path: Path) -> int:
        """Start ``cmd`` detached in its own session and return its pid.

        Nothing waits on the child; output goes to ``log_path``.
        """

        log_path.parent.mkdir(parents=True, exist_ok=True)
        LOG.debug("Spawning: %s (log=%s)", " ".join(cmd), log_path)
        with log_path.open("ab") as log_file:
            try:
                process = subprocess.Popen(
                    list(cmd),
                    stdout=log_file,
                    stderr=subprocess.STDOUT,
                    stdin=subprocess.DEVNULL,
                    start_new_session=True,
                )
            except FileNotFoundError as exc:
                raise CommandError(cmd, 127, str(exc)) from exc
        return process.pid

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
