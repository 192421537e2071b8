"""Error taxonomy for the demo lab.

Every failure that should abort a run derives from :class:`LabError` so the
CLI can turn it into exit code 1 with a single handler.  Best-effort
operations (image pulls, post-setup verification) never raise these; they log
a warning and carry on.
"""

from __future__ import annotations

from typing import Sequence


class LabError(RuntimeError):
    """Base class for all fatal lab errors."""


class PrerequisiteError(LabError):
    """A required local tool is missing or the container runtime is down."""

    def __init__(self, message: str, hints: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.hints = list(hints)


class MissingFileError(LabError):
    """A static manifest or values file expected in the assets dir is absent."""


class CommandError(LabError):
    """A required external command exited with a non-zero status."""

    def __init__(self, cmd: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"'{' '.join(self.cmd)}' exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ReadinessTimeout(LabError):
    """A resource did not become ready in time.

    ``diagnostics`` holds whatever state dump was collected before giving up
    so callers can show it next to the error.
    """

    def __init__(self, message: str, diagnostics: str = "") -> None:
        super().__init__(message)
        self.diagnostics = diagnostics
