"""Abstract interface and shared context for provisioning steps."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..config import BGPPeer, LabConfig
from ..errors import MissingFileError
from ..images import PreloadReport
from ..runner import CommandRunner


@dataclass
class StepContext:
    """Configuration, command runner and state discovered along the way."""

    config: LabConfig
    runner: CommandRunner
    worker_peers: List[BGPPeer] = field(default_factory=list)
    router_ip: Optional[str] = None
    preload_report: Optional[PreloadReport] = None

    def require_asset(self, name: str) -> Path:
        """Return the asset path or raise :class:`MissingFileError`."""

        path = self.config.asset(name)
        if not path.exists():
            raise MissingFileError(f"{name} not found in {self.config.assets_dir}")
        return path

    def kubectl_apply(self, name: str) -> None:
        path = self.require_asset(name)
        self.runner.run(["kubectl", "apply", "-f", str(path)], capture=False)


class Step(ABC):
    """Base class for steps managed by :class:`~cilium_demo.pipeline.Pipeline`.

    Running a step against an already provisioned resource must either
    no-op or converge it, never duplicate it.
    """

    name: str = ""

    @abstractmethod
    def run(self, ctx: StepContext) -> None:
        """Provision this step's resources, raising ``LabError`` on failure."""
