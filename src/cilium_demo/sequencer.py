"""Cluster bring-up sequencer.

Wires the setup steps into a :class:`~cilium_demo.pipeline.Pipeline` over a
shared :class:`~cilium_demo.steps.base.StepContext`.  Running the sequencer
twice in a row leaves exactly one cluster, one router container and one set
of application resources: the stale-state step deletes by name and every
later step uses declarative apply semantics.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Type

from .config import LabConfig
from .pipeline import Event, Pipeline
from .runner import CommandRunner
from .steps import SETUP_STEPS, Step, StepContext

LOG = logging.getLogger(__name__)


class SetupSequencer:
    """Run the provisioning steps in dependency order."""

    def __init__(
        self,
        config: LabConfig,
        runner: Optional[CommandRunner] = None,
        steps: Optional[Iterable[Type[Step]]] = None,
    ) -> None:
        self._context = StepContext(config=config, runner=runner or CommandRunner())
        self._pipeline = Pipeline()
        for step_cls in steps if steps is not None else SETUP_STEPS:
            self._pipeline.register(step_cls())

    @property
    def context(self) -> StepContext:
        return self._context

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    def skip(self, name: str) -> None:
        self._pipeline.unregister(name)

    def run(self) -> List[Event]:
        LOG.info("Starting Cilium demo setup (%d steps)", len(self._pipeline.step_names))
        events = self._pipeline.run(self._context)
        LOG.info("Setup complete!")
        return events
