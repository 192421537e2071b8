"""Ordered registry of provisioning steps."""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, List, Sequence, Union

from .events import StepFailed, StepStarted, StepSucceeded
from .steps.base import Step, StepContext

LOG = logging.getLogger(__name__)

Event = Union[StepStarted, StepSucceeded, StepFailed]
Listener = Callable[[Event], None]


class Pipeline:
    """Run registered steps in registration order, stopping at the first failure."""

    def __init__(self) -> None:
        self._steps: Dict[str, Step] = {}
        self._listeners: List[Listener] = []

    def register(self, step: Step) -> None:
        if not step.name:
            raise ValueError(f"step {type(step).__name__} has no name")
        if step.name in self._steps:
            raise ValueError(f"step '{step.name}' already registered")
        self._steps[step.name] = step

    def unregister(self, name: str) -> None:
        self._steps.pop(name, None)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    @property
    def step_names(self) -> Sequence[str]:
        return list(self._steps)

    def run(self, ctx: StepContext) -> List[Event]:
        """Execute every step; re-raise the first exception after publishing it."""

        events: List[Event] = []
        for name, step in self._steps.items():
            self._publish(StepStarted(name), events)
            started = time.monotonic()
            try:
                step.run(ctx)
            except Exception as exc:
                self._publish(StepFailed(name, str(exc)), events)
                raise
            self._publish(StepSucceeded(name, time.monotonic() - started), events)
        return events

    def _publish(self, event: Event, events: List[Event]) -> None:
        LOG.debug("pipeline event: %s", event)
        events.append(event)
        for listener in self._listeners:
            listener(event)
