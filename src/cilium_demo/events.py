"""Event primitives published by the provisioning pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StepStarted:
    name: str


@dataclass(frozen=True)
class StepSucceeded:
    name: str
    duration: float


@dataclass(frozen=True)
class StepFailed:
    """Signals that a step raised; the pipeline stops right after this."""

    name: str
    error: str
