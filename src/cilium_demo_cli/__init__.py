"""Command line runtime for the demo lab."""

from .config import load_config  # noqa: F401

__all__ = [
    "load_config",
]
