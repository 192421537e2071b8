"""YAML configuration loader for the demo lab."""

from __future__ import annotations

from dataclasses import fields, replace
from pathlib import Path
from typing import Any, TypeVar

import yaml

from cilium_demo.config import (
    ApplicationSettings,
    CiliumSettings,
    ClusterSettings,
    GatewaySettings,
    LabConfig,
    RouterSettings,
)

T = TypeVar("T")

_SECTIONS: dict[str, type] = {
    "cluster": ClusterSettings,
    "cilium": CiliumSettings,
    "router": RouterSettings,
    "application": ApplicationSettings,
    "gateway": GatewaySettings,
}


def _parse_section(name: str, cls: type[T], section: Any) -> T:
    if section is None:
        return cls()
    if not isinstance(section, dict):
        raise ValueError(f"'{name}' section must be a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = set(section) - set(known)
    if unknown:
        raise ValueError(f"unknown keys in '{name}' section: {', '.join(sorted(unknown))}")

    values: dict[str, Any] = {}
    defaults = cls()
    for key, raw in section.items():
        default = getattr(defaults, key)
        if isinstance(default, bool):
            values[key] = bool(raw)
        elif isinstance(default, int):
            values[key] = int(raw)
        elif isinstance(default, float):
            values[key] = float(raw)
        elif isinstance(default, tuple):
            if not isinstance(raw, list):
                raise ValueError(f"'{name}.{key}' must be a list")
            values[key] = tuple(str(item) for item in raw)
        else:
            values[key] = str(raw)
    return cls(**values)


def load_config(path: Path | None = None, assets_dir: Path | None = None) -> LabConfig:
    """Build a :class:`LabConfig` from ``path`` (optional) and CLI overrides.

    Relative ``assets_dir`` values in the file are resolved against the
    file's directory.
    """

    config = LabConfig()
    if path is not None:
        data = yaml.safe_load(path.read_text())
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("Lab configuration must be a mapping")

        unknown = set(data) - set(_SECTIONS) - {"assets_dir", "state_dir"}
        if unknown:
            raise ValueError(f"unknown configuration sections: {', '.join(sorted(unknown))}")

        overrides: dict[str, Any] = {
            name: _parse_section(name, cls, data.get(name)) for name, cls in _SECTIONS.items()
        }
        for key in ("assets_dir", "state_dir"):
            if key in data:
                value = Path(data[key])
                overrides[key] = value if value.is_absolute() else path.parent / value
        config = replace(config, **overrides)

    if assets_dir is not None:
        config = replace(config, assets_dir=assets_dir)
    return config
