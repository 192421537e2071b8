"""Container image discovery and best-effort preloading."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List

import yaml

from .runner import CommandRunner

LOG = logging.getLogger(__name__)

_DIGEST_RE = re.compile(r"@sha256:[a-f0-9]*")


@dataclass
class PreloadReport:
    """Per-image outcome of a preload run."""

    images: List[str] = field(default_factory=list)
    pulled: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    loaded: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def all_failed(self) -> bool:
        return bool(self.images) and len(self.failed) == len(self.images)


def strip_digest(image: str) -> str:
    """Drop an ``@sha256:...`` suffix.

    ``kind load`` mishandles digest-pinned references, so tag-only
    references are used for both pull and load.
    """

    return _DIGEST_RE.sub("", image)


def _walk_images(node: Any) -> Iterator[str]:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "image" and isinstance(value, str):
                yield value
            else:
                yield from _walk_images(value)
    elif isinstance(node, list):
        for item in node:
            yield from _walk_images(item)


def extract_images(rendered: str) -> List[str]:
    """Return sorted, digest-free image references from rendered manifests."""

    images = set()
    for document in yaml.safe_load_all(rendered):
        for image in _walk_images(document):
            image = strip_digest(image.strip())
            if image:
                images.add(image)
    return sorted(images)


class ImagePreloader:
    """Pull images on the host and inject them into the Kind nodes.

    Failures never abort the run: whatever could not be pulled here is
    pulled by the kubelet at install time.
    """

    def __init__(self, runner: CommandRunner, cluster_name: str) -> None:
        self._runner = runner
        self._cluster_name = cluster_name

    def preload(self, images: Iterable[str]) -> PreloadReport:
        report = PreloadReport(images=list(images))
        total = len(report.images)
        if not total:
            report.skipped = True
            return report

        for count, image in enumerate(report.images, start=1):
            LOG.info("  [%d/%d] Pulling: %s", count, total, image)
            if self._runner.succeeds(["docker", "pull", image]):
                report.pulled.append(image)
            else:
                LOG.warning(
                    "  [%d/%d] Failed to pull: %s (will retry at install time)",
                    count,
                    total,
                    image,
                )
                report.failed.append(image)

        if report.all_failed:
            LOG.warning(
                "All image pulls failed; check network connectivity. "
                "The installer will pull images directly."
            )
            report.skipped = True
            return report

        LOG.info("  Loading images into Kind cluster (this may take a minute)...")
        for image in report.pulled:
            loaded = self._runner.succeeds(
                ["kind", "load", "docker-image", image, "--name", self._cluster_name]
            )
            if loaded:
                report.loaded.append(image)
            else:
                LOG.debug("kind load failed for %s", image)

        LOG.info(
            "Images pre-loaded into Kind nodes (%d/%d successful)",
            len(report.pulled),
            total,
        )
        return report
