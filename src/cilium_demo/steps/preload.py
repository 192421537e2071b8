"""Pre-load Cilium images into the Kind nodes."""

from __future__ import annotations

import logging

import yaml

from ..images import ImagePreloader, PreloadReport, extract_images
from .base import Step, StepContext
from .cni import ensure_helm_repo

LOG = logging.getLogger(__name__)


class PreloadImages(Step):
    """Pull the chart's images up front; tolerant of any number of failures."""

    name = "preload-images"

    def run(self, ctx: StepContext) -> None:
        cilium = ctx.config.cilium
        LOG.info("Pre-loading Cilium images into Kind nodes...")
        ensure_helm_repo(ctx)

        values = ctx.require_asset(cilium.values_file)
        rendered = ctx.runner.run(
            [
                "helm",
                "template",
                cilium.release_name,
                cilium.chart,
                "--version",
                cilium.version,
                "--values",
                str(values),
            ],
            check=False,
        )
        images = []
        if rendered.returncode == 0:
            try:
                images = extract_images(rendered.stdout or "")
            except yaml.YAMLError as exc:
                LOG.debug("helm template output is not valid YAML: %s", exc)
        if not images:
            LOG.warning("Could not extract images from Helm chart, skipping pre-load")
            ctx.preload_report = PreloadReport(skipped=True)
            return

        preloader = ImagePreloader(ctx.runner, ctx.config.cluster.name)
        ctx.preload_report = preloader.preload(images)
