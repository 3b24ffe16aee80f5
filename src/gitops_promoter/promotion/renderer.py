"""Manifest rendering with ``kustomize build``."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from gitops_promoter.errors import RenderError
from gitops_promoter.shell_commands.kustomize import KustomizeCommands


class ManifestRenderer:
    """Renders an overlay into a single manifest bundle.

    A render failure is terminal for the attempt; malformed overlays need a
    human, not a retry.
    """

    def __init__(self, kustomize: KustomizeCommands) -> None:
        self.kustomize = kustomize

    def render(self, overlay_dir: Path) -> bytes:
        """Render the overlay and return the artifact bytes.

        Raises:
            RenderError: If kustomize exits non-zero
        """
        result = self.kustomize.build(overlay_dir)
        if not result.success:
            raise RenderError(
                f"Cannot render overlay {overlay_dir.name}",
                details=result.output.strip() or None,
                operation="render manifests",
            )
        logger.debug(
            f"Rendered overlay {overlay_dir.name} ({len(result.raw_stdout)} bytes)"
        )
        return result.raw_stdout
