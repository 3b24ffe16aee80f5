"""Overlay patching with ``kustomize edit set image``."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from gitops_promoter.errors import PatchError
from gitops_promoter.shell_commands.kustomize import KustomizeCommands

from .types import ImageChange


class OverlayPatcher:
    """Pins image references in an environment overlay.

    The patch tool is idempotent per image name, so the order of changes
    only affects logs and commit messages, not the resulting overlay.
    """

    def __init__(self, kustomize: KustomizeCommands) -> None:
        self.kustomize = kustomize

    def set_images(self, overlay_dir: Path, images: Sequence[ImageChange]) -> None:
        """Apply every image change to the overlay, in order.

        Raises:
            PatchError: If the overlay directory is missing or kustomize fails
        """
        if not overlay_dir.is_dir():
            raise PatchError(
                f"Overlay directory not found: {overlay_dir.name}",
                details=f"Expected a kustomize overlay at {overlay_dir}",
                operation="set image",
            )
        for image in images:
            self.set_image(overlay_dir, image)

    def set_image(self, overlay_dir: Path, image: ImageChange) -> None:
        result = self.kustomize.edit_set_image(overlay_dir, image.kustomize_argument)
        if not result.success:
            raise PatchError(
                f"Cannot set image {image.reference}",
                details=result.output.strip() or None,
                operation="set image",
            )
        logger.debug(f"Set image {image.reference} in overlay {overlay_dir.name}")
