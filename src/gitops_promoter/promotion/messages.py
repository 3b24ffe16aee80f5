"""Commit messages for source and target branch commits."""

from __future__ import annotations

from collections.abc import Sequence

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS

from .types import ImageChange


def _bullets(images: Sequence[ImageChange]) -> str:
    return "".join(f"\n * {image.reference}" for image in images)


def source_commit_message(
    target_branch: str,
    images: Sequence[ImageChange],
    prefix: str = DEFAULT_CONSTANTS.COMMIT_MESSAGE_PREFIX,
) -> str:
    """Message for the overlay change committed to the source branch."""
    if len(images) == 1:
        return f"{prefix}: updating {target_branch} to use image {images[0].reference}"
    return f"{prefix}: updating {target_branch} to use new images{_bullets(images)}"


def target_commit_message(
    images: Sequence[ImageChange],
    prefix: str = DEFAULT_CONSTANTS.COMMIT_MESSAGE_PREFIX,
) -> str:
    """Message for the rendered artifact committed to the target branch."""
    if len(images) == 1:
        return f"{prefix}: updating to use new image {images[0].reference}"
    return f"{prefix}: updating to use new images{_bullets(images)}"


def orphan_root_message(
    target_branch: str,
    prefix: str = DEFAULT_CONSTANTS.COMMIT_MESSAGE_PREFIX,
) -> str:
    """Message for the empty root commit of a new rendered branch."""
    return f"{prefix}: initialize rendered branch {target_branch}"
