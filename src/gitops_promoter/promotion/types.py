"""Promotion request and result models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS


class ImageChange(BaseModel):
    """A new tag for one image repository."""

    model_config = ConfigDict(frozen=True)

    repository: str = Field(min_length=1)
    tag: str = Field(min_length=1)

    @field_validator("repository", "tag")
    @classmethod
    def _no_whitespace(cls, value: str) -> str:
        if any(ch.isspace() for ch in value):
            raise ValueError("must not contain whitespace")
        return value

    @property
    def reference(self) -> str:
        """``repo:tag``"""
        return f"{self.repository}:{self.tag}"

    @property
    def kustomize_argument(self) -> str:
        """``repo=repo:tag``, the argument to ``kustomize edit set image``."""
        return f"{self.repository}={self.reference}"

    @classmethod
    def parse(cls, value: str) -> ImageChange:
        """Parse ``repo=tag`` or ``repo:tag``.

        For the colon form the tag is whatever follows the last colon after
        the last slash, so registry ports (``host:5000/app:v2``) are kept in
        the repository.
        """
        text = value.strip()
        if "=" in text:
            repository, tag = text.split("=", 1)
        else:
            slash = text.rfind("/")
            colon = text.rfind(":")
            if colon <= slash:
                raise ValueError(f"image {value!r} has no tag; use repo=tag or repo:tag")
            repository, tag = text[:colon], text[colon + 1 :]
        return cls(repository=repository, tag=tag)


class PromotionRequest(BaseModel):
    """Immutable input for one promotion attempt.

    Attributes:
        repo_url: Source repository URL
        source_branch: Branch holding the overlays
        target_branch: Rendered-output branch to create or update
        images: Image changes, applied in order
        overlay_path: Overlay directory within the source branch; defaults
                      to the target branch name
    """

    model_config = ConfigDict(frozen=True)

    repo_url: str = Field(min_length=1)
    source_branch: str
    target_branch: str
    images: tuple[ImageChange, ...] = Field(min_length=1)
    overlay_path: str | None = None

    @field_validator("source_branch", "target_branch")
    @classmethod
    def _valid_branch(cls, value: str) -> str:
        if not DEFAULT_CONSTANTS.BRANCH_NAME_PATTERN.match(value):
            raise ValueError(f"invalid branch name: {value!r}")
        return value

    @field_validator("overlay_path")
    @classmethod
    def _relative_overlay(cls, value: str | None) -> str | None:
        if value is None:
            return None
        path = PurePosixPath(value)
        if not value.strip() or path.is_absolute() or ".." in path.parts:
            raise ValueError(
                f"overlay path must be relative to the repository root: {value!r}"
            )
        return str(path)

    @model_validator(mode="after")
    def _distinct_branches(self) -> PromotionRequest:
        if self.source_branch == self.target_branch:
            raise ValueError("source and target branches must differ")
        return self

    @property
    def overlay(self) -> str:
        """Overlay directory, relative to the repository root."""
        return self.overlay_path or self.target_branch


class PublishState(Enum):
    """States of the branch publication state machine, in order."""

    CLONED = "cloned"
    SOURCE_COMMITTED = "source_committed"
    SOURCE_PUSHED = "source_pushed"
    TARGET_BRANCH_RESOLVED = "target_branch_resolved"
    TARGET_CLEANED = "target_cleaned"
    ARTIFACT_WRITTEN = "artifact_written"
    TARGET_COMMITTED = "target_committed"
    TARGET_PUSHED = "target_pushed"
    DONE = "done"


@dataclass(frozen=True)
class PromotionResult:
    """Outcome of a successful promotion attempt.

    Attributes:
        commit_sha: New commit on the target branch
        target_branch: Branch that was published
        source_branch: Branch that received the overlay change
        images: Image changes that were applied
        target_branch_created: Whether the target branch was newly created
        synced: Whether the deployment controller acknowledged a sync request
    """

    commit_sha: str
    target_branch: str
    source_branch: str
    images: tuple[ImageChange, ...]
    target_branch_created: bool
    synced: bool = False
