"""Configuration models for the promoter."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from gitops_promoter.credentials.models import RepositoryCredentials
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants


class GitConfig(BaseModel):
    binary: str = Field(default="git", description="git executable name or path")
    remote: str = Field(default=DEFAULT_CONSTANTS.REMOTE_NAME)
    committer_name: str = Field(default=DEFAULT_CONSTANTS.COMMITTER_NAME)
    committer_email: str = Field(default=DEFAULT_CONSTANTS.COMMITTER_EMAIL)
    commit_message_prefix: str = Field(default=DEFAULT_CONSTANTS.COMMIT_MESSAGE_PREFIX)
    command_timeout: float | None = Field(
        default=None, gt=0, description="Per-command timeout in seconds"
    )


class KustomizeConfig(BaseModel):
    binary: str = Field(default="kustomize", description="kustomize executable name or path")


class WorkspaceConfig(BaseModel):
    base_dir: Path | None = Field(
        default=None, description="Parent directory for workspaces; system temp if unset"
    )
    retain: bool = Field(default=False, description="Keep workspaces after each attempt")


class ArtifactConfig(BaseModel):
    filename: str = Field(default=DEFAULT_CONSTANTS.ARTIFACT_FILENAME)

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        if not v or "/" in v or v in (".", "..", DEFAULT_CONSTANTS.GIT_METADATA_DIR):
            raise ValueError(f"artifact filename must be a plain file name, got {v!r}")
        return v


class ArgoCDConfig(BaseModel):
    enabled: bool = False
    namespace: str = Field(default=DEFAULT_CONSTANTS.ARGOCD_NAMESPACE)
    application: str | None = Field(
        default=None, description="Application to refresh and sync after publishing"
    )
    revision: str | None = Field(
        default=None,
        description="Sync revision; the Application's targetRevision when unset",
    )


class CredentialsConfig(BaseModel):
    source: Literal["static", "argocd"] = "static"
    namespace: str = Field(
        default=DEFAULT_CONSTANTS.ARGOCD_NAMESPACE,
        description="Namespace holding Argo CD credential secrets",
    )
    repositories: dict[str, RepositoryCredentials] = Field(default_factory=dict)
    credential_sets: dict[str, RepositoryCredentials] = Field(default_factory=dict)


class PromoterConfig(BaseModel):
    """Root configuration, read from the ``config:`` key of the YAML file."""

    git: GitConfig = Field(default_factory=GitConfig)
    kustomize: KustomizeConfig = Field(default_factory=KustomizeConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    artifact: ArtifactConfig = Field(default_factory=ArtifactConfig)
    argocd: ArgoCDConfig = Field(default_factory=ArgoCDConfig)
    credentials: CredentialsConfig = Field(default_factory=CredentialsConfig)

    def to_constants(self, base: PromotionConstants | None = None) -> PromotionConstants:
        """Overlay the operator-tunable values onto the promotion constants."""
        return replace(
            base or DEFAULT_CONSTANTS,
            COMMITTER_NAME=self.git.committer_name,
            COMMITTER_EMAIL=self.git.committer_email,
            COMMIT_MESSAGE_PREFIX=self.git.commit_message_prefix,
            REMOTE_NAME=self.git.remote,
            ARTIFACT_FILENAME=self.artifact.filename,
        )

    def masked(self) -> dict:
        """Dump the configuration with secret values replaced."""
        data = self.model_dump(mode="json")
        for section in ("repositories", "credential_sets"):
            for record in data["credentials"][section].values():
                for key in ("ssh_private_key", "password"):
                    if record.get(key):
                        record[key] = "********"
        return data
