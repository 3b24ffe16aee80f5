"""Promotion constants.

This module centralizes the magic strings, file names, and exit codes
used throughout a promotion attempt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PromotionConstants:
    """Constants for git/kustomize promotion and Argo CD sync.

    All attributes are immutable. Values that operators commonly change
    (committer identity, artifact filename, remote name) can be overridden
    through configuration; see ``PromoterConfig.to_constants``.
    """

    # Git identities and remotes
    COMMITTER_NAME: str = "gitops-promoter"
    COMMITTER_EMAIL: str = "gitops-promoter@localhost"
    REMOTE_NAME: str = "origin"
    COMMIT_MESSAGE_PREFIX: str = "gitops-promoter"

    # Workspace layout
    WORKSPACE_PREFIX: str = "gitops-promoter-"
    REPO_DIR_NAME: str = "repo"
    GIT_METADATA_DIR: str = ".git"
    SSH_DIR_NAME: str = ".ssh"
    SSH_CONFIG_NAME: str = "config"
    SSH_KEY_NAME: str = "id_rsa"
    CREDENTIALS_FILE_NAME: str = ".git-credentials"

    # Host checking is disabled: target repositories are pre-trusted
    SSH_CONFIG: str = (
        "Host *\n  StrictHostKeyChecking no\n  UserKnownHostsFile=/dev/null\n"
    )

    # Credential resolution
    PLACEHOLDER_USERNAME: str = "git"
    GIT_REPOSITORY_TYPES: tuple[str, ...] = ("git", "")

    # Rendered output
    ARTIFACT_FILENAME: str = "all.yaml"

    # `git ls-remote --exit-code` returns 2 when no matching ref exists
    LS_REMOTE_NOT_FOUND_EXIT_CODE: int = 2

    # Synthetic exit codes for failures that never produced a process status
    TIMEOUT_EXIT_CODE: int = -1
    MISSING_BINARY_EXIT_CODE: int = 127

    # Markers git prints when a push is refused because the remote moved
    PUSH_REJECTED_MARKERS: tuple[str, ...] = (
        "[rejected]",
        "non-fast-forward",
        "fetch first",
        "[remote rejected]",
    )

    # Argo CD
    ARGOCD_NAMESPACE: str = "argocd"
    ARGOCD_REFRESH_ANNOTATION: str = "argocd.argoproj.io/refresh"
    ARGOCD_REFRESH_HARD: str = "hard"
    ARGOCD_SECRET_TYPE_LABEL: str = "argocd.argoproj.io/secret-type"
    ARGOCD_REPOSITORY_SECRET_TYPE: str = "repository"
    ARGOCD_CREDENTIAL_SET_SECRET_TYPE: str = "repo-creds"

    # Branch names: non-empty, no whitespace, no "..", no leading "-",
    # none of git's forbidden ref characters
    BRANCH_NAME_PATTERN: re.Pattern[str] = re.compile(
        r"^(?!-)(?!.*\.\.)(?!.*//)(?!.*@\{)[^\s~^:?*\[\\]+(?<![./])$"
    )


DEFAULT_CONSTANTS = PromotionConstants()
