"""Materialize git credentials into a workspace.

Resolution order: repository-specific credentials first, then
credential-set credentials. A provider record without an SSH key and
without a password counts as "not found" and the lookup continues.
Once resolved, SSH keys take precedence over passwords.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from loguru import logger

from gitops_promoter.errors import CommandError, CredentialError
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.shell_commands.git import GitCommands
from gitops_promoter.workspace import Workspace

from .models import Credentials, SSHKey, UsernamePassword, to_credentials
from .providers import CredentialProvider

_OWNER_ONLY = 0o600
_OWNER_ONLY_DIR = 0o700


class CredentialProvisioner:
    """Resolves credentials for a repository and writes them to a workspace.

    Attributes:
        provider: Credential provider queried for the repository
        constants: Promotion constants (committer identity, file names)
    """

    def __init__(
        self,
        provider: CredentialProvider,
        constants: PromotionConstants | None = None,
    ) -> None:
        self.provider = provider
        self.constants = constants or DEFAULT_CONSTANTS

    def provision(self, repo_url: str, workspace: Workspace, git: GitCommands) -> Credentials:
        """Resolve credentials and configure git inside the workspace.

        Args:
            repo_url: Repository the attempt will clone and push to
            workspace: Target workspace (its root is git's HOME)
            git: Git commands bound to the workspace

        Returns:
            The credentials that were materialized

        Raises:
            CredentialError: If no usable credentials exist or cannot be written
        """
        credentials = self.resolve(repo_url)

        try:
            self._configure_identity(git)
            if isinstance(credentials, SSHKey):
                self._write_ssh(workspace, credentials)
                logger.debug(f"Configured SSH authentication for {repo_url}")
            else:
                self._write_credential_store(repo_url, workspace, credentials, git)
                logger.debug(f"Configured credential store authentication for {repo_url}")
        except CommandError as exc:
            raise CredentialError(
                "Cannot configure git authentication",
                details=exc.details,
                repository=repo_url,
                operation="configure git",
            ) from exc
        except OSError as exc:
            raise CredentialError(
                "Cannot write credentials into workspace",
                details=str(exc),
                repository=repo_url,
                operation="write credentials",
            ) from exc
        return credentials

    def resolve(self, repo_url: str) -> Credentials:
        """Resolve credentials without touching any workspace.

        Raises:
            CredentialError: If neither lookup yields usable credentials
        """
        try:
            credentials = to_credentials(self.provider.lookup_repository(repo_url))
            if credentials is None:
                logger.debug(f"No repository credentials for {repo_url}, trying credential sets")
                credentials = to_credentials(self.provider.lookup_credential_set(repo_url))
        except CredentialError:
            raise
        except Exception as exc:
            raise CredentialError(
                "Credential lookup failed",
                details=str(exc),
                repository=repo_url,
                operation="lookup credentials",
            ) from exc

        if credentials is None:
            raise CredentialError(
                f"no credentials for repository {repo_url}",
                details="Configure repository or credential-set credentials for this URL.",
                repository=repo_url,
                operation="lookup credentials",
            )
        return credentials

    def _configure_identity(self, git: GitCommands) -> None:
        git.config_global("user.name", self.constants.COMMITTER_NAME)
        git.config_global("user.email", self.constants.COMMITTER_EMAIL)

    def _write_ssh(self, workspace: Workspace, credentials: SSHKey) -> None:
        workspace.ssh_dir.mkdir(mode=_OWNER_ONLY_DIR, parents=True, exist_ok=True)
        _write_private(workspace.ssh_config_path, self.constants.SSH_CONFIG)
        key = credentials.private_key
        if not key.endswith("\n"):
            key += "\n"
        _write_private(workspace.ssh_key_path, key)

    def _write_credential_store(
        self,
        repo_url: str,
        workspace: Workspace,
        credentials: UsernamePassword,
        git: GitCommands,
    ) -> None:
        git.config_global(
            "credential.helper", f"store --file={workspace.credentials_path}"
        )
        entry = build_credential_url(
            repo_url,
            credentials.username or self.constants.PLACEHOLDER_USERNAME,
            credentials.password,
        )
        _write_private(workspace.credentials_path, entry + "\n")


def build_credential_url(repo_url: str, username: str, password: str) -> str:
    """Build a credential-store entry for a repository URL.

    The path, query, and fragment are dropped so the entry covers the whole
    host, and ``username:password`` is embedded (percent-encoded).

    Raises:
        CredentialError: If the URL has no scheme (e.g. scp-style SSH syntax)
    """
    parts = urlsplit(repo_url)
    if not parts.scheme:
        raise CredentialError(
            f"cannot build credential URL for {repo_url!r}",
            details="Password credentials require a URL with a scheme, such as https://",
            repository=repo_url,
            operation="write credentials",
        )
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    userinfo = f"{quote(username, safe='')}:{quote(password, safe='')}"
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", "", "", ""))


def _write_private(path: Path, content: str) -> None:
    """Write a file readable and writable by the owner only."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _OWNER_ONLY)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(content)
    os.chmod(path, _OWNER_ONLY)
