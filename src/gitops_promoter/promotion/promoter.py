"""Promotion orchestrator.

This module provides the Promoter class which runs one promotion attempt
end to end. It coordinates specialized components for:
- Workspace allocation and release
- Credential provisioning
- Overlay patching and manifest rendering
- Branch publication
- Deployment-controller notification

Stages run strictly in sequence; the first failure aborts the attempt and
is reported with the repository, branch, and operation it happened in.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from gitops_promoter.credentials import CredentialProvider, CredentialProvisioner
from gitops_promoter.errors import PatchError, PromotionError
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.shell_commands import ShellCommands
from gitops_promoter.shell_commands.types import BranchLookup
from gitops_promoter.workspace import Workspace, WorkspaceManager

from .locks import BranchLockRegistry
from .overlay import OverlayPatcher
from .publisher import BranchPublisher
from .renderer import ManifestRenderer
from .sync import NoopSyncTrigger, SyncTrigger
from .types import PromotionRequest, PromotionResult


@contextmanager
def _stage(request: PromotionRequest, operation: str, branch: str | None = None) -> Iterator[None]:
    """Attach attempt context to any PromotionError raised in the block."""
    try:
        yield
    except PromotionError as exc:
        raise exc.with_context(
            repository=request.repo_url,
            branch=branch or request.source_branch,
            operation=operation,
        )


class Promoter:
    """Runs promotion attempts.

    The promotion workflow consists of:
    1. Acquire an isolated workspace
    2. Resolve credentials and configure git inside the workspace
    3. Clone the source branch
    4. Pin each image in the overlay
    5. Commit and push the overlay change to the source branch
    6. Render the overlay
    7. Publish the rendered artifact to the orphan target branch
    8. Notify the deployment controller
    9. Release the workspace

    Attributes:
        provisioner: Credential provisioner
        sync_trigger: Deployment-controller notifier
        workspaces: Workspace allocator
        constants: Promotion constants
    """

    def __init__(
        self,
        credential_provider: CredentialProvider,
        *,
        sync_trigger: SyncTrigger | None = None,
        workspaces: WorkspaceManager | None = None,
        constants: PromotionConstants | None = None,
        git_binary: str = "git",
        kustomize_binary: str = "kustomize",
        command_timeout: float | None = None,
        locks: BranchLockRegistry | None = None,
    ) -> None:
        """Initialize the promoter.

        Args:
            credential_provider: Source of repository credentials
            sync_trigger: Notifier called with the new commit SHA
            workspaces: Workspace allocator (defaults to system temp dir)
            constants: Optional promotion constants
            git_binary: git executable name or path
            kustomize_binary: kustomize executable name or path
            command_timeout: Optional per-command timeout in seconds
            locks: Registry serializing attempts on the same branch
        """
        self.constants = constants or DEFAULT_CONSTANTS
        self.provisioner = CredentialProvisioner(credential_provider, self.constants)
        self.sync_trigger = sync_trigger or NoopSyncTrigger()
        self.workspaces = workspaces or WorkspaceManager(constants=self.constants)
        self.git_binary = git_binary
        self.kustomize_binary = kustomize_binary
        self.command_timeout = command_timeout
        self.locks = locks or BranchLockRegistry()

    # =========================================================================
    # Public Interface
    # =========================================================================

    def promote(self, request: PromotionRequest) -> PromotionResult:
        """Run one promotion attempt.

        Args:
            request: What to promote, and where

        Returns:
            PromotionResult with the target branch's new commit SHA

        Raises:
            PromotionError: Any failure; the subclass identifies the stage
        """
        logger.info(
            f"Promoting {', '.join(image.reference for image in request.images)} "
            f"to {request.target_branch} in {request.repo_url}"
        )
        with self.locks.hold(request.repo_url, request.target_branch):
            with self.workspaces.session() as workspace:
                result = self._promote_in(workspace, request)
        logger.info(f"Promoted {request.target_branch} to commit {result.commit_sha}")
        return result

    def check_branch(self, repo_url: str, branch: str) -> BranchLookup:
        """Look up a branch on the remote with the attempt's credentials.

        Uses the same exit-code classification as target branch resolution.
        """
        with self.workspaces.session() as workspace:
            commands = self._commands(workspace)
            try:
                self.provisioner.provision(repo_url, workspace, commands.git)
            except PromotionError as exc:
                raise exc.with_context(
                    repository=repo_url, branch=branch, operation="provision credentials"
                )
            return commands.git.remote_branch_exists(repo_url, branch)

    # =========================================================================
    # Private Helpers
    # =========================================================================

    def _commands(self, workspace: Workspace) -> ShellCommands:
        return ShellCommands(
            workspace,
            git_binary=self.git_binary,
            kustomize_binary=self.kustomize_binary,
            timeout=self.command_timeout,
            constants=self.constants,
        )

    def _promote_in(self, workspace: Workspace, request: PromotionRequest) -> PromotionResult:
        commands = self._commands(workspace)

        with _stage(request, "provision credentials"):
            self.provisioner.provision(request.repo_url, workspace, commands.git)

        with _stage(request, "clone repository"):
            commands.git.clone(request.repo_url, workspace.repo_dir, request.source_branch)
        logger.debug(f"Cloned {request.repo_url}@{request.source_branch} into {workspace.repo_dir}")

        overlay_dir = self._overlay_dir(workspace, request)
        with _stage(request, "set image"):
            OverlayPatcher(commands.kustomize).set_images(overlay_dir, request.images)

        renderer = ManifestRenderer(commands.kustomize)

        def render() -> bytes:
            with _stage(request, "render manifests"):
                return renderer.render(overlay_dir)

        publisher = BranchPublisher(commands.git, request, workspace, self.constants)
        commit_sha = publisher.publish(render)

        with _stage(request, "trigger sync", branch=request.target_branch):
            synced = self.sync_trigger.trigger(commit_sha)

        return PromotionResult(
            commit_sha=commit_sha,
            target_branch=request.target_branch,
            source_branch=request.source_branch,
            images=request.images,
            target_branch_created=bool(publisher.target_created),
            synced=synced,
        )

    def _overlay_dir(self, workspace: Workspace, request: PromotionRequest) -> Path:
        """Resolve the overlay directory, refusing paths outside the clone."""
        repo_dir = workspace.repo_dir.resolve()
        overlay_dir = (repo_dir / request.overlay).resolve()
        if overlay_dir != repo_dir and repo_dir not in overlay_dir.parents:
            raise PatchError(
                f"Overlay path escapes the repository: {request.overlay}",
                repository=request.repo_url,
                branch=request.source_branch,
                operation="set image",
            )
        return overlay_dir
