"""Shell command abstractions for promotion operations.

This package provides a small, typed interface over the external tools a
promotion attempt drives:

- runner: workspace-scoped subprocess execution
- git: clone, commit, push, branch checks
- kustomize: image pinning and rendering

Usage:
    from gitops_promoter.shell_commands import ShellCommands

    commands = ShellCommands(workspace)
    lookup = commands.git.remote_branch_exists(repo_url, "staging")
"""

from __future__ import annotations

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.workspace import Workspace

from .git import GitCommands
from .kustomize import KustomizeCommands
from .runner import CommandRunner
from .types import BranchLookup, BranchStatus, CommandResult


class ShellCommands:
    """Unified interface for the tools used during one promotion attempt.

    Attributes:
        git: Git commands
        kustomize: Kustomize commands
    """

    def __init__(
        self,
        workspace: Workspace,
        *,
        git_binary: str = "git",
        kustomize_binary: str = "kustomize",
        timeout: float | None = None,
        constants: PromotionConstants | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            workspace: Workspace every command runs inside
            git_binary: git executable name or path
            kustomize_binary: kustomize executable name or path
            timeout: Optional per-command timeout in seconds
            constants: Optional constants (uses defaults if not provided)
        """
        self._workspace = workspace
        constants = constants or DEFAULT_CONSTANTS
        self._runner = CommandRunner(workspace, timeout=timeout, constants=constants)

        self.git = GitCommands(self._runner, binary=git_binary, constants=constants)
        self.kustomize = KustomizeCommands(self._runner, binary=kustomize_binary)

    @property
    def workspace(self) -> Workspace:
        return self._workspace

    @property
    def runner(self) -> CommandRunner:
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandRunner",
    "CommandResult",
    "BranchLookup",
    "BranchStatus",
    "GitCommands",
    "KustomizeCommands",
]
