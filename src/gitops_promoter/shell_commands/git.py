"""Git command abstractions.

This module provides the git operations a promotion attempt needs:
cloning, workspace-scoped configuration, committing, pushing, and the
remote branch existence check that drives orphan branch creation.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from gitops_promoter.errors import CommandError, PushRejected
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants

from .types import BranchLookup, BranchStatus, CommandResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class GitCommands:
    """Git-related shell commands.

    Provides operations for:
    - Cloning and global (workspace-scoped) configuration
    - Committing and pushing source and target branches
    - Remote branch existence checks
    - Plain and orphan branch checkout
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        binary: str = "git",
        constants: PromotionConstants | None = None,
    ) -> None:
        """Initialize Git commands.

        Args:
            runner: Command runner for executing shell commands
            binary: git executable name or path
            constants: Optional constants (uses defaults if not provided)
        """
        self._runner = runner
        self._binary = binary
        self._constants = constants or DEFAULT_CONSTANTS

    def _git(self, *args: str) -> list[str]:
        return [self._binary, *args]

    # =========================================================================
    # Repository Setup
    # =========================================================================

    def clone(self, repo_url: str, destination: Path, branch: str) -> CommandResult:
        """Clone a single branch's checkout (all remote heads are fetched).

        Tags are skipped; they are never needed for promotion.
        """
        cmd = self._git("clone", "--no-tags", "--branch", branch, repo_url, str(destination))
        return self._runner.run(cmd, cwd=destination.parent, check=True)

    def config_global(self, key: str, value: str) -> CommandResult:
        """Set a global config value; global means workspace-scoped here."""
        return self._runner.run(self._git("config", "--global", key, value), check=True)

    # =========================================================================
    # Commits
    # =========================================================================

    def commit_all(self, message: str) -> CommandResult:
        """Commit all modified tracked files (``git commit -am``)."""
        return self._runner.run(self._git("commit", "-am", message), check=True)

    def add_all(self) -> CommandResult:
        """Stage every change in the working tree, including deletions."""
        return self._runner.run(self._git("add", "--all"), check=True)

    def commit(self, message: str) -> CommandResult:
        return self._runner.run(self._git("commit", "-m", message), check=True)

    def commit_empty(self, message: str) -> CommandResult:
        return self._runner.run(
            self._git("commit", "--allow-empty", "-m", message), check=True
        )

    def remove_cached_all(self) -> CommandResult:
        """Unstage every tracked path without touching the working tree."""
        return self._runner.run(
            self._git("rm", "-r", "-q", "--cached", "--ignore-unmatch", "."),
            check=True,
        )

    # =========================================================================
    # Branches
    # =========================================================================

    def remote_branch_exists(self, repo_url: str, branch: str) -> BranchLookup:
        """Check whether a branch exists on the remote.

        ``git ls-remote --exit-code`` exits 2 when no ref matches. That exit
        code is the expected "not found" answer and is reported as
        NOT_FOUND; any other non-zero exit is reported as ERROR.

        Returns:
            BranchLookup with EXISTS, NOT_FOUND, or ERROR status
        """
        cmd = self._git(
            "ls-remote",
            "--heads",
            "--exit-code",
            repo_url,
            f"refs/heads/{branch}",
        )
        result = self._runner.run(cmd)
        if result.success:
            status = BranchStatus.EXISTS
        elif result.returncode == self._constants.LS_REMOTE_NOT_FOUND_EXIT_CODE:
            status = BranchStatus.NOT_FOUND
        else:
            status = BranchStatus.ERROR
        return BranchLookup(branch=branch, status=status, result=result)

    def checkout(self, branch: str) -> CommandResult:
        """Check out a branch by name.

        The trailing ``--`` keeps a same-named path (such as the overlay
        directory) from shadowing the branch reference.
        """
        return self._runner.run(self._git("checkout", branch, "--"), check=True)

    def checkout_orphan(self, branch: str) -> CommandResult:
        """Create and switch to a branch with no history."""
        return self._runner.run(
            self._git("checkout", "--orphan", branch, "--"), check=True
        )

    # =========================================================================
    # Remote Updates
    # =========================================================================

    def push_head(self, remote: str | None = None) -> CommandResult:
        """Push the current branch to the same-named branch on the remote."""
        return self._push(remote or self._constants.REMOTE_NAME, "HEAD")

    def push_branch(self, branch: str, remote: str | None = None) -> CommandResult:
        """Push a branch by explicit name."""
        return self._push(remote or self._constants.REMOTE_NAME, branch)

    def _push(self, remote: str, refspec: str) -> CommandResult:
        cmd = self._git("push", remote, refspec)
        result = self._runner.run(cmd)
        if result.success:
            return result
        if self.is_push_rejection(result.output):
            raise PushRejected(
                result.command,
                result.returncode,
                result.output,
                message=f"push of {refspec} to {remote} was rejected",
            )
        raise CommandError(result.command, result.returncode, result.output)

    def is_push_rejection(self, output: str) -> bool:
        """Whether push output indicates the remote refused the update."""
        return any(marker in output for marker in self._constants.PUSH_REJECTED_MARKERS)

    # =========================================================================
    # Queries
    # =========================================================================

    def rev_parse_head(self) -> str:
        """Return the full SHA of HEAD."""
        return self._runner.run_checked(self._git("rev-parse", "HEAD")).strip()

