"""Branch publication state machine.

Publishing walks a fixed sequence of states::

    CLONED -> SOURCE_COMMITTED -> SOURCE_PUSHED -> TARGET_BRANCH_RESOLVED
      -> TARGET_CLEANED -> ARTIFACT_WRITTEN -> TARGET_COMMITTED
      -> TARGET_PUSHED -> DONE

Each transition is one method. A transition checks that the machine is in
its source state, performs its git effect, and only then advances. Any
failure leaves the machine in the state it was in, with the error carrying
the repository, branch, and operation. Nothing is rolled back: once the
source push has happened, it stays.

The target ("rendered output") branch is an orphan branch. When it does
not exist on the remote it is created with an empty, parentless root
commit, so its history never shares ancestry with the source branch.
"""

from __future__ import annotations

import shutil
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

from loguru import logger

from gitops_promoter.errors import CommandError, PromotionError, PublishStateError
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.shell_commands.git import GitCommands
from gitops_promoter.shell_commands.types import BranchStatus
from gitops_promoter.workspace import Workspace

from .messages import orphan_root_message, source_commit_message, target_commit_message
from .types import PromotionRequest, PublishState


def _transition(
    source: PublishState,
    target: PublishState,
    operation: str,
    *,
    on_source_branch: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Guard a publisher method as the transition ``source -> target``."""

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        def wrapper(self: BranchPublisher, *args: Any, **kwargs: Any) -> Any:
            branch = (
                self.request.source_branch
                if on_source_branch
                else self.request.target_branch
            )
            self._require(source, operation, branch)
            try:
                value = func(self, *args, **kwargs)
            except PromotionError as exc:
                self.failed_operation = operation
                raise exc.with_context(
                    repository=self.request.repo_url,
                    branch=branch,
                    operation=operation,
                )
            except OSError as exc:
                self.failed_operation = operation
                raise PromotionError(
                    f"Cannot {operation}",
                    details=str(exc),
                    repository=self.request.repo_url,
                    branch=branch,
                    operation=operation,
                ) from exc
            self._state = target
            logger.debug(
                f"{operation} on {branch}: {source.value} -> {target.value}"
            )
            return value

        return wrapper

    return decorator


class BranchPublisher:
    """Commits the patched overlay and publishes the rendered artifact.

    Attributes:
        git: Git commands bound to the attempt's workspace
        request: The promotion request being published
        workspace: The attempt's workspace (the clone lives in repo_dir)
        target_created: Whether the target branch was created by this attempt
        commit_sha: Target branch commit, once DONE
        failed_operation: Operation that aborted publication, if any
    """

    def __init__(
        self,
        git: GitCommands,
        request: PromotionRequest,
        workspace: Workspace,
        constants: PromotionConstants | None = None,
    ) -> None:
        self.git = git
        self.request = request
        self.workspace = workspace
        self.constants = constants or DEFAULT_CONSTANTS
        self.target_created: bool | None = None
        self.commit_sha: str | None = None
        self.failed_operation: str | None = None
        self._state = PublishState.CLONED

    @property
    def state(self) -> PublishState:
        return self._state

    @property
    def artifact_path(self) -> Path:
        return self.workspace.repo_dir / self.constants.ARTIFACT_FILENAME

    def _require(self, expected: PublishState, operation: str, branch: str) -> None:
        if self._state is not expected:
            raise PublishStateError(
                f"Cannot {operation} in state {self._state.value}",
                details=f"Expected state {expected.value}",
                repository=self.request.repo_url,
                branch=branch,
                operation=operation,
            )

    # =========================================================================
    # Source Branch
    # =========================================================================

    @_transition(
        PublishState.CLONED,
        PublishState.SOURCE_COMMITTED,
        "commit overlay changes to source branch",
        on_source_branch=True,
    )
    def commit_source(self) -> None:
        message = source_commit_message(
            self.request.target_branch,
            self.request.images,
            self.constants.COMMIT_MESSAGE_PREFIX,
        )
        self.git.commit_all(message)

    @_transition(
        PublishState.SOURCE_COMMITTED,
        PublishState.SOURCE_PUSHED,
        "push source branch",
        on_source_branch=True,
    )
    def push_source(self) -> None:
        self.git.push_head(self.constants.REMOTE_NAME)

    # =========================================================================
    # Target Branch
    # =========================================================================

    @_transition(
        PublishState.SOURCE_PUSHED,
        PublishState.TARGET_BRANCH_RESOLVED,
        "resolve target branch",
    )
    def resolve_target_branch(self) -> BranchStatus:
        """Check out the target branch, creating it as an orphan if needed.

        Returns:
            EXISTS if the branch was checked out, NOT_FOUND if it was created
        """
        branch = self.request.target_branch
        lookup = self.git.remote_branch_exists(self.request.repo_url, branch)

        if lookup.status is BranchStatus.ERROR:
            raise CommandError(
                lookup.result.command,
                lookup.result.returncode,
                lookup.result.output,
                message=f"Cannot check for existence of branch {branch}",
            )

        if lookup.status is BranchStatus.EXISTS:
            self.git.checkout(branch)
            self.target_created = False
            logger.debug(f"Checked out existing branch {branch}")
        else:
            self.git.checkout_orphan(branch)
            self.git.remove_cached_all()
            self.git.commit_empty(
                orphan_root_message(branch, self.constants.COMMIT_MESSAGE_PREFIX)
            )
            self.target_created = True
            logger.debug(f"Created orphan branch {branch}")
        return lookup.status

    @_transition(
        PublishState.TARGET_BRANCH_RESOLVED,
        PublishState.TARGET_CLEANED,
        "clean target branch",
    )
    def clean_target(self) -> None:
        """Delete every top-level entry except git metadata."""
        for entry in self.workspace.repo_dir.iterdir():
            if entry.name == self.constants.GIT_METADATA_DIR:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()

    @_transition(
        PublishState.TARGET_CLEANED,
        PublishState.ARTIFACT_WRITTEN,
        "write rendered manifests",
    )
    def write_artifact(self, artifact: bytes) -> None:
        self.artifact_path.write_bytes(artifact)

    @_transition(
        PublishState.ARTIFACT_WRITTEN,
        PublishState.TARGET_COMMITTED,
        "commit rendered manifests",
    )
    def commit_target(self) -> None:
        self.git.add_all()
        self.git.commit(
            target_commit_message(
                self.request.images, self.constants.COMMIT_MESSAGE_PREFIX
            )
        )

    @_transition(
        PublishState.TARGET_COMMITTED,
        PublishState.TARGET_PUSHED,
        "push target branch",
    )
    def push_target(self) -> None:
        self.git.push_branch(self.request.target_branch, self.constants.REMOTE_NAME)

    @_transition(
        PublishState.TARGET_PUSHED,
        PublishState.DONE,
        "read target branch commit",
    )
    def finish(self) -> str:
        self.commit_sha = self.git.rev_parse_head()
        return self.commit_sha

    # =========================================================================
    # Driver
    # =========================================================================

    def publish(self, render: Callable[[], bytes]) -> str:
        """Run every transition in order.

        Args:
            render: Produces the artifact; called after the source push and
                    before the target branch is checked out, while the
                    overlay is still present in the working tree

        Returns:
            The target branch's new commit SHA
        """
        self.commit_source()
        self.push_source()
        artifact = render()
        self.resolve_target_branch()
        self.clean_target()
        self.write_artifact(artifact)
        self.commit_target()
        self.push_target()
        return self.finish()
