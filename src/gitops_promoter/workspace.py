"""Ephemeral, per-attempt workspaces.

Each promotion attempt owns one workspace directory. It doubles as the
``HOME`` of every subprocess the attempt runs, so git's global config,
the credential store, and SSH material are scoped to the attempt and never
leak into (or from) other attempts running in the same process.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from gitops_promoter.errors import WorkspaceError
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants


@dataclass(frozen=True)
class Workspace:
    """An exclusively-owned directory tree for one promotion attempt.

    Attributes:
        root: Workspace root; used as HOME for all subprocesses
        constants: Layout constants (directory and file names)
    """

    root: Path
    constants: PromotionConstants = field(default=DEFAULT_CONSTANTS, repr=False)

    @property
    def repo_dir(self) -> Path:
        """Directory the source repository is cloned into."""
        return self.root / self.constants.REPO_DIR_NAME

    @property
    def ssh_dir(self) -> Path:
        return self.root / self.constants.SSH_DIR_NAME

    @property
    def ssh_config_path(self) -> Path:
        return self.ssh_dir / self.constants.SSH_CONFIG_NAME

    @property
    def ssh_key_path(self) -> Path:
        return self.ssh_dir / self.constants.SSH_KEY_NAME

    @property
    def credentials_path(self) -> Path:
        return self.root / self.constants.CREDENTIALS_FILE_NAME

    def environment(self) -> dict[str, str]:
        """Build the environment for a subprocess run inside this workspace.

        HOME points at the workspace root. Interactive credential prompts are
        disabled so a missing credential fails fast instead of hanging. When an
        SSH key has been provisioned, ssh is told explicitly which config and
        key to use, since OpenSSH resolves ``~`` from the passwd database
        rather than from HOME.
        """
        env = os.environ.copy()
        env.pop("XDG_CONFIG_HOME", None)
        env["HOME"] = str(self.root)
        env["GIT_TERMINAL_PROMPT"] = "0"
        if self.ssh_key_path.exists():
            env["GIT_SSH_COMMAND"] = (
                f"ssh -F {self.ssh_config_path} -i {self.ssh_key_path} "
                "-o IdentitiesOnly=yes"
            )
        return env


class WorkspaceManager:
    """Allocates and releases workspaces.

    Release is best-effort and happens on every exit path of
    :meth:`session`; pass ``retain=True`` to keep workspaces on disk for
    debugging.
    """

    def __init__(
        self,
        base_dir: Path | None = None,
        *,
        retain: bool = False,
        constants: PromotionConstants | None = None,
    ) -> None:
        """Initialize the workspace manager.

        Args:
            base_dir: Parent directory for workspaces (defaults to the system
                      temporary directory)
            retain: Keep workspaces after release instead of deleting them
            constants: Optional layout constants (uses defaults if not provided)
        """
        self.base_dir = base_dir
        self.retain = retain
        self.constants = constants or DEFAULT_CONSTANTS

    def acquire(self) -> Workspace:
        """Create a unique, empty workspace directory.

        Raises:
            WorkspaceError: If the filesystem cannot allocate the directory
        """
        try:
            if self.base_dir is not None:
                self.base_dir.mkdir(parents=True, exist_ok=True)
            root = tempfile.mkdtemp(
                prefix=self.constants.WORKSPACE_PREFIX,
                dir=str(self.base_dir) if self.base_dir is not None else None,
            )
        except OSError as exc:
            raise WorkspaceError(
                "Cannot allocate promotion workspace",
                details=str(exc),
                operation="acquire workspace",
            ) from exc

        workspace = Workspace(root=Path(root).resolve(), constants=self.constants)
        logger.debug(f"Created workspace {workspace.root}")
        return workspace

    def release(self, workspace: Workspace) -> None:
        """Delete a workspace, unless workspaces are retained."""
        if self.retain:
            logger.info(f"Retaining workspace {workspace.root} for debugging")
            return
        try:
            shutil.rmtree(workspace.root)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.warning(f"Unable to remove workspace {workspace.root}: {exc}")
            return
        logger.debug(f"Removed workspace {workspace.root}")

    @contextmanager
    def session(self) -> Iterator[Workspace]:
        """Acquire a workspace and release it however the block exits."""
        workspace = self.acquire()
        try:
            yield workspace
        finally:
            self.release(workspace)
