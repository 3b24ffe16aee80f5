"""Command runner for executing external tools inside a workspace.

This module provides the base command execution functionality used by
the git and kustomize command modules.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from gitops_promoter.errors import CommandError
from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants
from gitops_promoter.workspace import Workspace

from .types import CommandResult


class CommandRunner:
    """Low-level command executor bound to one workspace.

    Every command runs with HOME overridden to the workspace root, so any
    tool-level global configuration or credential helper is scoped to the
    workspace. Output is always captured for logging and error context, and
    the raw exit status is returned so callers can give specific exit codes
    a meaning of their own.
    """

    def __init__(
        self,
        workspace: Workspace,
        *,
        timeout: float | None = None,
        constants: PromotionConstants | None = None,
    ) -> None:
        """Initialize the command runner.

        Args:
            workspace: Workspace providing HOME and the default cwd
            timeout: Optional per-command timeout in seconds
            constants: Optional constants (uses defaults if not provided)
        """
        self.workspace = workspace
        self.timeout = timeout
        self.constants = constants or DEFAULT_CONSTANTS

    def _default_cwd(self) -> Path:
        repo_dir = self.workspace.repo_dir
        return repo_dir if repo_dir.is_dir() else self.workspace.root

    def run(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
        combine_output: bool = True,
        check: bool = False,
    ) -> CommandResult:
        """Execute a command and return a structured result.

        Args:
            cmd: Command and arguments as a sequence
            cwd: Working directory (defaults to the workspace clone, or the
                 workspace root before the clone exists)
            combine_output: Merge stderr into stdout; disable to keep stdout
                            clean when it carries data (e.g. rendered YAML)
            check: Raise CommandError on non-zero exit code

        Returns:
            CommandResult with the raw exit status and captured output

        Raises:
            CommandError: If check=True and the command fails, if the
                          command times out, or if the binary is missing
        """
        argv = tuple(cmd)
        workdir = cwd or self._default_cwd()
        logger.debug(f"Running {' '.join(argv)} (cwd={workdir})")

        try:
            completed = subprocess.run(
                list(argv),
                cwd=workdir,
                env=self.workspace.environment(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if combine_output else subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            output = _decode(exc.output) if exc.output else ""
            raise CommandError(
                argv,
                self.constants.TIMEOUT_EXIT_CODE,
                output,
                message=f"command timed out after {self.timeout}s: {' '.join(argv)}",
            ) from exc
        except FileNotFoundError as exc:
            raise CommandError(
                argv,
                self.constants.MISSING_BINARY_EXIT_CODE,
                str(exc),
                message=f"command not found: {argv[0]}",
            ) from exc

        raw_stdout = completed.stdout or b""
        result = CommandResult(
            command=argv,
            success=completed.returncode == 0,
            stdout=_decode(raw_stdout),
            stderr=_decode(completed.stderr) if completed.stderr else "",
            returncode=completed.returncode,
            raw_stdout=raw_stdout,
        )

        if combine_output:
            logger.debug(result.output.rstrip() or "(no output)")
        elif result.stderr:
            logger.debug(result.stderr.rstrip())

        if check and not result.success:
            raise CommandError(argv, result.returncode, result.output)
        return result

    def run_checked(
        self,
        cmd: Sequence[str],
        *,
        cwd: Path | None = None,
    ) -> str:
        """Execute a command and return its output, raising on failure.

        Raises:
            CommandError: If command exits with non-zero code
        """
        result = self.run(cmd, cwd=cwd, check=True)
        return result.stdout


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")
