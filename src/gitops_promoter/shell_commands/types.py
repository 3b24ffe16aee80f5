"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "CommandResult",
    "BranchStatus",
    "BranchLookup",
]


@dataclass
class CommandResult:
    """Result of a command execution.

    Attributes:
        command: The argv that was executed
        success: Whether the command exited zero
        stdout: Decoded standard output (combined with stderr when the
                command was run with ``combine_output=True``)
        stderr: Decoded standard error (empty when combined)
        returncode: Raw process exit status
        raw_stdout: Undecoded standard output bytes
    """

    command: tuple[str, ...]
    success: bool
    stdout: str = ""
    stderr: str = ""
    returncode: int = 0
    raw_stdout: bytes = b""

    @property
    def output(self) -> str:
        """All captured output, for logs and error details."""
        if self.stderr:
            return f"{self.stdout}{self.stderr}"
        return self.stdout


class BranchStatus(Enum):
    """Outcome of a remote branch existence check."""

    EXISTS = "exists"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class BranchLookup:
    """Three-way result of ``git ls-remote --exit-code``.

    Attributes:
        branch: Branch name that was looked up
        status: EXISTS, NOT_FOUND, or ERROR
        result: The underlying command result
    """

    branch: str
    status: BranchStatus
    result: CommandResult

    @property
    def exists(self) -> bool:
        return self.status is BranchStatus.EXISTS
