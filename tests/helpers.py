"""Builders for command results used across unit tests."""

from gitops_promoter.shell_commands.types import CommandResult


def ok(stdout: str = "", raw_stdout: bytes = b"") -> CommandResult:
    """Successful CommandResult."""
    return CommandResult(
        command=("cmd",), success=True, stdout=stdout, raw_stdout=raw_stdout
    )


def failed(returncode: int = 1, stdout: str = "", command: tuple[str, ...] = ("cmd",)) -> CommandResult:
    """Failed CommandResult."""
    return CommandResult(
        command=command, success=False, stdout=stdout, returncode=returncode
    )
