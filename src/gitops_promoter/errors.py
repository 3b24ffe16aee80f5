"""Error taxonomy for promotion attempts.

Every stage raises a subclass of :class:`PromotionError`. Errors carry a
short message, optional multi-line details (usually captured command
output), and the repository, branch, and operation they relate to so the
CLI and callers can report exactly where an attempt stopped.
"""

from __future__ import annotations

from collections.abc import Sequence


class PromotionError(Exception):
    """Raised when a promotion attempt fails."""

    def __init__(
        self,
        message: str,
        details: str | None = None,
        *,
        repository: str | None = None,
        branch: str | None = None,
        operation: str | None = None,
    ):
        self.message = message
        self.details = details
        self.repository = repository
        self.branch = branch
        self.operation = operation
        super().__init__(message)

    @property
    def context(self) -> dict[str, str]:
        """Non-empty context fields, for structured logging."""
        fields = {
            "repository": self.repository,
            "branch": self.branch,
            "operation": self.operation,
        }
        return {key: value for key, value in fields.items() if value}

    def with_context(
        self,
        *,
        repository: str | None = None,
        branch: str | None = None,
        operation: str | None = None,
    ) -> PromotionError:
        """Fill in context fields that are not already set and return self."""
        self.repository = self.repository or repository
        self.branch = self.branch or branch
        self.operation = self.operation or operation
        return self


class WorkspaceError(PromotionError):
    """The ephemeral workspace could not be allocated."""


class CredentialError(PromotionError):
    """No usable credentials could be resolved or materialized."""


class ConfigError(PromotionError):
    """The promoter configuration is missing, malformed, or invalid."""


class CommandError(PromotionError):
    """An external command exited non-zero without a recognized meaning."""

    def __init__(
        self,
        command: Sequence[str],
        exit_code: int,
        output: str = "",
        *,
        message: str | None = None,
        repository: str | None = None,
        branch: str | None = None,
        operation: str | None = None,
    ):
        self.command = tuple(command)
        self.exit_code = exit_code
        self.output = output
        rendered = " ".join(self.command)
        super().__init__(
            message or f"command failed ({exit_code}): {rendered}",
            details=output.strip() or None,
            repository=repository,
            branch=branch,
            operation=operation,
        )


class PushRejected(CommandError):
    """A push was refused by the remote, most likely a concurrent update."""


class PatchError(PromotionError):
    """The overlay could not be patched with a new image reference."""


class RenderError(PromotionError):
    """The overlay could not be rendered into manifests."""


class PublishStateError(PromotionError):
    """A publication step was invoked out of order."""


class SyncTriggerError(PromotionError):
    """The deployment controller did not acknowledge the sync request."""
