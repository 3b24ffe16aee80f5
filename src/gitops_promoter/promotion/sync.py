"""Deployment-controller sync triggers."""

from __future__ import annotations

from typing import Protocol

from loguru import logger

from gitops_promoter.errors import SyncTriggerError
from gitops_promoter.infra.k8s import ArgoCDController, get_argocd_controller, run_sync


class SyncTrigger(Protocol):
    def trigger(self, commit_sha: str) -> bool: ...


class NoopSyncTrigger:
    """Used when no deployment controller should be notified."""

    def trigger(self, commit_sha: str) -> bool:
        logger.debug(f"No sync trigger configured; skipping notification for {commit_sha}")
        return False


class ArgoCDSyncTrigger:
    """Asks Argo CD to hard-refresh and sync an Application.

    Fire-and-confirm: an acknowledged patch counts as triggered. The sync
    itself is not polled.
    """

    def __init__(
        self,
        application: str,
        namespace: str,
        controller: ArgoCDController | None = None,
        revision: str | None = None,
    ) -> None:
        """Initialize the trigger.

        Args:
            application: Argo CD Application name
            namespace: Namespace the Application lives in
            controller: Argo CD controller (defaults to the shared instance)
            revision: Sync revision; defaults to the Application's own
                      target revision
        """
        self.application = application
        self.namespace = namespace
        self.controller = controller or get_argocd_controller()
        self.revision = revision

    def trigger(self, commit_sha: str) -> bool:
        """Request a refresh and sync.

        Raises:
            SyncTriggerError: If the patch is not acknowledged
        """
        result = run_sync(
            self.controller.refresh_and_sync(
                self.application, self.namespace, revision=self.revision
            )
        )
        if not result.success:
            raise SyncTriggerError(
                f"Cannot trigger sync of Argo CD Application {self.application}",
                details=result.message or None,
                operation="trigger sync",
            )
        logger.info(
            f"Triggered refresh and sync of {self.namespace}/{self.application} "
            f"at {result.revision} (commit {commit_sha[:12]})"
        )
        return True
