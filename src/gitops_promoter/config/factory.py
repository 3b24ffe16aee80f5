"""Build runtime components from a PromoterConfig."""

from __future__ import annotations

from loguru import logger

from gitops_promoter.credentials import (
    ArgoCDSecretCredentialProvider,
    CredentialProvider,
    StaticCredentialProvider,
)
from gitops_promoter.infra.k8s import Kr8sSecretReader
from gitops_promoter.promotion import (
    ArgoCDSyncTrigger,
    NoopSyncTrigger,
    Promoter,
    SyncTrigger,
)
from gitops_promoter.workspace import WorkspaceManager

from .models import PromoterConfig


def build_credential_provider(config: PromoterConfig) -> CredentialProvider:
    creds = config.credentials
    if creds.source == "argocd":
        logger.debug(f"Reading repository credentials from Argo CD secrets in {creds.namespace}")
        return ArgoCDSecretCredentialProvider(
            Kr8sSecretReader(),
            namespace=creds.namespace,
            constants=config.to_constants(),
        )
    return StaticCredentialProvider(creds.repositories, creds.credential_sets)


def build_sync_trigger(
    config: PromoterConfig,
    *,
    application: str | None = None,
    namespace: str | None = None,
    enabled: bool = True,
) -> SyncTrigger:
    """Argo CD trigger when enabled and an Application is named, else a no-op.

    Naming an application explicitly enables the trigger.
    """
    app_name = application or config.argocd.application
    if not enabled or not app_name or not (config.argocd.enabled or application):
        return NoopSyncTrigger()
    return ArgoCDSyncTrigger(
        app_name,
        namespace or config.argocd.namespace,
        revision=config.argocd.revision,
    )


def build_promoter(
    config: PromoterConfig,
    *,
    sync_trigger: SyncTrigger | None = None,
    retain_workspace: bool | None = None,
) -> Promoter:
    constants = config.to_constants()
    retain = config.workspace.retain if retain_workspace is None else retain_workspace
    return Promoter(
        build_credential_provider(config),
        sync_trigger=sync_trigger,
        workspaces=WorkspaceManager(
            config.workspace.base_dir, retain=retain, constants=constants
        ),
        constants=constants,
        git_binary=config.git.binary,
        kustomize_binary=config.kustomize.binary,
        command_timeout=config.git.command_timeout,
    )
