"""Kubernetes adapters for Argo CD.

Example:
    from gitops_promoter.infra.k8s import get_argocd_controller, run_sync

    controller = get_argocd_controller()
    result = run_sync(controller.refresh_and_sync("guestbook", "argocd"))
"""

from __future__ import annotations

from cachetools.func import lru_cache  # type: ignore

from .argocd import ArgoCDController, PatchResult, build_refresh_sync_patch
from .secrets import Kr8sSecretReader, SecretReader
from .utils import run_sync


@lru_cache(maxsize=1)
def get_argocd_controller() -> ArgoCDController:
    """Get the shared ArgoCDController instance."""
    return ArgoCDController()


__all__ = [
    "ArgoCDController",
    "Kr8sSecretReader",
    "PatchResult",
    "SecretReader",
    "build_refresh_sync_patch",
    "get_argocd_controller",
    "run_sync",
]
