"""Promotion workflow package.

This package provides a modular approach to image promotion, with each
concern separated into its own module:

- overlay: image pinning with kustomize
- renderer: manifest rendering with kustomize
- publisher: the branch publication state machine
- sync: deployment-controller notification
- locks: in-process per-branch serialization

The Promoter class in promoter.py orchestrates these components.

Usage:
    from gitops_promoter.promotion import ImageChange, Promoter, PromotionRequest

    promoter = Promoter(credential_provider)
    result = promoter.promote(
        PromotionRequest(
            repo_url="https://example.com/org/deploy.git",
            source_branch="main",
            target_branch="staging",
            images=[ImageChange(repository="app", tag="v2")],
        )
    )
"""

from .locks import BranchLockRegistry
from .messages import source_commit_message, target_commit_message
from .overlay import OverlayPatcher
from .promoter import Promoter
from .publisher import BranchPublisher
from .renderer import ManifestRenderer
from .sync import ArgoCDSyncTrigger, NoopSyncTrigger, SyncTrigger
from .types import ImageChange, PromotionRequest, PromotionResult, PublishState

__all__ = [
    "Promoter",
    "PromotionRequest",
    "PromotionResult",
    "ImageChange",
    "PublishState",
    # Component classes for testing/extension
    "ArgoCDSyncTrigger",
    "BranchLockRegistry",
    "BranchPublisher",
    "ManifestRenderer",
    "NoopSyncTrigger",
    "OverlayPatcher",
    "SyncTrigger",
    "source_commit_message",
    "target_commit_message",
]
