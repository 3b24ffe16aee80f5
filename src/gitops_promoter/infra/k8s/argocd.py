"""Kr8s-based access to Argo CD Applications.

Argo CD Applications are custom resources, so the object class is
generated with ``kr8s.asyncio.objects.new_class``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import kr8s
from kr8s.asyncio.objects import new_class

from gitops_promoter.infra.constants import DEFAULT_CONSTANTS, PromotionConstants

Application = new_class(
    kind="Application",
    version="argoproj.io/v1alpha1",
    namespaced=True,
)


@dataclass
class PatchResult:
    """Result of patching an Application."""

    success: bool
    message: str = ""
    revision: str = ""


def build_refresh_sync_patch(
    revision: str, constants: PromotionConstants | None = None
) -> dict[str, Any]:
    """Merge patch requesting a hard refresh and a sync to ``revision``."""
    constants = constants or DEFAULT_CONSTANTS
    return {
        "metadata": {
            "annotations": {
                constants.ARGOCD_REFRESH_ANNOTATION: constants.ARGOCD_REFRESH_HARD,
            }
        },
        "operation": {"sync": {"revision": revision}},
    }


def application_target_revision(raw: dict[str, Any]) -> str:
    """Target revision of an Application's (first) source, or HEAD."""
    spec = raw.get("spec") or {}
    source = spec.get("source")
    if not source and spec.get("sources"):
        source = spec["sources"][0]
    return (source or {}).get("targetRevision") or "HEAD"


class ArgoCDController:
    """Argo CD Application operations using kr8s.

    All methods are natively async; use ``run_sync()`` from synchronous
    code.
    """

    def __init__(self, constants: PromotionConstants | None = None) -> None:
        self.constants = constants or DEFAULT_CONSTANTS

    async def _get_api(self) -> Any:  # Returns kr8s._api.Api
        """Create a kr8s API client bound to the current event loop."""
        return await kr8s.asyncio.api()

    async def refresh_and_sync(
        self,
        name: str,
        namespace: str,
        revision: str | None = None,
    ) -> PatchResult:
        """Request a hard refresh and a sync of an Application.

        Args:
            name: Application name
            namespace: Namespace the Application lives in
            revision: Revision to sync to; defaults to the Application's own
                      ``spec.source.targetRevision``

        Returns:
            PatchResult; success means the API server acknowledged the patch
        """
        try:
            api = await self._get_api()
            app = await Application.get(name, namespace=namespace, api=api)
            target = revision or application_target_revision(app.raw)
            await app.patch(build_refresh_sync_patch(target, self.constants))
            return PatchResult(
                success=True,
                message=f'application "{name}" patched',
                revision=target,
            )
        except kr8s.NotFoundError:
            return PatchResult(
                success=False,
                message=f'application "{name}" not found in namespace "{namespace}"',
            )
        except Exception as e:
            return PatchResult(success=False, message=str(e))
