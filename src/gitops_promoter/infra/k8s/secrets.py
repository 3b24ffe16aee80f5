"""Secret access for the Argo CD credential provider."""

from __future__ import annotations

from typing import Any, Protocol

import kr8s
from kr8s.asyncio.objects import Secret

from .utils import run_sync


class SecretReader(Protocol):
    def list_secret_data(
        self, namespace: str, label_selector: str
    ) -> list[dict[str, Any]]: ...


class Kr8sSecretReader:
    """Reads Secret ``data`` maps through kr8s.

    The kr8s API client is not cached: it is bound to the event loop it was
    created in, and ``run_sync`` creates a new loop per call.
    """

    async def _list(self, namespace: str, label_selector: str) -> list[dict[str, Any]]:
        api = await kr8s.asyncio.api()
        return [
            dict(secret.raw.get("data") or {})
            async for secret in Secret.list(
                namespace=namespace,
                label_selector=label_selector,
                api=api,
            )
        ]

    def list_secret_data(
        self, namespace: str, label_selector: str
    ) -> list[dict[str, Any]]:
        """Return the base64-encoded data of every matching Secret."""
        return run_sync(self._list(namespace, label_selector))
