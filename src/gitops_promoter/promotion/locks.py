"""In-process serialization of attempts on the same branch.

Two attempts against the same (repository, target branch) pair would race
on the same remote refs; git would reject the loser's push. Within one
process the registry makes the second attempt wait instead. Across
processes, push rejection remains the only guard.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger


class BranchLockRegistry:
    """One lock per (repository URL, target branch)."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple[str, str], threading.Lock] = {}

    def _lock_for(self, repo_url: str, branch: str) -> threading.Lock:
        key = (repo_url.rstrip("/"), branch)
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    @contextmanager
    def hold(self, repo_url: str, branch: str) -> Iterator[None]:
        """Hold the lock for a branch for the duration of the block."""
        lock = self._lock_for(repo_url, branch)
        if not lock.acquire(blocking=False):
            logger.info(f"Waiting for another promotion of {branch} in {repo_url}")
            lock.acquire()
        try:
            yield
        finally:
            lock.release()
