"""
Per-store mutual exclusion usable from threads and asyncio tasks.

Blocking callers take the lock directly with ``with guard:``. Async callers
use ``async with guard.acquire_async(token):``; contended acquisitions are
parked on a dedicated single-thread executor so they never tie up the
default executor that the store uses for file I/O.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import AsyncIterator, Optional

from .cancellation import CancellationToken
from .defaults import GUARD_POLL_SECONDS
from .errors import OperationCancelled

logger = logging.getLogger(__name__)


class OperationGuard:
    def __init__(self, poll_seconds: float = GUARD_POLL_SECONDS) -> None:
        # A plain Lock: async holders may release it from a different thread.
        self._lock = threading.Lock()
        self._poll_seconds = poll_seconds
        self._waiter: Optional[ThreadPoolExecutor] = None
        self._waiter_lock = threading.Lock()

    def __enter__(self) -> "OperationGuard":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()

    def locked(self) -> bool:
        return self._lock.locked()

    @contextlib.asynccontextmanager
    async def acquire_async(
        self, token: Optional[CancellationToken] = None
    ) -> AsyncIterator["OperationGuard"]:
        """Hold the guard for the body of an ``async with`` block.

        Raises OperationCancelled when ``token`` fires before the guard is
        obtained, and lets asyncio.CancelledError propagate if the waiting
        task itself is cancelled.
        """
        if token is not None:
            token.raise_if_cancelled()
        if not self._lock.acquire(blocking=False):
            await self._wait(token)
        try:
            yield self
        finally:
            self._lock.release()

    def close(self) -> None:
        with self._waiter_lock:
            waiter, self._waiter = self._waiter, None
        if waiter is not None:
            waiter.shutdown(wait=False, cancel_futures=True)

    async def _wait(self, token: Optional[CancellationToken]) -> None:
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(self._executor(), self._acquire_blocking, token)
        try:
            acquired = await asyncio.shield(future)
        except asyncio.CancelledError:
            # The waiter thread may still win the lock; hand it straight back.
            future.add_done_callback(self._release_abandoned)
            raise
        if not acquired:
            raise OperationCancelled("Cancelled while waiting for the config store.")

    def _acquire_blocking(self, token: Optional[CancellationToken]) -> bool:
        while not self._lock.acquire(timeout=self._poll_seconds):
            if token is not None and token.cancelled:
                return False
        return True

    def _release_abandoned(self, future: "asyncio.Future[bool]") -> None:
        if future.cancelled() or future.exception() is not None:
            return
        if future.result():
            logger.debug("Releasing guard acquired on behalf of a cancelled task")
            self._lock.release()

    def _executor(self) -> ThreadPoolExecutor:
        with self._waiter_lock:
            if self._waiter is None:
                self._waiter = ThreadPoolExecutor(
                    max_workers=1, thread_name_prefix="jsonconfig-guard"
                )
            return self._waiter
