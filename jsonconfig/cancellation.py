from __future__ import annotations

import threading

from .errors import OperationCancelled


class CancellationToken:
    """Cooperative cancellation flag shared between a caller and an operation.

    ``cancel()`` may be called from any thread; the asynchronous store
    operations check the token before and after every suspension point.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled.")
