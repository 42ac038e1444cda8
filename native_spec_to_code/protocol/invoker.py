"""
Call invokers.

Callbacks produced on worker threads must run on the thread that owns the
calling runtime. A call invoker is the only way to get them there.
"""

from __future__ import annotations

import logging
import queue
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CallInvoker(ABC):
    """Schedules callbacks onto the owning thread."""

    @abstractmethod
    def invoke_async(self, callback: Callable[[], None]) -> None:
        """Schedule a callback; never runs it on the calling thread synchronously."""


class QueueCallInvoker(CallInvoker):
    """Call invoker backed by a queue drained by the owning thread.

    The thread that creates the invoker owns it; run_pending() must be
    called from that thread.
    """

    def __init__(self):
        self._queue: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self.owner = threading.get_ident()

    def invoke_async(self, callback: Callable[[], None]) -> None:
        self._queue.put(callback)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def run_pending(self, timeout: float | None = None) -> int:
        """
        Run every queued callback on the current thread.

        Args:
            timeout: Wait up to this many seconds for a first callback when the queue is empty

        Returns:
            Number of callbacks run

        Raises:
            RuntimeError: If called from a thread other than the owner
        """
        if threading.get_ident() != self.owner:
            raise RuntimeError("run_pending() must be called from the owning thread")

        count = 0
        if timeout is not None:
            try:
                callback = self._queue.get(timeout=timeout)
            except queue.Empty:
                return 0
            callback()
            count += 1

        while True:
            try:
                callback = self._queue.get_nowait()
            except queue.Empty:
                break
            callback()
            count += 1

        if count:
            logger.debug("Ran %d pending callbacks", count)
        return count
