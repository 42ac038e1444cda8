"""
Bounded worker pool executing asynchronous method bodies.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from .errors import WorkerPoolClosedError

logger = logging.getLogger(__name__)


class WorkerPool:
    """Fixed-size thread pool; shutdown() drains queued work before returning."""

    def __init__(self, size: int = 10):
        if size < 1:
            raise ValueError(f"Worker pool size must be positive: {size}")
        self.size = size
        self._executor = ThreadPoolExecutor(max_workers=size, thread_name_prefix="native-module-worker")
        self._lock = threading.Lock()
        self._shutdown = False

    @property
    def is_shutdown(self) -> bool:
        with self._lock:
            return self._shutdown

    def submit(self, fn: Callable[..., Any], *args: Any) -> Future:
        """
        Queue work on the pool.

        Raises:
            WorkerPoolClosedError: If the pool has been shut down
        """
        with self._lock:
            if self._shutdown:
                raise WorkerPoolClosedError("Worker pool is shut down")
            return self._executor.submit(fn, *args)

    def shutdown(self) -> None:
        """Stop accepting work and block until queued and running work completes."""
        with self._lock:
            if self._shutdown:
                return
            self._shutdown = True
        self._executor.shutdown(wait=True)
        logger.debug("Worker pool drained")
