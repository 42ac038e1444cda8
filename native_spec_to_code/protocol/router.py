"""
Signal routing from native code to module instances.

The router is an explicit object owned by the host runtime and passed to
each module instance, so tests can use a fresh one.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Delegate = Callable[[str, Any], None]


class SignalRouter:
    """Lock-protected (instance id) -> delegate registry."""

    def __init__(self):
        self._lock = threading.Lock()
        self._delegates: dict[int, Delegate] = {}

    def register(self, instance_id: int, delegate: Delegate) -> None:
        with self._lock:
            self._delegates[instance_id] = delegate

    def unregister(self, instance_id: int) -> bool:
        with self._lock:
            return self._delegates.pop(instance_id, None) is not None

    def is_registered(self, instance_id: int) -> bool:
        with self._lock:
            return instance_id in self._delegates

    def emit(self, instance_id: int, signal: str, payload: Any = None) -> bool:
        """
        Forward a signal to the delegate of an instance.

        Returns:
            False if the instance is not registered (e.g. already invalidated)
        """
        with self._lock:
            delegate = self._delegates.get(instance_id)
        if delegate is None:
            logger.debug("Dropping %s for unregistered instance %d", signal, instance_id)
            return False
        delegate(signal, payload)
        return True
