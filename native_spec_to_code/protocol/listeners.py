"""
Per-instance listener registry.

Maps a signal name to its ordered listeners. Ids come from a counter
local to the registry and only ever increase.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Listener:
    id: int
    callback: Callable[..., Any]


class ListenerRegistry:
    """Lock-protected (signal name) -> ordered listeners mapping."""

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._listeners: dict[str, dict[int, Listener]] = {}

    def add(self, signal: str, callback: Callable[..., Any]) -> int:
        """Register a listener and return its id."""
        with self._lock:
            listener = Listener(next(self._ids), callback)
            self._listeners.setdefault(signal, {})[listener.id] = listener
            return listener.id

    def remove(self, signal: str, listener_id: int) -> bool:
        """Unregister a listener; False if it was not registered."""
        with self._lock:
            listeners = self._listeners.get(signal)
            if listeners is None or listener_id not in listeners:
                return False
            del listeners[listener_id]
            if not listeners:
                del self._listeners[signal]
            return True

    def contains(self, signal: str, listener_id: int) -> bool:
        with self._lock:
            return listener_id in self._listeners.get(signal, {})

    def snapshot(self, signal: str) -> list[Listener]:
        """Listeners of a signal in registration order, copied under the lock."""
        with self._lock:
            return list(self._listeners.get(signal, {}).values())

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(listeners) for listeners in self._listeners.values())
