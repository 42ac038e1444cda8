"""
Deferred results of asynchronous methods.

A Deferred settles exactly once, either resolved with a value or rejected
with an error. Settlement callbacks always run through the call invoker,
never on the worker thread that settled it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from enum import Enum
from typing import Any

from .errors import PromiseStateError
from .invoker import CallInvoker


class PromiseState(Enum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class Deferred:
    """A single-assignment asynchronous result."""

    def __init__(self, invoker: CallInvoker):
        self.invoker = invoker
        self._lock = threading.Lock()
        self._settled = threading.Event()
        self._state = PromiseState.PENDING
        self._value: Any = None
        self._error: BaseException | None = None
        self._callbacks: list[tuple[Callable[[Any], None] | None, Callable[[BaseException], None] | None]] = []

    @property
    def state(self) -> PromiseState:
        with self._lock:
            return self._state

    def done(self) -> bool:
        return self._settled.is_set()

    def then(
        self,
        on_fulfilled: Callable[[Any], None] | None = None,
        on_rejected: Callable[[BaseException], None] | None = None,
    ) -> Deferred:
        """Register settlement callbacks; they run through the call invoker."""
        with self._lock:
            if self._state == PromiseState.PENDING:
                self._callbacks.append((on_fulfilled, on_rejected))
                return self
        self._dispatch([(on_fulfilled, on_rejected)])
        return self

    def resolve(self, value: Any = None) -> None:
        """
        Fulfill the result.

        Raises:
            PromiseStateError: If the result is already settled
        """
        self._settle(PromiseState.FULFILLED, value, None)

    def reject(self, error: BaseException) -> None:
        """
        Reject the result.

        Raises:
            PromiseStateError: If the result is already settled
        """
        self._settle(PromiseState.REJECTED, None, error)

    def _settle(self, state: PromiseState, value: Any, error: BaseException | None) -> None:
        with self._lock:
            if self._state != PromiseState.PENDING:
                raise PromiseStateError(f"Promise is already {self._state.value}")
            self._state = state
            self._value = value
            self._error = error
            callbacks, self._callbacks = self._callbacks, []
        self._settled.set()
        self._dispatch(callbacks)

    def _dispatch(self, callbacks) -> None:
        for on_fulfilled, on_rejected in callbacks:
            if self._state == PromiseState.FULFILLED and on_fulfilled is not None:
                self.invoker.invoke_async(lambda cb=on_fulfilled: cb(self._value))
            elif self._state == PromiseState.REJECTED and on_rejected is not None:
                self.invoker.invoke_async(lambda cb=on_rejected: cb(self._error))

    def result(self, timeout: float | None = None) -> Any:
        """
        Block until settled and return the value.

        Raises:
            TimeoutError: If the result is not settled in time
            BaseException: The rejection error
        """
        if not self._settled.wait(timeout):
            raise TimeoutError("Promise was not settled in time")
        if self._state == PromiseState.REJECTED:
            raise self._error
        return self._value
