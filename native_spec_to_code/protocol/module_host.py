"""
Native module instance host.

Binds a Schema to an implementation object and runs it under the signal
and promise protocol: synchronous methods run inline, Promise methods run
on the worker pool and settle a Deferred, signals are delivered through
the call invoker to subscribed listeners.
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..pipeline.analyzer.ir_nodes import Method, Schema
from ..pipeline.config import ProtocolConfig
from ..utils import snake_case
from .deferred import Deferred
from .errors import ModuleInvalidatedError
from .invoker import CallInvoker
from .listeners import Listener, ListenerRegistry
from .router import SignalRouter
from .worker_pool import WorkerPool

logger = logging.getLogger(__name__)

_instance_ids = itertools.count(1)


@dataclass(frozen=True)
class ModuleContext:
    """Handle given to an implementation so it can emit its signals."""

    instance_id: int
    router: SignalRouter

    def emit(self, signal: str, payload: Any = None) -> bool:
        return self.router.emit(self.instance_id, signal, payload)


class Subscription:
    """Unsubscribe handle returned by subscribe()."""

    def __init__(self, registry: ListenerRegistry, signal: str, listener_id: int):
        self._registry = registry
        self.signal = signal
        self.listener_id = listener_id

    def unsubscribe(self) -> bool:
        return self._registry.remove(self.signal, self.listener_id)

    def __call__(self) -> bool:
        return self.unsubscribe()


class NativeModuleHost:
    """A live module instance."""

    def __init__(
        self,
        schema: Schema,
        factory: Callable[[ModuleContext], Any],
        router: SignalRouter,
        invoker: CallInvoker,
        config: ProtocolConfig | None = None,
    ):
        """
        Create the instance and register it for signal routing.

        Args:
            schema: Schema of the module
            factory: Builds the implementation object from its context
            router: Signal router shared by the runtime
            invoker: Call invoker of the owning thread
            config: Protocol options (worker pool size)
        """
        self.schema = schema
        self.router = router
        self.invoker = invoker
        self.config = config or ProtocolConfig()
        self.instance_id = next(_instance_ids)

        self._lock = threading.Lock()
        self._invalidated = False
        self._listeners = ListenerRegistry()
        self._pool = WorkerPool(self.config.worker_pool_size)

        self.context = ModuleContext(self.instance_id, router)
        self.implementation = factory(self.context)
        if schema.has_signals:
            router.register(self.instance_id, self.emit)
        logger.debug("Created %s instance %d", schema.module_name, self.instance_id)

    @property
    def is_invalidated(self) -> bool:
        with self._lock:
            return self._invalidated

    def call(self, method_name: str, *args: Any) -> Any:
        """
        Call a module method.

        Returns:
            The return value, or a Deferred for Promise methods

        Raises:
            AttributeError: If the schema has no such method
            TypeError: If the argument count does not match
            ModuleInvalidatedError: If the instance was invalidated
        """
        method = self._method(method_name)
        if len(args) != len(method.params):
            raise TypeError(f"Expected {len(method.params)} arguments, got {len(args)}")
        function = getattr(self.implementation, snake_case(method.name))

        with self._lock:
            if self._invalidated:
                raise ModuleInvalidatedError(f"{self.schema.module_name} instance {self.instance_id} is invalidated")
            if not method.is_async:
                deferred = None
            else:
                deferred = Deferred(self.invoker)
                self._pool.submit(self._run, deferred, function, args)

        if deferred is None:
            return function(*args)
        return deferred

    def _method(self, name: str) -> Method:
        try:
            return self.schema.method(name)
        except KeyError:
            raise AttributeError(f"{self.schema.module_name} has no method {name!r}") from None

    def _run(self, deferred: Deferred, function: Callable[..., Any], args: tuple) -> None:
        try:
            value = function(*args)
        except Exception as e:
            deferred.reject(e)
        else:
            deferred.resolve(value)

    def subscribe(self, signal: str, callback: Callable[[Any], None]) -> Subscription:
        """
        Listen to a signal.

        Raises:
            AttributeError: If the schema has no such signal
            ModuleInvalidatedError: If the instance was invalidated
        """
        self._check_signal(signal)
        with self._lock:
            if self._invalidated:
                raise ModuleInvalidatedError(f"{self.schema.module_name} instance {self.instance_id} is invalidated")
            listener_id = self._listeners.add(signal, callback)
        return Subscription(self._listeners, signal, listener_id)

    def emit(self, signal: str, payload: Any = None) -> None:
        """Schedule delivery of a signal to every current listener."""
        self._check_signal(signal)
        if self.is_invalidated:
            return
        for listener in self._listeners.snapshot(signal):
            self.invoker.invoke_async(lambda listener=listener: self._deliver(signal, listener, payload))

    def _deliver(self, signal: str, listener: Listener, payload: Any) -> None:
        # Unsubscribe or invalidate may have happened after scheduling
        if self.is_invalidated or not self._listeners.contains(signal, listener.id):
            return
        listener.callback(payload)

    def _check_signal(self, signal: str) -> None:
        try:
            self.schema.signal(signal)
        except KeyError:
            raise AttributeError(f"{self.schema.module_name} has no signal {signal!r}") from None

    def invalidate(self) -> None:
        """Tear down the instance; safe to call more than once.

        Unregisters from signal routing first, then drops listeners and waits
        for in-flight asynchronous calls to finish.
        """
        with self._lock:
            if self._invalidated:
                return
            self._invalidated = True

        self.router.unregister(self.instance_id)
        self._listeners.clear()
        self._pool.shutdown()
        logger.debug("Invalidated %s instance %d", self.schema.module_name, self.instance_id)

    def __enter__(self) -> NativeModuleHost:
        return self

    def __exit__(self, *exc) -> None:
        self.invalidate()
