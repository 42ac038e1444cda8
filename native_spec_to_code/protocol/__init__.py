"""
Protocol module.

Reference runtime of the signal and promise protocol that generated
module glue follows.
"""

from __future__ import annotations

from .deferred import Deferred, PromiseState
from .errors import ModuleInvalidatedError, PromiseStateError, ProtocolError, WorkerPoolClosedError
from .invoker import CallInvoker, QueueCallInvoker
from .listeners import Listener, ListenerRegistry
from .module_host import ModuleContext, NativeModuleHost, Subscription
from .router import SignalRouter
from .worker_pool import WorkerPool

__all__ = [
    "CallInvoker",
    "QueueCallInvoker",
    "Deferred",
    "PromiseState",
    "Listener",
    "ListenerRegistry",
    "ModuleContext",
    "NativeModuleHost",
    "Subscription",
    "SignalRouter",
    "WorkerPool",
    "ModuleInvalidatedError",
    "PromiseStateError",
    "ProtocolError",
    "WorkerPoolClosedError",
]
