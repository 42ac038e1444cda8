"""
Errors raised by the protocol runtime.
"""

from __future__ import annotations


class ProtocolError(Exception):
    """Base class for misuse of the signal and promise protocol."""


class PromiseStateError(ProtocolError):
    """Raised when a deferred result is settled more than once."""


class ModuleInvalidatedError(ProtocolError):
    """Raised when a module instance is used after invalidate()."""


class WorkerPoolClosedError(ProtocolError):
    """Raised when work is submitted to a pool that has been shut down."""
