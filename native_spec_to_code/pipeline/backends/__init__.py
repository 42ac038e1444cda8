"""
Bridging backends.

Each backend renders the files of one target from a resolved Schema.
"""

from __future__ import annotations

from .base import BridgingBackend
from .cxx_backend import CxxBackend
from .rust_backend import RustBackend

BACKENDS: dict[str, type[BridgingBackend]] = {
    "rust": RustBackend,
    "cxx": CxxBackend,
}

__all__ = [
    "BACKENDS",
    "BridgingBackend",
    "CxxBackend",
    "RustBackend",
]
