"""
Writer module.

Writes generated files atomically, honoring the overwrite policy of
each generated file.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .base import GENERATED_HASH_MARKER, GeneratedFileError, GenerateResult, extract_hash, hash_sentinel

__all__ = [
    "AtomicWriter",
    "GENERATED_HASH_MARKER",
    "GeneratedFileError",
    "GenerateResult",
    "extract_hash",
    "hash_sentinel",
]
