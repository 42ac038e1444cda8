"""Native Spec to Code

A Python package for compiling native module specifications, written in a
restricted TypeScript dialect, into normalized schemas and Rust / C++
bridging code, with a reference runtime of the signal and promise protocol.
"""

__version__ = "0.1.0"

from .pipeline import (
    AtomicWriter,
    CompileResult,
    CompilerConfig,
    Diagnostic,
    GenerateResult,
    ProtocolConfig,
    SpecCompileError,
    SpecCompiler,
)

__all__ = [
    "SpecCompiler",
    "CompileResult",
    "CompilerConfig",
    "ProtocolConfig",
    "Diagnostic",
    "SpecCompileError",
    "GenerateResult",
    "AtomicWriter",
]
