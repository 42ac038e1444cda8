"""
Pipeline - native module specification compiler.

This module provides a multi-phase architecture for compiling native
module specifications into schemas and bridging code:

1. Phase 1 (Parser): Parse the source with tree-sitter and bind module-scope names
2. Phase 2 (Analyzer): Validate the dialect and collect declarations
3. Phase 3 (Resolver): Resolve type references into a Schema per module
4. Phase 4 (Projection): Map schema types onto each generation target
5. Phase 5 (Backends): Render bridging code in dependency order
6. Phase 6 (Writer): Write generated files atomically
"""

from __future__ import annotations

from .config import CompilerConfig, ProtocolConfig
from .diagnostics import (
    DependencyCycleError,
    Diagnostic,
    DiagnosticsError,
    InternalError,
    ParseError,
    ProjectionError,
    Span,
    SpecCompileError,
    UnresolvedReferenceError,
)
from .generator import CompileResult, SpecCompiler
from .writer import AtomicWriter, GenerateResult

__all__ = [
    "SpecCompiler",
    "CompileResult",
    "CompilerConfig",
    "ProtocolConfig",
    "DependencyCycleError",
    "Diagnostic",
    "DiagnosticsError",
    "InternalError",
    "ParseError",
    "ProjectionError",
    "Span",
    "SpecCompileError",
    "UnresolvedReferenceError",
    "AtomicWriter",
    "GenerateResult",
]
