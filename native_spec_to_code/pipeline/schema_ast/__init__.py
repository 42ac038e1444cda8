"""
Schema AST module.

Parses specification sources with tree-sitter and binds module-scope symbols.
"""

from __future__ import annotations

from .parser import SourceUnit, parse_source
from .scoping import Scoping, Symbol, SymbolKind

__all__ = [
    "SourceUnit",
    "parse_source",
    "Scoping",
    "Symbol",
    "SymbolKind",
]
