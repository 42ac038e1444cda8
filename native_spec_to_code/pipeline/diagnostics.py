"""
Diagnostics and the compiler error taxonomy.

User-facing problems are collected as Diagnostic objects. Exceptions
separate hard stops (parse failures), recoverable ordering errors
(dependency cycles) and defects of the compiler itself.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Span:
    """Location of a syntax node in a source unit.

    Lines and columns are 1-based for display; byte offsets are 0-based.
    """

    path: str = "<source>"
    line: int = 1
    column: int = 1
    start_byte: int = 0
    end_byte: int = 0

    @staticmethod
    def from_node(node, path: str) -> Span:
        """Build a span from a tree-sitter node."""
        row, col = node.start_point
        return Span(path, row + 1, col + 1, node.start_byte, node.end_byte)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """A single user-facing error with its source location."""

    message: str
    span: Span

    def format(self) -> str:
        return f"{self.span}: error: {self.message}"


class SpecCompileError(Exception):
    """Base class for all specification compiler errors."""


class DiagnosticsError(SpecCompileError):
    """Raised when a unit produced one or more diagnostics.

    Carries every diagnostic of the unit so they can be reported together.
    """

    def __init__(self, diagnostics: list[Diagnostic], summary: str = "Specification compilation failed"):
        self.diagnostics = list(diagnostics)
        lines = [summary] + [d.format() for d in self.diagnostics]
        super().__init__("\n".join(lines))


class ParseError(DiagnosticsError):
    """Raised when the source cannot be parsed or bound.

    This can happen when:
    - The source has syntax errors
    - A name is declared twice in the same namespace
    """

    def __init__(self, diagnostics: list[Diagnostic]):
        super().__init__(diagnostics, "Failed to parse specification source")


class DependencyCycleError(SpecCompileError):
    """Raised when local type declarations reference each other in a cycle."""

    def __init__(self, participant: str):
        self.participant = participant
        super().__init__(f"Circular dependency detected involving: {participant}")


class InternalError(SpecCompileError):
    """Raised on a broken compiler invariant; never a user mistake."""


class UnresolvedReferenceError(InternalError):
    """Raised when a type reference survives validation without a declaration."""

    def __init__(self, name: str, symbol: int | None):
        self.name = name
        self.symbol = symbol
        super().__init__(f"Unknown type reference: {name} (symbol: {symbol})")


class ProjectionError(SpecCompileError):
    """Raised when a type shape cannot be represented by a target."""
