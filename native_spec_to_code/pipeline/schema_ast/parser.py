"""
Source parsing with tree-sitter.

Turns a TypeScript specification source into a syntax tree plus the
module-scope symbol table. Syntax errors stop compilation here, before
any semantic analysis runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..diagnostics import Diagnostic, ParseError, Span
from .nodes import iter_nodes, node_text
from .scoping import Scoping

logger = logging.getLogger(__name__)

TYPESCRIPT = Language(ts_typescript.language_typescript())
TSX = Language(ts_typescript.language_tsx())


@dataclass
class SourceUnit:
    """One parsed source unit."""

    path: str
    source: bytes
    tree: Tree
    scoping: Scoping

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def span(self, node: Node) -> Span:
        return Span.from_node(node, self.path)


def _syntax_diagnostics(root: Node, path: str) -> list[Diagnostic]:
    diagnostics = []
    for node in iter_nodes(root):
        if node.type == "ERROR":
            snippet = node_text(node).strip().splitlines()
            found = f": `{snippet[0][:40]}`" if snippet else ""
            diagnostics.append(Diagnostic(f"Unexpected syntax{found}", Span.from_node(node, path)))
        elif node.is_missing:
            diagnostics.append(Diagnostic(f"Missing `{node.type}`", Span.from_node(node, path)))
    if not diagnostics:
        diagnostics.append(Diagnostic("Invalid syntax", Span.from_node(root, path)))
    return diagnostics


def parse_source(source: str | bytes, path: str = "<source>", tsx: bool = False) -> SourceUnit:
    """Parse a specification source and bind its module-scope symbols.

    Args:
        source: TypeScript source text
        path: Path used in diagnostics
        tsx: Parse with the TSX grammar

    Returns:
        The parsed source unit

    Raises:
        ParseError: If the source has syntax errors or conflicting declarations
    """
    if isinstance(source, str):
        source = source.encode("utf-8")

    parser = Parser(TSX if tsx else TYPESCRIPT)
    tree = parser.parse(source)

    if tree.root_node.has_error:
        raise ParseError(_syntax_diagnostics(tree.root_node, path))

    scoping = Scoping.build(tree.root_node, path)
    if scoping.diagnostics:
        raise ParseError(scoping.diagnostics)

    logger.debug("Parsed %s: %d module-scope symbols", path, len(scoping.symbols))
    return SourceUnit(path=path, source=source, tree=tree, scoping=scoping)
