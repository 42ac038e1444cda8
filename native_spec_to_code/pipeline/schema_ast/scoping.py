"""
Module-scope symbol binding.

Assigns every module-scope declaration a stable integer symbol id, in
source order. Like TypeScript, names live in two namespaces: a type
namespace (interfaces, type aliases) and a value namespace (variables,
functions). Imports, enums and classes bind in both.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tree_sitter import Node

from ..diagnostics import Diagnostic, Span
from .nodes import StringEscapeError, named_children, node_text, string_value, unwrap_declaration


class SymbolKind(Enum):
    """Kind of declaration a symbol was bound by."""

    IMPORT = "import"
    NAMESPACE_IMPORT = "namespace_import"
    INTERFACE = "interface"
    TYPE_ALIAS = "type_alias"
    ENUM = "enum"
    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    NAMESPACE = "namespace"


# (binds a type, binds a value) per kind
_NAMESPACES: dict[SymbolKind, tuple[bool, bool]] = {
    SymbolKind.IMPORT: (True, True),
    SymbolKind.NAMESPACE_IMPORT: (True, True),
    SymbolKind.INTERFACE: (True, False),
    SymbolKind.TYPE_ALIAS: (True, False),
    SymbolKind.ENUM: (True, True),
    SymbolKind.CLASS: (True, True),
    SymbolKind.FUNCTION: (False, True),
    SymbolKind.VARIABLE: (False, True),
    SymbolKind.NAMESPACE: (True, True),
}

# Kinds TypeScript allows to be declared more than once (overloads, merging)
_MERGEABLE = {SymbolKind.FUNCTION, SymbolKind.NAMESPACE}

_DECLARATION_KINDS = {
    "interface_declaration": SymbolKind.INTERFACE,
    "type_alias_declaration": SymbolKind.TYPE_ALIAS,
    "enum_declaration": SymbolKind.ENUM,
    "class_declaration": SymbolKind.CLASS,
    "abstract_class_declaration": SymbolKind.CLASS,
    "function_declaration": SymbolKind.FUNCTION,
    "generator_function_declaration": SymbolKind.FUNCTION,
    "function_signature": SymbolKind.FUNCTION,
    "internal_module": SymbolKind.NAMESPACE,
    "module": SymbolKind.NAMESPACE,
}


@dataclass
class Symbol:
    """A module-scope binding."""

    id: int
    name: str
    kind: SymbolKind
    node: Node  # Declaration (or import specifier) node
    declared: bool = False  # Ambient (`declare`) declaration

    # For imports
    source: str | None = None  # Module specifier, e.g. 'craby-modules'
    imported_name: str | None = None  # Exported name before aliasing


def _node_key(node: Node) -> tuple[str, int, int]:
    return (node.type, node.start_byte, node.end_byte)


@dataclass
class Scoping:
    """Symbol table of one source unit."""

    path: str = "<source>"
    symbols: list[Symbol] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    _types: dict[str, int] = field(default_factory=dict)
    _values: dict[str, int] = field(default_factory=dict)
    _by_node: dict[tuple[str, int, int], int] = field(default_factory=dict)

    @staticmethod
    def build(root: Node, path: str = "<source>") -> Scoping:
        """Bind all module-scope declarations of a program node."""
        scoping = Scoping(path=path)
        for statement in named_children(root):
            if statement.type == "import_statement":
                scoping._bind_import(statement)
                continue
            declaration, declared = unwrap_declaration(statement)
            if declaration is None:
                continue
            if declaration.type == "expression_statement":
                # `namespace X {}` may parse as an expression statement
                children = named_children(declaration)
                declaration = children[0] if children else None
                if declaration is None:
                    continue
            scoping._bind_declaration(declaration, declared)
        return scoping

    def symbol(self, symbol_id: int) -> Symbol:
        return self.symbols[symbol_id]

    def resolve_type(self, name: str) -> int | None:
        """Symbol id bound to a name in the type namespace."""
        return self._types.get(name)

    def resolve_value(self, name: str) -> int | None:
        """Symbol id bound to a name in the value namespace."""
        return self._values.get(name)

    def symbol_of(self, node: Node) -> int | None:
        """Symbol id bound by a declaration node."""
        return self._by_node.get(_node_key(node))

    def imports_from(self, source: str) -> list[Symbol]:
        """Import symbols whose module specifier equals source."""
        return [
            symbol
            for symbol in self.symbols
            if symbol.kind in (SymbolKind.IMPORT, SymbolKind.NAMESPACE_IMPORT) and symbol.source == source
        ]

    def _bind_import(self, statement: Node) -> None:
        source_node = statement.child_by_field_name("source")
        source = self._string(source_node) if source_node is not None else None
        clause = next((c for c in named_children(statement) if c.type == "import_clause"), None)
        if clause is None:
            return

        for child in named_children(clause):
            if child.type == "identifier":
                self._bind(node_text(child), SymbolKind.IMPORT, child, source=source, imported_name="default")
            elif child.type == "namespace_import":
                ident = next((c for c in named_children(child) if c.type == "identifier"), None)
                if ident is not None:
                    self._bind(node_text(ident), SymbolKind.NAMESPACE_IMPORT, ident, source=source)
            elif child.type == "named_imports":
                for specifier in named_children(child):
                    if specifier.type != "import_specifier":
                        continue
                    name_node = specifier.child_by_field_name("name")
                    alias_node = specifier.child_by_field_name("alias")
                    if name_node is None:
                        continue
                    imported = self._string(name_node) if name_node.type == "string" else node_text(name_node)
                    if imported is None:
                        continue
                    local = node_text(alias_node) if alias_node is not None else imported
                    self._bind(local, SymbolKind.IMPORT, specifier, source=source, imported_name=imported)

    def _bind_declaration(self, declaration: Node, declared: bool) -> None:
        if declaration.type in ("lexical_declaration", "variable_declaration"):
            for declarator in named_children(declaration):
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is not None and name_node.type == "identifier":
                    self._bind(node_text(name_node), SymbolKind.VARIABLE, declarator, declared=declared)
            return

        kind = _DECLARATION_KINDS.get(declaration.type)
        if kind is None:
            return
        name_node = declaration.child_by_field_name("name")
        # `declare module 'pkg' {}` names a module, not a binding
        if name_node is None or name_node.type == "string":
            return
        self._bind(node_text(name_node), kind, declaration, declared=declared)

    def _string(self, node: Node) -> str | None:
        try:
            return string_value(node)
        except StringEscapeError as e:
            self.diagnostics.append(Diagnostic(e.message, Span.from_node(e.node, self.path)))
            return None

    def _bind(self, name: str, kind: SymbolKind, node: Node, **attrs) -> None:
        in_type, in_value = _NAMESPACES[kind]
        for bound, namespace in ((in_type, self._types), (in_value, self._values)):
            if not bound or name not in namespace:
                continue
            existing = self.symbols[namespace[name]]
            if existing.kind == kind and kind in _MERGEABLE:
                return
            self.diagnostics.append(Diagnostic(f"Duplicate declaration: {name}", Span.from_node(node, self.path)))
            return

        symbol = Symbol(id=len(self.symbols), name=name, kind=kind, node=node, **attrs)
        self.symbols.append(symbol)
        if in_type:
            self._types[name] = symbol.id
        if in_value:
            self._values[name] = symbol.id
        self._by_node[_node_key(node)] = symbol.id
