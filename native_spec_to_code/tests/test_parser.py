"""
Tests for source parsing and module-scope symbol binding.
"""

import pytest

from native_spec_to_code.pipeline.diagnostics import ParseError
from native_spec_to_code.pipeline.schema_ast import SymbolKind, parse_source

SOURCE = """
import type { NativeModule, Signal as Event } from 'craby-modules';
import { NativeModuleRegistry } from 'craby-modules';
import * as Craby from 'craby-modules';
import Default from 'other';

export interface User {
  name: string;
}

export type MaybeUser = User | null;

enum Kind {
  A,
  B,
}

const value = 1;

function helper(a: number): number;
function helper(a: string): string;
"""


class TestParseSource:
    def test_binds_module_scope_symbols(self):
        unit = parse_source(SOURCE, "spec.ts")
        scoping = unit.scoping

        user = scoping.symbol(scoping.resolve_type("User"))
        assert user.kind == SymbolKind.INTERFACE
        assert scoping.resolve_value("User") is None

        assert scoping.symbol(scoping.resolve_type("MaybeUser")).kind == SymbolKind.TYPE_ALIAS
        assert scoping.resolve_type("Kind") == scoping.resolve_value("Kind")
        assert scoping.resolve_type("value") is None
        assert scoping.symbol(scoping.resolve_value("value")).kind == SymbolKind.VARIABLE

    def test_symbol_ids_follow_source_order(self):
        unit = parse_source(SOURCE, "spec.ts")
        ids = [symbol.id for symbol in unit.scoping.symbols]
        assert ids == list(range(len(ids)))
        assert unit.scoping.resolve_type("NativeModule") < unit.scoping.resolve_type("User")

    def test_imports(self):
        scoping = parse_source(SOURCE, "spec.ts").scoping

        event = scoping.symbol(scoping.resolve_type("Event"))
        assert event.kind == SymbolKind.IMPORT
        assert event.imported_name == "Signal"
        assert event.source == "craby-modules"

        namespace = scoping.symbol(scoping.resolve_value("Craby"))
        assert namespace.kind == SymbolKind.NAMESPACE_IMPORT

        names = {symbol.name for symbol in scoping.imports_from("craby-modules")}
        assert names == {"NativeModule", "Event", "NativeModuleRegistry", "Craby"}
        assert [symbol.imported_name for symbol in scoping.imports_from("other")] == ["default"]

    def test_symbol_of_declaration_node(self):
        unit = parse_source(SOURCE, "spec.ts")
        interface = next(node for node in unit.root.named_children if node.type == "export_statement")
        declaration = interface.child_by_field_name("declaration")
        assert unit.scoping.symbol_of(declaration) == unit.scoping.resolve_type("User")

    def test_function_overloads_are_allowed(self):
        scoping = parse_source(SOURCE, "spec.ts").scoping
        assert scoping.symbol(scoping.resolve_value("helper")).kind == SymbolKind.FUNCTION
        assert not scoping.diagnostics

    def test_duplicate_declaration(self):
        with pytest.raises(ParseError) as excinfo:
            parse_source("interface A { a: number; }\ninterface A { b: number; }\n", "dup.ts")
        [diagnostic] = excinfo.value.diagnostics
        assert diagnostic.message == "Duplicate declaration: A"
        assert diagnostic.span.line == 2

    def test_syntax_error(self):
        with pytest.raises(ParseError) as excinfo:
            parse_source("interface A { a: number;\n", "broken.ts")
        assert excinfo.value.diagnostics
        assert "Failed to parse specification source" in str(excinfo.value)
        assert all(d.span.path == "broken.ts" for d in excinfo.value.diagnostics)

    def test_accepts_bytes(self):
        unit = parse_source(b"interface A { a: number; }", "a.ts")
        assert unit.source == b"interface A { a: number; }"
        assert unit.scoping.resolve_type("A") == 0

    def test_span_is_one_based(self):
        unit = parse_source("\n\n  interface A { a: number; }", "a.ts")
        declaration = unit.root.named_children[0]
        span = unit.span(declaration)
        assert (span.line, span.column) == (3, 3)
        assert str(span) == "a.ts:3:3"

    def test_import_source_escapes_are_decoded(self):
        scoping = parse_source("import { NativeModule } from 'craby\\u002D\\u{6D}odules';\n", "a.ts").scoping
        [symbol] = scoping.imports_from("craby-modules")
        assert symbol.name == "NativeModule"

    def test_invalid_escape_in_import_source(self):
        with pytest.raises(ParseError) as excinfo:
            parse_source("import { NativeModule } from 'craby\\u{110000}';\n", "a.ts")
        [diagnostic] = excinfo.value.diagnostics
        assert diagnostic.message == "Invalid escape sequence `\\u{110000}`"
        assert (diagnostic.span.line, diagnostic.span.column) == (1, 36)
