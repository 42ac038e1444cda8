"""
End-to-end tests of the specification compiler.
"""

import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from native_spec_to_code.pipeline import (
    CompileResult,
    DiagnosticsError,
    SpecCompiler,
)
from native_spec_to_code.pipeline.analyzer import (
    NumberType,
    ObjectType,
    Param,
    PromiseType,
    Prop,
    Signal,
    StringType,
)
from native_spec_to_code.pipeline.writer import extract_hash

HEADER = """import type { NativeModule, Signal } from 'craby-modules';
import { NativeModuleRegistry } from 'craby-modules';
"""


def source(members: str, extra: str = "", name: str = "Calc") -> str:
    return f"""{HEADER}{extra}
export interface Spec extends NativeModule {{
{members}
}}

export default NativeModuleRegistry.getEnforcing<Spec>('{name}');
"""


class TestCompile(unittest.TestCase):
    def setUp(self):
        self.compiler = SpecCompiler()

    def compile(self, text: str) -> CompileResult:
        result = self.compiler.compile(text, "spec.ts")
        self.assertTrue(result.ok, [d.format() for d in result.diagnostics])
        return result

    def test_method_schema(self):
        [schema] = self.compile(source("add(a: number, b: number): number;")).schemas
        self.assertEqual(
            schema.to_dict(),
            {
                "module_name": "Calc",
                "methods": [
                    {
                        "name": "add",
                        "params": [
                            {"name": "a", "type": {"type": "Number"}},
                            {"name": "b", "type": {"type": "Number"}},
                        ],
                        "ret_type": {"type": "Number"},
                    }
                ],
                "signals": [],
                "aliases": [],
                "enums": [],
            },
        )

    def test_signal_without_payload(self):
        [schema] = self.compile(source("onDone: Signal;")).schemas
        self.assertEqual(schema.signals, (Signal("onDone"),))
        self.assertEqual(schema.methods, ())

    def test_promise_of_alias(self):
        [schema] = self.compile(source("getUser(): Promise<User>;", extra="type User = { name: string };")).schemas
        user = ObjectType("User", (Prop("name", StringType()),))
        self.assertEqual(schema.method("getUser").ret_type, PromiseType(user))
        self.assertEqual(schema.aliases, (user,))

    def test_bytes_source(self):
        result = self.compiler.compile(source("ping(): void;").encode("utf-8"))
        self.assertTrue(result.ok)
        self.assertEqual(result.path, "<source>")

    def test_modules_sorted_by_name(self):
        text = HEADER + """
export interface BetaSpec extends NativeModule { pong(): void; }
export interface AlphaSpec extends NativeModule { ping(id: number): void; }
export const beta = NativeModuleRegistry.get<BetaSpec>('Beta');
export const alpha = NativeModuleRegistry.get<AlphaSpec>('Alpha');
"""
        result = self.compile(text)
        self.assertEqual([schema.module_name for schema in result.schemas], ["Alpha", "Beta"])
        self.assertEqual(result.schemas[0].method("ping").params, (Param("id", NumberType()),))

    def test_diagnostics_block_schemas(self):
        result = self.compiler.compile(source("run?(): void;\nstop(x?: number): void;"), "spec.ts")
        self.assertFalse(result.ok)
        self.assertEqual(result.schemas, [])
        self.assertEqual(
            [d.message for d in result.diagnostics],
            ["Optional signature is not supported", "Optional parameter is not supported"],
        )
        with self.assertRaises(DiagnosticsError) as ctx:
            result.raise_for_diagnostics()
        self.assertIn("Failed to compile spec.ts", str(ctx.exception))

    def test_syntax_error(self):
        result = self.compiler.compile(HEADER + "export interface Spec extends NativeModule {", "spec.ts")
        self.assertFalse(result.ok)
        self.assertTrue(all(d.span.path == "spec.ts" for d in result.diagnostics))

    def test_missing_specification(self):
        result = self.compiler.compile(HEADER + "export const x = 1;\n", "spec.ts")
        self.assertEqual([d.message for d in result.diagnostics], ["NativeModule specification not found"])

    def test_reference_cycle(self):
        result = self.compiler.compile(source("head(): Node;", extra="interface Node { next: Node | null; }"), "spec.ts")
        self.assertEqual(result.schemas, [])
        [diagnostic] = result.diagnostics
        self.assertEqual(diagnostic.message, "Circular dependency detected involving: Node")
        self.assertEqual((diagnostic.span.line, diagnostic.span.column), (3, 1))

    def test_raise_for_diagnostics_passes_when_ok(self):
        self.compile(source("ping(): void;")).raise_for_diagnostics()


class TestContentHash(unittest.TestCase):
    def setUp(self):
        self.compiler = SpecCompiler()

    def hash_of(self, text: str) -> str:
        result = self.compiler.compile(text)
        self.assertTrue(result.ok)
        return result.content_hash

    def test_deterministic(self):
        text = source("add(a: number, b: number): number;\nonDone: Signal;")
        first = self.compiler.compile(text)
        second = self.compiler.compile(text)
        self.assertEqual(first.to_json(), second.to_json())
        self.assertEqual(first.content_hash, second.content_hash)

    def test_ignores_layout_and_order(self):
        compact = source("add(a: number, b: number): number;\nsub(a: number, b: number): number;")
        spaced = source("// subtraction\n  sub(a: number,   b: number): number;\n\n  /* addition */\n  add(a: number, b: number): number;")
        self.assertEqual(self.hash_of(compact), self.hash_of(spaced))

    def test_sensitive_to_shape(self):
        number = self.hash_of(source("add(a: number, b: number): number;"))
        string = self.hash_of(source("add(a: number, b: string): number;"))
        renamed = self.hash_of(source("add(a: number, c: number): number;"))
        self.assertEqual(len({number, string, renamed}), 3)

    def test_to_dict(self):
        result = self.compiler.compile(source("ping(): void;"))
        data = result.to_dict()
        self.assertEqual(data["hash"], result.content_hash)
        self.assertEqual(data["schemas"][0]["hash"], result.schemas[0].content_hash)
        self.assertEqual(data["schemas"][0]["module_name"], "Calc")


class TestSummary(unittest.TestCase):
    def test_tree(self):
        compiler = SpecCompiler()
        text = source(
            "add(a: number, b: number): number;\nonDone: Signal;\nonData: Signal<Payload>;",
            extra="interface Payload { value: number; }",
        )
        [schema] = compiler.compile(text).schemas
        self.assertEqual(
            compiler.summary(schema).splitlines(),
            [
                f"Calc ({schema.content_hash[:12]})",
                "├── Methods",
                "│   └── fn add(&self, a: Number, b: Number) -> Number",
                "├── Alias types",
                "│   └── Payload",
                "└── Signals",
                "    ├── onData: Payload",
                "    └── onDone",
            ],
        )


class TestGenerate(unittest.TestCase):
    def test_writes_targets_into_subdirectories(self):
        compiler = SpecCompiler()
        result = compiler.compile(source("add(a: number, b: number): number;"))
        with TemporaryDirectory() as tmp:
            files = compiler.generate(result.schemas, tmp)
            self.assertEqual(
                [(f.path, f.overwrite) for f in files],
                [
                    (Path(tmp) / "rust" / "calc_ffi.rs", True),
                    (Path(tmp) / "rust" / "calc_impl.rs", False),
                    (Path(tmp) / "cxx" / "CalcBridging.hpp", True),
                    (Path(tmp) / "cxx" / "CalcModule.hpp", True),
                ],
            )
            for f in files:
                if f.overwrite:
                    self.assertEqual(extract_hash(f.content), result.content_hash)

    def test_single_target(self):
        compiler = SpecCompiler()
        result = compiler.compile(source("ping(): void;"))
        files = compiler.generate(result.schemas, "out", targets=["cxx"])
        self.assertEqual(
            [f.path for f in files], [Path("out") / "cxx" / "CalcBridging.hpp", Path("out") / "cxx" / "CalcModule.hpp"]
        )


if __name__ == "__main__":
    unittest.main()
