"""
Specification compiler.

Orchestrates the phases for one source unit:

1. Parser: parse the source and bind module-scope names
2. Analyzer: collect specifications, types and registry bindings
3. Resolver: replace type references with their declarations
4. Normalizer: sort and freeze one Schema per bound specification
5. Backends: render bridging files from the schemas
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from .analyzer import ReferenceResolver, Schema, analyze, combined_hash, normalize
from .analyzer.ir_nodes import canonical_json
from .backends import BACKENDS
from .config import CompilerConfig
from .diagnostics import DependencyCycleError, Diagnostic, DiagnosticsError, ParseError
from .projection import Target, TypeProjector
from .schema_ast import parse_source
from .writer import GenerateResult

logger = logging.getLogger(__name__)


@dataclass
class CompileResult:
    """Schemas and diagnostics of one source unit.

    Schemas are only materialized when the unit produced no diagnostics.
    """

    path: str
    schemas: list[Schema] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    @property
    def content_hash(self) -> str:
        """Combined hash over every schema of the unit."""
        return combined_hash(self.schemas)

    def raise_for_diagnostics(self) -> None:
        """Raise DiagnosticsError if the unit failed to compile."""
        if self.diagnostics:
            raise DiagnosticsError(self.diagnostics, f"Failed to compile {self.path}")

    def to_dict(self) -> dict:
        return {
            "hash": self.content_hash,
            "schemas": [{**schema.to_dict(), "hash": schema.content_hash} for schema in self.schemas],
        }

    def to_json(self) -> str:
        return canonical_json(self.to_dict())


class SpecCompiler:
    """Compiles specification sources into schemas and bridging code."""

    def __init__(self, config: CompilerConfig | None = None):
        """
        Initialize the compiler.

        Args:
            config: Compiler configuration
        """
        self.config = config or CompilerConfig()
        self.projector = TypeProjector(self.config)

    def compile(self, source: str | bytes, path: str = "<source>") -> CompileResult:
        """
        Compile one source unit.

        Args:
            source: Specification source text
            path: Path used in diagnostics

        Returns:
            The schemas, or every diagnostic of the unit
        """
        result = CompileResult(path=path)
        try:
            unit = parse_source(source, path, tsx=self.config.tsx)
        except ParseError as e:
            result.diagnostics = e.diagnostics
            return result

        analysis = analyze(unit, self.config)
        if not analysis.ok:
            result.diagnostics = analysis.diagnostics
            return result

        resolver = ReferenceResolver(analysis.decls)
        schemas = []
        for binding in analysis.bindings:
            spec = analysis.specs[binding.spec_symbol]
            try:
                methods, signals = resolver.resolve_spec(spec)
            except DependencyCycleError as e:
                span = next((decl.span for decl in analysis.decls.values() if decl.name == e.participant), spec.span)
                result.diagnostics.append(Diagnostic(str(e), span))
                return result
            schemas.append(normalize(binding.module_name, methods, signals))

        result.schemas = sorted(schemas, key=lambda schema: schema.module_name)
        logger.debug("Compiled %s: %s", path, [schema.module_name for schema in result.schemas])
        return result

    def compile_file(self, path: str | Path) -> CompileResult:
        """Read and compile a specification file."""
        path = Path(path)
        return self.compile(path.read_bytes(), str(path))

    def generate(
        self, schemas: Sequence[Schema], output_dir: str | Path, targets: Sequence[str] = ("rust", "cxx")
    ) -> list[GenerateResult]:
        """
        Render the bridging files of a set of schemas.

        Args:
            schemas: Schemas of one unit
            output_dir: Directory the files are placed in
            targets: Backend names

        Returns:
            Generated files of every target
        """
        content_hash = combined_hash(schemas)
        results = []
        for target in targets:
            backend = BACKENDS[target](self.config, self.projector)
            results.extend(backend.generate(schemas, Path(output_dir) / target, content_hash))
        return results

    def summary(self, schema: Schema) -> str:
        """Tree summary of a schema with Rust implementation signatures."""
        lines = [f"{schema.module_name} ({schema.content_hash[:12]})"]

        sections = [
            ("Methods", [self.projector.impl_signature(method) for method in schema.methods]),
            ("Alias types", [alias.name for alias in schema.aliases]),
            ("Enum types", [enum.name for enum in schema.enums]),
            ("Signals", [_signal_line(self.projector, signal) for signal in schema.signals]),
        ]
        sections = [(title, items) for title, items in sections if items]
        for i, (title, items) in enumerate(sections):
            last_section = i == len(sections) - 1
            lines.append(f"{'└──' if last_section else '├──'} {title}")
            indent = "    " if last_section else "│   "
            for j, item in enumerate(items):
                lines.append(f"{indent}{'└──' if j == len(items) - 1 else '├──'} {item}")
        return "\n".join(lines)


def _signal_line(projector: TypeProjector, signal) -> str:
    if signal.payload_type is None:
        return signal.name
    return f"{signal.name}: {projector.project(signal.payload_type, Target.RUST).type_name}"
