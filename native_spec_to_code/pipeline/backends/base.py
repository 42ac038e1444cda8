"""
Base class for bridging code backends.

Defines the interface that all target-specific backends must implement.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import jinja2

from ...utils import camel_case, pascal_case, snake_case
from ..analyzer.dependency_order import DependencyNode, build_dependency_graph, order_nodes
from ..analyzer.ir_nodes import Schema, combined_hash
from ..config import CompilerConfig
from ..projection import TypeProjector
from ..writer import GenerateResult, hash_sentinel


class BridgingBackend(ABC):
    """Abstract base class for bridging code backends."""

    # Template directory name
    TEMPLATE_LANG: str = ""

    # File extension
    FILE_EXTENSION: str = ""

    COMMENT_PREFIX: str = "//"

    def __init__(self, config: CompilerConfig | None = None, projector: TypeProjector | None = None):
        """
        Initialize the backend.

        Args:
            config: Compiler configuration
            projector: Shared type projector, created from config if omitted
        """
        self.config = config or CompilerConfig()
        self.projector = projector or TypeProjector(self.config)
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / self.TEMPLATE_LANG
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=True,
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self.jinja_env.filters["snake_case"] = snake_case
        self.jinja_env.filters["camel_case"] = camel_case
        self.jinja_env.filters["pascal_case"] = pascal_case

        self.prefix_template = self.jinja_env.get_template(f"prefix.{self.FILE_EXTENSION}.jinja2")

    def header(self, content_hash: str) -> str:
        """File header carrying the content-hash sentinel."""
        return self.prefix_template.render(hash_line=hash_sentinel(content_hash, self.COMMENT_PREFIX))

    def ordered_nodes(self, schema: Schema) -> list[DependencyNode]:
        """Declarations of a schema, every dependency first."""
        return order_nodes(build_dependency_graph(schema, self.config.nullable_prefix))

    @abstractmethod
    def file_name(self, schema: Schema) -> str:
        """Name of the always-regenerated file of a schema."""

    @abstractmethod
    def render(self, schema: Schema, content_hash: str) -> str:
        """
        Render the always-regenerated file of a schema.

        Args:
            schema: The resolved schema
            content_hash: Hash written into the file header

        Returns:
            Generated code as a string
        """

    def companions(self, schema: Schema, content_hash: str) -> list[tuple[str, str]]:
        """Further regenerated files of a schema as (file name, content) pairs."""
        return []

    def scaffold(self, schema: Schema) -> tuple[str, str] | None:
        """File name and content of a hand-edited scaffold, if the target has one."""
        return None

    def generate(self, schemas: Sequence[Schema], output_dir: Path, content_hash: str | None = None) -> list[GenerateResult]:
        """
        Generate every file of this target for a set of schemas.

        Args:
            schemas: Resolved schemas of one unit
            output_dir: Directory the files are placed in
            content_hash: Hash for file headers, the combined hash of schemas if omitted

        Returns:
            Generated files, scaffolds marked as not overwritable
        """
        content_hash = content_hash or combined_hash(schemas)
        results = []
        for schema in schemas:
            results.append(GenerateResult(output_dir / self.file_name(schema), self.render(schema, content_hash)))
            for name, content in self.companions(schema, content_hash):
                results.append(GenerateResult(output_dir / name, content))
            scaffold = self.scaffold(schema)
            if scaffold is not None:
                name, content = scaffold
                results.append(GenerateResult(output_dir / name, content, overwrite=False))
        return results

    def _render_template(self, name: str, context: dict[str, Any]) -> str:
        return self.jinja_env.get_template(name).render(context)
