"""
C++ bridging backend.

Generates Bridging<T> specializations converting records, enums and
nullable wrappers between JSI values and the shared FFI types, and the
TurboModule glue of each module: method host functions (Promise methods
run on a thread pool), listener registration per signal and signal
delivery through the call invoker.
"""

from __future__ import annotations

import logging
from typing import Any

from ...utils import pascal_case, snake_case
from ..analyzer.dependency_order import DependencyNode
from ..analyzer.ir_nodes import EnumType, Method, NullableType, ObjectType, PromiseType, Schema, Signal, VoidType
from ..diagnostics import InternalError
from ..projection import Target
from .base import BridgingBackend

logger = logging.getLogger(__name__)


class CxxBackend(BridgingBackend):
    """C++ JSI bridging backend."""

    TEMPLATE_LANG = "cxx"
    FILE_EXTENSION = "hpp"

    def file_name(self, schema: Schema) -> str:
        return f"{pascal_case(schema.module_name)}Bridging.hpp"

    def module_file_name(self, schema: Schema) -> str:
        return f"{pascal_case(schema.module_name)}Module.hpp"

    def render(self, schema: Schema, content_hash: str) -> str:
        """Generate the bridging header of a schema."""
        decls = [self._decl_context(node) for node in self.ordered_nodes(schema)]
        logger.debug("Rendering C++ bridging for %s with %d declarations", schema.module_name, len(decls))
        return self._render_template(
            "bridging.hpp.jinja2",
            {
                "header": self.header(content_hash),
                # Header emitted by cxx for the Rust FFI module
                "ffi_header": f"{snake_case(schema.module_name)}_ffi.rs.h",
                "decls": decls,
            },
        )

    def render_module(self, schema: Schema, content_hash: str) -> str:
        """Generate the TurboModule glue of a schema."""
        signals = [self._signal_context(schema, signal) for signal in schema.signals]
        logger.debug(
            "Rendering C++ module for %s with %d methods and %d signals",
            schema.module_name,
            len(schema.methods),
            len(signals),
        )
        return self._render_template(
            "module.hpp.jinja2",
            {
                "header": self.header(content_hash),
                "bridging_header": self.file_name(schema),
                "namespace": self.config.cxx_namespace,
                "module_name": schema.module_name,
                "class_name": f"{pascal_case(schema.module_name)}Module",
                "worker_pool_size": self.config.protocol.worker_pool_size,
                "emit_name": self.config.reserved_method_name,
                "signal_enum": self.projector.signal_enum_name(schema.module_name),
                "drop_signal": self.projector.drop_signal_name(schema.module_name),
                "methods": [self._method_context(schema, method) for method in schema.methods],
                "signals": signals,
                "payload_signals": [signal for signal in signals if signal["accessor"] is not None],
            },
        )

    def companions(self, schema: Schema, content_hash: str) -> list[tuple[str, str]]:
        return [(self.module_file_name(schema), self.render_module(schema, content_hash))]

    def _method_context(self, schema: Schema, method: Method) -> dict[str, Any]:
        args = []
        for index, param in enumerate(method.params):
            projection = self.projector.project(param.type, Target.CXX)
            args.append({"var": f"arg{index}", "from_js": projection.from_native(f"args[{index}]")})

        call_args = ["module"] + [arg["var"] for arg in args]
        is_async = isinstance(method.ret_type, PromiseType)
        ret = self.projector.project_return(method.ret_type, Target.CXX)
        return {
            "name": self.projector.function_name(method.name, Target.CXX),
            "js_name": method.name,
            "ffi_name": self.projector.ffi_function_name(schema.module_name, method.name),
            "arg_count": len(method.params),
            "args": args,
            "call_args": call_args,
            "is_async": is_async,
            "is_void": isinstance(method.ret_type, VoidType),
            "resolves_void": is_async and isinstance(method.ret_type.resolved, VoidType),
            "promise_type": ret.type_name if is_async else None,
            "captures": call_args + ["promise"],
            "to_js": ret.to_native("promise" if is_async else "ret"),
        }

    def _signal_context(self, schema: Schema, signal: Signal) -> dict[str, Any]:
        accessor = None
        to_js = None
        if signal.payload_type is not None:
            accessor = self.projector.payload_accessor_name(schema.module_name, signal.name)
            to_js = self.projector.project(signal.payload_type, Target.CXX).to_native("payload")
        return {
            "name": self.projector.function_name(signal.name, Target.CXX),
            "js_name": signal.name,
            "accessor": accessor,
            "to_js": to_js,
        }

    def _decl_context(self, node: DependencyNode) -> dict[str, Any]:
        annotation = node.annotation
        projection = self.projector.project(annotation, Target.CXX)

        if isinstance(annotation, EnumType):
            conversion = self.projector.enum_conversion(annotation, Target.CXX)
            return {
                "kind": "enum",
                "type_name": projection.type_name,
                "from_raw": conversion.from_raw,
                "to_raw": conversion.to_raw,
            }

        if isinstance(annotation, NullableType):
            inner = self.projector.project(annotation.inner, Target.CXX)
            return {
                "kind": "wrapper",
                "type_name": projection.type_name,
                "default": projection.default_value,
                "inner_from": inner.from_native("value"),
                "inner_to": inner.to_native("value.val"),
            }

        if not isinstance(annotation, ObjectType):
            raise InternalError(f"Declaration `{node.name}` has no generated form: {type(annotation).__name__}")
        fields = []
        for prop in annotation.props:
            field_projection = self.projector.project(prop.type, Target.CXX)
            fields.append(
                {
                    "js_name": prop.name,
                    "var": f"_{snake_case(prop.name)}",
                    "from_js": field_projection.from_native(f'obj.getProperty(rt, "{prop.name}")'),
                    "to_js": field_projection.to_native(f"value.{snake_case(prop.name)}"),
                }
            )
        return {"kind": "struct", "type_name": projection.type_name, "fields": fields}
