"""
Rust bridging backend.

Generates the cxx FFI module of a native module: shared structs, enums
and nullable wrappers in dependency order, the extern functions that
dispatch into the implementation, the signal enum with its
payload accessors, and a one-time implementation scaffold.
"""

from __future__ import annotations

import logging
from typing import Any

from ...utils import pascal_case, snake_case
from ..analyzer.dependency_order import DependencyNode
from ..analyzer.ir_nodes import EnumType, Method, NullableType, ObjectType, Schema, Signal, VoidType
from ..diagnostics import InternalError
from ..projection import Target
from .base import BridgingBackend

logger = logging.getLogger(__name__)


class RustBackend(BridgingBackend):
    """Rust bridging backend."""

    TEMPLATE_LANG = "rust"
    FILE_EXTENSION = "rs"

    def file_name(self, schema: Schema) -> str:
        return f"{snake_case(schema.module_name)}_ffi.rs"

    def impl_file_name(self, schema: Schema) -> str:
        return f"{snake_case(schema.module_name)}_impl.rs"

    def render(self, schema: Schema, content_hash: str) -> str:
        """Generate the FFI module of a schema."""
        context = self._module_context(schema)
        context["header"] = self.header(content_hash)
        context["namespace"] = self.config.cxx_namespace
        context["reserved_arg"] = self.config.reserved_arg_name
        context["emit_name"] = self.config.reserved_method_name
        context["decls"] = [self._decl_context(node) for node in self.ordered_nodes(schema)]
        logger.debug("Rendering Rust FFI for %s with %d declarations", schema.module_name, len(context["decls"]))
        return self._render_template("ffi.rs.jinja2", context)

    def scaffold(self, schema: Schema) -> tuple[str, str]:
        """Implementation stub, written once and then owned by the user."""
        return self.impl_file_name(schema), self._render_template("impl.rs.jinja2", self._module_context(schema))

    def _module_context(self, schema: Schema) -> dict[str, Any]:
        struct_name = pascal_case(schema.module_name)
        return {
            "struct_name": struct_name,
            "trait_name": f"{struct_name}Spec",
            "ffi_module": self.file_name(schema).removesuffix(".rs"),
            "impl_module": self.impl_file_name(schema).removesuffix(".rs"),
            "functions": [self._function_context(schema, method) for method in schema.methods],
            "signal_enum": self.projector.signal_enum_name(schema.module_name),
            "drop_signal": self.projector.drop_signal_name(schema.module_name),
            "signals": [self._signal_context(schema, signal) for signal in schema.signals],
        }

    def _function_context(self, schema: Schema, method: Method) -> dict[str, Any]:
        args = []
        for param in method.params:
            name = self.projector.param_name(param.name, Target.RUST)
            args.append(self.projector.project(param.type, Target.RUST).from_native(name))

        is_void = isinstance(method.ret_type, VoidType)
        ret = None
        if not is_void:
            ret = self.projector.project_return(method.ret_type, Target.RUST).to_native("ret")

        return {
            "name": self.projector.function_name(method.name, Target.RUST),
            "declaration": self.projector.ffi_signature(schema.module_name, method).removesuffix(";"),
            "impl_signature": self.projector.impl_signature(method),
            "args": args,
            "is_void": is_void,
            "ret": ret,
        }

    def _signal_context(self, schema: Schema, signal: Signal) -> dict[str, Any]:
        # Variants hold the FFI form returned by the payload accessor
        payload_type = None
        accessor = None
        if signal.payload_type is not None:
            payload_type = self.projector.project(signal.payload_type, Target.RUST_FFI).type_name
            accessor = self.projector.payload_accessor_name(schema.module_name, signal.name)
        return {
            "name": signal.name,
            "variant": pascal_case(signal.name),
            "payload_type": payload_type,
            "accessor": accessor,
        }

    def _decl_context(self, node: DependencyNode) -> dict[str, Any]:
        annotation = node.annotation
        if isinstance(annotation, EnumType):
            conversion = self.projector.enum_conversion(annotation, Target.RUST_FFI)
            return {
                "kind": "enum",
                "name": node.name,
                "members": [member.name for member in annotation.members],
                "raw_type": "&str" if annotation.is_string else "f64",
                "raw_return": "&'static str" if annotation.is_string else "f64",
                "from_raw": conversion.from_raw,
                "to_raw": conversion.to_raw,
            }

        if isinstance(annotation, NullableType):
            inner_ffi = self.projector.project(annotation.inner, Target.RUST_FFI)
            inner_rust = self.projector.project(annotation.inner, Target.RUST)
            return {
                "kind": "wrapper",
                "name": node.name,
                "inner_type": inner_ffi.type_name,
                "inner_default": inner_ffi.default_value,
                "impl_type": self.projector.project(annotation, Target.RUST).type_name,
                "into_impl": inner_rust.from_native("value.val"),
                "into_ffi": inner_rust.to_native("val"),
            }

        if not isinstance(annotation, ObjectType):
            raise InternalError(f"Declaration `{node.name}` has no generated form: {type(annotation).__name__}")
        fields = []
        for prop in annotation.props:
            projection = self.projector.project(prop.type, Target.RUST_FFI)
            fields.append(
                {
                    "name": snake_case(prop.name),
                    "type": projection.type_name,
                    "default": projection.default_value,
                }
            )
        return {"kind": "struct", "name": node.name, "fields": fields}
