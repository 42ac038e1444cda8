"""
Type projection.

Maps a resolved type annotation onto a target: the target's type name,
its default value and the conversion expressions every generator uses.
All answers come from PROJECTION_TABLE; the projector only checks the
shape rules shared by every target and fills in the template variables.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import jinja2

from ...utils import camel_case, pascal_case, snake_case
from ..analyzer.dependency_order import wrapper_name
from ..analyzer.ir_nodes import (
    ArrayType,
    EnumType,
    Method,
    NullableType,
    ObjectType,
    PromiseType,
    RefType,
    TypeAnnotation,
    VoidType,
)
from ..config import CompilerConfig
from ..diagnostics import ProjectionError
from .table import PROJECTION_TABLE, Target

TEMPLATE_DIR = Path(__file__).parent.parent.parent / "templates"

# Template directory holding target-specific snippets
_TEMPLATE_LANG = {Target.RUST: "rust", Target.RUST_FFI: "rust", Target.CXX: "cxx"}


class Projection:
    """A type annotation projected onto one target."""

    def __init__(
        self,
        annotation: TypeAnnotation,
        target: Target,
        type_name: str,
        default_value: str | None,
        wrapper_name: str | None,
        from_template: jinja2.Template | None,
        to_template: jinja2.Template | None,
        context: dict,
    ):
        self.annotation = annotation
        self.target = target
        self.type_name = type_name
        self._default_value = default_value
        self.wrapper_name = wrapper_name
        self._from_template = from_template
        self._to_template = to_template
        self._context = context

    @property
    def default_value(self) -> str:
        if self._default_value is None:
            raise ProjectionError(f"Type has no default value on {self.target.value}: {self.annotation.display()}")
        return self._default_value

    @property
    def has_default(self) -> bool:
        return self._default_value is not None

    def from_native(self, expr: str) -> str:
        """Convert a boundary value into this target's representation."""
        if self._from_template is None:
            raise ProjectionError(f"Cannot convert into {self.target.value}: {self.annotation.display()}")
        return self._from_template.render(self._context, expr=expr)

    def to_native(self, expr: str) -> str:
        """Convert a value of this target's representation for the boundary."""
        if self._to_template is None:
            raise ProjectionError(f"Cannot convert from {self.target.value}: {self.annotation.display()}")
        return self._to_template.render(self._context, expr=expr)

    def __repr__(self) -> str:
        return f"Projection({self.target.value}, {self.type_name!r})"


@dataclass(frozen=True)
class EnumConversion:
    """Bidirectional raw-value conversion of an enum."""

    from_raw: str
    to_raw: str


class TypeProjector:
    """Projects type annotations onto generation targets."""

    def __init__(self, config: CompilerConfig | None = None):
        """
        Initialize the projector and compile the projection table.

        Args:
            config: Compiler configuration (wrapper prefix, C++ namespace)
        """
        self.config = config or CompilerConfig()
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
            undefined=jinja2.StrictUndefined,
            keep_trailing_newline=False,
            lstrip_blocks=True,
            trim_blocks=True,
        )
        self._cells = {
            key: tuple(self._compile(text) for text in (cell.type_name, cell.default_value, cell.from_native, cell.to_native))
            for key, cell in PROJECTION_TABLE.items()
        }

    def _compile(self, text: str | None) -> jinja2.Template | None:
        return self.jinja_env.from_string(text) if text is not None else None

    def project(self, annotation: TypeAnnotation, target: Target) -> Projection:
        """
        Project a value type (parameter, field or payload) onto a target.

        Raises:
            ProjectionError: If the target cannot represent the type
        """
        return self._project(annotation, Target(target), allow_void=False, allow_promise=False)

    def project_return(self, annotation: TypeAnnotation, target: Target) -> Projection:
        """Project a method return type, where void and Promise are allowed."""
        return self._project(annotation, Target(target), allow_void=True, allow_promise=True)

    def _project(self, annotation: TypeAnnotation, target: Target, allow_void: bool, allow_promise: bool) -> Projection:
        context = {"ns": self.config.cxx_namespace}

        if isinstance(annotation, RefType):
            raise ProjectionError(f"Unresolved type reference: {annotation.name}")
        if isinstance(annotation, VoidType) and not allow_void:
            raise ProjectionError("Void type is only allowed as a method return type")
        if isinstance(annotation, PromiseType):
            if not allow_promise:
                raise ProjectionError("Promise type is only allowed as a method return type")
            context["inner"] = self._project(annotation.resolved, target, allow_void=True, allow_promise=False)
        elif isinstance(annotation, ArrayType):
            if isinstance(annotation.element, ArrayType):
                raise ProjectionError(f"Nested array type is not supported: {annotation.display()}")
            context["inner"] = self._project(annotation.element, target, allow_void=False, allow_promise=False)
        elif isinstance(annotation, NullableType):
            if isinstance(annotation.inner, (NullableType, PromiseType, VoidType)):
                raise ProjectionError(f"Unsupported nullable type: {annotation.display()}")
            context["inner"] = self._project(annotation.inner, target, allow_void=False, allow_promise=False)
            context["wrapper"] = self.wrapper_name(annotation)
        elif isinstance(annotation, ObjectType):
            context["name"] = annotation.name
        elif isinstance(annotation, EnumType):
            if not annotation.members:
                raise ProjectionError(f"Enum should have at least one member: {annotation.name}")
            context["name"] = annotation.name
            context["first_member"] = annotation.members[0].name

        type_tpl, default_tpl, from_tpl, to_tpl = self._cells[(annotation.kind, target)]
        type_name = type_tpl.render(context)
        default_value = default_tpl.render(context) if default_tpl is not None else None
        return Projection(
            annotation=annotation,
            target=target,
            type_name=type_name,
            default_value=default_value,
            wrapper_name=context.get("wrapper"),
            from_template=from_tpl,
            to_template=to_tpl,
            context={**context, "type_name": type_name},
        )

    def wrapper_name(self, annotation: NullableType) -> str:
        """Unqualified nullable wrapper name, shared by every target."""
        try:
            return wrapper_name(annotation, self.config.nullable_prefix)
        except ValueError as e:
            raise ProjectionError(str(e)) from e

    def enum_conversion(self, enum: EnumType, target: Target) -> EnumConversion:
        """
        Render the raw-value conversion of an enum for a target.

        Both directions raise a target-side error on unknown values.
        """
        target = Target(target)
        projection = self.project(enum, target)
        template = self.jinja_env.get_template(f"{_TEMPLATE_LANG[target]}/enum_conversion.jinja2")
        members = [{"name": member.name, "raw": _raw_literal(member.value, target)} for member in enum.members]

        def render(direction: str) -> str:
            return template.render(
                direction=direction,
                enum=enum,
                type_name=projection.type_name,
                members=members,
                is_string=enum.is_string,
            ).strip("\n")

        return EnumConversion(from_raw=render("from_raw"), to_raw=render("to_raw"))

    def function_name(self, name: str, target: Target) -> str:
        """Name of a method on a target (snake_case in Rust, camelCase in C++)."""
        return camel_case(name) if Target(target) == Target.CXX else snake_case(name)

    def param_name(self, name: str, target: Target) -> str:
        return self.function_name(name, target)

    def ffi_function_name(self, module_name: str, method_name: str) -> str:
        """Name of the extern FFI function backing a module method."""
        return f"{snake_case(module_name)}_{snake_case(method_name)}"

    def signal_enum_name(self, module_name: str) -> str:
        """Rust enum carrying the emitted signals of a module."""
        return f"{pascal_case(module_name)}Signal"

    def payload_accessor_name(self, module_name: str, signal_name: str) -> str:
        """Extern FFI function reading the payload out of an emitted signal."""
        return f"{snake_case(module_name)}_get_{snake_case(signal_name)}_payload"

    def drop_signal_name(self, module_name: str) -> str:
        """Extern FFI function releasing an emitted signal."""
        return f"{snake_case(module_name)}_drop_signal"

    def ffi_signature(self, module_name: str, method: Method) -> str:
        """Extern FFI declaration; the module instance argument comes first."""
        params = [f"{self.config.reserved_arg_name}: usize"]
        params.extend(
            f"{self.param_name(param.name, Target.RUST_FFI)}: {self.project(param.type, Target.RUST_FFI).type_name}"
            for param in method.params
        )
        ret = self.project_return(method.ret_type, Target.RUST_FFI).type_name
        ret_annotation = "" if ret == "()" else f" -> {ret}"
        return f"fn {self.ffi_function_name(module_name, method.name)}({', '.join(params)}){ret_annotation};"

    def impl_signature(self, method: Method) -> str:
        """Signature of a method in the Rust implementation trait."""
        params = ["&self"]
        params.extend(
            f"{self.param_name(param.name, Target.RUST)}: {self.project(param.type, Target.RUST).type_name}"
            for param in method.params
        )
        ret_annotation = ""
        if not isinstance(method.ret_type, VoidType):
            ret_annotation = f" -> {self.project_return(method.ret_type, Target.RUST).type_name}"
        return f"fn {self.function_name(method.name, Target.RUST)}({', '.join(params)}){ret_annotation}"


def _raw_literal(value: str | int, target: Target) -> str:
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    # Rust matches number enums on f64
    return str(value) if target == Target.CXX else f"{value}.0"
