"""
The cross-target projection table.

One row per (type kind, target). Each cell holds jinja2 expression
templates for the target type name, its default value and the
conversions from and to the boundary representation of that target.
A missing template (None) means the target cannot express it.

Template variables:
    name: Declared name of a record or enum
    inner: Projection of the element / resolved / wrapped type
    wrapper: Unqualified nullable wrapper name (e.g. NullableNumberArray)
    first_member: First member of an enum
    ns: C++ namespace of bridged user types
    type_name: Rendered type name of the cell (conversions only)
    expr: Expression being converted (conversions only)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..analyzer.ir_nodes import TypeKind


class Target(str, Enum):
    """Code generation target."""

    RUST = "rust"  # Rust implementation-facing types
    RUST_FFI = "rust_ffi"  # Rust types crossing the cxx FFI boundary
    CXX = "cxx"  # C++ JSI bridge types


@dataclass(frozen=True)
class ProjectionCell:
    """Templates of one (kind, target) cell."""

    type_name: str
    default_value: str | None = None
    from_native: str | None = None
    to_native: str | None = None


_IDENTITY = "{{ expr }}"
_CXX_FROM_JS = "react::bridging::fromJs<{{ type_name }}>(rt, {{ expr }}, callInvoker)"
_CXX_TO_JS = "react::bridging::toJs(rt, {{ expr }})"

# Element-wise conversion, or the value itself when elements need none
_RUST_MAP_FROM = (
    "{% if inner.from_native('v') == 'v' %}{{ expr }}"
    "{% else %}{{ expr }}.into_iter().map(|v| {{ inner.from_native('v') }}).collect(){% endif %}"
)
_RUST_MAP_TO = (
    "{% if inner.to_native('v') == 'v' %}{{ expr }}"
    "{% else %}{{ expr }}.into_iter().map(|v| {{ inner.to_native('v') }}).collect(){% endif %}"
)

PROJECTION_TABLE: dict[tuple[TypeKind, Target], ProjectionCell] = {
    # Rust implementation types
    (TypeKind.VOID, Target.RUST): ProjectionCell("Void", None, _IDENTITY, _IDENTITY),
    (TypeKind.BOOLEAN, Target.RUST): ProjectionCell("Boolean", "false", _IDENTITY, _IDENTITY),
    (TypeKind.NUMBER, Target.RUST): ProjectionCell("Number", "0.0", _IDENTITY, _IDENTITY),
    (TypeKind.STRING, Target.RUST): ProjectionCell("String", "String::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ARRAY_BUFFER, Target.RUST): ProjectionCell("ArrayBuffer", "ArrayBuffer::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ARRAY, Target.RUST): ProjectionCell(
        "Array<{{ inner.type_name }}>", "Vec::default()", _RUST_MAP_FROM, _RUST_MAP_TO
    ),
    (TypeKind.OBJECT, Target.RUST): ProjectionCell("{{ name }}", "{{ name }}::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ENUM, Target.RUST): ProjectionCell("{{ name }}", "{{ name }}::default()", _IDENTITY, _IDENTITY),
    (TypeKind.PROMISE, Target.RUST): ProjectionCell(
        "Promise<{{ inner.type_name }}>",
        None,
        None,
        "{% if inner.to_native('v') == 'v' %}{{ expr }}{% else %}{{ expr }}.map(|v| {{ inner.to_native('v') }}){% endif %}",
    ),
    (TypeKind.NULLABLE, Target.RUST): ProjectionCell(
        "Nullable<{{ inner.type_name }}>", "Nullable::new(None)", "{{ expr }}.into()", "{{ expr }}.into()"
    ),
    # Rust FFI types
    (TypeKind.VOID, Target.RUST_FFI): ProjectionCell("()", None, _IDENTITY, _IDENTITY),
    (TypeKind.BOOLEAN, Target.RUST_FFI): ProjectionCell("bool", "false", _IDENTITY, _IDENTITY),
    (TypeKind.NUMBER, Target.RUST_FFI): ProjectionCell("f64", "0.0", _IDENTITY, _IDENTITY),
    (TypeKind.STRING, Target.RUST_FFI): ProjectionCell("String", "String::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ARRAY_BUFFER, Target.RUST_FFI): ProjectionCell("Vec<u8>", "Vec::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ARRAY, Target.RUST_FFI): ProjectionCell("Vec<{{ inner.type_name }}>", "Vec::default()", _IDENTITY, _IDENTITY),
    (TypeKind.OBJECT, Target.RUST_FFI): ProjectionCell("{{ name }}", "{{ name }}::default()", _IDENTITY, _IDENTITY),
    (TypeKind.ENUM, Target.RUST_FFI): ProjectionCell("{{ name }}", "{{ name }}::default()", _IDENTITY, _IDENTITY),
    (TypeKind.PROMISE, Target.RUST_FFI): ProjectionCell("Result<{{ inner.type_name }}>", None, None, _IDENTITY),
    (TypeKind.NULLABLE, Target.RUST_FFI): ProjectionCell("{{ wrapper }}", "{{ wrapper }}::default()", _IDENTITY, _IDENTITY),
    # C++ JSI bridge types
    (TypeKind.VOID, Target.CXX): ProjectionCell("void", None, None, "jsi::Value::undefined()"),
    (TypeKind.BOOLEAN, Target.CXX): ProjectionCell("bool", "false", _CXX_FROM_JS, _CXX_TO_JS),
    (TypeKind.NUMBER, Target.CXX): ProjectionCell("double", "0.0", _CXX_FROM_JS, _CXX_TO_JS),
    (TypeKind.STRING, Target.CXX): ProjectionCell("rust::String", "rust::String()", _CXX_FROM_JS, _CXX_TO_JS),
    (TypeKind.ARRAY_BUFFER, Target.CXX): ProjectionCell("rust::Vec<uint8_t>", "rust::Vec<uint8_t>()", _CXX_FROM_JS, _CXX_TO_JS),
    (TypeKind.ARRAY, Target.CXX): ProjectionCell(
        "rust::Vec<{{ inner.type_name }}>", "rust::Vec<{{ inner.type_name }}>()", _CXX_FROM_JS, _CXX_TO_JS
    ),
    (TypeKind.OBJECT, Target.CXX): ProjectionCell("{{ ns }}::{{ name }}", "{{ ns }}::{{ name }}{}", _CXX_FROM_JS, _CXX_TO_JS),
    (TypeKind.ENUM, Target.CXX): ProjectionCell(
        "{{ ns }}::{{ name }}", "{{ ns }}::{{ name }}::{{ first_member }}", _CXX_FROM_JS, _CXX_TO_JS
    ),
    (TypeKind.PROMISE, Target.CXX): ProjectionCell("react::AsyncPromise<{{ inner.type_name }}>", None, None, _CXX_TO_JS),
    (TypeKind.NULLABLE, Target.CXX): ProjectionCell(
        "{{ ns }}::{{ wrapper }}", "{{ ns }}::{{ wrapper }}{true, {{ inner.default_value }}}", _CXX_FROM_JS, _CXX_TO_JS
    ),
}
