"""
IR (Intermediate Representation) node definitions.

These nodes describe a native module's surface: its methods, signals
and the user-defined types they use. All nodes are immutable and
hashable, so a Schema can be shared read-only with every generator and
types can be deduplicated by structure.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class TypeKind(Enum):
    """Kind of type annotation."""

    VOID = "Void"
    BOOLEAN = "Boolean"
    NUMBER = "Number"
    STRING = "String"
    ARRAY_BUFFER = "ArrayBuffer"
    ARRAY = "Array"  # T[]
    OBJECT = "Object"  # User-defined record
    ENUM = "Enum"  # User-defined enum
    PROMISE = "Promise"  # Promise<T>, method return only
    NULLABLE = "Nullable"  # T | null
    REF = "Ref"  # Unresolved reference to a declaration


@dataclass(frozen=True)
class TypeAnnotation:
    """Base class of every type shape."""

    kind: ClassVar[TypeKind]

    def children(self) -> tuple[TypeAnnotation, ...]:
        """Directly nested type annotations."""
        return ()

    def walk(self) -> Iterator[TypeAnnotation]:
        """Yield this annotation and every nested one, depth first."""
        stack: list[TypeAnnotation] = [self]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(current.children()))

    def to_dict(self) -> dict:
        return {"type": self.kind.value}

    def display(self) -> str:
        """Render the annotation in the source dialect."""
        return self.kind.value.lower()


@dataclass(frozen=True)
class VoidType(TypeAnnotation):
    kind: ClassVar[TypeKind] = TypeKind.VOID


@dataclass(frozen=True)
class BooleanType(TypeAnnotation):
    kind: ClassVar[TypeKind] = TypeKind.BOOLEAN


@dataclass(frozen=True)
class NumberType(TypeAnnotation):
    kind: ClassVar[TypeKind] = TypeKind.NUMBER


@dataclass(frozen=True)
class StringType(TypeAnnotation):
    kind: ClassVar[TypeKind] = TypeKind.STRING


@dataclass(frozen=True)
class ArrayBufferType(TypeAnnotation):
    kind: ClassVar[TypeKind] = TypeKind.ARRAY_BUFFER

    def display(self) -> str:
        return "ArrayBuffer"


@dataclass(frozen=True)
class ArrayType(TypeAnnotation):
    element: TypeAnnotation
    kind: ClassVar[TypeKind] = TypeKind.ARRAY

    def children(self) -> tuple[TypeAnnotation, ...]:
        return (self.element,)

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "element": self.element.to_dict()}

    def display(self) -> str:
        inner = self.element.display()
        if isinstance(self.element, NullableType):
            inner = f"({inner})"
        return f"{inner}[]"


@dataclass(frozen=True)
class Prop:
    """A field of a record type."""

    name: str
    type: TypeAnnotation

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type.to_dict()}


@dataclass(frozen=True)
class ObjectType(TypeAnnotation):
    name: str
    props: tuple[Prop, ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.OBJECT

    def children(self) -> tuple[TypeAnnotation, ...]:
        return tuple(prop.type for prop in self.props)

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "name": self.name,
            "props": [prop.to_dict() for prop in self.props],
        }

    def display(self) -> str:
        return self.name


@dataclass(frozen=True)
class EnumMember:
    """A named enum member with its raw value."""

    name: str
    value: str | int

    def to_dict(self) -> dict:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class EnumType(TypeAnnotation):
    name: str
    members: tuple[EnumMember, ...] = ()
    kind: ClassVar[TypeKind] = TypeKind.ENUM

    @property
    def is_string(self) -> bool:
        """Whether members carry string raw values (otherwise numbers)."""
        return bool(self.members) and isinstance(self.members[0].value, str)

    def to_dict(self) -> dict:
        return {
            "type": self.kind.value,
            "name": self.name,
            "members": [member.to_dict() for member in self.members],
        }

    def display(self) -> str:
        return self.name


@dataclass(frozen=True)
class PromiseType(TypeAnnotation):
    resolved: TypeAnnotation
    kind: ClassVar[TypeKind] = TypeKind.PROMISE

    def children(self) -> tuple[TypeAnnotation, ...]:
        return (self.resolved,)

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "resolved": self.resolved.to_dict()}

    def display(self) -> str:
        return f"Promise<{self.resolved.display()}>"


@dataclass(frozen=True)
class NullableType(TypeAnnotation):
    inner: TypeAnnotation
    kind: ClassVar[TypeKind] = TypeKind.NULLABLE

    def children(self) -> tuple[TypeAnnotation, ...]:
        return (self.inner,)

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "inner": self.inner.to_dict()}

    def display(self) -> str:
        return f"{self.inner.display()} | null"


@dataclass(frozen=True)
class RefType(TypeAnnotation):
    symbol: int
    name: str
    kind: ClassVar[TypeKind] = TypeKind.REF

    def to_dict(self) -> dict:
        return {"type": self.kind.value, "symbol": self.symbol, "name": self.name}

    def display(self) -> str:
        return self.name


def nullable(annotation: TypeAnnotation) -> NullableType:
    """Wrap an annotation as nullable, collapsing an existing nullable level."""
    if isinstance(annotation, NullableType):
        return annotation
    return NullableType(annotation)


@dataclass(frozen=True)
class Param:
    """A method parameter."""

    name: str
    type: TypeAnnotation

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type.to_dict()}


@dataclass(frozen=True)
class Method:
    """A method of a native module."""

    name: str
    params: tuple[Param, ...] = ()
    ret_type: TypeAnnotation = VoidType()

    @property
    def is_async(self) -> bool:
        return isinstance(self.ret_type, PromiseType)

    def types(self) -> Iterator[TypeAnnotation]:
        """Top-level annotations of the parameters and the return type."""
        for param in self.params:
            yield param.type
        yield self.ret_type

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "params": [param.to_dict() for param in self.params],
            "ret_type": self.ret_type.to_dict(),
        }


@dataclass(frozen=True)
class Signal:
    """An event channel a module instance may emit on."""

    name: str
    payload_type: TypeAnnotation | None = None

    def to_dict(self) -> dict:
        payload = self.payload_type.to_dict() if self.payload_type is not None else None
        return {"name": self.name, "payload_type": payload}


def canonical_json(data) -> str:
    """Serialize data with sorted keys and compact separators."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class Schema:
    """The normalized, fully-resolved description of one native module."""

    module_name: str
    methods: tuple[Method, ...] = ()
    signals: tuple[Signal, ...] = ()
    aliases: tuple[ObjectType, ...] = ()
    enums: tuple[EnumType, ...] = ()

    @property
    def has_signals(self) -> bool:
        return bool(self.signals)

    def types(self) -> Iterator[TypeAnnotation]:
        """Every annotation reachable from methods and signals."""
        for method in self.methods:
            for annotation in method.types():
                yield from annotation.walk()
        for signal in self.signals:
            if signal.payload_type is not None:
                yield from signal.payload_type.walk()

    def method(self, name: str) -> Method:
        for method in self.methods:
            if method.name == name:
                return method
        raise KeyError(name)

    def signal(self, name: str) -> Signal:
        for signal in self.signals:
            if signal.name == name:
                return signal
        raise KeyError(name)

    def to_dict(self) -> dict:
        return {
            "module_name": self.module_name,
            "methods": [method.to_dict() for method in self.methods],
            "signals": [signal.to_dict() for signal in self.signals],
            "aliases": [alias.to_dict() for alias in self.aliases],
            "enums": [enum.to_dict() for enum in self.enums],
        }

    @property
    def content_hash(self) -> str:
        """SHA-256 over the canonical form of the resolved schema."""
        return hashlib.sha256(canonical_json(self.to_dict()).encode("utf-8")).hexdigest()


def combined_hash(schemas: Iterable[Schema]) -> str:
    """Hash a set of schemas independently of their order."""
    ordered = sorted(schemas, key=lambda schema: schema.module_name)
    payload = canonical_json([schema.to_dict() for schema in ordered])
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def base_type_name(annotation: TypeAnnotation) -> str:
    """Target-independent name of a type, used for synthesized wrapper names.

    Examples:
        Number -> "Number"
        User -> "User"
        Number[] -> "NumberArray"

    Raises:
        ValueError: If the type has no wrapper name (void, promises, nullables)
    """
    if isinstance(annotation, (ObjectType, EnumType)):
        return annotation.name
    if isinstance(annotation, ArrayType):
        return base_type_name(annotation.element) + "Array"
    if isinstance(annotation, (BooleanType, NumberType, StringType, ArrayBufferType)):
        return annotation.kind.value
    raise ValueError(f"Type has no wrapper name: {annotation.display()}")
