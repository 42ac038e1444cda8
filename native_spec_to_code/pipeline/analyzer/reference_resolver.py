"""
Reference resolution.

Replaces every RefType with the declaration it names. Declarations live
in an arena keyed by symbol id; resolution is an explicit graph walk with
a memo of resolved declarations and an in-progress set, so reference
cycles are detected by the walk itself.
"""

from __future__ import annotations

import logging

from ..diagnostics import DependencyCycleError, UnresolvedReferenceError
from .analyzer import SpecDecl, TypeDecl
from .ir_nodes import (
    ArrayType,
    Method,
    NullableType,
    ObjectType,
    Param,
    PromiseType,
    Prop,
    RefType,
    Signal,
    TypeAnnotation,
    nullable,
)

logger = logging.getLogger(__name__)


class ReferenceResolver:
    """Resolves references against a declaration arena."""

    def __init__(self, decls: dict[int, TypeDecl]):
        """
        Initialize the resolver.

        Args:
            decls: Type declarations keyed by symbol id
        """
        self.decls = decls
        self._resolved: dict[int, TypeAnnotation] = {}
        self._in_progress: set[int] = set()

    def resolve(self, annotation: TypeAnnotation) -> TypeAnnotation:
        """
        Resolve all references inside an annotation.

        Raises:
            DependencyCycleError: If declarations reference each other in a cycle
            UnresolvedReferenceError: If a reference has no declaration
        """
        if isinstance(annotation, RefType):
            return self._resolve_symbol(annotation)
        if isinstance(annotation, ObjectType):
            props = tuple(Prop(prop.name, self.resolve(prop.type)) for prop in annotation.props)
            return ObjectType(annotation.name, props)
        if isinstance(annotation, ArrayType):
            return ArrayType(self.resolve(annotation.element))
        if isinstance(annotation, PromiseType):
            return PromiseType(self.resolve(annotation.resolved))
        if isinstance(annotation, NullableType):
            return nullable(self.resolve(annotation.inner))
        return annotation

    def _resolve_symbol(self, ref: RefType) -> TypeAnnotation:
        if ref.symbol in self._resolved:
            return self._resolved[ref.symbol]

        decl = self.decls.get(ref.symbol)
        if decl is None:
            raise UnresolvedReferenceError(ref.name, ref.symbol)
        if ref.symbol in self._in_progress:
            raise DependencyCycleError(decl.name)

        self._in_progress.add(ref.symbol)
        try:
            resolved = self.resolve(decl.annotation)
        finally:
            self._in_progress.discard(ref.symbol)

        self._resolved[ref.symbol] = resolved
        return resolved

    def resolve_decl(self, decl: TypeDecl) -> TypeAnnotation:
        """Resolve a declaration as if it were referenced."""
        return self._resolve_symbol(RefType(decl.symbol, decl.name))

    def resolve_method(self, method: Method) -> Method:
        params = tuple(Param(param.name, self.resolve(param.type)) for param in method.params)
        return Method(method.name, params, self.resolve(method.ret_type))

    def resolve_signal(self, signal: Signal) -> Signal:
        if signal.payload_type is None:
            return signal
        return Signal(signal.name, self.resolve(signal.payload_type))

    def resolve_spec(self, spec: SpecDecl) -> tuple[list[Method], list[Signal]]:
        """Resolve every method and signal of a specification."""
        methods = [self.resolve_method(method) for method in spec.methods]
        signals = [self.resolve_signal(signal) for signal in spec.signals]
        logger.debug("Resolved %s: %d methods, %d signals", spec.name, len(methods), len(signals))
        return methods, signals
