"""
Analyzer module.

Contains declaration collection, reference resolution, normalization and
dependency ordering.
"""

from __future__ import annotations

from .analyzer import AnalysisResult, ModuleBinding, SpecAnalyzer, SpecDecl, TypeDecl, analyze
from .dependency_order import DependencyNode, build_dependency_graph, calc_deps_order, order_nodes, wrapper_name
from .ir_nodes import (
    ArrayBufferType,
    ArrayType,
    BooleanType,
    EnumMember,
    EnumType,
    Method,
    NullableType,
    NumberType,
    ObjectType,
    Param,
    PromiseType,
    Prop,
    RefType,
    Schema,
    Signal,
    StringType,
    TypeAnnotation,
    TypeKind,
    VoidType,
    combined_hash,
)
from .normalizer import normalize
from .reference_resolver import ReferenceResolver

__all__ = [
    "AnalysisResult",
    "ModuleBinding",
    "SpecAnalyzer",
    "SpecDecl",
    "TypeDecl",
    "analyze",
    "DependencyNode",
    "build_dependency_graph",
    "calc_deps_order",
    "order_nodes",
    "wrapper_name",
    "ArrayBufferType",
    "ArrayType",
    "BooleanType",
    "EnumMember",
    "EnumType",
    "Method",
    "NullableType",
    "NumberType",
    "ObjectType",
    "Param",
    "PromiseType",
    "Prop",
    "RefType",
    "Schema",
    "Signal",
    "StringType",
    "TypeAnnotation",
    "TypeKind",
    "VoidType",
    "combined_hash",
    "normalize",
    "ReferenceResolver",
]
