"""
Dependency ordering of generated type declarations.

Some targets cannot forward-reference a type declared later in the same
file, so records, enums and nullable wrappers must be emitted with every
dependency first. A record depends on the records and enums of its
fields, through arrays and through nullable wrappers; each wrapper is a
node of its own that depends on its base type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..diagnostics import DependencyCycleError
from .ir_nodes import (
    ArrayType,
    EnumType,
    NullableType,
    ObjectType,
    Schema,
    TypeAnnotation,
    base_type_name,
)

logger = logging.getLogger(__name__)


@dataclass
class DependencyNode:
    """A generated declaration and the declarations it needs."""

    name: str
    annotation: TypeAnnotation  # ObjectType, EnumType or the NullableType of a wrapper
    deps: set[str]

    @property
    def is_wrapper(self) -> bool:
        return isinstance(self.annotation, NullableType)


def wrapper_name(annotation: NullableType, prefix: str = "Nullable") -> str:
    """Target-independent name of a nullable wrapper (e.g. NullableNumberArray)."""
    return prefix + base_type_name(annotation.inner)


def _direct_deps(annotation: TypeAnnotation, prefix: str) -> set[str]:
    if isinstance(annotation, (ObjectType, EnumType)):
        return {annotation.name}
    if isinstance(annotation, ArrayType):
        return _direct_deps(annotation.element, prefix)
    if isinstance(annotation, NullableType):
        return {wrapper_name(annotation, prefix)}
    return set()


def build_dependency_graph(schema: Schema, prefix: str = "Nullable") -> dict[str, DependencyNode]:
    """
    Build the dependency graph of every declaration a schema needs.

    Args:
        schema: The resolved schema
        prefix: Nullable wrapper name prefix

    Returns:
        Nodes keyed by declaration name
    """
    graph: dict[str, DependencyNode] = {}

    def add(name: str, annotation: TypeAnnotation, deps: set[str]) -> None:
        node = graph.setdefault(name, DependencyNode(name, annotation, set()))
        node.deps |= deps

    roots: list[TypeAnnotation] = [*schema.aliases, *schema.enums]
    roots.extend(schema.types())
    for root in roots:
        for annotation in root.walk():
            if isinstance(annotation, ObjectType):
                deps = set()
                for prop in annotation.props:
                    deps |= _direct_deps(prop.type, prefix)
                add(annotation.name, annotation, deps)
            elif isinstance(annotation, EnumType):
                add(annotation.name, annotation, set())
            elif isinstance(annotation, NullableType):
                add(wrapper_name(annotation, prefix), annotation, _direct_deps(annotation.inner, prefix))
    return graph


def _name_key(name: str) -> tuple[str, str]:
    return (name.lower(), name)


def order_nodes(graph: dict[str, DependencyNode]) -> list[DependencyNode]:
    """
    Topologically sort a dependency graph, dependencies first.

    Roots and edges are visited in name order so the result is deterministic.

    Raises:
        DependencyCycleError: If declarations depend on each other in a cycle
    """
    order: list[DependencyNode] = []
    visited: set[str] = set()
    visiting: set[str] = set()

    for root in sorted(graph, key=_name_key):
        if root in visited:
            continue
        visiting.add(root)
        stack = [(root, iter(sorted(graph[root].deps, key=_name_key)))]
        while stack:
            name, deps = stack[-1]
            for dep in deps:
                if dep in visited or dep not in graph:
                    continue
                if dep in visiting:
                    raise DependencyCycleError(dep)
                visiting.add(dep)
                stack.append((dep, iter(sorted(graph[dep].deps, key=_name_key))))
                break
            else:
                stack.pop()
                visiting.discard(name)
                visited.add(name)
                order.append(graph[name])
    return order


def calc_deps_order(schema: Schema, prefix: str = "Nullable") -> list[str]:
    """
    Order every record, enum and nullable wrapper of a schema.

    Args:
        schema: The resolved schema
        prefix: Nullable wrapper name prefix

    Returns:
        Declaration names, each after all of its dependencies

    Raises:
        DependencyCycleError: If declarations depend on each other in a cycle
    """
    order = [node.name for node in order_nodes(build_dependency_graph(schema, prefix))]
    logger.debug("Dependency order of %s: %s", schema.module_name, order)
    return order
