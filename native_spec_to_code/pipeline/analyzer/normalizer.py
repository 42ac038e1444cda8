"""
Schema normalization.

Collects the record and enum types a module actually uses and assembles
a Schema with every collection sorted by case-insensitive name, so the
content hash does not depend on declaration order.
"""

from __future__ import annotations

from collections.abc import Iterable

from .ir_nodes import EnumType, Method, ObjectType, Schema, Signal, TypeAnnotation, canonical_json


def _sort_key(name: str, node) -> tuple[str, str, str]:
    # Names may differ only by case, or structurally distinct types may share a name
    return (name.lower(), name, canonical_json(node.to_dict()))


def collect_types(annotations: Iterable[TypeAnnotation]) -> tuple[set[ObjectType], set[EnumType]]:
    """Collect the transitive set of record and enum types, deduplicated by structure."""
    aliases: set[ObjectType] = set()
    enums: set[EnumType] = set()
    for annotation in annotations:
        for node in annotation.walk():
            if isinstance(node, ObjectType):
                aliases.add(node)
            elif isinstance(node, EnumType):
                enums.add(node)
    return aliases, enums


def normalize(module_name: str, methods: Iterable[Method], signals: Iterable[Signal]) -> Schema:
    """
    Build a Schema from resolved methods and signals.

    Args:
        module_name: Module name bound by the registry call
        methods: Resolved methods
        signals: Resolved signals

    Returns:
        The frozen, sorted Schema
    """
    methods = sorted(methods, key=lambda m: _sort_key(m.name, m))
    signals = sorted(signals, key=lambda s: _sort_key(s.name, s))

    roots: list[TypeAnnotation] = [annotation for method in methods for annotation in method.types()]
    roots.extend(signal.payload_type for signal in signals if signal.payload_type is not None)
    aliases, enums = collect_types(roots)

    return Schema(
        module_name=module_name,
        methods=tuple(methods),
        signals=tuple(signals),
        aliases=tuple(sorted(aliases, key=lambda a: _sort_key(a.name, a))),
        enums=tuple(sorted(enums, key=lambda e: _sort_key(e.name, e))),
    )
