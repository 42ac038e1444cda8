"""
Tests for reference resolution over the declaration arena.
"""

import unittest

from native_spec_to_code.pipeline.analyzer import (
    ArrayType,
    Method,
    NullableType,
    NumberType,
    ObjectType,
    Param,
    PromiseType,
    Prop,
    RefType,
    ReferenceResolver,
    Signal,
    StringType,
    TypeDecl,
)
from native_spec_to_code.pipeline.diagnostics import DependencyCycleError, InternalError, UnresolvedReferenceError


def decl(symbol, name, annotation):
    return TypeDecl(symbol=symbol, name=name, annotation=annotation)


class TestReferenceResolver(unittest.TestCase):
    def setUp(self):
        self.decls = {
            1: decl(1, "User", ObjectType("User", (Prop("name", StringType()), Prop("friend", RefType(2, "MaybeFriend"))))),
            2: decl(2, "MaybeFriend", NullableType(RefType(3, "Friend"))),
            3: decl(3, "Friend", ObjectType("Friend", (Prop("id", NumberType()),))),
        }
        self.resolver = ReferenceResolver(self.decls)

    def test_resolves_nested_references(self):
        resolved = self.resolver.resolve(RefType(1, "User"))
        friend = ObjectType("Friend", (Prop("id", NumberType()),))
        self.assertEqual(
            resolved,
            ObjectType("User", (Prop("name", StringType()), Prop("friend", NullableType(friend)))),
        )

    def test_resolves_through_wrappers(self):
        resolved = self.resolver.resolve(PromiseType(ArrayType(RefType(3, "Friend"))))
        self.assertEqual(resolved, PromiseType(ArrayType(ObjectType("Friend", (Prop("id", NumberType()),)))))

    def test_nullable_alias_in_nullable_position_collapses(self):
        resolved = self.resolver.resolve(NullableType(RefType(2, "MaybeFriend")))
        self.assertIsInstance(resolved, NullableType)
        self.assertIsInstance(resolved.inner, ObjectType)

    def test_memoizes_declarations(self):
        first = self.resolver.resolve(RefType(3, "Friend"))
        second = self.resolver.resolve(RefType(3, "Friend"))
        self.assertIs(first, second)

    def test_resolve_method_and_signal(self):
        method = self.resolver.resolve_method(Method("get", (Param("id", NumberType()),), RefType(3, "Friend")))
        self.assertIsInstance(method.ret_type, ObjectType)
        signal = self.resolver.resolve_signal(Signal("onFriend", RefType(3, "Friend")))
        self.assertEqual(signal.payload_type.name, "Friend")
        self.assertEqual(self.resolver.resolve_signal(Signal("onDone")), Signal("onDone"))

    def test_unknown_symbol_is_internal_error(self):
        with self.assertRaises(UnresolvedReferenceError) as ctx:
            self.resolver.resolve(RefType(99, "Ghost"))
        self.assertIsInstance(ctx.exception, InternalError)
        self.assertEqual(ctx.exception.name, "Ghost")

    def test_cycle_names_participant(self):
        decls = {
            1: decl(1, "A", ObjectType("A", (Prop("b", RefType(2, "B")),))),
            2: decl(2, "B", ObjectType("B", (Prop("a", NullableType(RefType(1, "A"))),))),
        }
        with self.assertRaises(DependencyCycleError) as ctx:
            ReferenceResolver(decls).resolve(RefType(1, "A"))
        self.assertIn(ctx.exception.participant, {"A", "B"})
        self.assertIn("Circular dependency detected involving:", str(ctx.exception))

    def test_self_reference(self):
        decls = {1: decl(1, "Node", ObjectType("Node", (Prop("next", NullableType(RefType(1, "Node"))),)))}
        with self.assertRaises(DependencyCycleError) as ctx:
            ReferenceResolver(decls).resolve_decl(decls[1])
        self.assertEqual(ctx.exception.participant, "Node")


if __name__ == "__main__":
    unittest.main()
