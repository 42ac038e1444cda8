"""
Specification analyzer.

Walks a parsed source unit and collects:
- module specifications (interfaces extending the NativeModule marker)
- user-defined types (record interfaces, object and nullable type aliases, enums)
- registry calls binding a specification to a module name

Every dialect violation becomes a Diagnostic; collection continues so all
problems of a unit are reported together.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from tree_sitter import Node

from ...utils import snake_case
from ..config import CompilerConfig
from ..diagnostics import Diagnostic, Span
from ..schema_ast.nodes import (
    StringEscapeError,
    has_token,
    iter_nodes,
    named_children,
    node_text,
    string_value,
    unwrap_declaration,
)
from ..schema_ast.parser import SourceUnit
from ..schema_ast.scoping import SymbolKind
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
    Signal,
    StringType,
    TypeAnnotation,
    VoidType,
    nullable,
)
from .validation_rules import DeclarationContext, DeclarationFacts, validate

logger = logging.getLogger(__name__)

INVALID_SPEC = "Invalid specification"
INVALID_TYPE_REFERENCE = "Invalid type reference"
INVALID_NO_SPEC_GENERIC = "NativeModule specification generic argument is required"
INVALID_FUNC_PARAM = "Function parameter is not supported"
INVALID_TYPE_LITERAL = "Type literal is not supported. Use defined type reference instead"
INVALID_UNION_TYPE = "Union types only allow nullable type (eg. `T | null`)"
INVALID_MIXED_ENUM_MEMBER = "Enum member type must be single type (eg. only `number` or `string`)"
INVALID_REGISTRY_METHOD = "Invalid NativeModuleRegistry method"

_PREDEFINED_TYPES: dict[str, TypeAnnotation] = {
    "boolean": BooleanType(),
    "number": NumberType(),
    "string": StringType(),
}


class TypePosition(Enum):
    """Syntactic position of a type annotation."""

    PARAM = "param"
    RETURN = "return"
    PROMISE = "promise"  # Promise<T> argument
    FIELD = "field"
    PAYLOAD = "payload"  # Signal<T> argument
    ALIAS = "alias"
    ELEMENT = "element"  # T[] element


class _InvalidType(Exception):
    """A type annotation outside the dialect."""

    def __init__(self, message: str, node: Node):
        super().__init__(message)
        self.message = message
        self.node = node


@dataclass
class SpecDecl:
    """A module specification interface."""

    symbol: int
    name: str
    methods: list[Method] = field(default_factory=list)
    signals: list[Signal] = field(default_factory=list)
    span: Span = field(default_factory=Span)


@dataclass
class _MemberNames:
    """Member names seen in one specification."""

    kinds: dict[str, str] = field(default_factory=dict)  # name -> "method" | "signal"
    projected: dict[str, str] = field(default_factory=dict)  # snake_case name -> name


@dataclass
class TypeDecl:
    """A user-defined type, keyed by symbol id in the declaration arena."""

    symbol: int
    name: str
    annotation: TypeAnnotation  # ObjectType, EnumType or NullableType
    span: Span = field(default_factory=Span)


@dataclass
class ModuleBinding:
    """A registry call binding a specification to a module name."""

    module_name: str
    spec_symbol: int
    spec_name: str
    span: Span = field(default_factory=Span)


@dataclass
class MarkerSymbols:
    """Symbols imported from the marker package."""

    module: int | None = None  # NativeModule
    signal: int | None = None  # Signal
    registry: int | None = None  # NativeModuleRegistry
    namespaces: set[int] = field(default_factory=set)  # import * as NS


@dataclass
class AnalysisResult:
    """Output of the analyzer for one source unit."""

    specs: dict[int, SpecDecl] = field(default_factory=dict)
    decls: dict[int, TypeDecl] = field(default_factory=dict)
    bindings: list[ModuleBinding] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.diagnostics


class SpecAnalyzer:
    """
    Collects declarations and validates the specification dialect.

    Pass 1 reads imports from the marker package, pass 2 visits module-scope
    declarations and every call expression.
    """

    def __init__(self, unit: SourceUnit, config: CompilerConfig | None = None):
        """
        Initialize the analyzer.

        Args:
            unit: Parsed source unit
            config: Compiler configuration
        """
        self.unit = unit
        self.config = config or CompilerConfig()
        self.scoping = unit.scoping
        self.markers = MarkerSymbols()
        self.result = AnalysisResult()

        # Type references seen while converting annotations, checked once all decls are known
        self._refs: list[tuple[RefType, Node]] = []
        # Type declarations that failed validation
        self._invalid: set[int] = set()

    def analyze(self) -> AnalysisResult:
        """Run both passes and the final consistency checks."""
        self._collect_markers()

        for statement in named_children(self.unit.root):
            declaration, declared = unwrap_declaration(statement)
            if declaration is None or declared:
                continue
            if declaration.type == "interface_declaration":
                if self._is_spec(declaration):
                    self._collect_spec(declaration)
                else:
                    self._collect_interface_type(declaration)
            elif declaration.type == "type_alias_declaration":
                self._collect_alias_type(declaration)
            elif declaration.type == "enum_declaration":
                self._collect_enum_type(declaration)

        for node in iter_nodes(self.unit.root):
            if node.type == "call_expression":
                self._collect_binding(node)

        self._finish()
        self.result.diagnostics.sort(key=lambda d: d.span.start_byte)
        logger.debug("Collected decls: %s", [decl.name for decl in self.result.decls.values()])
        return self.result

    # Pass 1

    def _collect_markers(self) -> None:
        for symbol in self.scoping.imports_from(self.config.marker_package):
            if symbol.kind == SymbolKind.NAMESPACE_IMPORT:
                self.markers.namespaces.add(symbol.id)
            elif symbol.imported_name == self.config.module_interface:
                self.markers.module = symbol.id
            elif symbol.imported_name == self.config.signal_type:
                self.markers.signal = symbol.id
            elif symbol.imported_name == self.config.registry_name:
                self.markers.registry = symbol.id

    def _is_namespace(self, node: Node | None) -> bool:
        if node is None or node.type not in ("identifier", "type_identifier"):
            return False
        return self.scoping.resolve_value(node_text(node)) in self.markers.namespaces

    def _is_marker_type(self, node: Node, symbol: int | None, name: str) -> bool:
        """Check whether a type name node denotes a marker type."""
        if node.type in ("type_identifier", "identifier"):
            return symbol is not None and self.scoping.resolve_type(node_text(node)) == symbol
        if node.type == "nested_type_identifier":
            return self._is_namespace(node.child_by_field_name("module")) and node_text(node.child_by_field_name("name")) == name
        if node.type == "member_expression":
            return self._is_namespace(node.child_by_field_name("object")) and node_text(node.child_by_field_name("property")) == name
        if node.type == "generic_type":
            return self._is_marker_type(node.child_by_field_name("name"), symbol, name)
        return False

    # Pass 2: declarations

    def _extends(self, declaration: Node) -> list[Node]:
        types = []
        for child in named_children(declaration):
            if child.type in ("extends_type_clause", "extends_clause"):
                types.extend(named_children(child))
        return types

    def _is_spec(self, declaration: Node) -> bool:
        return any(
            self._is_marker_type(node, self.markers.module, self.config.module_interface) for node in self._extends(declaration)
        )

    def _error(self, message: str, node: Node) -> None:
        self.result.diagnostics.append(Diagnostic(message, self.unit.span(node)))

    def _string(self, node: Node) -> str | None:
        try:
            return string_value(node)
        except StringEscapeError as e:
            self._error(e.message, e.node)
            return None

    def _check(self, context: DeclarationContext, facts: DeclarationFacts, node: Node) -> bool:
        messages = validate(context, facts, self.config)
        for message in messages:
            self._error(message, node)
        return not messages

    def _member_facts(self, member: Node) -> DeclarationFacts:
        name_node = member.child_by_field_name("name")
        name_type = name_node.type if name_node is not None else ""
        return DeclarationFacts(
            name=node_text(name_node) if name_node is not None else "",
            optional=has_token(member, "?"),
            computed=name_type == "computed_property_name",
            identifier=name_type == "property_identifier",
            annotated=member.child_by_field_name("type") is not None,
            type_parameters=member.child_by_field_name("type_parameters") is not None,
        )

    def _interface_members(self, declaration: Node) -> list[Node]:
        body = declaration.child_by_field_name("body")
        return named_children(body) if body is not None else []

    def _collect_spec(self, declaration: Node) -> None:
        name = node_text(declaration.child_by_field_name("name"))
        symbol = self.scoping.symbol_of(declaration)
        extends = [
            node
            for node in self._extends(declaration)
            if not self._is_marker_type(node, self.markers.module, self.config.module_interface)
        ]
        facts = DeclarationFacts(
            name=name,
            type_parameters=declaration.child_by_field_name("type_parameters") is not None,
            extends=len(extends),
        )
        self._check(DeclarationContext.SPEC, facts, declaration)
        if extends:
            self._error("Interface inheritance is not supported", extends[0])

        spec = SpecDecl(symbol=symbol, name=name, span=self.unit.span(declaration))
        members = _MemberNames()
        for member in self._interface_members(declaration):
            if member.type == "method_signature":
                method = self._to_method(member)
                if method is not None and self._unique_member(members, "method", method.name, member):
                    spec.methods.append(method)
            elif member.type == "property_signature" and self._is_signal_property(member):
                signal = self._to_signal(member)
                if signal is not None and self._unique_member(members, "signal", signal.name, member):
                    spec.signals.append(signal)
            else:
                self._error(f"{INVALID_SPEC}: only methods and signals are allowed in `{name}`", member)

        logger.debug("Specification found: %s (%d methods, %d signals)", name, len(spec.methods), len(spec.signals))
        self.result.specs[symbol] = spec

    def _unique_member(self, members: _MemberNames, kind: str, name: str, node: Node) -> bool:
        """Report a member whose name or snake_case form is already taken."""
        if name in members.kinds:
            if members.kinds[name] == kind:
                self._error(f"Duplicate {kind}: {name}", node)
            else:
                self._error(f"Duplicate member: `{name}` is declared as both a method and a signal", node)
            return False
        projected = snake_case(name)
        if projected in members.projected:
            other = members.projected[projected]
            self._error(f"{kind.capitalize()} `{name}` conflicts with `{other}` (both generate `{projected}`)", node)
            return False
        members.kinds[name] = kind
        members.projected[projected] = name
        return True

    def _to_method(self, member: Node) -> Method | None:
        facts = self._member_facts(member)
        facts.annotated = member.child_by_field_name("return_type") is not None
        if not self._check(DeclarationContext.METHOD, facts, member):
            return None

        params = []
        valid = True
        parameters = member.child_by_field_name("parameters")
        for param_node in named_children(parameters) if parameters is not None else []:
            param = self._to_param(param_node)
            if param is None:
                valid = False
            else:
                params.append(param)

        ret_type = self._convert_or_report(member.child_by_field_name("return_type"), TypePosition.RETURN)
        if ret_type is None or not valid:
            return None
        return Method(name=facts.name, params=tuple(params), ret_type=ret_type)

    def _to_param(self, node: Node) -> Param | None:
        pattern = node.child_by_field_name("pattern")
        facts = DeclarationFacts(
            name=node_text(pattern) if pattern is not None else "",
            optional=node.type == "optional_parameter",
            identifier=pattern is not None and pattern.type == "identifier",
            annotated=node.child_by_field_name("type") is not None,
            decorated=any(child.type == "decorator" for child in named_children(node)),
            initialized=node.child_by_field_name("value") is not None,
        )
        if node.type not in ("required_parameter", "optional_parameter"):
            facts.identifier = False
        if not self._check(DeclarationContext.PARAMETER, facts, node):
            return None

        annotation = self._convert_or_report(node.child_by_field_name("type"), TypePosition.PARAM)
        if annotation is None:
            return None
        return Param(name=facts.name, type=annotation)

    def _signal_type_node(self, member: Node) -> Node | None:
        annotation = member.child_by_field_name("type")
        if annotation is None:
            return None
        children = named_children(annotation)
        return children[0] if children else None

    def _is_signal_property(self, member: Node) -> bool:
        type_node = self._signal_type_node(member)
        return type_node is not None and self._is_marker_type(type_node, self.markers.signal, self.config.signal_type)

    def _to_signal(self, member: Node) -> Signal | None:
        if not self._check(DeclarationContext.SIGNAL, self._member_facts(member), member):
            return None

        name = node_text(member.child_by_field_name("name"))
        type_node = self._signal_type_node(member)
        if type_node.type != "generic_type":
            return Signal(name=name)

        arguments = type_node.child_by_field_name("type_arguments")
        args = named_children(arguments) if arguments is not None else []
        if len(args) > 1:
            self._error("Signal accepts at most one payload type argument", arguments)
            return None
        if not args:
            return Signal(name=name)
        payload = self._convert_or_report(args[0], TypePosition.PAYLOAD)
        if payload is None:
            return None
        return Signal(name=name, payload_type=payload)

    def _collect_props(self, owner: str, members: list[Node]) -> list[Prop] | None:
        props = []
        valid = True
        seen = set()
        for member in members:
            if member.type != "property_signature":
                self._error(f"{INVALID_SPEC}: record type `{owner}` may only contain properties", member)
                valid = False
                continue
            facts = self._member_facts(member)
            if not self._check(DeclarationContext.FIELD, facts, member):
                valid = False
                continue
            if facts.name in seen:
                self._error(f"Duplicate property: {facts.name}", member)
                valid = False
                continue
            seen.add(facts.name)
            annotation = self._convert_or_report(member.child_by_field_name("type"), TypePosition.FIELD)
            if annotation is None:
                valid = False
                continue
            props.append(Prop(name=facts.name, type=annotation))
        return props if valid else None

    def _register_type(self, declaration: Node, name: str, annotation: TypeAnnotation | None) -> None:
        symbol = self.scoping.symbol_of(declaration)
        if annotation is None:
            self._invalid.add(symbol)
            return
        self.result.decls[symbol] = TypeDecl(symbol=symbol, name=name, annotation=annotation, span=self.unit.span(declaration))

    def _collect_interface_type(self, declaration: Node) -> None:
        name = node_text(declaration.child_by_field_name("name"))
        facts = DeclarationFacts(
            name=name,
            type_parameters=declaration.child_by_field_name("type_parameters") is not None,
            extends=len(self._extends(declaration)),
        )
        valid = self._check(DeclarationContext.RECORD, facts, declaration)
        props = self._collect_props(name, self._interface_members(declaration))
        annotation = ObjectType(name=name, props=tuple(props)) if valid and props is not None else None
        self._register_type(declaration, name, annotation)

    def _collect_alias_type(self, declaration: Node) -> None:
        name = node_text(declaration.child_by_field_name("name"))
        value = declaration.child_by_field_name("value")
        type_parameters = declaration.child_by_field_name("type_parameters") is not None
        facts = DeclarationFacts(name=name, type_parameters=type_parameters)

        annotation = None
        if value is not None and value.type == "object_type":
            valid = self._check(DeclarationContext.RECORD, facts, declaration)
            props = self._collect_props(name, named_children(value))
            if valid and props is not None:
                annotation = ObjectType(name=name, props=tuple(props))
        elif value is not None and value.type == "union_type":
            valid = self._check(DeclarationContext.ALIAS, facts, declaration)
            converted = self._convert_or_report(value, TypePosition.ALIAS)
            if valid and converted is not None:
                annotation = converted
        else:
            self._check(DeclarationContext.ALIAS, facts, declaration)
            self._error("Type alias must be an object type or a nullable type (eg. `T | null`)", value or declaration)

        self._register_type(declaration, name, annotation)

    def _collect_enum_type(self, declaration: Node) -> None:
        name = node_text(declaration.child_by_field_name("name"))
        if not self._check(DeclarationContext.ENUM, DeclarationFacts(name=name), declaration):
            self._register_type(declaration, name, None)
            return

        body = declaration.child_by_field_name("body")
        members = []
        is_string = None
        next_value = 0
        names = set()
        values = set()
        valid = True

        for member in named_children(body) if body is not None else []:
            if member.type == "enum_assignment":
                children = named_children(member)
                name_node = children[0]
                value_node = member.child_by_field_name("value") or children[-1]
            else:
                name_node, value_node = member, None

            if name_node.type != "property_identifier":
                self._error("Enum member name must be an identifier", name_node)
                valid = False
                continue
            member_name = node_text(name_node)

            if value_node is None:
                member_is_string, value = False, next_value
            elif value_node.type == "string":
                value = self._string(value_node)
                if value is None:
                    valid = False
                    continue
                member_is_string = True
            elif value_node.type == "number":
                text = node_text(value_node)
                if text.endswith("n"):
                    self._error("BigInt is not supported in enum", value_node)
                    valid = False
                    continue
                try:
                    value = _parse_integer(text)
                except ValueError:
                    self._error(f"Invalid number literal in enum: {text}", value_node)
                    valid = False
                    continue
                if value is None:
                    self._error("Float number is not supported in enum", value_node)
                    valid = False
                    continue
                member_is_string = False
            elif value_node.type == "unary_expression" and node_text(value_node).lstrip().startswith("-"):
                self._error("Negative number is not supported in enum", value_node)
                valid = False
                continue
            else:
                self._error(f"{INVALID_SPEC}: enum member value must be a string or number literal", value_node)
                valid = False
                continue

            if is_string is None:
                is_string = member_is_string
            elif is_string != member_is_string:
                self._error(INVALID_MIXED_ENUM_MEMBER, declaration)
                self._register_type(declaration, name, None)
                return

            if member_name in names:
                self._error(f"Duplicate enum member: {member_name}", name_node)
                valid = False
            elif value in values:
                self._error(f"Duplicate enum value: {value!r}", member)
                valid = False
            names.add(member_name)
            values.add(value)

            if not member_is_string:
                next_value = value + 1
            members.append(EnumMember(name=member_name, value=value))

        if valid and not members:
            self._error("Enum must have at least one member", declaration)
            valid = False

        annotation = EnumType(name=name, members=tuple(members)) if valid else None
        self._register_type(declaration, name, annotation)

    # Type annotations

    def _convert_or_report(self, node: Node | None, position: TypePosition) -> TypeAnnotation | None:
        if node is None:
            return None
        try:
            return self._convert_type(node, position)
        except _InvalidType as e:
            self._error(e.message, e.node)
            return None

    def _convert_type(self, node: Node, position: TypePosition) -> TypeAnnotation:
        """
        Convert a type node into a type annotation.

        Raises:
            _InvalidType: If the type is outside the dialect
        """
        if node.type in ("type_annotation", "parenthesized_type"):
            children = named_children(node)
            if len(children) != 1:
                raise _InvalidType(INVALID_SPEC, node)
            return self._convert_type(children[0], position)

        if node.type == "predefined_type":
            text = node_text(node)
            if text == "void":
                if position not in (TypePosition.RETURN, TypePosition.PROMISE):
                    raise _InvalidType("`void` is only allowed as a method return type", node)
                return VoidType()
            if text in _PREDEFINED_TYPES:
                return _PREDEFINED_TYPES[text]
            raise _InvalidType(f"Unsupported type: `{text}`", node)

        if node.type == "type_identifier":
            return self._convert_reference(node, position)

        if node.type == "generic_type":
            return self._convert_generic(node, position)

        if node.type == "array_type":
            children = named_children(node)
            element = self._convert_type(children[0], TypePosition.ELEMENT)
            if isinstance(element, ArrayType):
                raise _InvalidType("Nested array type is not supported", node)
            return ArrayType(element)

        if node.type == "union_type":
            return self._convert_union(node, position)

        if node.type == "literal_type":
            if node_text(node) == "null":
                raise _InvalidType("`null` is only allowed in a nullable union (eg. `T | null`)", node)
            raise _InvalidType("Literal types are not supported", node)

        if node.type == "object_type":
            raise _InvalidType(INVALID_TYPE_LITERAL, node)
        if node.type in ("function_type", "constructor_type"):
            raise _InvalidType(INVALID_FUNC_PARAM, node)
        if node.type == "intersection_type":
            raise _InvalidType("Intersection types are not supported", node)
        if node.type == "tuple_type":
            raise _InvalidType("Tuple types are not supported", node)
        if node.type == "nested_type_identifier":
            raise _InvalidType(f"{INVALID_TYPE_REFERENCE}: {node_text(node)}", node)
        raise _InvalidType(f"Unsupported type: `{node_text(node)}`", node)

    def _convert_reference(self, node: Node, position: TypePosition) -> TypeAnnotation:
        name = node_text(node)
        symbol = self.scoping.resolve_type(name)

        if name in self.config.reserved_types:
            raise _InvalidType("Invalid promise type", node)
        if symbol is None and name == "ArrayBuffer":
            return ArrayBufferType()
        if symbol is None:
            raise _InvalidType(f"Unknown type reference: {name}", node)
        if self._is_marker_type(node, self.markers.signal, self.config.signal_type):
            raise _InvalidType("Signal type is only allowed as a specification property", node)

        ref = RefType(symbol=symbol, name=name)
        self._refs.append((ref, node))
        return ref

    def _convert_generic(self, node: Node, position: TypePosition) -> TypeAnnotation:
        name_node = node.child_by_field_name("name")
        arguments = node.child_by_field_name("type_arguments")
        args = named_children(arguments) if arguments is not None else []
        name = node_text(name_node)

        if name in self.config.reserved_types and self.scoping.resolve_type(name) is None:
            if len(args) != 1:
                raise _InvalidType("Invalid promise type", node)
            if position != TypePosition.RETURN:
                raise _InvalidType("Promise type is only allowed as a method return type", node)
            return PromiseType(self._convert_type(args[0], TypePosition.PROMISE))

        if name == "Array" and self.scoping.resolve_type(name) is None and len(args) == 1:
            element = self._convert_type(args[0], TypePosition.ELEMENT)
            if isinstance(element, ArrayType):
                raise _InvalidType("Nested array type is not supported", node)
            return ArrayType(element)

        if self._is_marker_type(name_node, self.markers.signal, self.config.signal_type):
            raise _InvalidType("Signal type is only allowed as a specification property", node)
        raise _InvalidType("Type parameters are not supported", node)

    def _union_arms(self, node: Node) -> list[Node]:
        arms = []
        for child in named_children(node):
            if child.type == "union_type":
                arms.extend(self._union_arms(child))
            else:
                arms.append(child)
        return arms

    def _convert_union(self, node: Node, position: TypePosition) -> TypeAnnotation:
        arms = self._union_arms(node)
        if len(arms) != 2:
            raise _InvalidType(INVALID_UNION_TYPE, node)

        null_arms = [arm for arm in arms if node_text(arm) == "null"]
        if len(null_arms) != 1:
            raise _InvalidType(INVALID_UNION_TYPE, node)
        base_node = arms[1] if arms[0] is null_arms[0] else arms[0]

        base_position = TypePosition.FIELD if position == TypePosition.ALIAS else position
        base = self._convert_type(base_node, base_position)
        if isinstance(base, PromiseType):
            raise _InvalidType("Promise type cannot be nullable", node)
        if isinstance(base, VoidType):
            raise _InvalidType("Void type cannot be nullable", node)
        return nullable(base)

    # Pass 2: registry calls

    def _collect_binding(self, call: Node) -> None:
        function = call.child_by_field_name("function")
        if function is None or function.type != "member_expression":
            return

        target = function.child_by_field_name("object")
        method = node_text(function.child_by_field_name("property"))
        if not self._is_registry(target):
            return
        if method not in self.config.registry_methods:
            self._error(INVALID_REGISTRY_METHOD, function.child_by_field_name("property"))
            return

        spec = self._binding_spec(call)
        module_name = self._binding_module_name(call)
        if spec is None or module_name is None:
            return

        logger.debug("NativeModule found: %s", module_name)
        symbol, spec_name = spec
        self.result.bindings.append(
            ModuleBinding(module_name=module_name, spec_symbol=symbol, spec_name=spec_name, span=self.unit.span(call))
        )

    def _is_registry(self, node: Node | None) -> bool:
        if node is None:
            return False
        if node.type == "identifier":
            symbol = self.scoping.resolve_value(node_text(node))
            return symbol is not None and symbol == self.markers.registry
        if node.type == "member_expression":
            return (
                self._is_namespace(node.child_by_field_name("object"))
                and node_text(node.child_by_field_name("property")) == self.config.registry_name
            )
        return False

    def _binding_spec(self, call: Node) -> tuple[int, str] | None:
        arguments = call.child_by_field_name("type_arguments")
        args = named_children(arguments) if arguments is not None else []
        if not args:
            self._error(INVALID_NO_SPEC_GENERIC, call)
            return None
        if len(args) != 1:
            self._error("NativeModule specification generic argument must be exactly one", arguments)
            return None

        arg = args[0]
        if arg.type != "type_identifier":
            self._error("Specification generic argument must be a type reference", arg)
            return None
        name = node_text(arg)
        symbol = self.scoping.resolve_type(name)
        if symbol is None:
            self._error(f"Invalid specification type reference: {name}", arg)
            return None
        return symbol, name

    def _binding_module_name(self, call: Node) -> str | None:
        arguments = call.child_by_field_name("arguments")
        args = named_children(arguments) if arguments is not None else []
        if not args:
            self._error("NativeModule name is required", call)
            return None
        if args[0].type != "string":
            self._error("NativeModule name must be a string literal", args[0])
            return None

        module_name = self._string(args[0])
        if module_name is None:
            return None
        if any(binding.module_name == module_name for binding in self.result.bindings):
            self._error("Duplicate module name", args[0])
            return None
        return module_name

    # Final checks

    def _finish(self) -> None:
        bound: dict[int, ModuleBinding] = {}
        for binding in self.result.bindings:
            if binding.spec_symbol not in self.result.specs:
                self.result.diagnostics.append(
                    Diagnostic(f"`{binding.spec_name}` is not a NativeModule specification", binding.span)
                )
            elif binding.spec_symbol in bound:
                previous = bound[binding.spec_symbol].module_name
                self.result.diagnostics.append(
                    Diagnostic(f"Specification `{binding.spec_name}` is already registered as `{previous}`", binding.span)
                )
            else:
                bound[binding.spec_symbol] = binding

        for symbol, spec in self.result.specs.items():
            if symbol not in bound:
                self.result.diagnostics.append(Diagnostic(f"NativeModule specification is not registered: {spec.name}", spec.span))

        if not self.result.specs and not self.result.bindings:
            self.result.diagnostics.append(Diagnostic("NativeModule specification not found", self.unit.span(self.unit.root)))

        for ref, node in self._refs:
            if ref.symbol in self.result.decls or ref.symbol in self._invalid:
                continue
            self._error(f"{INVALID_TYPE_REFERENCE}: {ref.name}", node)


def _parse_integer(text: str) -> int | None:
    """Parse an integer numeric literal; None for floats.

    Raises:
        ValueError: For legacy octal literals (e.g. `010`) and malformed digits
    """
    text = text.replace("_", "")
    lowered = text.lower()
    if lowered.startswith(("0x", "0o", "0b")):
        return int(lowered, 0)
    if "." in lowered or "e" in lowered:
        return None
    if len(lowered) > 1 and lowered.startswith("0"):
        raise ValueError(f"legacy octal literal: {text}")
    return int(lowered, 10)


def analyze(unit: SourceUnit, config: CompilerConfig | None = None) -> AnalysisResult:
    """Analyze a parsed source unit."""
    return SpecAnalyzer(unit, config).analyze()
