"""
Declaration validation rules.

The analyzer extracts a DeclarationFacts record for every declaration it
visits (a specification, a record type, a method, a parameter, ...). The
restrictions of the dialect are listed once in VALIDATION_TABLE as
(context, rule) pairs and evaluated together by validate().
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from ..config import CompilerConfig


class DeclarationContext(Enum):
    """Where a declaration appears."""

    SPEC = "spec"  # interface extending the module marker
    RECORD = "record"  # interface or object type alias
    ALIAS = "alias"  # nullable type alias
    ENUM = "enum"
    METHOD = "method"  # method of a specification
    PARAMETER = "parameter"
    SIGNAL = "signal"  # signal property of a specification
    FIELD = "field"  # property of a record type


@dataclass
class DeclarationFacts:
    """Syntactic facts about one declaration."""

    name: str = ""
    optional: bool = False  # `name?`
    computed: bool = False  # `[key]`
    identifier: bool = True  # name is a plain identifier
    annotated: bool = True  # carries a type annotation
    type_parameters: bool = False  # `<T>`
    extends: int = 0  # number of extended types besides the module marker
    decorated: bool = False
    initialized: bool = False  # `= value`


class ValidationRule(ABC):
    """Base class for all declaration rules."""

    @abstractmethod
    def check(self, facts: DeclarationFacts, config: CompilerConfig) -> str | None:
        """
        Check a declaration.

        Args:
            facts: Facts extracted from the declaration
            config: Compiler configuration (reserved names)

        Returns:
            An error message, or None when the declaration is allowed
        """


class ReservedTypeNameRule(ValidationRule):
    """Type names must not collide with generator-synthesized names."""

    def check(self, facts, config):
        if facts.name in config.reserved_types:
            return f"Cannot use reserved type: {facts.name}"
        if facts.name.startswith(config.nullable_prefix):
            return f"{config.nullable_prefix} prefix is not allowed: {facts.name}"
        return None


class NoTypeParametersRule(ValidationRule):
    def check(self, facts, config):
        return "Type parameters are not supported" if facts.type_parameters else None


class NoExtendsRule(ValidationRule):
    def check(self, facts, config):
        return "Interface inheritance is not supported" if facts.extends else None


class NotComputedRule(ValidationRule):
    def __init__(self, message: str):
        self.message = message

    def check(self, facts, config):
        return self.message if facts.computed else None


class NotOptionalRule(ValidationRule):
    def __init__(self, message: str):
        self.message = message

    def check(self, facts, config):
        return self.message if facts.optional else None


class IdentifierNameRule(ValidationRule):
    """Names must be plain identifiers (no string or numeric keys, no patterns)."""

    def __init__(self, message: str):
        self.message = message

    def check(self, facts, config):
        if facts.computed:
            return None  # Reported by NotComputedRule
        return None if facts.identifier else self.message


class AnnotationRequiredRule(ValidationRule):
    def __init__(self, message: str):
        self.message = message

    def check(self, facts, config):
        return None if facts.annotated else self.message


class ReservedMethodNameRule(ValidationRule):
    def check(self, facts, config):
        if facts.name == config.reserved_method_name:
            return f"Reserved method name `{config.reserved_method_name}` is not allowed"
        return None


class ReservedArgNameRule(ValidationRule):
    def check(self, facts, config):
        if facts.name == config.reserved_arg_name:
            return f"Reserved argument name `{config.reserved_arg_name}` is not allowed"
        return None


class NoDecoratorRule(ValidationRule):
    def check(self, facts, config):
        return "Parameter decorators are not supported" if facts.decorated else None


class NoInitializerRule(ValidationRule):
    def check(self, facts, config):
        return "Default parameter values are not supported" if facts.initialized else None


INVALID_COMPUTED_SIG = "Computed signature is not supported"
INVALID_COMPUTED_PROP = "Computed property is not supported"
INVALID_OPTIONAL_SIG = "Optional signature is not supported"
INVALID_OPTIONAL_PROP = "Optional property is not supported"
INVALID_OPTIONAL_PARAM = "Optional parameter is not supported"

_TYPE_NAME = ReservedTypeNameRule()
_TYPE_PARAMS = NoTypeParametersRule()

VALIDATION_TABLE: list[tuple[DeclarationContext, ValidationRule]] = [
    # Declarations
    (DeclarationContext.SPEC, _TYPE_PARAMS),
    (DeclarationContext.RECORD, _TYPE_NAME),
    (DeclarationContext.RECORD, _TYPE_PARAMS),
    (DeclarationContext.RECORD, NoExtendsRule()),
    (DeclarationContext.ALIAS, _TYPE_NAME),
    (DeclarationContext.ALIAS, _TYPE_PARAMS),
    (DeclarationContext.ENUM, _TYPE_NAME),
    # Specification members
    (DeclarationContext.METHOD, NotComputedRule(INVALID_COMPUTED_SIG)),
    (DeclarationContext.METHOD, IdentifierNameRule("Method name must be an identifier")),
    (DeclarationContext.METHOD, NotOptionalRule(INVALID_OPTIONAL_SIG)),
    (DeclarationContext.METHOD, ReservedMethodNameRule()),
    (DeclarationContext.METHOD, _TYPE_PARAMS),
    (DeclarationContext.METHOD, AnnotationRequiredRule("Return type annotation is required")),
    (DeclarationContext.SIGNAL, NotComputedRule(INVALID_COMPUTED_PROP)),
    (DeclarationContext.SIGNAL, IdentifierNameRule("Signal name must be an identifier")),
    (DeclarationContext.SIGNAL, NotOptionalRule(INVALID_OPTIONAL_PROP)),
    (DeclarationContext.SIGNAL, ReservedMethodNameRule()),
    # Parameters
    (DeclarationContext.PARAMETER, IdentifierNameRule("Parameter must be a plain identifier")),
    (DeclarationContext.PARAMETER, NotOptionalRule(INVALID_OPTIONAL_PARAM)),
    (DeclarationContext.PARAMETER, ReservedArgNameRule()),
    (DeclarationContext.PARAMETER, NoDecoratorRule()),
    (DeclarationContext.PARAMETER, NoInitializerRule()),
    (DeclarationContext.PARAMETER, AnnotationRequiredRule("Parameter type annotation is required")),
    # Record fields
    (DeclarationContext.FIELD, NotComputedRule(INVALID_COMPUTED_PROP)),
    (DeclarationContext.FIELD, IdentifierNameRule("Property name must be an identifier")),
    (DeclarationContext.FIELD, NotOptionalRule(INVALID_OPTIONAL_PROP)),
    (DeclarationContext.FIELD, AnnotationRequiredRule("Property type annotation is required")),
]


def validate(context: DeclarationContext, facts: DeclarationFacts, config: CompilerConfig) -> list[str]:
    """Evaluate every rule registered for a context.

    Returns:
        Error messages, in table order
    """
    messages = []
    for rule_context, rule in VALIDATION_TABLE:
        if rule_context != context:
            continue
        message = rule.check(facts, config)
        if message is not None:
            messages.append(message)
    return messages
