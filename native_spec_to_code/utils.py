"""
Utility functions for identifier casing.
"""

import re

# Split identifiers into words, keeping acronyms and trailing digits together
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])[0-9]*|[A-Z]?[a-z]+[0-9]*|[0-9]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(_normalize_separators(text))


def pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or kebab-case text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "getUser" -> "GetUser"
        "craby-test" -> "CrabyTest"

    Args:
        text: The text to convert

    Returns:
        PascalCase string
    """
    return "".join(word[:1].upper() + word[1:].lower() for word in _split_into_words(text))


def camel_case(text: str) -> str:
    """Convert text to camelCase ("get_user" -> "getUser")."""
    words = _split_into_words(text)
    if not words:
        return ""
    head, *rest = words
    return head.lower() + "".join(word[:1].upper() + word[1:].lower() for word in rest)


def snake_case(text: str) -> str:
    """Convert text to snake_case.

    Examples:
        "getUser" -> "get_user"
        "CrabyTest" -> "craby_test"
        "myHTTPClient" -> "my_http_client"
        "arg0" -> "arg0"
    """
    return "_".join(word.lower() for word in _split_into_words(text))
