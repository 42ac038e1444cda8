"""
Helpers for walking tree-sitter syntax nodes.
"""

from __future__ import annotations

from collections.abc import Iterator

from tree_sitter import Node


def node_text(node: Node) -> str:
    """Decode the source text covered by a node."""
    return node.text.decode("utf-8")


def named_children(node: Node) -> list[Node]:
    """Named children of a node, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def has_token(node: Node, token: str) -> bool:
    """Check whether a node has an anonymous child token (e.g. '?')."""
    return any(not child.is_named and child.type == token for child in node.children)


def iter_nodes(node: Node) -> Iterator[Node]:
    """Pre-order traversal of a subtree."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def unwrap_declaration(node: Node) -> tuple[Node | None, bool]:
    """Strip `export` and `declare` wrappers from a module-scope statement.

    Returns:
        The wrapped declaration (or None) and whether it was ambient
    """
    declared = False
    while node is not None:
        if node.type == "export_statement":
            node = node.child_by_field_name("declaration")
        elif node.type == "ambient_declaration":
            declared = True
            children = named_children(node)
            node = children[0] if children else None
        else:
            return node, declared
    return None, declared


class StringEscapeError(ValueError):
    """An escape sequence in a string literal that does not denote a character."""

    def __init__(self, message: str, node: Node):
        super().__init__(message)
        self.message = message
        self.node = node


_SINGLE_ESCAPES = {"b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "0": "\0"}
_LINE_CONTINUATIONS = {"\n", "\r", "\r\n", "\u2028", "\u2029"}
_HEX_DIGITS = set("0123456789abcdefABCDEF")


def _decode_escape(node: Node) -> str:
    text = node_text(node)
    body = text[1:]
    if body in _LINE_CONTINUATIONS:
        return ""
    if body in _SINGLE_ESCAPES:
        return _SINGLE_ESCAPES[body]

    digits = None
    if body.startswith("u{") and body.endswith("}"):
        digits = body[2:-1]
    elif body.startswith("u") and len(body) == 5:
        digits = body[1:]
    elif body.startswith("x") and len(body) == 3:
        digits = body[1:]
    if digits is not None:
        if digits and set(digits) <= _HEX_DIGITS and int(digits, 16) <= 0x10FFFF:
            return chr(int(digits, 16))
    elif len(body) == 1 and body not in "123456789xu":
        # Identity escape, e.g. \' or \\
        return body
    raise StringEscapeError(f"Invalid escape sequence `{text}`", node)


def string_value(node: Node) -> str:
    """Value of a string literal node with JavaScript escapes decoded.

    Handles single-character escapes, `\\xXX`, `\\uXXXX`, `\\u{X...}` and line
    continuations. Surrogate pairs written as two `\\uXXXX` escapes are joined.

    Raises:
        StringEscapeError: If an escape is malformed, a legacy octal escape or
            leaves an unpaired surrogate
    """
    parts = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(node_text(child))
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(child))
    value = "".join(parts)
    try:
        return value.encode("utf-16-le", "surrogatepass").decode("utf-16-le")
    except UnicodeDecodeError:
        raise StringEscapeError("Unpaired surrogate in string literal", node) from None
