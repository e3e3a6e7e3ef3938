"""
Renderer.

Reconstructs template output from a Document and its resolved values:
literal text is copied verbatim, declarations vanish, and every editable or
value reference is replaced by the textual form of its variable's value.

Values are emitted unescaped. HTML escaping, where wanted, belongs to the
caller.
"""

from typing import Mapping, Self
from balsa.lib.errors import UnresolvedVariableError
from balsa.lib.log import LOG
from balsa.models.dataModel import (
    Declaration,
    Document,
    LiteralText,
    Node,
    TypedValue,
    VarType,
)


def value_format(value: TypedValue) -> str:
    """Textual form of a value as it appears in rendered output.

    Strings and colors are emitted as-is, booleans as `true`/`false`,
    integers in decimal, integral floats without a fractional part and
    other floats in their shortest round-trip form.
    """
    raw = value.value
    if value.type is VarType.BOOLEAN:
        return "true" if raw else "false"
    if value.type is VarType.NUMBER:
        if isinstance(raw, float) and raw.is_integer():
            return str(int(raw))
        return repr(raw)
    return str(raw)


class Renderer:
    """Renders one Document; holds no per-call state."""

    def __init__(self: Self, document: Document) -> None:
        self.document: Document = document

    def render(self: Self, resolved: Mapping[str, TypedValue]) -> str:
        """Produce the output string.

        Args:
            resolved: name → value for every referenced variable

        Returns:
            The rendered text

        Raises:
            UnresolvedVariableError: If a referenced name has no value. Nothing
                is returned in that case, not even partial output
        """
        parts: list[str] = [self._node_render(node, resolved) for node in self.document.nodes]
        output: str = "".join(parts)
        LOG(f"Rendered {len(self.document.nodes)} nodes into {len(output)} characters")
        return output

    def _node_render(self: Self, node: Node, resolved: Mapping[str, TypedValue]) -> str:
        if isinstance(node, LiteralText):
            return node.content

        expr = node.expr
        if isinstance(expr, Declaration):
            return ""

        value: TypedValue | None = resolved.get(expr.name)
        if value is None:
            raise UnresolvedVariableError(name=expr.name)
        return value_format(value)


def document_render(document: Document, resolved: Mapping[str, TypedValue]) -> str:
    """Render `document` with already resolved values."""
    return Renderer(document).render(resolved)
