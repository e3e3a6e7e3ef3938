r"""
Recursive-descent parser for placeholder expressions.

Each `{{ ... }}` span is parsed independently into one of three expressions.
Parsing is pure: it never consults or updates the variable registry.

Grammar:
    placeholder  → declaration | valueRef | editableRef
    declaration  → "@" IDENT ":" typeName ( "=" valueExpr )?
    valueRef     → "$" IDENT
    editableRef  → IDENT ( ":" typeName )? ( "," metaPair )*
    metaPair     → "type" ":" typeName
                 | "friendlyName" ":" STRING
                 | "defaultValue" ":" valueExpr
    valueExpr    → STRING | NUMBER | BOOLEAN | "$" IDENT
    typeName     → "string" | "number" | "boolean" | "color"

Example:
    parser = ExpressionParser()
    expr = parser.parse('headerText : string, friendlyName: "Header text"')
    # EditableReference(name='headerText', type=VarType.STRING, ...)
"""

import math
import re
from typing import Final, Optional, Self
from balsa.lib.errors import TemplateSyntaxError
from balsa.lib.log import LOG
from balsa.lib.parser.lexer import PlaceholderLexer, Token
from balsa.lib.scanner import template_scan
from balsa.models.dataModel import (
    Declaration,
    Document,
    EditableReference,
    Expression,
    LiteralExpr,
    LiteralText,
    Node,
    Placeholder,
    TypedValue,
    ValueExpr,
    ValueReference,
    VariableRef,
    VarType,
)

META_KEYS: Final[tuple[str, ...]] = ("type", "friendlyName", "defaultValue")
TYPE_NAMES: Final[str] = ", ".join(t.value for t in VarType)
_INTEGER_RE: Final[re.Pattern[str]] = re.compile(r"-?\d+")


class ExpressionParser:
    """
    Parses the content of a single placeholder.

    An instance keeps the token cursor of the placeholder being parsed, so
    it must not be shared between threads; `document_parse` creates its own.
    """

    def __init__(self: Self) -> None:
        self.lexer: PlaceholderLexer = PlaceholderLexer()
        self._tokens: list[Token] = []
        self._position: int = 0

    def parse(self: Self, content: str, offset: int = 0) -> Expression:
        """
        Parse trimmed placeholder content into an expression.

        Args:
            content: Placeholder content without the `{{`/`}}` delimiters
            offset: Absolute template offset of `content[0]`

        Returns:
            A Declaration, EditableReference or ValueReference

        Raises:
            TemplateSyntaxError: On any malformed input
        """
        self._tokens = self.lexer.tokenize(content, offset)
        self._position = 0

        if self._is_at_end():
            raise TemplateSyntaxError(offset, "Empty placeholder")

        expr: Expression
        if self._match_symbol("@"):
            expr = self._parse_declaration()
        elif self._match_symbol("$"):
            expr = self._parse_value_reference()
        else:
            expr = self._parse_editable_reference()

        if not self._is_at_end():
            current: Token = self._current_token()
            raise TemplateSyntaxError(
                current.position, f"Unexpected token '{current.value}'"
            )
        return expr

    def _parse_declaration(self: Self) -> Declaration:
        """`@ name : type ( = valueExpr )?`"""
        name: Token = self._consume_identifier("Expected variable name after '@'")
        self._expect_symbol(":", f"Expected ':' and a type after '{name.value}'")
        var_type: VarType = self._parse_type()

        default: Optional[ValueExpr] = None
        if self._match_symbol("="):
            default = self._parse_value_expr()

        return Declaration(name=name.value, type=var_type, defaultExpr=default)

    def _parse_value_reference(self: Self) -> ValueReference:
        """`$ name`; nothing may follow the name."""
        name: Token = self._consume_identifier("Expected variable name after '$'")
        if not self._is_at_end():
            raise TemplateSyntaxError(
                self._current_position(),
                f"Value reference '${name.value}' takes no metadata",
            )
        return ValueReference(name=name.value)

    def _parse_editable_reference(self: Self) -> EditableReference:
        """`name ( : type )? ( , key : value )*`"""
        name: Token = self._consume_identifier("Expected variable name")
        fields: dict = {"name": name.value}

        if self._match_symbol(":"):
            fields["type"] = self._parse_type()

        seen: set[str] = set()
        while self._match_symbol(","):
            key: Token = self._consume_identifier("Expected metadata key after ','")
            if key.value not in META_KEYS:
                raise TemplateSyntaxError(
                    key.position,
                    f"Unknown metadata key '{key.value}'; "
                    f"expected one of {', '.join(META_KEYS)}",
                )
            if key.value in seen:
                raise TemplateSyntaxError(
                    key.position, f"Duplicate metadata key '{key.value}'"
                )
            seen.add(key.value)
            self._expect_symbol(":", f"Expected ':' after '{key.value}'")

            if key.value == "type":
                type_position: int = self._current_position()
                var_type: VarType = self._parse_type()
                if fields.get("type", var_type) != var_type:
                    raise TemplateSyntaxError(
                        type_position,
                        f"Conflicting types '{fields['type']}' and '{var_type}' "
                        f"for '{name.value}'",
                    )
                fields["type"] = var_type
            elif key.value == "friendlyName":
                current: Token = self._current_token()
                if current.type != "STRING":
                    raise TemplateSyntaxError(
                        current.position, "friendlyName must be a quoted string"
                    )
                fields["friendlyName"] = self._advance().value
            else:
                fields["defaultExpr"] = self._parse_value_expr()

        return EditableReference(**fields)

    def _parse_type(self: Self) -> VarType:
        token: Token = self._consume_identifier(
            f"Expected a type name ({TYPE_NAMES})"
        )
        try:
            return VarType(token.value)
        except ValueError:
            raise TemplateSyntaxError(
                token.position,
                f"Unknown type '{token.value}'; expected one of {TYPE_NAMES}",
            ) from None

    def _parse_value_expr(self: Self) -> ValueExpr:
        """Literal string, number, boolean, or `$name` reference."""
        current: Token = self._current_token()

        if current.type == "STRING":
            self._advance()
            return LiteralExpr(value=TypedValue(type=VarType.STRING, value=current.value))

        if current.type == "NUMBER":
            self._advance()
            number: int | float = self._number_convert(current)
            return LiteralExpr(value=TypedValue(type=VarType.NUMBER, value=number))

        if current.type == "BOOLEAN":
            self._advance()
            return LiteralExpr(
                value=TypedValue(type=VarType.BOOLEAN, value=current.value == "true")
            )

        if self._match_symbol("$"):
            name: Token = self._consume_identifier("Expected variable name after '$'")
            return VariableRef(name=name.value)

        raise TemplateSyntaxError(
            current.position,
            "Expected a value: quoted string, number, true/false or $name",
        )

    def _number_convert(self: Self, token: Token) -> int | float:
        """Integral literals become int, others float; both must be finite."""
        out_of_range = TemplateSyntaxError(
            token.position, f"Number literal '{token.value[:24]}' is out of range"
        )
        try:
            number: int | float = (
                int(token.value)
                if _INTEGER_RE.fullmatch(token.value)
                else float(token.value)
            )
        except ValueError:
            raise out_of_range from None
        if isinstance(number, float) and not math.isfinite(number):
            raise out_of_range
        return number

    # Token cursor helpers

    def _current_token(self: Self) -> Token:
        return self._tokens[min(self._position, len(self._tokens) - 1)]

    def _current_position(self: Self) -> int:
        return self._current_token().position

    def _is_at_end(self: Self) -> bool:
        return self._current_token().type == "EOF"

    def _advance(self: Self) -> Token:
        token: Token = self._current_token()
        if not self._is_at_end():
            self._position += 1
        return token

    def _match_symbol(self: Self, symbol: str) -> bool:
        current: Token = self._current_token()
        if current.type == "SYMBOL" and current.value == symbol:
            self._advance()
            return True
        return False

    def _expect_symbol(self: Self, symbol: str, error_message: str) -> None:
        if not self._match_symbol(symbol):
            raise TemplateSyntaxError(self._current_position(), error_message)

    def _consume_identifier(self: Self, error_message: str) -> Token:
        current: Token = self._current_token()
        if current.type == "IDENTIFIER":
            return self._advance()
        raise TemplateSyntaxError(current.position, error_message)


def document_parse(source: str) -> Document:
    """Scan and parse a whole template.

    Args:
        source: Raw template text

    Returns:
        The immutable Document

    Raises:
        TemplateSyntaxError: On the first malformed placeholder; no partial
            Document is returned
    """
    parser: ExpressionParser = ExpressionParser()
    nodes: list[Node] = []

    for span in template_scan(source):
        if span.kind == "text":
            nodes.append(LiteralText(content=span.text, offset=span.offset))
        else:
            expr: Expression = parser.parse(span.text, span.contentOffset)
            nodes.append(Placeholder(expr=expr, offset=span.offset, end=span.end))

    document: Document = Document(source=source, nodes=tuple(nodes))
    LOG(
        f"Parsed template: {len(nodes)} nodes, "
        f"{sum(1 for _ in document.placeholders())} placeholders"
    )
    return document
