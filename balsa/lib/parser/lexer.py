"""
Lexer for placeholder expressions.

Tokenizes the trimmed content of one `{{ ... }}` span into:
- STRING: double-quoted literal, with `\\"`, `\\\\`, `\\n` and `\\t` escapes
- NUMBER: `-12`, `3.5`, `1e3`
- BOOLEAN: `true`, `false`
- IDENTIFIER: variable names, type names, metadata keys
- SYMBOL: `@`, `$`, `:`, `=`, `,`
- EOF: end of content
Whitespace is skipped. Token positions are absolute template offsets.
"""

import re
from dataclasses import dataclass
from typing import Final, Pattern
from balsa.lib.errors import TemplateSyntaxError

_ESCAPES: Final[dict[str, str]] = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_ESCAPE_RE: Final[Pattern[str]] = re.compile(r"\\(.)", re.S)


@dataclass(frozen=True)
class Token:
    """
    A placeholder token.

    Attributes:
        type: STRING, NUMBER, BOOLEAN, IDENTIFIER, SYMBOL or EOF
        value: Token text; the unescaped body for STRING tokens
        position: Absolute offset in the template source
    """

    type: str
    value: str
    position: int

    def __repr__(self) -> str:
        return f"Token({self.type}, '{self.value}', pos={self.position})"


def string_unescape(body: str) -> str:
    """Replace backslash escapes in a string literal body."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


class PlaceholderLexer:
    """
    Splits placeholder content into tokens using an ordered list of patterns.
    The first pattern that matches at the current position wins.
    """

    # (regex_pattern, token_type, ignore_flag)
    TOKEN_SPECS: Final[list[tuple[str, str, bool]]] = [
        (r"\s+", "WHITESPACE", True),
        (r'"(?:[^"\\]|\\.)*"', "STRING", False),
        (r'"', "UNTERMINATED", False),
        (r"-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?", "NUMBER", False),
        (r"[@$:=,]", "SYMBOL", False),
        (r"[A-Za-z_][A-Za-z0-9_-]*", "IDENTIFIER", False),
        (r".", "UNKNOWN", False),
    ]

    BOOLEANS: Final[frozenset[str]] = frozenset({"true", "false"})

    def __init__(self) -> None:
        self._compiled_patterns: list[tuple[Pattern[str], str, bool]] = [
            (re.compile(pattern, re.S), token_type, ignore)
            for pattern, token_type, ignore in self.TOKEN_SPECS
        ]

    def tokenize(self, text: str, offset: int = 0) -> list[Token]:
        """
        Split placeholder content into tokens.

        Args:
            text: Trimmed placeholder content
            offset: Absolute template offset of `text[0]`

        Returns:
            Tokens, always terminated by an EOF token

        Raises:
            TemplateSyntaxError: On an unknown character or unterminated string
        """
        tokens: list[Token] = []
        position: int = 0

        while position < len(text):
            for pattern, token_type, ignore in self._compiled_patterns:
                match = pattern.match(text, position)
                if not match:
                    continue
                value: str = match.group(0)
                where: int = offset + position

                if token_type == "UNKNOWN":
                    raise TemplateSyntaxError(where, f"Unexpected character '{value}'")
                if token_type == "UNTERMINATED":
                    raise TemplateSyntaxError(where, "Unterminated string literal")

                if not ignore:
                    if token_type == "STRING":
                        tokens.append(Token("STRING", string_unescape(value[1:-1]), where))
                    elif token_type == "IDENTIFIER" and value in self.BOOLEANS:
                        tokens.append(Token("BOOLEAN", value, where))
                    else:
                        tokens.append(Token(token_type, value, where))

                position = match.end()
                break

        tokens.append(Token("EOF", "", offset + position))
        return tokens
