"""
Template scanner.

Splits raw template text into literal-text spans and placeholder spans.
Placeholders are delimited by `{{` and `}}`; everything outside them is kept
verbatim, whitespace and newlines included. The scanner knows nothing about
expression syntax: it only hands the trimmed placeholder content, with its
absolute offset, to the expression parser.

Example:
    spans = template_scan("<h1>{{ $title }}</h1>")
    # [Span(text "<h1>"), Span(placeholder "$title"), Span(text "</h1>")]
"""

from dataclasses import dataclass
from typing import Final, Literal
from balsa.lib.errors import TemplateSyntaxError

OPEN: Final[str] = "{{"
CLOSE: Final[str] = "}}"


@dataclass(frozen=True)
class Span:
    """A slice of the template source.

    Attributes:
        kind: "text" for literal text, "placeholder" for a `{{ ... }}` span
        text: Literal text verbatim, or the trimmed placeholder content
        offset: Source offset where the span starts (the `{{` for placeholders)
        end: Source offset just past the span
        contentOffset: Source offset of the first character of `text`
    """

    kind: Literal["text", "placeholder"]
    text: str
    offset: int
    end: int
    contentOffset: int


def template_scan(source: str) -> list[Span]:
    """Split template source into ordered spans.

    Args:
        source: Raw template text

    Returns:
        Spans in document order. Adjacent placeholders produce no empty text
        span between them.

    Raises:
        TemplateSyntaxError: On an unterminated `{{`, or a `{{` nested inside
            a placeholder
    """
    spans: list[Span] = []
    pos: int = 0

    while True:
        start: int = source.find(OPEN, pos)
        if start == -1:
            if pos < len(source):
                spans.append(Span("text", source[pos:], pos, len(source), pos))
            break

        if start > pos:
            spans.append(Span("text", source[pos:start], pos, start, pos))

        body_start: int = start + len(OPEN)
        close: int = source.find(CLOSE, body_start)
        if close == -1:
            raise TemplateSyntaxError(start, "Unterminated placeholder: missing '}}'")

        nested: int = source.find(OPEN, body_start)
        if nested != -1 and nested < close:
            raise TemplateSyntaxError(nested, "Nested '{{' inside placeholder")

        raw: str = source[body_start:close]
        lead: int = len(raw) - len(raw.lstrip())
        end: int = close + len(CLOSE)
        spans.append(
            Span("placeholder", raw.strip(), start, end, body_start + lead)
        )
        pos = end

    return spans


def offset_locate(source: str, offset: int) -> tuple[int, int]:
    """Translate a source offset into a 1-based (line, column) pair."""
    offset = max(0, min(offset, len(source)))
    line: int = source.count("\n", 0, offset) + 1
    column: int = offset - (source.rfind("\n", 0, offset) + 1) + 1
    return line, column
