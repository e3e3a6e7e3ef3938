"""Tests for the template scanner."""

import pytest
from balsa.lib.errors import TemplateSyntaxError
from balsa.lib.scanner import Span, offset_locate, template_scan


def test_no_placeholders_single_text_span() -> None:
    spans = template_scan("<p>plain</p>")
    assert spans == [Span("text", "<p>plain</p>", 0, 12, 0)]


def test_empty_source_has_no_spans() -> None:
    assert template_scan("") == []


def test_placeholder_content_is_trimmed_with_offsets() -> None:
    source = "<h1>{{  $title }}</h1>"
    spans = template_scan(source)
    assert [span.kind for span in spans] == ["text", "placeholder", "text"]

    placeholder = spans[1]
    assert placeholder.text == "$title"
    assert placeholder.offset == 4
    assert placeholder.end == source.index("</h1>")
    assert source[placeholder.contentOffset] == "$"


def test_adjacent_placeholders_have_no_empty_text_between() -> None:
    spans = template_scan("{{ a }}{{ b }}")
    assert [(span.kind, span.text) for span in spans] == [
        ("placeholder", "a"),
        ("placeholder", "b"),
    ]


def test_whitespace_and_newlines_kept_verbatim() -> None:
    source = "  line one\n\t{{ x }}\n  "
    spans = template_scan(source)
    assert spans[0].text == "  line one\n\t"
    assert spans[-1].text == "\n  "


def test_stray_close_delimiter_is_literal() -> None:
    spans = template_scan("a }} b")
    assert spans == [Span("text", "a }} b", 0, 6, 0)]


def test_unterminated_placeholder_reports_opening_offset() -> None:
    with pytest.raises(TemplateSyntaxError) as excinfo:
        template_scan("abc {{ name")
    assert excinfo.value.offset == 4
    assert "Unterminated" in str(excinfo.value)


def test_nested_open_reports_nested_offset() -> None:
    source = "{{ a {{ b }}"
    with pytest.raises(TemplateSyntaxError) as excinfo:
        template_scan(source)
    assert excinfo.value.offset == source.index("{{", 2)


@pytest.mark.parametrize(
    "offset, expected",
    [(0, (1, 1)), (3, (1, 4)), (4, (2, 1)), (6, (2, 3))],
)
def test_offset_locate(offset: int, expected: tuple[int, int]) -> None:
    assert offset_locate("abc\ndef", offset) == expected
