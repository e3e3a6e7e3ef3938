"""End-to-end tests for the pipeline entry points and the Template facade."""

from pathlib import Path
import pytest
from balsa import (
    BalsaError,
    BalsaParameters,
    Template,
    TemplateSyntaxError,
    TypeMismatchError,
    UnresolvedVariableError,
    catalogue,
    parse,
    render,
    resolve,
)
from balsa.config.settings import appsettings

HEADER_TEMPLATE = (
    '<h1>{{ headerText : string, friendlyName: "Header text", '
    'defaultValue: "Hello world!" }}</h1>'
)


def test_header_example_renders_default() -> None:
    assert render(parse(HEADER_TEMPLATE)) == "<h1>Hello world!</h1>"


def test_header_example_catalogue() -> None:
    entries = catalogue(parse(HEADER_TEMPLATE))
    assert [entry.record() for entry in entries] == [
        {
            "name": "headerText",
            "type": "string",
            "friendlyName": "Header text",
            "default": "Hello world!",
        }
    ]


def test_header_example_override() -> None:
    document = parse(HEADER_TEMPLATE)
    assert render(document, {"headerText": "Welcome"}) == "<h1>Welcome</h1>"


def test_header_example_numeric_override_rejected() -> None:
    with pytest.raises(TypeMismatchError) as excinfo:
        render(parse(HEADER_TEMPLATE), {"headerText": 42})
    assert excinfo.value.name == "headerText"


@pytest.mark.parametrize(
    "source",
    ["", "plain text", "<div class='a'>\n  }} stray close\n</div>", "{ single }"],
)
def test_no_placeholders_is_identity(source: str) -> None:
    assert render(parse(source)) == source


def test_rendering_defaults_is_idempotent() -> None:
    document = parse(HEADER_TEMPLATE)
    first = render(document)
    assert render(document) == first
    assert render(parse(first)) == first


def test_mixed_page() -> None:
    source = (
        '{{@ year : number = 2024 }}'
        '<style>a { color: {{ accent : color, defaultValue: "teal" }}; }</style>'
        '<p>&copy; {{ $year }} {{ company, friendlyName: "Company", defaultValue: "ACME" }}</p>'
        '<p hidden="{{ hidden : boolean, defaultValue: false }}">{{ $company }}</p>'
    )
    assert render(parse(source)) == (
        "<style>a { color: teal; }</style>"
        "<p>&copy; 2024 ACME</p>"
        '<p hidden="false">ACME</p>'
    )


def test_resolve_returns_typed_values() -> None:
    resolved = resolve(parse("{{ n : number, defaultValue: 1.0 }}"))
    assert resolved["n"].value == 1.0


def test_render_is_all_or_nothing() -> None:
    with pytest.raises(UnresolvedVariableError):
        render(parse("<p>{{ a, defaultValue: \"x\" }}{{ b }}</p>"))


def test_template_reuse_with_overrides() -> None:
    template = Template.from_string(HEADER_TEMPLATE)
    assert template.render() == "<h1>Hello world!</h1>"
    assert template.render(BalsaParameters().string("headerText", "Hi")) == "<h1>Hi</h1>"
    assert template.render() == "<h1>Hello world!</h1>"


def test_template_variables_is_a_copy() -> None:
    template = Template.from_string(HEADER_TEMPLATE)
    template.variables.clear()
    assert len(template.variables) == 1
    assert template.catalogue()[0]["friendlyName"] == "Header text"


def test_template_strict_policy() -> None:
    template = Template.from_string(
        "{{ n, defaultValue: 1 }}{{ n, defaultValue: 2 }}", mergePolicy="strict"
    )
    with pytest.raises(BalsaError):
        template.variables


def test_render_result_success() -> None:
    result = Template.from_string(HEADER_TEMPLATE).render_result()
    assert result.success
    assert result.text == "<h1>Hello world!</h1>"
    assert result.error is None


def test_render_result_failure() -> None:
    result = Template.from_string(HEADER_TEMPLATE).render_result({"headerText": 42})
    assert not result.success
    assert result.text == ""
    assert "headerText" in result.error


def test_from_file(tmp_path: Path) -> None:
    path = tmp_path / "page.html"
    path.write_text(HEADER_TEMPLATE, encoding="utf-8")
    assert Template.from_file(path).render() == "<h1>Hello world!</h1>"


def test_from_file_size_limit(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "big.html"
    path.write_text("x" * 64, encoding="utf-8")
    monkeypatch.setattr(appsettings, "maxTemplateBytes", 16)
    with pytest.raises(ValueError, match="Template too large"):
        Template.from_file(path)


@pytest.mark.parametrize(
    "source, overrides",
    [
        ('<h1>{{ s : string, defaultValue: "Hi" }}</h1>', {"s": "Hi"}),
        ("<p>{{ n : number, defaultValue: 3 }}</p>", {"n": 3}),
        ("<p>{{ f : number, defaultValue: 2.5 }}</p>", {"f": 2.5}),
        ("<p>{{ w : number, defaultValue: 3.0 }}</p>", {"w": 3.0}),
        ("<p>{{ b : boolean, defaultValue: true }}</p>", {"b": True}),
        ('<i style="color:{{ c : color, defaultValue: "#336699" }}"></i>', {"c": "#336699"}),
        (
            '{{@ base : string = "x" }}<p>{{ copy, defaultValue: $base }}</p>',
            {"copy": "x"},
        ),
    ],
)
def test_override_equal_to_default_renders_like_defaults(source: str, overrides: dict) -> None:
    document = parse(source)
    assert render(document, overrides) == render(document)


def test_template_docstring_example() -> None:
    template = Template.from_string('<h1>{{ title : string, defaultValue: "Hi" }}</h1>')
    assert template.render() == "<h1>Hi</h1>"
    assert template.render({"title": "Welcome"}) == "<h1>Welcome</h1>"


def test_equals_default_only_in_declarations() -> None:
    with pytest.raises(TemplateSyntaxError, match="Unexpected token '='"):
        parse('<h1>{{ title : string = "Hi" }}</h1>')


def test_out_of_range_default_is_syntax_error() -> None:
    with pytest.raises(TemplateSyntaxError, match="out of range"):
        render(parse("{{ n : number, defaultValue: 1e999 }}"))


def test_render_result_invalid_overrides_source() -> None:
    result = Template.from_string(HEADER_TEMPLATE).render_result(["a"])
    assert not result.success
    assert "Overrides must be" in result.error


def test_color_override_rendered_trimmed() -> None:
    document = parse('<a style="color:{{ c : color }}"></a>')
    assert render(document, {"c": "  red  "}) == '<a style="color:red"></a>'
