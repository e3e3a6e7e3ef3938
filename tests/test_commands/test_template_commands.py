"""Tests for the template CLI commands."""

import io
import json
from pathlib import Path
from unittest.mock import patch
import pytest
from click.testing import CliRunner
from rich.console import Console
from balsa.commands.app import cli
from balsa.commands.template import assignments_parse, overrides_build
from balsa.config.settings import appsettings
from balsa.lib.errors import TypeMismatchError
from balsa.lib.template import Template

PAGE = (
    '<h1>{{ headerText : string, friendlyName: "Header text", '
    'defaultValue: "Hello world!" }}</h1>'
    "<p>{{ columns : number, defaultValue: 2 }} columns</p>"
    "<p>{{ show : boolean, defaultValue: true }}</p>"
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def captured_output() -> io.StringIO:
    """Capture console output."""
    output = io.StringIO()
    console = Console(file=output, width=200)
    with patch("balsa.commands.template.console", console):
        yield output


@pytest.fixture
def page(tmp_path: Path) -> Path:
    path = tmp_path / "page.html"
    path.write_text(PAGE, encoding="utf-8")
    return path


def test_catalogue_table(runner: CliRunner, page: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["catalogue", str(page)])
    assert result.exit_code == 0
    text = captured_output.getvalue()
    for expected in ("headerText", "Header text", "columns", "number", "show"):
        assert expected in text


def test_catalogue_json(runner: CliRunner, page: Path) -> None:
    result = runner.invoke(cli, ["catalogue", str(page), "--json"])
    assert result.exit_code == 0
    records = json.loads(result.output)
    assert [record["name"] for record in records] == ["headerText", "columns", "show"]
    assert records[1] == {
        "name": "columns",
        "type": "number",
        "friendlyName": None,
        "default": 2,
    }


def test_catalogue_without_variables(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    path = tmp_path / "plain.html"
    path.write_text("<p>static</p>", encoding="utf-8")
    result = runner.invoke(cli, ["catalogue", str(path)])
    assert result.exit_code == 0
    assert "No editable variables" in captured_output.getvalue()


def test_render_defaults(runner: CliRunner, page: Path) -> None:
    result = runner.invoke(cli, ["render", str(page)])
    assert result.exit_code == 0
    assert result.output == "<h1>Hello world!</h1><p>2 columns</p><p>true</p>"


def test_render_with_set(runner: CliRunner, page: Path) -> None:
    result = runner.invoke(
        cli,
        ["render", str(page), "--set", "headerText=Hi there", "--set", "columns=3",
         "--set", "show=false"],
    )
    assert result.exit_code == 0
    assert result.output == "<h1>Hi there</h1><p>3 columns</p><p>false</p>"


def test_render_with_overrides_file(runner: CliRunner, page: Path, tmp_path: Path) -> None:
    overrides = tmp_path / "values.json"
    overrides.write_text(json.dumps({"headerText": "From file", "columns": 4}))
    result = runner.invoke(
        cli,
        ["render", str(page), "--overrides", str(overrides), "--set", "columns=5"],
    )
    assert result.exit_code == 0
    assert result.output.startswith("<h1>From file</h1><p>5 columns</p>")


def test_render_to_output_file(
    runner: CliRunner, page: Path, tmp_path: Path, captured_output: io.StringIO
) -> None:
    target = tmp_path / "out.html"
    result = runner.invoke(cli, ["render", str(page), "--output", str(target)])
    assert result.exit_code == 0
    assert target.read_text(encoding="utf-8").startswith("<h1>Hello world!</h1>")
    assert "Rendered" in captured_output.getvalue()


def test_render_type_mismatch_exits_1(
    runner: CliRunner, page: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["render", str(page), "--set", "columns=many"])
    assert result.exit_code == 1
    assert "Error" in captured_output.getvalue()
    assert "columns" in captured_output.getvalue()


def test_render_bad_overrides_file(
    runner: CliRunner, page: Path, tmp_path: Path, captured_output: io.StringIO
) -> None:
    overrides = tmp_path / "values.json"
    overrides.write_text("[1, 2]")
    result = runner.invoke(cli, ["render", str(page), "--overrides", str(overrides)])
    assert result.exit_code == 1
    assert "JSON object" in captured_output.getvalue()


def test_render_bad_set_syntax(runner: CliRunner, page: Path) -> None:
    result = runner.invoke(cli, ["render", str(page), "--set", "columns"])
    assert result.exit_code == 2
    assert "name=value" in result.output


def test_syntax_error_location_in_detailed_mode(
    runner: CliRunner,
    tmp_path: Path,
    captured_output: io.StringIO,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(appsettings, "detailedOutput", False)
    path = tmp_path / "broken.html"
    path.write_text("<p>\n  {{ title", encoding="utf-8")
    result = runner.invoke(cli, ["--detailed", "check", str(path)])
    assert result.exit_code == 1
    text = captured_output.getvalue()
    assert "Unterminated placeholder" in text
    assert "line 2, column 3" in text


def test_missing_template_file(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    result = runner.invoke(cli, ["render", str(tmp_path / "nope.html")])
    assert result.exit_code == 1
    assert "Error" in captured_output.getvalue()


def test_check_ok(runner: CliRunner, page: Path, captured_output: io.StringIO) -> None:
    result = runner.invoke(cli, ["check", str(page)])
    assert result.exit_code == 0
    assert "OK" in captured_output.getvalue()
    assert "3 variable(s)" in captured_output.getvalue()


def test_check_reports_all_unresolved(
    runner: CliRunner, tmp_path: Path, captured_output: io.StringIO
) -> None:
    path = tmp_path / "needs.html"
    path.write_text("{{ first }} {{ second }} {{ third, defaultValue: $first }}")
    result = runner.invoke(cli, ["check", str(path)])
    assert result.exit_code == 1
    text = captured_output.getvalue()
    assert "first, second" in text


def test_version(runner: CliRunner) -> None:
    from balsa import __version__

    result = runner.invoke(cli, ["-V"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_assignments_parse_keeps_text_after_first_equals() -> None:
    assert assignments_parse(None, None, ("a=b=c", "x=")) == {"a": "b=c", "x": ""}


def test_overrides_build_reads_declared_types() -> None:
    template = Template.from_string(PAGE)
    overrides = overrides_build(
        template.variables, {"columns": "7", "extra": "text"}, {"headerText": "H"}
    )
    assert overrides["columns"].value == 7
    assert overrides["extra"] == "text"
    assert overrides["headerText"] == "H"


def test_overrides_build_rejects_bad_boolean() -> None:
    template = Template.from_string(PAGE)
    with pytest.raises(TypeMismatchError):
        overrides_build(template.variables, {"show": "maybe"}, {})


def test_group_help_lists_commands(runner: CliRunner) -> None:
    output = io.StringIO()
    with patch("balsa.commands.base.console", Console(file=output, width=120)):
        result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    text = output.getvalue()
    for name in ("catalogue", "render", "check", "--version"):
        assert name in text


def test_command_help_panel(runner: CliRunner) -> None:
    output = io.StringIO()
    with patch("balsa.commands.base.console", Console(file=output, width=120)):
        result = runner.invoke(cli, ["render", "--help"])
    assert result.exit_code == 0
    text = output.getvalue()
    assert "--overrides" in text
    assert "--set" in text
