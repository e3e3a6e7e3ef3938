"""Tests for the balsa command line entry point."""

import json
from pathlib import Path
from unittest.mock import patch
import pytest
from loguru import logger
from balsa import __version__
from balsa.balsa import main


@pytest.fixture(autouse=True)
def engine_logging_off():
    """main() enables engine logging; restore the library default."""
    yield
    logger.disable("balsa")


def test_main_version(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_main_catalogue_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "t.html"
    path.write_text('{{ title, defaultValue: "T" }}', encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["catalogue", str(path), "--json"])
    assert excinfo.value.code == 0
    assert json.loads(capsys.readouterr().out)[0]["name"] == "title"


def test_main_unknown_command() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["publish"])
    assert excinfo.value.code == 2


def test_main_keyboard_interrupt() -> None:
    with patch("balsa.balsa.cli.main", side_effect=KeyboardInterrupt):
        with pytest.raises(SystemExit) as excinfo:
            main([])
    assert excinfo.value.code == 130
