"""Tests for the command-line interface."""

import orjson
import pytest

from tessera.cli.main import cli, create_parser


@pytest.fixture
def page(tmp_path):
    path = tmp_path / "page.html"
    path.write_text("<p>\n  Hi {{name}}\n</p>", encoding="utf-8")
    return path


def test_parse_prints_json(page, capsys):
    assert cli(["parse", str(page)]) == 0
    data = orjson.loads(capsys.readouterr().out)
    assert data["type"] == "TEMPLATE"
    (paragraph,) = data["content"]
    assert paragraph["tag_name"] == "p"
    assert paragraph["content"][0] == {"type": "TEXT", "data": " Hi "}
    assert paragraph["content"][1]["expression"]["segments"] == ["name"]


def test_parse_unminified_and_indent(page, capsys):
    assert cli(["parse", str(page), "--unminified", "--indent"]) == 0
    out = capsys.readouterr().out
    assert "\n  " in out
    data = orjson.loads(out)
    assert data["content"][0]["content"][0]["data"] == "\n  Hi "


def test_parse_string_template(tmp_path, capsys):
    path = tmp_path / "title.txt"
    path.write_text("<b>{{title}}</b>", encoding="utf-8")
    assert cli(["parse", str(path), "--string"]) == 0
    data = orjson.loads(capsys.readouterr().out)
    assert data["content"][0] == {"type": "TEXT", "data": "<b>"}


def test_parse_with_views(tmp_path, capsys):
    views = tmp_path / "views"
    views.mkdir()
    (views / "card.html").write_text("<div>{{@content}}</div>", encoding="utf-8")
    page = tmp_path / "page.html"
    page.write_text('<view name="card">Body</view>', encoding="utf-8")

    assert cli(["parse", str(page), "--views", str(views)]) == 0
    data = orjson.loads(capsys.readouterr().out)
    pointer = data["content"][0]
    assert pointer["type"] == "VIEW_POINTER"
    assert pointer["name"] == "card"


def test_parse_error_exit_code(tmp_path, capsys):
    path = tmp_path / "broken.html"
    path.write_text("<div></span>", encoding="utf-8")
    assert cli(["parse", str(path)]) == 1
    err = capsys.readouterr().err
    assert "Error: Mismatched closing HTML tag: </span>" in err
    assert 'Within template "broken"' in err


def test_missing_file(tmp_path, capsys):
    assert cli(["parse", str(tmp_path / "missing.html")]) == 1
    assert "Error:" in capsys.readouterr().err


def test_check(tmp_path, capsys):
    good = tmp_path / "good.html"
    good.write_text("<p>{{x}}</p>", encoding="utf-8")
    bad = tmp_path / "bad.html"
    bad.write_text("{{if x}}", encoding="utf-8")

    assert cli(["check", str(good)]) == 0
    assert cli(["check", str(good), str(bad)]) == 1
    out = capsys.readouterr().out
    assert f"OK   {good}" in out
    assert f"FAIL {bad}: Unclosed {{{{if x}}}} at end of template" in out


def test_no_command_prints_help(capsys):
    assert cli([]) == 0
    assert "usage: tessera" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit) as exc:
        create_parser().parse_args(["--version"])
    assert exc.value.code == 0
    assert "Tessera" in capsys.readouterr().out
