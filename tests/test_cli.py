import io
import json
import sys

import pytest

from html_to_json import main


@pytest.mark.parametrize("argv", [[], ["--help"], ["-h"], [""]])
def test_help_is_shown(argv, capsys):
    assert main(argv) == 0
    out = capsys.readouterr().out
    for expected in (
        "HJ - HTML to JSON converter",
        "Usage:",
        "hj [HTMLfilePath|URL]",
        "cat file.html | hj -",
        "hj --help",
        "Examples:",
        "hj https://example.com",
    ):
        assert expected in out


def test_convert_file(tmp_path, capsys):
    page = tmp_path / "index.html"
    page.write_text('<div id="main">Content</div>', encoding="utf-8")

    assert main([str(page)]) == 0
    captured = capsys.readouterr()
    assert captured.out == '{\n    "div#main": {\n        "child": "Content"\n    }\n}\n'
    assert captured.err == ""


def test_convert_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"<p>From stdin</p>")))
    assert main(["-"]) == 0
    assert json.loads(capsys.readouterr().out) == {"p": {"child": "From stdin"}}


def test_convert_url(html_server, capsys):
    base_url, routes = html_server
    routes["/"] = (200, "text/html; charset=utf-8", b"<ul><li>a</li></ul>")
    assert main([base_url + "/"]) == 0
    assert json.loads(capsys.readouterr().out) == {"ul": {"child": [{"li": {"child": "a"}}]}}


def test_missing_file_reports_error(capsys):
    assert main(["does-not-exist.html"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err.startswith("Error: failed to read file")


def test_http_error_reports_error(html_server, capsys):
    base_url, _ = html_server
    assert main([base_url + "/gone"]) == 1
    assert "Error: HTTP error: 404" in capsys.readouterr().err


def test_output_file(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")
    out_path = tmp_path / "out.json"

    assert main([str(page), "-o", str(out_path)]) == 0
    assert json.loads(out_path.read_text(encoding="utf-8")) == {"p": {"child": "x"}}
    captured = capsys.readouterr()
    assert captured.out == ""
    assert f"Output saved to: {out_path}" in captured.err


def test_config_file(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"indent": 2}), encoding="utf-8")

    assert main(["-c", str(config), str(page)]) == 0
    assert capsys.readouterr().out == '{\n  "p": {\n    "child": "x"\n  }\n}\n'


def test_config_file_must_be_object(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")
    config = tmp_path / "config.json"
    config.write_text("[1, 2]", encoding="utf-8")

    assert main(["--config", str(config), str(page)]) == 1
    assert "Error: config file must contain a JSON object" in capsys.readouterr().err


def test_parser_option(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")

    assert main(["--parser", "lxml", str(page)]) == 0
    assert list(json.loads(capsys.readouterr().out)) == ["html"]


def test_unknown_parser_reports_parse_error(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")

    assert main(["--parser", "no-such-parser", str(page)]) == 1
    assert capsys.readouterr().err.startswith("Error: failed to parse HTML")


def test_deep_document_exits_cleanly(tmp_path, capsys):
    page = tmp_path / "deep.html"
    page.write_text("<div>" * 1200 + "x" + "</div>" * 1200, encoding="utf-8")

    code = main([str(page)])
    captured = capsys.readouterr()
    if code == 1:
        assert captured.err.startswith("Error: failed to convert to JSON")
    else:
        assert code == 0
        assert captured.out.startswith('{\n    "div": {')


def test_unknown_option_is_taken_as_source(capsys):
    assert main(["--bogus"]) == 1
    assert capsys.readouterr().err.startswith("Error: failed to read file")


def test_extra_arguments_are_ignored(tmp_path, capsys):
    page = tmp_path / "in.html"
    page.write_text("<p>x</p>", encoding="utf-8")

    assert main([str(page), "ignored.html"]) == 0
    assert json.loads(capsys.readouterr().out) == {"p": {"child": "x"}}
