"""Integration tests for the mdsite CLI commands"""

import json

import pytest
from typer.testing import CliRunner

from mdsite.cli.cli import app


@pytest.fixture(name="runner")
def runner_fixture(tmp_path, monkeypatch):
    """CliRunner executing in an empty working directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MDSITE_LOG_LEVEL", raising=False)
    return CliRunner()


def test_render_prints_html(runner, tmp_path):
    (tmp_path / "hello.md").write_text("# Hello\n\nWorld\n")
    result = runner.invoke(app, ["render", "hello.md"])
    assert result.exit_code == 0, result.output
    assert "<h1>Hello</h1>" in result.output
    assert "<p>World</p>" in result.output


def test_render_writes_out_file(runner, tmp_path):
    (tmp_path / "hello.md").write_text("# Hello\n")
    result = runner.invoke(app, ["render", "hello.md", "--out", "hello.html"])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "hello.html").read_text() == "<h1>Hello</h1>\n"


def test_render_rejects_dangerous_content(runner, tmp_path):
    """Core errors are reported as 'Error: <message>' with exit code 1."""
    (tmp_path / "bad.md").write_text('<div onclick="x()">hi</div>\n')
    result = runner.invoke(app, ["render", "bad.md"])
    assert result.exit_code == 1
    assert "Error: Dangerous content detected" in result.output


def test_render_trusted_sanitizes(runner, tmp_path):
    (tmp_path / "raw.md").write_text('<div onclick="x()">hi</div>\n')
    result = runner.invoke(app, ["render", "raw.md", "--trusted"])
    assert result.exit_code == 0, result.output
    assert "<div>hi</div>" in result.output
    assert "onclick" not in result.output


def test_render_missing_file(runner):
    result = runner.invoke(app, ["render", "missing.md"])
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_render_with_log_level(runner, tmp_path):
    (tmp_path / "hello.md").write_text("Hi\n")
    result = runner.invoke(app, ["--log-level", "error", "render", "hello.md"])
    assert result.exit_code == 0, result.output
    assert "<p>Hi</p>" in result.output


def test_inspect_prints_document_json(runner, tmp_path):
    (tmp_path / "doc.md").write_text("---\ntitle: Doc\n---\n# Title\n\nSee [site](https://example.com).\n")
    result = runner.invoke(app, ["inspect", "doc.md"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["front_matter"] == {"title": "Doc"}
    assert [e["kind"] for e in data["elements"]] == ["heading", "paragraph"]
    assert data["links"] == [{"text": "site", "url": "https://example.com", "is_external": True}]
    assert data["excerpt"] == "See site."
    assert "html" not in data


def test_excerpt_prints_metadata_json(runner, tmp_path):
    posts = tmp_path / "posts"
    posts.mkdir()
    (posts / "first-post.md").write_text("---\ntitle: First\n---\nA long opening paragraph without any stop\n")
    result = runner.invoke(app, ["excerpt", "posts/first-post.md", "--length", "20"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["slug"] == "first-post"
    assert data["type"] == "post"
    assert data["front_matter"] == {"title": "First"}
    assert data["excerpt"] == "A long opening..."


def test_sanitize_file(runner, tmp_path):
    (tmp_path / "page.html").write_text('<p onclick="x()">ok</p><script>alert(1)</script>')
    result = runner.invoke(app, ["sanitize", "page.html"])
    assert result.exit_code == 0, result.output
    assert result.output == "<p>ok</p>"


def test_sanitize_stdin(runner):
    result = runner.invoke(app, ["sanitize"], input='<a href="javascript:alert(1)">x</a>')
    assert result.exit_code == 0, result.output
    assert result.output == '<a href="#">x</a>'


def test_invalid_config_reported(runner, tmp_path):
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    (tmp_path / "hello.md").write_text("Hi\n")
    result = runner.invoke(app, ["render", "hello.md"])
    assert result.exit_code == 1
    assert "Error: Invalid config.yaml" in result.output
