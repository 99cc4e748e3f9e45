from __future__ import annotations

import textwrap
from pathlib import Path

from markdown_viewer.cli import cli


class FailingRenderer:
    def render(self, text: str) -> str:
        raise RuntimeError("boom")


def _write(tmp_path: Path, filename: str, content: str) -> Path:
    path = tmp_path / filename
    path.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
    return path


def _write_pyproject(base: Path, body: str) -> Path:
    path = base / "pyproject.toml"
    path.write_text(textwrap.dedent(body).lstrip(), encoding="utf-8")
    return path


def test_cli_prints_page_to_stdout(cli_runner, tmp_path):
    target = _write(
        tmp_path,
        "doc.md",
        """
        # Title

        Some text with $x^2$.
        """,
    )

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert result.output.startswith("<!DOCTYPE html>")
    assert '<h1 id="title-0">Title</h1>' in result.output
    assert "$x^2$" in result.output
    assert '<a href="#title-0">Title</a>' in result.output


def test_cli_writes_output_file(cli_runner, tmp_path):
    target = _write(tmp_path, "doc.md", "## Section\n")
    output = tmp_path / "preview.html"
    output.write_text("stale", encoding="utf-8")

    result = cli_runner.invoke(cli, [str(target), "-o", str(output)])

    assert result.exit_code == 0
    assert result.output == ""
    html = output.read_text(encoding="utf-8")
    assert '<h2 id="section-0">Section</h2>' in html
    assert list(tmp_path.glob("*.tmp")) == []


def test_cli_leaves_source_untouched(cli_runner, tmp_path):
    target = _write(tmp_path, "doc.md", "# Keep me\n")

    cli_runner.invoke(cli, [str(target)])

    assert target.read_text(encoding="utf-8") == "# Keep me\n"


def test_cli_feature_flags(cli_runner, tmp_path):
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(
        cli,
        [str(target), "--no-toc", "--no-math", "--no-diagrams", "--no-highlight", "--title", "Notes"],
    )

    assert result.exit_code == 0
    assert "<nav" not in result.output
    assert "MathJax" not in result.output
    assert "hljs" not in result.output
    assert "mermaid@" not in result.output
    assert "<title>Notes</title>" in result.output


def test_cli_uses_project_config(cli_runner, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-viewer]
        toc_title = "On this page"
        """,
    )
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 0
    assert '<h2 class="toc-title">On this page</h2>' in result.output


def test_cli_rejects_invalid_config(cli_runner, tmp_path):
    _write_pyproject(
        tmp_path,
        """
        [tool.markdown-viewer]
        toc_max_level = 9
        """,
    )
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 2
    assert "between 1 and 6" in result.output


def test_cli_rejects_non_markdown_files(cli_runner, tmp_path):
    target = _write(tmp_path, "notes.txt", "# A\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 2
    assert "is not a Markdown file" in result.output


def test_cli_rejects_oversized_files(cli_runner, tmp_path, monkeypatch):
    monkeypatch.setenv("MARKDOWN_VIEWER_MAX_FILE_SIZE", "10")
    target = _write(tmp_path, "big.md", "# A heading longer than ten bytes\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "over the limit of 10 bytes" in result.output


def test_cli_rejects_invalid_size_override(cli_runner, tmp_path, monkeypatch):
    monkeypatch.setenv("MARKDOWN_VIEWER_MAX_FILE_SIZE", "lots")
    target = _write(tmp_path, "doc.md", "# A\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "Invalid value for MARKDOWN_VIEWER_MAX_FILE_SIZE" in result.output


def test_cli_rejects_invalid_utf8(cli_runner, tmp_path):
    target = tmp_path / "bad.md"
    target.write_bytes(b"# \xff\xfe\n")

    result = cli_runner.invoke(cli, [str(target)])

    assert result.exit_code == 1
    assert "Invalid UTF-8 sequence" in result.output


def test_cli_reports_render_failures(cli_runner, tmp_path, monkeypatch):
    monkeypatch.setattr(
        "markdown_viewer.pipeline.create_markdown_renderer", lambda: FailingRenderer()
    )
    target = _write(tmp_path, "doc.md", "# A\n")
    output = tmp_path / "preview.html"
    output.write_text("previous page", encoding="utf-8")

    result = cli_runner.invoke(cli, [str(target), "-o", str(output)])

    assert result.exit_code == 1
    assert "Failed to render markdown: boom" in result.output
    assert output.read_text(encoding="utf-8") == "previous page"


def test_cli_resolves_images(cli_runner, tmp_path):
    root = tmp_path / "workspace"
    docs = root / "docs"
    docs.mkdir(parents=True)
    target = _write(docs, "doc.md", "![a](img/a.png) ![b](/assets/b.png)\n")

    result = cli_runner.invoke(cli, [str(target), "--root", str(root)])

    assert result.exit_code == 0
    assert f'src="{(docs / "img" / "a.png").resolve().as_uri()}"' in result.output
    assert f'src="{(root / "assets" / "b.png").resolve().as_uri()}"' in result.output


def test_cli_sandbox_leaves_outside_images_unresolved(cli_runner, tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()
    target = _write(docs, "doc.md", "![in](img/a.png) ![out](../secret.png)\n")

    result = cli_runner.invoke(cli, [str(target), "--sandbox"])

    assert result.exit_code == 0
    assert f'src="{(docs / "img" / "a.png").resolve().as_uri()}"' in result.output
    assert 'src="../secret.png"' in result.output


def test_cli_version(cli_runner):
    result = cli_runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert "version" in result.output
