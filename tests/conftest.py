from pathlib import Path

import pytest
from click.testing import CliRunner

from markdown_viewer.models import RawDocument


class IdentityRenderer:
    """Renderer that returns its input untouched."""

    def render(self, text: str) -> str:
        return text


class RecordingSurface:
    """Display surface that keeps everything it was asked to show."""

    def __init__(self):
        self.pages: list[str] = []
        self.errors: list[str] = []

    def show(self, html: str) -> None:
        self.pages.append(html)

    def show_error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def identity_renderer() -> IdentityRenderer:
    return IdentityRenderer()


@pytest.fixture()
def surface() -> RecordingSurface:
    return RecordingSurface()


@pytest.fixture()
def make_document():
    """Builds in-memory documents rooted at /docs."""

    def _make(text: str, roots=(Path("/workspace"),), source="/docs/note.md") -> RawDocument:
        return RawDocument(
            text=text,
            base_location=Path("/docs"),
            root_locations=tuple(roots),
            source=source,
        )

    return _make
