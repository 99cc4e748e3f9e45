"""Adapter around the external Markdown-to-HTML renderer."""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol

from markdown_it import MarkdownIt
from markdown_it.rules_block import StateBlock, html_block

from .constants import PLACEHOLDER_PREFIX


class MarkdownRenderer(Protocol):
    """Anything that turns Markdown text into an HTML fragment."""

    def render(self, text: str) -> str: ...


def _html_block_outside_placeholders(
    state: StateBlock, start_line: int, end_line: int, silent: bool
) -> bool:
    # A placeholder opening a line is inline content, not an HTML comment block
    position = state.bMarks[start_line] + state.tShift[start_line]
    if state.src.startswith(PLACEHOLDER_PREFIX, position):
        return False
    return html_block(state, start_line, end_line, silent)


@lru_cache(maxsize=1)
def create_markdown_renderer() -> MarkdownIt:
    """Return the shared CommonMark renderer with tables and strikethrough.

    Raw HTML is passed through so the HTML-comment placeholders of protected
    regions survive rendering, and is sanitized afterwards. A line starting
    with a placeholder never opens a raw HTML block, so the Markdown after it
    on that line and below it is still rendered. Real HTML blocks and
    comments keep their usual meaning.
    """
    md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])
    md.block.ruler.at(
        "html_block",
        _html_block_outside_placeholders,
        {"alt": ["paragraph", "reference", "blockquote"]},
    )
    return md
