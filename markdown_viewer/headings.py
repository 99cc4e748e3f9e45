"""Heading discovery in Markdown source and id injection into rendered HTML."""

from __future__ import annotations

import re
from html import unescape

from .constants import (
    CLOSING_FENCE_MAX_INDENT,
    CLOSING_HASHES_PATTERN,
    CODE_FENCE_PATTERN,
    HEADING_PATTERN,
)
from .models import Heading, ScannerContext, ScannerState
from .slugify import generate_heading_id, generate_slug

_HEADING_ELEMENT_PATTERN = re.compile(
    r"<h(?P<level>[1-6])(?P<attributes>\s[^>]*)?>(?P<inner>.*?)(?P<close></h(?P=level)\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_MARKUP_PATTERN = re.compile(r"<[^>]*>")
_ID_ATTRIBUTE_PATTERN = re.compile(r"\sid\s*=", re.IGNORECASE)


def _leading_whitespace_columns(line: str) -> int:
    """Compute the column width of leading whitespace.

    Tabs advance to the next multiple of four columns to match Markdown
    indentation rules.

    Examples:
        _leading_whitespace_columns("    text")  # 4
        _leading_whitespace_columns("\\ttext")  # 4
    """
    columns = 0
    for character in line:
        if character == " ":
            columns += 1
            continue
        if character == "\t":
            columns += 4 - (columns % 4)
            continue
        break
    return columns


def _try_open_fence(ctx: ScannerContext, line: str) -> bool:
    """Detect the start of a fenced code block.

    Args:
        ctx: Scanner context to update when a fence opens.
        line: Current line being scanned.

    Returns:
        bool: True when the line begins a fence and the context is updated.

    Examples:
        _try_open_fence(ScannerContext(), "```python")  # True
    """
    if ctx.state is not ScannerState.NORMAL:
        return False

    fence_match = CODE_FENCE_PATTERN.match(line)
    if not fence_match:
        return False

    indent_columns = _leading_whitespace_columns(fence_match.group("indent") or "")
    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    fence_sequence = fence_match.group("fence")
    # Backtick fences may not carry backticks in their info string
    if fence_sequence[0] == "`" and "`" in fence_match.group("info"):
        return False

    ctx.state = ScannerState.IN_FENCED_CODE
    ctx.fence_char = fence_sequence[0]
    ctx.fence_length = len(fence_sequence)
    ctx.fence_indent_columns = indent_columns
    return True


def _try_close_fence(ctx: ScannerContext, line: str) -> bool:
    """Attempt to close the active fenced code block.

    A closing fence uses the opening character, is at least as long as the
    opening run, and carries no info string.

    Examples:
        ctx = ScannerContext(state=ScannerState.IN_FENCED_CODE, fence_char="`", fence_length=3)
        _try_close_fence(ctx, "```")  # True
    """
    if ctx.state is not ScannerState.IN_FENCED_CODE or ctx.fence_char is None:
        return False

    indent_columns = _leading_whitespace_columns(line)
    stripped_line = line.lstrip(" \t")
    if not stripped_line or stripped_line[0] != ctx.fence_char:
        return False

    fence_run_length = len(stripped_line) - len(stripped_line.lstrip(ctx.fence_char))
    if fence_run_length < ctx.fence_length:
        return False

    if stripped_line[fence_run_length:].strip():
        return False

    if indent_columns > CLOSING_FENCE_MAX_INDENT:
        return False

    ctx.state = ScannerState.NORMAL
    ctx.fence_char = None
    ctx.fence_length = 0
    ctx.fence_indent_columns = 0
    return True


def _heading_text(raw: str) -> str:
    # "## Title ##" renders as "Title"; a lone "#" run after the marker is empty
    return CLOSING_HASHES_PATTERN.sub("", raw).strip()


def scan_headings(raw_text: str) -> list[Heading]:
    """Collect ATX headings that appear outside fenced code blocks.

    A heading is one to six ``#`` characters (indented by at most three
    spaces) followed by whitespace and the title; an optional closing ``#``
    run is dropped from the title. Fence lines themselves and every line
    inside a fence are skipped. Each
    heading gets an id built from its text and zero-based source line, so ids
    are unique even for repeated titles.

    Args:
        raw_text: The Markdown source.

    Returns:
        list[Heading]: Headings in document order.

    Examples:
        scan_headings("# Title\\n```\\n# code\\n```\\n## Usage\\n")
        # [Heading(1, "Title", "title-0", 0), Heading(2, "Usage", "usage-4", 4)]
    """
    headings: list[Heading] = []
    ctx = ScannerContext()

    for line_index, line in enumerate(raw_text.splitlines()):
        if ctx.state is ScannerState.IN_FENCED_CODE:
            _try_close_fence(ctx, line)
            continue

        if _try_open_fence(ctx, line):
            continue

        heading_match = HEADING_PATTERN.match(line)
        if not heading_match:
            continue

        # Empty headings still render as tags, so they stay in the list
        text = _heading_text(heading_match.group("text") or "")
        headings.append(
            Heading(
                level=len(heading_match.group("hashes")),
                text=text,
                id=generate_heading_id(text, line_index),
                source_line_index=line_index,
            )
        )

    return headings


def _rendered_slug(inner_html: str) -> str:
    return generate_slug(unescape(_MARKUP_PATTERN.sub("", inner_html)))


def _find_heading(headings: list[Heading], start: int, level: int, inner_html: str) -> int | None:
    """Index of the record a rendered heading tag belongs to, or None.

    The first unconsumed record with the same level and the same slugged text
    wins, so records the renderer never emitted (headings inside HTML comments
    or math blocks) are skipped. When the text differs only because of inline
    markup, the next record is used if its level matches.
    """
    slug = _rendered_slug(inner_html)
    for index in range(start, len(headings)):
        candidate = headings[index]
        if candidate.level == level and generate_slug(candidate.text) == slug:
            return index

    if start < len(headings) and headings[start].level == level:
        return start
    return None


def inject_heading_ids(html: str, headings: list[Heading]) -> str:
    """Attach heading ids to the heading elements of rendered HTML.

    Heading elements are visited in document order and paired with scanned
    records that have not been used yet: preferably the first one with the same
    level and text, otherwise the next record when its level agrees. Records
    skipped over are never used afterwards. Elements that already carry an id,
    or that match no record (setext headings, headings inside block quotes),
    are left as they are. The pairing relies on the renderer emitting headings
    in source order.

    Args:
        html: HTML produced by the Markdown renderer.
        headings: Headings scanned from the same source.

    Returns:
        str: HTML whose heading tags carry ``id`` attributes.

    Examples:
        inject_heading_ids("<h1>Title</h1>", [Heading(1, "Title", "title-0", 0)])
        # '<h1 id="title-0">Title</h1>'
    """
    position = 0

    def add_id(match: re.Match) -> str:
        nonlocal position
        level = int(match.group("level"))
        attributes = match.group("attributes") or ""
        if _ID_ATTRIBUTE_PATTERN.search(attributes):
            return match.group(0)

        index = _find_heading(headings, position, level, match.group("inner"))
        if index is None:
            return match.group(0)

        position = index + 1
        return (
            f'<h{match.group("level")} id="{headings[index].id}"{attributes}>'
            f'{match.group("inner")}{match.group("close")}'
        )

    return _HEADING_ELEMENT_PATTERN.sub(add_id, html)
