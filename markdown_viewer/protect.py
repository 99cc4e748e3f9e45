"""Protection of diagram and math regions from the Markdown renderer.

Math and diagram notations are swapped for HTML-comment placeholders before
rendering and put back afterwards, so the renderer never escapes ``$``,
backslashes, or arrows inside them.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from html import escape

from .constants import (
    DIAGRAM_CLASS,
    ESCAPED_PLACEHOLDER_PATTERN,
    MATH_BLOCK_PATTERN,
    MATH_INLINE_PATTERN,
    PARAGRAPH_PLACEHOLDER_PATTERN,
    PLACEHOLDER_PATTERN,
    PLACEHOLDER_TEMPLATE,
)
from .models import BlockKind, ProtectedBlock

logger = logging.getLogger(__name__)


def diagram_pattern(languages: Iterable[str]) -> re.Pattern[str]:
    """Build the pattern matching backtick fences tagged with a diagram language.

    Examples:
        diagram_pattern(["mermaid"]).search("```mermaid\\ngraph TD\\n```")
    """
    alternatives = "|".join(re.escape(language) for language in languages)
    return re.compile(
        rf"^ {{0,3}}```[ \t]*(?:{alternatives})[ \t]*\n(?P<code>.*?)^ {{0,3}}```[ \t]*$",
        re.MULTILINE | re.DOTALL | re.IGNORECASE,
    )


def _expand_placeholders(text: str, blocks: Sequence[ProtectedBlock]) -> str:
    """Replace placeholders left inside `text` by earlier passes with their source."""

    def expand(match: re.Match) -> str:
        index = int(match.group(1))
        if index < len(blocks):
            return blocks[index].original_text
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(expand, text)


def _extract_pass(
    text: str,
    pattern: re.Pattern[str],
    kind: BlockKind,
    blocks: list[ProtectedBlock],
    content_group: str | None = None,
) -> str:
    def protect(match: re.Match) -> str:
        original_text = _expand_placeholders(match.group(0), blocks)
        if content_group is None:
            content = original_text
        else:
            content = _expand_placeholders(match.group(content_group), blocks).strip()

        index = len(blocks)
        blocks.append(
            ProtectedBlock(
                kind=kind,
                original_text=original_text,
                placeholder_index=index,
                content=content,
            )
        )
        return PLACEHOLDER_TEMPLATE.format(index=index)

    return pattern.sub(protect, text)


def extract_protected(
    raw_text: str,
    *,
    math: bool = True,
    diagram_languages: Sequence[str] = ("mermaid",),
) -> tuple[str, list[ProtectedBlock]]:
    """Swap protected regions for placeholders.

    Args:
        raw_text: The Markdown source.
        math: Whether to protect ``$$...$$`` blocks and ``$...$`` spans.
        diagram_languages: Fence info strings treated as diagrams; an empty
            sequence disables diagram protection.

    Returns:
        tuple[str, list[ProtectedBlock]]: Text with placeholders, and the
            extracted blocks ordered by placeholder index.

    Examples:
        text, blocks = extract_protected("Energy: $E=mc^2$")
        # text == "Energy: <!--PRESERVED_0-->"
    """
    blocks: list[ProtectedBlock] = []
    text = raw_text

    # Pass order is fixed. Block math runs first because its "$$" opener would
    # otherwise be consumed by the single "$" inline pattern; inline math runs
    # before diagrams so every "$" span is claimed by the math passes only.
    if math:
        text = _extract_pass(text, MATH_BLOCK_PATTERN, BlockKind.MATH_BLOCK, blocks)
        text = _extract_pass(text, MATH_INLINE_PATTERN, BlockKind.MATH_INLINE, blocks)
    if diagram_languages:
        text = _extract_pass(
            text, diagram_pattern(diagram_languages), BlockKind.DIAGRAM, blocks, "code"
        )

    logger.debug("Extracted %d protected region(s)", len(blocks))
    return text, blocks


# Kinds whose markup is block-level and must not stay inside a paragraph
_BLOCK_KINDS = frozenset({BlockKind.DIAGRAM, BlockKind.MATH_BLOCK})


def _final_markup(block: ProtectedBlock) -> str:
    if block.kind is BlockKind.DIAGRAM:
        return f'<pre class="{DIAGRAM_CLASS}">{escape(block.content, quote=False)}</pre>'
    # Math keeps its delimiters; only markup-significant characters are escaped
    return escape(block.original_text, quote=False)


def restore_protected(html_text: str, blocks: Sequence[ProtectedBlock]) -> str:
    """Replace placeholders in rendered HTML with their final markup.

    Diagrams become ``<pre class="mermaid">`` containers carrying the diagram
    source; math regions come back verbatim with their delimiters. A diagram or
    math block that the renderer wrapped in a paragraph of its own is taken
    out of that paragraph. Placeholders
    the renderer escaped (inside code spans or code blocks) come back as the
    escaped source text. Unknown placeholder indices are left untouched.

    Args:
        html_text: HTML produced from the placeholder text.
        blocks: Blocks returned by `extract_protected` for the same pass.

    Returns:
        str: HTML with every known placeholder substituted.

    Examples:
        text, blocks = extract_protected("$x$")
        restore_protected("<p>" + text + "</p>", blocks)  # "<p>$x$</p>"
    """
    by_index = {block.placeholder_index: block for block in blocks}

    def unwrap(match: re.Match) -> str:
        block = by_index.get(int(match.group(1)))
        if block is None:
            return match.group(0)
        if block.kind in _BLOCK_KINDS:
            return _final_markup(block)
        return f"<p>{_final_markup(block)}</p>"

    def restore(match: re.Match) -> str:
        block = by_index.get(int(match.group(1)))
        if block is None:
            return match.group(0)
        return _final_markup(block)

    def restore_escaped(match: re.Match) -> str:
        block = by_index.get(int(match.group(1)))
        if block is None:
            return match.group(0)
        return escape(block.original_text, quote=False)

    html_text = PARAGRAPH_PLACEHOLDER_PATTERN.sub(unwrap, html_text)
    html_text = PLACEHOLDER_PATTERN.sub(restore, html_text)
    return ESCAPED_PLACEHOLDER_PATTERN.sub(restore_escaped, html_text)
