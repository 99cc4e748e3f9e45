"""Table of contents tree building and rendering."""

from __future__ import annotations

from collections.abc import Iterable
from html import escape

from .constants import EMPTY_TOC_HTML
from .models import Heading, TocNode


def build_toc_tree(headings: Iterable[Heading]) -> TocNode:
    """Nest a flat heading list into an outline tree.

    Keeps a stack of open nodes, starting with a level-0 virtual root. Each
    heading closes every open node of equal or deeper level and becomes the
    last child of whatever remains on top. Skipped levels therefore nest one
    step down: an H4 right after an H1 is a child of the H1.

    Args:
        headings: Headings in document order.

    Returns:
        TocNode: The virtual root; it has no children when `headings` is empty.

    Examples:
        root = build_toc_tree(scan_headings("# A\\n### B\\n## C\\n"))
        [child.heading.text for child in root.children[0].children]  # ["B", "C"]
    """
    root = TocNode()
    stack = [root]

    for heading in headings:
        while stack[-1].level >= heading.level:
            stack.pop()
        node = TocNode(heading=heading)
        stack[-1].children.append(node)
        stack.append(node)

    return root


def _render_children(node: TocNode, lines: list[str], depth: int) -> None:
    indent = "  " * depth
    lines.append(f'{indent}<ul class="toc-list">')
    for child in node.children:
        heading = child.heading
        link = f'<a href="#{heading.id}">{escape(heading.text)}</a>'
        if child.children:
            lines.append(f"{indent}  <li>{link}")
            _render_children(child, lines, depth + 2)
            lines.append(f"{indent}  </li>")
        else:
            lines.append(f"{indent}  <li>{link}</li>")
    lines.append(f"{indent}</ul>")


def render_toc_html(root: TocNode) -> str:
    """Render a TOC tree as nested lists of in-document links.

    A root without children renders an explicit "No headings" notice instead of
    an empty list.

    Examples:
        render_toc_html(build_toc_tree([]))  # '<p class="toc-empty">No headings</p>'
    """
    if not root.children:
        return EMPTY_TOC_HTML

    lines: list[str] = []
    _render_children(root, lines, 0)
    return "\n".join(lines)
