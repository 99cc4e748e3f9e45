"""Sanitization of rendered document bodies."""

from __future__ import annotations

from functools import lru_cache

import bleach

ALLOWED_TAGS = frozenset(bleach.sanitizer.ALLOWED_TAGS) | {
    # text
    "p",
    "br",
    "hr",
    "span",
    "div",
    "del",
    "s",
    "ins",
    "sup",
    "sub",
    "mark",
    "kbd",
    # headings
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    # code
    "pre",
    "code",
    # tables
    "table",
    "thead",
    "tbody",
    "tr",
    "th",
    "td",
    # media
    "img",
    "figure",
    "figcaption",
}

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "code": ["class"],
    "pre": ["class"],
    "ol": ["start"],
    "th": ["colspan", "rowspan"],
    "td": ["colspan", "rowspan"],
}

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", "data"})


@lru_cache(maxsize=1)
def _cleaner() -> bleach.Cleaner:
    return bleach.Cleaner(
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=False,
        strip_comments=True,
    )


def sanitize_html(html: str) -> str:
    """Neutralize raw markup a document smuggles into its rendered body.

    Tags outside the allow-list, such as ``<script>``, ``<iframe>`` or
    ``<style>``, are escaped and shown as text. Event-handler attributes and
    unsafe URL schemes are dropped, and comments are removed. Only the assembled
    page itself may carry executable tags.

    Run on the body after protected regions are restored and before heading
    ids are injected: the ``<pre class="mermaid">`` containers survive, and
    ids are never taken from raw markup.

    Examples:
        sanitize_html('<p>Hi</p><script>alert(1)</script>')
        # '<p>Hi</p>&lt;script&gt;alert(1)&lt;/script&gt;'
    """
    return _cleaner().clean(html)
