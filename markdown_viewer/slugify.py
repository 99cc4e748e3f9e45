"""Anchor identifiers for Markdown headings."""

from __future__ import annotations

import re


def generate_slug(title: str) -> str:
    """Generate a URL-style slug from a heading title.

    Lower-cases the title, removes characters outside the word, whitespace and
    hyphen classes, and collapses whitespace runs to single hyphens. Unicode
    letters are kept.

    Args:
        title: The heading text to convert into a slug.

    Returns:
        str: Hyphen-separated slug; empty when nothing survives normalization.

    Examples:
        generate_slug("Hello World")  # "hello-world"
        generate_slug("What's New?")  # "whats-new"
        generate_slug("Café au lait")  # "café-au-lait"
    """
    slug = title.lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug.strip())
    return slug


def generate_heading_id(title: str, line_index: int) -> str:
    """Build a heading identifier that is unique within one document.

    The zero-based source line is appended to the slug, so repeated headings
    never collide.

    Examples:
        generate_heading_id("Usage", 4)  # "usage-4"
        generate_heading_id("!!!", 0)  # "heading-0"
    """
    slug = generate_slug(title) or "heading"
    return f"{slug}-{line_index}"
