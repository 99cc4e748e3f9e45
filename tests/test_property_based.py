from __future__ import annotations

import re
import string

from hypothesis import given
from hypothesis import strategies as st

from markdown_viewer.constants import NONCE_ALPHABET
from markdown_viewer.headings import scan_headings
from markdown_viewer.nonce import generate_nonce
from markdown_viewer.protect import extract_protected, restore_protected
from markdown_viewer.slugify import generate_heading_id, generate_slug
from markdown_viewer.toc import build_toc_tree

title_strategy = st.text(
    alphabet=string.ascii_letters + string.digits + " _-",
    min_size=1,
    max_size=32,
).filter(lambda title: title.strip())


@given(st.text())
def test_generate_slug_has_no_whitespace_or_punctuation(title: str):
    slug = generate_slug(title)
    assert not re.search(r"\s", slug)
    assert re.fullmatch(r"[\w-]*", slug)


@given(st.text(alphabet=string.printable))
def test_generate_slug_is_idempotent(title: str):
    slug = generate_slug(title)
    assert generate_slug(slug) == slug


@given(st.text(), st.integers(min_value=0, max_value=10_000))
def test_heading_id_is_never_empty(title: str, line_index: int):
    heading_id = generate_heading_id(title, line_index)
    assert heading_id.endswith(f"-{line_index}")
    assert len(heading_id) > len(f"-{line_index}")


@given(
    st.lists(
        st.tuples(st.integers(min_value=1, max_value=6), title_strategy), min_size=1, max_size=30
    )
)
def test_heading_ids_are_unique(data):
    source = "\n".join(f"{'#' * level} {title}" for level, title in data)

    headings = scan_headings(source)

    assert [heading.level for heading in headings] == [level for level, _ in data]
    ids = [heading.id for heading in headings]
    assert len(ids) == len(set(ids))


@given(
    st.lists(title_strategy, max_size=10),
    st.sampled_from(["```", "~~~", "````"]),
)
def test_headings_inside_fences_are_ignored(fenced_titles, fence):
    body = "\n".join(f"# {title}" for title in fenced_titles)
    source = f"# Before\n{fence}python\n{body}\n{fence}\n## After\n"

    headings = scan_headings(source)

    assert [(heading.level, heading.text) for heading in headings] == [
        (1, "Before"),
        (2, "After"),
    ]


def _walk(node):
    for child in node.children:
        yield node, child
        yield from _walk(child)


@given(st.lists(st.integers(min_value=1, max_value=6), max_size=40))
def test_toc_children_are_deeper_than_parents(levels):
    source = "\n".join(f"{'#' * level} H{index}" for index, level in enumerate(levels))
    headings = scan_headings(source)

    root = build_toc_tree(headings)

    pairs = list(_walk(root))
    assert all(child.level > parent.level for parent, child in pairs)
    assert [child.heading for _, child in pairs] == headings


math_text = st.text(alphabet="ab $\n\\^_{}*`#", max_size=80)


@given(math_text)
def test_restoring_unrendered_math_returns_source(text: str):
    placeholder_text, blocks = extract_protected(text, diagram_languages=())

    assert restore_protected(placeholder_text, blocks) == text


@given(math_text)
def test_placeholders_are_numbered_in_order(text: str):
    placeholder_text, blocks = extract_protected(text, diagram_languages=())

    assert [block.placeholder_index for block in blocks] == list(range(len(blocks)))
    for block in blocks:
        assert block.original_text in text


@given(st.integers(min_value=1, max_value=128))
def test_nonce_shape(length: int):
    nonce = generate_nonce(length)
    assert len(nonce) == length
    assert set(nonce) <= set(NONCE_ALPHABET)
