from html import escape

import pytest

from markdown_viewer.models import BlockKind, ProtectedBlock
from markdown_viewer.protect import diagram_pattern, extract_protected, restore_protected


def test_block_math_is_captured_whole():
    text, blocks = extract_protected("Before\n$$\nE=mc^2\n$$\nAfter")

    assert text == "Before\n<!--PRESERVED_0-->\nAfter"
    assert blocks == [
        ProtectedBlock(BlockKind.MATH_BLOCK, "$$\nE=mc^2\n$$", 0, "$$\nE=mc^2\n$$")
    ]


def test_block_math_interior_does_not_trigger_inline_pass():
    _, blocks = extract_protected("$$\nE=mc^2\n$$")

    assert [block.kind for block in blocks] == [BlockKind.MATH_BLOCK]


def test_inline_math_is_captured():
    text, blocks = extract_protected("Energy $E=mc^2$ and $a_b$.")

    assert text == "Energy <!--PRESERVED_0--> and <!--PRESERVED_1-->."
    assert [block.original_text for block in blocks] == ["$E=mc^2$", "$a_b$"]
    assert all(block.kind is BlockKind.MATH_INLINE for block in blocks)


def test_inline_math_does_not_cross_lines():
    text, blocks = extract_protected("costs $5\nand $6")

    assert text == "costs $5\nand $6"
    assert blocks == []


def test_diagram_fence_is_captured_with_trimmed_content():
    source = "Intro\n```mermaid\ngraph TD\n  A-->B\n```\nOutro"

    text, blocks = extract_protected(source)

    assert text == "Intro\n<!--PRESERVED_0-->\nOutro"
    assert blocks[0].kind is BlockKind.DIAGRAM
    assert blocks[0].original_text == "```mermaid\ngraph TD\n  A-->B\n```"
    assert blocks[0].content == "graph TD\n  A-->B"


def test_other_fences_are_left_alone():
    source = "```python\nprint('hi')\n```"

    text, blocks = extract_protected(source)

    assert text == source
    assert blocks == []


def test_indices_follow_pass_order():
    source = "```mermaid\ngraph LR\n```\n$x$\n$$\ny\n$$\n"

    _, blocks = extract_protected(source)

    assert [(block.placeholder_index, block.kind) for block in blocks] == [
        (0, BlockKind.MATH_BLOCK),
        (1, BlockKind.MATH_INLINE),
        (2, BlockKind.DIAGRAM),
    ]


def test_diagram_keeps_inline_math_in_its_source():
    source = "```mermaid\ngraph LR\n  A[$x$]-->B\n```"

    _, blocks = extract_protected(source)

    diagram = blocks[-1]
    assert diagram.kind is BlockKind.DIAGRAM
    assert diagram.original_text == source
    assert "$x$" in diagram.content


def test_unterminated_delimiters_flow_through():
    source = "Price: $5\n$$\nno end\n```mermaid\ngraph TD\n"

    text, blocks = extract_protected(source)

    assert text == source
    assert blocks == []


def test_math_can_be_disabled():
    text, blocks = extract_protected("$x$ and $$\ny\n$$", math=False)

    assert text == "$x$ and $$\ny\n$$"
    assert blocks == []


def test_diagrams_can_be_disabled():
    source = "```mermaid\ngraph TD\n```"

    text, blocks = extract_protected(source, diagram_languages=())

    assert text == source
    assert blocks == []


def test_custom_diagram_languages():
    pattern = diagram_pattern(["mermaid", "graphviz"])

    assert pattern.search("```graphviz\ndigraph {}\n```")
    assert pattern.search("```Mermaid\ngraph TD\n```")
    assert not pattern.search("```plantuml\n@startuml\n```")


def test_restore_math_and_diagram_markup():
    source = "$$\na<b\n$$\nInline $x$\n```mermaid\nA-->B<br>\n```"
    text, blocks = extract_protected(source)

    html = restore_protected(text, blocks)

    assert html == "$$\na&lt;b\n$$\nInline $x$\n<pre class=\"mermaid\">A--&gt;B&lt;br&gt;</pre>"


def test_restore_escaped_placeholders_inside_code():
    text, blocks = extract_protected("`$x$`")
    rendered = "<p><code>" + escape(text.strip("`")) + "</code></p>"

    assert restore_protected(rendered, blocks) == "<p><code>$x$</code></p>"


def test_restore_leaves_unknown_placeholders():
    html = "<!--PRESERVED_9-->"

    assert restore_protected(html, []) == html


@pytest.mark.parametrize(
    "source",
    [
        "# Plain heading\n\nSome *emphasis* and `code`.",
        "<div>raw & html</div>",
        "",
    ],
)
def test_round_trip_without_protected_syntax(source: str):
    text, blocks = extract_protected(source)

    assert blocks == []
    assert restore_protected(text, blocks) == source


def test_extract_does_not_mutate_inputs():
    languages = ["mermaid"]
    source = "$x$"

    extract_protected(source, diagram_languages=languages)

    assert languages == ["mermaid"]
    assert source == "$x$"


def test_restore_takes_block_regions_out_of_their_paragraph():
    text, blocks = extract_protected("$$\nx\n$$\n\n```mermaid\nA\n```\n\n$y$\n")
    rendered = "".join(f"<p>{line}</p>\n" for line in text.strip().split("\n\n"))

    html = restore_protected(rendered, blocks)

    assert html == '$$\nx\n$$\n<pre class="mermaid">A</pre>\n<p>$y$</p>\n'
