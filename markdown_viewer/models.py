"""Data models for markdown-viewer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from .exceptions import DocumentReadError
from .filesystem import get_max_file_size, read_text_file


class ScannerState(Enum):
    """Scanner states used while walking Markdown lines for headings.

    Attributes:
        NORMAL: Default state for regular text.
        IN_FENCED_CODE: Inside a fenced code block.
    """

    NORMAL = auto()
    IN_FENCED_CODE = auto()


@dataclass
class ScannerContext:
    """Encapsulate scanner state while walking Markdown text.

    Attributes:
        state: Current scanner state.
        fence_char: Fence character that opened a fenced code block, if any.
        fence_length: Number of fence characters that opened the block.
        fence_indent_columns: Indentation width preceding the opening fence.
    """

    state: ScannerState = ScannerState.NORMAL
    fence_char: str | None = None
    fence_length: int = 0
    fence_indent_columns: int = 0


class BlockKind(Enum):
    """Kinds of protected regions pulled out before Markdown rendering."""

    DIAGRAM = "diagram"
    MATH_BLOCK = "math-block"
    MATH_INLINE = "math-inline"


@dataclass(frozen=True)
class ProtectedBlock:
    """A region of source text that must bypass the Markdown renderer.

    Attributes:
        kind: Which micro-language the region belongs to.
        original_text: Exact matched substring, delimiters included.
        placeholder_index: Position of the block in the extraction sequence.
        content: Normalized payload used on restoration; the trimmed diagram
            source for diagrams, the original text for math.
    """

    kind: BlockKind
    original_text: str
    placeholder_index: int
    content: str = ""


@dataclass(frozen=True)
class Heading:
    """A heading found outside fenced code.

    Attributes:
        level: Heading level, 1 to 6.
        text: Trimmed heading content.
        id: Anchor identifier, unique within one render.
        source_line_index: Zero-based line of the heading in the source.
    """

    level: int
    text: str
    id: str
    source_line_index: int


@dataclass
class TocNode:
    """Node of the table-of-contents tree.

    The virtual root has no heading and level 0.

    Attributes:
        heading: Heading represented by this node, or None for the root.
        children: Child nodes in document order.
    """

    heading: Heading | None = None
    children: list[TocNode] = field(default_factory=list)

    @property
    def level(self) -> int:
        return self.heading.level if self.heading is not None else 0


@dataclass(frozen=True)
class RawDocument:
    """Immutable snapshot of a host document taken for one render pass.

    Attributes:
        text: Full Markdown source.
        base_location: Directory used to resolve relative references.
        root_locations: Additional search roots, e.g. workspace folders.
        source: Identity of the document (path or URI), used in error reports.
    """

    text: str
    base_location: Path
    root_locations: tuple[Path, ...] = ()
    source: str | None = None

    @classmethod
    def from_path(
        cls,
        filepath: Path,
        root_locations: tuple[Path, ...] | list[Path] = (),
        max_file_size: int | None = None,
    ) -> RawDocument:
        """Snapshot a Markdown file from disk.

        Args:
            filepath: Path to the Markdown file.
            root_locations: Roots used for root-relative image references.
            max_file_size: Size limit in bytes; the environment override or the
                package default applies when omitted.

        Returns:
            RawDocument: Snapshot whose base location is the file's directory.

        Raises:
            DocumentReadError: If the file is inaccessible, too large, or not
                valid UTF-8.
        """
        filepath = Path(filepath)
        try:
            limit = get_max_file_size() if max_file_size is None else max_file_size
            text = read_text_file(filepath, limit)
        except UnicodeDecodeError as error:
            raise DocumentReadError(f"Invalid UTF-8 sequence in {filepath}: {error}") from error
        except (IOError, ValueError) as error:
            raise DocumentReadError(str(error)) from error

        return cls(
            text=text,
            base_location=filepath.parent,
            root_locations=tuple(Path(root) for root in root_locations),
            source=str(filepath),
        )


@dataclass(frozen=True)
class RenderContext:
    """Everything needed to assemble the output document of one pass.

    Attributes:
        security_token: Fresh nonce gating the scripts of this pass.
        document_html: Rendered, restored and image-resolved body HTML.
        toc_html: Table-of-contents markup.
        headings: Headings discovered in the source.
        title: Document title placed in the page head.
    """

    security_token: str
    document_html: str
    toc_html: str
    headings: tuple[Heading, ...] = ()
    title: str | None = None
