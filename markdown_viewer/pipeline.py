"""Render pipeline: raw Markdown document in, sandbox-ready HTML page out.

One pass runs synchronously to completion and keeps no state between calls:

1. protected regions are swapped for placeholders;
2. the placeholder text goes through the Markdown renderer;
3. placeholders are restored, raw markup is sanitized, heading tags get
   their ids, and image sources are rewritten to addressable URIs;
4. anchored headings scanned from the raw text become the table of contents;
5. a fresh nonce gates the scripts of the assembled page.
"""

from __future__ import annotations

import logging
from typing import Protocol

from .assembler import assemble_document
from .config import ViewerConfig
from .constants import RENDER_FAILURE_NOTICE
from .exceptions import RenderFailure
from .headings import inject_heading_ids, scan_headings
from .images import UriResolver, rewrite_image_sources, to_file_uri
from .models import RawDocument, RenderContext
from .nonce import generate_nonce
from .protect import extract_protected, restore_protected
from .renderer import MarkdownRenderer, create_markdown_renderer
from .sanitize import sanitize_html
from .toc import build_toc_tree, render_toc_html

logger = logging.getLogger(__name__)


def build_render_context(
    document: RawDocument,
    *,
    config: ViewerConfig | None = None,
    renderer: MarkdownRenderer | None = None,
    to_addressable: UriResolver = to_file_uri,
) -> RenderContext:
    """Run every pipeline stage for `document` except final assembly.

    Args:
        document: Snapshot of the host document.
        config: Rendering configuration; defaults to `ViewerConfig()`.
        renderer: Markdown renderer; defaults to the shared markdown-it renderer.
        to_addressable: URI-resolution service used for image sources.

    Returns:
        RenderContext: Body HTML, TOC markup, headings and a fresh nonce.

    Raises:
        RenderFailure: If the Markdown renderer raises.
    """
    config = config or ViewerConfig()
    renderer = renderer or create_markdown_renderer()
    logger.debug("Rendering %s", document.source or "<unsaved document>")

    placeholder_text, blocks = extract_protected(
        document.text,
        math=config.enable_math,
        diagram_languages=config.diagram_languages if config.enable_diagrams else (),
    )
    headings = scan_headings(document.text)

    try:
        html = renderer.render(placeholder_text)
    except Exception as error:
        raise RenderFailure(document.source, str(error) or type(error).__name__) from error

    html = restore_protected(html, blocks)
    html = sanitize_html(html)
    html = inject_heading_ids(html, headings)
    html = rewrite_image_sources(html, document, to_addressable)

    # Headings the renderer never emitted have no anchor to link to
    toc_headings = [
        heading
        for heading in headings
        if heading.text
        and heading.level <= config.toc_max_level
        and f' id="{heading.id}"' in html
    ]
    toc_html = render_toc_html(build_toc_tree(toc_headings))

    return RenderContext(
        security_token=generate_nonce(),
        document_html=html,
        toc_html=toc_html,
        headings=tuple(headings),
        title=config.title,
    )


def render_document(
    document: RawDocument,
    *,
    config: ViewerConfig | None = None,
    renderer: MarkdownRenderer | None = None,
    to_addressable: UriResolver = to_file_uri,
) -> str:
    """Render `document` to a complete HTML page.

    Raises:
        RenderFailure: If the Markdown renderer raises.

    Examples:
        html = render_document(RawDocument(text="# Hello", base_location=Path.cwd()))
    """
    config = config or ViewerConfig()
    context = build_render_context(
        document, config=config, renderer=renderer, to_addressable=to_addressable
    )
    return assemble_document(
        context.document_html,
        context.toc_html,
        context.security_token,
        config,
        title=context.title,
    )


class DisplaySurface(Protocol):
    """Where finished pages and failure notices are shown."""

    def show(self, html: str) -> None: ...

    def show_error(self, message: str) -> None: ...


class RenderSession:
    """Caller-owned record of what is being previewed and where.

    Holds the current document identity, the display surface, and the last
    page that rendered successfully. A failed pass never replaces that page.

    Args:
        surface: Display surface receiving pages and failure notices.
        config: Rendering configuration shared by every pass of the session.
        renderer: Markdown renderer; defaults to the shared markdown-it renderer.
        to_addressable: URI-resolution service used for image sources.
    """

    def __init__(
        self,
        surface: DisplaySurface,
        config: ViewerConfig | None = None,
        renderer: MarkdownRenderer | None = None,
        to_addressable: UriResolver = to_file_uri,
    ):
        self.surface: DisplaySurface | None = surface
        self.config = config or ViewerConfig()
        self.renderer = renderer
        self.to_addressable = to_addressable
        self.current_source: str | None = None
        self.last_html: str | None = None
        self.last_error: RenderFailure | None = None

    @property
    def is_open(self) -> bool:
        return self.surface is not None

    def show(self, document: RawDocument) -> str:
        """Make `document` the current document and render it.

        Raises:
            RuntimeError: If the session was closed.
            RenderFailure: If rendering fails; the last good page stays shown.
        """
        if self.surface is None:
            raise RuntimeError("Render session is closed")
        self.current_source = document.source
        return self._render(document)

    def refresh(self, document: RawDocument) -> str | None:
        """Re-render after an edit, but only for the current document.

        Returns:
            str | None: The new page, or None when `document` is not the one
                being previewed or the session is closed.

        Raises:
            RenderFailure: If rendering fails; the last good page stays shown.
        """
        if self.surface is None or document.source != self.current_source:
            return None
        return self._render(document)

    def close(self) -> None:
        """Forget the surface and the current document."""
        self.surface = None
        self.current_source = None

    def _render(self, document: RawDocument) -> str:
        try:
            html = render_document(
                document,
                config=self.config,
                renderer=self.renderer,
                to_addressable=self.to_addressable,
            )
        except RenderFailure as error:
            logger.debug("Render pass failed for %s", document.source, exc_info=True)
            self.last_error = error
            self.surface.show_error(RENDER_FAILURE_NOTICE.format(reason=error.reason))
            raise

        self.last_html = html
        self.last_error = None
        self.surface.show(html)
        return html
