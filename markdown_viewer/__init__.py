"""
markdown-viewer: sandbox-ready HTML previews for Markdown documents.

Diagram (Mermaid) and math (MathJax) regions are kept away from the Markdown
renderer, headings get stable anchors and a nested table of contents, image
references are turned into addressable URIs, and every page only runs scripts
that carry its own nonce.

CLI Usage:
    markdown-viewer README.md -o preview.html

Library Usage:
    from pathlib import Path
    from markdown_viewer import RawDocument, render_document

    document = RawDocument.from_path(Path("README.md"))
    html = render_document(document)
"""

from .assembler import assemble_document
from .config import ConfigError, ViewerConfig, build_config, load_config
from .exceptions import DocumentReadError, PathResolutionError, RenderFailure, ViewerError
from .headings import inject_heading_ids, scan_headings
from .images import SandboxResolver, resolve_image_path, rewrite_image_sources, to_file_uri
from .models import BlockKind, Heading, ProtectedBlock, RawDocument, RenderContext, TocNode
from .nonce import generate_nonce
from .pipeline import DisplaySurface, RenderSession, build_render_context, render_document
from .protect import extract_protected, restore_protected
from .sanitize import sanitize_html
from .slugify import generate_heading_id, generate_slug
from .toc import build_toc_tree, render_toc_html

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "render_document",
    "build_render_context",
    "RenderSession",
    "DisplaySurface",
    # Stages
    "extract_protected",
    "restore_protected",
    "sanitize_html",
    "scan_headings",
    "inject_heading_ids",
    "build_toc_tree",
    "render_toc_html",
    "resolve_image_path",
    "rewrite_image_sources",
    "generate_nonce",
    "assemble_document",
    # URI services
    "to_file_uri",
    "SandboxResolver",
    # Data models
    "RawDocument",
    "ProtectedBlock",
    "BlockKind",
    "Heading",
    "TocNode",
    "RenderContext",
    # Configuration
    "ViewerConfig",
    "load_config",
    "build_config",
    # Utilities
    "generate_slug",
    "generate_heading_id",
    # Exceptions
    "ViewerError",
    "RenderFailure",
    "PathResolutionError",
    "DocumentReadError",
    "ConfigError",
    # Version
    "__version__",
]
