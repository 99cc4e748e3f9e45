"""Constants used across the markdown-viewer package."""

from __future__ import annotations

import re
import string

# Heading and fence patterns
HEADING_PATTERN = re.compile(r"^ {0,3}(?P<hashes>#{1,6})(?:[ \t]+(?P<text>.*?))?[ \t]*$")
CLOSING_HASHES_PATTERN = re.compile(r"(?:^|[ \t]+)#+$")
CODE_FENCE_PATTERN = re.compile(r"^(?P<indent>\s{0,3})(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
CLOSING_FENCE_MAX_INDENT = 3

# Protected regions
PLACEHOLDER_PREFIX = "<!--PRESERVED_"
PLACEHOLDER_TEMPLATE = PLACEHOLDER_PREFIX + "{index}-->"
PLACEHOLDER_PATTERN = re.compile(r"<!--PRESERVED_(\d+)-->")
PARAGRAPH_PLACEHOLDER_PATTERN = re.compile(r"<p><!--PRESERVED_(\d+)--></p>")
ESCAPED_PLACEHOLDER_PATTERN = re.compile(r"&lt;!--PRESERVED_(\d+)--&gt;")
MATH_BLOCK_PATTERN = re.compile(r"\$\$\s*\n.*?\$\$", re.DOTALL)
MATH_INLINE_PATTERN = re.compile(r"\$[^$\n]+\$")
DIAGRAM_CLASS = "mermaid"

# Security token
NONCE_ALPHABET = string.ascii_letters + string.digits
NONCE_LENGTH = 32

# Schemes that bypass image path resolution
PASSTHROUGH_SCHEMES = ("http://", "https://", "data:")

# Host documents
MARKDOWN_EXTENSIONS = (".md", ".markdown", ".mdown", ".mkd", ".mkdn")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024

RENDER_FAILURE_NOTICE = "Failed to render markdown: {reason}"
EMPTY_TOC_HTML = '<p class="toc-empty">No headings</p>'
