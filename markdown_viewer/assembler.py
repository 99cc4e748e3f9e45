"""Assembly of the final, policy-restricted HTML page."""

from __future__ import annotations

from html import escape

from .config import ViewerConfig

PAGE_CSS = """\
    body {
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Oxygen, Ubuntu, Cantarell, sans-serif;
      line-height: 1.6;
      margin: 0;
      padding: 20px;
    }
    .layout {
      display: flex;
      gap: 32px;
      max-width: 1200px;
      margin: 0 auto;
    }
    nav.toc {
      flex: 0 0 240px;
      position: sticky;
      top: 20px;
      align-self: flex-start;
      max-height: calc(100vh - 40px);
      overflow-y: auto;
      font-size: 0.9em;
    }
    nav.toc .toc-title {
      font-size: 1em;
      margin: 0 0 8px 0;
    }
    nav.toc ul {
      list-style: none;
      margin: 0;
      padding-left: 12px;
    }
    nav.toc > ul {
      padding-left: 0;
    }
    nav.toc a {
      text-decoration: none;
    }
    .toc-empty {
      color: #888;
      font-style: italic;
    }
    main.content {
      flex: 1 1 auto;
      min-width: 0;
      max-width: 900px;
    }
    pre {
      background-color: #f5f5f5;
      border: 1px solid #e0e0e0;
      border-radius: 4px;
      padding: 12px;
      overflow-x: auto;
    }
    code {
      background-color: #f5f5f5;
      padding: 2px 4px;
      border-radius: 3px;
      font-family: 'Courier New', Courier, monospace;
      font-size: 0.9em;
    }
    pre code {
      background-color: transparent;
      padding: 0;
    }
    blockquote {
      border-left: 4px solid #ddd;
      margin: 0;
      padding-left: 16px;
      color: #666;
    }
    table {
      border-collapse: collapse;
      width: 100%;
      margin: 16px 0;
    }
    th, td {
      border: 1px solid #ddd;
      padding: 8px;
      text-align: left;
    }
    th {
      background-color: #f4f4f4;
    }
    img {
      max-width: 100%;
      height: auto;
    }
    .mermaid {
      background-color: transparent;
      border: none;
      text-align: center;
    }
    @media (max-width: 800px) {
      .layout {
        display: block;
      }
      nav.toc {
        position: static;
        max-height: none;
        margin-bottom: 24px;
      }
    }
"""

MATHJAX_CONFIG = (
    "window.MathJax = {tex: {inlineMath: [['$', '$'], ['\\\\(', '\\\\)']], "
    "displayMath: [['$$', '$$'], ['\\\\[', '\\\\]']]}};"
)

HIGHLIGHT_BOOTSTRAP = """\
    try {
      document.querySelectorAll('pre code').forEach((block) => hljs.highlightElement(block));
    } catch (error) {
      console.error('Syntax highlighting failed:', error);
    }
"""

MERMAID_BOOTSTRAP = """\
    mermaid.initialize({ startOnLoad: false, theme: 'default', securityLevel: 'strict' });
    try {
      await mermaid.run({ querySelector: '.mermaid' });
    } catch (error) {
      console.error('Mermaid rendering failed:', error);
    }
"""

MATHJAX_BOOTSTRAP = """\
    if (window.MathJax && window.MathJax.typesetPromise) {
      window.MathJax.typesetPromise().catch((error) => console.error('MathJax rendering failed:', error));
    }
"""


def content_security_policy(token: str, config: ViewerConfig) -> str:
    """Build the content policy that only lets this pass's scripts run.

    Examples:
        content_security_policy("abc123", ViewerConfig())
    """
    img_sources = " ".join((*config.resource_origins, "https:", "data:"))
    return (
        "default-src 'none'; "
        f"img-src {img_sources}; "
        f"script-src 'nonce-{token}' {config.cdn_origin}; "
        f"style-src 'unsafe-inline' {config.cdn_origin}; "
        "font-src https: data:;"
    )


def _script_tags(token: str, config: ViewerConfig) -> list[str]:
    nonce = f'nonce="{token}"'
    tags = []
    if config.enable_math:
        tags.append(f"<script {nonce}>{MATHJAX_CONFIG}</script>")
        tags.append(f'<script async id="MathJax-script" src="{escape(config.mathjax_url)}" {nonce}></script>')
    if config.enable_highlight:
        tags.append(f'<script src="{escape(config.highlight_js_url)}" {nonce}></script>')

    module_body = []
    if config.enable_diagrams:
        module_body.append(f"    import mermaid from '{config.mermaid_url}';\n")
    if config.enable_highlight:
        module_body.append(HIGHLIGHT_BOOTSTRAP)
    if config.enable_diagrams:
        module_body.append(MERMAID_BOOTSTRAP)
    if config.enable_math:
        module_body.append(MATHJAX_BOOTSTRAP)
    if module_body:
        tags.append(f'<script type="module" {nonce}>\n{"".join(module_body)}  </script>')
    return tags


def assemble_document(
    body_html: str,
    toc_html: str,
    token: str,
    config: ViewerConfig | None = None,
    title: str | None = None,
) -> str:
    """Compose the complete HTML page for one render pass.

    The content policy and every script tag reference `token`, so only the
    scripts emitted here can run. The navigation region is omitted when the
    configuration disables the table of contents.

    Args:
        body_html: Rendered document body.
        toc_html: Table-of-contents markup.
        token: Nonce generated for this pass.
        config: Page configuration; defaults to `ViewerConfig()`.
        title: Page title; defaults to `config.title`.

    Returns:
        str: A complete HTML document.

    Raises:
        ValueError: If `token` is empty or not alphanumeric.

    Examples:
        assemble_document("<p>Hi</p>", render_toc_html(build_toc_tree([])), generate_nonce())
    """
    if not token or not token.isascii() or not token.isalnum():
        raise ValueError("Security token must be a non-empty alphanumeric string")

    config = config or ViewerConfig()
    page_title = escape(title or config.title)

    head_links = ""
    if config.enable_highlight:
        head_links = f'\n  <link rel="stylesheet" href="{escape(config.highlight_css_url)}">'

    nav = ""
    if config.include_toc:
        nav = (
            '\n  <nav class="toc" aria-label="Table of contents">\n'
            f'  <h2 class="toc-title">{escape(config.toc_title)}</h2>\n'
            f"{toc_html}\n"
            "  </nav>"
        )

    scripts = "\n".join(_script_tags(token, config))

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="Content-Security-Policy" content="{content_security_policy(token, config)}">
  <title>{page_title}</title>{head_links}
  <style>
{PAGE_CSS}  </style>
</head>
<body>
<div class="layout">{nav}
  <main class="content">
{body_html}
  </main>
</div>
{scripts}
</body>
</html>
"""
