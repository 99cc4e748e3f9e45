"""
Renders a Markdown file to a self-contained HTML preview.
The page is written to the output file when one is given, otherwise to stdout.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from .config import ConfigError, build_config
from .exceptions import DocumentReadError, RenderFailure
from .filesystem import get_max_file_size, normalize_filepath, write_atomic
from .images import SandboxResolver, to_file_uri
from .models import RawDocument
from .pipeline import RenderSession

__all__ = ["cli"]


class FileSurface:
    """Display surface writing each page atomically to a file."""

    def __init__(self, output: Path):
        self.output = output

    def show(self, html: str) -> None:
        write_atomic(self.output, html)

    def show_error(self, message: str) -> None:
        click.echo(message, err=True)


class StdoutSurface:
    """Display surface printing each page to standard output."""

    def show(self, html: str) -> None:
        click.echo(html, nl=False)

    def show_error(self, message: str) -> None:
        click.echo(message, err=True)


@click.command()
@click.version_option(package_name="markdown-viewer")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the HTML page to this file instead of stdout",
)
@click.option(
    "--root",
    "roots",
    multiple=True,
    type=click.Path(exists=True, file_okay=False),
    help="Workspace root for /-prefixed image paths (repeatable; the first one wins)",
)
@click.option("--title", help="Page title")
@click.option("--no-toc", is_flag=True, help="Omit the table of contents")
@click.option("--no-math", is_flag=True, help="Do not protect math or load MathJax")
@click.option("--no-diagrams", is_flag=True, help="Do not protect diagrams or load Mermaid")
@click.option("--no-highlight", is_flag=True, help="Do not load highlight.js")
@click.option(
    "--sandbox",
    is_flag=True,
    help="Only resolve images inside the document directory and the workspace roots",
)
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline details to stderr")
@click.argument("filepath", type=click.Path(exists=True, dir_okay=False))
def cli(
    filepath: str,
    output: str | None = None,
    roots: tuple[str, ...] = (),
    title: str | None = None,
    no_toc: bool = False,
    no_math: bool = False,
    no_diagrams: bool = False,
    no_highlight: bool = False,
    sandbox: bool = False,
    verbose: bool = False,
):
    """
    Render a Markdown file to a sandbox-ready HTML page.

    Args:
        filepath: Path to the Markdown file to render.
        output: Destination HTML file; stdout when omitted.
        roots: Workspace roots used for root-relative image paths.
        title: Override for the page title.
        no_toc: Omit the navigation region.
        no_math: Disable math protection and MathJax.
        no_diagrams: Disable diagram protection and Mermaid.
        no_highlight: Disable highlight.js.
        sandbox: Refuse image paths outside the document directory and roots.
        verbose: Enable debug logging.

    Raises:
        click.BadParameter: If the path or configuration is invalid.
        click.ClickException: If the document cannot be read or the page
            cannot be written.
        click.exceptions.Exit: With status 1 when rendering fails, after the
            failure notice was printed.

    Examples:
        markdown-viewer README.md -o preview.html --root .
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        path = normalize_filepath(filepath)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error

    try:
        config = build_config(
            path.parent,
            title=title,
            include_toc=False if no_toc else None,
            enable_math=False if no_math else None,
            enable_diagrams=False if no_diagrams else None,
            enable_highlight=False if no_highlight else None,
        )
    except ConfigError as error:
        raise click.BadParameter(str(error)) from error

    root_paths = tuple(Path(root).resolve() for root in roots)
    try:
        max_file_size = get_max_file_size(default=config.max_file_size)
        document = RawDocument.from_path(path, root_paths, max_file_size=max_file_size)
    except (ValueError, DocumentReadError) as error:
        raise click.ClickException(str(error)) from error

    to_addressable = SandboxResolver((path.parent, *root_paths)) if sandbox else to_file_uri
    surface = FileSurface(Path(output)) if output else StdoutSurface()
    session = RenderSession(surface, config, to_addressable=to_addressable)

    try:
        session.show(document)
    except RenderFailure as error:
        # The surface already showed the failure notice
        raise click.exceptions.Exit(1) from error
    except IOError as error:
        raise click.ClickException(str(error)) from error


if __name__ == "__main__":
    cli()
