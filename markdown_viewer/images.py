"""Image reference resolution to viewer-addressable URIs."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Sequence
from html import escape, unescape
from pathlib import Path
from urllib.parse import quote, unquote

from .constants import PASSTHROUGH_SCHEMES
from .exceptions import PathResolutionError
from .models import RawDocument

logger = logging.getLogger(__name__)

UriResolver = Callable[[Path], str]

_IMG_SRC_PATTERN = re.compile(r"(<img\b[^>]*?\ssrc=)([\"'])(.*?)\2", re.IGNORECASE | re.DOTALL)
_SUFFIX_PATTERN = re.compile(r"[?#]")


def to_file_uri(logical_path: Path) -> str:
    """Convert an absolute logical path to a ``file://`` URI.

    Raises:
        ValueError: If the path is relative.

    Examples:
        to_file_uri(Path("/docs/img/a b.png"))  # "file:///docs/img/a%20b.png"
    """
    return Path(logical_path).as_uri()


class SandboxResolver:
    """URI-resolution service restricted to a set of resource roots.

    Paths outside every allowed root are refused with `PathResolutionError`.
    Allowed paths map to ``file://`` URIs, or to ``base_uri`` followed by the
    root-relative path when a base URI is configured, which is how sandboxed
    viewers expose local resources.

    Args:
        allowed_roots: Directories whose files the viewer may fetch.
        base_uri: Optional URI prefix replacing the root directory.

    Examples:
        resolver = SandboxResolver([Path("/docs")], base_uri="https://resource.local/docs")
        resolver(Path("/docs/img/logo.png"))  # "https://resource.local/docs/img/logo.png"
    """

    def __init__(self, allowed_roots: Sequence[Path], base_uri: str | None = None):
        self.allowed_roots = tuple(Path(os.path.normpath(root)) for root in allowed_roots)
        self.base_uri = base_uri.rstrip("/") if base_uri else None

    def __call__(self, logical_path: Path) -> str:
        path = Path(os.path.normpath(logical_path))
        for root in self.allowed_roots:
            try:
                relative = path.relative_to(root)
            except ValueError:
                continue
            if self.base_uri is None:
                return to_file_uri(path)
            return f"{self.base_uri}/{quote(relative.as_posix())}"

        raise PathResolutionError(str(path), "outside of the allowed resource roots")


def _split_suffix(path: str) -> tuple[str, str]:
    # Query strings and fragments are not part of the file path
    suffix_match = _SUFFIX_PATTERN.search(path)
    if suffix_match is None:
        return path, ""
    return path[: suffix_match.start()], path[suffix_match.start() :]


def _addressable(
    file_part: str,
    base_location: Path,
    root_locations: Sequence[Path],
    to_addressable: UriResolver,
) -> str | None:
    """Map a file path to its addressable URI, or None when it stays as written."""
    try:
        if file_part.startswith("/"):
            if not root_locations:
                return None
            logical = Path(root_locations[0]) / file_part.lstrip("/")
        else:
            logical = Path(base_location) / file_part
        return to_addressable(Path(os.path.normpath(logical)))
    except Exception as error:
        logger.warning("Could not resolve image path %r: %s", file_part, error)
        return None


def resolve_image_path(
    path: str,
    base_location: Path,
    root_locations: Sequence[Path] = (),
    to_addressable: UriResolver = to_file_uri,
) -> str:
    """Resolve an image reference to a location the viewer may fetch.

    Policy, in order: network and data URIs pass through unchanged; paths
    starting with ``/`` are resolved under the first root location (unchanged
    when there is none); everything else is resolved under `base_location`.
    The logical path is normalized without touching the filesystem, then
    handed to `to_addressable`. Any failure returns `path` unchanged, since a
    broken image is preferable to a broken render.

    Args:
        path: Image reference as written in the document.
        base_location: Directory containing the source document.
        root_locations: Workspace roots for root-relative references.
        to_addressable: URI-resolution service.

    Returns:
        str: The addressable URI, or `path` when it passes through or cannot
            be resolved.

    Examples:
        resolve_image_path("img/a.png", Path("/docs"))  # "file:///docs/img/a.png"
        resolve_image_path("https://x.org/a.png", Path("/docs"))  # unchanged
    """
    if path.lower().startswith(PASSTHROUGH_SCHEMES):
        return path

    file_part, suffix = _split_suffix(path)
    uri = _addressable(file_part, base_location, root_locations, to_addressable)
    return path if uri is None else uri + suffix


def rewrite_image_sources(
    html: str,
    document: RawDocument,
    to_addressable: UriResolver = to_file_uri,
) -> str:
    """Rewrite the ``src`` of every ``<img>`` tag in rendered HTML.

    Attribute values are unescaped and percent-decoded before resolution, and
    escaped again afterwards. Tags whose source does not change are left
    byte-for-byte intact.

    Examples:
        document = RawDocument(text="", base_location=Path("/docs"))
        rewrite_image_sources('<img src="a.png" alt="">', document)
        # '<img src="file:///docs/a.png" alt="">'
    """

    def rewrite(match: re.Match) -> str:
        source = unescape(match.group(3))
        if not source or source.lower().startswith(PASSTHROUGH_SCHEMES):
            return match.group(0)

        # Only the file part is percent-decoded; "%3F" stays part of the name
        file_part, suffix = _split_suffix(source)
        uri = _addressable(
            unquote(file_part), document.base_location, document.root_locations, to_addressable
        )
        if uri is None:
            return match.group(0)
        resolved = uri + suffix
        quote_char = match.group(2)
        return f"{match.group(1)}{quote_char}{escape(resolved)}{quote_char}"

    return _IMG_SRC_PATTERN.sub(rewrite, html)
