"""Package-specific exception types."""

from __future__ import annotations


class ViewerError(Exception):
    """Base class for errors raised by markdown-viewer."""


class RenderFailure(ViewerError):
    """Raised when the Markdown renderer fails on a document.

    Fatal to the current render pass; the previous output should stay in place.

    Args:
        source: Identity of the document that triggered the failure.
        reason: Human-readable description of the underlying error.
    """

    def __init__(self, source: str | None, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.source:
            return f"Failed to render markdown ({self.source}): {self.reason}"
        return f"Failed to render markdown: {self.reason}"


class PathResolutionError(ViewerError, ValueError):
    """Raised when a logical path cannot be turned into an addressable URI.

    Args:
        path: The logical path that could not be converted.
        reason: Why the conversion was refused.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot resolve {path}: {reason}")


class DocumentReadError(ViewerError):
    """Raised when a host document cannot be read from disk."""
