"""Reading host documents from disk and writing finished pages back."""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from .constants import DEFAULT_MAX_FILE_SIZE, MARKDOWN_EXTENSIONS

MAX_FILE_SIZE_ENV_VAR = "MARKDOWN_VIEWER_MAX_FILE_SIZE"


def get_max_file_size(default: int = DEFAULT_MAX_FILE_SIZE) -> int:
    """Return the document size limit in bytes.

    `MARKDOWN_VIEWER_MAX_FILE_SIZE` takes precedence over `default`.

    Raises:
        ValueError: If the environment variable is set to anything but a
            positive integer.

    Examples:
        get_max_file_size(default=1_048_576)
    """
    raw_value = os.environ.get(MAX_FILE_SIZE_ENV_VAR)
    if raw_value is None:
        return default

    try:
        limit = int(raw_value)
    except ValueError as error:
        raise ValueError(
            f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {raw_value!r} is not a number of bytes"
        ) from error

    if limit <= 0:
        raise ValueError(f"Invalid value for {MAX_FILE_SIZE_ENV_VAR}: {limit} is not positive")
    return limit


def _is_symlink(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError:
        return False


def contains_symlink(path: Path) -> bool:
    """Tell whether `path` or one of its ancestors is a symbolic link."""
    return any(_is_symlink(candidate) for candidate in (path, *path.parents))


def normalize_filepath(raw_path: str) -> Path:
    """Turn a user-supplied path into the absolute path of a Markdown file.

    Args:
        raw_path: Absolute or relative path; ``~`` is expanded.

    Returns:
        Path: The resolved path.

    Raises:
        ValueError: If the path goes through a symlink, is missing, is not a
            regular file, or lacks a Markdown extension.

    Examples:
        normalize_filepath("~/notes/todo.md")
    """
    path = Path(raw_path).expanduser()
    if contains_symlink(path):
        raise ValueError(f"Refusing to follow symlinks: {path}")

    try:
        resolved = path.resolve(strict=True)
    except FileNotFoundError as error:
        raise ValueError(f"No such file: {path}") from error
    except OSError as error:
        raise ValueError(f"Cannot resolve {path}: {error}") from error

    if not resolved.is_file():
        raise ValueError(f"{resolved} is not a regular file")

    if resolved.suffix.lower() not in MARKDOWN_EXTENSIONS:
        raise ValueError(
            f"{resolved.name} is not a Markdown file "
            f"(expected one of: {', '.join(MARKDOWN_EXTENSIONS)})"
        )

    return resolved


def read_text_file(filepath: Path, max_size: int) -> str:
    """Read a regular UTF-8 file of at most `max_size` bytes.

    The file is inspected with ``lstat`` first, so symlinks, directories,
    FIFOs and devices are refused without being opened.

    Raises:
        IOError: If the file is inaccessible, not a regular file, or too large.
        UnicodeDecodeError: If the content is not valid UTF-8.

    Examples:
        text = read_text_file(Path("README.md"), max_size=get_max_file_size())
    """
    try:
        info = os.lstat(filepath)
    except OSError as error:
        raise IOError(f"Cannot access {filepath}: {error}") from error

    if not stat.S_ISREG(info.st_mode):
        raise IOError(f"{filepath} is not a regular file")
    if info.st_size > max_size:
        raise IOError(f"{filepath} is {info.st_size} bytes, over the limit of {max_size} bytes")

    try:
        with open(filepath, encoding="utf-8") as handle:
            return handle.read()
    except (FileNotFoundError, PermissionError, IsADirectoryError) as error:
        raise IOError(f"Cannot read {filepath}: {error}") from error


def write_atomic(filepath: Path, text: str):
    """Replace `filepath` with `text` in a single rename.

    The page is written to a temporary sibling, flushed to disk, then moved over
    the destination; on failure the destination keeps its previous content.

    Raises:
        IOError: If writing or renaming fails.

    Examples:
        write_atomic(Path("preview.html"), html)
    """
    filepath = Path(filepath)
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w", encoding="utf-8", dir=filepath.parent, suffix=".tmp", delete=False
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, filepath)
    except OSError as error:
        raise IOError(f"Cannot write {filepath}: {error}") from error
    finally:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()
