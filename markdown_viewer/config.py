"""Configuration loading and management."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
import tomllib

from .constants import DEFAULT_MAX_FILE_SIZE


@dataclass(frozen=True)
class ViewerConfig:
    """Configuration for rendering Markdown previews.

    Attributes:
        title: Title placed in the head of the generated page.
        include_toc: Whether to emit the navigation region.
        toc_title: Heading shown above the table of contents.
        toc_max_level: Deepest heading level listed in the table of contents.
        enable_math: Whether ``$...$`` and ``$$...$$`` are protected and MathJax loaded.
        enable_diagrams: Whether diagram fences are protected and Mermaid loaded.
        enable_highlight: Whether highlight.js is loaded for code blocks.
        diagram_languages: Fence info strings treated as diagram sources.
        resource_origins: Extra ``img-src`` sources allowed by the content policy,
            typically the origin of the URI-resolution service.
        cdn_origin: Origin allowed to serve scripts and stylesheets.
        mathjax_url: MathJax bundle URL.
        mermaid_url: Mermaid ES module URL.
        highlight_js_url: highlight.js bundle URL.
        highlight_css_url: highlight.js theme URL.
        max_file_size: Maximum size in bytes of a document read from disk.

    Examples:
        ViewerConfig(title="Notes", enable_math=False)
    """

    title: str = "Markdown Preview"

    # Navigation
    include_toc: bool = True
    toc_title: str = "Contents"
    toc_max_level: int = 6

    # Client-side engines
    enable_math: bool = True
    enable_diagrams: bool = True
    enable_highlight: bool = True
    diagram_languages: tuple[str, ...] = ("mermaid",)

    # Content policy and script sources
    resource_origins: tuple[str, ...] = ("file:",)
    cdn_origin: str = "https://cdn.jsdelivr.net"
    mathjax_url: str = "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
    mermaid_url: str = "https://cdn.jsdelivr.net/npm/mermaid@11/dist/mermaid.esm.min.mjs"
    highlight_js_url: str = (
        "https://cdn.jsdelivr.net/gh/highlightjs/cdn-release@11/build/highlight.min.js"
    )
    highlight_css_url: str = (
        "https://cdn.jsdelivr.net/gh/highlightjs/cdn-release@11/build/styles/atom-one-light.min.css"
    )

    # Limits
    max_file_size: int = DEFAULT_MAX_FILE_SIZE


class ConfigError(ValueError):
    """Exception raised when configuration values are invalid.

    Examples:
        raise ConfigError("`toc_max_level` must be between 1 and 6")
    """


_TOOL_NAME = "markdown-viewer"
_MISSING = object()


def load_config(search_path: Path) -> ViewerConfig:
    """Load configuration from the nearest config file.

    Walks parent directories from `search_path` to the filesystem root, reading
    the ``[tool.markdown-viewer]`` table from `pyproject.toml` and the
    ``[markdown-viewer]`` or ``[tool.markdown-viewer]`` table from
    `.markdown-viewer.toml` when present. Returns default values when no
    configuration is found. TOML files that cannot be read or decoded are
    skipped.

    Args:
        search_path: Directory used as the starting point for configuration lookup.

    Returns:
        ViewerConfig: Loaded configuration with defaults applied when necessary.

    Raises:
        ConfigError: If the table is present but is not a mapping or contains
            unsupported keys.

    Examples:
        load_config(Path("docs"))
    """
    current = search_path.resolve()

    while True:
        pyproject_config = _load_from_file(
            current / "pyproject.toml", table_paths=[("tool", _TOOL_NAME)]
        )
        if pyproject_config is not None:
            return normalize_config(pyproject_config)

        dotfile_config = _load_from_file(
            current / f".{_TOOL_NAME}.toml",
            table_paths=[(_TOOL_NAME,), ("tool", _TOOL_NAME)],
        )
        if dotfile_config is not None:
            return normalize_config(dotfile_config)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return ViewerConfig()


def _load_from_file(config_file: Path, table_paths: list[tuple[str, ...]]) -> ViewerConfig | None:
    if not config_file.exists():
        return None

    try:
        with open(config_file, "rb") as stream:
            data = tomllib.load(stream)
    except (OSError, tomllib.TOMLDecodeError):
        return None

    for table_path in table_paths:
        raw_config = _extract_table(data, table_path)
        if raw_config is _MISSING:
            continue
        return _build_config_from_raw(raw_config, config_file, table_path)

    return None


def _extract_table(data: object, table_path: tuple[str, ...]) -> object:
    current = data
    for key in table_path:
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def _build_config_from_raw(
    raw_config: object, config_file: Path, table_path: tuple[str, ...]
) -> ViewerConfig:
    table_display = ".".join(table_path)

    if raw_config is None:
        return ViewerConfig()

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Invalid `[{table_display}]` settings in {config_file}")

    if not raw_config:
        return ViewerConfig()

    known = {item.name for item in fields(ViewerConfig)}
    unknown = sorted(set(raw_config) - known)
    if unknown:
        raise ConfigError(
            f"Invalid `[{table_display}]` settings in {config_file}: "
            f"unknown keys {', '.join(unknown)}"
        )

    return ViewerConfig(**raw_config)


def normalize_config(config: ViewerConfig) -> ViewerConfig:
    """Coerce list values from TOML into tuples and lower-case diagram languages."""
    diagram_languages = config.diagram_languages
    if isinstance(diagram_languages, str):
        diagram_languages = (diagram_languages,)
    diagram_languages = tuple(
        language.strip().lower() for language in diagram_languages if isinstance(language, str)
    )

    resource_origins = config.resource_origins
    if isinstance(resource_origins, str):
        resource_origins = (resource_origins,)

    return replace(
        config,
        diagram_languages=diagram_languages,
        resource_origins=tuple(resource_origins),
    )


def validate_config(config: ViewerConfig) -> None:
    """Validate a `ViewerConfig` instance.

    Raises:
        ConfigError: If levels are out of range, required text fields are
            empty, switches are not booleans, or numeric limits are not
            positive integers.

    Examples:
        validate_config(ViewerConfig(toc_max_level=3))
    """
    config = normalize_config(config)

    _ensure_integers(
        {
            "toc_max_level": config.toc_max_level,
            "max_file_size": config.max_file_size,
        }
    )
    if not 1 <= config.toc_max_level <= 6:
        raise ConfigError("`toc_max_level` must be between 1 and 6")
    if config.max_file_size <= 0:
        raise ConfigError("`max_file_size` must be a positive integer")

    for name in ("include_toc", "enable_math", "enable_diagrams", "enable_highlight"):
        if not isinstance(getattr(config, name), bool):
            raise ConfigError(f"`{name}` must be a boolean")

    for name in (
        "title",
        "toc_title",
        "cdn_origin",
        "mathjax_url",
        "mermaid_url",
        "highlight_js_url",
        "highlight_css_url",
    ):
        value = getattr(config, name)
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"`{name}` must not be empty")

    if any(not language for language in config.diagram_languages):
        raise ConfigError("`diagram_languages` must not contain empty names")
    if config.enable_diagrams and not config.diagram_languages:
        raise ConfigError("`diagram_languages` must not be empty when diagrams are enabled")


def _ensure_integers(values: dict[str, object]) -> None:
    for key, value in values.items():
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"`{key}` must be an integer")


def apply_overrides(config: ViewerConfig, **overrides: object) -> ViewerConfig:
    """Apply override values to a `ViewerConfig`.

    Args:
        config: Base configuration to update.
        overrides: Override values keyed by configuration field name; values set to
            None are ignored.

    Returns:
        ViewerConfig: New configuration with the provided overrides applied. The
        original configuration is returned when no changes are supplied.

    Raises:
        TypeError: If an override name is not defined on `ViewerConfig`.

    Examples:
        updated = apply_overrides(config, title="Notes", include_toc=False)
    """
    changes = {key: value for key, value in overrides.items() if value is not None}
    if not changes:
        return config
    return replace(config, **changes)


def build_config(search_path: Path, **overrides: object) -> ViewerConfig:
    """Load, override, and validate configuration.

    Raises:
        ConfigError: If configuration loading or validation fails.

    Examples:
        config = build_config(Path.cwd(), enable_math=False)
    """
    config = load_config(search_path)
    config = apply_overrides(config, **overrides)
    config = normalize_config(config)
    validate_config(config)
    return config
