"""
Configuration for pdfscout queries.

Every request parameter with a bounded domain lives here, so validation
happens once, before any document is opened or any page is scanned.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pdfscout.exceptions import ConfigurationError

# Hard per-page ceiling on matches before a scan is abandoned
MAX_MATCHES_PER_PAGE = 10_000

# Outline recursion stops here even when no max_depth is requested
OUTLINE_DEPTH_CEILING = 50

# Pages with less extracted text than this are reported as likely scanned
LOW_TEXT_THRESHOLD = 50

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024  # 100MB


def _check_range(name: str, value: int | None, low: int, high: int | None = None) -> None:
    """Raise ConfigurationError if value falls outside [low, high]."""
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if high is None:
        if value < low:
            raise ConfigurationError(f"{name} must be >= {low}, got {value}")
    elif value < low or value > high:
        raise ConfigurationError(f"{name} must be between {low} and {high}, got {value}")


@dataclass
class SearchConfig:
    """
    Configuration for pattern search.

    Giving either max_results or max_pages_scanned switches the search
    to the page-by-page strategy with early stopping.

    Example:
        >>> config = SearchConfig(context_chars=80, max_results=5)
        >>> config.has_limits
        True
    """

    context_chars: int = 150
    timeout_ms: int = 10_000  # Per page
    max_results: int | None = None
    max_pages_scanned: int | None = None

    def __post_init__(self):
        """Validate configuration."""
        _check_range("context_chars", self.context_chars, 10, 1000)
        _check_range("timeout_ms", self.timeout_ms, 1000, 60_000)
        _check_range("max_results", self.max_results, 1)
        _check_range("max_pages_scanned", self.max_pages_scanned, 1)

    @property
    def has_limits(self) -> bool:
        """Whether an early-stopping ceiling was requested."""
        return self.max_results is not None or self.max_pages_scanned is not None


@dataclass
class OutlineConfig:
    """Configuration for outline extraction."""

    include_destinations: bool = True
    max_depth: int | None = None
    flatten: bool = False

    def __post_init__(self):
        """Validate configuration."""
        _check_range("max_depth", self.max_depth, 1, 10)


@dataclass
class TextConfig:
    """
    Configuration for page text extraction.

    "hybrid" extracts natively and additionally reports pages with very
    little text (likely scanned); "native" only extracts.
    """

    strategy: Literal["hybrid", "native"] = "hybrid"
    preserve_formatting: bool = True
    line_breaks: bool = True

    def __post_init__(self):
        """Validate configuration."""
        valid_strategies = ("hybrid", "native")
        if self.strategy not in valid_strategies:
            raise ConfigurationError(
                f"strategy must be one of {valid_strategies}, got {self.strategy!r}"
            )


@dataclass
class ImageConfig:
    """Configuration for page rendering."""

    format: Literal["jpeg", "png"] = "jpeg"
    quality: int = 85  # JPEG only
    max_width: int | None = None
    max_height: int | None = None
    dpi: int = 150

    def __post_init__(self):
        """Validate configuration."""
        valid_formats = ("jpeg", "png")
        if self.format not in valid_formats:
            raise ConfigurationError(f"format must be one of {valid_formats}, got {self.format!r}")
        _check_range("quality", self.quality, 1, 100)
        _check_range("max_width", self.max_width, 100, 3000)
        _check_range("max_height", self.max_height, 100, 3000)
        _check_range("dpi", self.dpi, 36, 600)


@dataclass
class QueryConfig:
    """
    Top-level configuration for document queries.

    All options have sensible defaults. Create a config only
    if you need to customize behavior.

    Example:
        >>> config = QueryConfig(search=SearchConfig(max_results=10))
        >>> envelope = pdfscout.search("report.pdf", "/budget|forecast/gi", config=config)
    """

    # Relative document paths resolve under this directory
    home_dir: Path = field(default_factory=lambda: Path.home() / "pdf-agent")
    max_file_size: int = DEFAULT_MAX_FILE_SIZE

    search: SearchConfig = field(default_factory=SearchConfig)
    outline: OutlineConfig = field(default_factory=OutlineConfig)
    text: TextConfig = field(default_factory=TextConfig)
    image: ImageConfig = field(default_factory=ImageConfig)

    def __post_init__(self):
        """Validate configuration."""
        self.home_dir = Path(self.home_dir).expanduser()
        _check_range("max_file_size", self.max_file_size, 1)

    @classmethod
    def from_env(cls) -> QueryConfig:
        """Build a config from PDFSCOUT_* environment variables."""
        kwargs = {}
        home = os.environ.get("PDFSCOUT_HOME")
        if home:
            kwargs["home_dir"] = Path(home)
        max_size_mb = os.environ.get("PDFSCOUT_MAX_FILE_SIZE_MB")
        if max_size_mb:
            try:
                kwargs["max_file_size"] = int(max_size_mb) * 1024 * 1024
            except ValueError as e:
                raise ConfigurationError(
                    f"PDFSCOUT_MAX_FILE_SIZE_MB must be an integer, got {max_size_mb!r}"
                ) from e
        return cls(**kwargs)
