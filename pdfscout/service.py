"""
Query operations against PDF files.

This module provides the operations a caller (the MCP server, a script,
a test) runs against a document on disk by wiring together:
- PDFBackend (page count, page text, raw outline, rendering)
- resolve_page_range (which pages)
- SearchCoordinator (pattern search)
- OutlineNormalizer (bookmark tree)

Each operation opens the document, does its work and closes it again;
nothing is cached between calls. Parameters are validated before the
document is opened.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Any

from pdfscout.config import (
    LOW_TEXT_THRESHOLD,
    ImageConfig,
    OutlineConfig,
    QueryConfig,
    SearchConfig,
    TextConfig,
)
from pdfscout.exceptions import ConfigurationError, DocumentError, PDFScoutError
from pdfscout.models import (
    DocumentMetadata,
    ImageExtraction,
    OutlineResult,
    PageText,
    SearchEnvelope,
    TextExtraction,
)
from pdfscout.normalizers.outline import OutlineNormalizer
from pdfscout.ranges import resolve_page_range
from pdfscout.readers.pdf_reader import PDFBackend
from pdfscout.search.coordinator import SearchCoordinator
from pdfscout.search.patterns import CompiledPattern, compile_pattern

logger = logging.getLogger(__name__)

DEFAULT_PAGE_RANGE = "1:"


# ═══════════════════════════════════════════════════════════════════════════════
# Paths
# ═══════════════════════════════════════════════════════════════════════════════


def ensure_home_dir(config: QueryConfig | None = None) -> Path:
    """Create the document home directory if needed and return it."""
    config = config or QueryConfig()
    try:
        config.home_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DocumentError(
            f"Failed to create PDF agent home directory at {config.home_dir}: {e}"
        ) from e
    return config.home_dir


def resolve_document_path(
    absolute_path: str | None = None,
    relative_path: str | None = None,
    *,
    use_home: bool = True,
    config: QueryConfig | None = None,
) -> Path:
    """
    Turn the caller's path arguments into one document path.

    Exactly one of `absolute_path` and `relative_path` must be given.
    Relative paths resolve under the home directory when `use_home`,
    otherwise against the working directory.

    Raises:
        ConfigurationError: Both or neither given, or a non-absolute absolute_path
    """
    if bool(absolute_path) == bool(relative_path):
        raise ConfigurationError(
            "Exactly one of 'absolute_path' or 'relative_path' must be provided. "
            'Examples: {"absolute_path": "/Users/john/document.pdf"} or '
            '{"relative_path": "reports/annual.pdf"}'
        )

    if absolute_path:
        path = Path(absolute_path).expanduser()
        if not path.is_absolute():
            raise ConfigurationError(
                f"Path '{absolute_path}' is not absolute. Use relative_path parameter "
                "for relative paths or provide a full absolute path."
            )
        return path

    if use_home:
        return ensure_home_dir(config) / relative_path
    return Path(relative_path).resolve()


def open_document(path: str | Path, config: QueryConfig | None = None) -> PDFBackend:
    """Open a document with the configured size limit."""
    config = config or QueryConfig()
    return PDFBackend.open(path, max_file_size=config.max_file_size)


# ═══════════════════════════════════════════════════════════════════════════════
# Operations
# ═══════════════════════════════════════════════════════════════════════════════


def validate_pattern(pattern: str) -> CompiledPattern:
    """
    Check a search pattern without searching.

    Raises:
        InvalidPatternError: Same failure a search with this pattern would hit
    """
    return compile_pattern(pattern)


def get_metadata(path: str | Path, config: QueryConfig | None = None) -> DocumentMetadata:
    """
    Read page count, document properties and file information.

    Raises:
        DocumentError: If the document cannot be opened
    """
    path = Path(path)
    with open_document(path, config) as backend:
        info = backend.get_metadata()
        pages = backend.page_count

    stat = path.stat()
    # st_birthtime only exists on some platforms
    born = getattr(stat, "st_birthtime", None)

    return DocumentMetadata(
        file_path=str(path),
        pages=pages,
        file_size_bytes=stat.st_size,
        created_date=_iso_timestamp(born) if born is not None else None,
        modified_date=_iso_timestamp(stat.st_mtime),
        **info,
    )


def extract_text(
    path: str | Path,
    page_range: str = DEFAULT_PAGE_RANGE,
    text_config: TextConfig | None = None,
    config: QueryConfig | None = None,
) -> TextExtraction:
    """
    Extract text from the pages selected by `page_range`.

    Args:
        path: PDF file
        page_range: Range expression, e.g. "1:5,9"
        text_config: Strategy and whitespace handling
        config: Query configuration (size limit)

    Raises:
        InvalidRangeError: If the range does not fit the document
        DocumentError: If the document cannot be opened
    """
    text_config = text_config or (config.text if config else TextConfig())

    with open_document(path, config) as backend:
        pages = resolve_page_range(page_range, backend.page_count)
        logger.info(
            "Extracting text from %d pages using %s strategy", len(pages), text_config.strategy
        )
        result = TextExtraction(
            file_path=str(path), total_pages=backend.page_count, strategy=text_config.strategy
        )
        for page in pages:
            text = backend.get_page_text(
                page,
                preserve_formatting=text_config.preserve_formatting,
                line_breaks=text_config.line_breaks,
            )
            result.pages.append(PageText(page=page, text=text))

    if text_config.strategy == "hybrid":
        sparse = [p.page for p in result.pages if len(p.text.strip()) < LOW_TEXT_THRESHOLD]
        if sparse:
            message = (
                f"{len(sparse)} page(s) extracted very little text - "
                f"may be scanned/image-based content: {sparse}"
            )
            logger.warning("%s", message)
            result.warnings.append(message)

    return result


def render_pages(
    path: str | Path,
    page_range: str = DEFAULT_PAGE_RANGE,
    image_config: ImageConfig | None = None,
    config: QueryConfig | None = None,
) -> ImageExtraction:
    """
    Render the pages selected by `page_range` as images.

    A page that fails to render is reported in `errors`; the others
    are still returned.
    """
    image_config = image_config or (config.image if config else ImageConfig())

    with open_document(path, config) as backend:
        pages = resolve_page_range(page_range, backend.page_count)
        logger.info("Rendering %d pages as %s", len(pages), image_config.format)
        result = ImageExtraction(file_path=str(path), total_pages=backend.page_count)
        for page in pages:
            try:
                result.images.append(backend.render_page(page, image_config))
            except Exception as e:
                logger.warning("Failed to render page %d: %s", page, e)
                result.errors.append(f"Page {page}: Rendering failed - {e}")

    return result


def search(
    path: str | Path,
    pattern: str,
    page_range: str = DEFAULT_PAGE_RANGE,
    search_config: SearchConfig | None = None,
    config: QueryConfig | None = None,
) -> SearchEnvelope:
    """
    Search the pages selected by `page_range` for `pattern`.

    The pattern is validated before the document is opened.

    Raises:
        InvalidPatternError: Malformed pattern
        InvalidRangeError: If the range does not fit the document
        DocumentError: If the document cannot be opened
    """
    search_config = search_config or (config.search if config else SearchConfig())
    validate_pattern(pattern)

    with open_document(path, config) as backend:
        pages = resolve_page_range(page_range, backend.page_count)
        text_of = partial(backend.get_page_text, preserve_formatting=True, line_breaks=True)
        # Extraction stays on this thread: a PyMuPDF document is not shareable
        return SearchCoordinator().search(pages, pattern, text_of, search_config)


def get_outline(
    path: str | Path,
    outline_config: OutlineConfig | None = None,
    config: QueryConfig | None = None,
) -> OutlineResult:
    """
    Extract the document's bookmark tree.

    Documents without bookmarks give has_outline=False, not an error.
    """
    outline_config = outline_config or (config.outline if config else OutlineConfig())

    with open_document(path, config) as backend:
        logger.info("Extracting PDF outline from %s", path)
        raw = backend.get_raw_outline()
        resolver = backend.resolve_destination if outline_config.include_destinations else None
        normalizer = OutlineNormalizer(resolve_destination=resolver)
        return normalizer.normalize(raw, outline_config, file_path=str(path))


# ═══════════════════════════════════════════════════════════════════════════════
# Error reporting
# ═══════════════════════════════════════════════════════════════════════════════


def describe_error(operation: str, parameters: dict[str, Any], error: Exception) -> dict[str, Any]:
    """
    Build the structured error document for a failed operation.

    The attempted operation and its parameters are echoed back so the
    caller can retry with corrected arguments.
    """
    if isinstance(error, PDFScoutError):
        message = str(error)
    else:
        message = f"{type(error).__name__}: {error}"
    return {
        "error": message,
        "error_type": type(error).__name__,
        "operation": operation,
        "parameters": parameters,
    }


def _iso_timestamp(epoch: float) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()

