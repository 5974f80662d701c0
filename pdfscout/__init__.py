"""
pdfscout: Selective queries against PDF documents.

This library answers targeted questions about a PDF without processing
the whole file: which pages a range expression selects, where a pattern
occurs (with context snippets and early stopping), and what the
document's bookmark tree looks like. An MCP server (pdfscout.server)
exposes the same operations to agents.

Example:
    >>> import pdfscout
    >>> envelope = pdfscout.search("report.pdf", "/budget|forecast/gi", page_range="1:20")
    >>> for page in envelope.matches:
    ...     print(page.page, page.match_count)

    >>> outline = pdfscout.get_outline("report.pdf")
    >>> outline.summary.total_items
    14
"""

from pdfscout.config import (
    ImageConfig,
    OutlineConfig,
    QueryConfig,
    SearchConfig,
    TextConfig,
)
from pdfscout.exceptions import (
    ConfigurationError,
    DocumentError,
    ExcessiveMatchesError,
    InvalidPatternError,
    InvalidRangeError,
    PDFScoutError,
    SearchTimeoutError,
)
from pdfscout.models import (
    # Metadata and text
    DocumentMetadata,
    ImageExtraction,
    # Search
    MatchSnippet,
    # Outline
    OutlineNode,
    OutlineResult,
    OutlineSummary,
    PageImage,
    PageSearchResult,
    PageSet,
    PageText,
    RawOutlineItem,
    SearchEnvelope,
    SearchStrategy,
    StopReason,
    TextExtraction,
    TextMatch,
)
from pdfscout.normalizers import OutlineNormalizer, normalize_outline
from pdfscout.ranges import RangeParser, resolve_page_range
from pdfscout.search import SearchCoordinator, compile_pattern, search_pages
from pdfscout.service import (
    extract_text,
    get_metadata,
    get_outline,
    render_pages,
    resolve_document_path,
    search,
    validate_pattern,
)

__version__ = "0.1.0"
__all__ = [
    # Main API
    "get_metadata",
    "extract_text",
    "render_pages",
    "search",
    "get_outline",
    "validate_pattern",
    "resolve_document_path",
    # Building blocks
    "resolve_page_range",
    "RangeParser",
    "compile_pattern",
    "search_pages",
    "SearchCoordinator",
    "normalize_outline",
    "OutlineNormalizer",
    # Configuration
    "QueryConfig",
    "SearchConfig",
    "OutlineConfig",
    "TextConfig",
    "ImageConfig",
    # Search
    "PageSet",
    "TextMatch",
    "MatchSnippet",
    "PageSearchResult",
    "SearchEnvelope",
    "SearchStrategy",
    "StopReason",
    # Outline
    "RawOutlineItem",
    "OutlineNode",
    "OutlineSummary",
    "OutlineResult",
    # Metadata and text
    "DocumentMetadata",
    "PageText",
    "TextExtraction",
    "PageImage",
    "ImageExtraction",
    # Exceptions
    "PDFScoutError",
    "ConfigurationError",
    "InvalidRangeError",
    "InvalidPatternError",
    "SearchTimeoutError",
    "ExcessiveMatchesError",
    "DocumentError",
]
