"""
Data models for pdfscout.

These models are the values produced by one query call: page sets,
search results, outline trees, metadata. None of them are shared
between calls. Every result type offers to_dict() for JSON output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Strictly increasing 1-based page numbers, all within the document
PageSet = tuple[int, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Search
# ═══════════════════════════════════════════════════════════════════════════════


class SearchStrategy(Enum):
    """How the coordinator walks the page set."""

    EXTRACT_ALL = "extract_all"  # Extract every page, then scan
    PAGE_BY_PAGE = "page_by_page"  # Extract and scan one page at a time


class StopReason(Enum):
    """Why a search stopped."""

    COMPLETED = "completed"
    MAX_RESULTS = "max_results"
    MAX_PAGES = "max_pages"


@dataclass(frozen=True)
class TextMatch:
    """One match of a pattern in a page's text (offsets into the page)."""

    start: int
    end: int
    text: str

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class MatchSnippet:
    """
    A window of page text around one match.

    match_start and match_end are relative to the snippet text,
    not to the full page.
    """

    text: str
    match_start: int
    match_end: int

    @property
    def matched_text(self) -> str:
        """The matched substring."""
        return self.text[self.match_start : self.match_end]

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "match_start": self.match_start,
            "match_end": self.match_end,
        }


@dataclass(frozen=True)
class PageSearchResult:
    """Matches found on a single page, in text order."""

    page: int
    match_count: int
    snippets: tuple[MatchSnippet, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "match_count": self.match_count,
            "snippets": [s.to_dict() for s in self.snippets],
        }


@dataclass(frozen=True)
class SearchEnvelope:
    """
    The complete outcome of one search call.

    Only pages with at least one match appear in `matches`. Pages that
    could not be scanned are described in `errors` instead.

    Example:
        >>> envelope = pdfscout.search("report.pdf", "budget")
        >>> envelope.total_matches
        12
        >>> envelope.stopped_reason
        <StopReason.COMPLETED: 'completed'>
    """

    matches: tuple[PageSearchResult, ...]
    errors: tuple[str, ...]
    pages_scanned: int
    completed: bool
    stopped_reason: StopReason
    search_strategy: SearchStrategy
    search_pattern: str
    is_regex: bool
    context_chars: int
    timeout_ms: int
    total_pages_in_range: int

    @property
    def total_matches(self) -> int:
        """Sum of match counts over all scanned pages."""
        return sum(result.match_count for result in self.matches)

    @property
    def pages_with_matches(self) -> int:
        return len(self.matches)

    def summary(self) -> dict[str, Any]:
        """Scan statistics without the per-page match lists."""
        return {
            "total_matches": self.total_matches,
            "pages_with_matches": self.pages_with_matches,
            "pages_scanned": self.pages_scanned,
            "total_pages_in_range": self.total_pages_in_range,
            "search_strategy": self.search_strategy.value,
            "search_pattern": self.search_pattern,
            "is_regex": self.is_regex,
            "completed": self.completed,
            "stopped_reason": self.stopped_reason.value,
            "context_chars": self.context_chars,
            "timeout_ms": self.timeout_ms,
            "errors": len(self.errors),
        }

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with summary, matches and errors
        """
        return {
            "summary": self.summary(),
            "matches": [result.to_dict() for result in self.matches],
            "errors": list(self.errors),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Outline
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class RawOutlineItem:
    """
    A bookmark as reported by the document backend, before normalization.

    `dest` is the backend's own destination descriptor; only the backend
    knows how to turn it into a page number.
    """

    title: str
    dest: Any = None
    url: str | None = None
    bold: bool = False
    italic: bool = False
    color: tuple[float, float, float] | None = None
    children: list[RawOutlineItem] = field(default_factory=list)


@dataclass
class OutlineNode:
    """
    A normalized outline entry.

    `children` is None when the source bookmark had no children and
    after flattening; it is a (possibly empty) list otherwise.
    """

    title: str
    level: int  # 0 = top level
    page: int | None = None  # 1-based
    destination: str | None = None  # Serialized raw destination
    url: str | None = None
    bold: bool = False
    italic: bool = False
    color: tuple[float, float, float] | None = None
    children: list[OutlineNode] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title,
            "level": self.level,
            "bold": self.bold,
            "italic": self.italic,
        }
        if self.color is not None:
            data["color"] = list(self.color)
        if self.url:
            data["url"] = self.url
        if self.page is not None:
            data["page"] = self.page
        if self.destination is not None:
            data["destination"] = self.destination
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class OutlineSummary:
    """Aggregate counts over an outline forest."""

    total_items: int = 0
    max_depth: int = 0
    items_with_pages: int = 0
    items_with_urls: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total_items": self.total_items,
            "max_depth": self.max_depth,
            "items_with_pages": self.items_with_pages,
            "items_with_urls": self.items_with_urls,
        }


@dataclass
class OutlineResult:
    """Normalized outline of one document."""

    has_outline: bool
    items: list[OutlineNode] = field(default_factory=list)
    summary: OutlineSummary = field(default_factory=OutlineSummary)
    file_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "has_outline": self.has_outline,
            "outline_items": [item.to_dict() for item in self.items],
            "summary": self.summary.to_dict(),
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Documents
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class DocumentMetadata:
    """Document metadata from the PDF info dictionary and the filesystem."""

    file_path: str
    pages: int
    file_size_bytes: int = 0
    created_date: str | None = None  # Filesystem timestamps, ISO 8601
    modified_date: str | None = None
    title: str | None = None
    author: str | None = None
    subject: str | None = None
    creator: str | None = None
    producer: str | None = None
    creation_date: str | None = None  # As recorded in the PDF
    modification_date: str | None = None
    encrypted: bool = False

    @property
    def file_size_mb(self) -> float:
        return round(self.file_size_bytes / (1024 * 1024), 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "pages": self.pages,
            "file_size_bytes": self.file_size_bytes,
            "file_size_mb": self.file_size_mb,
            "created_date": self.created_date,
            "modified_date": self.modified_date,
            "title": self.title,
            "author": self.author,
            "subject": self.subject,
            "creator": self.creator,
            "producer": self.producer,
            "creation_date": self.creation_date,
            "modification_date": self.modification_date,
            "encrypted": self.encrypted,
        }


@dataclass(frozen=True)
class PageText:
    """Extracted text of one page."""

    page: int
    text: str

    @property
    def char_count(self) -> int:
        return len(self.text)


@dataclass
class TextExtraction:
    """Text of the pages selected by a range expression."""

    file_path: str
    total_pages: int
    strategy: str
    pages: list[PageText] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """All page texts joined by blank lines."""
        return "\n\n".join(p.text for p in self.pages if p.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "total_pages": self.total_pages,
            "extracted_pages": [p.page for p in self.pages],
            "extraction_strategy": self.strategy,
            "pages": [
                {"page": p.page, "text": p.text, "char_count": p.char_count} for p in self.pages
            ],
            "warnings": self.warnings,
        }


@dataclass(frozen=True)
class PageImage:
    """A rendered page, base64-encoded."""

    page: int
    mime_type: str
    data: str
    width: int
    height: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "mime_type": self.mime_type,
            "width": self.width,
            "height": self.height,
            "data": self.data,
        }


@dataclass
class ImageExtraction:
    """Rendered pages plus per-page failures."""

    file_path: str
    total_pages: int
    images: list[PageImage] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
