"""
Page-range expressions.

A range expression selects pages with a compact, slice-like syntax:

- "5"          → page 5
- "5:10"       → pages 5 through 10 (inclusive)
- "7:"         → page 7 to the last page
- ":5"         → first page through page 5
- "1,3:5,7,10:" → comma-separated segments are unioned

Pages are 1-based. The result is sorted and deduplicated regardless of
segment order. An end bound past the last page is clamped; a start
bound past the last page is an error.
"""

from __future__ import annotations

import re

from pdfscout.exceptions import InvalidRangeError
from pdfscout.models import PageSet

_INTEGER = re.compile(r"[+-]?\d+")

_FORMAT_HINT = 'Use formats like "5", "5:10", "7:", or ":5"'


class _SegmentError(Exception):
    """Reason a single segment was rejected (wrapped into InvalidRangeError)."""


def _parse_bound(raw: str, which: str) -> int:
    raw = raw.strip()
    if not _INTEGER.fullmatch(raw):
        raise _SegmentError(f"Invalid {which} page: {raw!r}. Must be a positive number")
    value = int(raw)
    if value < 1:
        raise _SegmentError(f"Invalid {which} page: {raw}. Must be a positive number")
    return value


def _parse_segment(segment: str, total_pages: int) -> range:
    """Resolve one comma-free segment to a range of page numbers."""
    if ":" not in segment:
        if not _INTEGER.fullmatch(segment):
            raise _SegmentError(f"Invalid page number: {segment}. {_FORMAT_HINT}")
        page = int(segment)
        if page < 1 or page > total_pages:
            raise _SegmentError(
                f"Invalid page number: {segment}. Must be between 1 and {total_pages}"
            )
        return range(page, page + 1)

    parts = segment.split(":")
    if len(parts) != 2:
        raise _SegmentError(f"Invalid page range format: {segment}. {_FORMAT_HINT}")

    start_raw, end_raw = parts
    start = _parse_bound(start_raw, "start") if start_raw.strip() else 1
    end = _parse_bound(end_raw, "end") if end_raw.strip() else total_pages

    if start > end:
        raise _SegmentError(f"start page {start} is greater than end page {end}")
    if start > total_pages:
        raise _SegmentError(f"Start page {start} exceeds document length of {total_pages} pages")

    # End bounds past the document are clamped, not rejected
    end = min(end, total_pages)
    return range(start, end + 1)


def resolve_page_range(expression: str, total_pages: int) -> PageSet:
    """
    Resolve a page-range expression against a document's page count.

    Args:
        expression: Range expression, e.g. "1,3:5,7,10:"
        total_pages: Number of pages in the document

    Returns:
        Strictly increasing tuple of 1-based page numbers in [1, total_pages]

    Raises:
        InvalidRangeError: If the expression is empty or any segment is malformed

    Example:
        >>> resolve_page_range("1,3:5,7,10:", 12)
        (1, 3, 4, 5, 7, 10, 11, 12)
    """
    if total_pages < 0:
        raise InvalidRangeError(
            f"Total page count must be >= 0, got {total_pages}", expression=expression
        )

    text = (expression or "").strip()
    if not text:
        raise InvalidRangeError("Page range cannot be empty", expression=expression)

    segments = [seg.strip() for seg in text.split(",") if seg.strip()]
    if not segments:
        raise InvalidRangeError("Page range cannot be empty after parsing", expression=expression)

    pages: set[int] = set()
    for segment in segments:
        try:
            pages.update(_parse_segment(segment, total_pages))
        except _SegmentError as e:
            raise InvalidRangeError(
                f"Invalid segment '{segment}': {e}", expression=expression, segment=segment
            ) from None

    return tuple(sorted(pages))


class RangeParser:
    """
    Resolves range expressions for one document.

    Usage:
        parser = RangeParser(total_pages=backend.page_count)
        pages = parser.resolve("1:5,9")
    """

    def __init__(self, total_pages: int):
        self.total_pages = total_pages

    def resolve(self, expression: str) -> PageSet:
        """Resolve an expression against this parser's page count."""
        return resolve_page_range(expression, self.total_pages)
