"""
Exception classes for pdfscout.

All pdfscout exceptions inherit from PDFScoutError,
making it easy to catch all library errors.

Validation errors (ranges, patterns, configuration) also inherit from
ValueError so callers that already guard argument parsing keep working.

Example:
    >>> try:
    ...     pages = pdfscout.resolve_page_range("5:3", 10)
    ... except pdfscout.InvalidRangeError as e:
    ...     print(f"Bad range: {e}")
    ... except pdfscout.PDFScoutError as e:
    ...     print(f"pdfscout error: {e}")
"""

from __future__ import annotations


class PDFScoutError(Exception):
    """
    Base exception for all pdfscout errors.

    Catch this to handle any pdfscout-specific error.
    """

    pass


class ConfigurationError(PDFScoutError, ValueError):
    """
    Raised for out-of-domain configuration or request parameters.

    Example:
        >>> SearchConfig(context_chars=5)
        ConfigurationError: context_chars must be between 10 and 1000, got 5
    """

    pass


class InvalidRangeError(PDFScoutError, ValueError):
    """
    Raised when a page-range expression cannot be resolved.

    Example:
        >>> resolve_page_range("5:3", 10)
        InvalidRangeError: Invalid segment '5:3': start page 5 is greater than end page 3
    """

    def __init__(self, message: str, *, expression: str = "", segment: str | None = None):
        super().__init__(message)
        self.expression = expression
        self.segment = segment


class InvalidPatternError(PDFScoutError, ValueError):
    """Raised when a search pattern has bad flags or does not compile."""

    def __init__(self, message: str, *, pattern: str = ""):
        super().__init__(message)
        self.pattern = pattern


class SearchTimeoutError(PDFScoutError):
    """
    Raised when scanning one page exceeds the per-page timeout.

    Recoverable: the coordinator records it against the page and moves on.
    """

    def __init__(self, timeout_ms: int):
        super().__init__(f"Search timed out after {timeout_ms}ms - pattern may be too complex")
        self.timeout_ms = timeout_ms

    def __reduce__(self):
        return type(self), (self.timeout_ms,)


class ExcessiveMatchesError(PDFScoutError):
    """
    Raised when one page yields more matches than the hard ceiling.

    Recoverable: the coordinator records it against the page and moves on.
    """

    def __init__(self, limit: int):
        super().__init__(f"Too many matches found (>{limit}) - pattern may be too broad")
        self.limit = limit

    def __reduce__(self):
        return type(self), (self.limit,)


class DocumentError(PDFScoutError):
    """
    Raised when a document cannot be used at all.

    Missing files, files over the size limit, unreadable or non-PDF input.
    Fatal for the whole query: nothing partial is returned.
    """

    pass
