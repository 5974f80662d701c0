"""
Pattern search over page text.

- compile_pattern / PatternCompiler: literal or /regex/flags → CompiledPattern
- BoundedMatcher: one page, with timeout and match ceiling
- SearchCoordinator: a page set, exhaustive or early-stopping
"""

from pdfscout.search.coordinator import (
    SearchCoordinator,
    TextSource,
    extract_context,
    search_pages,
)
from pdfscout.search.matcher import BoundedMatcher, find_matches, run_with_timeout
from pdfscout.search.patterns import (
    SUPPORTED_FLAGS,
    CompiledPattern,
    LiteralPattern,
    PatternCompiler,
    RegexPattern,
    compile_pattern,
    is_delimited,
)

__all__ = [
    # Patterns
    "CompiledPattern",
    "LiteralPattern",
    "RegexPattern",
    "PatternCompiler",
    "SUPPORTED_FLAGS",
    "compile_pattern",
    "is_delimited",
    # Matching
    "BoundedMatcher",
    "find_matches",
    "run_with_timeout",
    # Coordination
    "SearchCoordinator",
    "TextSource",
    "extract_context",
    "search_pages",
]
