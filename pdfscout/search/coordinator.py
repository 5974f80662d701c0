"""
Search coordination across a page set.

Two strategies share the same per-page scanning and result assembly:

- EXTRACT_ALL: extract text for every page first, then scan each one.
  Always runs to completion.
- PAGE_BY_PAGE: extract and scan one page at a time, stopping early once
  `max_pages_scanned` pages have been scanned or `max_results` matches
  have been found.

The page-by-page strategy is chosen whenever either limit is set.

A page that yields no text, times out, or exceeds the match ceiling is
recorded in the envelope's error list; the remaining pages still run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pdfscout.config import SearchConfig
from pdfscout.exceptions import PDFScoutError
from pdfscout.models import (
    MatchSnippet,
    PageSearchResult,
    SearchEnvelope,
    SearchStrategy,
    StopReason,
    TextMatch,
)
from pdfscout.search.matcher import BoundedMatcher, run_with_timeout
from pdfscout.search.patterns import CompiledPattern, PatternCompiler

logger = logging.getLogger(__name__)

# Supplies the text of a 1-based page; "" when the page has no text layer
TextSource = Callable[[int], str]


def extract_context(
    text: str, match_start: int, match_end: int, context_chars: int
) -> MatchSnippet:
    """
    Cut a snippet of `context_chars` on each side of a match.

    The window is clamped to the text, so matches near either end of a
    page get shorter snippets.
    """
    start = max(0, match_start - context_chars)
    end = min(len(text), match_end + context_chars)
    return MatchSnippet(
        text=text[start:end],
        match_start=match_start - start,
        match_end=match_end - start,
    )


@dataclass
class _SearchState:
    """Accumulates results while a search runs."""

    results: list[PageSearchResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    pages_scanned: int = 0
    total_matches: int = 0

    def add(self, result: PageSearchResult | None) -> None:
        if result is None:
            return
        self.results.append(result)
        self.total_matches += result.match_count


class SearchCoordinator:
    """
    Runs a pattern over a page set and builds a SearchEnvelope.

    Usage:
        coordinator = SearchCoordinator()
        envelope = coordinator.search(
            pages=(1, 2, 3),
            pattern="/budget|forecast/gi",
            text_of=backend.get_page_text,
            config=SearchConfig(max_results=5),
        )
    """

    def __init__(
        self,
        *,
        matcher: BoundedMatcher | None = None,
        extraction_timeout_ms: int | None = None,
    ):
        """Initialize the coordinator.

        Args:
            matcher: Per-page matcher (default BoundedMatcher()).
            extraction_timeout_ms: Upper bound on one page's text extraction.
                None lets extraction run unbounded.
        """
        self.matcher = matcher or BoundedMatcher()
        self.extraction_timeout_ms = extraction_timeout_ms

    def search(
        self,
        pages: Sequence[int],
        pattern: str,
        text_of: TextSource,
        config: SearchConfig | None = None,
    ) -> SearchEnvelope:
        """
        Search `pages` for `pattern`.

        Args:
            pages: Page numbers in ascending order (see resolve_page_range)
            pattern: Literal text or "/regex/flags"
            text_of: Text source for a page number
            config: Context size, timeout and early-stopping limits

        Returns:
            SearchEnvelope describing matches, errors and why scanning stopped

        Raises:
            InvalidPatternError: Before any page is touched
        """
        config = config or SearchConfig()
        compiled = PatternCompiler().compile(pattern)

        try:
            if config.has_limits:
                strategy = SearchStrategy.PAGE_BY_PAGE
                state, reason = self._search_page_by_page(pages, compiled, text_of, config)
            else:
                strategy = SearchStrategy.EXTRACT_ALL
                state, reason = self._search_extract_all(pages, compiled, text_of, config)
        finally:
            self.matcher.close()

        logger.info(
            "Search for %r finished (%s): %d matches on %d pages, %d/%d pages scanned",
            pattern,
            reason.value,
            state.total_matches,
            len(state.results),
            state.pages_scanned,
            len(pages),
        )

        return SearchEnvelope(
            matches=tuple(state.results),
            errors=tuple(state.errors),
            pages_scanned=state.pages_scanned,
            completed=reason is StopReason.COMPLETED,
            stopped_reason=reason,
            search_strategy=strategy,
            search_pattern=pattern,
            is_regex=compiled.is_regex,
            context_chars=config.context_chars,
            timeout_ms=config.timeout_ms,
            total_pages_in_range=len(pages),
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Strategies
    # ─────────────────────────────────────────────────────────────────────────

    def _search_extract_all(
        self,
        pages: Sequence[int],
        compiled: CompiledPattern,
        text_of: TextSource,
        config: SearchConfig,
    ) -> tuple[_SearchState, StopReason]:
        state = _SearchState()

        logger.info("Extracting text from %d pages for comprehensive search", len(pages))
        texts = {page: self._extract(page, text_of, state) for page in pages}

        for page in pages:
            state.pages_scanned += 1
            text = texts[page]
            if text is None:
                continue
            state.add(self._scan_page(page, text, compiled, config, state))

        return state, StopReason.COMPLETED

    def _search_page_by_page(
        self,
        pages: Sequence[int],
        compiled: CompiledPattern,
        text_of: TextSource,
        config: SearchConfig,
    ) -> tuple[_SearchState, StopReason]:
        state = _SearchState()

        logger.info(
            "Starting page-by-page search with limits: max_results=%s, max_pages=%s",
            config.max_results,
            config.max_pages_scanned,
        )

        for page in pages:
            limit = config.max_pages_scanned
            if limit is not None and state.pages_scanned >= limit:
                return state, StopReason.MAX_PAGES

            state.pages_scanned += 1
            text = self._extract(page, text_of, state)
            if text is None:
                continue

            state.add(self._scan_page(page, text, compiled, config, state))
            if config.max_results is not None and state.total_matches >= config.max_results:
                return state, StopReason.MAX_RESULTS

        return state, StopReason.COMPLETED

    # ─────────────────────────────────────────────────────────────────────────
    # Per-page work
    # ─────────────────────────────────────────────────────────────────────────

    def _extract(self, page: int, text_of: TextSource, state: _SearchState) -> str | None:
        """Get a page's text, recording failures; None means skip the page."""
        try:
            if self.extraction_timeout_ms is None:
                text = text_of(page)
            else:
                text = run_with_timeout(
                    lambda: text_of(page), self.extraction_timeout_ms, name="pdfscout-extract"
                )
        except TimeoutError:
            state.errors.append(
                f"Page {page}: Text extraction timed out after {self.extraction_timeout_ms}ms"
            )
            return None
        except Exception as e:
            logger.warning("Page %d: text extraction failed: %s", page, e)
            state.errors.append(f"Page {page}: Text extraction failed - {e}")
            return None

        if not text or not text.strip():
            state.errors.append(f"Page {page}: No text extracted")
            return None
        return text

    def _scan_page(
        self,
        page: int,
        text: str,
        compiled: CompiledPattern,
        config: SearchConfig,
        state: _SearchState,
    ) -> PageSearchResult | None:
        """Scan one page; None if it had no matches or failed."""
        try:
            matches = self.matcher.scan(text, compiled, config.timeout_ms)
        except PDFScoutError as e:
            logger.warning("Page %d: search failed: %s", page, e)
            state.errors.append(f"Page {page}: Search failed - {e}")
            return None

        if not matches:
            return None

        return PageSearchResult(
            page=page,
            match_count=len(matches),
            snippets=tuple(self._snippets(text, matches, config.context_chars)),
        )

    @staticmethod
    def _snippets(text: str, matches: list[TextMatch], context_chars: int) -> list[MatchSnippet]:
        return [extract_context(text, m.start, m.end, context_chars) for m in matches]


def search_pages(
    pages: Sequence[int],
    pattern: str,
    text_of: TextSource,
    *,
    context_chars: int = 150,
    timeout_ms: int = 10_000,
    max_results: int | None = None,
    max_pages_scanned: int | None = None,
) -> SearchEnvelope:
    """
    Search page texts for a pattern.

    Convenience wrapper around SearchCoordinator with keyword parameters;
    out-of-range parameters raise ConfigurationError before scanning.

    Example:
        >>> texts = {1: "nothing", 2: "budget approved"}
        >>> envelope = search_pages([1, 2], "Budget", texts.get)
        >>> envelope.total_matches
        1
    """
    config = SearchConfig(
        context_chars=context_chars,
        timeout_ms=timeout_ms,
        max_results=max_results,
        max_pages_scanned=max_pages_scanned,
    )
    return SearchCoordinator().search(pages, pattern, text_of, config)
