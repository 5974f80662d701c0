"""
Unit tests for bounded per-page matching.
"""

import time

import pytest

from pdfscout.exceptions import ExcessiveMatchesError, SearchTimeoutError
from pdfscout.search.matcher import BoundedMatcher, find_matches, run_with_timeout
from pdfscout.search.patterns import compile_pattern


class TestFindMatches:
    """Test the match walk itself."""

    def test_literal_finds_every_occurrence(self):
        """Literal patterns find all case-insensitive occurrences."""
        matches = find_matches("Budget, budget, BUDGET", compile_pattern("budget"))
        assert [m.text for m in matches] == ["Budget", "budget", "BUDGET"]
        assert [m.start for m in matches] == [0, 8, 16]

    def test_global_flag_collects_all(self):
        """With g every match is returned, in text order."""
        text = "The budget and the forecast."
        matches = find_matches(text, compile_pattern("/budget|forecast/gi"))
        assert [m.text for m in matches] == ["budget", "forecast"]

    def test_without_global_flag_only_first(self):
        """Without g only the first match is returned."""
        matches = find_matches("a1 a2 a3", compile_pattern("/a\\d/"))
        assert [m.text for m in matches] == ["a1"]

    def test_regex_is_case_sensitive_without_i(self):
        """Delimited patterns without i are case-sensitive."""
        assert find_matches("Budget", compile_pattern("/budget/g")) == []

    def test_zero_width_matches_advance(self):
        """Empty matches advance one character instead of stalling."""
        matches = find_matches("abc", compile_pattern("/x*/g"))
        assert [m.start for m in matches] == [0, 1, 2, 3]
        assert all(len(m) == 0 for m in matches)

    def test_sticky_requires_contiguous_matches(self):
        """With y matching stops at the first gap."""
        matches = find_matches("aaab", compile_pattern("/a/gy"))
        assert len(matches) == 3
        assert find_matches("baaa", compile_pattern("/a/gy")) == []

    def test_sticky_empty_match_advances(self):
        """An empty sticky match moves on one character instead of ending the scan."""
        matches = find_matches("aab", compile_pattern("/a*/gy"))
        assert [m.start for m in matches] == [0, 2, 3]
        assert [m.text for m in matches] == ["aa", "", ""]

    def test_match_ceiling(self):
        """More matches than the ceiling raises ExcessiveMatchesError."""
        with pytest.raises(ExcessiveMatchesError):
            find_matches("a" * 20, compile_pattern("a"), max_matches=10)

    def test_exactly_at_ceiling_is_fine(self):
        """Reaching the ceiling exactly is allowed."""
        assert len(find_matches("a" * 10, compile_pattern("a"), max_matches=10)) == 10


class TestBoundedMatcher:
    """Test the timeout-bounded scan."""

    def test_scan_returns_matches(self):
        """A quick scan returns its matches."""
        with BoundedMatcher() as matcher:
            matches = matcher.scan("budget approved", compile_pattern("Budget"), 1000)
        assert len(matches) == 1
        assert matches[0].text == "budget"

    def test_zero_width_pattern_on_large_page_terminates(self):
        """A pattern matching every position ends via the match ceiling."""
        text = "x" * 100_000
        started = time.monotonic()
        with BoundedMatcher() as matcher, pytest.raises(ExcessiveMatchesError):
            matcher.scan(text, compile_pattern("/y*/g"), 10_000)
        assert time.monotonic() - started < 10

    @pytest.mark.slow
    def test_backtracking_pattern_times_out(self):
        """A catastrophically backtracking pattern is cut off at the timeout."""
        matcher = BoundedMatcher()
        started = time.monotonic()
        with pytest.raises(SearchTimeoutError) as exc_info:
            matcher.scan("a" * 40 + "b", compile_pattern("/(a+)+$/"), 1000)
        assert exc_info.value.timeout_ms == 1000
        assert time.monotonic() - started < 5

    @pytest.mark.slow
    def test_worker_is_replaced_after_timeout(self):
        """The next scan after a timeout runs normally."""
        with BoundedMatcher() as matcher:
            with pytest.raises(SearchTimeoutError):
                matcher.scan("a" * 40 + "b", compile_pattern("/(a+)+$/"), 500)
            matches = matcher.scan("budget approved", compile_pattern("budget"), 5000)
        assert [m.text for m in matches] == ["budget"]

    def test_expired_deadline_raises_search_timeout(self):
        """A zero timeout always reports a timeout."""
        matcher = BoundedMatcher()
        with pytest.raises(SearchTimeoutError):
            matcher.scan("a" * 10, compile_pattern("a"), 0)


class TestRunWithTimeout:
    """Test the thread-based timeout helper."""

    def test_returns_result(self):
        """The function's value is returned."""
        assert run_with_timeout(lambda: 42, 1000) == 42

    def test_propagates_exceptions(self):
        """Exceptions from the function reach the caller."""

        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            run_with_timeout(boom, 1000)

    @pytest.mark.slow
    def test_times_out(self):
        """A slow function raises TimeoutError."""
        with pytest.raises(TimeoutError):
            run_with_timeout(lambda: time.sleep(2), 50)
